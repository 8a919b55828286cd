"""Shared plumbing for the reserve/commit transaction services"""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from atm_core.domain.exceptions import (
    AccountInactiveError,
    AccountNotFoundError,
    TransactionNotFoundError,
    TransactionNotPendingError,
    WrongTransactionTypeError,
)
from atm_core.domain.models import Account, Transaction, TransactionStatus, TransactionType
from atm_core.infrastructure.database.repositories import AccountRepository, TransactionRepository
from atm_core.infrastructure.observability.metrics import declined_counter, record_transaction
from atm_core.services.retry import RetryPolicy
from atm_core.utils.date_utils import Clock, business_date, local_now

logger = logging.getLogger(__name__)


class TransactionServiceBase:
    """Repositories, clock and the lookups every initiate/complete attempt repeats"""

    transaction_type: TransactionType

    def __init__(self, db: Session, clock: Clock = local_now, retry_policy: RetryPolicy | None = None):
        self.db = db
        self.accounts = AccountRepository(db)
        self.journal = TransactionRepository(db)
        self.clock = clock
        self.retry_policy = retry_policy

    def _now(self) -> datetime:
        return self.clock()

    def _today(self) -> date:
        return business_date(self.clock())

    def _load_account(self, account_id: int) -> Account:
        account = self.accounts.get(account_id)
        if account is None:
            logger.error("Account not found", extra={"account_id": account_id})
            raise AccountNotFoundError("Account not found")
        return account

    def _load_active_account(self, account_id: int) -> Account:
        account = self._load_account(account_id)
        if not account.active:
            logger.warning("Account is not active", extra={"account_id": account_id})
            raise AccountInactiveError("Account is not active")
        return account

    def _load_pending(self, transaction_id: int) -> Transaction:
        """Fetch a journal entry that is still PENDING and of this service's type"""
        txn = self.journal.get(transaction_id)
        if txn is None:
            logger.error("Transaction not found", extra={"transaction_id": transaction_id})
            raise TransactionNotFoundError("Transaction not found")

        if txn.status.is_terminal:
            raise TransactionNotPendingError(
                f"Transaction {transaction_id} is not in PENDING status (current: {txn.status.value})"
            )

        if txn.type is not self.transaction_type:
            raise WrongTransactionTypeError(
                f"Transaction {transaction_id} is not a {self.transaction_type.value.lower()} "
                f"(current type: {txn.type.value})"
            )
        return txn

    def _record_rejection(self, account_id: int, amount: Decimal, status: TransactionStatus, reason: str, metric_reason: str) -> None:
        """
        Journal a rejected initiation in its own database transaction.

        Runs after the attempt has been rolled back, so the account row is left
        exactly as it was before the call. A failure to write the audit entry is
        logged; the caller still raises the original business error.
        """
        declined_counter.labels(reason=metric_reason).inc()
        try:
            account = self.accounts.get(account_id)
            if account is None:
                return
            self.journal.add(
                Transaction(
                    id=None,
                    account_id=account_id,
                    type=self.transaction_type,
                    amount=amount,
                    balance_after=account.balance,
                    timestamp=self._now(),
                    description=reason,
                    status=status,
                )
            )
            self.db.commit()
            record_transaction(self.transaction_type.value, status.value)
            logger.warning(
                "%s transaction logged: %s - %s",
                status.value.capitalize(),
                self.transaction_type.value,
                reason,
                extra={"account_id": account_id},
            )
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Failed to log rejected transaction", extra={"account_id": account_id}, exc_info=True)
