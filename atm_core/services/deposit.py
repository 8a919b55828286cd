"""Cash deposits: journal on initiate, credit the account on verified completion"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Union

from atm_core.domain.exceptions import AccountInactiveError
from atm_core.domain.models import Transaction, TransactionStatus, TransactionType
from atm_core.domain.validation import parse_outcome, validate_amount
from atm_core.infrastructure.observability.logging import log_settlement
from atm_core.infrastructure.observability.metrics import record_transaction
from atm_core.services.base import TransactionServiceBase
from atm_core.services.retry import run_with_retry

logger = logging.getLogger(__name__)


class DepositService(TransactionServiceBase):
    """Deposits reserve nothing; the account changes only once the cash is verified"""

    transaction_type = TransactionType.DEPOSIT

    def initiate(self, account_id: int, amount: Union[Decimal, int, str]) -> Transaction:
        """
        Open a PENDING deposit while the customer inserts cash.

        Raises:
            InvalidAmountError: amount is not a positive whole-cent value
            AccountNotFoundError / AccountInactiveError: unknown or closed account
        """
        amount = validate_amount(amount)
        logger.info("Initiating deposit", extra={"account_id": account_id, "amount": str(amount)})

        try:
            txn = run_with_retry(
                self.db, lambda: self._initiate_attempt(account_id, amount), "initiate_deposit", self.retry_policy
            )
        except AccountInactiveError as e:
            self._record_rejection(account_id, amount, TransactionStatus.FAILED, str(e), "inactive_account")
            raise

        record_transaction(txn.type.value, txn.status.value)
        logger.info(
            "Deposit initiated with PENDING status",
            extra={"account_id": account_id, "transaction_id": txn.id},
        )
        return txn

    def _initiate_attempt(self, account_id: int, amount: Decimal) -> Transaction:
        account = self._load_active_account(account_id)
        return self.journal.add(
            Transaction(
                id=None,
                account_id=account_id,
                type=TransactionType.DEPOSIT,
                amount=amount,
                balance_after=account.balance + amount,
                timestamp=self._now(),
                description="Deposit initiated - awaiting cash verification",
                status=TransactionStatus.PENDING,
            )
        )

    def complete(
        self,
        transaction_id: int,
        outcome: Union[TransactionStatus, str],
        reason: Optional[str] = None,
    ) -> Transaction:
        """
        Credit or abandon a PENDING deposit.

        SUCCESS adds the amount to both balance and available_balance in the
        same write that settles the journal entry. FAILED or DECLINED leave the
        account untouched.

        Raises:
            TransactionNotFoundError, TransactionNotPendingError,
            WrongTransactionTypeError, InvalidOutcomeError, ConcurrencyConflictError
        """
        logger.info(
            "Completing deposit",
            extra={"transaction_id": transaction_id, "outcome": str(getattr(outcome, "value", outcome))},
        )
        txn, available = run_with_retry(
            self.db,
            lambda: self._complete_attempt(transaction_id, outcome, reason),
            "complete_deposit",
            self.retry_policy,
        )
        record_transaction(txn.type.value, txn.status.value)
        log_settlement(txn, available)
        return txn

    def _complete_attempt(self, transaction_id: int, outcome, reason: Optional[str]):
        txn = self._load_pending(transaction_id)
        status = parse_outcome(outcome)
        account = self._load_account(txn.account_id)

        if status is TransactionStatus.SUCCESS:
            account = self.accounts.save(
                replace(
                    account,
                    balance=account.balance + txn.amount,
                    available_balance=account.available_balance + txn.amount,
                )
            )
            settled = replace(
                txn,
                status=TransactionStatus.SUCCESS,
                balance_after=account.balance,
                description="Cash deposit completed",
            )
        else:
            settled = replace(
                txn,
                status=status,
                balance_after=account.balance,
                description=reason or f"Deposit {status.value}",
            )

        self.journal.settle(settled)
        return settled, account.available_balance
