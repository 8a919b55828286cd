"""Balance and history projections over accounts and the journal"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from atm_core.domain.daily_limit import apply_daily_reset, remaining_daily_limit
from atm_core.domain.exceptions import AccountNotFoundError, StoreUnavailableError
from atm_core.domain.models import Account, BalanceSummary, Transaction
from atm_core.infrastructure.database.repositories import AccountRepository, TransactionRepository
from atm_core.services.retry import RetryPolicy, run_with_retry
from atm_core.utils.date_utils import Clock, business_date, local_now
from atm_core.utils.masking import mask_card_number

logger = logging.getLogger(__name__)


class BalanceService:
    """
    Balance inquiry; persists the lazy daily-limit reset when a new day starts.

    The remaining limit holds back withdrawals still awaiting settlement, the
    same way available_balance does.
    """

    def __init__(self, db: Session, clock: Clock = local_now, retry_policy: RetryPolicy | None = None):
        self.db = db
        self.accounts = AccountRepository(db)
        self.journal = TransactionRepository(db)
        self.clock = clock
        self.retry_policy = retry_policy

    def get_balance(self, account_id: int) -> BalanceSummary:
        """
        Raises:
            AccountNotFoundError: unknown account id
        """
        logger.info("Getting balance", extra={"account_id": account_id})
        return run_with_retry(self.db, lambda: self._read(account_id), "get_balance", self.retry_policy)

    def _read(self, account_id: int) -> BalanceSummary:
        today = business_date(self.clock())
        account = self.accounts.get(account_id)
        if account is None:
            logger.error("Account not found", extra={"account_id": account_id})
            raise AccountNotFoundError("Account not found")

        account, reset = apply_daily_reset(account, today)
        if reset:
            account = self.accounts.save(account)

        on_hold = self.journal.pending_withdrawal_total(account_id)
        return _summarize(account, remaining_daily_limit(account, today, on_hold))


def _summarize(account: Account, remaining) -> BalanceSummary:
    return BalanceSummary(
        account_id=account.id,
        masked_card_number=mask_card_number(account.card_number),
        customer_name=account.customer_name,
        balance=account.balance,
        available_balance=account.available_balance,
        daily_withdrawal_limit=account.daily_withdrawal_limit,
        remaining_daily_limit=remaining,
    )


class TransactionHistoryService:
    """Read-only journal listing"""

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountRepository(db)
        self.journal = TransactionRepository(db)

    def get_history(self, account_id: int, limit: Optional[int] = None) -> List[Transaction]:
        """
        All journal entries for the account, newest first.

        Raises:
            AccountNotFoundError: unknown account id
            StoreUnavailableError: database failure
        """
        logger.info("Getting transaction history", extra={"account_id": account_id})
        try:
            if self.accounts.get(account_id) is None:
                logger.error("Account not found", extra={"account_id": account_id})
                raise AccountNotFoundError("Account not found")
            return self.journal.list_by_account(account_id, limit=limit)
        except SQLAlchemyError as e:
            logger.error("Database error", extra={"account_id": account_id}, exc_info=True)
            raise StoreUnavailableError("Failed to retrieve transaction history due to database error") from e
