"""Two-phase withdrawal: reserve funds on initiate, settle or release on complete"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Union

from atm_core.domain.daily_limit import apply_daily_reset, exceeds_daily_limit, remaining_daily_limit
from atm_core.domain.exceptions import AccountInactiveError, DailyLimitExceededError, InsufficientFundsError
from atm_core.domain.models import Transaction, TransactionStatus, TransactionType
from atm_core.domain.validation import parse_outcome, validate_amount
from atm_core.infrastructure.observability.logging import log_settlement
from atm_core.infrastructure.observability.metrics import record_transaction
from atm_core.services.base import TransactionServiceBase
from atm_core.services.retry import run_with_retry

logger = logging.getLogger(__name__)


class WithdrawalService(TransactionServiceBase):
    """
    Cash withdrawals.

    Phase 1 (initiate) earmarks the amount by lowering available_balance and
    journals a PENDING entry. The ATM then dispenses cash and phase 2
    (complete) either settles the debit against balance or releases the
    reservation. Every phase re-reads the account and re-validates on each
    retry attempt.
    """

    transaction_type = TransactionType.WITHDRAWAL

    def initiate(self, account_id: int, amount: Union[Decimal, int, str]) -> Transaction:
        """
        Reserve funds for a withdrawal.

        Raises:
            InvalidAmountError: amount is not a positive whole-cent value
            AccountNotFoundError / AccountInactiveError: unknown or closed account
            InsufficientFundsError: available balance is below the amount
            DailyLimitExceededError: the amount would exceed today's allowance
            ConcurrencyConflictError: concurrent updates exhausted the retries
        """
        amount = validate_amount(amount)
        logger.info("Initiating withdrawal", extra={"account_id": account_id, "amount": str(amount)})

        try:
            txn = run_with_retry(
                self.db, lambda: self._initiate_attempt(account_id, amount), "initiate_withdrawal", self.retry_policy
            )
        except AccountInactiveError as e:
            self._record_rejection(account_id, amount, TransactionStatus.FAILED, str(e), "inactive_account")
            raise
        except InsufficientFundsError as e:
            self._record_rejection(account_id, amount, TransactionStatus.DECLINED, str(e), "insufficient_funds")
            raise
        except DailyLimitExceededError as e:
            self._record_rejection(account_id, amount, TransactionStatus.DECLINED, str(e), "daily_limit")
            raise

        record_transaction(txn.type.value, txn.status.value)
        logger.info(
            "Withdrawal initiated with PENDING status",
            extra={"account_id": account_id, "transaction_id": txn.id},
        )
        return txn

    def _initiate_attempt(self, account_id: int, amount: Decimal) -> Transaction:
        today = self._today()
        account = self._load_active_account(account_id)
        account, _ = apply_daily_reset(account, today)

        if account.available_balance < amount:
            raise InsufficientFundsError(f"Insufficient funds. Available balance: ${account.available_balance:.2f}")

        # Holds of unsettled withdrawals count toward the limit they will be charged to
        on_hold = self.journal.pending_withdrawal_total(account_id)
        if exceeds_daily_limit(account, amount, today, on_hold):
            raise DailyLimitExceededError(
                f"Daily withdrawal limit exceeded. Remaining limit: ${remaining_daily_limit(account, today, on_hold):.2f}"
            )

        reserved = replace(account, available_balance=account.available_balance - amount)

        # Account first: a stale version aborts before anything is journaled
        self.accounts.save(reserved)
        return self.journal.add(
            Transaction(
                id=None,
                account_id=account_id,
                type=TransactionType.WITHDRAWAL,
                amount=amount,
                balance_after=account.balance - amount,
                timestamp=self._now(),
                description="Withdrawal initiated - awaiting ATM confirmation",
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
        Settle or roll back a PENDING withdrawal after the dispense attempt.

        SUCCESS debits balance and counts the amount against today's limit;
        available_balance already carries the reservation. FAILED or DECLINED
        gives the reservation back to available_balance.

        Raises:
            TransactionNotFoundError: unknown transaction id
            TransactionNotPendingError: already settled (a second complete)
            WrongTransactionTypeError: transaction is not a withdrawal
            InvalidOutcomeError: outcome is not SUCCESS, FAILED or DECLINED
            ConcurrencyConflictError: concurrent updates exhausted the retries
        """
        logger.info(
            "Completing withdrawal",
            extra={"transaction_id": transaction_id, "outcome": str(getattr(outcome, "value", outcome))},
        )
        txn, available = run_with_retry(
            self.db,
            lambda: self._complete_attempt(transaction_id, outcome, reason),
            "complete_withdrawal",
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
            today = self._today()
            account, _ = apply_daily_reset(account, today)
            account = replace(
                account,
                balance=account.balance - txn.amount,
                daily_withdrawn_amount=account.daily_withdrawn_amount + txn.amount,
                last_activity_date=today,
            )
            settled = replace(
                txn,
                status=TransactionStatus.SUCCESS,
                balance_after=account.balance,
                description="Cash withdrawal completed",
            )
        else:
            account = replace(account, available_balance=account.available_balance + txn.amount)
            settled = replace(
                txn,
                status=status,
                balance_after=account.balance,
                description=reason or "Transaction declined",
            )

        account = self.accounts.save(account)
        self.journal.settle(settled)
        return settled, account.available_balance
