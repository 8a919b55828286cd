"""Service tests for the two-phase withdrawal flow"""

import pytest
from datetime import timedelta
from decimal import Decimal
from atm_core.domain.exceptions import (
    AccountInactiveError,
    AccountNotFoundError,
    DailyLimitExceededError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidOutcomeError,
    TransactionNotFoundError,
    TransactionNotPendingError,
    WrongTransactionTypeError,
)
from atm_core.domain.models import TransactionStatus, TransactionType


def test_initiate_reserves_available_balance(withdrawals, make_account, reload):
    """Test initiate lowers only available_balance and journals a PENDING entry"""
    account = make_account()

    txn = withdrawals.initiate(account.id, Decimal("300.00"))

    assert txn.id is not None
    assert txn.type is TransactionType.WITHDRAWAL
    assert txn.status is TransactionStatus.PENDING
    assert txn.amount == Decimal("300.00")
    assert txn.balance_after == Decimal("4700.00")
    assert txn.description == "Withdrawal initiated - awaiting ATM confirmation"

    stored = reload(account.id)
    assert stored.balance == Decimal("5000.00")
    assert stored.available_balance == Decimal("4700.00")
    assert stored.daily_withdrawn_amount == Decimal("0.00")
    assert stored.version == account.version + 1


def test_complete_success_settles_debit(withdrawals, make_account, reload, clock):
    account = make_account()
    pending = withdrawals.initiate(account.id, "300.00")

    settled = withdrawals.complete(pending.id, "SUCCESS")

    assert settled.status is TransactionStatus.SUCCESS
    assert settled.balance_after == Decimal("4700.00")
    assert settled.description == "Cash withdrawal completed"

    stored = reload(account.id)
    assert stored.balance == Decimal("4700.00")
    assert stored.available_balance == Decimal("4700.00")
    assert stored.daily_withdrawn_amount == Decimal("300.00")
    assert stored.last_activity_date == clock.today


def test_daily_limit_decline_after_settled_withdrawal(withdrawals, make_account, reload, history):
    """Test 300 settled then 800 requested against a 1000 limit is declined"""
    account = make_account()
    withdrawals.complete(withdrawals.initiate(account.id, "300.00").id, "SUCCESS")
    before = reload(account.id)

    with pytest.raises(DailyLimitExceededError, match=r"Remaining limit: \$700\.00"):
        withdrawals.initiate(account.id, "800.00")

    after = reload(account.id)
    assert after == before

    latest = history.get_history(account.id)[0]
    assert latest.status is TransactionStatus.DECLINED
    assert latest.amount == Decimal("800.00")
    assert latest.balance_after == Decimal("4700.00")
    assert "Daily withdrawal limit exceeded" in latest.description


def test_withdraw_exactly_remaining_limit_is_allowed(withdrawals, make_account):
    account = make_account(withdrawn="300.00")
    txn = withdrawals.initiate(account.id, "700.00")
    assert txn.status is TransactionStatus.PENDING


def test_insufficient_funds_declined_without_touching_account(withdrawals, make_account, reload, history):
    account = make_account(balance="200.00")

    with pytest.raises(InsufficientFundsError, match=r"Available balance: \$200\.00"):
        withdrawals.initiate(account.id, "250.00")

    stored = reload(account.id)
    assert stored.available_balance == Decimal("200.00")
    assert stored.version == account.version

    [entry] = history.get_history(account.id)
    assert entry.status is TransactionStatus.DECLINED
    assert entry.amount == Decimal("250.00")


def test_pending_reservation_counts_against_available(withdrawals, make_account):
    """Test a second reservation sees the first one's hold"""
    account = make_account(balance="500.00")
    withdrawals.initiate(account.id, "400.00")

    with pytest.raises(InsufficientFundsError, match=r"\$100\.00"):
        withdrawals.initiate(account.id, "200.00")


@pytest.mark.parametrize("outcome", ["FAILED", "DECLINED", "failed"])
def test_unsuccessful_outcome_releases_reservation(withdrawals, make_account, reload, outcome):
    account = make_account()
    pending = withdrawals.initiate(account.id, "300.00")

    settled = withdrawals.complete(pending.id, outcome, reason="Cash dispenser jammed")

    assert settled.status is TransactionStatus(outcome.upper())
    assert settled.description == "Cash dispenser jammed"
    assert settled.balance_after == Decimal("5000.00")

    stored = reload(account.id)
    assert stored.balance == Decimal("5000.00")
    assert stored.available_balance == Decimal("5000.00")
    assert stored.daily_withdrawn_amount == Decimal("0.00")


def test_unsuccessful_outcome_default_description(withdrawals, make_account):
    account = make_account()
    pending = withdrawals.initiate(account.id, "50.00")

    assert withdrawals.complete(pending.id, "DECLINED").description == "Transaction declined"


def test_second_complete_is_rejected(withdrawals, make_account, reload):
    """Test a settled withdrawal cannot be settled again"""
    account = make_account()
    pending = withdrawals.initiate(account.id, "300.00")
    withdrawals.complete(pending.id, "SUCCESS")

    with pytest.raises(TransactionNotPendingError, match="current: SUCCESS"):
        withdrawals.complete(pending.id, "SUCCESS")
    with pytest.raises(TransactionNotPendingError):
        withdrawals.complete(pending.id, "FAILED")

    stored = reload(account.id)
    assert stored.balance == Decimal("4700.00")
    assert stored.available_balance == Decimal("4700.00")
    assert stored.daily_withdrawn_amount == Decimal("300.00")


def test_complete_rejects_pending_as_outcome(withdrawals, make_account, reload):
    account = make_account()
    pending = withdrawals.initiate(account.id, "300.00")

    with pytest.raises(InvalidOutcomeError):
        withdrawals.complete(pending.id, "PENDING")

    # Entry stays open and can still be settled
    assert reload(account.id).available_balance == Decimal("4700.00")
    assert withdrawals.complete(pending.id, "SUCCESS").status is TransactionStatus.SUCCESS


def test_complete_rejects_deposit_entry(withdrawals, deposits, make_account):
    account = make_account()
    deposit = deposits.initiate(account.id, "100.00")

    with pytest.raises(WrongTransactionTypeError):
        withdrawals.complete(deposit.id, "SUCCESS")


def test_complete_unknown_transaction(withdrawals):
    with pytest.raises(TransactionNotFoundError):
        withdrawals.complete(9999, "SUCCESS")


def test_initiate_unknown_account(withdrawals):
    with pytest.raises(AccountNotFoundError):
        withdrawals.initiate(9999, "20.00")


def test_inactive_account_records_failed_entry(withdrawals, make_account, history, reload):
    account = make_account(active=False)

    with pytest.raises(AccountInactiveError):
        withdrawals.initiate(account.id, "20.00")

    [entry] = history.get_history(account.id)
    assert entry.status is TransactionStatus.FAILED
    assert entry.description == "Account is not active"
    assert reload(account.id).available_balance == Decimal("5000.00")


@pytest.mark.parametrize("amount", ["0", "-10.00", "10.001", 12.5])
def test_invalid_amount_rejected_before_any_write(withdrawals, make_account, history, amount):
    account = make_account()

    with pytest.raises(InvalidAmountError):
        withdrawals.initiate(account.id, amount)

    assert history.get_history(account.id) == []


def test_daily_limit_resets_on_new_day(withdrawals, make_account, reload, clock):
    """Test yesterday's exhausted allowance does not block today's withdrawal"""
    account = make_account(withdrawn="1000.00", last_activity_date=clock.today - timedelta(days=1))

    pending = withdrawals.initiate(account.id, "1000.00")
    stored = reload(account.id)
    assert stored.daily_withdrawn_amount == Decimal("0.00")
    assert stored.last_activity_date == clock.today

    withdrawals.complete(pending.id, "SUCCESS")
    assert reload(account.id).daily_withdrawn_amount == Decimal("1000.00")


def test_completion_after_midnight_counts_toward_new_day(withdrawals, make_account, reload, clock):
    """Test a withdrawal started before midnight is charged to the day it settles"""
    clock.advance(hours=13)  # 23:30
    account = make_account(withdrawn="600.00")
    pending = withdrawals.initiate(account.id, "400.00")

    clock.advance(hours=1)
    withdrawals.complete(pending.id, "SUCCESS")

    stored = reload(account.id)
    assert stored.last_activity_date == clock.today
    assert stored.daily_withdrawn_amount == Decimal("400.00")


def test_oversized_amount_is_invalid(withdrawals, make_account, history):
    account = make_account()

    with pytest.raises(InvalidAmountError):
        withdrawals.initiate(account.id, "1e30")

    assert history.get_history(account.id) == []


def test_pending_withdrawals_count_against_daily_limit(withdrawals, make_account, reload, history):
    """Test two overlapping withdrawals cannot together exceed the limit"""
    account = make_account()
    first = withdrawals.initiate(account.id, "600.00")

    with pytest.raises(DailyLimitExceededError, match=r"Remaining limit: \$400\.00"):
        withdrawals.initiate(account.id, "600.00")

    withdrawals.complete(first.id, "SUCCESS")
    stored = reload(account.id)
    assert stored.daily_withdrawn_amount == Decimal("600.00")
    assert stored.available_balance == Decimal("4400.00")

    settled = [e for e in history.get_history(account.id) if e.status is TransactionStatus.SUCCESS]
    assert sum(e.amount for e in settled) <= stored.daily_withdrawal_limit


def test_released_hold_frees_daily_limit(withdrawals, make_account):
    account = make_account()
    first = withdrawals.initiate(account.id, "600.00")
    withdrawals.complete(first.id, "FAILED")

    assert withdrawals.initiate(account.id, "600.00").status is TransactionStatus.PENDING
