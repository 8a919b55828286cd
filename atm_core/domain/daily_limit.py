"""Daily withdrawal limit tracking with lazy, date-based reset"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Tuple

from atm_core.domain.models import Account, ZERO


def effective_daily_withdrawn(account: Account, today: date) -> Decimal:
    """Amount withdrawn today; a counter stamped with another date counts as zero"""
    if account.last_activity_date != today:
        return ZERO
    return account.daily_withdrawn_amount


def remaining_daily_limit(account: Account, today: date, reserved: Decimal = ZERO) -> Decimal:
    """
    Allowance left for today.

    reserved is the total of withdrawals still awaiting settlement; each one
    is charged to the limit when it settles, so it is held back here.
    """
    return account.daily_withdrawal_limit - effective_daily_withdrawn(account, today) - reserved


def apply_daily_reset(account: Account, today: date) -> Tuple[Account, bool]:
    """
    Zero the withdrawn counter on the first touch of a new calendar day.

    Pure and idempotent. The returned account must be persisted by the same
    conditional write that carries the business mutation, never on its own
    outside the retry loop.

    Returns:
        (account, reset) where reset tells whether anything changed
    """
    if account.last_activity_date == today:
        return account, False

    return replace(account, daily_withdrawn_amount=ZERO, last_activity_date=today), True


def exceeds_daily_limit(account: Account, amount: Decimal, today: date, reserved: Decimal = ZERO) -> bool:
    return effective_daily_withdrawn(account, today) + reserved + amount > account.daily_withdrawal_limit
