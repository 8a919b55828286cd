"""Input validation for monetary amounts and settlement outcomes"""

from decimal import Decimal, InvalidOperation
from typing import Union

from atm_core.domain.exceptions import InvalidAmountError, InvalidOutcomeError
from atm_core.domain.models import CENT, TransactionStatus

# Money columns are Numeric(15, 2): at most 13 integer digits
MAX_AMOUNT = Decimal("10000000000000")


def validate_amount(amount: Union[Decimal, int, str]) -> Decimal:
    """
    Normalize an amount to a positive Decimal with two fractional digits.

    Floats are refused so binary rounding never reaches the ledger.

    Raises:
        InvalidAmountError: non-numeric, non-finite, non-positive, sub-cent or
            out-of-range amounts
    """
    if isinstance(amount, (float, bool)):
        raise InvalidAmountError(f"Amount must be an exact decimal, got {type(amount).__name__}")

    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    if value <= 0:
        raise InvalidAmountError("Amount must be greater than 0")
    if value >= MAX_AMOUNT:
        raise InvalidAmountError(f"Amount must be less than {MAX_AMOUNT}")

    try:
        quantized = value.quantize(CENT)
    except InvalidOperation as e:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from e

    if value != quantized:
        raise InvalidAmountError("Amount cannot have more than two decimal places")

    return quantized


def parse_outcome(outcome: Union[TransactionStatus, str]) -> TransactionStatus:
    """Map a caller-supplied status onto a terminal settlement outcome"""
    if isinstance(outcome, TransactionStatus):
        status = outcome
    else:
        try:
            status = TransactionStatus(str(outcome).strip().upper())
        except ValueError as e:
            raise InvalidOutcomeError(f"Invalid status: {outcome}") from e

    if not status.is_terminal:
        raise InvalidOutcomeError(f"Unsupported status: {status.value}")
    return status
