"""Masking of card numbers and PINs for logs and responses"""

from typing import Optional

VISIBLE_DIGITS = 4


def mask_card_number(card_number: Optional[str]) -> str:
    """
    Show only the last four digits.

    Example:
        "4532015112830366" -> "************0366"
    """
    if card_number is None or len(card_number) < VISIBLE_DIGITS:
        return "****"
    return "*" * 12 + card_number[-VISIBLE_DIGITS:]


def mask_pin(pin: Optional[str]) -> str:
    if pin is None:
        return "****"
    return "*" * len(pin)
