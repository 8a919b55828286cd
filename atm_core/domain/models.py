"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class TransactionType(str, Enum):
    WITHDRAWAL = "WITHDRAWAL"
    DEPOSIT = "DEPOSIT"
    BALANCE_INQUIRY = "BALANCE_INQUIRY"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    DECLINED = "DECLINED"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


@dataclass(frozen=True)
class Account:
    """Card-linked account as read from the store, stamped with its version"""

    id: int
    card_number: str
    customer_name: str
    pin: str
    balance: Decimal
    available_balance: Decimal
    daily_withdrawal_limit: Decimal
    daily_withdrawn_amount: Decimal
    last_activity_date: Optional[date]
    active: bool
    version: int


@dataclass(frozen=True)
class Transaction:
    """Journal entry; id is None until the store assigns one"""

    id: Optional[int]
    account_id: int
    type: TransactionType
    amount: Decimal
    balance_after: Decimal
    timestamp: datetime
    description: str
    status: TransactionStatus

    @property
    def succeeded(self) -> bool:
        return self.status is TransactionStatus.SUCCESS


@dataclass(frozen=True)
class BalanceSummary:
    """Read projection returned by the balance inquiry"""

    account_id: int
    masked_card_number: str
    customer_name: str
    balance: Decimal
    available_balance: Decimal
    daily_withdrawal_limit: Decimal
    remaining_daily_limit: Decimal


@dataclass(frozen=True)
class AccountRef:
    """Verified account identity produced by authentication"""

    account_id: int
    customer_name: str
