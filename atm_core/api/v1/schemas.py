"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from atm_core.domain.models import BalanceSummary, Transaction


class AuthRequest(BaseModel):
    """Request body for POST /v1/atm/authenticate"""

    card_number: str = Field(..., min_length=1, description="Encrypted card number (Base64 encoded)")
    pin: str = Field(..., min_length=1, description="Encrypted PIN (Base64 encoded)")


class AuthResponse(BaseModel):
    authenticated: bool
    account_id: int
    customer_name: str
    message: str = "Authentication successful"


class BalanceResponse(BaseModel):
    """Response for GET /v1/atm/balance/{account_id}"""

    account_id: int
    masked_card_number: str
    customer_name: str
    balance: Decimal
    available_balance: Decimal
    daily_withdrawal_limit: Decimal
    remaining_daily_limit: Decimal

    @classmethod
    def from_summary(cls, summary: BalanceSummary) -> "BalanceResponse":
        return cls(
            account_id=summary.account_id,
            masked_card_number=summary.masked_card_number,
            customer_name=summary.customer_name,
            balance=summary.balance,
            available_balance=summary.available_balance,
            daily_withdrawal_limit=summary.daily_withdrawal_limit,
            remaining_daily_limit=summary.remaining_daily_limit,
        )


class AmountRequest(BaseModel):
    """Request body for POST /v1/atm/withdraw/initiate and /v1/atm/deposit/initiate"""

    account_id: int = Field(..., gt=0, description="Account ID from authentication")
    amount: Decimal = Field(
        ..., gt=0, max_digits=15, decimal_places=2, description="Amount in dollars, two decimal places"
    )


class CompleteTransactionRequest(BaseModel):
    """Request body for the /complete endpoints"""

    transaction_id: int = Field(..., gt=0)
    status: str = Field(..., description="SUCCESS, FAILED or DECLINED")
    reason: Optional[str] = Field(None, max_length=255, description="Reason for failure/decline")


class TransactionResponse(BaseModel):
    """Single journal entry"""

    transaction_id: int
    type: str
    amount: Decimal
    balance_after: Decimal
    timestamp: datetime
    description: str
    status: str
    success: bool
    message: Optional[str] = None

    @classmethod
    def from_transaction(cls, txn: Transaction, message: Optional[str] = None) -> "TransactionResponse":
        return cls(
            transaction_id=txn.id,
            type=txn.type.value,
            amount=txn.amount,
            balance_after=txn.balance_after,
            timestamp=txn.timestamp,
            description=txn.description,
            status=txn.status.value,
            success=txn.succeeded,
            message=message,
        )
