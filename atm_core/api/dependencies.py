"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from atm_core.infrastructure.database.session import get_db
from atm_core.services.authentication import AuthenticationService
from atm_core.services.deposit import DepositService
from atm_core.services.readers import BalanceService, TransactionHistoryService
from atm_core.services.withdrawal import WithdrawalService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_authentication_service(db: Session = Depends(get_db)) -> AuthenticationService:
    return AuthenticationService(db)


def get_balance_service(db: Session = Depends(get_db)) -> BalanceService:
    return BalanceService(db)


def get_history_service(db: Session = Depends(get_db)) -> TransactionHistoryService:
    return TransactionHistoryService(db)


def get_withdrawal_service(db: Session = Depends(get_db)) -> WithdrawalService:
    return WithdrawalService(db)


def get_deposit_service(db: Session = Depends(get_db)) -> DepositService:
    return DepositService(db)
