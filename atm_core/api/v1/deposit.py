"""POST /v1/atm/deposit/* - Cash deposit with deferred settlement"""

from fastapi import APIRouter, Depends, Request

from atm_core.api.dependencies import get_deposit_service, get_request_id
from atm_core.api.v1.errors import to_http_exception
from atm_core.api.v1.schemas import AmountRequest, CompleteTransactionRequest, TransactionResponse
from atm_core.domain.exceptions import DomainException
from atm_core.services.deposit import DepositService

router = APIRouter()


@router.post("/deposit/initiate", response_model=TransactionResponse)
def initiate_deposit(
    request_body: AmountRequest,
    request: Request,
    service: DepositService = Depends(get_deposit_service),
):
    """Phase 1: open a PENDING deposit while the customer inserts cash"""
    try:
        txn = service.initiate(request_body.account_id, request_body.amount)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return TransactionResponse.from_transaction(txn, "Deposit initiated - awaiting cash verification")


@router.post("/deposit/complete", response_model=TransactionResponse)
def complete_deposit(
    request_body: CompleteTransactionRequest,
    request: Request,
    service: DepositService = Depends(get_deposit_service),
):
    """Phase 2: credit the account (SUCCESS) or close the deposit without changes"""
    try:
        txn = service.complete(request_body.transaction_id, request_body.status, request_body.reason)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    message = "Deposit completed successfully" if txn.succeeded else f"Deposit {txn.status.value.lower()}"
    return TransactionResponse.from_transaction(txn, message)
