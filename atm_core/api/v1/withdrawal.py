"""POST /v1/atm/withdraw/* - Two-phase cash withdrawal"""

from fastapi import APIRouter, Depends, Request

from atm_core.api.dependencies import get_request_id, get_withdrawal_service
from atm_core.api.v1.errors import to_http_exception
from atm_core.api.v1.schemas import AmountRequest, CompleteTransactionRequest, TransactionResponse
from atm_core.domain.exceptions import DomainException
from atm_core.services.withdrawal import WithdrawalService

router = APIRouter()


@router.post("/withdraw/initiate", response_model=TransactionResponse)
def initiate_withdrawal(
    request_body: AmountRequest,
    request: Request,
    service: WithdrawalService = Depends(get_withdrawal_service),
):
    """
    Phase 1: reserve the amount and open a PENDING withdrawal.

    The ATM dispenses cash next, then calls /withdraw/complete.
    """
    try:
        txn = service.initiate(request_body.account_id, request_body.amount)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return TransactionResponse.from_transaction(txn, "Transaction initiated - please proceed with ATM operation")


@router.post("/withdraw/complete", response_model=TransactionResponse)
def complete_withdrawal(
    request_body: CompleteTransactionRequest,
    request: Request,
    service: WithdrawalService = Depends(get_withdrawal_service),
):
    """Phase 2: settle (SUCCESS) or release (FAILED / DECLINED) a PENDING withdrawal"""
    try:
        txn = service.complete(request_body.transaction_id, request_body.status, request_body.reason)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    message = "Transaction completed successfully" if txn.succeeded else f"Transaction {txn.status.value.lower()}"
    return TransactionResponse.from_transaction(txn, message)
