"""GET /v1/atm/transactions/{account_id} - Transaction history"""

from typing import List

from fastapi import APIRouter, Depends, Query, Request

from atm_core.api.dependencies import get_history_service, get_request_id
from atm_core.api.v1.errors import to_http_exception
from atm_core.api.v1.schemas import TransactionResponse
from atm_core.domain.exceptions import DomainException
from atm_core.services.readers import TransactionHistoryService

router = APIRouter()


@router.get("/transactions/{account_id}", response_model=List[TransactionResponse])
def get_transaction_history(
    account_id: int,
    request: Request,
    limit: int | None = Query(None, gt=0, description="Maximum number of entries"),
    service: TransactionHistoryService = Depends(get_history_service),
):
    """
    Retrieve journal entries for an account.

    Returns:
        Entries of every status, newest first
    """
    try:
        transactions = service.get_history(account_id, limit=limit)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return [TransactionResponse.from_transaction(t) for t in transactions]
