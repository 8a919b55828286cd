"""GET /v1/atm/balance/{account_id} - Balance inquiry"""

from fastapi import APIRouter, Depends, Request

from atm_core.api.dependencies import get_balance_service, get_request_id
from atm_core.api.v1.errors import to_http_exception
from atm_core.api.v1.schemas import BalanceResponse
from atm_core.domain.exceptions import DomainException
from atm_core.services.readers import BalanceService

router = APIRouter()


@router.get("/balance/{account_id}", response_model=BalanceResponse)
def get_balance(
    account_id: int,
    request: Request,
    service: BalanceService = Depends(get_balance_service),
):
    """Current balance, available balance and remaining daily withdrawal limit"""
    try:
        summary = service.get_balance(account_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return BalanceResponse.from_summary(summary)
