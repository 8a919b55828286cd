"""POST /v1/atm/authenticate - Card number + PIN authentication"""

from fastapi import APIRouter, Depends, Request

from atm_core.api.dependencies import get_authentication_service, get_request_id
from atm_core.api.v1.errors import to_http_exception
from atm_core.api.v1.schemas import AuthRequest, AuthResponse
from atm_core.domain.exceptions import DomainException
from atm_core.services.authentication import AuthenticationService

router = APIRouter()


@router.post("/authenticate", response_model=AuthResponse)
def authenticate(
    request_body: AuthRequest,
    request: Request,
    service: AuthenticationService = Depends(get_authentication_service),
):
    """
    Authenticate a customer with a 16-digit card number and 4-digit PIN.

    Returns the account id used by every subsequent call.
    """
    try:
        ref = service.authenticate(request_body.card_number, request_body.pin)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return AuthResponse(authenticated=True, account_id=ref.account_id, customer_name=ref.customer_name)
