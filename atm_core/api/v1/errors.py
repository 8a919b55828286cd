"""Translation of domain exceptions into HTTP errors"""

import logging

from fastapi import HTTPException

from atm_core.domain.exceptions import (
    AuthenticationError,
    BusinessRuleError,
    ConcurrencyConflictError,
    DomainException,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)


def to_http_exception(exc: DomainException, request_id: str) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))

    if isinstance(exc, AuthenticationError):
        return HTTPException(status_code=401, detail=str(exc))

    if isinstance(exc, (ValidationError, BusinessRuleError)):
        logging.warning(f"Request rejected: {exc}", extra={"request_id": request_id})
        return HTTPException(status_code=400, detail=str(exc))

    if isinstance(exc, ConcurrencyConflictError):
        logging.warning(f"Concurrent update conflict: {exc}", extra={"request_id": request_id})
        return HTTPException(status_code=409, detail="Account is busy, please retry")

    if isinstance(exc, StoreUnavailableError):
        logging.error(f"Store unavailable: {exc}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail="Database operation failed. Please try again later.")

    logging.error(f"Unexpected domain error: {exc}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")
