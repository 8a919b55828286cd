"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Referenced account or transaction does not exist"""

    pass


class AccountNotFoundError(NotFoundError):
    pass


class AccountInactiveError(AccountNotFoundError):
    """Account exists but is closed for mutating operations"""

    pass


class TransactionNotFoundError(NotFoundError):
    pass


class ValidationError(DomainException):
    """Malformed input; never retried and never journaled"""

    pass


class InvalidAmountError(ValidationError):
    pass


class InvalidOutcomeError(ValidationError):
    """Settlement status is not one of SUCCESS, FAILED, DECLINED"""

    pass


class BusinessRuleError(DomainException):
    """Request is well-formed but the account state forbids it"""

    pass


class InsufficientFundsError(BusinessRuleError):
    pass


class DailyLimitExceededError(BusinessRuleError):
    pass


class TransactionNotPendingError(BusinessRuleError):
    """Transaction already reached a terminal status"""

    pass


class WrongTransactionTypeError(BusinessRuleError):
    pass


class VersionConflictError(DomainException):
    """Conditional write observed a stale version stamp"""

    def __init__(self, entity: str, entity_id: int, expected_version: int | None = None):
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(f"{entity} {entity_id} was modified concurrently (expected version {expected_version})")


class ConcurrencyConflictError(DomainException):
    """Retries exhausted on version conflicts; caller may retry the whole call later"""

    pass


class StoreUnavailableError(DomainException):
    """Database is unreachable or failed"""

    pass


class AuthenticationError(DomainException):
    """Card number / PIN pair could not be verified"""

    pass
