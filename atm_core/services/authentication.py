"""Card number + PIN authentication"""

import hmac
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from atm_core.config import settings
from atm_core.domain.exceptions import AccountInactiveError, AuthenticationError, StoreUnavailableError
from atm_core.domain.models import AccountRef
from atm_core.infrastructure.database.repositories import AccountRepository
from atm_core.infrastructure.observability.metrics import authentication_counter
from atm_core.infrastructure.security.cipher import CredentialCipher, CredentialDecryptionError
from atm_core.utils.masking import mask_card_number

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid card number or PIN"


class AuthenticationService:
    """Resolves a card/PIN pair to the account id every other operation trusts"""

    def __init__(self, db: Session, cipher: CredentialCipher | None = None, require_encrypted: bool | None = None):
        self.accounts = AccountRepository(db)
        self.cipher = cipher or CredentialCipher()
        self.require_encrypted = (
            require_encrypted if require_encrypted is not None else settings.require_encrypted_credentials
        )

    def authenticate(self, card_number: str, pin: str) -> AccountRef:
        """
        Raises:
            AuthenticationError: undecryptable input, unknown card or wrong PIN
            AccountInactiveError: credentials match a closed account
            StoreUnavailableError: database failure
        """
        if self.require_encrypted:
            try:
                card_number = self.cipher.decrypt_card_number(card_number)
                pin = self.cipher.decrypt_pin(pin)
            except CredentialDecryptionError as e:
                authentication_counter.labels(outcome="failure").inc()
                logger.error("Decryption failed - invalid encrypted data format")
                raise AuthenticationError("Invalid card number or PIN format") from e

        logger.info("Authentication attempt", extra={"card": mask_card_number(card_number)})

        try:
            account = self.accounts.find_by_card_number(card_number)
        except SQLAlchemyError as e:
            logger.error("Database error during authentication", exc_info=True)
            raise StoreUnavailableError("Failed to authenticate due to database error") from e

        if account is None or not hmac.compare_digest(account.pin.encode("utf-8"), pin.encode("utf-8")):
            authentication_counter.labels(outcome="failure").inc()
            logger.error("Authentication failed - invalid card number or PIN", extra={"card": mask_card_number(card_number)})
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not account.active:
            authentication_counter.labels(outcome="failure").inc()
            logger.error("Authentication failed - account is not active", extra={"account_id": account.id})
            raise AccountInactiveError("Account is not active")

        authentication_counter.labels(outcome="success").inc()
        logger.info("Authentication successful", extra={"account_id": account.id})
        return AccountRef(account_id=account.id, customer_name=account.customer_name)
