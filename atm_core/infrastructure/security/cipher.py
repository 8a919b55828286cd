"""AES-256-CBC decryption of card numbers and PINs sent by the ATM frontend"""

import base64
import binascii
import logging
import os
import re

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from atm_core.config import settings
from atm_core.utils.masking import mask_card_number

logger = logging.getLogger(__name__)

IV_SIZE = 16
CARD_NUMBER_PATTERN = re.compile(r"^\d{16}$")
PIN_PATTERN = re.compile(r"^\d{4}$")


class CredentialDecryptionError(ValueError):
    """Encrypted field is malformed or does not decrypt to the expected format"""

    pass


class CredentialCipher:
    """
    Symmetric cipher shared with the frontend.

    Wire format: base64("<IV as 32 hex chars>:<base64 ciphertext>"), AES-256 in
    CBC mode with PKCS7 padding.
    """

    def __init__(self, secret_key: str | None = None):
        key = (secret_key or settings.encryption_secret_key).encode("utf-8")
        if len(key) != 32:
            raise ValueError("AES-256 key must be exactly 32 bytes")
        self._key = key

    def decrypt_card_number(self, encrypted: str) -> str:
        card_number = self._decrypt_field(encrypted, "card number")
        if not CARD_NUMBER_PATTERN.match(card_number):
            logger.error("Decrypted card number has invalid format: %s", mask_card_number(card_number))
            raise CredentialDecryptionError("Decrypted card number is not valid 16-digit format")
        return card_number

    def decrypt_pin(self, encrypted: str) -> str:
        pin = self._decrypt_field(encrypted, "PIN")
        if not PIN_PATTERN.match(pin):
            logger.error("Decrypted PIN has invalid format")
            raise CredentialDecryptionError("Decrypted PIN is not valid 4-digit format")
        return pin

    def encrypt(self, plain_text: str, iv: bytes | None = None) -> str:
        """Produce the frontend's wire format; used by clients and tests"""
        iv = iv if iv is not None else os.urandom(IV_SIZE)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plain_text.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        combined = f"{iv.hex()}:{base64.b64encode(ciphertext).decode('ascii')}"
        return base64.b64encode(combined.encode("utf-8")).decode("ascii")

    def _decrypt_field(self, encrypted: str, field: str) -> str:
        if not encrypted or not encrypted.strip():
            raise CredentialDecryptionError(f"Encrypted {field} cannot be empty")

        try:
            decoded = base64.b64decode(encrypted, validate=True).decode("utf-8")
            iv_hex, _, body = decoded.partition(":")
            if not body:
                raise CredentialDecryptionError("Invalid encrypted data format")

            iv = bytes.fromhex(iv_hex)
            if len(iv) != IV_SIZE:
                raise CredentialDecryptionError(f"Invalid IV size: {len(iv)} bytes")

            ciphertext = base64.b64decode(body, validate=True)
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")

        except CredentialDecryptionError:
            raise
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            logger.error("Failed to decrypt %s", field)
            raise CredentialDecryptionError(f"{field.capitalize()} decryption failed") from e
