"""AES-CBC primitive used by the shared-credential helpers.

Payload handling:
- bytes in, bytes out (raw ciphertext, PKCS7 padded to the 16-byte block size)
- str in, str out: plaintext is UTF-8 encoded and the ciphertext is returned as
  standard base64 text; decryption reverses both steps

The key and IV are always supplied by the caller. This class holds no key material.
"""
from __future__ import annotations

import base64
import binascii
import logging
import threading
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from sharedcrypt.core.exceptions import CipherError, OperationCancelledError
from .kdf import DEFAULT_ALGORITHM, derive_key_and_iv

BLOCK_SIZE_BITS = 128
VALID_KEY_LENGTHS = (16, 24, 32)
IV_LENGTH = 16

Payload = Union[str, bytes]


def check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError("Operation was cancelled")


def _check_key_and_iv(key: bytes, iv: bytes) -> None:
    if not isinstance(key, (bytes, bytearray)) or len(key) not in VALID_KEY_LENGTHS:
        raise CipherError("AES key must be 16, 24 or 32 bytes")
    if not isinstance(iv, (bytes, bytearray)) or len(iv) != IV_LENGTH:
        raise CipherError(f"IV must be {IV_LENGTH} bytes")


def _encrypt_raw(key: bytes, iv: bytes, data: bytes) -> bytes:
    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(bytes(key)), modes.CBC(bytes(iv))).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def _decrypt_raw(key: bytes, iv: bytes, data: bytes) -> bytes:
    if len(data) == 0 or len(data) % (BLOCK_SIZE_BITS // 8) != 0:
        raise CipherError("ciphertext length must be a non-zero multiple of 16")
    decryptor = Cipher(algorithms.AES(bytes(key)), modes.CBC(bytes(iv))).decryptor()
    padded = decryptor.update(data) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise CipherError("invalid padding (wrong key or corrupted ciphertext)") from e


class Cryptographer:
    """
    Plain AES cryptographer that works with explicit key material.

    It does not implement :class:`~sharedcrypt.security.shared.SharedCredentialSource`,
    so the shared-credential helpers in :mod:`sharedcrypt.security.extensions`
    refuse to use it.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def generate_key_and_iv(
        self, password: str, salt: str, algorithm: str = DEFAULT_ALGORITHM
    ) -> Tuple[bytes, bytes]:
        """Derive a key/IV pair from a password and salt (see :mod:`.kdf`)."""
        return derive_key_and_iv(password, salt, algorithm=algorithm)

    def aes_encrypt(
        self,
        key: bytes,
        iv: bytes,
        value: Payload,
        cancel_event: Optional[threading.Event] = None,
    ) -> Payload:
        check_cancelled(cancel_event)
        _check_key_and_iv(key, iv)

        if isinstance(value, str):
            ct = _encrypt_raw(key, iv, value.encode("utf-8"))
            result: Payload = base64.b64encode(ct).decode("ascii")
        elif isinstance(value, (bytes, bytearray, memoryview)):
            result = _encrypt_raw(key, iv, bytes(value))
        else:
            raise TypeError(f"unsupported payload type: {type(value).__name__}")

        check_cancelled(cancel_event)
        return result

    def aes_decrypt(
        self,
        key: bytes,
        iv: bytes,
        value: Payload,
        cancel_event: Optional[threading.Event] = None,
    ) -> Payload:
        check_cancelled(cancel_event)
        _check_key_and_iv(key, iv)

        if isinstance(value, str):
            try:
                ct = base64.b64decode(value.encode("ascii"), validate=True)
            except (binascii.Error, UnicodeEncodeError) as e:
                raise CipherError("ciphertext is not valid base64") from e
            pt = _decrypt_raw(key, iv, ct)
            try:
                result: Payload = pt.decode("utf-8")
            except UnicodeDecodeError as e:
                raise CipherError("decrypted bytes are not valid UTF-8") from e
        elif isinstance(value, (bytes, bytearray, memoryview)):
            result = _decrypt_raw(key, iv, bytes(value))
        else:
            raise TypeError(f"unsupported payload type: {type(value).__name__}")

        check_cancelled(cancel_event)
        return result
