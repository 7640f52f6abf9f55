"""AES helpers that use a cryptographer's shared credentials.

These functions never take key material from the caller. They ask the
cryptographer for its shared key/IV (see :class:`SharedCredentialSource`)
and fail with :class:`UnsupportedOperationError` when it has none.

Empty payloads short-circuit: ``None`` and ``""`` are returned as-is and an
empty bytes-like value becomes ``b""``, without touching the cipher.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Optional, Tuple, Union

from sharedcrypt.core.exceptions import UnsupportedOperationError
from .crypto import check_cancelled
from .shared import SharedCredentialSource

Payload = Union[str, bytes, bytearray, memoryview, None]


def _shortcut(value: Payload) -> Tuple[bool, Payload]:
    if value is None:
        return True, None
    if isinstance(value, str):
        return len(value) == 0, value
    if isinstance(value, (bytes, bytearray, memoryview)):
        if len(value) == 0:
            return True, b""
        return False, bytes(value)
    raise TypeError(f"unsupported payload type: {type(value).__name__}")


def _require_shared_credentials(cryptographer) -> Tuple[bytes, bytes]:
    if not isinstance(cryptographer, SharedCredentialSource):
        raise UnsupportedOperationError("Shared credentials not supported, or not available")
    credentials = cryptographer.try_get_shared_credentials()
    if credentials is None or not credentials.key or not credentials.iv:
        raise UnsupportedOperationError("Shared credentials not supported, or not available")
    return credentials.key, credentials.iv


def aes_encrypt(
    cryptographer,
    value: Payload,
    cancel_event: Optional[threading.Event] = None,
):
    """Encrypt ``value`` (str or bytes) with the cryptographer's shared key and IV."""
    if cryptographer is None:
        raise ValueError("cryptographer is required")

    empty, value = _shortcut(value)
    if empty:
        return value

    check_cancelled(cancel_event)
    key, iv = _require_shared_credentials(cryptographer)
    return cryptographer.aes_encrypt(key, iv, value, cancel_event=cancel_event)


def aes_decrypt(
    cryptographer,
    value: Payload,
    cancel_event: Optional[threading.Event] = None,
):
    """Decrypt ``value`` (str or bytes) with the cryptographer's shared key and IV."""
    if cryptographer is None:
        raise ValueError("cryptographer is required")

    empty, value = _shortcut(value)
    if empty:
        return value

    check_cancelled(cancel_event)
    key, iv = _require_shared_credentials(cryptographer)
    return cryptographer.aes_decrypt(key, iv, value, cancel_event=cancel_event)


async def _run_cancellable(func, cryptographer, value: Payload):
    cancel_event = threading.Event()
    try:
        return await asyncio.to_thread(func, cryptographer, value, cancel_event)
    except asyncio.CancelledError:
        # the worker thread checks the event before returning its result
        cancel_event.set()
        raise


async def aes_encrypt_async(cryptographer, value: Payload):
    if cryptographer is None:
        raise ValueError("cryptographer is required")
    empty, value = _shortcut(value)
    if empty:
        return value
    return await _run_cancellable(aes_encrypt, cryptographer, value)


async def aes_decrypt_async(cryptographer, value: Payload):
    if cryptographer is None:
        raise ValueError("cryptographer is required")
    empty, value = _shortcut(value)
    if empty:
        return value
    return await _run_cancellable(aes_decrypt, cryptographer, value)
