"""Cryptographer variant that carries one key/IV pair derived from shared options.

Any process configured with the same shared password, salt and KDF derives the
same key and IV, so data encrypted by one instance can be decrypted by another.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

from sharedcrypt.core.exceptions import ConfigurationError
from sharedcrypt.core.options import SharedCryptographyOptions
from .crypto import Cryptographer
from .kdf import kdf_params_to_dict


@dataclass(frozen=True)
class DerivedCredentials:
    """Key and IV derived from a shared password and salt."""

    key: bytes = field(repr=False)
    iv: bytes = field(repr=False)

    def is_complete(self) -> bool:
        return len(self.key) > 0 and len(self.iv) > 0


@runtime_checkable
class SharedCredentialSource(Protocol):
    """Anything that can hand out shared credentials.

    ``try_get_shared_credentials`` returns ``None`` when nothing is available.
    """

    def try_get_shared_credentials(self) -> Optional[DerivedCredentials]:
        ...


class SharedCryptographer(Cryptographer):
    """
    AES cryptographer bound to shared credentials.

    The key and IV are derived once, in ``__init__``, and kept for the
    lifetime of the instance. Derivation is deliberately slow; use
    :meth:`create_async` to keep it off an event loop.
    """

    def __init__(
        self,
        options: SharedCryptographyOptions,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger=logger)
        if options is None:
            raise ConfigurationError("shared cryptography options are required")
        options.validate()

        key, iv = self.generate_key_and_iv(
            options.shared_password, options.shared_salt, algorithm=options.kdf
        )
        self._credentials = DerivedCredentials(key=key, iv=iv)
        self.kdf = options.kdf
        self.logger.debug("Shared credentials derived with %s", kdf_params_to_dict(options.kdf))

    @classmethod
    async def create_async(
        cls,
        options: SharedCryptographyOptions,
        logger: Optional[logging.Logger] = None,
    ) -> "SharedCryptographer":
        return await asyncio.to_thread(cls, options, logger)

    def try_get_shared_credentials(self) -> Optional[DerivedCredentials]:
        if not self._credentials.is_complete():
            return None
        return self._credentials
