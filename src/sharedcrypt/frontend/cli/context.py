"""Composition root: binds shared options and hands out shared cryptographers."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from sharedcrypt.core.exceptions import ConfigurationError
from sharedcrypt.core.options import (
    DEFAULT_ENV_PREFIX,
    DEFAULT_SECTION,
    SharedCryptographyOptions,
    load_config_file,
)
from sharedcrypt.security.keystore import assess_keyring_backend, load_shared_options
from sharedcrypt.security.shared import SharedCryptographer

SINGLETON = "singleton"
TRANSIENT = "transient"
LIFETIMES = (SINGLETON, TRANSIENT)


def _check_lifetime(lifetime: str) -> None:
    if lifetime not in LIFETIMES:
        raise ConfigurationError(
            f"Unsupported lifetime '{lifetime}'; expected one of {', '.join(LIFETIMES)}"
        )


class CryptographerProvider:
    """
    Hands out :class:`SharedCryptographer` instances for bound options.

    With the ``singleton`` lifetime the first instance is built lazily and
    reused by every later ``get()``; ``transient`` builds a new one per call.
    """

    def __init__(
        self,
        options: SharedCryptographyOptions,
        lifetime: str = SINGLETON,
        logger: Optional[logging.Logger] = None,
    ):
        _check_lifetime(lifetime)
        self.options = options
        self.lifetime = lifetime
        self.logger = logger
        self._instance: Optional[SharedCryptographer] = None
        self._lock = threading.Lock()

    def get(self) -> SharedCryptographer:
        if self.lifetime == TRANSIENT:
            return SharedCryptographer(self.options, logger=self.logger)
        with self._lock:
            if self._instance is None:
                self._instance = SharedCryptographer(self.options, logger=self.logger)
            return self._instance


def add_cryptography_with_shared_keys(
    config: Mapping[str, Any],
    section_name: str = DEFAULT_SECTION,
    bootstrap_logger: Optional[logging.Logger] = None,
    lifetime: str = SINGLETON,
) -> CryptographerProvider:
    """
    Bind shared options from ``config[section_name]`` and register a provider.

    Options are validated here, so a bad password or salt fails at startup
    instead of on the first encrypt call.
    """
    if config is None:
        raise ValueError("config is required")
    _check_lifetime(lifetime)

    if bootstrap_logger is not None:
        bootstrap_logger.info(
            "Configuring shared cryptographic startup options from the %s section",
            section_name,
        )
    options = SharedCryptographyOptions.from_section(config, section_name)

    if bootstrap_logger is not None:
        bootstrap_logger.info(
            "Wiring up the cryptography library using %s lifetime", lifetime
        )
    return CryptographerProvider(options, lifetime=lifetime)


@dataclass
class AppContext:
    """Container for runtime objects the CLI needs."""

    options: SharedCryptographyOptions
    provider: CryptographerProvider
    source: str


def build_context(
    config_path: Optional[str | Path] = None,
    section_name: str = DEFAULT_SECTION,
    keyring_service: Optional[str] = None,
    keyring_account: Optional[str] = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    bootstrap_logger: Optional[logging.Logger] = None,
) -> AppContext:
    """
    Resolve shared options and build an AppContext.

    Lookup order:

    - a JSON config file, when ``config_path`` is given
    - the OS keystore, when ``keyring_service`` and ``keyring_account`` are given
    - environment variables ``<env_prefix>SHARED_PASSWORD`` / ``SHARED_SALT`` / ``KDF``
    """
    if config_path is not None:
        config = load_config_file(config_path)
        provider = add_cryptography_with_shared_keys(
            config, section_name=section_name, bootstrap_logger=bootstrap_logger
        )
        return AppContext(options=provider.options, provider=provider, source=str(config_path))

    if keyring_service and keyring_account:
        secure, message = assess_keyring_backend()
        if not secure and bootstrap_logger is not None:
            bootstrap_logger.warning("Shared options read from an untrusted store: %s", message)
        options = load_shared_options(keyring_service, keyring_account)
        if options is None:
            raise ConfigurationError(
                f"No shared options stored in the OS keystore for {keyring_service}/{keyring_account}"
            )
        source = f"keyring:{keyring_service}/{keyring_account}"
    else:
        options = SharedCryptographyOptions.from_env(prefix=env_prefix)
        source = "environment"

    if bootstrap_logger is not None:
        bootstrap_logger.info("Loaded shared cryptographic options from %s", source)
    provider = CryptographerProvider(options)
    return AppContext(options=options, provider=provider, source=source)
