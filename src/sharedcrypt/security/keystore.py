"""OS keystore integration using keyring as an optional source of shared options.

The shared password, salt and KDF name are stored together as one JSON string
under a service/account pair. Use this only for opt-in convenience storage; do
not assume keyring provides hardware-backed security on all platforms.
"""
import json
import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from sharedcrypt.core.exceptions import ConfigurationError
from sharedcrypt.core.options import SharedCryptographyOptions

logger = logging.getLogger(__name__)


def save_shared_options(service: str, account: str, options: SharedCryptographyOptions) -> None:
    """Persist shared options in the OS keystore under (service, account)."""
    options.validate()
    try:
        keyring.set_password(service, account, json.dumps(options.to_dict()))
    except KeyringError as e:
        raise ConfigurationError(f"Cannot write keystore entry {service}/{account}: {e}") from e


# backend class-name fragments: stores secrets unencrypted or not at all
_INSECURE_BACKENDS = ("Plaintext", "Uncrypted", "Null", "Fail")
# backend class-name fragments: platform secret stores
_PLATFORM_BACKENDS = ("WinVault", "Keychain", "SecretService", "KWallet")


def assess_keyring_backend() -> tuple[bool, str]:
    """Return (is_secure, message) for the keyring backend that would hold the shared options.

    Only a class-name heuristic; keyring does not report how a backend protects secrets.
    """
    try:
        backend = keyring.get_keyring()
    except KeyringError as e:
        return False, f"cannot resolve keyring backend: {e}"

    name = type(backend).__name__
    priority = getattr(backend, "priority", None)

    if any(fragment in name for fragment in _INSECURE_BACKENDS):
        return False, f"keyring backend {name} does not protect stored shared options"
    if priority is not None and priority <= 0:
        return False, f"keyring backend {name} is not usable on this host (priority={priority})"
    if any(fragment in name for fragment in _PLATFORM_BACKENDS):
        return True, f"keyring backend {name} is a platform secret store"
    return True, f"keyring backend {name} is not a known platform secret store"


def load_shared_options(service: str, account: str) -> Optional[SharedCryptographyOptions]:
    """Load shared options from the OS keystore; returns None when nothing is stored.

    A backend failure, a stored entry that is not valid JSON, or one that fails
    validation raises ConfigurationError.
    """
    try:
        secret = keyring.get_password(service, account)
    except KeyringError as e:
        raise ConfigurationError(f"Cannot read keystore entry {service}/{account}: {e}") from e
    if secret is None:
        return None
    try:
        data = json.loads(secret)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Keystore entry {service}/{account} is not valid JSON") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Keystore entry {service}/{account} must be a JSON object")
    return SharedCryptographyOptions.from_mapping(data)


def delete_shared_options(service: str, account: str) -> None:
    """Remove the shared options from the OS keystore; a missing entry is not an error."""
    try:
        keyring.delete_password(service, account)
    except PasswordDeleteError:
        logger.debug("No keystore entry to delete for %s/%s", service, account)
