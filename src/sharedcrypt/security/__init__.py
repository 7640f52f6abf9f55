"""Security helpers: shared-credential key derivation and AES helpers.

This package provides:
- Argon2id (or PBKDF2-SHA256) derivation of an AES-256 key and CBC IV from a
  shared password and salt
- an AES-CBC cryptographer that works with explicit key material
- a shared-credential cryptographer plus encrypt/decrypt helpers that inject
  its key and IV for the caller
- optional OS keystore storage for the shared options
"""

from .kdf import derive_key_and_iv, derive_key_material, kdf_params_to_dict
from .crypto import Cryptographer
from .shared import DerivedCredentials, SharedCredentialSource, SharedCryptographer
from .extensions import aes_encrypt, aes_decrypt, aes_encrypt_async, aes_decrypt_async
from .keystore import (
    save_shared_options,
    load_shared_options,
    delete_shared_options,
    assess_keyring_backend,
)

__all__ = [
    "derive_key_and_iv",
    "derive_key_material",
    "kdf_params_to_dict",
    "Cryptographer",
    "DerivedCredentials",
    "SharedCredentialSource",
    "SharedCryptographer",
    "aes_encrypt",
    "aes_decrypt",
    "aes_encrypt_async",
    "aes_decrypt_async",
    "save_shared_options",
    "load_shared_options",
    "delete_shared_options",
    "assess_keyring_backend",
]
"""Security package of sharedcrypt."""
