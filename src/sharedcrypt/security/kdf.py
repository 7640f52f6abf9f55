import logging
from typing import Dict, Tuple

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from sharedcrypt.core.options import (
    ARGON2ID,
    DEFAULT_ALGORITHM,
    PBKDF2_SHA256,
    validate_algorithm,
    validate_secret,
)

logger = logging.getLogger(__name__)

KEY_LEN = 32  # AES-256
IV_LEN = 16  # AES block size

# Fixed work factors. Changing any of these changes every derived key.
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536
ARGON2_PARALLELISM = 1
PBKDF2_ITERATIONS = 600_000


def derive_key_material(
    password: bytes,
    salt: bytes,
    length: int = KEY_LEN + IV_LEN,
    algorithm: str = DEFAULT_ALGORITHM,
) -> bytes:
    """
    Stretch a password into ``length`` raw bytes using the named KDF.
    Accepts str or bytes for both password and salt.
    """
    validate_algorithm(algorithm)
    if isinstance(password, str):
        password = password.encode("utf-8")
    if isinstance(salt, str):
        salt = salt.encode("utf-8")

    if algorithm == PBKDF2_SHA256:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=length,
            salt=salt,
            iterations=PBKDF2_ITERATIONS,
        )
        return kdf.derive(password)

    return hash_secret_raw(
        secret=password,
        salt=salt,
        time_cost=ARGON2_TIME_COST,
        memory_cost=ARGON2_MEMORY_COST,
        parallelism=ARGON2_PARALLELISM,
        hash_len=length,
        type=Type.ID,
    )


def derive_key_and_iv(
    password: str,
    salt: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Tuple[bytes, bytes]:
    """
    Derive an AES-256 key and a CBC IV from a shared password and salt.

    Both inputs are validated before any derivation work starts. The KDF
    output is split as ``key = out[:32]`` and ``iv = out[32:48]``, so the
    same password and salt always give the same pair on every platform.
    """
    validate_secret("shared_password", password)
    validate_secret("shared_salt", salt)
    validate_algorithm(algorithm)

    logger.debug("Deriving shared key and IV using %s", algorithm)
    material = derive_key_material(
        password.encode("utf-8"),
        salt.encode("utf-8"),
        length=KEY_LEN + IV_LEN,
        algorithm=algorithm,
    )
    return material[:KEY_LEN], material[KEY_LEN:KEY_LEN + IV_LEN]


def kdf_params_to_dict(algorithm: str = DEFAULT_ALGORITHM) -> Dict:
    validate_algorithm(algorithm)
    if algorithm == PBKDF2_SHA256:
        return {
            "algo": PBKDF2_SHA256,
            "iterations": PBKDF2_ITERATIONS,
            "key_len": KEY_LEN,
            "iv_len": IV_LEN,
        }
    return {
        "algo": ARGON2ID,
        "time": ARGON2_TIME_COST,
        "memory": ARGON2_MEMORY_COST,
        "parallelism": ARGON2_PARALLELISM,
        "key_len": KEY_LEN,
        "iv_len": IV_LEN,
    }
