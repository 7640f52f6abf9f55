"""Shared cryptography options and the helpers that bind them from configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError

DEFAULT_SECTION = "Cryptography"
DEFAULT_ENV_PREFIX = "SHAREDCRYPT_"

MIN_SECRET_LEN = 12
MAX_SECRET_LEN = 60

ARGON2ID = "argon2id"
PBKDF2_SHA256 = "pbkdf2-sha256"
DEFAULT_ALGORITHM = ARGON2ID
SUPPORTED_ALGORITHMS = (ARGON2ID, PBKDF2_SHA256)

# snake_case field -> accepted keys inside a config section
_SECTION_KEYS = {
    "shared_password": ("shared_password", "SharedPassword"),
    "shared_salt": ("shared_salt", "SharedSalt"),
    "kdf": ("kdf", "Kdf"),
}


def validate_secret(name: str, value) -> str:
    """Check that a shared password or salt is a string of 12-60 characters."""
    if value is None or value == "":
        raise ConfigurationError(f"{name} is required")
    if not isinstance(value, str):
        raise ConfigurationError(f"{name} must be a string")
    if not MIN_SECRET_LEN <= len(value) <= MAX_SECRET_LEN:
        raise ConfigurationError(
            f"{name} must be between {MIN_SECRET_LEN} and {MAX_SECRET_LEN} characters"
        )
    return value


def validate_algorithm(algorithm: str) -> str:
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ConfigurationError(
            f"Unsupported key derivation function '{algorithm}'; "
            f"expected one of {', '.join(SUPPORTED_ALGORITHMS)}"
        )
    return algorithm


@dataclass(frozen=True)
class SharedCryptographyOptions:
    """Password and salt used for operations not tied to a specific user."""

    shared_password: str = field(repr=False)
    shared_salt: str = field(repr=False)
    kdf: str = DEFAULT_ALGORITHM

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        validate_secret("shared_password", self.shared_password)
        validate_secret("shared_salt", self.shared_salt)
        validate_algorithm(self.kdf)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SharedCryptographyOptions":
        kwargs: Dict[str, Any] = {}
        for name, keys in _SECTION_KEYS.items():
            for key in keys:
                if key in values and values[key] is not None:
                    kwargs[name] = values[key]
                    break
        return cls(
            shared_password=kwargs.get("shared_password"),
            shared_salt=kwargs.get("shared_salt"),
            kdf=kwargs.get("kdf", DEFAULT_ALGORITHM),
        )

    @classmethod
    def from_section(
        cls, config: Mapping[str, Any], section_name: str = DEFAULT_SECTION
    ) -> "SharedCryptographyOptions":
        """
        Bind options from ``config[section_name]``.

        ``section_name`` may use ``:`` to address nested sections, e.g.
        ``"Services:Cryptography"``.
        """
        section: Any = config
        for part in section_name.split(":"):
            if not isinstance(section, Mapping) or part not in section:
                raise ConfigurationError(f"Configuration section '{section_name}' not found")
            section = section[part]
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"Configuration section '{section_name}' is not a mapping")
        return cls.from_mapping(section)

    @classmethod
    def from_env(
        cls, prefix: str = DEFAULT_ENV_PREFIX, environ: Optional[Mapping[str, str]] = None
    ) -> "SharedCryptographyOptions":
        """Bind options from ``<prefix>SHARED_PASSWORD``, ``<prefix>SHARED_SALT`` and ``<prefix>KDF``."""
        env = os.environ if environ is None else environ
        return cls(
            shared_password=env.get(f"{prefix}SHARED_PASSWORD"),
            shared_salt=env.get(f"{prefix}SHARED_SALT"),
            kdf=env.get(f"{prefix}KDF") or DEFAULT_ALGORITHM,
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "shared_password": self.shared_password,
            "shared_salt": self.shared_salt,
            "kdf": self.kdf,
        }


def load_config_file(path: str | Path) -> Dict[str, Any]:
    """Read a JSON configuration file into a dict."""
    path = Path(path).expanduser()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
    return data
