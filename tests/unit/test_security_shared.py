"""Unit tests for SharedCryptographer and the shared-credential capability."""

import asyncio
import logging
from unittest.mock import MagicMock, patch

import pytest

from sharedcrypt.core.exceptions import ConfigurationError
from sharedcrypt.core.options import SharedCryptographyOptions
from sharedcrypt.security.crypto import Cryptographer
from sharedcrypt.security.kdf import derive_key_and_iv, kdf_params_to_dict
from sharedcrypt.security.shared import (
    DerivedCredentials,
    SharedCredentialSource,
    SharedCryptographer,
)


@pytest.fixture(scope="module")
def options():
    return SharedCryptographyOptions(
        shared_password="correct-horse-battery", shared_salt="saltsaltsaltsalt"
    )


@pytest.fixture(scope="module")
def shared(options):
    return SharedCryptographer(options)


def test_credentials_are_derived_from_options(shared, options):
    creds = shared.try_get_shared_credentials()
    assert isinstance(creds, DerivedCredentials)
    assert (creds.key, creds.iv) == derive_key_and_iv(options.shared_password, options.shared_salt)
    assert len(creds.key) == 32
    assert len(creds.iv) == 16


def test_derivation_runs_once_at_construction(options):
    with patch(
        "sharedcrypt.security.crypto.derive_key_and_iv",
        return_value=(b"k" * 32, b"i" * 16),
    ) as mock_derive:
        c = SharedCryptographer(options)
        c.try_get_shared_credentials()
        c.try_get_shared_credentials()
        c.aes_encrypt(b"k" * 32, b"i" * 16, b"data")

    mock_derive.assert_called_once_with(
        "correct-horse-battery", "saltsaltsaltsalt", algorithm="argon2id"
    )


def test_construction_logs_kdf_parameters(options):
    logger = MagicMock(spec=logging.Logger)
    with patch(
        "sharedcrypt.security.crypto.derive_key_and_iv",
        return_value=(b"k" * 32, b"i" * 16),
    ):
        SharedCryptographer(options, logger=logger)

    logger.debug.assert_called_with(
        "Shared credentials derived with %s", kdf_params_to_dict("argon2id")
    )


def test_shared_cryptographer_is_a_credential_source(shared):
    assert isinstance(shared, SharedCredentialSource)
    assert isinstance(shared, Cryptographer)


def test_plain_cryptographer_is_not_a_credential_source():
    assert not isinstance(Cryptographer(), SharedCredentialSource)


def test_missing_options_rejected():
    with pytest.raises(ConfigurationError):
        SharedCryptographer(None)


def test_empty_credentials_are_not_offered(options):
    with patch(
        "sharedcrypt.security.crypto.derive_key_and_iv",
        return_value=(b"", b""),
    ):
        c = SharedCryptographer(options)
    assert c.try_get_shared_credentials() is None


def test_repr_hides_key_material(shared):
    creds = shared.try_get_shared_credentials()
    text = repr(creds)
    assert creds.key.hex() not in text
    assert repr(creds.key) not in text


def test_create_async(options, shared):
    created = asyncio.run(SharedCryptographer.create_async(options))
    assert isinstance(created, SharedCryptographer)
    assert created.try_get_shared_credentials() == shared.try_get_shared_credentials()
