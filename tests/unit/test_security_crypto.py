"""Unit tests for the explicit-key AES cryptographer."""

import base64
import threading

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from sharedcrypt.core.exceptions import CipherError, OperationCancelledError
from sharedcrypt.security.crypto import Cryptographer

# NIST SP 800-38A F.2.5 CBC-AES256
NIST_KEY = bytes.fromhex("603deb1015ca71be2b73aef0857d77811f352c073b6108d72d9810a30914dff4")
NIST_IV = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
NIST_PT = bytes.fromhex(
    "6bc1bee22e409f96e93d7e117393172a"
    "ae2d8a571e03ac9c9eb76fac45af8e51"
    "30c81c46a35ce411e5fbc1191a0a52ef"
    "f69f2445df4f9b17ad2b417be66c3710"
)
NIST_CT = bytes.fromhex(
    "f58c4c04d6e5f1ba779eabfb5f7bfbd6"
    "9cfc4e967edb808d679f777bc6702c7d"
    "39f23369a9d9bacfa530e26304231461"
    "b2eb05e2c39be9fcda6c19078c6a9d1b"
)


@pytest.fixture
def cryptographer():
    return Cryptographer()


def test_encrypt_bytes_matches_nist_vector(cryptographer):
    """Full blocks encrypt to the NIST vector, followed by one block of padding."""
    ct = cryptographer.aes_encrypt(NIST_KEY, NIST_IV, NIST_PT)
    assert len(ct) == len(NIST_PT) + 16
    assert ct[:64] == NIST_CT
    assert cryptographer.aes_decrypt(NIST_KEY, NIST_IV, ct) == NIST_PT


def test_string_roundtrip_uses_base64(cryptographer):
    ct = cryptographer.aes_encrypt(NIST_KEY, NIST_IV, "hello world")
    assert isinstance(ct, str)
    assert len(base64.b64decode(ct)) == 16
    assert cryptographer.aes_decrypt(NIST_KEY, NIST_IV, ct) == "hello world"


def test_unicode_string_roundtrip(cryptographer):
    ct = cryptographer.aes_encrypt(NIST_KEY, NIST_IV, "clé 🔒")
    assert cryptographer.aes_decrypt(NIST_KEY, NIST_IV, ct) == "clé 🔒"


def test_bytearray_payload_returns_bytes(cryptographer):
    ct = cryptographer.aes_encrypt(NIST_KEY, NIST_IV, bytearray(b"data"))
    assert isinstance(ct, bytes)
    assert cryptographer.aes_decrypt(NIST_KEY, NIST_IV, ct) == b"data"


@pytest.mark.parametrize("key, iv", [(b"k" * 31, NIST_IV), (NIST_KEY, b"i" * 15), ("k" * 32, NIST_IV)])
def test_bad_key_or_iv_raises_cipher_error(cryptographer, key, iv):
    with pytest.raises(CipherError):
        cryptographer.aes_encrypt(key, iv, b"data")


def test_decrypt_invalid_base64(cryptographer):
    with pytest.raises(CipherError, match="base64"):
        cryptographer.aes_decrypt(NIST_KEY, NIST_IV, "not base64!!")


def test_decrypt_wrong_length(cryptographer):
    with pytest.raises(CipherError, match="multiple of 16"):
        cryptographer.aes_decrypt(NIST_KEY, NIST_IV, b"x" * 15)


def test_decrypt_bad_padding(cryptographer):
    """A block that decrypts to a trailing zero byte is not valid PKCS7."""
    encryptor = Cipher(algorithms.AES(NIST_KEY), modes.CBC(NIST_IV)).encryptor()
    ct = encryptor.update(b"\x00" * 16) + encryptor.finalize()
    with pytest.raises(CipherError, match="padding"):
        cryptographer.aes_decrypt(NIST_KEY, NIST_IV, ct)


def test_unsupported_payload_type(cryptographer):
    with pytest.raises(TypeError):
        cryptographer.aes_encrypt(NIST_KEY, NIST_IV, 42)


def test_cancelled_before_start(cryptographer):
    event = threading.Event()
    event.set()
    with pytest.raises(OperationCancelledError):
        cryptographer.aes_encrypt(NIST_KEY, NIST_IV, b"data", cancel_event=event)
    with pytest.raises(OperationCancelledError):
        cryptographer.aes_decrypt(NIST_KEY, NIST_IV, NIST_CT, cancel_event=event)


def test_unset_cancel_event_is_ignored(cryptographer):
    ct = cryptographer.aes_encrypt(NIST_KEY, NIST_IV, b"data", cancel_event=threading.Event())
    assert cryptographer.aes_decrypt(NIST_KEY, NIST_IV, ct) == b"data"


def test_generate_key_and_iv_delegates_to_kdf(cryptographer):
    key, iv = cryptographer.generate_key_and_iv(
        "correct-horse-battery", "saltsaltsaltsalt", algorithm="pbkdf2-sha256"
    )
    assert len(key) == 32
    assert len(iv) == 16
