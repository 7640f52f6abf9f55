"""
Exceptions for sharedcrypt
Everything raised on purpose derives from SharedCryptError so callers have one catch-all
"""


class SharedCryptError(Exception):
    # general container for errors
    pass


class ConfigurationError(SharedCryptError):
    # raised when shared password / salt (or other options) are missing or invalid
    pass


class UnsupportedOperationError(SharedCryptError):
    # raised when a cryptographer has no shared credentials to offer
    pass


class CipherError(SharedCryptError):
    # raised when the AES primitive itself fails (bad key, padding, encoding)
    pass


class OperationCancelledError(SharedCryptError):
    # raised when a cancellation signal is observed; no partial output is returned
    pass
