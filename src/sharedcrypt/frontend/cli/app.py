"""
Command line front end for shared-credential encryption.

Usage:
    sharedcrypt encrypt --text "hello world" --config ./appsettings.json
    sharedcrypt decrypt --text <base64> --keyring sharedcrypt alice --json

Options come from --config, else --keyring, else SHAREDCRYPT_* environment variables.
Text input is encrypted to base64; --hex input is treated as raw bytes and the output is hex.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from sharedcrypt.core.exceptions import (
    CipherError,
    ConfigurationError,
    OperationCancelledError,
    UnsupportedOperationError,
)
from sharedcrypt.core.options import DEFAULT_SECTION
from sharedcrypt.security.extensions import aes_decrypt, aes_encrypt
from .context import build_context
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _hex(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid hex: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sharedcrypt",
        description="AES encryption with a shared password and salt",
    )
    parser.add_argument("op", choices=["encrypt", "decrypt"])
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Input text (plaintext, or base64 ciphertext for decrypt)")
    source.add_argument("--hex", dest="hex_in", type=_hex, help="Input as hex bytes")
    parser.add_argument("--config", dest="config_path", default=None, help="JSON configuration file")
    parser.add_argument("--section", default=DEFAULT_SECTION, help="Configuration section name")
    parser.add_argument(
        "--keyring",
        nargs=2,
        metavar=("SERVICE", "ACCOUNT"),
        default=None,
        help="Load shared options from the OS keystore",
    )
    parser.add_argument("--json", action="store_true", help="Output JSON to stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _emit(args: argparse.Namespace, payload: dict, plain: str) -> None:
    print(json.dumps(payload) if args.json else plain, flush=True)


def _error(args: argparse.Namespace, message: str, code: int) -> int:
    _emit(args, {"error": message}, f"Error: {message}")
    return code


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    service, account = args.keyring if args.keyring else (None, None)
    try:
        ctx = build_context(
            config_path=args.config_path,
            section_name=args.section,
            keyring_service=service,
            keyring_account=account,
            bootstrap_logger=logger,
        )
        cryptographer = ctx.provider.get()
    except ConfigurationError as e:
        return _error(args, str(e), EXIT_USAGE)

    value = args.hex_in if args.hex_in is not None else args.text
    func = aes_encrypt if args.op == "encrypt" else aes_decrypt
    try:
        result = func(cryptographer, value)
    except (CipherError, UnsupportedOperationError, OperationCancelledError) as e:
        return _error(args, str(e), EXIT_FAILURE)

    key = "ciphertext" if args.op == "encrypt" else "plaintext"
    if isinstance(result, bytes):
        result = result.hex()
    _emit(args, {"op": args.op, key: result}, f"{key}={result}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
