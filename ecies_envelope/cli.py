"""
ECIES command line tool.

Usage:
    ecies-envelope keygen --curve secp256r1 --out recipient.pem --public-out recipient.pub.pem
    ecies-envelope encrypt --public-key recipient.pub.pem --in message.txt --out message.ecies
    ecies-envelope decrypt --private-key recipient.pem --in message.ecies --out message.txt
    ecies-envelope inspect --public-key recipient.pub.pem --in message.ecies
    ecies-envelope suites

`-` reads from stdin / writes to stdout. `--base64` reads and writes the
cryptogram as base64 text instead of raw bytes.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .config import ECIES_CONSTANTS, ECIES_DEFAULTS
from .core.errors import EciesError
from .core.types import supported_ciphers, supported_curves, supported_digests
from .security.context import EciesContext
from .security.cryptogram import Cryptogram
from .security.ecies import ecies_decrypt, ecies_encrypt
from .utils.key_io import KeyFileHandler
from .utils.logger import EciesLogger


def _read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _write_output(path: str, data: bytes):
    if path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as f:
        f.write(data)


def _password(args) -> Optional[bytes]:
    if not getattr(args, "password_env", None):
        return None
    value = os.environ.get(args.password_env)
    if value is None:
        raise ValueError(f"Environment variable {args.password_env} is not set")
    return value.encode("utf-8")


def _suite(args) -> dict:
    return {
        "cipher": args.cipher,
        "mac_digest": args.mac_digest,
        "kdf_digest": args.kdf_digest,
    }


def _load_cryptogram(args, ctx: EciesContext) -> Cryptogram:
    data = _read_input(args.input)
    if args.base64:
        return Cryptogram.from_base64(data.strip(), ctx.ephemeral_key_octet_length, ctx.mac_length)
    return Cryptogram.from_bytes(data, ctx.ephemeral_key_octet_length, ctx.mac_length)


# ============================================================================
# COMMANDS
# ============================================================================


def cmd_keygen(args) -> int:
    private_key = KeyFileHandler.generate_private_key(args.curve)
    KeyFileHandler.save_private_key(private_key, args.out, password=_password(args))
    if args.public_out:
        KeyFileHandler.save_public_key(private_key.public_key(), args.public_out)
    print(f"✅ Generated {args.curve} key: {args.out}", file=sys.stderr)
    return 0


def cmd_encrypt(args) -> int:
    public_key = KeyFileHandler.load_public_key(args.public_key)
    ctx = EciesContext.for_recipient(public_key, **_suite(args))

    cryptogram = ecies_encrypt(ctx, _read_input(args.input))
    if args.base64:
        _write_output(args.out, cryptogram.to_base64().encode("ascii") + b"\n")
    else:
        _write_output(args.out, cryptogram.to_bytes())
    return 0


def cmd_decrypt(args) -> int:
    private_key = KeyFileHandler.load_private_key(args.private_key, password=_password(args))
    ctx = EciesContext.from_private_key(private_key, **_suite(args))

    plaintext = ecies_decrypt(ctx, _load_cryptogram(args, ctx))
    _write_output(args.out, plaintext)
    return 0


def cmd_inspect(args) -> int:
    public_key = KeyFileHandler.load_public_key(args.public_key)
    ctx = EciesContext.for_recipient(public_key, **_suite(args))
    cryptogram = _load_cryptogram(args, ctx)

    print(f"Suite:          {ctx.suite_label}")
    print(f"Total length:   {len(cryptogram)} bytes")
    print(f"Ephemeral key:  {cryptogram.key_length} bytes ({bytes(cryptogram.key_data[:1]).hex()}...)")
    print(f"Body:           {cryptogram.body_length} bytes")
    print(f"MAC tag:        {cryptogram.mac_length} bytes")
    return 0


def cmd_suites(args) -> int:
    print("Curves:   " + ", ".join(supported_curves()))
    print("Ciphers:  " + ", ".join(supported_ciphers()))
    print("Digests:  " + ", ".join(supported_digests()))
    return 0


# ============================================================================
# PARSER
# ============================================================================


def _add_suite_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--cipher",
        default=ECIES_DEFAULTS.CIPHER,
        help=f"Symmetric cipher (default: {ECIES_DEFAULTS.CIPHER})"
    )
    parser.add_argument(
        "--mac-digest",
        default=ECIES_DEFAULTS.MAC_DIGEST,
        help=f"HMAC digest (default: {ECIES_DEFAULTS.MAC_DIGEST})"
    )
    parser.add_argument(
        "--kdf-digest",
        default=ECIES_DEFAULTS.KDF_DIGEST,
        help=f"KDF2 digest (default: {ECIES_DEFAULTS.KDF_DIGEST})"
    )


def _add_io_arguments(parser: argparse.ArgumentParser, with_output: bool = True):
    parser.add_argument("--in", dest="input", default="-", help="Input file (default: stdin)")
    if with_output:
        parser.add_argument("--out", default="-", help="Output file (default: stdout)")
    parser.add_argument("--base64", action="store_true", help="Cryptogram as base64 text")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecies-envelope",
        description="ECIES hybrid encryption to an elliptic-curve public key",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen = subparsers.add_parser("keygen", help="Generate a recipient key pair")
    keygen.add_argument(
        "--curve",
        default=ECIES_DEFAULTS.CURVE,
        choices=supported_curves(),
        help=f"Curve (default: {ECIES_DEFAULTS.CURVE})"
    )
    keygen.add_argument("--out", required=True, help="Private key PEM file")
    keygen.add_argument("--public-out", help="Public key PEM file (optional)")
    keygen.add_argument("--password-env", help="Environment variable holding the key password")
    keygen.set_defaults(func=cmd_keygen)

    encrypt = subparsers.add_parser("encrypt", help="Encrypt to a recipient public key")
    encrypt.add_argument("--public-key", required=True, help="Recipient public key PEM")
    _add_io_arguments(encrypt)
    _add_suite_arguments(encrypt)
    encrypt.set_defaults(func=cmd_encrypt)

    decrypt = subparsers.add_parser("decrypt", help="Decrypt with the recipient private key")
    decrypt.add_argument("--private-key", required=True, help="Recipient private key PEM")
    decrypt.add_argument("--password-env", help="Environment variable holding the key password")
    _add_io_arguments(decrypt)
    _add_suite_arguments(decrypt)
    decrypt.set_defaults(func=cmd_decrypt)

    inspect = subparsers.add_parser("inspect", help="Show the field layout of a cryptogram")
    inspect.add_argument("--public-key", required=True, help="Recipient public (or private) key PEM")
    _add_io_arguments(inspect, with_output=False)
    _add_suite_arguments(inspect)
    inspect.set_defaults(func=cmd_inspect)

    suites = subparsers.add_parser("suites", help="List supported curves, ciphers and digests")
    suites.set_defaults(func=cmd_suites)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        EciesLogger.set_level(ECIES_CONSTANTS.LOGGER_NAME, logging.DEBUG)

    try:
        return args.func(args)
    except EciesError as e:
        print(f"❌ {e.kind.value}: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError, TypeError) as e:
        # TypeError: encrypted key file loaded without --password-env
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
