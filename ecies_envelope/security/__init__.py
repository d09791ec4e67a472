"""
ECIES Security Operations

This package composes the primitives from `core` into the ECIES protocol:
- context: immutable suite + key configuration
- cryptogram: fixed-layout output container
- envelope: ephemeral ECDH + KDF2 envelope key derivation
- cipher_stage / mac_stage: encrypt-then-MAC body processing
- ecies: encrypt/decrypt entry points

Standards Reference:
- SEC 1 v2.0 Section 5.1 - Elliptic Curve Integrated Encryption Scheme
- ANSI X9.63 / ISO 18033-2 - KDF2
"""

from .context import EciesContext
from .cryptogram import Cryptogram
from .envelope import derive_envelope_key, prepare_envelope_key, restore_envelope_key
from .mac_stage import VerifiedBody, store_mac_tag, verify_mac
from .cipher_stage import store_cipher_body, decrypt_body
from .ecies import (
    EciesCipher,
    ecies_encrypt,
    ecies_decrypt,
    ecies_encrypt_bytes,
    ecies_decrypt_bytes,
)

__all__ = [
    # Configuration
    "EciesContext",

    # Container
    "Cryptogram",

    # Envelope key
    "derive_envelope_key",
    "prepare_envelope_key",
    "restore_envelope_key",

    # Stages
    "VerifiedBody",
    "store_mac_tag",
    "verify_mac",
    "store_cipher_body",
    "decrypt_body",

    # ECIES encryption - class interface
    "EciesCipher",

    # ECIES encryption - functional interface
    "ecies_encrypt",
    "ecies_decrypt",
    "ecies_encrypt_bytes",
    "ecies_decrypt_bytes",
]
