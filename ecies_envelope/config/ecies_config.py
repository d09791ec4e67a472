"""
ECIES Configuration - Limits and default cipher suite

Centralizes every limit and default used by the ECIES core.
Changing a value here applies it to the whole package.

Usage:
    from ecies_envelope.config import ECIES_CONSTANTS, ECIES_DEFAULTS

    if output_length > ECIES_CONSTANTS.KDF_MAX:
        ...
    ctx = EciesContext.for_recipient(public_key, cipher=ECIES_DEFAULTS.CIPHER)
"""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class EciesConstants:
    """
    Hard limits enforced by the ECIES core.

    Attributes:
        KDF_MAX: Upper bound for KDF2 secret, shared info and output length
        MAX_BLOCK_LENGTH: Largest cipher block size accepted (bytes)
        MAX_IV_LENGTH: Largest initialization vector size (bytes)
        MAX_MD_SIZE: Largest digest size produced by a supported hash (bytes)
        MAX_PLAINTEXT_LENGTH: Largest plaintext accepted by ecies_encrypt
    """
    # Key derivation
    KDF_MAX: int = 1 << 30
    KDF_COUNTER_START: int = 1

    # Symmetric cipher
    MAX_BLOCK_LENGTH: int = 32
    MAX_IV_LENGTH: int = 16

    # Digests
    MAX_MD_SIZE: int = 64

    # Payload
    MAX_PLAINTEXT_LENGTH: int = 1 << 30

    # Logging
    LOGGER_NAME: str = "ECIES"

    # Metrics
    METRICS_MAX_SAMPLES: int = 10000
    METRICS_MAX_LATENCIES: int = 1000


ECIES_CONSTANTS = EciesConstants()


@dataclass(frozen=True)
class EciesDefaults:
    """
    Default cipher suite used when the caller does not pick one.

    NIST P-256 with AES-128-CBC, HMAC-SHA256 and KDF2-SHA256: the
    SHA-256 KDF output (32 bytes) covers both 16-byte key regions.
    """
    CURVE: str = "secp256r1"
    CIPHER: str = "aes-128-cbc"
    MAC_DIGEST: str = "sha256"
    KDF_DIGEST: str = "sha256"


ECIES_DEFAULTS = EciesDefaults()


def get_default_suite() -> Dict[str, str]:
    """
    Return the default suite names as keyword arguments for EciesContext.

    Examples:
        >>> get_default_suite()["cipher"]
        'aes-128-cbc'
    """
    return {
        "cipher": ECIES_DEFAULTS.CIPHER,
        "mac_digest": ECIES_DEFAULTS.MAC_DIGEST,
        "kdf_digest": ECIES_DEFAULTS.KDF_DIGEST,
    }
