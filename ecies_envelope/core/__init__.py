"""
ECIES Core Types and Primitives

Submodules:
- types: Curve, cipher and digest registry
- errors: Error taxonomy
- primitives: Compressed point encoding/decoding
- kdf: KDF2 key stretching
- provider: CryptoProvider capability interface and its `cryptography` implementation
"""

from .errors import (
    ErrorKind,
    EciesError,
    InvalidArgumentError,
    ResourceExhaustionError,
    PrimitiveError,
    KeyReconstructionError,
    DecryptionError,
    InvariantViolationError,
    AuthenticationError,
)

from .types import (
    CipherMode,
    CipherSpec,
    get_curve,
    get_digest,
    get_cipher_spec,
    supported_curves,
    supported_digests,
    supported_ciphers,
    field_size_bytes,
    compressed_point_length,
)

from .primitives import (
    encode_public_key_compressed,
    decode_public_key_compressed,
)

from .kdf import kdf2

from .provider import (
    CryptoProvider,
    DefaultCryptoProvider,
    DEFAULT_PROVIDER,
)

__all__ = [
    # Errors
    "ErrorKind",
    "EciesError",
    "InvalidArgumentError",
    "ResourceExhaustionError",
    "PrimitiveError",
    "KeyReconstructionError",
    "DecryptionError",
    "InvariantViolationError",
    "AuthenticationError",

    # Suite registry
    "CipherMode",
    "CipherSpec",
    "get_curve",
    "get_digest",
    "get_cipher_spec",
    "supported_curves",
    "supported_digests",
    "supported_ciphers",
    "field_size_bytes",
    "compressed_point_length",

    # Encoding
    "encode_public_key_compressed",
    "decode_public_key_compressed",

    # KDF
    "kdf2",

    # Provider
    "CryptoProvider",
    "DefaultCryptoProvider",
    "DEFAULT_PROVIDER",
]
