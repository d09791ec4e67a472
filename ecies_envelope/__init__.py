"""
ecies-envelope: ECIES hybrid encryption

Encrypts data to the holder of an elliptic-curve public key without an
interactive handshake. Each message gets a fresh ephemeral key; the output
cryptogram carries the ephemeral public key, the ciphertext and an HMAC tag.

Module Structure:
- config/: Limits and default cipher suite
- core/: Suite registry, errors, point encoding, KDF2, primitives provider
- security/: Context, cryptogram, envelope key, cipher/MAC stages, encrypt/decrypt
- utils/: Secret buffers, logging, metrics, key file I/O
- cli: Command line tool

Example:
    >>> from cryptography.hazmat.primitives.asymmetric import ec
    >>> from ecies_envelope import EciesContext, ecies_encrypt, ecies_decrypt
    >>> key = ec.generate_private_key(ec.SECP256R1())
    >>> ctx = EciesContext.from_private_key(key)
    >>> ecies_decrypt(ctx, ecies_encrypt(ctx, b"hello"))
    b'hello'
"""

__version__ = "1.0.0"

from .core import (
    ErrorKind,
    EciesError,
    InvalidArgumentError,
    ResourceExhaustionError,
    PrimitiveError,
    KeyReconstructionError,
    DecryptionError,
    InvariantViolationError,
    AuthenticationError,
    CryptoProvider,
    DefaultCryptoProvider,
    kdf2,
    supported_curves,
    supported_ciphers,
    supported_digests,
)

from .security import (
    EciesContext,
    Cryptogram,
    EciesCipher,
    ecies_encrypt,
    ecies_decrypt,
    ecies_encrypt_bytes,
    ecies_decrypt_bytes,
)

__all__ = [
    "__version__",

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

    # Primitives
    "CryptoProvider",
    "DefaultCryptoProvider",
    "kdf2",
    "supported_curves",
    "supported_ciphers",
    "supported_digests",

    # ECIES
    "EciesContext",
    "Cryptogram",
    "EciesCipher",
    "ecies_encrypt",
    "ecies_decrypt",
    "ecies_encrypt_bytes",
    "ecies_decrypt_bytes",
]
