"""
Key I/O Utilities

Loads and saves EC key pairs as PEM files for the command line tool and
for callers that keep recipient keys on disk.
"""

import os
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec


class KeyFileHandler:
    """Handler for EC key generation and PEM file I/O"""

    @staticmethod
    def generate_private_key(curve_name: str) -> ec.EllipticCurvePrivateKey:
        """
        Generate a new EC private key on a named curve.

        Args:
            curve_name: Curve name (e.g. "secp256r1")

        Raises:
            InvalidArgumentError: If the curve is not supported
        """
        from ..core.types import get_curve

        return ec.generate_private_key(get_curve(curve_name))

    @staticmethod
    def load_private_key(key_path: str, password: Optional[bytes] = None) -> ec.EllipticCurvePrivateKey:
        """
        Load an EC private key from a PEM file.

        Args:
            key_path: Path to the private key file
            password: Password for an encrypted key (optional)

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not an EC private key
        """
        with open(key_path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=password)

        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise ValueError(f"{key_path} does not contain an EC private key")
        return private_key

    @staticmethod
    def load_public_key(key_path: str) -> ec.EllipticCurvePublicKey:
        """
        Load an EC public key from a PEM file.

        A PEM private key is accepted too; its public half is returned.
        """
        with open(key_path, "rb") as f:
            data = f.read()

        if b"PRIVATE KEY" in data:
            public_key = serialization.load_pem_private_key(data, password=None).public_key()
        else:
            public_key = serialization.load_pem_public_key(data)
        if not isinstance(public_key, ec.EllipticCurvePublicKey):
            raise ValueError(f"{key_path} does not contain an EC public key")
        return public_key

    @staticmethod
    def save_private_key(
        private_key: ec.EllipticCurvePrivateKey,
        key_path: str,
        password: Optional[bytes] = None,
        create_dirs: bool = True,
    ):
        """
        Save a private key as PKCS#8 PEM.

        Args:
            private_key: Key to save
            key_path: Destination path
            password: Password to encrypt the key with (optional)
            create_dirs: If True, create the parent directory
        """
        if create_dirs and os.path.dirname(key_path):
            os.makedirs(os.path.dirname(key_path), exist_ok=True)

        encryption = (
            serialization.BestAvailableEncryption(password)
            if password
            else serialization.NoEncryption()
        )

        with open(key_path, "wb") as f:
            f.write(
                private_key.private_bytes(
                    encoding=serialization.Encoding.PEM,
                    format=serialization.PrivateFormat.PKCS8,
                    encryption_algorithm=encryption,
                )
            )

    @staticmethod
    def save_public_key(
        public_key: ec.EllipticCurvePublicKey, key_path: str, create_dirs: bool = True
    ):
        """Save a public key as SubjectPublicKeyInfo PEM."""
        if create_dirs and os.path.dirname(key_path):
            os.makedirs(os.path.dirname(key_path), exist_ok=True)

        with open(key_path, "wb") as f:
            f.write(
                public_key.public_bytes(
                    encoding=serialization.Encoding.PEM,
                    format=serialization.PublicFormat.SubjectPublicKeyInfo,
                )
            )
