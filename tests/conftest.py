"""
Pytest Configuration and Shared Fixtures

Provides shared fixtures for all tests:
- P-256 recipient key pairs
- ECIES contexts (default suite, encrypt-only, custom suites)
- Recording provider that logs every primitive call
- Automatic metrics reset between tests
"""

import os
import sys

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ecies_envelope.core.provider import DefaultCryptoProvider
from ecies_envelope.security.context import EciesContext
from ecies_envelope.utils.metrics import reset_metrics_collector


class RecordingProvider(DefaultCryptoProvider):
    """DefaultCryptoProvider that records the name of every primitive it runs."""

    def __init__(self):
        self.calls = []

    def generate_ephemeral_keypair(self, curve):
        self.calls.append("generate_ephemeral_keypair")
        return super().generate_ephemeral_keypair(curve)

    def compute_shared_secret(self, private_key, public_key):
        self.calls.append("compute_shared_secret")
        return super().compute_shared_secret(private_key, public_key)

    def derive_key(self, secret, length, shared_info=b"", algorithm=None):
        self.calls.append("derive_key")
        return super().derive_key(secret, length, shared_info, algorithm)

    def symmetric_encrypt(self, cipher, key, iv, data):
        self.calls.append("symmetric_encrypt")
        return super().symmetric_encrypt(cipher, key, iv, data)

    def symmetric_decrypt(self, cipher, key, iv, data):
        self.calls.append("symmetric_decrypt")
        return super().symmetric_decrypt(cipher, key, iv, data)

    def mac_compute(self, algorithm, key, data):
        self.calls.append("mac_compute")
        return super().mac_compute(algorithm, key, data)

    def mac_verify(self, algorithm, key, data, tag):
        self.calls.append("mac_verify")
        return super().mac_verify(algorithm, key, data, tag)


@pytest.fixture(scope="session")
def recipient_key():
    """NIST P-256 recipient private key (session scope)"""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def other_key():
    """Second P-256 key, unrelated to the recipient"""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def ctx(recipient_key):
    """Default-suite context holding the full recipient key pair"""
    return EciesContext.from_private_key(recipient_key)


@pytest.fixture
def encrypt_only_ctx(recipient_key):
    """Default-suite context holding only the recipient public key"""
    return EciesContext.for_recipient(recipient_key.public_key())


@pytest.fixture
def recording_provider():
    return RecordingProvider()


@pytest.fixture
def recording_ctx(recipient_key, recording_provider):
    """Default-suite context whose provider records primitive calls"""
    return EciesContext.from_private_key(recipient_key, provider=recording_provider)


@pytest.fixture(autouse=True)
def clean_metrics():
    """Every test starts with empty global metrics"""
    reset_metrics_collector()
    yield
    reset_metrics_collector()
