"""
ECIES Encrypt/Decrypt Tests

COVERAGE:
- Output layout: compressed ephemeral key || body || tag
- Round trips over plaintext lengths and cipher suites
- Tamper detection on every byte of body and tag
- MAC is checked before anything is decrypted
- Key-field corruption, wrong recipient, encrypt-only contexts
- KDF sufficiency rejected before any primitive runs
- Argument validation, concurrency, metrics
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from ecies_envelope import (
    AuthenticationError,
    Cryptogram,
    DecryptionError,
    EciesCipher,
    EciesContext,
    EciesError,
    ErrorKind,
    InvalidArgumentError,
    KeyReconstructionError,
    ecies_decrypt,
    ecies_decrypt_bytes,
    ecies_encrypt,
    ecies_encrypt_bytes,
)
from ecies_envelope.utils.metrics import get_metrics_collector


def _flip(data: bytes, index: int) -> bytes:
    flipped = bytearray(data)
    flipped[index] ^= 0x01
    return bytes(flipped)


class TestScenario:
    """Encrypt "hello" to a P-256 recipient and back"""

    def test_hello_aes128(self, ctx):
        """Field sizes for a 5-byte plaintext on P-256 with AES-128-CBC"""
        cryptogram = ecies_encrypt(ctx, b"hello")

        assert cryptogram.key_length == 33
        assert cryptogram.body_length == 16
        assert cryptogram.mac_length == 32
        assert len(cryptogram) == 81
        assert cryptogram.key_data[0] in (0x02, 0x03)

        plaintext = ecies_decrypt(ctx, cryptogram)
        assert plaintext == b"hello"
        assert len(plaintext) == 5

    def test_hello_aes256_with_sha512_kdf(self, ctx):
        wide = ctx.reconfigure(cipher="aes-256-cbc", kdf_digest="sha512")
        cryptogram = ecies_encrypt(wide, b"hello")
        assert (cryptogram.key_length, cryptogram.body_length, cryptogram.mac_length) == (33, 16, 32)
        assert ecies_decrypt(wide, cryptogram) == b"hello"

    def test_serialized_round_trip(self, ctx):
        data = ecies_encrypt_bytes(ctx, b"hello")
        assert isinstance(data, bytes)
        assert len(data) == ctx.cryptogram_length_for(5)
        assert ecies_decrypt_bytes(ctx, data) == b"hello"

    def test_encrypt_only_context_encrypts(self, ctx, encrypt_only_ctx):
        data = ecies_encrypt_bytes(encrypt_only_ctx, b"to the recipient")
        assert ecies_decrypt(ctx, data) == b"to the recipient"


class TestRoundTrip:
    @pytest.mark.parametrize("length", range(1, 41))
    def test_lengths(self, ctx, length):
        plaintext = bytes((i * 7) & 0xFF for i in range(length))
        cryptogram = ecies_encrypt(ctx, plaintext)
        assert cryptogram.body_length == ctx.body_length_for(length)
        assert cryptogram.body_length % 16 == 0
        assert cryptogram.body_length > length
        assert ecies_decrypt(ctx, cryptogram) == plaintext

    def test_block_aligned_plaintext(self, ctx):
        cryptogram = ecies_encrypt(ctx, b"A" * 16)
        assert cryptogram.body_length == 32
        assert ecies_decrypt(ctx, cryptogram) == b"A" * 16

    def test_large_plaintext(self, ctx):
        plaintext = bytes(range(256)) * 400
        assert ecies_decrypt(ctx, ecies_encrypt(ctx, plaintext)) == plaintext

    @pytest.mark.parametrize("suite", [
        {"cipher": "aes-128-ctr"},
        {"cipher": "aes-192-ctr", "kdf_digest": "sha384"},
        {"cipher": "aes-192-cbc", "kdf_digest": "sha384"},
        {"cipher": "aes-256-ctr", "kdf_digest": "sha512", "mac_digest": "sha512"},
        {"cipher": "camellia-128-cbc"},
        {"cipher": "aes-128-cbc", "mac_digest": "sha3-256", "kdf_digest": "sha3-256"},
    ])
    def test_suites(self, ctx, suite):
        configured = ctx.reconfigure(**suite)
        cryptogram = ecies_encrypt(configured, b"suite check")
        assert cryptogram.mac_length == configured.mac_length
        assert ecies_decrypt(configured, cryptogram) == b"suite check"

    def test_stream_mode_body_equals_plaintext_length(self, ctx):
        configured = ctx.reconfigure(cipher="aes-128-ctr")
        cryptogram = ecies_encrypt(configured, b"hello")
        assert cryptogram.body_length == 5
        assert ecies_decrypt(configured, cryptogram) == b"hello"

    @pytest.mark.parametrize("curve", [ec.SECP384R1(), ec.SECP521R1(), ec.SECP256K1()])
    def test_other_curves(self, curve):
        ctx = EciesContext.from_private_key(ec.generate_private_key(curve))
        cryptogram = ecies_encrypt(ctx, b"curve check")
        assert cryptogram.key_length == ctx.ephemeral_key_octet_length
        assert ecies_decrypt(ctx, cryptogram) == b"curve check"

    def test_kdf_shared_info(self, ctx):
        tagged = ctx.reconfigure(kdf_shared_info=b"session-42")
        data = ecies_encrypt_bytes(tagged, b"hello")
        assert ecies_decrypt(tagged, data) == b"hello"
        with pytest.raises(AuthenticationError):
            ecies_decrypt(ctx, data)

    def test_fresh_ephemeral_key_per_message(self, ctx):
        first = ecies_encrypt(ctx, b"hello")
        second = ecies_encrypt(ctx, b"hello")
        assert bytes(first.key_data) != bytes(second.key_data)
        assert bytes(first.body_data) != bytes(second.body_data)

    def test_memoryview_plaintext(self, ctx):
        data = memoryview(bytearray(b"hello"))
        assert ecies_decrypt(ctx, ecies_encrypt(ctx, data)) == b"hello"


class TestTamperDetection:
    def test_every_body_and_tag_byte(self, ctx):
        """A single flipped bit anywhere in body or tag is rejected"""
        data = ecies_encrypt_bytes(ctx, b"attack at dawn")
        for index in range(ctx.ephemeral_key_octet_length, len(data)):
            with pytest.raises(AuthenticationError):
                ecies_decrypt(ctx, _flip(data, index))

    def test_key_field_corruption(self, ctx):
        data = ecies_encrypt_bytes(ctx, b"attack at dawn")
        for index in range(ctx.ephemeral_key_octet_length):
            with pytest.raises((KeyReconstructionError, AuthenticationError)):
                ecies_decrypt(ctx, _flip(data, index))

    def test_compression_prefix_flip(self, ctx):
        """0x02 <-> 0x03 decodes to the negated point, which must not authenticate"""
        data = ecies_encrypt_bytes(ctx, b"hello")
        with pytest.raises(AuthenticationError):
            ecies_decrypt(ctx, _flip(data, 0))

    def test_no_decryption_before_mac_check(self, recording_ctx, recording_provider):
        """A bad tag stops decryption before the cipher is ever called"""
        data = ecies_encrypt_bytes(recording_ctx, b"hello")
        recording_provider.calls.clear()

        with pytest.raises(AuthenticationError):
            ecies_decrypt(recording_ctx, _flip(data, len(data) - 1))

        assert "mac_verify" in recording_provider.calls
        assert "symmetric_decrypt" not in recording_provider.calls

    def test_decrypt_call_order(self, recording_ctx, recording_provider):
        data = ecies_encrypt_bytes(recording_ctx, b"hello")
        recording_provider.calls.clear()
        ecies_decrypt(recording_ctx, data)
        assert recording_provider.calls == [
            "compute_shared_secret", "derive_key", "mac_verify", "symmetric_decrypt"
        ]

    def test_encrypt_call_order(self, recording_ctx, recording_provider):
        ecies_encrypt(recording_ctx, b"hello")
        assert recording_provider.calls == [
            "generate_ephemeral_keypair", "compute_shared_secret", "derive_key",
            "symmetric_encrypt", "mac_compute",
        ]

    def test_wrong_recipient(self, ctx, other_key):
        data = ecies_encrypt_bytes(ctx, b"hello")
        wrong = EciesContext.from_private_key(other_key)
        with pytest.raises(AuthenticationError):
            ecies_decrypt(wrong, data)

    def test_truncated_tag(self, ctx):
        data = ecies_encrypt_bytes(ctx, b"hello")
        with pytest.raises(AuthenticationError):
            ecies_decrypt(ctx, data[:-1])

    def test_authentication_error_is_decryption_error(self, ctx):
        data = ecies_encrypt_bytes(ctx, b"hello")
        with pytest.raises(DecryptionError) as exc_info:
            ecies_decrypt(ctx, _flip(data, 40))
        assert exc_info.value.kind is ErrorKind.AUTHENTICATION_FAILURE


class TestKeyMaterialCheck:
    """aes-256 needs 64 bytes of envelope key; SHA-256 KDF yields 32"""

    @pytest.fixture
    def short_kdf_ctx(self, recording_ctx):
        return recording_ctx.reconfigure(cipher="aes-256-cbc")

    def test_encrypt_rejected(self, short_kdf_ctx, recording_provider):
        with pytest.raises(InvalidArgumentError, match="enough envelope key material"):
            ecies_encrypt(short_kdf_ctx, b"hello")
        assert recording_provider.calls == []

    def test_decrypt_rejected(self, short_kdf_ctx, recording_provider):
        with pytest.raises(InvalidArgumentError, match="enough envelope key material"):
            ecies_decrypt(short_kdf_ctx, bytes(81))
        assert recording_provider.calls == []


class TestArguments:
    @pytest.mark.parametrize("plaintext", [b"", bytearray(), None, "hello", 12345])
    def test_bad_plaintext(self, ctx, plaintext):
        with pytest.raises(InvalidArgumentError):
            ecies_encrypt(ctx, plaintext)

    def test_missing_context(self):
        with pytest.raises(InvalidArgumentError, match="context"):
            ecies_encrypt(None, b"hello")
        with pytest.raises(InvalidArgumentError, match="context"):
            ecies_decrypt(None, bytes(81))

    def test_missing_cryptogram(self, ctx):
        with pytest.raises(InvalidArgumentError, match="cryptogram is required"):
            ecies_decrypt(ctx, None)

    def test_encrypt_only_context_cannot_decrypt(self, ctx, encrypt_only_ctx):
        data = ecies_encrypt_bytes(ctx, b"hello")
        with pytest.raises(InvalidArgumentError, match="private key"):
            ecies_decrypt(encrypt_only_ctx, data)

    @pytest.mark.parametrize("size", [0, 33, 65])
    def test_cryptogram_without_body(self, ctx, size):
        with pytest.raises(InvalidArgumentError):
            ecies_decrypt(ctx, bytes(size))

    def test_layout_mismatch(self, ctx):
        foreign = Cryptogram(49, 48, 16)
        with pytest.raises(InvalidArgumentError, match="layout"):
            ecies_decrypt(ctx, foreign)

    def test_errors_share_base_class(self, ctx):
        with pytest.raises(EciesError):
            ecies_encrypt(ctx, b"")
        with pytest.raises(ValueError):
            ecies_encrypt(ctx, b"")


class TestEciesCipher:
    def test_round_trip(self, recipient_key):
        sender = EciesCipher.for_recipient(recipient_key.public_key())
        receiver = EciesCipher.from_private_key(recipient_key)
        data = sender.encrypt(b"hello")
        assert receiver.decrypt(data) == b"hello"

    def test_parse(self, recipient_key):
        cipher = EciesCipher.from_private_key(recipient_key)
        parsed = cipher.parse(cipher.encrypt(b"hello"))
        assert parsed.body_length == 16
        assert cipher.decrypt(parsed) == b"hello"

    def test_requires_context(self):
        with pytest.raises(InvalidArgumentError):
            EciesCipher(None)


class TestConcurrency:
    def test_shared_context_across_threads(self, ctx):
        """One immutable context, many concurrent encrypt/decrypt calls"""
        def work(i):
            plaintext = f"message {i}".encode()
            return ecies_decrypt(ctx, ecies_encrypt(ctx, plaintext)) == plaintext

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(work, range(64)))

        assert all(results)
        assert get_metrics_collector().get_counters()["total_operations"] == 128


class TestMetrics:
    def test_success_and_failure_recorded(self, ctx):
        data = ecies_encrypt_bytes(ctx, b"hello")
        ecies_decrypt(ctx, data)
        with pytest.raises(AuthenticationError):
            ecies_decrypt(ctx, _flip(data, 40))

        counters = get_metrics_collector().get_counters()
        assert counters["encrypt_operations"] == 1
        assert counters["decrypt_operations"] == 2
        assert counters["failed_operations"] == 1
        assert counters["authentication_failures"] == 1

        stats = get_metrics_collector().get_stats("encrypt")
        assert stats.total_payload_bytes == 5

    def test_invalid_argument_recorded(self, ctx):
        with pytest.raises(InvalidArgumentError):
            ecies_encrypt(ctx, b"")
        errors = get_metrics_collector().get_recent_errors()
        assert errors[0].error_kind == "invalid_argument"
        assert errors[0].suite == ctx.suite_label
