"""
Envelope Key Tests

COVERAGE:
- Encrypt-side and decrypt-side derivations agree
- Ephemeral public key written in compressed form
- Fresh ephemeral key per message
- Invalid key fields rejected with KeyReconstructionError
- Shared secret buffers are released
"""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.kdf.x963kdf import X963KDF
from cryptography.hazmat.primitives import hashes

from ecies_envelope.core.errors import InvalidArgumentError, KeyReconstructionError
from ecies_envelope.core.provider import DefaultCryptoProvider
from ecies_envelope.security.context import EciesContext
from ecies_envelope.security.cryptogram import Cryptogram
from ecies_envelope.security.envelope import (
    derive_envelope_key,
    prepare_envelope_key,
    restore_envelope_key,
)


class FixedEphemeralProvider(DefaultCryptoProvider):
    """Provider that always hands out the same ephemeral key"""

    def __init__(self, ephemeral):
        self.ephemeral = ephemeral
        self.secrets = []

    def generate_ephemeral_keypair(self, curve):
        return self.ephemeral

    def compute_shared_secret(self, private_key, public_key):
        secret = super().compute_shared_secret(private_key, public_key)
        self.secrets.append(secret)
        return secret


def _empty_cryptogram(ctx):
    return Cryptogram(ctx.ephemeral_key_octet_length, ctx.mac_length, ctx.body_length_for(1))


def _encoded(key):
    return DefaultCryptoProvider().encode_public_key(key.public_key())


class TestDerivation:
    def test_both_sides_agree(self, ctx):
        ephemeral = ec.generate_private_key(ec.SECP256R1())
        encoded = _encoded(ephemeral)
        with derive_envelope_key(ctx, ephemeral, ctx.public_key, encoded) as sender, \
                derive_envelope_key(ctx, ctx.private_key, ephemeral.public_key(), encoded) as receiver:
            assert len(sender) == ctx.kdf_output_length
            assert bytes(sender.view()) == bytes(receiver.view())

    def test_matches_ecdh_plus_x963kdf(self, ctx):
        """SharedInfo is the encoded ephemeral key followed by kdf_shared_info"""
        ephemeral = ec.generate_private_key(ec.SECP256R1())
        encoded = _encoded(ephemeral)
        tagged = ctx.reconfigure(kdf_shared_info=b"context")
        shared = ephemeral.exchange(ec.ECDH(), ctx.public_key)
        expected = X963KDF(
            algorithm=hashes.SHA256(), length=32, sharedinfo=encoded + b"context"
        ).derive(shared)
        with derive_envelope_key(tagged, ephemeral, ctx.public_key, encoded) as key:
            assert bytes(key.view()) == expected

    def test_shared_info_changes_key(self, ctx):
        ephemeral = ec.generate_private_key(ec.SECP256R1())
        encoded = _encoded(ephemeral)
        tagged = ctx.reconfigure(kdf_shared_info=b"context")
        with derive_envelope_key(ctx, ephemeral, ctx.public_key, encoded) as plain, \
                derive_envelope_key(tagged, ephemeral, ctx.public_key, encoded) as mixed:
            assert bytes(plain.view()) != bytes(mixed.view())

    def test_key_encoding_changes_key(self, ctx):
        """The negated point shares the ECDH x-coordinate but not the envelope key"""
        ephemeral = ec.generate_private_key(ec.SECP256R1())
        encoded = _encoded(ephemeral)
        flipped = bytes([encoded[0] ^ 0x01]) + encoded[1:]
        negated = ctx.provider.decode_public_key(ctx.curve, flipped)
        with derive_envelope_key(ctx, ephemeral, ctx.public_key, encoded) as sent, \
                derive_envelope_key(ctx, ctx.private_key, negated, flipped) as restored:
            assert bytes(sent.view()) != bytes(restored.view())

    def test_shared_secret_released(self, recipient_key):
        provider = FixedEphemeralProvider(ec.generate_private_key(ec.SECP256R1()))
        ctx = EciesContext.from_private_key(recipient_key, provider=provider)
        derive_envelope_key(ctx, provider.ephemeral, ctx.public_key, _encoded(provider.ephemeral)).release()
        assert provider.secrets and all(s.released for s in provider.secrets)


class TestPrepareRestore:
    def test_round_trip(self, recipient_key):
        ephemeral = ec.generate_private_key(ec.SECP256R1())
        provider = FixedEphemeralProvider(ephemeral)
        ctx = EciesContext.from_private_key(recipient_key, provider=provider)
        cryptogram = _empty_cryptogram(ctx)

        with prepare_envelope_key(ctx, cryptogram) as sent, \
                restore_envelope_key(ctx, cryptogram) as restored:
            assert bytes(sent.view()) == bytes(restored.view())

        assert cryptogram.key_data[0] in (0x02, 0x03)
        assert bytes(cryptogram.key_data) == provider.encode_public_key(ephemeral.public_key())

    def test_fresh_ephemeral_per_call(self, ctx):
        first, second = _empty_cryptogram(ctx), _empty_cryptogram(ctx)
        prepare_envelope_key(ctx, first).release()
        prepare_envelope_key(ctx, second).release()
        assert bytes(first.key_data) != bytes(second.key_data)

    def test_restore_requires_private_key(self, ctx, encrypt_only_ctx):
        cryptogram = _empty_cryptogram(ctx)
        prepare_envelope_key(ctx, cryptogram).release()
        with pytest.raises(InvalidArgumentError, match="private key"):
            restore_envelope_key(encrypt_only_ctx, cryptogram)

    @pytest.mark.parametrize("key_field", [
        b"\x04" + bytes(32),
        b"\x00" + bytes(32),
        b"\x02" + b"\xff" * 32,
    ])
    def test_invalid_key_field(self, ctx, key_field):
        cryptogram = _empty_cryptogram(ctx)
        cryptogram.write_key(key_field)
        with pytest.raises(KeyReconstructionError):
            restore_envelope_key(ctx, cryptogram)

    def test_key_from_another_curve(self, ctx):
        p384_point = DefaultCryptoProvider().encode_public_key(
            ec.generate_private_key(ec.SECP384R1()).public_key()
        )
        with pytest.raises(KeyReconstructionError, match="length"):
            ctx.provider.decode_public_key(ctx.curve, p384_point)
