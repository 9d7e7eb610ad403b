"""Unit tests for the key and address engine."""

import copy
import pickle

import pytest
from solders.keypair import Keypair as SoldersKeypair
from solders.pubkey import Pubkey

from solana_umi import eddsa
from solana_umi.constants import TOKEN_PROGRAM_ID
from solana_umi.eddsa import (
    Eddsa,
    Pda,
    create_program_address,
    find_program_address,
    generate_keypair,
    is_on_curve,
    keypair_from_base58,
    keypair_from_file,
    keypair_from_secret,
    keypair_from_seed,
    keypair_from_solana_config,
    sign,
    verify,
)
from solana_umi.utils.errors import (
    InvalidKeyMaterialError,
    InvalidPublicKeyError,
    InvalidSeedsError,
    NoValidBumpFoundError,
    UnsupportedOperationError,
)

SEED = bytes(range(32))
PROGRAM_ID = Pubkey.from_string(TOKEN_PROGRAM_ID)


class TestKeypairs:
    """Test suite for keypair creation and handling."""

    def test_seed_is_deterministic(self):
        """The same seed always yields the same keypair."""
        first = keypair_from_seed(SEED)
        second = keypair_from_seed(SEED)

        assert first == second
        assert first.public_key == second.public_key
        assert first.sign(b"hello") == second.sign(b"hello")

    def test_seed_matches_reference_derivation(self):
        assert keypair_from_seed(SEED).public_key == SoldersKeypair.from_seed(SEED).pubkey()

    @pytest.mark.parametrize("seed", [b"", bytes(31), bytes(33), "x" * 32])
    def test_seed_must_be_32_bytes(self, seed):
        with pytest.raises(InvalidKeyMaterialError):
            keypair_from_seed(seed)

    def test_secret_round_trip_through_reference_keypair(self):
        """A 64-byte secret imports to the same public key."""
        reference = SoldersKeypair.from_seed(SEED)

        keypair = keypair_from_secret(bytes(reference))

        assert keypair.public_key == reference.pubkey()

    def test_secret_with_wrong_length_is_rejected(self):
        with pytest.raises(InvalidKeyMaterialError):
            keypair_from_secret(bytes(63))

    def test_secret_with_mismatched_public_half_is_rejected(self):
        """The embedded public key must belong to the seed half."""
        other = SoldersKeypair.from_seed(bytes([5] * 32))
        forged = SEED + bytes(other.pubkey())

        with pytest.raises(InvalidKeyMaterialError):
            keypair_from_secret(forged)

    def test_base58_secret(self):
        reference = SoldersKeypair.from_seed(SEED)

        keypair = keypair_from_base58(str(reference))

        assert keypair.public_key == reference.pubkey()

    def test_base58_secret_rejects_garbage(self):
        with pytest.raises(InvalidKeyMaterialError):
            keypair_from_base58("not base58 at all 0OIl")

    def test_generated_keypairs_differ(self):
        assert generate_keypair().public_key != generate_keypair().public_key

    def test_secret_is_not_exposed(self):
        """The keypair prints only its public key and cannot be serialized."""
        keypair = keypair_from_seed(SEED)
        secret_text = str(SoldersKeypair.from_seed(SEED))

        assert secret_text not in repr(keypair)
        assert str(keypair.public_key) in repr(keypair)
        with pytest.raises(TypeError):
            pickle.dumps(keypair)
        with pytest.raises(TypeError):
            copy.deepcopy(keypair)
        with pytest.raises(AttributeError):
            keypair.secret = b""

    def test_file_loading_is_unsupported(self, tmp_path):
        """File-based loading fails without touching the filesystem."""
        path = tmp_path / "id.json"

        with pytest.raises(UnsupportedOperationError):
            keypair_from_file(str(path))
        with pytest.raises(UnsupportedOperationError):
            keypair_from_solana_config()
        assert not path.exists()


class TestSignatures:
    """Test suite for signing and verification."""

    @pytest.fixture
    def keypair(self):
        return keypair_from_seed(SEED)

    def test_sign_is_deterministic(self, keypair):
        assert sign(b"message", keypair) == sign(b"message", keypair)

    def test_sign_then_verify(self, keypair):
        message = b"transfer 1 SOL"

        signature = sign(message, keypair)

        assert verify(message, signature, keypair.public_key)

    def test_flipping_any_message_byte_fails(self, keypair):
        message = b"mint one asset"
        signature = sign(message, keypair)

        for index in range(len(message)):
            tampered = bytearray(message)
            tampered[index] ^= 0x01
            assert not verify(bytes(tampered), signature, keypair.public_key)

    def test_flipping_any_signature_byte_fails(self, keypair):
        message = b"mint one asset"
        raw = bytes(sign(message, keypair))

        for index in range(len(raw)):
            tampered = bytearray(raw)
            tampered[index] ^= 0x80
            assert not verify(message, bytes(tampered), keypair.public_key)

    def test_wrong_public_key_fails(self, keypair):
        other = keypair_from_seed(bytes([9] * 32))
        signature = sign(b"message", keypair)

        assert not verify(b"message", signature, other.public_key)

    @pytest.mark.parametrize("signature", [b"", bytes(63), bytes(65), b"\x01" * 10])
    def test_malformed_signature_returns_false(self, keypair, signature):
        assert verify(b"message", signature, keypair.public_key) is False

    def test_malformed_public_key_returns_false(self, keypair):
        signature = sign(b"message", keypair)

        assert verify(b"message", signature, "not-a-key") is False


class TestProgramAddresses:
    """Test suite for program derived addresses."""

    @pytest.mark.parametrize("seeds", [
        [],
        [b""],
        [b"metadata"],
        [b"Talking", b"Squirrels"],
        [bytes(PROGRAM_ID), b"edition"],
        [b"x" * 32] * 15,
    ])
    def test_matches_reference_derivation(self, seeds):
        """Addresses and bumps match the solders implementation."""
        expected_address, expected_bump = Pubkey.find_program_address(seeds, PROGRAM_ID)

        pda = find_program_address(PROGRAM_ID, seeds)

        assert pda == Pda(expected_address, expected_bump)

    def test_is_deterministic(self):
        seeds = [b"collection", bytes([1, 2, 3])]

        assert find_program_address(PROGRAM_ID, seeds) == find_program_address(PROGRAM_ID, seeds)

    def test_address_is_off_curve(self):
        for index in range(20):
            pda = find_program_address(PROGRAM_ID, [b"seed", bytes([index])])
            assert not is_on_curve(pda.address)

    def test_ordinary_keys_are_on_curve(self):
        assert is_on_curve(keypair_from_seed(SEED).public_key)

    def test_string_and_key_seeds(self):
        """Text seeds are UTF-8 and key seeds contribute their 32 bytes."""
        owner = keypair_from_seed(SEED).public_key

        mixed = find_program_address(str(PROGRAM_ID), ["vault", owner])
        raw = find_program_address(PROGRAM_ID, [b"vault", bytes(owner)])

        assert mixed == raw

    def test_create_program_address_with_found_bump(self):
        pda = find_program_address(PROGRAM_ID, [b"escrow"])

        assert create_program_address(PROGRAM_ID, [b"escrow"], pda.bump) == pda.address

    def test_seed_longer_than_32_bytes_is_rejected(self):
        with pytest.raises(InvalidSeedsError):
            find_program_address(PROGRAM_ID, [b"x" * 33])

    def test_too_many_seeds_are_rejected(self):
        with pytest.raises(InvalidSeedsError):
            find_program_address(PROGRAM_ID, [b"s"] * 16)

    def test_on_curve_bump_is_rejected(self):
        """Bumps above the canonical one all land on the curve."""
        seeds = next(
            [b"vault", bytes([index])] for index in range(256)
            if find_program_address(PROGRAM_ID, [b"vault", bytes([index])]).bump < 255
        )

        with pytest.raises(InvalidSeedsError) as exc_info:
            create_program_address(PROGRAM_ID, seeds, 255)

        assert exc_info.value.details["bump"] == 255

    def test_invalid_bump_is_rejected(self):
        with pytest.raises(InvalidSeedsError):
            create_program_address(PROGRAM_ID, [b"escrow"], 256)

    def test_invalid_program_id_is_rejected(self):
        with pytest.raises(InvalidPublicKeyError):
            find_program_address("not-a-program", [b"seed"])

    def test_no_valid_bump_is_reported(self, monkeypatch):
        """Exhausting every bump raises instead of looping or crashing."""
        monkeypatch.setattr(eddsa, "_candidate_address", lambda program, seeds, bump: None)

        with pytest.raises(NoValidBumpFoundError) as exc_info:
            find_program_address(PROGRAM_ID, [b"seed"])

        assert exc_info.value.details["program_id"] == str(PROGRAM_ID)

    def test_eddsa_interface_exposes_engine(self):
        assert Eddsa.find_program_address(PROGRAM_ID, [b"a"]) == find_program_address(PROGRAM_ID, [b"a"])
        assert Eddsa.verify(b"m", Eddsa.sign(b"m", keypair_from_seed(SEED)), keypair_from_seed(SEED).public_key)
