"""Signer identities.

A signer is anything that can produce Ed25519 signatures for one public key.
Only :class:`KeypairSigner` holds key material, and it does so through the
opaque :class:`~solana_umi.eddsa.Keypair` capability.
"""

from typing import Iterable, List, Protocol, runtime_checkable

from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_umi.eddsa import Keypair, generate_keypair
from solana_umi.utils.errors import UnsupportedOperationError


@runtime_checkable
class Signer(Protocol):
    """Anything that can sign messages for ``public_key``."""

    @property
    def public_key(self) -> Pubkey:
        ...

    def sign_message(self, message: bytes) -> Signature:
        ...


class KeypairSigner:
    """Signer backed by a local keypair."""

    __slots__ = ("_keypair",)

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def public_key(self) -> Pubkey:
        return self._keypair.public_key

    def sign_message(self, message: bytes) -> Signature:
        return self._keypair.sign(message)

    def __repr__(self) -> str:
        return f"KeypairSigner({self.public_key})"


class NoopSigner:
    """A public key that stands in for a signer that signs elsewhere."""

    __slots__ = ("_public_key",)

    def __init__(self, public_key: Pubkey):
        self._public_key = public_key

    @property
    def public_key(self) -> Pubkey:
        return self._public_key

    def sign_message(self, message: bytes) -> Signature:
        raise UnsupportedOperationError(
            "sign_message",
            f"{self._public_key} is a placeholder signer"
        )

    def __repr__(self) -> str:
        return f"NoopSigner({self._public_key})"


def create_signer_from_keypair(keypair: Keypair) -> KeypairSigner:
    return KeypairSigner(keypair)


def generate_signer() -> KeypairSigner:
    """A signer for a brand-new random keypair, e.g. a new asset address."""
    return KeypairSigner(generate_keypair())


def unique_signers(signers: Iterable[Signer]) -> List[Signer]:
    """Drop signers that repeat a public key, keeping the first occurrence."""
    seen = set()
    result = []
    for signer in signers:
        key = bytes(signer.public_key)
        if key in seen:
            continue
        seen.add(key)
        result.append(signer)
    return result
