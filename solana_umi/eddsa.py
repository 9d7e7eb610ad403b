"""Key & address engine.

Ed25519 keypairs, message signatures and program derived addresses. Keypair
material stays inside :class:`Keypair`; callers get signatures out of it but
never the secret bytes.
"""

import hmac
from typing import NamedTuple, Optional, Sequence, Union

import base58
from solders.keypair import Keypair as SoldersKeypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_umi.constants import (
    MAX_SEED_LENGTH,
    MAX_SEEDS,
    SECRET_KEY_LENGTH,
    SEED_LENGTH,
    SIGNATURE_LENGTH,
)
from solana_umi.logging_config import get_logger
from solana_umi.utils.errors import (
    InvalidKeyMaterialError,
    InvalidSeedsError,
    NoValidBumpFoundError,
    SolanaUmiError,
    UnsupportedOperationError,
)
from solana_umi.utils.validation import PublicKeyInput, to_pubkey

logger = get_logger(__name__)

SeedInput = Union[bytes, bytearray, memoryview, str, Pubkey]


class Pda(NamedTuple):
    """A program derived address and the bump seed that produced it."""

    address: Pubkey
    bump: int


class Keypair:
    """Signing capability for one Ed25519 keypair.

    The secret half is held privately and cannot be read back, printed,
    pickled or copied out; use :meth:`sign` to produce signatures.
    """

    __slots__ = ("_inner",)

    def __init__(self, inner: SoldersKeypair):
        self._inner = inner

    @property
    def public_key(self) -> Pubkey:
        return self._inner.pubkey()

    def sign(self, message: bytes) -> Signature:
        """Sign ``message`` deterministically with the seed half of the secret."""
        return self._inner.sign_message(bytes(message))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keypair):
            return NotImplemented
        return hmac.compare_digest(bytes(self._inner), bytes(other._inner))

    def __hash__(self) -> int:
        return hash(bytes(self.public_key))

    def __repr__(self) -> str:
        return f"Keypair(public_key={self.public_key})"

    __str__ = __repr__

    def __reduce__(self):
        raise TypeError("Keypair material cannot be serialized")

    def __copy__(self):
        raise TypeError("Keypair material cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("Keypair material cannot be copied")


def generate_keypair() -> Keypair:
    """Generate a keypair from the operating system CSPRNG."""
    return Keypair(SoldersKeypair())


def keypair_from_seed(seed: bytes) -> Keypair:
    """Derive a keypair deterministically from a 32-byte seed.

    Raises:
        InvalidKeyMaterialError: If the seed is not exactly 32 bytes
    """
    if not isinstance(seed, (bytes, bytearray)) or len(seed) != SEED_LENGTH:
        raise InvalidKeyMaterialError(
            f"Seed must be {SEED_LENGTH} bytes",
            details={"length": len(seed) if isinstance(seed, (bytes, bytearray)) else None}
        )
    return Keypair(SoldersKeypair.from_seed(bytes(seed)))


def keypair_from_secret(secret_key: bytes) -> Keypair:
    """Import a 64-byte secret key (32-byte seed followed by the public key).

    Raises:
        InvalidKeyMaterialError: If the length is wrong or the embedded public
            key does not belong to the seed half
    """
    if not isinstance(secret_key, (bytes, bytearray)) or len(secret_key) != SECRET_KEY_LENGTH:
        raise InvalidKeyMaterialError(
            f"Secret key must be {SECRET_KEY_LENGTH} bytes",
            details={"length": len(secret_key) if isinstance(secret_key, (bytes, bytearray)) else None}
        )
    secret_key = bytes(secret_key)
    inner = SoldersKeypair.from_seed(secret_key[:SEED_LENGTH])
    if not hmac.compare_digest(bytes(inner.pubkey()), secret_key[SEED_LENGTH:]):
        raise InvalidKeyMaterialError(
            "Embedded public key does not match the secret key seed"
        )
    return Keypair(inner)


def keypair_from_base58(secret_key: str) -> Keypair:
    """Import a base58-encoded 64-byte secret key.

    Raises:
        InvalidKeyMaterialError: If the text is not valid base58 key material
    """
    try:
        raw = base58.b58decode(secret_key.strip())
    except (ValueError, AttributeError) as e:
        raise InvalidKeyMaterialError("Secret key is not valid base58") from e
    return keypair_from_secret(raw)


def keypair_from_file(path: Optional[str] = None) -> Keypair:
    """Loading keys from files is not available in this engine."""
    raise UnsupportedOperationError(
        "keypair_from_file",
        "filesystem key loading is disabled"
    )


def keypair_from_solana_config(path: Optional[str] = None) -> Keypair:
    """Loading keys from the Solana CLI config is not available in this engine."""
    raise UnsupportedOperationError(
        "keypair_from_solana_config",
        "filesystem key loading is disabled"
    )


def is_on_curve(public_key: PublicKeyInput) -> bool:
    """Whether the 32 bytes decode to a point on the Ed25519 curve."""
    return to_pubkey(public_key).is_on_curve()


def normalize_seed(seed: SeedInput) -> bytes:
    """Convert a seed to bytes; text is UTF-8 encoded, keys give their 32 bytes."""
    if isinstance(seed, Pubkey):
        return bytes(seed)
    if isinstance(seed, str):
        return seed.encode("utf-8")
    if isinstance(seed, (bytes, bytearray, memoryview)):
        return bytes(seed)
    raise InvalidSeedsError(
        f"Unsupported seed type: {type(seed).__name__}",
        details={"type": type(seed).__name__}
    )


def _normalize_seeds(seeds: Sequence[SeedInput]) -> list:
    normalized = [normalize_seed(seed) for seed in seeds]
    # The bump occupies one of the seed slots.
    if len(normalized) + 1 > MAX_SEEDS:
        raise InvalidSeedsError(
            f"At most {MAX_SEEDS - 1} seeds are allowed before the bump",
            details={"seed_count": len(normalized)}
        )
    for index, seed in enumerate(normalized):
        if len(seed) > MAX_SEED_LENGTH:
            raise InvalidSeedsError(
                f"Seed {index} exceeds {MAX_SEED_LENGTH} bytes",
                details={"index": index, "length": len(seed)}
            )
    return normalized


def _candidate_address(program_id: Pubkey, seeds: Sequence[bytes], bump: int) -> Optional[Pubkey]:
    """The address for one bump, or None when it lies on the curve."""
    try:
        return Pubkey.create_program_address([*seeds, bytes([bump])], program_id)
    except ValueError:
        return None


def create_program_address(program_id: PublicKeyInput, seeds: Sequence[SeedInput], bump: int) -> Pubkey:
    """Compute the program address for one specific bump.

    Raises:
        InvalidSeedsError: If the seeds are malformed or the address is on-curve
    """
    if isinstance(bump, bool) or not isinstance(bump, int) or not 0 <= bump <= 255:
        raise InvalidSeedsError("Bump must be an integer in [0, 255]", details={"bump": bump})
    program = to_pubkey(program_id)
    address = _candidate_address(program, _normalize_seeds(seeds), bump)
    if address is None:
        raise InvalidSeedsError(
            "Derived address lies on the Ed25519 curve",
            details={"program_id": str(program), "bump": bump}
        )
    return address


def find_program_address(program_id: PublicKeyInput, seeds: Sequence[SeedInput]) -> Pda:
    """Find the canonical program derived address for ``seeds``.

    Bumps are tried from 255 down to 0 and the first off-curve candidate is
    returned, so the result is fully determined by (program_id, seeds).

    Raises:
        InvalidSeedsError: If the seeds are malformed
        NoValidBumpFoundError: If every bump lands on the curve
    """
    program = to_pubkey(program_id)
    normalized = _normalize_seeds(seeds)
    for bump in range(255, -1, -1):
        address = _candidate_address(program, normalized, bump)
        if address is not None:
            return Pda(address, bump)
    logger.error(f"No viable bump seed for program {program} with {len(normalized)} seeds")
    raise NoValidBumpFoundError(str(program), len(normalized))


def sign(message: bytes, keypair: Keypair) -> Signature:
    """Sign a message with a keypair."""
    return keypair.sign(message)


def verify(message: bytes, signature: Union[Signature, bytes], public_key: PublicKeyInput) -> bool:
    """Verify an Ed25519 signature.

    Never raises: malformed signatures, keys or messages verify as False.
    """
    try:
        if not isinstance(signature, Signature):
            raw = bytes(signature)
            if len(raw) != SIGNATURE_LENGTH:
                return False
            signature = Signature(raw)
        return signature.verify(to_pubkey(public_key), bytes(message))
    except (SolanaUmiError, ValueError, TypeError):
        return False


class Eddsa:
    """The key engine as a single interface object for the context."""

    generate_keypair = staticmethod(generate_keypair)
    keypair_from_secret = staticmethod(keypair_from_secret)
    keypair_from_seed = staticmethod(keypair_from_seed)
    keypair_from_base58 = staticmethod(keypair_from_base58)
    keypair_from_file = staticmethod(keypair_from_file)
    keypair_from_solana_config = staticmethod(keypair_from_solana_config)
    is_on_curve = staticmethod(is_on_curve)
    create_program_address = staticmethod(create_program_address)
    find_program_address = staticmethod(find_program_address)
    sign = staticmethod(sign)
    verify = staticmethod(verify)
