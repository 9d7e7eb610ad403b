"""Transaction-related data models."""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from solana.rpc.commitment import Commitment
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_umi.constants import COMMITMENT_LEVELS
from solana_umi.models.account import MaybeAccount
from solana_umi.utils.errors import ProgramError, SimulationFailureError


def commitment_rank(commitment: Optional[str]) -> int:
    """Position of a commitment level, weakest first; unknown levels rank -1."""
    if commitment is None:
        return -1
    try:
        return COMMITMENT_LEVELS.index(str(commitment))
    except ValueError:
        return -1


@dataclass(frozen=True)
class BlockhashWithExpiryBlockHeight:
    """A recent blockhash and the last block height at which it is accepted."""

    blockhash: Hash
    last_valid_block_height: int

    @classmethod
    def from_rpc(cls, value: Dict[str, Any]) -> "BlockhashWithExpiryBlockHeight":
        return cls(
            blockhash=Hash.from_string(value["blockhash"]),
            last_valid_block_height=int(value["lastValidBlockHeight"]),
        )


@dataclass(frozen=True)
class BlockhashStrategy:
    """Confirm until the chain passes ``last_valid_block_height``."""

    blockhash: Hash
    last_valid_block_height: int
    type: str = field(default="blockhash", init=False)

    @classmethod
    def from_latest(cls, latest: BlockhashWithExpiryBlockHeight) -> "BlockhashStrategy":
        return cls(latest.blockhash, latest.last_valid_block_height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "blockhash": str(self.blockhash),
            "last_valid_block_height": self.last_valid_block_height,
        }


@dataclass(frozen=True)
class NonceStrategy:
    """Confirm until the durable nonce stored in ``nonce_account_pubkey`` moves on."""

    nonce_account_pubkey: Pubkey
    nonce_value: Hash
    min_context_slot: Optional[int] = None
    type: str = field(default="nonceAccount", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "nonce_account_pubkey": str(self.nonce_account_pubkey),
            "nonce_value": str(self.nonce_value),
            "min_context_slot": self.min_context_slot,
        }


ConfirmationStrategy = Union[BlockhashStrategy, NonceStrategy]


@dataclass(frozen=True)
class TransactionStatus:
    """One entry of a ``getSignatureStatuses`` response."""

    slot: int
    confirmations: Optional[int]
    err: Any
    commitment: Optional[Commitment]

    @classmethod
    def from_rpc(cls, value: Dict[str, Any]) -> "TransactionStatus":
        status = value.get("confirmationStatus")
        return cls(
            slot=int(value.get("slot", 0)),
            confirmations=value.get("confirmations"),
            err=value.get("err"),
            commitment=Commitment(status) if status else None,
        )

    def reached(self, commitment: str) -> bool:
        """Whether this status is at least as strong as ``commitment``."""
        return commitment_rank(self.commitment) >= commitment_rank(commitment)


@dataclass(frozen=True)
class TransactionWithMeta:
    """A landed transaction as returned by ``getTransaction`` (base64 encoding)."""

    signature: Signature
    slot: int
    block_time: Optional[int]
    raw_transaction: bytes
    fee: int
    err: Any
    log_messages: List[str] = field(default_factory=list)
    pre_balances: List[int] = field(default_factory=list)
    post_balances: List[int] = field(default_factory=list)
    compute_units_consumed: Optional[int] = None

    @classmethod
    def from_rpc(cls, signature: Signature, value: Dict[str, Any]) -> "TransactionWithMeta":
        meta = value.get("meta") or {}
        tx_field = value.get("transaction")
        raw = b""
        if isinstance(tx_field, list) and tx_field:
            raw = base64.b64decode(tx_field[0])
        return cls(
            signature=signature,
            slot=int(value.get("slot", 0)),
            block_time=value.get("blockTime"),
            raw_transaction=raw,
            fee=int(meta.get("fee", 0)),
            err=meta.get("err"),
            log_messages=list(meta.get("logMessages") or []),
            pre_balances=list(meta.get("preBalances") or []),
            post_balances=list(meta.get("postBalances") or []),
            compute_units_consumed=meta.get("computeUnitsConsumed"),
        )


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a dry run. Nothing in it was committed to the ledger."""

    err: Any
    logs: List[str] = field(default_factory=list)
    units_consumed: Optional[int] = None
    accounts: List[MaybeAccount] = field(default_factory=list)
    return_data: Optional[Dict[str, Any]] = None
    context_slot: Optional[int] = None
    program_error: Optional[ProgramError] = None

    @property
    def succeeded(self) -> bool:
        return self.err is None

    def raise_for_error(self) -> None:
        """Raise the resolved program error, or a generic simulation failure."""
        if self.err is None:
            return
        if self.program_error is not None:
            raise self.program_error
        raise SimulationFailureError(self.err, self.logs)
