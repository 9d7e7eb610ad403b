"""Account snapshots and program-account filters."""

import base64
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import base58
from solana.rpc.types import DataSliceOpts, MemcmpOpts
from solders.pubkey import Pubkey

from solana_umi.amounts import SolAmount
from solana_umi.utils.errors import ValidationError


@dataclass(frozen=True)
class RpcAccount:
    """An account that exists on the ledger."""

    public_key: Pubkey
    owner: Pubkey
    lamports: SolAmount
    data: bytes
    executable: bool
    rent_epoch: Optional[int] = None

    @property
    def exists(self) -> bool:
        return True


@dataclass(frozen=True)
class MissingAccount:
    """No account is stored at ``public_key``. A valid outcome, not an error."""

    public_key: Pubkey

    @property
    def exists(self) -> bool:
        return False


MaybeAccount = Union[RpcAccount, MissingAccount]


def parse_account_info(public_key: Pubkey, info: Optional[Dict[str, Any]]) -> MaybeAccount:
    """Build a snapshot from a base64-encoded ``AccountInfo`` JSON object.

    Args:
        public_key: Address the info was fetched for
        info: The RPC value, or None when no account exists

    Returns:
        RpcAccount or MissingAccount
    """
    if info is None:
        return MissingAccount(public_key)

    data_field = info.get("data")
    if isinstance(data_field, list) and data_field:
        if len(data_field) > 1 and data_field[1] != "base64":
            raise ValidationError(
                f"Unsupported account data encoding: {data_field[1]}",
                details={"public_key": str(public_key)}
            )
        data = base64.b64decode(data_field[0])
    elif isinstance(data_field, str):
        data = base64.b64decode(data_field)
    else:
        data = b""

    rent_epoch = info.get("rentEpoch")
    return RpcAccount(
        public_key=public_key,
        owner=Pubkey.from_string(info["owner"]),
        lamports=SolAmount(int(info["lamports"])),
        data=data,
        executable=bool(info.get("executable", False)),
        rent_epoch=int(rent_epoch) if rent_epoch is not None else None,
    )


@dataclass(frozen=True)
class DataSizeFilter:
    """Match accounts whose data is exactly ``size`` bytes."""

    size: int

    def to_rpc(self) -> Dict[str, Any]:
        return {"dataSize": self.size}


@dataclass(frozen=True)
class MemcmpFilter:
    """Match accounts whose data contains ``data`` at ``offset``."""

    offset: int
    data: bytes

    @property
    def opts(self) -> MemcmpOpts:
        return MemcmpOpts(offset=self.offset, bytes=base58.b58encode(self.data).decode("ascii"))

    def to_rpc(self) -> Dict[str, Any]:
        opts = self.opts
        return {"memcmp": {"offset": opts.offset, "bytes": opts.bytes}}


ProgramAccountFilter = Union[DataSizeFilter, MemcmpFilter]


def data_slice_to_rpc(data_slice: Optional[DataSliceOpts]) -> Optional[Dict[str, int]]:
    if data_slice is None:
        return None
    return {"offset": data_slice.offset, "length": data_slice.length}
