"""Data models for Solana Umi."""

from solana_umi.models.account import (
    DataSizeFilter,
    MaybeAccount,
    MemcmpFilter,
    MissingAccount,
    RpcAccount,
)
from solana_umi.models.transaction import (
    BlockhashStrategy,
    BlockhashWithExpiryBlockHeight,
    ConfirmationStrategy,
    NonceStrategy,
    SimulationResult,
    TransactionStatus,
    TransactionWithMeta,
)

__all__ = [
    "DataSizeFilter",
    "MaybeAccount",
    "MemcmpFilter",
    "MissingAccount",
    "RpcAccount",
    "BlockhashStrategy",
    "BlockhashWithExpiryBlockHeight",
    "ConfirmationStrategy",
    "NonceStrategy",
    "SimulationResult",
    "TransactionStatus",
    "TransactionWithMeta",
]
