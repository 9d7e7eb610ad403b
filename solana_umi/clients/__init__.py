"""JSON-RPC clients for Solana nodes."""

from solana_umi.clients.base_client import BaseSolanaClient
from solana_umi.clients.ledger_client import LedgerClient

__all__ = ["BaseSolanaClient", "LedgerClient"]
