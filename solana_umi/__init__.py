"""Solana Umi Package.

Client-side toolkit for Solana: keypairs and program-derived addresses,
account reads, transaction submission and simulation, confirmation
tracking and program error resolution.
"""

from solana_umi.amounts import SolAmount, lamports, sol
from solana_umi.builder import TransactionBuilder
from solana_umi.clients.ledger_client import LedgerClient
from solana_umi.cluster import explorer_link, resolve_cluster_from_endpoint
from solana_umi.confirmation import ConfirmationResult, ConfirmationState, ConfirmationTracker
from solana_umi.context import Context, create_umi, create_umi_server
from solana_umi.eddsa import (
    Eddsa,
    Keypair,
    Pda,
    find_program_address,
    generate_keypair,
    is_on_curve,
    keypair_from_secret,
    keypair_from_seed,
    sign,
    verify,
)
from solana_umi.models.transaction import BlockhashStrategy, NonceStrategy
from solana_umi.programs import Program, ProgramRepository
from solana_umi.signers import KeypairSigner, NoopSigner, Signer, generate_signer
from solana_umi.utils.errors import ProgramError, SolanaUmiError

__version__ = "0.1.0"
__author__ = "Solana Umi Contributors"
__email__ = "dev@solana-umi.invalid"

__all__ = [
    "BlockhashStrategy",
    "ConfirmationResult",
    "ConfirmationState",
    "ConfirmationTracker",
    "Context",
    "Eddsa",
    "Keypair",
    "KeypairSigner",
    "LedgerClient",
    "NoopSigner",
    "NonceStrategy",
    "Pda",
    "Program",
    "ProgramError",
    "ProgramRepository",
    "Signer",
    "SolAmount",
    "SolanaUmiError",
    "TransactionBuilder",
    "create_umi",
    "create_umi_server",
    "explorer_link",
    "find_program_address",
    "generate_keypair",
    "generate_signer",
    "is_on_curve",
    "keypair_from_secret",
    "keypair_from_seed",
    "lamports",
    "resolve_cluster_from_endpoint",
    "sign",
    "sol",
    "verify",
]
