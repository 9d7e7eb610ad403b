"""Constants used throughout the Solana Umi client core.

This module defines common constants to avoid duplication and ensure consistency.
"""

# Native program IDs
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
COMPUTE_BUDGET_PROGRAM_ID = "ComputeBudget111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
MEMO_PROGRAM_ID = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"
MPL_CORE_PROGRAM_ID = "CoREENxT6tW1HoK8ypY1SxRMZTcVPm7R94rH4PZNhX7d"

# Mapping of program IDs to human-readable names
PROGRAM_NAMES = {
    SYSTEM_PROGRAM_ID: "System Program",
    COMPUTE_BUDGET_PROGRAM_ID: "Compute Budget Program",
    TOKEN_PROGRAM_ID: "Token Program",
    TOKEN_2022_PROGRAM_ID: "Token-2022 Program",
    ASSOCIATED_TOKEN_PROGRAM_ID: "Associated Token Program",
    MEMO_PROGRAM_ID: "Memo Program",
    MPL_CORE_PROGRAM_ID: "MPL Core",
}

# Native currency
LAMPORTS_PER_SOL = 1_000_000_000
MAX_LAMPORTS = 2**64 - 1
SOL_DECIMALS = 9
SOL_SYMBOL = "SOL"

# Every account is charged rent for this many bytes on top of its data
ACCOUNT_HEADER_SIZE = 128

# Program derived addresses
MAX_SEED_LENGTH = 32
MAX_SEEDS = 16

# Ed25519 sizes
PUBLIC_KEY_LENGTH = 32
SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64
SIGNATURE_LENGTH = 64

# Durable nonce account layout: version u32, state u32, authority, nonce, fee calculator
NONCE_ACCOUNT_LENGTH = 80
NONCE_VALUE_OFFSET = 40

# Commitment levels, weakest first
COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")

# Well-known cluster endpoints
CLUSTER_ENDPOINTS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "localnet": "http://127.0.0.1:8899",
}

EXPLORER_URL = "https://explorer.solana.com"

# JSON-RPC
MAX_MULTIPLE_ACCOUNTS = 100
RETRIABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
RPC_RATE_LIMIT_CODE = -32005
