"""The context object that wires the client together.

A :class:`Context` holds one concrete implementation of each interface:
key engine, ledger client, serializer, program registry and the signing
identities. It is assembled once and never mutated afterwards.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Optional

import httpx
from solders.signature import Signature

from solana_umi.clients.ledger_client import LedgerClient
from solana_umi.cluster import explorer_link
from solana_umi.config import SolanaConfig, get_solana_config
from solana_umi.eddsa import Eddsa, keypair_from_base58
from solana_umi.logging_config import get_logger
from solana_umi.programs import ProgramRepository
from solana_umi.serializer import TransactionSerializer
from solana_umi.signers import KeypairSigner, Signer
from solana_umi.utils.errors import ConfigurationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class Context:
    rpc: LedgerClient
    transactions: TransactionSerializer
    programs: ProgramRepository
    eddsa: Eddsa = field(default_factory=Eddsa)
    identity: Optional[Signer] = None
    payer: Optional[Signer] = None

    def with_identity(self, identity: Signer, use_as_payer: bool = True) -> "Context":
        """A copy of this context that signs as ``identity``."""
        return dataclasses.replace(
            self,
            identity=identity,
            payer=identity if use_as_payer else self.payer
        )

    def with_payer(self, payer: Signer) -> "Context":
        return dataclasses.replace(self, payer=payer)

    def explorer_link(self, signature: Signature) -> str:
        return explorer_link(signature, self.rpc.get_cluster(), self.rpc.get_endpoint())

    async def close(self) -> None:
        await self.rpc.close()

    async def __aenter__(self) -> "Context":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_umi(
    endpoint: Optional[str] = None,
    identity: Optional[Signer] = None,
    config: Optional[SolanaConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    programs: Optional[ProgramRepository] = None
) -> Context:
    """Assemble a context.

    Args:
        endpoint: RPC URL; overrides the configured one
        identity: Signer used as identity and fee payer
        config: Base configuration, defaults to the environment
        http_client: Shared httpx client, mainly for tests
        programs: Program registry, defaults to the well-known programs

    Returns:
        A ready-to-use context
    """
    config = config or get_solana_config()
    if endpoint is not None and endpoint != config.rpc_url:
        config = dataclasses.replace(config, rpc_url=endpoint)

    programs = programs or ProgramRepository()
    serializer = TransactionSerializer()
    rpc = LedgerClient(config, http_client, programs=programs, serializer=serializer)
    logger.info(f"Created context for {rpc.get_cluster()} at {config.rpc_url}")
    return Context(
        rpc=rpc,
        transactions=serializer,
        programs=programs,
        identity=identity,
        payer=identity,
    )


def create_umi_server(
    endpoint: Optional[str] = None,
    secret_key: Optional[str] = None,
    config: Optional[SolanaConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None
) -> Context:
    """Assemble a context that signs with a server-held keypair.

    The secret is a base58 string, taken from ``SOLANA_SECRET_KEY`` when not
    given. It is turned into a signer here and not kept anywhere else.

    Raises:
        ConfigurationError: If no secret key is available
        InvalidKeyMaterialError: If the secret is not a valid keypair
    """
    config = config or get_solana_config()
    secret = secret_key or config.secret_key
    if not secret:
        raise ConfigurationError(
            "A server context needs a secret key",
            details={"env_var": "SOLANA_SECRET_KEY"}
        )
    signer = KeypairSigner(keypair_from_base58(secret))
    return create_umi(endpoint, identity=signer, config=config, http_client=http_client)
