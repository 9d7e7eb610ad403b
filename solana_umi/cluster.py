"""Cluster detection and explorer links."""

from typing import Optional
from urllib.parse import quote, urlparse

from solders.signature import Signature

from solana_umi.constants import EXPLORER_URL

_KNOWN_HOSTS = {
    "api.mainnet-beta.solana.com": "mainnet-beta",
    "metaplex.rpcpool.com": "mainnet-beta",
    "api.devnet.solana.com": "devnet",
    "metaplex.devnet.rpcpool.com": "devnet",
    "api.testnet.solana.com": "testnet",
    "localhost": "localnet",
    "127.0.0.1": "localnet",
    "0.0.0.0": "localnet",
}


def resolve_cluster_from_endpoint(endpoint: str) -> str:
    """Infer the cluster from an RPC endpoint URL.

    Well-known hosts map directly. Otherwise a host naming ``devnet``,
    ``testnet`` or ``mainnet`` is taken at its word, and anything else is
    ``custom``.
    """
    host = (urlparse(endpoint).hostname or "").lower()
    if host in _KNOWN_HOSTS:
        return _KNOWN_HOSTS[host]
    for label in ("devnet", "testnet"):
        if label in host:
            return label
    if "mainnet" in host:
        return "mainnet-beta"
    return "custom"


def explorer_link(
    signature: Signature,
    cluster: str = "mainnet-beta",
    endpoint: Optional[str] = None
) -> str:
    """Solana Explorer URL for a transaction.

    Args:
        signature: The transaction signature
        cluster: Cluster name as returned by :func:`resolve_cluster_from_endpoint`
        endpoint: RPC URL, needed for ``localnet`` and ``custom`` clusters
    """
    url = f"{EXPLORER_URL}/tx/{signature}"
    if cluster == "mainnet-beta":
        return url
    if cluster in ("devnet", "testnet"):
        return f"{url}?cluster={cluster}"
    if endpoint:
        return f"{url}?cluster=custom&customUrl={quote(endpoint, safe='')}"
    return f"{url}?cluster=custom"
