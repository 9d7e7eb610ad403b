"""Common test fixtures for Solana Umi tests.

This module provides fixtures that can be reused across different test modules.
The JSON-RPC wire is faked with ``httpx.MockTransport`` so the real client
code (framing, retries, parsing) runs in every ledger test.
"""

import base64
import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer

from solana_umi.clients.ledger_client import LedgerClient
from solana_umi.config import SolanaConfig
from solana_umi.context import Context
from solana_umi.eddsa import keypair_from_seed
from solana_umi.programs import ProgramRepository
from solana_umi.serializer import TransactionSerializer
from solana_umi.signers import KeypairSigner

SYSTEM_PROGRAM = "11111111111111111111111111111111"
BLOCKHASH = str(Hash(bytes([9] * 32)))


class RpcFailure:
    """A JSON-RPC ``error`` member to return instead of a result."""

    def __init__(self, code: int, message: str, data: Optional[Dict[str, Any]] = None):
        self.error = {"code": code, "message": message}
        if data is not None:
            self.error["data"] = data


class RpcMock:
    """Scripted JSON-RPC node.

    Responses are registered per method. A list is consumed one entry per
    call (the last entry repeats); a callable receives the params. Entries
    may be a result value, an :class:`RpcFailure` or an ``httpx.Response``.
    """

    def __init__(self):
        self.responses: Dict[str, Any] = {}
        self.calls: List[Dict[str, Any]] = []

    def on(self, method: str, *responses: Any) -> "RpcMock":
        self.responses[method] = list(responses)
        return self

    def calls_to(self, method: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["method"] == method]

    def _next(self, method: str, params: List[Any]) -> Any:
        if method not in self.responses:
            raise AssertionError(f"Unexpected RPC call: {method}")
        queue = self.responses[method]
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(response) and not isinstance(response, (RpcFailure, httpx.Response)):
            response = response(params)
        return response

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.calls.append(payload)
        response = self._next(payload["method"], payload["params"])
        if isinstance(response, httpx.Response):
            return response
        body: Dict[str, Any] = {"jsonrpc": "2.0", "id": payload["id"]}
        if isinstance(response, RpcFailure):
            body["error"] = response.error
        else:
            body["result"] = response
        return httpx.Response(200, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def account_info(lamports: int, data: bytes = b"", owner: str = SYSTEM_PROGRAM,
                 executable: bool = False) -> Dict[str, Any]:
    """An ``AccountInfo`` JSON object as the node returns it (base64)."""
    return {
        "lamports": lamports,
        "owner": owner,
        "data": [base64.b64encode(data).decode("ascii"), "base64"],
        "executable": executable,
        "rentEpoch": 361,
        "space": len(data),
    }


def with_context(value: Any, slot: int = 1000) -> Dict[str, Any]:
    return {"context": {"slot": slot}, "value": value}


def signature_status(slot: int = 1000, status: str = "confirmed", err: Any = None) -> Dict[str, Any]:
    return {
        "slot": slot,
        "confirmations": None if status == "finalized" else 1,
        "err": err,
        "confirmationStatus": status,
    }


def make_config(**overrides: Any) -> SolanaConfig:
    """A config with fast retries and polling for tests."""
    values: Dict[str, Any] = {
        "rpc_url": "https://api.devnet.solana.com",
        "commitment": "confirmed",
        "timeout": 5.0,
        "max_retries": 2,
        "retry_delay": 0.0,
        "max_retry_delay": 0.0,
        "poll_interval": 0.01,
        "max_poll_attempts": 10,
        "confirm_timeout": 5.0,
    }
    values.update(overrides)
    return SolanaConfig(**values)


def make_transfer_transaction(payer_signer: KeypairSigner, recipient: Pubkey,
                              lamports: int = 1000, blockhash: str = BLOCKHASH):
    """A signed single-instruction system transfer."""
    serializer = TransactionSerializer()
    instruction = transfer(TransferParams(
        from_pubkey=payer_signer.public_key,
        to_pubkey=recipient,
        lamports=lamports,
    ))
    unsigned = serializer.create([instruction], payer_signer.public_key, Hash.from_string(blockhash))
    return serializer.sign(unsigned, [payer_signer])


@pytest.fixture
def solana_config():
    """Create a test configuration."""
    return make_config()


@pytest.fixture
def rpc_mock():
    """Create a scripted JSON-RPC node."""
    return RpcMock()


@pytest.fixture
def ledger_client(solana_config, rpc_mock):
    """Create a LedgerClient talking to the scripted node."""
    http_client = httpx.AsyncClient(transport=rpc_mock.transport)
    return LedgerClient(solana_config, http_client)


@pytest.fixture
def mock_ledger_client(solana_config):
    """Create a mock LedgerClient."""
    client = AsyncMock(spec=LedgerClient)
    client.config = solana_config
    client.programs = ProgramRepository()
    client.serializer = TransactionSerializer()
    client.get_cluster.return_value = "devnet"
    client.get_endpoint.return_value = solana_config.rpc_url
    return client


@pytest.fixture
def payer_signer():
    """Deterministic fee payer."""
    return KeypairSigner(keypair_from_seed(bytes(range(32))))


@pytest.fixture
def recipient():
    return keypair_from_seed(bytes([7] * 32)).public_key


@pytest.fixture
def signed_transfer(payer_signer, recipient):
    """A signed transfer from the payer to the recipient."""
    return make_transfer_transaction(payer_signer, recipient)


@pytest.fixture
def umi_context(mock_ledger_client, payer_signer):
    """Create a context around the mock ledger client."""
    return Context(
        rpc=mock_ledger_client,
        transactions=mock_ledger_client.serializer,
        programs=mock_ledger_client.programs,
        identity=payer_signer,
        payer=payer_signer,
    )


def assert_single_call(rpc: RpcMock, method: str) -> Dict[str, Any]:
    """Assert exactly one request was made and return it."""
    assert [call["method"] for call in rpc.calls] == [method]
    return rpc.calls[0]

