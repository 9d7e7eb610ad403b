"""Base JSON-RPC client for Solana nodes.

This module provides the transport used by every ledger operation: request
framing, retries with capped exponential backoff and translation of
transport failures into typed errors.
"""

# Standard library imports
import asyncio
import itertools
import json
import logging
import time
from typing import Any, Dict, List, Optional

# Third-party library imports
import httpx

# Internal imports
from solana_umi.config import SolanaConfig, get_solana_config
from solana_umi.constants import RETRIABLE_STATUS_CODES, RPC_RATE_LIMIT_CODE
from solana_umi.logging_config import get_logger
from solana_umi.utils.errors import RpcConnectionError, RpcError, RpcTimeoutError

logger = get_logger(__name__)


class TimingContextManager:
    """Context manager to log timing information."""

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.start_time = 0.0

    async def __aenter__(self) -> "TimingContextManager":
        self.start_time = time.perf_counter()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = (time.perf_counter() - self.start_time) * 1000
        if exc_type is None:
            self.logger.debug(f"{self.operation_name} completed in {elapsed:.2f}ms")
        else:
            self.logger.debug(f"{self.operation_name} failed after {elapsed:.2f}ms")


class BaseSolanaClient:
    """Base client for interacting with a Solana JSON-RPC endpoint."""

    def __init__(
        self,
        config: Optional[SolanaConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the client.

        Args:
            config: Solana configuration. Defaults to environment-based config.
            http_client: Optional pre-built httpx client (tests inject a
                MockTransport here)
        """
        self.config = config or get_solana_config()
        self.headers = {"Content-Type": "application/json"}

        # Set up auth if provided
        self.auth = None
        if self.config.has_auth:
            self.auth = (self.config.rpc_user, self.config.rpc_password)

        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._request_ids = itertools.count(1)

    @property
    def endpoint(self) -> str:
        return self.config.rpc_url

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout,
                auth=self.auth,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
            )
        return self._http_client

    async def __aenter__(self) -> "BaseSolanaClient":
        self._get_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("Closed Solana RPC client")

    def _backoff(self, retry_count: int) -> float:
        return min(self.config.retry_delay * (2 ** retry_count), self.config.max_retry_delay)

    async def _make_request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a JSON-RPC request to the Solana node.

        Args:
            method: The RPC method to call
            params: The parameters to pass to the method

        Returns:
            The ``result`` member of the JSON-RPC response

        Raises:
            RpcError: If the node returns an error or an unusable response
            RpcTimeoutError: If the request keeps timing out
            RpcConnectionError: If the endpoint cannot be reached
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params or []
        }
        max_retries = self.config.max_retries
        client = self._get_http_client()

        for retry_count in range(max_retries + 1):
            if retry_count > 0:
                logger.info(f"Retry attempt {retry_count}/{max_retries} for {method}")
            try:
                async with TimingContextManager(f"rpc_request.{method}", logger):
                    response = await client.post(
                        self.endpoint,
                        headers=self.headers,
                        json=payload
                    )
            except httpx.TimeoutException as e:
                if retry_count < max_retries:
                    wait_time = self._backoff(retry_count)
                    logger.warning(f"Request timed out, retrying in {wait_time}s: {method}")
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(f"Request timed out after {retry_count + 1} attempts: {method}")
                raise RpcTimeoutError(
                    f"RPC request {method} timed out",
                    timeout=self.config.timeout,
                    method=method
                ) from e
            except httpx.RequestError as e:
                if retry_count < max_retries:
                    wait_time = self._backoff(retry_count)
                    logger.warning(f"Connection error, retrying in {wait_time}s: {str(e)}")
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(f"Request failed after {retry_count + 1} attempts: {str(e)}")
                raise RpcConnectionError(
                    f"Connection error during RPC request: {str(e)}",
                    endpoint=self.endpoint,
                    method=method
                ) from e

            # Handle HTTP status errors
            if response.status_code in RETRIABLE_STATUS_CODES and retry_count < max_retries:
                wait_time = self._backoff(retry_count)
                logger.warning(f"HTTP status {response.status_code}, retrying in {wait_time}s: {method}")
                await asyncio.sleep(wait_time)
                continue
            if response.status_code >= 400:
                raise RpcError(
                    f"RPC request failed with status {response.status_code}",
                    rpc_error={"http_status": response.status_code},
                    method=method
                )

            try:
                result = response.json()
            except json.JSONDecodeError as e:
                raise RpcError(
                    "Invalid JSON in RPC response",
                    rpc_error={"body": response.text[:200]},
                    method=method
                ) from e

            # Handle RPC errors
            if "error" in result:
                error = result["error"]
                message = f"Solana RPC error: {error.get('message', 'Unknown error')}"

                # Check for rate limiting errors and retry if possible
                if (error.get("code") == RPC_RATE_LIMIT_CODE
                        or "rate limited" in message.lower()) and retry_count < max_retries:
                    wait_time = self._backoff(retry_count)
                    logger.warning(f"Rate limited, retrying in {wait_time}s: {method}")
                    await asyncio.sleep(wait_time)
                    continue

                # Non-retriable RPC error or max retries reached
                raise RpcError(message, rpc_error=error, method=method)

            if "result" not in result:
                raise RpcError(
                    "Malformed RPC response; missing result",
                    rpc_error={"response": result},
                    method=method
                )

            return result["result"]

        # We should never reach here, but just in case
        raise RpcError(
            f"RPC request failed after {max_retries} retries",
            method=method
        )

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Send a raw JSON-RPC request and return its result unchanged."""
        return await self._make_request(method, list(params or []))
