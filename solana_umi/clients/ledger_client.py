"""Ledger client: account reads, submission, simulation and confirmation.

Every method is a thin, typed wrapper over one JSON-RPC call (or, for
confirmation, a bounded sequence of them). Transport failures surface as the
typed errors raised by :class:`BaseSolanaClient`; execution failures are
passed through the program repository first.
"""

import base64
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from cachetools import TTLCache
from solana.rpc.types import DataSliceOpts
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_umi.amounts import SolAmount
from solana_umi.clients.base_client import BaseSolanaClient
from solana_umi.cluster import resolve_cluster_from_endpoint
from solana_umi.confirmation import ConfirmationResult, ConfirmationTracker
from solana_umi.constants import ACCOUNT_HEADER_SIZE, MAX_MULTIPLE_ACCOUNTS
from solana_umi.logging_config import get_logger, log_with_context
from solana_umi.models.account import (
    MaybeAccount,
    ProgramAccountFilter,
    RpcAccount,
    data_slice_to_rpc,
    parse_account_info,
)
from solana_umi.models.transaction import (
    BlockhashStrategy,
    BlockhashWithExpiryBlockHeight,
    ConfirmationStrategy,
    SimulationResult,
    TransactionStatus,
    TransactionWithMeta,
)
from solana_umi.programs import ProgramRepository
from solana_umi.serializer import SolanaTransaction, TransactionSerializer
from solana_umi.utils.errors import RpcError, UnsupportedOperationError, ValidationError
from solana_umi.utils.validation import (
    PublicKeyInput,
    SignatureInput,
    ensure_non_negative_int,
    to_pubkey,
    to_signature,
)

logger = get_logger(__name__)

GENESIS_HASH_TTL = 3600


class LedgerClient(BaseSolanaClient):
    """Typed access to a Solana node."""

    def __init__(
        self,
        config=None,
        http_client=None,
        programs: Optional[ProgramRepository] = None,
        serializer: Optional[TransactionSerializer] = None
    ):
        super().__init__(config, http_client)
        self.programs = programs or ProgramRepository()
        self.serializer = serializer or TransactionSerializer()
        self._genesis_cache: TTLCache = TTLCache(maxsize=1, ttl=GENESIS_HASH_TTL)

    def _commitment(self, commitment: Optional[str]) -> str:
        return commitment or self.config.commitment

    def get_endpoint(self) -> str:
        return self.endpoint

    def get_cluster(self) -> str:
        """Cluster name inferred from the endpoint URL."""
        return resolve_cluster_from_endpoint(self.endpoint)

    # Account reads

    async def get_account(
        self,
        public_key: PublicKeyInput,
        commitment: Optional[str] = None,
        min_context_slot: Optional[int] = None
    ) -> MaybeAccount:
        """Fetch one account.

        Args:
            public_key: The account address
            commitment: Commitment level for the read
            min_context_slot: Reject answers from nodes behind this slot

        Returns:
            RpcAccount, or MissingAccount when nothing is stored there
        """
        address = to_pubkey(public_key)
        options: Dict[str, Any] = {
            "encoding": "base64",
            "commitment": self._commitment(commitment),
        }
        if min_context_slot is not None:
            options["minContextSlot"] = min_context_slot
        result = await self._make_request("getAccountInfo", [str(address), options])
        return parse_account_info(address, result.get("value"))

    async def get_accounts(
        self,
        public_keys: Sequence[PublicKeyInput],
        commitment: Optional[str] = None
    ) -> List[MaybeAccount]:
        """Fetch several accounts in a single ``getMultipleAccounts`` call.

        The result has the same length and order as ``public_keys``.

        Raises:
            ValidationError: If more keys are given than one call accepts
        """
        addresses = [to_pubkey(key) for key in public_keys]
        if not addresses:
            return []
        if len(addresses) > MAX_MULTIPLE_ACCOUNTS:
            raise ValidationError(
                f"At most {MAX_MULTIPLE_ACCOUNTS} accounts can be fetched in one call",
                details={"count": len(addresses)}
            )
        result = await self._make_request(
            "getMultipleAccounts",
            [
                [str(address) for address in addresses],
                {"encoding": "base64", "commitment": self._commitment(commitment)},
            ]
        )
        values = result.get("value") or []
        if len(values) != len(addresses):
            raise RpcError(
                "getMultipleAccounts returned a different number of accounts",
                rpc_error={"expected": len(addresses), "received": len(values)},
                method="getMultipleAccounts"
            )
        return [parse_account_info(address, info) for address, info in zip(addresses, values)]

    async def get_program_accounts(
        self,
        program_id: PublicKeyInput,
        filters: Optional[Sequence[ProgramAccountFilter]] = None,
        data_slice: Optional[DataSliceOpts] = None,
        commitment: Optional[str] = None
    ) -> List[RpcAccount]:
        """Fetch every account owned by ``program_id`` that matches all filters."""
        program = to_pubkey(program_id)
        options: Dict[str, Any] = {
            "encoding": "base64",
            "commitment": self._commitment(commitment),
        }
        if filters:
            options["filters"] = [item.to_rpc() for item in filters]
        slice_options = data_slice_to_rpc(data_slice)
        if slice_options is not None:
            options["dataSlice"] = slice_options

        result = await self._make_request("getProgramAccounts", [str(program), options])
        # Some nodes wrap the list in a context envelope
        if isinstance(result, dict):
            result = result.get("value") or []

        accounts = []
        for entry in result:
            account = parse_account_info(Pubkey.from_string(entry["pubkey"]), entry["account"])
            accounts.append(account)
        logger.debug(f"Found {len(accounts)} accounts owned by {program}")
        return accounts

    async def get_balance(
        self,
        public_key: PublicKeyInput,
        commitment: Optional[str] = None
    ) -> SolAmount:
        address = to_pubkey(public_key)
        result = await self._make_request(
            "getBalance",
            [str(address), {"commitment": self._commitment(commitment)}]
        )
        return SolAmount(int(result["value"]))

    async def get_rent(
        self,
        size: int,
        include_header: bool = True,
        commitment: Optional[str] = None
    ) -> SolAmount:
        """Rent-exempt minimum for ``size`` bytes of account data.

        The node is asked once for the minimum of an empty account, which
        covers the fixed per-account header. Dividing it by the header size
        gives an integer per-byte rate, so the result is linear in ``size``.

        Args:
            size: Number of data bytes
            include_header: Add the header's rent. Pass False when ``size``
                already counts the header bytes.

        Returns:
            ``header_rent + per_byte * size``, or ``per_byte * size``
        """
        ensure_non_negative_int(size, "size")
        header_rent = int(await self._make_request(
            "getMinimumBalanceForRentExemption",
            [0, {"commitment": self._commitment(commitment)}]
        ))
        per_byte = header_rent // ACCOUNT_HEADER_SIZE
        rent = per_byte * size
        if include_header:
            rent += header_rent
        return SolAmount(rent)

    async def account_exists(
        self,
        public_key: PublicKeyInput,
        commitment: Optional[str] = None
    ) -> bool:
        """True if the address holds a non-zero balance."""
        balance = await self.get_balance(public_key, commitment)
        return not balance.is_zero()

    # Ledger metadata

    async def get_slot(self, commitment: Optional[str] = None) -> int:
        return int(await self._make_request(
            "getSlot", [{"commitment": self._commitment(commitment)}]
        ))

    async def get_block_height(self, commitment: Optional[str] = None) -> int:
        return int(await self._make_request(
            "getBlockHeight", [{"commitment": self._commitment(commitment)}]
        ))

    async def get_latest_blockhash(
        self,
        commitment: Optional[str] = None
    ) -> BlockhashWithExpiryBlockHeight:
        result = await self._make_request(
            "getLatestBlockhash", [{"commitment": self._commitment(commitment)}]
        )
        return BlockhashWithExpiryBlockHeight.from_rpc(result["value"])

    async def get_block_time(self, slot: int) -> Optional[datetime]:
        """Estimated production time of ``slot``, or None when unknown."""
        ensure_non_negative_int(slot, "slot")
        timestamp = await self._make_request("getBlockTime", [slot])
        if timestamp is None:
            return None
        return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)

    async def get_genesis_hash(self) -> Hash:
        """Genesis hash of the cluster. Cached, since it never changes."""
        cached = self._genesis_cache.get("genesis")
        if cached is not None:
            return cached
        genesis = Hash.from_string(await self._make_request("getGenesisHash"))
        self._genesis_cache["genesis"] = genesis
        return genesis

    # Transactions

    async def get_transaction(
        self,
        signature: SignatureInput,
        commitment: Optional[str] = None
    ) -> Optional[TransactionWithMeta]:
        """Fetch a landed transaction with its metadata, or None if unknown."""
        sig = to_signature(signature)
        level = self._commitment(commitment)
        # getTransaction does not serve processed data
        if level == "processed":
            level = "confirmed"
        result = await self._make_request(
            "getTransaction",
            [
                str(sig),
                {
                    "encoding": "base64",
                    "commitment": level,
                    "maxSupportedTransactionVersion": 0,
                },
            ]
        )
        if result is None:
            return None
        return TransactionWithMeta.from_rpc(sig, result)

    async def get_signature_statuses(
        self,
        signatures: Sequence[SignatureInput],
        search_transaction_history: bool = False
    ) -> List[Optional[TransactionStatus]]:
        """Statuses for ``signatures``, in order; None for unknown ones."""
        sigs = [to_signature(signature) for signature in signatures]
        if not sigs:
            return []
        result = await self._make_request(
            "getSignatureStatuses",
            [
                [str(sig) for sig in sigs],
                {"searchTransactionHistory": search_transaction_history},
            ]
        )
        return [
            TransactionStatus.from_rpc(value) if value is not None else None
            for value in result.get("value") or []
        ]

    def _resolve_rpc_failure(self, error: RpcError, transaction: SolanaTransaction) -> None:
        if error.logs is None:
            return
        program_error = self.programs.resolve_error(error, transaction)
        if program_error is not None:
            log_with_context(
                logger,
                "warning",
                "Transaction rejected by program",
                program_id=program_error.program_id,
                error_code=program_error.error_code,
            )
            raise program_error from error

    async def send_transaction(
        self,
        transaction: SolanaTransaction,
        skip_preflight: bool = False,
        preflight_commitment: Optional[str] = None,
        max_retries: Optional[int] = None,
        min_context_slot: Optional[int] = None
    ) -> Signature:
        """Submit a signed transaction.

        Args:
            transaction: A fully signed legacy or versioned transaction
            skip_preflight: Skip the node's preflight simulation
            preflight_commitment: Commitment for the preflight simulation
            max_retries: How often the node itself rebroadcasts
            min_context_slot: Reject nodes behind this slot

        Returns:
            The transaction signature

        Raises:
            ProgramError: If preflight failed with a resolvable program error
            RpcError: For any other failure, unchanged
        """
        options: Dict[str, Any] = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": self._commitment(preflight_commitment),
        }
        if max_retries is not None:
            options["maxRetries"] = max_retries
        if min_context_slot is not None:
            options["minContextSlot"] = min_context_slot
        encoded = base64.b64encode(self.serializer.serialize(transaction)).decode("ascii")

        try:
            result = await self._make_request("sendTransaction", [encoded, options])
        except RpcError as e:
            self._resolve_rpc_failure(e, transaction)
            raise

        signature = Signature.from_string(result)
        logger.info(f"Sent transaction {signature}")
        return signature

    async def simulate_transaction(
        self,
        transaction: SolanaTransaction,
        verify_signatures: bool = False,
        accounts: Optional[Sequence[PublicKeyInput]] = None,
        replace_recent_blockhash: bool = False,
        commitment: Optional[str] = None
    ) -> SimulationResult:
        """Dry-run a transaction against current ledger state.

        Nothing is committed. A failed execution is reported through
        ``SimulationResult.err`` and ``program_error`` rather than raised.

        Args:
            transaction: The transaction to simulate
            verify_signatures: Ask the node to verify signatures
            accounts: Addresses whose post-simulation state should be returned
            replace_recent_blockhash: Let the node substitute a fresh blockhash
            commitment: Bank state to simulate against
        """
        if verify_signatures and replace_recent_blockhash:
            raise ValidationError(
                "verify_signatures and replace_recent_blockhash cannot both be set"
            )
        inspected = [to_pubkey(key) for key in accounts or []]
        options: Dict[str, Any] = {
            "encoding": "base64",
            "sigVerify": verify_signatures,
            "replaceRecentBlockhash": replace_recent_blockhash,
            "commitment": self._commitment(commitment),
        }
        if inspected:
            options["accounts"] = {
                "encoding": "base64",
                "addresses": [str(key) for key in inspected],
            }
        encoded = base64.b64encode(self.serializer.serialize(transaction)).decode("ascii")

        try:
            result = await self._make_request("simulateTransaction", [encoded, options])
        except RpcError as e:
            self._resolve_rpc_failure(e, transaction)
            raise

        value = result.get("value") or {}
        logs = list(value.get("logs") or [])
        err = value.get("err")
        program_error = None
        if err is not None:
            program_error = self.programs.resolve_logs(logs, err, transaction)
            logger.debug(f"Simulation failed: {err}")

        states = value.get("accounts") or []
        return SimulationResult(
            err=err,
            logs=logs,
            units_consumed=value.get("unitsConsumed"),
            accounts=[parse_account_info(key, info) for key, info in zip(inspected, states)],
            return_data=value.get("returnData"),
            context_slot=(result.get("context") or {}).get("slot"),
            program_error=program_error,
        )

    async def confirm_transaction(
        self,
        signature: SignatureInput,
        strategy: ConfirmationStrategy,
        commitment: Optional[str] = None,
        transaction: Optional[SolanaTransaction] = None,
        **tracker_options: Any
    ) -> ConfirmationResult:
        """Wait for ``signature`` to reach a terminal state.

        Extra keyword arguments (``poll_interval``, ``max_attempts``,
        ``timeout``) are passed to :class:`ConfirmationTracker`.
        """
        tracker = ConfirmationTracker(
            self,
            to_signature(signature),
            strategy,
            commitment=self._commitment(commitment),
            transaction=transaction,
            **tracker_options
        )
        return await tracker.wait()

    async def airdrop(
        self,
        public_key: PublicKeyInput,
        amount: SolAmount,
        strategy: Optional[ConfirmationStrategy] = None,
        commitment: Optional[str] = None
    ) -> ConfirmationResult:
        """Request test funds and wait until they are confirmed.

        Raises:
            UnsupportedOperationError: On mainnet
            TransactionExpiredError: If the airdrop never landed
            ConfirmationTimeoutError: If confirmation took too long
        """
        cluster = self.get_cluster()
        if cluster == "mainnet-beta":
            raise UnsupportedOperationError("airdrop", "airdrops are not available on mainnet")
        address = to_pubkey(public_key)
        level = self._commitment(commitment)
        if strategy is None:
            strategy = BlockhashStrategy.from_latest(await self.get_latest_blockhash(level))

        result = await self._make_request(
            "requestAirdrop",
            [str(address), amount.lamports, {"commitment": level}]
        )
        signature = Signature.from_string(result)
        log_with_context(
            logger,
            "info",
            "Requested airdrop",
            recipient=str(address),
            amount=str(amount),
            signature=str(signature),
        )

        confirmation = await self.confirm_transaction(signature, strategy, commitment=level)
        return confirmation.raise_for_status()
