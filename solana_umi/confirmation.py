"""Transaction confirmation state machine.

A tracker follows one signature from ``SUBMITTED`` through ``PENDING`` to a
terminal state:

- ``CONFIRMED`` / ``FINALIZED``: the ledger reports the transaction at (or
  above) the requested commitment without an execution error.
- ``FAILED``: the transaction executed and aborted; its logs are resolved
  into a ``ProgramError`` when possible.
- ``EXPIRED``: the validity window of the governing strategy lapsed before
  any status was observed.
- ``ABANDONED``: the bounded wait ran out or :meth:`ConfirmationTracker.abandon`
  was called. The transaction may still land.

The tracker polls inside the caller's task and never spawns background work,
so cancelling the awaiting task stops it outright.
"""

import asyncio
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from solders.hash import Hash
from solders.signature import Signature

from solana_umi.constants import NONCE_ACCOUNT_LENGTH, NONCE_VALUE_OFFSET
from solana_umi.logging_config import get_logger, log_with_context
from solana_umi.models.transaction import (
    BlockhashStrategy,
    ConfirmationStrategy,
    NonceStrategy,
    TransactionStatus,
)
from solana_umi.utils.errors import (
    ConfirmationTimeoutError,
    ProgramError,
    RpcConnectionError,
    RpcError,
    RpcTimeoutError,
    TransactionExpiredError,
    TransactionFailedError,
)

if TYPE_CHECKING:
    from solana_umi.clients.ledger_client import LedgerClient

logger = get_logger(__name__)


class ConfirmationState(str, Enum):
    """Lifecycle states of a submitted transaction."""

    SUBMITTED = "submitted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
    EXPIRED = "expired"
    FAILED = "failed"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self not in (ConfirmationState.SUBMITTED, ConfirmationState.PENDING)

    @property
    def is_success(self) -> bool:
        return self in (ConfirmationState.CONFIRMED, ConfirmationState.FINALIZED)


@dataclass(frozen=True)
class ConfirmationResult:
    """Terminal outcome handed back to the caller."""

    signature: Signature
    state: ConfirmationState
    attempts: int
    elapsed: float
    slot: Optional[int] = None
    commitment: Optional[str] = None
    err: Any = None
    logs: List[str] = field(default_factory=list)
    program_error: Optional[ProgramError] = None
    strategy: Optional[ConfirmationStrategy] = None

    @property
    def succeeded(self) -> bool:
        return self.state.is_success

    def raise_for_status(self) -> "ConfirmationResult":
        """Raise the matching error unless the transaction succeeded.

        Raises:
            ProgramError: Failed with a resolvable program error
            TransactionFailedError: Failed with any other execution error
            TransactionExpiredError: Validity window lapsed
            ConfirmationTimeoutError: Polling stopped before a terminal status
        """
        if self.state is ConfirmationState.FAILED:
            if self.program_error is not None:
                raise self.program_error
            raise TransactionFailedError(str(self.signature), self.err, self.logs)
        if self.state is ConfirmationState.EXPIRED:
            raise TransactionExpiredError(
                str(self.signature),
                self.strategy.to_dict() if self.strategy is not None else None
            )
        if self.state is ConfirmationState.ABANDONED:
            raise ConfirmationTimeoutError(str(self.signature), self.attempts, self.elapsed)
        return self


def parse_nonce_value(data: bytes) -> Optional[Hash]:
    """Read the durable nonce stored in a nonce account, if it holds one."""
    if len(data) < NONCE_ACCOUNT_LENGTH:
        return None
    _version, state = struct.unpack_from("<II", data, 0)
    if state != 1:  # uninitialized
        return None
    return Hash(data[NONCE_VALUE_OFFSET:NONCE_VALUE_OFFSET + 32])


class ConfirmationTracker:
    """Polls one signature until it reaches a terminal state."""

    def __init__(
        self,
        client: "LedgerClient",
        signature: Signature,
        strategy: ConfirmationStrategy,
        commitment: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
        transaction: Any = None
    ):
        """Create a tracker.

        Args:
            client: Ledger client used for status, height and nonce reads
            signature: The transaction signature to follow
            strategy: Blockhash or durable nonce validity window
            commitment: Commitment that counts as confirmed
            poll_interval: Seconds between polls
            max_attempts: Upper bound on status polls
            timeout: Upper bound on total wall-clock wait in seconds
            transaction: The submitted transaction, used for error resolution
        """
        config = client.config
        self.client = client
        self.signature = signature
        self.strategy = strategy
        self.commitment = commitment or config.commitment
        self.poll_interval = poll_interval if poll_interval is not None else config.poll_interval
        self.max_attempts = max_attempts if max_attempts is not None else config.max_poll_attempts
        self.timeout = timeout if timeout is not None else config.confirm_timeout
        self.transaction = transaction
        self.state = ConfirmationState.SUBMITTED
        self.attempts = 0
        self._abandoned = asyncio.Event()
        self._started_at: Optional[float] = None

    def abandon(self) -> None:
        """Stop waiting at the next wake-up. Does not retract the transaction."""
        self._abandoned.set()

    def _elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return asyncio.get_running_loop().time() - self._started_at

    def _finish(self, state: ConfirmationState, **fields: Any) -> ConfirmationResult:
        self.state = state
        result = ConfirmationResult(
            signature=self.signature,
            state=state,
            attempts=self.attempts,
            elapsed=self._elapsed(),
            strategy=self.strategy,
            **fields
        )
        log_with_context(
            logger,
            "info" if state.is_success else "warning",
            f"Transaction {self.signature} {state.value}",
            attempts=self.attempts,
            slot=fields.get("slot"),
        )
        return result

    async def _fetch_status(
        self,
        search_history: bool = False
    ) -> Tuple[bool, Optional[TransactionStatus]]:
        """Read the signature status.

        Returns:
            (reachable, status); ``reachable`` is False when the node could
            not be asked, in which case a missing status means nothing.
        """
        try:
            statuses = await self.client.get_signature_statuses(
                [self.signature],
                search_transaction_history=search_history
            )
        except (RpcConnectionError, RpcTimeoutError) as e:
            logger.warning(f"Status poll for {self.signature} failed, will retry: {e.message}")
            return False, None
        return True, (statuses[0] if statuses else None)

    async def _is_expired(self) -> bool:
        try:
            if isinstance(self.strategy, BlockhashStrategy):
                height = await self.client.get_block_height(commitment=self.commitment)
                return height > self.strategy.last_valid_block_height
            if isinstance(self.strategy, NonceStrategy):
                account = await self.client.get_account(
                    self.strategy.nonce_account_pubkey,
                    commitment=self.commitment,
                    min_context_slot=self.strategy.min_context_slot
                )
                if not account.exists:
                    return True
                return parse_nonce_value(account.data) != self.strategy.nonce_value
        except (RpcConnectionError, RpcTimeoutError) as e:
            logger.warning(f"Validity check for {self.signature} failed, will retry: {e.message}")
            return False
        raise TypeError(f"Unknown confirmation strategy: {type(self.strategy).__name__}")

    async def _failed(self, status: TransactionStatus) -> ConfirmationResult:
        logs: List[str] = []
        try:
            landed = await self.client.get_transaction(self.signature)
            if landed is not None:
                logs = landed.log_messages
        except RpcError as e:
            logger.warning(f"Could not fetch logs for failed transaction {self.signature}: {e.message}")
        program_error = self.client.programs.resolve_logs(logs, status.err, self.transaction)
        return self._finish(
            ConfirmationState.FAILED,
            slot=status.slot,
            commitment=status.commitment,
            err=status.err,
            logs=logs,
            program_error=program_error,
        )

    def _succeeded(self, status: TransactionStatus) -> ConfirmationResult:
        state = (
            ConfirmationState.FINALIZED
            if status.commitment == "finalized"
            else ConfirmationState.CONFIRMED
        )
        return self._finish(state, slot=status.slot, commitment=status.commitment)

    async def wait(self) -> ConfirmationResult:
        """Poll until a terminal state and return it."""
        loop = asyncio.get_running_loop()
        self._started_at = loop.time()
        deadline = self._started_at + self.timeout
        self.state = ConfirmationState.PENDING
        logger.debug(f"Confirming {self.signature} at {self.commitment} commitment")

        while self.attempts < self.max_attempts and not self._abandoned.is_set():
            self.attempts += 1
            _, status = await self._fetch_status()

            if status is None and await self._is_expired():
                # The transaction may have landed between the two reads.
                reachable, status = await self._fetch_status(search_history=True)
                if status is None and reachable:
                    return self._finish(ConfirmationState.EXPIRED)

            if status is not None:
                if status.err is not None:
                    return await self._failed(status)
                if status.reached(self.commitment):
                    return self._succeeded(status)

            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            try:
                await asyncio.wait_for(
                    self._abandoned.wait(),
                    timeout=min(self.poll_interval, remaining)
                )
            except asyncio.TimeoutError:
                pass

        return self._finish(ConfirmationState.ABANDONED)
