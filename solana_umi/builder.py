"""Transaction builder.

Collects instructions and the signers they need, then compiles, signs,
submits and confirms them against a :class:`~solana_umi.context.Context`.
Builders are immutable: ``add`` returns a new builder.
"""

from typing import TYPE_CHECKING, NamedTuple, Optional, Sequence, Tuple

from solders.instruction import Instruction
from solders.signature import Signature

from solana_umi.confirmation import ConfirmationResult
from solana_umi.logging_config import get_logger
from solana_umi.models.transaction import BlockhashStrategy, BlockhashWithExpiryBlockHeight
from solana_umi.serializer import SolanaTransaction
from solana_umi.signers import Signer, unique_signers
from solana_umi.utils.errors import ValidationError

if TYPE_CHECKING:
    from solana_umi.context import Context

logger = get_logger(__name__)


class BuiltTransaction(NamedTuple):
    """A signed transaction and the blockhash window it was built for."""

    transaction: SolanaTransaction
    strategy: BlockhashStrategy


class SentTransaction(NamedTuple):
    signature: Signature
    transaction: SolanaTransaction
    strategy: BlockhashStrategy


class ConfirmedTransaction(NamedTuple):
    signature: Signature
    result: ConfirmationResult


class TransactionBuilder:
    """Immutable list of instructions plus the extra signers they require."""

    def __init__(
        self,
        instructions: Sequence[Instruction] = (),
        signers: Sequence[Signer] = ()
    ):
        self._instructions: Tuple[Instruction, ...] = tuple(instructions)
        self._signers: Tuple[Signer, ...] = tuple(signers)

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return self._instructions

    @property
    def signers(self) -> Tuple[Signer, ...]:
        return self._signers

    def add(self, instruction: Instruction, signers: Sequence[Signer] = ()) -> "TransactionBuilder":
        return TransactionBuilder(
            self._instructions + (instruction,),
            self._signers + tuple(signers)
        )

    def is_empty(self) -> bool:
        return not self._instructions

    async def build(
        self,
        context: "Context",
        latest_blockhash: Optional[BlockhashWithExpiryBlockHeight] = None
    ) -> BuiltTransaction:
        """Compile with the context's payer and sign with every signer.

        Args:
            context: Supplies the payer, the serializer and the RPC client
            latest_blockhash: Use this blockhash instead of fetching one

        Raises:
            ValidationError: If the builder is empty or the context has no payer
        """
        if self.is_empty():
            raise ValidationError("Cannot build a transaction without instructions")
        if context.payer is None:
            raise ValidationError("Context has no payer to fund the transaction")

        if latest_blockhash is None:
            latest_blockhash = await context.rpc.get_latest_blockhash()
        transaction = context.transactions.create(
            self._instructions,
            context.payer.public_key,
            latest_blockhash.blockhash
        )
        signers = unique_signers((context.payer,) + self._signers)
        signed = context.transactions.sign(transaction, signers)
        return BuiltTransaction(signed, BlockhashStrategy.from_latest(latest_blockhash))

    async def send(self, context: "Context", skip_preflight: bool = False) -> SentTransaction:
        """Build and submit without waiting for confirmation."""
        built = await self.build(context)
        signature = await context.rpc.send_transaction(
            built.transaction,
            skip_preflight=skip_preflight
        )
        return SentTransaction(signature, built.transaction, built.strategy)

    async def send_and_confirm(
        self,
        context: "Context",
        commitment: str = "finalized",
        skip_preflight: bool = False,
        **tracker_options
    ) -> ConfirmedTransaction:
        """Build, submit and wait for ``commitment``.

        Defaults to ``finalized`` so reads that depend on this transaction
        see its effects.

        Raises:
            ProgramError: If the transaction failed with a resolvable program error
            TransactionFailedError: If it failed otherwise
            TransactionExpiredError: If its blockhash expired before it landed
            ConfirmationTimeoutError: If confirmation took too long
        """
        sent = await self.send(context, skip_preflight=skip_preflight)
        result = await context.rpc.confirm_transaction(
            sent.signature,
            sent.strategy,
            commitment=commitment,
            transaction=sent.transaction,
            **tracker_options
        )
        result.raise_for_status()
        logger.info(f"Transaction {sent.signature} reached {result.commitment}")
        return ConfirmedTransaction(sent.signature, result)
