"""Wire serialization for transactions.

A wire transaction is ``shortvec(signatures) ‖ message``; the message bytes
are what every required signer signs. Legacy and v0 transactions are both
handled through ``solders``.
"""

from typing import List, Sequence, Union

import base58
from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction

from solana_umi.constants import SIGNATURE_LENGTH
from solana_umi.logging_config import get_logger
from solana_umi.signers import Signer, unique_signers
from solana_umi.utils.errors import ValidationError

logger = get_logger(__name__)

SolanaTransaction = Union[Transaction, VersionedTransaction]


def encode_signature(signature: Signature) -> str:
    """Base58 text form used for explorer links and lookups."""
    return str(signature)


def decode_signature(signature: str) -> Signature:
    """Decode a base58 signature back to its 64 raw bytes."""
    raw = base58.b58decode(signature)
    if len(raw) != SIGNATURE_LENGTH:
        raise ValidationError(
            "Transaction signature must decode to 64 bytes",
            details={"length": len(raw)}
        )
    return Signature(raw)


class TransactionSerializer:
    """Builds, signs and (de)serializes transactions."""

    def serialize(self, transaction: SolanaTransaction) -> bytes:
        """Serialize a transaction to its wire format."""
        return bytes(transaction)

    def deserialize(self, raw: bytes) -> SolanaTransaction:
        """Parse wire bytes; legacy transactions come back as legacy."""
        versioned = VersionedTransaction.from_bytes(raw)
        if isinstance(versioned.message, Message):
            return Transaction.from_bytes(raw)
        return versioned

    def serialize_message(self, transaction: SolanaTransaction) -> bytes:
        """The exact bytes each required signer signs."""
        if isinstance(transaction, Transaction):
            return bytes(transaction.message_data())
        return bytes(to_bytes_versioned(transaction.message))

    def create(
        self,
        instructions: Sequence[Instruction],
        payer: Pubkey,
        blockhash: Hash
    ) -> Transaction:
        """Compile an unsigned legacy transaction."""
        if not instructions:
            raise ValidationError("A transaction needs at least one instruction")
        message = Message.new_with_blockhash(list(instructions), payer, blockhash)
        return Transaction.new_unsigned(message)

    def required_signers(self, transaction: SolanaTransaction) -> List[Pubkey]:
        message = transaction.message
        return list(message.account_keys[: message.header.num_required_signatures])

    def sign(self, transaction: SolanaTransaction, signers: Sequence[Signer]) -> SolanaTransaction:
        """Add each signer's signature in its account slot.

        Existing signatures for other slots are preserved, so signing can be
        split across several calls.

        Raises:
            ValidationError: If a signer is not a required signer of the message
        """
        message_bytes = self.serialize_message(transaction)
        required = self.required_signers(transaction)
        signatures = list(transaction.signatures)
        if len(signatures) < len(required):
            signatures.extend([Signature.default()] * (len(required) - len(signatures)))

        for signer in unique_signers(signers):
            try:
                index = required.index(signer.public_key)
            except ValueError:
                raise ValidationError(
                    f"{signer.public_key} is not a required signer of this transaction",
                    details={"required": [str(key) for key in required]}
                )
            signatures[index] = signer.sign_message(message_bytes)

        if isinstance(transaction, Transaction):
            return Transaction.populate(transaction.message, signatures)
        return VersionedTransaction.populate(transaction.message, signatures)

    def is_fully_signed(self, transaction: SolanaTransaction) -> bool:
        default = Signature.default()
        return all(signature != default for signature in transaction.signatures)

    def signature_of(self, transaction: SolanaTransaction) -> Signature:
        """The fee payer's signature, which identifies the transaction."""
        if not transaction.signatures:
            raise ValidationError("Transaction has no signatures")
        return transaction.signatures[0]
