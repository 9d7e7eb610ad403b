"""Validation utilities for Solana Umi.

This module provides utilities for validating and normalizing
Solana-specific inputs (public keys, signatures, seeds).
"""

import re
from typing import Any, Union

from solders.pubkey import Pubkey
from solders.signature import Signature

from solana_umi.constants import PUBLIC_KEY_LENGTH, SIGNATURE_LENGTH
from solana_umi.utils.errors import InvalidPublicKeyError, ValidationError

# Solana public key validation pattern (base58 format)
PUBKEY_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
SIGNATURE_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{43,88}$")

PublicKeyInput = Union[Pubkey, str, bytes]
SignatureInput = Union[Signature, str, bytes]


def validate_public_key(pubkey: str) -> bool:
    """Validate a Solana public key.

    Args:
        pubkey: The public key to validate

    Returns:
        True if the public key is valid, False otherwise
    """
    if not pubkey or not isinstance(pubkey, str):
        return False
    if not PUBKEY_PATTERN.match(pubkey):
        return False
    try:
        Pubkey.from_string(pubkey)
    except ValueError:
        return False
    return True


def validate_transaction_signature(signature: str) -> bool:
    """Validate a Solana transaction signature.

    Args:
        signature: The transaction signature to validate

    Returns:
        True if the signature is valid, False otherwise
    """
    if not signature or not isinstance(signature, str):
        return False
    return bool(SIGNATURE_PATTERN.match(signature))


def to_pubkey(value: PublicKeyInput) -> Pubkey:
    """Normalize a public key input.

    Args:
        value: A Pubkey, its base58 text form or its 32 raw bytes

    Returns:
        The Pubkey

    Raises:
        InvalidPublicKeyError: If the value cannot be a public key
    """
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, str):
        if not validate_public_key(value):
            raise InvalidPublicKeyError(value)
        return Pubkey.from_string(value)
    if isinstance(value, (bytes, bytearray)):
        if len(value) != PUBLIC_KEY_LENGTH:
            raise InvalidPublicKeyError(bytes(value).hex())
        return Pubkey(bytes(value))
    raise InvalidPublicKeyError(value)


def to_signature(value: SignatureInput) -> Signature:
    """Normalize a transaction signature input.

    Raises:
        ValidationError: If the value is not a 64-byte signature
    """
    if isinstance(value, Signature):
        return value
    if isinstance(value, str):
        if not validate_transaction_signature(value):
            raise ValidationError(f"Invalid transaction signature format: {value}")
        try:
            return Signature.from_string(value)
        except ValueError as e:
            raise ValidationError(f"Invalid transaction signature: {value}") from e
    if isinstance(value, (bytes, bytearray)):
        if len(value) != SIGNATURE_LENGTH:
            raise ValidationError(
                "Transaction signature must be 64 bytes",
                details={"length": len(value)}
            )
        return Signature(bytes(value))
    raise ValidationError(f"Unsupported signature type: {type(value).__name__}")


def ensure_non_negative_int(value: Any, field_name: str) -> int:
    """Check an integer field that must not be negative (lamports, sizes, slots)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{field_name} must be an integer",
            details={"field": field_name, "type": type(value).__name__}
        )
    if value < 0:
        raise ValidationError(
            f"{field_name} must be non-negative",
            details={"field": field_name, "value": value}
        )
    return value
