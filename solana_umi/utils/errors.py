"""
Error handling utilities for Solana Umi.

This module defines the exception hierarchy used across the client core.
Every error carries a stable code and a details dictionary so the calling
layer can render it without inspecting exception internals.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes for the Solana Umi client core."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"

    # Key engine errors
    INVALID_PUBLIC_KEY = "INVALID_PUBLIC_KEY"
    INVALID_KEY_MATERIAL = "INVALID_KEY_MATERIAL"
    INVALID_SEEDS = "INVALID_SEEDS"
    NO_VALID_BUMP_FOUND = "NO_VALID_BUMP_FOUND"

    # Solana RPC errors
    RPC_ERROR = "RPC_ERROR"
    RPC_TIMEOUT = "RPC_TIMEOUT"
    RPC_CONNECTION_ERROR = "RPC_CONNECTION_ERROR"

    # Execution errors
    SIMULATION_FAILURE = "SIMULATION_FAILURE"
    PROGRAM_ERROR = "PROGRAM_ERROR"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"

    # Confirmation errors
    TRANSACTION_EXPIRED = "TRANSACTION_EXPIRED"
    CONFIRMATION_TIMEOUT = "CONFIRMATION_TIMEOUT"


class ErrorResponse(BaseModel):
    """Standard error payload handed to the calling layer."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class SolanaUmiError(Exception):
    """Base exception for all Solana Umi errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new Solana Umi error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details
        }

    def to_response(self) -> ErrorResponse:
        """Convert the error to an ErrorResponse model."""
        return ErrorResponse(**self.to_dict())


class ValidationError(SolanaUmiError):
    """Exception for validation errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR
    ):
        super().__init__(message=message, code=code, details=details)


class ConfigurationError(SolanaUmiError):
    """Exception for invalid or missing configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            details=details
        )


class UnsupportedOperationError(SolanaUmiError):
    """Raised by entry points that are deliberately not available."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Unsupported operation: {operation}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message=message,
            code=ErrorCode.UNSUPPORTED_OPERATION,
            details={"operation": operation}
        )


class InvalidPublicKeyError(ValidationError):
    """Exception raised when an invalid public key is provided."""

    def __init__(self, pubkey: Any):
        super().__init__(
            message=f"Invalid public key: {pubkey}",
            details={"pubkey": str(pubkey)},
            code=ErrorCode.INVALID_PUBLIC_KEY
        )
        self.pubkey = pubkey


class InvalidKeyMaterialError(ValidationError):
    """Secret key or seed bytes that cannot form a keypair."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            details=details,
            code=ErrorCode.INVALID_KEY_MATERIAL
        )


class InvalidSeedsError(ValidationError):
    """Seeds that cannot produce a program address."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            details=details,
            code=ErrorCode.INVALID_SEEDS
        )


class NoValidBumpFoundError(SolanaUmiError):
    """None of the 256 bump seeds yields an off-curve address."""

    def __init__(self, program_id: str, seed_count: int):
        super().__init__(
            message=f"Unable to find a viable program address bump seed for {program_id}",
            code=ErrorCode.NO_VALID_BUMP_FOUND,
            details={"program_id": program_id, "seed_count": seed_count}
        )


class RpcError(SolanaUmiError):
    """Exception for Solana RPC errors."""

    def __init__(
        self,
        message: str,
        rpc_error: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.RPC_ERROR,
        method: Optional[str] = None
    ):
        details: Dict[str, Any] = {"rpc_error": rpc_error or {}}
        if method:
            details["method"] = method
        super().__init__(message=message, code=code, details=details)
        self.rpc_error = rpc_error or {}
        self.method = method

    @property
    def rpc_code(self) -> Optional[int]:
        """The JSON-RPC error code, if the node returned one."""
        return self.rpc_error.get("code")

    @property
    def data(self) -> Dict[str, Any]:
        data = self.rpc_error.get("data")
        return data if isinstance(data, dict) else {}

    @property
    def logs(self) -> Optional[List[str]]:
        """Program logs attached by a failed preflight simulation."""
        logs = self.data.get("logs")
        if isinstance(logs, list):
            return [str(line) for line in logs]
        return None

    @property
    def err(self) -> Any:
        """The transaction error object attached by the node."""
        return self.data.get("err")


class RpcTimeoutError(RpcError):
    """Exception for Solana RPC timeout errors."""

    def __init__(
        self,
        message: str,
        timeout: float,
        method: Optional[str] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RPC_TIMEOUT,
            method=method
        )
        self.details["timeout"] = timeout


class RpcConnectionError(RpcError):
    """Exception for Solana RPC connection errors."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        method: Optional[str] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RPC_CONNECTION_ERROR,
            method=method
        )
        if endpoint:
            self.details["endpoint"] = endpoint


class ProgramError(SolanaUmiError):
    """A failed instruction resolved to a program-specific error."""

    def __init__(
        self,
        program_id: str,
        error_code: int,
        message: Optional[str] = None,
        name: Optional[str] = None,
        program_name: Optional[str] = None,
        logs: Optional[List[str]] = None
    ):
        self.program_id = program_id
        self.error_code = error_code
        self.name = name
        self.program_name = program_name
        self.logs = list(logs or [])
        label = program_name or program_id
        text = message or f"custom program error: {hex(error_code)}"
        super().__init__(
            message=f"[{label}] {name + ': ' if name else ''}{text}",
            code=ErrorCode.PROGRAM_ERROR,
            details={
                "program_id": program_id,
                "program_name": program_name,
                "error_code": error_code,
                "error_name": name,
            }
        )
        self.error_message = text


class SimulationFailureError(SolanaUmiError):
    """A simulation aborted with an error no program could explain."""

    def __init__(self, err: Any, logs: Optional[List[str]] = None):
        super().__init__(
            message=f"Transaction simulation failed: {err}",
            code=ErrorCode.SIMULATION_FAILURE,
            details={"err": err}
        )
        self.err = err
        self.logs = list(logs or [])


class TransactionFailedError(SolanaUmiError):
    """A transaction landed but aborted with an unresolvable error."""

    def __init__(self, signature: str, err: Any, logs: Optional[List[str]] = None):
        super().__init__(
            message=f"Transaction {signature} failed: {err}",
            code=ErrorCode.TRANSACTION_FAILED,
            details={"signature": signature, "err": err}
        )
        self.signature = signature
        self.err = err
        self.logs = list(logs or [])


class TransactionExpiredError(SolanaUmiError):
    """The validity window lapsed before the transaction was observed.

    The original attempt is not known to have failed; rebuild with a fresh
    blockhash (or nonce) and resubmit.
    """

    def __init__(self, signature: str, strategy: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Transaction {signature} expired before it was confirmed",
            code=ErrorCode.TRANSACTION_EXPIRED,
            details={"signature": signature, "strategy": strategy or {}}
        )
        self.signature = signature


class ConfirmationTimeoutError(SolanaUmiError):
    """Polling stopped before a terminal status was seen.

    The transaction may still land; re-check the signature later.
    """

    def __init__(self, signature: str, attempts: int, elapsed: float):
        super().__init__(
            message=(
                f"Stopped waiting for {signature} after {attempts} attempts "
                f"({elapsed:.1f}s); the transaction may still land"
            ),
            code=ErrorCode.CONFIRMATION_TIMEOUT,
            details={"signature": signature, "attempts": attempts, "elapsed": elapsed}
        )
        self.signature = signature
