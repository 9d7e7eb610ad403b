"""Program registry and error resolution.

Turns raw execution failures (program logs, instruction errors) into
structured :class:`~solana_umi.utils.errors.ProgramError` values.
Resolution is best-effort: anything it cannot parse yields ``None`` and the
caller keeps the raw error.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from solders.pubkey import Pubkey

from solana_umi.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    COMPUTE_BUDGET_PROGRAM_ID,
    MEMO_PROGRAM_ID,
    MPL_CORE_PROGRAM_ID,
    PROGRAM_NAMES,
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from solana_umi.logging_config import get_logger
from solana_umi.utils.errors import ProgramError

logger = get_logger(__name__)

INSTRUCTION_ERROR_PATTERN = re.compile(
    r"Error processing Instruction (\d+): custom program error: (0x[0-9a-fA-F]+)"
)
PROGRAM_FAILED_PATTERN = re.compile(
    r"Program (\w+) failed: custom program error: (0x[0-9a-fA-F]+)"
)
PROGRAM_INVOKE_PATTERN = re.compile(r"^Program (\w+) invoke \[\d+\]")
PROGRAM_EXIT_PATTERN = re.compile(r"^Program (\w+) (?:success|failed)")
ANCHOR_ERROR_PATTERN = re.compile(
    r"Error Code: (\w+)\. Error Number: (\d+)\. Error Message: (.*?)\.?$"
)


@dataclass(frozen=True)
class Program:
    """A known on-chain program and its custom error table."""

    name: str
    public_key: Pubkey
    errors: Dict[int, Tuple[str, str]] = field(default_factory=dict)

    def get_error_from_code(self, code: int, logs: Optional[Sequence[str]] = None) -> ProgramError:
        error_name, message = self.errors.get(code, (None, None))
        return ProgramError(
            program_id=str(self.public_key),
            error_code=code,
            message=message,
            name=error_name,
            program_name=self.name,
            logs=list(logs or []),
        )


SYSTEM_ERRORS = {
    0: ("AccountAlreadyInUse", "an account with the same address already exists"),
    1: ("ResultWithNegativeLamports", "account does not have enough SOL to perform the operation"),
    2: ("InvalidProgramId", "cannot assign account to this program id"),
    3: ("InvalidAccountDataLength", "cannot allocate account data of this length"),
    4: ("MaxSeedLengthExceeded", "length of requested seed is too long"),
    5: ("AddressWithSeedMismatch", "provided address does not match addressed derived from seed"),
    6: ("NonceNoRecentBlockhashes", "advancing stored nonce requires a populated RecentBlockhashes sysvar"),
    7: ("NonceBlockhashNotExpired", "stored nonce is still in recent_blockhashes"),
    8: ("NonceUnexpectedBlockhashValue", "specified nonce does not match stored nonce"),
}

TOKEN_ERRORS = {
    0: ("NotRentExempt", "Lamport balance below rent-exempt threshold"),
    1: ("InsufficientFunds", "Insufficient funds"),
    2: ("InvalidMint", "Invalid Mint"),
    3: ("MintMismatch", "Account not associated with this Mint"),
    4: ("OwnerMismatch", "Owner does not match"),
    5: ("FixedSupply", "Fixed supply"),
    6: ("AlreadyInUse", "Already in use"),
    7: ("InvalidNumberOfProvidedSigners", "Invalid number of provided signers"),
    8: ("InvalidNumberOfRequiredSigners", "Invalid number of required signers"),
    9: ("UninitializedState", "State is uninitialized"),
    10: ("NativeNotSupported", "Instruction does not support native tokens"),
    11: ("NonNativeHasBalance", "Non-native account can only be closed if its balance is zero"),
    12: ("InvalidInstruction", "Invalid instruction"),
    13: ("InvalidState", "State is invalid for requested operation"),
    14: ("Overflow", "Operation overflowed"),
    15: ("AuthorityTypeNotSupported", "Account does not support specified authority type"),
    16: ("MintCannotFreeze", "This token mint cannot freeze accounts"),
    17: ("AccountFrozen", "Account is frozen"),
    18: ("MintDecimalsMismatch", "The provided decimals value different from the Mint decimals"),
    19: ("NonNativeNotSupported", "Instruction does not support non-native tokens"),
}

ASSOCIATED_TOKEN_ERRORS = {
    0: ("InvalidOwner", "Associated token account owner does not match address derivation"),
}


# Errors the asset and collection create flows can return
MPL_CORE_ERRORS = {
    0: ("InvalidSystemProgram", "Invalid System Program"),
    1: ("DeserializationError", "Error deserializing account"),
    2: ("SerializationError", "Error serializing account"),
    3: ("PluginsNotInitialized", "Plugins not initialized"),
    4: ("PluginNotFound", "Plugin not found"),
    5: ("NumericalOverflow", "Numerical Overflow"),
    6: ("IncorrectAccount", "Incorrect account"),
    7: ("IncorrectAssetHash", "Incorrect asset hash"),
    8: ("InvalidPlugin", "Invalid Plugin"),
    9: ("InvalidAuthority", "Invalid Authority"),
    10: ("AssetIsFrozen", "Cannot transfer a frozen asset"),
    15: ("PluginAlreadyExists", "Plugin already exists"),
    19: ("InvalidCollection", "Invalid Collection passed in"),
    20: ("MissingUpdateAuthority", "Missing update authority"),
    21: ("MissingNewOwner", "Missing new owner"),
    22: ("MissingSystemProgram", "Missing system program"),
    23: ("NotAvailable", "Feature not available"),
    24: ("InvalidAsset", "Invalid Asset passed in"),
    25: ("MissingCollection", "Missing collection"),
    26: ("NoApprovals", "Neither the asset or any plugins have approved this operation"),
    28: ("InvalidPluginSetting", "Invalid setting for plugin"),
    29: ("ConflictingAuthority", "Cannot specify both an update authority and collection on an asset"),
}


def default_programs() -> List[Program]:
    """Programs every repository knows about out of the box."""
    tables = {
        SYSTEM_PROGRAM_ID: SYSTEM_ERRORS,
        TOKEN_PROGRAM_ID: TOKEN_ERRORS,
        TOKEN_2022_PROGRAM_ID: TOKEN_ERRORS,
        ASSOCIATED_TOKEN_PROGRAM_ID: ASSOCIATED_TOKEN_ERRORS,
        COMPUTE_BUDGET_PROGRAM_ID: {},
        MEMO_PROGRAM_ID: {},
        MPL_CORE_PROGRAM_ID: MPL_CORE_ERRORS,
    }
    return [
        Program(PROGRAM_NAMES[program_id], Pubkey.from_string(program_id), dict(errors))
        for program_id, errors in tables.items()
    ]


class ProgramRepository:
    """Registry of known programs, keyed by address."""

    def __init__(self, programs: Optional[Iterable[Program]] = None):
        self._programs: Dict[str, Program] = {}
        for program in default_programs() if programs is None else programs:
            self.register(program)

    def register(self, program: Program) -> None:
        """Add a program, replacing any earlier entry for the same address."""
        self._programs[str(program.public_key)] = program

    def get(self, program_id: Any) -> Optional[Program]:
        return self._programs.get(str(program_id))

    def has(self, program_id: Any) -> bool:
        return str(program_id) in self._programs

    def all(self) -> List[Program]:
        return list(self._programs.values())

    def resolve_error(self, raw_error: Any, transaction: Any = None) -> Optional[ProgramError]:
        """Translate a failure that carries execution logs into a ProgramError.

        Args:
            raw_error: The failure; its ``logs`` and ``err`` attributes and its
                message are inspected when present
            transaction: The transaction that failed, used to map an
                instruction index to its program

        Returns:
            The resolved error, or None when no known pattern matches
        """
        try:
            logs = [str(line) for line in (getattr(raw_error, "logs", None) or [])]
            message = str(getattr(raw_error, "message", None) or raw_error)
            err = getattr(raw_error, "err", None)
            return (
                self._from_logs(logs)
                or self._from_err(err, logs, transaction)
                or self._from_message(message, logs, transaction)
            )
        except Exception:
            logger.debug("Could not resolve program error", exc_info=True)
            return None

    def resolve_logs(self, logs: Sequence[str], err: Any = None,
                     transaction: Any = None) -> Optional[ProgramError]:
        """Resolve from a bare log list and optional ``err`` object."""
        return self.resolve_error(_RawFailure(list(logs), err), transaction)

    def _program_error(self, program_id: str, code: int, logs: List[str]) -> ProgramError:
        program = self.get(program_id)
        if program is not None:
            return program.get_error_from_code(code, logs)
        return ProgramError(program_id=program_id, error_code=code, logs=logs)

    def _from_logs(self, logs: List[str]) -> Optional[ProgramError]:
        stack: List[str] = []
        for line in logs:
            match = PROGRAM_FAILED_PATTERN.search(line)
            if match:
                return self._program_error(match.group(1), int(match.group(2), 16), logs)

            match = ANCHOR_ERROR_PATTERN.search(line)
            if match and stack:
                error = self._program_error(stack[-1], int(match.group(2)), logs)
                if error.name is None:
                    error = ProgramError(
                        program_id=error.program_id,
                        error_code=error.error_code,
                        message=match.group(3),
                        name=match.group(1),
                        program_name=error.program_name,
                        logs=logs,
                    )
                return error

            match = PROGRAM_INVOKE_PATTERN.search(line)
            if match:
                stack.append(match.group(1))
                continue
            if PROGRAM_EXIT_PATTERN.search(line) and stack:
                stack.pop()
        return None

    def _from_err(self, err: Any, logs: List[str], transaction: Any) -> Optional[ProgramError]:
        # {"InstructionError": [index, {"Custom": code}]}
        if not isinstance(err, dict):
            return None
        instruction_error = err.get("InstructionError")
        if not isinstance(instruction_error, list) or len(instruction_error) != 2:
            return None
        index, detail = instruction_error
        if not isinstance(detail, dict) or "Custom" not in detail:
            return None
        program_id = _instruction_program(transaction, int(index))
        if program_id is None:
            return None
        return self._program_error(program_id, int(detail["Custom"]), logs)

    def _from_message(self, message: str, logs: List[str], transaction: Any) -> Optional[ProgramError]:
        match = INSTRUCTION_ERROR_PATTERN.search(message)
        if not match:
            return None
        program_id = _instruction_program(transaction, int(match.group(1)))
        if program_id is None:
            return None
        return self._program_error(program_id, int(match.group(2), 16), logs)


@dataclass
class _RawFailure:
    logs: List[str]
    err: Any = None
    message: str = ""


def _instruction_program(transaction: Any, index: int) -> Optional[str]:
    if transaction is None:
        return None
    message = transaction.message
    instructions = message.instructions
    if not 0 <= index < len(instructions):
        return None
    program_index = instructions[index].program_id_index
    return str(message.account_keys[program_index])
