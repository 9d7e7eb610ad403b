"""Unit tests for program error resolution."""

import pytest
from solders.pubkey import Pubkey

from solana_umi.constants import MPL_CORE_PROGRAM_ID, SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID
from solana_umi.programs import Program, ProgramRepository
from solana_umi.utils.errors import ProgramError, RpcError

CUSTOM_PROGRAM = "Fg6PaFpoGXkYsidMpWTK6W2BeZ7FEfcYkg476zPFsLnS"


@pytest.fixture
def programs():
    return ProgramRepository()


class TestProgramRepository:
    """Test suite for the program registry."""

    def test_default_programs(self, programs):
        assert programs.has(SYSTEM_PROGRAM_ID)
        assert programs.has(Pubkey.from_string(TOKEN_PROGRAM_ID))
        assert programs.get(MPL_CORE_PROGRAM_ID).name == "MPL Core"
        assert len(programs.all()) == 7

    def test_register_replaces_entry(self, programs):
        custom = Program("escrow", Pubkey.from_string(CUSTOM_PROGRAM), {6000: ("Locked", "Escrow is locked")})

        programs.register(custom)

        assert programs.get(CUSTOM_PROGRAM) is custom

    def test_error_from_code(self, programs):
        error = programs.get(TOKEN_PROGRAM_ID).get_error_from_code(1)

        assert error.name == "InsufficientFunds"
        assert error.error_message == "Insufficient funds"
        assert "InsufficientFunds" in error.message


class TestResolveError:
    """Test suite for resolve_error."""

    def test_program_failed_log(self, programs):
        logs = [
            f"Program {TOKEN_PROGRAM_ID} invoke [1]",
            "Program log: Error: insufficient funds",
            f"Program {TOKEN_PROGRAM_ID} failed: custom program error: 0x1",
        ]

        error = programs.resolve_logs(logs)

        assert isinstance(error, ProgramError)
        assert error.program_id == TOKEN_PROGRAM_ID
        assert error.error_code == 1
        assert error.logs == logs

    def test_innermost_failing_program_wins(self, programs):
        """In a CPI chain the first failure line names the inner program."""
        logs = [
            f"Program {CUSTOM_PROGRAM} invoke [1]",
            f"Program {TOKEN_PROGRAM_ID} invoke [2]",
            f"Program {TOKEN_PROGRAM_ID} failed: custom program error: 0x11",
            f"Program {CUSTOM_PROGRAM} failed: custom program error: 0x11",
        ]

        error = programs.resolve_logs(logs)

        assert error.program_id == TOKEN_PROGRAM_ID
        assert error.name == "AccountFrozen"

    def test_anchor_error_log(self, programs):
        logs = [
            f"Program {CUSTOM_PROGRAM} invoke [1]",
            "Program log: Instruction: Deposit",
            "Program log: AnchorError occurred. Error Code: ConstraintSeeds. "
            "Error Number: 2006. Error Message: A seeds constraint was violated.",
            f"Program {CUSTOM_PROGRAM} consumed 5000 of 200000 compute units",
        ]

        error = programs.resolve_logs(logs)

        assert error.program_id == CUSTOM_PROGRAM
        assert error.error_code == 2006
        assert error.name == "ConstraintSeeds"
        assert error.error_message == "A seeds constraint was violated"

    def test_unknown_program_keeps_raw_code(self, programs):
        logs = [f"Program {CUSTOM_PROGRAM} failed: custom program error: 0x1770"]

        error = programs.resolve_logs(logs)

        assert error.program_id == CUSTOM_PROGRAM
        assert error.error_code == 6000
        assert error.name is None

    def test_instruction_error_uses_transaction(self, programs, signed_transfer):
        error = programs.resolve_logs([], {"InstructionError": [0, {"Custom": 3}]}, signed_transfer)

        assert error.program_id == SYSTEM_PROGRAM_ID
        assert error.name == "InvalidAccountDataLength"

    def test_rpc_message_uses_transaction(self, programs, signed_transfer):
        failure = RpcError(
            "Transaction simulation failed: Error processing Instruction 0: custom program error: 0x0",
            rpc_error={"code": -32002, "data": {"logs": []}},
        )

        error = programs.resolve_error(failure, signed_transfer)

        assert error.program_id == SYSTEM_PROGRAM_ID
        assert error.error_code == 0

    def test_asset_create_failure_is_named(self, programs):
        logs = [
            f"Program {MPL_CORE_PROGRAM_ID} invoke [1]",
            "Program log: Instruction: Create",
            f"Program {MPL_CORE_PROGRAM_ID} failed: custom program error: 0x13",
        ]

        error = programs.resolve_logs(logs)

        assert error.program_id == MPL_CORE_PROGRAM_ID
        assert error.error_code == 19
        assert error.name == "InvalidCollection"
        assert error.program_name == "MPL Core"

    def test_instruction_error_without_transaction_is_unresolved(self, programs):
        assert programs.resolve_logs([], {"InstructionError": [0, {"Custom": 3}]}) is None

    @pytest.mark.parametrize("logs, err", [
        ([], None),
        (["Program log: hello"], "AccountNotFound"),
        ([], {"InstructionError": [0, "InvalidAccountData"]}),
        ([], {"InstructionError": [7]}),
    ])
    def test_unrecognized_failures_return_none(self, programs, logs, err):
        assert programs.resolve_logs(logs, err) is None

    def test_never_raises(self, programs, signed_transfer):
        """Malformed input degrades to None."""
        assert programs.resolve_logs(["Program x failed: custom program error: 0xZZ"]) is None
        assert programs.resolve_logs([], {"InstructionError": [99, {"Custom": 1}]}, signed_transfer) is None
        assert programs.resolve_logs([], {"InstructionError": ["a", {"Custom": 1}]}, signed_transfer) is None
        assert programs.resolve_error(object()) is None
