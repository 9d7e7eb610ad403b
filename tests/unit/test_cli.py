"""Unit tests for the command-line client."""

import json

import httpx
import pytest
from solders.pubkey import Pubkey

from solana_umi import __main__ as cli
from solana_umi.constants import TOKEN_PROGRAM_ID
from solana_umi.context import create_umi

from tests.fixtures.common import make_config, with_context


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from replacing the test log handlers."""
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


@pytest.fixture
def scripted_umi(monkeypatch, rpc_mock):
    """Route CLI contexts to the scripted node."""
    def factory(endpoint=None):
        return create_umi(
            endpoint,
            config=make_config(),
            http_client=httpx.AsyncClient(transport=rpc_mock.transport),
        )

    monkeypatch.setattr(cli, "create_umi", factory)
    return rpc_mock


class TestCli:
    """Test suite for the solana-umi command."""

    def test_pda(self, capsys):
        # Setup
        program_id = Pubkey.from_string(TOKEN_PROGRAM_ID)
        expected, bump = Pubkey.find_program_address([b"vault", bytes([1, 2])], program_id)

        # Execute
        exit_code = cli.main(["pda", TOKEN_PROGRAM_ID, "vault", "hex:0102"])

        # Verify
        out = capsys.readouterr().out
        assert exit_code == 0
        assert f"Address: {expected}" in out
        assert f"Bump: {bump}" in out

    def test_invalid_seed_reports_error(self, capsys):
        exit_code = cli.main(["pda", TOKEN_PROGRAM_ID, "x" * 33])

        assert exit_code == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_balance(self, capsys, scripted_umi, recipient):
        scripted_umi.on("getBalance", with_context(1_500_000_000))

        exit_code = cli.main(["balance", str(recipient)])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "1.5 SOL"

    def test_rent_without_header(self, capsys, scripted_umi):
        scripted_umi.on("getMinimumBalanceForRentExemption", 890_880)

        exit_code = cli.main(["rent", "100", "--no-header"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "0.000696 SOL"

    def test_cluster_uses_url_override(self, capsys, scripted_umi):
        exit_code = cli.main(["--url", "http://localhost:8899", "cluster"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "localnet (http://localhost:8899)"
        assert scripted_umi.calls == []

    def test_bad_address_returns_error(self, capsys, scripted_umi):
        exit_code = cli.main(["balance", "not-an-address"])

        assert exit_code == 1
        assert "Error:" in capsys.readouterr().err
        assert scripted_umi.calls == []

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            cli.main(["keygen"])

    def test_cluster_name_resolves_to_public_endpoint(self, capsys, scripted_umi):
        exit_code = cli.main(["--url", "devnet", "cluster"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "devnet (https://api.devnet.solana.com)"

    def test_json_errors(self, capsys, scripted_umi):
        """Failures can be reported as a structured error object."""
        # Execute
        exit_code = cli.main(["--json-errors", "balance", "not-an-address"])

        # Verify
        error = json.loads(capsys.readouterr().err)
        assert exit_code == 1
        assert error["code"] == "INVALID_PUBLIC_KEY"
        assert error["message"] == "Invalid public key: not-an-address"
        assert error["details"] == {"pubkey": "not-an-address"}
