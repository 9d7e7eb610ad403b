"""Unit tests for SOL amounts."""

from decimal import Decimal

import pytest

from solana_umi.amounts import SolAmount, lamports, sol
from solana_umi.utils.errors import ValidationError


class TestSolAmount:
    """Test suite for SolAmount."""

    def test_sol_parses_exact_decimal_strings(self):
        assert sol("1.5").lamports == 1_500_000_000
        assert sol("0.000000001").lamports == 1
        assert sol(2).lamports == 2_000_000_000
        assert sol(Decimal("0.1")).lamports == 100_000_000

    def test_sol_rejects_floats(self):
        with pytest.raises(ValidationError):
            sol(0.1)

    @pytest.mark.parametrize("amount", ["0.0000000001", "abc", "NaN", "Infinity", "-1"])
    def test_sol_rejects_invalid_amounts(self, amount):
        with pytest.raises(ValidationError):
            sol(amount)

    @pytest.mark.parametrize("value", [-1, 1.0, True, "5"])
    def test_lamports_must_be_non_negative_integers(self, value):
        with pytest.raises(ValidationError):
            SolAmount(value)

    def test_arithmetic_stays_in_integers(self):
        """Repeated small additions do not drift."""
        total = lamports(0)
        for _ in range(10):
            total = total + sol("0.1")

        assert total == sol(1)
        assert total - sol("0.25") == lamports(750_000_000)
        assert 3 * lamports(5) == lamports(15)
        assert lamports(5) * 3 == lamports(15)

    def test_subtraction_cannot_go_negative(self):
        with pytest.raises(ValidationError):
            lamports(1) - lamports(2)

    def test_ordering_and_zero(self):
        assert lamports(1) < lamports(2)
        assert lamports(0).is_zero()
        assert not lamports(1).is_zero()

    def test_formatting(self):
        assert str(sol("1.5")) == "1.5 SOL"
        assert str(sol(2)) == "2 SOL"
        assert str(lamports(1)) == "0.000000001 SOL"
        assert sol("1.5").identifier == "SOL"
        assert sol("1.5").decimals == 9

    def test_to_decimal_is_exact(self):
        assert sol("1.000000001").to_decimal() == Decimal("1.000000001")

    def test_amounts_fit_in_u64(self):
        """Lamport counts are unsigned 64-bit on the ledger."""
        assert lamports(2**64 - 1).lamports == 2**64 - 1

        with pytest.raises(ValidationError):
            lamports(2**64)
        with pytest.raises(ValidationError):
            sol("1e12")
        with pytest.raises(ValidationError):
            lamports(2**64 - 1) + lamports(1)
