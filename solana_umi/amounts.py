"""Native currency amounts.

Balances, rent and transfers are carried as integer lamports. Decimal is
used only at the edges to parse and render SOL strings, so no amount ever
passes through a float.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

from solana_umi.constants import LAMPORTS_PER_SOL, MAX_LAMPORTS, SOL_DECIMALS, SOL_SYMBOL
from solana_umi.utils.errors import ValidationError


@dataclass(frozen=True, order=True)
class SolAmount:
    """A non-negative amount of SOL, stored in lamports as a u64."""

    basis_points: int

    def __post_init__(self):
        if isinstance(self.basis_points, bool) or not isinstance(self.basis_points, int):
            raise ValidationError(
                "SOL amounts must be integer lamports",
                details={"type": type(self.basis_points).__name__}
            )
        if self.basis_points < 0:
            raise ValidationError(
                "SOL amounts cannot be negative",
                details={"lamports": self.basis_points}
            )
        if self.basis_points > MAX_LAMPORTS:
            raise ValidationError(
                "SOL amounts cannot exceed an unsigned 64-bit lamport count",
                details={"lamports": self.basis_points, "max": MAX_LAMPORTS}
            )

    @property
    def lamports(self) -> int:
        return self.basis_points

    @property
    def identifier(self) -> str:
        return SOL_SYMBOL

    @property
    def decimals(self) -> int:
        return SOL_DECIMALS

    def is_zero(self) -> bool:
        return self.basis_points == 0

    def to_decimal(self) -> Decimal:
        """The amount in whole SOL."""
        return Decimal(self.basis_points) / Decimal(LAMPORTS_PER_SOL)

    def __add__(self, other: "SolAmount") -> "SolAmount":
        if not isinstance(other, SolAmount):
            return NotImplemented
        return SolAmount(self.basis_points + other.basis_points)

    def __sub__(self, other: "SolAmount") -> "SolAmount":
        if not isinstance(other, SolAmount):
            return NotImplemented
        if other.basis_points > self.basis_points:
            raise ValidationError(
                "Subtraction would produce a negative SOL amount",
                details={"minuend": self.basis_points, "subtrahend": other.basis_points}
            )
        return SolAmount(self.basis_points - other.basis_points)

    def __mul__(self, factor: int) -> "SolAmount":
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        return SolAmount(self.basis_points * factor)

    __rmul__ = __mul__

    def __str__(self) -> str:
        text = f"{self.to_decimal():f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return f"{text} {SOL_SYMBOL}"


def lamports(amount: int) -> SolAmount:
    """Create an amount from integer lamports."""
    return SolAmount(amount)


def sol(amount: Union[str, int, Decimal]) -> SolAmount:
    """Create an amount from whole SOL.

    Args:
        amount: SOL as an integer, a Decimal or a decimal string such as "1.5"

    Raises:
        ValidationError: For floats, malformed strings or sub-lamport precision
    """
    if isinstance(amount, float):
        raise ValidationError("Pass SOL amounts as str or Decimal, not float")
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid SOL amount: {amount!r}") from e
    if not value.is_finite():
        raise ValidationError(f"Invalid SOL amount: {amount!r}")

    scaled = value * LAMPORTS_PER_SOL
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            f"SOL amount has more than {SOL_DECIMALS} decimal places",
            details={"amount": str(amount)}
        )
    return SolAmount(int(scaled))
