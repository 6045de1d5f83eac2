"""
Denomination conversions.

The engine works in yen only. Amounts entered in other denominations are
converted here, at the boundary, before a configuration is built.
"""

import enum

MAN_YEN = 10_000


class AmountUnit(str, enum.Enum):
    """Denominations accepted at the input boundary."""

    yen = "yen"
    man_yen = "man_yen"

    @property
    def factor(self) -> int:
        if self is AmountUnit.man_yen:
            return MAN_YEN
        return 1


def to_base(amount: float, unit: AmountUnit = AmountUnit.yen) -> float:
    """Convert an amount in `unit` to yen."""
    return amount * AmountUnit(unit).factor
