"""
Financial Projection Engine

Pure calculation modules for rental property investment analysis:
rent schedule, loan amortization, annual cash flow and tax, and exit metrics.
All amounts are in yen.
"""

from propcalc.calculations import (
    rent,
    amortization,
    tax,
    cashflow,
    irr,
    exit,
    validation,
    simulation,
)

__all__ = [
    "rent",
    "amortization",
    "tax",
    "cashflow",
    "irr",
    "exit",
    "validation",
    "simulation",
]
