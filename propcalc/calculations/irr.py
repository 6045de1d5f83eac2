"""
IRR and NPV Calculations

Implements IRR using the Newton-Raphson method on annual cash flows.
Non-convergence yields None rather than an exception.
"""

from typing import List, Optional
import math
import numpy as np

from propcalc.calculations.errors import InvalidInputError

MAX_ITERATIONS = 50
NPV_TOLERANCE = 1.0  # One yen
DEFAULT_GUESS = 0.08
MIN_RATE = -0.9999


def calculate_npv(cash_flows: List[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Array of cash flows, period 0 first (negative = outflow)
        discount_rate: Periodic discount rate (e.g., 0.08 for 8%)

    Returns:
        NPV value
    """
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(flows / (1 + discount_rate) ** periods))


def _npv_derivative(cash_flows: List[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(-np.sum(periods * flows / (1 + rate) ** (periods + 1)))


def solve_irr(
    cash_flows: List[float], guess: float = DEFAULT_GUESS
) -> Optional[float]:
    """
    Calculate IRR (Internal Rate of Return) using Newton-Raphson method.

    Iterates until |NPV| < 1 or MAX_ITERATIONS is reached.

    Args:
        cash_flows: Array of periodic cash flows, initial investment first
        guess: Initial guess for rate (default 0.08 = 8%)

    Returns:
        IRR as decimal (e.g., 0.05 for 5%), or None if the solver
        diverges or does not converge

    Raises:
        InvalidInputError: If fewer than 2 cash flows are given
    """
    if len(cash_flows) < 2:
        raise InvalidInputError("At least 2 cash flows required")

    rate = guess

    for _ in range(MAX_ITERATIONS):
        npv = calculate_npv(cash_flows, rate)

        if abs(npv) < NPV_TOLERANCE:
            return rate

        dnpv = _npv_derivative(cash_flows, rate)
        if dnpv == 0:
            return None

        rate = rate - npv / dnpv

        if not math.isfinite(rate) or rate <= MIN_RATE:
            return None

    if abs(calculate_npv(cash_flows, rate)) < NPV_TOLERANCE:
        return rate
    return None


def calculate_equity_multiple(
    cash_flows: List[float], initial_equity: float
) -> Optional[float]:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Cash flows received after the initial investment
        initial_equity: Equity invested

    Returns:
        Multiple (e.g., 2.0 = 2.0x return), or None without equity
    """
    if initial_equity <= 0:
        return None
    return sum(cash_flows) / initial_equity
