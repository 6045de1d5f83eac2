"""
Rent Adjustment Schedule

Monthly rent stays at the initial level during the fixed period, then steps
down by a fixed percentage once every adjustment interval (compounding).

Example: initial rent 100,000, fixed 3 years, interval 2 years, rate 5%
    years 1-4: 100,000, years 5-6: 95,000, years 7-8: 90,250, ...
"""

import math
from typing import Callable, List


def calculate_rent_for_year(
    year: int,
    initial_rent: float,
    fixed_period: int,
    adjustment_interval: int,
    adjustment_rate: float,
) -> float:
    """
    Calculate the nominal monthly rent for a given year.

    Args:
        year: Year number (1-based)
        initial_rent: Monthly rent during the fixed period
        fixed_period: Years during which rent is not adjusted
        adjustment_interval: Years between adjustments after the fixed period
        adjustment_rate: Percentage decrease per adjustment (e.g., 5 for 5%)

    Returns:
        Monthly rent for that year, rounded to the nearest unit (halves up)
    """
    if year <= fixed_period:
        return initial_rent

    adjustment_count = (year - fixed_period) // adjustment_interval
    multiplier = (1 - adjustment_rate / 100) ** adjustment_count

    return float(math.floor(initial_rent * multiplier + 0.5))


def generate_rent_schedule(
    total_years: int,
    initial_rent: float,
    fixed_period: int,
    adjustment_interval: int,
    adjustment_rate: float,
) -> List[float]:
    """Monthly rent for years 1..total_years (index 0 is year 1)."""
    return [
        calculate_rent_for_year(
            year, initial_rent, fixed_period, adjustment_interval, adjustment_rate
        )
        for year in range(1, total_years + 1)
    ]


def calculate_annual_rent_income(
    year: int,
    initial_rent: float,
    fixed_period: int,
    adjustment_interval: int,
    adjustment_rate: float,
) -> float:
    """Nominal rent income for a full year."""
    return (
        calculate_rent_for_year(
            year, initial_rent, fixed_period, adjustment_interval, adjustment_rate
        )
        * 12
    )


def calculate_total_rent_income(
    total_years: int,
    initial_rent: float,
    fixed_period: int,
    adjustment_interval: int,
    adjustment_rate: float,
) -> float:
    """Nominal rent income summed over years 1..total_years."""
    return sum(
        rent * 12
        for rent in generate_rent_schedule(
            total_years, initial_rent, fixed_period, adjustment_interval, adjustment_rate
        )
    )


def rent_function(
    initial_rent: float,
    fixed_period: int,
    adjustment_interval: int,
    adjustment_rate: float,
) -> Callable[[int], float]:
    """Bind rent parameters into a `year -> monthly rent` callable."""

    def rent_for_year(year: int) -> float:
        return calculate_rent_for_year(
            year, initial_rent, fixed_period, adjustment_interval, adjustment_rate
        )

    return rent_for_year
