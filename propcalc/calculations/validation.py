"""
Configuration validation.

Checks every field of a PropertyLoanConfig against its allowed range and
collects all violations, so the caller can report them at once.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List
import math

from propcalc.calculations.models import (
    AcquisitionCosts,
    ExpenseRules,
    PropertyLoanConfig,
    StructureClass,
)

MIN_LOAN_TERM = 1
MAX_LOAN_TERM = 35


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def is_number(value) -> bool:
    """True for finite ints and floats (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_integer(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


class _Checker:
    """Accumulates error messages for one validation pass."""

    def __init__(self):
        self.errors: List[str] = []

    def number(self, value, label: str) -> bool:
        if not is_number(value):
            self.errors.append(f"{label} must be a number")
            return False
        return True

    def positive(self, value, label: str):
        if self.number(value, label) and value <= 0:
            self.errors.append(f"{label} must be greater than 0")

    def non_negative(self, value, label: str):
        if self.number(value, label) and value < 0:
            self.errors.append(f"{label} must be 0 or greater")

    def percentage(self, value, label: str):
        if self.number(value, label) and not 0 <= value <= 100:
            self.errors.append(f"{label} must be between 0 and 100")

    def integer_at_least(self, value, label: str, minimum: int):
        if not self.number(value, label):
            return
        if not is_integer(value):
            self.errors.append(f"{label} must be a whole number of years")
        elif value < minimum:
            self.errors.append(f"{label} must be at least {minimum}")


def validate(config: PropertyLoanConfig) -> ValidationResult:
    """
    Validate a configuration without modifying it.

    Returns:
        ValidationResult with valid=True and no errors, or valid=False and
        every violation found, in field order.
    """
    check = _Checker()

    check.positive(config.purchase_price, "Purchase price")
    check.non_negative(config.owner_equity, "Owner equity")
    check.non_negative(config.building_price, "Building price")

    if not isinstance(config.structure, StructureClass):
        allowed = ", ".join(s.value for s in StructureClass)
        check.errors.append(f"Structure must be one of: {allowed}")

    check.percentage(config.occupancy_rate, "Occupancy rate")
    check.non_negative(config.initial_rent, "Monthly rent")
    check.integer_at_least(config.rent_fixed_period, "Rent fixed period", 1)
    check.integer_at_least(
        config.rent_adjustment_interval, "Rent adjustment interval", 1
    )
    check.percentage(config.rent_adjustment_rate, "Rent adjustment rate")
    check.non_negative(config.loan_rate, "Loan interest rate")

    if check.number(config.loan_term, "Loan term"):
        if not is_integer(config.loan_term):
            check.errors.append("Loan term must be a whole number of years")
        elif not MIN_LOAN_TERM <= config.loan_term <= MAX_LOAN_TERM:
            check.errors.append(
                f"Loan term must be between {MIN_LOAN_TERM} and {MAX_LOAN_TERM} years"
            )

    if not isinstance(config.loan_start_date, date):
        check.errors.append("Loan start date must be a valid date")

    if isinstance(config.expenses, ExpenseRules):
        for name, rule in config.expenses.items():
            label = name.replace("_", " ").capitalize()
            check.percentage(rule.rate_percent, f"{label} rate")
            check.non_negative(rule.amount, f"{label} amount")
    else:
        check.errors.append("Expense rules are missing")

    if isinstance(config.acquisition_costs, AcquisitionCosts):
        for name, amount in config.acquisition_costs.items():
            label = name.replace("_", " ").capitalize()
            check.non_negative(amount, label)
    else:
        check.errors.append("Acquisition costs are missing")

    # Cross-field checks run whenever their own operands are numbers
    costs_usable = isinstance(config.acquisition_costs, AcquisitionCosts) and all(
        is_number(amount) for _, amount in config.acquisition_costs.items()
    )
    if (
        costs_usable
        and is_number(config.owner_equity)
        and is_number(config.purchase_price)
        and config.owner_equity > config.total_purchase_cost
    ):
        check.errors.append("Owner equity cannot exceed the total purchase cost")
    if (
        is_number(config.building_price)
        and is_number(config.purchase_price)
        and config.building_price > config.purchase_price
    ):
        check.errors.append("Building price cannot exceed the purchase price")

    return ValidationResult(valid=not check.errors, errors=check.errors)
