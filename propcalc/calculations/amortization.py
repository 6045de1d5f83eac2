"""
Loan Amortization Calculations

Implements the fixed-payment (annuity) loan schedule, matching Excel's PMT,
IPMT and PPMT functions. Rates are given as annual percentages (2.0 for 2%).
"""

from typing import List
from datetime import date
from dateutil.relativedelta import relativedelta

from propcalc.calculations.errors import InvalidInputError
from propcalc.calculations.models import AmortizationRow


def calculate_payment(
    principal: float, annual_rate_percent: float, term_months: int
) -> float:
    """
    Calculate the fixed monthly loan payment.

    Matches Excel's PMT() function.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate in percent (e.g., 2.0 for 2%)
        term_months: Total number of monthly payments

    Returns:
        Monthly payment amount (positive number)
    """
    if term_months <= 0:
        raise InvalidInputError("Loan term must be at least one month")
    if principal < 0:
        raise InvalidInputError("Loan principal cannot be negative")

    monthly_rate = annual_rate_percent / 100 / 12

    if monthly_rate == 0:
        return principal / term_months

    return principal * monthly_rate / (1 - (1 + monthly_rate) ** (-term_months))


def generate_amortization_schedule(
    principal: float,
    annual_rate_percent: float,
    term_years: int,
    start_date: date,
) -> List[AmortizationRow]:
    """
    Generate a full amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate in percent
        term_years: Loan term in years
        start_date: Date of first payment

    Returns:
        One row per month, term_years * 12 rows

    Raises:
        InvalidInputError: If term_years <= 0 or principal < 0
    """
    if term_years <= 0:
        raise InvalidInputError("Loan term must be at least one year")
    if principal < 0:
        raise InvalidInputError("Loan principal cannot be negative")

    total_months = term_years * 12
    monthly_rate = annual_rate_percent / 100 / 12
    payment = calculate_payment(principal, annual_rate_percent, total_months)

    schedule = []
    balance = principal

    for month in range(1, total_months + 1):
        # Offset from the start date, not the previous row, so month-end
        # dates do not drift (Jan 31 -> Feb 28 -> Mar 31)
        row_date = start_date + relativedelta(months=month - 1)

        interest = balance * monthly_rate
        principal_pmt = payment - interest
        balance = balance - principal_pmt

        if month == total_months:
            balance = 0.0

        schedule.append(
            AmortizationRow(
                month=month,
                date=row_date,
                payment=payment,
                principal=principal_pmt,
                interest=interest,
                remaining=balance,
            )
        )

    return schedule


def calculate_total_interest(schedule: List[AmortizationRow]) -> float:
    """Calculate total interest paid over loan term."""
    return sum(row.interest for row in schedule)


def calculate_total_principal(schedule: List[AmortizationRow]) -> float:
    """Calculate total principal repaid over loan term."""
    return sum(row.principal for row in schedule)


def calculate_debt_service(
    schedule: List[AmortizationRow], start_month: int, end_month: int
) -> float:
    """Calculate total debt service (P+I) for a range of months."""
    return sum(
        row.payment for row in schedule if start_month <= row.month <= end_month
    )
