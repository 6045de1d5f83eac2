"""
Annual Cash Flow Aggregation

Merges the rent schedule, the loan schedule and the recurring expense rules
into one row per year, with depreciation, corporate/local tax and after-tax
cash flow.

The maintenance reserve is accumulated, not spent: it is excluded from the
tax-deductible expenses and from the after-tax cash outflow, and its running
balance is carried on each row.
"""

from typing import Callable, List

from propcalc.calculations.models import (
    AmortizationRow,
    AnnualCashFlowRow,
    ExpenseRules,
)
from propcalc.calculations.tax import (
    calculate_corporate_tax,
    calculate_depreciation,
    calculate_local_tax,
)


def group_by_year(rows: List[AmortizationRow]) -> List[List[AmortizationRow]]:
    """Split monthly rows into consecutive 12-row buckets (last may be partial)."""
    return [rows[start:start + 12] for start in range(0, len(rows), 12)]


def aggregate_by_year(
    amortization_rows: List[AmortizationRow],
    rent_for_year: Callable[[int], float],
    occupancy_rate: float,
    expense_rules: ExpenseRules,
    structure_lifespan_years: int,
    building_price: float,
) -> List[AnnualCashFlowRow]:
    """
    Aggregate a monthly loan schedule into annual cash flow rows.

    Args:
        amortization_rows: Monthly loan rows, in order
        rent_for_year: Callable returning nominal monthly rent for a year
        occupancy_rate: Occupancy in percent (0-100)
        expense_rules: Recurring expense rules
        structure_lifespan_years: Useful life used for depreciation
        building_price: Depreciable building price

    Returns:
        One row per year; empty when there are no amortization rows
    """
    annual_rows = []
    cumulative_cash_flow = 0.0
    reserve_balance = 0.0
    book_value = building_price

    for index, bucket in enumerate(group_by_year(amortization_rows)):
        year = index + 1
        months = len(bucket)

        monthly_rent = rent_for_year(year) * occupancy_rate / 100
        rent = monthly_rent * months

        # Monthly rules: larger of rate-of-rent and floor, every month
        management_fee = (
            expense_rules.management_fee.resolve(monthly_rent) * months
        )
        management_commission = (
            expense_rules.management_commission.resolve(monthly_rent) * months
        )
        maintenance_reserve = (
            expense_rules.maintenance_reserve.resolve(monthly_rent) * months
        )

        # Annual charges, spread per month
        annual_rent = monthly_rent * 12
        property_tax = expense_rules.property_tax.resolve(annual_rent) / 12 * months
        insurance = expense_rules.insurance.resolve(annual_rent) / 12 * months
        other_expenses = expense_rules.other.resolve(annual_rent) / 12 * months

        payment = sum(row.payment for row in bucket)
        principal = sum(row.principal for row in bucket)
        interest = sum(row.interest for row in bucket)

        depreciation = min(
            calculate_depreciation(building_price, structure_lifespan_years, year),
            book_value,
        )
        book_value -= depreciation

        deductible = management_fee + management_commission + property_tax
        deductible += insurance + other_expenses

        taxable_income = max(0.0, rent - deductible - interest - depreciation)
        corporate_tax = calculate_corporate_tax(taxable_income)
        local_tax = calculate_local_tax(taxable_income, corporate_tax)
        total_tax = corporate_tax + local_tax

        cash_flow = rent - payment - deductible - total_tax
        cumulative_cash_flow += cash_flow
        reserve_balance += maintenance_reserve

        annual_rows.append(
            AnnualCashFlowRow(
                year=year,
                months=months,
                rent=rent,
                payment=payment,
                principal=principal,
                interest=interest,
                management_fee=management_fee,
                management_commission=management_commission,
                maintenance_reserve=maintenance_reserve,
                property_tax=property_tax,
                insurance=insurance,
                other_expenses=other_expenses,
                depreciation=depreciation,
                taxable_income=taxable_income,
                corporate_tax=corporate_tax,
                local_tax=local_tax,
                total_tax=total_tax,
                cash_flow=cash_flow,
                cumulative_cash_flow=cumulative_cash_flow,
                loan_balance=bucket[-1].remaining,
                building_book_value=max(0.0, book_value),
                reserve_balance=reserve_balance,
            )
        )

    return annual_rows