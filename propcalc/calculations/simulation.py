"""
Full projection pipeline.

validate -> rent schedule -> amortization -> annual cash flow -> exit
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from propcalc.calculations.amortization import (
    calculate_debt_service,
    calculate_total_interest,
    generate_amortization_schedule,
)
from propcalc.calculations.cashflow import aggregate_by_year
from propcalc.calculations.errors import ConfigValidationError
from propcalc.calculations.exit import project_exit
from propcalc.calculations.models import (
    AmortizationRow,
    AnnualCashFlowRow,
    ExitRow,
    PropertyLoanConfig,
)
from propcalc.calculations.rent import rent_function
from propcalc.calculations.validation import validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationSummary:
    """Headline figures for the first year of operation."""

    loan_amount: float
    total_purchase_cost: float
    monthly_payment: float
    yearly_income: float
    yearly_expenses: float
    yearly_cost: float
    yearly_profit: float
    gross_yield: float
    net_yield: float
    equity_yield: float
    total_interest: float

    def to_dict(self) -> Dict:
        return {
            "loan_amount": round(self.loan_amount, 2),
            "total_purchase_cost": round(self.total_purchase_cost, 2),
            "monthly_payment": round(self.monthly_payment, 2),
            "yearly_income": round(self.yearly_income, 2),
            "yearly_expenses": round(self.yearly_expenses, 2),
            "yearly_cost": round(self.yearly_cost, 2),
            "yearly_profit": round(self.yearly_profit, 2),
            "gross_yield": round(self.gross_yield, 1),
            "net_yield": round(self.net_yield, 1),
            "equity_yield": round(self.equity_yield, 1),
            "total_interest": round(self.total_interest, 2),
        }


@dataclass(frozen=True)
class SimulationResult:
    name: str
    summary: SimulationSummary
    amortization: List[AmortizationRow]
    annual: List[AnnualCashFlowRow]
    exits: List[ExitRow]

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "summary": self.summary.to_dict(),
            "amortization": [row.to_dict() for row in self.amortization],
            "annual": [row.to_dict() for row in self.annual],
            "exits": [row.to_dict() for row in self.exits],
        }


def calculate_yearly_expenses(config: PropertyLoanConfig) -> float:
    """First-year operating expenses, maintenance reserve included."""
    monthly_rent = config.initial_rent * config.occupancy_rate / 100
    rules = config.expenses

    monthly = (
        rules.management_fee.resolve(monthly_rent)
        + rules.management_commission.resolve(monthly_rent)
        + rules.maintenance_reserve.resolve(monthly_rent)
    )
    annual_rent = monthly_rent * 12
    annual = (
        rules.property_tax.resolve(annual_rent)
        + rules.insurance.resolve(annual_rent)
        + rules.other.resolve(annual_rent)
    )
    return monthly * 12 + annual


def summarize(
    config: PropertyLoanConfig, schedule: List[AmortizationRow]
) -> SimulationSummary:
    """Compute the headline yields and first-year income/cost figures."""
    monthly_payment = schedule[0].payment if schedule else 0.0
    yearly_income = config.initial_rent * 12 * config.occupancy_rate / 100
    yearly_expenses = calculate_yearly_expenses(config)
    yearly_cost = yearly_expenses + calculate_debt_service(schedule, 1, 12)
    yearly_profit = yearly_income - yearly_cost

    total_purchase_cost = config.total_purchase_cost

    gross_yield = (
        yearly_income / config.purchase_price * 100
        if config.purchase_price > 0
        else 0.0
    )
    net_yield = (
        yearly_profit / total_purchase_cost * 100 if total_purchase_cost > 0 else 0.0
    )
    equity_yield = (
        yearly_profit / config.owner_equity * 100 if config.owner_equity > 0 else 0.0
    )

    return SimulationSummary(
        loan_amount=config.loan_amount,
        total_purchase_cost=total_purchase_cost,
        monthly_payment=monthly_payment,
        yearly_income=yearly_income,
        yearly_expenses=yearly_expenses,
        yearly_cost=yearly_cost,
        yearly_profit=yearly_profit,
        gross_yield=gross_yield,
        net_yield=net_yield,
        equity_yield=equity_yield,
        total_interest=calculate_total_interest(schedule),
    )


def run_simulation(config: PropertyLoanConfig) -> SimulationResult:
    """
    Run the full projection for a configuration.

    Raises:
        ConfigValidationError: If the configuration fails validation
    """
    result = validate(config)
    if not result.valid:
        logger.warning(
            f"Rejected configuration '{config.name}': {len(result.errors)} error(s)"
        )
        raise ConfigValidationError(result.errors)

    logger.debug(
        f"Running simulation '{config.name}' over {config.loan_term} years, "
        f"loan {config.loan_amount:.0f}"
    )

    schedule = generate_amortization_schedule(
        principal=config.loan_amount,
        annual_rate_percent=config.loan_rate,
        term_years=int(config.loan_term),
        start_date=config.loan_start_date,
    )

    rent_for_year = rent_function(
        config.initial_rent,
        int(config.rent_fixed_period),
        int(config.rent_adjustment_interval),
        config.rent_adjustment_rate,
    )

    annual = aggregate_by_year(
        schedule,
        rent_for_year,
        config.occupancy_rate,
        config.expenses,
        config.structure.lifespan_years,
        config.building_price,
    )

    exits = project_exit(annual, config.purchase_price, config.owner_equity)

    return SimulationResult(
        name=config.name,
        summary=summarize(config, schedule),
        amortization=schedule,
        annual=annual,
        exits=exits,
    )
