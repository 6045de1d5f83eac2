"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results. Monetary inputs
may be given in yen or man-yen; they are converted to yen here, before the
engine runs. All results are in yen.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from propcalc.calculations import irr, rent
from propcalc.calculations.amortization import (
    calculate_total_interest,
    calculate_total_principal,
    generate_amortization_schedule,
)
from propcalc.calculations.errors import ConfigValidationError, InvalidInputError
from propcalc.calculations.models import (
    AcquisitionCosts,
    ExpenseRule,
    ExpenseRules,
    PropertyLoanConfig,
    StructureClass,
)
from propcalc.calculations.simulation import run_simulation
from propcalc.calculations.units import AmountUnit, to_base
from propcalc.calculations.validation import validate
from propcalc.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class ExpenseRuleInput(BaseModel):
    """Rate of rent (%) and flat amount; the larger is charged."""

    rate_percent: float = 0.0
    amount: float = 0.0


class ExpenseRulesInput(BaseModel):
    """Recurring expenses. Monthly floors for the first three, annual for the rest."""

    management_fee: ExpenseRuleInput = ExpenseRuleInput()
    management_commission: ExpenseRuleInput = ExpenseRuleInput()
    maintenance_reserve: ExpenseRuleInput = ExpenseRuleInput()
    property_tax: ExpenseRuleInput = ExpenseRuleInput()
    insurance: ExpenseRuleInput = ExpenseRuleInput()
    other: ExpenseRuleInput = ExpenseRuleInput()


class AcquisitionCostsInput(BaseModel):
    """One-off purchase costs."""

    brokerage_fee: float = 0.0
    registration_fee: float = 0.0
    acquisition_tax: float = 0.0
    stamp_duty: float = 0.0
    loan_fee: float = 0.0
    survey_fee: float = 0.0
    miscellaneous_fees: float = 0.0


class SimulationInput(BaseModel):
    """Input for a full projection."""

    name: str = ""
    unit: Optional[AmountUnit] = None

    # Property
    purchase_price: float
    owner_equity: float = 0.0
    building_price: float = 0.0
    structure: StructureClass = StructureClass.wood
    occupancy_rate: float = 100.0

    # Rent
    initial_rent: float
    rent_fixed_period: int = 1
    rent_adjustment_interval: int = 1
    rent_adjustment_rate: float = 0.0

    # Loan
    loan_rate: float = 2.0
    loan_term: int = 35
    loan_start_date: date

    expenses: ExpenseRulesInput = ExpenseRulesInput()
    acquisition_costs: AcquisitionCostsInput = AcquisitionCostsInput()

    def to_config(self) -> PropertyLoanConfig:
        """Build an engine configuration, converting amounts to yen."""
        unit = self.unit or get_settings().default_unit

        def amount(value: float) -> float:
            return to_base(value, unit)

        def rule(item: ExpenseRuleInput) -> ExpenseRule:
            return ExpenseRule(rate_percent=item.rate_percent, amount=amount(item.amount))

        costs = self.acquisition_costs

        return PropertyLoanConfig(
            name=self.name,
            purchase_price=amount(self.purchase_price),
            owner_equity=amount(self.owner_equity),
            building_price=amount(self.building_price),
            structure=self.structure,
            occupancy_rate=self.occupancy_rate,
            initial_rent=amount(self.initial_rent),
            rent_fixed_period=self.rent_fixed_period,
            rent_adjustment_interval=self.rent_adjustment_interval,
            rent_adjustment_rate=self.rent_adjustment_rate,
            loan_rate=self.loan_rate,
            loan_term=self.loan_term,
            loan_start_date=self.loan_start_date,
            expenses=ExpenseRules(
                management_fee=rule(self.expenses.management_fee),
                management_commission=rule(self.expenses.management_commission),
                maintenance_reserve=rule(self.expenses.maintenance_reserve),
                property_tax=rule(self.expenses.property_tax),
                insurance=rule(self.expenses.insurance),
                other=rule(self.expenses.other),
            ),
            acquisition_costs=AcquisitionCosts(
                brokerage_fee=amount(costs.brokerage_fee),
                registration_fee=amount(costs.registration_fee),
                acquisition_tax=amount(costs.acquisition_tax),
                stamp_duty=amount(costs.stamp_duty),
                loan_fee=amount(costs.loan_fee),
                survey_fee=amount(costs.survey_fee),
                miscellaneous_fees=amount(costs.miscellaneous_fees),
            ),
        )


class SimulationResponse(BaseModel):
    """Summary plus the three result tables."""

    name: str
    summary: dict
    amortization: List[dict]
    annual: List[dict]
    exits: List[dict]


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[str]


@router.post("/simulation", response_model=SimulationResponse)
async def calculate_simulation(inputs: SimulationInput):
    """Run the full projection: loan, annual cash flow and exit tables."""
    try:
        result = run_simulation(inputs.to_config())
    except ConfigValidationError as e:
        logger.info(f"Simulation rejected: {e.errors}")
        raise HTTPException(status_code=422, detail={"errors": e.errors})

    return SimulationResponse(**result.to_dict())


@router.post("/validate", response_model=ValidationResponse)
async def validate_inputs(inputs: SimulationInput):
    """Report every validation problem without running the projection."""
    result = validate(inputs.to_config())
    return ValidationResponse(valid=result.valid, errors=result.errors)


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate_percent: float
    term_years: int
    start_date: date
    unit: Optional[AmountUnit] = None


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    unit = inputs.unit or get_settings().default_unit

    try:
        schedule = generate_amortization_schedule(
            principal=to_base(inputs.principal, unit),
            annual_rate_percent=inputs.annual_rate_percent,
            term_years=inputs.term_years,
            start_date=inputs.start_date,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "schedule": [row.to_dict() for row in schedule],
        "total_interest": round(calculate_total_interest(schedule), 2),
        "total_principal": round(calculate_total_principal(schedule), 2),
    }


class RentScheduleInput(BaseModel):
    """Input for rent schedule calculation."""

    total_years: int
    initial_rent: float
    rent_fixed_period: int = 1
    rent_adjustment_interval: int = 1
    rent_adjustment_rate: float = 0.0
    unit: Optional[AmountUnit] = None


@router.post("/rent-schedule")
async def calculate_rent_schedule(inputs: RentScheduleInput):
    """Monthly rent for each year of the horizon."""
    if inputs.rent_fixed_period < 1 or inputs.rent_adjustment_interval < 1:
        raise HTTPException(
            status_code=400,
            detail="Rent fixed period and adjustment interval must be at least 1",
        )
    if not 0 <= inputs.rent_adjustment_rate <= 100:
        raise HTTPException(
            status_code=400,
            detail="Rent adjustment rate must be between 0 and 100",
        )

    unit = inputs.unit or get_settings().default_unit
    params = (
        to_base(inputs.initial_rent, unit),
        inputs.rent_fixed_period,
        inputs.rent_adjustment_interval,
        inputs.rent_adjustment_rate,
    )
    rents = rent.generate_rent_schedule(inputs.total_years, *params)

    return {
        "schedule": [
            {
                "year": year,
                "monthly_rent": monthly_rent,
                "annual_rent": rent.calculate_annual_rent_income(year, *params),
            }
            for year, monthly_rent in enumerate(rents, start=1)
        ],
        "total_income": rent.calculate_total_rent_income(inputs.total_years, *params),
    }


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    guess: float = irr.DEFAULT_GUESS


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: Optional[float]
    equity_multiple: Optional[float]
    npv_at_guess: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given cash flows (initial investment first)."""
    try:
        irr_val = irr.solve_irr(inputs.cash_flows, inputs.guess)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return IRRResponse(
        irr=irr_val,
        equity_multiple=irr.calculate_equity_multiple(
            inputs.cash_flows[1:], -inputs.cash_flows[0]
        ),
        npv_at_guess=irr.calculate_npv(inputs.cash_flows, inputs.guess),
    )
