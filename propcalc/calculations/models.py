"""
Value objects for the projection engine.

All monetary amounts are in yen (the engine's base unit). Rows are produced
by pure functions and carry no state beyond a single computation.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional
import enum


class StructureClass(str, enum.Enum):
    """Building structure class with its statutory useful life."""

    rc = "RC"
    src = "SRC"
    steel_heavy = "steel_heavy"
    steel_light = "steel_light"
    wood = "wood"

    @property
    def lifespan_years(self) -> int:
        return STRUCTURE_LIFESPANS[self]


STRUCTURE_LIFESPANS = {
    StructureClass.rc: 47,
    StructureClass.src: 47,
    StructureClass.steel_heavy: 34,
    StructureClass.steel_light: 19,
    StructureClass.wood: 22,
}


@dataclass(frozen=True)
class ExpenseRule:
    """
    Recurring expense expressed as a rate of rent with a flat amount.

    The larger of the two resolved values is charged.
    """

    rate_percent: float = 0.0
    amount: float = 0.0

    def resolve(self, rent: float) -> float:
        return max(rent * self.rate_percent / 100, self.amount)


@dataclass(frozen=True)
class ExpenseRules:
    """
    The six recurring expense rules of a property.

    Management fee, management commission and maintenance reserve are monthly
    rules (amount = monthly floor). Property tax, insurance and other are
    annual charges (amount = annual charge).
    """

    management_fee: ExpenseRule = field(default_factory=ExpenseRule)
    management_commission: ExpenseRule = field(default_factory=ExpenseRule)
    maintenance_reserve: ExpenseRule = field(default_factory=ExpenseRule)
    property_tax: ExpenseRule = field(default_factory=ExpenseRule)
    insurance: ExpenseRule = field(default_factory=ExpenseRule)
    other: ExpenseRule = field(default_factory=ExpenseRule)

    def items(self):
        return [
            ("management_fee", self.management_fee),
            ("management_commission", self.management_commission),
            ("maintenance_reserve", self.maintenance_reserve),
            ("property_tax", self.property_tax),
            ("insurance", self.insurance),
            ("other", self.other),
        ]


@dataclass(frozen=True)
class AcquisitionCosts:
    """One-off costs paid on purchase, on top of the price."""

    brokerage_fee: float = 0.0
    registration_fee: float = 0.0
    acquisition_tax: float = 0.0
    stamp_duty: float = 0.0
    loan_fee: float = 0.0
    survey_fee: float = 0.0
    miscellaneous_fees: float = 0.0

    def items(self):
        return [
            ("brokerage_fee", self.brokerage_fee),
            ("registration_fee", self.registration_fee),
            ("acquisition_tax", self.acquisition_tax),
            ("stamp_duty", self.stamp_duty),
            ("loan_fee", self.loan_fee),
            ("survey_fee", self.survey_fee),
            ("miscellaneous_fees", self.miscellaneous_fees),
        ]

    @property
    def total(self) -> float:
        return sum(value for _, value in self.items())


@dataclass(frozen=True)
class PropertyLoanConfig:
    """Complete input of one simulation run."""

    purchase_price: float
    owner_equity: float
    building_price: float
    structure: StructureClass
    occupancy_rate: float
    initial_rent: float  # Monthly, at 100% occupancy
    rent_fixed_period: int  # Years
    rent_adjustment_interval: int  # Years
    rent_adjustment_rate: float  # % decrease per adjustment
    loan_rate: float  # Annual %
    loan_term: int  # Years
    loan_start_date: date
    expenses: ExpenseRules = field(default_factory=ExpenseRules)
    acquisition_costs: AcquisitionCosts = field(default_factory=AcquisitionCosts)
    name: str = ""

    @property
    def total_purchase_cost(self) -> float:
        return self.purchase_price + self.acquisition_costs.total

    @property
    def loan_amount(self) -> float:
        return max(0.0, self.total_purchase_cost - self.owner_equity)


@dataclass(frozen=True)
class AmortizationRow:
    """One monthly loan payment."""

    month: int
    date: date
    payment: float
    principal: float
    interest: float
    remaining: float

    def to_dict(self) -> Dict:
        return {
            "month": self.month,
            "date": self.date.isoformat(),
            "payment": round(self.payment, 2),
            "principal": round(self.principal, 2),
            "interest": round(self.interest, 2),
            "remaining": round(self.remaining, 2),
        }


@dataclass(frozen=True)
class AnnualCashFlowRow:
    """One year of aggregated income, expenses, tax and cash flow."""

    year: int
    months: int
    rent: float
    payment: float
    principal: float
    interest: float
    management_fee: float
    management_commission: float
    maintenance_reserve: float
    property_tax: float
    insurance: float
    other_expenses: float
    depreciation: float
    taxable_income: float
    corporate_tax: float
    local_tax: float
    total_tax: float
    cash_flow: float
    cumulative_cash_flow: float
    loan_balance: float
    building_book_value: float
    reserve_balance: float

    @property
    def management_total(self) -> float:
        return self.management_fee + self.management_commission

    @property
    def deductible_expenses(self) -> float:
        """Operating expenses deductible for tax (reserve excluded)."""
        return (
            self.management_total
            + self.property_tax
            + self.insurance
            + self.other_expenses
        )

    def to_dict(self) -> Dict:
        data = {
            "year": self.year,
            "months": self.months,
        }
        for key in (
            "rent",
            "payment",
            "principal",
            "interest",
            "management_fee",
            "management_commission",
            "maintenance_reserve",
            "property_tax",
            "insurance",
            "other_expenses",
            "depreciation",
            "taxable_income",
            "corporate_tax",
            "local_tax",
            "total_tax",
            "cash_flow",
            "cumulative_cash_flow",
            "loan_balance",
            "building_book_value",
            "reserve_balance",
        ):
            data[key] = round(getattr(self, key), 2)
        return data


@dataclass(frozen=True)
class ExitRow:
    """Outcome of selling the property at the end of a given year."""

    year: int
    sale_price: float
    selling_cost: float
    capital_gain: float
    capital_gains_tax: float
    net_sale_proceeds: float
    irr: Optional[float]
    equity_multiple: Optional[float]

    def to_dict(self) -> Dict:
        return {
            "year": self.year,
            "sale_price": round(self.sale_price, 2),
            "selling_cost": round(self.selling_cost, 2),
            "capital_gain": round(self.capital_gain, 2),
            "capital_gains_tax": round(self.capital_gains_tax, 2),
            "net_sale_proceeds": round(self.net_sale_proceeds, 2),
            "irr": round(self.irr, 6) if self.irr is not None else None,
            "equity_multiple": (
                round(self.equity_multiple, 4)
                if self.equity_multiple is not None
                else None
            ),
        }
