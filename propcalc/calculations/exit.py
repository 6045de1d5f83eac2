"""
Exit (Sale) Analysis

For every holding year, projects the sale price, nets out selling cost,
capital gains tax and the outstanding loan, and computes IRR and equity
multiple for an exit at the end of that year.
"""

import logging
from typing import List, Optional

from propcalc.calculations.irr import calculate_equity_multiple, solve_irr
from propcalc.calculations.models import AnnualCashFlowRow, ExitRow
from propcalc.calculations.tax import calculate_total_tax

logger = logging.getLogger(__name__)

SELLING_COST_RATE = 0.03

# (last year of band, annual price change)
PRICE_CHANGE_BANDS = [
    (5, -0.02),
    (10, -0.01),
]


def annual_price_change(year: int) -> float:
    """Price change applied during a given holding year."""
    for last_year, change in PRICE_CHANGE_BANDS:
        if year <= last_year:
            return change
    return 0.0


def project_sale_price(acquisition_price: float, year: int) -> float:
    """Projected sale price at the end of a holding year (compounded)."""
    price = acquisition_price
    for y in range(1, year + 1):
        price *= 1 + annual_price_change(y)
    return price


def build_exit_cash_flows(
    annual_rows: List[AnnualCashFlowRow],
    exit_year: int,
    initial_equity: float,
    net_sale_proceeds: float,
) -> List[float]:
    """Equity cash flow vector for an exit at the end of exit_year."""
    flows = [-initial_equity]
    flows.extend(row.cash_flow for row in annual_rows[:exit_year])
    flows[-1] += net_sale_proceeds
    return flows


def project_exit(
    annual_rows: List[AnnualCashFlowRow],
    acquisition_price: float,
    initial_equity: float,
) -> List[ExitRow]:
    """
    Calculate exit metrics for a sale at the end of each year.

    Args:
        annual_rows: Annual cash flow rows, in year order
        acquisition_price: Purchase price (base of the price path and gain)
        initial_equity: Owner equity invested at purchase

    Returns:
        One ExitRow per annual row. IRR and equity multiple are None when
        initial equity is not positive or the IRR solver does not converge.
    """
    exits = []

    for row in annual_rows:
        sale_price = project_sale_price(acquisition_price, row.year)

        selling_cost = sale_price * SELLING_COST_RATE
        capital_gain = max(0.0, sale_price - acquisition_price)
        capital_gains_tax = calculate_total_tax(capital_gain)
        net_sale_proceeds = max(
            0.0,
            sale_price - selling_cost - capital_gains_tax - row.loan_balance,
        )

        irr: Optional[float] = None
        equity_multiple: Optional[float] = None

        if initial_equity > 0:
            flows = build_exit_cash_flows(
                annual_rows, row.year, initial_equity, net_sale_proceeds
            )
            irr = solve_irr(flows)
            equity_multiple = calculate_equity_multiple(flows[1:], initial_equity)
            if irr is None:
                logger.debug(f"IRR did not converge for exit year {row.year}")

        exits.append(
            ExitRow(
                year=row.year,
                sale_price=sale_price,
                selling_cost=selling_cost,
                capital_gain=capital_gain,
                capital_gains_tax=capital_gains_tax,
                net_sale_proceeds=net_sale_proceeds,
                irr=irr,
                equity_multiple=equity_multiple,
            )
        )

    return exits
