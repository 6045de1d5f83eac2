"""
Tests for annual aggregation, exit analysis, validation and the full pipeline.
"""

import pytest
from dataclasses import replace
from datetime import date

from propcalc.calculations.amortization import generate_amortization_schedule
from propcalc.calculations.cashflow import aggregate_by_year, group_by_year
from propcalc.calculations.errors import ConfigValidationError
from propcalc.calculations.exit import (
    build_exit_cash_flows,
    project_exit,
    project_sale_price,
)
from propcalc.calculations.irr import calculate_npv
from propcalc.calculations.models import (
    AcquisitionCosts,
    ExpenseRule,
    ExpenseRules,
    StructureClass,
)
from propcalc.calculations.simulation import run_simulation, summarize
from propcalc.calculations.validation import validate


def flat_rent(amount):
    return lambda year: amount


@pytest.fixture
def one_year_rows():
    """1.2M interest-free loan over one year: 100,000 a month."""
    return generate_amortization_schedule(1_200_000, 0, 1, date(2025, 1, 1))


@pytest.fixture
def simple_rules():
    return ExpenseRules(
        management_fee=ExpenseRule(rate_percent=5, amount=3_000),
        management_commission=ExpenseRule(rate_percent=0, amount=2_000),
        maintenance_reserve=ExpenseRule(rate_percent=10, amount=0),
        property_tax=ExpenseRule(amount=120_000),
        insurance=ExpenseRule(amount=12_000),
    )


class TestCashFlowAggregation:
    """Test annual cash flow rows."""

    def test_single_year_figures(self, one_year_rows, simple_rules):
        """Hand-computed year: rent, expenses, depreciation and tax."""
        rows = aggregate_by_year(
            one_year_rows, flat_rent(100_000), 100, simple_rules, 22, 2_200_000
        )
        assert len(rows) == 1
        row = rows[0]

        assert row.rent == pytest.approx(1_200_000)
        assert row.payment == pytest.approx(1_200_000)
        assert row.management_fee == pytest.approx(60_000)
        assert row.management_commission == pytest.approx(24_000)
        assert row.maintenance_reserve == pytest.approx(120_000)
        assert row.property_tax == pytest.approx(120_000)
        assert row.insurance == pytest.approx(12_000)
        assert row.depreciation == pytest.approx(100_000)

        # 1,200,000 - 216,000 deductible - 0 interest - 100,000 depreciation
        assert row.taxable_income == pytest.approx(884_000)
        assert row.corporate_tax == pytest.approx(132_600)
        assert row.local_tax == pytest.approx(9_282 + 44_200)
        assert row.total_tax == pytest.approx(186_082)

        # Reserve is neither deducted nor paid out
        assert row.cash_flow == pytest.approx(1_200_000 - 1_200_000 - 216_000 - 186_082)
        assert row.reserve_balance == pytest.approx(120_000)
        assert row.loan_balance == 0
        assert row.building_book_value == pytest.approx(2_100_000)

    def test_floor_wins_over_rate(self, one_year_rows):
        """When the flat amount exceeds the rate-based fee, the amount is charged."""
        rules = ExpenseRules(management_fee=ExpenseRule(rate_percent=1, amount=3_000))
        row = aggregate_by_year(one_year_rows, flat_rent(100_000), 100, rules, 22, 0)[0]
        assert row.management_fee == pytest.approx(36_000)

    def test_rate_wins_over_floor(self, one_year_rows):
        rules = ExpenseRules(management_fee=ExpenseRule(rate_percent=5, amount=1_000))
        row = aggregate_by_year(one_year_rows, flat_rent(100_000), 100, rules, 22, 0)[0]
        assert row.management_fee == pytest.approx(60_000)

    def test_occupancy_scales_rent(self, one_year_rows):
        rows = aggregate_by_year(
            one_year_rows, flat_rent(100_000), 50, ExpenseRules(), 22, 0
        )
        assert rows[0].rent == pytest.approx(600_000)

    def test_fee_uses_collected_rent(self, one_year_rows):
        """Rate-based fees apply to rent after occupancy."""
        rules = ExpenseRules(management_fee=ExpenseRule(rate_percent=10))
        row = aggregate_by_year(one_year_rows, flat_rent(100_000), 80, rules, 22, 0)[0]
        assert row.management_fee == pytest.approx(96_000)

    def test_taxable_income_floored_at_zero(self):
        """Heavy interest cannot produce negative taxable income or tax."""
        rows = generate_amortization_schedule(100_000_000, 10.0, 1, date(2025, 1, 1))
        annual = aggregate_by_year(rows, flat_rent(100_000), 100, ExpenseRules(), 22, 0)
        assert annual[0].taxable_income == 0
        assert annual[0].total_tax == 0

    def test_depreciation_stops_after_lifespan(self):
        rows = generate_amortization_schedule(0, 0, 25, date(2025, 1, 1))
        annual = aggregate_by_year(
            rows,
            flat_rent(100_000),
            100,
            ExpenseRules(),
            StructureClass.steel_light.lifespan_years,
            1_900_000,
        )
        assert annual[0].depreciation == pytest.approx(100_000)
        assert annual[18].depreciation == pytest.approx(100_000)
        assert annual[18].building_book_value == pytest.approx(0, abs=1e-6)
        for row in annual[19:]:
            assert row.depreciation == 0

    def test_cumulative_is_running_sum(self, sample_config):
        """Re-summing annual cash flow reproduces the cumulative column."""
        result = run_simulation(sample_config)
        running = 0.0
        for row in result.annual:
            running += row.cash_flow
            assert row.cumulative_cash_flow == pytest.approx(running)

    def test_rent_adjustments_flow_through(self, sample_config):
        """Annual rent follows the rent schedule after the fixed period."""
        result = run_simulation(sample_config)
        year_3 = result.annual[2].rent
        year_5 = result.annual[4].rent
        assert year_3 == pytest.approx(200_000 * 12 * 0.95)
        assert year_5 == pytest.approx(196_000 * 12 * 0.95)

    def test_empty_schedule(self, simple_rules):
        """No amortization rows is an empty, valid result."""
        assert aggregate_by_year([], flat_rent(100_000), 100, simple_rules, 22, 0) == []

    def test_partial_final_year(self, simple_rules):
        """A trailing partial bucket pro-rates the annual charges."""
        rows = generate_amortization_schedule(1_800_000, 0, 2, date(2025, 1, 1))[:18]
        assert [len(bucket) for bucket in group_by_year(rows)] == [12, 6]

        annual = aggregate_by_year(rows, flat_rent(100_000), 100, simple_rules, 22, 0)
        assert annual[1].months == 6
        assert annual[1].rent == pytest.approx(600_000)
        assert annual[1].property_tax == pytest.approx(60_000)

    def test_row_serialization(self, one_year_rows, simple_rules):
        row = aggregate_by_year(
            one_year_rows, flat_rent(100_000), 100, simple_rules, 22, 2_200_000
        )[0]
        data = row.to_dict()
        assert data["year"] == 1
        assert data["taxable_income"] == 884_000


class TestExitAnalysis:
    """Test sale projection and exit metrics."""

    def test_price_path(self):
        """-2%/yr through year 5, -1%/yr through year 10, flat after."""
        assert project_sale_price(100_000_000, 1) == pytest.approx(98_000_000)
        year_5 = 100_000_000 * 0.98 ** 5
        year_10 = year_5 * 0.99 ** 5
        assert project_sale_price(100_000_000, 5) == pytest.approx(year_5)
        assert project_sale_price(100_000_000, 10) == pytest.approx(year_10)
        assert project_sale_price(100_000_000, 15) == pytest.approx(year_10)

    def test_one_row_per_year(self, sample_config):
        result = run_simulation(sample_config)
        assert [row.year for row in result.exits] == list(range(1, 36))

    def test_net_proceeds(self, sample_config):
        """Declining price means no gain; proceeds net out cost and loan."""
        result = run_simulation(sample_config)
        exit_row = result.exits[9]
        annual_row = result.annual[9]

        assert exit_row.capital_gain == 0
        assert exit_row.capital_gains_tax == 0
        assert exit_row.selling_cost == pytest.approx(exit_row.sale_price * 0.03)
        expected = exit_row.sale_price * 0.97 - annual_row.loan_balance
        assert exit_row.net_sale_proceeds == pytest.approx(max(0.0, expected))

    def test_proceeds_floored_at_zero(self, sample_config):
        """Early exits under water yield zero proceeds, not negative."""
        result = run_simulation(replace(sample_config, owner_equity=0))
        assert result.exits[0].net_sale_proceeds == 0

    def test_declining_price_has_no_gain(self, sample_config):
        """The sale price path never exceeds the acquisition price."""
        result = run_simulation(sample_config)
        for exit_row in result.exits:
            assert exit_row.sale_price <= sample_config.purchase_price
            assert exit_row.capital_gain == 0
            assert exit_row.capital_gains_tax == 0

    def test_exit_cash_flow_vector(self, sample_config):
        result = run_simulation(sample_config)
        flows = build_exit_cash_flows(result.annual, 3, 3_000_000, 500_000)
        assert len(flows) == 4
        assert flows[0] == -3_000_000
        assert flows[1] == result.annual[0].cash_flow
        assert flows[3] == pytest.approx(result.annual[2].cash_flow + 500_000)

    def test_irr_round_trip(self, sample_config):
        """Every converged exit IRR zeroes the NPV of its cash flow vector."""
        result = run_simulation(sample_config)
        converged = 0
        for exit_row in result.exits:
            if exit_row.irr is None:
                continue
            converged += 1
            flows = build_exit_cash_flows(
                result.annual,
                exit_row.year,
                sample_config.owner_equity,
                exit_row.net_sale_proceeds,
            )
            assert abs(calculate_npv(flows, exit_row.irr)) < 1
        assert converged > 0

    def test_equity_multiple(self, sample_config):
        result = run_simulation(sample_config)
        exit_row = result.exits[19]
        flows = build_exit_cash_flows(
            result.annual, 20, sample_config.owner_equity, exit_row.net_sale_proceeds
        )
        assert exit_row.equity_multiple == pytest.approx(
            sum(flows[1:]) / sample_config.owner_equity
        )

    def test_zero_equity_gives_nulls(self, sample_config):
        """Without equity, IRR and multiple are null for every exit year."""
        config = replace(sample_config, owner_equity=0)
        result = run_simulation(config)
        assert len(result.exits) == 35
        for exit_row in result.exits:
            assert exit_row.irr is None
            assert exit_row.equity_multiple is None

    @pytest.mark.parametrize("equity", [0, -1_000_000])
    def test_non_positive_equity_direct(self, one_year_rows, equity):
        annual = aggregate_by_year(
            one_year_rows, flat_rent(300_000), 100, ExpenseRules(), 22, 0
        )
        exits = project_exit(annual, 5_000_000, equity)
        assert exits[0].irr is None
        assert exits[0].equity_multiple is None
        assert exits[0].net_sale_proceeds == pytest.approx(5_000_000 * 0.98 * 0.97)

    def test_exit_row_serialization(self, sample_config):
        config = replace(sample_config, owner_equity=0)
        data = run_simulation(config).exits[0].to_dict()
        assert data["irr"] is None
        assert data["equity_multiple"] is None


class TestValidation:
    """Test the configuration validation gate."""

    def test_valid_config(self, sample_config):
        result = validate(sample_config)
        assert result.valid
        assert result.errors == []

    def test_collects_all_errors(self, sample_config):
        """Every violation is reported, in field order."""
        config = replace(
            sample_config,
            occupancy_rate=120,
            rent_fixed_period=0,
            rent_adjustment_rate=-1,
            loan_term=40,
            structure="concrete",
            owner_equity=40_000_000,
        )
        result = validate(config)
        assert not result.valid
        assert result.errors == [
            "Structure must be one of: RC, SRC, steel_heavy, steel_light, wood",
            "Occupancy rate must be between 0 and 100",
            "Rent fixed period must be at least 1",
            "Rent adjustment rate must be between 0 and 100",
            "Loan term must be between 1 and 35 years",
            "Owner equity cannot exceed the total purchase cost",
        ]

    def test_does_not_mutate_input(self, sample_config):
        config = replace(sample_config, occupancy_rate=-5)
        before = replace(config)
        validate(config)
        assert config == before

    @pytest.mark.parametrize("term", [1, 35])
    def test_loan_term_bounds_inclusive(self, sample_config, term):
        assert validate(replace(sample_config, loan_term=term)).valid

    def test_zero_rate_is_valid(self, sample_config):
        assert validate(replace(sample_config, loan_rate=0)).valid

    def test_negative_rate(self, sample_config):
        result = validate(replace(sample_config, loan_rate=-0.5))
        assert result.errors == ["Loan interest rate must be 0 or greater"]

    def test_non_numeric_values(self, sample_config):
        config = replace(sample_config, purchase_price="abc", occupancy_rate=float("nan"))
        result = validate(config)
        assert "Purchase price must be a number" in result.errors
        assert "Occupancy rate must be a number" in result.errors

    def test_fractional_interval(self, sample_config):
        result = validate(replace(sample_config, rent_adjustment_interval=1.5))
        assert result.errors == ["Rent adjustment interval must be a whole number of years"]

    def test_invalid_start_date(self, sample_config):
        result = validate(replace(sample_config, loan_start_date="2025-13-45"))
        assert result.errors == ["Loan start date must be a valid date"]

    def test_expense_rule_ranges(self, sample_config):
        rules = replace(
            sample_config.expenses,
            management_fee=ExpenseRule(rate_percent=150, amount=-1),
        )
        result = validate(replace(sample_config, expenses=rules))
        assert result.errors == [
            "Management fee rate must be between 0 and 100",
            "Management fee amount must be 0 or greater",
        ]

    def test_negative_acquisition_cost(self, sample_config):
        config = replace(sample_config, acquisition_costs=AcquisitionCosts(stamp_duty=-10))
        assert validate(config).errors == ["Stamp duty must be 0 or greater"]

    def test_equity_above_cost(self, sample_config):
        result = validate(replace(sample_config, owner_equity=40_000_000))
        assert result.errors == ["Owner equity cannot exceed the total purchase cost"]

    def test_building_above_price(self, sample_config):
        result = validate(replace(sample_config, building_price=31_000_000))
        assert result.errors == ["Building price cannot exceed the purchase price"]

    def test_cross_field_checks_alongside_other_errors(self, sample_config):
        """Cross-field checks still run when an unrelated field is invalid."""
        config = replace(sample_config, occupancy_rate=150, building_price=31_000_000)
        assert validate(config).errors == [
            "Occupancy rate must be between 0 and 100",
            "Building price cannot exceed the purchase price",
        ]


class TestSimulation:
    """Integration tests for the full pipeline."""

    def test_table_lengths(self, sample_config):
        result = run_simulation(sample_config)
        assert len(result.amortization) == 420
        assert len(result.annual) == 35
        assert len(result.exits) == 35

    def test_loan_covers_purchase_cost_less_equity(self, sample_config):
        """Loan = price + acquisition costs - equity."""
        result = run_simulation(sample_config)
        assert sample_config.total_purchase_cost == 31_366_000
        assert result.summary.loan_amount == 28_366_000
        principal = sum(row.principal for row in result.amortization)
        assert principal == pytest.approx(28_366_000, abs=1)
        assert result.amortization[-1].remaining == 0
        assert result.annual[-1].loan_balance == 0

    def test_equity_above_price_means_no_loan(self, sample_config):
        config = replace(sample_config, owner_equity=31_366_000)
        result = run_simulation(config)
        assert result.summary.loan_amount == 0
        assert all(row.payment == 0 for row in result.amortization)

    def test_summary(self, sample_config):
        result = run_simulation(sample_config)
        summary = result.summary
        assert summary.yearly_income == pytest.approx(2_280_000)
        assert summary.gross_yield == pytest.approx(7.6)
        assert summary.monthly_payment == pytest.approx(result.amortization[0].payment)
        assert summary.yearly_cost == pytest.approx(
            summary.yearly_expenses + summary.monthly_payment * 12
        )
        assert summary.yearly_profit == pytest.approx(
            summary.yearly_income - summary.yearly_cost
        )
        assert summary.equity_yield == pytest.approx(
            summary.yearly_profit / 3_000_000 * 100
        )

    def test_summary_yearly_expenses(self, sample_config):
        """Management 9,500 (5% of 190,000), commission 3,000, reserve 5,700 a month."""
        summary = summarize(sample_config, [])
        monthly = 9_500 + 3_000 + 5_700
        assert summary.yearly_expenses == pytest.approx(monthly * 12 + 200_000)
        assert summary.monthly_payment == 0

    def test_repeat_runs_are_identical(self, sample_config):
        """Same configuration, same result."""
        assert run_simulation(sample_config) == run_simulation(sample_config)

    def test_rejects_invalid_config(self, sample_config):
        config = replace(sample_config, loan_term=0, occupancy_rate=101)
        with pytest.raises(ConfigValidationError) as exc_info:
            run_simulation(config)
        assert len(exc_info.value.errors) == 2

    def test_serializes(self, sample_config):
        data = run_simulation(sample_config).to_dict()
        assert data["name"] == "Sample Apartment"
        assert data["amortization"][1]["date"] == "2025-02-28"
        assert data["summary"]["gross_yield"] == 7.6
        assert len(data["annual"]) == 35
