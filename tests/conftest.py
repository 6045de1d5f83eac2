"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from propcalc.main import app
from propcalc.calculations.models import (
    AcquisitionCosts,
    ExpenseRule,
    ExpenseRules,
    PropertyLoanConfig,
    StructureClass,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def sample_config():
    """A 30M yen wooden apartment, 10% down, 35-year loan at 2%."""
    return PropertyLoanConfig(
        name="Sample Apartment",
        purchase_price=30_000_000,
        owner_equity=3_000_000,
        building_price=18_000_000,
        structure=StructureClass.wood,
        occupancy_rate=95,
        initial_rent=200_000,
        rent_fixed_period=3,
        rent_adjustment_interval=2,
        rent_adjustment_rate=2,
        loan_rate=2.0,
        loan_term=35,
        loan_start_date=date(2025, 1, 31),
        expenses=ExpenseRules(
            management_fee=ExpenseRule(rate_percent=5, amount=5_000),
            management_commission=ExpenseRule(rate_percent=0, amount=3_000),
            maintenance_reserve=ExpenseRule(rate_percent=3, amount=0),
            property_tax=ExpenseRule(amount=150_000),
            insurance=ExpenseRule(amount=30_000),
            other=ExpenseRule(amount=20_000),
        ),
        acquisition_costs=AcquisitionCosts(
            brokerage_fee=1_056_000,
            registration_fee=300_000,
            stamp_duty=10_000,
        ),
    )


@pytest.fixture
def sample_payload():
    """JSON body equivalent to sample_config, for the HTTP API."""
    return {
        "name": "Sample Apartment",
        "purchase_price": 30_000_000,
        "owner_equity": 3_000_000,
        "building_price": 18_000_000,
        "structure": "wood",
        "occupancy_rate": 95,
        "initial_rent": 200_000,
        "rent_fixed_period": 3,
        "rent_adjustment_interval": 2,
        "rent_adjustment_rate": 2,
        "loan_rate": 2.0,
        "loan_term": 35,
        "loan_start_date": "2025-01-31",
        "expenses": {
            "management_fee": {"rate_percent": 5, "amount": 5_000},
            "management_commission": {"rate_percent": 0, "amount": 3_000},
            "maintenance_reserve": {"rate_percent": 3, "amount": 0},
            "property_tax": {"amount": 150_000},
            "insurance": {"amount": 30_000},
            "other": {"amount": 20_000},
        },
        "acquisition_costs": {
            "brokerage_fee": 1_056_000,
            "registration_fee": 300_000,
            "stamp_duty": 10_000,
        },
    }
