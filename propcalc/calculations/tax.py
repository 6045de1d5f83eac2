"""
Corporate Tax and Depreciation

Two-bracket corporate tax with local tax on top, and straight-line building
depreciation over the statutory useful life of the structure.
"""

# Corporate tax brackets (yen)
CORPORATE_TAX_THRESHOLD = 8_000_000
CORPORATE_TAX_REDUCED_RATE = 0.15
CORPORATE_TAX_STANDARD_RATE = 0.232

# Local tax: inhabitant tax on corporate tax plus enterprise tax on income
LOCAL_TAX_ON_CORPORATE_TAX_RATE = 0.07
LOCAL_TAX_ON_INCOME_RATE = 0.05


def calculate_corporate_tax(taxable_income: float) -> float:
    """
    Calculate corporate tax on taxable income.

    15% up to the threshold, 23.2% on the excess. Zero for losses.
    """
    if taxable_income <= 0:
        return 0.0

    if taxable_income <= CORPORATE_TAX_THRESHOLD:
        return taxable_income * CORPORATE_TAX_REDUCED_RATE

    return (
        CORPORATE_TAX_THRESHOLD * CORPORATE_TAX_REDUCED_RATE
        + (taxable_income - CORPORATE_TAX_THRESHOLD) * CORPORATE_TAX_STANDARD_RATE
    )


def calculate_local_tax(taxable_income: float, corporate_tax: float) -> float:
    """Calculate local tax from taxable income and the corporate tax due."""
    if taxable_income <= 0:
        return 0.0
    return (
        corporate_tax * LOCAL_TAX_ON_CORPORATE_TAX_RATE
        + taxable_income * LOCAL_TAX_ON_INCOME_RATE
    )


def calculate_total_tax(taxable_income: float) -> float:
    """Corporate plus local tax for an amount of taxable income."""
    corporate_tax = calculate_corporate_tax(taxable_income)
    return corporate_tax + calculate_local_tax(taxable_income, corporate_tax)


def calculate_depreciation(
    building_price: float, lifespan_years: int, year: int
) -> float:
    """
    Straight-line depreciation for a given year (1-based), no salvage value.

    Zero once the year is past the useful life.
    """
    if lifespan_years <= 0 or year > lifespan_years:
        return 0.0
    return building_price / lifespan_years


def calculate_book_value(
    building_price: float, lifespan_years: int, years_elapsed: int
) -> float:
    """Remaining book value of the building after N full years."""
    depreciated = sum(
        calculate_depreciation(building_price, lifespan_years, year)
        for year in range(1, years_elapsed + 1)
    )
    return max(0.0, building_price - depreciated)
