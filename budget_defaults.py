"""Built-in budget used until the user saves their own settings."""

from typing import List

from models import BudgetCategory, BudgetSettings, FundSource

# The overall monthly budget target.
TOTAL_MONTHLY_BUDGET = 5879.0

DEFAULT_BUDGET_CATEGORIES: List[BudgetCategory] = [
    BudgetCategory(id="grocery", name="Grocery", budget=400),
    BudgetCategory(id="rent", name="Rent", budget=1600),
    BudgetCategory(id="car", name="Car", budget=330),
    BudgetCategory(id="gas", name="Gas", budget=70),
    BudgetCategory(id="eating-out", name="Eating Out", budget=320),
    BudgetCategory(id="personal-development", name="Personal Development", budget=200),
    BudgetCategory(id="essential-subscriptions", name="Essential Subscriptions", budget=50),
    BudgetCategory(id="medical-health", name="Medical/Health", budget=20),
    BudgetCategory(id="investments-assets", name="Investments/Assets", budget=2889),
]

DEFAULT_FUND_SOURCES: List[FundSource] = [
    FundSource(id="checking", name="Checking Account"),
    FundSource(id="chase", name="Chase Credit Card"),
    FundSource(id="bofa", name="BofA Credit Card"),
    FundSource(id="discover", name="Discover Credit Card"),
]


def default_settings() -> BudgetSettings:
    """A fresh copy of the defaults; callers may mutate it freely."""
    return BudgetSettings(
        total_budget=TOTAL_MONTHLY_BUDGET,
        categories=[c.model_copy() for c in DEFAULT_BUDGET_CATEGORIES],
        fund_sources=[f.model_copy() for f in DEFAULT_FUND_SOURCES],
    )
