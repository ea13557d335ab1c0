"""Budget settings resolution and editing.

``resolve_settings`` turns whatever a store has persisted into a complete
``BudgetSettings`` by filling never-saved fields from the built-in defaults.
``SettingsRepository`` wraps a store and is what the rest of the app is
handed; there is no module-level settings state.
"""

from enum import Enum
from typing import List, Optional

from budget_defaults import default_settings
from errors import DuplicateIdError, UnknownIdError
from log_setup import get_logger
from models import BudgetCategory, BudgetSettings, BudgetSettingsUpdate, FundSource, parse_amount, slugify

logger = get_logger("settings")


class EmptyListPolicy(str, Enum):
    """What an explicitly saved empty category or fund list resolves to.

    KEEP leaves it empty. FALLBACK swaps the defaults back in, which is how the
    older local-storage version of the app behaved.
    """

    KEEP = "keep"
    FALLBACK = "fallback"


def _pick_list(saved, default, policy: EmptyListPolicy):
    if saved is None:
        return default
    if not saved and policy is EmptyListPolicy.FALLBACK:
        return default
    return saved


def resolve_settings(raw: Optional[dict], empty_lists: EmptyListPolicy = EmptyListPolicy.KEEP) -> BudgetSettings:
    """Merge a persisted settings document over the defaults.

    A field that was never persisted (missing or null) takes the default. Any
    persisted value wins, including a total budget of zero.
    """
    defaults = default_settings()
    raw = raw or {}

    total = raw.get("total_budget")
    return BudgetSettings(
        total_budget=defaults.total_budget if total is None else total,
        categories=_pick_list(raw.get("categories"), defaults.categories, empty_lists),
        fund_sources=_pick_list(raw.get("fund_sources"), defaults.fund_sources, empty_lists),
    )


class SettingsRepository:
    def __init__(self, store):
        self.store = store

    def resolve(self) -> BudgetSettings:
        return self.store.load()

    def save(
        self,
        total_budget: Optional[float] = None,
        categories: Optional[List[BudgetCategory]] = None,
        fund_sources: Optional[List[FundSource]] = None,
    ) -> Optional[BudgetSettings]:
        """Persist only the fields given. Returns the merged settings, or None if the write failed."""
        fields = {
            "total_budget": total_budget,
            "categories": categories,
            "fund_sources": fund_sources,
        }
        update = BudgetSettingsUpdate(**{k: v for k, v in fields.items() if v is not None})
        saved = self.store.save(update)
        if saved is None:
            logger.warning("Settings update was not persisted: %s", sorted(update.changes()))
        return saved

    # --- Lookups ---

    def category_budget(self, category_id: str) -> float:
        found = self.resolve().category(category_id)
        return found.budget if found else 0.0

    def fund_name(self, fund_id: str) -> str:
        found = self.resolve().fund(fund_id)
        return found.name if found else fund_id

    # --- Total budget ---

    def set_total_budget(self, amount) -> Optional[BudgetSettings]:
        return self.save(total_budget=parse_amount(amount, allow_zero=True))

    # --- Categories ---

    def add_category(self, name: str, budget) -> Optional[BudgetSettings]:
        if not name or not name.strip():
            raise ValueError("Category name cannot be empty")
        new_category = BudgetCategory.from_name(name, parse_amount(budget, allow_zero=True))
        categories = self.resolve().categories
        if any(c.id == new_category.id for c in categories):
            raise DuplicateIdError(f"Category '{new_category.id}' already exists")
        return self.save(categories=categories + [new_category])

    def rename_category(self, category_id: str, name: str) -> Optional[BudgetSettings]:
        if not name or not name.strip():
            raise ValueError("Category name cannot be empty")
        categories = self.resolve().categories
        target = self._find(categories, category_id, "category")
        # The id stays as derived at creation time.
        target.name = name.strip()
        return self.save(categories=categories)

    def update_category_budget(self, category_id: str, budget) -> Optional[BudgetSettings]:
        amount = parse_amount(budget, allow_zero=True)
        categories = self.resolve().categories
        self._find(categories, category_id, "category").budget = amount
        return self.save(categories=categories)

    def remove_category(self, category_id: str) -> Optional[BudgetSettings]:
        """Drop a category. Its historical transactions are left untouched."""
        categories = self.resolve().categories
        return self.save(categories=[c for c in categories if c.id != category_id])

    # --- Fund sources ---

    def add_fund(self, name: str) -> Optional[BudgetSettings]:
        if not name or not name.strip():
            raise ValueError("Fund source name cannot be empty")
        new_fund = FundSource.from_name(name)
        funds = self.resolve().fund_sources
        if any(f.id == new_fund.id for f in funds):
            raise DuplicateIdError(f"Fund source '{new_fund.id}' already exists")
        return self.save(fund_sources=funds + [new_fund])

    def remove_fund(self, fund_id: str) -> Optional[BudgetSettings]:
        funds = self.resolve().fund_sources
        return self.save(fund_sources=[f for f in funds if f.id != fund_id])

    @staticmethod
    def _find(items, item_id: str, label: str):
        for item in items:
            if item.id == item_id:
                return item
        raise UnknownIdError(f"No {label} with id '{item_id}'")
