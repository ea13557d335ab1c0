"""Domain entities shared by the stores, the ledger and the API."""

import math
import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from errors import InvalidAmountError

_WHITESPACE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Derive a stable id from a display name: lowercase, whitespace runs become '-'."""
    return _WHITESPACE.sub("-", name.strip().lower())


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, the form every store persists."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_amount(raw, allow_zero: bool = False) -> float:
    """Parse user input into a currency amount.

    Accepts numbers or strings such as ``"42.50"``, ``"$1,200"``. Rejects
    anything non-numeric, non-finite or negative; zero is only accepted when
    ``allow_zero`` is set (category budgets may be zero, spends may not).
    """
    if isinstance(raw, bool) or raw is None:
        raise InvalidAmountError(f"Not an amount: {raw!r}")
    if isinstance(raw, str):
        cleaned = raw.strip().replace("$", "").replace(",", "")
        if not cleaned:
            raise InvalidAmountError("Amount is empty")
        try:
            value = float(cleaned)
        except ValueError:
            raise InvalidAmountError(f"Not an amount: {raw!r}") from None
    elif isinstance(raw, (int, float)):
        value = float(raw)
    else:
        raise InvalidAmountError(f"Not an amount: {raw!r}")

    if not math.isfinite(value):
        raise InvalidAmountError(f"Amount must be finite, got {raw!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidAmountError(f"Amount must be positive, got {raw!r}")
    return value


class FundSource(BaseModel):
    id: str
    name: str

    @classmethod
    def from_name(cls, name: str) -> "FundSource":
        return cls(id=slugify(name), name=name.strip())


class BudgetCategory(BaseModel):
    id: str
    name: str
    budget: float = Field(0.0, ge=0)

    @classmethod
    def from_name(cls, name: str, budget: float) -> "BudgetCategory":
        return cls(id=slugify(name), name=name.strip(), budget=budget)


def _require_unique_ids(items, label: str):
    seen = set()
    for item in items:
        if item.id in seen:
            raise ValueError(f"Duplicate {label} id: {item.id}")
        seen.add(item.id)
    return items


class BudgetSettings(BaseModel):
    """The settings document: total budget plus ordered categories and fund sources."""

    total_budget: float
    categories: List[BudgetCategory]
    fund_sources: List[FundSource]

    @field_validator("categories")
    @classmethod
    def _unique_categories(cls, value):
        return _require_unique_ids(value, "category")

    @field_validator("fund_sources")
    @classmethod
    def _unique_funds(cls, value):
        return _require_unique_ids(value, "fund source")

    def category(self, category_id: str) -> Optional[BudgetCategory]:
        return next((c for c in self.categories if c.id == category_id), None)

    def fund(self, fund_id: str) -> Optional[FundSource]:
        return next((f for f in self.fund_sources if f.id == fund_id), None)


class BudgetSettingsUpdate(BaseModel):
    """Partial settings write. Fields left unset keep their persisted value."""

    total_budget: Optional[float] = None
    categories: Optional[List[BudgetCategory]] = None
    fund_sources: Optional[List[FundSource]] = None

    @field_validator("categories")
    @classmethod
    def _unique_categories(cls, value):
        return value if value is None else _require_unique_ids(value, "category")

    @field_validator("fund_sources")
    @classmethod
    def _unique_funds(cls, value):
        return value if value is None else _require_unique_ids(value, "fund source")

    def changes(self) -> dict:
        """Only the fields the caller actually supplied, JSON-ready."""
        return self.model_dump(mode="json", exclude_unset=True, exclude_none=True)


class TransactionCreate(BaseModel):
    fund: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)

    @field_validator("amount")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("amount must be finite")
        return value


class Transaction(BaseModel):
    id: str
    fund: str
    amount: float
    category: str
    date: datetime

    @model_validator(mode="after")
    def _naive_utc(self):
        self.date = to_naive_utc(self.date)
        return self
