"""Aggregations over a settings snapshot and a window of transactions.

Everything here is pure: callers pass in what they loaded, nothing is read
or written.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from models import BudgetCategory, BudgetSettings, Transaction

TRANSACTION_COLUMNS = ["ID", "Date", "Fund", "Amount", "Category"]


class AllocationStatus(str, Enum):
    EXACT = "exact"
    UNDER = "under"
    OVER = "over"


@dataclass(frozen=True)
class Allocation:
    status: AllocationStatus
    difference: float  # total budget minus the sum of category budgets
    allocated: float

    @property
    def amount(self) -> float:
        """Left to allocate when UNDER, over-allocated amount when OVER."""
        return abs(self.difference)


def category_spent(category_id: str, transactions: Iterable[Transaction]) -> float:
    return sum((t.amount for t in transactions if t.category == category_id), 0.0)


def total_spent(transactions: Iterable[Transaction]) -> float:
    return sum((t.amount for t in transactions), 0.0)


def percent_used(spent: float, budget: float) -> float:
    """Share of ``budget`` consumed, as a percentage clamped to [0, 100]."""
    if budget <= 0:
        return 0.0
    return max(0.0, min(spent / budget * 100, 100.0))


def allocation_status(
    total_budget: float,
    categories: Sequence[BudgetCategory],
    tolerance: float = 0.0,
) -> Allocation:
    """Compare the sum of category budgets with the total budget.

    With the default ``tolerance`` of zero this is an exact float comparison,
    so budgets like 0.1 + 0.2 may classify as UNDER/OVER by a hair. Pass a
    small tolerance to treat near-equal sums as EXACT.
    """
    allocated = sum((c.budget for c in categories), 0.0)
    difference = total_budget - allocated
    if abs(difference) <= tolerance:
        status = AllocationStatus.EXACT
    elif difference > 0:
        status = AllocationStatus.UNDER
    else:
        status = AllocationStatus.OVER
    return Allocation(status=status, difference=difference, allocated=allocated)


def transactions_to_df(transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "ID": t.id,
            "Date": t.date,
            "Fund": t.fund,
            "Amount": t.amount,
            "Category": t.category,
        }
        for t in transactions
    ]
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)

    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    df["Date"] = pd.to_datetime(df["Date"])
    return df


def category_breakdown(categories: Sequence[BudgetCategory], transactions: Sequence[Transaction]) -> List[dict]:
    """Spend versus budget for every current category, in settings order.

    Categories without transactions still appear with zero spend.
    Transactions whose category no longer exists are left out.
    """
    df = transactions_to_df(transactions)
    spent_by_cat = df.groupby("Category")["Amount"].sum() if not df.empty else pd.Series(dtype=float)

    by_category: Dict[str, List[Transaction]] = {}
    for t in sorted(transactions, key=lambda t: t.date, reverse=True):
        by_category.setdefault(t.category, []).append(t)

    breakdown = []
    for category in categories:
        spent = float(spent_by_cat.get(category.id, 0.0))
        remaining = category.budget - spent
        breakdown.append(
            {
                "category": category.id,
                "name": category.name,
                "budget": float(category.budget),
                "spent": spent,
                "remaining": float(remaining),
                "pct": percent_used(spent, category.budget),
                "is_over": remaining < 0,
                "transactions": by_category.get(category.id, []),
            }
        )
    return breakdown


def budget_summary(settings: BudgetSettings, transactions: Sequence[Transaction]) -> dict:
    """Headline numbers for the dashboard."""
    spent = total_spent(transactions)
    return {
        "total_budget": float(settings.total_budget),
        "total_spent": spent,
        "remaining": float(settings.total_budget - spent),
        "pct": percent_used(spent, settings.total_budget),
        "allocation": allocation_status(settings.total_budget, settings.categories),
        "transaction_count": len(transactions),
    }


def summarize_budget_watch(breakdown: Iterable[dict], warn_at: float = 80.0) -> List[str]:
    """Return human-readable budget alerts for overspend and at-risk categories."""

    alerts = []
    for entry in breakdown or []:
        if entry["budget"] <= 0:
            continue

        if entry["is_over"]:
            alerts.append(
                f"🔴 **{entry['name']}** is over budget by ${abs(entry['remaining']):,.2f} (spent ${entry['spent']:,.2f} of ${entry['budget']:,.2f})."
            )
        elif entry["pct"] >= warn_at:
            alerts.append(
                f"🟠 **{entry['name']}** is {entry['pct']:.0f}% of its ${entry['budget']:,.2f} budget. Slow down to avoid overruns."
            )
    return alerts


def describe_allocation(allocation: Allocation) -> str:
    if allocation.status is AllocationStatus.EXACT:
        return "Category budgets add up exactly to the total budget."
    if allocation.status is AllocationStatus.UNDER:
        return f"${allocation.amount:,.2f} left to allocate."
    return f"Categories are over-allocated by ${allocation.amount:,.2f}."
