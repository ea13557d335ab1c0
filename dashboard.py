# dashboard.py: budget charts and the dashboard widgets built on insights

import streamlit as st
import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Callable, List, Optional, Sequence

from insights import describe_allocation, summarize_budget_watch, transactions_to_df
from models import BudgetCategory, BudgetSettings, Transaction

# Colors of the built-in categories
CATEGORY_COLORS = {
    "grocery": "#22c55e",
    "rent": "#a855f7",
    "car": "#3b82f6",
    "gas": "#f97316",
    "eating-out": "#ef4444",
    "personal-development": "#6366f1",
    "essential-subscriptions": "#06b6d4",
    "medical-health": "#ec4899",
    "investments-assets": "#10b981",
}

# Palette for categories the user adds
EXTENDED_COLORS = ["#f59e0b", "#84cc16", "#14b8a6", "#0ea5e9", "#8b5cf6", "#d946ef", "#f43f5e", "#78716c"]

UNALLOCATED_COLOR = "#374151"


def category_color(category_id: str, index: int = 0) -> str:
    return CATEGORY_COLORS.get(category_id) or EXTENDED_COLORS[index % len(EXTENDED_COLORS)]


def format_category_name(category_id: str) -> str:
    """'eating-out' -> 'Eating Out'"""
    return " ".join(word[:1].upper() + word[1:] for word in category_id.split("-"))


def allocation_chart_data(categories: Sequence[BudgetCategory], total_budget: float) -> pd.DataFrame:
    """
    One row per category budget, plus an 'Unallocated' slice when the
    categories do not use the whole total budget.
    """
    allocated = sum(c.budget for c in categories)
    rows = [
        {
            "Name": c.name,
            "Value": c.budget,
            "Color": category_color(c.id, i),
            "Percentage": (c.budget / allocated * 100) if allocated > 0 else 0.0,
        }
        for i, c in enumerate(categories)
    ]
    if total_budget > allocated:
        unallocated = total_budget - allocated
        rows.append({
            "Name": "Unallocated",
            "Value": unallocated,
            "Color": UNALLOCATED_COLOR,
            "Percentage": unallocated / total_budget * 100,
        })
    return pd.DataFrame(rows, columns=["Name", "Value", "Color", "Percentage"])


def budget_pie_chart(settings: BudgetSettings):
    """
    Donut chart of how the total budget is split across categories.
    """
    data = allocation_chart_data(settings.categories, settings.total_budget)
    fig = px.pie(
        data,
        values="Value",
        names="Name",
        hole=0.4,
        color="Name",
        color_discrete_map=dict(zip(data["Name"], data["Color"])),
        title="Budget Allocation",
    )
    fig.update_traces(textposition="inside", textinfo="percent+label")
    return fig


def spend_vs_budget_chart(breakdown: List[dict]):
    """
    Bar chart of spent vs budget per category for the current window.
    """
    names = [b["name"] for b in breakdown]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=names, y=[b["budget"] for b in breakdown], name="Budget", marker_color="#4CAF50"))
    fig.add_trace(go.Bar(x=names, y=[b["spent"] for b in breakdown], name="Spent", marker_color="#FF5252"))
    fig.update_layout(barmode="group", title="Spent vs Budget", height=400)
    return fig


def cumulative_spend_trend(transactions: Sequence[Transaction], total_budget: Optional[float] = None):
    """
    Area chart of cumulative spend over the window, with the total budget as a reference line.
    """
    df = transactions_to_df(transactions)
    if df.empty:
        return px.area(title="No spending in this period")

    daily = df.groupby(df["Date"].dt.date)["Amount"].sum().sort_index().cumsum().reset_index()
    daily.columns = ["Date", "Spent"]

    fig = px.area(daily, x="Date", y="Spent", title="Cumulative Spend")
    if total_budget:
        fig.add_hline(y=total_budget, line_dash="dash", annotation_text="Total budget")
    fig.update_layout(height=350)
    return fig


def _kpis(summary: dict):
    """
    Displays the top-level numbers for the current window.
    """
    col1, col2, col3 = st.columns(3)
    col1.metric("💸 Spent", f"${summary['total_spent']:,.2f}")
    col2.metric("🎯 Total Budget", f"${summary['total_budget']:,.2f}")
    col3.metric("🛡️ Remaining", f"${summary['remaining']:,.2f}")

    st.caption(f"{summary['pct']:.0f}% of total budget used")
    st.progress(summary["pct"] / 100)
    st.caption(describe_allocation(summary["allocation"]))


def render_category_cards(
    breakdown: List[dict],
    fund_name: Callable[[str], str],
    on_delete: Optional[Callable[[str], None]] = None,
):
    """
    One expandable card per category, listing its transactions with a delete button.
    """
    for alert in summarize_budget_watch(breakdown):
        st.warning(alert)

    for entry in breakdown:
        label = f"{entry['name']}: ${entry['spent']:,.2f} / ${entry['budget']:,.2f}"
        with st.expander(label):
            st.progress(entry["pct"] / 100, text=f"{entry['pct']:.0f}% used")
            if not entry["transactions"]:
                st.caption("No transactions in this period.")
            for txn in entry["transactions"]:
                col1, col2 = st.columns([5, 1])
                col1.markdown(
                    f"**${txn.amount:,.2f}** from {fund_name(txn.fund)} · {txn.date:%b %d, %Y}"
                )
                if on_delete and col2.button("🗑️", key=f"delete-{txn.id}", help="Delete transaction"):
                    on_delete(txn.id)
