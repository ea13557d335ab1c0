import streamlit as st
from pathlib import Path
import sys

# Add current directory to path
sys.path.append(str(Path(__file__).parent))

from budget_store import get_budget_store
from dashboard import _kpis, budget_pie_chart, cumulative_spend_trend, render_category_cards, spend_vs_budget_chart
from errors import DuplicateIdError, FlowError, InvalidAmountError, UnknownIdError
from flow import AddTransactionFlow, AmountEntry, FlowStep
from insights import budget_summary, category_breakdown, category_spent, percent_used
from ledger import TransactionLedger
from settings import SettingsRepository

# --- Configuration ---
st.set_page_config(page_title="Budget Tracker", layout="centered", page_icon="💰")

KEYPAD = ["1", "2", "3", "4", "5", "6", "7", "8", "9", ".", "0", "←"]

# --- Store wiring ---
if "store" not in st.session_state:
    st.session_state.store = get_budget_store()

store = st.session_state.store
settings_repo = SettingsRepository(store)
ledger = TransactionLedger(store)


def _rerun():
    st.rerun()


def start_new_flow():
    st.session_state["flow"] = AddTransactionFlow(settings_repo.resolve())
    st.session_state["amount_entry"] = AmountEntry()


if "flow" not in st.session_state:
    start_new_flow()


# --- Add Transaction ---
def add_transaction_page():
    flow: AddTransactionFlow = st.session_state["flow"]
    settings = flow.settings

    if flow.step is FlowStep.SELECT_FUND:
        st.subheader("Which fund?")
        for fund in settings.fund_sources:
            if st.button(fund.name, key=f"fund-{fund.id}", use_container_width=True):
                flow.select_fund(fund.id)
                _rerun()

    elif flow.step is FlowStep.ENTER_AMOUNT:
        entry: AmountEntry = st.session_state["amount_entry"]
        st.caption(settings.fund(flow.fund).name)
        st.markdown(f"## {entry.display()}")

        cols = st.columns(3)
        for i, key in enumerate(KEYPAD):
            if cols[i % 3].button(key, key=f"key-{key}", use_container_width=True):
                entry.press(key)
                _rerun()

        back_col, next_col = st.columns(2)
        if back_col.button("Back"):
            flow.back()
            _rerun()
        if next_col.button("Continue", type="primary", disabled=not entry.ready):
            try:
                flow.enter_amount(entry.text)
            except InvalidAmountError as e:
                st.error(str(e))
            else:
                _rerun()

    elif flow.step is FlowStep.SELECT_CATEGORY:
        st.subheader(f"${flow.amount:,.2f}: pick a category")
        for category in settings.categories:
            if st.button(category.name, key=f"cat-{category.id}", use_container_width=True):
                flow.select_category(category.id)
                flow.confirm(ledger)
                _rerun()
        if st.button("Back"):
            flow.back()
            _rerun()

    else:
        confirmation_page(flow)


def confirmation_page(flow: AddTransactionFlow):
    if flow.transaction is None:
        st.error("The transaction could not be saved. Check the connection to your budget store and try again.")
    else:
        category = flow.settings.category(flow.category)
        spent = category_spent(category.id, ledger.window())
        pct = percent_used(spent, category.budget)

        st.success(f"${flow.amount:,.2f} added to {category.name}")
        st.markdown(f"**{category.name}**: ${spent:,.2f} / ${category.budget:,.2f}")
        st.progress(pct / 100, text=f"{pct:.0f}% of budget used")

    if st.button("Add Another Transaction", type="primary"):
        start_new_flow()
        _rerun()


# --- Dashboard ---
def dashboard_page():
    settings = settings_repo.resolve()
    transactions = ledger.window()
    summary = budget_summary(settings, transactions)
    breakdown = category_breakdown(settings.categories, transactions)

    _kpis(summary)

    def delete(transaction_id: str):
        if ledger.remove(transaction_id):
            st.toast("Transaction deleted")
        else:
            st.error("Could not delete the transaction.")
        _rerun()

    fund_names = {f.id: f.name for f in settings.fund_sources}
    render_category_cards(breakdown, lambda fund_id: fund_names.get(fund_id, fund_id), on_delete=delete)

    st.plotly_chart(spend_vs_budget_chart(breakdown), use_container_width=True)
    st.plotly_chart(cumulative_spend_trend(transactions, settings.total_budget), use_container_width=True)


# --- Settings ---
def _apply(action, *args):
    try:
        result = action(*args)
    except (InvalidAmountError, DuplicateIdError, UnknownIdError, ValueError) as e:
        st.error(str(e))
        return
    if result is None:
        st.error("Settings could not be saved. Your changes may not persist.")
        return
    start_new_flow()
    _rerun()


def settings_page():
    settings = settings_repo.resolve()

    st.subheader("Total Monthly Budget")
    with st.form("total_budget"):
        total = st.text_input("Total budget ($)", value=f"{settings.total_budget:g}")
        if st.form_submit_button("Save total"):
            _apply(settings_repo.set_total_budget, total)

    st.plotly_chart(budget_pie_chart(settings), use_container_width=True)

    st.subheader("Fund Sources")
    for fund in settings.fund_sources:
        col1, col2 = st.columns([5, 1])
        col1.write(fund.name)
        if col2.button("🗑️", key=f"del-fund-{fund.id}"):
            _apply(settings_repo.remove_fund, fund.id)
    with st.form("add_fund", clear_on_submit=True):
        name = st.text_input("New fund source")
        if st.form_submit_button("Add fund"):
            _apply(settings_repo.add_fund, name)

    st.subheader("Categories")
    for category in settings.categories:
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.write(category.name)
        new_budget = col2.text_input(
            "Budget", value=f"{category.budget:g}", key=f"budget-{category.id}", label_visibility="collapsed"
        )
        if new_budget != f"{category.budget:g}":
            _apply(settings_repo.update_category_budget, category.id, new_budget)
        if col3.button("🗑️", key=f"del-cat-{category.id}"):
            _apply(settings_repo.remove_category, category.id)
    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("New category")
        budget = st.text_input("Monthly budget ($)")
        if st.form_submit_button("Add category"):
            _apply(settings_repo.add_category, name, budget)


# --- Main App ---
st.title("💰 Budget Tracker")

tab1, tab2, tab3 = st.tabs(["➕ Add", "📊 Dashboard", "⚙️ Settings"])

with tab1:
    try:
        add_transaction_page()
    except FlowError as e:
        st.error(str(e))
        start_new_flow()

with tab2:
    dashboard_page()

with tab3:
    settings_page()
