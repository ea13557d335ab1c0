"""The four-step add-transaction flow: fund, amount, category, confirm.

A flow instance records at most one transaction. ``confirm`` is latched on
the instance, so a screen that re-runs (Streamlit reruns, a double click)
gets the first result back instead of a duplicate entry.
"""

from enum import Enum
from typing import Optional
from uuid import uuid4

from errors import FlowError, InvalidAmountError
from models import BudgetSettings, Transaction, parse_amount


class FlowStep(str, Enum):
    SELECT_FUND = "select_fund"
    ENTER_AMOUNT = "enter_amount"
    SELECT_CATEGORY = "select_category"
    CONFIRMED = "confirmed"


class AmountEntry:
    """Keypad buffer for the amount screen."""

    def __init__(self, text: str = ""):
        self.text = text

    def press(self, key: str) -> str:
        if key == "←":
            self.text = self.text[:-1]
        elif key == ".":
            if "." not in self.text:
                self.text += key
        elif key.isdigit() and len(key) == 1:
            self.text += key
        else:
            raise ValueError(f"Unsupported key: {key!r}")
        return self.text

    @property
    def ready(self) -> bool:
        try:
            parse_amount(self.text)
        except InvalidAmountError:
            return False
        return True

    def display(self) -> str:
        return f"${self.text or '0.00'}"


class AddTransactionFlow:
    def __init__(self, settings: BudgetSettings, flow_id: Optional[str] = None):
        self.settings = settings
        self.flow_id = flow_id or uuid4().hex
        self.step = FlowStep.SELECT_FUND
        self.fund: Optional[str] = None
        self.amount: Optional[float] = None
        self.category: Optional[str] = None
        self.transaction: Optional[Transaction] = None
        self._submitted = False

    def _expect(self, *steps: FlowStep) -> None:
        if self.step not in steps:
            raise FlowError(f"Flow {self.flow_id} is at {self.step.value}, expected {' or '.join(s.value for s in steps)}")

    def select_fund(self, fund_id: str) -> None:
        self._expect(FlowStep.SELECT_FUND)
        if self.settings.fund(fund_id) is None:
            raise FlowError(f"Unknown fund source '{fund_id}'")
        self.fund = fund_id
        self.step = FlowStep.ENTER_AMOUNT

    def enter_amount(self, raw) -> float:
        self._expect(FlowStep.ENTER_AMOUNT)
        self.amount = parse_amount(raw)
        self.step = FlowStep.SELECT_CATEGORY
        return self.amount

    def select_category(self, category_id: str) -> None:
        self._expect(FlowStep.SELECT_CATEGORY)
        if self.settings.category(category_id) is None:
            raise FlowError(f"Unknown category '{category_id}'")
        self.category = category_id

    def back(self) -> None:
        """Step back one screen. Not possible once the transaction is confirmed."""
        if self.step is FlowStep.CONFIRMED:
            raise FlowError("Transaction already confirmed")
        if self.step is FlowStep.SELECT_CATEGORY:
            self.category = None
            self.step = FlowStep.ENTER_AMOUNT
        elif self.step is FlowStep.ENTER_AMOUNT:
            self.amount = None
            self.step = FlowStep.SELECT_FUND

    def confirm(self, ledger) -> Optional[Transaction]:
        """Record the transaction exactly once for this flow."""
        if self._submitted:
            return self.transaction
        self._expect(FlowStep.SELECT_CATEGORY)
        if self.category is None:
            raise FlowError("No category selected")

        self._submitted = True
        self.transaction = ledger.record(self.fund, self.amount, self.category)
        self.step = FlowStep.CONFIRMED
        return self.transaction
