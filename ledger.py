"""Append-only log of spend events on top of a ``BudgetStore``."""

from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

import pandas as pd

from log_setup import get_logger
from models import Transaction, parse_amount, to_naive_utc, utc_now

logger = get_logger("ledger")


def trailing_month_start(now: datetime) -> datetime:
    """Same day-of-month one calendar month earlier.

    Clamps to the last day of a shorter month (Mar 31 -> Feb 28/29), so the
    window spans 28 to 31 days depending on ``now``.
    """
    return (pd.Timestamp(now) - pd.DateOffset(months=1)).to_pydatetime()


def window_bounds(now: datetime, days: Optional[int] = None) -> Tuple[datetime, datetime]:
    if days is None:
        return trailing_month_start(now), now
    return now - timedelta(days=days), now


class TransactionLedger:
    def __init__(self, store, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def record(self, fund: str, amount, category: str) -> Optional[Transaction]:
        """Record a spend. Returns None when the store could not persist it."""
        value = parse_amount(amount)
        return self.store.insert_transaction(fund, value, category)

    def window(self, days: Optional[int] = None, now: Optional[datetime] = None) -> List[Transaction]:
        """Transactions in the current period, newest first.

        The default period is the trailing calendar month ending at ``now``;
        pass ``days`` for a fixed-length window instead. Both ends are inclusive.
        """
        start, end = window_bounds(to_naive_utc(now or self.clock()), days)
        return self.store.list_transactions(start, end)

    def remove(self, transaction_id: str) -> bool:
        removed = self.store.delete_transaction(transaction_id)
        if not removed:
            logger.warning("Transaction %s may still exist", transaction_id)
        return removed
