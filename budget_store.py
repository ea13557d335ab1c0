"""Persistence adapters for budget settings and transactions.

Two interchangeable strategies implement ``BudgetStore``:

* ``LocalBudgetStore`` keeps one JSON document per key in a
  ``storage.DocumentStore`` (local disk, or S3 when a bucket is configured).
* ``RemoteBudgetStore`` talks to the record-store HTTP API served by
  ``api_server``.

Neither ever lets a backend failure escape. Reads degrade to defaults or an
empty list; writes report ``None``/``False`` to the caller.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional, Union
from uuid import uuid4

import requests
from pydantic import ValidationError

from budget_defaults import default_settings
from config import BUDGET_API_TIMEOUT, BUDGET_API_URL, EMPTY_LIST_POLICY
from errors import StorageError
from log_setup import get_logger
from models import BudgetSettings, BudgetSettingsUpdate, Transaction, TransactionCreate, to_naive_utc, utc_now
from settings import EmptyListPolicy, resolve_settings
from storage import DocumentStore

logger = get_logger("budget_store")


def sort_newest_first(transactions: List[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def within(transactions: List[Transaction], start: Optional[datetime], end: Optional[datetime]) -> List[Transaction]:
    """Keep transactions with start <= date <= end; a missing bound is open."""
    return [
        t for t in transactions
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]


class BudgetStore(ABC):
    def __init__(self, empty_lists: EmptyListPolicy = EmptyListPolicy.KEEP):
        self.empty_lists = empty_lists

    # --- Backend hooks. These raise StorageError on failure. ---

    @abstractmethod
    def _read_settings(self) -> Optional[dict]:
        """Raw persisted settings fields, or None if nothing was ever saved."""

    @abstractmethod
    def _write_settings(self, changes: dict) -> Optional[dict]:
        """Merge ``changes`` into the persisted document and return the result."""

    @abstractmethod
    def _list_transactions(self, start: Optional[datetime], end: Optional[datetime]) -> List[Transaction]:
        ...

    @abstractmethod
    def _insert_transaction(self, payload: TransactionCreate) -> Transaction:
        ...

    @abstractmethod
    def _delete_transaction(self, transaction_id: str) -> None:
        ...

    # --- Public contract ---

    def load(self) -> BudgetSettings:
        try:
            return resolve_settings(self._read_settings(), self.empty_lists)
        except (StorageError, ValidationError) as e:
            logger.warning("Budget settings unavailable, using defaults: %s", e)
            return default_settings()

    def save(self, update: Union[BudgetSettingsUpdate, dict]) -> Optional[BudgetSettings]:
        if not isinstance(update, BudgetSettingsUpdate):
            update = BudgetSettingsUpdate(**update)
        changes = update.changes()
        try:
            merged = self._write_settings(changes)
            settings = resolve_settings(merged, self.empty_lists)
        except (StorageError, ValidationError) as e:
            logger.warning("Saving budget settings failed: %s", e)
            return None
        logger.info("Saved budget settings fields: %s", ", ".join(sorted(changes)) or "none")
        return settings

    def list_transactions(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Transaction]:
        start = to_naive_utc(start) if start is not None else None
        end = to_naive_utc(end) if end is not None else None
        try:
            transactions = self._list_transactions(start, end)
        except (StorageError, ValidationError) as e:
            logger.warning("Transactions unavailable: %s", e)
            return []
        return sort_newest_first(within(transactions, start, end))

    def insert_transaction(self, fund: str, amount: float, category: str) -> Optional[Transaction]:
        """Store a new transaction; the store assigns its id and timestamp."""
        payload = TransactionCreate(fund=fund, amount=amount, category=category)
        try:
            transaction = self._insert_transaction(payload)
        except (StorageError, ValidationError) as e:
            logger.warning("Recording transaction failed: %s", e)
            return None
        logger.info("Recorded %s %.2f from %s", transaction.category, transaction.amount, transaction.fund)
        return transaction

    def delete_transaction(self, transaction_id: str) -> bool:
        """Delete by id. Unknown ids are not an error; False means the store failed."""
        try:
            self._delete_transaction(transaction_id)
        except StorageError as e:
            logger.warning("Deleting transaction %s failed: %s", transaction_id, e)
            return False
        return True


class LocalBudgetStore(BudgetStore):
    CATEGORIES_KEY = "budget-categories"
    FUNDS_KEY = "fund-sources"
    TOTAL_KEY = "total-budget"
    TRANSACTIONS_KEY = "transactions"

    _FIELD_KEYS = {
        "total_budget": TOTAL_KEY,
        "categories": CATEGORIES_KEY,
        "fund_sources": FUNDS_KEY,
    }

    def __init__(
        self,
        documents: DocumentStore,
        empty_lists: EmptyListPolicy = EmptyListPolicy.KEEP,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(empty_lists)
        self.documents = documents
        self.clock = clock

    def _read_settings(self) -> Optional[dict]:
        raw = {field: self.documents.read(key) for field, key in self._FIELD_KEYS.items()}
        if all(value is None for value in raw.values()):
            return None
        return raw

    def _write_settings(self, changes: dict) -> Optional[dict]:
        for field, value in changes.items():
            self.documents.write(self._FIELD_KEYS[field], value)
        return self._read_settings()

    def _raw_transactions(self) -> list:
        raw = self.documents.read(self.TRANSACTIONS_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
            raise StorageError("Transactions document is not a list of objects")
        return raw

    def _list_transactions(self, start, end) -> List[Transaction]:
        return [Transaction.model_validate(item) for item in self._raw_transactions()]

    def _insert_transaction(self, payload: TransactionCreate) -> Transaction:
        transaction = Transaction(id=uuid4().hex, date=self.clock(), **payload.model_dump())
        raw = self._raw_transactions()
        raw.append(transaction.model_dump(mode="json"))
        self.documents.write(self.TRANSACTIONS_KEY, raw)
        return transaction

    def _delete_transaction(self, transaction_id: str) -> None:
        raw = self._raw_transactions()
        kept = [item for item in raw if item.get("id") != transaction_id]
        if len(kept) != len(raw):
            self.documents.write(self.TRANSACTIONS_KEY, kept)


def _settings_document(data) -> Optional[dict]:
    if data is not None and not isinstance(data, dict):
        raise StorageError("Budget settings response is not an object")
    return data


class RemoteBudgetStore(BudgetStore):
    def __init__(
        self,
        base_url: str,
        session=None,
        timeout: float = BUDGET_API_TIMEOUT,
        empty_lists: EmptyListPolicy = EmptyListPolicy.KEEP,
    ):
        super().__init__(empty_lists)
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, expected=(200,), missing=(), **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = getattr(self.session, method)(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StorageError(f"{method.upper()} {path} failed: {e}") from e
        if response.status_code in missing:
            return None
        if response.status_code not in expected:
            raise StorageError(f"{method.upper()} {path} returned {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"{method.upper()} {path} returned invalid JSON") from e

    def _read_settings(self) -> Optional[dict]:
        # 404 means nothing has been saved yet
        return _settings_document(self._request("get", "/budget", missing=(404,)))

    def _write_settings(self, changes: dict) -> Optional[dict]:
        return _settings_document(self._request("put", "/budget", json=changes))

    def _list_transactions(self, start, end) -> List[Transaction]:
        params = {}
        if start is not None:
            params["start"] = start.isoformat()
        if end is not None:
            params["end"] = end.isoformat()
        data = self._request("get", "/transactions", params=params)
        items = data.get("transactions") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise StorageError("GET /transactions returned no transaction list")
        return [Transaction.model_validate(item) for item in items]

    def _insert_transaction(self, payload: TransactionCreate) -> Transaction:
        data = self._request("post", "/transactions", expected=(200, 201), json=payload.model_dump())
        return Transaction.model_validate(data)

    def _delete_transaction(self, transaction_id: str) -> None:
        self._request("delete", "/transactions", params={"id": transaction_id})


def get_budget_store() -> BudgetStore:
    """The store selected by configuration: remote when BUDGET_API_URL is set, local otherwise."""
    policy = EmptyListPolicy(EMPTY_LIST_POLICY)
    if BUDGET_API_URL:
        return RemoteBudgetStore(BUDGET_API_URL, empty_lists=policy)
    return LocalBudgetStore(DocumentStore.from_config(), empty_lists=policy)
