"""Contract tests for both persistence strategies, plus their failure modes."""

import logging
from datetime import timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

import budget_store
from budget_defaults import default_settings
from budget_store import LocalBudgetStore, RemoteBudgetStore, get_budget_store
from errors import StorageError
from models import BudgetCategory, BudgetSettingsUpdate, FundSource
from settings import EmptyListPolicy
from storage import DocumentStore


def test_load_returns_defaults_when_nothing_saved(store):
    assert store.load() == default_settings()


def test_save_merges_only_supplied_fields(store):
    saved = store.save({"total_budget": 3000})

    assert saved.total_budget == 3000
    assert saved.categories == default_settings().categories
    assert store.load().total_budget == 3000

    funds = [FundSource(id="cash", name="Cash")]
    store.save(BudgetSettingsUpdate(fund_sources=funds))

    reloaded = store.load()
    assert reloaded.total_budget == 3000
    assert reloaded.fund_sources == funds


def test_saved_empty_category_list_is_kept(store):
    saved = store.save({"categories": []})
    assert saved.categories == []
    assert store.load().categories == []
    assert store.load().fund_sources == default_settings().fund_sources


def test_saved_zero_total_budget_is_kept(store):
    store.save({"total_budget": 0})
    assert store.load().total_budget == 0


def test_insert_assigns_id_and_timestamp(store, clock):
    first = store.insert_transaction("checking", 42.5, "grocery")
    second = store.insert_transaction("checking", 42.5, "grocery")

    assert first.id and second.id and first.id != second.id
    assert first.date == clock.now
    assert (first.fund, first.amount, first.category) == ("checking", 42.5, "grocery")


def test_list_is_newest_first_and_inclusive(store, clock):
    clock.now = clock.days_ago(10)
    oldest = store.insert_transaction("chase", 1, "gas")
    clock.now += timedelta(days=5)
    middle = store.insert_transaction("chase", 2, "gas")
    clock.now += timedelta(days=5)
    newest = store.insert_transaction("chase", 3, "gas")

    listed = store.list_transactions(oldest.date, newest.date)
    assert [t.id for t in listed] == [newest.id, middle.id, oldest.id]

    assert [t.id for t in store.list_transactions(middle.date, newest.date)] == [newest.id, middle.id]


def test_delete_is_idempotent(store):
    kept = store.insert_transaction("bofa", 10, "car")
    gone = store.insert_transaction("bofa", 20, "car")

    assert store.delete_transaction(gone.id) is True
    assert store.delete_transaction(gone.id) is True
    assert store.delete_transaction("does-not-exist") is True
    assert [t.id for t in store.list_transactions()] == [kept.id]


def test_insert_rejects_invalid_amount_before_storing(store):
    with pytest.raises(ValueError):
        store.insert_transaction("checking", -5, "grocery")
    assert store.list_transactions() == []


# --- Local strategy ---

def test_local_documents_use_plain_json_keys(documents, local_store):
    local_store.save({"categories": [BudgetCategory(id="rent", name="Rent", budget=1200)]})
    local_store.insert_transaction("checking", 12.5, "rent")

    assert documents.read("budget-categories") == [{"id": "rent", "name": "Rent", "budget": 1200.0}]
    assert documents.read("fund-sources") is None
    assert documents.read("transactions")[0]["amount"] == 12.5


def test_local_fallback_policy_replaces_empty_lists(documents):
    store = LocalBudgetStore(documents, empty_lists=EmptyListPolicy.FALLBACK)
    store.save({"categories": [], "fund_sources": []})

    settings = store.load()
    assert settings.categories == default_settings().categories
    assert settings.fund_sources == default_settings().fund_sources


def test_local_corrupt_documents_degrade(tmp_path):
    root = tmp_path / "docs"
    root.mkdir()
    (root / "budget-categories.json").write_text("[{broken")
    (root / "transactions.json").write_text('{"not": "a list"}')
    store = LocalBudgetStore(DocumentStore(root=root))

    assert store.load() == default_settings()
    assert store.list_transactions() == []


def test_local_write_failures_are_reported_not_raised(monkeypatch, local_store):
    def fail(key, value):
        raise StorageError("disk full")

    monkeypatch.setattr(local_store.documents, "write", fail)

    assert local_store.save({"total_budget": 1}) is None
    assert local_store.insert_transaction("checking", 1, "grocery") is None


def test_local_delete_failure_returns_false(monkeypatch, local_store):
    txn = local_store.insert_transaction("checking", 1, "grocery")
    monkeypatch.setattr(local_store.documents, "write", MagicMock(side_effect=StorageError("read-only")))
    assert local_store.delete_transaction(txn.id) is False


# --- Remote strategy ---

def _unreachable_session():
    session = MagicMock()
    for method in ("get", "put", "post", "delete"):
        getattr(session, method).side_effect = requests.ConnectionError("connection refused")
    return session


def test_remote_unreachable_store_degrades():
    store = RemoteBudgetStore("http://budget.invalid", session=_unreachable_session())

    assert store.load() == default_settings()
    assert store.save({"total_budget": 10}) is None
    assert store.list_transactions() == []
    assert store.insert_transaction("checking", 5, "grocery") is None
    assert store.delete_transaction("abc") is False


def test_remote_error_status_degrades():
    session = MagicMock()
    session.get.return_value = MagicMock(status_code=500)
    store = RemoteBudgetStore("http://budget.invalid/", session=session)

    assert store.load() == default_settings()
    assert store.list_transactions() == []
    session.get.assert_any_call("http://budget.invalid/budget", timeout=store.timeout)


def test_remote_invalid_json_degrades():
    response = MagicMock(status_code=200)
    response.json.side_effect = ValueError("no json")
    session = MagicMock()
    session.get.return_value = response

    assert RemoteBudgetStore("http://budget.invalid", session=session).load() == default_settings()


def test_remote_request_raises_storage_error_for_bad_status():
    session = MagicMock()
    session.delete.return_value = MagicMock(status_code=400)
    store = RemoteBudgetStore("http://budget.invalid", session=session)
    with pytest.raises(StorageError):
        store._request("delete", "/transactions", params={})


# --- Strategy selection ---

def test_get_budget_store_prefers_remote_when_configured(monkeypatch):
    monkeypatch.setattr(budget_store, "BUDGET_API_URL", "http://budget.example")
    monkeypatch.setattr(budget_store, "EMPTY_LIST_POLICY", "fallback")
    store = get_budget_store()
    assert isinstance(store, RemoteBudgetStore)
    assert store.base_url == "http://budget.example"
    assert store.empty_lists is EmptyListPolicy.FALLBACK


def test_get_budget_store_defaults_to_local(monkeypatch, tmp_path):
    monkeypatch.setattr(budget_store, "BUDGET_API_URL", None)
    monkeypatch.setattr(budget_store.DocumentStore, "from_config", classmethod(lambda cls: cls(root=tmp_path)))
    store = get_budget_store()
    assert isinstance(store, LocalBudgetStore)
    assert store.empty_lists is EmptyListPolicy.KEEP


def test_local_transactions_with_non_object_items_degrade(documents, local_store):
    documents.write("transactions", [1, {"id": "x"}])

    assert local_store.list_transactions() == []
    assert local_store.delete_transaction("x") is False
    assert local_store.insert_transaction("checking", 5, "grocery") is None


def _session_returning(body, status_code=200):
    response = MagicMock(status_code=status_code)
    response.json.return_value = body
    session = MagicMock()
    for method in ("get", "put", "post", "delete"):
        getattr(session, method).return_value = response
    return session


@pytest.mark.parametrize("body", [["not", "a", "document"], "text", 42])
def test_remote_settings_of_wrong_shape_degrade(body):
    store = RemoteBudgetStore("http://budget.invalid", session=_session_returning(body))

    assert store.load() == default_settings()
    assert store.save({"total_budget": 10}) is None


@pytest.mark.parametrize("body", [[{"id": "a"}], {"transactions": {"id": "a"}}, {}, None])
def test_remote_transaction_list_of_wrong_shape_degrades(body):
    store = RemoteBudgetStore("http://budget.invalid", session=_session_returning(body))
    assert store.list_transactions() == []


def test_remote_unsaved_settings_are_not_a_failure(remote_store, caplog):
    caplog.set_level(logging.DEBUG, logger="budget_tracker")

    assert remote_store.load() == default_settings()
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_list_accepts_aware_bounds(store, clock):
    txn = store.insert_transaction("checking", 8, "gas")
    start = clock.days_ago(1).replace(tzinfo=timezone.utc)
    end = clock.now.replace(tzinfo=timezone.utc)

    assert [t.id for t in store.list_transactions(start, end)] == [txn.id]
