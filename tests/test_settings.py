import pytest

from budget_defaults import DEFAULT_BUDGET_CATEGORIES, TOTAL_MONTHLY_BUDGET, default_settings
from errors import DuplicateIdError, InvalidAmountError, UnknownIdError
from models import FundSource
from settings import EmptyListPolicy, SettingsRepository, resolve_settings


@pytest.fixture
def repo(local_store):
    return SettingsRepository(local_store)


# --- resolve_settings ---

def test_nothing_persisted_resolves_to_defaults():
    assert resolve_settings(None) == default_settings()
    assert resolve_settings({}) == default_settings()


def test_missing_fields_fall_back_individually():
    settings = resolve_settings({"total_budget": 1000, "categories": None})
    assert settings.total_budget == 1000
    assert settings.categories == default_settings().categories
    assert settings.fund_sources == default_settings().fund_sources


def test_zero_total_budget_is_a_real_value():
    assert resolve_settings({"total_budget": 0}).total_budget == 0


@pytest.mark.parametrize("policy, expect_empty", [
    (EmptyListPolicy.KEEP, True),
    (EmptyListPolicy.FALLBACK, False),
])
def test_empty_list_policy(policy, expect_empty):
    settings = resolve_settings({"categories": [], "fund_sources": []}, policy)
    assert (settings.categories == []) is expect_empty
    assert (settings.fund_sources == []) is expect_empty


def test_policy_accepts_config_strings():
    assert EmptyListPolicy("fallback") is EmptyListPolicy.FALLBACK


# --- SettingsRepository ---

def test_lookups(repo):
    assert repo.category_budget("rent") == 1600
    assert repo.category_budget("nope") == 0
    assert repo.fund_name("chase") == "Chase Credit Card"
    assert repo.fund_name("cash") == "cash"


def test_set_total_budget_accepts_zero(repo):
    assert repo.set_total_budget("$4,000").total_budget == 4000
    assert repo.set_total_budget(0).total_budget == 0
    assert repo.resolve().total_budget == 0
    with pytest.raises(InvalidAmountError):
        repo.set_total_budget("-1")


def test_save_only_touches_given_fields(repo):
    repo.save(fund_sources=[FundSource(id="cash", name="Cash")])
    settings = repo.resolve()
    assert settings.total_budget == TOTAL_MONTHLY_BUDGET
    assert len(settings.categories) == len(DEFAULT_BUDGET_CATEGORIES)
    assert [f.id for f in settings.fund_sources] == ["cash"]


def test_add_category_derives_id_from_name(repo):
    settings = repo.add_category("  Pet Care ", "75")
    added = settings.categories[-1]
    assert (added.id, added.name, added.budget) == ("pet-care", "Pet Care", 75)
    assert repo.category_budget("pet-care") == 75


def test_add_category_rejects_collisions_and_blank_names(repo):
    with pytest.raises(DuplicateIdError):
        repo.add_category("Eating Out", 10)
    with pytest.raises(ValueError):
        repo.add_category("   ", 10)
    with pytest.raises(InvalidAmountError):
        repo.add_category("Travel", "lots")


def test_rename_keeps_id(repo):
    repo.rename_category("grocery", "Groceries & Household")
    category = repo.resolve().category("grocery")
    assert category.name == "Groceries & Household"


def test_update_category_budget(repo):
    repo.update_category_budget("gas", "95.5")
    assert repo.category_budget("gas") == 95.5
    with pytest.raises(UnknownIdError):
        repo.update_category_budget("boat", 10)


def test_remove_category_and_empty_list_survives_reload(repo):
    for category in default_settings().categories:
        repo.remove_category(category.id)
    assert repo.resolve().categories == []


def test_fund_sources_add_and_remove(repo):
    repo.add_fund("Cash")
    assert repo.fund_name("cash") == "Cash"
    with pytest.raises(DuplicateIdError):
        repo.add_fund("cash")

    repo.remove_fund("discover")
    assert repo.resolve().fund("discover") is None


def test_failed_save_returns_none(repo, monkeypatch):
    monkeypatch.setattr(repo.store, "save", lambda update: None)
    assert repo.set_total_budget(100) is None
