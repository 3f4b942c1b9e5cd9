"""Tests for the budget state store."""

import json
import logging
from dataclasses import replace
from datetime import datetime, UTC

import pytest

from envelopes.domain.entities import BudgetState, Currency
from envelopes.store.factories import create_memory_storage
from envelopes.store.state import STORAGE_KEY, BudgetStore, get_default_state


def _with_currency(state: BudgetState, code: str = "USD") -> BudgetState:
    currency = Currency(id=f"cur-{code}", code=code)
    return replace(state, currencies={**state.currencies, currency.id: currency})


def test_missing_document_gives_default_state(store):
    """An empty storage loads the default state."""
    state = store.get()
    assert state == get_default_state()
    assert state.settings.default_currency_code == "USD"
    assert state.settings.default_account_type == "checking"


def test_state_persists_across_stores(store, temp_db):
    """A new store over the same storage sees earlier writes."""
    store.update(_with_currency)

    reopened = BudgetStore(temp_db)
    assert [c.code for c in reopened.get().currencies.values()] == ["USD"]
    assert json.loads(temp_db.get_item(STORAGE_KEY))["version"] == 1


def test_version_mismatch_falls_back_to_default(temp_db, caplog):
    """A document with another version is ignored."""
    document = {"version": 99, "currencies": {"c1": {"id": "c1", "code": "EUR"}}}
    temp_db.set_item(STORAGE_KEY, json.dumps(document))

    with caplog.at_level(logging.WARNING):
        state = BudgetStore(temp_db).get()

    assert state == get_default_state()
    assert "version" in caplog.text


def test_corrupted_document_falls_back_to_default(temp_db, caplog):
    """Unreadable JSON is ignored."""
    temp_db.set_item(STORAGE_KEY, "{not json")

    with caplog.at_level(logging.WARNING):
        state = BudgetStore(temp_db).get()

    assert state == get_default_state()
    assert "Discarding" in caplog.text


def test_malformed_document_falls_back_to_default(temp_db):
    """A JSON document of the wrong shape is ignored."""
    temp_db.set_item(STORAGE_KEY, json.dumps({"version": 1, "currencies": ["USD"]}))
    assert BudgetStore(temp_db).get() == get_default_state()


def test_subscribers_notified_in_order(store):
    """Subscribers see each new state in subscription order."""
    calls = []
    store.subscribe(lambda state: calls.append(("first", len(state.currencies))))
    store.subscribe(lambda state: calls.append(("second", len(state.currencies))))

    store.update(_with_currency)

    assert calls == [("first", 1), ("second", 1)]


def test_unsubscribe(store):
    """An unsubscribed listener is no longer called."""
    calls = []
    unsubscribe = store.subscribe(calls.append)
    store.update(_with_currency)
    unsubscribe()
    unsubscribe()
    store.update(lambda prev: _with_currency(prev, "EUR"))

    assert len(calls) == 1


def test_setting_same_state_is_noop(temp_db):
    """Setting the current state object neither writes nor notifies."""
    store = BudgetStore(temp_db)
    calls = []
    store.subscribe(calls.append)

    current = store.get()
    store.set(current)

    assert calls == []
    assert temp_db.get_item(STORAGE_KEY) is None


def test_reset(store, temp_db):
    """Reset replaces everything with the default state."""
    store.update(_with_currency)
    store.set_default_currency_code("eur")

    store.reset()

    assert store.get() == get_default_state()
    assert BudgetStore(temp_db).get() == get_default_state()


def test_settings_updates(store):
    """Settings are normalized and persisted."""
    store.set_default_currency_code(" gbp ")
    store.set_default_account_type("savings")
    settings = store.get().settings
    assert settings.default_currency_code == "GBP"
    assert settings.default_account_type == "savings"


def test_ids_and_clock_are_injectable():
    """Custom id factory and clock are used."""
    ids = iter(["a", "b"])
    store = BudgetStore(
        create_memory_storage(),
        clock=lambda: datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
        id_factory=lambda: next(ids),
    )
    assert store.create_id() == "a"
    assert store.create_id() == "b"
    assert store.now_iso() == "2024-01-02T03:04:05+00:00"


def test_default_ids_are_unique(store):
    """Generated ids do not repeat."""
    assert len({store.create_id() for _ in range(100)}) == 100


def test_batch_defers_storage_write(store, temp_db):
    """Inside a batch subscribers see each set but storage is written once."""
    calls = []
    store.subscribe(lambda state: calls.append(len(state.currencies)))

    with store.batch():
        store.update(_with_currency)
        store.update(lambda prev: _with_currency(prev, "EUR"))
        assert calls == [1, 2]
        assert temp_db.get_item(STORAGE_KEY) is None

    document = json.loads(temp_db.get_item(STORAGE_KEY))
    assert sorted(c["code"] for c in document["currencies"].values()) == ["EUR", "USD"]


def test_nested_batches_write_at_outermost_end(store, temp_db):
    """Only the outermost batch writes."""
    with store.batch():
        with store.batch():
            store.update(_with_currency)
        assert temp_db.get_item(STORAGE_KEY) is None
    assert temp_db.get_item(STORAGE_KEY) is not None


def test_batch_writes_when_block_raises(store, temp_db):
    """Changes made before an error are still stored."""
    with pytest.raises(RuntimeError):
        with store.batch():
            store.update(_with_currency)
            raise RuntimeError("boom")

    assert [c.code for c in BudgetStore(temp_db).get().currencies.values()] == ["USD"]


def test_empty_batch_writes_nothing(store, temp_db):
    """A batch without changes does not touch storage."""
    with store.batch():
        store.get()
    assert temp_db.get_item(STORAGE_KEY) is None
