"""Tests for state document mappers."""

from decimal import Decimal

import pytest

from envelopes.domain.entities import (
    BudgetSettings,
    BudgetState,
    Category,
    Transaction,
    TransactionTag,
)
from envelopes.store.mappers import (
    StateDocumentEncoder,
    entity_from_document,
    entity_to_document,
    state_from_document,
    state_to_document,
)


def test_transaction_amount_written_as_string():
    """Decimal amounts are stored exactly as strings."""
    tx = Transaction(
        id="t1",
        account_id="a1",
        transaction_date="2024-03-01",
        amount=Decimal("-0.10"),
        currency_id="c1",
        type="expense",
    )
    doc = entity_to_document(tx)
    assert doc["amount"] == "-0.10"
    assert doc["merchant_id"] is None

    restored = entity_from_document(Transaction, doc)
    assert restored == tx
    assert isinstance(restored.amount, Decimal)


def test_entity_from_document_ignores_unknown_keys_and_fills_defaults():
    """Unknown keys are dropped and missing optional fields take defaults."""
    category = entity_from_document(Category, {"id": "c1", "name": "Food", "colour": "red"})
    assert category == Category(id="c1", name="Food")


def test_entity_from_document_accepts_numeric_amounts():
    """Amounts written as JSON numbers still load as Decimal."""
    tx = entity_from_document(
        Transaction,
        {
            "id": "t1",
            "account_id": "a1",
            "transaction_date": "2024-03-01",
            "amount": 12.5,
            "currency_id": "c1",
            "type": "income",
        },
    )
    assert tx.amount == Decimal("12.5")


def test_state_document_round_trip():
    """A state survives conversion to a document and back."""
    state = BudgetState(
        settings=BudgetSettings(default_currency_code="EUR"),
        categories={"c1": Category(id="c1", name="Food")},
        transaction_tags={"t1:g1": TransactionTag(transaction_id="t1", tag_id="g1")},
        import_keys={"imp_1": "t1"},
    )
    document = state_to_document(state)

    assert document["version"] == 1
    assert document["settings"]["default_currency_code"] == "EUR"
    assert state_from_document(document) == state


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"version": 1, "categories": {"c1": {"name": "no id"}}},
        {"version": 1, "accounts": ["a1"]},
    ],
)
def test_state_from_document_rejects_malformed(document):
    """Malformed documents raise ValueError."""
    with pytest.raises(ValueError):
        state_from_document(document)


def test_encoder_reuses_unchanged_entities():
    """Unchanged entities keep their documents across states."""
    encoder = StateDocumentEncoder()
    food = Category(id="c1", name="Food")
    state = BudgetState(categories={"c1": food})
    first = encoder.encode(state)

    extended = BudgetState(
        categories={"c1": food, "c2": Category(id="c2", name="Fun")},
        import_keys={"imp_1": "t1"},
    )
    second = encoder.encode(extended)

    assert second["categories"]["c1"] is first["categories"]["c1"]
    assert second["categories"]["c2"]["name"] == "Fun"
    assert second["import_keys"] == {"imp_1": "t1"}
    assert state_from_document(second) == extended


def test_encoder_picks_up_replaced_entities():
    """A replaced entity under the same key is converted again."""
    encoder = StateDocumentEncoder()
    encoder.encode(BudgetState(categories={"c1": Category(id="c1", name="Food")}))
    document = encoder.encode(
        BudgetState(categories={"c1": Category(id="c1", name="Groceries")})
    )
    assert document["categories"]["c1"]["name"] == "Groceries"
