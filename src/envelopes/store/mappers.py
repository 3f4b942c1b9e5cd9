"""Mapper functions to convert between domain entities and the JSON state document.

This layer isolates the document layout, so entities stay unchanged when the
persisted format changes. Decimal amounts are written as strings to keep them
exact.
"""

from dataclasses import fields
from decimal import Decimal
from functools import cache
from typing import Any

from envelopes.domain import entities as domain

# BudgetState collection -> entity class
COLLECTIONS: dict[str, type] = {
    "currencies": domain.Currency,
    "accounts": domain.Account,
    "merchants": domain.Merchant,
    "categories": domain.Category,
    "transactions": domain.Transaction,
    "splits": domain.TransactionSplit,
    "tags": domain.Tag,
    "transaction_tags": domain.TransactionTag,
    "budgets": domain.BudgetRow,
    "import_jobs": domain.ImportJob,
    "import_job_mappings": domain.ImportJobMapping,
    "import_job_errors": domain.ImportJobError,
}


@cache
def _field_names(entity_cls: type) -> tuple[str, ...]:
    return tuple(f.name for f in fields(entity_cls))


def entity_to_document(entity: Any) -> dict[str, Any]:
    """Convert a domain entity to a JSON-compatible dict."""
    document = {}
    for name in _field_names(type(entity)):
        value = getattr(entity, name)
        document[name] = str(value) if isinstance(value, Decimal) else value
    return document


def entity_from_document(entity_cls: type, data: dict[str, Any]) -> Any:
    """Build a domain entity from its document dict, ignoring unknown keys."""
    values = {}
    for f in fields(entity_cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.type is Decimal and value is not None:
            value = Decimal(str(value))
        values[f.name] = value
    return entity_cls(**values)


def state_to_document(state: domain.BudgetState) -> dict[str, Any]:
    """Convert the budget state to the persisted JSON document."""
    return StateDocumentEncoder().encode(state)


class StateDocumentEncoder:
    """Converts successive budget states to documents, reusing unchanged parts.

    States are immutable, so a collection or entity that is the same object as
    in the previous state has the same document and is not converted again.
    """

    def __init__(self):
        # collection name -> (collection, {key: (entity, document)})
        self._cache: dict[str, tuple[dict, dict[str, tuple[Any, dict]]]] = {}

    def encode(self, state: domain.BudgetState) -> dict[str, Any]:
        """Convert the budget state to the persisted JSON document."""
        document: dict[str, Any] = {
            "version": state.version,
            "settings": entity_to_document(state.settings),
            "import_keys": state.import_keys,
        }
        for name in COLLECTIONS:
            document[name] = self._encode_collection(name, getattr(state, name))
        return document

    def _encode_collection(self, name: str, collection: dict) -> dict[str, Any]:
        cached = self._cache.get(name)
        if cached is not None and cached[0] is collection:
            return {key: doc for key, (_, doc) in cached[1].items()}

        previous = cached[1] if cached is not None else {}
        entries = {}
        for key, entity in collection.items():
            hit = previous.get(key)
            if hit is not None and hit[0] is entity:
                entries[key] = hit
            else:
                entries[key] = (entity, entity_to_document(entity))
        self._cache[name] = (collection, entries)
        return {key: doc for key, (_, doc) in entries.items()}


def state_from_document(document: dict[str, Any]) -> domain.BudgetState:
    """Build the budget state from a persisted JSON document.

    Raises:
        ValueError: If the document does not have the expected shape
    """
    if not isinstance(document, dict):
        raise ValueError("State document must be a JSON object")
    try:
        collections = {
            name: {
                key: entity_from_document(entity_cls, data)
                for key, data in document.get(name, {}).items()
            }
            for name, entity_cls in COLLECTIONS.items()
        }
        settings = entity_from_document(
            domain.BudgetSettings, document.get("settings", {})
        )
        import_keys = dict(document.get("import_keys", {}))
    except (TypeError, AttributeError, ArithmeticError) as e:
        raise ValueError(f"Malformed state document: {e}")

    return domain.BudgetState(
        version=document.get("version"),
        settings=settings,
        import_keys=import_keys,
        **collections,
    )
