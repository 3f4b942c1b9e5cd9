"""In-memory budget state backed by durable key-value storage."""

import json
import logging
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, UTC
from typing import Callable, Iterator, Optional

from envelopes.domain.entities import BudgetState, STATE_VERSION
from envelopes.store.base import StateStorage
from envelopes.store.mappers import StateDocumentEncoder, state_from_document

logger = logging.getLogger(__name__)

STORAGE_KEY = "envelopes.state.v1"

Listener = Callable[[BudgetState], None]


def get_default_state() -> BudgetState:
    """Return an empty budget state with default settings."""
    return BudgetState(version=STATE_VERSION)


class BudgetStore:
    """Owner of the budget state.

    The state is immutable; every mutation builds a new ``BudgetState`` and
    passes it to ``set``, which persists the whole document and then notifies
    subscribers synchronously, in subscription order.
    """

    def __init__(
        self,
        storage: StateStorage,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """Initialize budget store.

        Args:
            storage: Durable storage holding the state document
            clock: Returns the current time (defaults to UTC now)
            id_factory: Returns a new opaque identifier (defaults to uuid4)
        """
        self.storage = storage
        self._clock = clock or (lambda: datetime.now(UTC))
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._state: Optional[BudgetState] = None
        self._listeners: list[Listener] = []
        self._encoder = StateDocumentEncoder()
        self._batch_depth = 0
        self._unsaved = False

    def create_id(self) -> str:
        """Return a new unique identifier."""
        return self._id_factory()

    def now_iso(self) -> str:
        """Return the current time as an ISO 8601 string."""
        return self._clock().isoformat()

    def get(self) -> BudgetState:
        """Return the current state, loading it from storage on first use."""
        if self._state is None:
            self._state = self._read_from_storage()
        return self._state

    def set(self, new_state: BudgetState) -> None:
        """Replace the state, persist it and notify subscribers.

        Inside a batch the storage write waits for the end of the batch.

        Setting the state object that is already current is a no-op.
        """
        if new_state is self._state:
            return
        self._state = new_state
        if self._batch_depth:
            self._unsaved = True
        else:
            self._write_to_storage(new_state)
        for listener in list(self._listeners):
            listener(new_state)

    def update(self, updater: Callable[[BudgetState], BudgetState]) -> BudgetState:
        """Apply updater to the current state and store the result."""
        next_state = updater(self.get())
        self.set(next_state)
        return next_state

    @contextmanager
    def batch(self) -> Iterator["BudgetStore"]:
        """Write the state to storage once, when the outermost batch ends.

        Inside a batch every set still replaces the in-memory state and
        notifies subscribers immediately; only the storage write is deferred.
        The state is written even when the block raises.
        """
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._unsaved:
                self._write_to_storage(self._state)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener for state changes.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        """Replace all budget data with the default state."""
        self.set(get_default_state())

    def set_default_currency_code(self, code: str) -> None:
        """Set the currency used when an import row has none."""
        self.update(
            lambda prev: replace(
                prev,
                settings=replace(
                    prev.settings, default_currency_code=code.strip().upper()
                ),
            )
        )

    def set_default_account_type(self, account_type: str) -> None:
        """Set the type given to accounts created by imports."""
        self.update(
            lambda prev: replace(
                prev,
                settings=replace(
                    prev.settings, default_account_type=account_type.strip()
                ),
            )
        )

    def _read_from_storage(self) -> BudgetState:
        raw = self.storage.get_item(STORAGE_KEY)
        if not raw:
            return get_default_state()

        try:
            state = state_from_document(json.loads(raw))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            logger.warning("Discarding unreadable budget state: %s", e)
            return get_default_state()

        if state.version != STATE_VERSION:
            logger.warning(
                "Discarding budget state with version %r (expected %d)",
                state.version,
                STATE_VERSION,
            )
            return get_default_state()
        return state

    def _write_to_storage(self, state: BudgetState) -> None:
        self.storage.set_item(STORAGE_KEY, json.dumps(self._encoder.encode(state)))
        self._unsaved = False
