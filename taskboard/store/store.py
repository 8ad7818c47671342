"""Dispatching wrapper around the tree reducer."""
from __future__ import annotations

import logging
from typing import Callable, Iterable

from taskboard.actions import Action, assign_ids
from taskboard.identity import IdAllocator, new_id
from taskboard.models import StoreState
from taskboard.observability import record_dispatch
from taskboard.store.reducer import reduce

logger = logging.getLogger("taskboard.store")

# Called after every transition with (action, previous_state, next_state).
Effect = Callable[[Action, StoreState, StoreState], None]


class TreeStore:
    """Owns the canonical tree; all changes go through ``dispatch``."""

    def __init__(
        self,
        initial_state: StoreState | None = None,
        *,
        allocate_id: IdAllocator = new_id,
        effects: Iterable[Effect] = (),
    ):
        self._state = initial_state if initial_state is not None else StoreState()
        self._allocate_id = allocate_id
        self._effects: list[Effect] = list(effects)

    def get_state(self) -> StoreState:
        return self._state

    def add_effect(self, effect: Effect) -> None:
        self._effects.append(effect)

    def dispatch(self, action: Action) -> StoreState:
        # Ids are minted once here so effects see exactly what the reducer used.
        action = assign_ids(action, self._allocate_id)
        previous = self._state
        self._state = reduce(previous, action, self._allocate_id)
        record_dispatch(action.type, changed=self._state is not previous)

        for effect in self._effects:
            try:
                effect(action, previous, self._state)
            except Exception:
                logger.exception("Store effect %r failed for %s", effect, action.type)
        return self._state
