"""Combine: build a store from plain initial state plus an actions factory."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from storelite.core.types import GetState, SetState, State, StateCreator

if TYPE_CHECKING:
    from storelite.store.store import Store

ActionsFactory = Callable[[SetState, GetState, "Store"], Mapping[str, Any]]


def combine(initial_state: Mapping[str, Any], create_actions: ActionsFactory) -> StateCreator:
    """Merge initial state with the actions produced by `create_actions`.

    Example:
        >>> store = create_store(
        ...     combine(
        ...         {"count": 0},
        ...         lambda set_, get, api: {
        ...             "increment": lambda: set_(lambda s: {"count": s["count"] + 1}),
        ...         },
        ...     )
        ... )
    """

    def combined(set_: SetState, get: GetState, api: Store) -> State:
        return {**initial_state, **create_actions(set_, get, api)}

    return combined
