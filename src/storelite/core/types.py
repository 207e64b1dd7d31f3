"""Core type definitions for storelite."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from storelite.store.store import Store

State: TypeAlias = dict[str, Any]
"""Store state: application fields plus zero or more action callables."""

PartialState: TypeAlias = Mapping[str, Any] | Any
"""Anything `set_state` accepts as a literal update (usually a mapping)."""

Updater: TypeAlias = Callable[[State], PartialState]
"""Function of the current state producing the update."""

Listener: TypeAlias = Callable[[State, State], None]
"""Plain listener: called with (state, previous_state) on every commit."""

Selector: TypeAlias = Callable[[State], Any]

EqualityFn: TypeAlias = Callable[[Any, Any], bool]

Unsubscribe: TypeAlias = Callable[[], None]


class SetState(Protocol):
    """The write half handed to initializers and wrapped by middleware."""

    def __call__(
        self,
        partial: PartialState | Updater,
        replace: bool = False,
        action: str | None = None,
    ) -> None: ...


GetState: TypeAlias = Callable[[], State]

StateCreator: TypeAlias = Callable[[SetState, GetState, "Store"], State]
"""Initializer: receives (set, get, api) and returns the initial state."""
