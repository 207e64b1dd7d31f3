"""Mutation-sugar middleware: update functions mutate a draft.

Usage:
    def todo_state(set_, get, api):
        def toggle(index):
            def recipe(draft):
                draft["todos"][index]["done"] = not draft["todos"][index]["done"]

            set_(recipe)

        return {"todos": [], "toggle": toggle}

    store = create_store(todo_state, middleware=[Immer()])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from storelite.core.draft import produce
from storelite.core.types import GetState, PartialState, SetState, State, StateCreator, Updater

if TYPE_CHECKING:
    from storelite.store.store import Store


class Immer:
    """Turns callable updates into draft recipes.

    A callable passed to `set` receives a draft of the current state. Writes
    on the draft become a new state that shares untouched subtrees; a
    returned value is used as the update instead. Doing both in one call
    raises `DraftConflictError`. Non-callable updates pass through.

    Must be the innermost middleware.
    """

    def wrap(self, initializer: StateCreator) -> StateCreator:
        def immer_initializer(set_: SetState, get: GetState, api: Store) -> State:
            def set_with_draft(
                partial: PartialState | Updater,
                replace: bool = False,
                action: str | None = None,
            ) -> None:
                if callable(partial):
                    set_(produce(get(), partial), replace, action)
                else:
                    set_(partial, replace, action)

            api.set_state = set_with_draft  # type: ignore[method-assign]
            return initializer(set_with_draft, get, api)

        return immer_initializer
