"""Middleware protocol and composition.

A middleware turns an initializer into another initializer. The produced
initializer receives the same (set, get, api) triple and may wrap `set`
before delegating, but must delegate exactly once per call so that stacked
middleware still produce a single commit per update.

Usage:
    store = create_store(
        initializer,
        middleware=[Immer(), Persist(name="cart"), Devtools(name="Cart")],
    )
    # Equivalent to Devtools(Persist(Immer(initializer))): first is innermost.
"""

from __future__ import annotations

import warnings
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from storelite.core.types import StateCreator


@runtime_checkable
class Middleware(Protocol):
    """Protocol for store middleware.

    Implementations close over their configuration and return a new
    initializer from `wrap`. They hold no per-store state themselves; any
    per-store state lives inside the produced initializer.

    Middleware that expose a store extension declare its name as a class
    attribute `extension_name`; a store can hold only one of each.
    """

    def wrap(self, initializer: StateCreator) -> StateCreator:
        """Wrap an initializer.

        Args:
            initializer: Inner initializer (user initializer or an inner
                middleware's product).

        Returns:
            Initializer with this middleware's behavior added.
        """
        ...


def compose(initializer: StateCreator, middleware: Sequence[Middleware]) -> StateCreator:
    """Apply middleware in list order, first element innermost.

    Args:
        initializer: The user's state initializer.
        middleware: Ordered middleware list.

    Returns:
        Composed initializer.

    Raises:
        TypeError: If an element does not implement the Middleware protocol.
        ValueError: If two middleware claim the same `extension_name`.
    """
    # Late import to avoid circular dependency
    from storelite.middleware.immer import Immer

    claimed: dict[str, Middleware] = {}
    for position, item in enumerate(middleware):
        if not isinstance(item, Middleware):
            raise TypeError(f"{item!r} is not a middleware (missing wrap())")
        extension = getattr(item, "extension_name", None)
        if extension is not None:
            if extension in claimed:
                raise ValueError(
                    f"compose() received store.{extension} more than once "
                    f"({type(claimed[extension]).__name__} and {type(item).__name__})"
                )
            claimed[extension] = item
        if isinstance(item, Immer) and position > 0:
            warnings.warn(
                "Immer should be the innermost middleware (first in the list) so "
                "outer middleware only observe finished states.",
                stacklevel=2,
            )
        initializer = item.wrap(initializer)
    return initializer
