"""Storage protocols for swappable persistence backends.

Two layers:
- StateStorage: raw key-value strings (browser-style storage, files, ...)
- PersistStorage: decoded persistence records, used by the persist middleware

Usage:
    storage = create_json_storage(lambda: FileStorage(".state"))
    store = create_store(initializer, middleware=[Persist(name="cart", storage=storage)])
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StateStorage(Protocol):
    """Raw key-value backend holding serialized strings."""

    def get_item(self, name: str) -> str | None:
        """Return the stored string, or None when absent."""
        ...

    def set_item(self, name: str, value: str) -> None:
        """Store a string under `name`."""
        ...

    def remove_item(self, name: str) -> None:
        """Remove `name` if present."""
        ...


@runtime_checkable
class PersistStorage(Protocol):
    """Backend for persistence records.

    Any operation may return an awaitable instead of a value; the persist
    middleware awaits reads and fires writes without waiting for them.
    """

    def get_item(self, name: str) -> Any | None | Awaitable[Any | None]:
        """Return the decoded record (a mapping), or None when absent."""
        ...

    def set_item(self, name: str, value: dict[str, Any]) -> None | Awaitable[None]:
        """Store a record."""
        ...

    def remove_item(self, name: str) -> None | Awaitable[None]:
        """Remove the record for `name`."""
        ...
