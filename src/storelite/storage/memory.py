"""In-memory key-value storage.

Simple dict-based backend suitable for single-process use and testing.
Records survive as long as the instance does, which makes "reload" tests a
matter of building a second store over the same instance.

Usage:
    backend = MemoryStorage()
    storage = create_json_storage(lambda: backend)
"""

from __future__ import annotations

from collections.abc import Iterator


class MemoryStorage:
    """Dict-backed `StateStorage`."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, name: str) -> str | None:
        return self._items.get(name)

    def set_item(self, name: str, value: str) -> None:
        self._items[name] = value

    def remove_item(self, name: str) -> None:
        self._items.pop(name, None)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


_shared_memory_storage = MemoryStorage()


def shared_memory_storage() -> MemoryStorage:
    """Process-wide backend used when no storage directory is configured."""
    return _shared_memory_storage
