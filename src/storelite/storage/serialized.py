"""JSON adapter from a raw `StateStorage` to a `PersistStorage`."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from storelite.config.settings import PersistSettings
from storelite.storage.file import FileStorage
from storelite.storage.memory import shared_memory_storage
from storelite.storage.protocol import StateStorage


class JSONStorage:
    """Encode records as JSON strings on top of a raw backend.

    The backend is resolved lazily through `get_storage` on every call, so a
    store can be created before its backend exists (for example before a
    client environment is available). While `get_storage` returns None, reads
    return None and writes are dropped.

    Decode errors and backend errors propagate; the persist middleware turns
    them into hydration failures or `on_error` reports.

    Args:
        get_storage: Returns the raw backend, or None when unavailable.
        dumps_kwargs: Extra keyword arguments for `json.dumps`.
    """

    def __init__(
        self,
        get_storage: Callable[[], StateStorage | None],
        dumps_kwargs: dict[str, Any] | None = None,
    ) -> None:
        self._get_storage = get_storage
        self._dumps_kwargs = dumps_kwargs or {}

    def get_item(self, name: str) -> Any | None:
        storage = self._get_storage()
        if storage is None:
            return None
        raw = storage.get_item(name)
        if not raw:
            return None
        return json.loads(raw)

    def set_item(self, name: str, value: dict[str, Any]) -> None:
        storage = self._get_storage()
        if storage is None:
            return
        storage.set_item(name, json.dumps(value, **self._dumps_kwargs))

    def remove_item(self, name: str) -> None:
        storage = self._get_storage()
        if storage is None:
            return
        storage.remove_item(name)


def create_json_storage(get_storage: Callable[[], StateStorage | None]) -> JSONStorage:
    """Create a JSON-encoding persist storage over a lazily resolved backend."""
    return JSONStorage(get_storage)


def default_storage(settings: PersistSettings | None = None) -> JSONStorage:
    """JSON storage over the configured default backend.

    Uses a `FileStorage` when `storage_dir` is configured, otherwise the
    process-wide `MemoryStorage`.
    """
    settings = settings or PersistSettings()
    if settings.storage_dir:
        backend: StateStorage = FileStorage(settings.storage_dir)
    else:
        backend = shared_memory_storage()
    return JSONStorage(lambda: backend)
