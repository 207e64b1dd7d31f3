"""Persist middleware: save a projection of state and restore it later.

Usage:
    store = create_store(
        cart_state,
        middleware=[
            Persist(
                name="cart-storage",
                partialize=lambda s: {"items": s["items"]},
                skip_hydration=True,
            )
        ],
    )

    # Once storage is available:
    store.persist.rehydrate()
    assert store.persist.has_hydrated()
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from storelite.config.settings import PersistSettings
from storelite.core.types import (
    GetState,
    PartialState,
    SetState,
    State,
    StateCreator,
    Unsubscribe,
    Updater,
)
from storelite.storage.models import StorageValue
from storelite.storage.protocol import PersistStorage
from storelite.storage.serialized import default_storage
from storelite.store.sync_runner import SyncRunner

if TYPE_CHECKING:
    from storelite.store.store import Store

_logger = logging.getLogger(__name__)

REHYDRATE_ACTION = "persist/rehydrate"

RehydrateCallback = Callable[["State | None", "Exception | None"], None]
"""Called when hydration ends: (state, None) on success, (None, error) on failure."""


class HydrationStatus(Enum):
    """Hydration progress of one persisted store."""

    UNINITIALIZED = auto()
    """Nothing read yet (skip_hydration, or construction still running)."""

    HYDRATING = auto()
    """A rehydrate() call is in progress."""

    HYDRATED = auto()
    """Hydration finished, successfully or not. Writes are enabled."""


def drop_callables(state: State) -> Any:
    """Default partialize: persist every top-level field except actions."""
    if not isinstance(state, Mapping):
        return state
    return {key: value for key, value in state.items() if not callable(value)}


def merge_shallow(persisted_state: Any, current_state: State) -> State:
    """Default merge: persisted fields over current state, one level deep."""
    if isinstance(persisted_state, Mapping) and isinstance(current_state, Mapping):
        return {**current_state, **persisted_state}
    return current_state


@dataclass(frozen=True, slots=True)
class PersistOptions:
    """Configuration of one Persist middleware.

    Attributes:
        name: Record key in the storage backend.
        storage: Record backend. None selects `default_storage()`.
        partialize: Chooses the persisted projection of state.
        version: Version written with each record.
        migrate: Converts a record written by another version; receives
            (persisted_state, stored_version). Without it such records are
            discarded.
        merge: Combines persisted state with the current state.
        skip_hydration: Do not hydrate at construction; wait for rehydrate().
        on_rehydrate_storage: Called with the current state when hydration
            starts; may return a callback run when it ends.
        on_error: Receives write failures. Without it they are logged.
    """

    name: str
    storage: PersistStorage | None = None
    partialize: Callable[[State], Any] = drop_callables
    version: int = 0
    migrate: Callable[[Any, int], Any] | None = None
    merge: Callable[[Any, State], State] = merge_shallow
    skip_hydration: bool = False
    on_rehydrate_storage: Callable[[State], RehydrateCallback | None] | None = None
    on_error: Callable[[Exception], None] | None = None


class _Discarded:
    """Marker for a record dropped because of a version mismatch."""


_DISCARDED = _Discarded()


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class PersistApi:
    """Per-store persistence controller, exposed as `store.persist`.

    Args:
        options: Middleware configuration.
        storage: Resolved record backend.
        set_: Delegate `set` (towards the store core).
        get: Reads current state.
    """

    def __init__(
        self,
        options: PersistOptions,
        storage: PersistStorage,
        set_: SetState,
        get: GetState,
    ) -> None:
        self._options = options
        self._storage = storage
        self._set = set_
        self._get = get
        self._status = HydrationStatus.UNINITIALIZED
        self._destroyed = False
        self._hydrate_listeners: list[Callable[[State], None]] = []
        self._finish_listeners: list[Callable[[State], None]] = []
        self._pending_writes: set[Any] = set()

    @property
    def status(self) -> HydrationStatus:
        return self._status

    @property
    def skip_requested(self) -> bool:
        return self._options.skip_hydration

    def has_hydrated(self) -> bool:
        return self._status is HydrationStatus.HYDRATED

    def get_options(self) -> PersistOptions:
        return self._options

    def on_hydrate(self, listener: Callable[[State], None]) -> Unsubscribe:
        """Call `listener(state)` whenever hydration starts."""
        return self._add_listener(self._hydrate_listeners, listener)

    def on_finish_hydration(self, listener: Callable[[State], None]) -> Unsubscribe:
        """Call `listener(state)` whenever hydration ends."""
        return self._add_listener(self._finish_listeners, listener)

    @staticmethod
    def _add_listener(
        listeners: list[Callable[[State], None]], listener: Callable[[State], None]
    ) -> Unsubscribe:
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    # --- Hydration ---

    def _begin(self) -> RehydrateCallback | None:
        self._status = HydrationStatus.HYDRATING
        for listener in list(self._hydrate_listeners):
            listener(self._get())
        if self._options.on_rehydrate_storage is None:
            return None
        return self._options.on_rehydrate_storage(self._get())

    def _decode(self, raw: Any) -> StorageValue | None:
        if raw is None:
            return None
        return StorageValue.from_dict(raw)

    def _needs_migration(self, record: StorageValue) -> bool:
        return record.version != self._options.version

    def _discard(self, record: StorageValue) -> _Discarded:
        _logger.warning(
            "Discarding persisted %r: stored version %d, expected %d, no migrate function",
            self._options.name,
            record.version,
            self._options.version,
        )
        return _DISCARDED

    def _commit(self, persisted_state: Any) -> None:
        if persisted_state is _DISCARDED:
            return
        merged = self._options.merge(persisted_state, self._get())
        self._set(merged, True, REHYDRATE_ACTION)

    def _complete(self, callback: RehydrateCallback | None, error: Exception | None) -> None:
        self._status = HydrationStatus.HYDRATED
        if error is not None:
            _logger.warning(
                "Hydration of %r failed; keeping in-memory state: %s", self._options.name, error
            )
        if callback is not None:
            if error is None:
                callback(self._get(), None)
            else:
                callback(None, error)
        for listener in list(self._finish_listeners):
            listener(self._get())

    def rehydrate(self) -> None:
        """Read the persisted record and merge it into the store.

        Awaitable backends are driven to completion on a background loop; in
        async code prefer `rehydrate_async()`. Failures keep the current state
        and are reported to the rehydrate callback, never raised.
        """
        callback = self._begin()
        error: Exception | None = None
        try:
            raw = self._storage.get_item(self._options.name)
            if inspect.isawaitable(raw):
                raw = SyncRunner.get().run(_await(raw))
            record = self._decode(raw)
            if record is not None:
                persisted_state: Any = record.state
                if self._needs_migration(record):
                    if self._options.migrate is None:
                        persisted_state = self._discard(record)
                    else:
                        persisted_state = self._options.migrate(persisted_state, record.version)
                        if inspect.isawaitable(persisted_state):
                            persisted_state = SyncRunner.get().run(_await(persisted_state))
                self._commit(persisted_state)
        except Exception as exc:
            error = exc
        self._complete(callback, error)

    async def rehydrate_async(self) -> None:
        """Async variant of `rehydrate()` for awaitable backends."""
        callback = self._begin()
        error: Exception | None = None
        try:
            raw = self._storage.get_item(self._options.name)
            if inspect.isawaitable(raw):
                raw = await raw
            record = self._decode(raw)
            if record is not None:
                persisted_state: Any = record.state
                if self._needs_migration(record):
                    if self._options.migrate is None:
                        persisted_state = self._discard(record)
                    else:
                        persisted_state = self._options.migrate(persisted_state, record.version)
                        if inspect.isawaitable(persisted_state):
                            persisted_state = await persisted_state
                self._commit(persisted_state)
        except Exception as exc:
            error = exc
        self._complete(callback, error)

    # --- Writes ---

    def persist_state(self) -> None:
        """Write the partialized current state. No-op until hydrated."""
        if self._destroyed or self._status is not HydrationStatus.HYDRATED:
            return
        try:
            record = StorageValue(
                name=self._options.name,
                version=self._options.version,
                state=self._options.partialize(self._get()),
            )
            result = self._storage.set_item(self._options.name, record.to_dict())
        except Exception as exc:
            self._report_write_error(exc)
            return
        if inspect.isawaitable(result):
            self._schedule(result)

    def _schedule(self, awaitable: Awaitable[Any]) -> None:
        try:
            loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        pending: asyncio.Task[Any] | concurrent.futures.Future[Any]
        if loop is not None:
            pending = loop.create_task(_await(awaitable))
        else:
            pending = SyncRunner.get().submit(_await(awaitable))
        self._pending_writes.add(pending)
        pending.add_done_callback(self._write_done)

    def _write_done(self, pending: Any) -> None:
        self._pending_writes.discard(pending)
        if pending.cancelled():
            return
        error = pending.exception()
        if error is not None:
            self._report_write_error(error)

    async def flush(self) -> None:
        """Wait until every scheduled write has finished.

        Write failures are reported through `on_error` or the log as usual
        and are not raised here.
        """
        while self._pending_writes:
            waiting = [
                pending if isinstance(pending, asyncio.Future) else asyncio.wrap_future(pending)
                for pending in list(self._pending_writes)
            ]
            await asyncio.wait(waiting)

    def _report_write_error(self, error: BaseException) -> None:
        if not isinstance(error, Exception):
            raise error
        if self._options.on_error is not None:
            self._options.on_error(error)
        else:
            _logger.warning("Failed to persist %r: %s", self._options.name, error)

    def clear_storage(self) -> Awaitable[None] | None:
        """Remove the persisted record. Returns the backend's awaitable, if any."""
        return self._storage.remove_item(self._options.name)

    def destroy(self) -> None:
        """Stop writing and drop hydration listeners."""
        self._destroyed = True
        self._hydrate_listeners.clear()
        self._finish_listeners.clear()


class Persist:
    """Middleware persisting a projection of state to a storage backend.

    Accepts the `PersistOptions` fields as keyword arguments. `version`
    defaults to `PersistSettings.default_version` and the storage backend to
    `default_storage(settings)`.

    Example:
        >>> Persist(name="theme-storage", skip_hydration=True)
    """

    extension_name = "persist"

    def __init__(
        self,
        name: str,
        *,
        storage: PersistStorage | None = None,
        partialize: Callable[[State], Any] | None = None,
        version: int | None = None,
        migrate: Callable[[Any, int], Any] | None = None,
        merge: Callable[[Any, State], State] | None = None,
        skip_hydration: bool = False,
        on_rehydrate_storage: Callable[[State], RehydrateCallback | None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        settings: PersistSettings | None = None,
    ) -> None:
        if not name:
            raise ValueError("Persist requires a non-empty name")
        self._settings = settings or PersistSettings()
        self.options = PersistOptions(
            name=name,
            storage=storage,
            partialize=partialize or drop_callables,
            version=self._settings.default_version if version is None else version,
            migrate=migrate,
            merge=merge or merge_shallow,
            skip_hydration=skip_hydration,
            on_rehydrate_storage=on_rehydrate_storage,
            on_error=on_error,
        )

    def wrap(self, initializer: StateCreator) -> StateCreator:
        options = self.options
        settings = self._settings

        def persist_initializer(set_: SetState, get: GetState, api: Store) -> State:
            storage = options.storage or default_storage(settings)
            persist_api = PersistApi(options, storage, set_, get)
            api.register_extension(self.extension_name, persist_api)

            def set_and_persist(
                partial: PartialState | Updater,
                replace: bool = False,
                action: str | None = None,
            ) -> None:
                previous = get()
                try:
                    set_(partial, replace, action)
                finally:
                    if get() is not previous:
                        persist_api.persist_state()

            api.set_state = set_and_persist  # type: ignore[method-assign]
            state = initializer(set_and_persist, get, api)

            if not options.skip_hydration:
                api.after_init(persist_api.rehydrate)
            return state

        return persist_initializer
