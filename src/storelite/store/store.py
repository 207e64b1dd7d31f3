"""Store: holds one state value, applies updates and notifies listeners.

Usage:
    store = create_store(
        lambda set_, get, api: {
            "count": 0,
            "increment": lambda: set_(lambda s: {"count": s["count"] + 1}),
        }
    )

    store.get_state()["increment"]()
    unsubscribe = store.subscribe(lambda s: s["count"], print)
    store.set_state({"count": 10})
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from storelite.config.settings import StoreSettings
from storelite.core.types import (
    EqualityFn,
    Listener,
    PartialState,
    Selector,
    State,
    StateCreator,
    Unsubscribe,
    Updater,
)
from storelite.middleware.protocol import compose
from storelite.store.registry import SubscriptionRegistry

if TYPE_CHECKING:
    from storelite.middleware.protocol import Middleware

_logger = logging.getLogger(__name__)

ListenerErrorHandler = Callable[[list[Exception]], None]
"""Receives every exception raised by listeners during one notification pass."""

_UNSET: Any = object()


class StoreNotInitializedError(Exception):
    """Raised when state is read or written before the initializer has returned."""

    pass


class Store:
    """Reactive store handle.

    Owns the current state and a subscription registry. Middleware extend a
    store by rebinding `set_state`/`subscribe` on the instance and by
    registering extensions (`store.persist`, `store.devtools`).

    Args:
        settings: Store settings (default: loaded from environment).
        on_listener_error: Handler for listener failures. Defaults to logging
            them, or re-raising when `settings.raise_listener_errors` is set.
    """

    def __init__(
        self,
        settings: StoreSettings | None = None,
        on_listener_error: ListenerErrorHandler | None = None,
    ) -> None:
        self._settings = settings or StoreSettings()
        self._state: Any = _UNSET
        self._initial_state: Any = _UNSET
        self._registry = SubscriptionRegistry(get_state=self.get_state)
        self._after_init: list[Callable[[], None]] = []
        self._extensions: dict[str, Any] = {}
        self._on_listener_error = on_listener_error or self._report_listener_errors

    @property
    def initialized(self) -> bool:
        return self._state is not _UNSET

    def _require_initialized(self, operation: str) -> None:
        if self._state is _UNSET:
            raise StoreNotInitializedError(
                f"{operation}() called before the store initializer returned"
            )

    def initialize(self, creator: StateCreator) -> None:
        """Run the (composed) initializer once and commit its state.

        Callbacks registered through `after_init` run afterwards, in order.

        Raises:
            RuntimeError: If the store was already initialized.
        """
        if self.initialized:
            raise RuntimeError("Store is already initialized")
        state = creator(self.set_state, self.get_state, self)
        self._state = state
        self._initial_state = state

        while self._after_init:
            callback = self._after_init.pop(0)
            callback()

    def after_init(self, callback: Callable[[], None]) -> None:
        """Run `callback` once the initializer has returned (now, if it already has)."""
        if self.initialized:
            callback()
        else:
            self._after_init.append(callback)

    def get_state(self) -> State:
        """Return the current state reference."""
        self._require_initialized("get_state")
        return self._state  # type: ignore[no-any-return]

    def get_initial_state(self) -> State:
        """Return the state produced by the initializer."""
        self._require_initialized("get_initial_state")
        return self._initial_state  # type: ignore[no-any-return]

    def set_state(
        self,
        partial: PartialState | Updater,
        replace: bool = False,
        action: str | None = None,
    ) -> None:
        """Apply an update and notify listeners.

        Args:
            partial: Partial state, or a function of the current state
                returning one.
            replace: Replace the state instead of shallow-merging.
            action: Optional label for the transition. Ignored by the core;
                carried through the middleware pipeline.
        """
        self._require_initialized("set_state")
        next_state = partial(self._state) if callable(partial) else partial
        if next_state is self._state:
            return

        previous_state = self._state
        if replace or not isinstance(next_state, Mapping):
            self._state = next_state
        else:
            self._state = {**previous_state, **next_state}

        errors = self._registry.notify(self._state, previous_state)
        if errors:
            self._on_listener_error(errors)

    def subscribe(
        self,
        selector_or_listener: Selector | Listener,
        listener: Callable[[Any, Any], None] | None = None,
        *,
        equality_fn: EqualityFn | None = None,
        fire_immediately: bool = False,
    ) -> Unsubscribe:
        """Subscribe to state changes.

        Usage:
            store.subscribe(lambda state, previous: ...)
            store.subscribe(selector, listener, equality_fn=shallow, fire_immediately=True)

        Returns:
            Idempotent unsubscribe function.
        """
        return self._registry.subscribe(
            selector_or_listener,
            listener,
            equality_fn=equality_fn,
            fire_immediately=fire_immediately,
        )

    def destroy(self) -> None:
        """Remove all listeners."""
        self._registry.clear()

    def register_extension(self, name: str, extension: Any) -> None:
        """Attach a middleware API, reachable as `store.<name>`."""
        if name in self._extensions:
            raise ValueError(f"Store extension {name!r} is already registered")
        self._extensions[name] = extension

    def has_extension(self, name: str) -> bool:
        return name in self._extensions

    def __getattr__(self, name: str) -> Any:
        extensions = self.__dict__.get("_extensions", {})
        if name in extensions:
            return extensions[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def _report_listener_errors(self, errors: list[Exception]) -> None:
        if self._settings.raise_listener_errors:
            if len(errors) == 1:
                raise errors[0]
            raise ExceptionGroup("Store listeners raised", errors)
        for error in errors:
            _logger.error("Store listener raised %s", type(error).__name__, exc_info=error)


def create_store(
    initializer: StateCreator,
    middleware: Sequence[Middleware] = (),
    *,
    settings: StoreSettings | None = None,
    on_listener_error: ListenerErrorHandler | None = None,
) -> Store:
    """Create a store from an initializer and an ordered middleware list.

    Args:
        initializer: Function of (set, get, api) returning the initial state.
        middleware: Middleware to apply, innermost first.
        settings: Store settings.
        on_listener_error: Handler for listener failures.

    Returns:
        The initialized store.

    Example:
        >>> store = create_store(
        ...     todo_state,
        ...     middleware=[Immer(), Persist(name="todos"), Devtools(name="Todos")],
        ... )
    """
    store = Store(settings=settings, on_listener_error=on_listener_error)
    store.initialize(compose(initializer, middleware))
    return store
