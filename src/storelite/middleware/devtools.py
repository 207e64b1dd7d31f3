"""Devtools middleware: report named transitions to a state inspector.

Usage:
    inspector = RecordingInspector()
    store = create_store(
        cart_state,
        middleware=[Devtools(name="CartStore", inspector=inspector)],
    )

    store.set_state({"is_open": True}, action="cart/open")
    store.devtools.send("cart/checkout", {"total": 42.0})

Without an inspector, or with devtools disabled (production environment),
the middleware passes updates through untouched and `store.devtools` is a
disconnected no-op API.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from storelite.config.settings import DevtoolsSettings
from storelite.core.types import GetState, PartialState, SetState, State, StateCreator, Updater
from storelite.tracing.models import InspectorMessage
from storelite.tracing.protocol import Inspector, InspectorConnection

if TYPE_CHECKING:
    from storelite.store.store import Store

_logger = logging.getLogger(__name__)

PARSE_ERROR_MESSAGE = "Could not parse the received json."


@dataclass(frozen=True, slots=True)
class DevtoolsOptions:
    """Configuration of one Devtools middleware.

    Attributes:
        name: Store label shown in the inspector.
        enabled: Whether to connect at all.
        inspector: Inspector to connect to. None means pass-through.
        anonymous_action_type: Label for updates sent without an action.
        max_age: Number of actions the inspector should retain.
        state_sanitizer: Transforms state before it is sent.
        action_sanitizer: Transforms actions before they are sent.
    """

    name: str = "storelite"
    enabled: bool = True
    inspector: Inspector | None = None
    anonymous_action_type: str = "anonymous"
    max_age: int = 50
    state_sanitizer: Callable[[State], Any] | None = None
    action_sanitizer: Callable[[dict[str, Any]], dict[str, Any]] | None = None


class DevtoolsApi:
    """Per-store inspector bridge, exposed as `store.devtools`.

    Inspector failures never reach the store: every call into the connection
    is guarded and failures are logged at debug level.
    """

    def __init__(
        self,
        options: DevtoolsOptions,
        connection: InspectorConnection | None,
        get: GetState,
    ) -> None:
        self._options = options
        self._connection = connection
        self._get = get
        self._api: Store | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self.is_updating_from_devtools = False

    @property
    def name(self) -> str:
        return self._options.name

    def is_connected(self) -> bool:
        return self._connection is not None

    def send(self, action_type: str, payload: Any = None) -> None:
        """Send a custom action with the current state. No-op when disconnected."""
        action: dict[str, Any] = {"type": action_type}
        if payload is not None:
            action["payload"] = payload
        self._send(action)

    def record(self, action: str | None) -> None:
        """Send the transition that just committed, labelled `action`."""
        self._send({"type": action or self._options.anonymous_action_type})

    def disconnect(self) -> None:
        """Stop sending and drop inspector message listeners."""
        connection = self._connection
        if connection is None:
            return
        self._connection = None
        self._guard("unsubscribe", connection.unsubscribe)
        if self._unsubscribe is not None:
            self._guard("unsubscribe", self._unsubscribe)
            self._unsubscribe = None

    def start(self, api: Store) -> None:
        """Send the initial state and listen for inspector messages."""
        connection = self._connection
        if connection is None:
            return
        self._api = api
        self._init_connection()
        unsubscribe = self._guard("subscribe", connection.subscribe, self._handle_message)
        if callable(unsubscribe):
            self._unsubscribe = unsubscribe

    def _sanitize_state(self, state: State) -> Any:
        if self._options.state_sanitizer is None:
            return state
        return self._options.state_sanitizer(state)

    def _sanitize_action(self, action: dict[str, Any]) -> dict[str, Any]:
        if self._options.action_sanitizer is None:
            return action
        return self._options.action_sanitizer(action)

    def _send(self, action: dict[str, Any]) -> None:
        connection = self._connection
        if connection is None:
            return
        try:
            connection.send(self._sanitize_action(action), self._sanitize_state(self._get()))
        except Exception as exc:
            _logger.debug("Devtools send to %r failed: %s", self._options.name, exc)

    def _init_connection(self) -> None:
        connection = self._connection
        if connection is None:
            return
        try:
            connection.init(self._sanitize_state(self._get()))
        except Exception as exc:
            _logger.debug("Devtools init of %r failed: %s", self._options.name, exc)

    def _guard(self, operation: str, call: Callable[..., Any], *args: Any) -> Any:
        try:
            return call(*args)
        except Exception as exc:
            _logger.debug("Devtools %s for %r failed: %s", operation, self._options.name, exc)
            return None

    # --- Time travel ---

    def _handle_message(self, message: InspectorMessage) -> None:
        if message.type != "DISPATCH" or self._api is None:
            return
        api = self._api
        kind = message.payload_type

        if kind == "RESET":
            self._apply(api.get_initial_state(), replace=True)
            self._init_connection()
        elif kind == "COMMIT":
            self._init_connection()
        elif kind == "ROLLBACK":
            if self._apply_encoded(message.state):
                self._init_connection()
        elif kind in ("JUMP_TO_STATE", "JUMP_TO_ACTION"):
            self._apply_encoded(message.state)
        else:
            _logger.debug("Ignoring devtools dispatch %r for %r", kind, self._options.name)

    def _apply_encoded(self, encoded: str | None) -> bool:
        try:
            state = json.loads(encoded)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            connection = self._connection
            if connection is not None:
                self._guard("error", connection.error, PARSE_ERROR_MESSAGE)
            return False
        self._apply(state, replace=False)
        return True

    def _apply(self, state: Any, replace: bool) -> None:
        if self._api is None:
            return
        self.is_updating_from_devtools = True
        try:
            self._api.set_state(state, replace)
        finally:
            self.is_updating_from_devtools = False


class Devtools:
    """Middleware sending every named transition to an inspector.

    Accepts the `DevtoolsOptions` fields as keyword arguments. `enabled`
    defaults to `DevtoolsSettings().is_enabled`.

    Example:
        >>> Devtools(name="CartStore", inspector=RecordingInspector())
    """

    extension_name = "devtools"

    def __init__(
        self,
        name: str = "storelite",
        *,
        enabled: bool | None = None,
        inspector: Inspector | None = None,
        anonymous_action_type: str = "anonymous",
        max_age: int = 50,
        state_sanitizer: Callable[[State], Any] | None = None,
        action_sanitizer: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
        settings: DevtoolsSettings | None = None,
    ) -> None:
        if enabled is None:
            enabled = (settings or DevtoolsSettings()).is_enabled
        self.options = DevtoolsOptions(
            name=name,
            enabled=enabled,
            inspector=inspector,
            anonymous_action_type=anonymous_action_type,
            max_age=max_age,
            state_sanitizer=state_sanitizer,
            action_sanitizer=action_sanitizer,
        )

    def _connect(self) -> InspectorConnection | None:
        options = self.options
        if not options.enabled or options.inspector is None:
            return None
        try:
            return options.inspector.connect(options.name, options.max_age)
        except Exception as exc:
            _logger.debug("Devtools could not connect %r: %s", options.name, exc)
            return None

    def wrap(self, initializer: StateCreator) -> StateCreator:
        options = self.options

        def devtools_initializer(set_: SetState, get: GetState, api: Store) -> State:
            connection = self._connect()
            devtools_api = DevtoolsApi(options, connection, get)
            api.register_extension(self.extension_name, devtools_api)
            if connection is None:
                return initializer(set_, get, api)

            def set_and_send(
                partial: PartialState | Updater,
                replace: bool = False,
                action: str | None = None,
            ) -> None:
                previous = get()
                try:
                    set_(partial, replace, action)
                finally:
                    if get() is not previous and not devtools_api.is_updating_from_devtools:
                        devtools_api.record(action)

            api.set_state = set_and_send  # type: ignore[method-assign]
            state = initializer(set_and_send, get, api)
            api.after_init(lambda: devtools_api.start(api))
            return state

        return devtools_initializer
