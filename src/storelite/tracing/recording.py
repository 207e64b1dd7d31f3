"""In-memory inspector recording every action sent by connected stores.

Useful in tests and in development sessions without an external debugging UI:
histories are bounded per connection, and time-travel messages can be
dispatched back to the stores.

Usage:
    inspector = RecordingInspector()
    store = create_store(init, middleware=[Devtools(name="Cart", inspector=inspector)])

    store.set_state({"is_open": True}, action="cart/open")
    [record] = inspector.history("Cart")
    inspector.jump_to_state("Cart", {"is_open": False})
"""

from __future__ import annotations

import json
import threading
import time
from collections import deque
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from storelite.tracing.models import ActionRecord, InspectorMessage


def _without_callables(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: _without_callables(item) for key, item in value.items() if not callable(item)
        }
    if isinstance(value, (list, tuple)):
        return [None if callable(item) else _without_callables(item) for item in value]
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return _without_callables(value.model_dump(mode="json"))
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_state(state: Any) -> str:
    """Encode a recorded state for a time-travel message.

    Action callables are dropped from mappings and become null in lists, the
    way a browser inspector serializes a store. Pydantic models are dumped in
    JSON mode.
    """
    return json.dumps(_without_callables(state), default=_json_default)


class RecordingConnection:
    """Connection of one store to a `RecordingInspector`.

    Args:
        name: Store label.
        max_age: Maximum number of records kept; older records are evicted.
    """

    def __init__(self, name: str, max_age: int) -> None:
        if max_age < 1:
            raise ValueError(f"max_age must be positive, got {max_age}")
        self.name = name
        self.max_age = max_age
        self.baseline: Any = None
        self.initialized = False
        self.errors: list[str] = []
        self._history: deque[ActionRecord] = deque(maxlen=max_age)
        self._listeners: list[Callable[[InspectorMessage], None]] = []
        self._next_index = 0
        self._lock = threading.Lock()

    def init(self, state: Any) -> None:
        with self._lock:
            self._history.clear()
            self._next_index = 0
            self.baseline = state
            self.initialized = True

    def send(self, action: dict[str, Any], state: Any) -> None:
        with self._lock:
            self._history.append(
                ActionRecord(
                    index=self._next_index,
                    timestamp=time.time(),
                    action=dict(action),
                    state=state,
                )
            )
            self._next_index += 1

    def subscribe(self, listener: Callable[[InspectorMessage], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def unsubscribe(self) -> None:
        self._listeners.clear()

    def error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def history(self) -> list[ActionRecord]:
        with self._lock:
            return list(self._history)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, message: InspectorMessage) -> None:
        """Deliver a message to every listener of this connection."""
        for listener in list(self._listeners):
            listener(message)


class RecordingInspector:
    """Inspector keeping a bounded in-memory history per store name.

    Connecting twice with the same name replaces the earlier connection, as a
    debugging UI would when a page reloads.
    """

    def __init__(self) -> None:
        self._connections: dict[str, RecordingConnection] = {}

    def connect(self, name: str, max_age: int) -> RecordingConnection:
        connection = RecordingConnection(name, max_age)
        self._connections[name] = connection
        return connection

    def connection(self, name: str) -> RecordingConnection:
        """Get the connection for `name`.

        Raises:
            KeyError: If no store connected under that name.
        """
        try:
            return self._connections[name]
        except KeyError:
            raise KeyError(f"No store connected as {name!r}") from None

    def names(self) -> list[str]:
        return list(self._connections)

    def history(self, name: str) -> list[ActionRecord]:
        return self.connection(name).history

    def action_types(self, name: str) -> list[str]:
        return [record.action_type for record in self.history(name)]

    def dispatch(self, name: str, message: InspectorMessage) -> None:
        self.connection(name).dispatch(message)

    # --- Time travel ---

    def reset(self, name: str) -> None:
        self.dispatch(name, InspectorMessage(type="DISPATCH", payload={"type": "RESET"}))

    def commit(self, name: str) -> None:
        self.dispatch(name, InspectorMessage(type="DISPATCH", payload={"type": "COMMIT"}))

    def rollback(self, name: str, state: Any) -> None:
        self._dispatch_state(name, "ROLLBACK", state)

    def jump_to_state(self, name: str, state: Any) -> None:
        self._dispatch_state(name, "JUMP_TO_STATE", state)

    def jump_to_action(self, name: str, index: int) -> None:
        """Restore the state recorded with the action at `index`.

        Raises:
            IndexError: If the record is no longer in the history.
        """
        for record in self.history(name):
            if record.index == index:
                self._dispatch_state(name, "JUMP_TO_ACTION", record.state)
                return
        raise IndexError(f"Action {index} is not in the history of {name!r}")

    def _dispatch_state(self, name: str, payload_type: str, state: Any) -> None:
        self.dispatch(
            name,
            InspectorMessage(
                type="DISPATCH",
                payload={"type": payload_type},
                state=encode_state(state),
            ),
        )
