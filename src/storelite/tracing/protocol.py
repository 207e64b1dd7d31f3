"""Protocols for the devtools inspector channel.

These protocols define the interface between the devtools middleware and an
external state inspector (in-memory recorder, debugging UI bridge, log sink).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from storelite.tracing.models import InspectorMessage


@runtime_checkable
class InspectorConnection(Protocol):
    """One store's connection to an inspector.

    Every method may fail; the devtools middleware treats failures as
    non-fatal and never lets them reach the caller of `set_state`.
    """

    def init(self, state: Any) -> None:
        """Reset the inspector's history with a baseline state."""
        ...

    def send(self, action: dict[str, Any], state: Any) -> None:
        """Record an action and the state after it.

        Args:
            action: Action payload, at least {"type": str}.
            state: State after the action.
        """
        ...

    def subscribe(self, listener: Callable[[InspectorMessage], None]) -> Callable[[], None] | None:
        """Register for messages from the inspector (time travel, reset).

        Returns:
            Function removing the listener, or None if unsupported.
        """
        ...

    def unsubscribe(self) -> None:
        """Remove every message listener of this connection."""
        ...

    def error(self, message: str) -> None:
        """Report a store-side problem to the inspector."""
        ...


@runtime_checkable
class Inspector(Protocol):
    """Entry point of an inspector: hands out per-store connections.

    Usage:
        inspector = RecordingInspector()
        store = create_store(init, middleware=[Devtools(name="Cart", inspector=inspector)])
        history = inspector.history("Cart")
    """

    def connect(self, name: str, max_age: int) -> InspectorConnection:
        """Open a connection for the store labelled `name`.

        Args:
            name: Store label shown in the inspector.
            max_age: Maximum number of actions the inspector should retain.
        """
        ...
