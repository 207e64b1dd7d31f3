"""Inspector channel used by the devtools middleware.

This module provides the protocols a state inspector implements, the data
structures it exchanges with stores, and an in-memory recording inspector.

Usage:
    from storelite.tracing import RecordingInspector

    inspector = RecordingInspector()
    store = create_store(init, middleware=[Devtools(name="Cart", inspector=inspector)])
    print(inspector.action_types("Cart"))

    # Or implement Inspector for your own debugging UI:
    class SocketInspector:
        def connect(self, name: str, max_age: int) -> InspectorConnection:
            ...
"""

from storelite.tracing.models import ActionRecord, InspectorMessage
from storelite.tracing.protocol import Inspector, InspectorConnection
from storelite.tracing.recording import RecordingConnection, RecordingInspector, encode_state

__all__ = [
    # Protocols
    "Inspector",
    "InspectorConnection",
    # Models
    "ActionRecord",
    "InspectorMessage",
    # Implementations
    "RecordingInspector",
    "RecordingConnection",
    "encode_state",
]
