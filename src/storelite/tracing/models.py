"""Data models for the inspector channel.

These models are designed to be storage-agnostic and work with any state
that can be serialized to JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ActionRecord:
    """One named state transition as seen by an inspector.

    Attributes:
        index: Position of the record in the connection's history.
        timestamp: Unix timestamp when the action was sent.
        action: Action payload, at least {"type": str}.
        state: State after the action (sanitized, JSON-serializable).
        metadata: Optional arbitrary metadata for annotations.

    Example:
        record = ActionRecord(
            index=3,
            timestamp=1704067200.0,
            action={"type": "cart/addItem"},
            state={"items": [...], "is_open": False},
        )
    """

    index: int
    timestamp: float
    action: dict[str, Any]
    state: Any
    metadata: dict[str, Any] | None = None

    @property
    def action_type(self) -> str:
        return str(self.action.get("type", ""))

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "index": self.index,
            "timestamp": self.timestamp,
            "action": self.action,
            "state": self.state,
        }
        if self.metadata is not None:
            result["metadata"] = self.metadata
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionRecord:
        """Create from dictionary (for deserialization)."""
        return cls(
            index=data["index"],
            timestamp=data["timestamp"],
            action=data["action"],
            state=data["state"],
            metadata=data.get("metadata"),
        )


@dataclass(slots=True)
class InspectorMessage:
    """Message sent from an inspector back to the store.

    Attributes:
        type: Message kind; the store reacts to "DISPATCH".
        payload: For DISPATCH, {"type": "RESET" | "COMMIT" | "ROLLBACK" |
            "JUMP_TO_STATE" | "JUMP_TO_ACTION"}.
        state: JSON-encoded state for ROLLBACK and JUMP_* messages.
    """

    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    state: str | None = None

    @property
    def payload_type(self) -> str | None:
        value = self.payload.get("type")
        return None if value is None else str(value)
