"""Persistence record model.

Records are validated on the way in, so malformed data read from a backend
surfaces as a `pydantic.ValidationError` instead of a half-applied state.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StorageValue(BaseModel):
    """A named, versioned snapshot of the persisted projection of a store.

    Attributes:
        name: Record key the snapshot was written under.
        version: Version of the code that wrote the snapshot.
        state: Output of the store's `partialize` function.

    Example:
        record = StorageValue(name="cart-storage", version=1, state={"items": []})
        storage.set_item(record.name, record.to_dict())
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    version: int = Field(default=0, ge=0)
    state: Any

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return self.model_dump(mode="python")

    @classmethod
    def from_dict(cls, data: Any) -> StorageValue:
        """Validate a decoded record.

        Raises:
            pydantic.ValidationError: If `data` is not a valid record.
        """
        return cls.model_validate(data)
