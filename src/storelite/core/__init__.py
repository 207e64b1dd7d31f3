"""Core functionalities: stateless types, equality helpers and drafts.

Architecture Note:
    core/ contains pure building blocks with no store state of their own.
    For the stateful store and its listeners, see store/; for middleware,
    see middleware/.
"""

from storelite.core.draft import (
    DictDraft,
    Draft,
    DraftConflictError,
    ListDraft,
    create_draft,
    is_draft,
    produce,
)
from storelite.core.equality import is_same, shallow
from storelite.core.types import (
    EqualityFn,
    GetState,
    Listener,
    PartialState,
    Selector,
    SetState,
    State,
    StateCreator,
    Unsubscribe,
    Updater,
)

__all__ = [
    # Types
    "State",
    "PartialState",
    "Updater",
    "Listener",
    "Selector",
    "EqualityFn",
    "Unsubscribe",
    "SetState",
    "GetState",
    "StateCreator",
    # Equality
    "is_same",
    "shallow",
    # Drafts
    "Draft",
    "DictDraft",
    "ListDraft",
    "DraftConflictError",
    "create_draft",
    "is_draft",
    "produce",
]
