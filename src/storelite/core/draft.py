"""Structural patch recorder: mutable drafts over immutable state.

A draft wraps a dict or list without touching it. Writes land in a lazily
created shallow copy, nested containers are drafted on first access, and
`finalize()` builds a new value that shares every untouched subtree with the
base.

Usage:
    next_state = produce(state, lambda draft: draft["todos"].append(todo))
    assert next_state["settings"] is state["settings"]
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, MutableMapping, MutableSequence
from typing import Any, TypeVar, cast, overload


class DraftConflictError(Exception):
    """Raised when a recipe both mutates its draft and returns a new value."""

    pass


class Draft:
    """Base class for container drafts.

    Tracks the base value, a copy created on first write (or on first access to
    a nested container), and whether anything below this draft was modified.
    """

    __slots__ = ("_base", "_copy", "_parent", "_modified", "_finalized")

    def __init__(self, base: Any, parent: Draft | None = None) -> None:
        self._base = base
        self._copy: Any = None
        self._parent = parent
        self._modified = False
        self._finalized: Any = None

    @property
    def modified(self) -> bool:
        return self._modified

    @property
    def base(self) -> Any:
        return self._base

    def _source(self) -> Any:
        return self._base if self._copy is None else self._copy

    def _ensure_copy(self) -> Any:
        if self._copy is None:
            self._copy = self._base.copy()
        return self._copy

    def _mark_modified(self) -> None:
        draft: Draft | None = self
        while draft is not None:
            draft._modified = True
            draft._finalized = None
            draft = draft._parent

    def _child(self, value: Any) -> Any:
        """Wrap a nested container in a draft parented to this one."""
        if isinstance(value, dict):
            return DictDraft(value, parent=self)
        if isinstance(value, list):
            return ListDraft(value, parent=self)
        return value

    def _wrap_item(self, key: Any) -> Any:
        """Read an item, replacing a nested container with its draft in the copy."""
        value = self._source()[key]
        if isinstance(value, Draft) or not isinstance(value, (dict, list)):
            return value
        child = self._child(value)
        # Store the child in the copy without marking this draft modified.
        self._ensure_copy()[key] = child
        return child

    def finalize(self) -> Any:
        """Return the base if nothing changed, else a new value sharing untouched parts."""
        if not self._modified:
            return self._base
        if self._finalized is None:
            self._finalized = self._build()
        return self._finalized

    def _build(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._source()!r})"


class DictDraft(Draft, MutableMapping[Any, Any]):
    """Draft over a dict."""

    __slots__ = ()

    def __getitem__(self, key: Any) -> Any:
        return self._wrap_item(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._ensure_copy()[key] = value
        self._mark_modified()

    def __delitem__(self, key: Any) -> None:
        copy = self._ensure_copy()
        del copy[key]
        self._mark_modified()

    def __iter__(self) -> Iterator[Any]:
        return iter(self._source())

    def __len__(self) -> int:
        return len(self._source())

    def __contains__(self, key: object) -> bool:
        return key in self._source()

    def _build(self) -> dict[Any, Any]:
        return {key: _finalize_value(value) for key, value in self._source().items()}


class ListDraft(Draft, MutableSequence[Any]):
    """Draft over a list."""

    __slots__ = ()

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> list[Any]: ...

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return [self._wrap_item(i) for i in range(len(self))[index]]
        return self._wrap_item(index)

    def __setitem__(self, index: Any, value: Any) -> None:
        self._ensure_copy()[index] = value
        self._mark_modified()

    def __delitem__(self, index: Any) -> None:
        del self._ensure_copy()[index]
        self._mark_modified()

    def __len__(self) -> int:
        return len(self._source())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (list, ListDraft)):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def insert(self, index: int, value: Any) -> None:
        self._ensure_copy().insert(index, value)
        self._mark_modified()

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        copy = self._ensure_copy()
        copy[:] = sorted(copy, key=lambda item: _sort_key(item, key), reverse=reverse)
        self._mark_modified()

    def _build(self) -> list[Any]:
        return [_finalize_value(value) for value in self._source()]


def _sort_key(item: Any, key: Callable[[Any], Any] | None) -> Any:
    value = item.finalize() if isinstance(item, Draft) else item
    return key(value) if key is not None else value


def _finalize_value(value: Any) -> Any:
    """Resolve drafts inside a value returned from, or assigned within, a recipe."""
    if isinstance(value, Draft):
        return value.finalize()
    if isinstance(value, dict):
        resolved = {key: _finalize_value(item) for key, item in value.items()}
        if all(resolved[key] is item for key, item in value.items()):
            return value
        return resolved
    if isinstance(value, list):
        items = [_finalize_value(item) for item in value]
        if all(new is old for new, old in zip(items, value, strict=True)):
            return value
        return items
    return value


def create_draft(base: Any) -> Any:
    """Create a root draft for a dict or list."""
    if isinstance(base, dict):
        return DictDraft(base)
    if isinstance(base, list):
        return ListDraft(base)
    raise TypeError(f"Cannot draft value of type {type(base).__name__}; expected dict or list")


def is_draft(value: Any) -> bool:
    return isinstance(value, Draft)


T = TypeVar("T")


def produce(base: T, recipe: Callable[[Any], Any]) -> T | Any:
    """Run a recipe against a draft of `base` and return the resulting value.

    The recipe either mutates the draft (and returns None or the draft), or
    leaves the draft alone and returns a replacement value.

    Args:
        base: Current value (dict or list).
        recipe: Function receiving the draft.

    Returns:
        `base` itself when nothing changed, a structurally shared new value
        when the draft was mutated, or the recipe's return value.

    Raises:
        DraftConflictError: If the recipe mutated the draft and also returned
            a different value.
        TypeError: If `base` is not a dict or list.
    """
    draft = cast(Draft, create_draft(base))
    returned = recipe(draft)

    if returned is None or returned is draft:
        return draft.finalize()

    if draft.modified:
        raise DraftConflictError(
            "Recipe mutated the draft and also returned a value; "
            "either mutate the draft or return a new value, not both"
        )
    return _finalize_value(returned)
