"""
Chained variable environments.

A Scope is a mutable mapping of its own bindings plus a read-only link to a
parent mapping. Reads that miss locally continue in the parent; writes and
deletes only ever touch the frame they are applied to.
"""

from collections.abc import Mapping, MutableMapping
from typing import Any, Iterator, Optional

from .values import UNDEFINED


class Scope(MutableMapping):
    """A frame of bindings chained to an optional parent."""

    def __init__(
        self,
        bindings: Optional[MutableMapping[str, Any]] = None,
        parent: Optional[Mapping[str, Any]] = None,
    ):
        # Held by reference so a host dict observes assignments.
        self._bindings: MutableMapping[str, Any] = bindings if bindings is not None else {}
        self._parent = parent

    @property
    def parent(self) -> Optional[Mapping[str, Any]]:
        return self._parent

    @property
    def bindings(self) -> MutableMapping[str, Any]:
        return self._bindings

    def __getitem__(self, name: str) -> Any:
        return self._bindings[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._bindings[name] = value

    def __delitem__(self, name: str) -> None:
        del self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"Scope({dict(self._bindings)!r}, parent={'yes' if self._parent is not None else 'no'})"

    def lookup(self, name: str, default: Any = UNDEFINED) -> Any:
        """Reads a name from this frame or the nearest ancestor defining it."""
        return lookup(self, name, default)

    def defines(self, name: str) -> bool:
        """Checks whether any frame in the chain defines the name."""
        frame: Optional[Mapping[str, Any]] = self
        while frame is not None:
            if isinstance(frame, Scope):
                if name in frame._bindings:
                    return True
                frame = frame._parent
            else:
                return name in frame
        return False

    def child(self, bindings: Optional[MutableMapping[str, Any]] = None) -> "Scope":
        """Creates a new frame whose parent is this one."""
        return Scope(bindings, parent=self)


def lookup(scope: Mapping[str, Any], name: str, default: Any = UNDEFINED) -> Any:
    """
    Reads a name by walking a scope chain outward.

    Works for Scope frames and plain mappings alike; a plain mapping ends the
    chain.
    """
    frame: Optional[Mapping[str, Any]] = scope
    while frame is not None:
        if isinstance(frame, Scope):
            if name in frame._bindings:
                return frame._bindings[name]
            frame = frame._parent
        else:
            return frame.get(name, default)
    return default


def delete_binding(scope: Mapping[str, Any], name: str) -> bool:
    """
    Removes a binding from the given frame only.

    Returns False when the frame cannot be modified; removing a name the
    frame does not hold succeeds.
    """
    if not isinstance(scope, MutableMapping):
        return False
    if name in scope:
        del scope[name]
    return True
