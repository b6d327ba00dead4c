"""Chained variable scopes used during evaluation."""

from __future__ import annotations

from typing import Mapping


class Frame:
    """One level of the variable scope chain.

    Lookups walk up through parents; bindings only ever land in this frame,
    so a child shadows its parent without overwriting it.
    """

    def __init__(self, parent: Frame | None = None, init: Mapping[str, object] | None = None):
        self._data: dict[str, object] = {}
        self.parent = parent
        if init:
            self._data.update(init)

    def __contains__(self, name: str) -> bool:
        frame: Frame | None = self
        while frame is not None:
            if name in frame._data:
                return True
            frame = frame.parent
        return False

    def __getitem__(self, name: str) -> object:
        frame: Frame | None = self
        while frame is not None:
            try:
                return frame._data[name]
            except KeyError:
                frame = frame.parent
        raise KeyError(name)

    def __setitem__(self, name: str, value: object) -> None:
        self._data[name] = value

    def child(self, init: Mapping[str, object] | None = None) -> Frame:
        """Return a fresh sub-scope of this frame."""
        return Frame(parent=self, init=init)
