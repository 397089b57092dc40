"""
``spew.tracker``: Cycle detection
=================================

A :class:`CycleTracker` holds the addresses of the values that are being
rendered on the current path from the root. It is not a registry of
everything seen so far: a value shared by two siblings is rendered twice,
only a value that contains itself gets cut short::

    >>> tracker = CycleTracker()
    >>> with tracker.visiting(1) as fresh:
    ...     fresh, 1 in tracker
    (True, True)
    >>> 1 in tracker
    False
"""

from __future__ import annotations

import contextlib
from typing import Hashable, Iterator

__all__ = ("CycleTracker",)


class CycleTracker:
    """The set of addresses currently being rendered."""

    __slots__ = ("_active",)

    _active: set[Hashable]

    def __init__(self) -> None:
        self._active = set()

    def __contains__(self, address: Hashable) -> bool:
        return address in self._active

    def __len__(self) -> int:
        return len(self._active)

    def enter(self, address: Hashable) -> bool:
        """Mark *address* as in progress.

        Returns:
          ``False`` if *address* was already in progress (we found a cycle).
        """
        if address in self._active:
            return False
        self._active.add(address)
        return True

    def leave(self, address: Hashable) -> None:
        self._active.discard(address)

    @contextlib.contextmanager
    def visiting(self, address: Hashable) -> Iterator[bool]:
        """Scoped version of :meth:`enter`/:meth:`leave`.

        Yields ``False`` when *address* is already in progress; in that case
        the address is left untouched on exit. Otherwise the address is
        released on exit, even if the body raised.
        """
        if not self.enter(address):
            yield False
            return
        try:
            yield True
        finally:
            self.leave(address)
