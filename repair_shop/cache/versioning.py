"""
Write clock shared by the indexed caches and the relationship graph.

A read-through takes a ``ReadToken`` *before* it queries the store and
hands it back when it wants to insert what it read.  The insertion is
refused if anything wrote to or evicted the same key after the token
was taken, because the value read from the store may then be older
than the one the writer committed.

Stamps are kept for the most recent ``max_stamps`` keys only.  When
older stamps are dropped, the clock remembers the newest dropped tick
as a floor and refuses every token taken before it, so pruning can only
turn a populate into a cache miss, never let a stale one through.

The clock is not locked on its own; owners call it while holding their
own lock.
"""

from collections.abc import Hashable
from typing import NamedTuple

DEFAULT_MAX_STAMPS = 4096


class ReadToken(NamedTuple):
    """Position of the write clock when a read-through started."""

    epoch: int
    tick: int


class WriteClock:
    """Monotonic tick per key plus an epoch bumped by ``reset``."""

    def __init__(self, max_stamps: int = DEFAULT_MAX_STAMPS) -> None:
        self._epoch = 0
        self._tick = 0
        self._floor = 0
        self._max_stamps = max_stamps
        # Insertion order is tick order; the oldest stamp is first.
        self._stamps: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._stamps)

    def token(self) -> ReadToken:
        return ReadToken(self._epoch, self._tick)

    def stamp(self, key: Hashable) -> None:
        """Record a write to ``key``; invalidates every earlier token for it."""
        self._tick += 1
        self._stamps.pop(key, None)
        self._stamps[key] = self._tick
        while len(self._stamps) > self._max_stamps:
            oldest = next(iter(self._stamps))
            self._floor = self._stamps.pop(oldest)

    def is_current(self, key: Hashable, token: ReadToken) -> bool:
        """True if nothing wrote to ``key`` since ``token`` was taken."""
        if token.epoch != self._epoch or token.tick < self._floor:
            return False
        return self._stamps.get(key, 0) <= token.tick

    def reset(self) -> None:
        """Invalidate every outstanding token (used by full clears)."""
        self._epoch += 1
        self._floor = 0
        self._stamps.clear()
