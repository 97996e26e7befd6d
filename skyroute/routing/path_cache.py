"""
Append-only history of computed routes.

Entries are keyed by quantized start/end positions and own a private copy
of their waypoints. Storage grows by doubling and never shrinks.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from ..grid.node import Vector3

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_CAPACITY = 10

PositionKey = Tuple[int, int, int]


def position_key(point: Vector3) -> PositionKey:
    """Quantize a position by truncating each coordinate toward zero."""
    return (int(point.x), int(point.y), int(point.z))


def route_key(start: Vector3, end: Vector3) -> Tuple[PositionKey, PositionKey]:
    return position_key(start), position_key(end)


class RouteCacheEntry:
    """Owned copy of a route's waypoints plus its total length."""

    __slots__ = ('start_key', 'end_key', 'waypoints', 'distance')

    def __init__(
        self,
        start_key: PositionKey,
        end_key: PositionKey,
        path: Sequence[Vector3],
        distance: float
    ):
        self.start_key = start_key
        self.end_key = end_key
        self.waypoints: Tuple[Vector3, ...] = tuple(p.copy() for p in path)
        self.distance = float(distance)

    @property
    def waypoint_count(self) -> int:
        return len(self.waypoints)

    def retrieve_path(self) -> List[Vector3]:
        """Return a fresh copy of the stored waypoints."""
        return [p.copy() for p in self.waypoints]

    def __deepcopy__(self, memo) -> RouteCacheEntry:
        return RouteCacheEntry(self.start_key, self.end_key, self.waypoints, self.distance)

    def __repr__(self) -> str:
        return (f"RouteCacheEntry({self.start_key}->{self.end_key}, "
                f"{self.waypoint_count} waypoints, {self.distance:.2f})")


@dataclass
class CacheStats:
    """Diagnostic snapshot of a PathCache."""
    entries: int
    capacity: int
    total_waypoints: int

    def summary(self) -> str:
        return (f"Entries: {self.entries}/{self.capacity} | "
                f"Total waypoints cached: {self.total_waypoints}")


class PathCache:
    """
    Capacity-doubling sequence of RouteCacheEntry indexed by insertion order.

    size <= capacity always holds. Growth builds the enlarged backing list
    completely before swapping it in, so readers never observe a partial copy.
    """

    def __init__(self, initial_capacity: int = DEFAULT_INITIAL_CAPACITY):
        if initial_capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {initial_capacity}")
        self._slots: List[Optional[RouteCacheEntry]] = [None] * initial_capacity
        self._size = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def total_waypoints(self) -> int:
        """Aggregate waypoint count across every entry."""
        return sum(entry.waypoint_count for entry in self.entries())

    def _grow(self) -> None:
        old_capacity = len(self._slots)
        new_slots: List[Optional[RouteCacheEntry]] = [None] * (old_capacity * 2)
        new_slots[:self._size] = self._slots[:self._size]
        self._slots = new_slots
        logger.info(f"Path cache grown from {old_capacity} to {len(new_slots)} slots")

    def store(
        self,
        start_key: PositionKey,
        end_key: PositionKey,
        path: Sequence[Vector3],
        distance: float
    ) -> int:
        """
        Append an owned copy of a route.

        Returns:
            Index of the new entry
        """
        entry = RouteCacheEntry(start_key, end_key, path, distance)
        if self._size >= len(self._slots):
            self._grow()
        index = self._size
        self._slots[index] = entry
        self._size += 1
        return index

    def find_latest(self, start_key: PositionKey, end_key: PositionKey) -> Optional[RouteCacheEntry]:
        """Most recently stored entry for the given keys, if any."""
        for index in range(self._size - 1, -1, -1):
            entry = self._slots[index]
            if entry.start_key == start_key and entry.end_key == end_key:
                return entry
        return None

    def entries(self) -> Iterator[RouteCacheEntry]:
        for index in range(self._size):
            yield self._slots[index]

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=self._size,
            capacity=self.capacity,
            total_waypoints=self.total_waypoints
        )

    def __getitem__(self, index: int) -> RouteCacheEntry:
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError(f"Cache index out of range (size={self._size})")
        return self._slots[index]

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[RouteCacheEntry]:
        return self.entries()

    def __deepcopy__(self, memo) -> PathCache:
        clone = PathCache(self.capacity)
        for entry in self.entries():
            clone.store(entry.start_key, entry.end_key, entry.waypoints, entry.distance)
        return clone

    def __repr__(self) -> str:
        return f"PathCache({self._size}/{self.capacity})"
