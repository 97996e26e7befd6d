"""Bounded 3D occupancy volume answering point and segment blocking queries."""

from __future__ import annotations
import logging
from typing import Iterable, Optional, Tuple

import numpy as np

from .node import Vector3
from ..data.building_geometry import Obstacle, ObstacleCollection

logger = logging.getLogger(__name__)

DEFAULT_BLOCKING_MARGIN = 0.5
DEFAULT_SAMPLE_STEP = 0.5
SAFE_ALTITUDE_CLEARANCE = 2.0


class OccupancyVolume:
    """
    Box obstacles inside the extents [0, width) x [0, depth) x [0, height).

    z is altitude. Anything outside the extents counts as blocked.
    """

    def __init__(
        self,
        width: float = 50,
        depth: float = 30,
        height: float = 20,
        obstacles: Optional[Iterable[Obstacle]] = None,
        name: str = "Default City",
        clearance: float = SAFE_ALTITUDE_CLEARANCE,
        blocking_margin: float = DEFAULT_BLOCKING_MARGIN
    ):
        """
        Create an occupancy volume.

        Args:
            width: Extent along x
            depth: Extent along y
            height: Extent along z (altitude)
            obstacles: Initial obstacles
            name: Display name of the map
            clearance: Margin added above the highest roof for safe_altitude()
            blocking_margin: Default obstacle inflation for blocking queries
        """
        self.width = float(width)
        self.depth = float(depth)
        self.height = float(height)
        self.name = name
        self.clearance = clearance
        self.blocking_margin = blocking_margin
        self._obstacles = ObstacleCollection(list(obstacles or []))

        # (M, 3) corner arrays for batch segment checks, rebuilt on change
        self._box_min = np.zeros((0, 3))
        self._box_max = np.zeros((0, 3))
        self._rebuild_arrays()

    def _rebuild_arrays(self) -> None:
        obstacles = self._obstacles.obstacles
        if obstacles:
            self._box_min = np.array([o.min_corner.to_list() for o in obstacles])
            self._box_max = np.array([o.max_corner.to_list() for o in obstacles])
        else:
            self._box_min = np.zeros((0, 3))
            self._box_max = np.zeros((0, 3))

    def add_obstacle(self, obstacle: Obstacle) -> None:
        """Add an obstacle to the volume."""
        self._obstacles.add(obstacle)
        self._rebuild_arrays()
        logger.debug(f"Added {obstacle!r} to {self.name}")

    def clear_obstacles(self) -> None:
        self._obstacles.clear()
        self._rebuild_arrays()

    @property
    def obstacles(self) -> Tuple[Obstacle, ...]:
        """Read-only view of the obstacles."""
        return tuple(self._obstacles)

    @property
    def bounds(self) -> Tuple[Vector3, Vector3]:
        return Vector3(0, 0, 0), Vector3(self.width, self.depth, self.height)

    def in_bounds(self, point: Vector3) -> bool:
        return (0 <= point.x < self.width and
                0 <= point.y < self.depth and
                0 <= point.z < self.height)

    def is_blocked(self, point: Vector3, margin: Optional[float] = None) -> bool:
        """Check if a point is outside the extents or inside an inflated obstacle."""
        if not self.in_bounds(point):
            return True
        if margin is None:
            margin = self.blocking_margin
        return self._obstacles.contains_point(point, margin)

    def is_path_clear(
        self,
        start: Vector3,
        end: Vector3,
        step: float = DEFAULT_SAMPLE_STEP,
        margin: Optional[float] = None
    ) -> bool:
        """
        Check if the straight segment start -> end is clear.

        Samples the segment at t = 0, step, 2*step, ... <= length and
        reports blocked if any sample is blocked.
        """
        ends = np.array([end.to_list()], dtype=np.float64)
        return bool(self.segments_clear_batch(start, ends, step, margin)[0])

    def segments_clear_batch(
        self,
        start: Vector3,
        ends: np.ndarray,
        step: float = DEFAULT_SAMPLE_STEP,
        margin: Optional[float] = None
    ) -> np.ndarray:
        """
        Batch check segments sharing one start point.

        Args:
            start: Common start of every segment
            ends: (N, 3) array of segment end positions
            step: Sample interval along each segment
            margin: Obstacle inflation (defaults to blocking_margin)

        Returns:
            (N,) boolean array, True if the segment is clear
        """
        if step <= 0:
            raise ValueError(f"Sample step must be positive, got {step}")
        if margin is None:
            margin = self.blocking_margin

        origin = np.array(start.to_list(), dtype=np.float64)
        directions = ends - origin
        lengths = np.sqrt(np.sum(directions ** 2, axis=1))
        # Segments shorter than 0.01 count as clear
        degenerate = lengths < 0.01
        safe_lengths = np.where(degenerate, 1.0, lengths)
        units = directions / safe_lengths[:, None]

        # (N, K) sample parameters; samples past a segment's length are masked
        num_samples = int(np.floor((lengths.max(initial=0.0) + 1e-9) / step)) + 1
        t = np.arange(num_samples) * step
        valid = (t[None, :] <= lengths[:, None] + 1e-9) & ~degenerate[:, None]
        points = origin + t[None, :, None] * units[:, None, :]

        extents = np.array([self.width, self.depth, self.height])
        blocked = np.any((points < 0) | (points >= extents), axis=2)

        if len(self._box_min):
            # (N, K, M) containment of every sample in every inflated box
            lo = self._box_min - margin
            hi = self._box_max + margin
            inside = np.all(
                (points[:, :, None, :] >= lo) & (points[:, :, None, :] <= hi),
                axis=3
            )
            blocked |= inside.any(axis=2)

        return ~np.any(blocked & valid, axis=1)

    def safe_altitude(self) -> float:
        """Highest obstacle top plus the fixed clearance margin."""
        return self._obstacles.max_top() + self.clearance

    def __repr__(self) -> str:
        return (f"OccupancyVolume({self.name!r}, "
                f"{self.width:g}x{self.depth:g}x{self.height:g}, "
                f"obstacles={len(self._obstacles)})")
