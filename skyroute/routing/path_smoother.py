"""
Path smoothing by greedy line-of-sight shortcutting.

Collapses a raw lattice path into a few waypoints, each pair joined by a
straight segment the occupancy volume reports as clear.
"""

from __future__ import annotations
import math
from typing import List, Sequence, TYPE_CHECKING

import numpy as np

from ..grid.node import Vector3

if TYPE_CHECKING:
    from ..grid.occupancy import OccupancyVolume


class PathSmoother:
    """
    Shortens raw waypoint sequences against an occupancy volume.

    The output is always a subsequence of the input with both endpoints
    preserved exactly.
    """

    def __init__(self, volume: OccupancyVolume, step: float = 0.5):
        """
        Initialize path smoother.

        Args:
            volume: Volume providing the line-of-sight test (not modified)
            step: Sample interval for line-of-sight checks
        """
        if step <= 0:
            raise ValueError(f"Line-of-sight step must be positive, got {step}")
        self.volume = volume
        self.step = step

    def smooth(self, path: Sequence[Vector3]) -> List[Vector3]:
        """
        Smooth a path by jumping to the furthest visible waypoint.

        Args:
            path: Raw waypoints (at least one)

        Returns:
            Shortened path as list of Vector3
        """
        if len(path) <= 2:
            return list(path)

        last = len(path) - 1
        smoothed = [path[0]]
        i = 0
        while i < last:
            j = last
            # j == i + 1 is accepted without a check: adjacent raw points
            while j > i + 1:
                if self.volume.is_path_clear(path[i], path[j], self.step):
                    break
                j -= 1
            smoothed.append(path[j])
            i = j

        return smoothed

    def resample(self, path: Sequence[Vector3], spacing: float) -> List[Vector3]:
        """
        Resample path to approximately uniform point spacing.

        Points are interpolated linearly along each segment, so the result
        stays on the input polyline.

        Args:
            path: List of waypoints
            spacing: Desired distance between consecutive points

        Returns:
            Resampled path including both endpoints
        """
        if spacing <= 0:
            raise ValueError(f"Spacing must be positive, got {spacing}")
        if len(path) < 2:
            return list(path)

        points = np.array([p.to_list() for p in path])
        seg_lengths = np.linalg.norm(np.diff(points, axis=0), axis=1)
        cumulative = np.concatenate(([0.0], np.cumsum(seg_lengths)))
        total = cumulative[-1]
        if total < 1e-9:
            return [path[0], path[-1]]

        num_points = max(2, int(math.ceil(total / spacing)) + 1)
        samples = np.linspace(0.0, total, num_points)

        xs, ys, zs = (np.interp(samples, cumulative, points[:, axis]) for axis in range(3))
        resampled = [Vector3(x, y, z) for x, y, z in zip(xs, ys, zs)]

        resampled[0] = path[0].copy()
        resampled[-1] = path[-1].copy()
        return resampled


def compute_path_length(path: Sequence[Vector3]) -> float:
    """Sum of consecutive segment lengths (0 for fewer than 2 points)."""
    total = 0.0
    for i in range(1, len(path)):
        total += path[i - 1].distance_to(path[i])
    return total


def path_to_list(path: Sequence[Vector3]) -> List[List[float]]:
    """Convert path to list of [x, y, z] for JSON serialization."""
    return [p.to_list() for p in path]
