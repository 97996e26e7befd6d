"""Predefined and generated obstacle layouts for development and testing."""

from __future__ import annotations
from typing import List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from ..grid.node import Vector3
from .building_geometry import Obstacle

if TYPE_CHECKING:
    from ..grid.occupancy import OccupancyVolume

# (min corner, length, width, height, name)
CITY_OBSTACLES: List[Tuple[Tuple[float, float, float], float, float, float, str]] = [
    # Buildings
    ((5, 5, 0), 4, 4, 12, "Tower A"),
    ((15, 8, 0), 6, 5, 8, "Office Block"),
    ((25, 3, 0), 3, 3, 15, "Radio Tower"),
    ((35, 10, 0), 5, 4, 6, "Warehouse"),
    ((10, 18, 0), 4, 6, 10, "Apartment"),
    ((28, 18, 0), 7, 5, 7, "Mall"),
    ((42, 5, 0), 4, 4, 9, "Hospital"),
    ((20, 12, 0), 3, 3, 5, "Small Building"),
    # Trees (lower obstacles)
    ((12, 3, 0), 1, 1, 4, "Tree"),
    ((38, 20, 0), 1, 1, 3, "Tree"),
    ((45, 15, 0), 1, 1, 4, "Tree"),
]


def load_city_map(volume: OccupancyVolume) -> OccupancyVolume:
    """Replace the volume's obstacles with the predefined city layout."""
    volume.clear_obstacles()
    for position, length, width, height, name in CITY_OBSTACLES:
        volume.add_obstacle(Obstacle(Vector3(*position), length, width, height, name))
    return volume


class ObstacleGenerator:
    """Generate random ground-standing box obstacles."""

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize generator with optional random seed.

        Args:
            seed: Random seed for reproducibility
        """
        self.rng = np.random.default_rng(seed)

    def generate(
        self,
        volume: OccupancyVolume,
        num_obstacles: int = 8,
        min_size: Tuple[float, float, float] = (2, 2, 3),
        max_size: Tuple[float, float, float] = (6, 6, 15),
        margin: float = 3.0
    ) -> List[Obstacle]:
        """
        Add random obstacles to the volume.

        Obstacles stand on z=0 and do not overlap each other in the
        horizontal plane (with margin).

        Args:
            volume: Volume to populate
            num_obstacles: Number of obstacles to attempt
            min_size: Minimum (length, width, height)
            max_size: Maximum (length, width, height)
            margin: Minimum gap from the volume edges and between obstacles

        Returns:
            The obstacles that were placed
        """
        placed: List[Obstacle] = []
        attempts = 0
        max_attempts = num_obstacles * 20
        max_height = min(max_size[2], volume.height - margin)

        while len(placed) < num_obstacles and attempts < max_attempts:
            attempts += 1

            length = self.rng.uniform(min_size[0], max_size[0])
            width = self.rng.uniform(min_size[1], max_size[1])
            height = self.rng.uniform(min_size[2], max(min_size[2], max_height))

            x_hi = volume.width - margin - length
            y_hi = volume.depth - margin - width
            if x_hi <= margin or y_hi <= margin:
                continue
            x = self.rng.uniform(margin, x_hi)
            y = self.rng.uniform(margin, y_hi)

            candidate = Obstacle(Vector3(x, y, 0), length, width, height,
                                 f"obstacle_{len(placed)}")
            if any(self._footprints_overlap(candidate, other, margin) for other in placed):
                continue
            placed.append(candidate)

        for obstacle in placed:
            volume.add_obstacle(obstacle)
        return placed

    def _footprints_overlap(self, a: Obstacle, b: Obstacle, margin: float = 0) -> bool:
        """Check if two obstacles overlap in the horizontal plane (with optional margin)."""
        a_max, b_max = a.max_corner, b.max_corner
        return not (
            a_max.x + margin < b.position.x or
            b_max.x + margin < a.position.x or
            a_max.y + margin < b.position.y or
            b_max.y + margin < a.position.y
        )
