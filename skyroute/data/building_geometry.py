"""Box obstacle geometry for occupancy queries."""

from __future__ import annotations
import json
from typing import Any, Dict, Iterator, List, Optional
from ..grid.node import Vector3


class Obstacle:
    """
    Axis-aligned box standing in the volume.

    ``position`` is the minimum corner; length, width and height extend the
    box along x, y and z respectively.
    """

    def __init__(self, position: Vector3, length: float, width: float,
                 height: float, name: str = "Building"):
        if length < 0 or width < 0 or height < 0:
            raise ValueError(
                f"Obstacle extents must be non-negative, got "
                f"({length}, {width}, {height})"
            )
        self.position = position
        self.length = float(length)
        self.width = float(width)
        self.height = float(height)
        self.name = name

    @property
    def min_corner(self) -> Vector3:
        return self.position

    @property
    def max_corner(self) -> Vector3:
        return self.position + Vector3(self.length, self.width, self.height)

    @property
    def center(self) -> Vector3:
        """Center point of the obstacle."""
        return (self.min_corner + self.max_corner) * 0.5

    @property
    def top(self) -> float:
        """Altitude of the obstacle's roof."""
        return self.position.z + self.height

    def contains_point(self, point: Vector3, margin: float = 1.0) -> bool:
        """Check if a point is inside the box inflated by margin."""
        lo = self.position
        return (lo.x - margin <= point.x <= lo.x + self.length + margin and
                lo.y - margin <= point.y <= lo.y + self.width + margin and
                lo.z - margin <= point.z <= lo.z + self.height + margin)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'name': self.name,
            'position': self.position.to_list(),
            'size': [self.length, self.width, self.height],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Obstacle:
        """Create from dictionary."""
        length, width, height = data['size']
        return cls(
            position=Vector3.from_list(data['position']),
            length=length,
            width=width,
            height=height,
            name=data.get('name', 'Building')
        )

    def __repr__(self) -> str:
        return f"Obstacle({self.name}, {self.min_corner!r} to {self.max_corner!r})"


class ObstacleCollection:
    """Ordered collection of obstacles."""

    def __init__(self, obstacles: Optional[List[Obstacle]] = None):
        self.obstacles = list(obstacles) if obstacles else []

    def add(self, obstacle: Obstacle) -> None:
        """Add an obstacle to the collection."""
        self.obstacles.append(obstacle)

    def clear(self) -> None:
        self.obstacles.clear()

    def contains_point(self, point: Vector3, margin: float = 1.0) -> bool:
        """Check if a point is inside any obstacle."""
        for obstacle in self.obstacles:
            if obstacle.contains_point(point, margin):
                return True
        return False

    def max_top(self) -> float:
        """Highest roof in the collection (0 when empty)."""
        return max((o.top for o in self.obstacles), default=0.0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'obstacles': [o.to_dict() for o in self.obstacles]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ObstacleCollection:
        """Create from dictionary."""
        return cls([Obstacle.from_dict(o) for o in data.get('obstacles', [])])

    def save_json(self, filepath: str) -> None:
        """Save obstacles to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_json(cls, filepath: str) -> ObstacleCollection:
        """Load obstacles from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __len__(self) -> int:
        return len(self.obstacles)

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self.obstacles)

    def __repr__(self) -> str:
        return f"ObstacleCollection({len(self.obstacles)} obstacles)"
