"""Vector3 and SearchNode classes for the 3D search lattice."""

from __future__ import annotations
import math
from typing import Tuple

# Per-axis tolerance used by Vector3 equality
POSITION_TOLERANCE = 0.1


class Vector3:
    """3D point/vector with arithmetic operations."""

    __slots__ = ('x', 'y', 'z')

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vector3:
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector3):
            return NotImplemented
        return (abs(self.x - other.x) < POSITION_TOLERANCE and
                abs(self.y - other.y) < POSITION_TOLERANCE and
                abs(self.z - other.z) < POSITION_TOLERANCE)

    # Tolerance equality is not transitive, so no hash is offered
    __hash__ = None

    def __repr__(self) -> str:
        return f"Vector3({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"

    def __str__(self) -> str:
        return f"({int(self.x)},{int(self.y)},{int(self.z)})"

    def dot(self, other: Vector3) -> float:
        """Dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def magnitude(self) -> float:
        """Length of the vector."""
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    def magnitude_squared(self) -> float:
        """Squared length of the vector (faster, no sqrt)."""
        return self.x ** 2 + self.y ** 2 + self.z ** 2

    def normalized(self) -> Vector3:
        """Return unit vector in same direction."""
        mag = self.magnitude()
        if mag < 1e-9:
            return Vector3(0, 0, 0)
        return self / mag

    def distance_to(self, other: Vector3) -> float:
        """Euclidean distance to another point."""
        return math.sqrt((self.x - other.x) ** 2 +
                         (self.y - other.y) ** 2 +
                         (self.z - other.z) ** 2)

    def copy(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to tuple."""
        return (self.x, self.y, self.z)

    def to_list(self) -> list:
        """Convert to list."""
        return [self.x, self.y, self.z]

    @classmethod
    def from_tuple(cls, t: Tuple[float, float, float]) -> Vector3:
        """Create from tuple."""
        return cls(t[0], t[1], t[2])

    @classmethod
    def from_list(cls, lst: list) -> Vector3:
        """Create from list."""
        return cls(lst[0], lst[1], lst[2])


def interpolate(start: Vector3, end: Vector3, t: float) -> Vector3:
    """Linear interpolation between two points (t=0 -> start, t=1 -> end)."""
    return Vector3(
        start.x + (end.x - start.x) * t,
        start.y + (end.y - start.y) * t,
        start.z + (end.z - start.z) * t
    )


class SearchNode:
    """A lattice position visited during search."""

    __slots__ = ('position', 'g', 'h', 'parent')

    def __init__(self, position: Vector3, g: float = 0.0, h: float = 0.0,
                 parent: int = -1):
        self.position = position
        self.g = g  # cost from start
        self.h = h  # heuristic estimate to goal
        self.parent = parent  # index into exploration history, -1 for start

    @property
    def f(self) -> float:
        """Total priority used for expansion order."""
        return self.g + self.h

    def __repr__(self) -> str:
        return (f"SearchNode({self.position!r}, g={self.g:.2f}, "
                f"h={self.h:.2f}, parent={self.parent})")
