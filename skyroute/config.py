"""
Configuration for the 3D route planner.

Centralized configuration that can be modified for different scenarios.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Optional


@dataclass
class VolumeConfig:
    """Occupancy volume configuration.

    Coordinate system (Z-up):
    - X: width
    - Y: depth
    - Z: height (altitude)
    """
    width: float = 50
    depth: float = 30
    height: float = 20
    blocking_margin: float = 0.5  # inflation applied to obstacles for point tests
    line_of_sight_step: float = 0.5  # sample interval along segments
    safe_altitude_margin: float = 2.0  # clearance above the highest roof


@dataclass
class SearchConfig:
    """Grid search configuration."""
    grid_step: float = 1.0  # distance between lattice positions
    max_expansions: int = 10000  # hard ceiling before the fly-over fallback
    goal_tolerance_factor: float = 1.5  # goal accepted within factor * grid_step
    initial_cache_capacity: int = 10
    reuse_cached_routes: bool = False  # False keeps the cache a pure history

    def __post_init__(self):
        if self.grid_step <= 0:
            raise ValueError(f"grid_step must be positive, got {self.grid_step}")
        if self.max_expansions < 1:
            raise ValueError(f"max_expansions must be at least 1, got {self.max_expansions}")
        if self.initial_cache_capacity < 1:
            raise ValueError(
                f"initial_cache_capacity must be at least 1, got {self.initial_cache_capacity}"
            )


@dataclass
class ScenarioConfig:
    """A single routing scenario."""
    start: Tuple[float, float, float]
    end: Tuple[float, float, float]
    name: Optional[str] = None


@dataclass
class DemoConfig:
    """Complete demo configuration."""
    volume: VolumeConfig = field(default_factory=VolumeConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    scenarios: List[ScenarioConfig] = field(default_factory=list)
    map_name: str = "city"  # city, empty, random
    random_seed: int = 42
    num_random_obstacles: int = 8

    def __post_init__(self):
        # Default scenarios if none provided
        if not self.scenarios:
            v = self.volume
            self.scenarios = [
                ScenarioConfig(
                    start=(2, 2, 1),
                    end=(v.width - 5, v.depth - 10, 2),
                    name="diagonal"
                ),
                ScenarioConfig(
                    start=(1, 7, 1),
                    end=(v.width - 2, 7, 1),
                    name="low_crossing"
                ),
                # Same pair again: appended to the cache a second time
                ScenarioConfig(
                    start=(2, 2, 1),
                    end=(v.width - 5, v.depth - 10, 2),
                    name="diagonal_repeat"
                ),
            ]


# Preset configurations
PRESETS = {
    "city": DemoConfig(),
    "empty": DemoConfig(map_name="empty"),
    "random": DemoConfig(
        volume=VolumeConfig(width=60, depth=40, height=25),
        map_name="random",
        num_random_obstacles=12,
    ),
}
