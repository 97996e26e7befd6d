"""
Bounded A* search over the occupancy volume's lattice.

Every query returns a usable path: a direct segment when start and end see
each other, a smoothed lattice route when search reaches the goal, or a
fly-over detour at safe altitude when the expansion ceiling is hit or the
frontier runs dry. Each answer is appended to the engine's PathCache.
"""

from __future__ import annotations
import copy
import heapq
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from ..config import SearchConfig
from ..grid.node import Vector3, SearchNode
from .path_cache import PathCache, CacheStats, route_key
from .path_smoother import PathSmoother, compute_path_length, path_to_list

if TYPE_CHECKING:
    from ..grid.occupancy import OccupancyVolume

logger = logging.getLogger(__name__)

# 26-connectivity offsets (all adjacent cells including diagonals)
NEIGHBOR_OFFSETS = [
    (dx, dy, dz)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    for dz in (-1, 0, 1)
    if not (dx == 0 and dy == 0 and dz == 0)
]

LatticeKey = Tuple[int, int, int]


class RouteKind(Enum):
    DIRECT = "direct"
    SMOOTHED = "smoothed"
    FALLBACK = "fallback"
    CACHED = "cached"


@dataclass
class SearchResult:
    """Result of a single path query."""
    path: List[Vector3]
    distance: float
    kind: RouteKind
    nodes_expanded: int = 0
    raw_waypoints: int = 0
    cache_index: int = -1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'path': path_to_list(self.path),
            'distance': self.distance,
            'kind': self.kind.value,
            'nodes_expanded': self.nodes_expanded,
            'raw_waypoints': self.raw_waypoints,
            'cache_index': self.cache_index,
        }


class GridSearchEngine:
    """
    A* pathfinding on a uniform lattice anchored at the query's start.

    The volume is shared and only read. The PathCache belongs to the engine
    and is deep-copied along with it. Instances are not safe for concurrent
    use; callers must serialize queries.
    """

    def __init__(
        self,
        volume: OccupancyVolume,
        grid_step: Optional[float] = None,
        config: Optional[SearchConfig] = None,
        line_of_sight_step: float = 0.5
    ):
        """
        Initialize engine.

        Args:
            volume: Occupancy volume answering blocking queries
            grid_step: Lattice spacing (overrides config.grid_step if given)
            config: Search configuration
            line_of_sight_step: Sample interval for segment clearance checks
        """
        self.config = config or SearchConfig()
        self.grid_step = self.config.grid_step if grid_step is None else float(grid_step)
        if self.grid_step <= 0:
            raise ValueError(f"grid_step must be positive, got {self.grid_step}")

        self.volume = volume
        self.line_of_sight_step = line_of_sight_step
        self.smoother = PathSmoother(volume, step=line_of_sight_step)
        self.cache = PathCache(self.config.initial_cache_capacity)

        logger.info(
            f"GridSearchEngine ready on {volume!r} "
            f"(step={self.grid_step}, max_expansions={self.config.max_expansions})"
        )

    def find_path(self, start: Vector3, end: Vector3) -> List[Vector3]:
        """Return a non-empty start-to-end route (at least two points)."""
        return self.search(start, end).path

    def search(self, start: Vector3, end: Vector3) -> SearchResult:
        """
        Plan a route from start to end and record it in the cache.

        Args:
            start: Starting position
            end: Destination

        Returns:
            SearchResult describing the path and how it was obtained
        """
        start_key, end_key = route_key(start, end)

        if self.config.reuse_cached_routes:
            entry = self.cache.find_latest(start_key, end_key)
            if entry is not None:
                path = entry.retrieve_path()
                index = self.cache.store(start_key, end_key, path, entry.distance)
                logger.debug(f"Reused cached route {start_key}->{end_key}")
                return SearchResult(path, entry.distance, RouteKind.CACHED,
                                    raw_waypoints=len(path), cache_index=index)

        nodes_expanded = 0
        raw_waypoints = 2
        if self.volume.is_path_clear(start, end, self.line_of_sight_step):
            path = [start.copy(), end.copy()]
            kind = RouteKind.DIRECT
        else:
            raw_path, nodes_expanded = self._astar(start, end)
            if raw_path is None:
                path = self._fallback_path(start, end)
                kind = RouteKind.FALLBACK
                raw_waypoints = len(path)
                logger.warning(
                    f"No lattice route {start} -> {end} after {nodes_expanded} "
                    f"expansions, flying over at z={path[1].z:.1f}"
                )
            else:
                raw_waypoints = len(raw_path)
                path = self.smoother.smooth(raw_path)
                kind = RouteKind.SMOOTHED

        distance = self.calculate_path_distance(path)
        index = self.cache.store(start_key, end_key, path, distance)
        logger.debug(
            f"{kind.value} route {start} -> {end}: {len(path)} waypoints "
            f"(raw {raw_waypoints}), length {distance:.2f}, expanded {nodes_expanded}"
        )
        return SearchResult(path, distance, kind, nodes_expanded, raw_waypoints, index)

    def _lattice_key(self, position: Vector3, origin: Vector3) -> LatticeKey:
        """Integer lattice offsets of position relative to origin."""
        step = self.grid_step
        return (round((position.x - origin.x) / step),
                round((position.y - origin.y) / step),
                round((position.z - origin.z) / step))

    def _astar(self, start: Vector3, end: Vector3) -> Tuple[Optional[List[Vector3]], int]:
        """
        Core bounded A* implementation.

        Returns:
            (raw path ending with the literal end point, expansions), or
            (None, expansions) when the goal was not reached
        """
        step = self.grid_step
        goal_radius = step * self.config.goal_tolerance_factor

        # Exploration history; parents are indices into this list
        history: List[SearchNode] = [SearchNode(start, 0.0, start.distance_to(end), -1)]

        # Priority queue: (f, discovery order, history index)
        # Discovery order breaks ties first-discovered-first-expanded
        sequence = itertools.count()
        open_heap: List[Tuple[float, int, int]] = [(history[0].f, next(sequence), 0)]
        best_open: Dict[LatticeKey, float] = {(0, 0, 0): 0.0}
        closed: Dict[LatticeKey, float] = {}

        expansions = 0
        # An end inside an obstacle margin can never be seen; accept on proximity
        end_blocked = self.volume.is_blocked(end)
        while open_heap and expansions < self.config.max_expansions:
            _, _, index = heapq.heappop(open_heap)
            current = history[index]
            key = self._lattice_key(current.position, start)

            # Stale duplicate of an already expanded position
            if key in closed:
                continue
            closed[key] = current.g
            expansions += 1

            if (current.position.distance_to(end) < goal_radius and
                    (end_blocked or
                     self.volume.is_path_clear(current.position, end, self.line_of_sight_step))):
                return self._reconstruct_path(history, index, end), expansions

            candidates: List[Tuple[LatticeKey, Vector3]] = []
            for dx, dy, dz in NEIGHBOR_OFFSETS:
                n_key = (key[0] + dx, key[1] + dy, key[2] + dz)
                if n_key in closed:
                    continue

                neighbor = Vector3(start.x + n_key[0] * step,
                                   start.y + n_key[1] * step,
                                   start.z + n_key[2] * step)
                if self.volume.is_blocked(neighbor):
                    continue
                candidates.append((n_key, neighbor))

            if not candidates:
                continue

            # Edges that clip an obstacle corner are dropped, unless the node
            # itself sits in a margin (a start next to a wall must get out)
            if self.volume.is_blocked(current.position):
                clear = [True] * len(candidates)
            else:
                ends = np.array([n.to_list() for _, n in candidates], dtype=np.float64)
                clear = self.volume.segments_clear_batch(
                    current.position, ends, self.line_of_sight_step
                )

            for (n_key, neighbor), edge_clear in zip(candidates, clear):
                if not edge_clear:
                    continue

                new_g = current.g + current.position.distance_to(neighbor)
                if new_g >= best_open.get(n_key, float('inf')):
                    continue
                best_open[n_key] = new_g

                node = SearchNode(neighbor, new_g, neighbor.distance_to(end), index)
                history.append(node)
                heapq.heappush(open_heap, (node.f, next(sequence), len(history) - 1))

        return None, expansions

    def _reconstruct_path(
        self,
        history: List[SearchNode],
        goal_index: int,
        end: Vector3
    ) -> List[Vector3]:
        """Walk parent links back to the start, then append the literal end."""
        path = []
        index = goal_index
        while index != -1:
            node = history[index]
            path.append(node.position)
            index = node.parent
        path.reverse()
        path.append(end.copy())
        return path

    def _fallback_path(self, start: Vector3, end: Vector3) -> List[Vector3]:
        """Climb to safe altitude, cross above everything, descend onto end."""
        altitude = self.volume.safe_altitude()
        return [
            start.copy(),
            Vector3(start.x, start.y, altitude),
            Vector3(end.x, end.y, altitude),
            end.copy(),
        ]

    def calculate_path_distance(self, path: Sequence[Vector3]) -> float:
        """Total length of a path (0 for fewer than 2 points)."""
        return compute_path_length(path)

    @property
    def cache_size(self) -> int:
        return len(self.cache)

    @property
    def cache_capacity(self) -> int:
        return self.cache.capacity

    @property
    def cached_waypoint_total(self) -> int:
        return self.cache.total_waypoints

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def log_cache_stats(self) -> CacheStats:
        stats = self.cache.stats()
        logger.info(f"Path cache: {stats.summary()}")
        return stats

    def __deepcopy__(self, memo) -> GridSearchEngine:
        # Volume is shared by reference; only the cache is duplicated
        clone = GridSearchEngine.__new__(GridSearchEngine)
        memo[id(self)] = clone
        clone.config = copy.deepcopy(self.config, memo)
        clone.grid_step = self.grid_step
        clone.volume = self.volume
        clone.line_of_sight_step = self.line_of_sight_step
        clone.smoother = PathSmoother(self.volume, step=self.line_of_sight_step)
        clone.cache = copy.deepcopy(self.cache, memo)
        return clone

    def __repr__(self) -> str:
        return f"GridSearchEngine(step={self.grid_step}, cache={self.cache!r})"
