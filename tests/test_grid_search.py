"""Tests for the bounded A* search engine."""

from __future__ import annotations

import copy
import math

import pytest

from skyroute.config import SearchConfig
from skyroute.grid.node import Vector3
from skyroute.routing.astar import NEIGHBOR_OFFSETS, GridSearchEngine, RouteKind

from .conftest import assert_collision_free


def test_neighbor_offsets_cover_26_directions():
    assert len(NEIGHBOR_OFFSETS) == 26
    assert (0, 0, 0) not in NEIGHBOR_OFFSETS
    assert len(set(NEIGHBOR_OFFSETS)) == 26


def test_unobstructed_pair_returns_direct_path(empty_volume):
    engine = GridSearchEngine(empty_volume, 1.0)
    start, end = Vector3(2, 2, 1), Vector3(45, 20, 2)

    result = engine.search(start, end)

    assert result.kind is RouteKind.DIRECT
    assert result.path == [start, end]
    assert result.nodes_expanded == 0
    assert engine.calculate_path_distance(result.path) == pytest.approx(start.distance_to(end))
    assert result.distance == pytest.approx(math.sqrt(43 ** 2 + 18 ** 2 + 1))


def test_identical_start_and_end(empty_volume):
    engine = GridSearchEngine(empty_volume)
    point = Vector3(10, 10, 3)

    path = engine.find_path(point, Vector3(10.02, 10, 3))

    assert len(path) == 2
    assert engine.calculate_path_distance(path) == pytest.approx(0.02)


def test_detour_around_tower(wall_volume):
    engine = GridSearchEngine(wall_volume, 1.0)
    start, end = Vector3(0, 0, 1), Vector3(20, 0, 1)

    result = engine.search(start, end)

    assert result.kind is RouteKind.SMOOTHED
    assert len(result.path) > 2
    assert result.path[0] == start and result.path[-1] == end
    assert result.raw_waypoints >= len(result.path)
    assert result.distance > 20.0
    assert_collision_free(wall_volume, result.path)


def test_city_route_is_collision_free(city_volume):
    engine = GridSearchEngine(city_volume)
    start, end = Vector3(1, 7, 1), Vector3(14, 7, 1)

    path = engine.find_path(start, end)

    assert len(path) >= 3
    assert path[0] == start and path[-1] == end
    assert_collision_free(city_volume, path)


def test_search_is_deterministic(wall_volume):
    start, end = Vector3(0, 0, 1), Vector3(20, 0, 1)

    first = GridSearchEngine(wall_volume).find_path(start, end)
    second = GridSearchEngine(wall_volume).find_path(start, end)

    assert [p.to_tuple() for p in first] == [p.to_tuple() for p in second]


def test_fallback_when_target_is_sealed(caged_volume):
    engine = GridSearchEngine(caged_volume, 1.0)
    start, end = Vector3(1, 1, 1), Vector3(7, 7, 2)

    result = engine.search(start, end)

    assert result.kind is RouteKind.FALLBACK
    assert len(result.path) == 4
    assert result.path[0] == start and result.path[-1] == end
    altitude = caged_volume.safe_altitude()
    assert altitude == pytest.approx(8.0)
    assert result.path[1].z == pytest.approx(altitude)
    assert result.path[2].z == pytest.approx(altitude)
    assert result.path[1].to_tuple()[:2] == (1.0, 1.0)
    assert result.path[2].to_tuple()[:2] == (7.0, 7.0)
    assert result.nodes_expanded < engine.config.max_expansions
    assert engine.cache_size == 1


def test_expansion_ceiling_triggers_fallback(wall_volume):
    engine = GridSearchEngine(wall_volume, config=SearchConfig(max_expansions=5))

    result = engine.search(Vector3(0, 0, 1), Vector3(20, 0, 1))

    assert result.kind is RouteKind.FALLBACK
    assert result.nodes_expanded == 5
    assert len(result.path) == 4
    assert result.path[1].z == pytest.approx(wall_volume.safe_altitude())


def test_full_expansion_ceiling_on_city_map(city_volume):
    # Every lattice point near the target lies inside Tower A
    engine = GridSearchEngine(city_volume)

    result = engine.search(Vector3(1, 1, 1), Vector3(7, 7, 5))

    assert result.kind is RouteKind.FALLBACK
    assert result.nodes_expanded == engine.config.max_expansions == 10000
    assert result.path[-1] == Vector3(7, 7, 5)


def test_start_inside_tower_margin_still_routes(city_volume):
    start = Vector3(4.7, 7, 1)
    end = Vector3(10.5, 7, 1)
    assert city_volume.is_blocked(start)
    engine = GridSearchEngine(city_volume)

    result = engine.search(start, end)

    assert result.kind is RouteKind.SMOOTHED
    assert result.path[0] == start
    assert result.path[-1] == end
    assert_collision_free(city_volume, result.path[1:])
    assert not city_volume.is_blocked(result.path[1])


def test_end_inside_tower_margin_still_routes(city_volume):
    start = Vector3(1, 7, 1)
    end = Vector3(4.7, 7, 1)
    assert city_volume.is_blocked(end)
    engine = GridSearchEngine(city_volume)

    result = engine.search(start, end)

    assert result.kind is RouteKind.SMOOTHED
    assert result.nodes_expanded < 100
    assert result.path[0] == start
    assert result.path[-1] == end
    assert_collision_free(city_volume, result.path[:-1])


def test_every_answer_is_appended_to_cache(wall_volume):
    engine = GridSearchEngine(wall_volume)
    start, end = Vector3(0, 0, 1), Vector3(20, 0, 1)

    first = engine.search(start, end)
    second = engine.search(start, end)
    engine.find_path(Vector3(1, 15, 1), Vector3(30, 15, 1))

    assert second.kind is RouteKind.SMOOTHED
    assert (first.cache_index, second.cache_index) == (0, 1)
    assert engine.cache_size == 3
    assert engine.cache_capacity >= 3
    assert engine.cached_waypoint_total == 2 * len(first.path) + 2
    assert engine.cache[0].distance == pytest.approx(first.distance)
    assert engine.cache[2].waypoint_count == 2

    stats = engine.log_cache_stats()
    assert stats.entries == 3


def test_cache_grows_past_initial_capacity(empty_volume):
    engine = GridSearchEngine(empty_volume, config=SearchConfig(initial_cache_capacity=10))

    paths = [engine.find_path(Vector3(1, 1, 1), Vector3(i + 2, 10, 1)) for i in range(11)]

    assert engine.cache_size == 11
    assert engine.cache_capacity == 20
    for i, path in enumerate(paths):
        assert engine.cache[i].retrieve_path() == path


def test_reuse_cached_routes_option(wall_volume):
    engine = GridSearchEngine(wall_volume, config=SearchConfig(reuse_cached_routes=True))
    start, end = Vector3(0, 0, 1), Vector3(20, 0, 1)

    first = engine.search(start, end)
    second = engine.search(Vector3(0.4, 0.2, 1), end)

    assert first.kind is RouteKind.SMOOTHED
    assert second.kind is RouteKind.CACHED
    assert second.path == first.path
    assert second.path[0] is not first.path[0]
    assert engine.cache_size == 2


def test_deepcopy_shares_volume_but_not_cache(wall_volume):
    engine = GridSearchEngine(wall_volume)
    engine.find_path(Vector3(0, 12, 1), Vector3(20, 12, 1))

    clone = copy.deepcopy(engine)
    clone.find_path(Vector3(0, 14, 1), Vector3(20, 14, 1))

    assert clone.volume is engine.volume
    assert clone.cache is not engine.cache
    assert (engine.cache_size, clone.cache_size) == (1, 2)
    assert clone.cache[0].waypoints[0] is not engine.cache[0].waypoints[0]


def test_grid_step_must_be_positive(empty_volume):
    with pytest.raises(ValueError):
        GridSearchEngine(empty_volume, grid_step=0)
    with pytest.raises(ValueError):
        SearchConfig(grid_step=-1.0)


def test_coarser_grid_step_still_reaches_goal(wall_volume):
    engine = GridSearchEngine(wall_volume, grid_step=2.0)
    start, end = Vector3(0, 0, 1), Vector3(21, 1, 1)

    result = engine.search(start, end)

    assert result.kind is RouteKind.SMOOTHED
    assert result.path[-1] == end
    assert_collision_free(wall_volume, result.path)


def test_path_distance_of_short_paths(empty_volume):
    engine = GridSearchEngine(empty_volume)
    assert engine.calculate_path_distance([]) == 0.0
    assert engine.calculate_path_distance([Vector3(1, 1, 1)]) == 0.0
