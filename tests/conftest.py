"""Shared fixtures for the route planner tests."""

from __future__ import annotations

import pytest

from skyroute.data.building_geometry import Obstacle
from skyroute.data.map_presets import load_city_map
from skyroute.grid.node import Vector3
from skyroute.grid.occupancy import OccupancyVolume


@pytest.fixture
def empty_volume() -> OccupancyVolume:
    return OccupancyVolume(50, 25, 20, name="empty")


@pytest.fixture
def wall_volume() -> OccupancyVolume:
    """A single tower standing across the y=0 line between x=5 and x=9."""

    return OccupancyVolume(
        50, 25, 20,
        obstacles=[Obstacle(Vector3(5, 0, 0), 4, 9, 12, "Tower A")],
        name="wall",
    )


@pytest.fixture
def city_volume() -> OccupancyVolume:
    return load_city_map(OccupancyVolume(50, 30, 20, name="city"))


@pytest.fixture
def caged_volume() -> OccupancyVolume:
    """Small volume whose point (7, 7, 2) is sealed inside a walled box."""

    walls = [
        Obstacle(Vector3(4, 4, 0), 1, 6, 6, "West wall"),
        Obstacle(Vector3(9, 4, 0), 1, 6, 6, "East wall"),
        Obstacle(Vector3(4, 4, 0), 6, 1, 6, "South wall"),
        Obstacle(Vector3(4, 9, 0), 6, 1, 6, "North wall"),
        Obstacle(Vector3(4, 4, 5), 6, 6, 1, "Roof"),
    ]
    return OccupancyVolume(15, 15, 15, obstacles=walls, name="cage")


def assert_collision_free(volume: OccupancyVolume, path) -> None:
    for a, b in zip(path, path[1:]):
        assert volume.is_path_clear(a, b), f"segment {a!r} -> {b!r} is obstructed"
