#!/usr/bin/env python3


import argparse
import json
import logging
import os
import time
from typing import List, Optional

from .grid.node import Vector3
from .grid.occupancy import OccupancyVolume
from .data.building_geometry import ObstacleCollection
from .data.map_presets import ObstacleGenerator, load_city_map
from .routing.astar import GridSearchEngine, SearchResult
from .routing.path_smoother import PathSmoother, path_to_list
from .config import DemoConfig, ScenarioConfig, PRESETS


def print_header(text: str) -> None:
    """Print a section header."""
    print()
    print("=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_step(text: str) -> None:
    """Print a step indicator."""
    print(f"\n>> {text}")


def build_volume(config: DemoConfig, obstacles_path: Optional[str] = None) -> OccupancyVolume:
    """
    Create the occupancy volume for a configuration.

    Args:
        config: Demo configuration
        obstacles_path: Optional JSON obstacle file (takes precedence over map_name)

    Returns:
        Populated OccupancyVolume
    """
    v = config.volume
    volume = OccupancyVolume(
        v.width, v.depth, v.height,
        name=config.map_name,
        clearance=v.safe_altitude_margin,
        blocking_margin=v.blocking_margin
    )

    if obstacles_path:
        print_step(f"Loading obstacles: {obstacles_path}")
        for obstacle in ObstacleCollection.load_json(obstacles_path):
            volume.add_obstacle(obstacle)
    elif config.map_name == "city":
        load_city_map(volume)
    elif config.map_name == "random":
        generator = ObstacleGenerator(seed=config.random_seed)
        generator.generate(volume, num_obstacles=config.num_random_obstacles)
    elif config.map_name != "empty":
        raise ValueError(f"Unknown map: {config.map_name}")

    print(f"   {volume!r}, safe altitude {volume.safe_altitude():.1f}")
    return volume


def run_scenario(scenario: ScenarioConfig, engine: GridSearchEngine) -> SearchResult:
    """Run a single routing scenario."""
    start = Vector3(*scenario.start)
    end = Vector3(*scenario.end)
    name = scenario.name or "scenario"

    print(f"\n   [{name}] {scenario.start} -> {scenario.end}")
    started = time.time()
    result = engine.search(start, end)
    elapsed = time.time() - started

    print(f"   [{name}] {result.kind.value}: {len(result.path)} waypoints, "
          f"length {result.distance:.2f} ({elapsed:.2f}s, {result.nodes_expanded} expanded)")
    print(f"   [{name}] " + " -> ".join(str(p) for p in result.path))
    return result


def run_all_scenarios(
    config: DemoConfig,
    volume: OccupancyVolume,
    output_path: Optional[str] = None,
    sample_spacing: float = 1.0
) -> List[SearchResult]:
    """
    Run all scenarios through one engine and optionally save results.

    Saved scenarios carry a "trajectory": the route resampled every
    sample_spacing units, for playback.
    """
    print_step(f"Processing {len(config.scenarios)} scenarios...")
    engine = GridSearchEngine(volume, config=config.search,
                              line_of_sight_step=config.volume.line_of_sight_step)

    results = [run_scenario(scenario, engine) for scenario in config.scenarios]

    print_step("Path cache")
    print(f"   {engine.log_cache_stats().summary()}")

    if output_path:
        smoother = PathSmoother(volume, step=config.volume.line_of_sight_step)
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump({
                'map': volume.name,
                'scenarios': [
                    dict(name=s.name,
                         trajectory=path_to_list(smoother.resample(r.path, sample_spacing)),
                         **r.to_dict())
                    for s, r in zip(config.scenarios, results)
                ],
            }, f, indent=2)
        print(f"   Saved: {output_path} ({os.path.getsize(output_path):,} bytes)")

    return results


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="3D Drone Route Planner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  Run the city scenarios:
    python -m skyroute.main --preset city

Presets: city, empty, random
        """
    )

    parser.add_argument(
        "--preset",
        choices=list(PRESETS.keys()),
        default="city",
        help="Configuration preset (default: city)"
    )

    parser.add_argument(
        "--obstacles",
        default=None,
        help="JSON obstacle file to use instead of the preset map"
    )

    parser.add_argument(
        "--grid-step",
        type=float,
        default=None,
        help="Lattice spacing (default: preset value)"
    )

    parser.add_argument(
        "--reuse-cache",
        action="store_true",
        help="Answer repeated start/end pairs from the path cache"
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Optional JSON file for the computed routes"
    )

    parser.add_argument(
        "--sample-spacing",
        type=float,
        default=1.0,
        help="Trajectory point spacing in the JSON output (default: 1.0)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))

    # Get configuration
    config = PRESETS[args.preset]
    if args.grid_step is not None:
        config.search.grid_step = args.grid_step
    config.search.reuse_cached_routes = args.reuse_cache

    print_header("3D Drone Route Planner")
    print(f"Preset: {args.preset}")

    start_time = time.time()

    print_header("Loading Map")
    volume = build_volume(config, args.obstacles)

    print_header("Running Pathfinding")
    run_all_scenarios(config, volume, args.output, args.sample_spacing)

    elapsed = time.time() - start_time
    print_header("Complete")
    print(f"Total time: {elapsed:.2f}s")


if __name__ == "__main__":
    main()
