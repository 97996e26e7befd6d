from .building_geometry import Obstacle, ObstacleCollection
from .map_presets import CITY_OBSTACLES, ObstacleGenerator, load_city_map
