from .astar import GridSearchEngine, SearchResult, RouteKind, NEIGHBOR_OFFSETS
from .path_cache import PathCache, RouteCacheEntry, CacheStats, position_key, route_key
from .path_smoother import PathSmoother, compute_path_length, path_to_list
