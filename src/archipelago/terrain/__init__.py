"""Procedural map generation package.

This package grows a stack of terrain layers with cellular automata, tiles
independent sub-maps into one grid, partitions the land into islands, and
decides where objects spawn.
"""

from .composer import compose_grid
from .config import (
    AutomatonConfig,
    IslandConfig,
    LayerConfig,
    MapConfig,
    ObjectPlacementRule,
)
from .generator import GenerationResult, MapGenerator, generate_map, terrain_stats
from .islands import (
    Island,
    IslandPartition,
    find_components,
    index_islands,
    partition_islands,
)
from .objects import Placement, place_objects
from .persistence import MapStore, load_map, save_map
from .synthesis import synthesize_terrain
from .validation import ValidationResult, validate_config, validate_terrain

__all__ = [
    "AutomatonConfig",
    "GenerationResult",
    "Island",
    "IslandConfig",
    "IslandPartition",
    "LayerConfig",
    "MapConfig",
    "MapGenerator",
    "MapStore",
    "ObjectPlacementRule",
    "Placement",
    "ValidationResult",
    "compose_grid",
    "find_components",
    "generate_map",
    "index_islands",
    "load_map",
    "partition_islands",
    "place_objects",
    "save_map",
    "synthesize_terrain",
    "terrain_stats",
    "validate_config",
    "validate_terrain",
]
