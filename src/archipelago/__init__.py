"""Layered cellular-automaton island map generation."""

from .config import find_config, list_configs, load_config
from .exceptions import (
    ArchipelagoError,
    ConfigurationError,
    InvalidMapFileError,
    MapNotFoundError,
    NoMapError,
    OutOfBoundsError,
    PersistenceError,
    SaveNameExhaustedError,
)
from .terrain import (
    GenerationResult,
    LayerConfig,
    MapConfig,
    MapGenerator,
    ObjectPlacementRule,
    generate_map,
)
from .types import Cell, Position, cell_to_world, world_to_cell

__all__ = [
    "ArchipelagoError",
    "Cell",
    "ConfigurationError",
    "GenerationResult",
    "InvalidMapFileError",
    "LayerConfig",
    "MapConfig",
    "MapGenerator",
    "MapNotFoundError",
    "NoMapError",
    "ObjectPlacementRule",
    "OutOfBoundsError",
    "PersistenceError",
    "Position",
    "SaveNameExhaustedError",
    "cell_to_world",
    "find_config",
    "generate_map",
    "list_configs",
    "load_config",
    "world_to_cell",
]
