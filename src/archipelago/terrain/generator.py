"""Main map generation orchestration."""

from pathlib import Path

import numpy as np
import structlog
from numpy.typing import NDArray

from ..exceptions import (
    InvalidMapFileError,
    NoMapError,
    OutOfBoundsError,
    PersistenceError,
)
from ..types import Position, world_to_cell
from .composer import compose_grid
from .config import MapConfig
from .islands import Island, IslandPartition, index_islands, partition_islands
from .objects import Placement, place_objects
from .persistence import MapStore
from .validation import validate_config

logger = structlog.get_logger()


class GenerationResult:
    """Result of one generation pass.

    The grid and island id grid are read-only; consumers that need to edit
    them should take a copy.
    """

    def __init__(
        self,
        grid: NDArray[np.int32],
        partition: IslandPartition,
        placements: list[Placement],
        config: MapConfig,
    ):
        grid.setflags(write=False)
        partition.island_ids.setflags(write=False)
        self.grid = grid
        self.partition = partition
        self.placements = placements
        self.config = config

    @property
    def width(self) -> int:
        return self.grid.shape[0]

    @property
    def height(self) -> int:
        return self.grid.shape[1]

    @property
    def islands(self) -> list[Island]:
        return self.partition.islands

    @property
    def island_ids(self) -> NDArray[np.int32]:
        return self.partition.island_ids


def _empty_partition(shape: tuple[int, int]) -> IslandPartition:
    return IslandPartition(island_ids=np.zeros(shape, dtype=np.int32))


def generate_map(
    config: MapConfig,
    rng: np.random.Generator | None = None,
) -> GenerationResult:
    """Generate a complete map from configuration.

    Args:
        config: Map generation configuration.
        rng: Random number generator. Defaults to one seeded from
            ``config.seed``, so a seeded config always yields the same map.

    Returns:
        GenerationResult with the grid, islands and object placements.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    validate_config(config)
    if rng is None:
        rng = np.random.default_rng(config.seed)

    logger.info(
        "generating_map",
        width=config.width,
        height=config.height,
        grid_size=config.grid_size,
        seed=config.seed,
    )

    grid = compose_grid(
        config.grid_size,
        config.sub_width,
        config.sub_height,
        config.layers,
        rng,
        config.automaton,
    )

    if config.islands.enabled:
        partition = partition_islands(grid, config.islands)
    else:
        partition = _empty_partition(grid.shape)

    placements = place_objects(grid, config.objects, rng)

    _log_terrain_stats(grid, config)
    return GenerationResult(grid, partition, placements, config)


def terrain_stats(grid: NDArray[np.int32], layer_count: int) -> list[int]:
    """Count cells per layer value."""
    return np.bincount(grid.ravel(), minlength=layer_count).tolist()


def _log_terrain_stats(grid: NDArray[np.int32], config: MapConfig) -> None:
    """Log terrain generation statistics."""
    total = grid.size
    counts = terrain_stats(grid, config.layer_count)

    for index, count in enumerate(counts):
        name = config.layers[index].name if index < config.layer_count else ""
        logger.info(
            "layer_stats",
            layer=index,
            name=name or None,
            cells=count,
            percent=round(count / total * 100, 1),
        )


class MapGenerator:
    """Stateful entry point: generate, save, load and query maps.

    One generator serves one caller; generation requests must not overlap.
    A seeded generator replays the same sequence of maps.
    """

    def __init__(self, config: MapConfig, store: MapStore | None = None):
        self.config = config
        self.store = store or MapStore()
        self._rng = np.random.default_rng(config.seed)
        self._result: GenerationResult | None = None
        self._generated = 0
        # Position of the current map in the seeded sequence, None if loaded
        self._sequence: int | None = None

    @property
    def result(self) -> GenerationResult:
        """Current map.

        Raises:
            NoMapError: If nothing has been generated or loaded yet.
        """
        if self._result is None:
            raise NoMapError("No map has been generated or loaded")
        return self._result

    @property
    def has_map(self) -> bool:
        return self._result is not None

    def generate(self) -> GenerationResult:
        """Generate a new map, replacing the current one."""
        self._result = generate_map(self.config, self._rng)
        self._sequence = self._generated
        self._generated += 1
        return self._result

    def save(self) -> Path:
        """Save the current map through the store.

        The metadata records the session seed together with the map's
        position in the seeded sequence. Loaded maps are saved without either.

        Returns:
            Path of the saved map.

        Raises:
            NoMapError: If there is no current map.
            PersistenceError: If the store cannot save it.
        """
        result = self.result
        try:
            if self._sequence is None:
                return self.store.save(result.grid)
            return self.store.save(
                result.grid, seed=self.config.seed, sequence=self._sequence
            )
        except PersistenceError as e:
            logger.warning("map_not_saved", error=str(e))
            raise

    def load(self, handle: Path | str) -> GenerationResult:
        """Load a saved map and place objects on it.

        The loaded grid is not reclassified; islands are only numbered.

        Raises:
            PersistenceError: If the map cannot be loaded.
        """
        try:
            grid = self.store.load(handle)
        except PersistenceError as e:
            logger.warning("map_not_loaded", handle=str(handle), error=str(e))
            raise

        layer_count = self.config.layer_count
        if grid.size and grid.max() >= layer_count:
            error = InvalidMapFileError(
                f"Map {handle} has cells above the {layer_count}-layer stack"
            )
            logger.warning("map_not_loaded", handle=str(handle), error=str(error))
            raise error

        if self.config.islands.enabled:
            partition = index_islands(grid, self.config.islands)
        else:
            partition = _empty_partition(grid.shape)

        placements = place_objects(grid, self.config.objects, self._rng)
        self._result = GenerationResult(grid, partition, placements, self.config)
        self._sequence = None
        return self._result

    def island_at(self, position: Position) -> int:
        """Id of the island under a world position, 0 if none.

        Raises:
            NoMapError: If there is no current map.
            OutOfBoundsError: If the position is outside the map.
        """
        result = self.result
        x, y = world_to_cell(position, result.width, result.height)
        if not (0 <= x < result.width and 0 <= y < result.height):
            raise OutOfBoundsError(f"Position {position} is outside the map")

        island_id = result.partition.island_of((x, y))
        logger.debug("island_lookup", position=str(position), island=island_id)
        return island_id

    def clear(self) -> None:
        """Drop the current map and its placements."""
        self._result = None
        self._sequence = None
