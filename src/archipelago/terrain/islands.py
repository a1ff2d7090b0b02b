"""Island partitioning: flood-fill components, small-region cleanup, island ids."""

from collections import deque
from dataclasses import dataclass, field
from functools import cached_property

import numpy as np
import structlog
from numpy.typing import NDArray

from ..types import ORTHOGONAL_OFFSETS, Cell
from .config import IslandConfig

logger = structlog.get_logger()


@dataclass
class Island:
    """A retained land component and its 1-based id."""

    island_id: int
    layer: int
    cells: list[Cell]

    @property
    def size(self) -> int:
        return len(self.cells)

    @cached_property
    def cell_set(self) -> frozenset[Cell]:
        return frozenset(self.cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self.cell_set


@dataclass
class IslandPartition:
    """Retained islands plus the parallel id grid (0 = no island)."""

    islands: list[Island] = field(default_factory=list)
    island_ids: NDArray[np.int32] = field(
        default_factory=lambda: np.zeros((0, 0), dtype=np.int32)
    )
    filled_cells: int = 0
    submerged_cells: int = 0

    def island_of(self, cell: Cell) -> int:
        """Id of the island containing cell, 0 if none."""
        return int(self.island_ids[cell])


def _flood_fill(
    grid: NDArray[np.int32],
    start: Cell,
    visited: NDArray[np.bool_],
) -> list[Cell]:
    """Collect every cell reachable from start through same-valued orthogonal steps."""
    width, height = grid.shape
    value = grid[start]
    component: list[Cell] = []

    queue: deque[Cell] = deque([start])
    visited[start] = True

    while queue:
        x, y = queue.popleft()
        component.append((x, y))
        for dx, dy in ORTHOGONAL_OFFSETS:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            if not visited[nx, ny] and grid[nx, ny] == value:
                visited[nx, ny] = True
                queue.append((nx, ny))

    return component


def find_components(grid: NDArray[np.int32], value: int) -> list[list[Cell]]:
    """Find all orthogonally connected components of cells equal to value.

    Diagonal neighbours do not connect. Components are discovered in
    row-major order of their first cell, so the result is deterministic.

    Args:
        grid: Layer grid.
        value: Target layer value.

    Returns:
        List of components, each a list of (x, y) cells in visiting order.
    """
    width, height = grid.shape
    visited = np.zeros(grid.shape, dtype=bool)
    components: list[list[Cell]] = []

    for x in range(width):
        for y in range(height):
            if not visited[x, y] and grid[x, y] == value:
                components.append(_flood_fill(grid, (x, y), visited))

    return components


def fill_small_components(
    grid: NDArray[np.int32],
    value: int,
    minimum_size: int,
    replacement: int,
) -> tuple[list[list[Cell]], int]:
    """Rewrite every component of value smaller than minimum_size, in place.

    Args:
        grid: Layer grid, mutated.
        value: Target layer value.
        minimum_size: Components below this size are rewritten.
        replacement: Value written into rewritten cells.

    Returns:
        Tuple of (components that were kept, number of cells rewritten).
    """
    kept: list[list[Cell]] = []
    rewritten = 0

    for component in find_components(grid, value):
        if len(component) < minimum_size:
            xs, ys = zip(*component)
            grid[list(xs), list(ys)] = replacement
            rewritten += len(component)
        else:
            kept.append(component)

    return kept, rewritten


def _build_partition(
    shape: tuple[int, int],
    layer: int,
    components: list[list[Cell]],
) -> IslandPartition:
    island_ids = np.zeros(shape, dtype=np.int32)
    islands: list[Island] = []

    for island_id, cells in enumerate(components, start=1):
        xs, ys = zip(*cells)
        island_ids[list(xs), list(ys)] = island_id
        islands.append(Island(island_id=island_id, layer=layer, cells=cells))

    return IslandPartition(islands=islands, island_ids=island_ids)


def partition_islands(
    grid: NDArray[np.int32],
    config: IslandConfig,
) -> IslandPartition:
    """Clean up small regions and number the remaining islands.

    Runs a single pass, mutating grid in place:

    1. Background components smaller than ``minimum_water_tiles`` are
       filled with ``back_layer + 1``.
    2. Land components smaller than ``minimum_land_tiles`` are submerged to
       ``main_layer - 1``; the rest become islands with ids 1, 2, ... in
       discovery order.

    A filled background pocket is not re-checked against the land minimum.

    Args:
        grid: Full layer grid, mutated.
        config: Island partitioning parameters.

    Returns:
        IslandPartition with the retained islands and the id grid.
    """
    _, filled = fill_small_components(
        grid,
        config.back_layer,
        config.minimum_water_tiles,
        config.back_layer + 1,
    )
    kept, submerged = fill_small_components(
        grid,
        config.main_layer,
        config.minimum_land_tiles,
        config.main_layer - 1,
    )

    partition = _build_partition(grid.shape, config.main_layer, kept)
    partition.filled_cells = filled
    partition.submerged_cells = submerged

    logger.info(
        "islands_partitioned",
        islands=len(partition.islands),
        filled_cells=filled,
        submerged_cells=submerged,
    )
    return partition


def index_islands(
    grid: NDArray[np.int32],
    config: IslandConfig,
) -> IslandPartition:
    """Number the islands of an existing grid without modifying it.

    Land components below ``minimum_land_tiles`` are left in place but are
    not assigned an id.

    Args:
        grid: Full layer grid.
        config: Island partitioning parameters.

    Returns:
        IslandPartition with the qualifying islands and the id grid.
    """
    kept = [
        component
        for component in find_components(grid, config.main_layer)
        if len(component) >= config.minimum_land_tiles
    ]
    return _build_partition(grid.shape, config.main_layer, kept)
