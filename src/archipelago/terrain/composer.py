"""Tiling of independently synthesized sub-maps into one grid."""

import numpy as np
import structlog
from numpy.typing import NDArray

from .config import AutomatonConfig, LayerConfig
from .synthesis import synthesize_terrain

logger = structlog.get_logger()


def compose_grid(
    grid_size: int,
    sub_width: int,
    sub_height: int,
    layers: list[LayerConfig],
    rng: np.random.Generator,
    automaton: AutomatonConfig | None = None,
) -> NDArray[np.int32]:
    """Tile grid_size x grid_size sub-maps into a full grid.

    Block (i, j) covers rows [i * sub_width, (i + 1) * sub_width) and columns
    [j * sub_height, (j + 1) * sub_height). Each block draws its own
    randomness; nothing is blended across block edges, so seams are
    expected.

    Args:
        grid_size: Number of sub-maps per side.
        sub_width: Sub-map width.
        sub_height: Sub-map height.
        layers: Ordered layer stack.
        rng: Random number generator shared by all blocks.
        automaton: Neighbour thresholds.

    Returns:
        Grid of shape (grid_size * sub_width, grid_size * sub_height).
    """
    grid = np.zeros((grid_size * sub_width, grid_size * sub_height), dtype=np.int32)

    for i in range(grid_size):
        for j in range(grid_size):
            block = synthesize_terrain(sub_width, sub_height, layers, rng, automaton)
            x0, y0 = i * sub_width, j * sub_height
            grid[x0 : x0 + sub_width, y0 : y0 + sub_height] = block

    logger.info(
        "grid_composed",
        width=grid.shape[0],
        height=grid.shape[1],
        blocks=grid_size * grid_size,
    )
    return grid
