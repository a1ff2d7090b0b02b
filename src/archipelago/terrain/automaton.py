"""Cellular automata used to smooth terrain layers."""

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from ..types import MOORE_OFFSETS

# Padding value for cells outside the grid: never equal to a layer value
# and never below one.
_OUTSIDE = np.iinfo(np.int32).max


def count_filled_neighbors(grid: NDArray[np.int32]) -> NDArray[np.int32]:
    """Count 1-valued cells in each cell's 8-neighbourhood.

    Cells outside the grid count as empty, so border cells simply have
    fewer neighbours.

    Args:
        grid: Binary grid of 0/1 values.

    Returns:
        Neighbour counts, same shape as grid.
    """
    # 3x3 kernel, centre excluded
    kernel = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int32)
    return ndimage.convolve(grid.astype(np.int32), kernel, mode="constant", cval=0)


def smooth_base_layer(
    grid: NDArray[np.int32],
    birth_limit: int = 4,
    death_limit: int = 4,
) -> NDArray[np.int32]:
    """Run one round of the birth/death automaton on the base layer.

    A filled cell survives with at least death_limit filled neighbours; an
    empty cell is born with more than birth_limit.

    Args:
        grid: Binary grid of 0/1 values.
        birth_limit: Birth threshold (strict).
        death_limit: Survival threshold (inclusive).

    Returns:
        New binary grid.
    """
    neighbors = count_filled_neighbors(grid)
    alive = ((grid == 1) & (neighbors >= death_limit)) | (
        (grid == 0) & (neighbors > birth_limit)
    )
    return alive.astype(np.int32)


def count_agreement(grid: NDArray[np.int32], level: int) -> NDArray[np.int32]:
    """Count neighbour agreement for the extra-layer automaton.

    Each in-grid neighbour with the same value scores one. A cell at
    ``level`` scores one more for each neighbour below ``level``.

    Args:
        grid: Layer grid.
        level: Currently active layer.

    Returns:
        Agreement counts, same shape as grid.
    """
    width, height = grid.shape
    padded = np.pad(grid.astype(np.int32), 1, constant_values=_OUTSIDE)
    at_level = grid == level
    agreement = np.zeros(grid.shape, dtype=np.int32)

    for dx, dy in MOORE_OFFSETS:
        neighbor = padded[1 + dx : 1 + dx + width, 1 + dy : 1 + dy + height]
        agreement += neighbor == grid
        agreement += at_level & (neighbor < level)

    return agreement


def smooth_extra_layer(
    grid: NDArray[np.int32],
    level: int,
    birth_limit: int = 4,
    death_limit: int = 4,
) -> NDArray[np.int32]:
    """Run one round of the automaton that shapes layer ``level + 1``.

    Cells below ``level`` are frozen. Everything else settles to either
    ``level`` or ``level + 1``.

    Args:
        grid: Layer grid.
        level: Currently active layer (the one being grown on).
        birth_limit: Agreement a ``level + 1`` cell must exceed to stay.
        death_limit: Agreement below which a ``level`` cell is promoted.

    Returns:
        New layer grid.
    """
    agreement = count_agreement(grid, level)
    promoted = ((grid == level + 1) & (agreement > birth_limit)) | (
        (grid == level) & (agreement < death_limit)
    )
    result = np.where(promoted, level + 1, level).astype(np.int32)
    return np.where(grid < level, grid, result).astype(np.int32)
