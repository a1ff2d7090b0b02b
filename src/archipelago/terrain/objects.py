"""Object placement: rule-driven scattering of objects over terrain layers."""

from collections import Counter
from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import NDArray

from ..types import DIAGONAL_OFFSETS, Cell, Position, cell_to_world
from .config import ObjectPlacementRule

logger = structlog.get_logger()


@dataclass
class Placement:
    """A decision to spawn one object at one cell."""

    rule: ObjectPlacementRule
    cell: Cell
    position: Position
    object_id: str

    @property
    def object(self) -> str:
        return self.rule.object


def _inside_margin(cell: Cell, shape: tuple[int, int], distance: int) -> bool:
    """Check a cell keeps the rule's clearance from every grid border."""
    x, y = cell
    width, height = shape
    return (
        distance + 1 < x < width - distance - 1
        and distance + 1 < y < height - distance - 1
    )


def _corners_supported(
    grid: NDArray[np.int32], cell: Cell, distance: int, layer: int
) -> bool:
    """Check the four diagonal cells at the given distance are at or above layer."""
    x, y = cell
    return all(
        grid[x + dx * distance, y + dy * distance] >= layer
        for dx, dy in DIAGONAL_OFFSETS
    )


def rule_applies(
    grid: NDArray[np.int32], cell: Cell, rule: ObjectPlacementRule
) -> bool:
    """Whether a rule may fire at a cell, before the saturation roll."""
    if grid[cell] != rule.layer:
        return False
    if not _inside_margin(cell, grid.shape, rule.distance):
        return False
    if rule.distance == 0:
        return True
    return _corners_supported(grid, cell, rule.distance, rule.layer)


def place_objects(
    grid: NDArray[np.int32],
    rules: list[ObjectPlacementRule],
    rng: np.random.Generator,
) -> list[Placement]:
    """Decide where objects spawn. Nothing is instantiated here.

    Cells are visited in row-major order and rules are evaluated in list
    order. A rule fires with probability ``saturation / 100``; once an
    exclusive rule fires, later rules are skipped for that cell.

    Args:
        grid: Final layer grid.
        rules: Ordered placement rules.
        rng: Random number generator.

    Returns:
        Placements in the order they were decided.
    """
    width, height = grid.shape
    placements: list[Placement] = []
    counts: Counter[str] = Counter()

    if not rules:
        return placements

    for x in range(width):
        for y in range(height):
            cell = (x, y)
            for rule in rules:
                if not rule_applies(grid, cell, rule):
                    continue
                if rng.integers(0, 100) >= rule.saturation:
                    continue

                placements.append(
                    Placement(
                        rule=rule,
                        cell=cell,
                        position=cell_to_world(cell, width, height),
                        object_id=f"{rule.object}_{counts[rule.object]}",
                    )
                )
                counts[rule.object] += 1
                if rule.exclusive:
                    break

    logger.info("objects_placed", total=len(placements), per_object=dict(counts))
    return placements
