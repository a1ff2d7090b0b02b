"""Layered cellular-automaton terrain synthesis for a single sub-map."""

import numpy as np
import structlog
from numpy.typing import NDArray

from ..types import DIAGONAL_OFFSETS
from .automaton import smooth_base_layer, smooth_extra_layer
from .config import AutomatonConfig, LayerConfig

logger = structlog.get_logger()


def roll_percent(rng: np.random.Generator, size: int | tuple[int, ...]) -> NDArray[np.int64]:
    """Draw uniform integers in [1, 100]."""
    return rng.integers(1, 101, size=size)


def initial_chance(layer: LayerConfig, rng: np.random.Generator) -> int:
    """Jitter a layer's saturation by its variation.

    The jitter is truncated toward zero and the result is not clamped to
    [0, 100]: a chance at or below 1 never fills, above 100 always does.

    Args:
        layer: Layer whose saturation is jittered.
        rng: Random number generator.

    Returns:
        Effective fill chance in percent.
    """
    jitter = rng.uniform(-layer.variation, layer.variation)
    return layer.saturation + int(jitter)


def initialize_base_layer(
    width: int,
    height: int,
    chance: int,
    rng: np.random.Generator,
) -> NDArray[np.int32]:
    """Randomly fill the base layer.

    Args:
        width: Sub-map width.
        height: Sub-map height.
        chance: Fill chance in percent (strictly compared against [1, 100]).
        rng: Random number generator.

    Returns:
        Binary grid of shape (width, height).
    """
    draws = roll_percent(rng, (width, height))
    return (draws < chance).astype(np.int32)


def seed_layer_growth(
    grid: NDArray[np.int32],
    level: int,
    layer: LayerConfig,
    rng: np.random.Generator,
) -> NDArray[np.int32]:
    """Seed layer ``level + 1`` inside the area covered by ``level``.

    A cell at ``level`` may be promoted only if it lies outside a border
    strip of ``distance + 1`` cells and its four diagonal cells at offset
    ``distance`` are all at or above ``level``.

    Args:
        grid: Current layer grid.
        level: Currently active layer.
        layer: Configuration of the layer being seeded.
        rng: Random number generator.

    Returns:
        New layer grid with seeded cells.
    """
    width, height = grid.shape
    result = grid.copy()
    d = layer.distance
    margin = d + 1

    if width - margin <= margin or height - margin <= margin:
        return result

    x_end, y_end = width - margin, height - margin
    core = grid[margin:x_end, margin:y_end]
    eligible = core == level
    for dx, dy in DIAGONAL_OFFSETS:
        dx, dy = dx * d, dy * d
        corner = grid[margin + dx : x_end + dx, margin + dy : y_end + dy]
        eligible &= corner >= level

    xs, ys = np.nonzero(eligible)
    if len(xs) == 0:
        return result

    grows = roll_percent(rng, len(xs)) < layer.saturation
    result[xs[grows] + margin, ys[grows] + margin] = level + 1
    return result


def synthesize_terrain(
    width: int,
    height: int,
    layers: list[LayerConfig],
    rng: np.random.Generator,
    automaton: AutomatonConfig | None = None,
) -> NDArray[np.int32]:
    """Generate one sub-map by growing each layer on top of the previous one.

    Layer 1 is randomly initialized and smoothed over the whole map. Every
    further layer is seeded inside the layer below and then smoothed with
    the lower layers frozen.

    Args:
        width: Sub-map width.
        height: Sub-map height.
        layers: Ordered layer stack (at least two layers).
        rng: Random number generator.
        automaton: Neighbour thresholds.

    Returns:
        Layer grid of shape (width, height), values in [0, len(layers) - 1].
    """
    automaton = automaton or AutomatonConfig()

    chance = initial_chance(layers[1], rng)
    grid = initialize_base_layer(width, height, chance, rng)
    for _ in range(layers[1].iterations):
        grid = smooth_base_layer(
            grid, automaton.birth_limit, automaton.death_limit
        )
    level = 1

    for layer in layers[2:]:
        grid = seed_layer_growth(grid, level, layer, rng)
        for _ in range(layer.iterations):
            grid = smooth_extra_layer(
                grid,
                level,
                automaton.birth_limit_extra,
                automaton.death_limit_extra,
            )
        level += 1

    logger.debug(
        "terrain_synthesized",
        width=width,
        height=height,
        initial_chance=chance,
        layers=len(layers),
    )
    return grid
