"""Configuration checks and post-generation validation."""

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from ..exceptions import ConfigurationError
from .config import MapConfig
from .islands import IslandPartition

logger = structlog.get_logger()

# 4-connected structuring element, matching the flood fill
_ORTHOGONAL = ndimage.generate_binary_structure(2, 1)


class ValidationResult:
    """Result of terrain validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_config(config: MapConfig) -> list[str]:
    """Check a configuration before any generation work starts.

    Args:
        config: Map configuration.

    Returns:
        Non-fatal warnings (also logged).

    Raises:
        ConfigurationError: If the configuration cannot generate a map.
    """
    layer_count = config.layer_count
    if layer_count < 2:
        raise ConfigurationError(
            f"Map generator needs at least 2 terrain layers, got {layer_count}"
        )

    islands = config.islands
    if islands.enabled:
        if islands.main_layer >= layer_count:
            raise ConfigurationError(
                f"Island main layer {islands.main_layer} is outside the "
                f"{layer_count}-layer stack"
            )
        if islands.back_layer + 1 >= layer_count:
            raise ConfigurationError(
                f"Island back layer {islands.back_layer} has no layer above it"
            )

    warnings: list[str] = []
    if config.layers[0].saturation != 0:
        warnings.append("First layer is always fully saturated")
    for rule in config.objects:
        if rule.layer >= layer_count:
            warnings.append(
                f"Object '{rule.object}' targets layer {rule.layer}, "
                f"which never appears"
            )

    for warning in warnings:
        logger.warning("config_warning", message=warning)

    return warnings


def validate_terrain(
    grid: NDArray[np.int32],
    partition: IslandPartition,
    config: MapConfig,
) -> ValidationResult:
    """Validate a generated grid and its island partition.

    Args:
        grid: Final layer grid.
        partition: Island partition computed for the grid.
        config: Generation configuration.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    _check_value_range(grid, config.layer_count, result)
    if config.islands.enabled:
        _check_island_sizes(partition, config.islands.minimum_land_tiles, result)
        _check_island_ids(grid, partition, result)
        _check_background_regions(
            grid,
            config.islands.back_layer,
            config.islands.minimum_water_tiles,
            result,
        )

    if result.passed:
        logger.info("terrain_validation_passed")
    else:
        logger.warning("terrain_validation_failed", errors=len(result.errors))
        for error in result.errors:
            logger.error("validation_error", message=error)

    for warning in result.warnings:
        logger.warning("validation_warning", message=warning)

    return result


def _check_value_range(
    grid: NDArray[np.int32],
    layer_count: int,
    result: ValidationResult,
) -> None:
    """Check every cell holds a layer of the stack."""
    out_of_range = int(np.sum((grid < 0) | (grid >= layer_count)))
    if out_of_range > 0:
        result.add_error(
            f"{out_of_range} cells outside layer range [0, {layer_count - 1}]"
        )


def _check_island_sizes(
    partition: IslandPartition,
    minimum: int,
    result: ValidationResult,
) -> None:
    """Check no retained island is below the land minimum."""
    small = [island.island_id for island in partition.islands if island.size < minimum]
    if small:
        result.add_error(f"Islands below {minimum} tiles: {small}")


def _check_island_ids(
    grid: NDArray[np.int32],
    partition: IslandPartition,
    result: ValidationResult,
) -> None:
    """Check the id grid matches the island list and the terrain."""
    if partition.island_ids.shape != grid.shape:
        result.add_error(
            f"Island id grid shape {partition.island_ids.shape} "
            f"does not match grid {grid.shape}"
        )
        return

    expected = sum(island.size for island in partition.islands)
    assigned = int(np.count_nonzero(partition.island_ids))
    if assigned != expected:
        result.add_error(f"{assigned} cells carry an island id, expected {expected}")

    for island in partition.islands:
        xs, ys = zip(*island.cells)
        if np.any(partition.island_ids[list(xs), list(ys)] != island.island_id):
            result.add_error(f"Island {island.island_id} has mismatched id cells")
        if np.any(grid[list(xs), list(ys)] != island.layer):
            result.add_error(f"Island {island.island_id} has cells off its layer")


def _check_background_regions(
    grid: NDArray[np.int32],
    back_layer: int,
    minimum: int,
    result: ValidationResult,
) -> None:
    """Report background regions the single cleanup pass left undersized."""
    labeled, num_features = ndimage.label(grid == back_layer, structure=_ORTHOGONAL)
    if num_features == 0:
        return

    sizes = np.bincount(labeled.ravel())[1:]
    small = int(np.sum(sizes < minimum))
    if small > 0:
        result.add_warning(
            f"{small} background regions below {minimum} tiles after cleanup"
        )
