"""Map persistence: save and load generated grids."""

import json
import zipfile
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import structlog
from numpy.typing import NDArray

from ..exceptions import (
    InvalidMapFileError,
    MapNotFoundError,
    SaveNameExhaustedError,
)

logger = structlog.get_logger()

SCHEMA_VERSION = 1
MAP_SUFFIX = ".npz"
DEFAULT_MAX_ATTEMPTS = 512


def save_map(
    path: Path,
    grid: NDArray[np.int32],
    seed: int | None = None,
    sequence: int | None = None,
) -> None:
    """Save a grid to disk.

    The file holds the flattened cell values plus JSON metadata with the
    schema version and dimensions, in numpy's compressed .npz format.

    Args:
        path: Output path (should end with .npz).
        grid: Layer grid of shape (width, height).
        seed: Seed of the session the grid was generated in, if any.
        sequence: Position of the grid in that session, starting at 0.
    """
    width, height = grid.shape
    metadata = {
        "version": SCHEMA_VERSION,
        "width": width,
        "height": height,
        "seed": seed,
        "sequence": sequence,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    with open(path, "wb") as f:
        np.savez_compressed(
            f,
            values=grid.astype(np.int32).ravel(),
            metadata=np.frombuffer(json.dumps(metadata).encode("utf-8"), dtype=np.uint8),
        )

    logger.info("map_saved", path=str(path), width=width, height=height)


def load_map(path: Path) -> tuple[NDArray[np.int32], dict]:
    """Load a grid from disk.

    Args:
        path: Path to .npz file.

    Returns:
        Tuple of (grid, metadata dict).

    Raises:
        MapNotFoundError: If file doesn't exist.
        InvalidMapFileError: If file format is invalid.
    """
    if not path.exists():
        raise MapNotFoundError(f"Map file not found: {path}")

    try:
        data = np.load(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise InvalidMapFileError(f"Cannot read map file {path}: {e}") from e

    if not isinstance(data, np.lib.npyio.NpzFile):
        raise InvalidMapFileError(f"Invalid map file {path}: not an .npz archive")

    with data:
        if "values" not in data or "metadata" not in data:
            raise InvalidMapFileError(
                "Invalid map file: missing 'values' or 'metadata' array"
            )
        values = data["values"]
        try:
            metadata = json.loads(data["metadata"].tobytes().decode("utf-8"))
        except ValueError as e:
            raise InvalidMapFileError(f"Invalid map metadata in {path}: {e}") from e

    if not isinstance(metadata, dict):
        raise InvalidMapFileError(f"Invalid map metadata in {path}")

    version = metadata.get("version")
    if version != SCHEMA_VERSION:
        raise InvalidMapFileError(f"Unsupported map schema version: {version}")

    width, height = metadata.get("width"), metadata.get("height")
    if not isinstance(width, int) or not isinstance(height, int):
        raise InvalidMapFileError("Invalid map file: missing dimensions")
    if values.size != width * height:
        raise InvalidMapFileError(
            f"Invalid map file: {values.size} values for {width}x{height} grid"
        )
    if values.size and values.min() < 0:
        raise InvalidMapFileError(f"Invalid map file {path}: negative cell values")

    grid = values.astype(np.int32).reshape(width, height)
    logger.info("map_loaded", path=str(path), width=width, height=height)
    return grid, metadata


def unique_map_path(
    directory: Path,
    start: int = 0,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    now: datetime | None = None,
) -> tuple[Path, int]:
    """Find an unused map file name in directory.

    Names follow ``Map{counter}-{MMdd_HHmmss}.npz``; the counter is bumped
    until a free name is found.

    Args:
        directory: Target directory.
        start: First counter value to try.
        max_attempts: Number of names tried before giving up.
        now: Timestamp used in the name (defaults to the local time).

    Returns:
        Tuple of (free path, next counter value).

    Raises:
        SaveNameExhaustedError: If every candidate name is taken.
    """
    stamp = (now or datetime.now()).strftime("%m%d_%H%M%S")

    for counter in range(start, start + max_attempts):
        path = directory / f"Map{counter}-{stamp}{MAP_SUFFIX}"
        if not path.exists():
            return path, counter + 1

    raise SaveNameExhaustedError(
        f"Create map file failed: no free name in {directory} "
        f"after {max_attempts} attempts"
    )


class MapStore:
    """Directory-backed store that saves grids under unique names."""

    def __init__(
        self,
        directory: Path | str = "saves",
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.directory = Path(directory)
        self.max_attempts = max_attempts
        self._save_count = 0

    def save(
        self,
        grid: NDArray[np.int32],
        seed: int | None = None,
        sequence: int | None = None,
    ) -> Path:
        """Save grid under a fresh name and return its path.

        Raises:
            SaveNameExhaustedError: If no unique name could be found.
        """
        if not self.directory.exists():
            self.directory.mkdir(parents=True, exist_ok=True)
            logger.info("directory_created", path=str(self.directory))

        path, self._save_count = unique_map_path(
            self.directory, self._save_count, self.max_attempts
        )
        save_map(path, grid, seed=seed, sequence=sequence)
        return path

    def load(self, handle: Path | str) -> NDArray[np.int32]:
        """Load a grid by path, or by name relative to the store directory.

        Raises:
            MapNotFoundError: If the map doesn't exist.
            InvalidMapFileError: If the file cannot be decoded.
        """
        path = Path(handle)
        if not path.is_absolute() and not path.exists():
            path = self.directory / path
        if not path.suffix:
            path = path.with_suffix(MAP_SUFFIX)

        grid, _ = load_map(path)
        return grid

    def list_maps(self) -> list[Path]:
        """Saved maps in the store directory, sorted by name."""
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob(f"*{MAP_SUFFIX}"))
