"""Core types for map generation."""

from pydantic import BaseModel

# Grid cell coordinate (x, y). Grids are arrays of shape (width, height),
# indexed grid[x, y].
Cell = tuple[int, int]

# Orthogonal neighbours, in flood-fill visiting order
ORTHOGONAL_OFFSETS: tuple[Cell, ...] = ((-1, 0), (0, -1), (0, 1), (1, 0))

DIAGONAL_OFFSETS: tuple[Cell, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))

# Full 8-neighbourhood, excluding the centre cell
MOORE_OFFSETS: tuple[Cell, ...] = tuple(
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
)


class Position(BaseModel, frozen=True):
    """Immutable 2D world position."""

    x: int
    y: int

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"

    def __repr__(self) -> str:
        return f"Position(x={self.x}, y={self.y})"


def cell_to_world(cell: Cell, width: int, height: int) -> Position:
    """Map a grid cell to its world position.

    The grid is mirrored on both axes and centred on the map midpoint.

    Args:
        cell: Grid coordinate (x, y).
        width: Full grid width.
        height: Full grid height.

    Returns:
        World position of the cell.
    """
    x, y = cell
    return Position(x=width // 2 - x, y=height // 2 - y)


def world_to_cell(position: Position, width: int, height: int) -> Cell:
    """Inverse of cell_to_world. The result may lie outside the grid."""
    return (width // 2 - position.x, height // 2 - position.y)
