"""Cell type and coordinate helpers.

Board layout (row-major, row 0 at the top)::

    a5 b5 c5 d5 e5    row 0
    a4 b4 c4 d4 e4    row 1
    ...
    a1 b1 c1 d1 e1    row 4

Rows are stored top to bottom, so ``rank = BOARD_SIZE - row``.
"""

from __future__ import annotations

from typing import NamedTuple

BOARD_SIZE = 5

_FILES = "abcdefghijklmnopqrstuvwxyz"


class Cell(NamedTuple):
    """A discrete board coordinate."""

    row: int
    col: int

    def __str__(self) -> str:
        return cell_name(self)


def is_valid_cell(cell: Cell, size: int = BOARD_SIZE) -> bool:
    """Check whether *cell* lies inside a ``size`` × ``size`` board."""
    return 0 <= cell.row < size and 0 <= cell.col < size


def cell_name(cell: Cell, size: int = BOARD_SIZE) -> str:
    """Algebraic name, e.g. ``Cell(4, 0)`` → ``'a1'``."""
    return f"{_FILES[cell.col]}{size - cell.row}"


def parse_cell(name: str, size: int = BOARD_SIZE) -> Cell:
    """Parse an algebraic name, e.g. ``'c3'`` → ``Cell(2, 2)``."""
    if len(name) < 2 or name[0] not in _FILES[:size] or not name[1:].isdigit():
        raise ValueError(f"Invalid cell name: {name!r}")
    rank = int(name[1:])
    if not 1 <= rank <= size:
        raise ValueError(f"Invalid cell name: {name!r}")
    return Cell(size - rank, _FILES.index(name[0]))


def all_cells(size: int = BOARD_SIZE) -> list[Cell]:
    """Every cell in row-major order."""
    return [Cell(row, col) for row in range(size) for col in range(size)]
