"""Board - piece placement on a square grid."""

from __future__ import annotations

from collections.abc import Iterator

from chessbattler.core.enums import Color
from chessbattler.core.piece import REMOVED, OnBoard, Piece
from chessbattler.core.types import BOARD_SIZE, Cell, is_valid_cell


class Board:
    """Mutable N×N grid of optional piece references.

    Every write goes through :meth:`put` / :meth:`take` so that a piece's
    ``location`` always names the one cell holding it.
    """

    __slots__ = ("_size", "_grid")

    def __init__(self, size: int = BOARD_SIZE) -> None:
        self._size = size
        self._grid: list[list[Piece | None]] = [
            [None] * size for _ in range(size)
        ]

    @property
    def size(self) -> int:
        return self._size

    # -- Element access -----------------------------------------------------

    def __getitem__(self, cell: Cell) -> Piece | None:
        return self._grid[cell.row][cell.col]

    def contains(self, cell: Cell) -> bool:
        return is_valid_cell(cell, self._size)

    def is_empty(self, cell: Cell) -> bool:
        return self._grid[cell.row][cell.col] is None

    def put(self, cell: Cell, piece: Piece) -> None:
        """Occupy *cell* with *piece*, vacating its previous cell.

        Caller is responsible for the occupancy check.
        """
        previous = piece.cell
        if previous is not None and self._grid[previous.row][previous.col] is piece:
            self._grid[previous.row][previous.col] = None
        self._grid[cell.row][cell.col] = piece
        piece.location = OnBoard(cell)

    def take(self, cell: Cell) -> Piece | None:
        """Remove and return the piece on *cell* (marked as removed)."""
        piece = self._grid[cell.row][cell.col]
        if piece is not None:
            self._grid[cell.row][cell.col] = None
            piece.location = REMOVED
        return piece

    def clear(self) -> None:
        for cell, piece in list(self.cells()):
            if piece is not None:
                self.take(cell)

    # -- Query helpers ------------------------------------------------------

    def cells(self) -> Iterator[tuple[Cell, Piece | None]]:
        """All cells in row-major order with their occupant."""
        for row in range(self._size):
            for col in range(self._size):
                yield Cell(row, col), self._grid[row][col]

    def pieces(self, color: Color | None = None) -> list[Piece]:
        return [
            piece
            for _, piece in self.cells()
            if piece is not None and (color is None or piece.color == color)
        ]

    def find(self, piece_id: str) -> Cell | None:
        for cell, piece in self.cells():
            if piece is not None and piece.id == piece_id:
                return cell
        return None

    def rows(self) -> list[list[Piece | None]]:
        """Shallow copy of the grid, top row first."""
        return [list(row) for row in self._grid]

    def __repr__(self) -> str:
        lines = [
            "".join(p.char if p is not None else "." for p in row)
            for row in self._grid
        ]
        return "Board(\n  " + "\n  ".join(lines) + "\n)"
