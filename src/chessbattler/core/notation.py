"""Board notation: a FEN-like row run-length encoding for small boards.

Layout::

    <row>/<row>/.../<row> <side>

Rows are written top (row 0) to bottom. Inside a row a digit counts
consecutive empty cells and a letter names a piece (uppercase = white,
lowercase = black). ``<side>`` is ``w`` or ``b`` for the side to move.

Older puzzle files carry the standard FEN tail (``- - 0 1``);
such trailing fields are accepted on decode and ignored.

ex) an empty 5×5 board with white to move::

    5/5/5/5/5 w
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from chessbattler.core.board import Board
from chessbattler.core.enums import Color, PieceType
from chessbattler.core.piece import Piece, parse_piece_char
from chessbattler.core.types import BOARD_SIZE, Cell

EMPTY_NOTATION = "5/5/5/5/5 w"

PieceIdFactory = Callable[[PieceType, Color, Cell], str]


class NotationError(ValueError):
    """Raised when a notation string cannot be decoded."""


def default_piece_id(piece_type: PieceType, color: Color, cell: Cell) -> str:
    """``'rook-0-4-black'`` style id, unique per cell of one decoded board."""
    return f"{piece_type}-{cell.row}-{cell.col}-{color}"


@dataclass(slots=True)
class DecodedBoard:
    """Result of :func:`decode`.

    ``unknown`` lists cells whose letter did not name a piece type. Such
    cells are left empty; the caller decides whether that is fatal.
    """

    board: Board
    pieces: list[Piece]
    active_color: Color
    unknown: list[tuple[Cell, str]] = field(default_factory=list)

    def layout(self) -> list[list[str | None]]:
        """Letter grid used to compare decoded boards by content."""
        return [
            [piece.char if piece is not None else None for piece in row]
            for row in self.board.rows()
        ]


# ── Encoding ─────────────────────────────────────────────────────────────────


def encode_rows(grid: list[list[Piece | None]]) -> str:
    """Placement field only (rows joined with ``/``)."""
    rows: list[str] = []
    for grid_row in grid:
        empty = 0
        text = ""
        for piece in grid_row:
            if piece is None:
                empty += 1
                continue
            if empty:
                text += str(empty)
                empty = 0
            text += piece.char
        if empty:
            text += str(empty)
        rows.append(text)
    return "/".join(rows)


def encode(
    board: Board,
    own_pieces: Iterable[Piece],
    opponent_pieces: Iterable[Piece],
    active_color: Color,
) -> str:
    """Serialise the pieces of both collections that stand on *board*.

    Pieces are placed by their recorded cell, so the result is a pure
    projection of the collections; *board* only supplies the dimensions.
    """
    size = board.size
    grid: list[list[Piece | None]] = [[None] * size for _ in range(size)]
    for piece in (*own_pieces, *opponent_pieces):
        cell = piece.cell
        if cell is not None and board.contains(cell):
            grid[cell.row][cell.col] = piece
    return f"{encode_rows(grid)} {active_color.code}"


def encode_board(board: Board, active_color: Color) -> str:
    """Serialise straight from the board grid."""
    return f"{encode_rows(board.rows())} {active_color.code}"


# ── Decoding ─────────────────────────────────────────────────────────────────


def decode(
    text: str,
    size: int = BOARD_SIZE,
    id_factory: PieceIdFactory = default_piece_id,
) -> DecodedBoard:
    """Parse a notation string into a fresh board and its pieces."""
    parts = text.split()
    if len(parts) < 2:
        raise NotationError(f"Invalid notation (need placement and side): {text!r}")

    placement, side_part = parts[0], parts[1]
    try:
        active_color = Color.from_code(side_part)
    except ValueError:
        raise NotationError(f"Invalid side-to-move field: {side_part!r}") from None

    rows = placement.split("/")
    if len(rows) != size:
        raise NotationError(f"Invalid notation (must contain {size} rows): {text!r}")

    board = Board(size)
    pieces: list[Piece] = []
    unknown: list[tuple[Cell, str]] = []
    for row_idx, row_text in enumerate(rows):
        col = 0
        for ch in row_text:
            if ch.isdigit():
                if ch not in "123456789":
                    raise NotationError(f"Invalid empty-run digit {ch!r}: {text!r}")
                step = int(ch)
                col += step
            else:
                if col >= size:
                    raise NotationError(f"Invalid row width: {text!r}")
                cell = Cell(row_idx, col)
                parsed = parse_piece_char(ch)
                if parsed is None:
                    unknown.append((cell, ch))
                else:
                    color, piece_type = parsed
                    piece = Piece(id_factory(piece_type, color, cell), piece_type, color)
                    board.put(cell, piece)
                    pieces.append(piece)
                col += 1
            if col > size:
                raise NotationError(f"Invalid row width: {text!r}")
        if col != size:
            raise NotationError(f"Invalid row width: {text!r}")

    return DecodedBoard(board, pieces, active_color, unknown)


def is_valid_notation(text: str, size: int = BOARD_SIZE) -> bool:
    """True when *text* decodes without errors or unknown letters."""
    try:
        decoded = decode(text, size)
    except NotationError:
        return False
    return not decoded.unknown
