"""Piece entity and its location tag."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from chessbattler.core.enums import Color, PieceType
from chessbattler.core.types import Cell

# Point cost of each piece type. The king is free: it is never bought.
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 0,
}

# Notation letter ↔ piece type (lowercase; case carries the color)
_TYPE_CHARS: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
_CHAR_TYPES: dict[str, PieceType] = {v: k for k, v in _TYPE_CHARS.items()}


def piece_char(piece_type: PieceType, color: Color) -> str:
    """Notation letter: uppercase = white, lowercase = black."""
    char = _TYPE_CHARS[piece_type]
    return char.upper() if color == Color.WHITE else char


def parse_piece_char(char: str) -> tuple[Color, PieceType] | None:
    """Inverse of :func:`piece_char`; ``None`` for unknown letters."""
    piece_type = _CHAR_TYPES.get(char.lower())
    if piece_type is None:
        return None
    return (Color.WHITE if char.isupper() else Color.BLACK), piece_type


# ── Location tag ─────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class OnBoard:
    cell: Cell


@dataclass(frozen=True, slots=True)
class InTray:
    slot: int


@dataclass(frozen=True, slots=True)
class Removed:
    pass


Location: TypeAlias = OnBoard | InTray | Removed

REMOVED = Removed()


# ── Piece ────────────────────────────────────────────────────────────────────


@dataclass(slots=True, eq=False)
class Piece:
    """A single piece with a stable identity.

    Equality is identity: two pieces of the same type and color are still
    different pieces.

    ``budgeted`` marks pieces bought from the tray, whose value is held in
    the budget and must be released when they leave the board.
    """

    id: str
    piece_type: PieceType
    color: Color
    location: Location = REMOVED
    budgeted: bool = False
    value: int = field(init=False)

    def __post_init__(self) -> None:
        self.value = PIECE_VALUES[self.piece_type]

    @property
    def cell(self) -> Cell | None:
        """Board cell, or ``None`` when the piece is off the board."""
        if isinstance(self.location, OnBoard):
            return self.location.cell
        return None

    @property
    def is_on_board(self) -> bool:
        return isinstance(self.location, OnBoard)

    @property
    def char(self) -> str:
        return piece_char(self.piece_type, self.color)

    def __repr__(self) -> str:
        return f"Piece({self.id!r}, {self.color} {self.piece_type}, {self.location})"
