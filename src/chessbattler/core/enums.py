"""Core enumerations for the puzzle domain."""

from __future__ import annotations

from enum import IntEnum


class Color(IntEnum):
    """Side color. White is the default board orientation."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Color:
        return Color(1 - self.value)

    @property
    def code(self) -> str:
        """Single-letter side marker used in notation strings."""
        return "w" if self == Color.WHITE else "b"

    @classmethod
    def from_code(cls, code: str) -> Color:
        if code == "w":
            return cls.WHITE
        if code == "b":
            return cls.BLACK
        raise ValueError(f"Invalid side marker: {code!r}")

    def __str__(self) -> str:
        return self.name.lower()


class PieceType(IntEnum):
    """Piece types ordered by conventional value."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    def __str__(self) -> str:
        return self.name.lower()
