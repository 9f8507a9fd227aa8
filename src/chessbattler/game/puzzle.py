"""Puzzle definitions and their designated solution move."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from chessbattler.core.budget import DEFAULT_MAX_VALUE
from chessbattler.core.enums import PieceType
from chessbattler.core.piece import Piece
from chessbattler.core.types import Cell, cell_name, parse_cell


class InvalidPuzzleError(ValueError):
    """Raised when a puzzle definition cannot be loaded."""


_COORD_RE = re.compile(r"^([a-z][1-9])-?([a-z][1-9])$")
_SAN_RE = re.compile(r"^([KQRBN])?x?([a-z][1-9])[+#]?$")
_SAN_PIECES: dict[str, PieceType] = {
    "K": PieceType.KING,
    "Q": PieceType.QUEEN,
    "R": PieceType.ROOK,
    "B": PieceType.BISHOP,
    "N": PieceType.KNIGHT,
}


@dataclass(frozen=True, slots=True)
class SolutionMove:
    """The designated winning move of a puzzle.

    Two textual forms are understood:

    * coordinate form ``"b2c4"`` (or ``"b2-c4"``): origin and target cell;
    * short algebraic form ``"Qc3#"``: moving piece type and target cell,
      a missing piece letter meaning a pawn.
    """

    text: str
    to_cell: Cell
    from_cell: Cell | None = None
    piece_type: PieceType | None = None

    @classmethod
    def parse(cls, text: str) -> SolutionMove:
        stripped = text.strip()
        try:
            coord = _COORD_RE.match(stripped)
            if coord is not None:
                return cls(
                    stripped,
                    to_cell=parse_cell(coord.group(2)),
                    from_cell=parse_cell(coord.group(1)),
                )
            san = _SAN_RE.match(stripped)
            if san is not None:
                letter = san.group(1)
                return cls(
                    stripped,
                    to_cell=parse_cell(san.group(2)),
                    piece_type=_SAN_PIECES[letter] if letter else PieceType.PAWN,
                )
        except ValueError as exc:
            raise InvalidPuzzleError(f"Invalid solution move: {text!r}") from exc
        raise InvalidPuzzleError(f"Invalid solution move: {text!r}")

    def matches(self, from_cell: Cell, to_cell: Cell, moving: Piece | None) -> bool:
        """Whether the move *from_cell* → *to_cell* is this solution."""
        if to_cell != self.to_cell:
            return False
        if self.from_cell is not None:
            return from_cell == self.from_cell
        return moving is not None and moving.piece_type == self.piece_type

    def __str__(self) -> str:
        if self.from_cell is not None:
            return f"{cell_name(self.from_cell)}{cell_name(self.to_cell)}"
        return self.text


@dataclass(frozen=True, slots=True)
class PuzzleDefinition:
    """Immutable description of one puzzle as supplied by a catalog."""

    id: str
    name: str
    difficulty: int
    max_player_value: int
    notation: str
    solution: str | None = None
    description: str = ""

    @property
    def solution_move(self) -> SolutionMove | None:
        if not self.solution:
            return None
        return SolutionMove.parse(self.solution)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], default_budget: int = DEFAULT_MAX_VALUE
    ) -> PuzzleDefinition:
        """Build from an external mapping.

        Accepts camelCase keys (``maxPlayerValue``, ``notationString``) as
        well as ``fen`` for the notation, the key older puzzle files used.
        A missing budget falls back to *default_budget*.
        """
        if not isinstance(data, Mapping):
            raise InvalidPuzzleError(
                f"Puzzle definition must be a mapping, got {type(data).__name__}"
            )
        notation = data.get("notationString", data.get("fen", data.get("notation")))
        if not isinstance(notation, str) or not notation.strip():
            raise InvalidPuzzleError("Puzzle definition has no notation string")

        max_value = data.get("maxPlayerValue", data.get("max_player_value"))
        if max_value is None:
            max_value = default_budget
        if not isinstance(max_value, int) or isinstance(max_value, bool) or max_value < 0:
            raise InvalidPuzzleError(f"Invalid maxPlayerValue: {max_value!r}")

        difficulty = data.get("difficulty", 1)
        if not isinstance(difficulty, int) or isinstance(difficulty, bool):
            raise InvalidPuzzleError(f"Invalid difficulty: {difficulty!r}")

        solution = data.get("solution")
        if solution is not None and not isinstance(solution, str):
            raise InvalidPuzzleError(f"Invalid solution: {solution!r}")

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            difficulty=difficulty,
            max_player_value=max_value,
            notation=notation.strip(),
            solution=solution or None,
            description=str(data.get("description", "")),
        )
