"""Aggregate puzzle state and its read-only presentation snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field

from chessbattler.core.board import Board
from chessbattler.core.budget import PieceBudget, TrayTemplate
from chessbattler.core.enums import Color, PieceType
from chessbattler.core.notation import EMPTY_NOTATION, encode
from chessbattler.core.piece import Piece
from chessbattler.core.types import Cell
from chessbattler.game.interfaces import GameOverReason, GamePhase
from chessbattler.game.puzzle import PuzzleDefinition


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single entry in the move history."""

    piece_id: str
    piece_type: PieceType
    color: Color
    from_cell: Cell
    to_cell: Cell
    captured_id: str | None
    notation_after: str


@dataclass
class GameSession:
    """Everything one puzzle attempt consists of.

    Pure data: :class:`~chessbattler.game.engine.PuzzleEngine` is the only
    writer. ``notation`` is a cached projection of the board and the two
    piece collections and is refreshed after every mutation.
    """

    player_color: Color = Color.WHITE
    phase: GamePhase = field(default=GamePhase.MENU, init=False)
    board: Board = field(default_factory=Board, init=False)
    own_pieces: list[Piece] = field(default_factory=list, init=False)
    opponent_pieces: list[Piece] = field(default_factory=list, init=False)
    active_color: Color = field(default=Color.WHITE, init=False)
    notation: str = field(default=EMPTY_NOTATION, init=False)
    budget: PieceBudget = field(default_factory=PieceBudget, init=False)
    puzzle: PuzzleDefinition | None = field(default=None, init=False)
    winner: Color | None = field(default=None, init=False)
    game_over_reason: GameOverReason = field(default=GameOverReason.NONE, init=False)
    move_history: list[MoveRecord] = field(default_factory=list, init=False)

    @property
    def opponent_color(self) -> Color:
        return self.player_color.opposite

    @property
    def is_player_turn(self) -> bool:
        return self.active_color == self.player_color

    def refresh_notation(self) -> str:
        self.notation = encode(
            self.board, self.own_pieces, self.opponent_pieces, self.active_color
        )
        return self.notation

    def find_piece(self, piece_id: str) -> Piece | None:
        for piece in (*self.own_pieces, *self.opponent_pieces):
            if piece.id == piece_id:
                return piece
        return None

    def collection_for(self, color: Color) -> list[Piece]:
        return self.own_pieces if color == self.player_color else self.opponent_pieces

    def discard(self, piece: Piece) -> None:
        """Drop *piece* from whichever collection holds it."""
        pieces = self.collection_for(piece.color)
        if piece in pieces:
            pieces.remove(piece)


# ── Presentation read model ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PieceView:
    id: str
    piece_type: PieceType
    color: Color
    cell: Cell | None
    value: int
    budgeted: bool

    @classmethod
    def of(cls, piece: Piece) -> PieceView:
        return cls(
            piece.id,
            piece.piece_type,
            piece.color,
            piece.cell,
            piece.value,
            piece.budgeted,
        )


@dataclass(frozen=True, slots=True)
class PuzzleSnapshot:
    """Immutable view handed to the rendering layer.

    ``board`` is a letter grid (top row first, ``None`` for empty cells).
    ``countdown_remaining`` and ``is_paused`` are filled in by the session;
    the engine alone does not own a countdown.
    """

    board: tuple[tuple[str | None, ...], ...]
    own_pieces: tuple[PieceView, ...]
    opponent_pieces: tuple[PieceView, ...]
    phase: GamePhase
    notation: str
    remaining_budget: int
    active_color: Color
    available_pieces: tuple[TrayTemplate, ...]
    winner: Color | None = None
    countdown_remaining: int = 0
    is_paused: bool = False
