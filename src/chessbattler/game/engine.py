"""PuzzleEngine: the phase machine that owns and mutates a GameSession.

Phases::

    MENU → PREPARATION → PLAYING → GAME_OVER
                ↑                       │
                └──── restart_puzzle ───┘

``reset`` returns to MENU from anywhere. Actions that do not fit the
current phase are rejected (``False`` or a rejected
:class:`~chessbattler.core.placement.PlacementOutcome`); they never raise.
Only a malformed puzzle raises, as :class:`InvalidPuzzleError`.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from chessbattler.core.budget import TRAY_PIECE_TYPES, TrayTemplate
from chessbattler.core.enums import Color, PieceType
from chessbattler.core.notation import NotationError, decode
from chessbattler.core.piece import Piece
from chessbattler.core.placement import (
    OutcomeKind,
    PendingMove,
    PlacementOutcome,
    PlacementResolver,
    Point,
    Rejection,
    TrayGeometry,
    attempt_placement,
    attempt_tray_placement,
)
from chessbattler.core.types import Cell
from chessbattler.game.interfaces import GameOverReason, GamePhase, can_transition
from chessbattler.game.puzzle import InvalidPuzzleError, PuzzleDefinition, SolutionMove
from chessbattler.game.state import GameSession, MoveRecord, PieceView, PuzzleSnapshot

if TYPE_CHECKING:
    from chessbattler.engine.advisor import IMoveAdvisor, MoveSuggestion

_LOGGER = logging.getLogger(__name__)


class PuzzleEngine:
    """Validates and applies every change to one :class:`GameSession`.

    Single-threaded: all methods are expected to run on the thread that
    owns the session. Move suggestions computed elsewhere come back through
    :meth:`apply_suggested_move`, which revalidates them first.
    """

    __slots__ = ("_session", "_resolver", "_tray", "_ids", "_solution")

    def __init__(
        self,
        player_color: Color = Color.WHITE,
        tray: TrayGeometry | None = None,
    ) -> None:
        self._tray = tray or TrayGeometry()
        self._ids = itertools.count(1)
        self._session = GameSession(player_color)
        self._resolver = PlacementResolver(
            self._session.board, self._session.budget, self._tray
        )
        self._solution: SolutionMove | None = None

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def phase(self) -> GamePhase:
        return self._session.phase

    @property
    def notation(self) -> str:
        return self._session.notation

    @property
    def active_color(self) -> Color:
        return self._session.active_color

    @property
    def player_color(self) -> Color:
        return self._session.player_color

    @property
    def winner(self) -> Color | None:
        return self._session.winner

    @property
    def is_player_turn(self) -> bool:
        return self._session.is_player_turn

    @property
    def resolver(self) -> PlacementResolver:
        return self._resolver

    def available_pieces(self) -> list[TrayTemplate]:
        return self._session.budget.available_pieces(self._session.player_color)

    # ── Lifecycle ────────────────────────────────────────────────────────

    def reset(self) -> None:
        """Discard the current attempt and return to MENU."""
        previous = self._session.phase
        self._session = GameSession(self._session.player_color)
        self._resolver = PlacementResolver(
            self._session.board, self._session.budget, self._tray
        )
        self._solution = None
        if previous != GamePhase.MENU:
            _LOGGER.debug("Phase %s -> MENU (reset)", previous.name)

    def start_puzzle(self, definition: PuzzleDefinition | Mapping[str, Any]) -> None:
        """Load *definition* and enter PREPARATION.

        Allowed from any phase. Raises :class:`InvalidPuzzleError` when the
        definition or its notation is unusable; in that case the current
        session is left as it was.
        """
        if not isinstance(definition, PuzzleDefinition):
            definition = PuzzleDefinition.from_dict(definition)
        if not definition.notation:
            raise InvalidPuzzleError("Invalid puzzle data: missing notation")

        try:
            decoded = decode(
                definition.notation,
                self._session.board.size,
                id_factory=lambda piece_type, color, _cell: self._next_id(
                    piece_type, color
                ),
            )
        except NotationError as exc:
            raise InvalidPuzzleError(f"Invalid puzzle notation: {exc}") from exc
        if decoded.unknown:
            letters = ", ".join(f"{ch!r} at {cell}" for cell, ch in decoded.unknown)
            raise InvalidPuzzleError(f"Unknown piece letters in notation: {letters}")
        solution = definition.solution_move

        self.reset()
        session = self._session
        session.puzzle = definition
        for cell, piece in decoded.board.cells():
            if piece is None:
                continue
            session.board.put(cell, piece)
            session.collection_for(piece.color).append(piece)
        session.active_color = decoded.active_color
        session.budget.reset(definition.max_player_value)
        self._solution = solution
        session.refresh_notation()
        self._set_phase(GamePhase.PREPARATION)
        _LOGGER.debug("Puzzle %r loaded: %s", definition.id, session.notation)

    def restart_puzzle(self) -> bool:
        """GAME_OVER → PREPARATION with the same puzzle."""
        puzzle = self._session.puzzle
        if self._session.phase != GamePhase.GAME_OVER or puzzle is None:
            return False
        self.start_puzzle(puzzle)
        return True

    def start_playing(self) -> bool:
        if self._session.phase != GamePhase.PREPARATION:
            return False
        self._set_phase(GamePhase.PLAYING)
        return True

    # ── Preparation ──────────────────────────────────────────────────────

    def place_piece(self, piece_type: PieceType, cell: Cell) -> PlacementOutcome:
        """Buy a tray piece and put it on *cell*."""
        if self._session.phase != GamePhase.PREPARATION:
            return PlacementOutcome.rejected(Rejection.WRONG_PHASE)
        if piece_type not in TRAY_PIECE_TYPES:
            return PlacementOutcome.rejected(Rejection.UNKNOWN_PIECE)
        session = self._session
        outcome, piece = attempt_tray_placement(
            cell,
            piece_type,
            session.player_color,
            session.board,
            session.budget,
            self._next_id(piece_type, session.player_color),
        )
        self._adopt(piece)
        return outcome

    def drop_tray_piece(
        self, piece_type: PieceType, slot: int, point: Point
    ) -> PlacementOutcome:
        """Resolve a tray drag released at *point*."""
        if self._session.phase != GamePhase.PREPARATION:
            return PlacementOutcome.rejected(Rejection.WRONG_PHASE)
        if piece_type not in TRAY_PIECE_TYPES:
            return PlacementOutcome.rejected(Rejection.UNKNOWN_PIECE)
        session = self._session
        outcome, piece = self._resolver.drop_tray_piece(
            piece_type,
            session.player_color,
            slot,
            point,
            session.active_color,
            self._next_id(piece_type, session.player_color),
        )
        self._adopt(piece)
        return outcome

    def relocate_piece(self, piece_id: str, cell: Cell) -> PlacementOutcome:
        piece, rejection = self._draggable(piece_id)
        if piece is None:
            return rejection
        outcome = attempt_placement(cell, piece, self._session.board)
        self._session.refresh_notation()
        return outcome

    def remove_piece(self, piece_id: str) -> PlacementOutcome:
        """Take a bought piece back off the board, refunding its value."""
        piece, rejection = self._draggable(piece_id)
        if piece is None:
            return rejection
        self._resolver.remove(piece)
        self._session.discard(piece)
        self._session.refresh_notation()
        return PlacementOutcome(OutcomeKind.REMOVED, piece.id)

    def drop_board_piece(self, piece_id: str, point: Point) -> PlacementOutcome:
        """Resolve a board drag released at *point*."""
        piece, rejection = self._draggable(piece_id)
        if piece is None:
            return rejection
        outcome = self._resolver.drop_board_piece(
            piece, point, self._session.active_color
        )
        return self._after_board_drop(piece, outcome)

    def begin_move(self, piece_id: str) -> PendingMove | None:
        piece, _ = self._draggable(piece_id)
        if piece is None:
            return None
        return self._resolver.begin_move(piece)

    def commit_move(
        self, pending: PendingMove, target: Point | Cell
    ) -> PlacementOutcome:
        if self._session.phase != GamePhase.PREPARATION:
            self._resolver.cancel_move(pending)
            return PlacementOutcome.rejected(Rejection.WRONG_PHASE, pending.piece.id)
        if self._session.find_piece(pending.piece.id) is not pending.piece:
            self._resolver.cancel_move(pending)
            return PlacementOutcome.rejected(Rejection.STALE, pending.piece.id)
        outcome = self._resolver.commit_move(
            pending, target, self._session.active_color
        )
        return self._after_board_drop(pending.piece, outcome)

    def cancel_move(self, pending: PendingMove) -> None:
        self._resolver.cancel_move(pending)

    # ── Play ─────────────────────────────────────────────────────────────

    def check_solution(self, from_cell: Cell, to_cell: Cell) -> bool:
        """Whether *from_cell* → *to_cell* is the puzzle's winning move.

        Evaluated against the board as it is before the move.
        """
        if self._solution is None:
            return False
        board = self._session.board
        moving = board[from_cell] if board.contains(from_cell) else None
        return self._solution.matches(from_cell, to_cell, moving)

    def move_piece(self, from_cell: Cell, to_cell: Cell) -> bool:
        """Move the active side's piece, capturing an enemy on *to_cell*."""
        session = self._session
        if session.phase != GamePhase.PLAYING:
            return False
        board = session.board
        if not (board.contains(from_cell) and board.contains(to_cell)):
            return False
        if from_cell == to_cell:
            return False
        piece = board[from_cell]
        if piece is None:
            _LOGGER.warning("move_piece from empty cell %s", from_cell)
            return False
        if piece.color != session.active_color:
            return False
        target = board[to_cell]
        if target is not None and target.color == piece.color:
            return False

        solved = piece.color == session.player_color and self.check_solution(
            from_cell, to_cell
        )

        if target is not None:
            board.take(to_cell)
            session.discard(target)
        board.put(to_cell, piece)
        session.active_color = session.active_color.opposite
        notation = session.refresh_notation()
        session.move_history.append(
            MoveRecord(
                piece_id=piece.id,
                piece_type=piece.piece_type,
                color=piece.color,
                from_cell=from_cell,
                to_cell=to_cell,
                captured_id=target.id if target is not None else None,
                notation_after=notation,
            )
        )

        if solved:
            self._finish(session.player_color, GameOverReason.SOLVED)
        elif target is not None and target.piece_type == PieceType.KING:
            self._finish(piece.color, GameOverReason.KING_CAPTURED)
        return True

    def pass_turn(self) -> bool:
        """Hand the move to the other side without moving."""
        session = self._session
        if session.phase != GamePhase.PLAYING:
            return False
        session.active_color = session.active_color.opposite
        session.refresh_notation()
        return True

    def get_best_move(self, advisor: IMoveAdvisor) -> MoveSuggestion | None:
        """Ask *advisor* for a move in the current position."""
        if self._session.phase != GamePhase.PLAYING:
            return None
        try:
            return advisor.suggest(self._session.notation)
        except Exception:
            _LOGGER.warning("Move advisor failed", exc_info=True)
            return None

    def apply_suggested_move(
        self, suggestion: MoveSuggestion, expected_notation: str | None = None
    ) -> bool:
        """Apply *suggestion* if it still fits the current position.

        *expected_notation* is the position the suggestion was computed for;
        a mismatch means the board moved on and the suggestion is dropped.
        """
        if self._session.phase != GamePhase.PLAYING:
            return False
        if expected_notation is not None and expected_notation != self._session.notation:
            _LOGGER.debug("Dropping stale suggestion %s", suggestion)
            return False
        return self.move_piece(suggestion.from_cell, suggestion.to_cell)

    # ── Read model ───────────────────────────────────────────────────────

    def snapshot(self) -> PuzzleSnapshot:
        session = self._session
        board = tuple(
            tuple(piece.char if piece is not None else None for piece in row)
            for row in session.board.rows()
        )
        return PuzzleSnapshot(
            board=board,
            own_pieces=tuple(PieceView.of(p) for p in session.own_pieces),
            opponent_pieces=tuple(PieceView.of(p) for p in session.opponent_pieces),
            phase=session.phase,
            notation=session.notation,
            remaining_budget=session.budget.remaining,
            active_color=session.active_color,
            available_pieces=tuple(self.available_pieces()),
            winner=session.winner,
        )

    # ── Internal ─────────────────────────────────────────────────────────

    def _next_id(self, piece_type: PieceType, color: Color) -> str:
        return f"{color}-{piece_type}-{next(self._ids)}"

    def _set_phase(self, phase: GamePhase) -> None:
        current = self._session.phase
        if current == phase:
            return
        if not can_transition(current, phase):
            raise RuntimeError(f"Illegal phase transition {current.name} -> {phase.name}")
        _LOGGER.debug("Phase %s -> %s", current.name, phase.name)
        self._session.phase = phase

    def _finish(self, winner: Color, reason: GameOverReason) -> None:
        self._session.winner = winner
        self._session.game_over_reason = reason
        self._set_phase(GamePhase.GAME_OVER)

    def _draggable(self, piece_id: str) -> tuple[Piece | None, PlacementOutcome]:
        """Look up a piece the player may drag during preparation."""
        session = self._session
        if session.phase != GamePhase.PREPARATION:
            return None, PlacementOutcome.rejected(Rejection.WRONG_PHASE, piece_id)
        piece = session.find_piece(piece_id)
        if piece is None or not piece.is_on_board:
            return None, PlacementOutcome.rejected(Rejection.UNKNOWN_PIECE, piece_id)
        if not piece.budgeted:
            return None, PlacementOutcome.rejected(Rejection.LOCKED, piece_id)
        return piece, PlacementOutcome.placed(piece_id)

    def _adopt(self, piece: Piece | None) -> None:
        """Register a piece just bought from the tray."""
        if piece is None:
            return
        self._session.own_pieces.append(piece)
        self._session.refresh_notation()

    def _after_board_drop(
        self, piece: Piece, outcome: PlacementOutcome
    ) -> PlacementOutcome:
        if outcome.kind == OutcomeKind.REMOVED:
            self._session.discard(piece)
        self._session.refresh_notation()
        return outcome
