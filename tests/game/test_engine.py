"""Tests for PuzzleEngine."""

import logging

import pytest

from chessbattler.core.enums import Color, PieceType
from chessbattler.core.placement import OutcomeKind, Rejection
from chessbattler.core.types import Cell, parse_cell
from chessbattler.engine.advisor import MoveSuggestion, ScriptedAdvisor
from chessbattler.game.engine import PuzzleEngine
from chessbattler.game.interfaces import GameOverReason, GamePhase
from chessbattler.game.puzzle import InvalidPuzzleError, PuzzleDefinition
from chessbattler.game.puzzles import get_puzzle_by_id

EMPTY = {"maxPlayerValue": 15, "notationString": "5/5/5/5/5 w"}


def _engine_in_preparation(data: dict[str, object] | None = None) -> PuzzleEngine:
    engine = PuzzleEngine()
    engine.start_puzzle(data or EMPTY)
    return engine


def _engine_playing(data: dict[str, object]) -> PuzzleEngine:
    engine = _engine_in_preparation(data)
    engine.start_playing()
    return engine


class _FailingAdvisor:
    def suggest(self, notation: str) -> MoveSuggestion | None:
        raise RuntimeError("advisor down")


class TestLifecycle:
    def test_initial_phase_is_menu(self) -> None:
        engine = PuzzleEngine()
        assert engine.phase == GamePhase.MENU
        assert engine.notation == "5/5/5/5/5 w"

    def test_scenario_a_empty_puzzle(self) -> None:
        engine = _engine_in_preparation()
        snap = engine.snapshot()
        assert snap.phase == GamePhase.PREPARATION
        assert snap.remaining_budget == 15
        assert all(cell is None for row in snap.board for cell in row)
        assert len(snap.board) == 5 and all(len(row) == 5 for row in snap.board)

    def test_pieces_partitioned_by_color(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 10, "notationString": "r1k1r/1ppp1/5/5/2K2 w"}
        )
        session = engine.session
        assert [p.piece_type for p in session.own_pieces] == [PieceType.KING]
        assert len(session.opponent_pieces) == 6
        assert all(p.color == Color.BLACK for p in session.opponent_pieces)
        assert session.budget.max_value == 10

    def test_active_color_from_notation(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 10, "notationString": "2k2/5/5/5/5 b"}
        )
        assert engine.active_color == Color.BLACK

    def test_legacy_notation_is_normalised(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 15, "fen": "r1k1r/1ppp1/5/5/5 w - - 0 1"}
        )
        assert engine.notation == "r1k1r/1ppp1/5/5/5 w"

    def test_piece_ids_unique_across_loads(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 15, "notationString": "ppppp/5/5/5/5 w"}
        )
        first = {p.id for p in engine.session.opponent_pieces}
        engine.start_puzzle({"maxPlayerValue": 15, "notationString": "ppppp/5/5/5/5 w"})
        second = {p.id for p in engine.session.opponent_pieces}
        assert len(first) == 5
        assert not first & second

    @pytest.mark.parametrize(
        "data",
        [
            {"maxPlayerValue": 15},
            {"maxPlayerValue": 15, "notationString": "5/5/5 w"},
            {"maxPlayerValue": 15, "notationString": "x4/5/5/5/5 w"},
            {"maxPlayerValue": 15, "notationString": "5/5/5/5/5 w", "solution": "zz"},
        ],
    )
    def test_invalid_puzzle_raises(self, data: dict[str, object]) -> None:
        engine = PuzzleEngine()
        with pytest.raises(InvalidPuzzleError):
            engine.start_puzzle(data)

    def test_invalid_puzzle_leaves_session_untouched(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.ROOK, Cell(4, 0))
        with pytest.raises(InvalidPuzzleError):
            engine.start_puzzle({"maxPlayerValue": 15, "notationString": "bad"})
        assert engine.phase == GamePhase.PREPARATION
        assert engine.session.budget.used_value == 5

    def test_start_puzzle_from_playing_resets(self) -> None:
        engine = _engine_playing(EMPTY)
        engine.start_puzzle(get_puzzle_by_id("puzzle-2"))
        assert engine.phase == GamePhase.PREPARATION
        assert engine.session.budget.max_value == 18
        assert engine.session.own_pieces == []

    def test_reset_returns_to_menu(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.QUEEN, Cell(4, 2))
        engine.reset()
        assert engine.phase == GamePhase.MENU
        assert engine.session.own_pieces == []
        assert engine.session.budget.used_value == 0
        assert engine.notation == "5/5/5/5/5 w"

    def test_start_playing_only_from_preparation(self) -> None:
        engine = PuzzleEngine()
        assert not engine.start_playing()
        engine.start_puzzle(EMPTY)
        assert engine.start_playing()
        assert engine.phase == GamePhase.PLAYING
        assert not engine.start_playing()

    def test_start_playing_keeps_board(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.ROOK, Cell(4, 0))
        before = engine.notation
        engine.start_playing()
        assert engine.notation == before


class TestPreparation:
    def test_scenario_b_budget(self) -> None:
        engine = _engine_in_preparation()
        assert engine.place_piece(PieceType.QUEEN, Cell(4, 0)).ok
        assert engine.place_piece(PieceType.ROOK, Cell(4, 1)).ok
        budget = engine.session.budget
        assert budget.used_value == 14
        assert budget.remaining == 1

        outcome = engine.place_piece(PieceType.BISHOP, Cell(4, 2))
        assert outcome.kind == OutcomeKind.REJECTED
        assert outcome.reason == Rejection.UNAFFORDABLE
        assert budget.used_value == 14
        assert engine.session.board[Cell(4, 2)] is None

    def test_place_updates_collection_and_notation(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.KNIGHT, Cell(4, 1))
        assert len(engine.session.own_pieces) == 1
        assert engine.notation == "5/5/5/5/1N3 w"

    def test_place_on_occupied_cell(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 15, "notationString": "2k2/5/5/5/5 w"}
        )
        outcome = engine.place_piece(PieceType.PAWN, Cell(0, 2))
        assert outcome.reason == Rejection.OCCUPIED
        assert engine.session.budget.used_value == 0

    def test_king_cannot_be_bought(self) -> None:
        engine = _engine_in_preparation()
        outcome = engine.place_piece(PieceType.KING, Cell(4, 2))
        assert outcome.reason == Rejection.UNKNOWN_PIECE

    @pytest.mark.parametrize("phase", ["menu", "playing"])
    def test_phase_guard(self, phase: str) -> None:
        engine = PuzzleEngine()
        if phase == "playing":
            engine.start_puzzle(EMPTY)
            engine.start_playing()
        before = engine.notation
        used = engine.session.budget.used_value
        outcome = engine.place_piece(PieceType.PAWN, Cell(4, 0))
        assert outcome.reason == Rejection.WRONG_PHASE
        assert engine.notation == before
        assert engine.session.budget.used_value == used

    def test_budget_invariant_over_many_placements(self) -> None:
        engine = _engine_in_preparation()
        types = [PieceType.QUEEN, PieceType.KNIGHT, PieceType.BISHOP, PieceType.PAWN]
        for i in range(25):
            engine.place_piece(types[i % len(types)], Cell(i // 5, i % 5))
            budget = engine.session.budget
            assert budget.used_value <= budget.max_value
            budgeted = sum(p.value for p in engine.session.own_pieces if p.budgeted)
            assert budgeted == budget.used_value

    def test_relocate(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.ROOK, Cell(4, 0))
        piece = engine.session.own_pieces[0]
        assert engine.relocate_piece(piece.id, Cell(3, 3)).ok
        assert piece.cell == Cell(3, 3)
        assert engine.notation == "5/5/5/3R1/5 w"

    def test_puzzle_pieces_are_locked(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 15, "notationString": "2k2/5/5/5/2K2 w"}
        )
        king = engine.session.own_pieces[0]
        assert engine.relocate_piece(king.id, Cell(3, 3)).reason == Rejection.LOCKED
        assert engine.remove_piece(king.id).reason == Rejection.LOCKED

    def test_unknown_piece(self) -> None:
        engine = _engine_in_preparation()
        assert engine.remove_piece("ghost").reason == Rejection.UNKNOWN_PIECE

    def test_remove_refunds(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.QUEEN, Cell(4, 2))
        piece_id = engine.session.own_pieces[0].id
        outcome = engine.remove_piece(piece_id)
        assert outcome.kind == OutcomeKind.REMOVED
        assert engine.session.own_pieces == []
        assert engine.session.budget.used_value == 0
        assert engine.notation == "5/5/5/5/5 w"

    def test_drop_board_piece_off_board(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.ROOK, Cell(4, 0))
        piece_id = engine.session.own_pieces[0].id
        outcome = engine.drop_board_piece(piece_id, (0.0, 5.0))
        assert outcome.kind == OutcomeKind.REMOVED
        assert engine.session.own_pieces == []
        assert engine.session.budget.used_value == 0

    def test_drop_tray_piece(self) -> None:
        engine = _engine_in_preparation()
        outcome = engine.drop_tray_piece(PieceType.BISHOP, 2, (0.0, 2.0))
        assert outcome.kind == OutcomeKind.PLACED
        assert engine.session.own_pieces[0].cell == Cell(4, 2)
        assert engine.session.budget.used_value == 3

    def test_drop_tray_piece_near_tray(self) -> None:
        engine = _engine_in_preparation()
        outcome = engine.drop_tray_piece(PieceType.BISHOP, 2, (0.0, 3.2))
        assert outcome.kind == OutcomeKind.RETURNED_TO_TRAY
        assert engine.session.own_pieces == []

    def test_two_phase_drag(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.KNIGHT, Cell(4, 1))
        piece = engine.session.own_pieces[0]
        pending = engine.begin_move(piece.id)
        assert pending is not None
        outcome = engine.commit_move(pending, Cell(2, 2))
        assert outcome.ok
        assert engine.notation == "5/5/2N2/5/5 w"

    def test_commit_after_reset_is_rejected(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.KNIGHT, Cell(4, 1))
        pending = engine.begin_move(engine.session.own_pieces[0].id)
        assert pending is not None
        engine.start_puzzle(EMPTY)
        outcome = engine.commit_move(pending, Cell(2, 2))
        assert outcome.reason == Rejection.STALE
        assert engine.session.board[Cell(2, 2)] is None

    def test_available_pieces_track_budget(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.QUEEN, Cell(4, 0))
        affordable = [t.piece_type for t in engine.available_pieces() if t.is_affordable]
        assert affordable == [
            PieceType.PAWN,
            PieceType.KNIGHT,
            PieceType.BISHOP,
            PieceType.ROOK,
        ]


class TestPlay:
    SOLVABLE = {
        "maxPlayerValue": 15,
        "notationString": "2k2/5/5/5/5 w",
        "solution": "c1c5",
    }

    def _ready(self) -> PuzzleEngine:
        engine = _engine_in_preparation(self.SOLVABLE)
        engine.place_piece(PieceType.ROOK, parse_cell("c1"))
        engine.place_piece(PieceType.PAWN, parse_cell("a1"))
        engine.start_playing()
        return engine

    def test_move_piece_updates_notation_and_turn(self) -> None:
        engine = self._ready()
        assert engine.move_piece(parse_cell("a1"), parse_cell("a2"))
        assert engine.active_color == Color.BLACK
        assert engine.notation == "2k2/5/5/P4/2R2 b"
        assert len(engine.session.move_history) == 1

    def test_move_requires_playing(self) -> None:
        engine = _engine_in_preparation()
        engine.place_piece(PieceType.ROOK, Cell(4, 0))
        assert not engine.move_piece(Cell(4, 0), Cell(3, 0))

    def test_move_from_empty_cell(self, caplog: pytest.LogCaptureFixture) -> None:
        engine = self._ready()
        with caplog.at_level(logging.WARNING, logger="chessbattler.game.engine"):
            assert not engine.move_piece(Cell(2, 2), Cell(2, 3))
        assert "empty cell" in caplog.text

    def test_move_wrong_color(self) -> None:
        engine = self._ready()
        assert not engine.move_piece(parse_cell("c5"), parse_cell("c4"))

    def test_move_onto_own_piece(self) -> None:
        engine = self._ready()
        before = engine.notation
        assert not engine.move_piece(parse_cell("a1"), parse_cell("c1"))
        assert engine.notation == before

    def test_scenario_d_solution(self) -> None:
        engine = self._ready()
        assert engine.check_solution(parse_cell("c1"), parse_cell("c5"))
        assert not engine.check_solution(parse_cell("a1"), parse_cell("a2"))
        assert engine.move_piece(parse_cell("c1"), parse_cell("c5"))
        assert engine.phase == GamePhase.GAME_OVER
        assert engine.winner == Color.WHITE
        assert engine.session.game_over_reason == GameOverReason.SOLVED

    def test_check_solution_without_solution(self) -> None:
        engine = _engine_playing(EMPTY)
        assert not engine.check_solution(Cell(0, 0), Cell(1, 1))

    def test_san_solution(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 15, "notationString": "2k2/5/5/5/5 w", "solution": "Rc4"}
        )
        engine.place_piece(PieceType.ROOK, parse_cell("c1"))
        engine.start_playing()
        assert engine.move_piece(parse_cell("c1"), parse_cell("c4"))
        assert engine.phase == GamePhase.GAME_OVER

    def test_capture_removes_opponent_piece(self) -> None:
        engine = _engine_playing(
            {"maxPlayerValue": 15, "notationString": "k4/5/p4/5/R4 w"}
        )
        assert engine.move_piece(parse_cell("a1"), parse_cell("a3"))
        assert len(engine.session.opponent_pieces) == 1
        assert engine.session.move_history[-1].captured_id is not None
        assert engine.phase == GamePhase.PLAYING

    def test_king_capture_ends_game(self) -> None:
        engine = _engine_playing(
            {"maxPlayerValue": 15, "notationString": "k4/5/5/5/R4 b"}
        )
        assert engine.pass_turn()
        assert engine.move_piece(parse_cell("a1"), parse_cell("a5"))
        assert engine.phase == GamePhase.GAME_OVER
        assert engine.winner == Color.WHITE
        assert engine.session.game_over_reason == GameOverReason.KING_CAPTURED

    def test_no_moves_after_game_over(self) -> None:
        engine = self._ready()
        engine.move_piece(parse_cell("c1"), parse_cell("c5"))
        assert not engine.move_piece(parse_cell("a1"), parse_cell("a2"))

    def test_restart_puzzle(self) -> None:
        engine = self._ready()
        assert not engine.restart_puzzle()
        engine.move_piece(parse_cell("c1"), parse_cell("c5"))
        assert engine.restart_puzzle()
        assert engine.phase == GamePhase.PREPARATION
        assert engine.notation == "2k2/5/5/5/5 w"
        assert engine.winner is None

    def test_pass_turn_requires_playing(self) -> None:
        assert not _engine_in_preparation().pass_turn()

    def test_occupancy_after_moves(self) -> None:
        engine = self._ready()
        engine.move_piece(parse_cell("a1"), parse_cell("a2"))
        engine.move_piece(parse_cell("c5"), parse_cell("c2"))
        engine.move_piece(parse_cell("c1"), parse_cell("c2"))
        seen = [p for _, p in engine.session.board.cells() if p is not None]
        assert len(seen) == len({id(p) for p in seen})
        assert all(p.cell is not None for p in seen)


class TestSuggestions:
    def _opponent_turn(self) -> PuzzleEngine:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 15, "notationString": "2k2/5/5/5/5 w"}
        )
        engine.place_piece(PieceType.PAWN, parse_cell("a1"))
        engine.start_playing()
        engine.move_piece(parse_cell("a1"), parse_cell("a2"))
        return engine

    def test_get_best_move_delegates(self) -> None:
        engine = self._opponent_turn()
        advisor = ScriptedAdvisor(["c5c4"])
        suggestion = engine.get_best_move(advisor)
        assert suggestion == MoveSuggestion.parse("c5c4")
        assert advisor.calls == [engine.notation]

    def test_get_best_move_outside_play(self) -> None:
        engine = _engine_in_preparation()
        assert engine.get_best_move(ScriptedAdvisor(["c5c4"])) is None

    def test_advisor_failure_is_no_move(self, caplog: pytest.LogCaptureFixture) -> None:
        engine = self._opponent_turn()
        with caplog.at_level(logging.WARNING, logger="chessbattler.game.engine"):
            assert engine.get_best_move(_FailingAdvisor()) is None
        assert "advisor failed" in caplog.text

    def test_apply_suggestion(self) -> None:
        engine = self._opponent_turn()
        notation = engine.notation
        assert engine.apply_suggested_move(MoveSuggestion.parse("c5c4"), notation)
        assert engine.active_color == Color.WHITE

    def test_stale_suggestion_is_dropped(self) -> None:
        engine = self._opponent_turn()
        assert not engine.apply_suggested_move(
            MoveSuggestion.parse("c5c4"), "5/5/5/5/5 b"
        )
        assert engine.active_color == Color.BLACK

    def test_suggestion_from_empty_cell_is_rejected(self) -> None:
        engine = self._opponent_turn()
        assert not engine.apply_suggested_move(MoveSuggestion.parse("e5e4"))


class TestSnapshot:
    def test_snapshot_fields(self) -> None:
        engine = _engine_in_preparation(
            {"maxPlayerValue": 15, "notationString": "2k2/5/5/5/5 w"}
        )
        engine.place_piece(PieceType.ROOK, Cell(4, 2))
        snap = engine.snapshot()
        assert snap.board[0][2] == "k"
        assert snap.board[4][2] == "R"
        assert snap.remaining_budget == 10
        assert snap.own_pieces[0].cell == Cell(4, 2)
        assert snap.opponent_pieces[0].piece_type == PieceType.KING
        assert len(snap.available_pieces) == 5
        assert snap.winner is None

    def test_definition_object_accepted(self) -> None:
        engine = PuzzleEngine()
        engine.start_puzzle(PuzzleDefinition("id", "Name", 1, 7, "5/5/5/5/5 w"))
        assert engine.snapshot().remaining_budget == 7
