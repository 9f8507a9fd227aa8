"""Game layer: puzzle phase machine, session state, countdown and catalog.

Quick start::

    from chessbattler.core import Cell, PieceType
    from chessbattler.game import PuzzleEngine, get_puzzle_by_id

    engine = PuzzleEngine()
    engine.start_puzzle(get_puzzle_by_id("puzzle-1"))
    engine.place_piece(PieceType.QUEEN, Cell(3, 2))
    engine.start_playing()
"""

from chessbattler.game.countdown import (
    DEFAULT_PREPARATION_TICKS,
    CountdownSnapshot,
    PreparationCountdown,
)
from chessbattler.game.engine import PuzzleEngine
from chessbattler.game.interfaces import GameOverReason, GamePhase, can_transition
from chessbattler.game.puzzle import InvalidPuzzleError, PuzzleDefinition, SolutionMove
from chessbattler.game.puzzles import PUZZLES, get_puzzle_by_id, get_random_puzzle
from chessbattler.game.state import (
    GameSession,
    MoveRecord,
    PieceView,
    PuzzleSnapshot,
)

__all__ = [
    # Phase machine
    "GameOverReason",
    "GamePhase",
    "PuzzleEngine",
    "can_transition",
    # State
    "GameSession",
    "MoveRecord",
    "PieceView",
    "PuzzleSnapshot",
    # Countdown
    "CountdownSnapshot",
    "DEFAULT_PREPARATION_TICKS",
    "PreparationCountdown",
    # Puzzles
    "InvalidPuzzleError",
    "PUZZLES",
    "PuzzleDefinition",
    "SolutionMove",
    "get_puzzle_by_id",
    "get_random_puzzle",
]
