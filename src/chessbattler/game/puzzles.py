"""Built-in puzzle catalog."""

from __future__ import annotations

import random

from chessbattler.game.puzzle import PuzzleDefinition

PUZZLES: tuple[PuzzleDefinition, ...] = (
    PuzzleDefinition(
        id="puzzle-1",
        name="Pawn Defense",
        description="Set up your pieces to counter the opponent's pawn formation.",
        difficulty=1,
        max_player_value=15,
        notation="r1k1r/1ppp1/5/5/5 w",
    ),
    PuzzleDefinition(
        id="puzzle-2",
        name="Queen Challenge",
        description="Deal with a powerful queen and her knights.",
        difficulty=2,
        max_player_value=18,
        notation="1nkn1/2q2/1p1p1/5/5 w",
    ),
    PuzzleDefinition(
        id="puzzle-3",
        name="Bishop Challenge",
        description="Beware of the bishops controlling diagonals.",
        difficulty=2,
        max_player_value=16,
        notation="r1k2/1b1b1/p3p/5/5 w",
    ),
    PuzzleDefinition(
        id="puzzle-4",
        name="Knight Ambush",
        description="A formation of knights threatens your position.",
        difficulty=3,
        max_player_value=20,
        notation="k3b/rn1n1/2n2/5/5 w",
    ),
    PuzzleDefinition(
        id="puzzle-5",
        name="Rook Fortress",
        description="Break through the opponent's rook defense.",
        difficulty=3,
        max_player_value=22,
        notation="r1k1r/1p1p1/r4/5/5 w",
    ),
)


def get_puzzle_by_id(puzzle_id: str) -> PuzzleDefinition:
    """Look up a puzzle; unknown ids fall back to the first one."""
    for puzzle in PUZZLES:
        if puzzle.id == puzzle_id:
            return puzzle
    return PUZZLES[0]


def get_random_puzzle(rng: random.Random | None = None) -> PuzzleDefinition:
    return (rng or random).choice(PUZZLES)
