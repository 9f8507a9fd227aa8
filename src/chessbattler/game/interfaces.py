"""Phase machine states and legal transitions."""

from __future__ import annotations

from enum import IntEnum, auto


class GamePhase(IntEnum):
    """Finite-state-machine states for a puzzle session."""

    MENU = auto()
    PREPARATION = auto()
    PLAYING = auto()
    GAME_OVER = auto()


# Legal transitions. ``reset`` (→ MENU) is allowed from every phase.
PHASE_TRANSITIONS: dict[GamePhase, frozenset[GamePhase]] = {
    GamePhase.MENU: frozenset({GamePhase.PREPARATION}),
    GamePhase.PREPARATION: frozenset({GamePhase.PLAYING, GamePhase.MENU}),
    GamePhase.PLAYING: frozenset({GamePhase.GAME_OVER, GamePhase.MENU}),
    GamePhase.GAME_OVER: frozenset({GamePhase.PREPARATION, GamePhase.MENU}),
}


def can_transition(current: GamePhase, target: GamePhase) -> bool:
    return target == GamePhase.MENU or target in PHASE_TRANSITIONS[current]


class GameOverReason(IntEnum):
    NONE = 0
    SOLVED = auto()
    KING_CAPTURED = auto()
