"""Qt-driven session controller."""

from chessbattler.session.puzzle_session import PuzzleSession

__all__ = ["PuzzleSession"]
