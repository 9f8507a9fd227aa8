"""Move-suggestion models and protocol."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

from chessbattler.core.types import Cell, cell_name, parse_cell


@dataclass(slots=True, frozen=True)
class MoveSuggestion:
    """A suggested move for the side to move."""

    from_cell: Cell
    to_cell: Cell

    @classmethod
    def parse(cls, text: str) -> MoveSuggestion:
        """Parse coordinate form, e.g. ``'c5c3'``."""
        text = text.strip()
        if len(text) != 4:
            raise ValueError(f"Invalid move text: {text!r}")
        return cls(parse_cell(text[:2]), parse_cell(text[2:]))

    def __str__(self) -> str:
        return f"{cell_name(self.from_cell)}{cell_name(self.to_cell)}"


class IMoveAdvisor(Protocol):
    """Protocol for move-suggestion services used by the game layer.

    ``suggest`` receives the current notation string and may block. Returning
    ``None`` means "no move available"; raising is treated the same way.
    """

    def suggest(self, notation: str) -> MoveSuggestion | None: ...


class NullAdvisor:
    """Never suggests anything; the opponent always passes."""

    __slots__ = ()

    def suggest(self, notation: str) -> MoveSuggestion | None:
        return None


class ScriptedAdvisor:
    """Plays back predetermined suggestions.

    Suggestions keyed by notation take priority; otherwise the queued
    ``moves`` are handed out in order. Used by tests and demo puzzles.
    """

    __slots__ = ("_by_notation", "_queue", "calls")

    def __init__(
        self,
        moves: Iterable[MoveSuggestion | str] = (),
        by_notation: Mapping[str, MoveSuggestion | str] | None = None,
    ) -> None:
        self._queue: deque[MoveSuggestion] = deque(_coerce(m) for m in moves)
        self._by_notation = {
            key: _coerce(value) for key, value in (by_notation or {}).items()
        }
        self.calls: list[str] = []

    def suggest(self, notation: str) -> MoveSuggestion | None:
        self.calls.append(notation)
        if notation in self._by_notation:
            return self._by_notation[notation]
        if self._queue:
            return self._queue.popleft()
        return None


def _coerce(move: MoveSuggestion | str) -> MoveSuggestion:
    if isinstance(move, MoveSuggestion):
        return move
    return MoveSuggestion.parse(move)
