"""Point budget for pieces bought during preparation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chessbattler.core.enums import Color, PieceType
from chessbattler.core.piece import PIECE_VALUES

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_VALUE = 15

# Piece types offered in the tray, in slot order. The king is never bought.
TRAY_PIECE_TYPES: tuple[PieceType, ...] = (
    PieceType.PAWN,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)


@dataclass(frozen=True, slots=True)
class TrayTemplate:
    """One tray slot as shown to the player."""

    slot: int
    piece_type: PieceType
    color: Color
    value: int
    is_affordable: bool


class PieceBudget:
    """Tracks the point allowance and cumulative spend of one side."""

    __slots__ = ("_max_value", "_used_value", "_values")

    def __init__(
        self,
        max_value: int = DEFAULT_MAX_VALUE,
        values: dict[PieceType, int] | None = None,
    ) -> None:
        self._values = dict(PIECE_VALUES if values is None else values)
        self._max_value = max_value
        self._used_value = 0

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def max_value(self) -> int:
        return self._max_value

    @property
    def used_value(self) -> int:
        return self._used_value

    @property
    def remaining(self) -> int:
        return self._max_value - self._used_value

    def value_of(self, piece_type: PieceType) -> int:
        return self._values[piece_type]

    # ── Operations ───────────────────────────────────────────────────────

    def reset(self, max_value: int = DEFAULT_MAX_VALUE) -> None:
        self._max_value = max_value
        self._used_value = 0

    def can_afford(self, piece_type: PieceType) -> bool:
        return self._used_value + self._values[piece_type] <= self._max_value

    def reserve(self, piece_type: PieceType) -> bool:
        """Spend the value of *piece_type*. No change when unaffordable."""
        if not self.can_afford(piece_type):
            return False
        self._used_value += self._values[piece_type]
        return True

    def release(self, piece_type: PieceType) -> None:
        """Give back the value of *piece_type*.

        Releasing more than was reserved is a caller bug; the counter is
        floored at zero so the session stays usable.
        """
        value = self._values[piece_type]
        if value > self._used_value:
            _LOGGER.warning(
                "Budget release of %s (%d) exceeds used value %d",
                piece_type,
                value,
                self._used_value,
            )
        self._used_value = max(0, self._used_value - value)

    def available_pieces(self, color: Color) -> list[TrayTemplate]:
        """Tray templates with their current affordability."""
        return [
            TrayTemplate(
                slot=slot,
                piece_type=piece_type,
                color=color,
                value=self._values[piece_type],
                is_affordable=self.can_afford(piece_type),
            )
            for slot, piece_type in enumerate(TRAY_PIECE_TYPES)
        ]

    def __repr__(self) -> str:
        return f"PieceBudget(used={self._used_value}, max={self._max_value})"
