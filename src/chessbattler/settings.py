"""User-tunable settings for a puzzle session."""

from __future__ import annotations

from dataclasses import dataclass

from chessbattler.core.budget import DEFAULT_MAX_VALUE
from chessbattler.core.enums import Color
from chessbattler.core.placement import (
    DEFAULT_DISCARD_DISTANCE,
    DEFAULT_TRAY_DEPTH,
    DEFAULT_TRAY_SPACING,
    TrayGeometry,
)


@dataclass
class PuzzleSettings:
    """All session tunables."""

    # Preparation countdown
    preparation_ticks: int = 60
    tick_interval_ms: int = 1000

    # Opponent
    opponent_move_delay_ms: int = 800

    # Budget used when a puzzle does not declare one
    default_budget: int = DEFAULT_MAX_VALUE

    # Tray / drag-and-drop
    discard_distance: float = DEFAULT_DISCARD_DISTANCE
    tray_depth: float = DEFAULT_TRAY_DEPTH
    tray_spacing: float = DEFAULT_TRAY_SPACING

    player_color: Color = Color.WHITE

    def tray_geometry(self) -> TrayGeometry:
        return TrayGeometry(
            spacing=self.tray_spacing,
            depth=self.tray_depth,
            discard_distance=self.discard_distance,
        )
