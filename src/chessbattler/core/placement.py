"""Placement resolver: continuous drop points to validated board mutations.

Coordinates are viewer-space points ``(x, z)`` on the table plane, one unit
per cell, origin at the board centre, x towards higher columns and z towards
higher rows (towards the player sitting on the white side). Cell centres sit
at ``(col - N/2 + 0.5, row - N/2 + 0.5)``.

When black is active the board is shown rotated by 180°: stored cells never
change, instead both axes of the incoming point are negated before snapping.
The tray stays in front of the viewer and is not rotated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import TypeAlias

from chessbattler.core.board import Board
from chessbattler.core.budget import TRAY_PIECE_TYPES, PieceBudget
from chessbattler.core.enums import Color, PieceType
from chessbattler.core.piece import Location, Piece
from chessbattler.core.types import Cell

Point: TypeAlias = tuple[float, float]

DEFAULT_TRAY_SPACING = 0.8
DEFAULT_TRAY_DEPTH = 3.0
DEFAULT_DISCARD_DISTANCE = 2.5


class OutcomeKind(IntEnum):
    PLACED = auto()
    REJECTED = auto()
    REMOVED = auto()  # board piece dragged off the board
    RETURNED_TO_TRAY = auto()  # tray piece dropped off-board near the tray
    DISCARDED = auto()  # tray piece dropped far from the tray


class Rejection(IntEnum):
    OCCUPIED = auto()
    OUT_OF_BOUNDS = auto()
    UNAFFORDABLE = auto()
    WRONG_PHASE = auto()
    UNKNOWN_PIECE = auto()
    LOCKED = auto()  # puzzle-given pieces cannot be dragged
    STALE = auto()  # piece changed since the drag began


@dataclass(frozen=True, slots=True)
class PlacementOutcome:
    """Typed result of a placement attempt; rejections are not exceptions."""

    kind: OutcomeKind
    piece_id: str | None = None
    reason: Rejection | None = None

    @property
    def ok(self) -> bool:
        return self.kind != OutcomeKind.REJECTED

    @classmethod
    def placed(cls, piece_id: str) -> PlacementOutcome:
        return cls(OutcomeKind.PLACED, piece_id)

    @classmethod
    def rejected(
        cls, reason: Rejection, piece_id: str | None = None
    ) -> PlacementOutcome:
        return cls(OutcomeKind.REJECTED, piece_id, reason)


# ── Geometry ─────────────────────────────────────────────────────────────────


def _snap(value: float) -> int:
    """Round half-up (``round`` would use banker's rounding)."""
    return math.floor(value + 0.5)


def to_board_space(point: Point, active_color: Color) -> Point:
    """Undo the per-player board rotation."""
    x, z = point
    if active_color == Color.BLACK:
        return -x, -z
    return x, z


def resolve_cell_from_point(
    point: Point, board_size: int, active_color: Color
) -> Cell | None:
    """Nearest cell to a viewer-space *point*, or ``None`` off the board."""
    x, z = to_board_space(point, active_color)
    half = board_size / 2
    col = _snap(x + half - 0.5)
    row = _snap(z + half - 0.5)
    if not (0 <= row < board_size and 0 <= col < board_size):
        return None
    return Cell(row, col)


def cell_center(cell: Cell, board_size: int, active_color: Color) -> Point:
    """Viewer-space centre of *cell* (inverse of the snapping above)."""
    half = board_size / 2
    point = (cell.col - half + 0.5, cell.row - half + 0.5)
    return to_board_space(point, active_color)


@dataclass(frozen=True, slots=True)
class TrayGeometry:
    """Fixed tray layout in front of the viewer.

    ``discard_distance`` has no derivation; it is a tuning knob.
    """

    spacing: float = DEFAULT_TRAY_SPACING
    depth: float = DEFAULT_TRAY_DEPTH
    discard_distance: float = DEFAULT_DISCARD_DISTANCE

    def slot_position(self, slot: int) -> Point:
        middle = (len(TRAY_PIECE_TYPES) - 1) / 2
        return (slot - middle) * self.spacing, self.depth

    def is_beyond_discard(self, slot: int, point: Point) -> bool:
        sx, sz = self.slot_position(slot)
        return math.hypot(point[0] - sx, point[1] - sz) > self.discard_distance


# ── Single-step placements ───────────────────────────────────────────────────


def attempt_placement(cell: Cell, piece: Piece, board: Board) -> PlacementOutcome:
    """Move *piece* to *cell* if that cell is on the board and free.

    The old cell is vacated and the new one occupied in one step.
    """
    if not board.contains(cell):
        return PlacementOutcome.rejected(Rejection.OUT_OF_BOUNDS, piece.id)
    occupant = board[cell]
    if occupant is not None and occupant is not piece:
        return PlacementOutcome.rejected(Rejection.OCCUPIED, piece.id)
    board.put(cell, piece)
    return PlacementOutcome.placed(piece.id)


def attempt_tray_placement(
    cell: Cell,
    piece_type: PieceType,
    color: Color,
    board: Board,
    budget: PieceBudget,
    piece_id: str,
) -> tuple[PlacementOutcome, Piece | None]:
    """Buy a *piece_type* and put it on *cell*, or change nothing.

    Returns the outcome and, when placed, the new piece.
    """
    if not board.contains(cell):
        return PlacementOutcome.rejected(Rejection.OUT_OF_BOUNDS), None
    if not board.is_empty(cell):
        return PlacementOutcome.rejected(Rejection.OCCUPIED), None
    if not budget.reserve(piece_type):
        return PlacementOutcome.rejected(Rejection.UNAFFORDABLE), None
    piece = Piece(piece_id, piece_type, color, budgeted=True)
    board.put(cell, piece)
    return PlacementOutcome.placed(piece_id), piece


# ── Drag resolution ──────────────────────────────────────────────────────────


@dataclass(slots=True)
class PendingMove:
    """Token returned by :meth:`PlacementResolver.begin_move`."""

    piece: Piece
    origin: Location
    is_open: bool = field(default=True)


class PlacementResolver:
    """Applies drag-and-drop results to a board and its budget."""

    __slots__ = ("_board", "_budget", "_tray")

    def __init__(
        self,
        board: Board,
        budget: PieceBudget,
        tray: TrayGeometry | None = None,
    ) -> None:
        self._board = board
        self._budget = budget
        self._tray = tray or TrayGeometry()

    @property
    def tray(self) -> TrayGeometry:
        return self._tray

    def resolve(self, point: Point, active_color: Color) -> Cell | None:
        return resolve_cell_from_point(point, self._board.size, active_color)

    def drop_board_piece(
        self, piece: Piece, point: Point, active_color: Color
    ) -> PlacementOutcome:
        """A piece already on the board was released at *point*.

        Off-board drops remove the piece and give back its value.
        """
        cell = self.resolve(point, active_color)
        if cell is None:
            self.remove(piece)
            return PlacementOutcome(OutcomeKind.REMOVED, piece.id)
        return attempt_placement(cell, piece, self._board)

    def drop_tray_piece(
        self,
        piece_type: PieceType,
        color: Color,
        slot: int,
        point: Point,
        active_color: Color,
        piece_id: str,
    ) -> tuple[PlacementOutcome, Piece | None]:
        """A tray template was released at *point*.

        Off-board drops never touch the budget: nothing was reserved yet.
        """
        cell = self.resolve(point, active_color)
        if cell is None:
            if self._tray.is_beyond_discard(slot, point):
                return PlacementOutcome(OutcomeKind.DISCARDED), None
            return PlacementOutcome(OutcomeKind.RETURNED_TO_TRAY), None
        return attempt_tray_placement(
            cell, piece_type, color, self._board, self._budget, piece_id
        )

    def remove(self, piece: Piece) -> None:
        """Take *piece* off the board, releasing its value if it was bought."""
        cell = piece.cell
        if cell is not None and self._board[cell] is piece:
            self._board.take(cell)
        if piece.budgeted:
            self._budget.release(piece.piece_type)
            piece.budgeted = False

    # -- Two-phase drag commit ----------------------------------------------

    def begin_move(self, piece: Piece) -> PendingMove:
        """Start a drag of *piece*; nothing is written until commit."""
        return PendingMove(piece, piece.location)

    def commit_move(
        self,
        pending: PendingMove,
        target: Point | Cell,
        active_color: Color,
    ) -> PlacementOutcome:
        """Finish a drag begun with :meth:`begin_move`."""
        piece = pending.piece
        if not pending.is_open or piece.location != pending.origin:
            pending.is_open = False
            return PlacementOutcome.rejected(Rejection.STALE, piece.id)
        pending.is_open = False
        if isinstance(target, Cell):
            return attempt_placement(target, piece, self._board)
        return self.drop_board_piece(piece, target, active_color)

    def cancel_move(self, pending: PendingMove) -> None:
        pending.is_open = False
