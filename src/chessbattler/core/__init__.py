"""Core domain layer: pure puzzle-board logic with zero external dependencies.

Quick start::

    from chessbattler.core import PieceBudget, decode, encode_board

    decoded = decode("r1k1r/1ppp1/5/5/5 w")
    print(encode_board(decoded.board, decoded.active_color))
"""

from chessbattler.core.board import Board
from chessbattler.core.budget import (
    DEFAULT_MAX_VALUE,
    TRAY_PIECE_TYPES,
    PieceBudget,
    TrayTemplate,
)
from chessbattler.core.enums import Color, PieceType
from chessbattler.core.notation import (
    EMPTY_NOTATION,
    DecodedBoard,
    NotationError,
    decode,
    encode,
    encode_board,
    is_valid_notation,
)
from chessbattler.core.piece import (
    PIECE_VALUES,
    REMOVED,
    InTray,
    Location,
    OnBoard,
    Piece,
    Removed,
)
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
    cell_center,
    resolve_cell_from_point,
)
from chessbattler.core.types import (
    BOARD_SIZE,
    Cell,
    all_cells,
    cell_name,
    is_valid_cell,
    parse_cell,
)

__all__ = [
    # Enums
    "Color",
    "PieceType",
    # Types / helpers
    "BOARD_SIZE",
    "Cell",
    "all_cells",
    "cell_name",
    "is_valid_cell",
    "parse_cell",
    # Domain objects
    "Board",
    "InTray",
    "Location",
    "OnBoard",
    "PIECE_VALUES",
    "Piece",
    "REMOVED",
    "Removed",
    # Budget
    "DEFAULT_MAX_VALUE",
    "PieceBudget",
    "TRAY_PIECE_TYPES",
    "TrayTemplate",
    # Notation
    "DecodedBoard",
    "EMPTY_NOTATION",
    "NotationError",
    "decode",
    "encode",
    "encode_board",
    "is_valid_notation",
    # Placement
    "OutcomeKind",
    "PendingMove",
    "PlacementOutcome",
    "PlacementResolver",
    "Point",
    "Rejection",
    "TrayGeometry",
    "attempt_placement",
    "attempt_tray_placement",
    "cell_center",
    "resolve_cell_from_point",
]
