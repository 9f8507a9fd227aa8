"""Puzzle session orchestration for the main UI thread."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping
from typing import Any

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal

from chessbattler.core.enums import PieceType
from chessbattler.core.placement import PendingMove, PlacementOutcome, Point
from chessbattler.core.types import Cell
from chessbattler.engine.advisor import IMoveAdvisor, MoveSuggestion, NullAdvisor
from chessbattler.engine.qt_bridge import AdvisorWorker
from chessbattler.game.countdown import PreparationCountdown
from chessbattler.game.engine import PuzzleEngine
from chessbattler.game.interfaces import GamePhase
from chessbattler.game.puzzle import InvalidPuzzleError, PuzzleDefinition
from chessbattler.game.state import PuzzleSnapshot
from chessbattler.settings import PuzzleSettings

_LOGGER = logging.getLogger(__name__)

StateCallback = Callable[[PuzzleSnapshot], None]
CountdownCallback = Callable[[int], None]
ErrorCallback = Callable[[str], None]


class _AdvisorCommandBus(QObject):
    """Signal bridge for issuing worker requests with queued delivery."""

    suggestion_requested = pyqtSignal(str, int)


class PuzzleSession:
    """Drives one :class:`PuzzleEngine` with Qt timers.

    * a periodic countdown timer during PREPARATION that calls
      :meth:`start_playing` once when it runs out;
    * nested :meth:`pause` / :meth:`resume` that freeze the countdown;
    * a single-shot delay before each opponent move, whose suggestion
      comes from an advisor on a worker thread once :meth:`setup` ran
      (synchronously on the calling thread before that).

    Results from the worker are applied only when the request id, phase and
    notation they were computed for are still current.
    """

    __slots__ = (
        "__weakref__",
        "_settings",
        "_engine",
        "_advisor",
        "_countdown",
        "_on_state_changed",
        "_on_countdown",
        "_on_error",
        "_command_bus",
        "_countdown_timer",
        "_opponent_timer",
        "_advisor_thread",
        "_advisor_worker",
        "_request_id",
        "_pending_request",
        "_pending_notation",
        "_paused_drags",
        "_is_shutting_down",
        "_is_started",
        "_is_wired",
    )

    def __init__(
        self,
        *,
        settings: PuzzleSettings | None = None,
        advisor: IMoveAdvisor | None = None,
        on_state_changed: StateCallback | None = None,
        on_countdown: CountdownCallback | None = None,
        on_error: ErrorCallback | None = None,
        parent: QObject | None = None,
    ) -> None:
        self._settings = settings or PuzzleSettings()
        self._engine = PuzzleEngine(
            self._settings.player_color, self._settings.tray_geometry()
        )
        self._advisor: IMoveAdvisor = advisor or NullAdvisor()
        self._countdown = PreparationCountdown(self._settings.preparation_ticks)

        self._on_state_changed = on_state_changed
        self._on_countdown = on_countdown
        self._on_error = on_error

        self._command_bus = _AdvisorCommandBus(parent)
        self._countdown_timer = QTimer(parent)
        self._countdown_timer.setInterval(self._settings.tick_interval_ms)
        self._countdown_timer.timeout.connect(self._on_countdown_tick)

        self._opponent_timer = QTimer(parent)
        self._opponent_timer.setSingleShot(True)
        self._opponent_timer.timeout.connect(self._request_opponent_move)

        self._advisor_thread = QThread(parent)
        self._advisor_worker = AdvisorWorker(self._advisor)
        self._request_id = 0
        self._pending_request: int | None = None
        self._pending_notation: str | None = None
        self._paused_drags: list[PendingMove] = []
        self._is_shutting_down = False
        self._is_started = False
        self._is_wired = False

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def engine(self) -> PuzzleEngine:
        return self._engine

    @property
    def settings(self) -> PuzzleSettings:
        return self._settings

    @property
    def countdown(self) -> PreparationCountdown:
        return self._countdown

    @property
    def phase(self) -> GamePhase:
        return self._engine.phase

    @property
    def is_paused(self) -> bool:
        return self._countdown.is_paused

    @property
    def has_pending_opponent_move(self) -> bool:
        return self._opponent_timer.isActive() or self._pending_request is not None

    def snapshot(self) -> PuzzleSnapshot:
        return dataclasses.replace(
            self._engine.snapshot(),
            countdown_remaining=self._countdown.remaining,
            is_paused=self._countdown.is_paused,
        )

    # ── Worker lifecycle ─────────────────────────────────────────────────

    def setup(self) -> None:
        """Start the advisor worker in a dedicated thread."""
        if self._is_started:
            return
        self._is_shutting_down = False
        if not self._is_wired:
            # Worker and connections outlive shutdown; wire them once.
            self._advisor_worker.moveToThread(self._advisor_thread)
            self._command_bus.suggestion_requested.connect(
                self._advisor_worker.request_suggestion
            )
            self._advisor_worker.suggestion_ready.connect(self._on_suggestion_ready)
            self._advisor_worker.no_suggestion.connect(self._on_no_suggestion)
            self._advisor_worker.suggestion_error.connect(self._on_suggestion_error)
            self._is_wired = True
        self._advisor_thread.start()
        self._is_started = True

    def shutdown(self) -> None:
        """Stop every timer and the worker thread."""
        self._is_shutting_down = True
        self._stop_countdown()
        self.cancel_opponent_move()
        if not self._is_started:
            return
        self._advisor_thread.quit()
        self._advisor_thread.wait(2000)
        self._is_started = False

    # ── Lifecycle actions ────────────────────────────────────────────────

    def start_puzzle(self, definition: PuzzleDefinition | Mapping[str, Any]) -> bool:
        """Load a puzzle and start the preparation countdown.

        An invalid definition resets the session to MENU and is reported
        through ``on_error``.
        """
        self._release_drags()
        self._stop_countdown()
        self.cancel_opponent_move()
        try:
            if not isinstance(definition, PuzzleDefinition):
                definition = PuzzleDefinition.from_dict(
                    definition, self._settings.default_budget
                )
            self._engine.start_puzzle(definition)
        except InvalidPuzzleError as exc:
            _LOGGER.warning("Could not load puzzle: %s", exc)
            self._engine.reset()
            self._report_error(str(exc))
            self._notify()
            return False
        self._start_countdown()
        self._notify()
        return True

    def restart_puzzle(self) -> bool:
        if not self._engine.restart_puzzle():
            return False
        self._release_drags()
        self.cancel_opponent_move()
        self._start_countdown()
        self._notify()
        return True

    def reset(self) -> None:
        self._release_drags()
        self._stop_countdown()
        self.cancel_opponent_move()
        self._engine.reset()
        self._notify()

    def start_playing(self) -> bool:
        self._stop_countdown()
        if not self._engine.start_playing():
            return False
        self._notify()
        self._schedule_opponent_move()
        return True

    # ── Preparation actions ──────────────────────────────────────────────

    def pause(self) -> None:
        self._countdown.pause()
        self._notify()

    def resume(self) -> None:
        self._countdown.resume()
        self._notify()

    def place_piece(self, piece_type: PieceType, cell: Cell) -> PlacementOutcome:
        return self._after_placement(self._engine.place_piece(piece_type, cell))

    def relocate_piece(self, piece_id: str, cell: Cell) -> PlacementOutcome:
        return self._after_placement(self._engine.relocate_piece(piece_id, cell))

    def remove_piece(self, piece_id: str) -> PlacementOutcome:
        return self._after_placement(self._engine.remove_piece(piece_id))

    def drop_board_piece(self, piece_id: str, point: Point) -> PlacementOutcome:
        return self._after_placement(self._engine.drop_board_piece(piece_id, point))

    def drop_tray_piece(
        self, piece_type: PieceType, slot: int, point: Point
    ) -> PlacementOutcome:
        return self._after_placement(
            self._engine.drop_tray_piece(piece_type, slot, point)
        )

    def begin_drag(self, piece_id: str) -> PendingMove | None:
        """Start dragging a board piece; the countdown pauses until it ends."""
        pending = self._engine.begin_move(piece_id)
        if pending is not None:
            self._paused_drags.append(pending)
            self.pause()
        return pending

    def commit_drag(self, pending: PendingMove, target: Point | Cell) -> PlacementOutcome:
        paused = self._take_drag(pending)
        outcome = self._engine.commit_move(pending, target)
        if paused:
            self._countdown.resume()
        return self._after_placement(outcome, force_notify=paused)

    def cancel_drag(self, pending: PendingMove) -> None:
        if not self._take_drag(pending):
            return
        self._engine.cancel_move(pending)
        self.resume()

    def _take_drag(self, pending: PendingMove) -> bool:
        """Forget *pending*; True when it still holds a countdown pause."""
        for idx, held in enumerate(self._paused_drags):
            if held is pending:
                del self._paused_drags[idx]
                return True
        return False

    def _release_drags(self) -> None:
        # Drags begun before a reload no longer hold a pause.
        for pending in self._paused_drags:
            pending.is_open = False
        self._paused_drags.clear()

    # ── Play actions ─────────────────────────────────────────────────────

    def move_piece(self, from_cell: Cell, to_cell: Cell) -> bool:
        """Player move; schedules the opponent's reply when it is due."""
        if not self._engine.is_player_turn:
            return False
        if not self._engine.move_piece(from_cell, to_cell):
            return False
        self._notify()
        self._schedule_opponent_move()
        return True

    def cancel_opponent_move(self) -> None:
        """Drop any scheduled or in-flight opponent move."""
        self._opponent_timer.stop()
        self._clear_pending_request()

    # ── Countdown ────────────────────────────────────────────────────────

    def _start_countdown(self) -> None:
        self._countdown.start()
        self._countdown_timer.start()
        if self._on_countdown is not None:
            self._on_countdown(self._countdown.remaining)

    def _stop_countdown(self) -> None:
        self._countdown_timer.stop()
        self._countdown.stop()

    def _on_countdown_tick(self) -> None:
        if self._is_shutting_down:
            return
        if self._engine.phase != GamePhase.PREPARATION:
            self._stop_countdown()
            return
        before = self._countdown.remaining
        expired = self._countdown.tick()
        if self._countdown.remaining != before and self._on_countdown is not None:
            self._on_countdown(self._countdown.remaining)
        if expired:
            _LOGGER.debug("Preparation time is up")
            self.start_playing()

    # ── Opponent ─────────────────────────────────────────────────────────

    def _schedule_opponent_move(self) -> None:
        if self._engine.phase != GamePhase.PLAYING or self._engine.is_player_turn:
            self.cancel_opponent_move()
            return
        self._opponent_timer.start(self._settings.opponent_move_delay_ms)

    def _request_opponent_move(self) -> None:
        if self._is_shutting_down:
            return
        if self._engine.phase != GamePhase.PLAYING or self._engine.is_player_turn:
            return

        self._request_id += 1
        request_id = self._request_id
        self._pending_request = request_id
        self._pending_notation = self._engine.notation

        if self._is_started:
            self._command_bus.suggestion_requested.emit(
                self._pending_notation, request_id
            )
            return

        suggestion = self._engine.get_best_move(self._advisor)
        if suggestion is None:
            self._on_no_suggestion(request_id)
        else:
            self._on_suggestion_ready(request_id, suggestion)

    def _on_suggestion_ready(self, request_id: int, suggestion_obj: object) -> None:
        expected = self._take_request(request_id)
        if expected is None:
            return
        if not isinstance(suggestion_obj, MoveSuggestion):
            self._pass_turn(expected, "Advisor returned an invalid suggestion")
            return
        if not self._engine.apply_suggested_move(suggestion_obj, expected):
            self._pass_turn(expected, f"Suggested move {suggestion_obj} is not playable")
            return
        self._notify()
        self._schedule_opponent_move()

    def _on_no_suggestion(self, request_id: int) -> None:
        expected = self._take_request(request_id)
        if expected is None:
            return
        self._pass_turn(expected, None)

    def _on_suggestion_error(self, request_id: int, message: str) -> None:
        expected = self._take_request(request_id)
        if expected is None:
            return
        self._pass_turn(expected, f"Move advisor failed: {message}")

    def _take_request(self, request_id: int) -> str | None:
        """Claim a worker reply; ``None`` when it is stale."""
        if self._is_shutting_down:
            return None
        if request_id != self._pending_request:
            return None
        expected = self._pending_notation
        self._clear_pending_request()
        if self._engine.phase != GamePhase.PLAYING:
            return None
        if expected != self._engine.notation:
            self._schedule_opponent_move()
            return None
        return expected

    def _pass_turn(self, expected: str, message: str | None) -> None:
        if message is not None:
            _LOGGER.warning("%s; opponent passes", message)
        if expected != self._engine.notation or self._engine.is_player_turn:
            return
        if self._engine.pass_turn():
            self._notify()

    def _clear_pending_request(self) -> None:
        self._pending_request = None
        self._pending_notation = None

    # ── Notifications ────────────────────────────────────────────────────

    def _after_placement(
        self, outcome: PlacementOutcome, *, force_notify: bool = False
    ) -> PlacementOutcome:
        if outcome.ok or force_notify:
            self._notify()
        return outcome

    def _notify(self) -> None:
        if self._on_state_changed is not None:
            self._on_state_changed(self.snapshot())

    def _report_error(self, message: str) -> None:
        if self._on_error is not None:
            self._on_error(message)
