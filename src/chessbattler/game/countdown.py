"""Preparation countdown with reference-counted pausing."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PREPARATION_TICKS = 60


@dataclass(frozen=True, slots=True)
class CountdownSnapshot:
    remaining: int
    is_running: bool
    is_paused: bool


class PreparationCountdown:
    """Counts whole ticks down to zero.

    The countdown is a passive counter: something else (a ``QTimer`` in the
    session) calls :meth:`tick`. Ticks are ignored while stopped, paused or
    already expired, so :meth:`tick` reports expiry exactly once per run.

    Pauses nest: every :meth:`pause` must be matched by a :meth:`resume`
    before ticks count again.
    """

    __slots__ = ("_total", "_remaining", "_running", "_pause_depth", "_expired")

    def __init__(self, total_ticks: int = DEFAULT_PREPARATION_TICKS) -> None:
        if total_ticks < 1:
            raise ValueError(f"total_ticks must be positive, got {total_ticks}")
        self._total = total_ticks
        self._remaining = total_ticks
        self._running = False
        self._pause_depth = 0
        self._expired = False

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def total(self) -> int:
        return self._total

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._pause_depth > 0

    @property
    def is_expired(self) -> bool:
        return self._expired

    # ── Control ──────────────────────────────────────────────────────────

    def start(self) -> None:
        """(Re)start from the full duration."""
        self._remaining = self._total
        self._running = True
        self._pause_depth = 0
        self._expired = False

    def stop(self) -> None:
        self._running = False
        self._pause_depth = 0

    def pause(self) -> None:
        self._pause_depth += 1

    def resume(self) -> None:
        """Undo one :meth:`pause`. Extra resumes are ignored."""
        if self._pause_depth > 0:
            self._pause_depth -= 1

    def tick(self) -> bool:
        """Advance by one unit. True only on the tick that reaches zero."""
        if not self._running or self._expired or self._pause_depth > 0:
            return False
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._expired = True
            self._running = False
            return True
        return False

    def snapshot(self) -> CountdownSnapshot:
        return CountdownSnapshot(
            remaining=self._remaining,
            is_running=self._running,
            is_paused=self.is_paused,
        )
