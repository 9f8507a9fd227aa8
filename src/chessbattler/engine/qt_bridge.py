"""Qt bridge to run a move advisor in a worker thread."""

from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from chessbattler.core.notation import NotationError, decode
from chessbattler.engine.advisor import IMoveAdvisor, MoveSuggestion, NullAdvisor


class AdvisorWorker(QObject):
    """Thread-affine worker that asks the advisor for a move on demand."""

    suggestion_ready = pyqtSignal(int, object)
    no_suggestion = pyqtSignal(int)
    suggestion_error = pyqtSignal(int, str)

    __slots__ = ("_advisor",)

    def __init__(self, advisor: IMoveAdvisor | None = None) -> None:
        super().__init__()
        self._advisor: IMoveAdvisor = advisor or NullAdvisor()

    @property
    def advisor(self) -> IMoveAdvisor:
        return self._advisor

    @pyqtSlot(str, int)
    def request_suggestion(self, notation: str, request_id: int) -> None:
        """Ask the advisor about *notation* and emit the outcome."""
        try:
            decode(notation)
        except NotationError:
            self.suggestion_error.emit(request_id, "Advisor received invalid notation")
            return

        try:
            suggestion = self._advisor.suggest(notation)
        except Exception as exc:
            self.suggestion_error.emit(request_id, str(exc))
            return

        if suggestion is None:
            self.no_suggestion.emit(request_id)
            return
        if not isinstance(suggestion, MoveSuggestion):
            self.suggestion_error.emit(
                request_id, f"Advisor returned {type(suggestion).__name__}"
            )
            return

        self.suggestion_ready.emit(request_id, suggestion)
