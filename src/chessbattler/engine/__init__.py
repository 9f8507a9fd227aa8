"""Move-suggestion package: advisor protocol and Qt worker bridge."""

from chessbattler.engine.advisor import (
    IMoveAdvisor,
    MoveSuggestion,
    NullAdvisor,
    ScriptedAdvisor,
)
from chessbattler.engine.qt_bridge import AdvisorWorker

__all__ = [
    "AdvisorWorker",
    "IMoveAdvisor",
    "MoveSuggestion",
    "NullAdvisor",
    "ScriptedAdvisor",
]
