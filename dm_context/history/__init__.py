"""Bounded per-session history stores.

Each game session owns one store per domain:
- NarrativeHistory: player/narrator exchanges (FIFO per exchange)
- LocationHistory: visits keyed by location id (FIFO per location)
- CombatHistory: actions keyed by round (whole rounds evicted into a rolling summary)
"""

from dm_context.history.base import HistoryStore
from dm_context.history.combat import CombatHistory
from dm_context.history.location import LocationHistory
from dm_context.history.narrative import NarrativeHistory
from dm_context.history.schemas import (
    ActionOutcome,
    CombatActionRecord,
    LocationVisit,
    NarrativeExchange,
    RollingCombatSummary,
)

__all__ = [
    "ActionOutcome",
    "CombatActionRecord",
    "CombatHistory",
    "HistoryStore",
    "LocationHistory",
    "LocationVisit",
    "NarrativeExchange",
    "NarrativeHistory",
    "RollingCombatSummary",
]
