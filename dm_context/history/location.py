"""Per-location visit history."""

import logging
from collections import deque
from dataclasses import replace
from datetime import datetime

from dm_context.config import LocationContextConfig
from dm_context.history.base import HistoryStore, is_str_tuple
from dm_context.history.schemas import LocationVisit
from dm_context.state import GameStateSnapshot

logger = logging.getLogger(__name__)

# Tuple-of-string fields on a visit
VISIT_DETAIL_FIELDS = (
    "npcs_present",
    "player_actions",
    "discoveries",
    "environmental_changes",
    "additional_details",
)


class LocationHistory(HistoryStore[LocationVisit, LocationContextConfig]):
    """Visits keyed by location id, each location bounded independently.

    The latest visit to a location can be amended with details, player
    actions, discoveries and environmental changes as the scene plays out.
    """

    entry_type = LocationVisit
    config_type = LocationContextConfig

    def __init__(self, config: LocationContextConfig | None = None) -> None:
        super().__init__(config)
        self._visits: dict[str, deque[LocationVisit]] = {}

    def record_visit(
        self,
        location_id: str,
        snapshot: GameStateSnapshot | None = None,
        timestamp: datetime | None = None,
    ) -> bool:
        """Record arrival at a location, capturing the NPCs present there.

        Args:
            location_id: Location being visited.
            snapshot: Current game state (NPC presence is read from it).
            timestamp: Visit time (now if None).

        Returns:
            True if the visit was recorded.
        """
        npcs: tuple[str, ...] = ()
        if snapshot is not None:
            npcs = tuple(npc.name for npc in snapshot.npcs_at(location_id))

        visit = LocationVisit(location_id=location_id, npcs_present=npcs)
        if timestamp is not None:
            visit = replace(visit, timestamp=timestamp)
        return self.record(visit)

    def entries(self, domain_key: str | None = None) -> tuple[LocationVisit, ...]:
        """Visits to one location oldest first, or all visits grouped by location."""
        if domain_key is None:
            return tuple(v for visits in self._visits.values() for v in visits)
        return tuple(self._visits.get(domain_key, ()))

    def latest_visit(self, location_id: str) -> LocationVisit | None:
        visits = self._visits.get(location_id)
        return visits[-1] if visits else None

    def get_visit_count(self, location_id: str) -> int:
        """Number of retained visits to a location (0 if never visited)."""
        return len(self._visits.get(location_id, ()))

    def has_visited(self, location_id: str) -> bool:
        return self.get_visit_count(location_id) > 0

    @property
    def location_ids(self) -> tuple[str, ...]:
        return tuple(self._visits)

    def add_location_detail(self, location_id: str, detail: str) -> bool:
        """Add a detail to the latest visit, up to max_details_per_location."""
        visit = self.latest_visit(location_id)
        if visit is None:
            return self._reject_amendment(location_id, "detail")
        if len(visit.additional_details) >= self.config.max_details_per_location:
            logger.debug(f"Detail limit reached for location {location_id}")
            return False
        return self._amend(
            location_id, additional_details=visit.additional_details + (detail,)
        )

    def add_player_action(self, location_id: str, action: str) -> bool:
        """Record something the player did during the latest visit."""
        visit = self.latest_visit(location_id)
        if visit is None:
            return self._reject_amendment(location_id, "player action")
        return self._amend(location_id, player_actions=visit.player_actions + (action,))

    def add_discovery(self, location_id: str, discovery: str) -> bool:
        """Record a discovery made during the latest visit."""
        visit = self.latest_visit(location_id)
        if visit is None:
            return self._reject_amendment(location_id, "discovery")
        return self._amend(location_id, discoveries=visit.discoveries + (discovery,))

    def add_environmental_change(self, location_id: str, change: str) -> bool:
        """Record an environmental change during the latest visit."""
        visit = self.latest_visit(location_id)
        if visit is None:
            return self._reject_amendment(location_id, "environmental change")
        return self._amend(
            location_id, environmental_changes=visit.environmental_changes + (change,)
        )

    def evict_if_over_capacity(self) -> int:
        evicted = 0
        limit = self.config.max_location_history
        for visits in self._visits.values():
            while len(visits) > limit:
                visits.popleft()
                evicted += 1
        return evicted

    def clear(self, domain_key: str | None = None) -> None:
        """Clear one location's history, or all of it."""
        if domain_key is None:
            self._visits.clear()
        else:
            self._visits.pop(domain_key, None)

    def _validate_entry(self, entry: LocationVisit) -> str | None:
        if not isinstance(entry.location_id, str) or not entry.location_id.strip():
            return "visit has no location id"
        if not isinstance(entry.timestamp, datetime):
            return f"invalid timestamp {entry.timestamp!r}"
        for name in VISIT_DETAIL_FIELDS:
            if not is_str_tuple(getattr(entry, name)):
                return f"{name} must be a tuple of strings"
        return None

    def _append(self, entry: LocationVisit) -> None:
        self._visits.setdefault(entry.location_id, deque()).append(entry)

    def _amend(self, location_id: str, **changes: tuple[str, ...]) -> bool:
        visits = self._visits[location_id]
        visits[-1] = replace(visits[-1], **changes)
        return True

    def _reject_amendment(self, location_id: str, what: str) -> bool:
        logger.warning(f"Cannot add {what}: location {location_id} has no recorded visit")
        return False
