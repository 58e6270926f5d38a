"""Narrative exchange history."""

import logging
from collections import deque

from dm_context.config import NarrativeContextConfig
from dm_context.history.base import HistoryStore
from dm_context.history.schemas import NarrativeExchange

logger = logging.getLogger(__name__)


class NarrativeHistory(HistoryStore[NarrativeExchange, NarrativeContextConfig]):
    """Player/narrator exchanges in insertion order, plus recent combat summaries.

    Example:
        history = NarrativeHistory(NarrativeContextConfig(max_history_items=2))
        history.record(NarrativeExchange("I open the door", "It creaks open."))
    """

    entry_type = NarrativeExchange
    config_type = NarrativeContextConfig

    def __init__(self, config: NarrativeContextConfig | None = None) -> None:
        super().__init__(config)
        self._exchanges: deque[NarrativeExchange] = deque()
        self._combat_summaries: deque[str] = deque()

    def __len__(self) -> int:
        return len(self._exchanges)

    def entries(self, domain_key: str | None = None) -> tuple[NarrativeExchange, ...]:
        """Exchanges oldest first, optionally only those at one location."""
        if domain_key is None:
            return tuple(self._exchanges)
        return tuple(e for e in self._exchanges if e.location_id == domain_key)

    def add_combat_summary(self, summary: str) -> None:
        """Remember a finished combat's summary, newest first."""
        if not summary or not summary.strip():
            logger.warning("NarrativeHistory ignored empty combat summary")
            return
        self._combat_summaries.appendleft(summary.strip())
        self._trim_combat_summaries()

    @property
    def combat_summaries(self) -> tuple[str, ...]:
        """Recent combat summaries, newest first."""
        return tuple(self._combat_summaries)

    def evict_if_over_capacity(self) -> int:
        evicted = 0
        while len(self._exchanges) > self.config.max_history_items:
            self._exchanges.popleft()
            evicted += 1
        self._trim_combat_summaries()
        return evicted

    def clear(self, domain_key: str | None = None) -> None:
        """Clear all exchanges and summaries, or only exchanges at one location."""
        if domain_key is None:
            self._exchanges.clear()
            self._combat_summaries.clear()
            return
        self._exchanges = deque(e for e in self._exchanges if e.location_id != domain_key)

    def _validate_entry(self, entry: NarrativeExchange) -> str | None:
        if not isinstance(entry.player_input, str) or not isinstance(entry.dm_response, str):
            return "player_input and dm_response must be strings"
        if not entry.player_input.strip() and not entry.dm_response.strip():
            return "exchange has no content"
        return None

    def _append(self, entry: NarrativeExchange) -> None:
        self._exchanges.append(entry)

    def _trim_combat_summaries(self) -> None:
        while len(self._combat_summaries) > self.config.max_combat_summaries:
            self._combat_summaries.pop()
