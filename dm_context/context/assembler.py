"""Single entry point for assembling context from any history store."""

from typing import Any

from dm_context.config import CombatContextConfig, LocationContextConfig, NarrativeContextConfig
from dm_context.context.combat import build_combat_context
from dm_context.context.location import build_location_context
from dm_context.context.narrative import build_narrative_context
from dm_context.history.base import HistoryStore
from dm_context.history.combat import CombatHistory
from dm_context.history.location import LocationHistory
from dm_context.history.narrative import NarrativeHistory
from dm_context.state import GameStateSnapshot

DomainConfig = NarrativeContextConfig | LocationContextConfig | CombatContextConfig


def build_context(
    snapshot: GameStateSnapshot | None,
    history: HistoryStore[Any, Any],
    config: DomainConfig | None = None,
    *,
    player_input: str | None = None,
    location_id: str | None = None,
) -> str:
    """Build the context text for the domain the history store belongs to.

    Args:
        snapshot: Current game state.
        history: A narrative, location or combat history store.
        config: Section toggles (the store's own config if None).
        player_input: Player input for the current-action section (narrative).
        location_id: Location to describe (location, defaults to current).

    Returns:
        Context text, never empty.

    Raises:
        TypeError: If history is not one of the known store types.
    """
    if isinstance(history, NarrativeHistory):
        return build_narrative_context(snapshot, history, config, player_input=player_input)
    if isinstance(history, LocationHistory):
        return build_location_context(snapshot, history, config, location_id=location_id)
    if isinstance(history, CombatHistory):
        return build_combat_context(snapshot, history, config)
    raise TypeError(f"No context builder for {type(history).__name__}")
