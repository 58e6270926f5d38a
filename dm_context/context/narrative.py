"""Narrative context: who the player is, where they are, what just happened."""

from dm_context.config import NarrativeContextConfig
from dm_context.context.budget import render_sections
from dm_context.history.narrative import NarrativeHistory
from dm_context.state import GameStateSnapshot

INSUFFICIENT_INFORMATION = "Narrative Context: Insufficient information available."
NO_HISTORY_PLACEHOLDER = "No previous interactions."

# Quest descriptions are clipped to keep the section short
QUEST_DESCRIPTION_LIMIT = 100


def build_narrative_context(
    snapshot: GameStateSnapshot | None,
    history: NarrativeHistory,
    config: NarrativeContextConfig | None = None,
    player_input: str | None = None,
) -> str:
    """Assemble the narrative context for a generation request.

    Section order is fixed: character, location, active quests, recent
    combats, narrative history, current action. The history section is
    always present.

    Args:
        snapshot: Current game state.
        history: This session's narrative history.
        config: Section toggles (the store's config if None).
        player_input: The player's raw input for this turn.

    Returns:
        Context text, never empty.
    """
    if snapshot is None:
        return INSUFFICIENT_INFORMATION

    config = config or history.config
    sections: list[tuple[str, str]] = []

    if config.include_character_details:
        sections.append(("character", _format_character(snapshot)))

    if config.include_location_details:
        sections.append(("location", _format_location(snapshot)))

    if config.include_active_quests:
        sections.append(("quests", _format_quests(snapshot)))

    if config.include_recent_combats and history.combat_summaries:
        sections.append(
            ("recent_combats", "RECENT COMBAT EVENTS:\n" + "\n".join(history.combat_summaries))
        )

    sections.append(("history", format_narrative_history(history)))

    if player_input and player_input.strip():
        sections.append(("current_action", f"CURRENT ACTION:\nPlayer: {player_input.strip()}"))

    return render_sections(sections, config.token_budget)


def format_narrative_history(history: NarrativeHistory) -> str:
    """Exchanges oldest first, or the first-interaction placeholder."""
    exchanges = history.entries()
    if not exchanges:
        return f"NARRATIVE HISTORY:\n{NO_HISTORY_PLACEHOLDER}"

    lines = [f"Player: {e.player_input}\nDM: {e.dm_response}" for e in exchanges]
    return "NARRATIVE HISTORY:\n" + "\n\n".join(lines)


def _format_character(snapshot: GameStateSnapshot) -> str:
    player = snapshot.player
    if player is None:
        return ""

    lines = ["CHARACTER INFORMATION:", f"Name: {player.name}"]
    if player.race:
        lines.append(f"Race: {player.race}")
    if player.classes:
        lines.append(f"Class: {'/'.join(player.classes)}")
    lines.append(f"Level: {player.level}")
    if player.hit_points_max:
        lines.append(f"HP: {player.hit_points_current}/{player.hit_points_max}")
    return "\n".join(lines)


def _format_location(snapshot: GameStateSnapshot) -> str:
    location = snapshot.current_location
    if location is None:
        return ""

    lines = ["CURRENT LOCATION:", f"Name: {location.name}"]
    if location.description:
        lines.append(f"Description: {location.description}")

    npcs = snapshot.npcs_present()
    if npcs:
        lines.append(f"NPCs present: {', '.join(npc.name for npc in npcs)}")
    return "\n".join(lines)


def _format_quests(snapshot: GameStateSnapshot) -> str:
    quests = [q for q in snapshot.active_quests if q.active]
    if not quests:
        return ""

    lines = ["ACTIVE QUESTS:"]
    for quest in quests:
        description = quest.description
        if len(description) > QUEST_DESCRIPTION_LIMIT:
            description = description[:QUEST_DESCRIPTION_LIMIT].rstrip() + "..."
        lines.append(f"- {quest.title}: {description}" if description else f"- {quest.title}")
    return "\n".join(lines)
