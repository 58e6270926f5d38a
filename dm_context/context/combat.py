"""Combat context: round state, combatants and what has happened so far."""

from dm_context.config import CombatContextConfig
from dm_context.context.budget import render_sections
from dm_context.history.combat import CombatHistory
from dm_context.state import (
    ActorClass,
    CombatAction,
    Combatant,
    CombatState,
    GameStateSnapshot,
)

INSUFFICIENT_INFORMATION = "Combat Context: Insufficient information available."
COMBAT_STARTED_PLACEHOLDER = "Combat just started."

SIDE_LABELS = {
    ActorClass.PLAYER: "Player",
    ActorClass.NPC: "Ally",
    ActorClass.ENEMY: "Enemy",
}

GENERAL_TACTICS = (
    "Consider the terrain and positioning for tactical advantages",
    "Remember that some spells require concentration",
    "Use the environment for cover and tactical advantages",
)


def build_combat_context(
    snapshot: GameStateSnapshot | None,
    history: CombatHistory,
    config: CombatContextConfig | None = None,
) -> str:
    """Assemble context for narrating the current combat action.

    Section order is fixed: round header, summary, environment,
    combatants, combat history, current action, positioning, conditions,
    tactical notes. The combat history section is always present.

    Args:
        snapshot: Current game state; must carry a combat state.
        history: This session's combat history.
        config: Section toggles (the store's config if None).

    Returns:
        Context text, never empty.
    """
    if snapshot is None or snapshot.combat is None:
        return INSUFFICIENT_INFORMATION

    config = config or history.config
    combat = snapshot.combat
    sections: list[tuple[str, str]] = [
        ("combat_header", f"Combat Round: {combat.round}\nCurrent Turn: {combat.turn}"),
        ("combat_summary", _format_summary(history)),
    ]

    if config.include_environmental_details and history.environment:
        sections.append(("combat_environment", f"Combat Environment: {history.environment}"))

    if config.include_actor_details and combat.combatants:
        lines = ["COMBATANTS:"]
        lines.extend(_describe_combatant(c, snapshot) for c in combat.combatants.values())
        sections.append(("combatants", "\n".join(lines)))

    sections.append(("combat_history", format_combat_history(history)))

    if combat.current_action is not None:
        sections.append(("current_action", _format_current_action(snapshot, config)))

    if config.include_positioning and history.positions:
        lines = ["POSITIONING:"]
        lines.extend(f"{name}: {position}" for name, position in history.positions.items())
        sections.append(("positioning", "\n".join(lines)))

    if config.include_condition_effects and history.conditions:
        lines = ["CONDITIONS:"]
        lines.extend(f"{name}: {', '.join(conds)}" for name, conds in history.conditions.items())
        sections.append(("conditions", "\n".join(lines)))

    if config.include_tactical_suggestions:
        sections.append(("tactics", _format_tactics(combat, history)))

    return render_sections(sections, config.token_budget)


def format_combat_history(history: CombatHistory) -> str:
    """Retained rounds in order, or the combat-just-started marker."""
    rounds = history.rounds()
    if not rounds:
        return f"COMBAT HISTORY:\n{COMBAT_STARTED_PLACEHOLDER}"

    blocks = []
    for round_number in rounds:
        actions = "\n".join(a.describe() for a in history.entries(round_number))
        blocks.append(f"Round {round_number}:\n{actions}")
    return "COMBAT HISTORY:\n" + "\n\n".join(blocks)


def _format_summary(history: CombatHistory) -> str:
    lines: list[str] = []
    if history.combat_summary:
        lines.append(f"Combat Summary: {history.combat_summary}")
    rolling = history.rolling_summary.describe()
    if rolling:
        lines.append(rolling)
    return "\n".join(lines)


def _describe_combatant(combatant: Combatant, snapshot: GameStateSnapshot) -> str:
    side = SIDE_LABELS[snapshot.actor_class(combatant.id)]
    return (
        f"{combatant.name} ({side}): {combatant.health_status}, "
        f"{combatant.hp_current}/{combatant.hp_max} HP"
    )


def _format_current_action(snapshot: GameStateSnapshot, config: CombatContextConfig) -> str:
    combat = snapshot.combat
    action: CombatAction = combat.current_action
    side = SIDE_LABELS[snapshot.actor_class(action.actor_id)]
    lines = [
        "CURRENT ACTION:",
        f"Actor: {action.actor_name} ({side})",
        f"Action: {action.action_type}",
        f"Targets: {', '.join(action.target_names) if action.target_names else 'None'}",
        f"Details: {action.details or 'No additional details'}",
    ]

    if config.include_actor_details:
        actor = combat.combatants.get(action.actor_id)
        if actor is not None:
            lines.append("\nActor Details:")
            lines.append(f"Name: {actor.name}")
            lines.append(f"Health: {actor.health_status} ({actor.hp_current}/{actor.hp_max} HP)")

    if config.include_target_details:
        by_name = {c.name: c for c in combat.combatants.values()}
        targets = [by_name[name] for name in action.target_names if name in by_name]
        if targets:
            lines.append("\nTarget Details:")
            for target in targets:
                lines.append(f"Name: {target.name}")
                lines.append(
                    f"Health: {target.health_status} ({target.hp_current}/{target.hp_max} HP)"
                )

    return "\n".join(lines)


def _format_tactics(combat: CombatState, history: CombatHistory) -> str:
    notes = list(GENERAL_TACTICS)
    for combatant in combat.combatants.values():
        if combatant.health_status == "Near death":
            notes.append(f"{combatant.name} is near death and may flee or fall")
    for name, conditions in history.conditions.items():
        notes.append(f"{name} is affected by {', '.join(conditions)}")
    return "TACTICAL NOTES:\n" + "\n".join(notes)
