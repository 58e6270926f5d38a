"""Character-consistency checkers: established traits and class features."""

import re

from dm_context.state import GameStateSnapshot
from dm_context.validation.schemas import (
    CheckContext,
    EvidenceSpan,
    IssueSeverity,
    ValidationIssue,
    ValidationIssueType,
)

TRAIT_OPPOSITES: dict[str, tuple[str, ...]] = {
    "brave": ("coward", "cowardly", "fearful", "afraid"),
    "intelligent": ("stupid", "dumb", "foolish", "idiotic"),
    "loyal": ("traitor", "traitorous", "disloyal", "unfaithful"),
    "honest": ("liar", "dishonest", "deceptive", "deceitful"),
    "kind": ("cruel", "heartless", "callous"),
    "calm": ("hysterical", "panicked", "frantic"),
}

CLASS_ABILITIES: dict[str, tuple[str, ...]] = {
    "fighter": ("second wind", "action surge", "martial archetype", "extra attack"),
    "wizard": ("arcane recovery", "spellcasting", "arcane tradition"),
    "cleric": ("spellcasting", "divine domain", "channel divinity", "turn undead"),
    "rogue": ("sneak attack", "thieves' cant", "cunning action", "uncanny dodge"),
    "bard": ("spellcasting", "bardic inspiration", "jack of all trades", "song of rest"),
    "druid": ("spellcasting", "wild shape", "druid circle"),
    "barbarian": ("rage", "unarmored defense", "reckless attack", "danger sense", "extra attack"),
    "monk": ("unarmored defense", "martial arts", "ki", "flurry of blows", "patient defense"),
    "paladin": ("divine sense", "lay on hands", "spellcasting", "divine smite", "extra attack"),
    "ranger": ("favored enemy", "natural explorer", "spellcasting", "ranger archetype", "extra attack"),
    "sorcerer": ("spellcasting", "sorcerous origin", "font of magic", "metamagic"),
    "warlock": ("otherworldly patron", "pact magic", "eldritch invocations", "pact boon"),
}

# Abilities too generic to attribute to one class from prose alone
_AMBIGUOUS_ABILITIES = {"rage", "ki", "spellcasting"}

ALL_CLASS_ABILITIES: tuple[str, ...] = tuple(
    dict.fromkeys(
        ability
        for abilities in CLASS_ABILITIES.values()
        for ability in abilities
        if ability not in _AMBIGUOUS_ABILITIES
    )
)


def check_character_traits(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag a character described with the opposite of an established trait."""
    if snapshot is None:
        return []

    characters: list[tuple[str, list[str]]] = []
    if snapshot.player is not None:
        characters.append((snapshot.player.name, snapshot.player.traits))
    characters.extend((npc.name, npc.traits) for npc in snapshot.npcs.values())

    issues: list[ValidationIssue] = []
    for name, traits in characters:
        if not traits or name not in text:
            continue
        for trait in traits:
            for opposite in TRAIT_OPPOSITES.get(trait.lower(), ()):
                match = re.search(
                    rf"{re.escape(name)}[^.!?]*\b{opposite}\b", text, re.IGNORECASE
                )
                if match:
                    issues.append(
                        ValidationIssue(
                            type=ValidationIssueType.CHARACTER_INCONSISTENCY,
                            severity=IssueSeverity.MEDIUM,
                            description=(
                                f'Response describes {name} as "{opposite}" which '
                                f'contradicts known trait "{trait}"'
                            ),
                            evidence=EvidenceSpan.from_match(match),
                            suggested_fix=(
                                f"Adjust description to align with {name}'s established trait: {trait}"
                            ),
                        )
                    )
    return issues


def check_class_abilities(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag class features the player's classes do not grant."""
    if snapshot is None or snapshot.player is None:
        return []

    classes = [c.lower() for c in snapshot.player.classes if c.lower() in CLASS_ABILITIES]
    if not classes:
        return []

    available = {ability for c in classes for ability in CLASS_ABILITIES[c]}
    class_label = "/".join(snapshot.player.classes)

    issues: list[ValidationIssue] = []
    for ability in ALL_CLASS_ABILITIES:
        if ability in available:
            continue
        match = re.search(rf"\b{re.escape(ability)}\b", text, re.IGNORECASE)
        if match:
            issues.append(
                ValidationIssue(
                    type=ValidationIssueType.CHARACTER_INCONSISTENCY,
                    severity=IssueSeverity.MEDIUM,
                    description=f'Mentioned ability "{ability}" not available to {class_label}',
                    evidence=EvidenceSpan.from_match(match),
                    suggested_fix=f'Check if "{ability}" is available to the character\'s class and level',
                )
            )
    return issues
