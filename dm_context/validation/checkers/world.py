"""World-consistency checkers: facts, places and people the world already knows."""

import re

from dm_context.state import GameStateSnapshot
from dm_context.validation.schemas import (
    CheckContext,
    EvidenceSpan,
    IssueSeverity,
    ValidationIssue,
    ValidationIssueType,
)

FACT_SPLIT = re.compile(r"\s+(?:is|are)\s+", re.IGNORECASE)

# "in the Whispering Woods" style place references (capitalised names only)
PLACE_REFERENCE = re.compile(r"\bin the ((?:[A-Z][\w']*)(?:\s+(?:of\s+)?[A-Z][\w']*)*)")

# "Mira says" style speaker attributions
SPEAKER_REFERENCE = re.compile(r"\b([A-Z][a-z]+) (?:says|said|responds|answers|asks|replies|whispers)\b")

# Capitalised words that open speaker attributions without naming anyone
NON_NAME_SPEAKERS = {
    "He", "She", "They", "It", "You", "One", "Someone", "Everyone", "Nobody",
    "The", "A", "An", "This", "That", "Another", "Each", "Somebody",
}


def check_world_facts(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag statements like "<subject> is <x>" that contradict a known fact."""
    if snapshot is None or not snapshot.world_facts:
        return []

    issues: list[ValidationIssue] = []
    lowered = text.lower()
    for fact in snapshot.world_facts.values():
        parts = FACT_SPLIT.split(fact.strip().rstrip("."), maxsplit=1)
        if len(parts) != 2:
            continue
        subject, attribute = parts[0].strip(), parts[1].strip()
        if not subject or not attribute or attribute.lower() in lowered:
            continue

        statement = re.search(
            rf"\b{re.escape(subject)}\s+(?:is|are)\s+[^.!?]+", text, re.IGNORECASE
        )
        if statement:
            issues.append(
                ValidationIssue(
                    type=ValidationIssueType.WORLD_INCONSISTENCY,
                    severity=IssueSeverity.HIGH,
                    description=f'Response may contradict known fact: "{fact}"',
                    evidence=EvidenceSpan.from_match(statement),
                    suggested_fix=f"Ensure consistency with the fact that {fact}",
                )
            )
    return issues


def check_unknown_locations(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag named places the world has no record of."""
    if snapshot is None or snapshot.current_location is None:
        return []

    known = {snapshot.current_location.name.lower()}
    known.update(loc.name.lower() for loc in snapshot.locations.values())

    issues: list[ValidationIssue] = []
    reported: set[str] = set()
    for match in PLACE_REFERENCE.finditer(text):
        place = match.group(1).strip()
        key = place.lower()
        if key in reported or any(key in name or name in key for name in known):
            continue
        reported.add(key)
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.WORLD_INCONSISTENCY,
                severity=IssueSeverity.LOW,
                description=f"Referenced unknown location: {place}",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix=f'Check if "{place}" is an established location in the game world',
            )
        )
    return issues


def check_unknown_npcs(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag speakers who are not known NPCs or the player."""
    if snapshot is None:
        return []

    known: set[str] = set()
    for npc in snapshot.npcs.values():
        known.update(part.lower() for part in npc.name.split())
    if snapshot.player is not None:
        known.update(part.lower() for part in snapshot.player.name.split())

    issues: list[ValidationIssue] = []
    reported: set[str] = set()
    for match in SPEAKER_REFERENCE.finditer(text):
        name = match.group(1)
        if name in NON_NAME_SPEAKERS or name.lower() in known or name in reported:
            continue
        reported.add(name)
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.FACTUAL_ERROR,
                severity=IssueSeverity.MEDIUM,
                description=f"Referenced unknown NPC: {name}",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix=f'Check if "{name}" is an established NPC in the game world',
            )
        )
    return issues


def check_context_contradictions(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag "Key: value" context lines the response negates ("... not value")."""
    if not context.prompt_context:
        return []

    issues: list[ValidationIssue] = []
    response_lines = [line.lower() for line in text.splitlines()]
    for line in context.prompt_context.splitlines():
        if ":" not in line:
            continue
        key, _, value = line.partition(":")
        key, value = key.strip().lower(), value.strip().lower()
        if not key or not value:
            continue

        negation = f"not {value}"
        if any(key in r and negation in r for r in response_lines):
            issues.append(
                ValidationIssue(
                    type=ValidationIssueType.CONTEXT_ERROR,
                    severity=IssueSeverity.MEDIUM,
                    description=f'Possible contradiction of context: "{line.strip()}"',
                    suggested_fix=f'Check for consistency with the provided context regarding "{key}"',
                )
            )
    return issues
