"""Narrative-quality checkers: completeness, variety and sensory detail."""

import re
from collections import Counter

from dm_context.state import GameStateSnapshot
from dm_context.validation.checkers.base import word_pattern
from dm_context.validation.schemas import (
    CheckContext,
    EvidenceSpan,
    IssueSeverity,
    ResponseComponent,
    ValidationIssue,
    ValidationIssueType,
)

MIN_WORDS = 10
ABRUPT_ENDINGS = ("...", ",")

SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
MIN_REPEATED_OPENERS = 3

PASSIVE_VOICE = re.compile(r"\b(?:is|are|was|were|be|been|being)\s+\w+ed\b", re.IGNORECASE)
MIN_PASSIVE_MATCHES = 3
PASSIVE_MIN_CHARS = 200

COMBAT_SENSORY_WORDS = (
    "see", "saw", "hear", "heard", "feel", "felt", "smell", "smelled", "taste",
    "clang", "crash", "thud", "scream", "shout", "blood", "sweat", "pain",
    "flash", "gleam", "roar", "grunt",
)
COMBAT_SENSORY_MIN_CHARS = 200
MIN_COMBAT_SENSORY = 2

SENSE_WORDS: dict[str, tuple[str, ...]] = {
    "sight": ("see", "look", "appear", "visible", "bright", "dark", "color", "light", "shadow"),
    "sound": ("hear", "sound", "noise", "quiet", "loud", "echo", "whisper", "silence"),
    "smell": ("smell", "scent", "odor", "aroma", "stench", "fragrance"),
    "touch": ("feel", "touch", "rough", "smooth", "cold", "warm", "texture"),
    "taste": ("taste", "flavor", "bitter", "sweet", "sour", "salty"),
}
LOCATION_SENSES_MIN_CHARS = 300
MIN_SENSES = 3

# Section headers emitted by the context assemblers
CONTEXT_HEADER = re.compile(
    r"^(?:#{2}\s+[A-Z][\w ]+|(?:CHARACTER INFORMATION|CURRENT LOCATION|ACTIVE QUESTS"
    r"|RECENT COMBAT EVENTS|NARRATIVE HISTORY|CURRENT ACTION|COMBATANTS"
    r"|COMBAT HISTORY|POSITIONING|CONDITIONS|TACTICAL NOTES):)",
    re.MULTILINE,
)


def check_completeness(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag responses that stop mid-thought or say almost nothing."""
    issues: list[ValidationIssue] = []
    stripped = text.rstrip()

    if stripped.endswith(ABRUPT_ENDINGS):
        tail_start = max(0, len(stripped) - 40)
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.COMPLETENESS,
                severity=IssueSeverity.HIGH,
                description="Response ends abruptly",
                evidence=EvidenceSpan(tail_start, len(stripped), stripped[tail_start:]),
                suggested_fix="Complete the response with a proper ending",
            )
        )

    if len(text.split()) < MIN_WORDS:
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.COMPLETENESS,
                severity=IssueSeverity.MEDIUM,
                description="Response is very brief",
                suggested_fix="Provide more detailed description and narrative",
            )
        )
    return issues


def check_repetitive_openers(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag three or more sentences opening with the same word across paragraphs."""
    paragraphs = [p for p in text.split("\n\n") if p.strip()]
    if len(paragraphs) <= 1:
        return []

    openers: Counter[str] = Counter()
    for paragraph in paragraphs:
        for sentence in SENTENCE_SPLIT.split(paragraph.strip()):
            words = sentence.split()
            if words:
                openers[words[0].lower().strip("\"'")] += 1

    repeated = [word for word, count in openers.items() if count >= MIN_REPEATED_OPENERS]
    if not repeated:
        return []

    return [
        ValidationIssue(
            type=ValidationIssueType.STYLE_VIOLATION,
            severity=IssueSeverity.LOW,
            description=f"Repetitive sentence starters: {', '.join(repeated)}",
            suggested_fix="Vary sentence structure for better flow",
        )
    ]


def check_passive_voice(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag heavy use of passive constructions in longer responses."""
    if len(text) <= PASSIVE_MIN_CHARS:
        return []

    matches = list(PASSIVE_VOICE.finditer(text))
    if len(matches) < MIN_PASSIVE_MATCHES:
        return []

    return [
        ValidationIssue(
            type=ValidationIssueType.STYLE_VIOLATION,
            severity=IssueSeverity.LOW,
            description=f"Frequent use of passive voice ({len(matches)} instances)",
            evidence=EvidenceSpan.from_match(matches[0]),
            suggested_fix="Use more active voice for more engaging narrative",
        )
    ]


def check_combat_sensory(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Combat only: flag long combat narration with little sensory detail."""
    if context.component != ResponseComponent.COMBAT or len(text) <= COMBAT_SENSORY_MIN_CHARS:
        return []

    sensory = re.findall(word_pattern(COMBAT_SENSORY_WORDS), text, re.IGNORECASE)
    if len(sensory) >= MIN_COMBAT_SENSORY:
        return []

    return [
        ValidationIssue(
            type=ValidationIssueType.NARRATIVE_QUALITY,
            severity=IssueSeverity.MEDIUM,
            description="Combat description lacks sensory details",
            suggested_fix="Add sights, sounds and physical sensations to make combat more vivid",
        )
    ]


def check_location_senses(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Location only: flag long descriptions that engage fewer than three senses."""
    if context.component != ResponseComponent.LOCATION or len(text) <= LOCATION_SENSES_MIN_CHARS:
        return []

    missing = [
        sense
        for sense, words in SENSE_WORDS.items()
        if not re.search(word_pattern(words), text, re.IGNORECASE)
    ]
    if len(SENSE_WORDS) - len(missing) >= MIN_SENSES:
        return []

    return [
        ValidationIssue(
            type=ValidationIssueType.NARRATIVE_QUALITY,
            severity=IssueSeverity.MEDIUM,
            description="Location description lacks sensory variety",
            suggested_fix=f"Add details for these senses: {', '.join(missing)}",
        )
    ]


def check_context_echo(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag responses that repeat the prompt's section headers back."""
    match = CONTEXT_HEADER.search(text)
    if not match:
        return []

    return [
        ValidationIssue(
            type=ValidationIssueType.RESPONSE_FORMAT,
            severity=IssueSeverity.MEDIUM,
            description="Response echoes context section headers",
            evidence=EvidenceSpan.from_match(match),
            suggested_fix="Write narrative prose only, without reproducing the prompt structure",
        )
    ]
