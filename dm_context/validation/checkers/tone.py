"""Tone checkers: narrator voice leaks and register mixing."""

import re

from dm_context.state import GameStateSnapshot
from dm_context.validation.checkers.base import word_pattern
from dm_context.validation.schemas import (
    CheckContext,
    EvidenceSpan,
    IssueSeverity,
    ValidationIssue,
    ValidationIssueType,
)

FIRST_PERSON_OPINION = re.compile(r"\b(?:I think|I believe|In my opinion)\b", re.IGNORECASE)
AI_SELF_REFERENCE = re.compile(r"\b(?:as an AI|language model)\b", re.IGNORECASE)
META_REFERENCE = re.compile(
    r"\b(?:the players?|roll the dice|game master|dungeon master|game mechanics)\b",
    re.IGNORECASE,
)

ARCHAIC_WORDS = ("thee", "thou", "thy", "thine", "hath", "doth", "ye", "forsooth", "verily")
MODERN_WORDS = ("okay", "cool", "awesome", "guys", "phone", "internet", "computer", "email")
FORMAL_WORDS = ("furthermore", "moreover", "consequently", "nevertheless", "henceforth", "whereupon")
INFORMAL_WORDS = ("gonna", "wanna", "gotta", "yeah", "nope", "kinda", "sorta", "dude")

MIN_REGISTER_MATCHES = 2


def check_meta_narrative(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag the narrator stepping outside the fiction. One issue per kind."""
    issues: list[ValidationIssue] = []

    match = FIRST_PERSON_OPINION.search(text)
    if match:
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.NARRATIVE_BREAK,
                severity=IssueSeverity.LOW,
                description="First-person commentary from the narrator",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix="Remove personal opinions and narrate from within the story",
            )
        )

    match = AI_SELF_REFERENCE.search(text)
    if match:
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.NARRATIVE_BREAK,
                severity=IssueSeverity.HIGH,
                description="Response refers to itself as an AI",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix="Remove all references to being an AI or language model",
            )
        )

    match = META_REFERENCE.search(text)
    if match:
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.NARRATIVE_BREAK,
                severity=IssueSeverity.MEDIUM,
                description="Meta-reference to the game breaks immersion",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix="Describe events in-world instead of referring to players, dice or the game master",
            )
        )
    return issues


def check_tone_mixing(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag archaic next to modern language and formal next to slang."""
    issues: list[ValidationIssue] = []

    archaic = re.findall(word_pattern(ARCHAIC_WORDS), text, re.IGNORECASE)
    modern = re.findall(word_pattern(MODERN_WORDS), text, re.IGNORECASE)
    if archaic and modern:
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.TONE_ISSUE,
                severity=IssueSeverity.MEDIUM,
                description="Inconsistent language mixing archaic and modern terms",
                suggested_fix="Maintain consistent language style appropriate to the setting",
            )
        )

    formal = re.findall(word_pattern(FORMAL_WORDS), text, re.IGNORECASE)
    informal = re.findall(word_pattern(INFORMAL_WORDS), text, re.IGNORECASE)
    if len(formal) >= MIN_REGISTER_MATCHES and len(informal) >= MIN_REGISTER_MATCHES:
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.TONE_ISSUE,
                severity=IssueSeverity.LOW,
                description="Inconsistent tone mixing formal and informal language",
                suggested_fix="Keep a consistent register throughout the response",
            )
        )
    return issues
