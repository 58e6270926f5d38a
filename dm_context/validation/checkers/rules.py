"""Rule-accuracy checkers for 5e-style mechanics mentioned in prose."""

import re

from dm_context.state import GameStateSnapshot
from dm_context.validation.schemas import (
    CheckContext,
    EvidenceSpan,
    IssueSeverity,
    ResponseComponent,
    ValidationIssue,
    ValidationIssueType,
)

ABILITY_SCORE_MIN = 1
ABILITY_SCORE_MAX = 30

ABILITY_SCORE = re.compile(
    r"\b(strength|dexterity|constitution|intelligence|wisdom|charisma)(?:\s+score)?\s+of\s+(-?\d+)\b",
    re.IGNORECASE,
)

DICE_NOTATION = re.compile(r"\b(\d*)d(\d+)\b", re.IGNORECASE)
VALID_DICE = {4, 6, 8, 10, 12, 20, 100}

SKILL_CHECK = re.compile(
    r"\b(?:roll|make|makes|rolls|attempt|attempts)\s+an?\s+"
    r"([A-Za-z]+(?:\s+(?:of\s+)?[A-Za-z]+)?)\s+(?:check|save|saving throw)\b",
    re.IGNORECASE,
)
VALID_CHECKS = {
    "strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma",
    "acrobatics", "animal handling", "arcana", "athletics", "deception", "history",
    "insight", "intimidation", "investigation", "medicine", "nature", "perception",
    "performance", "persuasion", "religion", "sleight of hand", "stealth", "survival",
    "death",
}

MULTIPLE_ACTIONS = re.compile(r"\btakes? (?:two|three|four|multiple) actions\b", re.IGNORECASE)
ATTACKS_TWICE = re.compile(r"\battacks? twice\b", re.IGNORECASE)

SPELL_LEVEL = re.compile(
    r"\b(?:level (\d+)|(\d+)(?:st|nd|rd|th)[- ]level) "
    r"(fireball|magic missile|cure wounds|healing word|shield|misty step|hold person"
    r"|lightning bolt|counterspell|fly|dimension door|cone of cold)\b",
    re.IGNORECASE,
)
SPELL_BASE_LEVELS = {
    "magic missile": 1,
    "cure wounds": 1,
    "healing word": 1,
    "shield": 1,
    "misty step": 2,
    "hold person": 2,
    "fireball": 3,
    "lightning bolt": 3,
    "counterspell": 3,
    "fly": 3,
    "dimension door": 4,
    "cone of cold": 5,
}
MAX_SPELL_LEVEL = 9


def check_ability_scores(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag ability scores outside 1-30."""
    issues: list[ValidationIssue] = []
    for match in ABILITY_SCORE.finditer(text):
        value = int(match.group(2))
        if ABILITY_SCORE_MIN <= value <= ABILITY_SCORE_MAX:
            continue
        bound = "maximum of 30" if value > ABILITY_SCORE_MAX else "minimum of 1"
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.RULE_VIOLATION,
                severity=IssueSeverity.HIGH,
                description=f"Invalid ability score value: {value} is beyond the {bound}",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix=f"Adjust the {match.group(1).lower()} score to be within the valid range (1-30)",
                rule_reference="Ability scores range from 1-30, with 20 the usual maximum for player characters",
            )
        )
    return issues


def check_dice_notation(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag dice that do not exist (d7, d0, d1...)."""
    issues: list[ValidationIssue] = []
    for match in DICE_NOTATION.finditer(text):
        if int(match.group(2)) in VALID_DICE:
            continue
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.RULE_VIOLATION,
                severity=IssueSeverity.MEDIUM,
                description=f"Invalid dice notation: {match.group(0)}",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix="Use standard dice notation (d4, d6, d8, d10, d12, d20, d100)",
                rule_reference="Standard dice are d4, d6, d8, d10, d12, d20 and d100",
            )
        )
    return issues


def check_skill_checks(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag checks against skills or abilities that do not exist."""
    issues: list[ValidationIssue] = []
    for match in SKILL_CHECK.finditer(text):
        skill = match.group(1).lower()
        if skill in VALID_CHECKS:
            continue
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.RULE_VIOLATION,
                severity=IssueSeverity.LOW,
                description=f"Invalid skill or ability check: {skill}",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix=f'Replace "{skill}" with a standard skill or ability check',
            )
        )
    return issues


def check_action_economy(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Combat only: flag more actions per turn than the rules allow."""
    if context.component != ResponseComponent.COMBAT:
        return []

    issues: list[ValidationIssue] = []
    match = MULTIPLE_ACTIONS.search(text)
    if match:
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.RULE_VIOLATION,
                severity=IssueSeverity.MEDIUM,
                description="Incorrect action economy: Characters typically get one action per turn",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix="Adjust to reflect standard action economy (action, bonus action, reaction, movement)",
                rule_reference="A turn allows one action, one bonus action if available, movement and one reaction per round",
            )
        )

    match = ATTACKS_TWICE.search(text)
    if match and "extra attack" not in text.lower():
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.RULE_VIOLATION,
                severity=IssueSeverity.MEDIUM,
                description="Multiple attacks mentioned without Extra Attack feature",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix="Verify the character has Extra Attack or modify to a single attack",
            )
        )
    return issues


def check_spell_levels(
    text: str, snapshot: GameStateSnapshot | None, context: CheckContext
) -> list[ValidationIssue]:
    """Flag spells cast below their base level or above 9th."""
    issues: list[ValidationIssue] = []
    for match in SPELL_LEVEL.finditer(text):
        level = int(match.group(1) or match.group(2))
        spell = match.group(3).lower()
        base = SPELL_BASE_LEVELS[spell]
        if base <= level <= MAX_SPELL_LEVEL:
            continue
        issues.append(
            ValidationIssue(
                type=ValidationIssueType.RULE_VIOLATION,
                severity=IssueSeverity.HIGH,
                description=f"Incorrect spell level: {spell} cannot be cast at level {level}",
                evidence=EvidenceSpan.from_match(match),
                suggested_fix=f"Adjust the spell level to be valid for {spell}",
                rule_reference=f"{spell} is a level {base} spell and can be upcast to at most level {MAX_SPELL_LEVEL}",
            )
        )
    return issues
