"""Score aggregation and pass/fail rules.

The arithmetic here is fixed behaviour that downstream tuning depends on:
severity weights, per-type diminishing returns, a small length bonus,
half-up rounding and clamping to 0-100.
"""

import math
from typing import Sequence

from dm_context.config import StrictnessLevel, ValidationConfig
from dm_context.validation.schemas import IssueSeverity, ValidationIssue, ValidationIssueType

SEVERITY_WEIGHTS: dict[IssueSeverity, int] = {
    IssueSeverity.CRITICAL: 30,
    IssueSeverity.HIGH: 15,
    IssueSeverity.MEDIUM: 8,
    IssueSeverity.LOW: 3,
    IssueSeverity.INFO: 0,
}

# Repeated issues of one type never deduct less than half their weight
MIN_MULTIPLIER = 0.5
MULTIPLIER_STEP = 0.2

# Length bonus: up to 5 points for responses of 51-500 words
LENGTH_BONUS_MAX = 5
LENGTH_BONUS_MIN_WORDS = 50
LENGTH_BONUS_MAX_WORDS = 500

# Issue types that count toward max_critical_issues at each strictness
DEFAULT_CRITICAL_TYPES: dict[StrictnessLevel, frozenset[str]] = {
    StrictnessLevel.LOW: frozenset(),
    StrictnessLevel.MEDIUM: frozenset({ValidationIssueType.INAPPROPRIATE_CONTENT.value}),
    StrictnessLevel.HIGH: frozenset(
        {
            ValidationIssueType.INAPPROPRIATE_CONTENT.value,
            ValidationIssueType.WORLD_INCONSISTENCY.value,
            ValidationIssueType.RULE_VIOLATION.value,
        }
    ),
}


def diminishing_multiplier(occurrence: int) -> float:
    """Multiplier for the n-th (1-based) issue of the same type."""
    return max(MIN_MULTIPLIER, 1 - (occurrence - 1) * MULTIPLIER_STEP)


def issue_deductions(issues: Sequence[ValidationIssue]) -> list[float]:
    """Marginal deduction of each issue, in emission order."""
    seen: dict[ValidationIssueType, int] = {}
    deductions: list[float] = []
    for issue in issues:
        seen[issue.type] = seen.get(issue.type, 0) + 1
        deductions.append(SEVERITY_WEIGHTS[issue.severity] * diminishing_multiplier(seen[issue.type]))
    return deductions


def word_count(text: str) -> int:
    return len(text.split())


def length_bonus(text: str) -> float:
    """Bonus for responses that are neither terse nor rambling."""
    words = word_count(text)
    if LENGTH_BONUS_MIN_WORDS < words <= LENGTH_BONUS_MAX_WORDS:
        return LENGTH_BONUS_MAX * (words / LENGTH_BONUS_MAX_WORDS)
    return 0.0


def calculate_score(
    issues: Sequence[ValidationIssue],
    text: str = "",
    apply_length_bonus: bool = True,
) -> int:
    """Aggregate issues into a 0-100 quality score.

    Args:
        issues: Issues in emission order.
        text: The response (for the length bonus).
        apply_length_bonus: Whether to add the length bonus.

    Returns:
        Score rounded half up and clamped to [0, 100].
    """
    score = 100.0 - sum(issue_deductions(issues))
    if apply_length_bonus:
        score += length_bonus(text)
    return max(0, min(100, math.floor(score + 0.5)))


def critical_issue_types(config: ValidationConfig) -> frozenset[str]:
    """Issue types treated as critical for the active strictness."""
    if config.critical_issue_types is not None:
        return config.critical_issue_types
    return DEFAULT_CRITICAL_TYPES[config.strictness_level]


def count_critical(issues: Sequence[ValidationIssue], critical_types: frozenset[str]) -> int:
    """Issues that are critical by severity or by type."""
    return sum(
        1
        for issue in issues
        if issue.severity == IssueSeverity.CRITICAL or issue.type.value in critical_types
    )


def is_response_valid(
    issues: Sequence[ValidationIssue],
    score: int,
    config: ValidationConfig,
) -> bool:
    """Apply score threshold, issue cap and critical-issue override.

    Low strictness skips the critical-issue override; medium and high fail
    whenever the critical count exceeds max_critical_issues, regardless of
    score.
    """
    if score < config.threshold:
        return False

    if config.max_issues is not None and len(issues) > config.max_issues:
        return False

    if config.strictness_level != StrictnessLevel.LOW:
        if count_critical(issues, critical_issue_types(config)) > config.max_critical_issues:
            return False

    return True
