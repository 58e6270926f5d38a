"""Validation issue and result types."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


class IssueSeverity(str, Enum):
    """Severity of a validation issue, most severe first."""

    CRITICAL = "critical"  # Must be fixed before displaying to user
    HIGH = "high"  # Should be fixed if possible
    MEDIUM = "medium"  # Recommended to fix
    LOW = "low"  # Minor issues that could be improved
    INFO = "info"  # Informational only

    @property
    def rank(self) -> int:
        """0 for critical up to 4 for info."""
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = list(IssueSeverity)


class ValidationIssueType(str, Enum):
    """What kind of problem an issue describes."""

    WORLD_INCONSISTENCY = "world_inconsistency"
    CHARACTER_INCONSISTENCY = "character_inconsistency"
    RULE_VIOLATION = "rule_violation"
    NARRATIVE_QUALITY = "narrative_quality"
    FACTUAL_ERROR = "factual_error"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    STYLE_VIOLATION = "style_violation"
    TONE_ISSUE = "tone_issue"
    RESPONSE_FORMAT = "response_format"
    CONTEXT_ERROR = "context_error"
    LOGICAL_FLAW = "logical_flaw"
    MECHANICAL_ERROR = "mechanical_error"
    COMPLETENESS = "completeness"
    NARRATIVE_BREAK = "narrative_break"


class ResponseComponent(str, Enum):
    """Which kind of generation produced the response."""

    NARRATIVE = "narrative"
    DM = "dm"
    COMBAT = "combat"
    LOCATION = "location"
    SPELL = "spell"
    DIALOGUE = "dialogue"


@dataclass(frozen=True)
class EvidenceSpan:
    """Where in the response an issue was found."""

    start: int
    end: int
    text: str

    @classmethod
    def from_match(cls, match: re.Match[str]) -> EvidenceSpan:
        return cls(start=match.start(), end=match.end(), text=match.group(0))


@dataclass(frozen=True)
class ValidationIssue:
    """A detected problem in a generated response."""

    type: ValidationIssueType
    severity: IssueSeverity
    description: str
    evidence: EvidenceSpan | None = None
    suggested_fix: str | None = None
    rule_reference: str | None = None


@dataclass(frozen=True)
class CheckContext:
    """Per-call inputs a checker may consult besides the text and snapshot.

    Attributes:
        prompt_context: The assembled context the response was generated from.
        component: The kind of generation being validated.
    """

    prompt_context: str = ""
    component: ResponseComponent = ResponseComponent.NARRATIVE


@dataclass
class ValidationResult:
    """Outcome of validating one response. Built fresh per call."""

    is_valid: bool
    score: int
    issues: list[ValidationIssue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def issues_with_severity(self, severity: IssueSeverity) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def has_critical_issues(self) -> bool:
        return any(issue.severity == IssueSeverity.CRITICAL for issue in self.issues)
