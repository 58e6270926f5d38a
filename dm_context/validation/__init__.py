"""Response validation: checkers, scoring and correction suggestions."""

from dm_context.validation.checkers import DEFAULT_CHECKERS, Checker, CheckerGroup
from dm_context.validation.schemas import (
    CheckContext,
    EvidenceSpan,
    IssueSeverity,
    ResponseComponent,
    ValidationIssue,
    ValidationIssueType,
    ValidationResult,
)
from dm_context.validation.scoring import (
    DEFAULT_CRITICAL_TYPES,
    SEVERITY_WEIGHTS,
    calculate_score,
    diminishing_multiplier,
    is_response_valid,
)
from dm_context.validation.suggester import annotate
from dm_context.validation.validator import ResponseValidator

__all__ = [
    "CheckContext",
    "Checker",
    "CheckerGroup",
    "DEFAULT_CHECKERS",
    "DEFAULT_CRITICAL_TYPES",
    "EvidenceSpan",
    "IssueSeverity",
    "ResponseComponent",
    "ResponseValidator",
    "SEVERITY_WEIGHTS",
    "ValidationIssue",
    "ValidationIssueType",
    "ValidationResult",
    "annotate",
    "calculate_score",
    "diminishing_multiplier",
    "is_response_valid",
]
