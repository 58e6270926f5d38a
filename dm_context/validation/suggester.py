"""Correction suggestions appended to a flagged response.

The caller decides whether to show, regenerate or discard; this only
renders the issues as an improvement list under the original text.
"""

from typing import Sequence

from dm_context.validation.schemas import ValidationIssue

SUGGESTIONS_HEADER = "[Suggested improvements]"
NO_SUGGESTION = "No suggestion available"


def format_issue(number: int, issue: ValidationIssue) -> str:
    """Render one issue as an improvement line."""
    fix = issue.suggested_fix or NO_SUGGESTION
    if issue.evidence is not None and issue.evidence.text:
        return f'Issue {number}: "{issue.evidence.text}" - {fix}'
    return f"Issue {number}: {issue.description} - {fix}"


def annotate(text: str, issues: Sequence[ValidationIssue]) -> str:
    """Append ordered improvement lines to a response.

    Args:
        text: The original response.
        issues: Issues found in it, in any order.

    Returns:
        The text unchanged if there are no issues, otherwise the text
        followed by a blank line, the header and one line per issue,
        most severe first (ties keep their original order).
    """
    if not issues:
        return text

    ordered = sorted(issues, key=lambda issue: issue.severity.rank)
    lines = [format_issue(number, issue) for number, issue in enumerate(ordered, start=1)]
    return f"{text}\n\n{SUGGESTIONS_HEADER}\n" + "\n".join(lines)
