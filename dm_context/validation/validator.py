"""ResponseValidator: run enabled checker groups and score the result.

The validator is deterministic (no LLM), holds no per-call state and
never raises on any input text, so it can be called on every generation
attempt of a turn.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from dm_context.config import ValidationConfig, with_defaults
from dm_context.state import GameStateSnapshot
from dm_context.validation.checkers import DEFAULT_CHECKERS, Checker, CheckerGroup
from dm_context.validation.schemas import (
    CheckContext,
    ResponseComponent,
    ValidationIssue,
    ValidationResult,
)
from dm_context.validation.scoring import calculate_score, is_response_valid
from dm_context.validation.suggester import annotate

logger = logging.getLogger(__name__)


def collect_suggestions(issues: Sequence[ValidationIssue]) -> list[str]:
    """Suggested fixes in issue order, without duplicates."""
    return list(dict.fromkeys(issue.suggested_fix for issue in issues if issue.suggested_fix))


class ResponseValidator:
    """Checks generated text against world state, rules and style.

    Usage:
        validator = ResponseValidator(ValidationConfig(strictness_level="high"))
        result = validator.validate(text, snapshot, context=prompt_context)
        if not result.is_valid:
            # Regenerate, or show annotated text for review
            flagged = validator.suggest_correction(text, result.issues)
    """

    def __init__(
        self,
        config: ValidationConfig | None = None,
        checkers: Mapping[CheckerGroup, Sequence[Checker]] | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            config: Validation configuration (defaults if None).
            checkers: Checker registry per group (built-in checkers if None).
        """
        self._config = config if config is not None else ValidationConfig()
        source = checkers if checkers is not None else DEFAULT_CHECKERS
        self._checkers: dict[CheckerGroup, list[Checker]] = {
            group: list(source.get(group, ())) for group in CheckerGroup
        }

    @property
    def config(self) -> ValidationConfig:
        return self._config

    def update_config(self, **changes: Any) -> ValidationConfig:
        """Replace the configuration with changed fields."""
        self._config = with_defaults(ValidationConfig, changes, base=self._config)
        return self._config

    def checkers(self, group: CheckerGroup) -> tuple[Checker, ...]:
        """Registered checkers of a group, in run order."""
        return tuple(self._checkers[group])

    def register(
        self, group: CheckerGroup, checker: Checker, position: int | None = None
    ) -> None:
        """Add a checker to a group, at the end unless a position is given."""
        if position is None:
            self._checkers[group].append(checker)
        else:
            self._checkers[group].insert(position, checker)

    def remove(self, group: CheckerGroup, checker: Checker) -> bool:
        """Remove a checker from a group. Returns False if it was not registered."""
        try:
            self._checkers[group].remove(checker)
        except ValueError:
            return False
        return True

    def enabled_groups(self) -> list[CheckerGroup]:
        return [group for group in CheckerGroup if getattr(self._config, group.config_flag)]

    def validate(
        self,
        text: str | None,
        snapshot: GameStateSnapshot | None = None,
        context: str | None = "",
        component: ResponseComponent = ResponseComponent.NARRATIVE,
    ) -> ValidationResult:
        """Validate a generated response.

        Args:
            text: The response text (None is treated as empty).
            snapshot: Current game state, if available.
            context: The assembled context the response was generated from.
            component: Which kind of generation produced the text.

        Returns:
            ValidationResult with validity, score, issues and suggestions.
        """
        text = text or ""
        check_context = CheckContext(prompt_context=context or "", component=component)

        issues: list[ValidationIssue] = []
        for group in self.enabled_groups():
            for checker in self._checkers[group]:
                issues.extend(checker(text, snapshot, check_context))

        score = calculate_score(
            issues, text, apply_length_bonus=self._config.length_bonus_enabled
        )
        is_valid = is_response_valid(issues, score, self._config)

        logger.debug(
            f"Validated {component.value} response: score={score}, "
            f"issues={len(issues)}, valid={is_valid}"
        )
        if not is_valid:
            logger.info(
                f"Response failed validation: score={score}, "
                f"threshold={self._config.threshold}, issues={len(issues)}"
            )

        return ValidationResult(
            is_valid=is_valid,
            score=score,
            issues=issues,
            suggestions=collect_suggestions(issues),
        )

    def suggest_correction(self, text: str, issues: Sequence[ValidationIssue]) -> str:
        """Original text with an ordered list of suggested improvements appended."""
        return annotate(text, issues)
