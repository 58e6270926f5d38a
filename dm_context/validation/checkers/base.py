"""Checker interface and grouping."""

from enum import Enum
from typing import Protocol

from dm_context.state import GameStateSnapshot
from dm_context.validation.schemas import CheckContext, ValidationIssue


class Checker(Protocol):
    """A pure function that inspects generated text and reports issues.

    Checkers must not keep state between calls or raise on any text.
    """

    def __call__(
        self,
        text: str,
        snapshot: GameStateSnapshot | None,
        context: CheckContext,
    ) -> list[ValidationIssue]: ...


class CheckerGroup(str, Enum):
    """Checker families, each switched by a ValidationConfig flag."""

    WORLD_CONSISTENCY = "world_consistency"
    CHARACTER_CONSISTENCY = "character_consistency"
    RULE_ACCURACY = "rule_accuracy"
    NARRATIVE_QUALITY = "narrative_quality"
    TONE = "tone"

    @property
    def config_flag(self) -> str:
        """Name of the ValidationConfig field that enables this group."""
        return f"{self.value}_check"


def word_pattern(words: list[str] | tuple[str, ...]) -> str:
    """Regex alternation matching any of the words as whole words."""
    return r"\b(?:" + "|".join(words) + r")\b"
