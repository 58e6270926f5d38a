"""Token budget management for assembled context.

Sections are added in their fixed presentation order, included by
priority until the budget runs out, then re-emitted in presentation
order so the final text stays stable and diffable.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum

logger = logging.getLogger(__name__)

# Critical sections are never dropped; they shrink to at least this many tokens
MIN_CRITICAL_TOKENS = 16


class SectionPriority(IntEnum):
    """Priority levels for context sections.

    Higher numbers = higher priority (included first).
    """

    CRITICAL = 100  # Must include (history, current action)
    HIGH = 80  # Important (character, location, NPCs)
    MEDIUM = 60  # Useful (quests, environment, positioning)
    LOW = 40  # Nice to have (older combat summaries)
    OPTIONAL = 20  # Can drop (tactical notes)


@dataclass
class ContextSection:
    """A section of context with metadata."""

    name: str
    content: str
    priority: SectionPriority
    token_count: int = 0

    def __post_init__(self) -> None:
        """Calculate token count if not provided."""
        if self.token_count == 0 and self.content:
            self.token_count = estimate_tokens(self.content)


@dataclass
class BudgetResult:
    """Result of budget compilation."""

    content: str
    total_tokens: int
    sections_included: list[str]
    sections_excluded: list[str]
    utilization: float  # 0.0 to 1.0


SECTION_PRIORITIES: dict[str, SectionPriority] = {
    # narrative
    "character": SectionPriority.HIGH,
    "location": SectionPriority.HIGH,
    "quests": SectionPriority.MEDIUM,
    "recent_combats": SectionPriority.LOW,
    "history": SectionPriority.CRITICAL,
    "current_action": SectionPriority.CRITICAL,
    # location
    "location_info": SectionPriority.CRITICAL,
    "environment": SectionPriority.MEDIUM,
    "nearby": SectionPriority.MEDIUM,
    "npcs": SectionPriority.HIGH,
    "visits": SectionPriority.CRITICAL,
    # combat
    "combat_header": SectionPriority.CRITICAL,
    "combat_summary": SectionPriority.MEDIUM,
    "combat_environment": SectionPriority.MEDIUM,
    "combatants": SectionPriority.HIGH,
    "combat_history": SectionPriority.CRITICAL,
    "positioning": SectionPriority.MEDIUM,
    "conditions": SectionPriority.HIGH,
    "tactics": SectionPriority.OPTIONAL,
}


def estimate_tokens(text: str | None) -> int:
    """Estimate token count from text.

    Uses a simple heuristic: ~4 characters per token on average.

    Args:
        text: Text to estimate tokens for.

    Returns:
        Estimated token count.
    """
    if not text:
        return 0
    return len(text) // 4 + 1


class ContextBudget:
    """Fits context sections into a token budget.

    - Tracks token counts per section
    - Includes sections in priority order
    - Shrinks critical sections instead of dropping them
    """

    def __init__(
        self,
        max_tokens: int,
        priorities: dict[str, SectionPriority] | None = None,
    ) -> None:
        """Initialize budget.

        Args:
            max_tokens: Maximum tokens allowed for context.
            priorities: Optional custom priority mapping.
        """
        self.max_tokens = max_tokens
        self.priorities = priorities or SECTION_PRIORITIES
        self._sections: list[ContextSection] = []

    def add_section(
        self,
        name: str,
        content: str,
        priority: SectionPriority | None = None,
    ) -> None:
        """Add a section in presentation order; empty content is ignored."""
        if not content:
            return
        section_priority = priority or self.priorities.get(name, SectionPriority.MEDIUM)
        self._sections.append(ContextSection(name=name, content=content, priority=section_priority))

    def compile(self, separator: str = "\n\n") -> BudgetResult:
        """Compile sections within budget.

        Args:
            separator: String to join sections with.

        Returns:
            BudgetResult with compiled content and metadata.
        """
        if not self._sections:
            return BudgetResult(
                content="",
                total_tokens=0,
                sections_included=[],
                sections_excluded=[],
                utilization=0.0,
            )

        # Stable sort keeps presentation order among equal priorities
        by_priority = sorted(
            enumerate(self._sections),
            key=lambda pair: pair[1].priority,
            reverse=True,
        )

        included: dict[int, ContextSection] = {}
        excluded: list[str] = []
        total_tokens = 0
        separator_tokens = estimate_tokens(separator)

        for index, section in by_priority:
            section_tokens = section.token_count + (separator_tokens if included else 0)

            if total_tokens + section_tokens <= self.max_tokens:
                included[index] = section
                total_tokens += section_tokens
            elif section.priority >= SectionPriority.CRITICAL:
                available = max(
                    self.max_tokens - total_tokens - separator_tokens,
                    MIN_CRITICAL_TOKENS,
                )
                truncated = ContextSection(
                    name=section.name,
                    content=self._truncate_to_tokens(section.content, available),
                    priority=section.priority,
                )
                included[index] = truncated
                total_tokens += truncated.token_count + separator_tokens
            else:
                excluded.append(section.name)

        if excluded:
            logger.debug(f"Context budget {self.max_tokens} dropped sections: {excluded}")

        ordered = [included[i] for i in sorted(included)]
        return BudgetResult(
            content=separator.join(s.content for s in ordered if s.content),
            total_tokens=total_tokens,
            sections_included=[s.name for s in ordered],
            sections_excluded=excluded,
            utilization=total_tokens / self.max_tokens if self.max_tokens > 0 else 0.0,
        )

    def _truncate_to_tokens(self, text: str, max_tokens: int) -> str:
        """Truncate text to fit within token limit, at a natural break if possible."""
        if estimate_tokens(text) <= max_tokens:
            return text

        char_limit = (max_tokens - 1) * 4 - 3  # Leave room for "..."
        if char_limit <= 0:
            return ""

        truncated = text[:char_limit]
        for break_char in ["\n\n", "\n", ". ", "! ", "? "]:
            last_break = truncated.rfind(break_char)
            if last_break > char_limit // 2:
                return truncated[: last_break + len(break_char)].rstrip() + "..."

        return truncated.rstrip() + "..."


def render_sections(
    sections: list[tuple[str, str]],
    token_budget: int | None = None,
    separator: str = "\n\n",
) -> str:
    """Join named sections, applying a token budget when one is set.

    Args:
        sections: (name, content) pairs in presentation order.
        token_budget: Maximum tokens, or None for no limit.
        separator: String placed between sections.

    Returns:
        The assembled context text.
    """
    if token_budget is None:
        return separator.join(content for _, content in sections if content)

    budget = ContextBudget(max_tokens=token_budget)
    for name, content in sections:
        budget.add_section(name, content)
    return budget.compile(separator=separator).content
