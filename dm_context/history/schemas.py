"""History entry types.

Entries are frozen dataclasses. A store that needs to amend an entry
(e.g. adding a discovery to the latest location visit) swaps in an
updated copy instead of mutating it in place.
"""

import re
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

from dm_context.state import ActorClass

DAMAGE_PATTERN = re.compile(r"Hit for (\d+) damage", re.IGNORECASE)
APPLIED_PATTERN = re.compile(r"Applied:\s*([^.]+)", re.IGNORECASE)

# Notable events kept in the rolling combat summary
MAX_NOTABLE_EVENTS = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NarrativeExchange:
    """One player input and the narrator's reply."""

    player_input: str
    dm_response: str
    location_id: str | None = None
    situation_context: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class LocationVisit:
    """Everything recorded during one visit to a location."""

    location_id: str
    timestamp: datetime = field(default_factory=_utcnow)
    npcs_present: tuple[str, ...] = ()
    player_actions: tuple[str, ...] = ()
    discoveries: tuple[str, ...] = ()
    environmental_changes: tuple[str, ...] = ()
    additional_details: tuple[str, ...] = ()


@dataclass(frozen=True)
class ActionOutcome:
    """Mechanical result of a combat action as reported by the rules engine."""

    success: bool = True
    damage: int = 0
    healing: int = 0
    conditions_applied: tuple[str, ...] = ()
    conditions_removed: tuple[str, ...] = ()
    critical: bool = False
    reason: str | None = None

    def summarize(self) -> str:
        """Render the outcome as a short result sentence."""
        if not self.success:
            text = f"Failed ({self.reason})." if self.reason else "Failed."
            return f"Critical miss! {text}" if self.critical else text

        if self.damage:
            text = f"Hit for {self.damage} damage."
        elif self.healing:
            text = f"Healed for {self.healing} hit points."
        elif self.conditions_applied:
            text = f"Applied: {', '.join(self.conditions_applied)}."
        else:
            text = "Succeeded."
        return f"Critical hit! {text}" if self.critical else text


@dataclass(frozen=True)
class CombatActionRecord:
    """One action taken during a combat round."""

    round: int
    turn: int
    actor: str
    actor_class: ActorClass
    action_type: str
    targets: tuple[str, ...] = ()
    result_summary: str = ""
    outcome: ActionOutcome | None = None
    description: str = ""
    timestamp: datetime = field(default_factory=_utcnow)

    def describe(self) -> str:
        """Single history line for this action."""
        targets = ", ".join(self.targets) if self.targets else "no target"
        line = f"{self.actor} ({self.actor_class.value}): {self.action_type} against {targets}."
        if self.result_summary:
            line = f"{line} {self.result_summary}"
        return line


@dataclass
class RollingCombatSummary:
    """Running aggregate of combat rounds that are no longer kept in detail.

    Rounds are folded in one at a time as they are evicted, so the cost of
    keeping the summary current is proportional to the evicted round only.
    """

    rounds_folded: int = 0
    first_round: int | None = None
    last_round: int | None = None
    damage_dealt: dict[ActorClass, int] = field(
        default_factory=lambda: {actor_class: 0 for actor_class in ActorClass}
    )
    healing_done: dict[ActorClass, int] = field(
        default_factory=lambda: {actor_class: 0 for actor_class in ActorClass}
    )
    conditions: dict[str, None] = field(default_factory=dict)  # ordered set
    notable_events: deque[str] = field(default_factory=lambda: deque(maxlen=MAX_NOTABLE_EVENTS))

    @property
    def is_empty(self) -> bool:
        return self.rounds_folded == 0

    def fold(self, round_number: int, actions: list[CombatActionRecord]) -> None:
        """Add one whole round to the aggregate."""
        self.rounds_folded += 1
        if self.first_round is None or round_number < self.first_round:
            self.first_round = round_number
        if self.last_round is None or round_number > self.last_round:
            self.last_round = round_number

        for action in actions:
            damage, healing, applied = self._extract(action)
            self.damage_dealt[action.actor_class] += damage
            self.healing_done[action.actor_class] += healing
            for condition in applied:
                self.conditions.setdefault(condition, None)

            if "critical" in action.result_summary.lower():
                targets = ", ".join(action.targets) if action.targets else "no target"
                self.notable_events.append(
                    f"Round {round_number}: {action.actor} {action.result_summary.lower()} on {targets}"
                )

    def copy(self) -> "RollingCombatSummary":
        """Independent copy, for folding retained rounds without touching this one."""
        return RollingCombatSummary(
            rounds_folded=self.rounds_folded,
            first_round=self.first_round,
            last_round=self.last_round,
            damage_dealt=dict(self.damage_dealt),
            healing_done=dict(self.healing_done),
            conditions=dict(self.conditions),
            notable_events=deque(self.notable_events, maxlen=MAX_NOTABLE_EVENTS),
        )

    def describe(self) -> str:
        """Render the aggregate for earlier, no-longer-detailed rounds."""
        if self.is_empty:
            return ""

        if self.first_round == self.last_round:
            span = f"round {self.first_round}"
        else:
            span = f"rounds {self.first_round}-{self.last_round}"

        parts = [
            f"Earlier {span}: damage dealt by player {self.damage_dealt[ActorClass.PLAYER]}, "
            f"by allies {self.damage_dealt[ActorClass.NPC]}, "
            f"by enemies {self.damage_dealt[ActorClass.ENEMY]}."
        ]
        total_healing = sum(self.healing_done.values())
        if total_healing:
            parts.append(f"Healing done: {total_healing}.")
        if self.conditions:
            parts.append(f"Conditions applied: {', '.join(self.conditions)}.")
        if self.notable_events:
            parts.append(f"Notable events: {'; '.join(self.notable_events)}.")
        return " ".join(parts)

    @staticmethod
    def _extract(action: CombatActionRecord) -> tuple[int, int, list[str]]:
        """Damage, healing and conditions for one action.

        Structured outcomes are preferred; records built from free text
        fall back to parsing the result summary.
        """
        if action.outcome is not None:
            outcome = action.outcome
            damage = outcome.damage if outcome.success else 0
            healing = outcome.healing if outcome.success else 0
            return damage, healing, list(outcome.conditions_applied)

        damage = 0
        match = DAMAGE_PATTERN.search(action.result_summary)
        if match:
            damage = int(match.group(1))

        applied: list[str] = []
        match = APPLIED_PATTERN.search(action.result_summary)
        if match:
            applied = [c.strip() for c in match.group(1).split(",") if c.strip()]
        return damage, 0, applied
