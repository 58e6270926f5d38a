"""Round-keyed combat action history with a rolling summary."""

import logging

from dm_context.config import CombatContextConfig
from dm_context.history.base import HistoryStore, is_str_tuple
from dm_context.history.schemas import (
    ActionOutcome,
    CombatActionRecord,
    RollingCombatSummary,
)
from dm_context.state import ActorClass, CombatAction, GameStateSnapshot

logger = logging.getLogger(__name__)

# Action types that change where an actor stands
MOVEMENT_DESCRIPTIONS = {
    "move": "has moved to a new position",
    "disengage": "has disengaged and moved away",
    "dash": "has dashed across the battlefield",
}


class CombatHistory(HistoryStore[CombatActionRecord, CombatContextConfig]):
    """Combat actions grouped by round.

    Retention works on whole rounds: when more than max_rounds_to_track
    rounds are held, the oldest round is folded into the rolling summary
    and dropped in one piece. Actions for a round that has already been
    folded are rejected.

    Also tracks the latest known position and active conditions per
    combatant, the environment description and an optional caller-provided
    summary line.
    """

    entry_type = CombatActionRecord
    config_type = CombatContextConfig

    def __init__(self, config: CombatContextConfig | None = None) -> None:
        super().__init__(config)
        self._rounds: dict[int, list[CombatActionRecord]] = {}
        self._summary = RollingCombatSummary()
        self._current_round = 1
        self._positions: dict[str, str] = {}
        self._conditions: dict[str, list[str]] = {}
        self.environment = ""
        self.combat_summary = ""

    def add_action(
        self,
        action: CombatAction,
        outcome: ActionOutcome,
        snapshot: GameStateSnapshot | None = None,
        round: int | None = None,
        turn: int | None = None,
    ) -> bool:
        """Record an action taken in combat and update positions/conditions.

        Args:
            action: The action as declared.
            outcome: Its mechanical result.
            snapshot: Game state, used to classify the actor and find the round.
            round: Round number (defaults to the snapshot's, then the current round).
            turn: Turn number within the round.

        Returns:
            True if recorded.
        """
        combat = snapshot.combat if snapshot is not None else None
        if round is None:
            round = combat.round if combat is not None else self._current_round
        if turn is None:
            turn = combat.turn if combat is not None else 1

        if snapshot is not None:
            actor_class = snapshot.actor_class(action.actor_id)
        else:
            actor_class = ActorClass.PLAYER if action.actor_is_player else ActorClass.ENEMY

        record = CombatActionRecord(
            round=round,
            turn=turn,
            actor=action.actor_name,
            actor_class=actor_class,
            action_type=action.action_type,
            targets=tuple(action.target_names),
            result_summary=outcome.summarize(),
            outcome=outcome,
            description=action.details,
        )
        if not self.record(record):
            return False

        self._update_positioning(action)
        self._update_conditions(action, outcome)
        return True

    def entries(self, domain_key: int | None = None) -> tuple[CombatActionRecord, ...]:
        """Actions for one round, or all retained actions in round order."""
        if domain_key is not None:
            return tuple(self._rounds.get(domain_key, ()))
        return tuple(a for r in self.rounds() for a in self._rounds[r])

    def rounds(self) -> list[int]:
        """Retained round numbers, ascending."""
        return sorted(self._rounds)

    @property
    def current_round(self) -> int:
        return self._current_round

    @property
    def rolling_summary(self) -> RollingCombatSummary:
        """Aggregate of rounds that have been evicted."""
        return self._summary

    @property
    def positions(self) -> dict[str, str]:
        return dict(self._positions)

    @property
    def conditions(self) -> dict[str, list[str]]:
        return {name: list(conds) for name, conds in self._conditions.items()}

    def set_environment(self, description: str) -> None:
        self.environment = description

    def set_combat_summary(self, summary: str) -> None:
        self.combat_summary = summary

    def generate_combat_summary(self) -> str:
        """Summarize the whole combat: folded rounds plus retained rounds."""
        if not self._rounds and self._summary.is_empty:
            return "Combat has just begun."

        totals = self._summary.copy()
        for round_number in self.rounds():
            totals.fold(round_number, self._rounds[round_number])

        parts = [
            f"Combat has lasted {totals.rounds_folded} rounds so far.",
            f"The player has dealt {totals.damage_dealt[ActorClass.PLAYER]} damage "
            f"and received {totals.damage_dealt[ActorClass.ENEMY]} damage.",
        ]
        if totals.conditions:
            parts.append(f"Active conditions in combat: {', '.join(totals.conditions)}")
        if totals.notable_events:
            parts.append(f"Notable events: {'; '.join(totals.notable_events)}")
        return " ".join(parts)

    def evict_if_over_capacity(self) -> int:
        evicted = 0
        while len(self._rounds) > self.config.max_rounds_to_track:
            oldest = min(self._rounds)
            self._summary.fold(oldest, self._rounds.pop(oldest))
            evicted += 1
            logger.debug(f"Folded combat round {oldest} into rolling summary")
        return evicted

    def clear(self, domain_key: int | None = None) -> None:
        """Clear one round, or reset the whole combat."""
        if domain_key is not None:
            self._rounds.pop(domain_key, None)
            return
        self._rounds.clear()
        self._summary = RollingCombatSummary()
        self._current_round = 1
        self._positions.clear()
        self._conditions.clear()
        self.environment = ""
        self.combat_summary = ""

    def _validate_entry(self, entry: CombatActionRecord) -> str | None:
        if not isinstance(entry.round, int) or entry.round < 1:
            return f"invalid round {entry.round!r}"
        if not isinstance(entry.turn, int) or entry.turn < 0:
            return f"invalid turn {entry.turn!r}"
        if not isinstance(entry.actor, str) or not entry.actor:
            return "action has no actor"
        if not isinstance(entry.actor_class, ActorClass):
            return f"unknown actor class {entry.actor_class!r}"
        if not isinstance(entry.action_type, str) or not isinstance(entry.result_summary, str):
            return "action_type and result_summary must be strings"
        if not is_str_tuple(entry.targets):
            return "targets must be a tuple of strings"
        outcome = entry.outcome
        if outcome is not None:
            if not isinstance(outcome, ActionOutcome):
                return f"invalid outcome of type {type(outcome).__name__}"
            if not isinstance(outcome.damage, int) or not isinstance(outcome.healing, int):
                return "outcome damage and healing must be integers"
            if not is_str_tuple(outcome.conditions_applied):
                return "outcome conditions must be a tuple of strings"
        last_folded = self._summary.last_round
        if last_folded is not None and entry.round <= last_folded:
            return f"round {entry.round} has already been summarized"
        return None

    def _append(self, entry: CombatActionRecord) -> None:
        self._rounds.setdefault(entry.round, []).append(entry)
        if entry.round > self._current_round:
            self._current_round = entry.round

    def _update_positioning(self, action: CombatAction) -> None:
        description = MOVEMENT_DESCRIPTIONS.get(action.action_type)
        if description is None:
            return
        if action.action_type == "move" and action.details:
            description = action.details
        self._positions[action.actor_name] = description

    def _update_conditions(self, action: CombatAction, outcome: ActionOutcome) -> None:
        for target in action.target_names:
            current = self._conditions.get(target, [])
            for condition in outcome.conditions_applied:
                if condition not in current:
                    current.append(condition)
            current = [c for c in current if c not in outcome.conditions_removed]
            if current:
                self._conditions[target] = current
            else:
                self._conditions.pop(target, None)
