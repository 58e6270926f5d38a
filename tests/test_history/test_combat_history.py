"""Tests for CombatHistory - round-keyed actions with a rolling summary."""

from dm_context.config import CombatContextConfig
from dm_context.context import build_combat_context
from dm_context.history import ActionOutcome, CombatActionRecord, CombatHistory
from dm_context.state import ActorClass, CombatAction


def _attack(actor: str = "Aric", target: str = "Goblin", is_player: bool = True) -> CombatAction:
    return CombatAction(
        actor_id=actor.lower(),
        actor_name=actor,
        actor_is_player=is_player,
        action_type="attack",
        target_names=[target],
    )


class TestActionOutcome:
    """Tests for outcome result sentences."""

    def test_damage(self):
        assert ActionOutcome(damage=6).summarize() == "Hit for 6 damage."

    def test_critical_hit(self):
        assert ActionOutcome(damage=12, critical=True).summarize() == "Critical hit! Hit for 12 damage."

    def test_failure_with_reason(self):
        assert ActionOutcome(success=False, reason="missed").summarize() == "Failed (missed)."

    def test_conditions(self):
        """Condition-only outcomes list what was applied."""
        outcome = ActionOutcome(conditions_applied=("prone", "grappled"))
        assert outcome.summarize() == "Applied: prone, grappled."


class TestAddAction:
    """Tests for recording actions."""

    def test_records_into_round(self):
        """Actions are grouped by their round number."""
        history = CombatHistory()
        assert history.add_action(_attack(), ActionOutcome(damage=5), round=1, turn=1)
        assert history.add_action(_attack("Goblin", "Aric", False), ActionOutcome(damage=2), round=1, turn=2)
        assert history.rounds() == [1]
        assert [a.actor for a in history.entries(1)] == ["Aric", "Goblin"]

    def test_round_and_turn_from_snapshot(self, combat_snapshot):
        """Without explicit numbers the snapshot's combat position is used."""
        history = CombatHistory()
        history.add_action(_attack(), ActionOutcome(damage=4), snapshot=combat_snapshot)
        record = history.entries(2)[0]
        assert (record.round, record.turn) == (2, 1)
        assert history.current_round == 2

    def test_actor_class_from_snapshot(self, combat_snapshot):
        """Hostile NPCs are enemies, friendly NPCs allies, the player the player."""
        history = CombatHistory()
        history.add_action(
            CombatAction(actor_id="player-1", actor_name="Aric", action_type="attack"),
            ActionOutcome(),
            snapshot=combat_snapshot,
        )
        history.add_action(
            CombatAction(actor_id="goblin-1", actor_name="Goblin", action_type="attack"),
            ActionOutcome(),
            snapshot=combat_snapshot,
        )
        history.add_action(
            CombatAction(actor_id="npc-1", actor_name="Mira Thornwood", action_type="help"),
            ActionOutcome(),
            snapshot=combat_snapshot,
        )
        classes = [a.actor_class for a in history.entries()]
        assert classes == [ActorClass.PLAYER, ActorClass.ENEMY, ActorClass.NPC]

    def test_player_found_from_combat_state(self, combat_snapshot):
        """Without a player sheet the combatant and action flags identify the player."""
        snapshot = combat_snapshot.model_copy(update={"player": None})
        assert snapshot.actor_class("player-1") == ActorClass.PLAYER

        combat = snapshot.combat.model_copy(
            update={"combatants": {"goblin-1": snapshot.combat.combatants["goblin-1"]}}
        )
        action_only = snapshot.model_copy(update={"combat": combat})
        assert action_only.actor_class("player-1") == ActorClass.PLAYER
        assert action_only.actor_class("goblin-1") == ActorClass.ENEMY

        history = CombatHistory(CombatContextConfig(max_rounds_to_track=1))
        history.add_action(snapshot.combat.current_action, ActionOutcome(damage=6), snapshot=snapshot)
        history.add_action(_attack("Goblin", "Aric", False), ActionOutcome(damage=1), round=3, turn=1)
        assert history.rolling_summary.damage_dealt[ActorClass.PLAYER] == 6
        assert history.rolling_summary.damage_dealt[ActorClass.ENEMY] == 0

    def test_rejects_invalid_round(self):
        """Round numbers start at 1."""
        history = CombatHistory()
        record = CombatActionRecord(
            round=0, turn=1, actor="Aric", actor_class=ActorClass.PLAYER, action_type="attack"
        )
        assert history.record(record) is False
        assert history.entries() == ()

    def test_rejects_plain_string_actor_class(self, combat_snapshot):
        """Actor classes must be ActorClass members, so context can still be built."""
        history = CombatHistory()
        record = CombatActionRecord(
            round=1, turn=1, actor="Aric", actor_class="player", action_type="attack"
        )
        assert history.record(record) is False
        assert history.entries() == ()
        assert "Combat just started." in build_combat_context(combat_snapshot, history)

    def test_unknown_actor_class_never_reaches_summary(self):
        """An unknown side is rejected up front instead of failing at eviction."""
        history = CombatHistory(CombatContextConfig(max_rounds_to_track=1))
        for round_number in (1, 2):
            record = CombatActionRecord(
                round=round_number, turn=1, actor="Brom", actor_class="ally", action_type="attack"
            )
            assert history.record(record) is False
        assert history.rounds() == []
        assert history.rolling_summary.is_empty

    def test_rejects_list_targets(self):
        history = CombatHistory()
        record = CombatActionRecord(
            round=1,
            turn=1,
            actor="Aric",
            actor_class=ActorClass.PLAYER,
            action_type="attack",
            targets=["Goblin"],
        )
        assert history.record(record) is False

    def test_rejects_non_numeric_damage(self):
        history = CombatHistory()
        assert history.add_action(_attack(), ActionOutcome(damage="6"), round=1, turn=1) is False
        assert history.rounds() == []

    def test_movement_updates_position(self):
        """Move actions record where the actor went."""
        history = CombatHistory()
        move = CombatAction(
            actor_id="aric", actor_name="Aric", action_type="move", details="behind the cart"
        )
        history.add_action(move, ActionOutcome(), round=1, turn=1)
        dash = CombatAction(actor_id="goblin", actor_name="Goblin", action_type="dash")
        history.add_action(dash, ActionOutcome(), round=1, turn=2)
        assert history.positions == {
            "Aric": "behind the cart",
            "Goblin": "has dashed across the battlefield",
        }

    def test_conditions_applied_and_removed(self):
        """Conditions accumulate per target and can be removed."""
        history = CombatHistory()
        history.add_action(_attack(), ActionOutcome(conditions_applied=("prone",)), round=1, turn=1)
        assert history.conditions == {"Goblin": ["prone"]}
        history.add_action(_attack(), ActionOutcome(conditions_removed=("prone",)), round=1, turn=2)
        assert history.conditions == {}


class TestRoundEviction:
    """Tests for whole-round eviction into the rolling summary."""

    def test_oldest_round_folded(self):
        """Exceeding max_rounds_to_track folds the oldest round away."""
        history = CombatHistory(CombatContextConfig(max_rounds_to_track=3))
        for round_number in range(1, 5):
            history.add_action(_attack(), ActionOutcome(damage=round_number), round=round_number, turn=1)

        assert history.rounds() == [2, 3, 4]
        summary = history.rolling_summary
        assert summary.rounds_folded == 1
        assert summary.first_round == 1
        assert summary.damage_dealt[ActorClass.PLAYER] == 1

    def test_retained_rounds_never_exceed_bound(self):
        """However many rounds are played, at most the bound is retained."""
        history = CombatHistory(CombatContextConfig(max_rounds_to_track=2))
        for round_number in range(1, 10):
            history.add_action(_attack(), ActionOutcome(damage=1), round=round_number, turn=1)
            assert len(history.rounds()) <= 2

    def test_late_action_for_folded_round_rejected(self):
        """A round already summarized cannot receive more actions."""
        history = CombatHistory(CombatContextConfig(max_rounds_to_track=1))
        history.add_action(_attack(), ActionOutcome(damage=1), round=1, turn=1)
        history.add_action(_attack(), ActionOutcome(damage=1), round=2, turn=1)
        assert history.add_action(_attack(), ActionOutcome(damage=9), round=1, turn=2) is False
        assert history.rolling_summary.damage_dealt[ActorClass.PLAYER] == 1

    def test_critical_hits_become_notable_events(self):
        """Critical results are remembered after their round is folded."""
        history = CombatHistory(CombatContextConfig(max_rounds_to_track=1))
        history.add_action(_attack(), ActionOutcome(damage=12, critical=True), round=1, turn=1)
        history.add_action(_attack(), ActionOutcome(damage=1), round=2, turn=1)
        events = list(history.rolling_summary.notable_events)
        assert len(events) == 1
        assert events[0].startswith("Round 1: Aric critical hit!")

    def test_shrinking_bound_folds_rounds(self):
        """Lowering max_rounds_to_track folds rounds immediately."""
        history = CombatHistory()
        for round_number in range(1, 4):
            history.add_action(_attack(), ActionOutcome(damage=2), round=round_number, turn=1)
        history.update_config(max_rounds_to_track=1)
        assert history.rounds() == [3]
        assert history.rolling_summary.rounds_folded == 2


class TestCombatSummary:
    """Tests for whole-combat summaries."""

    def test_empty_combat(self):
        assert CombatHistory().generate_combat_summary() == "Combat has just begun."

    def test_totals_include_folded_and_retained(self):
        """Damage totals cover evicted and retained rounds alike."""
        history = CombatHistory(CombatContextConfig(max_rounds_to_track=1))
        history.add_action(_attack(), ActionOutcome(damage=5), round=1, turn=1)
        history.add_action(_attack("Goblin", "Aric", False), ActionOutcome(damage=3), round=2, turn=1)

        summary = history.generate_combat_summary()
        assert "Combat has lasted 2 rounds so far." in summary
        assert "The player has dealt 5 damage and received 3 damage." in summary

    def test_summary_does_not_change_rolling_state(self):
        """Generating a summary leaves the rolling summary untouched."""
        history = CombatHistory()
        history.add_action(_attack(), ActionOutcome(damage=5), round=1, turn=1)
        history.generate_combat_summary()
        assert history.rolling_summary.is_empty

    def test_clear_resets_combat(self):
        """Clearing forgets rounds, summary, positions and conditions."""
        history = CombatHistory(CombatContextConfig(max_rounds_to_track=1))
        history.add_action(_attack(), ActionOutcome(damage=1, conditions_applied=("prone",)), round=1, turn=1)
        history.add_action(_attack(), ActionOutcome(damage=1), round=2, turn=1)
        history.set_environment("A muddy field")
        history.clear()
        assert history.rounds() == []
        assert history.rolling_summary.is_empty
        assert history.conditions == {}
        assert history.environment == ""
        assert history.current_round == 1
