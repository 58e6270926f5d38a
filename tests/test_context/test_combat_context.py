"""Tests for combat context assembly and the assembler entry point."""

import pytest

from dm_context.config import CombatContextConfig
from dm_context.context import build_combat_context, build_context
from dm_context.context.combat import COMBAT_STARTED_PLACEHOLDER, INSUFFICIENT_INFORMATION
from dm_context.history import ActionOutcome, HistoryStore
from dm_context.state import CombatAction, Combatant


class TestBuildCombatContext:
    """Tests for build_combat_context."""

    def test_no_combat(self, snapshot, combat_history):
        """A snapshot without combat yields the insufficient-information message."""
        assert build_combat_context(snapshot, combat_history) == INSUFFICIENT_INFORMATION

    def test_empty_history_placeholder(self, combat_snapshot, combat_history):
        """A fresh fight says combat just started."""
        text = build_combat_context(combat_snapshot, combat_history)
        assert text.startswith("Combat Round: 2\nCurrent Turn: 1")
        assert COMBAT_STARTED_PLACEHOLDER in text

    def test_history_rounds(self, combat_snapshot, combat_history):
        """Recorded actions are listed under their round."""
        combat_history.add_action(
            combat_snapshot.combat.current_action,
            ActionOutcome(damage=4),
            snapshot=combat_snapshot,
        )
        text = build_combat_context(combat_snapshot, combat_history)
        assert "Round 2:\nAric (player): attack against Goblin. Hit for 4 damage." in text
        assert COMBAT_STARTED_PLACEHOLDER not in text

    def test_current_action_and_details(self, combat_snapshot, combat_history):
        """The current action lists actor and target details."""
        text = build_combat_context(combat_snapshot, combat_history)
        assert "Actor: Aric (Player)" in text
        assert "Targets: Goblin" in text
        assert "Details: Longsword swing" in text
        assert "Target Details:\nName: Goblin\nHealth: Badly wounded (2/7 HP)" in text

    def test_sides_labelled_by_actor_class(self, combat_snapshot, combat_history):
        """Friendly NPCs are labelled allies, hostile ones enemies."""
        combatants = dict(combat_snapshot.combat.combatants)
        combatants["npc-1"] = Combatant(id="npc-1", name="Mira Thornwood", hp_current=9, hp_max=9)
        action = CombatAction(
            actor_id="npc-1", actor_name="Mira Thornwood", action_type="help", target_names=["Aric"]
        )
        combat = combat_snapshot.combat.model_copy(
            update={"combatants": combatants, "current_action": action}
        )
        snapshot = combat_snapshot.model_copy(update={"combat": combat})

        text = build_combat_context(snapshot, combat_history)
        assert "Aric (Player): Healthy" in text
        assert "Goblin (Enemy): Badly wounded" in text
        assert "Mira Thornwood (Ally): Healthy" in text
        assert "Actor: Mira Thornwood (Ally)" in text

    def test_repeated_builds_identical(self, combat_snapshot, combat_history):
        """The same store state always yields the same text."""
        combat_history.add_action(
            combat_snapshot.combat.current_action, ActionOutcome(damage=4), snapshot=combat_snapshot
        )
        config = CombatContextConfig(include_tactical_suggestions=True)
        first = build_combat_context(combat_snapshot, combat_history, config)
        assert build_combat_context(combat_snapshot, combat_history, config) == first

    def test_section_order(self, combat_snapshot, combat_history):
        """Fixed order from header to tactical notes."""
        combat_history.set_environment("A muddy clearing")
        move = CombatAction(actor_id="goblin-1", actor_name="Goblin", action_type="disengage")
        combat_history.add_action(move, ActionOutcome(), snapshot=combat_snapshot)
        combat_history.add_action(
            combat_snapshot.combat.current_action,
            ActionOutcome(conditions_applied=("prone",)),
            snapshot=combat_snapshot,
        )
        config = CombatContextConfig(include_tactical_suggestions=True)
        text = build_combat_context(combat_snapshot, combat_history, config)
        headers = [
            "Combat Round:",
            "Combat Environment: A muddy clearing",
            "COMBATANTS:",
            "COMBAT HISTORY:",
            "CURRENT ACTION:",
            "POSITIONING:",
            "CONDITIONS:",
            "TACTICAL NOTES:",
        ]
        positions = [text.index(h) for h in headers]
        assert positions == sorted(positions)
        assert "Goblin is affected by prone" in text

    def test_tactics_off_by_default(self, combat_snapshot, combat_history):
        assert "TACTICAL NOTES" not in build_combat_context(combat_snapshot, combat_history)

    def test_all_toggles_off_keeps_history(self, combat_snapshot, combat_history):
        """With every optional section off, the history placeholder remains."""
        config = CombatContextConfig(
            include_actor_details=False,
            include_target_details=False,
            include_environmental_details=False,
            include_positioning=False,
            include_condition_effects=False,
        )
        text = build_combat_context(combat_snapshot, combat_history, config)
        assert COMBAT_STARTED_PLACEHOLDER in text
        assert "COMBATANTS" not in text
        assert "Target Details" not in text


class TestBuildContext:
    """Tests for dispatching on the history store."""

    def test_dispatches_by_store(
        self, combat_snapshot, narrative_history, location_history, combat_history
    ):
        """Each store type gets its own assembler."""
        assert "NARRATIVE HISTORY:" in build_context(
            combat_snapshot, narrative_history, player_input="Hi"
        )
        assert "## Location Information" in build_context(combat_snapshot, location_history)
        assert "COMBAT HISTORY:" in build_context(combat_snapshot, combat_history)

    def test_unknown_store_raises(self, snapshot):
        """Stores without an assembler are a programming error."""

        class OtherStore(HistoryStore):
            entry_type = str
            config_type = dict

            def entries(self, domain_key=None):
                return ()

            def evict_if_over_capacity(self):
                return 0

            def clear(self, domain_key=None):
                pass

            def _append(self, entry):
                pass

        with pytest.raises(TypeError):
            build_context(snapshot, OtherStore())
