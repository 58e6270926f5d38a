"""Tests for GameSessionContext and NarrationTurn."""

import pytest

from dm_context.config import NarrativeContextConfig, Settings, ValidationConfig
from dm_context.exceptions import GenerationError
from dm_context.history import ActionOutcome
from dm_context.llm import GenerationOptions, GenerationResult, UsageStats
from dm_context.session import (
    GameSessionContext,
    NarrationTurn,
    TurnDecision,
    build_prompt,
)
from dm_context.validation import ResponseComponent, ValidationResult

GOOD_RESPONSE = (
    "Mira Thornwood looks up from her herbs as Aric approaches. The evening rain "
    "drums softly on the awning above her stall, and the scent of lavender hangs "
    "in the damp air. She sets down a bundle of sage and wipes her hands on her apron."
)
BAD_RESPONSE = "As an AI, I cannot..."


class ScriptedGenerator:
    """Returns canned responses in order and remembers the prompts it saw."""

    def __init__(self, *responses: str) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []
        self.options: list[GenerationOptions] = []

    async def generate(self, prompt: str, options: GenerationOptions) -> GenerationResult:
        self.prompts.append(prompt)
        self.options.append(options)
        return GenerationResult(
            text=self.responses.pop(0),
            usage=UsageStats(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )


class FailingGenerator:
    async def generate(self, prompt: str, options: GenerationOptions) -> GenerationResult:
        raise ConnectionError("service unavailable")


class TestGameSessionContext:
    """Tests for the per-session wiring."""

    def test_from_settings(self):
        """Settings drive retention bounds and strictness."""
        settings = Settings(
            _env_file=None, narrative_max_history_items=2, validation_strictness="high"
        )
        session = GameSessionContext.from_settings(settings)
        assert session.narrative.config.max_history_items == 2
        assert session.validator.config.threshold == 90

    def test_sessions_are_independent(self, snapshot):
        """Two sessions never share history."""
        first = GameSessionContext()
        second = GameSessionContext()
        first.record_exchange("Hello", "Greetings, traveller.", snapshot)
        assert len(first.narrative) == 1
        assert len(second.narrative) == 0

    def test_record_exchange_uses_current_location(self, snapshot):
        session = GameSessionContext()
        session.record_exchange("Hello", "Greetings.", snapshot)
        assert session.narrative.entries()[0].location_id == "town-1"

    def test_context_for_component(self, combat_snapshot):
        """Each component is given the matching context."""
        session = GameSessionContext()
        assert "NARRATIVE HISTORY:" in session.context_for(ResponseComponent.DIALOGUE, combat_snapshot)
        assert "COMBAT HISTORY:" in session.context_for(ResponseComponent.COMBAT, combat_snapshot)
        assert "COMBAT HISTORY:" in session.context_for(ResponseComponent.SPELL, combat_snapshot)
        assert "## Visit History" in session.context_for(ResponseComponent.LOCATION, combat_snapshot)

    def test_spell_outside_combat_uses_narrative(self, snapshot):
        session = GameSessionContext()
        assert "NARRATIVE HISTORY:" in session.context_for(ResponseComponent.SPELL, snapshot)

    def test_end_combat_moves_summary(self, combat_snapshot):
        """Ending a fight keeps its summary for later narration."""
        session = GameSessionContext()
        session.combat.add_action(
            combat_snapshot.combat.current_action, ActionOutcome(damage=6), snapshot=combat_snapshot
        )
        summary = session.end_combat()
        assert "The player has dealt 6 damage" in summary
        assert session.narrative.combat_summaries == (summary,)
        assert session.combat.rounds() == []
        assert "RECENT COMBAT EVENTS:" in session.narrative_context(combat_snapshot)

    def test_reset(self, snapshot):
        session = GameSessionContext()
        session.record_exchange("Hello", "Greetings.", snapshot)
        session.locations.record_visit("town-1")
        session.reset()
        assert len(session.narrative) == 0
        assert session.locations.location_ids == ()


class TestNarrationTurn:
    """Tests for running a turn against a generator."""

    @pytest.mark.asyncio
    async def test_valid_response_accepted_and_recorded(self, snapshot):
        session = GameSessionContext()
        generator = ScriptedGenerator(GOOD_RESPONSE)
        outcome = await NarrationTurn(session, generator).run(snapshot, "I greet Mira")

        assert outcome.decision == TurnDecision.ACCEPT
        assert outcome.accepted
        assert outcome.attempts == 1
        assert outcome.text == GOOD_RESPONSE
        assert outcome.prompt.endswith("\n\nPlayer: I greet Mira")
        assert outcome.prompt.startswith(outcome.context)
        exchange = session.narrative.entries()[-1]
        assert (exchange.player_input, exchange.dm_response) == ("I greet Mira", GOOD_RESPONSE)

    @pytest.mark.asyncio
    async def test_invalid_response_flagged(self, snapshot):
        """Without attempts left an invalid response is flagged, not recorded."""
        session = GameSessionContext()
        outcome = await NarrationTurn(session, ScriptedGenerator(BAD_RESPONSE)).run(
            snapshot, "I greet Mira"
        )
        assert outcome.decision == TurnDecision.FLAG
        assert outcome.validation.is_valid is False
        assert len(session.narrative) == 0

    @pytest.mark.asyncio
    async def test_regenerates_until_valid(self, snapshot):
        """An invalid first attempt is regenerated when attempts remain."""
        session = GameSessionContext()
        generator = ScriptedGenerator(BAD_RESPONSE, GOOD_RESPONSE)
        outcome = await NarrationTurn(session, generator, max_attempts=3).run(
            snapshot, "I greet Mira"
        )
        assert outcome.decision == TurnDecision.ACCEPT
        assert outcome.attempts == 2
        assert outcome.usage == UsageStats(20, 10, 30)
        assert len(generator.prompts) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, snapshot):
        generator = ScriptedGenerator(BAD_RESPONSE, BAD_RESPONSE)
        outcome = await NarrationTurn(GameSessionContext(), generator, max_attempts=2).run(
            snapshot, "I greet Mira"
        )
        assert outcome.decision == TurnDecision.FLAG
        assert outcome.attempts == 2

    @pytest.mark.asyncio
    async def test_generator_failure_raises(self, snapshot):
        """Generator exceptions surface as GenerationError."""
        turn = NarrationTurn(GameSessionContext(), FailingGenerator())
        with pytest.raises(GenerationError) as exc_info:
            await turn.run(snapshot, "I greet Mira")
        assert exc_info.value.attempt == 1
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_options_passed_through(self, snapshot):
        generator = ScriptedGenerator(GOOD_RESPONSE)
        options = GenerationOptions(temperature=0.2, system_prompt="You are the narrator.")
        await NarrationTurn(GameSessionContext(), generator, options=options).run(snapshot, "Hi")
        assert generator.options == [options]

    @pytest.mark.asyncio
    async def test_history_feeds_next_turn(self, snapshot):
        """An accepted exchange appears in the next turn's context."""
        session = GameSessionContext(narrative_config=NarrativeContextConfig(max_history_items=5))
        generator = ScriptedGenerator(GOOD_RESPONSE, GOOD_RESPONSE)
        turn = NarrationTurn(session, generator)
        await turn.run(snapshot, "I greet Mira")
        await turn.run(snapshot, "I ask about the cattle")
        assert "Player: I greet Mira" in generator.prompts[1].split("NARRATIVE HISTORY:")[1]

    def test_decide(self):
        turn = NarrationTurn(GameSessionContext(), ScriptedGenerator(), max_attempts=2)
        valid = ValidationResult(is_valid=True, score=100)
        invalid = ValidationResult(is_valid=False, score=40)
        assert turn.decide(valid, 1) == TurnDecision.ACCEPT
        assert turn.decide(invalid, 1) == TurnDecision.REGENERATE
        assert turn.decide(invalid, 2) == TurnDecision.FLAG

    def test_max_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            NarrationTurn(GameSessionContext(), ScriptedGenerator(), max_attempts=0)

    def test_lenient_config_accepts_more(self):
        """Validation config changes what the turn accepts."""
        session = GameSessionContext(
            validation_config=ValidationConfig(strictness_level="low", max_issues=None)
        )
        result = session.validate(BAD_RESPONSE)
        assert result.is_valid is True


def test_build_prompt():
    assert build_prompt("CONTEXT", "  I wait  ") == "CONTEXT\n\nPlayer: I wait"
