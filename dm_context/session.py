"""Per-session wiring of history stores, context assembly and validation.

One ``GameSessionContext`` exists per game session; stores carry
session-specific eviction state and are never shared. ``NarrationTurn``
runs a single player turn against an external text generator:
assemble context, generate, validate, then accept, regenerate or flag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from dm_context.config import (
    CombatContextConfig,
    LocationContextConfig,
    NarrativeContextConfig,
    Settings,
    ValidationConfig,
    get_settings,
)
from dm_context.context import (
    build_combat_context,
    build_location_context,
    build_narrative_context,
    build_transition_context,
)
from dm_context.exceptions import GenerationError
from dm_context.history import (
    CombatHistory,
    LocationHistory,
    NarrativeExchange,
    NarrativeHistory,
)
from dm_context.llm import GenerationOptions, TextGenerator, UsageStats
from dm_context.state import GameStateSnapshot
from dm_context.validation import ResponseComponent, ResponseValidator, ValidationResult

logger = logging.getLogger(__name__)


class GameSessionContext:
    """Owns one game session's history stores and validator.

    Usage:
        session = GameSessionContext.from_settings()
        context = session.narrative_context(snapshot)
        result = session.validate(response, snapshot, context)
    """

    def __init__(
        self,
        narrative_config: NarrativeContextConfig | None = None,
        location_config: LocationContextConfig | None = None,
        combat_config: CombatContextConfig | None = None,
        validation_config: ValidationConfig | None = None,
    ) -> None:
        self.narrative = NarrativeHistory(narrative_config)
        self.locations = LocationHistory(location_config)
        self.combat = CombatHistory(combat_config)
        self.validator = ResponseValidator(validation_config)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> GameSessionContext:
        """Build a session from environment settings (cached settings if None)."""
        settings = settings or get_settings()
        return cls(
            narrative_config=settings.narrative_config(),
            location_config=settings.location_config(),
            combat_config=settings.combat_config(),
            validation_config=settings.validation_config(),
        )

    def narrative_context(
        self, snapshot: GameStateSnapshot | None, player_input: str | None = None
    ) -> str:
        return build_narrative_context(snapshot, self.narrative, player_input=player_input)

    def location_context(
        self, snapshot: GameStateSnapshot | None, location_id: str | None = None
    ) -> str:
        return build_location_context(snapshot, self.locations, location_id=location_id)

    def transition_context(
        self, snapshot: GameStateSnapshot | None, from_id: str, to_id: str
    ) -> str:
        return build_transition_context(snapshot, self.locations, from_id, to_id)

    def combat_context(self, snapshot: GameStateSnapshot | None) -> str:
        return build_combat_context(snapshot, self.combat)

    def context_for(
        self, component: ResponseComponent, snapshot: GameStateSnapshot | None
    ) -> str:
        """Context for the kind of generation being requested.

        Combat and spell narration use combat context while a fight is on;
        location descriptions use location context; everything else uses
        narrative context.
        """
        in_combat = snapshot is not None and snapshot.combat is not None
        if component == ResponseComponent.COMBAT or (
            component == ResponseComponent.SPELL and in_combat
        ):
            return self.combat_context(snapshot)
        if component == ResponseComponent.LOCATION:
            return self.location_context(snapshot)
        return self.narrative_context(snapshot)

    def validate(
        self,
        text: str | None,
        snapshot: GameStateSnapshot | None = None,
        context: str = "",
        component: ResponseComponent = ResponseComponent.NARRATIVE,
    ) -> ValidationResult:
        return self.validator.validate(text, snapshot, context=context, component=component)

    def record_exchange(
        self,
        player_input: str,
        dm_response: str,
        snapshot: GameStateSnapshot | None = None,
    ) -> bool:
        """Add an accepted exchange to the narrative history."""
        location_id = None
        if snapshot is not None and snapshot.current_location is not None:
            location_id = snapshot.current_location.id
        return self.narrative.record(
            NarrativeExchange(
                player_input=player_input,
                dm_response=dm_response,
                location_id=location_id,
            )
        )

    def end_combat(self) -> str:
        """Close the current fight: keep its summary for narration and reset combat history.

        Returns:
            The summary that was stored.
        """
        summary = self.combat.generate_combat_summary()
        self.narrative.add_combat_summary(summary)
        self.combat.clear()
        logger.debug("Combat ended, summary moved to narrative history")
        return summary

    def reset(self) -> None:
        """Forget everything recorded in this session."""
        self.narrative.clear()
        self.locations.clear()
        self.combat.clear()


class TurnDecision(str, Enum):
    """What to do with a generated response."""

    ACCEPT = "accept"
    REGENERATE = "regenerate"
    FLAG = "flag"


@dataclass(frozen=True)
class TurnOutcome:
    """Result of running one narration turn.

    Attributes:
        context: Assembled context used for the final attempt.
        prompt: Prompt sent to the generator.
        text: Final generated response.
        usage: Token usage summed over all attempts.
        validation: Validation result of the final response.
        attempts: Number of generation attempts made.
        decision: ACCEPT, or FLAG when no attempt passed validation.
    """

    context: str
    prompt: str
    text: str
    usage: UsageStats
    validation: ValidationResult
    attempts: int
    decision: TurnDecision

    @property
    def accepted(self) -> bool:
        return self.decision == TurnDecision.ACCEPT


def build_prompt(context: str, player_input: str) -> str:
    """Assembled context followed by the player's input."""
    return f"{context}\n\nPlayer: {player_input.strip()}"


class NarrationTurn:
    """Runs one player turn: context, generation, validation, decision.

    Usage:
        turn = NarrationTurn(session, generator, max_attempts=2)
        outcome = await turn.run(snapshot, "I search the room")
        if not outcome.accepted:
            review = session.validator.suggest_correction(outcome.text, outcome.validation.issues)
    """

    def __init__(
        self,
        session: GameSessionContext,
        generator: TextGenerator,
        max_attempts: int = 1,
        options: GenerationOptions | None = None,
    ) -> None:
        """Initialize turn runner.

        Args:
            session: Session whose stores and validator are used.
            generator: External text generator.
            max_attempts: Generation attempts before flagging (at least 1).
            options: Sampling options passed to the generator.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session = session
        self.generator = generator
        self.max_attempts = max_attempts
        self.options = options or GenerationOptions()

    def decide(self, validation: ValidationResult, attempt: int) -> TurnDecision:
        """Decision for a validated response on a given 1-based attempt."""
        if validation.is_valid:
            return TurnDecision.ACCEPT
        if attempt < self.max_attempts:
            return TurnDecision.REGENERATE
        return TurnDecision.FLAG

    async def run(
        self,
        snapshot: GameStateSnapshot | None,
        player_input: str,
        component: ResponseComponent = ResponseComponent.NARRATIVE,
    ) -> TurnOutcome:
        """Generate and validate a response for the player's input.

        Accepted responses are recorded into the session's narrative
        history. Flagged responses are returned without being recorded.

        Raises:
            GenerationError: If the generator itself fails.
        """
        context = self.session.context_for(component, snapshot)
        prompt = build_prompt(context, player_input)
        usage = UsageStats()

        attempt = 0
        while True:
            attempt += 1
            try:
                result = await self.generator.generate(prompt, self.options)
            except Exception as e:
                raise GenerationError(f"Text generation failed: {e}", attempt=attempt) from e

            usage = usage + result.usage
            validation = self.session.validate(result.text, snapshot, context, component)
            decision = self.decide(validation, attempt)

            if decision != TurnDecision.REGENERATE:
                break
            logger.debug(
                f"Regenerating response (attempt {attempt}): score={validation.score}, "
                f"issues={len(validation.issues)}"
            )

        if decision == TurnDecision.ACCEPT:
            self.session.record_exchange(player_input, result.text, snapshot)
        else:
            logger.info(f"Response flagged after {attempt} attempt(s), score={validation.score}")

        return TurnOutcome(
            context=context,
            prompt=prompt,
            text=result.text,
            usage=usage,
            validation=validation,
            attempts=attempt,
            decision=decision,
        )
