"""Context assembly and response validation for LLM-narrated games."""

from dm_context.config import (
    CombatContextConfig,
    LocationContextConfig,
    NarrativeContextConfig,
    Settings,
    StrictnessLevel,
    ValidationConfig,
    configure_logging,
    get_settings,
    with_defaults,
)
from dm_context.context import build_context
from dm_context.exceptions import DMContextError, GenerationError
from dm_context.history import CombatHistory, LocationHistory, NarrativeHistory
from dm_context.session import GameSessionContext, NarrationTurn, TurnDecision, TurnOutcome
from dm_context.state import GameStateSnapshot
from dm_context.validation import ResponseValidator, ValidationResult

__version__ = "0.1.0"

__all__ = [
    "CombatContextConfig",
    "CombatHistory",
    "DMContextError",
    "GameSessionContext",
    "GameStateSnapshot",
    "GenerationError",
    "LocationContextConfig",
    "LocationHistory",
    "NarrationTurn",
    "NarrativeContextConfig",
    "NarrativeHistory",
    "ResponseValidator",
    "Settings",
    "StrictnessLevel",
    "TurnDecision",
    "TurnOutcome",
    "ValidationConfig",
    "ValidationResult",
    "build_context",
    "configure_logging",
    "get_settings",
    "with_defaults",
]
