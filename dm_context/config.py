"""Configuration for context assembly and response validation.

Process-wide defaults come from the environment via pydantic-settings.
Each domain (narrative, location, combat, validation) has its own frozen
configuration model; stores and validators hold one instance and replace
it wholesale through ``with_defaults`` rather than mutating it.
"""

import logging
from enum import Enum
from functools import lru_cache
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StrictnessLevel(str, Enum):
    """Named threshold profile for validation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Minimum passing score per strictness level
STRICTNESS_THRESHOLDS: dict[StrictnessLevel, int] = {
    StrictnessLevel.LOW: 60,
    StrictnessLevel.MEDIUM: 75,
    StrictnessLevel.HIGH: 90,
}


class _DomainConfig(BaseModel):
    """Base for immutable per-domain configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class NarrativeContextConfig(_DomainConfig):
    """Retention and section toggles for narrative context."""

    max_history_items: int = Field(default=10, ge=1, description="Exchanges kept before FIFO eviction")
    include_character_details: bool = True
    include_location_details: bool = True
    include_active_quests: bool = True
    include_recent_combats: bool = True
    max_combat_summaries: int = Field(default=3, ge=0)
    token_budget: int | None = Field(default=2000, ge=1)


class LocationContextConfig(_DomainConfig):
    """Retention and section toggles for location context."""

    max_location_history: int = Field(default=5, ge=1, description="Visits kept per location")
    include_visit_history: bool = True
    include_nearby_locations: bool = True
    include_npc_details: bool = True
    include_weather: bool = True
    include_time_of_day: bool = True
    include_player_history: bool = True
    max_details_per_location: int = Field(default=10, ge=0)
    token_budget: int | None = Field(default=None, ge=1)


class CombatContextConfig(_DomainConfig):
    """Retention and section toggles for combat context."""

    max_rounds_to_track: int = Field(default=3, ge=1, description="Whole rounds kept in detail")
    include_actor_details: bool = True
    include_target_details: bool = True
    include_environmental_details: bool = True
    include_positioning: bool = True
    include_condition_effects: bool = True
    include_tactical_suggestions: bool = False
    token_budget: int | None = Field(default=1500, ge=1)


class ValidationConfig(_DomainConfig):
    """Checker toggles and pass/fail thresholds for response validation."""

    world_consistency_check: bool = True
    character_consistency_check: bool = True
    rule_accuracy_check: bool = True
    narrative_quality_check: bool = True
    tone_check: bool = True
    strictness_level: StrictnessLevel = StrictnessLevel.MEDIUM
    # None means "derive from strictness_level"
    min_validation_score: int | None = Field(default=None, ge=0, le=100)
    max_issues: int | None = Field(default=5, ge=0)
    max_critical_issues: int = Field(default=0, ge=0)
    critical_issue_types: frozenset[str] | None = None
    length_bonus_enabled: bool = True

    @field_validator("critical_issue_types", mode="before")
    @classmethod
    def _normalize_issue_types(cls, value: Any) -> Any:
        """Store issue types as their plain string values."""
        if value is None:
            return None
        return frozenset(getattr(item, "value", item) for item in value)

    @property
    def threshold(self) -> int:
        """Minimum passing score after applying strictness."""
        if self.min_validation_score is not None:
            return self.min_validation_score
        return STRICTNESS_THRESHOLDS[self.strictness_level]


ConfigT = TypeVar("ConfigT", bound=_DomainConfig)


def with_defaults(
    config_cls: type[ConfigT],
    overrides: Mapping[str, Any] | None = None,
    base: ConfigT | None = None,
) -> ConfigT:
    """Merge overrides onto a base configuration.

    Args:
        config_cls: Configuration model to build.
        overrides: Field values to change. Unknown keys are rejected.
        base: Existing configuration to start from (class defaults if None).

    Returns:
        A new validated configuration instance. Neither input is modified.

    Raises:
        pydantic.ValidationError: If an override key or value is invalid.
    """
    merged: dict[str, Any] = base.model_dump() if base is not None else {}
    merged.update(overrides or {})
    return config_cls.model_validate(merged)


class Settings(BaseSettings):
    """Process defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DM_CONTEXT_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"

    # Retention bounds
    narrative_max_history_items: int = 10
    location_max_history: int = 5
    combat_max_rounds_to_track: int = 3

    # Token budgets (0 disables budgeting for that domain)
    narrative_token_budget: int = 2000
    location_token_budget: int = 0
    combat_token_budget: int = 1500

    # Validation
    validation_strictness: StrictnessLevel = StrictnessLevel.MEDIUM
    validation_min_score: int | None = None

    def narrative_config(self) -> NarrativeContextConfig:
        """Build the narrative config from these settings."""
        return NarrativeContextConfig(
            max_history_items=self.narrative_max_history_items,
            token_budget=self.narrative_token_budget or None,
        )

    def location_config(self) -> LocationContextConfig:
        """Build the location config from these settings."""
        return LocationContextConfig(
            max_location_history=self.location_max_history,
            token_budget=self.location_token_budget or None,
        )

    def combat_config(self) -> CombatContextConfig:
        """Build the combat config from these settings."""
        return CombatContextConfig(
            max_rounds_to_track=self.combat_max_rounds_to_track,
            token_budget=self.combat_token_budget or None,
        )

    def validation_config(self) -> ValidationConfig:
        """Build the validation config from these settings."""
        return ValidationConfig(
            strictness_level=self.validation_strictness,
            min_validation_score=self.validation_min_score,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Set the package logger level.

    Handlers are left to the host application.
    """
    level_name = (level or get_settings().log_level).upper()
    logging.getLogger("dm_context").setLevel(level_name)
