"""Context assembly from game-state snapshots and history stores."""

from dm_context.context.assembler import build_context
from dm_context.context.budget import (
    BudgetResult,
    ContextBudget,
    ContextSection,
    SectionPriority,
    estimate_tokens,
    render_sections,
)
from dm_context.context.combat import build_combat_context
from dm_context.context.location import (
    NearbyLocation,
    build_location_context,
    build_transition_context,
    find_connection,
    nearby_locations,
)
from dm_context.context.narrative import build_narrative_context

__all__ = [
    "BudgetResult",
    "ContextBudget",
    "ContextSection",
    "NearbyLocation",
    "SectionPriority",
    "build_combat_context",
    "build_context",
    "build_location_context",
    "build_narrative_context",
    "build_transition_context",
    "estimate_tokens",
    "find_connection",
    "nearby_locations",
    "render_sections",
]
