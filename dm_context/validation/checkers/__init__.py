"""Built-in checkers, grouped by the config flag that enables them."""

from dm_context.validation.checkers.base import Checker, CheckerGroup
from dm_context.validation.checkers.character import (
    check_character_traits,
    check_class_abilities,
)
from dm_context.validation.checkers.quality import (
    check_combat_sensory,
    check_completeness,
    check_context_echo,
    check_location_senses,
    check_passive_voice,
    check_repetitive_openers,
)
from dm_context.validation.checkers.rules import (
    check_ability_scores,
    check_action_economy,
    check_dice_notation,
    check_skill_checks,
    check_spell_levels,
)
from dm_context.validation.checkers.tone import check_meta_narrative, check_tone_mixing
from dm_context.validation.checkers.world import (
    check_context_contradictions,
    check_unknown_locations,
    check_unknown_npcs,
    check_world_facts,
)

DEFAULT_CHECKERS: dict[CheckerGroup, tuple[Checker, ...]] = {
    CheckerGroup.WORLD_CONSISTENCY: (
        check_world_facts,
        check_unknown_locations,
        check_unknown_npcs,
        check_context_contradictions,
    ),
    CheckerGroup.CHARACTER_CONSISTENCY: (
        check_character_traits,
        check_class_abilities,
    ),
    CheckerGroup.RULE_ACCURACY: (
        check_ability_scores,
        check_dice_notation,
        check_skill_checks,
        check_action_economy,
        check_spell_levels,
    ),
    CheckerGroup.NARRATIVE_QUALITY: (
        check_completeness,
        check_repetitive_openers,
        check_passive_voice,
        check_combat_sensory,
        check_location_senses,
        check_context_echo,
    ),
    CheckerGroup.TONE: (
        check_meta_narrative,
        check_tone_mixing,
    ),
}

__all__ = [
    "Checker",
    "CheckerGroup",
    "DEFAULT_CHECKERS",
    "check_ability_scores",
    "check_action_economy",
    "check_character_traits",
    "check_class_abilities",
    "check_combat_sensory",
    "check_completeness",
    "check_context_contradictions",
    "check_context_echo",
    "check_dice_notation",
    "check_location_senses",
    "check_meta_narrative",
    "check_passive_voice",
    "check_repetitive_openers",
    "check_skill_checks",
    "check_spell_levels",
    "check_tone_mixing",
    "check_unknown_locations",
    "check_unknown_npcs",
    "check_world_facts",
]
