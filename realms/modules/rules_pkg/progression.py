# progression.py
"""Per-level resource snapshots for players and creatures."""
import logging
import math
from typing import Dict, Any, Optional

from ...shared import to_number, get_field
from . import constants
from .core import (
    RulesLike,
    calculate_ability_points,
    calculate_skill_points,
    calculate_health_energy_pool,
    calculate_proficiency,
    calculate_training_points,
    calculate_creature_training_points,
    calculate_creature_feat_points,
    calculate_creature_currency,
    calculate_max_archetype_feats,
    calculate_max_character_feats,
)
from .archetype import calculate_archetype_progression, is_archetype_milestone
from .calculations import get_archetype_ability_score

logger = logging.getLogger("realms.rules.progression")


def get_player_progression(level: Any, highest_archetype_ability: Any = 0, rules: RulesLike = None) -> Dict[str, Any]:
    """Player resources at a level. Players never use fractional levels."""
    lvl = max(1, to_number(level, 1))
    return {
        "level": lvl,
        "abilityPoints": calculate_ability_points(lvl, rules=rules),
        "skillPoints": calculate_skill_points(lvl, constants.ENTITY_PLAYER, rules),
        "healthEnergyPool": calculate_health_energy_pool(lvl, constants.ENTITY_PLAYER, rules=rules),
        "trainingPoints": calculate_training_points(lvl, highest_archetype_ability, rules),
        "proficiency": calculate_proficiency(lvl, rules=rules),
        "maxArchetypeFeats": calculate_max_archetype_feats(lvl),
        "maxCharacterFeats": calculate_max_character_feats(lvl),
    }


def get_creature_progression(level: Any, highest_non_vitality: Any = 0, martial_prof: Any = 0,
                             rules: RulesLike = None) -> Dict[str, Any]:
    """Creature resources at a level; fractional levels below 1 are allowed."""
    lvl = to_number(level, 1) or 1
    return {
        "level": lvl,
        "abilityPoints": calculate_ability_points(lvl, True, rules, constants.ENTITY_CREATURE),
        "skillPoints": calculate_skill_points(lvl, constants.ENTITY_CREATURE, rules),
        "healthEnergyPool": calculate_health_energy_pool(lvl, constants.ENTITY_CREATURE, True, rules),
        "trainingPoints": calculate_creature_training_points(lvl, highest_non_vitality, rules),
        "proficiency": calculate_proficiency(lvl, True, rules),
        "featPoints": calculate_creature_feat_points(lvl, martial_prof, rules),
        "currency": calculate_creature_currency(lvl, rules),
    }


def get_level_difference(from_level: Any, to_level: Any, highest_ability: Any = 0,
                         entity: str = constants.ENTITY_PLAYER, rules: RulesLike = None) -> Dict[str, Any]:
    """Resources gained (or lost) moving between two levels."""
    if str(entity).upper() == constants.ENTITY_CREATURE:
        before = get_creature_progression(from_level, highest_ability, rules=rules)
        after = get_creature_progression(to_level, highest_ability, rules=rules)
    else:
        before = get_player_progression(from_level, highest_ability, rules)
        after = get_player_progression(to_level, highest_ability, rules)
    keys = ("abilityPoints", "skillPoints", "healthEnergyPool", "trainingPoints", "proficiency")
    return {key: after[key] - before[key] for key in keys}


def get_level_progression(level: Any, highest_archetype_ability: Any = 0, martial_prof: Any = 0,
                          power_prof: Any = 0, archetype_choices: Optional[Dict[Any, Any]] = None,
                          rules: RulesLike = None) -> Dict[str, Any]:
    """
    Player progression merged with archetype progression.

    maxArchetypeFeats includes the archetype's bonus feats.
    """
    progression = get_player_progression(level, highest_archetype_ability, rules)
    archetype = calculate_archetype_progression(progression["level"], martial_prof, power_prof,
                                                archetype_choices, rules)
    merged = dict(progression)
    merged.update(archetype)
    merged["maxArchetypeFeats"] = progression["maxArchetypeFeats"] + archetype["bonusArchetypeFeats"]
    return merged


def get_level_up_delta(character: Any, new_level: Any = None, rules: RulesLike = None) -> Dict[str, Any]:
    """
    What a character gains going from its current level to `new_level`
    (the next level when omitted).
    """
    current_level = max(1, to_number(get_field(character, "level"), 1))
    target_level = current_level + 1 if new_level is None else to_number(new_level, current_level + 1)
    ability = get_archetype_ability_score(character)
    martial = get_field(character, "mart_prof", 0)
    power = get_field(character, "pow_prof", 0)
    choices = get_field(character, "archetypeChoices") or {}

    current = get_level_progression(current_level, ability, martial, power, choices, rules)
    upcoming = get_level_progression(target_level, ability, martial, power, choices, rules)
    keys = (
        "healthEnergyPool", "abilityPoints", "skillPoints", "trainingPoints", "proficiency",
        "maxArchetypeFeats", "maxCharacterFeats", "innateThreshold", "innatePools",
        "innateEnergy", "armamentProficiency",
    )
    return {key: upcoming[key] - current[key] for key in keys}


def get_level_milestones(level: Any, rules: RulesLike = None) -> Dict[str, Any]:
    """Which one-off gains a level grants."""
    lvl = math.floor(to_number(level, 1))
    return {
        "level": lvl,
        "isAbilityPointLevel": lvl >= 3 and (lvl - 1) % 3 == 0,
        "isProficiencyPointLevel": lvl >= 5 and lvl % 5 == 0,
        "isArchetypeMilestone": is_archetype_milestone(lvl, rules),
    }
