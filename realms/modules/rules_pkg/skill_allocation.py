# skill_allocation.py
"""
Skill-point budgeting: what raising a skill or defense costs, and how many
points a set of allocations has used.

Species skills start proficient, so their first point is free.
"""
import logging
from typing import Dict, List, Any, Optional, Iterable

from ...shared import to_number
from . import constants
from .core import rule, RulesLike, calculate_skill_points

logger = logging.getLogger("realms.rules.skill_allocation")


def _cap(rules: RulesLike) -> int:
    return rule(rules, "SKILLS_AND_DEFENSES", "maxSkillValue", constants.SKILL_LIMITS["MAX_PER_SKILL"])


def _defense_cost(rules: RulesLike) -> int:
    return rule(rules, "SKILLS_AND_DEFENSES", "defenseIncreaseCost", constants.SKILL_LIMITS["DEFENSE_INCREASE_COST"])


def get_total_skill_points(level: Any, entity: str = constants.ENTITY_PLAYER, rules: RulesLike = None) -> int:
    return calculate_skill_points(level, entity, rules)


def get_skill_value_increase_cost(current_value: Any, is_sub_skill: bool, rules: RulesLike = None) -> int:
    """1 below the cap (3); past it 2 for sub-skills, 3 for base skills."""
    if to_number(current_value) < _cap(rules):
        return 1
    if is_sub_skill:
        return rule(rules, "SKILLS_AND_DEFENSES", "subSkillPastCapCost", constants.SKILL_LIMITS["SUB_SKILL_PAST_CAP_COST"])
    return rule(rules, "SKILLS_AND_DEFENSES", "baseSkillPastCapCost", constants.SKILL_LIMITS["BASE_SKILL_PAST_CAP_COST"])


def get_proficiency_cost(is_sub_skill: bool = False, rules: RulesLike = None) -> int:
    return rule(rules, "SKILLS_AND_DEFENSES", "gainProficiencyCost", constants.SKILL_LIMITS["GAIN_PROFICIENCY_COST"])


def get_skill_value_decrease_refund(current_value: Any, is_sub_skill: bool = False) -> int:
    return 1


def can_increase_skill_value(current_value: Any, is_proficient: bool, is_sub_skill: bool,
                             base_skill_proficient: bool, available_points: Any,
                             is_species_skill: bool = False, rules: RulesLike = None) -> bool:
    """
    Whether a skill can be raised by one.

    The first point of an unproficient skill buys proficiency; a sub-skill
    cannot become proficient while its base skill is unproficient.
    """
    points = to_number(available_points)
    if is_species_skill:
        return points >= get_skill_value_increase_cost(current_value, is_sub_skill, rules)
    if not is_proficient:
        if is_sub_skill and not base_skill_proficient:
            return False
        return points >= get_proficiency_cost(is_sub_skill, rules)
    return points >= get_skill_value_increase_cost(current_value, is_sub_skill, rules)


def can_decrease_skill_value(current_value: Any, is_species_skill: bool = False) -> bool:
    value = to_number(current_value)
    if value <= 0:
        return False
    if is_species_skill:
        # species skills cannot drop back to unproficient
        return value > 1
    return True


def can_increase_defense(current_defense_bonus: Any, level: Any, ability_bonus: Any,
                         available_points: Any, rules: RulesLike = None) -> bool:
    """A defense can be raised while its total bonus is below the level; each step costs 2."""
    total = to_number(current_defense_bonus) + to_number(ability_bonus)
    if total >= to_number(level, 1):
        return False
    return to_number(available_points) >= _defense_cost(rules)


def _defense_spend(defense_skills: Optional[Dict[str, Any]], rules: RulesLike) -> float:
    if not defense_skills:
        return 0
    total = sum(to_number(value) for value in defense_skills.values())
    return total * _defense_cost(rules)


def calculate_skill_points_spent(allocations: Dict[str, Any], defense_skills: Optional[Dict[str, Any]],
                                 species_skill_ids: Iterable[str], skill_data: List[Dict[str, Any]],
                                 rules: RulesLike = None) -> float:
    """
    Skill points used by a character's allocations.

    Args:
        allocations: Skill id -> allocated value.
        defense_skills: Defense name -> allocated bonus.
        species_skill_ids: Skills granted by species (proficiency is free).
        skill_data: Entries of {"id", "isSubSkill"} for every skill to count.
        rules: Optional core-rules override.

    Returns:
        float: Points spent, defenses included.
    """
    species = set(species_skill_ids or [])
    spent = 0
    for skill in skill_data or []:
        skill_id = skill.get("id")
        value = to_number(allocations.get(skill_id))
        if value <= 0:
            continue
        if skill_id in species:
            spent += max(0, value - 1)
            continue
        if skill.get("isSubSkill"):
            spent += get_proficiency_cost(True, rules)
            for step in range(2, int(value) + 1):
                spent += get_skill_value_increase_cost(step - 1, True, rules)
        else:
            spent += get_proficiency_cost(False, rules)
            for step in range(1, int(value)):
                spent += get_skill_value_increase_cost(step, False, rules)
    return spent + _defense_spend(defense_skills, rules)


def calculate_simple_skill_points_spent(allocations: Dict[str, Any], species_skill_ids: Iterable[str],
                                        skill_meta: Dict[str, Dict[str, Any]],
                                        defense_skills: Optional[Dict[str, Any]] = None,
                                        rules: RulesLike = None) -> float:
    """
    Creator-side spend: an allocation of 0 still means "proficient" for
    non-species skills, so it costs the proficiency point.
    """
    species = set(species_skill_ids or [])
    spent = 0
    for skill_id, raw_value in (allocations or {}).items():
        value = to_number(raw_value)
        if value < 0:
            continue
        is_sub_skill = bool((skill_meta or {}).get(skill_id, {}).get("isSubSkill"))
        if skill_id in species:
            spent += max(0, value - 1)
        elif is_sub_skill:
            spent += get_proficiency_cost(True, rules)
            for step in range(2, int(value) + 1):
                spent += get_skill_value_increase_cost(step - 1, True, rules)
        else:
            spent += get_proficiency_cost(False, rules)
            for step in range(1, int(value) + 1):
                spent += get_skill_value_increase_cost(step - 1, False, rules)
    return spent + _defense_spend(defense_skills, rules)
