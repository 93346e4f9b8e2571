# archetype.py
"""
Archetype progression derived from the martial/power proficiency split.

The stored archetype tag is not consulted here: a character with martial
proficiency only progresses as martial, power only as power, both as mixed.
"""
import logging
import math
from typing import Dict, List, Any, Optional

from ...shared import to_int, to_number
from . import constants
from .core import rule, RulesLike

logger = logging.getLogger("realms.rules.archetype")

ARCHETYPE_POWER = "power"
ARCHETYPE_MARTIAL = "martial"
ARCHETYPE_MIXED = "mixed"
ARCHETYPE_NONE = "none"

CHOICE_INNATE = "innate"
CHOICE_FEAT = "feat"

MILESTONE_CHOICE_BENEFITS = {
    CHOICE_INNATE: "+1 Innate Threshold and +1 Innate Pool",
    CHOICE_FEAT: "+1 Bonus Archetype Feat",
}


def get_archetype_type(martial_prof: Any, power_prof: Any) -> str:
    """Classifies an archetype by which proficiencies are above zero."""
    martial = to_number(martial_prof)
    power = to_number(power_prof)
    if martial > 0 and power > 0:
        return ARCHETYPE_MIXED
    if power > 0:
        return ARCHETYPE_POWER
    if martial > 0:
        return ARCHETYPE_MARTIAL
    return ARCHETYPE_NONE


def _step(base: int, level: float) -> int:
    """base below level 4, then base + floor((level - 1) / 3)."""
    start = constants.ARCHETYPE_PROGRESSION["STEP_START_LEVEL"]
    interval = constants.ARCHETYPE_PROGRESSION["STEP_INTERVAL"]
    if level < start:
        return base
    return base + math.floor((level - 1) / interval)


def get_archetype_milestone_levels(level: Any, rules: RulesLike = None) -> List[int]:
    """Mixed-archetype milestone levels reached so far: 4, 7, 10, ..."""
    lvl = math.floor(to_number(level, 1))
    start = rule(rules, "ARCHETYPE", "poweredMartialMilestoneStartLevel",
                 constants.ARCHETYPE_PROGRESSION["MIXED_MILESTONE_START"])
    interval = rule(rules, "ARCHETYPE", "poweredMartialMilestoneInterval",
                    constants.ARCHETYPE_PROGRESSION["MIXED_MILESTONE_INTERVAL"]) or 1
    return list(range(start, lvl + 1, interval))


def is_archetype_milestone(level: Any, rules: RulesLike = None) -> bool:
    lvl = math.floor(to_number(level, 1))
    return lvl in get_archetype_milestone_levels(lvl, rules)


def get_milestone_choice_description(choice: Optional[str]) -> str:
    return MILESTONE_CHOICE_BENEFITS.get(str(choice or "").lower(), "")


def _choice_for(choices: Optional[Dict[Any, Any]], milestone: int) -> Optional[str]:
    if not choices:
        return None
    value = choices.get(milestone)
    if value is None:
        value = choices.get(str(milestone))
    if value is None:
        return None
    return str(value).lower()


def get_armament_proficiency(martial_prof: Any, rules: RulesLike = None) -> int:
    """
    Armament cost ceiling for a martial proficiency.

    3, 8 and 12 for proficiency 0-2, then +3 per point above 2.
    """
    prof = max(0, to_int(martial_prof))
    table = rule(rules, "ARMAMENT_PROFICIENCY", "table", None) or constants.ARMAMENT_PROFICIENCY_TABLE
    ordered = sorted(table, key=lambda entry: entry["martialProf"])
    for entry in ordered:
        if entry["martialProf"] == prof:
            return entry["armamentMax"]
    last = ordered[-1]
    if prof > last["martialProf"]:
        return last["armamentMax"] + constants.ARMAMENT_STEP * (prof - last["martialProf"])
    return ordered[0]["armamentMax"]


def calculate_archetype_progression(level: Any, martial_prof: Any, power_prof: Any,
                                    choices: Optional[Dict[Any, Any]] = None,
                                    rules: RulesLike = None) -> Dict[str, Any]:
    """
    Innate energy and bonus feats for an archetype at a level.

    Args:
        level: Character level.
        martial_prof: Martial proficiency.
        power_prof: Power proficiency.
        choices: Mixed-archetype milestone choices, level -> 'innate' | 'feat'.
            Keys may be ints or numeric strings. Missing or unknown choices
            contribute nothing.
        rules: Optional core-rules override.

    Returns:
        Dict matching ArchetypeProgression.
    """
    lvl = max(1, to_number(level, 1))
    kind = get_archetype_type(martial_prof, power_prof)
    result: Dict[str, Any] = {
        "archetypeType": kind,
        "innateThreshold": 0,
        "innatePools": 0,
        "innateEnergy": 0,
        "bonusArchetypeFeats": 0,
        "armamentProficiency": get_armament_proficiency(martial_prof, rules),
        "milestoneLevels": [],
        "unresolvedMilestones": [],
    }

    if kind == ARCHETYPE_POWER:
        threshold_base = rule(rules, "ARCHETYPE", "powerInnateThresholdBase",
                              constants.ARCHETYPE_PROGRESSION["POWER_INNATE_THRESHOLD_BASE"])
        pools_base = rule(rules, "ARCHETYPE", "powerInnatePoolsBase",
                          constants.ARCHETYPE_PROGRESSION["POWER_INNATE_POOLS_BASE"])
        result["innateThreshold"] = _step(threshold_base, lvl)
        result["innatePools"] = _step(pools_base, lvl)

    elif kind == ARCHETYPE_MARTIAL:
        feats_base = rule(rules, "ARCHETYPE", "martialBonusFeatsBase",
                          constants.ARCHETYPE_PROGRESSION["MARTIAL_BONUS_FEATS_BASE"])
        result["bonusArchetypeFeats"] = _step(feats_base, lvl)

    elif kind == ARCHETYPE_MIXED:
        threshold = constants.ARCHETYPE_PROGRESSION["MIXED_INNATE_THRESHOLD"]
        pools = constants.ARCHETYPE_PROGRESSION["MIXED_INNATE_POOLS"]
        feats = constants.ARCHETYPE_PROGRESSION["MIXED_BONUS_FEATS"]
        milestones = get_archetype_milestone_levels(lvl, rules)
        for milestone in milestones:
            choice = _choice_for(choices, milestone)
            if choice == CHOICE_INNATE:
                threshold += 1
                pools += 1
            elif choice == CHOICE_FEAT:
                feats += 1
            else:
                result["unresolvedMilestones"].append(milestone)
        if result["unresolvedMilestones"]:
            logger.debug(f"Unresolved mixed milestones at level {lvl}: {result['unresolvedMilestones']}")
        result["innateThreshold"] = threshold
        result["innatePools"] = pools
        result["bonusArchetypeFeats"] = feats
        result["milestoneLevels"] = milestones

    result["innateEnergy"] = result["innateThreshold"] * result["innatePools"]
    return result


def get_archetype_choice_benefits() -> Dict[str, Dict[str, Any]]:
    """What each milestone choice grants, for display next to the picker."""
    return {
        CHOICE_INNATE: {
            "label": "Innate Power",
            "description": MILESTONE_CHOICE_BENEFITS[CHOICE_INNATE],
            "benefits": ["Innate Threshold +1", "Innate Pools +1"],
        },
        CHOICE_FEAT: {
            "label": "Combat Expertise",
            "description": MILESTONE_CHOICE_BENEFITS[CHOICE_FEAT],
            "benefits": ["Archetype Feats +1"],
        },
    }


def validate_archetype_choice(milestone_level: Any, choice: Any, martial_prof: Any, power_prof: Any,
                              rules: RulesLike = None) -> Dict[str, Any]:
    """Returns {"isValid": bool, "reason": str | None} for a proposed milestone choice."""
    if get_archetype_type(martial_prof, power_prof) != ARCHETYPE_MIXED:
        return {"isValid": False,
                "reason": "Archetype choices are only available for mixed archetypes"}
    milestone = to_int(milestone_level)
    if milestone not in get_archetype_milestone_levels(milestone, rules):
        return {"isValid": False,
                "reason": f"Level {milestone} is not a valid milestone level for archetype choices"}
    if choice not in (CHOICE_INNATE, CHOICE_FEAT):
        return {"isValid": False,
                "reason": f'Invalid choice "{choice}". Must be "innate" or "feat"'}
    return {"isValid": True, "reason": None}


def apply_archetype_choice(current_choices: Optional[Dict[Any, Any]], milestone_level: Any, choice: Any,
                           martial_prof: Any, power_prof: Any, rules: RulesLike = None) -> Dict[str, Any]:
    """Returns a new choices dict with the choice recorded, or the old one and an error."""
    validation = validate_archetype_choice(milestone_level, choice, martial_prof, power_prof, rules)
    choices = dict(current_choices or {})
    if not validation["isValid"]:
        return {"success": False, "error": validation["reason"], "choices": choices}
    choices.pop(str(to_int(milestone_level)), None)
    choices[to_int(milestone_level)] = choice
    return {"success": True, "error": None, "choices": choices}


def clean_invalid_archetype_choices(current_choices: Optional[Dict[Any, Any]], level: Any,
                                    martial_prof: Any, power_prof: Any, rules: RulesLike = None) -> Dict[int, str]:
    """Drops choices above the current level, and all of them for non-mixed archetypes."""
    if get_archetype_type(martial_prof, power_prof) != ARCHETYPE_MIXED:
        return {}
    valid = get_archetype_milestone_levels(level, rules)
    cleaned: Dict[int, str] = {}
    for milestone, choice in (current_choices or {}).items():
        milestone_level = to_int(milestone, -1)
        if milestone_level in valid:
            cleaned[milestone_level] = choice
    return cleaned
