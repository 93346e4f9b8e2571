# calculations.py
"""
Combat derivations and the all-stats facade.

calculate_all_stats is the single place that turns a character record into
its derived numbers. It never raises: missing abilities, defenses or
equipment read as zero/empty.
"""
import logging
import math
from typing import Dict, Any, List, Optional

from ...shared import to_number, get_field, as_dict
from . import constants
from .core import rule, RulesLike, normalize_abilities

logger = logging.getLogger("realms.rules.calculations")


# --- Defenses ---

def resolve_defense_skills(record: Any) -> Dict[str, float]:
    """
    Canonical defense allocations for a character record.

    Defaults first, then `defenseSkills`, then the legacy `defenseVals`, so
    stale saves carrying either name produce a full record.
    """
    merged: Dict[str, float] = dict(constants.DEFAULT_DEFENSE_SKILLS)
    for legacy_key in ("defenseSkills", "defenseVals"):
        values = get_field(record, legacy_key)
        if hasattr(values, "model_dump"):
            values = values.model_dump()
        if not isinstance(values, dict):
            continue
        for name, value in values.items():
            if value is not None:
                merged[name] = to_number(value)
    return merged


def calculate_defenses(abilities: Any, defense_vals: Any, rules: RulesLike = None) -> Dict[str, Dict[str, float]]:
    """
    Defense bonuses and scores.

    Each defense = base defense (10) + its ability + its defense-skill allocation,
    using the fixed ability/defense pairing (strength/might, vitality/fortitude,
    agility/reflex, acuity/discernment, intelligence/mentalFortitude, charisma/resolve).

    Returns:
        Dict with "defenseBonuses" and "defenseScores".
    """
    scores = normalize_abilities(abilities)
    allocations = defense_vals.model_dump() if hasattr(defense_vals, "model_dump") else (defense_vals or {})
    base_defense = rule(rules, "COMBAT", "baseDefense", constants.COMBAT_DEFAULTS["BASE_DEFENSE"])

    defense_bonuses: Dict[str, float] = {}
    defense_scores: Dict[str, float] = {}
    for ability, defense in constants.ABILITY_DEFENSE_MAP.items():
        bonus = scores[ability] + to_number(allocations.get(defense))
        defense_bonuses[defense] = bonus
        defense_scores[defense] = base_defense + bonus

    return {"defenseBonuses": defense_bonuses, "defenseScores": defense_scores}


# --- Movement ---

def get_speed_base(character: Any, rules: RulesLike = None) -> float:
    speed_base = get_field(character, "speedBase")
    if speed_base is not None:
        return to_number(speed_base, constants.COMBAT_DEFAULTS["BASE_SPEED"])
    return rule(rules, "COMBAT", "baseSpeed", constants.COMBAT_DEFAULTS["BASE_SPEED"])


def get_evasion_base(character: Any, rules: RulesLike = None) -> float:
    evasion_base = get_field(character, "evasionBase")
    if evasion_base is not None:
        return to_number(evasion_base, constants.COMBAT_DEFAULTS["BASE_EVASION"])
    return rule(rules, "COMBAT", "baseEvasion", constants.COMBAT_DEFAULTS["BASE_EVASION"])


def calculate_speed(agility: Any, speed_base: Any = None, rules: RulesLike = None) -> float:
    """Speed = base (6) + ceil(agility / 2)."""
    if speed_base is None:
        base = rule(rules, "COMBAT", "baseSpeed", constants.COMBAT_DEFAULTS["BASE_SPEED"])
    else:
        base = to_number(speed_base, constants.COMBAT_DEFAULTS["BASE_SPEED"])
    return base + math.ceil(to_number(agility) / 2)


def calculate_evasion(agility: Any, evasion_base: Any = None, rules: RulesLike = None) -> float:
    """Evasion = base (10) + agility."""
    if evasion_base is None:
        base = rule(rules, "COMBAT", "baseEvasion", constants.COMBAT_DEFAULTS["BASE_EVASION"])
    else:
        base = to_number(evasion_base, constants.COMBAT_DEFAULTS["BASE_EVASION"])
    return base + to_number(agility)


# --- Health & Energy ---

def calculate_max_health(health_points: Any, vitality: Any, level: Any, archetype_ability: Optional[str],
                         abilities: Any, rules: RulesLike = None) -> float:
    """
    Maximum health.

    Formula: 8 + mod x level + allocated points when mod >= 0, otherwise
    8 + mod + allocated points (a negative modifier is not multiplied by level).

    The modifier is vitality, unless the power-archetype ability is itself
    vitality, in which case strength stands in.

    Args:
        health_points: Allocated health points.
        vitality: Vitality score.
        level: Character level (values below 1 are treated as 1).
        archetype_ability: Name of the power-archetype ability, if any.
        abilities: Full ability record (used for strength).
        rules: Optional core-rules override (PROGRESSION_PLAYER.baseHealth).

    Returns:
        float: The maximum health.
    """
    base_health = rule(rules, "PROGRESSION_PLAYER", "baseHealth", constants.PLAYER["BASE_HEALTH"])
    lvl = max(1, to_number(level, 1))
    points = to_number(health_points)

    if str(archetype_ability or "").lower() == "vitality":
        ability_mod = normalize_abilities(abilities)["strength"]
    else:
        ability_mod = to_number(vitality)

    if ability_mod < 0:
        return base_health + ability_mod + points
    return base_health + ability_mod * lvl + points


def calculate_max_energy(energy_points: Any, archetype_ability: Optional[str], abilities: Any, level: Any) -> float:
    """Maximum energy = archetype ability score x level + allocated energy points."""
    scores = normalize_abilities(abilities)
    key = constants.ABILITY_ALIASES.get(str(archetype_ability or "").lower(), str(archetype_ability or "").lower())
    ability_mod = scores.get(key, 0)
    lvl = max(1, to_number(level, 1))
    return ability_mod * lvl + to_number(energy_points)


def calculate_terminal(max_health: Any) -> int:
    """Terminal threshold: a quarter of max health, rounded up."""
    return math.ceil(to_number(max_health) / 4)


def _archetype_abilities(character: Any):
    archetype = get_field(character, "archetype")
    pow_abil = get_field(character, "pow_abil") or get_field(archetype, "pow_abil") or get_field(archetype, "ability")
    mart_abil = get_field(character, "mart_abil") or get_field(archetype, "mart_abil")
    if not isinstance(pow_abil, str):
        pow_abil = None
    if not isinstance(mart_abil, str):
        mart_abil = None
    return pow_abil, mart_abil


def get_archetype_ability_score(character: Any) -> float:
    """Higher of the power and martial ability scores; 0 without abilities."""
    abilities = get_field(character, "abilities")
    if not abilities:
        return 0
    scores = normalize_abilities(abilities)
    pow_abil, mart_abil = _archetype_abilities(character)
    pow_val = scores.get(str(pow_abil).lower(), 0) if pow_abil else 0
    mart_val = scores.get(str(mart_abil).lower(), 0) if mart_abil else 0
    return max(pow_val, mart_val)


# --- Attack bonuses ---

def calculate_bonuses(mart_prof: Any, pow_prof: Any, abilities: Any, pow_abil: Optional[str] = None) -> Dict[str, Any]:
    """
    Proficient and unproficient attack bonuses.

    Martial attacks add martial proficiency to strength, agility or acuity;
    power attacks add power proficiency to the power ability (charisma when
    none is set). Unproficient bonuses halve the ability (rounded up) or
    double it when negative.
    """
    martial = to_number(mart_prof)
    power = to_number(pow_prof)
    scores = normalize_abilities(abilities)
    if pow_abil:
        power_value = scores.get(str(pow_abil).lower(), 0)
    else:
        power_value = scores["charisma"]

    def unprof(value: float) -> float:
        return value * 2 if value < 0 else math.ceil(value / 2)

    return {
        "martial": martial,
        "power": power,
        "strength": {"prof": martial + scores["strength"], "unprof": unprof(scores["strength"])},
        "agility": {"prof": martial + scores["agility"], "unprof": unprof(scores["agility"])},
        "acuity": {"prof": martial + scores["acuity"], "unprof": unprof(scores["acuity"])},
        "powerAttack": {"prof": power + power_value, "unprof": unprof(power_value)},
    }


# --- Equipment ---

def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    return []


def calculate_armor(equipment: Any) -> float:
    """Sum of `armor` over equipped armor items; unequipped items add nothing."""
    total = 0
    for item in _as_list(get_field(equipment, "armor")):
        if not isinstance(item, dict) and not hasattr(item, "model_dump"):
            continue
        if get_field(item, "equipped"):
            total += to_number(get_field(item, "armor"))
    return total


# --- Facade ---

def calculate_all_stats(character: Any, rules: RulesLike = None) -> Dict[str, Any]:
    """
    Computes every derived stat for a character or creature in one call.

    Args:
        character: Character record (dict or pydantic model). Any field may be missing.
        rules: Optional core-rules override.

    Returns:
        Dict with maxHealth, maxEnergy, terminal, speed, evasion, armor,
        defenseBonuses and defenseScores.
    """
    record = as_dict(character)
    abilities = normalize_abilities(record.get("abilities"))
    defense_vals = resolve_defense_skills(record)

    defenses = calculate_defenses(abilities, defense_vals, rules)

    speed = calculate_speed(abilities["agility"], get_speed_base(record, rules), rules)
    evasion = calculate_evasion(abilities["agility"], get_evasion_base(record, rules), rules)
    armor = calculate_armor(record.get("equipment"))

    level = record.get("level")
    pow_abil, mart_abil = _archetype_abilities(record)

    max_health = calculate_max_health(record.get("healthPoints"), abilities["vitality"], level,
                                      pow_abil, abilities, rules)
    max_energy = calculate_max_energy(record.get("energyPoints"), pow_abil or mart_abil, abilities, level)

    return {
        "maxHealth": max_health,
        "maxEnergy": max_energy,
        "terminal": calculate_terminal(max_health),
        "speed": speed,
        "evasion": evasion,
        "armor": armor,
        "defenseBonuses": dict(defenses["defenseBonuses"]),
        "defenseScores": dict(defenses["defenseScores"]),
    }


def compute_max_health_energy(raw: Any, rules: RulesLike = None) -> Dict[str, float]:
    """
    Max health and energy straight from a raw stored record.

    Raw creature/character documents may spell abilities `acu`/`agi`, and carry
    the archetype abilities only inside `archetype`.
    """
    record = as_dict(raw)
    abilities = normalize_abilities(record.get("abilities"))
    archetype = record.get("archetype")
    pow_abil = get_field(archetype, "pow_abil") if isinstance(archetype, dict) else None
    mart_abil = get_field(archetype, "mart_abil") if isinstance(archetype, dict) else None
    level = record.get("level")

    max_health = calculate_max_health(record.get("healthPoints"), abilities["vitality"], level,
                                      pow_abil, abilities, rules)
    max_energy = calculate_max_energy(record.get("energyPoints"), pow_abil or mart_abil, abilities, level)
    return {"maxHealth": max_health, "maxEnergy": max_energy}
