# core.py
"""
Formula library: level-progression resources, ability-score economy and
skill bonuses.

Every function is pure. Inputs are coerced before arithmetic (see
realms.shared.to_number) and every formula accepts an optional `rules`
override whose values supersede constants.py key by key.
"""
import logging
import math
from typing import Dict, List, Optional, Any, Union

from ...shared import to_number, get_field
from . import constants

logger = logging.getLogger("realms.rules.core")

RulesLike = Optional[Union[Dict[str, Any], Any]]


def rules_dict(rules: RulesLike) -> Dict[str, Any]:
    """Accepts a CoreRules model, a plain dict or None and returns a dict."""
    if rules is None:
        return {}
    if hasattr(rules, "as_rules"):
        return rules.as_rules()
    if isinstance(rules, dict):
        return rules
    return {}


def rule(rules: RulesLike, section: str, key: str, default: Any) -> Any:
    """
    Looks up a single override value.

    Args:
        rules: The override record (or None).
        section (str): Top-level category, e.g. "COMBAT".
        key (str): Field within the category, e.g. "baseDefense".
        default: The built-in constant to fall back on.

    Returns:
        The override value when present and not None, else `default`.
    """
    value = get_field(rules_dict(rules).get(section), key)
    if value is None:
        return default
    return value


def _level(level: Any) -> float:
    # 0, None and garbage all read as level 1
    return to_number(level, 1) or 1


def _entity_section(entity: str) -> str:
    if str(entity).upper() == constants.ENTITY_CREATURE:
        return "PROGRESSION_CREATURE"
    return "PROGRESSION_PLAYER"


def _is_creature(entity: str) -> bool:
    return str(entity).upper() == constants.ENTITY_CREATURE


# --- Level progression ---

def calculate_ability_points(level: Any, allow_sub_level: bool = False,
                             rules: RulesLike = None, entity: str = constants.ENTITY_PLAYER) -> int:
    """
    Ability points available at a level.

    7 at levels 1-2, then 7 + floor((level - 1) / 3). With `allow_sub_level`
    a fractional level below 1 receives ceil(7 * level).
    """
    lvl = _level(level)
    section = _entity_section(entity)
    base = rule(rules, section, "baseAbilityPoints", constants.SHARED["BASE_ABILITY_POINTS"])
    every = rule(rules, "PROGRESSION_PLAYER", "abilityPointsEveryNLevels",
                 constants.SHARED["ABILITY_POINTS_EVERY_N_LEVELS"]) or 1
    per_increase = rule(rules, "PROGRESSION_PLAYER", "abilityPointsPerIncrease",
                        constants.SHARED["ABILITY_POINTS_PER_3_LEVELS"])

    if allow_sub_level and lvl < 1:
        return math.ceil(base * lvl)
    if lvl < 1:
        return 0
    if lvl < every:
        return base
    return base + math.floor((lvl - 1) / every) * per_increase


def calculate_skill_points(level: Any, entity: str = constants.ENTITY_PLAYER,
                           rules: RulesLike = None) -> int:
    """
    Skill points for an entity: level x 3 for characters, level x 5 for creatures.

    Creatures may sit at fractional levels below 1; those round up.
    """
    lvl = _level(level)
    if _is_creature(entity):
        per_level = rule(rules, "PROGRESSION_CREATURE", "skillPointsPerLevel",
                         constants.CREATURE["SKILL_POINTS_PER_LEVEL"])
        if lvl < 1:
            return math.ceil(per_level * lvl)
    else:
        per_level = rule(rules, "PROGRESSION_PLAYER", "skillPointsPerLevel",
                         constants.PLAYER["SKILL_POINTS_PER_LEVEL"])
    return per_level * max(1, math.floor(lvl))


def calculate_legacy_skill_points(level: Any, allow_sub_level: bool = False) -> int:
    """Older sheets displayed 2 + 3 x level; kept so those sheets still reconcile."""
    lvl = _level(level)
    if allow_sub_level and lvl < 1:
        return math.ceil(5 * lvl)
    return constants.SHARED["BASE_SKILL_POINTS"] + constants.SHARED["SKILL_POINTS_PER_LEVEL"] * math.floor(lvl)


def calculate_health_energy_pool(level: Any, entity: str = constants.ENTITY_PLAYER,
                                 allow_sub_level: bool = False, rules: RulesLike = None) -> float:
    """
    Combined health/energy points to allocate: base + 12 x (level - 1).

    Base is 18 for players and 26 for creatures.
    """
    lvl = _level(level)
    section = _entity_section(entity)
    default_base = constants.CREATURE["BASE_HIT_ENERGY"] if _is_creature(entity) else constants.PLAYER["BASE_HIT_ENERGY"]
    base = rule(rules, section, "baseHitEnergyPool", default_base)
    per_level = rule(rules, section, "hitEnergyPerLevel", constants.SHARED["HIT_ENERGY_PER_LEVEL"])

    if allow_sub_level and lvl < 1:
        return math.ceil(base * lvl)
    return base + per_level * (lvl - 1)


def calculate_proficiency(level: Any, allow_sub_level: bool = False, rules: RulesLike = None) -> int:
    """Proficiency: 2 for levels 1-4, then 2 + floor(level / 5)."""
    lvl = _level(level)
    base = rule(rules, "PROGRESSION_PLAYER", "baseProficiency", constants.SHARED["BASE_PROFICIENCY"])
    every = rule(rules, "PROGRESSION_PLAYER", "proficiencyEveryNLevels",
                 constants.SHARED["PROFICIENCY_EVERY_N_LEVELS"]) or 1
    per_increase = rule(rules, "PROGRESSION_PLAYER", "proficiencyPerIncrease",
                        constants.SHARED["PROFICIENCY_PER_5_LEVELS"])

    if allow_sub_level and lvl < 1:
        return math.ceil(base * lvl)
    if lvl < 1:
        return 0
    if lvl < every:
        return base
    return base + math.floor(lvl / every) * per_increase


def calculate_training_points(level: Any, highest_archetype_ability: Any = 0, rules: RulesLike = None) -> float:
    """
    Player training points.

    Formula: 22 + ability + (2 + ability) x (level - 1).

    Args:
        level: Character level; values below 1 are treated as 1.
        highest_archetype_ability: The highest of the archetype ability scores.

    Returns:
        float: Total training points (an int for integral input).
    """
    lvl = max(1, _level(level))
    ability = to_number(highest_archetype_ability)
    base = rule(rules, "PROGRESSION_PLAYER", "baseTrainingPoints", constants.PLAYER["BASE_TRAINING_POINTS"])
    multiplier = rule(rules, "PROGRESSION_PLAYER", "tpPerLevelMultiplier", constants.PLAYER["TP_PER_LEVEL_MULTIPLIER"])
    return base + ability + (multiplier + ability) * (lvl - 1)


def calculate_creature_training_points(level: Any, highest_non_vitality: Any = 0, rules: RulesLike = None) -> float:
    """
    Creature training points.

    9 + ability at level 1, plus (1 + ability) per level after that. Below
    level 1 the creature scales the player base: ceil(22 x level) + ability.
    """
    lvl = _level(level)
    ability = to_number(highest_non_vitality)

    if lvl < 1:
        return math.ceil(constants.CREATURE["SUB_LEVEL_TRAINING_POINTS"] * lvl) + ability

    base = rule(rules, "PROGRESSION_CREATURE", "baseTrainingPoints", constants.CREATURE["BASE_TRAINING_POINTS"])
    per_level = rule(rules, "PROGRESSION_CREATURE", "tpPerLevelMultiplier", constants.CREATURE["TP_PER_LEVEL"]) + ability
    if lvl <= 1:
        return base + ability
    return base + ability + (lvl - 1) * per_level


def calculate_creature_feat_points(level: Any, martial_proficiency: Any = 0, rules: RulesLike = None) -> float:
    """Creature feat points: 1.5 + martial proficiency at level 1, +1 per level after."""
    lvl = _level(level)
    martial = to_number(martial_proficiency)
    base = rule(rules, "PROGRESSION_CREATURE", "baseFeatPoints", constants.CREATURE["BASE_FEAT_POINTS"])
    per_level = rule(rules, "PROGRESSION_CREATURE", "featPointsPerLevel", constants.CREATURE["FEAT_POINTS_PER_LEVEL"])

    at_level_one = base + martial
    if lvl < 1:
        return math.ceil(at_level_one * lvl)
    return at_level_one + (lvl - 1) * per_level


def calculate_creature_currency(level: Any, rules: RulesLike = None) -> int:
    """Creature currency: round(200 x 1.45^(level - 1)), halves rounding up."""
    lvl = _level(level)
    base = rule(rules, "PROGRESSION_CREATURE", "baseCurrency", constants.CREATURE["BASE_CURRENCY"])
    growth = rule(rules, "PROGRESSION_CREATURE", "currencyGrowthRate", constants.CREATURE["CURRENCY_GROWTH"])
    return int(math.floor(base * growth ** (lvl - 1) + 0.5))


def calculate_max_archetype_feats(level: Any) -> int:
    return max(0, math.floor(to_number(level)))


def calculate_max_character_feats(level: Any) -> int:
    return max(0, math.floor(to_number(level)))


# --- Ability score economy ---

def get_ability_increase_cost(current_value: Any, rules: RulesLike = None) -> int:
    """Cost of raising an ability by one step: 1 below 4, 2 at 4 and above."""
    value = to_number(current_value)
    threshold = rule(rules, "ABILITY", "costIncreaseThreshold", constants.ABILITY_LIMITS["COST_INCREASE_THRESHOLD"])
    if value >= threshold:
        return rule(rules, "ABILITY", "increasedCost", constants.ABILITY_LIMITS["INCREASED_COST"])
    return rule(rules, "ABILITY", "normalCost", constants.ABILITY_LIMITS["NORMAL_COST"])


def get_ability_decrease_refund(current_value: Any, rules: RulesLike = None) -> int:
    """
    Points returned for lowering an ability by one step.

    Always the normal (cheaper) rate, even for steps bought at the increased
    cost. This is a known simplification of the point economy, not a rule.
    """
    return rule(rules, "ABILITY", "normalCost", constants.ABILITY_LIMITS["NORMAL_COST"])


def can_increase_ability(current_value: Any, available_points: Any, is_creation: bool = True,
                         rules: RulesLike = None) -> bool:
    value = to_number(current_value)
    if is_creation:
        maximum = rule(rules, "ABILITY", "maxStarting", constants.ABILITY_LIMITS["MAX_STARTING"])
    else:
        maximum = rule(rules, "ABILITY", "maxAbsoluteCharacter", constants.ABILITY_LIMITS["MAX_ABSOLUTE"])
    if value >= maximum:
        return False
    return to_number(available_points) >= get_ability_increase_cost(value, rules)


def can_decrease_ability(current_value: Any, rules: RulesLike = None) -> bool:
    minimum = rule(rules, "ABILITY", "min", constants.ABILITY_LIMITS["MIN"])
    return to_number(current_value) > minimum


def get_negative_ability_sum(abilities: Any) -> float:
    """Sum of all negative ability scores (0 or less)."""
    return sum(value for value in normalize_abilities(abilities).values() if value < 0)


def calculate_ability_points_spent(abilities: Any, base_abilities: Any = None, rules: RulesLike = None) -> float:
    """
    Ability points spent to reach `abilities` from `base_abilities`.

    Steps above the base are charged at the increase cost of each step;
    steps below the base give back the (flat) decrease refund.
    """
    current = normalize_abilities(abilities)
    base = normalize_abilities(base_abilities)
    spent = 0
    for name, value in current.items():
        start = math.floor(base[name])
        target = math.floor(value)
        if target > start:
            for step in range(start, target):
                spent += get_ability_increase_cost(step, rules)
        elif target < start:
            for step in range(start, target, -1):
                spent -= get_ability_decrease_refund(step, rules)
    return spent


def normalize_abilities(raw: Any) -> Dict[str, int]:
    """Returns all six abilities as numbers, accepting short aliases (agi, acu, ...)."""
    result = dict(constants.DEFAULT_ABILITIES)
    if raw is None:
        return result
    source = raw.model_dump() if hasattr(raw, "model_dump") else raw
    if not isinstance(source, dict):
        return result
    for key, value in source.items():
        name = constants.ABILITY_ALIASES.get(str(key).lower(), str(key).lower())
        if name in result and value is not None:
            # full names win over aliases
            if name != str(key).lower() and name in source:
                continue
            result[name] = to_number(value)
    return result


# --- Archetype configuration ---

def _archetype_type(archetype: Any) -> str:
    if isinstance(archetype, str):
        return archetype
    return get_field(archetype, "type") or "power"


def get_archetype_config(archetype_type: Any, rules: RulesLike = None) -> Dict[str, Any]:
    """Static config for an archetype; unknown types fall back to power."""
    kind = archetype_type if archetype_type in constants.ARCHETYPE_CONFIGS else "power"
    config = dict(constants.ARCHETYPE_CONFIGS[kind])
    overrides = rule(rules, "ARCHETYPE", "configs", {}) or {}
    override = overrides.get(kind) or {}
    for key, value in override.items():
        if value is not None:
            config[key] = value
    return config


def get_armament_max(archetype: Any, rules: RulesLike = None) -> int:
    return get_archetype_config(_archetype_type(archetype), rules)["armamentMax"]


def get_archetype_feat_limit(archetype: Any, rules: RulesLike = None) -> int:
    return get_archetype_config(_archetype_type(archetype), rules)["featLimit"]


def get_innate_energy_max(archetype: Any, rules: RulesLike = None) -> int:
    return get_archetype_config(_archetype_type(archetype), rules)["innateEnergy"]


def _ability_value(abilities: Dict[str, Any], name: Any) -> float:
    if not name:
        return 0
    key = constants.ABILITY_ALIASES.get(str(name).lower(), str(name).lower())
    return to_number(abilities.get(key))


def get_archetype_ability(archetype: Any, abilities: Any) -> float:
    """
    Score of the archetype's governing ability.

    Powered-martial characters use the better of their power and martial
    abilities; everyone else uses whichever one is set.
    """
    kind = get_field(archetype, "type")
    if not kind:
        return 0
    scores = normalize_abilities(abilities)
    pow_abil = get_field(archetype, "pow_abil")
    mart_abil = get_field(archetype, "mart_abil")
    if kind == "powered-martial":
        return max(_ability_value(scores, pow_abil), _ability_value(scores, mart_abil))
    return _ability_value(scores, pow_abil or mart_abil)


def get_base_health(archetype: Any, abilities: Any, rules: RulesLike = None) -> float:
    """8 + vitality, or 8 + strength when vitality is an archetype ability."""
    scores = normalize_abilities(abilities)
    base = rule(rules, "PROGRESSION_PLAYER", "baseHealth", constants.PLAYER["BASE_HEALTH"])
    vitality_archetype = any(
        str(get_field(archetype, key) or "").lower() == "vitality" for key in ("pow_abil", "mart_abil")
    )
    if vitality_archetype:
        return base + scores["strength"]
    return base + scores["vitality"]


def get_base_energy(archetype: Any, abilities: Any) -> float:
    return get_archetype_ability(archetype, abilities)


# --- Skills ---

def get_highest_linked_ability(linked_abilities: Any, abilities: Any) -> float:
    """
    Highest score among a skill's linked abilities.

    Args:
        linked_abilities: "Strength, Agility" style string or a list of names.
        abilities: Ability record.

    Returns:
        The highest matching score, or 0 when nothing matches.
    """
    if not linked_abilities:
        return 0
    if isinstance(linked_abilities, str):
        names = [name.strip() for name in linked_abilities.split(",")]
    else:
        names = list(linked_abilities)

    source = abilities.model_dump() if hasattr(abilities, "model_dump") else (abilities or {})
    values: List[float] = []
    for name in names:
        key = constants.ABILITY_ALIASES.get(str(name).lower(), str(name).lower())
        if key in constants.ABILITY_NAMES and source.get(key) is not None:
            values.append(to_number(source.get(key)))
    return max(values) if values else 0


def unproficient_bonus(ability_value: Any) -> int:
    """Half the ability rounded up, or double it when negative."""
    value = to_number(ability_value)
    if value < 0:
        return value * 2
    return math.ceil(value / 2)


def calculate_skill_bonus(linked_abilities: Any, skill_value: Any, abilities: Any) -> float:
    """Highest linked ability + allocated skill value (creature-style, no proficiency gate)."""
    return get_highest_linked_ability(linked_abilities, abilities) + to_number(skill_value)


def calculate_skill_bonus_with_proficiency(linked_abilities: Any, skill_value: Any, abilities: Any,
                                           is_proficient: bool = False) -> float:
    """
    Skill bonus on the character sheet.

    Proficient: highest linked ability + skill value.
    Unproficient: the unproficient ability bonus only; the skill value is ignored.
    """
    ability = get_highest_linked_ability(linked_abilities, abilities)
    if is_proficient:
        return ability + to_number(skill_value)
    return unproficient_bonus(ability)


def calculate_sub_skill_bonus(linked_abilities: Any, skill_value: Any, abilities: Any,
                              is_proficient: bool, base_skill_value: Any, base_proficient: bool) -> float:
    """
    Sub-skill bonus, gated on its base skill.

    While the base skill is unproficient the sub-skill's own proficiency is
    ignored: it gets the unproficient ability bonus plus the base skill's value.
    """
    if not base_proficient:
        ability = get_highest_linked_ability(linked_abilities, abilities)
        return unproficient_bonus(ability) + to_number(base_skill_value)
    return calculate_skill_bonus_with_proficiency(linked_abilities, skill_value, abilities, is_proficient)
