# constants.py
"""Static rule tables. Every value here may be superseded by a core-rules override."""
from typing import Dict, Any

SHARED = {
    "BASE_ABILITY_POINTS": 7,
    "ABILITY_POINTS_PER_3_LEVELS": 1,
    "ABILITY_POINTS_EVERY_N_LEVELS": 3,
    "BASE_SKILL_POINTS": 2,
    "SKILL_POINTS_PER_LEVEL": 3,
    "BASE_PROFICIENCY": 2,
    "PROFICIENCY_PER_5_LEVELS": 1,
    "PROFICIENCY_EVERY_N_LEVELS": 5,
    "HIT_ENERGY_PER_LEVEL": 12,
}

PLAYER = {
    "BASE_HIT_ENERGY": 18,
    "BASE_TRAINING_POINTS": 22,
    "TP_PER_LEVEL_MULTIPLIER": 2,
    "SKILL_POINTS_PER_LEVEL": 3,
    "BASE_HEALTH": 8,
}

CREATURE = {
    "BASE_HIT_ENERGY": 26,
    "BASE_TRAINING_POINTS": 9,
    "SUB_LEVEL_TRAINING_POINTS": 22,
    "TP_PER_LEVEL": 1,
    "SKILL_POINTS_PER_LEVEL": 5,
    "BASE_FEAT_POINTS": 1.5,
    "FEAT_POINTS_PER_LEVEL": 1,
    "BASE_CURRENCY": 200,
    "CURRENCY_GROWTH": 1.45,
}

ABILITY_LIMITS = {
    "MIN": -2,
    "MAX_STARTING": 3,
    "MAX_ABSOLUTE": 6,
    "COST_INCREASE_THRESHOLD": 4,
    "NORMAL_COST": 1,
    "INCREASED_COST": 2,
    "MAX_NEGATIVE_SUM": -3,
}

SKILL_LIMITS = {
    "MAX_PER_SKILL": 3,
    "DEFENSE_MAX": 3,
    "BASE_SKILL_PAST_CAP_COST": 3,
    "SUB_SKILL_PAST_CAP_COST": 2,
    "DEFENSE_INCREASE_COST": 2,
    "GAIN_PROFICIENCY_COST": 1,
}

ARCHETYPE_TYPES = ["power", "powered-martial", "martial"]

ARCHETYPE_CONFIGS: Dict[str, Dict[str, Any]] = {
    "power": {
        "featLimit": 1,
        "armamentMax": 4,
        "innateEnergy": 8,
        "proficiency": {"martial": 0, "power": 2},
    },
    "powered-martial": {
        "featLimit": 2,
        "armamentMax": 8,
        "innateEnergy": 6,
        "proficiency": {"martial": 1, "power": 1},
    },
    "martial": {
        "featLimit": 3,
        "armamentMax": 16,
        "innateEnergy": 0,
        "proficiency": {"martial": 2, "power": 0},
    },
}

# Progression derived from the proficiency split
ARCHETYPE_PROGRESSION = {
    "POWER_INNATE_THRESHOLD_BASE": 8,
    "POWER_INNATE_POOLS_BASE": 2,
    "MARTIAL_BONUS_FEATS_BASE": 2,
    "STEP_START_LEVEL": 4,
    "STEP_INTERVAL": 3,
    "MIXED_INNATE_THRESHOLD": 6,
    "MIXED_INNATE_POOLS": 1,
    "MIXED_BONUS_FEATS": 1,
    "MIXED_MILESTONE_START": 4,
    "MIXED_MILESTONE_INTERVAL": 3,
}

# martialProf -> armament max; beyond the table each point adds ARMAMENT_STEP
ARMAMENT_PROFICIENCY_TABLE = [
    {"martialProf": 0, "armamentMax": 3},
    {"martialProf": 1, "armamentMax": 8},
    {"martialProf": 2, "armamentMax": 12},
]
ARMAMENT_STEP = 3

COMBAT_DEFAULTS = {
    "BASE_SPEED": 6,
    "BASE_EVASION": 10,
    "BASE_DEFENSE": 10,
}

ABILITY_NAMES = ["strength", "vitality", "agility", "acuity", "intelligence", "charisma"]

DEFENSE_NAMES = ["might", "fortitude", "reflex", "discernment", "mentalFortitude", "resolve"]

ABILITY_DEFENSE_MAP = {
    "strength": "might",
    "vitality": "fortitude",
    "agility": "reflex",
    "acuity": "discernment",
    "intelligence": "mentalFortitude",
    "charisma": "resolve",
}

DEFAULT_ABILITIES = {name: 0 for name in ABILITY_NAMES}
DEFAULT_DEFENSE_SKILLS = {name: 0 for name in DEFENSE_NAMES}

# Short forms found in older saves and creature records
ABILITY_ALIASES = {
    "str": "strength",
    "vit": "vitality",
    "agi": "agility",
    "acu": "acuity",
    "int": "intelligence",
    "cha": "charisma",
}

ENTITY_PLAYER = "PLAYER"
ENTITY_CREATURE = "CREATURE"
