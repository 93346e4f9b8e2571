import json

import pytest

from realms.modules.rules_pkg import data_loader


@pytest.fixture
def power_parts():
    return [
        {"id": 900, "name": "Part A", "description": "Test part A.", "base_en": 1, "base_tp": 2, "op_1_en": 0.5, "op_1_tp": 1},
        {"id": 901, "name": "Part B", "description": "Test part B.", "base_en": 2, "base_tp": 0, "op_1_en": 1, "op_1_tp": 0.5},
        {"id": 902, "name": "Empowered", "base_en": 1.5, "base_tp": 1, "percentage": True},
        {"id": 81, "name": "Power Long Action", "base_en": -1, "op_1_en": -0.5, "mechanic": True},
        {"id": 82, "name": "Power Reaction", "base_en": 2, "base_tp": 1, "mechanic": True},
        {"id": 83, "name": "Power Quick or Free Action", "base_en": 1, "op_1_en": 1, "op_1_tp": 1, "mechanic": True},
        {"id": 292, "name": "Power Range", "base_en": 0.5, "op_1_en": 0.5, "mechanic": True},
        {"id": 297, "name": "Elemental Damage", "base_en": 1, "base_tp": 1, "op_1_en": 1, "op_1_tp": 0.5, "mechanic": True},
        {"id": 390, "name": "Power Split Damage Dice", "base_en": 0.5, "op_1_en": 0.5, "op_1_tp": 0.5, "mechanic": True},
        {"id": 232, "name": "Sphere of Effect", "base_en": 1.5, "base_tp": 1, "op_1_en": 0.5, "op_1_tp": 0.5,
         "percentage": True, "mechanic": True},
        {"id": 89, "name": "Cone of Effect", "base_en": 1.25, "op_1_en": 0.25, "percentage": True, "mechanic": True},
        {"id": 304, "name": "Focus for Duration", "base_en": 0.875, "percentage": True, "mechanic": True},
        {"id": 306, "name": "Duration (Permanent)", "base_en": 5, "base_tp": 2, "duration": True, "mechanic": True},
        {"id": 375, "name": "Duration (Days)", "base_en": 3, "base_tp": 1, "op_1_en": 0.5, "duration": True, "mechanic": True},
        {"id": 376, "name": "Duration (Hour)", "base_en": 2, "base_tp": 1, "op_1_en": 0.5, "duration": True, "mechanic": True},
        {"id": 377, "name": "Duration (Round)", "base_en": 0.25, "op_1_en": 0.125, "duration": True, "mechanic": True},
        {"id": 378, "name": "Duration (Minute)", "base_en": 1, "base_tp": 1, "op_1_en": 0.5, "duration": True, "mechanic": True},
    ]


@pytest.fixture
def technique_parts():
    return [
        {"id": 2, "name": "Reaction", "base_en": 2, "base_tp": 1, "mechanic": True},
        {"id": 3, "name": "Long Action", "base_en": -1, "op_1_en": -0.5, "mechanic": True},
        {"id": 4, "name": "Quick or Free Action", "base_en": 1, "op_1_en": 1, "op_1_tp": 1, "mechanic": True},
        {"id": 5, "name": "Split Damage Dice", "base_en": 0.5, "op_1_en": 0.5, "op_1_tp": 0.5, "mechanic": True},
        {"id": 6, "name": "Additional Damage", "base_en": 1, "base_tp": 1, "op_1_en": 1, "op_1_tp": 0.5, "mechanic": True},
        {"id": 7, "name": "Add Weapon Attack", "base_en": 1, "op_1_en": 0.5, "op_1_tp": 0.5, "mechanic": True},
        {"id": 8, "name": "Reckless", "base_en": 1.5, "base_tp": 1, "percentage": True},
        {"id": 11, "name": "Stun", "description": "Stun the target.", "base_en": 3, "base_tp": 2, "op_1_en": 2, "op_1_tp": 1},
    ]


@pytest.fixture
def item_properties():
    return [
        {"id": 1, "name": "Damage Reduction", "base_ip": 1, "base_tp": 1, "base_c": 1, "op_1_ip": 1, "op_1_tp": 1, "op_1_c": 1},
        {"id": 6, "name": "Weapon Strength Requirement", "base_ip": -0.5, "op_1_ip": -0.5},
        {"id": 13, "name": "Range", "description": "Ranged weapon.", "base_ip": 1, "base_tp": 1, "base_c": 1,
         "op_1_ip": 0.5, "op_1_tp": 0, "op_1_c": 0.5},
        {"id": 26, "name": "Finesse", "base_ip": 1, "base_tp": 1, "base_c": 0.5},
    ]


@pytest.fixture
def codex_equipment():
    return [
        {"id": "eq-longsword", "name": "Longsword", "type": "weapon", "description": "A steel blade.", "damage": "1d8 slashing"},
        {"id": "eq-leather", "name": "Leather Armor", "type": "armor", "description": "Boiled leather.", "armor_value": 1},
        {"id": "eq-rope", "name": "Rope (50 ft)", "type": "equipment", "description": "Hempen rope."},
    ]


@pytest.fixture
def user_powers():
    return [
        {
            "id": "p1",
            "name": "Fire Bolt",
            "description": "A bolt of fire.",
            "parts": [
                {"id": 297, "name": "Elemental Damage", "op_1_lvl": 2},
                {"id": 292, "name": "Power Range", "op_1_lvl": 1},
            ],
            "damage": [{"amount": 2, "size": 6, "type": "fire"}],
        }
    ]


@pytest.fixture
def user_techniques():
    return [
        {
            "id": "t1",
            "name": "Cleave",
            "description": "A wide swing.",
            "parts": [{"id": 11, "name": "Stun"}],
            "weapon": {"name": "Greataxe"},
            "damage": [{"amount": 1, "size": 6}],
            "actionType": "quick",
        }
    ]


@pytest.fixture
def user_items():
    return [
        {
            "id": "i1",
            "name": "Flame Sword",
            "type": "weapon",
            "description": "Burns.",
            "properties": [{"name": "Finesse"}],
            "damage": [{"amount": 1, "size": 8, "type": "fire"}],
        }
    ]


@pytest.fixture
def sample_character():
    return {
        "name": "Ayla",
        "level": 3,
        "abilities": {"strength": 1, "vitality": 2, "agility": 3, "acuity": 0, "intelligence": -1, "charisma": 2},
        "pow_abil": "charisma",
        "pow_prof": 2,
        "healthPoints": 4,
        "energyPoints": 2,
        "defenseSkills": {"might": 2},
        "defenseVals": {"reflex": 1},
        "powers": [{"id": "p1", "name": "Fire Bolt", "innate": True}, {"name": "Missing Power"}],
        "techniques": ["Cleave", {"id": "t404", "name": "Ghost Strike"}],
        "equipment": {
            "weapons": [{"name": "Flame Sword", "equipped": True}, {"name": "Longsword"}],
            "armor": {"name": "Leather Armor", "equipped": True, "armor": 2},
            "items": ["Rope (50 ft)", "Mystery Box"],
        },
        "currency": 40,
    }


@pytest.fixture
def codex_dir(tmp_path, power_parts, technique_parts, item_properties, codex_equipment):
    """A data directory holding the fixture tables as codex files."""
    files = {
        "power_parts.json": power_parts,
        "technique_parts.json": technique_parts,
        "item_properties.json": {"properties": item_properties},
        "codex_equipment.json": codex_equipment,
        "core_rules.json": {},
    }
    for filename, content in files.items():
        (tmp_path / filename).write_text(json.dumps(content), encoding="utf-8")
    return tmp_path


@pytest.fixture
def codex_cache(codex_dir):
    """A codex cache reading the fixture tables."""
    return data_loader.CodexCache(data_dir=str(codex_dir))
