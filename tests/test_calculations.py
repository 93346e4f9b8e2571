import copy

from realms.modules.rules_pkg import calculations
from realms.modules.rules_pkg.calculations import calculate_all_stats
from realms.modules.character_pkg.schemas import Character


def test_max_health_negative_modifier_ignores_level():
    assert calculations.calculate_max_health(0, -2, 5, None, {}) == 6


def test_max_health_scales_with_level():
    assert calculations.calculate_max_health(10, 3, 4, None, {}) == 30


def test_max_health_vitality_archetype_uses_strength():
    assert calculations.calculate_max_health(0, 1, 2, "vitality", {"strength": 2}) == 12


def test_max_energy_and_terminal():
    assert calculations.calculate_max_energy(5, "charisma", {"charisma": 2}, 3) == 11
    assert calculations.calculate_max_energy(0, None, {"charisma": 2}, 3) == 0
    assert calculations.calculate_terminal(30) == 8
    assert calculations.calculate_terminal(31) == 8
    assert calculations.calculate_terminal(6) == 2


def test_speed_and_evasion():
    assert calculations.calculate_speed(3) == 8
    assert calculations.calculate_speed(-1) == 6
    assert calculations.calculate_speed(2, speed_base=4) == 5
    assert calculations.calculate_evasion(2) == 12


def test_defenses():
    result = calculations.calculate_defenses({"strength": 2}, {"might": 1})
    assert result["defenseBonuses"]["might"] == 3
    assert result["defenseScores"]["might"] == 13
    assert result["defenseScores"]["resolve"] == 10


def test_resolve_defense_skills_merges_legacy_field():
    merged = calculations.resolve_defense_skills({
        "defenseSkills": {"might": 1, "reflex": 1},
        "defenseVals": {"reflex": 2},
    })
    assert merged["might"] == 1
    assert merged["reflex"] == 2
    assert merged["resolve"] == 0


def test_armor_counts_equipped_only():
    equipment = {"armor": [
        {"name": "Chain", "equipped": True, "armor": 2},
        {"name": "Plate", "equipped": False, "armor": 5},
    ]}
    assert calculations.calculate_armor(equipment) == 2
    assert calculations.calculate_armor({"armor": {"equipped": True, "armor": 3}}) == 3
    assert calculations.calculate_armor(None) == 0


def test_calculate_all_stats(sample_character):
    sample_character["equipment"]["armor"] = [
        {"name": "Leather Armor", "equipped": True, "armor": 2},
        {"name": "Plate", "equipped": False, "armor": 5},
    ]
    stats = calculate_all_stats(sample_character)

    assert stats["maxHealth"] == 18
    assert stats["maxEnergy"] == 8
    assert stats["terminal"] == 5
    assert stats["speed"] == 8
    assert stats["evasion"] == 13
    assert stats["armor"] == 2
    assert stats["defenseBonuses"]["might"] == 3
    assert stats["defenseBonuses"]["reflex"] == 4
    assert stats["defenseBonuses"]["mentalFortitude"] == -1
    assert stats["defenseScores"]["might"] == 13


def test_calculate_all_stats_empty_character():
    stats = calculate_all_stats({})
    assert stats["maxHealth"] == 8
    assert stats["maxEnergy"] == 0
    assert stats["terminal"] == 2
    assert stats["speed"] == 6
    assert stats["evasion"] == 10
    assert stats["armor"] == 0
    assert set(stats["defenseScores"].values()) == {10}


def test_calculate_all_stats_garbage_fields():
    stats = calculate_all_stats({"level": "abc", "abilities": {"vitality": "x"}, "healthPoints": None})
    assert stats["maxHealth"] == 8


def test_calculate_all_stats_is_idempotent(sample_character):
    before = copy.deepcopy(sample_character)
    first = calculate_all_stats(sample_character)
    second = calculate_all_stats(sample_character)
    assert first == second
    assert sample_character == before


def test_calculate_all_stats_overrides():
    assert calculate_all_stats({"speedBase": 5, "abilities": {"agility": 2}})["speed"] == 6
    stats = calculate_all_stats({}, {"COMBAT": {"baseDefense": 12}})
    assert stats["defenseScores"]["might"] == 12


def test_calculate_all_stats_accepts_models():
    character = Character(level=2, abilities={"vitality": 1})
    assert calculate_all_stats(character)["maxHealth"] == 10


def test_compute_max_health_energy_from_raw_record():
    raw = {
        "abilities": {"acu": 2, "vit": 1},
        "archetype": {"pow_abil": "acuity"},
        "level": 2,
        "energyPoints": 1,
    }
    result = calculations.compute_max_health_energy(raw)
    assert result == {"maxHealth": 10, "maxEnergy": 5}


def test_attack_bonuses():
    bonuses = calculations.calculate_bonuses(2, 1, {"strength": 3, "agility": -1, "charisma": 2})
    assert bonuses["strength"] == {"prof": 5, "unprof": 2}
    assert bonuses["agility"] == {"prof": 1, "unprof": -2}
    assert bonuses["powerAttack"] == {"prof": 3, "unprof": 1}


def test_archetype_ability_score():
    character = {
        "abilities": {"charisma": 2, "strength": 4},
        "pow_abil": "charisma",
        "mart_abil": "strength",
    }
    assert calculations.get_archetype_ability_score(character) == 4
    assert calculations.get_archetype_ability_score({"pow_abil": "charisma"}) == 0


def test_movement_bases():
    assert calculations.get_speed_base({}) == 6
    assert calculations.get_speed_base({"speedBase": "8"}) == 8
    assert calculations.get_speed_base({}, {"COMBAT": {"baseSpeed": 7}}) == 7
    assert calculations.get_evasion_base({"evasionBase": None}) == 10
    assert calculations.get_evasion_base({"evasionBase": 12}) == 12
