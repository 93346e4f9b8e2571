import pytest

from realms.modules.rules_pkg import archetype


@pytest.mark.parametrize("martial, power, expected", [
    (2, 0, "martial"),
    (0, 3, "power"),
    (1, 1, "mixed"),
    (0, 0, "none"),
])
def test_archetype_type(martial, power, expected):
    assert archetype.get_archetype_type(martial, power) == expected


def test_power_progression():
    level_1 = archetype.calculate_archetype_progression(1, 0, 2)
    assert (level_1["innateThreshold"], level_1["innatePools"], level_1["innateEnergy"]) == (8, 2, 16)

    level_4 = archetype.calculate_archetype_progression(4, 0, 2)
    assert (level_4["innateThreshold"], level_4["innatePools"], level_4["innateEnergy"]) == (9, 3, 27)

    level_10 = archetype.calculate_archetype_progression(10, 0, 2)
    assert level_10["innateEnergy"] == 55
    assert level_10["bonusArchetypeFeats"] == 0


def test_martial_progression():
    result = archetype.calculate_archetype_progression(7, 2, 0)
    assert result["bonusArchetypeFeats"] == 4
    assert result["innateEnergy"] == 0
    assert result["armamentProficiency"] == 12


def test_mixed_progression_applies_choices():
    result = archetype.calculate_archetype_progression(10, 1, 1, {4: "innate", 7: "feat"})
    assert result["archetypeType"] == "mixed"
    assert result["innateThreshold"] == 7
    assert result["innatePools"] == 2
    assert result["bonusArchetypeFeats"] == 2
    assert result["innateEnergy"] == 14
    assert result["milestoneLevels"] == [4, 7, 10]
    assert result["unresolvedMilestones"] == [10]


def test_mixed_progression_accepts_string_keys():
    result = archetype.calculate_archetype_progression(4, 1, 1, {"4": "Innate"})
    assert result["innateThreshold"] == 7


def test_armament_proficiency():
    assert archetype.get_armament_proficiency(0) == 3
    assert archetype.get_armament_proficiency(1) == 8
    assert archetype.get_armament_proficiency(2) == 12
    assert archetype.get_armament_proficiency(4) == 18
    assert archetype.get_armament_proficiency("junk") == 3


def test_milestone_levels_and_override():
    assert archetype.get_archetype_milestone_levels(3) == []
    assert archetype.get_archetype_milestone_levels(13) == [4, 7, 10, 13]
    assert archetype.is_archetype_milestone(7) is True
    assert archetype.is_archetype_milestone(8) is False

    rules = {"ARCHETYPE": {"poweredMartialMilestoneStartLevel": 3}}
    assert archetype.get_archetype_milestone_levels(6, rules) == [3, 6]


def test_validate_archetype_choice():
    assert archetype.validate_archetype_choice(4, "innate", 1, 1)["isValid"] is True
    assert archetype.validate_archetype_choice(5, "innate", 1, 1)["isValid"] is False
    assert archetype.validate_archetype_choice(4, "x", 1, 1)["isValid"] is False

    result = archetype.validate_archetype_choice(4, "innate", 2, 0)
    assert result["isValid"] is False
    assert "mixed" in result["reason"]


def test_apply_and_clean_choices():
    applied = archetype.apply_archetype_choice({"4": "innate"}, 4, "feat", 1, 1)
    assert applied["success"] is True
    assert applied["choices"] == {4: "feat"}

    rejected = archetype.apply_archetype_choice({}, 5, "feat", 1, 1)
    assert rejected["success"] is False
    assert rejected["choices"] == {}

    cleaned = archetype.clean_invalid_archetype_choices({4: "innate", 7: "feat", "10": "feat"}, 7, 1, 1)
    assert cleaned == {4: "innate", 7: "feat"}
    assert archetype.clean_invalid_archetype_choices({4: "innate"}, 7, 0, 2) == {}


def test_choice_descriptions():
    assert "Innate Pool" in archetype.get_milestone_choice_description("innate")
    assert archetype.get_milestone_choice_description(None) == ""
    assert set(archetype.get_archetype_choice_benefits()) == {"innate", "feat"}
