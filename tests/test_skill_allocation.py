from realms.modules.rules_pkg import skill_allocation


def test_increase_cost():
    assert skill_allocation.get_skill_value_increase_cost(0, False) == 1
    assert skill_allocation.get_skill_value_increase_cost(3, False) == 3
    assert skill_allocation.get_skill_value_increase_cost(3, True) == 2
    assert skill_allocation.get_proficiency_cost() == 1
    assert skill_allocation.get_skill_value_decrease_refund(4) == 1

    rules = {"SKILLS_AND_DEFENSES": {"maxSkillValue": 4}}
    assert skill_allocation.get_skill_value_increase_cost(3, False, rules) == 1


def test_total_skill_points():
    assert skill_allocation.get_total_skill_points(4) == 12
    assert skill_allocation.get_total_skill_points(2, "CREATURE") == 10


def test_can_increase_skill_value():
    # sub-skill blocked while its base skill is unproficient
    assert skill_allocation.can_increase_skill_value(0, False, True, False, 5) is False
    assert skill_allocation.can_increase_skill_value(0, False, True, True, 5) is True
    assert skill_allocation.can_increase_skill_value(3, True, False, True, 2) is False
    assert skill_allocation.can_increase_skill_value(3, True, False, True, 3) is True
    assert skill_allocation.can_increase_skill_value(0, False, False, False, 1, is_species_skill=True) is True
    assert skill_allocation.can_increase_skill_value(0, False, False, False, 0) is False


def test_can_decrease_skill_value():
    assert skill_allocation.can_decrease_skill_value(0) is False
    assert skill_allocation.can_decrease_skill_value(1) is True
    assert skill_allocation.can_decrease_skill_value(1, is_species_skill=True) is False
    assert skill_allocation.can_decrease_skill_value(2, is_species_skill=True) is True


def test_can_increase_defense():
    assert skill_allocation.can_increase_defense(2, 3, 0, 2) is True
    assert skill_allocation.can_increase_defense(2, 3, 1, 5) is False
    assert skill_allocation.can_increase_defense(0, 3, 0, 1) is False


def test_skill_points_spent():
    allocations = {"athletics": 3, "climb": 2, "stealth": 1, "lore": 0}
    skill_data = [
        {"id": "athletics"},
        {"id": "climb", "isSubSkill": True},
        {"id": "stealth"},
        {"id": "lore"},
    ]
    spent = skill_allocation.calculate_skill_points_spent(allocations, {"might": 1}, ["stealth"], skill_data)
    assert spent == 7


def test_simple_skill_points_spent():
    allocations = {"athletics": 0, "climb": 1, "stealth": 2, "arcana": 2}
    meta = {"climb": {"isSubSkill": True}}
    spent = skill_allocation.calculate_simple_skill_points_spent(allocations, ["stealth"], meta)
    # athletics 1, climb 1, stealth 1, arcana 1 + 2
    assert spent == 6
    assert skill_allocation.calculate_simple_skill_points_spent({}, [], {}, {"reflex": 2}) == 4
