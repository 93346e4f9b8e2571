from realms.modules.library_pkg import mechanic_builder
from realms.modules.library_pkg.mechanic_builder import build_mechanic_parts
from realms.modules.library_pkg.models import MechanicContext
from realms.modules.library_pkg.power_calc import calculate_power_costs


def test_damage_levels():
    assert mechanic_builder.calculate_power_damage_level(2, 6) == 4
    assert mechanic_builder.calculate_power_damage_level(1, 4) == 0
    assert mechanic_builder.calculate_technique_damage_level(1, 4) == 0
    assert mechanic_builder.calculate_technique_damage_level(2, 6) == 2
    assert mechanic_builder.calculate_technique_damage_level(0, 6) == 0


def test_power_mechanic_parts(power_parts):
    context = {
        "creatorType": "power",
        "action": {"type": "free", "isReaction": True},
        "powerDamage": [{"type": "fire", "diceAmount": 2, "dieSize": 6}],
        "range": {"steps": 3},
        "area": {"type": "sphere", "level": 2},
        "duration": {"type": "minutes", "value": 10, "focus": True},
    }
    parts = build_mechanic_parts(context, power_parts)
    assert [part["name"] for part in parts] == [
        "Power Reaction",
        "Power Quick or Free Action",
        "Elemental Damage",
        "Power Split Damage Dice",
        "Power Range",
        "Sphere of Effect",
        "Focus for Duration",
        "Duration (Minute)",
    ]
    assert [part["op_1_lvl"] for part in parts] == [0, 1, 4, 0, 2, 1, 0, 1]
    assert all(part["applyDuration"] is False for part in parts)


def test_mechanic_parts_feed_power_costs(power_parts):
    parts = build_mechanic_parts(MechanicContext(action={"type": "quick"}, range={"steps": 1}), power_parts)
    costs = calculate_power_costs([], power_parts, mechanic_parts=parts)
    assert costs["totalEnergy"] == 2


def test_only_mechanic_rows_are_emitted(power_parts):
    for part in power_parts:
        if part["id"] == 82:
            part["mechanic"] = False
    parts = build_mechanic_parts({"action": {"type": "basic", "isReaction": True}}, power_parts)
    assert parts == []


def test_unknown_damage_type_is_skipped(power_parts):
    parts = build_mechanic_parts({"powerDamage": [{"type": "glitter", "diceAmount": 2, "dieSize": 6}]}, power_parts)
    assert parts == []


def test_round_durations(power_parts):
    one_round = build_mechanic_parts({"duration": {"type": "rounds", "value": 1}}, power_parts)
    assert one_round == []
    three_rounds = build_mechanic_parts({"duration": {"type": "rounds", "value": 3}}, power_parts)
    assert [(part["id"], part["op_1_lvl"]) for part in three_rounds] == [(377, 1)]


def test_empowered_parts_carry_duration_flag(power_parts):
    parts = build_mechanic_parts({"creatorType": "empowered", "range": {"steps": 1, "applyDuration": True}}, power_parts)
    assert parts == [{"id": 292, "name": "Power Range", "op_1_lvl": 0, "op_2_lvl": 0, "op_3_lvl": 0, "applyDuration": True}]


def test_technique_mechanic_parts(technique_parts):
    parts = mechanic_builder.build_technique_mechanic_parts(technique_parts, "long3", False, 1, 8, weapon_tp=3)
    assert [(part["name"], part["op_1_lvl"]) for part in parts] == [
        ("Long Action", 0),
        ("Additional Damage", 1),
        ("Add Weapon Attack", 2),
    ]
    assert all("applyDuration" not in part for part in parts)


def test_power_wrapper(power_parts):
    assert mechanic_builder.build_power_mechanic_parts(power_parts, "basic", False, "none", 2, 6) == []
    parts = mechanic_builder.build_power_mechanic_parts(
        power_parts, "long4", False, "fire", 1, 8, duration_type="days", duration_value=7,
    )
    assert [(part["name"], part["op_1_lvl"]) for part in parts] == [
        ("Power Long Action", 1),
        ("Elemental Damage", 2),
        ("Duration (Days)", 1),
    ]
