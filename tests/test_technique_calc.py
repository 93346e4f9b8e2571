from realms.modules.library_pkg import technique_calc
from realms.modules.library_pkg.parts import compute_splits


def test_percentage_parts_multiply(technique_parts):
    costs = technique_calc.calculate_technique_costs([{"id": 11}, {"id": 8}], technique_parts)
    assert costs["totalEnergy"] == 5
    assert costs["totalTP"] == 3


def test_additional_damage_option_tp_is_floored(technique_parts):
    selected = [{"id": 6, "op_1_lvl": 1}, {"id": 5, "op_1_lvl": 1}]
    costs = technique_calc.calculate_technique_costs(selected, technique_parts)
    assert costs["tpRaw"] == 1.5
    assert costs["totalTP"] == 1


def test_additional_damage_level():
    assert technique_calc.compute_additional_damage_level(2, 6) == 4
    assert technique_calc.compute_additional_damage_level(1, 4) == 0
    assert technique_calc.compute_additional_damage_level(0, 6) == 0


def test_format_technique_damage():
    assert technique_calc.format_technique_damage({"amount": 2, "size": 6}) == "+2d6"
    assert technique_calc.format_technique_damage({"amount": 0, "size": 6}) == ""
    assert technique_calc.format_technique_damage(None) == ""


def test_compute_action_type(technique_parts):
    assert technique_calc.compute_action_type([{"id": 4, "op_1_lvl": 1}], technique_parts) == "Free Action"
    assert technique_calc.compute_action_type([{"name": "Reaction"}], technique_parts) == "Basic Reaction"
    assert technique_calc.compute_action_type([{"id": 3, "op_1_lvl": 1}], technique_parts) == "Long (4) Action"
    assert technique_calc.compute_action_type([], technique_parts) == "Basic Action"


def test_compute_splits():
    assert compute_splits(2, 6) == 1
    assert compute_splits(4, 6) == 2
    assert compute_splits(1, 12) == 0
    assert compute_splits(3, 5) == 0


def test_build_mechanic_part_payload(technique_parts):
    parts = technique_calc.build_mechanic_part_payload(
        technique_parts, "quick", reaction=True, weapon_tp=2, dice_amount=2, die_size=6,
    )
    assert [part["id"] for part in parts] == [2, 4, 6, 5, 7]
    assert [part["op_1_lvl"] for part in parts] == [0, 0, 4, 0, 1]
    assert all("applyDuration" not in part for part in parts)


def test_derive_technique_display(technique_parts):
    doc = {
        "name": "Cleave",
        "weapon": {"id": 12},
        "damage": [{"amount": 1, "size": 8}],
        "parts": [{"id": 11, "name": "Stun"}],
        "actionType": "quick",
        "isReaction": True,
    }
    display = technique_calc.derive_technique_display(doc, technique_parts)
    assert display["weaponName"] == "Weapon #12"
    assert display["actionType"] == "Quick Reaction"
    assert display["damageStr"] == "+1d8"
    assert display["energy"] == 3
    assert display["tp"] == 2
    assert display["partChips"][0]["text"] == "Stun | TP: 2"


def test_derive_technique_display_defaults(technique_parts):
    display = technique_calc.derive_technique_display({"parts": [{"id": 11}]}, technique_parts)
    assert display["actionType"] == "Basic Action"
    assert display["weaponName"] == "Unarmed"
    assert display["damageStr"] == ""
