# technique_calc.py
"""Energy/TP costs and display strings for user-built techniques."""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from ...shared import get_field, to_number
from .ids import PART_IDS, find_by_id_or_name, id_key
from .parts import (
    evaluate_parts,
    summarize_tp,
    option_level,
    build_part_chips,
    normalize_part_payloads,
    action_label,
    compute_splits,
    compute_action_type_from_selection,
)
from .mechanic_builder import MechanicPartCollector, CREATOR_TECHNIQUE

logger = logging.getLogger("realms.library.technique_calc")

# legacy parts saved by name only
_NAME_ACTIONS = {
    "Reaction": PART_IDS.REACTION,
    "Quick or Free Action": PART_IDS.QUICK_OR_FREE_ACTION,
    "Long Action": PART_IDS.LONG_ACTION,
}


def is_additional_damage(definition: Any) -> bool:
    return (id_key(get_field(definition, "id")) == PART_IDS.ADDITIONAL_DAMAGE
            or get_field(definition, "name") == "Additional Damage")


def compute_additional_damage_level(dice_amount: Any, die_size: Any) -> int:
    """Additional Damage option level from total dice: floor((dice * size - 4) / 2)."""
    total = to_number(dice_amount) * to_number(die_size)
    if total <= 0:
        return 0
    return max(0, math.floor((total - 4) / 2))


def format_technique_damage(damage: Any) -> str:
    """Bonus dice as "+XdY"; empty when either number is missing or zero."""
    if not damage:
        return ""
    amount = get_field(damage, "amount")
    size = get_field(damage, "size")
    if not amount or not size or str(amount) == "0" or str(size) == "0":
        return ""
    return f"+{amount}d{size}"


def compute_action_type(parts_payload: Optional[Iterable[Any]] = None,
                        parts_db: Optional[Iterable[Any]] = None) -> str:
    action_type = "Basic"
    is_reaction = False
    for payload in parts_payload or []:
        part_id = id_key(get_field(payload, "id"))
        name = get_field(payload, "name")
        if part_id is None and name:
            definition = find_by_id_or_name(parts_db, name)
            part_id = id_key(get_field(definition, "id")) if definition is not None else None
        if part_id not in _NAME_ACTIONS.values():
            part_id = _NAME_ACTIONS.get(name, part_id)

        level_1 = option_level(payload, 1)
        if part_id == PART_IDS.REACTION:
            is_reaction = True
        elif part_id == PART_IDS.QUICK_OR_FREE_ACTION:
            if level_1 == 0:
                action_type = "Quick"
            elif level_1 == 1:
                action_type = "Free"
        elif part_id == PART_IDS.LONG_ACTION:
            if level_1 == 0:
                action_type = "Long (3)"
            elif level_1 == 1:
                action_type = "Long (4)"
    return action_label(action_type, is_reaction)


def build_mechanic_part_payload(parts_db: Optional[Iterable[Any]] = None, action_type_selection: str = "basic",
                                reaction: bool = False, weapon_tp: Any = 0, dice_amount: Any = 0,
                                die_size: Any = 0) -> List[Dict[str, Any]]:
    """
    Mechanic parts for the technique creator.

    Unlike the unified builder, Additional Damage here is levelled from
    total dice (the technique creator's own scale).
    """
    collector = MechanicPartCollector(parts_db)
    collector.add_action(CREATOR_TECHNIQUE, action_type_selection, reaction)

    dice = to_number(dice_amount)
    size = to_number(die_size)
    if dice > 0 and size >= 4:
        collector.add(PART_IDS.ADDITIONAL_DAMAGE, "Additional Damage", compute_additional_damage_level(dice, size))
        splits = compute_splits(dice, size)
        if splits > 0:
            collector.add(PART_IDS.SPLIT_DAMAGE_DICE, "Split Damage Dice", splits - 1)

    tp = to_number(weapon_tp)
    if tp >= 1:
        collector.add(PART_IDS.ADD_WEAPON_ATTACK, "Add Weapon Attack", tp - 1)
    return collector.parts


def calculate_technique_costs(parts_payload: Optional[Iterable[Any]] = None,
                              parts_db: Optional[Iterable[Any]] = None,
                              mechanic_parts: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """
    Total energy and TP for a technique.

    Energy is the sum of non-percentage parts times the product of
    percentage parts, rounded up. Additional Damage floors its option-1 TP
    before it is added.
    """
    sum_flat = 0
    product_percentage = 1
    combined = list(parts_payload or []) + list(mechanic_parts or [])
    evaluated = evaluate_parts(combined, parts_db, is_additional_damage)
    for entry in evaluated:
        if get_field(entry["definition"], "percentage", False):
            product_percentage *= entry["energy"]
        else:
            sum_flat += entry["energy"]

    energy_raw = sum_flat * product_percentage
    result = {"totalEnergy": math.ceil(energy_raw), "energyRaw": energy_raw}
    result.update(summarize_tp(evaluated))
    return result


def _weapon_name(weapon: Any) -> str:
    if not weapon:
        return "Unarmed"
    name = get_field(weapon, "name")
    weapon_id = get_field(weapon, "id")
    if name:
        return name
    if weapon_id:
        return f"Weapon #{weapon_id}"
    return "Unarmed"


def derive_technique_display(technique_doc: Any, parts_db: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """
    Everything a technique card shows. A saved action type (and reaction
    flag) wins over the one derived from parts.
    """
    payloads = normalize_part_payloads(get_field(technique_doc, "parts"))
    costs = calculate_technique_costs(payloads, parts_db)

    saved_action = get_field(technique_doc, "actionType")
    if saved_action:
        action_type = compute_action_type_from_selection(saved_action, get_field(technique_doc, "isReaction"))
    else:
        action_type = compute_action_type(payloads, parts_db)

    damage = get_field(technique_doc, "damage")
    if isinstance(damage, list):
        damage = damage[0] if damage else None

    return {
        "name": get_field(technique_doc, "name") or "",
        "description": get_field(technique_doc, "description") or "",
        "weaponName": _weapon_name(get_field(technique_doc, "weapon")),
        "actionType": action_type,
        "damageStr": format_technique_damage(damage),
        "energy": costs["totalEnergy"],
        "tp": costs["totalTP"],
        "tpSources": costs["tpSources"],
        "partChips": build_part_chips(payloads, parts_db, is_additional_damage),
    }
