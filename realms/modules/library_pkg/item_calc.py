# item_calc.py
"""Item-point, TP and currency costs for weapons, armor and shields."""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from ...shared import get_field, to_number
from .ids import PROPERTY_IDS, GENERAL_PROPERTY_IDS, GENERAL_PROPERTY_NAMES, find_by_id_or_name, id_key, matches_part
from .parts import compute_splits

logger = logging.getLogger("realms.library.item_calc")

# (rarity, base currency, highest item points in the bracket)
RARITY_BRACKETS = [
    ("Common", 25, 4),
    ("Uncommon", 100, 6),
    ("Rare", 500, 8),
    ("Epic", 2500, 11),
    ("Legendary", 10000, 14),
    ("Mythic", 50000, 16),
    ("Ascended", 100000, math.inf),
]


def is_general_property(prop: Any) -> bool:
    """Built-in properties (range, damage, requirements...) every armament carries."""
    if not prop:
        return False
    if id_key(get_field(prop, "id")) in GENERAL_PROPERTY_IDS:
        return True
    return get_field(prop, "name") in GENERAL_PROPERTY_NAMES


def _property_level(ref: Any) -> float:
    return max(0, to_number(get_field(ref, "op_1_lvl")))


def _resolve(ref: Any, properties_data: Optional[Iterable[Any]]) -> Any:
    nested = get_field(ref, "property")
    return nested if nested is not None else find_by_id_or_name(properties_data, ref)


def calculate_item_costs(properties: Optional[Iterable[Any]],
                         properties_data: Optional[Iterable[Any]]) -> Dict[str, Any]:
    """Sum of `base + op_1 * level` for item points, TP and currency."""
    total_ip = 0
    total_tp = 0
    total_currency = 0
    for ref in properties or []:
        data = _resolve(ref, properties_data)
        if data is None:
            logger.debug(f"Unknown item property {get_field(ref, 'id')!r}/{get_field(ref, 'name')!r}")
            continue
        level = _property_level(ref)
        total_ip += to_number(get_field(data, "base_ip")) + to_number(get_field(data, "op_1_ip")) * level
        total_tp += to_number(get_field(data, "base_tp")) + to_number(get_field(data, "op_1_tp")) * level
        total_currency += to_number(get_field(data, "base_c")) + to_number(get_field(data, "op_1_c")) * level
    return {"totalIP": total_ip, "totalTP": total_tp, "totalCurrency": total_currency}


def calculate_currency_cost_and_rarity(total_currency: Any, total_ip: Any) -> Dict[str, Any]:
    """
    Rarity from item points and the price that goes with it.

    Price is the bracket's base scaled by 12.5% per currency point, never
    below the base, and truncated.
    """
    ip = max(0, to_number(total_ip))
    currency = max(0, to_number(total_currency))
    rarity, low = RARITY_BRACKETS[0][0], RARITY_BRACKETS[0][1]
    for name, base, ip_high in RARITY_BRACKETS:
        if ip <= ip_high:
            rarity, low = name, base
            break
    cost = max(low * (1 + 0.125 * currency), low)
    return {"currencyCost": math.floor(cost), "rarity": rarity}


def format_damage(damage: Any) -> str:
    if not isinstance(damage, list):
        return ""
    parts = []
    for entry in damage:
        amount = get_field(entry, "amount")
        size = get_field(entry, "size")
        damage_type = get_field(entry, "type")
        if amount and size and damage_type and damage_type != "none":
            parts.append(f"{amount}d{size} {damage_type}")
    return ", ".join(parts)


def _find_property(properties: Optional[Iterable[Any]], property_id: int, name: str) -> Any:
    for ref in properties or []:
        if matches_part(ref, property_id, name):
            return ref
    return None


def format_range(properties: Optional[Iterable[Any]]) -> str:
    prop = _find_property(properties, PROPERTY_IDS.RANGE, "Range")
    if prop is None:
        return "Melee"
    return f"{8 + _property_level(prop) * 8} Spaces"


def derive_damage_reduction(properties: Optional[Iterable[Any]]) -> float:
    prop = _find_property(properties, PROPERTY_IDS.DAMAGE_REDUCTION, "Damage Reduction")
    if prop is None:
        return 0
    return 1 + _property_level(prop)


def extract_proficiencies(properties: Optional[Iterable[Any]],
                          properties_data: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    """Properties that cost TP, i.e. the proficiencies needed to wield the item."""
    proficiencies = []
    for ref in properties or []:
        data = _resolve(ref, properties_data)
        if data is None:
            continue
        level = _property_level(ref)
        base_tp = to_number(get_field(data, "base_tp"))
        option_tp = to_number(get_field(data, "op_1_tp")) * level if level > 0 else 0
        total_tp = base_tp + option_tp
        if total_tp > 0:
            proficiencies.append({
                "id": get_field(data, "id") or 0,
                "name": get_field(data, "name") or "",
                "level": level,
                "baseTP": base_tp,
                "optionTP": option_tp,
                "totalTP": total_tp,
                "description": get_field(data, "description") or "",
            })
    return proficiencies


def format_proficiency_chip(proficiency: Dict[str, Any]) -> str:
    text = proficiency.get("name", "")
    if proficiency.get("level", 0) > 0:
        text += f" (Level {proficiency['level']})"
    if proficiency.get("totalTP", 0) > 0:
        text += f" | TP: {proficiency.get('baseTP', 0)}"
        if proficiency.get("optionTP", 0) > 0:
            text += f" + {proficiency['optionTP']}"
    return text


def derive_item_display(item: Any, properties_data: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    properties = get_field(item, "properties") or []
    costs = calculate_item_costs(properties, properties_data)
    pricing = calculate_currency_cost_and_rarity(costs["totalCurrency"], costs["totalIP"])
    return {
        "name": get_field(item, "name") or "",
        "armamentType": get_field(item, "armamentType") or "Weapon",
        "description": get_field(item, "description") or "",
        "rarity": pricing["rarity"],
        "currencyCost": pricing["currencyCost"],
        "totalIP": costs["totalIP"],
        "totalTP": costs["totalTP"],
        "totalCurrency": costs["totalCurrency"],
        "range": format_range(properties),
        "damage": format_damage(get_field(item, "damage")),
        "damageReduction": derive_damage_reduction(properties),
        "proficiencies": extract_proficiencies(properties, properties_data),
    }


__all__ = [
    "RARITY_BRACKETS",
    "is_general_property",
    "compute_splits",
    "calculate_item_costs",
    "calculate_currency_cost_and_rarity",
    "format_damage",
    "format_range",
    "derive_damage_reduction",
    "extract_proficiencies",
    "format_proficiency_chip",
    "derive_item_display",
]
