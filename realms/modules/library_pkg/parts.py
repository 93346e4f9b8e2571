# parts.py
"""
Part evaluation shared by the power, technique and item calculators.

A selected part is a reference to a codex definition plus up to three
option levels. Its contribution to any cost is

    base + op_1 * lvl_1 + op_2 * lvl_2 + op_3 * lvl_3

and the same code path handles parts the user picked and "mechanic" parts
synthesized from creator selections (action type, damage dice, weapon).
"""
import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ...shared import to_number, get_field
from .ids import find_by_id_or_name

logger = logging.getLogger("realms.library.parts")

OPTIONS = (1, 2, 3)

# legacy creator payloads stored option levels as opt1Level etc.
_LEGACY_LEVEL_KEYS = {1: "opt1Level", 2: "opt2Level", 3: "opt3Level"}


def option_level(payload: Any, option: int) -> float:
    value = get_field(payload, f"op_{option}_lvl")
    if value is None and get_field(payload, "part") is not None:
        value = get_field(payload, _LEGACY_LEVEL_KEYS[option])
    # negative option levels are clamped at use
    return max(0, to_number(value))


def option_levels(payload: Any) -> Tuple[float, float, float]:
    return tuple(option_level(payload, option) for option in OPTIONS)


def resolve_part(payload: Any, table: Optional[Iterable[Any]]) -> Any:
    """The definition a payload points at: an embedded `part`, else a table lookup."""
    nested = get_field(payload, "part")
    if nested is not None:
        return nested
    return find_by_id_or_name(table, payload)


def contribution(definition: Any, levels: Tuple[float, float, float], unit: str,
                 floor_option_1: bool = False) -> float:
    """`base_<unit> + sum(op_i_<unit> * level_i)` for one part."""
    first = to_number(get_field(definition, f"op_1_{unit}")) * levels[0]
    if floor_option_1:
        first = math.floor(first)
    return (
        to_number(get_field(definition, f"base_{unit}"))
        + first
        + to_number(get_field(definition, f"op_2_{unit}")) * levels[1]
        + to_number(get_field(definition, f"op_3_{unit}")) * levels[2]
    )


def level_suffix(levels: Tuple[float, float, float]) -> str:
    return "".join(f" (Opt{option} {level})" for option, level in zip(OPTIONS, levels) if level > 0)


def evaluate_parts(payloads: Optional[Iterable[Any]], table: Optional[Iterable[Any]],
                   floor_option_1: Optional[Callable[[Any], bool]] = None) -> List[Dict[str, Any]]:
    """
    Resolves each payload and computes its energy and TP.

    Payloads that do not resolve contribute nothing and are skipped.
    """
    evaluated = []
    for payload in payloads or []:
        definition = resolve_part(payload, table)
        if definition is None:
            logger.debug(f"Unknown part {get_field(payload, 'id')!r}/{get_field(payload, 'name')!r}, skipping")
            continue
        levels = option_levels(payload)
        floor_first = bool(floor_option_1 and floor_option_1(definition))
        evaluated.append({
            "payload": payload,
            "definition": definition,
            "levels": levels,
            "energy": contribution(definition, levels, "en"),
            "tp": contribution(definition, levels, "tp", floor_first),
        })
    return evaluated


def summarize_tp(evaluated: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Training-point total and its breakdown.

    The total floors the raw sum once, so fractional contributions from
    several parts add up before truncation. Breakdown lines show each part's
    floored value and are informational only.
    """
    tp_raw = 0
    sources = []
    for entry in evaluated:
        tp_raw += entry["tp"]
        part_tp = math.floor(entry["tp"])
        if part_tp > 0:
            name = get_field(entry["definition"], "name", "")
            sources.append(f"{part_tp} TP: {name}{level_suffix(entry['levels'])}")
    return {"totalTP": math.floor(tp_raw), "tpRaw": tp_raw, "tpSources": sources}


def aggregate_part_costs(payloads: Optional[Iterable[Any]], table: Optional[Iterable[Any]],
                         mechanic_parts: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """
    Flat energy and TP totals for a set of selected parts.

    Mechanic parts are appended to the selection before summing.
    """
    combined = list(payloads or []) + list(mechanic_parts or [])
    evaluated = evaluate_parts(combined, table)
    energy_raw = sum(entry["energy"] for entry in evaluated)
    result = {"totalEnergy": math.ceil(energy_raw), "energyRaw": energy_raw}
    result.update(summarize_tp(evaluated))
    return result


def format_part_chip(definition: Any, payload: Any, floor_option_1: bool = False) -> Dict[str, Any]:
    levels = option_levels(payload)
    final_tp = math.floor(contribution(definition, levels, "tp", floor_option_1))
    text = f"{get_field(definition, 'name', '') or ''}{level_suffix(levels)}"
    if final_tp > 0:
        text += f" | TP: {final_tp}"
    return {
        "text": text,
        "description": get_field(definition, "description", "") or "",
        "finalTP": final_tp,
        "hasTP": final_tp > 0,
    }


def build_part_chips(payloads: Optional[Iterable[Any]], table: Optional[Iterable[Any]],
                     floor_option_1: Optional[Callable[[Any], bool]] = None) -> List[Dict[str, Any]]:
    chips = []
    for payload in payloads or []:
        definition = resolve_part(payload, table)
        if definition is None:
            continue
        chips.append(format_part_chip(definition, payload, bool(floor_option_1 and floor_option_1(definition))))
    return chips


def normalize_part_payloads(parts: Any) -> List[Dict[str, Any]]:
    """Saved part references reduced to the fields the calculators read."""
    if not isinstance(parts, list):
        return []
    normalized = []
    for part in parts:
        if part is None:
            continue
        normalized.append({
            "id": get_field(part, "id"),
            "name": get_field(part, "name"),
            "op_1_lvl": to_number(get_field(part, "op_1_lvl")),
            "op_2_lvl": to_number(get_field(part, "op_2_lvl")),
            "op_3_lvl": to_number(get_field(part, "op_3_lvl")),
            "applyDuration": bool(get_field(part, "applyDuration", False)),
        })
    return normalized


def compute_splits(dice_amount: Any, die_size: Any) -> int:
    """How many dice exceed the fewest d12s that reach the same total."""
    dice = to_number(dice_amount)
    size = to_number(die_size)
    if size not in (4, 6, 8, 10, 12) or dice <= 1:
        return 0
    minimum_d12 = math.ceil(dice * size / 12)
    return int(max(0, dice - minimum_d12))


def action_label(base: str, is_reaction: bool) -> str:
    return f"{base} Reaction" if is_reaction else f"{base} Action"


SELECTION_BASES = {
    "quick": "Quick",
    "free": "Free",
    "long3": "Long (3)",
    "long4": "Long (4)",
}


def compute_action_type_from_selection(selection: Any, reaction_flag: Any) -> str:
    """`basic|quick|free|long3|long4` plus a reaction flag -> "<Base> Action/Reaction"."""
    base = SELECTION_BASES.get(str(selection or "basic"), "Basic")
    return action_label(base, bool(reaction_flag))
