# power_calc.py
"""Energy/TP costs and display strings for user-built powers."""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from ...shared import get_field
from .ids import PART_IDS, find_by_id_or_name, id_key, matches_part
from .parts import (
    evaluate_parts,
    summarize_tp,
    option_level,
    build_part_chips,
    normalize_part_payloads,
    action_label,
    compute_action_type_from_selection,
)

logger = logging.getLogger("realms.library.power_calc")

AREA_PARTS = (
    (PART_IDS.SPHERE_OF_EFFECT, "Sphere"),
    (PART_IDS.CYLINDER_OF_EFFECT, "Cylinder"),
    (PART_IDS.CONE_OF_EFFECT, "Cone"),
    (PART_IDS.LINE_OF_EFFECT, "Line"),
    (PART_IDS.TRAIL_OF_EFFECT, "Trail"),
)

MINUTE_STEPS = [1, 10, 30]
HOUR_STEPS = [1, 6, 12]
DAY_STEPS = [1, 10, 20, 30]


def calculate_power_costs(parts_payload: Optional[Iterable[Any]] = None,
                          parts_db: Optional[Iterable[Any]] = None,
                          mechanic_parts: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """
    Total energy and TP for a power.

    Flat parts add up; percentage parts multiply everything; duration parts
    multiply the share of flat and percentage costs flagged `applyDuration`:

        energy = ceil(flat * perc_all + (dur_all + 1) * flat_dur * perc_dur - flat_dur * perc_dur)

    With no duration parts `dur_all` is 0, so a power made only of flat
    parts costs the plain sum of its parts.

    Args:
        parts_payload: Selected parts (saved `{id, name, op_N_lvl, applyDuration}`
            records, or UI records carrying the definition under `part`).
        parts_db: Power part definitions.
        mechanic_parts: Synthesized parts appended before summing.

    Returns:
        Dict: totalEnergy, energyRaw, totalTP, tpRaw, tpSources.
    """
    flat_normal = 0
    flat_duration = 0
    perc_all = 1
    perc_dur = 1
    dur_all = 1
    has_duration_parts = False

    combined = list(parts_payload or []) + list(mechanic_parts or [])
    evaluated = evaluate_parts(combined, parts_db)
    for entry in evaluated:
        definition = entry["definition"]
        energy = entry["energy"]
        apply_duration = bool(get_field(entry["payload"], "applyDuration", False))

        if get_field(definition, "duration", False):
            dur_all *= energy
            has_duration_parts = True
        elif get_field(definition, "percentage", False):
            perc_all *= energy
            if apply_duration:
                perc_dur *= energy
        else:
            flat_normal += energy
            if apply_duration:
                flat_duration += energy

    if not has_duration_parts:
        dur_all = 0

    energy_raw = (
        flat_normal * perc_all
        + (dur_all + 1) * flat_duration * perc_dur
        - flat_duration * perc_dur
    )
    result = {"totalEnergy": math.ceil(energy_raw), "energyRaw": energy_raw}
    result.update(summarize_tp(evaluated))
    return result


def _payload_part_id(payload: Any, parts_db: Optional[Iterable[Any]]) -> Any:
    nested = get_field(payload, "part")
    if nested is not None and get_field(nested, "id") is not None:
        return id_key(get_field(nested, "id"))
    if get_field(payload, "id") is not None:
        return id_key(get_field(payload, "id"))
    name = (get_field(nested, "name") if nested is not None else None) or get_field(payload, "name")
    if name:
        definition = find_by_id_or_name(parts_db, name)
        return id_key(get_field(definition, "id")) if definition is not None else None
    return None


def compute_action_type(parts_payload: Optional[Iterable[Any]] = None,
                        parts_db: Optional[Iterable[Any]] = None) -> str:
    action_type = "Basic"
    is_reaction = False
    for payload in parts_payload or []:
        part_id = _payload_part_id(payload, parts_db)
        level_1 = option_level(payload, 1)
        if part_id == PART_IDS.POWER_REACTION:
            is_reaction = True
        elif part_id == PART_IDS.POWER_QUICK_OR_FREE_ACTION:
            if level_1 == 0:
                action_type = "Quick"
            elif level_1 == 1:
                action_type = "Free"
        elif part_id == PART_IDS.POWER_LONG_ACTION:
            if level_1 == 0:
                action_type = "Long (3)"
            elif level_1 == 1:
                action_type = "Long (4)"
    return action_label(action_type, is_reaction)


def _find_selected(parts_payload: Optional[Iterable[Any]], part_id: Optional[int], name: str) -> Any:
    for payload in parts_payload or []:
        if matches_part(payload, part_id, name):
            return payload
    return None


def _plural(count: Any, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def derive_range(parts_payload: Optional[Iterable[Any]] = None, parts_db: Optional[Iterable[Any]] = None) -> str:
    selected = _find_selected(parts_payload, PART_IDS.POWER_RANGE, "Power Range")
    if selected is None:
        return "1 space"
    spaces = 3 + 3 * option_level(selected, 1)
    return _plural(spaces, "space")


def derive_area(parts_payload: Optional[Iterable[Any]] = None, parts_db: Optional[Iterable[Any]] = None) -> str:
    payloads = list(parts_payload or [])
    for part_id, label in AREA_PARTS:
        if _find_selected(payloads, part_id, f"{label} of Effect") is not None:
            return label
    return "1 target"


def _step_value(steps: List[int], level: float) -> int:
    index = int(level)
    return steps[index] if 0 <= index < len(steps) else 1


def derive_duration(parts_payload: Optional[Iterable[Any]] = None, parts_db: Optional[Iterable[Any]] = None) -> str:
    payloads = list(parts_payload or [])
    if _find_selected(payloads, PART_IDS.DURATION_PERMANENT, "Duration (Permanent)") is not None:
        return "Permanent"

    selected = _find_selected(payloads, PART_IDS.DURATION_ROUND, "Duration (Round)")
    if selected is not None:
        return _plural(2 + option_level(selected, 1), "round")

    selected = _find_selected(payloads, PART_IDS.DURATION_MINUTE, "Duration (Minute)")
    if selected is not None:
        return _plural(_step_value(MINUTE_STEPS, option_level(selected, 1)), "minute")

    selected = _find_selected(payloads, PART_IDS.DURATION_HOUR, "Duration (Hour)")
    if selected is not None:
        return _plural(_step_value(HOUR_STEPS, option_level(selected, 1)), "hour")

    selected = _find_selected(payloads, PART_IDS.DURATION_DAYS, "Duration (Days)")
    if selected is not None:
        return _plural(_step_value(DAY_STEPS, option_level(selected, 1)), "day")

    return "1 round"


def format_power_damage(damage: Any) -> str:
    """First usable damage entry as "XdY type"."""
    if not isinstance(damage, list):
        return ""
    for entry in damage:
        amount = get_field(entry, "amount")
        size = get_field(entry, "size")
        damage_type = get_field(entry, "type")
        if amount and size and damage_type and damage_type != "none":
            return f"{amount}d{size} {damage_type}"
    return ""


def derive_power_display(power_doc: Any, parts_db: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """Everything a power card shows, computed from the saved power."""
    payloads = normalize_part_payloads(get_field(power_doc, "parts"))
    costs = calculate_power_costs(payloads, parts_db)
    return {
        "name": get_field(power_doc, "name") or "",
        "description": get_field(power_doc, "description") or "",
        "actionType": compute_action_type(payloads, parts_db),
        "range": derive_range(payloads, parts_db),
        "area": derive_area(payloads, parts_db),
        "duration": derive_duration(payloads, parts_db),
        "damage": format_power_damage(get_field(power_doc, "damage")),
        "energy": costs["totalEnergy"],
        "tp": costs["totalTP"],
        "tpSources": costs["tpSources"],
        "partChips": build_part_chips(payloads, parts_db),
    }


__all__ = [
    "calculate_power_costs",
    "compute_action_type",
    "compute_action_type_from_selection",
    "derive_range",
    "derive_area",
    "derive_duration",
    "format_power_damage",
    "derive_power_display",
]
