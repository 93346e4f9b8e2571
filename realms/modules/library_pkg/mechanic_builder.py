# mechanic_builder.py
"""
Synthesizes "mechanic" parts from creator selections.

Powers, techniques and empowered techniques all turn their action type,
damage dice, range/area/duration pickers and weapon choice into ordinary
part payloads, so the cost calculators never special-case them. Only
codex rows flagged `mechanic` are ever emitted.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from ...shared import to_number, get_field
from .ids import PART_IDS, part_lookup, id_key
from .models import MechanicContext
from .parts import compute_splits

logger = logging.getLogger("realms.library.mechanic_builder")

CREATOR_POWER = "power"
CREATOR_TECHNIQUE = "technique"
CREATOR_EMPOWERED = "empowered"

POWER_DAMAGE_PARTS = {
    "magic": (PART_IDS.MAGIC_DAMAGE, "Magic Damage"),
    "light": (PART_IDS.LIGHT_DAMAGE, "Light Damage"),
    "radiant": (PART_IDS.LIGHT_DAMAGE, "Light Damage"),
    "fire": (PART_IDS.ELEMENTAL_DAMAGE, "Elemental Damage"),
    "cold": (PART_IDS.ELEMENTAL_DAMAGE, "Elemental Damage"),
    "ice": (PART_IDS.ELEMENTAL_DAMAGE, "Elemental Damage"),
    "lightning": (PART_IDS.ELEMENTAL_DAMAGE, "Elemental Damage"),
    "acid": (PART_IDS.ELEMENTAL_DAMAGE, "Elemental Damage"),
    "poison": (PART_IDS.POISON_OR_NECROTIC_DAMAGE, "Poison or Necrotic Damage"),
    "necrotic": (PART_IDS.POISON_OR_NECROTIC_DAMAGE, "Poison or Necrotic Damage"),
    "sonic": (PART_IDS.SONIC_DAMAGE, "Sonic Damage"),
    "spiritual": (PART_IDS.SPIRITUAL_DAMAGE, "Spiritual Damage"),
    "psychic": (PART_IDS.PSYCHIC_DAMAGE, "Psychic Damage"),
    "physical": (PART_IDS.PHYSICAL_DAMAGE, "Physical Damage"),
    "bludgeoning": (PART_IDS.PHYSICAL_DAMAGE, "Physical Damage"),
    "piercing": (PART_IDS.PHYSICAL_DAMAGE, "Physical Damage"),
    "slashing": (PART_IDS.PHYSICAL_DAMAGE, "Physical Damage"),
}

AREA_PARTS = {
    "sphere": (PART_IDS.SPHERE_OF_EFFECT, "Sphere of Effect"),
    "cylinder": (PART_IDS.CYLINDER_OF_EFFECT, "Cylinder of Effect"),
    "cone": (PART_IDS.CONE_OF_EFFECT, "Cone of Effect"),
    "line": (PART_IDS.LINE_OF_EFFECT, "Line of Effect"),
    "trail": (PART_IDS.TRAIL_OF_EFFECT, "Trail of Effect"),
}

DURATION_PARTS = {
    "rounds": (PART_IDS.DURATION_ROUND, "Duration (Round)"),
    "minutes": (PART_IDS.DURATION_MINUTE, "Duration (Minute)"),
    "hours": (PART_IDS.DURATION_HOUR, "Duration (Hour)"),
    "days": (PART_IDS.DURATION_DAYS, "Duration (Days)"),
    "permanent": (PART_IDS.DURATION_PERMANENT, "Duration (Permanent)"),
}

# picker values -> option-1 index
DURATION_PICKER_VALUES = {
    "minutes": [1, 10, 30],
    "hours": [1, 6, 12],
    "days": [1, 7, 14],
}

POWER_ACTION_PARTS = {
    "reaction": (PART_IDS.POWER_REACTION, "Power Reaction"),
    "quick_free": (PART_IDS.POWER_QUICK_OR_FREE_ACTION, "Power Quick or Free Action"),
    "long": (PART_IDS.POWER_LONG_ACTION, "Power Long Action"),
}

TECHNIQUE_ACTION_PARTS = {
    "reaction": (PART_IDS.REACTION, "Reaction"),
    "quick_free": (PART_IDS.QUICK_OR_FREE_ACTION, "Quick or Free Action"),
    "long": (PART_IDS.LONG_ACTION, "Long Action"),
}

# selection -> (action part, option-1 level); "basic" needs no part
ACTION_SELECTIONS = {
    "quick": ("quick_free", 0),
    "free": ("quick_free", 1),
    "long3": ("long", 0),
    "long4": ("long", 1),
}


def calculate_power_damage_level(dice_amount: Any, die_size: Any) -> int:
    """Option-1 level of a power damage part: floor((dice * size - 4) / 2)."""
    total = to_number(dice_amount) * to_number(die_size)
    return max(0, math.floor((total - 4) / 2))


def calculate_technique_damage_level(dice_amount: Any, die_size: Any) -> int:
    """Additional Damage level from average damage; 1d4 (avg 2.5) is level 0, +2 avg per level."""
    dice = to_number(dice_amount)
    size = to_number(die_size)
    if dice <= 0 or size < 4:
        return 0
    average = dice * (size + 1) / 2
    return max(0, math.floor((average - 2.5) / 2))


class MechanicPartCollector:
    """Looks up mechanic parts by fixed id (name as fallback) and collects payloads."""

    def __init__(self, parts_db: Optional[Iterable[Any]], supports_duration: bool = False):
        self.parts_db = list(parts_db or [])
        self.supports_duration = supports_duration
        self.parts: List[Dict[str, Any]] = []

    def add(self, part_id: Optional[int], name: str, op_1: Any = 0, apply_duration: bool = False) -> None:
        definition = part_lookup(self.parts_db, part_id, name)
        if definition is None or not get_field(definition, "mechanic", False):
            logger.debug(f"No mechanic part for {name} ({part_id}), skipping")
            return
        payload = {
            "id": id_key(get_field(definition, "id")),
            "name": get_field(definition, "name") or name,
            "op_1_lvl": op_1,
            "op_2_lvl": 0,
            "op_3_lvl": 0,
        }
        if self.supports_duration:
            payload["applyDuration"] = bool(apply_duration)
        self.parts.append(payload)

    def add_action(self, creator_type: str, selection: Any, is_reaction: bool) -> None:
        action_parts = POWER_ACTION_PARTS if creator_type == CREATOR_POWER else TECHNIQUE_ACTION_PARTS
        if is_reaction:
            self.add(*action_parts["reaction"], 0)
        chosen = ACTION_SELECTIONS.get(str(selection or "basic"))
        if chosen:
            key, level = chosen
            self.add(*action_parts[key], level)


def _duration_option(duration_type: str, value: Any) -> int:
    steps = DURATION_PICKER_VALUES.get(duration_type)
    number = to_number(value, 1)
    if steps and number in steps:
        return steps.index(number)
    return 0


def build_mechanic_parts(context: Any, parts_db: Optional[Iterable[Any]] = None) -> List[Dict[str, Any]]:
    """
    Builds mechanic part payloads for a power, technique or empowered technique.

    Args:
        context (MechanicContext | dict): The creator's selections.
        parts_db: Part definitions to resolve against.

    Returns:
        List[Dict]: `{id, name, op_1_lvl, op_2_lvl, op_3_lvl[, applyDuration]}`
        records, in the order action, damage, range, area, duration, weapon.
    """
    ctx = context if isinstance(context, MechanicContext) else MechanicContext.model_validate(context or {})
    creator_type = ctx.creatorType
    collector = MechanicPartCollector(parts_db, creator_type in (CREATOR_POWER, CREATOR_EMPOWERED))

    if ctx.action:
        collector.add_action(creator_type, ctx.action.type, ctx.action.isReaction)

    if ctx.powerDamage:
        total_dice = 0
        largest_die = 0
        for damage in ctx.powerDamage:
            if damage.type == "none" or damage.diceAmount <= 0 or damage.dieSize < 4:
                continue
            part_info = POWER_DAMAGE_PARTS.get(damage.type)
            if not part_info:
                continue
            collector.add(*part_info, calculate_power_damage_level(damage.diceAmount, damage.dieSize),
                          damage.applyDuration)
            total_dice += damage.diceAmount
            largest_die = max(largest_die, damage.dieSize)

        if total_dice > 1 and largest_die >= 4:
            splits = compute_splits(total_dice, largest_die)
            if splits > 0:
                apply_duration = any(damage.applyDuration for damage in ctx.powerDamage)
                collector.add(PART_IDS.POWER_SPLIT_DAMAGE_DICE, "Power Split Damage Dice", splits - 1, apply_duration)

    if ctx.techniqueDamage:
        dice = ctx.techniqueDamage.diceAmount
        size = ctx.techniqueDamage.dieSize
        if dice > 0 and size >= 4:
            collector.add(PART_IDS.ADDITIONAL_DAMAGE, "Additional Damage", calculate_technique_damage_level(dice, size))
            splits = compute_splits(dice, size)
            if splits > 0:
                collector.add(PART_IDS.SPLIT_DAMAGE_DICE, "Split Damage Dice", splits - 1)

    if ctx.range and ctx.range.steps > 0:
        collector.add(PART_IDS.POWER_RANGE, "Power Range", max(0, ctx.range.steps - 1), ctx.range.applyDuration)

    if ctx.area and ctx.area.type != "none":
        area_info = AREA_PARTS.get(ctx.area.type)
        if area_info:
            # area level is 1-based
            collector.add(*area_info, max(0, ctx.area.level - 1), ctx.area.applyDuration)

    if ctx.duration and ctx.duration.type != "instant":
        duration = ctx.duration
        if duration.focus:
            collector.add(PART_IDS.DURATION_FOCUS, "Focus for Duration", 0)
        if duration.noHarm:
            collector.add(PART_IDS.DURATION_NO_HARM, "No Harm or Adaptation for Duration", 0)
        if duration.endsOnActivation:
            collector.add(PART_IDS.DURATION_ENDS_ON_ACTIVATION, "Duration Ends On Activation", 0)
        if duration.sustain > 0:
            collector.add(PART_IDS.DURATION_SUSTAIN, "Sustain for Duration", max(0, duration.sustain - 1))

        duration_info = DURATION_PARTS.get(duration.type)
        if duration_info:
            if duration.type == "rounds":
                # one round is free
                if duration.value > 1:
                    collector.add(*duration_info, max(0, duration.value - 2), duration.applyDuration)
            elif duration.type == "permanent":
                collector.add(*duration_info, 0, duration.applyDuration)
            else:
                collector.add(*duration_info, _duration_option(duration.type, duration.value), duration.applyDuration)

    if ctx.weapon and ctx.weapon.tp >= 1:
        collector.add(PART_IDS.ADD_WEAPON_ATTACK, "Add Weapon Attack", ctx.weapon.tp - 1)

    return collector.parts


def build_power_mechanic_parts(parts_db: Optional[Iterable[Any]] = None, action_type_selection: str = "basic",
                               reaction: bool = False, damage_type: Optional[str] = None,
                               dice_amount: Any = 0, die_size: Any = 0, range_steps: Any = None,
                               area_type: Optional[str] = None, area_level: Any = 1,
                               duration_type: Optional[str] = None, duration_value: Any = 1,
                               **duration_flags: Any) -> List[Dict[str, Any]]:
    """Flat-argument wrapper around build_mechanic_parts for power creators."""
    context: Dict[str, Any] = {
        "creatorType": CREATOR_POWER,
        "action": {"type": action_type_selection or "basic", "isReaction": bool(reaction)},
    }
    if damage_type and damage_type != "none" and dice_amount and die_size:
        context["powerDamage"] = [{"type": damage_type, "diceAmount": dice_amount, "dieSize": die_size}]
    if range_steps is not None:
        context["range"] = {"steps": range_steps}
    if area_type and area_type != "none":
        context["area"] = {"type": area_type, "level": area_level or 1}
    if duration_type and duration_type != "instant":
        context["duration"] = {"type": duration_type, "value": duration_value or 1, **duration_flags}
    return build_mechanic_parts(context, parts_db)


def build_technique_mechanic_parts(parts_db: Optional[Iterable[Any]] = None, action_type_selection: str = "basic",
                                   reaction: bool = False, dice_amount: Any = 0, die_size: Any = 0,
                                   weapon_tp: Any = None) -> List[Dict[str, Any]]:
    context: Dict[str, Any] = {
        "creatorType": CREATOR_TECHNIQUE,
        "action": {"type": action_type_selection or "basic", "isReaction": bool(reaction)},
    }
    if dice_amount and die_size:
        context["techniqueDamage"] = {"diceAmount": dice_amount, "dieSize": die_size}
    if weapon_tp is not None:
        context["weapon"] = {"tp": weapon_tp}
    return build_mechanic_parts(context, parts_db)
