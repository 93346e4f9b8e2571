# ids.py
"""
Stable ids for codex parts and item properties, and the one lookup every
calculator uses to resolve a reference against a table.

A reference is either an id or a name. Saved records often carry both
(id first, name as a fallback for records saved before ids existed), so
`refs_for` turns a loose record into an ordered list of typed refs and
`find_by_refs` returns the first hit.
"""
import logging
from typing import Annotated, Any, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ...shared import get_field, UNSET

logger = logging.getLogger("realms.library.ids")


class PART_IDS:
    # damage
    TRUE_DAMAGE = 1
    SPLIT_DAMAGE_DICE = 5
    ADDITIONAL_DAMAGE = 6

    # technique actions
    REACTION = 2
    LONG_ACTION = 3
    QUICK_OR_FREE_ACTION = 4

    # power actions
    POWER_LONG_ACTION = 81
    POWER_REACTION = 82
    POWER_QUICK_OR_FREE_ACTION = 83

    ADD_WEAPON_ATTACK = 7

    # areas of effect
    LINE_OF_EFFECT = 88
    CONE_OF_EFFECT = 89
    CYLINDER_OF_EFFECT = 231
    SPHERE_OF_EFFECT = 232
    TRAIL_OF_EFFECT = 233

    POWER_RANGE = 292

    # power damage types
    MAGIC_DAMAGE = 294
    LIGHT_DAMAGE = 295
    PHYSICAL_DAMAGE = 296
    ELEMENTAL_DAMAGE = 297
    POISON_OR_NECROTIC_DAMAGE = 298
    SONIC_DAMAGE = 299
    SPIRITUAL_DAMAGE = 300
    PSYCHIC_DAMAGE = 301

    # durations
    DURATION_DAYS = 375
    DURATION_HOUR = 376
    DURATION_ROUND = 377
    DURATION_MINUTE = 378
    DURATION_PERMANENT = 306

    # duration modifiers
    DURATION_ENDS_ON_ACTIVATION = 302
    DURATION_NO_HARM = 303
    DURATION_FOCUS = 304
    DURATION_SUSTAIN = 305

    # no fixed id in the codex; resolved by name
    POWER_SPLIT_DAMAGE_DICE = None


class PROPERTY_IDS:
    DAMAGE_REDUCTION = 1
    ARMOR_STRENGTH_REQUIREMENT = 2
    ARMOR_AGILITY_REQUIREMENT = 3
    ARMOR_VITALITY_REQUIREMENT = 4
    AGILITY_REDUCTION = 5
    WEAPON_STRENGTH_REQUIREMENT = 6
    WEAPON_AGILITY_REQUIREMENT = 7
    WEAPON_VITALITY_REQUIREMENT = 8
    WEAPON_ACUITY_REQUIREMENT = 9
    WEAPON_INTELLIGENCE_REQUIREMENT = 10
    WEAPON_CHARISMA_REQUIREMENT = 11
    SPLIT_DAMAGE_DICE = 12
    RANGE = 13
    TWO_HANDED = 14
    SHIELD_BASE = 15
    ARMOR_BASE = 16
    WEAPON_DAMAGE = 17


# Built-in properties every armament carries; not user-selectable
GENERAL_PROPERTY_IDS = frozenset(range(1, 18))

GENERAL_PROPERTY_NAMES = frozenset([
    "Shield Base", "Armor Base", "Range", "Two-Handed",
    "Split Damage Dice", "Damage Reduction", "Weapon Damage",
    "Agility Reduction",
    "Weapon Strength Requirement", "Weapon Agility Requirement", "Weapon Vitality Requirement",
    "Weapon Acuity Requirement", "Weapon Intelligence Requirement", "Weapon Charisma Requirement",
    "Armor Strength Requirement", "Armor Agility Requirement", "Armor Vitality Requirement",
])


# --- Typed references ---

class IdRef(BaseModel):
    kind: Literal["id"] = "id"
    value: Union[int, str]


class NameRef(BaseModel):
    kind: Literal["name"] = "name"
    value: str


Ref = Annotated[Union[IdRef, NameRef], Field(discriminator="kind")]


def id_key(value: Any) -> Optional[Union[int, str]]:
    """Canonical form of an id: numeric ids (even as strings) compare as int."""
    if value is None or value is UNSET or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else str(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return text


def refs_for(raw: Any) -> List[Union[IdRef, NameRef]]:
    """
    Ordered lookup refs for a loose reference.

    - int: id only
    - str: id when numeric, then the name
    - record/model: its `id` (when present), then its `name`
    """
    if raw is None or raw is UNSET or isinstance(raw, bool):
        return []
    if isinstance(raw, (IdRef, NameRef)):
        return [raw]
    if isinstance(raw, (int, float)):
        key = id_key(raw)
        return [IdRef(value=key)] if key is not None else []
    if isinstance(raw, str):
        refs: List[Union[IdRef, NameRef]] = []
        key = id_key(raw)
        if isinstance(key, int):
            refs.append(IdRef(value=key))
        if raw:
            refs.append(NameRef(value=raw))
        return refs

    refs = []
    key = id_key(get_field(raw, "id"))
    if key is not None:
        refs.append(IdRef(value=key))
    name = get_field(raw, "name")
    if isinstance(name, str) and name:
        refs.append(NameRef(value=name))
    return refs


def find_by_ref(table: Optional[Iterable[Any]], ref: Union[IdRef, NameRef], ignore_case: bool = False) -> Any:
    """Returns the first entry matching `ref`, or None."""
    if not table:
        return None
    if isinstance(ref, IdRef):
        wanted = id_key(ref.value)
        for entry in table:
            if wanted is not None and id_key(get_field(entry, "id")) == wanted:
                return entry
        return None

    wanted_name = ref.value.lower() if ignore_case else ref.value
    for entry in table:
        name = get_field(entry, "name")
        if name is None:
            continue
        name = str(name)
        if (name.lower() if ignore_case else name) == wanted_name:
            return entry
    return None


def find_by_refs(table: Optional[Iterable[Any]], refs: Iterable[Union[IdRef, NameRef]],
                 ignore_case: bool = False) -> Any:
    entries = list(table or [])
    for ref in refs:
        found = find_by_ref(entries, ref, ignore_case)
        if found is not None:
            return found
    return None


def find_by_id_or_name(table: Optional[Iterable[Any]], ref: Any) -> Any:
    """Id first, then exact name."""
    if isinstance(ref, str):
        # a bare string here is always a name
        return find_by_refs(table, [NameRef(value=ref)]) if ref else None
    return find_by_refs(table, refs_for(ref))


def find_by_id_or_name_value(table: Optional[Iterable[Any]], id_or_name: Any) -> Any:
    """A number is an id; a numeric string is tried as an id, then as a name."""
    return find_by_refs(table, refs_for(id_or_name))


def part_lookup(table: Optional[Iterable[Any]], part_id: Optional[int], name: str) -> Any:
    """Fixed-id lookup with a name fallback for codex rows that predate ids."""
    refs: List[Union[IdRef, NameRef]] = []
    if part_id is not None:
        refs.append(IdRef(value=part_id))
    refs.append(NameRef(value=name))
    return find_by_refs(table, refs)


def normalize_ref(table: Optional[Iterable[Any]], ref: Any) -> Any:
    """Fills in the canonical id and name of a resolvable reference."""
    if not ref or not isinstance(ref, dict):
        return ref
    found = find_by_id_or_name(table, ref)
    found_id = get_field(found, "id") if found is not None else None
    found_name = get_field(found, "name") if found is not None else None
    if found_id is not None and found_name:
        return {**ref, "id": found_id, "name": found_name}
    return ref


def normalize_refs(items: Any, table: Optional[Iterable[Any]]) -> List[Any]:
    if not isinstance(items, list):
        return []
    return [normalize_ref(table, item) for item in items]


def matches_part(payload: Any, part_id: Optional[int], name: str) -> bool:
    """Whether a selected-part payload points at `part_id` (or carries `name`)."""
    nested = get_field(payload, "part")
    pid = get_field(nested, "id") if nested else None
    if pid is None:
        pid = get_field(payload, "id")
    if part_id is not None and id_key(pid) == part_id:
        return True
    pname = (get_field(nested, "name") if nested else None) or get_field(payload, "name")
    return pname == name
