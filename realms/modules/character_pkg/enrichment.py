# enrichment.py
"""
Rebuilds display records from a character's sparse references.

A saved character stores powers, techniques and equipment as bare
names/ids. Each reference is resolved against the owner's library (id,
then case-insensitive name); equipment may also fall back to the codex.
Anything unresolved becomes a placeholder flagged `notInLibrary`, so the
output always has exactly one entry per input reference, in input order.
"""
import logging
from typing import Any, Dict, List, Optional

from ...shared import as_dict, get_field
from ..library_pkg.ids import IdRef, NameRef, find_by_refs, id_key
from ..library_pkg.power_calc import derive_power_display
from ..library_pkg.technique_calc import derive_technique_display

logger = logging.getLogger("realms.character.enrichment")

ITEM_TYPES = ("weapon", "armor", "equipment")


def find_in_library(library: Optional[List[Any]], reference: Any) -> Any:
    """
    Library lookup for a character reference.

    A string matches either a name (case-insensitive) or an id; a record is
    looked up by id first, then by name.
    """
    if not library or reference is None:
        return None
    if isinstance(reference, str):
        return find_by_refs(library, [NameRef(value=reference), IdRef(value=reference)], ignore_case=True)

    refs = []
    ref_id = id_key(get_field(reference, "id"))
    if ref_id is not None:
        refs.append(IdRef(value=ref_id))
    name = get_field(reference, "name")
    if name:
        refs.append(NameRef(value=str(name)))
    return find_by_refs(library, refs, ignore_case=True)


def _reference_name(reference: Any) -> str:
    if isinstance(reference, str):
        return reference
    name = get_field(reference, "name")
    if name:
        return str(name)
    return str(get_field(reference, "id") or "")


def _reference_id(reference: Any, name: str) -> str:
    if isinstance(reference, str):
        return name
    ref_id = get_field(reference, "id")
    return str(ref_id) if ref_id else ""


def _saved_parts(library_item: Any) -> List[Dict[str, Any]]:
    return [
        {
            "id": str(get_field(part, "id") or ""),
            "name": get_field(part, "name") or "",
            "op_1_lvl": get_field(part, "op_1_lvl"),
            "op_2_lvl": get_field(part, "op_2_lvl"),
            "op_3_lvl": get_field(part, "op_3_lvl"),
        }
        for part in (get_field(library_item, "parts") or [])
    ]


def enrich_powers(character_powers: Optional[List[Any]], user_power_library: Optional[List[Any]],
                  power_parts_db: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
    """Resolves power references and computes their energy cost and display strings."""
    enriched = []
    for reference in character_powers or []:
        name = _reference_name(reference)
        innate = bool(get_field(reference, "innate", False)) if not isinstance(reference, str) else False
        library_item = find_in_library(user_power_library, reference)

        if library_item is None:
            logger.info(f"Power '{name}' not found in library")
            enriched.append({
                "id": _reference_id(reference, name),
                "name": name,
                "description": "Power not found in your library",
                "innate": innate,
                "notInLibrary": True,
            })
            continue

        display = derive_power_display(library_item, power_parts_db or [])
        enriched.append({
            "id": str(get_field(library_item, "id") or ""),
            "name": get_field(library_item, "name") or name,
            "description": get_field(library_item, "description") or "",
            "parts": _saved_parts(library_item),
            "innate": innate,
            "libraryItem": as_dict(library_item),
            "cost": display["energy"],
            "actionType": display["actionType"],
            "area": display["area"],
            "duration": display["duration"],
            "range": display["range"],
            "damage": display["damage"],
        })
    return enriched


def enrich_techniques(character_techniques: Optional[List[Any]], user_technique_library: Optional[List[Any]],
                      technique_parts_db: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
    """Resolves technique references and computes their energy cost and display strings."""
    enriched = []
    for reference in character_techniques or []:
        name = _reference_name(reference)
        library_item = find_in_library(user_technique_library, reference)

        if library_item is None:
            logger.info(f"Technique '{name}' not found in library")
            enriched.append({
                "id": _reference_id(reference, name),
                "name": name,
                "description": "Technique not found in your library",
                "notInLibrary": True,
            })
            continue

        # saved action types are not applied on the sheet
        doc = {
            "name": get_field(library_item, "name"),
            "description": get_field(library_item, "description"),
            "parts": get_field(library_item, "parts") or [],
            "weapon": get_field(library_item, "weapon"),
            "damage": get_field(library_item, "damage"),
        }
        display = derive_technique_display(doc, technique_parts_db or [])
        enriched.append({
            "id": str(get_field(library_item, "id") or ""),
            "name": get_field(library_item, "name") or name,
            "description": get_field(library_item, "description") or "",
            "parts": _saved_parts(library_item),
            "libraryItem": as_dict(library_item),
            "cost": display["energy"],
            "actionType": display["actionType"],
            "weaponName": display["weaponName"],
            "damageStr": display["damageStr"],
        })
    return enriched


def _property_names(properties: Any) -> List[str]:
    names = []
    for prop in properties or []:
        name = prop if isinstance(prop, str) else get_field(prop, "name")
        if isinstance(name, str):
            names.append(name)
    return names


def enrich_items(character_items: Optional[List[Dict[str, Any]]], user_item_library: Optional[List[Any]],
                 item_type: str, codex_equipment: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
    """
    Resolves equipment references: the owner's library first, then the
    codex (display fields only, no cost derivation).
    """
    enriched = []
    for reference in character_items or []:
        name = _reference_name(reference)
        equipped = bool(get_field(reference, "equipped", False)) if not isinstance(reference, str) else False

        library_item = find_in_library(user_item_library, reference)
        if library_item is not None:
            enriched.append({
                "id": str(get_field(library_item, "id") or ""),
                "name": get_field(library_item, "name") or name,
                "description": get_field(library_item, "description") or "",
                "type": get_field(library_item, "type") or item_type,
                "equipped": equipped,
                "damage": get_field(library_item, "damage"),
                "armorValue": get_field(library_item, "armorValue"),
                "properties": _property_names(get_field(library_item, "properties")),
                "critRange": get_field(library_item, "criticalRangeIncrease"),
                "agilityReduction": get_field(library_item, "agilityReduction"),
                "abilityRequirement": get_field(library_item, "abilityRequirement"),
                "libraryItem": as_dict(library_item),
            })
            continue

        codex_item = find_in_library(codex_equipment, name) if codex_equipment else None
        if codex_item is not None:
            enriched.append({
                "id": str(get_field(codex_item, "id") or ""),
                "name": get_field(codex_item, "name") or name,
                "description": get_field(codex_item, "description") or "",
                "type": get_field(codex_item, "type") or item_type,
                "equipped": equipped,
                "damage": get_field(codex_item, "damage"),
                "armorValue": get_field(codex_item, "armor_value"),
                "properties": _property_names(get_field(codex_item, "properties")),
            })
            continue

        logger.info(f"Item '{name}' ({item_type}) not found in library or codex")
        enriched.append({
            "id": str(name),
            "name": name,
            "description": "Item not found in your library",
            "type": item_type,
            "equipped": equipped,
            "notInLibrary": True,
        })
    return enriched


def to_equipment_array(items: Any) -> List[Dict[str, Any]]:
    """
    Normalizes a saved equipment slot to `[{name, equipped}]`.

    Legacy saves may hold a single object (e.g. one armor) instead of a list.
    Entries without a name are dropped.
    """
    if not items:
        return []
    if isinstance(items, list):
        normalized = []
        for item in items:
            if isinstance(item, str):
                normalized.append({"name": item, "equipped": False})
            elif item is not None:
                normalized.append({"name": get_field(item, "name") or "", "equipped": bool(get_field(item, "equipped", False))})
        return [entry for entry in normalized if entry["name"]]
    name = get_field(items, "name")
    if name:
        return [{"name": name, "equipped": bool(get_field(items, "equipped", False))}]
    return []


def _split_by_type(entries: Optional[List[Any]]) -> Dict[str, List[Any]]:
    split = {item_type: [] for item_type in ITEM_TYPES}
    for entry in entries or []:
        entry_type = get_field(entry, "type")
        if entry_type in split:
            split[entry_type].append(entry)
    return split


def enrich_character_data(character: Any, user_powers: Optional[List[Any]], user_techniques: Optional[List[Any]],
                          user_items: Optional[List[Any]], codex_equipment: Optional[List[Any]] = None,
                          power_parts_db: Optional[List[Any]] = None,
                          technique_parts_db: Optional[List[Any]] = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    Enriches every reference list on a character.

    Args:
        character: Saved character record (dict or model).
        user_powers, user_techniques, user_items: The owner's library.
        codex_equipment: Optional codex fallback for equipment.
        power_parts_db, technique_parts_db: Part definitions for cost derivation.

    Returns:
        Dict: powers, techniques, weapons, armor, equipment.
    """
    record = as_dict(character)
    equipment = record.get("equipment") or {}
    library = _split_by_type(user_items)
    codex = _split_by_type(codex_equipment) if codex_equipment is not None else {t: None for t in ITEM_TYPES}

    return {
        "powers": enrich_powers(record.get("powers"), user_powers, power_parts_db),
        "techniques": enrich_techniques(record.get("techniques"), user_techniques, technique_parts_db),
        "weapons": enrich_items(to_equipment_array(get_field(equipment, "weapons")),
                                library["weapon"], "weapon", codex["weapon"]),
        "armor": enrich_items(to_equipment_array(get_field(equipment, "armor")),
                              library["armor"], "armor", codex["armor"]),
        "equipment": enrich_items(to_equipment_array(get_field(equipment, "items")),
                                  library["equipment"], "equipment", codex["equipment"]),
    }
