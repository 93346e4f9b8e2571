# save_cleaning.py
"""
Reduces an in-memory character to the fields that are persisted.

Everything not on the allow-list is computed on load, so enriched display
fields (costs, damage strings, library copies) never reach storage.
"""
import logging
from typing import Any, Dict, List, Optional

from ...shared import UNSET, as_dict

logger = logging.getLogger("realms.character.save_cleaning")

SAVEABLE_FIELDS = (
    # identity
    "name", "species", "gender", "portrait", "xp", "level",
    # core stats (user-set values only)
    "abilities", "defenseSkills", "baseAbilities", "ancestryAbilities",
    "health", "energy", "healthPoints", "energyPoints", "innateEnergy",
    "speedBase", "evasionBase",
    "skills",
    # archetype / proficiency
    "archetype", "archetypeName", "archetypeAbility",
    "mart_prof", "pow_prof", "mart_abil", "pow_abil", "archetypeChoices",
    # references, names only
    "feats", "archetypeFeats", "techniques", "powers", "traits",
    "traitUses",
    # inventory, names and equipped/quantity only
    "equipment", "currency",
    # notes
    "notes", "backstory", "appearance", "archetypeDesc", "allies", "organizations",
    "visibility",
    "ancestry", "ancestryId", "ancestryTraits",
    "conditions",
    "createdAt", "updatedAt",
)


def remove_undefined_values(value: Any) -> Any:
    """Recursively drops UNSET values from dicts and lists; None is kept."""
    if isinstance(value, dict):
        return {key: remove_undefined_values(item) for key, item in value.items() if item is not UNSET}
    if isinstance(value, (list, tuple)):
        return [remove_undefined_values(item) for item in value if item is not UNSET]
    if hasattr(value, "model_dump"):
        return remove_undefined_values(value.model_dump(exclude_unset=True))
    return value


def _has_name(entry: Any) -> bool:
    return isinstance(entry, dict) and "name" in entry


def _clean_list(entries: List[Any], cleaner) -> List[Any]:
    cleaned = [cleaner(entry) for entry in entries]
    # falsy results (unrecognized entries) are dropped
    return [entry for entry in cleaned if entry]


def _clean_skill(skill: Any) -> Optional[Dict[str, Any]]:
    if isinstance(skill, str):
        return {"name": skill, "skill_val": 0, "prof": False}
    if not _has_name(skill):
        return None
    skill_val = skill.get("skill_val")
    prof = skill.get("prof")
    cleaned = {
        "name": skill["name"],
        "skill_val": 0 if skill_val is None else skill_val,
        "prof": False if prof is None else prof,
    }
    if skill.get("id"):
        cleaned["id"] = skill["id"]
    if skill.get("ability"):
        cleaned["ability"] = skill["ability"]
    # baseSkillId 0 means "any base skill", so only absence is dropped
    if "baseSkillId" in skill:
        cleaned["baseSkillId"] = skill["baseSkillId"]
    if skill.get("selectedBaseSkillId"):
        cleaned["selectedBaseSkillId"] = skill["selectedBaseSkillId"]
    return cleaned


def _is_count(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _clean_feat(feat: Any) -> Optional[Dict[str, Any]]:
    if isinstance(feat, str):
        return {"name": feat}
    if not _has_name(feat):
        return None
    cleaned = {"name": feat["name"]}
    if feat.get("type"):
        cleaned["type"] = feat["type"]
    if _is_count(feat.get("currentUses")):
        cleaned["currentUses"] = feat["currentUses"]
    return cleaned


def _clean_archetype_feat(feat: Any) -> Optional[Dict[str, Any]]:
    if isinstance(feat, str):
        return {"name": feat}
    if not _has_name(feat):
        return None
    cleaned = {"name": feat["name"]}
    if feat.get("id"):
        cleaned["id"] = feat["id"]
    if _is_count(feat.get("currentUses")):
        cleaned["currentUses"] = feat["currentUses"]
    if _is_count(feat.get("maxUses")):
        cleaned["maxUses"] = feat["maxUses"]
    return cleaned


def _clean_power(power: Any) -> Optional[Dict[str, Any]]:
    if isinstance(power, str):
        return {"name": power, "innate": False}
    if not _has_name(power):
        return None
    return {"name": power["name"], "innate": bool(power.get("innate"))}


def _clean_name(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry
    if _has_name(entry):
        return entry["name"]
    return None


def _clean_armament(entry: Any) -> Optional[Dict[str, Any]]:
    if isinstance(entry, str):
        return {"name": entry}
    if not _has_name(entry):
        return None
    cleaned = {"name": entry["name"]}
    if entry.get("equipped"):
        cleaned["equipped"] = True
    return cleaned


def _clean_item(entry: Any) -> Optional[Dict[str, Any]]:
    if isinstance(entry, str):
        return {"name": entry}
    if not _has_name(entry):
        return None
    cleaned = {"name": entry["name"]}
    quantity = entry.get("quantity")
    if quantity and quantity != 1:
        cleaned["quantity"] = quantity
    return cleaned


def _clean_equipment(equipment: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = dict(equipment)
    if isinstance(cleaned.get("weapons"), list):
        cleaned["weapons"] = _clean_list(cleaned["weapons"], _clean_armament)
    if isinstance(cleaned.get("armor"), list):
        cleaned["armor"] = _clean_list(cleaned["armor"], _clean_armament)
    if isinstance(cleaned.get("items"), list):
        cleaned["items"] = _clean_list(cleaned["items"], _clean_item)
    return cleaned


def clean_for_save(data: Any) -> Dict[str, Any]:
    """
    Returns the minimal persisted form of a character.

    Only allow-listed fields are copied; reference lists are reduced to bare
    names (plus instance flags), and a final pass drops undefined values
    anywhere in the result.

    Args:
        data: Character record (dict or pydantic model; unset model fields
            count as undefined).

    Returns:
        Dict: The save-ready record.
    """
    record = remove_undefined_values(as_dict(data))
    cleaned: Dict[str, Any] = {}
    for field in SAVEABLE_FIELDS:
        if field in record:
            cleaned[field] = record[field]

    if isinstance(cleaned.get("skills"), list):
        cleaned["skills"] = _clean_list(cleaned["skills"], _clean_skill)
    if isinstance(cleaned.get("feats"), list):
        cleaned["feats"] = _clean_list(cleaned["feats"], _clean_feat)
    if isinstance(cleaned.get("archetypeFeats"), list):
        cleaned["archetypeFeats"] = _clean_list(cleaned["archetypeFeats"], _clean_archetype_feat)
    if isinstance(cleaned.get("powers"), list):
        cleaned["powers"] = _clean_list(cleaned["powers"], _clean_power)
    if isinstance(cleaned.get("techniques"), list):
        cleaned["techniques"] = _clean_list(cleaned["techniques"], _clean_name)
    if isinstance(cleaned.get("traits"), list):
        cleaned["traits"] = _clean_list(cleaned["traits"], _clean_name)
    if isinstance(cleaned.get("equipment"), dict):
        cleaned["equipment"] = _clean_equipment(cleaned["equipment"])

    dropped = [key for key in record if key not in cleaned]
    if dropped:
        logger.debug(f"clean_for_save dropped {len(dropped)} computed/unknown fields")
    return remove_undefined_values(cleaned)
