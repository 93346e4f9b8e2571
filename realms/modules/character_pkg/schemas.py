# schemas.py
import copy
import logging
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Optional, Union

from ...shared import as_dict, to_number
from ..rules_pkg.calculations import resolve_defense_skills
from ..rules_pkg.models import CoreRules

logger = logging.getLogger("realms.character.schemas")

Number = Union[int, float]


# --- Saved character ---

class Equipment(BaseModel):
    model_config = ConfigDict(extra="allow")

    weapons: Optional[Union[List[Any], Dict[str, Any]]] = None
    armor: Optional[Union[List[Any], Dict[str, Any]]] = None
    items: Optional[Union[List[Any], Dict[str, Any]]] = None


class ResourceState(BaseModel):
    model_config = ConfigDict(extra="allow")

    current: Optional[Number] = None
    max: Optional[Number] = None


class Character(BaseModel):
    """
    A character (or creature) record as the client sends it.

    Every field is optional and unknown keys are kept: computed display
    fields ride along until the save cleaner strips them. Use
    `as_dict(character)` to get only the fields that were actually sent.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    level: Optional[Number] = None
    abilities: Optional[Dict[str, Any]] = None
    defenseSkills: Optional[Dict[str, Any]] = None
    healthPoints: Optional[Number] = None
    energyPoints: Optional[Number] = None
    health: Optional[ResourceState] = None
    energy: Optional[ResourceState] = None
    speedBase: Optional[Number] = None
    evasionBase: Optional[Number] = None
    archetype: Optional[Union[str, Dict[str, Any]]] = None
    mart_prof: Optional[Number] = None
    pow_prof: Optional[Number] = None
    mart_abil: Optional[str] = None
    pow_abil: Optional[str] = None
    archetypeChoices: Optional[Dict[str, Any]] = None
    skills: Optional[List[Any]] = None
    feats: Optional[List[Any]] = None
    archetypeFeats: Optional[List[Any]] = None
    powers: Optional[List[Any]] = None
    techniques: Optional[List[Any]] = None
    traits: Optional[List[Any]] = None
    equipment: Optional[Equipment] = None
    currency: Optional[Number] = None


# --- Enriched display records ---

class EnrichedPower(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    description: str = ""
    innate: bool = False
    cost: Optional[int] = None
    actionType: Optional[str] = None
    area: Optional[str] = None
    duration: Optional[str] = None
    range: Optional[str] = None
    damage: Optional[str] = None
    parts: List[Dict[str, Any]] = Field(default_factory=list)
    notInLibrary: bool = False


class EnrichedTechnique(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    description: str = ""
    cost: Optional[int] = None
    actionType: Optional[str] = None
    weaponName: Optional[str] = None
    damageStr: Optional[str] = None
    parts: List[Dict[str, Any]] = Field(default_factory=list)
    notInLibrary: bool = False


class EnrichedItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    description: str = ""
    type: str = "equipment"
    equipped: bool = False
    damage: Optional[Any] = None
    armorValue: Optional[Number] = None
    properties: List[str] = Field(default_factory=list)
    notInLibrary: bool = False


class EnrichedCharacterData(BaseModel):
    powers: List[EnrichedPower] = Field(default_factory=list)
    techniques: List[EnrichedTechnique] = Field(default_factory=list)
    weapons: List[EnrichedItem] = Field(default_factory=list)
    armor: List[EnrichedItem] = Field(default_factory=list)
    equipment: List[EnrichedItem] = Field(default_factory=list)


# --- Requests ---

class EnrichRequest(BaseModel):
    character: Character
    userPowers: List[Dict[str, Any]] = Field(default_factory=list)
    userTechniques: List[Dict[str, Any]] = Field(default_factory=list)
    userItems: List[Dict[str, Any]] = Field(default_factory=list)
    # None falls back to the codex tables
    codexEquipment: Optional[List[Dict[str, Any]]] = None
    powerPartsDb: Optional[List[Dict[str, Any]]] = None
    techniquePartsDb: Optional[List[Dict[str, Any]]] = None


class CharacterRequest(BaseModel):
    character: Character
    rules: Optional[CoreRules] = None


# --- Load-boundary normalization ---

def _upgrade_skill(skill: Any) -> Any:
    if isinstance(skill, str):
        return {"name": skill, "skill_val": 0, "prof": False}
    return skill


def _fold_current(record: Dict[str, Any], legacy_key: str, field: str) -> None:
    if legacy_key not in record:
        return
    legacy_value = record.pop(legacy_key)
    if legacy_value is None:
        return
    resource = record.get(field)
    resource = dict(resource) if isinstance(resource, dict) else {}
    # an explicit current value wins over the legacy one
    if resource.get("current") is None:
        resource["current"] = to_number(legacy_value)
    record[field] = resource


def normalize_character(raw: Any) -> Dict[str, Any]:
    """
    One-time migration applied when a saved record is loaded.

    - `defenseVals` is merged into `defenseSkills` (defaults, then
      `defenseSkills`, then `defenseVals`).
    - `currentHealth`/`currentEnergy` move into `health.current`/`energy.current`.
    - string skills become `{name, skill_val: 0, prof: False}`.

    The legacy keys are dropped. The input is not modified.
    """
    record = copy.deepcopy(as_dict(raw))
    if "defenseSkills" in record or "defenseVals" in record:
        record["defenseSkills"] = resolve_defense_skills(record)
    record.pop("defenseVals", None)

    _fold_current(record, "currentHealth", "health")
    _fold_current(record, "currentEnergy", "energy")

    if isinstance(record.get("skills"), list):
        record["skills"] = [_upgrade_skill(skill) for skill in record["skills"]]

    logger.debug(f"Normalized character {record.get('name')!r}")
    return record
