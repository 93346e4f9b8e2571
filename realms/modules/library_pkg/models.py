# models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Optional, Union

Number = Union[int, float]


# --- Codex definitions ---

class PartDefinition(BaseModel):
    """A power or technique part as stored in the codex."""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: str = ""
    description: str = ""
    category: Optional[str] = None
    type: Optional[str] = None
    base_en: Number = 0
    base_tp: Number = 0
    op_1_desc: Optional[str] = None
    op_1_en: Number = 0
    op_1_tp: Number = 0
    op_2_desc: Optional[str] = None
    op_2_en: Number = 0
    op_2_tp: Number = 0
    op_3_desc: Optional[str] = None
    op_3_en: Number = 0
    op_3_tp: Number = 0
    percentage: bool = False
    duration: bool = False
    mechanic: bool = False


class ItemProperty(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: str = ""
    description: str = ""
    type: Optional[str] = None
    base_ip: Number = 0
    base_tp: Number = 0
    base_c: Number = 0
    op_1_desc: Optional[str] = None
    op_1_ip: Number = 0
    op_1_tp: Number = 0
    op_1_c: Number = 0


# --- Selections ---

class PartSelection(BaseModel):
    """A part picked in a creator, with its three option levels."""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    op_1_lvl: Number = 0
    op_2_lvl: Number = 0
    op_3_lvl: Number = 0
    applyDuration: bool = False


class PropertySelection(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    op_1_lvl: Number = 0


class DamageEntry(BaseModel):
    amount: Optional[Union[int, str]] = None
    size: Optional[Union[int, str]] = None
    type: Optional[str] = None
    applyDuration: bool = False


# --- Mechanic builder context ---

class ActionConfig(BaseModel):
    type: str = "basic"
    isReaction: bool = False


class PowerDamageConfig(BaseModel):
    type: str
    diceAmount: Number = 0
    dieSize: Number = 0
    applyDuration: bool = False


class TechniqueDamageConfig(BaseModel):
    diceAmount: Number = 0
    dieSize: Number = 0


class RangeConfig(BaseModel):
    steps: Number = 0
    applyDuration: bool = False


class AreaConfig(BaseModel):
    type: str = "none"
    level: Number = 1
    applyDuration: bool = False


class DurationConfig(BaseModel):
    type: str = "instant"
    value: Number = 1
    applyDuration: bool = False
    focus: bool = False
    noHarm: bool = False
    endsOnActivation: bool = False
    sustain: Number = 0


class WeaponConfig(BaseModel):
    tp: Number = 0


class MechanicContext(BaseModel):
    """UI selections that synthesize mechanic parts."""
    creatorType: str = "power"
    action: Optional[ActionConfig] = None
    powerDamage: List[PowerDamageConfig] = Field(default_factory=list)
    range: Optional[RangeConfig] = None
    area: Optional[AreaConfig] = None
    duration: Optional[DurationConfig] = None
    techniqueDamage: Optional[TechniqueDamageConfig] = None
    weapon: Optional[WeaponConfig] = None


# --- Requests ---

class PartCostRequest(BaseModel):
    parts: List[PartSelection] = Field(default_factory=list)
    mechanics: Optional[MechanicContext] = None
    # falls back to the codex table when omitted
    partsDb: Optional[List[PartDefinition]] = None


class ItemCostRequest(BaseModel):
    properties: List[PropertySelection] = Field(default_factory=list)
    damage: List[DamageEntry] = Field(default_factory=list)
    name: Optional[str] = None
    description: Optional[str] = None
    armamentType: Optional[str] = None
    propertiesDb: Optional[List[ItemProperty]] = None


# --- Results ---

class CostResult(BaseModel):
    totalEnergy: int
    totalTP: int
    tpSources: List[str] = Field(default_factory=list)
    energyRaw: Number = 0
    tpRaw: Number = 0


class TechniqueCostResult(CostResult):
    actionType: str = "Basic Action"
    mechanicParts: List[Dict[str, Any]] = Field(default_factory=list)


class PowerCostResult(TechniqueCostResult):
    range: str = ""
    area: str = ""
    duration: str = ""


class ItemCostResult(BaseModel):
    totalIP: Number = 0
    totalTP: Number = 0
    totalCurrency: Number = 0


class ProficiencyInfo(BaseModel):
    id: Union[int, str] = 0
    name: str = ""
    level: Number = 0
    baseTP: Number = 0
    optionTP: Number = 0
    totalTP: Number = 0
    description: str = ""


class ItemDisplay(ItemCostResult):
    """Priced armament as shown in the item creator."""
    name: str = ""
    armamentType: str = "Weapon"
    description: str = ""
    rarity: str
    currencyCost: int
    range: str = "Melee"
    damage: str = ""
    damageReduction: Number = 0
    proficiencies: List[ProficiencyInfo] = Field(default_factory=list)
