# models.py
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional, Union

Number = Union[int, float]


# --- Core-rules override ---
# Every field is optional: a missing value falls back to constants.py.

class ProgressionPlayerRules(BaseModel):
    baseAbilityPoints: Optional[int] = None
    abilityPointsEveryNLevels: Optional[int] = None
    abilityPointsPerIncrease: Optional[int] = None
    skillPointsPerLevel: Optional[int] = None
    baseHitEnergyPool: Optional[int] = None
    hitEnergyPerLevel: Optional[int] = None
    baseProficiency: Optional[int] = None
    proficiencyEveryNLevels: Optional[int] = None
    proficiencyPerIncrease: Optional[int] = None
    baseTrainingPoints: Optional[int] = None
    tpPerLevelMultiplier: Optional[int] = None
    baseHealth: Optional[int] = None


class ProgressionCreatureRules(BaseModel):
    baseAbilityPoints: Optional[int] = None
    skillPointsPerLevel: Optional[int] = None
    baseHitEnergyPool: Optional[int] = None
    hitEnergyPerLevel: Optional[int] = None
    baseTrainingPoints: Optional[int] = None
    tpPerLevelMultiplier: Optional[int] = None
    baseFeatPoints: Optional[float] = None
    featPointsPerLevel: Optional[float] = None
    baseCurrency: Optional[int] = None
    currencyGrowthRate: Optional[float] = None


class AbilityRules(BaseModel):
    min: Optional[int] = None
    maxStarting: Optional[int] = None
    maxAbsoluteCharacter: Optional[int] = None
    costIncreaseThreshold: Optional[int] = None
    normalCost: Optional[int] = None
    increasedCost: Optional[int] = None


class ArchetypeConfigRules(BaseModel):
    featLimit: Optional[int] = None
    armamentMax: Optional[int] = None
    innateEnergy: Optional[int] = None
    proficiency: Optional[Dict[str, int]] = None


class ArchetypeRules(BaseModel):
    configs: Optional[Dict[str, ArchetypeConfigRules]] = None
    powerInnateThresholdBase: Optional[int] = None
    powerInnatePoolsBase: Optional[int] = None
    martialBonusFeatsBase: Optional[int] = None
    poweredMartialMilestoneStartLevel: Optional[int] = None
    poweredMartialMilestoneInterval: Optional[int] = None


class ArmamentProficiencyEntry(BaseModel):
    martialProf: int
    armamentMax: int


class ArmamentProficiencyRules(BaseModel):
    table: Optional[List[ArmamentProficiencyEntry]] = None


class CombatRules(BaseModel):
    baseSpeed: Optional[int] = None
    baseEvasion: Optional[int] = None
    baseDefense: Optional[int] = None


class SkillsAndDefensesRules(BaseModel):
    maxSkillValue: Optional[int] = None
    baseSkillPastCapCost: Optional[int] = None
    subSkillPastCapCost: Optional[int] = None
    defenseIncreaseCost: Optional[int] = None
    gainProficiencyCost: Optional[int] = None


class CoreRules(BaseModel):
    """
    Game-rules override record, loaded from core_rules.json or posted by a client.

    Validated here, then handed to formulas as a plain dict via
    `model_dump(exclude_none=True)`.
    """
    PROGRESSION_PLAYER: Optional[ProgressionPlayerRules] = None
    PROGRESSION_CREATURE: Optional[ProgressionCreatureRules] = None
    ABILITY: Optional[AbilityRules] = None
    ARCHETYPE: Optional[ArchetypeRules] = None
    ARMAMENT_PROFICIENCY: Optional[ArmamentProficiencyRules] = None
    COMBAT: Optional[CombatRules] = None
    SKILLS_AND_DEFENSES: Optional[SkillsAndDefensesRules] = None

    def as_rules(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# --- Records ---

class DerivedStats(BaseModel):
    """Snapshot returned by calculate_all_stats."""
    maxHealth: Number
    maxEnergy: Number
    terminal: Number
    speed: Number
    evasion: Number
    armor: Number = 0
    defenseBonuses: Dict[str, Number] = Field(default_factory=dict)
    defenseScores: Dict[str, Number] = Field(default_factory=dict)


class ArchetypeProgression(BaseModel):
    archetypeType: str = Field(..., description="power, martial, mixed or none")
    innateThreshold: int = 0
    innatePools: int = 0
    innateEnergy: int = 0
    bonusArchetypeFeats: int = 0
    armamentProficiency: int = 0
    milestoneLevels: List[int] = Field(default_factory=list)
    unresolvedMilestones: List[int] = Field(default_factory=list)


class PlayerProgression(BaseModel):
    level: Number
    abilityPoints: Number
    skillPoints: Number
    healthEnergyPool: Number
    trainingPoints: Number
    proficiency: Number
    maxArchetypeFeats: Number
    maxCharacterFeats: Number


class CreatureProgression(BaseModel):
    level: Number
    abilityPoints: Number
    skillPoints: Number
    healthEnergyPool: Number
    trainingPoints: Number
    proficiency: Number
    featPoints: Number
    currency: Number


class LevelDifference(BaseModel):
    abilityPoints: Number
    skillPoints: Number
    healthEnergyPool: Number
    trainingPoints: Number
    proficiency: Number


class LevelMilestones(BaseModel):
    level: int
    isAbilityPointLevel: bool
    isProficiencyPointLevel: bool
    isArchetypeMilestone: bool


# --- Requests ---

class ProgressionRequest(BaseModel):
    level: float = 1
    martialProf: int = 0
    powerProf: int = 0
    choices: Dict[str, str] = Field(default_factory=dict, description="Milestone level -> 'innate' or 'feat'")
    rules: Optional[CoreRules] = None


class DerivedStatsRequest(BaseModel):
    character: Dict[str, Any] = Field(default_factory=dict)
    rules: Optional[CoreRules] = None
