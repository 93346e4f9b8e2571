# realms/modules/rules.py
"""
Rules facade.

Re-exports the formula library and calculators for in-process callers and
serves them over HTTP. Codex tables come from the app's codex cache
unless a request carries its own.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from .rules_pkg import constants, core, archetype, calculations, progression, skill_allocation
from .rules_pkg.data_loader import CodexCache
from .rules_pkg.models import (
    CoreRules,
    DerivedStats,
    DerivedStatsRequest,
    ProgressionRequest,
    ArchetypeProgression,
    PlayerProgression,
    CreatureProgression,
    LevelDifference,
    LevelMilestones,
)
from .rules_pkg.calculations import calculate_all_stats, compute_max_health_energy
from .library_pkg import power_calc, technique_calc, item_calc
from .library_pkg.mechanic_builder import build_mechanic_parts, CREATOR_POWER, CREATOR_TECHNIQUE
from .library_pkg.models import (
    PartCostRequest,
    ItemCostRequest,
    MechanicContext,
    PowerCostResult,
    TechniqueCostResult,
    ItemDisplay,
)

logger = logging.getLogger("realms.rules")

router = APIRouter(prefix="/rules", tags=["Rules"])


# --- Dependencies ---

def get_codex_cache(request: Request) -> CodexCache:
    """The codex cache owned by the serving app."""
    cache = getattr(request.app.state, "codex_cache", None)
    if cache is None:
        cache = CodexCache()
        request.app.state.codex_cache = cache
    return cache


# Data accessors

def get_core_rules(cache: Optional[CodexCache], override: Optional[CoreRules] = None) -> Dict[str, Any]:
    """A request's override wins; otherwise the codex core_rules.json (often empty)."""
    if override is not None:
        return override.as_rules()
    if cache is None:
        return {}
    return cache.table("core_rules")


def get_power_parts(cache: CodexCache) -> List[Dict[str, Any]]:
    return cache.table("power_parts")


def get_technique_parts(cache: CodexCache) -> List[Dict[str, Any]]:
    return cache.table("technique_parts")


def get_item_properties(cache: CodexCache) -> List[Dict[str, Any]]:
    return cache.table("item_properties")


def get_codex_equipment(cache: CodexCache) -> List[Dict[str, Any]]:
    return cache.table("equipment")


def reload_codex(cache: CodexCache) -> Dict[str, Any]:
    cache.invalidate()
    codex = cache.get()
    return {name: len(value) for name, value in codex.items()}


# Logic wrappers

def _dump_all(models: Optional[List[Any]]) -> Optional[List[Dict[str, Any]]]:
    if models is None:
        return None
    return [model.model_dump() for model in models]


def _mechanic_parts(context: Optional[MechanicContext], creator_type: str,
                    parts_db: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if context is None:
        return []
    if "creatorType" not in context.model_fields_set:
        context = context.model_copy(update={"creatorType": creator_type})
    return build_mechanic_parts(context, parts_db)


def price_power(request: PartCostRequest, cache: Optional[CodexCache] = None) -> Dict[str, Any]:
    parts_db = _dump_all(request.partsDb)
    if parts_db is None:
        parts_db = get_power_parts(cache) if cache is not None else []
    selected = [part.model_dump() for part in request.parts]
    mechanics = _mechanic_parts(request.mechanics, CREATOR_POWER, parts_db)
    payloads = selected + mechanics

    result = power_calc.calculate_power_costs(payloads, parts_db)
    result.update({
        "actionType": power_calc.compute_action_type(payloads, parts_db),
        "range": power_calc.derive_range(payloads, parts_db),
        "area": power_calc.derive_area(payloads, parts_db),
        "duration": power_calc.derive_duration(payloads, parts_db),
        "mechanicParts": mechanics,
    })
    return result


def price_technique(request: PartCostRequest, cache: Optional[CodexCache] = None) -> Dict[str, Any]:
    parts_db = _dump_all(request.partsDb)
    if parts_db is None:
        parts_db = get_technique_parts(cache) if cache is not None else []
    selected = [part.model_dump() for part in request.parts]
    mechanics = _mechanic_parts(request.mechanics, CREATOR_TECHNIQUE, parts_db)
    payloads = selected + mechanics

    result = technique_calc.calculate_technique_costs(payloads, parts_db)
    result.update({
        "actionType": technique_calc.compute_action_type(payloads, parts_db),
        "mechanicParts": mechanics,
    })
    return result


def price_item(request: ItemCostRequest, cache: Optional[CodexCache] = None) -> Dict[str, Any]:
    properties_db = _dump_all(request.propertiesDb)
    if properties_db is None:
        properties_db = get_item_properties(cache) if cache is not None else []
    item = request.model_dump(exclude={"propertiesDb"})
    return item_calc.derive_item_display(item, properties_db)


# --- Endpoints ---

@router.post("/derived-stats", response_model=DerivedStats)
def derived_stats_endpoint(request: DerivedStatsRequest, cache: CodexCache = Depends(get_codex_cache)):
    """All derived combat stats for a character or creature."""
    try:
        return calculate_all_stats(request.character, get_core_rules(cache, request.rules))
    except Exception as e:
        logger.exception(f"Derived stats failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/progression/{level}", response_model=Union[PlayerProgression, CreatureProgression])
def progression_endpoint(level: float,
                         entity: str = Query(constants.ENTITY_PLAYER),
                         ability: float = Query(0),
                         cache: CodexCache = Depends(get_codex_cache)):
    entity_kind = entity.upper()
    if entity_kind not in (constants.ENTITY_PLAYER, constants.ENTITY_CREATURE):
        raise HTTPException(status_code=404, detail=f"Unknown entity kind '{entity}'")
    rules = get_core_rules(cache)
    if entity_kind == constants.ENTITY_CREATURE:
        return CreatureProgression(**progression.get_creature_progression(level, ability, rules=rules))
    return PlayerProgression(**progression.get_player_progression(level, ability, rules))


@router.get("/level-difference", response_model=LevelDifference)
def level_difference_endpoint(from_level: float = Query(..., alias="from"),
                              to_level: float = Query(..., alias="to"),
                              entity: str = Query(constants.ENTITY_PLAYER),
                              ability: float = Query(0),
                              cache: CodexCache = Depends(get_codex_cache)):
    """Resources gained (or lost) between two levels."""
    return progression.get_level_difference(from_level, to_level, ability, entity, get_core_rules(cache))


@router.get("/milestones/{level}", response_model=LevelMilestones)
def milestones_endpoint(level: float, cache: CodexCache = Depends(get_codex_cache)):
    return progression.get_level_milestones(level, get_core_rules(cache))


@router.post("/archetype-progression", response_model=ArchetypeProgression)
def archetype_progression_endpoint(request: ProgressionRequest, cache: CodexCache = Depends(get_codex_cache)):
    return archetype.calculate_archetype_progression(
        request.level, request.martialProf, request.powerProf, request.choices,
        get_core_rules(cache, request.rules),
    )


@router.post("/power-costs", response_model=PowerCostResult)
def power_costs_endpoint(request: PartCostRequest, cache: CodexCache = Depends(get_codex_cache)):
    try:
        return price_power(request, cache)
    except Exception as e:
        logger.exception(f"Power costing failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/technique-costs", response_model=TechniqueCostResult)
def technique_costs_endpoint(request: PartCostRequest, cache: CodexCache = Depends(get_codex_cache)):
    try:
        return price_technique(request, cache)
    except Exception as e:
        logger.exception(f"Technique costing failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/item-costs", response_model=ItemDisplay)
def item_costs_endpoint(request: ItemCostRequest, cache: CodexCache = Depends(get_codex_cache)):
    try:
        return price_item(request, cache)
    except Exception as e:
        logger.exception(f"Item costing failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/reload-codex")
def reload_codex_endpoint(cache: CodexCache = Depends(get_codex_cache)):
    """Drops cached codex tables and loads them again."""
    counts = reload_codex(cache)
    logger.info(f"Codex reloaded: {counts}")
    return {"status": "reloaded", "tables": counts}
