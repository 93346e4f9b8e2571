# realms/modules/character.py
"""
Adapter module for the character layers.

Exposes enrichment, save cleaning and derived stats as plain functions
for in-process callers, and over HTTP under /characters. Nothing here
persists anything: callers load and store records themselves.
"""
from typing import Any, Dict, Optional
import logging
from fastapi import APIRouter, Depends, HTTPException

from .character_pkg import schemas
from .character_pkg.schemas import normalize_character
from .character_pkg.enrichment import enrich_character_data
from .character_pkg.save_cleaning import clean_for_save
from .rules_pkg.calculations import calculate_all_stats
from .rules_pkg.data_loader import CodexCache
from .rules_pkg.models import CoreRules
from . import rules

logger = logging.getLogger("realms.character")

router = APIRouter(prefix="/characters", tags=["Characters"])


def load_character(raw: Any) -> Dict[str, Any]:
    """Normalizes a freshly loaded record (legacy keys folded into canonical ones)."""
    return normalize_character(raw)


def enrich_character(request: schemas.EnrichRequest, cache: Optional[CodexCache] = None) -> Dict[str, Any]:
    """Enriches a character; tables missing from the request come from `cache` when given."""
    codex_equipment = request.codexEquipment
    if codex_equipment is None and cache is not None:
        codex_equipment = rules.get_codex_equipment(cache)
    power_parts = request.powerPartsDb
    if power_parts is None and cache is not None:
        power_parts = rules.get_power_parts(cache)
    technique_parts = request.techniquePartsDb
    if technique_parts is None and cache is not None:
        technique_parts = rules.get_technique_parts(cache)

    character = normalize_character(request.character)
    return enrich_character_data(
        character,
        request.userPowers,
        request.userTechniques,
        request.userItems,
        codex_equipment,
        power_parts,
        technique_parts,
    )


def get_derived_stats(character: Any, rules_override: Optional[CoreRules] = None,
                      cache: Optional[CodexCache] = None) -> Dict[str, Any]:
    return calculate_all_stats(normalize_character(character), rules.get_core_rules(cache, rules_override))


# --- Endpoints ---

@router.post("/enrich", response_model=schemas.EnrichedCharacterData)
def enrich_endpoint(request: schemas.EnrichRequest, cache: CodexCache = Depends(rules.get_codex_cache)):
    """Resolves a character's powers, techniques and equipment for display."""
    try:
        return enrich_character(request, cache)
    except Exception as e:
        logger.exception(f"Enrichment failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/clean-for-save")
def clean_for_save_endpoint(character: schemas.Character):
    """Returns the save-ready form of a character."""
    try:
        return clean_for_save(character)
    except Exception as e:
        logger.exception(f"Save cleaning failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/derived-stats")
def derived_stats_endpoint(request: schemas.CharacterRequest, cache: CodexCache = Depends(rules.get_codex_cache)):
    try:
        return get_derived_stats(request.character, request.rules, cache)
    except Exception as e:
        logger.exception(f"Derived stats failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
