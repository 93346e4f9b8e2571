import json
import os
import logging
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from .models import CoreRules

logger = logging.getLogger("realms.rules.data_loader")

# Codex table name -> file in the data directory
CODEX_FILES: Dict[str, str] = {
    "power_parts": "power_parts.json",
    "technique_parts": "technique_parts.json",
    "item_properties": "item_properties.json",
    "equipment": "codex_equipment.json",
    "core_rules": "core_rules.json",
}

LIST_TABLES = ("power_parts", "technique_parts", "item_properties", "equipment")


def get_data_dir() -> str:
    # REALMS_DATA_DIR wins; otherwise the data/ folder next to this file
    override = os.environ.get("REALMS_DATA_DIR")
    if override:
        return override
    return os.path.join(os.path.dirname(__file__), "data")


def load_json_data(filename: str, data_dir: Optional[str] = None) -> Any:
    filepath = os.path.join(data_dir or get_data_dir(), filename)
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
            logger.info(f"Loaded {filename}")
            return data
    except FileNotFoundError:
        logger.error(f"File not found: {filename}")
        return {}
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding {filename}: {e}")
        return {}


def parse_advanced_json(text: Any) -> Dict[str, Any]:
    """Parses a free-form JSON text field; anything unparseable counts as empty."""
    if isinstance(text, dict):
        return text
    if not isinstance(text, str) or not text.strip():
        return {}
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Ignoring invalid advanced JSON: {e}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _as_table(name: str, data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        return [entry for entry in data if isinstance(entry, dict)]
    if isinstance(data, dict):
        # {"parts": [...]} style files, or an empty {} from a failed load
        for value in data.values():
            if isinstance(value, list):
                return [entry for entry in value if isinstance(entry, dict)]
        return []
    logger.warning(f"Codex table '{name}' has unexpected type {type(data)}. Using empty list.")
    return []


def load_core_rules(data_dir: Optional[str] = None) -> Dict[str, Any]:
    """Loads and validates the core-rules override; invalid files are discarded."""
    raw = load_json_data(CODEX_FILES["core_rules"], data_dir)
    if not raw:
        return {}
    try:
        return CoreRules.model_validate(raw).as_rules()
    except ValidationError as e:
        logger.error(f"Invalid core rules override, using built-in constants: {e}")
        return {}


def load_codex(data_dir: Optional[str] = None) -> Dict[str, Any]:
    """Loads every codex table and returns them in a dictionary."""
    logger.info("--- Loading Codex Data ---")
    loaded = {
        name: _as_table(name, load_json_data(CODEX_FILES[name], data_dir))
        for name in LIST_TABLES
    }
    loaded["core_rules"] = load_core_rules(data_dir)
    for name in LIST_TABLES:
        logger.info(f"Codex table '{name}': {len(loaded[name])} entries")
    return loaded


class CodexCache:
    """
    Owns loaded codex tables, keyed by a data version string.

    Asking for a different version reloads; invalidate() forgets everything.
    """

    def __init__(self, version: str = "default", data_dir: Optional[str] = None):
        self.version = version
        self.data_dir = data_dir
        self._entries: Dict[str, Dict[str, Any]] = {}

    def get(self, version: Optional[str] = None) -> Dict[str, Any]:
        key = version or self.version
        if key not in self._entries:
            if self._entries:
                logger.info(f"Codex version changed to '{key}', reloading")
                self._entries.clear()
            self._entries[key] = load_codex(self.data_dir)
            self.version = key
        return self._entries[key]

    def table(self, name: str, version: Optional[str] = None) -> Any:
        return self.get(version).get(name, {} if name == "core_rules" else [])

    def invalidate(self) -> None:
        logger.info("Codex cache invalidated")
        self._entries.clear()

    @property
    def loaded_versions(self) -> List[str]:
        return list(self._entries.keys())
