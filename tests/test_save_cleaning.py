from realms.shared import UNSET
from realms.modules.character_pkg.enrichment import enrich_character_data
from realms.modules.character_pkg.save_cleaning import clean_for_save, remove_undefined_values
from realms.modules.character_pkg.schemas import Character

COMPUTED_KEYS = {"damageStr", "cost", "libraryItem", "notInLibrary", "actionType", "weaponName", "maxHealth"}


def _all_keys(value):
    keys = set()
    if isinstance(value, dict):
        for key, item in value.items():
            keys.add(key)
            keys |= _all_keys(item)
    elif isinstance(value, list):
        for item in value:
            keys |= _all_keys(item)
    return keys


def test_enriched_character_saves_bare_references(sample_character, user_powers, user_techniques, user_items,
                                                   codex_equipment, power_parts, technique_parts):
    enriched = enrich_character_data(sample_character, user_powers, user_techniques, user_items,
                                     codex_equipment, power_parts, technique_parts)
    in_memory = dict(sample_character)
    in_memory.update({
        "powers": enriched["powers"],
        "techniques": enriched["techniques"],
        "equipment": {
            "weapons": enriched["weapons"],
            "armor": enriched["armor"],
            "items": enriched["equipment"],
        },
        "maxHealth": 18,
        "defenseScores": {"might": 13},
    })

    saved = clean_for_save(in_memory)

    assert not _all_keys(saved) & COMPUTED_KEYS
    assert "defenseScores" not in saved
    assert saved["powers"] == [{"name": "Fire Bolt", "innate": True}, {"name": "Missing Power", "innate": False}]
    assert saved["techniques"] == ["Cleave", "Ghost Strike"]
    assert saved["equipment"]["weapons"] == [{"name": "Flame Sword", "equipped": True}, {"name": "Longsword"}]
    assert saved["equipment"]["armor"] == [{"name": "Leather Armor", "equipped": True}]
    assert saved["equipment"]["items"] == [{"name": "Rope (50 ft)"}, {"name": "Mystery Box"}]
    assert clean_for_save(saved) == saved


def test_skills_are_reduced():
    saved = clean_for_save({"skills": [
        {"id": "s1", "name": "Athletics", "skill_val": 2, "prof": True, "ability": "strength", "bonus": 5},
        "Stealth",
        {"name": "Climb", "baseSkillId": 0},
        {"noname": 1},
    ]})
    assert saved["skills"] == [
        {"id": "s1", "name": "Athletics", "skill_val": 2, "prof": True, "ability": "strength"},
        {"name": "Stealth", "skill_val": 0, "prof": False},
        {"name": "Climb", "skill_val": 0, "prof": False, "baseSkillId": 0},
    ]


def test_feats_are_reduced():
    saved = clean_for_save({
        "feats": [{"name": "Tough", "type": "character", "currentUses": 2, "description": "x"},
                  {"name": "Alert", "currentUses": None}],
        "archetypeFeats": [{"id": "f1", "name": "Brace", "currentUses": 1, "maxUses": 2, "effect": "..."}],
        "traits": [{"name": "Darkvision", "desc": "See in the dark"}, "Keen Senses"],
    })
    assert saved["feats"] == [{"name": "Tough", "type": "character", "currentUses": 2}, {"name": "Alert"}]
    assert saved["archetypeFeats"] == [{"id": "f1", "name": "Brace", "currentUses": 1, "maxUses": 2}]
    assert saved["traits"] == ["Darkvision", "Keen Senses"]


def test_item_quantities():
    saved = clean_for_save({"equipment": {"items": [{"name": "Arrow", "quantity": 20}, {"name": "Rope", "quantity": 1}]}})
    assert saved["equipment"]["items"] == [{"name": "Arrow", "quantity": 20}, {"name": "Rope"}]


def test_undefined_values_are_removed_but_none_kept():
    saved = clean_for_save({
        "name": "A",
        "notes": UNSET,
        "abilities": {"strength": UNSET, "agility": 2},
        "backstory": None,
    })
    assert saved == {"name": "A", "abilities": {"agility": 2}, "backstory": None}
    assert remove_undefined_values([1, UNSET, {"a": UNSET}]) == [1, {}]


def test_models_save_only_set_fields():
    assert clean_for_save(Character(name="A", level=2)) == {"name": "A", "level": 2}
    assert clean_for_save(Character(name="A", maxHealth=30)) == {"name": "A"}
