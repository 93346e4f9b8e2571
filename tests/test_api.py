import pytest
from fastapi.testclient import TestClient

from realms.main import app, create_app
from realms.modules.rules_pkg.data_loader import CodexCache

client = TestClient(app)


@pytest.fixture(autouse=True)
def app_codex(codex_cache):
    previous = app.state.codex_cache
    app.state.codex_cache = codex_cache
    yield codex_cache
    app.state.codex_cache = previous


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_derived_stats(sample_character):
    response = client.post("/rules/derived-stats", json={"character": sample_character})
    assert response.status_code == 200
    stats = response.json()
    assert stats["maxHealth"] == 18
    assert stats["maxEnergy"] == 8
    assert stats["speed"] == 8
    assert stats["evasion"] == 13


def test_derived_stats_with_rules_override(sample_character):
    payload = {"character": sample_character, "rules": {"COMBAT": {"baseSpeed": 10}}}
    response = client.post("/rules/derived-stats", json=payload)
    assert response.status_code == 200
    assert response.json()["speed"] == 12


def test_player_progression():
    response = client.get("/rules/progression/4")
    assert response.status_code == 200
    snapshot = response.json()
    assert snapshot["level"] == 4
    assert snapshot["abilityPoints"] == 8
    assert snapshot["skillPoints"] == 12
    assert snapshot["healthEnergyPool"] == 54


def test_creature_progression():
    response = client.get("/rules/progression/1", params={"entity": "creature"})
    assert response.status_code == 200
    assert response.json()["healthEnergyPool"] == 26
    assert response.json()["currency"] == 200


def test_progression_unknown_entity():
    response = client.get("/rules/progression/1", params={"entity": "dragon"})
    assert response.status_code == 404


def test_archetype_progression():
    payload = {"level": 10, "martialProf": 1, "powerProf": 1, "choices": {"4": "innate", "7": "feat"}}
    response = client.post("/rules/archetype-progression", json=payload)
    assert response.status_code == 200
    result = response.json()
    assert result["archetypeType"] == "mixed"
    assert result["innateEnergy"] == 14
    assert result["unresolvedMilestones"] == [10]


def test_archetype_progression_rejects_bad_level():
    response = client.post("/rules/archetype-progression", json={"level": "high"})
    assert response.status_code == 422


def test_power_costs_with_parts_db(power_parts):
    payload = {
        "parts": [{"id": 900, "op_1_lvl": 3}, {"id": 901, "op_1_lvl": 2}],
        "partsDb": power_parts,
    }
    response = client.post("/rules/power-costs", json=payload)
    assert response.status_code == 200
    result = response.json()
    assert result["totalTP"] == 6
    assert result["totalEnergy"] == 7
    assert result["mechanicParts"] == []


def test_power_costs_from_mechanics():
    response = client.post("/rules/power-costs", json={"mechanics": {"action": {"type": "quick"}}})
    assert response.status_code == 200
    result = response.json()
    assert result["actionType"] == "Quick Action"
    assert result["totalEnergy"] == 1
    assert result["mechanicParts"][0]["name"] == "Power Quick or Free Action"


def test_technique_costs():
    response = client.post("/rules/technique-costs", json={"parts": [{"id": 11}, {"id": 8}]})
    assert response.status_code == 200
    result = response.json()
    assert result["totalEnergy"] == 5
    assert result["totalTP"] == 3
    assert result["actionType"] == "Basic Action"


def test_item_costs():
    payload = {
        "name": "Longbow",
        "properties": [{"id": 13, "op_1_lvl": 1}],
        "damage": [{"amount": 1, "size": 8, "type": "piercing"}],
    }
    response = client.post("/rules/item-costs", json=payload)
    assert response.status_code == 200
    result = response.json()
    assert result["range"] == "16 Spaces"
    assert result["rarity"] == "Common"
    assert result["currencyCost"] == 29


def test_reload_codex():
    response = client.post("/rules/reload-codex")
    assert response.status_code == 200
    tables = response.json()["tables"]
    assert tables["power_parts"] == 17
    assert tables["technique_parts"] == 8
    assert tables["item_properties"] == 4
    assert tables["equipment"] == 3


def test_enrich_character(sample_character, user_powers, user_techniques, user_items):
    payload = {
        "character": sample_character,
        "userPowers": user_powers,
        "userTechniques": user_techniques,
        "userItems": user_items,
    }
    response = client.post("/characters/enrich", json=payload)
    assert response.status_code == 200
    enriched = response.json()
    assert enriched["powers"][0]["cost"] == 4
    assert enriched["powers"][1]["notInLibrary"] is True
    assert enriched["techniques"][0]["cost"] == 3
    assert enriched["weapons"][1]["damage"] == "1d8 slashing"
    assert enriched["armor"][0]["armorValue"] == 1
    assert enriched["equipment"][1]["notInLibrary"] is True


def test_clean_for_save(sample_character):
    payload = dict(sample_character, maxHealth=18)
    response = client.post("/characters/clean-for-save", json=payload)
    assert response.status_code == 200
    saved = response.json()
    assert "maxHealth" not in saved
    assert "defenseVals" not in saved
    assert saved["techniques"] == ["Cleave", "Ghost Strike"]
    assert saved["equipment"]["items"] == [{"name": "Rope (50 ft)"}, {"name": "Mystery Box"}]


def test_character_derived_stats(sample_character):
    response = client.post("/characters/derived-stats", json={"character": sample_character})
    assert response.status_code == 200
    assert response.json()["maxHealth"] == 18
    assert response.json()["terminal"] == 5


def test_level_difference():
    response = client.get("/rules/level-difference", params={"from": 1, "to": 2})
    assert response.status_code == 200
    delta = response.json()
    assert delta["skillPoints"] == 3
    assert delta["healthEnergyPool"] == 12
    assert delta["abilityPoints"] == 0


def test_level_milestones():
    response = client.get("/rules/milestones/4")
    assert response.status_code == 200
    assert response.json() == {
        "level": 4,
        "isAbilityPointLevel": True,
        "isProficiencyPointLevel": False,
        "isArchetypeMilestone": True,
    }


def test_item_costs_list_proficiencies():
    payload = {"properties": [{"id": 13, "op_1_lvl": 1}]}
    response = client.post("/rules/item-costs", json=payload)
    assert response.status_code == 200
    proficiency = response.json()["proficiencies"][0]
    assert proficiency["name"] == "Range"
    assert proficiency["totalTP"] == 1


def test_enrich_numeric_item_name():
    payload = {"character": {"equipment": {"items": [{"name": 42}]}}}
    response = client.post("/characters/enrich", json=payload)
    assert response.status_code == 200
    placeholder = response.json()["equipment"][0]
    assert placeholder["id"] == "42"
    assert placeholder["name"] == "42"
    assert placeholder["notInLibrary"] is True


def test_apps_keep_separate_codex_caches(codex_dir, tmp_path_factory):
    empty_dir = tmp_path_factory.mktemp("empty_codex")
    stocked = create_app(CodexCache(data_dir=str(codex_dir)))
    empty = create_app(CodexCache(data_dir=str(empty_dir)))
    assert stocked.state.codex_cache is not empty.state.codex_cache

    stocked_tables = TestClient(stocked).post("/rules/reload-codex").json()["tables"]
    empty_tables = TestClient(empty).post("/rules/reload-codex").json()["tables"]
    assert stocked_tables["power_parts"] == 17
    assert empty_tables["power_parts"] == 0

    payload = {"parts": [{"id": 11}]}
    assert TestClient(stocked).post("/rules/technique-costs", json=payload).json()["totalEnergy"] == 3
    assert TestClient(empty).post("/rules/technique-costs", json=payload).json()["totalEnergy"] == 0
