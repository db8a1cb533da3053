"""Basic smoke tests for configuration and maintenance tooling."""
from __future__ import annotations

from pathlib import Path

import pytest

from nexaverse.config.settings import DEFAULT_AD_CODES_PATH, load_settings
from tools.renormalize_collections import renormalize


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("MONGO_URL", "MONGO_URI", "NEXAVERSE_DB", "PUBLIC_BASE_URL", "AD_CODES_PATH", "API_PORT"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings(use_dotenv=False)
    assert settings.mongo_url == "mongodb://localhost:27017"
    assert settings.db_name == "nexaverse"
    assert settings.public_base_url == "http://localhost:8000"
    assert settings.ad_codes_path == DEFAULT_AD_CODES_PATH
    assert settings.api_port == 8000
    assert DEFAULT_AD_CODES_PATH.exists()


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MONGO_URL", raising=False)
    monkeypatch.setenv("MONGO_URI", "mongodb://db:27017")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://nexaverse.example/")
    monkeypatch.setenv("AD_CODES_PATH", "/etc/nexaverse/ads.yaml")
    monkeypatch.setenv("API_PORT", "9000")
    settings = load_settings(use_dotenv=False)
    assert settings.mongo_url == "mongodb://db:27017"
    assert settings.public_base_url == "https://nexaverse.example"
    assert settings.ad_codes_path == Path("/etc/nexaverse/ads.yaml")
    assert settings.api_port == 9000

    monkeypatch.setenv("API_PORT", "eighty")
    with pytest.raises(ValueError):
        load_settings(use_dotenv=False)


def test_renormalize_converts_text_collections(fake_db) -> None:
    collections = fake_db["collections"]
    collections.insert_raw({"collection_id": "old", "poster": "", "videos": "a\nA\nhttps://p/a\n#\nhttps://w/a"})
    collections.insert_raw({"collection_id": "broken", "videos": "x"})
    collections.insert_raw({"collection_id": "new", "videos": [{"id": "b", "title": "B"}]})

    assert renormalize(fake_db, dry_run=True) == {"seen": 2, "updated": 1, "empty": 1}
    assert isinstance(collections.find_one({"collection_id": "old"})["videos"], str)

    assert renormalize(fake_db) == {"seen": 2, "updated": 1, "empty": 1}
    converted = collections.find_one({"collection_id": "old"})
    assert converted["videos"][0]["watch"] == "https://w/a"
    assert converted["poster"] == "https://p/a"
