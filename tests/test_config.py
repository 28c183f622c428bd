"""Tests for configuration loading and environment overlay."""

import json
import os

import pytest

import character_search.config as config_mod
from character_search.config import (
    DEFAULT_CATALOG_URL,
    FAVORITES_KEY,
    AppSettings,
    CatalogSettings,
    FavoritesSettings,
    SearchSettings,
    get_settings,
    load_config_file,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp dir and clear env overrides."""
    for var in list(os.environ):
        if var.startswith("CHARACTER_SEARCH_"):
            monkeypatch.delenv(var, raising=False)
    config_file = tmp_path / "config.json"
    monkeypatch.setattr(config_mod, "get_config_file", lambda: config_file)
    get_settings.cache_clear()
    yield config_file
    get_settings.cache_clear()


class TestDefaults:
    def test_defaults(self):
        settings = AppSettings()

        assert settings.catalog.base_url == DEFAULT_CATALOG_URL
        assert settings.search.debounce_ms == 500
        assert settings.favorites.capacity == 4
        assert settings.favorites.storage_key == FAVORITES_KEY
        assert settings.logging.level == "INFO"

    def test_validation(self):
        with pytest.raises(ValueError):
            SearchSettings(debounce_ms=-1)
        with pytest.raises(ValueError):
            FavoritesSettings(capacity=0)
        with pytest.raises(ValueError):
            CatalogSettings(timeout=0)


class TestOverlay:
    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("CHARACTER_SEARCH_SEARCH_DEBOUNCE_MS", "250")
        monkeypatch.setenv("CHARACTER_SEARCH_CATALOG_BASE_URL", "http://localhost:8080/api")

        settings = get_settings()

        assert settings.search.debounce_ms == 250
        assert settings.catalog.base_url == "http://localhost:8080/api"

    def test_config_file_is_base_layer(self, isolated_config):
        isolated_config.write_text(json.dumps({"search": {"debounce_ms": 100}, "favorites": {"capacity": 6}}), encoding="utf-8")

        settings = get_settings()

        assert settings.search.debounce_ms == 100
        assert settings.favorites.capacity == 6

    def test_env_beats_config_file(self, isolated_config, monkeypatch):
        isolated_config.write_text(json.dumps({"search": {"debounce_ms": 100}}), encoding="utf-8")
        monkeypatch.setenv("CHARACTER_SEARCH_SEARCH_DEBOUNCE_MS", "50")

        assert get_settings().search.debounce_ms == 50

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()


class TestConfigFile:
    @pytest.mark.parametrize("content", ["", "not json", "[1, 2]"])
    def test_bad_file_is_ignored(self, isolated_config, content):
        isolated_config.write_text(content, encoding="utf-8")
        assert load_config_file() == {}

    def test_missing_file(self):
        assert load_config_file() == {}

    def test_save_round_trip(self, isolated_config):
        settings = AppSettings(search=SearchSettings(debounce_ms=300))

        path = settings.save()

        assert path == isolated_config
        assert load_config_file()["search"]["debounce_ms"] == 300

    def test_storage_path_override(self, tmp_path):
        target = tmp_path / "data" / "kv.json"
        settings = AppSettings(favorites=FavoritesSettings(storage_path=str(target)))

        assert settings.get_storage_path() == target
        assert target.parent.is_dir()
