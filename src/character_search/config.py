"""Configuration management using Pydantic settings with optional file persistence."""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Paths ---

APP_NAME = "character-search"

DEFAULT_CATALOG_URL = "https://rickandmortyapi.com/api"
FAVORITES_KEY = "favoriteCharacterIds"


def get_config_dir() -> Path:
    """Get the configuration directory (e.g. ~/.config/character-search)."""
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", Path.home() / ".config")).expanduser()
    else:
        base = Path("~/.config").expanduser()

    return base / APP_NAME


def get_config_file() -> Path:
    return get_config_dir() / "config.json"


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load settings from the JSON config file if it exists."""
    path = path or get_config_file()
    if not path.exists():
        return {}

    try:
        text = path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config_file(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Save settings to the JSON config file."""
    path = path or get_config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_data, indent=2), encoding="utf-8")
    return path


class CatalogSettings(BaseSettings):
    """Remote character catalog configuration."""

    model_config = SettingsConfigDict(env_prefix="CHARACTER_SEARCH_CATALOG_")

    base_url: str = Field(default=DEFAULT_CATALOG_URL, description="Base URL of the character API")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")


class SearchSettings(BaseSettings):
    """Search behavior configuration."""

    model_config = SettingsConfigDict(env_prefix="CHARACTER_SEARCH_SEARCH_")

    debounce_ms: int = Field(default=500, ge=0, description="Quiet period before a search term is fetched")


class FavoritesSettings(BaseSettings):
    """Favorites storage configuration."""

    model_config = SettingsConfigDict(env_prefix="CHARACTER_SEARCH_FAVORITES_")

    capacity: int = Field(default=4, ge=1, description="Maximum number of favorite characters")
    storage_path: str | None = Field(default=None, description="Key-value store file (default: <config dir>/storage.json)")
    storage_key: str = Field(default=FAVORITES_KEY, description="Key holding the favorites payload")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="CHARACTER_SEARCH_LOGGING_")

    level: str = Field(default="INFO")
    json_output: bool = Field(default=False, description="Emit JSON log lines")


class AppSettings(BaseSettings):
    """Root application settings.

    Priority: Environment Variables > Config File > Defaults
    """

    model_config = SettingsConfigDict(env_prefix="CHARACTER_SEARCH_", extra="ignore")

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    favorites: FavoritesSettings = Field(default_factory=FavoritesSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def save(self, path: Path | None = None) -> Path:
        """Save current configuration to file."""
        data = self.model_dump(mode="json", exclude_none=True)
        return save_config_file(data, path)

    def get_storage_path(self) -> Path:
        """Get the key-value store path, creating its directory if needed."""
        if self.favorites.storage_path:
            path = Path(self.favorites.storage_path).expanduser()
        else:
            path = get_config_dir() / "storage.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


def _merge_env(file_data: dict[str, Any]) -> dict[str, Any]:
    """Drop file values for groups whose fields are overridden by env vars."""
    merged: dict[str, Any] = {}
    for group, values in file_data.items():
        if not isinstance(values, dict):
            continue
        prefix = f"CHARACTER_SEARCH_{group.upper()}_"
        merged[group] = {k: v for k, v in values.items() if f"{prefix}{k.upper()}" not in os.environ}
    return merged


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Load settings with file config as base, env vars overlay."""
    file_data = _merge_env(load_config_file())
    groups = {
        "catalog": CatalogSettings,
        "search": SearchSettings,
        "favorites": FavoritesSettings,
        "logging": LoggingSettings,
    }
    kwargs = {name: cls(**file_data.get(name, {})) for name, cls in groups.items()}
    return AppSettings(**kwargs)
