"""Debounced character search with a persisted, capacity-limited favorites set."""

from .client import CatalogClient, RickAndMortyClient
from .config import AppSettings, get_settings
from .controller import StateController
from .debounce import DebouncedCall, schedule
from .exceptions import (
    CatalogError,
    CharacterSearchError,
    NotFoundError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    TransientFetchError,
)
from .favorites import FavoritesStore
from .models import CharacterSummary, FavoritesView, Place, SearchView, ToggleOutcome
from .search import SearchController
from .storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "AppSettings",
    "get_settings",
    "CatalogClient",
    "RickAndMortyClient",
    "StateController",
    "SearchController",
    "FavoritesStore",
    "DebouncedCall",
    "schedule",
    "KeyValueStore",
    "JsonFileStore",
    "MemoryStore",
    "CharacterSummary",
    "Place",
    "SearchView",
    "FavoritesView",
    "ToggleOutcome",
    "CharacterSearchError",
    "CatalogError",
    "NotFoundError",
    "TransientFetchError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
