"""Pytest configuration and fixtures for character-search tests."""

import asyncio
from collections.abc import Sequence

import pytest

from character_search.config import AppSettings, FavoritesSettings, SearchSettings
from character_search.exceptions import NotFoundError, TransientFetchError
from character_search.models import CharacterSummary, Place
from character_search.storage import MemoryStore

FAST_DEBOUNCE_MS = 20


def make_character(character_id: int, name: str, **overrides) -> CharacterSummary:
    data = {
        "id": character_id,
        "name": name,
        "status": "Alive",
        "species": "Human",
        "gender": "Male",
        "image": f"https://rickandmortyapi.com/api/character/avatar/{character_id}.jpeg",
        "origin": Place(name="Earth (C-137)"),
        "location": Place(name="Citadel of Ricks"),
    }
    data.update(overrides)
    return CharacterSummary(**data)


RICKS = [make_character(1, "Rick Sanchez"), make_character(2, "Rick Sanchez Prime")]
MORTY = [make_character(3, "Morty Smith")]


class FakeCatalog:
    """In-memory catalog that records calls and can hold responses back."""

    def __init__(self):
        self.search_responses: dict[str, list[CharacterSummary] | Exception] = {
            "Rick": RICKS,
            "Morty": MORTY,
        }
        self.characters: dict[int, CharacterSummary] = {c.id: c for c in RICKS + MORTY}
        self.characters[4] = make_character(4, "Summer Smith", gender="Female")
        self.characters[5] = make_character(5, "Jerry Smith")
        self.search_calls: list[str] = []
        self.batch_calls: list[list] = []
        self.batch_error: Exception | None = None
        # One-shot gates: the next call for a term (or batch) waits until the event is set
        self.search_gates: dict[str, asyncio.Event] = {}
        self.batch_gate: asyncio.Event | None = None

    async def search_by_name(self, name: str) -> list[CharacterSummary]:
        self.search_calls.append(name)
        gate = self.search_gates.pop(name, None)
        if gate is not None:
            await gate.wait()
        response = self.search_responses.get(name)
        if response is None:
            raise NotFoundError(name)
        if isinstance(response, Exception):
            raise response
        return list(response)

    async def get_by_id(self, character_id) -> CharacterSummary:
        character = self.characters.get(character_id)
        if character is None:
            raise NotFoundError(str(character_id))
        return character

    async def get_by_ids(self, ids: Sequence) -> list[CharacterSummary]:
        self.batch_calls.append(list(ids))
        gate, self.batch_gate = self.batch_gate, None
        if gate is not None:
            await gate.wait()
        if self.batch_error is not None:
            raise self.batch_error
        missing = [i for i in ids if i not in self.characters]
        if missing:
            raise TransientFetchError(f"Unknown ids {missing}")
        return [self.characters[i] for i in ids]


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def storage() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        search=SearchSettings(debounce_ms=FAST_DEBOUNCE_MS),
        favorites=FavoritesSettings(capacity=4),
    )
