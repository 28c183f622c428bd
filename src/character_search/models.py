"""Data models for catalog records and controller state."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

CharacterId = int | str


class Place(BaseModel):
    """An origin or location reference attached to a character."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    url: str = ""


class CharacterSummary(BaseModel):
    """Minimal display record for one catalog entry."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    name: str
    status: str
    species: str
    type: str = ""
    gender: str = ""
    image: str = ""
    origin: Place = Field(default_factory=lambda: Place(name="unknown"))
    location: Place = Field(default_factory=lambda: Place(name="unknown"))


class ToggleOutcome(str, Enum):
    """Result of toggling a favorite."""

    ADDED = "added"
    REMOVED = "removed"
    REJECTED = "rejected"


class SearchView(BaseModel):
    """Snapshot of the search state handed to presentation."""

    model_config = ConfigDict(frozen=True)

    term: str = ""
    results: tuple[CharacterSummary, ...] = ()
    loading: bool = False
    error: str | None = None


class FavoritesView(BaseModel):
    """Snapshot of the favorites page state."""

    model_config = ConfigDict(frozen=True)

    ids: tuple[CharacterId, ...] = ()
    results: tuple[CharacterSummary, ...] = ()
    loading: bool = False
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.ids
