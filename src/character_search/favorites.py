"""Capacity-limited set of favorite character ids persisted to a key-value store."""

import json
import logging
from collections.abc import Callable

from .config import FAVORITES_KEY
from .exceptions import StorageReadError
from .models import CharacterId, ToggleOutcome
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 4


def capacity_message(capacity: int) -> str:
    return f"You can't add more than {capacity} favorite characters!"


def decode_ids(raw: str, capacity: int) -> list[CharacterId]:
    """Parse a persisted favorites payload.

    Raises:
        StorageReadError: The payload is not a JSON array of at most
            ``capacity`` unique ints or strings
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise StorageReadError(f"Favorites payload is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise StorageReadError(f"Favorites payload must be an array, got {type(data).__name__}")
    # bool is an int subclass but never a valid id
    if any(isinstance(i, bool) or not isinstance(i, (int, str)) for i in data):
        raise StorageReadError("Favorites payload contains non-id entries")
    if len(set(data)) != len(data):
        raise StorageReadError("Favorites payload contains duplicate ids")
    if len(data) > capacity:
        raise StorageReadError(f"Favorites payload holds {len(data)} ids, capacity is {capacity}")
    return data


def encode_ids(ids: list[CharacterId]) -> str:
    return json.dumps(ids, separators=(",", ":"))


class FavoritesStore:
    """Ordered set of favorite ids with toggle semantics.

    The set is read once from ``storage`` at construction and fully rewritten
    on every accepted change.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        key: str = FAVORITES_KEY,
        capacity: int = DEFAULT_CAPACITY,
        on_capacity_reached: Callable[[str], None] | None = None,
        on_change: Callable[[], None] | None = None,
    ):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.storage = storage
        self.key = key
        self.capacity = capacity
        self.on_capacity_reached = on_capacity_reached
        self.on_change = on_change
        self._ids: list[CharacterId] = self._load()

    def _load(self) -> list[CharacterId]:
        try:
            raw = self.storage.get(self.key)
        except Exception as e:
            logger.warning(f"Could not read stored favorites under {self.key!r}, starting empty: {e}")
            return []
        if raw is None:
            return []

        try:
            ids = decode_ids(raw, self.capacity)
        except StorageReadError as e:
            logger.warning(f"Discarding stored favorites under {self.key!r}: {e}")
            return []

        logger.debug(f"Loaded {len(ids)} favorites")
        return ids

    def _persist(self, ids: list[CharacterId]) -> None:
        try:
            self.storage.set(self.key, encode_ids(ids))
        except Exception as e:
            logger.error(f"Favorites not persisted, keeping in-memory state: {e}")

    @property
    def ids(self) -> tuple[CharacterId, ...]:
        return tuple(self._ids)

    @property
    def is_full(self) -> bool:
        return len(self._ids) >= self.capacity

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, character_id: object) -> bool:
        return character_id in self._ids

    def is_favorite(self, character_id: CharacterId) -> bool:
        return character_id in self._ids

    def toggle(self, character_id: CharacterId) -> ToggleOutcome:
        """Remove ``character_id`` if present, otherwise add it when there is room.

        A rejected addition leaves the set untouched and calls
        ``on_capacity_reached`` once.
        """
        if character_id in self._ids:
            updated = [i for i in self._ids if i != character_id]
            outcome = ToggleOutcome.REMOVED
        elif len(self._ids) < self.capacity:
            updated = [*self._ids, character_id]
            outcome = ToggleOutcome.ADDED
        else:
            message = capacity_message(self.capacity)
            logger.info(f"Rejected favorite {character_id!r}: {message}")
            if self.on_capacity_reached is not None:
                self.on_capacity_reached(message)
            return ToggleOutcome.REJECTED

        self._persist(updated)
        self._ids = updated
        logger.debug(f"Favorite {character_id!r} {outcome.value}, now {len(updated)}/{self.capacity}")
        if self.on_change is not None:
            self.on_change()
        return outcome
