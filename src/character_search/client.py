"""Async client for the remote character catalog."""

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import TypeAdapter, ValidationError

from .config import DEFAULT_CATALOG_URL
from .exceptions import NotFoundError, TransientFetchError
from .models import CharacterId, CharacterSummary

logger = logging.getLogger(__name__)

_characters = TypeAdapter(list[CharacterSummary])


@runtime_checkable
class CatalogClient(Protocol):
    """Call contract the controller relies on."""

    async def search_by_name(self, name: str) -> list[CharacterSummary]: ...

    async def get_by_id(self, character_id: CharacterId) -> CharacterSummary: ...

    async def get_by_ids(self, ids: Sequence[CharacterId]) -> list[CharacterSummary]: ...


def normalize_records(payload: Any) -> list[dict[str, Any]]:
    """Return a list of records whether the API sent one object or many."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        return [payload]
    raise TypeError(f"Expected a character object or list, got {type(payload).__name__}")


class RickAndMortyClient:
    """Character catalog backed by the Rick and Morty REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_CATALOG_URL,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root, e.g. https://rickandmortyapi.com/api
            timeout: Request timeout in seconds
            http_client: Pre-built client (tests pass one with a mock transport).
                When given, the caller owns it and :meth:`aclose` leaves it open.
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "RickAndMortyClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as e:
            raise TransientFetchError(f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            return None
        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise TransientFetchError(f"Catalog returned HTTP {response.status_code} for {url}") from e
        except ValueError as e:
            raise TransientFetchError(f"Catalog returned invalid JSON for {url}") from e

    async def search_by_name(self, name: str) -> list[CharacterSummary]:
        """Search characters whose name contains ``name``.

        Only the first page the API returns is used.

        Raises:
            NotFoundError: The API answered 404 (no match)
            TransientFetchError: Any other failure
        """
        payload = await self._get_json("/character/", params={"name": name})
        if payload is None:
            raise NotFoundError(name)

        try:
            results = payload["results"]
            characters = _characters.validate_python(results)
        except (KeyError, TypeError, ValidationError) as e:
            raise TransientFetchError(f"Unexpected search payload for {name!r}: {e}") from e

        logger.debug(f"Catalog search {name!r} returned {len(characters)} characters")
        return characters

    async def get_by_id(self, character_id: CharacterId) -> CharacterSummary:
        """Fetch a single character.

        Raises:
            NotFoundError: No character with that id
            TransientFetchError: Any other failure
        """
        payload = await self._get_json(f"/character/{character_id}")
        if payload is None:
            raise NotFoundError(str(character_id), f"No character with id {character_id}")

        try:
            return CharacterSummary.model_validate(payload)
        except ValidationError as e:
            raise TransientFetchError(f"Unexpected character payload for id {character_id}: {e}") from e

    async def get_by_ids(self, ids: Sequence[CharacterId]) -> list[CharacterSummary]:
        """Fetch several characters in one request.

        The API answers a single id with an object and several ids with a
        list; both are returned as a list.

        Raises:
            TransientFetchError: Any failure, including unknown ids
        """
        if not ids:
            return []

        joined = ",".join(str(i) for i in ids)
        payload = await self._get_json(f"/character/{joined}")
        if payload is None:
            raise TransientFetchError(f"Catalog has no characters for ids {joined}")

        try:
            return _characters.validate_python(normalize_records(payload))
        except (TypeError, ValidationError) as e:
            raise TransientFetchError(f"Unexpected payload for ids {joined}: {e}") from e
