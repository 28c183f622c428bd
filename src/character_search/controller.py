"""State controller combining search and favorites for presentation layers."""

from collections.abc import Callable

from .client import CatalogClient, RickAndMortyClient
from .config import AppSettings
from .favorites import FavoritesStore
from .models import CharacterId, CharacterSummary, FavoritesView, SearchView, ToggleOutcome
from .observability import get_logger, request_context
from .search import SearchController
from .storage import JsonFileStore, KeyValueStore

logger = get_logger(__name__)

FAVORITES_FAILED_MESSAGE = "Failed to load favorite characters. Some characters might have been removed from the API."

Listener = Callable[["StateController"], None]


class StateController:
    """Single owner of search and favorites state.

    Presentation reads state and calls operations here; it never touches the
    catalog client or storage directly. Listeners registered with
    :meth:`subscribe` are called after every state change.
    """

    def __init__(
        self,
        client: CatalogClient,
        storage: KeyValueStore,
        *,
        settings: AppSettings | None = None,
        on_capacity_reached: Callable[[str], None] | None = None,
        owns_client: bool = False,
    ):
        self.settings = settings or AppSettings()
        self.client = client
        self._owns_client = owns_client
        self._listeners: list[Listener] = []

        self._search = SearchController(
            client,
            debounce_ms=self.settings.search.debounce_ms,
            on_change=self._notify,
        )
        self._favorites = FavoritesStore(
            storage,
            key=self.settings.favorites.storage_key,
            capacity=self.settings.favorites.capacity,
            on_capacity_reached=on_capacity_reached,
            on_change=self._notify,
        )

        self._favorites_results: list[CharacterSummary] = []
        self._favorites_error: str | None = None
        self._favorites_seq = 0
        self._favorites_in_flight: tuple[int, tuple[CharacterId, ...]] | None = None

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        on_capacity_reached: Callable[[str], None] | None = None,
    ) -> "StateController":
        """Build a controller backed by the HTTP catalog and a JSON file store."""
        client = RickAndMortyClient(base_url=settings.catalog.base_url, timeout=settings.catalog.timeout)
        storage = JsonFileStore(settings.get_storage_path())
        return cls(client, storage, settings=settings, on_capacity_reached=on_capacity_reached, owns_client=True)

    async def __aenter__(self) -> "StateController":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop pending and running searches, then close the client if this controller built it."""
        await self._search.aclose()
        if self._owns_client and isinstance(self.client, RickAndMortyClient):
            await self.client.aclose()

    # --- Change notification ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("listener_failed")

    # --- Search ---

    @property
    def search_term(self) -> str:
        return self._search.term

    def set_search_term(self, term: str) -> None:
        self._search.set_search_term(term)

    @property
    def results(self) -> list[CharacterSummary]:
        return self._search.results

    @property
    def loading(self) -> bool:
        return self._search.loading

    @property
    def error(self) -> str | None:
        return self._search.error

    def search_view(self) -> SearchView:
        return self._search.snapshot()

    async def wait_for_search(self) -> None:
        """Wait for the pending debounced search to settle."""
        await self._search.wait()

    # --- Favorites ---

    @property
    def favorite_ids(self) -> tuple[CharacterId, ...]:
        return self._favorites.ids

    @property
    def favorites_capacity(self) -> int:
        return self._favorites.capacity

    def toggle_favorite(self, character_id: CharacterId) -> ToggleOutcome:
        return self._favorites.toggle(character_id)

    def is_favorite(self, character_id: CharacterId) -> bool:
        return self._favorites.is_favorite(character_id)

    # --- Favorites view ---

    @property
    def favorites_loading(self) -> bool:
        return self._favorites_in_flight is not None and self._favorites_in_flight[1] == self._favorites.ids

    def favorites_view(self) -> FavoritesView:
        return FavoritesView(
            ids=self._favorites.ids,
            results=tuple(self._favorites_results),
            loading=self.favorites_loading,
            error=self._favorites_error,
        )

    async def refresh_favorites(self) -> FavoritesView:
        """Load full records for the current favorites in one batched request."""
        ids = self._favorites.ids
        if not ids:
            self._favorites_results = []
            self._favorites_error = None
            self._notify()
            return self.favorites_view()

        self._favorites_seq += 1
        request_id = self._favorites_seq
        self._favorites_in_flight = (request_id, ids)
        self._favorites_error = None
        self._notify()

        with request_context("favorites", request_id, ",".join(str(i) for i in ids)):
            results: list[CharacterSummary] = []
            error: str | None = None
            try:
                results = await self.client.get_by_ids(list(ids))
            except Exception as e:
                logger.warning("favorites_failed", error=str(e), error_type=type(e).__name__)
                error = FAVORITES_FAILED_MESSAGE

            latest = self._favorites_in_flight is not None and self._favorites_in_flight[0] == request_id
            if latest:
                self._favorites_in_flight = None

            if latest and ids == self._favorites.ids:
                self._favorites_results = results
                self._favorites_error = error
                logger.info("favorites_settled", results=len(results), error=error)
            else:
                logger.debug("favorites_stale")
            self._notify()

        return self.favorites_view()

    # --- Details ---

    async def get_character(self, character_id: CharacterId) -> CharacterSummary:
        """Fetch one character's record.

        Raises:
            NotFoundError: No character with that id
            TransientFetchError: Any other failure
        """
        return await self.client.get_by_id(character_id)
