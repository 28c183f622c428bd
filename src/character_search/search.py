"""Debounced name search with last-request-wins result handling."""

import asyncio
from collections.abc import Callable

from .client import CatalogClient
from .debounce import schedule
from .exceptions import NotFoundError
from .models import CharacterSummary, SearchView
from .observability import get_logger, request_context

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_MS = 500
SEARCH_FAILED_MESSAGE = "Failed to fetch characters. Please try again."


def not_found_message(term: str) -> str:
    return f'No characters found for "{term}".'


class SearchController:
    """Owns the search term, results, loading flag and error message.

    Work happens in two stages. :meth:`set_search_term` is synchronous: it
    records the term and re-arms the debounce timer. :meth:`fetch` runs when
    the timer fires, awaits the catalog, and applies the response only if it
    still answers the current term and is the latest request issued.
    """

    def __init__(
        self,
        client: CatalogClient,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        on_change: Callable[[], None] | None = None,
    ):
        self.client = client
        self.on_change = on_change
        self._term = ""
        self._results: list[CharacterSummary] = []
        self._error: str | None = None
        self._request_seq = 0
        # (request id, term) of the latest issued request while it is unsettled
        self._in_flight: tuple[int, str] | None = None
        self._debounced_fetch = schedule(self.fetch, debounce_ms)

    @property
    def term(self) -> str:
        return self._term

    @property
    def results(self) -> list[CharacterSummary]:
        return list(self._results)

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def loading(self) -> bool:
        return self._in_flight is not None and self._in_flight[1] == self._term

    def snapshot(self) -> SearchView:
        return SearchView(term=self._term, results=tuple(self._results), loading=self.loading, error=self._error)

    def set_search_term(self, term: str) -> None:
        """Replace the term and schedule a fetch after the quiet period."""
        if term == self._term:
            return
        self._term = term
        self._debounced_fetch(term)
        self._changed()

    async def fetch(self, term: str) -> None:
        """Fetch characters for ``term`` and apply the response if still current."""
        if not term:
            self._results = []
            self._changed()
            return

        self._request_seq += 1
        request_id = self._request_seq
        self._in_flight = (request_id, term)
        self._error = None
        self._changed()

        with request_context("search", request_id, term):
            logger.debug("search_issued")
            results: list[CharacterSummary] = []
            error: str | None = None
            try:
                results = await self.client.search_by_name(term)
            except asyncio.CancelledError:
                if self._in_flight is not None and self._in_flight[0] == request_id:
                    self._in_flight = None
                logger.debug("search_cancelled")
                raise
            except NotFoundError:
                error = not_found_message(term)
            except Exception as e:
                logger.warning("search_failed", error=str(e), error_type=type(e).__name__)
                error = SEARCH_FAILED_MESSAGE

            latest = self._in_flight is not None and self._in_flight[0] == request_id
            if latest:
                self._in_flight = None

            if not latest or term != self._term:
                logger.debug("search_stale", current_term=self._term)
                if latest:
                    self._changed()
                return

            self._results = results
            self._error = error
            logger.info("search_settled", results=len(results), error=error)
            self._changed()

    async def wait(self) -> None:
        """Wait until the pending debounced fetch, if any, has settled."""
        await self._debounced_fetch.wait()

    def cancel_pending(self) -> None:
        self._debounced_fetch.cancel()

    async def aclose(self) -> None:
        """Disarm the timer and cancel a fetch that is still awaiting the catalog."""
        await self._debounced_fetch.aclose()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
