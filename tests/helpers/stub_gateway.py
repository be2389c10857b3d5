from __future__ import annotations

from collections.abc import Sequence

from company_intel.clients.errors import SearchTimeoutError
from company_intel.models.search import SearchOptions, SearchResponse, SearchResultItem


class StubGateway:
    """In-memory search gateway returning the same results for every query."""

    def __init__(self, results: Sequence[SearchResultItem] = (), fail_on: str | None = None) -> None:
        self._results = list(results)
        self._fail_on = fail_on
        self.queries: list[tuple[str, str | None]] = []

    async def search(
        self, query: str, options: SearchOptions | None = None, focus_mode: str | None = None
    ) -> SearchResponse:
        self.queries.append((query, focus_mode))
        if self._fail_on and self._fail_on in query:
            raise SearchTimeoutError()
        return SearchResponse(query=query, results=self._results, total_results=len(self._results))
