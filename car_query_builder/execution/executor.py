"""
Search execution coordinator.

Turns a StructuredQuery into search parameters and runs them through the
search backend.
"""

import logging
from typing import List, Optional

from car_query_builder.core.errors import SearchError
from car_query_builder.core.interfaces import ISearchBackend
from car_query_builder.core.models import SearchParams, SearchResult, StructuredQuery

logger = logging.getLogger(__name__)

DEFAULT_QUERY_BY = ["make", "model", "market_category"]
DEFAULT_SORT_BY = "popularity:desc"
DEFAULT_PER_PAGE = 12


class SearchExecutor:
    """
    Coordinates search execution.

    Wraps a search backend, fills in default parameters and normalizes
    responses into SearchResult pages.
    """

    def __init__(
        self,
        backend: ISearchBackend,
        query_by: Optional[List[str]] = None,
        default_sort_by: str = DEFAULT_SORT_BY,
        per_page: int = DEFAULT_PER_PAGE,
    ):
        """
        Initialize search executor.

        Args:
            backend: Search-index specific backend
            query_by: Text fields used for free-text matching
            default_sort_by: Sort order when the generated query has none
            per_page: Page size
        """
        self.backend = backend
        self.query_by = query_by or DEFAULT_QUERY_BY
        self.default_sort_by = default_sort_by
        self.per_page = per_page

    def build_params(self, structured_query: StructuredQuery, page: int = 1) -> SearchParams:
        """
        Build search parameters from a generated query.

        Missing parts fall back to a match-all query sorted by popularity.
        """
        return SearchParams(
            q=structured_query.query or "*",
            query_by=",".join(self.query_by),
            filter_by=structured_query.filter_by or "",
            sort_by=structured_query.sort_by or self.default_sort_by,
            per_page=self.per_page,
            page=page,
        )

    def execute(self, params: SearchParams) -> SearchResult:
        """
        Run one search request.

        Args:
            params: Search parameters

        Returns:
            One page of results

        Raises:
            SearchError: If the backend request failed
        """
        try:
            response = self.backend.search(params.to_request())
        except SearchError:
            raise
        except Exception as e:
            logger.error("Search failed for %s: %s", params.to_request(), e)
            raise SearchError(f"Search request failed: {e}") from e

        result = SearchResult(
            found=response.get("found", 0),
            page=response.get("page", params.page),
            per_page=params.per_page,
            hits=[hit.get("document", {}) for hit in response.get("hits", [])],
            search_time_ms=response.get("search_time_ms"),
            params=params,
        )
        logger.info("Search page %d returned %d of %d results", result.page, len(result.hits), result.found)
        return result

    def execute_page(self, params: SearchParams, page: int) -> SearchResult:
        """Fetch another page for parameters that were already generated."""
        return self.execute(params.model_copy(update={"page": page}))
