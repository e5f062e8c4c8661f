"""
Query orchestrator - main entry point.

Coordinates catalog enrichment, translation and search to answer a
natural-language car search.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from car_query_builder.config import AppConfig
from car_query_builder.core.errors import InvalidParamsError
from car_query_builder.core.interfaces import ICatalogReader, ICompletionService, ISearchBackend
from car_query_builder.core.models import (
    FieldCatalog,
    SearchParams,
    SearchResponse,
    SearchResult,
    StructuredQuery,
)
from car_query_builder.execution.executor import DEFAULT_PER_PAGE, DEFAULT_SORT_BY, SearchExecutor
from car_query_builder.query.translator import QueryTranslator
from car_query_builder.schema.cache import EnrichmentCache
from car_query_builder.schema.extractor import DEFAULT_MAX_FACET_VALUES, CatalogExtractor

logger = logging.getLogger(__name__)


class QueryOrchestrator:
    """
    Main orchestrator for natural-language search.

    One request runs strictly in order: translate, then search. A failed
    translation raises before any search is issued. The enriched field
    catalog is the only state shared between requests.
    """

    def __init__(
        self,
        catalog_reader: ICatalogReader,
        search_backend: ISearchBackend,
        completion_service: ICompletionService,
        field_descriptions: Optional[Dict[str, str]] = None,
        max_facet_values: int = DEFAULT_MAX_FACET_VALUES,
        query_by: Optional[List[str]] = None,
        default_sort_by: str = DEFAULT_SORT_BY,
        per_page: int = DEFAULT_PER_PAGE,
        cache: Optional[EnrichmentCache] = None,
    ):
        """
        Initialize query orchestrator with service adapters.

        Args:
            catalog_reader: Search-index specific catalog reader
            search_backend: Search-index specific search backend
            completion_service: Language model used for translation
            field_descriptions: Extra field descriptions for the prompt
            max_facet_values: Maximum number of enum values listed per field
            query_by: Text fields used for free-text matching
            default_sort_by: Sort order when the generated query has none
            per_page: Page size
            cache: Enrichment cache (shared between orchestrators if given)
        """
        self.catalog_extractor = CatalogExtractor(
            catalog_reader,
            cache=cache,
            max_facet_values=max_facet_values,
            field_descriptions=field_descriptions,
        )
        self.translator = QueryTranslator(completion_service)
        self.search_executor = SearchExecutor(
            search_backend,
            query_by=query_by,
            default_sort_by=default_sort_by,
            per_page=per_page,
        )

    @classmethod
    def from_typesense(
        cls,
        config: AppConfig,
        completion_service: Optional[ICompletionService] = None,
    ) -> "QueryOrchestrator":
        """
        Create orchestrator for Typesense.

        Args:
            config: Application configuration
            completion_service: Language model; built from `config.llm` if omitted

        Returns:
            Configured QueryOrchestrator for Typesense
        """
        from car_query_builder.adapters.typesense import (
            TypesenseCatalogReader,
            TypesenseSearchBackend,
            create_client,
        )

        if completion_service is None:
            from car_query_builder.llm.client_factory import LLMClientFactory

            completion_service = LLMClientFactory(
                model_name=config.llm.model,
                api_key=config.llm.api_key,
                base_url=config.llm.base_url,
                model_settings={"temperature": config.llm.temperature},
            )

        client = create_client(
            config.typesense.url,
            config.typesense.api_key,
            connection_timeout_seconds=config.typesense.connection_timeout_seconds,
        )
        collection = config.typesense.collection_name

        return cls(
            catalog_reader=TypesenseCatalogReader(client, collection),
            search_backend=TypesenseSearchBackend(client, collection),
            completion_service=completion_service,
            field_descriptions=config.field_descriptions,
            max_facet_values=config.max_facet_values,
            query_by=config.query_by,
            default_sort_by=config.default_sort_by,
            per_page=config.per_page,
        )

    def get_catalog(self, force_refresh: bool = False) -> FieldCatalog:
        """
        Get the enriched field catalog.

        Args:
            force_refresh: If True, invalidate the cache tag and rebuild
        """
        return self.catalog_extractor.get_catalog(force_refresh=force_refresh)

    def invalidate_catalog(self) -> bool:
        return self.catalog_extractor.invalidate()

    async def translate(self, natural_language_query: str) -> StructuredQuery:
        """
        Translate a natural-language query without searching.

        Raises:
            GenerationError: If the model output was missing or invalid
            CatalogError: If the field catalog could not be built
        """
        catalog = await asyncio.to_thread(self.get_catalog)
        return await self.translator.translate(natural_language_query, catalog)

    async def query(self, natural_language_query: str, page: int = 1) -> SearchResponse:
        """
        Translate a natural-language query and run the search.

        Args:
            natural_language_query: Non-empty user query
            page: Page to fetch

        Returns:
            The generated query together with the first page of results

        Raises:
            GenerationError: If translation failed; no search is issued
            SearchError: If the search request failed
        """
        structured_query = await self.translate(natural_language_query)

        params = self.search_executor.build_params(structured_query, page=page)
        result = await asyncio.to_thread(self.search_executor.execute, params)

        return SearchResponse(
            natural_language_query=natural_language_query,
            generated_query=structured_query,
            result=result,
        )

    async def load_more(self, params: SearchParams, page: int) -> SearchResult:
        """
        Fetch another page of an earlier search.

        The query is not translated again. The given parameters come from the
        client, so their filter_by and sort_by are checked against the field
        catalog the same way a generated query is.

        Raises:
            InvalidParamsError: If the parameters use unknown or disallowed fields
            SearchError: If the search request failed
        """
        catalog = await asyncio.to_thread(self.get_catalog)
        try:
            checked = StructuredQuery.model_validate(
                {"filter_by": params.filter_by, "sort_by": params.sort_by},
                context={"catalog": catalog},
            )
        except ValidationError as e:
            raise InvalidParamsError(f"Search parameters failed validation: {e}") from e

        params = params.model_copy(
            update={"filter_by": checked.filter_by or "", "sort_by": checked.sort_by or params.sort_by}
        )
        return await asyncio.to_thread(self.search_executor.execute_page, params, page)
