"""Core interfaces, errors and models for the query builder."""

from car_query_builder.core.errors import (
    QueryBuilderError,
    GenerationError,
    SearchError,
    CatalogError,
    InvalidParamsError,
    IndexingError,
    FilterSyntaxError,
)
from car_query_builder.core.interfaces import (
    ICatalogReader,
    ICompletionService,
    ISearchBackend,
)
from car_query_builder.core.models import (
    FieldDescriptor,
    FieldCatalog,
    StructuredQuery,
    SearchParams,
    SearchResult,
    SearchResponse,
    LLMConfig,
)

__all__ = [
    "QueryBuilderError",
    "GenerationError",
    "SearchError",
    "CatalogError",
    "InvalidParamsError",
    "IndexingError",
    "FilterSyntaxError",
    "ICatalogReader",
    "ICompletionService",
    "ISearchBackend",
    "FieldDescriptor",
    "FieldCatalog",
    "StructuredQuery",
    "SearchParams",
    "SearchResult",
    "SearchResponse",
    "LLMConfig",
]
