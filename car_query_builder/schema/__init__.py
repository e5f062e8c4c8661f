"""Field catalog extraction and caching."""

from car_query_builder.schema.type_mappings import TypeMapper
from car_query_builder.schema.cache import EnrichmentCache
from car_query_builder.schema.extractor import CatalogExtractor

__all__ = ["TypeMapper", "EnrichmentCache", "CatalogExtractor"]
