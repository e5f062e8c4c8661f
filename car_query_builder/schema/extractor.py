"""
Field catalog enrichment.

Combines the collection fields, their facet values and free-text descriptions
into the FieldCatalog the prompt is built from.
"""

import logging
from typing import Dict, List, Optional

from car_query_builder.core.interfaces import ICatalogReader
from car_query_builder.core.models import FieldCatalog, FieldDescriptor
from car_query_builder.schema.cache import EnrichmentCache

logger = logging.getLogger(__name__)

DEFAULT_MAX_FACET_VALUES = 20


class CatalogExtractor:
    """
    Builds and caches the enriched field catalog.

    This class wraps a search-index specific catalog reader and adds facet
    enumeration, description merging and tag-based caching on top of it.
    """

    def __init__(
        self,
        reader: ICatalogReader,
        cache: Optional[EnrichmentCache] = None,
        max_facet_values: int = DEFAULT_MAX_FACET_VALUES,
        field_descriptions: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize catalog extractor.

        Args:
            reader: Search-index specific catalog reader
            cache: Cache shared across requests (a private one is created if omitted)
            max_facet_values: Maximum number of enum values listed per field
            field_descriptions: Extra field descriptions keyed by field name;
                these take precedence over descriptions stored in the collection
        """
        self.reader = reader
        self.cache = cache if cache is not None else EnrichmentCache()
        self.max_facet_values = max_facet_values
        self.field_descriptions = field_descriptions or {}

    @property
    def cache_tag(self) -> str:
        return f"collection_properties:{self.reader.collection_name}"

    def get_catalog(self, force_refresh: bool = False) -> FieldCatalog:
        """
        Get the enriched field catalog.

        Args:
            force_refresh: If True, invalidate the cache tag and rebuild

        Returns:
            Field catalog with enum values and descriptions
        """
        if force_refresh:
            self.invalidate()
        return self.cache.get_or_load(self.cache_tag, self.build_catalog)

    def invalidate(self) -> bool:
        return self.cache.invalidate(self.cache_tag)

    def build_catalog(self) -> FieldCatalog:
        """Read fields and facet values from the index, bypassing the cache."""
        fields = self.reader.get_fields()
        facet_names = [f.name for f in fields if f.facet]

        facet_values: Dict[str, List[str]] = {}
        if facet_names:
            # One extra value tells us whether the list was cut off.
            facet_values = self.reader.get_facet_values(facet_names, self.max_facet_values + 1)

        enriched = [self._enrich(descriptor, facet_values) for descriptor in fields]
        catalog = FieldCatalog(
            collection=self.reader.collection_name,
            fields=enriched,
            version=self.reader.get_version(),
        )
        logger.info(
            "Built field catalog for '%s': %d fields, %d with enum values",
            catalog.collection,
            len(catalog.fields),
            sum(1 for f in catalog.fields if f.enum_values),
        )
        return catalog

    def _enrich(
        self, descriptor: FieldDescriptor, facet_values: Dict[str, List[str]]
    ) -> FieldDescriptor:
        updates = {}

        description = self.field_descriptions.get(descriptor.name)
        if description:
            updates["description"] = description

        if descriptor.facet:
            values = [str(v) for v in facet_values.get(descriptor.name, [])]
            if len(values) > self.max_facet_values:
                logger.debug(
                    "Field '%s' has more than %d values", descriptor.name, self.max_facet_values
                )
                updates["has_more_values"] = True
                values = values[: self.max_facet_values]
            updates["enum_values"] = values

        return descriptor.model_copy(update=updates)
