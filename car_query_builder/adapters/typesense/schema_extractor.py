"""
Typesense catalog reading.

Implements ICatalogReader for Typesense.
"""

import logging
from typing import Any, Dict, List, Optional

import typesense
from typesense.exceptions import ObjectNotFound

from car_query_builder.core.errors import CatalogError
from car_query_builder.core.models import FieldDescriptor
from car_query_builder.schema.type_mappings import TypeMapper

logger = logging.getLogger(__name__)


class TypesenseCatalogReader:
    """
    Reads collection fields and facet values from Typesense.

    Implements the ICatalogReader interface. Field descriptions are taken
    from the collection metadata, a map of field name to description.
    """

    def __init__(self, client: typesense.Client, collection_name: str):
        """
        Initialize Typesense catalog reader.

        Args:
            client: Typesense client
            collection_name: Name of the collection to describe
        """
        self.client = client
        self.collection_name = collection_name
        self._collection: Optional[Dict[str, Any]] = None

    def retrieve_collection(self) -> Dict[str, Any]:
        """Fetch the collection schema and metadata."""
        try:
            self._collection = self.client.collections[self.collection_name].retrieve()
        except ObjectNotFound as e:
            raise CatalogError(f"Collection '{self.collection_name}' does not exist") from e
        except Exception as e:
            raise CatalogError(f"Could not retrieve collection '{self.collection_name}': {e}") from e
        return self._collection

    def get_fields(self) -> List[FieldDescriptor]:
        """
        Extract field descriptors from the collection schema.

        Returns:
            Descriptors in schema order; wildcard and auto fields are skipped
        """
        collection = self.retrieve_collection()
        metadata = collection.get("metadata") or {}

        descriptors = []
        for field in collection.get("fields", []):
            name = field.get("name", "")
            ts_type = field.get("type", "auto")
            if "*" in name or ts_type == "auto":
                continue

            indexed = field.get("index", True)
            descriptors.append(
                FieldDescriptor(
                    name=name,
                    data_type=ts_type,
                    filterable=indexed,
                    sortable=indexed and TypeMapper.default_sortable(ts_type, field.get("sort")),
                    facet=bool(field.get("facet", False)),
                    description=metadata.get(name) if isinstance(metadata.get(name), str) else None,
                )
            )
        return descriptors

    def get_facet_values(self, field_names: List[str], max_values: int) -> Dict[str, List[str]]:
        """
        Get the most frequent values of several facet fields.

        Args:
            field_names: Facet fields to enumerate
            max_values: Maximum number of values to return per field

        Returns:
            Dictionary mapping field name to its values
        """
        if not field_names:
            return {}

        try:
            response = self.client.collections[self.collection_name].documents.search(
                {
                    "q": "*",
                    "facet_by": ",".join(field_names),
                    "max_facet_values": max_values,
                    "per_page": 0,
                }
            )
        except Exception as e:
            raise CatalogError(f"Could not read facet values for {field_names}: {e}") from e

        values: Dict[str, List[str]] = {}
        for facet in response.get("facet_counts", []):
            values[facet["field_name"]] = [str(count["value"]) for count in facet.get("counts", [])]

        missing = [name for name in field_names if name not in values]
        if missing:
            logger.warning("No facet counts returned for %s", missing)
        return values

    def get_version(self) -> Optional[str]:
        collection = self._collection or self.retrieve_collection()
        created_at = collection.get("created_at")
        return str(created_at) if created_at is not None else None
