"""Typesense adapter for the query builder."""

from car_query_builder.adapters.typesense.client import create_client
from car_query_builder.adapters.typesense.schema_extractor import TypesenseCatalogReader
from car_query_builder.adapters.typesense.executor import TypesenseSearchBackend
from car_query_builder.adapters.typesense.indexer import CollectionIndexer
from car_query_builder.adapters.typesense.car_schema import (
    CARS_COLLECTION_NAME,
    DEFAULT_FIELD_DESCRIPTIONS,
    cars_schema,
)

__all__ = [
    "create_client",
    "TypesenseCatalogReader",
    "TypesenseSearchBackend",
    "CollectionIndexer",
    "CARS_COLLECTION_NAME",
    "DEFAULT_FIELD_DESCRIPTIONS",
    "cars_schema",
]
