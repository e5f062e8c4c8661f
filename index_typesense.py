#!/usr/bin/env python3
"""
Create the cars collection in Typesense and import the dataset.

An existing collection is kept unless FORCE_REINDEX=true or --force-reindex
is given, in which case it is dropped and rebuilt.
"""

import argparse
import sys

from car_query_builder.adapters.typesense import (
    CollectionIndexer,
    DEFAULT_FIELD_DESCRIPTIONS,
    cars_schema,
    create_client,
)
from car_query_builder.config import AppConfig, configure_logging
from car_query_builder.core.errors import IndexingError

DEFAULT_DATASET = "./scripts/data/cars.jsonl"


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--data", default=DEFAULT_DATASET, help="Path to the JSONL dataset")
    parser.add_argument("--force-reindex", action="store_true", help="Drop and recreate the collection")
    args = parser.parse_args()

    config = AppConfig.from_env()
    configure_logging(config.log_level)

    client = create_client(
        config.typesense.url,
        config.typesense.admin_api_key or config.typesense.api_key,
        connection_timeout_seconds=config.typesense.connection_timeout_seconds,
    )
    indexer = CollectionIndexer(client, cars_schema(config.typesense.collection_name))

    try:
        created = indexer.ensure_collection(force_reindex=args.force_reindex or config.force_reindex)
        if not created:
            return 0
        indexer.import_documents(args.data)
        indexer.update_metadata(DEFAULT_FIELD_DESCRIPTIONS)
    except IndexingError as e:
        print(f"Indexing failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
