#!/usr/bin/env python3
"""
Update the field descriptions stored in the cars collection metadata.

The descriptions appear in the prompt next to each field. The API caches the
field catalog indefinitely, so call POST /catalog/invalidate afterwards.
"""

import sys

from car_query_builder.adapters.typesense import (
    CollectionIndexer,
    DEFAULT_FIELD_DESCRIPTIONS,
    cars_schema,
    create_client,
)
from car_query_builder.config import AppConfig, configure_logging
from car_query_builder.core.errors import IndexingError


def main() -> int:
    config = AppConfig.from_env()
    configure_logging(config.log_level)

    client = create_client(
        config.typesense.url,
        config.typesense.admin_api_key or config.typesense.api_key,
        connection_timeout_seconds=config.typesense.connection_timeout_seconds,
    )
    indexer = CollectionIndexer(client, cars_schema(config.typesense.collection_name))

    try:
        indexer.update_metadata({**DEFAULT_FIELD_DESCRIPTIONS, **config.field_descriptions})
    except IndexingError as e:
        print(f"Metadata update failed: {e}", file=sys.stderr)
        return 1
    print("Completed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
