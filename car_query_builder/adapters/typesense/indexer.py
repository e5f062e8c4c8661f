"""
Collection maintenance for Typesense.

Operator actions run once against a static dataset: create the schema,
optionally drop and recreate it, bulk-import JSONL records and update the
field descriptions stored in the collection metadata.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import typesense
from typesense.exceptions import ObjectNotFound

from car_query_builder.core.errors import IndexingError

logger = logging.getLogger(__name__)


class CollectionIndexer:
    """
    Creates and loads one Typesense collection.

    All actions are idempotent unless `force_reindex` is requested.
    """

    def __init__(self, client: typesense.Client, schema: Dict[str, Any]):
        """
        Initialize collection indexer.

        Args:
            client: Typesense client authenticated with an admin key
            schema: Collection schema (name, fields)
        """
        self.client = client
        self.schema = schema
        self.collection_name = schema["name"]

    def collection_exists(self) -> bool:
        try:
            self.client.collections[self.collection_name].retrieve()
        except ObjectNotFound:
            return False
        return True

    def ensure_collection(self, force_reindex: bool = False) -> bool:
        """
        Create the collection unless it already exists.

        Args:
            force_reindex: Drop an existing collection and create it again

        Returns:
            True if the collection was (re)created
        """
        if self.collection_exists():
            logger.info("Found existing collection '%s'", self.collection_name)
            if not force_reindex:
                logger.info("force_reindex is off, keeping the existing collection")
                return False
            logger.info("Deleting collection '%s'", self.collection_name)
            try:
                self.client.collections[self.collection_name].delete()
            except Exception as e:
                raise IndexingError(f"Could not delete collection '{self.collection_name}': {e}") from e

        logger.info("Creating schema for '%s'", self.collection_name)
        try:
            self.client.collections.create(self.schema)
        except Exception as e:
            raise IndexingError(f"Could not create collection '{self.collection_name}': {e}") from e
        return True

    @staticmethod
    def read_jsonl(path: Union[str, Path]) -> List[Dict[str, Any]]:
        """Read newline-delimited JSON records, skipping blank lines."""
        documents = []
        with Path(path).open(encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    documents.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise IndexingError(f"{path}:{line_number}: invalid JSON: {e}") from e
        return documents

    def import_documents(
        self, path: Union[str, Path], batch_size: int = 1000
    ) -> Dict[str, int]:
        """
        Bulk-import a JSONL dataset.

        Args:
            path: Path to the newline-delimited JSON file
            batch_size: Documents per import batch on the server

        Returns:
            Counts of imported and failed documents
        """
        documents = self.read_jsonl(path)
        logger.info("Indexing %d documents into '%s'", len(documents), self.collection_name)

        try:
            results = self.client.collections[self.collection_name].documents.import_(
                documents, {"action": "create", "batch_size": batch_size}
            )
        except Exception as e:
            raise IndexingError(f"Import into '{self.collection_name}' failed: {e}") from e

        failures = [r for r in results if not r.get("success")]
        for failure in failures[:5]:
            logger.warning("Document rejected: %s", failure.get("error"))

        summary = {"imported": len(results) - len(failures), "failed": len(failures)}
        logger.info("Import finished: %s", summary)
        return summary

    def update_metadata(self, metadata: Dict[str, str]) -> Dict[str, Any]:
        """
        Store free-text field descriptions in the collection metadata.

        Args:
            metadata: Mapping of field name to description

        Returns:
            The collection update response
        """
        if not self.collection_exists():
            raise IndexingError(f"Could not find collection: {self.collection_name}")

        logger.info("Updating collection metadata for '%s'", self.collection_name)
        try:
            return self.client.collections[self.collection_name].update({"metadata": metadata})
        except Exception as e:
            raise IndexingError(f"Could not update metadata of '{self.collection_name}': {e}") from e
