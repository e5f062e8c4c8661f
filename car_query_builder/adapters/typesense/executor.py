"""
Typesense search backend.
"""

from typing import Any, Dict

import typesense


class TypesenseSearchBackend:
    """
    Runs document searches against one Typesense collection.

    Implements the ISearchBackend interface.
    """

    def __init__(self, client: typesense.Client, collection_name: str):
        self.client = client
        self.collection_name = collection_name

    def search(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.collections[self.collection_name].documents.search(params)
