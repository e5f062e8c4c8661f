"""
Abstract interfaces for the external services.

These protocols define the contract that the search index adapter and the
completion service must implement to work with the query builder.
"""

from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel

from car_query_builder.core.models import FieldDescriptor


class ICatalogReader(Protocol):
    """
    Read field information from the search index.

    Implementations return the collection's fields in schema order and the
    facet values needed to enumerate valid values in the prompt.
    """

    collection_name: str

    def get_fields(self) -> List[FieldDescriptor]:
        """
        Return the collection fields without enum values.

        Descriptions stored in the collection metadata are filled in.
        """
        ...

    def get_facet_values(self, field_names: List[str], max_values: int) -> Dict[str, List[str]]:
        """
        Get facet values for several fields in one request.

        Args:
            field_names: Facetable fields to enumerate
            max_values: Maximum number of values to return per field

        Returns:
            Dictionary mapping field name to its values, most frequent first
        """
        ...

    def get_version(self) -> Optional[str]:
        """Return an identifier of the current collection version, if any."""
        ...


class ICompletionService(Protocol):
    """
    Submit a system and user prompt to a language model.

    The model is constrained to return data matching `output_type`.
    """

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_type: type[BaseModel],
    ) -> Optional[Dict[str, Any]]:
        """
        Run one completion.

        Returns:
            The model output as a JSON-compatible dict, or None when the model
            produced nothing.

        Raises:
            GenerationError: If the model output did not match `output_type`
        """
        ...


class ISearchBackend(Protocol):
    """Execute search requests against the collection."""

    def search(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a search request.

        Args:
            params: Search parameters (q, query_by, filter_by, sort_by, per_page, page)

        Returns:
            Raw search response with `found`, `hits` and `page` keys
        """
        ...
