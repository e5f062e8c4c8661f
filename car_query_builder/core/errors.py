"""
Exceptions raised by the car query builder.

Every failure that ends a search request derives from QueryBuilderError so
callers can surface it and offer a manual retry.
"""

from typing import Optional


class QueryBuilderError(Exception):
    """Base class for all query builder failures."""


class GenerationError(QueryBuilderError):
    """The completion service returned nothing, or output that failed validation."""

    def __init__(self, message: str, raw_output: Optional[object] = None):
        super().__init__(message)
        self.raw_output = raw_output


class SearchError(QueryBuilderError):
    """The search index could not be queried."""


class CatalogError(QueryBuilderError):
    """Collection fields or facet values could not be read."""


class InvalidParamsError(QueryBuilderError):
    """Client-supplied search parameters reference fields the catalog does not allow."""


class IndexingError(QueryBuilderError):
    """A maintenance action on the collection failed."""


class FilterSyntaxError(ValueError):
    """A filter_by or sort_by expression is not valid grammar."""

    def __init__(self, message: str, expression: str = "", position: Optional[int] = None):
        if position is not None:
            message = f"{message} (at position {position} in {expression!r})"
        super().__init__(message)
        self.expression = expression
        self.position = position
