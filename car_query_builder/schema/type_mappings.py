"""
Type mapping utilities for Typesense field types.
"""

from typing import Optional


class TypeMapper:
    """Answers capability questions about Typesense field types."""

    NUMERIC_TYPES = {"int32", "int64", "float"}

    @classmethod
    def is_array(cls, ts_type: str) -> bool:
        return ts_type.endswith("[]")

    @classmethod
    def default_sortable(cls, ts_type: str, explicit: Optional[bool] = None) -> bool:
        """
        Whether Typesense sorts on the field.

        Numeric fields are sortable unless disabled; string fields only when
        `sort: true` was set in the schema; arrays never.
        """
        if cls.is_array(ts_type):
            return False
        if explicit is not None:
            return explicit
        return ts_type in cls.NUMERIC_TYPES
