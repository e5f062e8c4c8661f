"""
Shared data models for the car query builder.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from car_query_builder.core.filter_syntax import (
    filter_fields,
    normalize_filter,
    parse_sort_by,
    render_sort_by,
)

MAX_SORT_FIELDS = 3

# Typesense ranks by text relevance under this name; it is sortable on every collection.
TEXT_MATCH_FIELD = "_text_match"


class FieldDescriptor(BaseModel):
    """A single collection field as the prompt describes it."""

    name: str
    data_type: str  # Typesense type: string, int32, float, string[], ...
    filterable: bool = True
    sortable: bool = False
    facet: bool = False
    enum_values: Optional[List[str]] = None
    has_more_values: bool = False  # facet values exceed the enumeration limit
    description: Optional[str] = None


class FieldCatalog(BaseModel):
    """Ordered field descriptors of one collection."""

    collection: str
    fields: List[FieldDescriptor] = Field(default_factory=list)
    version: Optional[str] = None

    def get(self, name: str) -> Optional[FieldDescriptor]:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        return None

    @property
    def filterable_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.filterable]

    @property
    def sortable_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.sortable]

    @property
    def facet_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.facet]


class StructuredQuery(BaseModel):
    """
    Search parameters generated from a natural-language request.

    Validated twice: once by the completion model's output schema (grammar only)
    and once by the translator with the field catalog in the validation context,
    which also restricts the referenced fields.
    """

    model_config = ConfigDict(extra="forbid")

    query: Optional[str] = Field(
        default=None,
        description="Free-text search term. Only set when filter_by and sort_by cannot express the request.",
    )
    filter_by: Optional[str] = Field(
        default=None,
        description="Typesense filter expression, e.g. make:[BMW,Honda] && year:>2014",
    )
    sort_by: Optional[str] = Field(
        default=None,
        description="Up to 3 comma separated field:asc|desc pairs, e.g. year:desc,msrp:asc",
    )

    @field_validator("query", "filter_by", "sort_by", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("filter_by")
    @classmethod
    def validate_filter_by(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None:
            return None
        normalized = normalize_filter(value)

        catalog = _catalog_from(info)
        if catalog is not None:
            for name in filter_fields(normalized):
                descriptor = catalog.get(name)
                if descriptor is None:
                    raise ValueError(f"Unknown field '{name}' in filter_by")
                if not descriptor.filterable:
                    raise ValueError(f"Field '{name}' is not filterable")
        return normalized

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None:
            return None
        pairs = parse_sort_by(value)
        if len(pairs) > MAX_SORT_FIELDS:
            raise ValueError(
                f"sort_by has {len(pairs)} fields, at most {MAX_SORT_FIELDS} are allowed"
            )

        catalog = _catalog_from(info)
        if catalog is not None:
            for name, _ in pairs:
                if name == TEXT_MATCH_FIELD:
                    continue
                descriptor = catalog.get(name)
                if descriptor is None:
                    raise ValueError(f"Unknown field '{name}' in sort_by")
                if not descriptor.sortable:
                    raise ValueError(f"Field '{name}' is not sortable")
        return render_sort_by(pairs)


def _catalog_from(info: ValidationInfo) -> Optional[FieldCatalog]:
    if isinstance(info.context, dict):
        return info.context.get("catalog")
    return None


class SearchParams(BaseModel):
    """Parameters of a single search request against the collection."""

    q: str = "*"
    query_by: str
    filter_by: str = ""
    sort_by: str
    per_page: int = 12
    page: int = 1

    def to_request(self) -> Dict[str, Any]:
        request = self.model_dump()
        if not request["filter_by"]:
            del request["filter_by"]
        return request


class SearchResult(BaseModel):
    """One page of matching documents."""

    found: int = 0
    page: int = 1
    per_page: int = 12
    hits: List[Dict[str, Any]] = Field(default_factory=list)
    next_page: Optional[int] = None
    search_time_ms: Optional[int] = None
    params: Optional[SearchParams] = None

    @model_validator(mode="after")
    def compute_next_page(self) -> "SearchResult":
        self.next_page = self.page + 1 if self.page * self.per_page < self.found else None
        return self


class SearchResponse(BaseModel):
    """A complete translate-and-search answer for one user request."""

    natural_language_query: str
    generated_query: StructuredQuery
    result: SearchResult


class LLMConfig(BaseModel):
    """Configuration for LLM client."""

    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.0
    max_tokens: Optional[int] = None
