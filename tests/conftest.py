"""
Test configuration and fixtures for the car query builder.
"""

from typing import Any, Dict, List, Optional

import pytest

from car_query_builder import QueryOrchestrator
from car_query_builder.core.models import FieldCatalog, FieldDescriptor

CAR_FIELDS = [
    FieldDescriptor(name="make", data_type="string", facet=True),
    FieldDescriptor(name="model", data_type="string", facet=True),
    FieldDescriptor(name="year", data_type="int32", sortable=True),
    FieldDescriptor(name="engine_fuel_type", data_type="string", facet=True),
    FieldDescriptor(name="engine_hp", data_type="float", sortable=True),
    FieldDescriptor(name="transmission_type", data_type="string", facet=True),
    FieldDescriptor(name="driven_wheels", data_type="string", facet=True),
    FieldDescriptor(name="market_category", data_type="string[]", facet=True),
    FieldDescriptor(name="highway_mpg", data_type="int32", sortable=True),
    FieldDescriptor(name="city_mpg", data_type="int32", sortable=True),
    FieldDescriptor(name="popularity", data_type="int32", sortable=True),
    FieldDescriptor(name="msrp", data_type="int32", sortable=True, description="in USD"),
    FieldDescriptor(name="vin", data_type="string", filterable=False),
]

FACET_VALUES = {
    "make": ["Chevrolet", "Ford", "Volkswagen", "Toyota", "Dodge", "Honda", "BMW"],
    "model": ["Silverado 1500", "Tundra", "F-150"],
    "engine_fuel_type": ["regular unleaded", "premium unleaded (required)", "electric"],
    "transmission_type": ["AUTOMATIC", "MANUAL", "AUTOMATED_MANUAL"],
    "driven_wheels": ["front wheel drive", "rear wheel drive", "all wheel drive", "four wheel drive"],
    "market_category": ["Luxury", "Performance", "Crossover"],
}


class FakeCatalogReader:
    """In-memory ICatalogReader that records how often it is called."""

    def __init__(
        self,
        fields: Optional[List[FieldDescriptor]] = None,
        facet_values: Optional[Dict[str, List[str]]] = None,
        collection_name: str = "cars",
    ):
        self.collection_name = collection_name
        self.fields = list(CAR_FIELDS if fields is None else fields)
        self.facet_values = FACET_VALUES if facet_values is None else facet_values
        self.field_calls = 0
        self.facet_calls: List[Dict[str, Any]] = []

    def get_fields(self) -> List[FieldDescriptor]:
        self.field_calls += 1
        return [f.model_copy() for f in self.fields]

    def get_facet_values(self, field_names: List[str], max_values: int) -> Dict[str, List[str]]:
        self.facet_calls.append({"field_names": field_names, "max_values": max_values})
        return {
            name: self.facet_values.get(name, [])[:max_values]
            for name in field_names
        }

    def get_version(self) -> Optional[str]:
        return "1"


class FakeCompletionService:
    """ICompletionService returning a canned output and recording prompts."""

    def __init__(self, output: Any = None, error: Optional[Exception] = None):
        self.output = output
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, system_prompt, user_prompt, output_type):
        self.calls.append(
            {"system_prompt": system_prompt, "user_prompt": user_prompt, "output_type": output_type}
        )
        if self.error is not None:
            raise self.error
        return self.output


class FakeSearchBackend:
    """ISearchBackend serving documents from a list."""

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None, found: Optional[int] = None,
                 error: Optional[Exception] = None):
        self.documents = documents or []
        self.found = len(self.documents) if found is None else found
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    def search(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.requests.append(params)
        if self.error is not None:
            raise self.error
        start = (params["page"] - 1) * params["per_page"]
        page_docs = self.documents[start:start + params["per_page"]]
        return {
            "found": self.found,
            "page": params["page"],
            "hits": [{"document": doc} for doc in page_docs],
            "search_time_ms": 1,
        }


def make_car(i: int) -> Dict[str, Any]:
    return {
        "id": str(i),
        "make": "BMW",
        "model": "M3",
        "year": 2015,
        "engine_fuel_type": "premium unleaded (required)",
        "engine_hp": 425.0,
        "engine_cylinders": 6,
        "transmission_type": "MANUAL",
        "driven_wheels": "rear wheel drive",
        "number_of_doors": 4,
        "market_category": ["Luxury", "High-Performance"],
        "vehicle_size": "Compact",
        "vehicle_style": "Sedan",
        "highway_mpg": 24,
        "city_mpg": 17,
        "popularity": 3916,
        "msrp": 62000,
    }


@pytest.fixture
def catalog() -> FieldCatalog:
    """Enriched catalog of the cars collection."""
    fields = []
    for descriptor in CAR_FIELDS:
        values = FACET_VALUES.get(descriptor.name) if descriptor.facet else None
        fields.append(descriptor.model_copy(update={"enum_values": values}))
    return FieldCatalog(collection="cars", fields=fields, version="1")


@pytest.fixture
def catalog_reader() -> FakeCatalogReader:
    return FakeCatalogReader()


@pytest.fixture
def search_backend() -> FakeSearchBackend:
    return FakeSearchBackend(documents=[make_car(i) for i in range(30)])


@pytest.fixture
def completion_service() -> FakeCompletionService:
    return FakeCompletionService(
        output={"query": None, "filter_by": "make:[BMW] && year:>2014", "sort_by": "year:desc"}
    )


@pytest.fixture
def orchestrator(catalog_reader, search_backend, completion_service) -> QueryOrchestrator:
    return QueryOrchestrator(
        catalog_reader=catalog_reader,
        search_backend=search_backend,
        completion_service=completion_service,
    )
