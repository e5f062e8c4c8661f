"""
Tests for the Typesense adapter against a mocked client.
"""

import json
from unittest.mock import MagicMock

import pytest
from typesense.exceptions import ObjectNotFound

from car_query_builder.adapters.typesense import (
    CollectionIndexer,
    TypesenseCatalogReader,
    TypesenseSearchBackend,
    cars_schema,
    create_client,
)
from car_query_builder.adapters.typesense import client as client_module
from car_query_builder.core.errors import CatalogError, IndexingError

COLLECTION = {
    "name": "cars",
    "created_at": 1700000000,
    "metadata": {"msrp": "in USD"},
    "fields": [
        {"name": "make", "type": "string", "facet": True, "index": True},
        {"name": "year", "type": "int32", "facet": False, "index": True},
        {"name": "engine_hp", "type": "float", "facet": False, "index": True, "sort": True},
        {"name": "market_category", "type": "string[]", "facet": True, "index": True},
        {"name": "msrp", "type": "int32", "facet": False, "index": True},
        {"name": "notes", "type": "string", "facet": False, "index": False},
        {"name": ".*", "type": "auto"},
    ],
}


@pytest.fixture
def ts_client():
    client = MagicMock()
    collection = client.collections.__getitem__.return_value
    collection.retrieve.return_value = COLLECTION
    collection.documents.search.return_value = {
        "found": 3,
        "facet_counts": [
            {"field_name": "make", "counts": [{"value": "Ford", "count": 2}, {"value": "BMW", "count": 1}]},
            {"field_name": "market_category", "counts": [{"value": "Luxury", "count": 1}]},
        ],
        "hits": [],
    }
    return client


def collection_of(client):
    return client.collections.__getitem__.return_value


def test_reader_fields(ts_client):
    fields = TypesenseCatalogReader(ts_client, "cars").get_fields()

    assert [f.name for f in fields] == ["make", "year", "engine_hp", "market_category", "msrp", "notes"]
    by_name = {f.name: f for f in fields}
    assert by_name["make"].facet is True
    assert by_name["make"].sortable is False
    assert by_name["year"].sortable is True
    assert by_name["market_category"].sortable is False
    assert by_name["notes"].filterable is False
    assert by_name["notes"].sortable is False
    assert by_name["msrp"].description == "in USD"
    assert by_name["year"].description is None
    ts_client.collections.__getitem__.assert_called_with("cars")


def test_reader_missing_collection(ts_client):
    collection_of(ts_client).retrieve.side_effect = ObjectNotFound("Not Found")
    with pytest.raises(CatalogError, match="does not exist"):
        TypesenseCatalogReader(ts_client, "cars").get_fields()


def test_reader_facet_values(ts_client):
    reader = TypesenseCatalogReader(ts_client, "cars")
    values = reader.get_facet_values(["make", "market_category"], 21)

    assert values == {"make": ["Ford", "BMW"], "market_category": ["Luxury"]}
    collection_of(ts_client).documents.search.assert_called_once_with(
        {"q": "*", "facet_by": "make,market_category", "max_facet_values": 21, "per_page": 0}
    )


def test_reader_facet_values_without_fields(ts_client):
    assert TypesenseCatalogReader(ts_client, "cars").get_facet_values([], 20) == {}
    collection_of(ts_client).documents.search.assert_not_called()


def test_reader_facet_errors(ts_client):
    collection_of(ts_client).documents.search.side_effect = RuntimeError("timeout")
    with pytest.raises(CatalogError, match="timeout"):
        TypesenseCatalogReader(ts_client, "cars").get_facet_values(["make"], 20)


def test_reader_version(ts_client):
    assert TypesenseCatalogReader(ts_client, "cars").get_version() == "1700000000"


def test_search_backend_passes_parameters(ts_client):
    params = {"q": "*", "query_by": "make", "sort_by": "popularity:desc", "per_page": 12, "page": 1}
    response = TypesenseSearchBackend(ts_client, "cars").search(params)

    assert response["found"] == 3
    collection_of(ts_client).documents.search.assert_called_once_with(params)


def test_ensure_collection_creates_when_missing(ts_client):
    collection_of(ts_client).retrieve.side_effect = ObjectNotFound("Not Found")
    schema = cars_schema()

    assert CollectionIndexer(ts_client, schema).ensure_collection() is True
    ts_client.collections.create.assert_called_once_with(schema)


def test_ensure_collection_keeps_existing(ts_client):
    assert CollectionIndexer(ts_client, cars_schema()).ensure_collection() is False
    ts_client.collections.create.assert_not_called()
    collection_of(ts_client).delete.assert_not_called()


def test_force_reindex_recreates(ts_client):
    assert CollectionIndexer(ts_client, cars_schema()).ensure_collection(force_reindex=True) is True
    collection_of(ts_client).delete.assert_called_once()
    ts_client.collections.create.assert_called_once()


def test_create_failure(ts_client):
    collection_of(ts_client).retrieve.side_effect = ObjectNotFound("Not Found")
    ts_client.collections.create.side_effect = RuntimeError("bad schema")
    with pytest.raises(IndexingError, match="bad schema"):
        CollectionIndexer(ts_client, cars_schema()).ensure_collection()


def test_import_documents(ts_client, tmp_path):
    data = tmp_path / "cars.jsonl"
    data.write_text(
        "\n".join(json.dumps({"make": make}) for make in ("BMW", "Ford", "Audi")) + "\n\n",
        encoding="utf-8",
    )
    collection_of(ts_client).documents.import_.return_value = [
        {"success": True},
        {"success": True},
        {"success": False, "error": "Field `year` not found"},
    ]

    summary = CollectionIndexer(ts_client, cars_schema()).import_documents(data, batch_size=2)

    assert summary == {"imported": 2, "failed": 1}
    documents, options = collection_of(ts_client).documents.import_.call_args.args
    assert [d["make"] for d in documents] == ["BMW", "Ford", "Audi"]
    assert options == {"action": "create", "batch_size": 2}


def test_read_jsonl_reports_bad_lines(tmp_path):
    data = tmp_path / "cars.jsonl"
    data.write_text('{"make": "BMW"}\n{"make": \n', encoding="utf-8")
    with pytest.raises(IndexingError, match=":2:"):
        CollectionIndexer.read_jsonl(data)


def test_update_metadata(ts_client):
    CollectionIndexer(ts_client, cars_schema()).update_metadata({"msrp": "in USD"})
    collection_of(ts_client).update.assert_called_once_with({"metadata": {"msrp": "in USD"}})


def test_update_metadata_requires_collection(ts_client):
    collection_of(ts_client).retrieve.side_effect = ObjectNotFound("Not Found")
    with pytest.raises(IndexingError, match="Could not find collection"):
        CollectionIndexer(ts_client, cars_schema()).update_metadata({"msrp": "in USD"})


def test_cars_schema():
    schema = cars_schema("cars_v2")
    assert schema["name"] == "cars_v2"
    facets = [f["name"] for f in schema["fields"] if f.get("facet")]
    assert "make" in facets
    assert "year" not in facets


@pytest.mark.parametrize(
    "url, node",
    [
        ("http://localhost:8108", {"host": "localhost", "port": "8108", "protocol": "http"}),
        ("https://search.example.com", {"host": "search.example.com", "port": "443", "protocol": "https"}),
        (
            "https://example.com:9000/typesense/",
            {"host": "example.com", "port": "9000", "protocol": "https", "path": "/typesense"},
        ),
    ],
)
def test_create_client_parses_url(monkeypatch, url, node):
    captured = {}
    monkeypatch.setattr(client_module.typesense, "Client", lambda config: captured.setdefault("config", config))

    create_client(url, "xyz", connection_timeout_seconds=5)

    assert captured["config"] == {"nodes": [node], "api_key": "xyz", "connection_timeout_seconds": 5}


def test_create_client_rejects_bad_url():
    with pytest.raises(ValueError):
        create_client("not a url", "xyz")
