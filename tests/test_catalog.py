"""Tests for the schema catalog (resources/list and resources/read)."""

import json

import pytest

from postgres_mcp.catalog import (
    LIST_TABLES_SQL,
    TABLE_COLUMNS_SQL,
    SchemaCatalog,
    build_resource_uri,
    parse_resource_uri,
)
from postgres_mcp.exceptions import MalformedIdentifierError

BASE_URI = "postgres://alice@db.example.com:5432/shop"


class TestParseResourceUri:
    def test_table_and_suffix(self):
        identifier = parse_resource_uri(f"{BASE_URI}/users/schema")
        assert identifier.table_name == "users"
        assert identifier.suffix == "schema"

    def test_quoted_table_name_round_trips(self):
        uri = build_resource_uri(BASE_URI, "order items")
        assert uri == f"{BASE_URI}/order%20items/schema"
        assert parse_resource_uri(uri).table_name == "order items"

    @pytest.mark.parametrize(
        "uri",
        [
            f"{BASE_URI}/users/columns",
            f"{BASE_URI}/users/schema/",
            f"{BASE_URI}/users",
            "not a uri",
        ],
    )
    def test_malformed(self, uri):
        with pytest.raises(MalformedIdentifierError) as exc_info:
            parse_resource_uri(uri)
        assert str(exc_info.value) == "Invalid resource identifier"

    @pytest.mark.parametrize(
        "uri",
        [
            "postgres://localhost/schema",
            "postgres://alice@h/shop//schema",
        ],
    )
    def test_missing_table_name_is_empty(self, uri):
        """Only the suffix is validated; a missing table segment reads as an empty name."""
        identifier = parse_resource_uri(uri)
        assert identifier.table_name == ""
        assert identifier.suffix == "schema"


class TestListResources:
    @pytest.mark.asyncio
    async def test_one_resource_per_table(self, fake_pool, pool):
        fake_pool.connection_kwargs["rows"] = [
            {"table_name": "users"},
            {"table_name": "orders"},
        ]
        catalog = SchemaCatalog(pool, BASE_URI)

        resources = await catalog.list_resources()

        assert [r.uri for r in resources] == [
            f"{BASE_URI}/users/schema",
            f"{BASE_URI}/orders/schema",
        ]
        assert resources[0].name == '"users" database schema'
        assert all(r.mime_type == "application/json" for r in resources)
        assert fake_pool.last.executed == [LIST_TABLES_SQL]
        assert fake_pool.release_count == 1

    @pytest.mark.asyncio
    async def test_empty_database(self, fake_pool, pool):
        catalog = SchemaCatalog(pool, BASE_URI)
        assert await catalog.list_resources() == []


class TestReadResource:
    @pytest.mark.asyncio
    async def test_columns_as_json(self, fake_pool, pool):
        fake_pool.connection_kwargs["rows"] = [
            {"columnName": "id", "dataType": "integer"},
            {"columnName": "name", "dataType": "text"},
        ]
        catalog = SchemaCatalog(pool, BASE_URI)

        text = await catalog.read_resource(f"{BASE_URI}/users/schema")

        assert json.loads(text) == [
            {"columnName": "id", "dataType": "integer"},
            {"columnName": "name", "dataType": "text"},
        ]
        assert '\n  {\n    "columnName": "id"' in text
        assert fake_pool.last.executed == [TABLE_COLUMNS_SQL]
        assert fake_pool.last.fetch_args == [("users",)]

    @pytest.mark.asyncio
    async def test_unknown_table_is_empty_not_error(self, fake_pool, pool):
        catalog = SchemaCatalog(pool, BASE_URI)

        text = await catalog.read_resource(f"{BASE_URI}/no_such_table/schema")

        assert json.loads(text) == []

    @pytest.mark.asyncio
    async def test_malformed_uri_touches_no_connection(self, fake_pool, pool):
        catalog = SchemaCatalog(pool, BASE_URI)

        with pytest.raises(MalformedIdentifierError):
            await catalog.read_resource(f"{BASE_URI}/users/data")

        assert fake_pool.acquire_count == 0
        assert fake_pool.connections == []

    @pytest.mark.asyncio
    async def test_missing_table_name_reads_empty_column_list(self, fake_pool, pool):
        catalog = SchemaCatalog(pool, BASE_URI)

        text = await catalog.read_resource("postgres://localhost/schema")

        assert json.loads(text) == []
        assert fake_pool.last.fetch_args == [("",)]
