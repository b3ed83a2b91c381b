"""
Schema catalog - tables as MCP resources.

Every table in the ``public`` schema is listed as one resource:

    postgres://user@host:5432/dbname/<table>/schema

Reading that URI returns the table's columns as JSON. Only the last path
segment is checked: it must be the ``schema`` marker, or the URI is rejected
before the database is touched. The segment before it is the table name, and
an absent or empty one reads as an empty column list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote, urlsplit

from postgres_mcp.exceptions import MalformedIdentifierError
from postgres_mcp.serialization import dumps, records_to_dicts

if TYPE_CHECKING:
    from postgres_mcp.pool import ConnectionPool

logger = logging.getLogger(__name__)

SCHEMA_PATH = "schema"
RESOURCE_MIME_TYPE = "application/json"

LIST_TABLES_SQL = (
    "SELECT table_name FROM information_schema.tables WHERE table_schema = 'public'"
)
# Filtered by name only, so an unknown table yields no rows rather than an error.
TABLE_COLUMNS_SQL = (
    'SELECT column_name AS "columnName", data_type AS "dataType" '
    "FROM information_schema.columns WHERE table_name = $1"
)


@dataclass(frozen=True)
class Resource:
    uri: str
    name: str
    mime_type: str = RESOURCE_MIME_TYPE


@dataclass(frozen=True)
class ResourceIdentifier:
    table_name: str
    suffix: str


def build_resource_uri(base_uri: str, table_name: str) -> str:
    return f"{base_uri.rstrip('/')}/{quote(table_name, safe='')}/{SCHEMA_PATH}"


def parse_resource_uri(uri: str) -> ResourceIdentifier:
    """Split ``uri`` into its table name and suffix, validating the suffix."""
    segments = urlsplit(str(uri)).path.split("/")
    suffix = unquote(segments[-1])
    if suffix != SCHEMA_PATH:
        raise MalformedIdentifierError(str(uri))

    table_name = unquote(segments[-2]) if len(segments) > 1 else ""
    return ResourceIdentifier(table_name=table_name, suffix=suffix)


class SchemaCatalog:
    """Answers resource listing and schema reads."""

    def __init__(self, pool: ConnectionPool, base_uri: str):
        self._pool = pool
        self._base_uri = base_uri

    async def list_resources(self) -> list[Resource]:
        async with self._pool.lease() as conn:
            rows = await conn.fetch(LIST_TABLES_SQL)

        return [
            Resource(
                uri=build_resource_uri(self._base_uri, row["table_name"]),
                name=f'"{row["table_name"]}" database schema',
            )
            for row in rows
        ]

    async def read_resource(self, uri: str) -> str:
        """Return the JSON column list (``columnName``/``dataType``) for ``uri``."""
        identifier = parse_resource_uri(uri)

        async with self._pool.lease() as conn:
            rows = await conn.fetch(TABLE_COLUMNS_SQL, identifier.table_name)

        logger.debug("Read schema for table %s (%d columns)", identifier.table_name, len(rows))
        return dumps(records_to_dicts(rows))
