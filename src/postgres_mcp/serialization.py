"""JSON payload encoding for resource contents and query results."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

import orjson


def _default(obj: Any) -> Any:
    """Render values orjson does not handle natively."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(obj).hex()
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    # intervals (timedelta), ranges, geometric types, ...
    return str(obj)


def records_to_dicts(records: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Convert asyncpg ``Record`` rows into plain dicts, keeping column order."""
    return [dict(record.items()) for record in records]


def dumps(data: Any) -> str:
    """Serialize ``data`` as human-readable JSON indented by two spaces."""
    return orjson.dumps(
        data,
        default=_default,
        option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS,
    ).decode()
