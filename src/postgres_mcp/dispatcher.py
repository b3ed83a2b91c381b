"""
Tool dispatcher.

Holds the static catalog of SQL tools and routes invocations to the
transaction lifecycle engine. The caller's SQL is passed through untouched.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from postgres_mcp.exceptions import UnknownToolError
from postgres_mcp.lifecycle import TransactionLifecycle
from postgres_mcp.policy import POLICIES, ToolName, TransactionPolicy
from postgres_mcp.serialization import dumps

if TYPE_CHECKING:
    from postgres_mcp.pool import ConnectionPool

logger = logging.getLogger(__name__)

SQL_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "sql": {"type": "string"},
    },
    "required": ["sql"],
}


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=lambda: copy.deepcopy(SQL_INPUT_SCHEMA))

    def clone(self) -> ToolSpec:
        return ToolSpec(self.name, self.description, copy.deepcopy(self.input_schema))


@dataclass(frozen=True)
class ToolResult:
    text: str


@dataclass(frozen=True)
class _Route:
    spec: ToolSpec
    policy: TransactionPolicy

    def format(self, value: Any) -> str:
        if self.policy.returns_rows:
            return dumps(value)
        return self.policy.success_message or str(value)


def _route(name: ToolName, description: str) -> _Route:
    policy = POLICIES[name]
    return _Route(spec=ToolSpec(name=name.value, description=description), policy=policy)


ROUTES: dict[ToolName, _Route] = {
    ToolName.QUERY: _route(ToolName.QUERY, "Run a read-only SQL query"),
    ToolName.CREATE: _route(ToolName.CREATE, "Run a create-table SQL query"),
    ToolName.INSERT: _route(ToolName.INSERT, "Run an insert-data SQL query"),
    ToolName.UPDATE: _route(ToolName.UPDATE, "Run an update-data SQL query"),
    ToolName.DELETE: _route(ToolName.DELETE, "Run a delete-data SQL query"),
}

TOOLS: tuple[ToolSpec, ...] = tuple(route.spec for route in ROUTES.values())


class ToolDispatcher:
    """Resolves tool names and runs them through the lifecycle engine."""

    def __init__(self, pool: ConnectionPool):
        self._lifecycle = TransactionLifecycle(pool)

    def list_tools(self) -> list[ToolSpec]:
        # Fresh copies so callers cannot alter the catalog.
        return [tool.clone() for tool in TOOLS]

    async def call_tool(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
    ) -> ToolResult:
        """
        Invoke tool ``name`` with ``arguments["sql"]``.

        Raises:
            UnknownToolError: ``name`` is not in the catalog; nothing is leased.
            ExecutionError: the database rejected the SQL.
            ConnectionAcquireError: no connection was available.
        """
        try:
            tool = ToolName(name)
        except ValueError:
            raise UnknownToolError(name) from None

        route = ROUTES[tool]
        sql = (arguments or {}).get("sql")
        logger.debug("Calling tool %s", tool.value)

        outcome = await self._lifecycle.run(route.policy, sql, tool_name=tool.value)
        value = outcome.unwrap()
        return ToolResult(text=route.format(value))
