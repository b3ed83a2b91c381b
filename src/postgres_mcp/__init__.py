"""
postgres-mcp - PostgreSQL over the Model Context Protocol.

Lists database tables as resources, serves their column schemas, and runs
caller-supplied SQL through five tools with a fixed transaction policy each.
"""

__version__ = "0.1.0"

from postgres_mcp.catalog import Resource, ResourceIdentifier, SchemaCatalog, parse_resource_uri
from postgres_mcp.config import ServerConfig
from postgres_mcp.dispatcher import ToolDispatcher, ToolResult, ToolSpec
from postgres_mcp.exceptions import (
    ConfigurationError,
    ConnectionAcquireError,
    ExecutionError,
    MalformedIdentifierError,
    PostgresMCPError,
    UnknownToolError,
)
from postgres_mcp.lifecycle import LifecycleOutcome, LifecycleState, TransactionLifecycle
from postgres_mcp.policy import POLICIES, IsolationMode, ToolName, TransactionPolicy
from postgres_mcp.pool import ConnectionPool

__all__ = [
    "__version__",
    "ConfigurationError",
    "ConnectionAcquireError",
    "ConnectionPool",
    "ExecutionError",
    "IsolationMode",
    "LifecycleOutcome",
    "LifecycleState",
    "MalformedIdentifierError",
    "POLICIES",
    "PostgresMCPError",
    "Resource",
    "ResourceIdentifier",
    "SchemaCatalog",
    "ServerConfig",
    "ToolDispatcher",
    "ToolName",
    "ToolResult",
    "ToolSpec",
    "TransactionLifecycle",
    "TransactionPolicy",
    "UnknownToolError",
    "parse_resource_uri",
]
