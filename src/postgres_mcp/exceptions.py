"""
postgres-mcp Exceptions.

Hierarchy:
    PostgresMCPError
    ├── ConfigurationError        missing/invalid startup parameter (fatal)
    ├── MalformedIdentifierError  resource URI does not end in /schema
    ├── UnknownToolError          tool name outside the fixed catalog
    ├── ConnectionAcquireError    the pool could not lend a connection
    └── ExecutionError            the database rejected or failed the SQL

Everything except ConfigurationError is scoped to a single request: the
protocol layer reports it to the caller and keeps serving.
"""

from __future__ import annotations

from typing import Any


class PostgresMCPError(Exception):
    """
    Base exception for all postgres-mcp errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for categorization
        context: Additional context dict for debugging
        original_error: The underlying exception if this wraps another error
    """

    default_code = "POSTGRES_MCP_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        original_error: BaseException | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.context = context or {}
        self.original_error = original_error

        # The message goes to the MCP client verbatim; context stays on the object.
        super().__init__(message)

        if original_error:
            self.__cause__ = original_error

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.error_code})"


class ConfigurationError(PostgresMCPError):
    """Raised when the server cannot start because of bad or missing settings."""

    default_code = "CONFIGURATION_ERROR"


class MalformedIdentifierError(PostgresMCPError):
    """Raised when a resource URI does not name a table schema."""

    default_code = "MALFORMED_IDENTIFIER"

    def __init__(self, uri: str, **kwargs: Any):
        context = kwargs.pop("context", {})
        context["uri"] = uri
        super().__init__("Invalid resource identifier", context=context, **kwargs)
        self.uri = uri


class UnknownToolError(PostgresMCPError):
    """Raised when a tool invocation names a tool outside the catalog."""

    default_code = "UNKNOWN_TOOL"

    def __init__(self, tool_name: str, **kwargs: Any):
        super().__init__(f"Unknown tool: {tool_name}", **kwargs)
        self.tool_name = tool_name


class ConnectionAcquireError(PostgresMCPError):
    """Raised when no database connection could be borrowed from the pool."""

    default_code = "CONNECTION_ACQUIRE_FAILED"

    def __init__(self, original_error: BaseException, **kwargs: Any):
        super().__init__(
            f"Could not acquire a database connection: {original_error}",
            original_error=original_error,
            **kwargs,
        )


class ExecutionError(PostgresMCPError):
    """
    Raised when the database rejects or fails a tool's SQL.

    The message is the driver's own message so the caller sees exactly what
    PostgreSQL reported; the driver exception is chained as ``__cause__``.
    """

    default_code = "EXECUTION_FAILED"

    def __init__(
        self,
        original_error: BaseException,
        tool_name: str | None = None,
        stage: str | None = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", {})
        if tool_name:
            context["tool"] = tool_name
        if stage:
            context["stage"] = stage
        super().__init__(
            str(original_error) or original_error.__class__.__name__,
            context=context,
            original_error=original_error,
            **kwargs,
        )
        self.tool_name = tool_name
        self.stage = stage
