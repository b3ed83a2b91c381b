"""Server configuration.

The only required setting is the database URL, given as the single positional
argument or through ``DATABASE_URL``. Everything else has an environment
variable and a default.
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit

from postgres_mcp.exceptions import ConfigurationError

DEFAULT_POOL_MIN_SIZE = 1
DEFAULT_POOL_MAX_SIZE = 10
DEFAULT_COMMAND_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"

RESOURCE_SCHEME = "postgres"
SUPPORTED_SCHEMES = ("postgres", "postgresql")

MISSING_URL_MESSAGE = "Please provide a database URL as a command-line argument"


def resource_base_uri(database_url: str) -> str:
    """
    Build the base address for resource URIs from a connection URL.

    The scheme becomes ``postgres``; the password, query string and fragment
    are dropped so no credential can leak into an identifier handed to the
    client. A trailing slash is stripped.
    """
    parts = urlsplit(database_url)
    userinfo, at, hostport = parts.netloc.rpartition("@")
    if at:
        username = userinfo.split(":", 1)[0]
        netloc = f"{username}@{hostport}" if username else hostport
    else:
        netloc = hostport
    return urlunsplit((RESOURCE_SCHEME, netloc, parts.path.rstrip("/"), "", ""))


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="postgres-mcp",
        description="PostgreSQL MCP Server",
    )

    parser.add_argument(
        "database_url",
        nargs="?",
        default=os.getenv("DATABASE_URL"),
        help="PostgreSQL connection URL (default: $DATABASE_URL)",
    )

    parser.add_argument(
        "--pool-min-size",
        type=int,
        default=_env_int("POSTGRES_POOL_MIN_SIZE", DEFAULT_POOL_MIN_SIZE),
        help="Connections opened when the pool starts",
    )

    parser.add_argument(
        "--pool-max-size",
        type=int,
        default=_env_int("POSTGRES_POOL_MAX_SIZE", DEFAULT_POOL_MAX_SIZE),
        help="Upper bound on concurrently leased connections",
    )

    parser.add_argument(
        "--command-timeout",
        type=float,
        default=_env_float("POSTGRES_COMMAND_TIMEOUT", DEFAULT_COMMAND_TIMEOUT),
        help="Per-statement timeout in seconds",
    )

    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )

    return parser


@dataclass(frozen=True)
class ServerConfig:
    """Validated startup settings."""

    database_url: str = field(repr=False)
    pool_min_size: int = DEFAULT_POOL_MIN_SIZE
    pool_max_size: int = DEFAULT_POOL_MAX_SIZE
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ConfigurationError(MISSING_URL_MESSAGE)

        scheme = urlsplit(self.database_url).scheme
        if scheme not in SUPPORTED_SCHEMES:
            raise ConfigurationError(
                "Database URL must use the postgres:// or postgresql:// scheme",
                context={"scheme": scheme},
            )

        if self.pool_min_size < 0 or self.pool_max_size < 1:
            raise ConfigurationError("Pool sizes must be positive")
        if self.pool_min_size > self.pool_max_size:
            raise ConfigurationError(
                "Pool minimum size cannot exceed its maximum size",
                context={"min": self.pool_min_size, "max": self.pool_max_size},
            )
        if self.command_timeout <= 0:
            raise ConfigurationError("Command timeout must be positive")

    @property
    def resource_base_uri(self) -> str:
        return resource_base_uri(self.database_url)

    @classmethod
    def from_args(cls, argv: Sequence[str] | None = None) -> ServerConfig:
        """Parse command-line arguments (falling back to the environment)."""
        args = build_parser().parse_args(argv)
        return cls(
            database_url=args.database_url or "",
            pool_min_size=args.pool_min_size,
            pool_max_size=args.pool_max_size,
            command_timeout=args.command_timeout,
            log_level=args.log_level.upper(),
        )
