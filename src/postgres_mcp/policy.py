"""
Transaction policies for the SQL tools.

Each tool runs its SQL inside one transaction. The policy decides the
transaction's access mode and what happens after the SQL succeeds: commit,
or close the transaction by rolling back. A failed execution is always rolled
back.

    tool    mode        on success
    query   READ ONLY   rollback
    create  READ WRITE  commit
    update  READ WRITE  commit
    insert  READ WRITE  rollback   (no commit, see below)
    delete  READ WRITE  rollback   (no commit, see below)

insert and delete do not commit, so their changes are discarded when the
transaction closes. This is the server's established behaviour and the tests
pin it. Making them durable means flipping ``commit_on_success`` in
``POLICIES`` for those two tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ToolName(StrEnum):
    """The fixed set of SQL tools."""

    QUERY = "query"
    CREATE = "create"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class IsolationMode(StrEnum):
    """Transaction access mode."""

    READ_ONLY = "read_only"
    READ_WRITE = "read_write"

    @property
    def begin_sql(self) -> str:
        if self is IsolationMode.READ_ONLY:
            return "BEGIN TRANSACTION READ ONLY"
        return "BEGIN TRANSACTION"


@dataclass(frozen=True)
class TransactionPolicy:
    """How a tool's transaction is opened and closed."""

    isolation_mode: IsolationMode
    commit_on_success: bool
    returns_rows: bool = False
    success_message: str | None = None


POLICIES: dict[ToolName, TransactionPolicy] = {
    ToolName.QUERY: TransactionPolicy(
        isolation_mode=IsolationMode.READ_ONLY,
        commit_on_success=False,
        returns_rows=True,
    ),
    ToolName.CREATE: TransactionPolicy(
        isolation_mode=IsolationMode.READ_WRITE,
        commit_on_success=True,
        success_message="Table created successfully",
    ),
    ToolName.INSERT: TransactionPolicy(
        isolation_mode=IsolationMode.READ_WRITE,
        commit_on_success=False,
        success_message="Data inserted successfully",
    ),
    ToolName.UPDATE: TransactionPolicy(
        isolation_mode=IsolationMode.READ_WRITE,
        commit_on_success=True,
        success_message="Data updated successfully",
    ),
    ToolName.DELETE: TransactionPolicy(
        isolation_mode=IsolationMode.READ_WRITE,
        commit_on_success=False,
        success_message="Data deleted successfully",
    ),
}
