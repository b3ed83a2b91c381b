"""
Transaction lifecycle engine.

Runs one piece of caller-supplied SQL through:

    IDLE -> ACQUIRED -> TX_STARTED -> EXECUTED -> COMMITTED | ROLLED_BACK -> RELEASED

The connection is leased for exactly the duration of ``run`` and released on
every exit path, cancellation included. A failure while beginning, executing
or committing becomes the operation's error; the engine then rolls back once.
Rollback failures are recorded as ``CleanupWarning`` and logged; they never
replace the value or the error already determined.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from postgres_mcp.exceptions import ExecutionError
from postgres_mcp.serialization import records_to_dicts

if TYPE_CHECKING:
    from postgres_mcp.policy import TransactionPolicy
    from postgres_mcp.pool import ConnectionPool

logger = logging.getLogger(__name__)

COMMIT_SQL = "COMMIT"
ROLLBACK_SQL = "ROLLBACK"


class LifecycleState(StrEnum):
    IDLE = "idle"
    ACQUIRED = "acquired"
    TX_STARTED = "tx_started"
    EXECUTED = "executed"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    RELEASED = "released"


@dataclass
class CleanupWarning:
    """A rollback that failed. Diagnostic only."""

    stage: str
    error: BaseException

    def __str__(self) -> str:
        return f"rollback during {self.stage} failed: {self.error}"


@dataclass
class LifecycleOutcome:
    """Result of one lifecycle run: a value or an error, plus diagnostics."""

    value: Any = None
    error: ExecutionError | None = None
    states: list[LifecycleState] = field(default_factory=lambda: [LifecycleState.IDLE])
    warnings: list[CleanupWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, or raise the execution error."""
        if self.error is not None:
            raise self.error
        return self.value


class TransactionLifecycle:
    """Executes SQL on a leased connection under a ``TransactionPolicy``."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def run(
        self,
        policy: TransactionPolicy,
        sql: str,
        tool_name: str | None = None,
    ) -> LifecycleOutcome:
        """
        Run ``sql`` in a transaction shaped by ``policy``.

        Returns:
            LifecycleOutcome whose value is a list of row dicts when the policy
            returns rows, or the command status string otherwise.

        Raises:
            ConnectionAcquireError: if no connection could be leased.
            Database errors are captured in the outcome; only cancellation
            and pool release failures propagate.
        """
        outcome = LifecycleOutcome()

        async with self._pool.lease() as conn:
            outcome.states.append(LifecycleState.ACQUIRED)
            await self._drive(conn, policy, sql, tool_name, outcome)

        outcome.states.append(LifecycleState.RELEASED)
        return outcome

    async def _drive(
        self,
        conn: Any,
        policy: TransactionPolicy,
        sql: str,
        tool_name: str | None,
        outcome: LifecycleOutcome,
    ) -> None:
        # Set once a commit succeeds or a rollback has been attempted; never retried.
        closed = False
        stage = "begin"
        try:
            await conn.execute(policy.isolation_mode.begin_sql)
            outcome.states.append(LifecycleState.TX_STARTED)

            stage = "execute"
            if policy.returns_rows:
                outcome.value = records_to_dicts(await conn.fetch(sql))
            else:
                outcome.value = await conn.execute(sql)
            outcome.states.append(LifecycleState.EXECUTED)

            if policy.commit_on_success:
                stage = "commit"
                await conn.execute(COMMIT_SQL)
                closed = True
                outcome.states.append(LifecycleState.COMMITTED)
            else:
                closed = True
                await self._rollback(conn, outcome, "close")
        except Exception as exc:
            logger.info("Tool %s failed during %s: %s", tool_name, stage, exc)
            outcome.value = None
            outcome.error = ExecutionError(exc, tool_name=tool_name, stage=stage)
            if not closed:
                closed = True
                await self._rollback(conn, outcome, "failure")
        finally:
            # Reached unclosed only when the task is cancelled mid-transaction.
            if not closed:
                await self._rollback(conn, outcome, "cleanup")

    async def _rollback(self, conn: Any, outcome: LifecycleOutcome, stage: str) -> None:
        try:
            await conn.execute(ROLLBACK_SQL)
        except Exception as exc:
            logger.warning("Could not roll back transaction: %s", exc)
            outcome.warnings.append(CleanupWarning(stage=stage, error=exc))
        else:
            outcome.states.append(LifecycleState.ROLLED_BACK)
