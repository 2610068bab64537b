"""
db/database.py
--------------
Query facade over the connection pool.

Repositories never touch connections directly; they issue parameterized
statements through three primitives:

    query_row(sql, params, ctx)  -> first row or None
    query(sql, params, ctx)      -> all rows
    execute(sql, params, ctx)    -> affected row count

Each call checks out one connection, runs one statement inside its own
transaction, commits (or rolls back on error) and returns the connection.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

import psycopg2
from psycopg2 import errors as pg_errors

from config import DB_STATEMENT_TIMEOUT_MS
from db.connection import get_connection, release_connection
from db.context import QueryContext
from utils.errors import OperationCancelled
from utils.logger import get_logger

logger = get_logger(__name__)

Params = Optional[Sequence[Any]]


class Database:
    """
    Thin wrapper that runs one parameterized statement per call.

    Args:
        statement_timeout_ms: Upper bound applied to every statement
            (0 = none). A QueryContext deadline can only shorten it.
    """

    def __init__(self, statement_timeout_ms: int = DB_STATEMENT_TIMEOUT_MS):
        self.statement_timeout_ms = statement_timeout_ms

    # ── PRIMITIVES ────────────────────────────────────────

    def query_row(self, sql: str, params: Params = None, ctx: Optional[QueryContext] = None) -> Optional[tuple]:
        """Run a statement and return its first row, or None if it produced none."""
        with self._cursor(ctx) as cur:
            cur.execute(sql, params)
            return cur.fetchone()

    def query(self, sql: str, params: Params = None, ctx: Optional[QueryContext] = None) -> list[tuple]:
        """Run a statement and return every row it produced."""
        with self._cursor(ctx) as cur:
            cur.execute(sql, params)
            return cur.fetchall()

    def execute(self, sql: str, params: Params = None, ctx: Optional[QueryContext] = None) -> int:
        """Run a statement and return the number of rows it affected."""
        with self._cursor(ctx) as cur:
            cur.execute(sql, params)
            return cur.rowcount

    # ── HELPERS ───────────────────────────────────────────

    def _timeout_ms(self, ctx: Optional[QueryContext]) -> int:
        timeout = self.statement_timeout_ms
        remaining = ctx.remaining() if ctx is not None else None
        if remaining is not None:
            remaining_ms = max(1, int(remaining * 1000))
            timeout = remaining_ms if timeout <= 0 else min(timeout, remaining_ms)
        return timeout

    @contextmanager
    def _cursor(self, ctx: Optional[QueryContext]) -> Iterator:
        if ctx is not None:
            ctx.check("query")

        conn = get_connection()
        interrupt = conn.cancel
        if ctx is not None:
            # a cancel while the statement runs asks the server to abort it
            ctx.on_cancel(interrupt)
        try:
            if ctx is not None:
                ctx.check("query")
            with conn.cursor() as cur:
                timeout = self._timeout_ms(ctx)
                if timeout > 0:
                    cur.execute("SET LOCAL statement_timeout = %s", (timeout,))
                yield cur
            conn.commit()
        except pg_errors.QueryCanceled as e:
            conn.rollback()
            if ctx is not None and ctx.cancelled:
                logger.warning("Statement cancelled on request.")
                raise OperationCancelled("query cancelled") from e
            logger.warning("Statement cancelled by the server (statement timeout).")
            raise OperationCancelled("query cancelled: statement timeout exceeded") from e
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Database error ({type(e).__name__}): {e.pgerror or e}")
            raise
        except Exception:
            conn.rollback()
            raise
        finally:
            if ctx is not None:
                ctx.remove_cancel_callback(interrupt)
            release_connection(conn)
