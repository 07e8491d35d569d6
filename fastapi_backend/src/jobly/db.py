import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

import psycopg2
import psycopg2.extras
from psycopg2.pool import ThreadedConnectionPool

from jobly import config

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$(\d+)")

_POOL: Optional[ThreadedConnectionPool] = None


# PUBLIC_INTERFACE
def init_db_pool() -> None:
    """Initialize the global PostgreSQL connection pool."""
    global _POOL
    if _POOL is not None:
        return

    minconn, maxconn = config.pool_bounds()
    _POOL = ThreadedConnectionPool(minconn=minconn, maxconn=maxconn, dsn=config.database_dsn())
    logger.info("Database pool ready (min=%s, max=%s)", minconn, maxconn)


# PUBLIC_INTERFACE
def close_db_pool() -> None:
    """Close every pooled connection."""
    global _POOL
    if _POOL is None:
        return
    _POOL.closeall()
    _POOL = None


def to_pyformat(query: str, params: Optional[Sequence[Any]]) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite ``$1``-style positional placeholders into psycopg2 named ones.

    Literal ``%`` in the query text is doubled so psycopg2 does not read it
    as a format directive. ``$N`` maps to ``params[N - 1]``.
    """
    params = list(params or [])
    text = _PLACEHOLDER.sub(lambda m: f"%(p{m.group(1)})s", query.replace("%", "%%"))
    return text, {f"p{i}": value for i, value in enumerate(params, start=1)}


@contextmanager
def _get_conn():
    if _POOL is None:
        init_db_pool()
    assert _POOL is not None
    conn = _POOL.getconn()
    try:
        yield conn
    finally:
        _POOL.putconn(conn)


def _dict_cursor(conn):
    return conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)


# PUBLIC_INTERFACE
def fetch_one(query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
    """Fetch a single row as a dict, or None."""
    text, named = to_pyformat(query, params)
    with _get_conn() as conn:
        with _dict_cursor(conn) as cur:
            cur.execute(text, named)
            row = cur.fetchone()
            conn.rollback()
            return dict(row) if row else None


# PUBLIC_INTERFACE
def fetch_all(query: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
    """Fetch all rows as dicts."""
    text, named = to_pyformat(query, params)
    with _get_conn() as conn:
        with _dict_cursor(conn) as cur:
            cur.execute(text, named)
            rows = cur.fetchall()
            conn.rollback()
            return [dict(r) for r in rows]


# PUBLIC_INTERFACE
def execute_returning(query: str, params: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
    """Execute a statement with RETURNING and return the first row as dict, or None."""
    text, named = to_pyformat(query, params)
    with _get_conn() as conn:
        try:
            with _dict_cursor(conn) as cur:
                cur.execute(text, named)
                row = cur.fetchone()
            conn.commit()
        except psycopg2.Error:
            conn.rollback()
            raise
        return dict(row) if row else None
