"""MariaDB access for the SQL-backed routes.

Each handler opens its own connection and closes it when done; there is no
pooling.
"""

from typing import Any, Callable, Protocol, Sequence

import mysql.connector

from ..config.models import DatabaseSettings
from ..utils.logging import get_logger

logger = get_logger(__name__)

DatabaseError = mysql.connector.Error


class Connection(Protocol):
    def cursor(self, dictionary: bool = ...) -> Any: ...

    def commit(self) -> None: ...

    def close(self) -> None: ...


ConnectionFactory = Callable[[], Connection]


def connection_factory(settings: DatabaseSettings) -> ConnectionFactory:
    """Build a zero-argument callable opening a new connection per call."""

    def connect() -> Connection:
        logger.debug(f"Connecting to {settings.host}:{settings.port}/{settings.name}")
        return mysql.connector.connect(**settings.connect_args())

    return connect


def fetch_all(connect: ConnectionFactory, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
    """Run a query on a fresh connection and return rows as dicts."""
    conn = connect()
    try:
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(sql, tuple(params))
            return list(cursor.fetchall())
        finally:
            cursor.close()
    finally:
        conn.close()


def execute(connect: ConnectionFactory, sql: str, params: Sequence[Any] = ()) -> int:
    """Run a statement on a fresh connection, commit, and return the affected row count."""
    conn = connect()
    try:
        cursor = conn.cursor()
        try:
            cursor.execute(sql, tuple(params))
            conn.commit()
            return cursor.rowcount
        finally:
            cursor.close()
    finally:
        conn.close()
