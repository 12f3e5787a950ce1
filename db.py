# db.py
# PostgreSQL access for one ConnectionProfile (pooled psycopg2 connections)

import logging
from contextlib import contextmanager

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

import config
from errors import DatabaseConnectionError
from models import ConnectionProfile

logger = logging.getLogger(__name__)


class Database:
    """Connection pool bound to a single database target.

    One instance per session; it is closed when the session disconnects.
    """

    def __init__(self, profile: ConnectionProfile, max_rows: int = None):
        self.profile = profile
        self.max_rows = max_rows or config.MAX_ROWS
        self._pool = None

    def _connect_kwargs(self) -> dict:
        kwargs = {
            "host": self.profile.host,
            "port": self.profile.port,
            "user": self.profile.user,
            "password": self.profile.password,
            "dbname": self.profile.database,
            "sslmode": config.DB_SSLMODE,
        }
        if config.QUERY_TIMEOUT_MS:
            kwargs["options"] = f"-c statement_timeout={config.QUERY_TIMEOUT_MS}"
        return kwargs

    def _get_pool(self):
        if self._pool is None:
            try:
                self._pool = pool.ThreadedConnectionPool(
                    config.DB_POOL_MIN, config.DB_POOL_MAX, **self._connect_kwargs()
                )
            except psycopg2.Error as e:
                raise DatabaseConnectionError(f"Database connection failed: {e}") from e
        return self._pool

    @contextmanager
    def connection(self):
        db_pool = self._get_pool()
        try:
            conn = db_pool.getconn()
        except psycopg2.Error as e:
            raise DatabaseConnectionError(f"Database connection failed: {e}") from e
        try:
            yield conn
        finally:
            db_pool.putconn(conn)

    def ping(self):
        """Open a connection and run a trivial query; raises DatabaseConnectionError."""
        try:
            with self.connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute("select 1")
                    cursor.fetchone()
                conn.rollback()
        except psycopg2.Error as e:
            raise DatabaseConnectionError(f"Database connection failed: {e}") from e
        logger.info("Connected to %s:%s/%s", self.profile.host, self.profile.port, self.profile.database)

    def fetch_all(self, sql: str, params=None) -> list[dict]:
        """Run a read-only query and return rows as dictionaries."""
        with self.connection() as conn:
            try:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    cursor.execute(sql, params)
                    rows = [dict(row) for row in cursor.fetchall()]
            finally:
                if not conn.closed:
                    conn.rollback()
        return rows

    def execute(self, sql: str):
        """Run one statement. Returns (columns, rows, rowcount, truncated).

        Driver errors propagate unchanged after the transaction is rolled back.
        """
        with self.connection() as conn:
            try:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    cursor.execute(sql)
                    if cursor.description:
                        columns = [desc[0] for desc in cursor.description]
                        fetched = cursor.fetchmany(self.max_rows + 1)
                        truncated = len(fetched) > self.max_rows
                        rows = [dict(row) for row in fetched[: self.max_rows]]
                        rowcount = len(rows)
                    else:
                        columns, rows, truncated = [], [], False
                        rowcount = cursor.rowcount
                conn.commit()
            except psycopg2.Error:
                if not conn.closed:
                    conn.rollback()
                raise
        return columns, rows, rowcount, truncated

    def close(self):
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
