"""
DuckDBBackend - data access for the BI editor.

Features:
- Parameterized query execution (SQL injection safe)
- Bounded pool of connections sharing one database
- Arrow result conversion for the bounded read
- All-or-nothing batch updates inside one transaction
- Performance metrics
"""

from typing import Any, List, Dict, Optional, Sequence
import logging
import queue
import threading
import time
from contextlib import contextmanager

import duckdb
import pyarrow as pa

from bi_editor.errors import StorageError
from bi_editor.types.snapshot import Change, Row, Snapshot
from bi_editor.util.sql_builder import build_select, build_update, editable_columns, quote_ident

logger = logging.getLogger(__name__)


class ConnectionPool:
    """
    Fixed-size pool of DuckDB connections.

    Every pooled connection is a cursor of the same root connection, so all
    of them see one database instance (including ":memory:").
    """

    def __init__(self, root: "duckdb.DuckDBPyConnection", size: int = 10, timeout: float = 30.0):
        if size <= 0:
            raise ValueError("pool size must be positive")
        self.size = size
        self.timeout = timeout
        self._idle: "queue.Queue[duckdb.DuckDBPyConnection]" = queue.Queue(maxsize=size)
        self._closed = False
        self._lock = threading.Lock()
        for _ in range(size):
            self._idle.put(root.cursor())

    @contextmanager
    def acquire(self):
        """Borrow a connection; it goes back to the pool on every exit path."""
        if self._closed:
            raise StorageError("Connection pool is closed")
        try:
            con = self._idle.get(timeout=self.timeout)
        except queue.Empty:
            raise StorageError(f"No database connection available after {self.timeout}s")
        try:
            yield con
        finally:
            with self._lock:
                if not self._closed:
                    self._idle.put(con)
                    con = None
            if con is not None:
                con.close()

    def available(self) -> int:
        return self._idle.qsize()

    def close(self):
        """Close idle connections now; borrowed ones close when returned."""
        with self._lock:
            self._closed = True
            while True:
                try:
                    self._idle.get_nowait().close()
                except queue.Empty:
                    break


class DuckDBBackend:
    """
    DuckDB backend serving snapshots and transactional change-sets.
    """

    def __init__(
        self,
        uri: str = ":memory:",
        read_only: bool = False,
        pool_size: int = 10,
        pool_timeout: float = 30.0,
        connection: Optional["duckdb.DuckDBPyConnection"] = None,
    ):
        """
        Initialize DuckDB backend.

        Args:
            uri: Database path or ":memory:" for in-memory
            read_only: Open in read-only mode
            pool_size: Number of pooled connections
            pool_timeout: Seconds to wait for a free connection
            connection: Optional existing DuckDB connection
        """
        self.uri = uri
        if connection:
            self.con = connection
        else:
            self.con = duckdb.connect(database=uri, read_only=read_only)

        self.pool = ConnectionPool(self.con, size=pool_size, timeout=pool_timeout)

        # Track query stats
        self._stats_lock = threading.Lock()
        self._query_count = 0
        self._total_time = 0.0

    def _run(self, con: "duckdb.DuckDBPyConnection", query: Dict[str, Any]):
        sql = query.get("sql")
        params = query.get("params", [])

        start_time = time.time()
        try:
            result = con.execute(sql, params)
        except duckdb.Error as e:
            logger.error("Error executing query: %s params=%s: %s", sql, params, e)
            raise StorageError(str(e)) from e
        finally:
            with self._stats_lock:
                self._query_count += 1
                self._total_time += (time.time() - start_time)
        return result

    def execute(self, query: Dict[str, Any]) -> pa.Table:
        """
        Execute a query and return the result as a PyArrow Table.

        Args:
            query: A dictionary containing the 'sql' and 'params'.
        """
        with self.pool.acquire() as con:
            result = self._run(con, query)
            try:
                return result.fetch_arrow_table()
            except duckdb.Error as e:
                raise StorageError(str(e)) from e

    def fetch_snapshot(self, table: str, limit: int, pk_cols: Sequence[str]) -> Snapshot:
        """
        Bounded SELECT * of the target table.

        Columns come from the first returned row; an empty table yields an
        empty column list and no editable columns.
        """
        records = self.execute(build_select(table, limit)).to_pylist()

        columns = list(records[0].keys()) if records else []
        bi_cols = editable_columns(columns, pk_cols)

        return Snapshot(
            table=table,
            limit=limit,
            pk=tuple(pk_cols),
            columns=tuple(columns),
            bi_cols=tuple(bi_cols),
            rows=tuple(Row.from_mapping(r, bi_cols) for r in records),
        )

    def apply_changes(self, table: str, pk_cols: Sequence[str], changes: Sequence[Change]) -> int:
        """
        Apply a change-set as one transaction.

        Each change with values to set runs one keyed UPDATE and counts once
        if it touched at least one row. The first failure rolls back the
        whole batch and raises StorageError.
        """
        updated_rows = 0
        with self.pool.acquire() as con:
            with self.transaction(con):
                for change in changes:
                    if not change.set_values:
                        continue
                    query = build_update(table, change.set_values, pk_cols, change.pk)
                    affected = self._affected_rows(self._run(con, query))
                    if affected > 1:
                        logger.warning(
                            "Update on %s matched %d rows for pk %s; primary key may not be unique",
                            table, affected, change.pk,
                        )
                    if affected > 0:
                        updated_rows += 1
        return updated_rows

    @staticmethod
    def _affected_rows(result) -> int:
        # DuckDB reports DML results as a single "Count" row
        row = result.fetchone()
        return int(row[0]) if row and row[0] is not None else 0

    @contextmanager
    def transaction(self, con: "duckdb.DuckDBPyConnection"):
        """
        Context manager for transactions.

        Example:
            >>> with backend.pool.acquire() as con, backend.transaction(con):
            ...     con.execute("UPDATE ...")
        """
        try:
            con.execute("BEGIN TRANSACTION")
        except duckdb.Error as e:
            raise StorageError(str(e)) from e
        try:
            yield con
            con.execute("COMMIT")
        except Exception as e:
            try:
                con.execute("ROLLBACK")
            except duckdb.Error as rollback_error:
                logger.error("Rollback failed: %s", rollback_error)
            if isinstance(e, duckdb.Error):
                raise StorageError(str(e)) from e
            raise

    def load_data_from_arrow(self, table_name: str, arrow_table: pa.Table):
        """
        Create (or replace) a DuckDB table from an Arrow table.

        Example:
            >>> arrow_data = pa.table({"id": [1, 2], "bi_price": [10, 20]})
            >>> backend.load_data_from_arrow("items", arrow_data)
        """
        view_name = f"__arrow_{table_name}"
        with self.pool.acquire() as con:
            con.register(view_name, arrow_table)
            try:
                con.execute(f"CREATE OR REPLACE TABLE {quote_ident(table_name)} AS SELECT * FROM {quote_ident(view_name)}")
            finally:
                con.unregister(view_name)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get backend performance statistics.
        """
        avg_time = self._total_time / self._query_count if self._query_count > 0 else 0

        return {
            "query_count": self._query_count,
            "total_time": self._total_time,
            "avg_query_time": avg_time,
            "pool_size": self.pool.size,
            "pool_available": self.pool.available(),
            "uri": self.uri
        }

    def reset_stats(self):
        """Reset performance counters"""
        with self._stats_lock:
            self._query_count = 0
            self._total_time = 0.0

    def close(self):
        """Close pooled connections and the root connection"""
        if self.con:
            self.pool.close()
            self.con.close()
            self.con = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# ========== Helper Functions ==========

def resolve_database_uri(uri: str) -> str:
    """
    Map an EDITOR_DATABASE value to the path duckdb.connect() expects.

        ":memory:"                  -> ":memory:"
        "data/items.duckdb"         -> "data/items.duckdb"
        "duckdb:///items.duckdb"    -> "items.duckdb"       (relative)
        "duckdb:////srv/x.duckdb"   -> "/srv/x.duckdb"      (absolute)
    """
    prefix = "duckdb:///"
    if uri.startswith(prefix):
        return uri[len(prefix):]
    if uri.startswith("duckdb:"):
        raise ValueError(f"Unsupported database URI: {uri}")
    return uri


def create_backend_from_uri(uri: str, **kwargs) -> DuckDBBackend:
    """Build a backend for a plain path, ":memory:" or a duckdb:/// URI."""
    return DuckDBBackend(resolve_database_uri(uri), **kwargs)
