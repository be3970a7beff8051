"""
core/db.py -- Engine construction shared by the auth and joke stores.

Both stores point at Settings.database_url by default. Each keeps its own
engine and metadata; only the connection settings are shared here.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) allows readers to proceed without blocking
    during writes. Set per-connection because SQLite PRAGMAs are not
    inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        # TestClient and run_in_threadpool use connections across threads.
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    # In-memory databases cannot use WAL; only file-backed SQLite gets the pragma.
    if db_url.startswith("sqlite") and "memory" not in db_url:
        event.listen(engine, "connect", _set_wal_mode)
    return engine
