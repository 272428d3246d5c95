"""
Connection management for the Jobly SQLite database.

Provides path resolution, idempotent schema bootstrap, a read-only
connection context manager and a transactional writer.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from models.errors import (
    create_db_error,
    create_db_not_found_error,
)

logger = logging.getLogger(__name__)

# Default database path relative to repository root
DEFAULT_DB_PATH = "data/jobly.db"

# SQL function name used for case-insensitive substring filters
CASEFOLD_FUNCTION = "casefold"


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def register_functions(conn: sqlite3.Connection) -> None:
    """
    Register SQL functions the repositories rely on.

    SQLite's built-in LIKE only ignores case for ASCII; ``casefold(x)``
    gives full Unicode case folding on both sides of a match.
    """
    conn.create_function(CASEFOLD_FUNCTION, 1, _casefold, deterministic=True)


def resolve_db_path(db_path: Optional[str] = None) -> Path:
    """
    Resolve the database path with support for overrides and defaults.

    Resolution order:
    1. Provided db_path parameter
    2. JOBLY_DB environment variable
    3. JOBLY_ROOT/data/jobly.db
    4. Default path: data/jobly.db

    Args:
        db_path: Optional database path override

    Returns:
        Resolved absolute Path to the database
    """
    if db_path is not None:
        path_str = db_path
    else:
        db_env = os.getenv("JOBLY_DB")
        if db_env:
            path_str = db_env
        else:
            root_env = os.getenv("JOBLY_ROOT")
            if root_env:
                return Path(root_env) / "data" / "jobly.db"
            path_str = DEFAULT_DB_PATH

    path = Path(path_str)

    # If relative, resolve from repository root
    if not path.is_absolute():
        current_file = Path(__file__).resolve()
        repo_root = current_file.parents[2]  # db/ -> mcp-server-python/ -> repo/
        path = repo_root / path

    return path


def ensure_parent_dirs(db_path: Path) -> None:
    """
    Ensure parent directories exist for the database file.

    Raises:
        ToolError: If directory creation fails
    """
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise create_db_error(
            f"Failed to create parent directories: {str(e)}", retryable=False, original_error=e
        ) from e


def bootstrap_schema(conn: sqlite3.Connection) -> None:
    """
    Create the companies and jobs tables if they don't exist.

    This operation is idempotent - safe to call on existing databases.

    Args:
        conn: Database connection

    Raises:
        ToolError: If schema creation fails
    """
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS companies (
                handle TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                description TEXT NOT NULL,
                num_employees INTEGER CHECK (num_employees >= 0),
                logo_url TEXT
            );

            CREATE TABLE IF NOT EXISTS jobs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                salary INTEGER CHECK (salary >= 0),
                equity REAL CHECK (equity <= 1.0),
                company_handle TEXT NOT NULL
                    REFERENCES companies(handle) ON DELETE CASCADE
            );

            CREATE INDEX IF NOT EXISTS idx_jobs_company_handle
            ON jobs(company_handle);
        """)
        conn.commit()

    except sqlite3.Error as e:
        raise create_db_error(
            f"Failed to bootstrap schema: {str(e)}", retryable=False, original_error=e
        ) from e


@contextmanager
def get_connection(db_path: Optional[str] = None):
    """
    Context manager for read-only SQLite connections.

    Args:
        db_path: Optional database path override

    Yields:
        sqlite3.Connection: Database connection with Row factory

    Raises:
        ToolError: If database file doesn't exist or connection fails
    """
    resolved_path = resolve_db_path(db_path)

    if not resolved_path.exists() or not resolved_path.is_file():
        raise create_db_not_found_error(str(resolved_path))

    conn = None
    try:
        uri = f"file:{resolved_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
        conn.row_factory = sqlite3.Row
        register_functions(conn)

        yield conn

    except sqlite3.OperationalError as e:
        error_msg = str(e)
        if "unable to open database" in error_msg.lower():
            raise create_db_not_found_error(str(resolved_path)) from e
        else:
            raise create_db_error(error_msg, retryable=True, original_error=e) from e

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e

    finally:
        if conn is not None:
            conn.close()


class DbWriter:
    """
    Context manager for write operations on the Jobly database.

    Creates the database file and schema on first use, begins an explicit
    transaction, rolls back on exceptions and always closes the connection.

    Usage:
        with DbWriter(db_path) as writer:
            company = companies.create(writer.conn, data)
            writer.commit()
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path
        self.resolved_path: Optional[Path] = None
        self.conn: Optional[sqlite3.Connection] = None
        self._in_transaction = False

    def __enter__(self):
        """
        Open connection, ensure schema, and begin transaction.

        Raises:
            ToolError: If database operations fail
        """
        self.resolved_path = resolve_db_path(self.db_path)
        ensure_parent_dirs(self.resolved_path)

        try:
            self.conn = sqlite3.connect(str(self.resolved_path))
            self.conn.row_factory = sqlite3.Row
            register_functions(self.conn)
            # ON DELETE CASCADE for jobs depends on this pragma.
            self.conn.execute("PRAGMA foreign_keys = ON")

            bootstrap_schema(self.conn)

            self.conn.execute("BEGIN")
            self._in_transaction = True

            return self

        except sqlite3.OperationalError as e:
            self._close()
            raise create_db_error(str(e), retryable=True, original_error=e) from e

        except sqlite3.Error as e:
            self._close()
            raise create_db_error(str(e), retryable=False, original_error=e) from e

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Rollback on exception, close connection always."""
        try:
            if exc_type is not None and self._in_transaction:
                self.rollback()
        finally:
            self._close()

        return False

    def _close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
        self._in_transaction = False

    def commit(self) -> None:
        """
        Commit the transaction.

        Raises:
            ToolError: If commit fails
        """
        if self.conn is None:
            raise create_db_error("Connection not established", retryable=False)

        if not self._in_transaction:
            return

        try:
            self.conn.commit()
            self._in_transaction = False
            logger.debug("Committed transaction on %s", self.resolved_path)

        except sqlite3.Error as e:
            raise create_db_error(
                f"Failed to commit transaction: {str(e)}", retryable=True, original_error=e
            ) from e

    def rollback(self) -> None:
        """
        Rollback the transaction.

        Failures are logged and not propagated since rollback is called
        while another error is already being raised.
        """
        if self.conn is None or not self._in_transaction:
            return

        try:
            self.conn.rollback()
            self._in_transaction = False
        except sqlite3.Error as e:
            logger.warning("Rollback failed: %s", e)
