"""
Database connection utilities for Clockbook.

A ``Database`` owns the path to the SQLite file and is created once per
process (see ``app.create_app``); it is passed explicitly to every function
that reads or writes records. Writes are serialized through a single lock
and run inside ``BEGIN IMMEDIATE`` transactions so check-then-insert logic
cannot interleave with another writer.
"""

import os
import sqlite3
import logging
import threading
from contextlib import contextmanager

from alembic import command
from alembic.config import Config as AlembicConfig
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'alembic')

# SQLite waits this long (seconds) for another process holding the write lock
BUSY_TIMEOUT = 5.0


class Database:
    """Handle on the Clockbook SQLite file."""

    def __init__(self, path):
        self.path = path
        self._write_lock = threading.Lock()

    def __repr__(self):
        return f"<Database {self.path}>"

    @property
    def url(self):
        return f"sqlite:///{self.path}"

    def connect(self):
        """Open a new connection with foreign keys enforced.

        The connection is in autocommit mode; ``transaction()`` opens
        transactions explicitly.
        """
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(self.path, timeout=BUSY_TIMEOUT, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON')
        return conn

    @contextmanager
    def get_db(self):
        """
        Context manager for read-only work.

        Usage:
            with db.get_db() as conn:
                conn.execute('SELECT ...')
        """
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self):
        """Context manager for a serialized write transaction.

        Commits when the block exits normally; rolls back and re-raises
        otherwise.
        """
        with self._write_lock:
            conn = self.connect()
            try:
                conn.execute('BEGIN IMMEDIATE')
                try:
                    yield conn
                except BaseException:
                    conn.execute('ROLLBACK')
                    raise
                conn.execute('COMMIT')
            finally:
                conn.close()

    # ------------------------------------------------------------------
    # Schema management
    # ------------------------------------------------------------------

    def _alembic_config(self):
        cfg = AlembicConfig()
        cfg.set_main_option('script_location', MIGRATIONS_DIR)
        # configparser interpolation treats '%' specially
        cfg.set_main_option('sqlalchemy.url', self.url.replace('%', '%%'))
        return cfg

    def migrate(self, revision='head'):
        """Apply Alembic migrations up to ``revision``."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self._write_lock:
            command.upgrade(self._alembic_config(), revision)
        logger.info(f"Database at {self.path} migrated to {self.schema_version()}")

    def downgrade(self, revision):
        with self._write_lock:
            command.downgrade(self._alembic_config(), revision)
        logger.info(f"Database at {self.path} downgraded to {self.schema_version()}")

    def schema_version(self):
        """Return the current Alembic revision, or None for an unmigrated file."""
        if not os.path.exists(self.path):
            return None
        engine = create_engine(self.url)
        try:
            with engine.connect() as connection:
                return MigrationContext.configure(connection).get_current_revision()
        finally:
            engine.dispose()

    def table_exists(self, table_name):
        with self.get_db() as conn:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                (table_name,)
            )
            return cursor.fetchone() is not None


def integrity_conflict(error):
    """Classify a sqlite3.IntegrityError as 'unique', 'foreign_key' or 'other'."""
    text = str(error).upper()
    if 'UNIQUE' in text:
        return 'unique'
    if 'FOREIGN KEY' in text:
        return 'foreign_key'
    return 'other'
