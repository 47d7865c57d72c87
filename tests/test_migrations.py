"""Tests for the Alembic migrations and the Database store."""

import pytest

from db import Database


@pytest.fixture
def raw_db(tmp_path):
    return Database(str(tmp_path / "nested" / "fresh.db"))


class TestMigrations:
    def test_fresh_file_has_no_revision(self, raw_db):
        assert raw_db.schema_version() is None
        assert not raw_db.table_exists('contacts')

    def test_upgrade_creates_tables(self, raw_db):
        raw_db.migrate()
        assert raw_db.schema_version() == '0002'
        for table in ('contacts', 'properties', 'clocks', 'inspections'):
            assert raw_db.table_exists(table)

    def test_upgrade_is_idempotent(self, raw_db):
        raw_db.migrate()
        raw_db.migrate()
        assert raw_db.schema_version() == '0002'

    def test_active_index_added_in_second_revision(self, raw_db):
        raw_db.migrate('0001')
        with raw_db.get_db() as conn:
            names = {r['name'] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='index'")}
        assert 'ux_inspections_active_clock' not in names

        raw_db.migrate()
        with raw_db.get_db() as conn:
            names = {r['name'] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='index'")}
        assert 'ux_inspections_active_clock' in names

    def test_downgrade_to_base(self, raw_db):
        raw_db.migrate()
        raw_db.downgrade('base')
        assert raw_db.schema_version() is None
        assert not raw_db.table_exists('inspections')


class TestTransactions:
    def test_rollback_on_error(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction() as conn:
                conn.execute("INSERT INTO contacts (name) VALUES ('Ghost')")
                raise RuntimeError('boom')
        with db.get_db() as conn:
            assert conn.execute('SELECT COUNT(*) FROM contacts').fetchone()[0] == 0

    def test_foreign_keys_enforced(self, db):
        import sqlite3
        with pytest.raises(sqlite3.IntegrityError):
            with db.transaction() as conn:
                conn.execute("INSERT INTO properties (contact_id, name, address) VALUES (99, 'x', 'y')")
