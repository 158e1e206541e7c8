"""Tests for schema migrations, against a recording connection."""

from contextlib import asynccontextmanager

import pytest

from database.exceptions import DatabaseSchemaError
from database.lib.schema_manager import SchemaManager

class RecordingConnection:
    def __init__(self, version=None, fail_on=None):
        self.version = version
        self.fail_on = fail_on
        self.statements = []
        self.transactions = 0

    async def execute(self, sql, *args):
        if self.fail_on and self.fail_on in sql:
            raise RuntimeError(f"failed: {self.fail_on}")
        self.statements.append((' '.join(sql.split()), args))

    async def fetchrow(self, sql, *args):
        return {'version': self.version} if self.version else None

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        yield

class RecordingPool:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn

def test_load_schema_files_in_order():
    files = SchemaManager(RecordingPool(RecordingConnection())).load_schema_files()
    assert list(files) == [1, 2, 3]

@pytest.mark.asyncio
async def test_fresh_database_applies_every_version():
    conn = RecordingConnection()
    manager = SchemaManager(RecordingPool(conn))

    await manager.initialize()

    assert manager.current_version == 3
    assert conn.transactions == 3
    sql = [statement for statement, _ in conn.statements]
    assert any(s.startswith('CREATE TABLE IF NOT EXISTS profiles') for s in sql)
    assert any('CREATE OR REPLACE FUNCTION delete_user_data' in s for s in sql)
    assert any(s.startswith('CREATE TRIGGER profiles_set_updated_at') for s in sql)
    recorded = [args for statement, args in conn.statements if statement.startswith('INSERT INTO schema_version')]
    assert recorded == [(1,), (2,), (3,)]

@pytest.mark.asyncio
async def test_tables_are_never_dropped():
    conn = RecordingConnection()
    await SchemaManager(RecordingPool(conn)).initialize()

    assert not [s for s, _ in conn.statements if 'DROP TABLE' in s]

@pytest.mark.asyncio
async def test_check_constraints_are_declared():
    conn = RecordingConnection()
    await SchemaManager(RecordingPool(conn)).initialize()

    profiles = next(s for s, _ in conn.statements if s.startswith('CREATE TABLE IF NOT EXISTS profiles'))
    assert "CHECK (user_type IN ('buyer', 'seller', 'both'))" in profiles

@pytest.mark.asyncio
async def test_purge_function_pins_search_path():
    conn = RecordingConnection()
    await SchemaManager(RecordingPool(conn)).initialize()

    purge = next(s for s, _ in conn.statements if 'CREATE OR REPLACE FUNCTION delete_user_data' in s)
    assert 'SECURITY DEFINER SET search_path = public AS' in purge

@pytest.mark.asyncio
async def test_up_to_date_database_is_untouched():
    conn = RecordingConnection(version=3)
    manager = SchemaManager(RecordingPool(conn))

    await manager.initialize()

    assert manager.current_version == 3
    assert conn.transactions == 0
    assert len(conn.statements) == 1  # the schema_version table check

@pytest.mark.asyncio
async def test_only_pending_versions_run():
    conn = RecordingConnection(version=2)
    await SchemaManager(RecordingPool(conn)).initialize()

    recorded = [args for statement, args in conn.statements if statement.startswith('INSERT INTO schema_version')]
    assert recorded == [(3,)]

@pytest.mark.asyncio
async def test_failed_migration_raises_schema_error():
    conn = RecordingConnection(fail_on='delete_user_data')
    manager = SchemaManager(RecordingPool(conn))

    with pytest.raises(DatabaseSchemaError, match="Failed to apply schema migrations"):
        await manager.initialize()

    assert manager.current_version == 2
