"""Tests for database helpers."""

from casevault.database import ensure_sqlite_directory


def test_creates_parent_of_sqlite_file(tmp_path):
    db_file = tmp_path / "nested" / "data" / "casevault.db"

    path = ensure_sqlite_directory(f"sqlite+aiosqlite:///{db_file}")

    assert path == db_file
    assert db_file.parent.is_dir()
    assert not db_file.exists()


def test_in_memory_sqlite_is_ignored():
    assert ensure_sqlite_directory("sqlite+aiosqlite:///:memory:") is None


def test_postgres_is_ignored():
    assert ensure_sqlite_directory("postgresql+asyncpg://user:pw@db/casevault") is None
