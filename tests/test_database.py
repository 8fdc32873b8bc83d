"""
Tests for the database manager.
"""

import pytest
from sqlalchemy import text

from stockapp.db import DatabaseManager, create_db_engine
from stockapp.models import Category


@pytest.fixture
def manager():
    db = DatabaseManager()
    db.initialize("sqlite://")
    db.create_all_tables()
    yield db
    db.engine.dispose()


def test_uninitialized_manager():
    db = DatabaseManager()

    assert not db.is_initialized
    assert db.ping() is False
    with pytest.raises(RuntimeError, match="not initialized"):
        with db.session():
            pass


def test_session_commits_on_success(manager):
    with manager.session() as session:
        session.add(Category(name="Hardware"))

    with manager.session() as session:
        assert session.query(Category).count() == 1


def test_session_rolls_back_on_error(manager):
    with pytest.raises(RuntimeError):
        with manager.session() as session:
            session.add(Category(name="Hardware"))
            session.flush()
            raise RuntimeError("boom")

    with manager.session() as session:
        assert session.query(Category).count() == 0


def test_initialize_is_idempotent(manager):
    engine = manager.engine

    manager.initialize("sqlite:///elsewhere.db")

    assert manager.engine is engine
    assert manager.ping() is True


def test_sqlite_engine_enforces_foreign_keys():
    engine = create_db_engine("sqlite://")

    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
    engine.dispose()
