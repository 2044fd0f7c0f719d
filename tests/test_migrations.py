from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import UniqueConstraint, create_engine, inspect

import busbooking.models  # noqa: F401
from busbooking.db.base import Base

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def migrated_db(tmp_path):
    db_path = tmp_path / "migrations.db"
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    command.upgrade(cfg, "head")
    engine = create_engine(f"sqlite:///{db_path}")
    yield cfg, engine
    engine.dispose()


def test_upgrade_creates_model_tables(migrated_db):
    _, engine = migrated_db
    insp = inspect(engine)
    assert set(insp.get_table_names()) == set(Base.metadata.tables) | {"alembic_version"}
    for table in Base.metadata.sorted_tables:
        assert {c["name"] for c in insp.get_columns(table.name)} == set(table.columns.keys()), table.name


def test_migration_indexes_match_models(migrated_db):
    _, engine = migrated_db
    insp = inspect(engine)
    for table in Base.metadata.sorted_tables:
        expected = {idx.name: (tuple(c.name for c in idx.columns), bool(idx.unique)) for idx in table.indexes}
        reflected = {
            idx["name"]: (tuple(idx["column_names"]), bool(idx["unique"])) for idx in insp.get_indexes(table.name)
        }
        assert reflected == expected, table.name

        expected_uniques = {c.name for c in table.constraints if isinstance(c, UniqueConstraint)}
        reflected_uniques = {uc["name"] for uc in insp.get_unique_constraints(table.name)}
        assert reflected_uniques == expected_uniques, table.name


def test_users_email_is_a_single_unique_index(migrated_db):
    _, engine = migrated_db
    insp = inspect(engine)
    assert insp.get_unique_constraints("users") == []
    email_indexes = [idx for idx in insp.get_indexes("users") if idx["column_names"] == ["email"]]
    assert [(idx["name"], bool(idx["unique"])) for idx in email_indexes] == [("ix_users_email", True)]


def test_downgrade_removes_schema(migrated_db):
    cfg, engine = migrated_db
    command.downgrade(cfg, "base")
    assert set(inspect(engine).get_table_names()) == {"alembic_version"}
