from __future__ import annotations

import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from desktown.db.base import Base
import desktown.db.models  # noqa: F401


MIGRATION_PATH = (
    Path(__file__).resolve().parents[1]
    / "alembic"
    / "versions"
    / "0001_baseline.py"
)


def _load_migration_module():
    spec = importlib.util.spec_from_file_location("migration_0001_baseline", MIGRATION_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run(engine, step):
    with engine.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            step()


def test_baseline_does_not_depend_on_live_models():
    source = MIGRATION_PATH.read_text()
    assert "desktown" not in source
    assert "create_all" not in source


def test_baseline_matches_model_schema(tmp_path):
    migration = _load_migration_module()
    engine = create_engine(f"sqlite:///{tmp_path / 'baseline.db'}")
    _run(engine, migration.upgrade)

    inspector = inspect(engine)
    assert set(inspector.get_table_names()) == set(Base.metadata.tables)
    for table in Base.metadata.sorted_tables:
        columns = {c["name"] for c in inspector.get_columns(table.name)}
        assert columns == {c.name for c in table.columns}, table.name
        indexes = {i["name"] for i in inspector.get_indexes(table.name)}
        assert {i.name for i in table.indexes} <= indexes, table.name


def test_baseline_downgrade_drops_everything(tmp_path):
    migration = _load_migration_module()
    engine = create_engine(f"sqlite:///{tmp_path / 'baseline.db'}")
    _run(engine, migration.upgrade)
    _run(engine, migration.downgrade)
    assert inspect(engine).get_table_names() == []
