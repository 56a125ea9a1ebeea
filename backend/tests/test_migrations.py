import importlib.util
from pathlib import Path

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

VERSIONS = Path(__file__).resolve().parents[1] / "solarcrm" / "db" / "migrations" / "versions"


def _load(name):
    spec = importlib.util.spec_from_file_location(name, VERSIONS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_note_priority_backfill(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path}/legacy.db")
    meta = sa.MetaData()
    legacy = sa.Table(
        "project_history",
        meta,
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("project_id", sa.Integer, nullable=False),
        sa.Column("change_type", sa.String(32), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
    )
    meta.create_all(engine)
    with engine.begin() as conn:
        conn.execute(legacy.insert(), [
            {"id": 1, "project_id": 1, "change_type": "note_added", "description": "Заметка: проверить крепления (Критическое)"},
            {"id": 2, "project_id": 1, "change_type": "note_added", "description": "Kabel prüfen (Срочное)"},
            {"id": 3, "project_id": 1, "change_type": "note_added", "description": "plain note"},
            {"id": 4, "project_id": 1, "change_type": "status_change", "description": "Status changed (Важное)"},
        ])

    migration = _load("0002_note_priority_backfill")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()

    with engine.connect() as conn:
        rows = conn.execute(sa.text(
            "SELECT id, description, note_priority FROM project_history ORDER BY id"
        )).all()
    assert [tuple(r) for r in rows] == [
        (1, "Заметка: проверить крепления", "critical"),
        (2, "Kabel prüfen", "urgent"),
        (3, "plain note", "normal"),
        (4, "Status changed (Важное)", None),
    ]
    engine.dispose()
