"""note priority column + backfill from legacy description suffix

Revision ID: 0002_note_priority_backfill
Revises: 0001_init
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

from solarcrm.services.note_priority import extract_legacy_priority, strip_legacy_priority

revision = "0002_note_priority_backfill"
down_revision = "0001_init"
branch_labels = None
depends_on = None

history = sa.table(
    "project_history",
    sa.column("id", sa.Integer),
    sa.column("change_type", sa.String),
    sa.column("description", sa.Text),
    sa.column("note_priority", sa.String),
)


def upgrade():
    op.add_column("project_history", sa.Column("note_priority", sa.String(length=16), nullable=True))

    bind = op.get_bind()
    rows = bind.execute(
        sa.select(history.c.id, history.c.description).where(
            history.c.change_type == "note_added",
            history.c.note_priority.is_(None),
        )
    ).all()
    for row_id, description in rows:
        priority = extract_legacy_priority(description)
        values = {"note_priority": priority or "normal"}
        if priority:
            values["description"] = strip_legacy_priority(description)
        bind.execute(sa.update(history).where(history.c.id == row_id).values(**values))


def downgrade():
    op.drop_column("project_history", "note_priority")
