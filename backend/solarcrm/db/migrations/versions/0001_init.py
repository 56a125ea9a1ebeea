"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("login", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=True),
        sa.Column("full_name", sa.String(length=256), nullable=True),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_user_login", "user", ["login"], unique=True)

    op.create_table(
        "firm",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("tax_id", sa.String(length=64), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "user_firm",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("firm_id", sa.Integer(), sa.ForeignKey("firm.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "client",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("firm_id", sa.Integer(), sa.ForeignKey("firm.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("email", sa.String(length=256), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_client_firm_id", "client", ["firm_id"])

    op.create_table(
        "crew",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("firm_id", sa.Integer(), sa.ForeignKey("firm.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("unique_number", sa.String(length=64), nullable=False),
        sa.Column("leader_name", sa.String(length=256), nullable=False),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_crew_firm_id", "crew", ["firm_id"])

    op.create_table(
        "crew_member",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("crew_id", sa.Integer(), sa.ForeignKey("crew.id", ondelete="CASCADE"), nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=False),
        sa.Column("last_name", sa.String(length=128), nullable=False),
        sa.Column("member_email", sa.String(length=256), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="worker"),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("pin", sa.String(length=6), nullable=True),
        sa.Column("pin_created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("auth_user_id", sa.String(length=64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_crew_member_crew_id", "crew_member", ["crew_id"])
    op.create_index("ix_crew_member_member_email", "crew_member", ["member_email"])
    op.create_index("ix_crew_member_auth_user_id", "crew_member", ["auth_user_id"])

    op.create_table(
        "project",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("firm_id", sa.Integer(), sa.ForeignKey("firm.id", ondelete="CASCADE"), nullable=False),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("client.id", ondelete="SET NULL"), nullable=True),
        sa.Column("leiter_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("crew_id", sa.Integer(), sa.ForeignKey("crew.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="planning"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("equipment_expected_date", sa.Date(), nullable=True),
        sa.Column("equipment_arrived_date", sa.Date(), nullable=True),
        sa.Column("work_start_date", sa.Date(), nullable=True),
        sa.Column("work_end_date", sa.Date(), nullable=True),
        sa.Column("installation_person_first_name", sa.String(length=128), nullable=True),
        sa.Column("installation_person_last_name", sa.String(length=128), nullable=True),
        sa.Column("installation_person_address", sa.Text(), nullable=True),
        sa.Column("installation_person_phone", sa.String(length=64), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_project_firm_id", "project", ["firm_id"])
    op.create_index("ix_project_client_id", "project", ["client_id"])
    op.create_index("ix_project_leiter_id", "project", ["leiter_id"])
    op.create_index("ix_project_crew_id", "project", ["crew_id"])
    op.create_index("ix_project_status", "project", ["status"])

    # append-only; the description may still carry a legacy priority suffix
    op.create_table(
        "project_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("project.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("crew_member_id", sa.Integer(), sa.ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True),
        sa.Column("change_type", sa.String(length=32), nullable=False),
        sa.Column("field_name", sa.String(length=64), nullable=True),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_project_history_project_id", "project_history", ["project_id"])
    op.create_index("ix_project_history_user_id", "project_history", ["user_id"])
    op.create_index("ix_project_history_created_at", "project_history", ["created_at"])

    op.create_table(
        "project_note",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("project.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("crew_member_id", sa.Integer(), sa.ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="normal"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_project_note_project_id", "project_note", ["project_id"])
    op.create_index("ix_project_note_created_at", "project_note", ["created_at"])

    op.create_table(
        "reclamation",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("project.id", ondelete="CASCADE"), nullable=False),
        sa.Column("firm_id", sa.Integer(), sa.ForeignKey("firm.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("deadline", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("original_crew_id", sa.Integer(), sa.ForeignKey("crew.id"), nullable=False),
        sa.Column("current_crew_id", sa.Integer(), sa.ForeignKey("crew.id"), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("accepted_by", sa.Integer(), sa.ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_reclamation_project_id", "reclamation", ["project_id"])
    op.create_index("ix_reclamation_firm_id", "reclamation", ["firm_id"])
    op.create_index("ix_reclamation_status", "reclamation", ["status"])
    op.create_index("ix_reclamation_current_crew_id", "reclamation", ["current_crew_id"])

    op.create_table(
        "reclamation_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("reclamation_id", sa.Integer(), sa.ForeignKey("reclamation.id", ondelete="CASCADE"), nullable=False),
        sa.Column("action", sa.String(length=16), nullable=False),
        sa.Column("action_by", sa.Integer(), sa.ForeignKey("user.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action_by_member", sa.Integer(), sa.ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True),
        sa.Column("crew_id", sa.Integer(), sa.ForeignKey("crew.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_reclamation_history_reclamation_id", "reclamation_history", ["reclamation_id"])
    op.create_index("ix_reclamation_history_created_at", "reclamation_history", ["created_at"])


def downgrade():
    op.drop_table("reclamation_history")
    op.drop_table("reclamation")
    op.drop_table("project_note")
    op.drop_table("project_history")
    op.drop_table("project")
    op.drop_table("crew_member")
    op.drop_table("crew")
    op.drop_table("client")
    op.drop_table("user_firm")
    op.drop_table("firm")
    op.drop_table("user")
