from enum import Enum
from sqlalchemy import String, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from solarcrm.db.base import Base
from solarcrm.db.models._mixins import CreatedAtMixin

class ChangeType(str, Enum):
    status_change = "status_change"
    info_update = "info_update"
    date_update = "date_update"
    equipment_update = "equipment_update"
    assignment_change = "assignment_change"
    note_added = "note_added"
    reclamation = "reclamation"

class ProjectHistory(Base, CreatedAtMixin):
    """Append-only audit row. Nothing in the code base updates or deletes these."""

    __tablename__ = "project_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("project.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)
    crew_member_id: Mapped[int | None] = mapped_column(ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True)

    change_type: Mapped[str] = mapped_column(String(32))
    field_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    note_priority: Mapped[str | None] = mapped_column(String(16), nullable=True)

    project = relationship("Project", back_populates="history")
