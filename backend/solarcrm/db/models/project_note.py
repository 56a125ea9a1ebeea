from enum import Enum
from sqlalchemy import String, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from solarcrm.db.base import Base
from solarcrm.db.models._mixins import CreatedAtMixin

class NotePriority(str, Enum):
    normal = "normal"
    important = "important"
    urgent = "urgent"
    critical = "critical"

class ProjectNote(Base, CreatedAtMixin):
    __tablename__ = "project_note"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("project.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    # set instead of user_id when a worker writes the note from the portal
    crew_member_id: Mapped[int | None] = mapped_column(ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True)
    content: Mapped[str] = mapped_column(Text)
    priority: Mapped[str] = mapped_column(String(16), default=NotePriority.normal.value)
