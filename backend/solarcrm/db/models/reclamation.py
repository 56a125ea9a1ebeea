import datetime as dt
from enum import Enum
from sqlalchemy import String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from solarcrm.db.base import Base
from solarcrm.db.models._mixins import TimestampMixin, CreatedAtMixin

class ReclamationStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"

TERMINAL_STATUSES = frozenset({ReclamationStatus.completed.value, ReclamationStatus.cancelled.value})

class ReclamationAction(str, Enum):
    created = "created"
    accepted = "accepted"
    rejected = "rejected"
    reassigned = "reassigned"
    started = "started"
    completed = "completed"
    cancelled = "cancelled"

class Reclamation(Base, TimestampMixin):
    __tablename__ = "reclamation"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("project.id", ondelete="CASCADE"), index=True)
    firm_id: Mapped[int] = mapped_column(ForeignKey("firm.id", ondelete="CASCADE"), index=True)
    description: Mapped[str] = mapped_column(Text)
    deadline: Mapped[dt.date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(16), default=ReclamationStatus.pending.value, index=True)

    original_crew_id: Mapped[int] = mapped_column(ForeignKey("crew.id"))
    current_crew_id: Mapped[int] = mapped_column(ForeignKey("crew.id"), index=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    accepted_by: Mapped[int | None] = mapped_column(ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True)
    accepted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    project = relationship("Project", back_populates="reclamations")
    history = relationship("ReclamationHistory", back_populates="reclamation", order_by="ReclamationHistory.id")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

class ReclamationHistory(Base, CreatedAtMixin):
    __tablename__ = "reclamation_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    reclamation_id: Mapped[int] = mapped_column(ForeignKey("reclamation.id", ondelete="CASCADE"), index=True)
    action: Mapped[str] = mapped_column(String(16))
    action_by: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    action_by_member: Mapped[int | None] = mapped_column(ForeignKey("crew_member.id", ondelete="SET NULL"), nullable=True)
    crew_id: Mapped[int | None] = mapped_column(ForeignKey("crew.id", ondelete="SET NULL"), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    reclamation = relationship("Reclamation", back_populates="history")
