import datetime as dt
from enum import Enum
from sqlalchemy import String, Text, Date, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from solarcrm.db.base import Base
from solarcrm.db.models._mixins import TimestampMixin

class ProjectStatus(str, Enum):
    planning = "planning"
    equipment_waiting = "equipment_waiting"
    equipment_arrived = "equipment_arrived"
    work_scheduled = "work_scheduled"
    work_in_progress = "work_in_progress"
    work_completed = "work_completed"
    reclamation = "reclamation"
    invoiced = "invoiced"
    send_invoice = "send_invoice"
    invoice_sent = "invoice_sent"
    paid = "paid"

# a reclamation may only be opened on finished work
RECLAMATION_ELIGIBLE_STATUSES = frozenset({
    ProjectStatus.work_completed.value,
    ProjectStatus.invoiced.value,
    ProjectStatus.send_invoice.value,
    ProjectStatus.invoice_sent.value,
    ProjectStatus.paid.value,
})

STATUS_LABELS = {
    "planning": "Planning",
    "equipment_waiting": "Waiting for equipment",
    "equipment_arrived": "Equipment arrived",
    "work_scheduled": "Work scheduled",
    "work_in_progress": "Work in progress",
    "work_completed": "Work completed",
    "reclamation": "Reclamation",
    "invoiced": "Invoiced",
    "send_invoice": "Send invoice to client",
    "invoice_sent": "Invoice sent",
    "paid": "Paid",
}

class Project(Base, TimestampMixin):
    __tablename__ = "project"

    id: Mapped[int] = mapped_column(primary_key=True)
    firm_id: Mapped[int] = mapped_column(ForeignKey("firm.id", ondelete="CASCADE"), index=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("client.id", ondelete="SET NULL"), nullable=True, index=True)
    leiter_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)
    crew_id: Mapped[int | None] = mapped_column(ForeignKey("crew.id", ondelete="SET NULL"), nullable=True, index=True)

    status: Mapped[str] = mapped_column(String(32), default=ProjectStatus.planning.value, index=True)
    # bumped on every status write; status changes are compare-and-swap
    version: Mapped[int] = mapped_column(Integer, default=1)

    equipment_expected_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    equipment_arrived_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    work_start_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    work_end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    installation_person_first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    installation_person_last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    installation_person_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    installation_person_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    firm = relationship("Firm", back_populates="projects")
    client = relationship("Client")
    crew = relationship("Crew")
    history = relationship("ProjectHistory", back_populates="project", order_by="ProjectHistory.id")
    reclamations = relationship("Reclamation", back_populates="project", order_by="Reclamation.id")
