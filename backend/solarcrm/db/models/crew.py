import datetime as dt
from enum import Enum
from sqlalchemy import String, Text, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from solarcrm.db.base import Base
from solarcrm.db.models._mixins import TimestampMixin

class MemberRole(str, Enum):
    leader = "leader"
    worker = "worker"
    specialist = "specialist"

class Crew(Base, TimestampMixin):
    __tablename__ = "crew"

    id: Mapped[int] = mapped_column(primary_key=True)
    firm_id: Mapped[int] = mapped_column(ForeignKey("firm.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(256))
    unique_number: Mapped[str] = mapped_column(String(64))
    leader_name: Mapped[str] = mapped_column(String(256))
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)

    firm = relationship("Firm", back_populates="crews")
    members = relationship("CrewMember", back_populates="crew", order_by="CrewMember.id")

class CrewMember(Base, TimestampMixin):
    __tablename__ = "crew_member"

    id: Mapped[int] = mapped_column(primary_key=True)
    crew_id: Mapped[int] = mapped_column(ForeignKey("crew.id", ondelete="CASCADE"), index=True)
    first_name: Mapped[str] = mapped_column(String(128))
    last_name: Mapped[str] = mapped_column(String(128))
    member_email: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    role: Mapped[str] = mapped_column(String(32), default=MemberRole.worker.value)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)

    # worker login: one active code per member, plain text, no expiry
    pin: Mapped[str | None] = mapped_column(String(6), nullable=True)
    pin_created_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    auth_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    crew = relationship("Crew", back_populates="members")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
