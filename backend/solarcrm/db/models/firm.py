from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from solarcrm.db.base import Base
from solarcrm.db.models._mixins import TimestampMixin

class Firm(Base, TimestampMixin):
    __tablename__ = "firm"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(256))
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    users = relationship("User", secondary="user_firm", back_populates="firms")
    crews = relationship("Crew", back_populates="firm")
    projects = relationship("Project", back_populates="firm")
