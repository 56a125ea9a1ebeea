from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from enum import Enum

from solarcrm.db.base import Base
from solarcrm.db.models._mixins import TimestampMixin

class Role(str, Enum):
    admin = "admin"
    leiter = "leiter"
    worker = "worker"

class User(Base, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    login: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(256))
    role: Mapped[str] = mapped_column(String(32), default=Role.leiter.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    firms = relationship("Firm", secondary="user_firm", back_populates="users")

class UserFirm(Base):
    """Grants a back-office user access to a firm."""

    __tablename__ = "user_firm"

    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    firm_id: Mapped[int] = mapped_column(ForeignKey("firm.id", ondelete="CASCADE"), primary_key=True)
