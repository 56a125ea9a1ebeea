import datetime as dt
from typing import Literal
from pydantic import EmailStr, Field
from solarcrm.schemas._base import CamelModel

MemberRoleLiteral = Literal["leader", "worker", "specialist"]

class CrewCreate(CamelModel):
    name: str = Field(..., min_length=1)
    unique_number: str = Field(..., min_length=1)
    leader_name: str = Field(..., min_length=1)
    phone: str | None = None
    address: str | None = None

class CrewOut(CrewCreate):
    id: int
    firm_id: int
    archived: bool = False

class CrewMemberCreate(CamelModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    member_email: EmailStr | None = None
    phone: str | None = None
    role: MemberRoleLiteral = "worker"

class CrewMemberUpdate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    member_email: EmailStr | None = None
    phone: str | None = None
    role: MemberRoleLiteral | None = None
    archived: bool | None = None

class CrewMemberOut(CamelModel):
    id: int
    crew_id: int
    first_name: str
    last_name: str
    member_email: str | None = None
    phone: str | None = None
    role: str
    archived: bool
    has_pin: bool = False
    pin_created_at: dt.datetime | None = None

    @classmethod
    def from_member(cls, m) -> "CrewMemberOut":
        out = cls.model_validate(m)
        out.has_pin = bool(m.pin)
        return out
