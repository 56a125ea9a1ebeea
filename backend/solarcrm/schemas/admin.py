from typing import Literal
from pydantic import Field
from solarcrm.schemas._base import CamelModel

class UserCreateIn(CamelModel):
    login: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=6, max_length=128)
    role: Literal["admin", "leiter"]
    full_name: str | None = None
    email: str | None = None
