from solarcrm.schemas._base import CamelModel

class TokenOut(CamelModel):
    access_token: str
    token_type: str = "bearer"

class LoginIn(CamelModel):
    login: str
    password: str

class UserOut(CamelModel):
    id: int
    login: str
    full_name: str | None = None
    email: str | None = None
    role: str
    firm_ids: list[int] = []
