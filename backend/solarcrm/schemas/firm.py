from pydantic import Field
from solarcrm.schemas._base import CamelModel

class FirmCreate(CamelModel):
    name: str = Field(..., min_length=1)
    address: str | None = None
    tax_id: str | None = None

class FirmOut(CamelModel):
    id: int
    name: str
    address: str | None = None
    tax_id: str | None = None

class ClientCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: str | None = None
    phone: str | None = None
    address: str | None = None

class ClientOut(ClientCreate):
    id: int
    firm_id: int
