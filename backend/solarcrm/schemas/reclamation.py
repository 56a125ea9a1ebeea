import datetime as dt
from pydantic import Field
from solarcrm.schemas._base import CamelModel

class ReclamationCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=5000)
    deadline: dt.date
    crew_id: int = Field(..., gt=0)

class ReclamationUpdate(CamelModel):
    crew_id: int | None = Field(default=None, gt=0)
    deadline: dt.date | None = None
    description: str | None = Field(default=None, min_length=1, max_length=5000)

class ReclamationOut(CamelModel):
    id: int
    project_id: int
    firm_id: int
    description: str
    deadline: dt.date
    status: str
    original_crew_id: int
    current_crew_id: int
    created_by: int | None = None
    accepted_by: int | None = None
    accepted_at: dt.datetime | None = None
    completed_at: dt.datetime | None = None
    completed_notes: str | None = None
    created_at: dt.datetime

class ReclamationHistoryOut(CamelModel):
    id: int
    reclamation_id: int
    action: str
    action_by: int | None = None
    action_by_member: int | None = None
    crew_id: int | None = None
    reason: str | None = None
    notes: str | None = None
    created_at: dt.datetime

class RejectIn(CamelModel):
    reason: str = Field(..., min_length=10, max_length=2000)

class CompleteIn(CamelModel):
    notes: str | None = Field(default=None, max_length=5000)
