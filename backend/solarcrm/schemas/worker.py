import datetime as dt
from pydantic import EmailStr, Field
from solarcrm.schemas._base import CamelModel
from solarcrm.schemas.project import ProjectOut, NoteOut
from solarcrm.schemas.reclamation import ReclamationOut, ReclamationHistoryOut

class WorkerLoginIn(CamelModel):
    email: EmailStr
    pin: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")

class MemberIdIn(CamelModel):
    member_id: int = Field(..., gt=0)

class WorkerUserOut(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str = "worker"
    crew_member_id: int
    crew_id: int

class WorkerLoginOut(CamelModel):
    access_token: str
    refresh_token: str
    user: WorkerUserOut

class PinOut(CamelModel):
    success: bool = True
    pin: str
    member_email: str
    message: str = "PIN generated. Share it with the worker over a separate channel."

class MemberStatusOut(CamelModel):
    member_id: int
    member_email: str | None = None
    has_pin: bool
    pin_created_at: dt.datetime | None = None
    can_generate_pin: bool

class CrewRef(CamelModel):
    id: int
    name: str
    unique_number: str

class WorkerProfileOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    crew_id: int
    crew: CrewRef | None = None

class ProjectBrief(CamelModel):
    id: int
    status: str
    work_start_date: dt.date | None = None
    work_end_date: dt.date | None = None
    installation_person_first_name: str | None = None
    installation_person_last_name: str | None = None
    installation_person_address: str | None = None
    installation_person_phone: str | None = None

class WorkerReclamationOut(ReclamationOut):
    project: ProjectBrief | None = None

class WorkerReclamationDetailOut(WorkerReclamationOut):
    history: list[ReclamationHistoryOut] = []
    is_assigned: bool
    is_available: bool

class WorkerReclamationsOut(CamelModel):
    assigned: list[WorkerReclamationOut]
    available: list[WorkerReclamationOut]
    total_count: int

class ReclamationCountOut(CamelModel):
    active_count: int
    available_count: int
    total_count: int

class WorkerActionOut(CamelModel):
    success: bool = True
    reclamation: ReclamationOut
    message: str

class ClientRef(CamelModel):
    name: str
    address: str | None = None
    phone: str | None = None

class WorkerProjectDetailOut(ProjectOut):
    client: ClientRef | None = None
    comments: list[NoteOut] = []

class WorkerCommentOut(CamelModel):
    success: bool = True
    note: NoteOut

class ProjectReclamationsOut(CamelModel):
    reclamations: list[ReclamationOut]

class CalendarEventOut(CamelModel):
    id: int
    type: str
    title: str
    start: dt.date | None = None
    end: dt.date | None = None
    status: str
    reclamation_status: str | None = None
    address: str | None = None
    person_name: str = ""
    project_id: int

class CalendarOut(CamelModel):
    month: int
    year: int
    events: list[CalendarEventOut]
