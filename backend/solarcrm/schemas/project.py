import datetime as dt
from typing import Literal
from pydantic import Field
from solarcrm.schemas._base import CamelModel
from solarcrm.services.note_priority import resolve_note_priority, strip_legacy_priority

NotePriorityLiteral = Literal["normal", "important", "urgent", "critical"]
ProjectStatusLiteral = Literal[
    "planning", "equipment_waiting", "equipment_arrived", "work_scheduled", "work_in_progress",
    "work_completed", "reclamation", "invoiced", "send_invoice", "invoice_sent", "paid",
]

class ProjectCreate(CamelModel):
    firm_id: int
    client_id: int | None = None
    crew_id: int | None = None
    equipment_expected_date: dt.date | None = None
    work_start_date: dt.date | None = None
    work_end_date: dt.date | None = None
    installation_person_first_name: str | None = None
    installation_person_last_name: str | None = None
    installation_person_address: str | None = None
    installation_person_phone: str | None = None
    notes: str | None = None


class ProjectUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    client_id: int | None = None
    crew_id: int | None = None
    status: ProjectStatusLiteral | None = None
    equipment_expected_date: dt.date | None = None
    equipment_arrived_date: dt.date | None = None
    work_start_date: dt.date | None = None
    work_end_date: dt.date | None = None
    installation_person_first_name: str | None = None
    installation_person_last_name: str | None = None
    installation_person_address: str | None = None
    installation_person_phone: str | None = None
    notes: str | None = None
    expected_version: int | None = None

class ProjectOut(CamelModel):
    id: int
    firm_id: int
    client_id: int | None = None
    leiter_id: int | None = None
    crew_id: int | None = None
    status: str
    version: int
    equipment_expected_date: dt.date | None = None
    equipment_arrived_date: dt.date | None = None
    work_start_date: dt.date | None = None
    work_end_date: dt.date | None = None
    installation_person_first_name: str | None = None
    installation_person_last_name: str | None = None
    installation_person_address: str | None = None
    installation_person_phone: str | None = None
    notes: str | None = None

class HistoryEntryOut(CamelModel):
    id: int
    project_id: int
    user_id: int | None = None
    crew_member_id: int | None = None
    change_type: str
    field_name: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    description: str
    note_priority: str | None = None
    created_at: dt.datetime

    @classmethod
    def from_entry(cls, e) -> "HistoryEntryOut":
        out = cls.model_validate(e)
        if e.change_type == "note_added":
            out.note_priority = resolve_note_priority(e.note_priority, e.description)
            out.description = strip_legacy_priority(e.description)
        return out

class NoteCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=5000)
    priority: NotePriorityLiteral = "normal"

class NoteOut(CamelModel):
    id: int
    project_id: int
    user_id: int | None = None
    crew_member_id: int | None = None
    content: str
    priority: str
    created_at: dt.datetime
