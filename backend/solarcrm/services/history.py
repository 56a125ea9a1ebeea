"""Project audit trail.

Entries are append-only. Writers stage rows through ``record`` inside their
own transaction and commit once, so a failed write leaves neither the
project change nor its history entry behind.
"""
import datetime as dt

from sqlalchemy.orm import Session

from solarcrm.core.errors import ConflictError, InvalidInputError, NotFoundError
from solarcrm.core.logging import logger
from solarcrm.crud import history as history_crud
from solarcrm.crud import projects as project_crud
from solarcrm.crud import reclamations as reclamation_crud
from solarcrm.crud.crews import get_crew
from solarcrm.db.models.project import Project, ProjectStatus, STATUS_LABELS
from solarcrm.db.models.project_history import ChangeType
from solarcrm.db.models.user import User
from solarcrm.schemas.project import ProjectUpdate, NoteCreate
from solarcrm.services.access import ensure_firm_access

EQUIPMENT_FIELDS = ("equipment_expected_date", "equipment_arrived_date")
DATE_FIELDS = ("work_start_date", "work_end_date")
FIELD_LABELS = {
    "client_id": "Client",
    "crew_id": "Crew",
    "equipment_expected_date": "Expected equipment date",
    "equipment_arrived_date": "Equipment arrival date",
    "work_start_date": "Work start",
    "work_end_date": "Work end",
    "installation_person_first_name": "Installation contact first name",
    "installation_person_last_name": "Installation contact last name",
    "installation_person_address": "Installation address",
    "installation_person_phone": "Installation contact phone",
    "notes": "Notes",
}
_CHANGE_TYPES = frozenset(c.value for c in ChangeType)


def status_label(value: str | None) -> str:
    if value is None:
        return "-"
    return STATUS_LABELS.get(value, value)


def fmt_value(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value)


def change_type_for(field: str) -> str:
    if field == "status":
        return ChangeType.status_change.value
    if field in EQUIPMENT_FIELDS:
        return ChangeType.equipment_update.value
    if field in DATE_FIELDS:
        return ChangeType.date_update.value
    if field == "crew_id":
        return ChangeType.assignment_change.value
    return ChangeType.info_update.value


def describe_change(field: str, old: str | None, new: str | None) -> str:
    if field == "status":
        return f"Status changed from {status_label(old)} to {status_label(new)}"
    label = FIELD_LABELS.get(field, field)
    if old is None:
        return f"{label} set to {new}"
    if new is None:
        return f"{label} cleared (was {old})"
    return f"{label} changed from {old} to {new}"


def record(
    db: Session,
    project_id: int,
    change_type: str,
    description: str,
    user_id: int | None = None,
    crew_member_id: int | None = None,
    field_name: str | None = None,
    old_value: str | None = None,
    new_value: str | None = None,
    note_priority: str | None = None,
):
    if change_type not in _CHANGE_TYPES:
        raise InvalidInputError("Unknown change type", changeType=change_type)
    return history_crud.add_history_entry(
        db,
        project_id=project_id,
        change_type=change_type,
        description=description,
        user_id=user_id,
        crew_member_id=crew_member_id,
        field_name=field_name,
        old_value=old_value,
        new_value=new_value,
        note_priority=note_priority,
    )


def append_history(db: Session, project_id: int, change_type: str, description: str, **kwargs):
    """Stage and commit a single entry outside any other mutation."""
    try:
        entry = record(db, project_id, change_type, description, **kwargs)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)
    return entry


def record_status_change(
    db: Session,
    p: Project,
    expected: str,
    new: str,
    description: str | None = None,
    user_id: int | None = None,
    crew_member_id: int | None = None,
) -> None:
    """Compare-and-swap the project status and stage the matching entry."""
    if not project_crud.swap_status(db, p, expected, new):
        raise ConflictError(
            "Project status changed concurrently",
            current_status=project_crud.current_status(db, p.id),
        )
    record(
        db,
        project_id=p.id,
        change_type=ChangeType.status_change.value,
        description=description or describe_change("status", expected, new),
        user_id=user_id,
        crew_member_id=crew_member_id,
        field_name="status",
        old_value=expected,
        new_value=new,
    )


def load_project(db: Session, project_id: int, user: User) -> Project:
    p = project_crud.get_project(db, project_id)
    if not p:
        raise NotFoundError("Project not found", projectId=project_id)
    ensure_firm_access(db, user, p.firm_id)
    return p


def list_history(db: Session, project_id: int, user: User, limit: int | None = None):
    load_project(db, project_id, user)
    return history_crud.list_history(db, project_id, limit=limit)


def update_project(db: Session, project_id: int, data: ProjectUpdate, user: User) -> Project:
    """Apply a partial update, logging one entry per changed field."""
    p = load_project(db, project_id, user)
    changes = data.model_dump(exclude_unset=True)
    expected_version = changes.pop("expected_version", None)
    if expected_version is not None and expected_version != p.version:
        raise ConflictError("Project was modified concurrently", current_status=p.status, version=p.version)
    if "status" in changes and changes["status"] is None:
        raise InvalidInputError("Status cannot be cleared")
    if changes.get("crew_id") is not None:
        crew = get_crew(db, changes["crew_id"])
        if not crew or crew.firm_id != p.firm_id:
            raise NotFoundError("Crew not found", crewId=changes["crew_id"])

    # old values are captured before anything is written
    old_values = {field: getattr(p, field) for field in changes}
    changed = {f: v for f, v in changes.items() if old_values[f] != v}
    if not changed:
        return p
    if "status" in changed:
        if changed["status"] == ProjectStatus.reclamation.value:
            raise InvalidInputError(
                "Reclamations are opened through the reclamation workflow",
                currentStatus=p.status,
            )
        if old_values["status"] == ProjectStatus.reclamation.value and reclamation_crud.has_open_for_project(db, p.id):
            raise ConflictError("Project has an open reclamation", current_status=p.status)

    try:
        for field, new in changed.items():
            if field == "status":
                continue
            setattr(p, field, new)
            record(
                db,
                project_id=p.id,
                change_type=change_type_for(field),
                description=describe_change(field, fmt_value(old_values[field]), fmt_value(new)),
                user_id=user.id,
                field_name=field,
                old_value=fmt_value(old_values[field]),
                new_value=fmt_value(new),
            )
        if "status" in changed:
            record_status_change(db, p, old_values["status"], changed["status"], user_id=user.id)
        else:
            p.version = p.version + 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(p)
    logger.info("project_updated", project_id=p.id, fields=sorted(changed), user_id=user.id)
    return p


def list_notes(db: Session, project_id: int, user: User):
    load_project(db, project_id, user)
    return history_crud.list_notes(db, project_id)


def add_note(db: Session, project_id: int, data: NoteCreate, user: User):
    p = load_project(db, project_id, user)
    try:
        note = history_crud.add_note(db, p.id, user.id, data.content, data.priority)
        record(
            db,
            project_id=p.id,
            change_type=ChangeType.note_added.value,
            description=f"Note added: {data.content}",
            user_id=user.id,
            note_priority=data.priority,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(note)
    return note


def add_worker_comment(db: Session, p: Project, member_id: int, data: NoteCreate):
    """Note written from the worker portal; the crew member is the actor."""
    content = data.content.strip()
    if not content:
        raise InvalidInputError("Comment content is required")
    try:
        note = history_crud.add_note(db, p.id, None, content, data.priority, crew_member_id=member_id)
        record(
            db,
            project_id=p.id,
            change_type=ChangeType.note_added.value,
            description=f"Worker comment: {content}",
            crew_member_id=member_id,
            note_priority=data.priority,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(note)
    logger.info("worker_comment_added", project_id=p.id, member_id=member_id)
    return note
