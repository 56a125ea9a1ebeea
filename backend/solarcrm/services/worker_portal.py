"""Read side of the worker portal: the crew's projects and its calendar."""
import calendar
import datetime as dt

from sqlalchemy.orm import Session

from solarcrm.core.errors import ForbiddenError, NotFoundError
from solarcrm.crud import history as history_crud
from solarcrm.crud import projects as project_crud
from solarcrm.crud import reclamations as rec_crud
from solarcrm.db.models.project import Project

RECLAMATION_TITLE_LEN = 30


def load_crew_project(db: Session, project_id: int, crew_id: int) -> Project:
    p = project_crud.get_project(db, project_id)
    if not p:
        raise NotFoundError("Project not found", projectId=project_id)
    if p.crew_id != crew_id:
        raise ForbiddenError("Access denied to this project")
    return p


def project_detail(db: Session, project_id: int, crew_id: int) -> dict:
    p = load_crew_project(db, project_id, crew_id)
    return {"project": p, "client": p.client, "comments": history_crud.list_notes(db, p.id)}


def project_reclamations(db: Session, project_id: int, crew_id: int):
    # no project check: a crew can hold a reclamation on another crew's project
    return rec_crud.list_active_for_crew(db, crew_id, project_id=project_id)


def _person_name(p: Project | None) -> str:
    if p is None:
        return ""
    return " ".join(n for n in (p.installation_person_first_name, p.installation_person_last_name) if n)


def _overlaps(p: Project, start: dt.date, end: dt.date) -> bool:
    s, e = p.work_start_date, p.work_end_date
    if s and e:
        return s <= end and e >= start
    day = s or e
    return day is not None and start <= day <= end


def crew_calendar(db: Session, crew_id: int, month: int, year: int) -> dict:
    """Projects and open reclamation deadlines of the crew falling into one month."""
    start = dt.date(year, month, 1)
    end = dt.date(year, month, calendar.monthrange(year, month)[1])

    events = []
    for p in project_crud.list_projects(db, crew_id=crew_id):
        if not _overlaps(p, start, end):
            continue
        events.append({
            "id": p.id,
            "type": "project",
            "title": p.client.name if p.client else "Unknown client",
            "start": p.work_start_date,
            "end": p.work_end_date,
            "status": p.status,
            "address": p.installation_person_address,
            "person_name": _person_name(p),
            "project_id": p.id,
        })

    for r in rec_crud.list_active_for_crew(db, crew_id):
        if not start <= r.deadline <= end:
            continue
        title = r.description[:RECLAMATION_TITLE_LEN]
        if len(r.description) > RECLAMATION_TITLE_LEN:
            title += "..."
        events.append({
            "id": r.id,
            "type": "reclamation",
            "title": f"Reclamation: {title}",
            "start": r.deadline,
            "end": r.deadline,
            "status": "reclamation",
            "reclamation_status": r.status,
            "address": r.project.installation_person_address if r.project else None,
            "person_name": _person_name(r.project),
            "project_id": r.project_id,
        })

    return {"month": month, "year": year, "events": events}
