from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from solarcrm.core.deps import get_db, require_roles
from solarcrm.core.errors import NotFoundError
from solarcrm.db.models.user import Role
from solarcrm.schemas.project import (
    ProjectCreate, ProjectOut, ProjectUpdate, HistoryEntryOut, NoteCreate, NoteOut,
)
from solarcrm.schemas.reclamation import ReclamationCreate, ReclamationOut
from solarcrm.crud.projects import create_project, list_projects
from solarcrm.crud.firms import get_client
from solarcrm.crud.crews import get_crew
from solarcrm.services import history as history_service
from solarcrm.services import reclamations as reclamation_service
from solarcrm.services.access import ensure_firm_access

router = APIRouter()

BACK_OFFICE = (Role.admin, Role.leiter)


@router.get("", response_model=list[ProjectOut])
def get_projects(
    firm_id: int = Query(..., alias="firmId"),
    crew_id: int | None = Query(None, alias="crewId"),
    db: Session = Depends(get_db),
    user=Depends(require_roles(*BACK_OFFICE)),
):
    ensure_firm_access(db, user, firm_id)
    return list_projects(db, firm_id=firm_id, crew_id=crew_id)


@router.post("", response_model=ProjectOut, status_code=201)
def post_project(data: ProjectCreate, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    ensure_firm_access(db, user, data.firm_id)
    if data.client_id is not None:
        c = get_client(db, data.client_id)
        if not c or c.firm_id != data.firm_id:
            raise NotFoundError("Client not found", clientId=data.client_id)
    if data.crew_id is not None:
        crew = get_crew(db, data.crew_id)
        if not crew or crew.firm_id != data.firm_id:
            raise NotFoundError("Crew not found", crewId=data.crew_id)
    return create_project(db, data, leiter_id=user.id)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return history_service.load_project(db, project_id, user)


@router.patch("/{project_id}", response_model=ProjectOut)
def patch_project(
    project_id: int,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    user=Depends(require_roles(*BACK_OFFICE)),
):
    return history_service.update_project(db, project_id, data, user)


@router.get("/{project_id}/history", response_model=list[HistoryEntryOut])
def get_history(
    project_id: int,
    limit: int | None = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    user=Depends(require_roles(*BACK_OFFICE)),
):
    entries = history_service.list_history(db, project_id, user, limit=limit)
    return [HistoryEntryOut.from_entry(e) for e in entries]


@router.get("/{project_id}/notes", response_model=list[NoteOut])
def get_notes(project_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return history_service.list_notes(db, project_id, user)


@router.post("/{project_id}/notes", response_model=NoteOut, status_code=201)
def post_note(project_id: int, data: NoteCreate, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return history_service.add_note(db, project_id, data, user)


@router.post("/{project_id}/reclamation", response_model=ReclamationOut, status_code=201)
def post_reclamation(
    project_id: int,
    data: ReclamationCreate,
    db: Session = Depends(get_db),
    user=Depends(require_roles(*BACK_OFFICE)),
):
    return reclamation_service.create_reclamation(db, project_id, data, user)


@router.get("/{project_id}/reclamations", response_model=list[ReclamationOut])
def get_project_reclamations(project_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return reclamation_service.list_for_project(db, project_id, user)
