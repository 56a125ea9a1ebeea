import datetime as dt

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from solarcrm.core.deps import get_db, get_current_worker, WorkerContext
from solarcrm.crud.projects import list_projects
from solarcrm.crud.reclamations import list_history
from solarcrm.schemas.project import NoteCreate, NoteOut, ProjectOut
from solarcrm.schemas.reclamation import CompleteIn, RejectIn, ReclamationHistoryOut, ReclamationOut
from solarcrm.schemas.worker import (
    WorkerProfileOut, WorkerReclamationOut, WorkerReclamationDetailOut, WorkerReclamationsOut,
    ReclamationCountOut, WorkerActionOut, CrewRef, ClientRef, WorkerProjectDetailOut, WorkerCommentOut,
    ProjectReclamationsOut, CalendarOut,
)
from solarcrm.services import history, worker_portal
from solarcrm.services import reclamations as reclamation_service

router = APIRouter()


def _firm_id(worker: WorkerContext) -> int:
    return worker.member.crew.firm_id


@router.get("/profile", response_model=WorkerProfileOut)
def profile(worker: WorkerContext = Depends(get_current_worker)):
    m = worker.member
    return WorkerProfileOut(
        id=m.id,
        first_name=m.first_name,
        last_name=m.last_name,
        email=m.member_email,
        phone=m.phone,
        crew_id=m.crew_id,
        crew=CrewRef.model_validate(m.crew) if m.crew else None,
    )


@router.get("/projects", response_model=list[ProjectOut])
def projects(db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    return list_projects(db, firm_id=_firm_id(worker), crew_id=worker.crew_id)


@router.get("/projects/{project_id}", response_model=WorkerProjectDetailOut)
def project_detail(project_id: int, db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    d = worker_portal.project_detail(db, project_id, worker.crew_id)
    return WorkerProjectDetailOut(
        **ProjectOut.model_validate(d["project"]).model_dump(),
        client=ClientRef.model_validate(d["client"]) if d["client"] else None,
        comments=[NoteOut.model_validate(n) for n in d["comments"]],
    )


@router.post("/projects/{project_id}/comments", response_model=WorkerCommentOut, status_code=201)
def add_comment(
    project_id: int,
    data: NoteCreate,
    db: Session = Depends(get_db),
    worker: WorkerContext = Depends(get_current_worker),
):
    p = worker_portal.load_crew_project(db, project_id, worker.crew_id)
    note = history.add_worker_comment(db, p, worker.member_id, data)
    return WorkerCommentOut(note=NoteOut.model_validate(note))


@router.get("/projects/{project_id}/reclamations", response_model=ProjectReclamationsOut)
def project_reclamations(project_id: int, db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    rows = worker_portal.project_reclamations(db, project_id, worker.crew_id)
    return ProjectReclamationsOut(reclamations=[ReclamationOut.model_validate(r) for r in rows])


@router.get("/calendar", response_model=CalendarOut)
def crew_calendar(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    worker: WorkerContext = Depends(get_current_worker),
):
    today = dt.date.today()
    return worker_portal.crew_calendar(db, worker.crew_id, month or today.month, year or today.year)


@router.get("/reclamations", response_model=WorkerReclamationsOut)
def reclamations(db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    assigned, available = reclamation_service.crew_reclamations(db, worker.crew_id, _firm_id(worker))
    return WorkerReclamationsOut(
        assigned=[WorkerReclamationOut.model_validate(r) for r in assigned],
        available=[WorkerReclamationOut.model_validate(r) for r in available],
        total_count=len(assigned) + len(available),
    )


@router.get("/reclamations/count", response_model=ReclamationCountOut)
def reclamation_count(db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    return reclamation_service.crew_counts(db, worker.crew_id, _firm_id(worker))


@router.get("/reclamations/{reclamation_id}", response_model=WorkerReclamationDetailOut)
def reclamation_detail(reclamation_id: int, db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    r, is_assigned, is_available = reclamation_service.get_for_worker(db, reclamation_id, worker.crew_id, _firm_id(worker))
    return WorkerReclamationDetailOut(
        **WorkerReclamationOut.model_validate(r).model_dump(),
        history=[ReclamationHistoryOut.model_validate(h) for h in list_history(db, r.id)],
        is_assigned=is_assigned,
        is_available=is_available,
    )


@router.post("/reclamations/{reclamation_id}/accept", response_model=WorkerActionOut)
def accept(reclamation_id: int, db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    r = reclamation_service.accept(db, reclamation_id, worker.member_id, worker.crew_id, _firm_id(worker))
    return WorkerActionOut(reclamation=ReclamationOut.model_validate(r), message="Reclamation accepted and added to the calendar")


@router.post("/reclamations/{reclamation_id}/reject", response_model=WorkerActionOut)
def reject(reclamation_id: int, data: RejectIn, db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    r = reclamation_service.reject(db, reclamation_id, worker.member_id, worker.crew_id, data.reason)
    return WorkerActionOut(reclamation=ReclamationOut.model_validate(r), message="Reclamation rejected")


@router.post("/reclamations/{reclamation_id}/start", response_model=WorkerActionOut)
def start(reclamation_id: int, db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    r = reclamation_service.start(db, reclamation_id, worker.member_id, worker.crew_id)
    return WorkerActionOut(reclamation=ReclamationOut.model_validate(r), message="Work on the reclamation started")


@router.post("/reclamations/{reclamation_id}/complete", response_model=WorkerActionOut)
def complete(
    reclamation_id: int,
    data: CompleteIn | None = None,
    db: Session = Depends(get_db),
    worker: WorkerContext = Depends(get_current_worker),
):
    notes = data.notes if data else None
    r = reclamation_service.complete(db, reclamation_id, worker.member_id, worker.crew_id, notes)
    return WorkerActionOut(reclamation=ReclamationOut.model_validate(r), message="Reclamation completed")


@router.post("/reclamations/{reclamation_id}/take", response_model=WorkerActionOut)
def take(reclamation_id: int, db: Session = Depends(get_db), worker: WorkerContext = Depends(get_current_worker)):
    r = reclamation_service.take(db, reclamation_id, worker.member_id, worker.crew_id, _firm_id(worker))
    return WorkerActionOut(reclamation=ReclamationOut.model_validate(r), message="Reclamation assigned to your crew")
