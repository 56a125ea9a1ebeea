from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from solarcrm.core.deps import get_db, require_roles
from solarcrm.core.errors import NotFoundError
from solarcrm.db.models.user import Role
from solarcrm.schemas.firm import FirmCreate, FirmOut, ClientCreate, ClientOut
from solarcrm.schemas.crew import CrewCreate, CrewOut, CrewMemberCreate, CrewMemberUpdate, CrewMemberOut
from solarcrm.crud import firms as firm_crud
from solarcrm.crud import crews as crew_crud
from solarcrm.crud.users import list_firm_ids
from solarcrm.services.access import ensure_firm_access, is_admin

router = APIRouter()

BACK_OFFICE = (Role.admin, Role.leiter)


def _firm(db: Session, firm_id: int, user):
    f = firm_crud.get_firm(db, firm_id)
    if not f:
        raise NotFoundError("Firm not found", firmId=firm_id)
    ensure_firm_access(db, user, f.id)
    return f


def _crew(db: Session, crew_id: int, user):
    c = crew_crud.get_crew(db, crew_id)
    if not c:
        raise NotFoundError("Crew not found", crewId=crew_id)
    ensure_firm_access(db, user, c.firm_id)
    return c


@router.get("/firms", response_model=list[FirmOut])
def get_firms(db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    if is_admin(user):
        return firm_crud.list_firms(db)
    return firm_crud.list_firms(db, firm_ids=list_firm_ids(db, user.id))


@router.post("/firms", response_model=FirmOut, status_code=201)
def post_firm(data: FirmCreate, db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    return firm_crud.create_firm(db, data)


@router.get("/firms/{firm_id}/clients", response_model=list[ClientOut])
def get_clients(firm_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    _firm(db, firm_id, user)
    return firm_crud.list_clients(db, firm_id)


@router.post("/firms/{firm_id}/clients", response_model=ClientOut, status_code=201)
def post_client(firm_id: int, data: ClientCreate, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    _firm(db, firm_id, user)
    return firm_crud.create_client(db, firm_id, data)


@router.get("/firms/{firm_id}/crews", response_model=list[CrewOut])
def get_crews(firm_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    _firm(db, firm_id, user)
    return crew_crud.list_crews(db, firm_id)


@router.post("/firms/{firm_id}/crews", response_model=CrewOut, status_code=201)
def post_crew(firm_id: int, data: CrewCreate, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    _firm(db, firm_id, user)
    return crew_crud.create_crew(db, firm_id, data)


@router.get("/crews/{crew_id}/members", response_model=list[CrewMemberOut])
def get_members(
    crew_id: int,
    include_archived: bool = Query(False, alias="includeArchived"),
    db: Session = Depends(get_db),
    user=Depends(require_roles(*BACK_OFFICE)),
):
    _crew(db, crew_id, user)
    return [CrewMemberOut.from_member(m) for m in crew_crud.list_members(db, crew_id, include_archived=include_archived)]


@router.post("/crews/{crew_id}/members", response_model=CrewMemberOut, status_code=201)
def post_member(crew_id: int, data: CrewMemberCreate, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    _crew(db, crew_id, user)
    return CrewMemberOut.from_member(crew_crud.create_member(db, crew_id, data))


@router.patch("/crew-members/{member_id}", response_model=CrewMemberOut)
def patch_member(member_id: int, data: CrewMemberUpdate, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    m = crew_crud.get_member(db, member_id)
    if not m:
        raise NotFoundError("Crew member not found", memberId=member_id)
    ensure_firm_access(db, user, m.crew.firm_id)
    return CrewMemberOut.from_member(crew_crud.update_member(db, m, data))
