from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from solarcrm.core.deps import get_db, require_roles
from solarcrm.db.models.user import Role
from solarcrm.schemas.admin import UserCreateIn
from solarcrm.schemas.auth import UserOut
from solarcrm.crud.users import create_user, list_users, get_user, get_user_by_login, grant_firm_access, list_firm_ids
from solarcrm.crud.firms import get_firm

router = APIRouter()

def _out(db: Session, u) -> UserOut:
    return UserOut(id=u.id, login=u.login, full_name=u.full_name, email=u.email, role=u.role, firm_ids=list_firm_ids(db, u.id))

@router.get("/users", response_model=list[UserOut])
def users(db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    return [_out(db, u) for u in list_users(db)]

@router.post("/users", response_model=UserOut, status_code=201)
def create_user_endpoint(data: UserCreateIn, db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    if get_user_by_login(db, data.login):
        raise HTTPException(status_code=409, detail="Login already taken")
    return _out(db, create_user(db, data))

@router.post("/users/{user_id}/firms/{firm_id}", response_model=UserOut)
def grant_firm(user_id: int, firm_id: int, db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    u = get_user(db, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    if not get_firm(db, firm_id):
        raise HTTPException(status_code=404, detail="Firm not found")
    grant_firm_access(db, u.id, firm_id)
    return _out(db, u)
