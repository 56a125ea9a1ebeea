from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from solarcrm.core.config import settings
from solarcrm.db.session import SessionLocal
from solarcrm.core.security import decode_token, decode_idp_token
from solarcrm.db.models.user import User, Role
from solarcrm.db.models.crew import CrewMember
from solarcrm.crud.users import get_user_by_login
from solarcrm.crud.crews import get_member_by_auth_user_id

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> User:
    try:
        payload = decode_token(token)
        login = payload.get("sub")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = get_user_by_login(db, login)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found/disabled")
    return user

def require_roles(*roles: Role):
    allowed = {r.value for r in roles}

    def _dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _dep


@dataclass
class WorkerContext:
    member: CrewMember
    auth_user_id: str

    @property
    def member_id(self) -> int:
        return self.member.id

    @property
    def crew_id(self) -> int:
        return self.member.crew_id


def get_current_worker(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> WorkerContext:
    """Resolve an identity-provider access token to a crew member."""
    try:
        payload = decode_idp_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    auth_user_id = payload.get("sub")
    if not auth_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    member = get_member_by_auth_user_id(db, auth_user_id)
    if not member or member.archived:
        raise HTTPException(status_code=403, detail="Worker profile not found")
    return WorkerContext(member=member, auth_user_id=auth_user_id)
