from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from solarcrm.core.deps import get_db, get_current_user
from solarcrm.schemas.auth import LoginIn, TokenOut, UserOut
from solarcrm.crud.users import get_user_by_login, list_firm_ids
from solarcrm.core.security import verify_password, create_access_token

router = APIRouter()

@router.post("/login", response_model=TokenOut)
def login(data: LoginIn, db: Session = Depends(get_db)):
    user = get_user_by_login(db, data.login)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(sub=user.login, role=user.role)
    return TokenOut(access_token=token)

@router.get("/me", response_model=UserOut)
def me(user = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserOut(
        id=user.id,
        login=user.login,
        full_name=user.full_name,
        email=user.email,
        role=user.role,
        firm_ids=list_firm_ids(db, user.id),
    )
