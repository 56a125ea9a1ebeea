from sqlalchemy.orm import Session
from solarcrm.db.models.user import User, UserFirm
from solarcrm.core.security import hash_password
from solarcrm.schemas.admin import UserCreateIn

def get_user_by_login(db: Session, login: str) -> User | None:
    return db.query(User).filter(User.login == login).one_or_none()

def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)

def list_users(db: Session):
    return db.query(User).order_by(User.id).all()

def create_user(db: Session, data: UserCreateIn) -> User:
    u = User(
        login=data.login,
        password_hash=hash_password(data.password),
        role=data.role,
        full_name=data.full_name,
        email=data.email,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u

def has_firm_access(db: Session, user_id: int, firm_id: int) -> bool:
    return db.query(UserFirm).filter(UserFirm.user_id == user_id, UserFirm.firm_id == firm_id).first() is not None

def grant_firm_access(db: Session, user_id: int, firm_id: int) -> None:
    if has_firm_access(db, user_id, firm_id):
        return
    db.add(UserFirm(user_id=user_id, firm_id=firm_id))
    db.commit()

def list_firm_ids(db: Session, user_id: int) -> list[int]:
    return [row.firm_id for row in db.query(UserFirm).filter(UserFirm.user_id == user_id).all()]
