import datetime as dt
from sqlalchemy.orm import Session
from solarcrm.db.models.crew import Crew, CrewMember
from solarcrm.schemas.crew import CrewCreate, CrewMemberCreate, CrewMemberUpdate

def list_crews(db: Session, firm_id: int, include_archived: bool = False):
    q = db.query(Crew).filter(Crew.firm_id == firm_id)
    if not include_archived:
        q = q.filter(Crew.archived.is_(False))
    return q.order_by(Crew.id).all()

def get_crew(db: Session, crew_id: int) -> Crew | None:
    return db.get(Crew, crew_id)

def create_crew(db: Session, firm_id: int, data: CrewCreate) -> Crew:
    c = Crew(
        firm_id=firm_id,
        name=data.name,
        unique_number=data.unique_number,
        leader_name=data.leader_name,
        phone=data.phone,
        address=data.address,
    )
    db.add(c)
    db.commit()
    db.refresh(c)
    return c

def list_members(db: Session, crew_id: int, include_archived: bool = False):
    q = db.query(CrewMember).filter(CrewMember.crew_id == crew_id)
    if not include_archived:
        q = q.filter(CrewMember.archived.is_(False))
    return q.order_by(CrewMember.id).all()

def get_member(db: Session, member_id: int) -> CrewMember | None:
    return db.get(CrewMember, member_id)

def get_member_by_auth_user_id(db: Session, auth_user_id: str) -> CrewMember | None:
    return db.query(CrewMember).filter(CrewMember.auth_user_id == auth_user_id).first()

def find_member_by_credentials(db: Session, email: str, pin: str) -> CrewMember | None:
    return (
        db.query(CrewMember)
        .filter(
            CrewMember.member_email == email,
            CrewMember.pin == pin,
            CrewMember.archived.is_(False),
        )
        .first()
    )

def create_member(db: Session, crew_id: int, data: CrewMemberCreate) -> CrewMember:
    m = CrewMember(
        crew_id=crew_id,
        first_name=data.first_name,
        last_name=data.last_name,
        member_email=data.member_email,
        phone=data.phone,
        role=data.role,
    )
    db.add(m)
    db.commit()
    db.refresh(m)
    return m

def update_member(db: Session, m: CrewMember, data: CrewMemberUpdate) -> CrewMember:
    for field in ("first_name", "last_name", "member_email", "phone", "role", "archived"):
        v = getattr(data, field)
        if v is not None:
            setattr(m, field, v)
    db.commit()
    db.refresh(m)
    return m

def set_member_pin(db: Session, m: CrewMember, pin: str | None, created_at: dt.datetime | None) -> None:
    m.pin = pin
    m.pin_created_at = created_at
    db.commit()

def link_auth_user(db: Session, m: CrewMember, auth_user_id: str) -> None:
    m.auth_user_id = auth_user_id
    db.commit()

def list_member_emails(db: Session, crew_id: int) -> list[tuple[str, str]]:
    rows = (
        db.query(CrewMember)
        .filter(CrewMember.crew_id == crew_id, CrewMember.archived.is_(False), CrewMember.member_email.is_not(None))
        .order_by(CrewMember.id)
        .all()
    )
    return [(m.member_email, m.full_name) for m in rows]
