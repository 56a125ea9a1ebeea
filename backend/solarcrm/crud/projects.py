from sqlalchemy import select, update
from sqlalchemy.orm import Session
from solarcrm.db.models.project import Project
from solarcrm.schemas.project import ProjectCreate

def list_projects(db: Session, firm_id: int | None = None, crew_id: int | None = None):
    q = db.query(Project)
    if firm_id is not None:
        q = q.filter(Project.firm_id == firm_id)
    if crew_id is not None:
        q = q.filter(Project.crew_id == crew_id)
    return q.order_by(Project.id).all()

def get_project(db: Session, project_id: int) -> Project | None:
    return db.query(Project).filter(Project.id == project_id).one_or_none()

def create_project(db: Session, data: ProjectCreate, leiter_id: int | None = None) -> Project:
    p = Project(
        firm_id=data.firm_id,
        client_id=data.client_id,
        leiter_id=leiter_id,
        crew_id=data.crew_id,
        equipment_expected_date=data.equipment_expected_date,
        work_start_date=data.work_start_date,
        work_end_date=data.work_end_date,
        installation_person_first_name=data.installation_person_first_name,
        installation_person_last_name=data.installation_person_last_name,
        installation_person_address=data.installation_person_address,
        installation_person_phone=data.installation_person_phone,
        notes=data.notes,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p

def swap_status(db: Session, p: Project, expected: str, new: str) -> bool:
    """Compare-and-swap the status inside the caller's transaction.

    Returns False when another writer changed the status since ``expected``
    was read; nothing is written in that case.
    """
    db.flush()
    res = db.execute(
        update(Project)
        .where(Project.id == p.id, Project.status == expected)
        .values(status=new, version=Project.version + 1)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        return False
    db.refresh(p)
    return True

def current_status(db: Session, project_id: int) -> str | None:
    return db.execute(select(Project.status).where(Project.id == project_id)).scalar_one_or_none()
