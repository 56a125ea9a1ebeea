from sqlalchemy.orm import Session
from solarcrm.db.session import SessionLocal
from solarcrm.core.config import settings
from solarcrm.core.logging import logger
from solarcrm.crud.users import get_user_by_login, create_user
from solarcrm.crud.firms import list_firms, create_firm
from solarcrm.crud.crews import list_crews, create_crew
from solarcrm.schemas.admin import UserCreateIn
from solarcrm.schemas.firm import FirmCreate
from solarcrm.schemas.crew import CrewCreate
from solarcrm.db.models.user import Role

def seed_demo():
    db: Session = SessionLocal()
    try:
        if settings.DEMO_ADMIN_LOGIN and settings.DEMO_ADMIN_PASSWORD:
            u = get_user_by_login(db, settings.DEMO_ADMIN_LOGIN)
            if not u:
                create_user(db, UserCreateIn(
                    login=settings.DEMO_ADMIN_LOGIN,
                    password=settings.DEMO_ADMIN_PASSWORD,
                    role=Role.admin.value,
                    full_name="Demo Admin",
                ))
        # one firm with one crew so the reclamation screens have something to show
        firms = list_firms(db)
        firm = firms[0] if firms else create_firm(db, FirmCreate(name="Demo Solar GmbH"))
        if not list_crews(db, firm.id):
            create_crew(db, firm.id, CrewCreate(name="Crew A", unique_number="A-01", leader_name="Demo Leader"))
        logger.info("demo_seeded", firm_id=firm.id)
    finally:
        db.close()
