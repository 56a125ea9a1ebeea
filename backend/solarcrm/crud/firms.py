from sqlalchemy.orm import Session
from solarcrm.db.models.firm import Firm
from solarcrm.db.models.client import Client
from solarcrm.schemas.firm import FirmCreate, ClientCreate

def list_firms(db: Session, firm_ids: list[int] | None = None):
    q = db.query(Firm)
    if firm_ids is not None:
        q = q.filter(Firm.id.in_(firm_ids))
    return q.order_by(Firm.id).all()

def get_firm(db: Session, firm_id: int) -> Firm | None:
    return db.get(Firm, firm_id)

def create_firm(db: Session, data: FirmCreate) -> Firm:
    f = Firm(name=data.name, address=data.address, tax_id=data.tax_id)
    db.add(f)
    db.commit()
    db.refresh(f)
    return f

def list_clients(db: Session, firm_id: int):
    return db.query(Client).filter(Client.firm_id == firm_id).order_by(Client.name).all()

def get_client(db: Session, client_id: int) -> Client | None:
    return db.get(Client, client_id)

def create_client(db: Session, firm_id: int, data: ClientCreate) -> Client:
    c = Client(firm_id=firm_id, name=data.name, email=data.email, phone=data.phone, address=data.address)
    db.add(c)
    db.commit()
    db.refresh(c)
    return c
