from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from solarcrm.core.deps import get_db, require_roles
from solarcrm.db.models.user import Role
from solarcrm.schemas.worker import WorkerLoginIn, WorkerLoginOut, MemberIdIn, PinOut, MemberStatusOut
from solarcrm.services import worker_auth
from solarcrm.services.identity import IdentityProviderClient, get_identity_client

router = APIRouter()

BACK_OFFICE = (Role.admin, Role.leiter)


@router.post("/login", response_model=WorkerLoginOut)
def login(
    data: WorkerLoginIn,
    db: Session = Depends(get_db),
    idp: IdentityProviderClient = Depends(get_identity_client),
):
    result = worker_auth.login(db, idp, data.email, data.pin)
    if result is None:
        raise HTTPException(status_code=401, detail="Invalid email or PIN")
    return result


@router.post("/generate-pin", response_model=PinOut)
def generate_pin(data: MemberIdIn, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    pin, member = worker_auth.generate_pin(db, data.member_id, user)
    return PinOut(pin=pin, member_email=member.member_email)


@router.post("/revoke-pin")
def revoke_pin(data: MemberIdIn, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    worker_auth.revoke_pin(db, data.member_id, user)
    return {"success": True, "message": "PIN revoked"}


@router.get("/member-status/{member_id}", response_model=MemberStatusOut)
def member_status(member_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return worker_auth.member_status(db, member_id, user)
