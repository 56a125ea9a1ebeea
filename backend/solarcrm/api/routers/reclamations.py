from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from solarcrm.core.deps import get_db, require_roles
from solarcrm.db.models.user import Role
from solarcrm.schemas.reclamation import ReclamationOut, ReclamationUpdate, ReclamationHistoryOut
from solarcrm.services import reclamations as reclamation_service

router = APIRouter()

BACK_OFFICE = (Role.admin, Role.leiter)


@router.get("", response_model=list[ReclamationOut])
def get_reclamations(
    firm_id: int = Query(..., alias="firmId", gt=0),
    db: Session = Depends(get_db),
    user=Depends(require_roles(*BACK_OFFICE)),
):
    return reclamation_service.list_for_firm(db, firm_id, user)


@router.get("/{reclamation_id}/history", response_model=list[ReclamationHistoryOut])
def get_reclamation_history(reclamation_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return reclamation_service.history_for(db, reclamation_id, user)


@router.get("/{reclamation_id}", response_model=ReclamationOut)
def get_reclamation(reclamation_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return reclamation_service.get_for_user(db, reclamation_id, user)


@router.patch("/{reclamation_id}", response_model=ReclamationOut)
def patch_reclamation(
    reclamation_id: int,
    data: ReclamationUpdate,
    db: Session = Depends(get_db),
    user=Depends(require_roles(*BACK_OFFICE)),
):
    return reclamation_service.reassign_reclamation(db, reclamation_id, data, user)


@router.delete("/{reclamation_id}", response_model=ReclamationOut)
def delete_reclamation(reclamation_id: int, db: Session = Depends(get_db), user=Depends(require_roles(*BACK_OFFICE))):
    return reclamation_service.cancel_reclamation(db, reclamation_id, user)
