"""Reclamation workflow.

pending -> accepted -> in_progress -> completed, pending -> rejected when a
crew declines, rejected -> pending when another crew takes it over, and
cancelled from any open state. Every transition that also touches the
project commits the reclamation row, the project status and both history
logs in one transaction.
"""

from sqlalchemy.orm import Session

from solarcrm.core.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from solarcrm.core.logging import logger
from solarcrm.crud import reclamations as rec_crud
from solarcrm.crud.crews import get_crew
from solarcrm.db.models._mixins import utcnow
from solarcrm.db.models.crew import Crew
from solarcrm.db.models.project import ProjectStatus, RECLAMATION_ELIGIBLE_STATUSES
from solarcrm.db.models.project_history import ChangeType
from solarcrm.db.models.reclamation import Reclamation, ReclamationAction, ReclamationStatus
from solarcrm.db.models.user import User
from solarcrm.schemas.reclamation import ReclamationCreate, ReclamationUpdate
from solarcrm.services import history
from solarcrm.services.access import ensure_firm_access


def _firm_crew(db: Session, crew_id: int, firm_id: int) -> Crew:
    crew = get_crew(db, crew_id)
    if not crew or crew.firm_id != firm_id or crew.archived:
        raise NotFoundError("Crew not found", crewId=crew_id)
    return crew


def get_for_user(db: Session, reclamation_id: int, user: User) -> Reclamation:
    r = rec_crud.get_reclamation(db, reclamation_id)
    if not r:
        raise NotFoundError("Reclamation not found", reclamationId=reclamation_id)
    ensure_firm_access(db, user, r.firm_id)
    return r


def list_for_project(db: Session, project_id: int, user: User):
    history.load_project(db, project_id, user)
    return rec_crud.list_by_project(db, project_id)


def list_for_firm(db: Session, firm_id: int, user: User):
    ensure_firm_access(db, user, firm_id)
    return rec_crud.list_by_firm(db, firm_id)


def history_for(db: Session, reclamation_id: int, user: User):
    r = get_for_user(db, reclamation_id, user)
    return rec_crud.list_history(db, r.id)


def _enqueue_notification(reclamation_id: int) -> None:
    # imported here so the API process does not build the celery app at import time
    from solarcrm.worker.tasks import reclamation_assigned_task

    try:
        reclamation_assigned_task.delay(reclamation_id)
    except Exception:
        # the reclamation is already committed; a lost e-mail is not worth a 500
        logger.exception("notification_enqueue_failed", reclamation_id=reclamation_id)


def _swap(db: Session, r: Reclamation, allowed, new: str | None = None, expected_crew_id: int | None = None, **values) -> None:
    if not rec_crud.swap_status(db, r, allowed, new, expected_crew_id=expected_crew_id, **values):
        raise ConflictError(
            "Reclamation changed concurrently",
            current_status=rec_crud.current_status(db, r.id),
        )


def create_reclamation(db: Session, project_id: int, data: ReclamationCreate, user: User) -> Reclamation:
    p = history.load_project(db, project_id, user)
    old_status = p.status
    if old_status not in RECLAMATION_ELIGIBLE_STATUSES:
        raise InvalidInputError(
            "Reclamation can only be created for completed projects",
            currentStatus=old_status,
        )
    _firm_crew(db, data.crew_id, p.firm_id)

    try:
        r = Reclamation(
            project_id=p.id,
            firm_id=p.firm_id,
            description=data.description,
            deadline=data.deadline,
            status=ReclamationStatus.pending.value,
            original_crew_id=data.crew_id,
            current_crew_id=data.crew_id,
            created_by=user.id,
        )
        db.add(r)
        db.flush()
        history.record_status_change(
            db, p, old_status, ProjectStatus.reclamation.value,
            description=f"Reclamation created: {data.description}",
            user_id=user.id,
        )
        rec_crud.add_history_entry(
            db, r.id, ReclamationAction.created.value, action_by=user.id, crew_id=data.crew_id,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_created", reclamation_id=r.id, project_id=p.id, crew_id=data.crew_id, user_id=user.id)
    _enqueue_notification(r.id)
    return r


def reassign_reclamation(db: Session, reclamation_id: int, data: ReclamationUpdate, user: User) -> Reclamation:
    r = get_for_user(db, reclamation_id, user)
    if r.is_terminal:
        raise ConflictError("Reclamation is closed", current_status=r.status)
    crew_changed = data.crew_id is not None and data.crew_id != r.current_crew_id
    if crew_changed:
        _firm_crew(db, data.crew_id, r.firm_id)

    values = {}
    if data.deadline is not None:
        values["deadline"] = data.deadline
    if data.description is not None:
        values["description"] = data.description
    if not crew_changed and not values:
        return r

    try:
        if crew_changed:
            previous = r.current_crew_id
            _swap(
                db, r, rec_crud.OPEN_STATUSES, ReclamationStatus.pending.value,
                current_crew_id=data.crew_id, accepted_by=None, accepted_at=None, **values,
            )
            rec_crud.add_history_entry(
                db, r.id, ReclamationAction.reassigned.value,
                action_by=user.id,
                crew_id=data.crew_id,
                notes=f"Reassigned from crew {previous} to crew {data.crew_id}",
            )
        else:
            _swap(db, r, rec_crud.OPEN_STATUSES, **values)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_updated", reclamation_id=r.id, crew_changed=crew_changed, user_id=user.id)
    if crew_changed:
        _enqueue_notification(r.id)
    return r


def cancel_reclamation(db: Session, reclamation_id: int, user: User) -> Reclamation:
    r = get_for_user(db, reclamation_id, user)
    if r.is_terminal:
        raise ConflictError("Reclamation is already closed", current_status=r.status)
    p = r.project

    try:
        _swap(db, r, rec_crud.OPEN_STATUSES, ReclamationStatus.cancelled.value)
        rec_crud.add_history_entry(db, r.id, ReclamationAction.cancelled.value, action_by=user.id)
        if p.status == ProjectStatus.reclamation.value:
            history.record_status_change(
                db, p, ProjectStatus.reclamation.value, ProjectStatus.work_completed.value,
                description="Reclamation cancelled",
                user_id=user.id,
            )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_cancelled", reclamation_id=r.id, project_id=r.project_id, user_id=user.id)
    return r


# worker side

def crew_reclamations(db: Session, crew_id: int, firm_id: int) -> tuple[list[Reclamation], list[Reclamation]]:
    assigned = rec_crud.list_assigned_to_crew(db, crew_id)
    available = rec_crud.list_available_for_crew(db, crew_id, firm_id)
    return assigned, available


def crew_counts(db: Session, crew_id: int, firm_id: int) -> dict:
    assigned, available = crew_reclamations(db, crew_id, firm_id)
    active = sum(1 for r in assigned if r.status in rec_crud.ACTIVE_STATUSES)
    return {"active_count": active, "available_count": len(available), "total_count": active + len(available)}


def _get(db: Session, reclamation_id: int) -> Reclamation:
    r = rec_crud.get_reclamation(db, reclamation_id)
    if not r:
        raise NotFoundError("Reclamation not found", reclamationId=reclamation_id)
    return r


def visibility(r: Reclamation, crew_id: int, firm_id: int) -> tuple[bool, bool]:
    is_assigned = r.current_crew_id == crew_id
    # the crew that declined it does not get it offered back
    is_available = (
        r.firm_id == firm_id
        and r.status == ReclamationStatus.rejected.value
        and r.current_crew_id != crew_id
    )
    return is_assigned, is_available


def get_for_worker(db: Session, reclamation_id: int, crew_id: int, firm_id: int) -> tuple[Reclamation, bool, bool]:
    r = _get(db, reclamation_id)
    is_assigned, is_available = visibility(r, crew_id, firm_id)
    if not is_assigned and not is_available:
        raise ForbiddenError("Access denied to this reclamation")
    return r, is_assigned, is_available


def _ensure_assigned(r: Reclamation, crew_id: int) -> None:
    if r.current_crew_id != crew_id:
        raise ForbiddenError("This reclamation is not assigned to your crew")


def accept(db: Session, reclamation_id: int, member_id: int, crew_id: int, firm_id: int) -> Reclamation:
    """Accept for the worker's crew and put the deadline on the project calendar."""
    r = _get(db, reclamation_id)
    if r.status == ReclamationStatus.rejected.value:
        if r.firm_id != firm_id:
            raise ForbiddenError("Access denied to this reclamation")
        guard = {"allowed": (ReclamationStatus.rejected.value,)}
    elif r.status == ReclamationStatus.pending.value:
        _ensure_assigned(r, crew_id)
        guard = {"allowed": (ReclamationStatus.pending.value,), "expected_crew_id": crew_id}
    else:
        raise ConflictError("Reclamation cannot be accepted", current_status=r.status)
    p = r.project

    try:
        _swap(
            db, r, new=ReclamationStatus.accepted.value,
            current_crew_id=crew_id, accepted_by=member_id, accepted_at=utcnow(),
            **guard,
        )
        rec_crud.add_history_entry(
            db, r.id, ReclamationAction.accepted.value, action_by_member=member_id, crew_id=crew_id,
        )
        if p.work_start_date != r.deadline:
            old = history.fmt_value(p.work_start_date)
            p.work_start_date = r.deadline
            p.version = p.version + 1
            history.record(
                db,
                project_id=p.id,
                change_type=ChangeType.date_update.value,
                description=history.describe_change("work_start_date", old, r.deadline.isoformat()),
                crew_member_id=member_id,
                field_name="work_start_date",
                old_value=old,
                new_value=r.deadline.isoformat(),
            )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_accepted", reclamation_id=r.id, member_id=member_id, crew_id=crew_id)
    return r


def reject(db: Session, reclamation_id: int, member_id: int, crew_id: int, reason: str) -> Reclamation:
    r = _get(db, reclamation_id)
    _ensure_assigned(r, crew_id)
    if r.status != ReclamationStatus.pending.value:
        raise ConflictError("Reclamation cannot be rejected", current_status=r.status)

    try:
        _swap(
            db, r, (ReclamationStatus.pending.value,), ReclamationStatus.rejected.value,
            expected_crew_id=crew_id,
        )
        rec_crud.add_history_entry(
            db, r.id, ReclamationAction.rejected.value,
            action_by_member=member_id, crew_id=crew_id, reason=reason.strip(),
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_rejected", reclamation_id=r.id, member_id=member_id, crew_id=crew_id)
    return r


def start(db: Session, reclamation_id: int, member_id: int, crew_id: int) -> Reclamation:
    r = _get(db, reclamation_id)
    _ensure_assigned(r, crew_id)
    if r.status != ReclamationStatus.accepted.value:
        raise ConflictError("Reclamation must be accepted before starting", current_status=r.status)

    try:
        _swap(
            db, r, (ReclamationStatus.accepted.value,), ReclamationStatus.in_progress.value,
            expected_crew_id=crew_id,
        )
        rec_crud.add_history_entry(
            db, r.id, ReclamationAction.started.value, action_by_member=member_id, crew_id=crew_id,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_started", reclamation_id=r.id, member_id=member_id)
    return r


def complete(db: Session, reclamation_id: int, member_id: int, crew_id: int, notes: str | None) -> Reclamation:
    r = _get(db, reclamation_id)
    _ensure_assigned(r, crew_id)
    workable = (ReclamationStatus.accepted.value, ReclamationStatus.in_progress.value)
    if r.status not in workable:
        raise ConflictError("Reclamation must be accepted before completing", current_status=r.status)
    notes = notes.strip() if notes else None
    p = r.project

    try:
        _swap(
            db, r, workable, ReclamationStatus.completed.value,
            expected_crew_id=crew_id, completed_at=utcnow(), completed_notes=notes,
        )
        rec_crud.add_history_entry(
            db, r.id, ReclamationAction.completed.value,
            action_by_member=member_id, crew_id=crew_id, notes=notes,
        )
        if p.status == ProjectStatus.reclamation.value:
            description = "Reclamation completed"
            if notes:
                description = f"{description}: {notes[:100]}"
            history.record_status_change(
                db, p, ProjectStatus.reclamation.value, ProjectStatus.work_completed.value,
                description=description,
                crew_member_id=member_id,
            )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_completed", reclamation_id=r.id, project_id=r.project_id, member_id=member_id)
    return r


def take(db: Session, reclamation_id: int, member_id: int, crew_id: int, firm_id: int) -> Reclamation:
    """Pick up a reclamation another crew of the same firm declined."""
    r = _get(db, reclamation_id)
    if r.firm_id != firm_id:
        raise ForbiddenError("Access denied to this reclamation")
    if r.status != ReclamationStatus.rejected.value:
        raise ConflictError("Only rejected reclamations can be taken", current_status=r.status)
    if r.current_crew_id == crew_id:
        raise ConflictError("This reclamation is already assigned to your crew", current_status=r.status)

    try:
        _swap(
            db, r, (ReclamationStatus.rejected.value,), ReclamationStatus.pending.value,
            current_crew_id=crew_id,
        )
        rec_crud.add_history_entry(
            db, r.id, ReclamationAction.reassigned.value,
            action_by_member=member_id, crew_id=crew_id,
            notes="Crew took over a previously rejected reclamation",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(r)
    logger.info("reclamation_taken", reclamation_id=r.id, member_id=member_id, crew_id=crew_id)
    return r
