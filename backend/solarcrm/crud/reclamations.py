from sqlalchemy import select, update
from sqlalchemy.orm import Session
from solarcrm.db.models.reclamation import Reclamation, ReclamationHistory, ReclamationStatus, TERMINAL_STATUSES

OPEN_STATUSES = frozenset(s.value for s in ReclamationStatus) - TERMINAL_STATUSES
# statuses the assigned crew is still working on
ACTIVE_STATUSES = frozenset({
    ReclamationStatus.pending.value,
    ReclamationStatus.accepted.value,
    ReclamationStatus.in_progress.value,
})

def get_reclamation(db: Session, reclamation_id: int) -> Reclamation | None:
    return db.query(Reclamation).filter(Reclamation.id == reclamation_id).one_or_none()

def list_by_project(db: Session, project_id: int):
    return db.query(Reclamation).filter(Reclamation.project_id == project_id).order_by(Reclamation.id.desc()).all()

def list_by_firm(db: Session, firm_id: int):
    return db.query(Reclamation).filter(Reclamation.firm_id == firm_id).order_by(Reclamation.id.desc()).all()

def list_assigned_to_crew(db: Session, crew_id: int):
    return (
        db.query(Reclamation)
        .filter(Reclamation.current_crew_id == crew_id)
        .order_by(Reclamation.deadline, Reclamation.id)
        .all()
    )

def list_available_for_crew(db: Session, crew_id: int, firm_id: int):
    """Reclamations another crew of the same firm declined."""
    return (
        db.query(Reclamation)
        .filter(
            Reclamation.firm_id == firm_id,
            Reclamation.status == ReclamationStatus.rejected.value,
            Reclamation.current_crew_id != crew_id,
        )
        .order_by(Reclamation.deadline, Reclamation.id)
        .all()
    )

def list_history(db: Session, reclamation_id: int):
    return (
        db.query(ReclamationHistory)
        .filter(ReclamationHistory.reclamation_id == reclamation_id)
        .order_by(ReclamationHistory.created_at, ReclamationHistory.id)
        .all()
    )

def add_history_entry(
    db: Session,
    reclamation_id: int,
    action: str,
    action_by: int | None = None,
    action_by_member: int | None = None,
    crew_id: int | None = None,
    reason: str | None = None,
    notes: str | None = None,
) -> ReclamationHistory:
    entry = ReclamationHistory(
        reclamation_id=reclamation_id,
        action=action,
        action_by=action_by,
        action_by_member=action_by_member,
        crew_id=crew_id,
        reason=reason,
        notes=notes,
    )
    db.add(entry)
    db.flush()
    return entry

def swap_status(
    db: Session,
    r: Reclamation,
    allowed,
    new: str | None = None,
    expected_crew_id: int | None = None,
    **values,
) -> bool:
    """Single-row guarded update inside the caller's transaction.

    Writes ``values`` (and ``new`` as the status) only while the row is still
    in one of ``allowed`` and, if given, still assigned to ``expected_crew_id``.
    Returns False when another writer got there first; nothing is written.
    """
    if new is not None:
        values["status"] = new
    db.flush()
    stmt = update(Reclamation).where(Reclamation.id == r.id, Reclamation.status.in_(list(allowed)))
    if expected_crew_id is not None:
        stmt = stmt.where(Reclamation.current_crew_id == expected_crew_id)
    res = db.execute(stmt.values(**values).execution_options(synchronize_session=False))
    if res.rowcount != 1:
        return False
    db.refresh(r)
    return True

def current_status(db: Session, reclamation_id: int) -> str | None:
    return db.execute(select(Reclamation.status).where(Reclamation.id == reclamation_id)).scalar_one_or_none()

def has_open_for_project(db: Session, project_id: int) -> bool:
    return db.query(Reclamation.id).filter(
        Reclamation.project_id == project_id,
        Reclamation.status.in_(list(OPEN_STATUSES)),
    ).first() is not None

def list_active_for_crew(db: Session, crew_id: int, project_id: int | None = None):
    q = db.query(Reclamation).filter(
        Reclamation.current_crew_id == crew_id,
        Reclamation.status.in_(list(ACTIVE_STATUSES)),
    )
    if project_id is not None:
        q = q.filter(Reclamation.project_id == project_id)
    return q.order_by(Reclamation.created_at.desc(), Reclamation.id.desc()).all()
