from sqlalchemy.orm import Session
from solarcrm.db.models.project_history import ProjectHistory
from solarcrm.db.models.project_note import ProjectNote

def add_history_entry(
    db: Session,
    project_id: int,
    change_type: str,
    description: str,
    user_id: int | None = None,
    crew_member_id: int | None = None,
    field_name: str | None = None,
    old_value: str | None = None,
    new_value: str | None = None,
    note_priority: str | None = None,
) -> ProjectHistory:
    """Stage one append-only row; the caller owns the commit."""
    entry = ProjectHistory(
        project_id=project_id,
        user_id=user_id,
        crew_member_id=crew_member_id,
        change_type=change_type,
        field_name=field_name,
        old_value=old_value,
        new_value=new_value,
        description=description,
        note_priority=note_priority,
    )
    db.add(entry)
    db.flush()
    return entry

def list_history(db: Session, project_id: int, limit: int | None = None):
    q = (
        db.query(ProjectHistory)
        .filter(ProjectHistory.project_id == project_id)
        .order_by(ProjectHistory.created_at.desc(), ProjectHistory.id.desc())
    )
    if limit:
        q = q.limit(limit)
    return q.all()

def list_notes(db: Session, project_id: int):
    return (
        db.query(ProjectNote)
        .filter(ProjectNote.project_id == project_id)
        .order_by(ProjectNote.created_at.desc(), ProjectNote.id.desc())
        .all()
    )

def add_note(
    db: Session,
    project_id: int,
    user_id: int | None,
    content: str,
    priority: str,
    crew_member_id: int | None = None,
) -> ProjectNote:
    note = ProjectNote(
        project_id=project_id,
        user_id=user_id,
        crew_member_id=crew_member_id,
        content=content,
        priority=priority,
    )
    db.add(note)
    db.flush()
    return note
