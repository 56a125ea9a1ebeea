from sqlalchemy.orm import Session

from solarcrm.core.errors import ForbiddenError
from solarcrm.crud.users import has_firm_access
from solarcrm.db.models.user import User, Role


def is_admin(user: User) -> bool:
    return user.role == Role.admin.value


def ensure_firm_access(db: Session, user: User, firm_id: int) -> None:
    """Admins see every firm; leiters only the firms granted to them."""
    if is_admin(user):
        return
    if not has_firm_access(db, user.id, firm_id):
        raise ForbiddenError("No access to this firm", firmId=firm_id)
