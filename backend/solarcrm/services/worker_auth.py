"""Worker PIN credentials and the login bridge to the identity provider.

A PIN is a six digit code stored on the crew member. It stays valid until
revoked or replaced by a new one; there is no expiry and no single use.
"""
from sqlalchemy.orm import Session

from solarcrm.core.errors import InvalidInputError, NotFoundError, UpstreamError
from solarcrm.core.logging import logger
from solarcrm.core.security import generate_pin as new_pin, generate_throwaway_password
from solarcrm.crud import crews as crew_crud
from solarcrm.db.models._mixins import utcnow
from solarcrm.db.models.crew import CrewMember
from solarcrm.db.models.user import User
from solarcrm.services.access import ensure_firm_access
from solarcrm.services.identity import IdentityProviderClient, IdentityProviderError

WORKER_ROLE = "worker"


def _member_for_actor(db: Session, member_id: int, user: User) -> CrewMember:
    member = crew_crud.get_member(db, member_id)
    if not member:
        raise NotFoundError("Crew member not found", memberId=member_id)
    ensure_firm_access(db, user, member.crew.firm_id)
    return member


def generate_pin(db: Session, member_id: int, user: User) -> tuple[str, CrewMember]:
    """Issue a fresh code, replacing any previous one. The code is returned only here."""
    member = _member_for_actor(db, member_id, user)
    if member.archived:
        raise InvalidInputError("Crew member is archived", memberId=member_id)
    if not member.member_email:
        raise InvalidInputError("Crew member has no e-mail address", memberId=member_id)
    pin = new_pin()
    crew_crud.set_member_pin(db, member, pin, utcnow())
    logger.info("pin_generated", member_id=member.id, user_id=user.id)
    return pin, member


def revoke_pin(db: Session, member_id: int, user: User) -> None:
    member = _member_for_actor(db, member_id, user)
    crew_crud.set_member_pin(db, member, None, None)
    logger.info("pin_revoked", member_id=member.id, user_id=user.id)


def member_status(db: Session, member_id: int, user: User) -> dict:
    member = _member_for_actor(db, member_id, user)
    return {
        "member_id": member.id,
        "member_email": member.member_email,
        "has_pin": bool(member.pin),
        "pin_created_at": member.pin_created_at,
        "can_generate_pin": bool(member.member_email) and not member.archived,
    }


def validate_pin(db: Session, email: str, pin: str) -> CrewMember | None:
    if not email or not pin:
        return None
    return crew_crud.find_member_by_credentials(db, email, pin)


def _ensure_auth_user(db: Session, idp: IdentityProviderClient, member: CrewMember) -> str:
    if member.auth_user_id:
        return member.auth_user_id

    existing = idp.find_user_by_email(member.member_email)
    if existing:
        auth_user_id = existing["id"]
        logger.info("idp_user_found", member_id=member.id, auth_user_id=auth_user_id)
    else:
        created = idp.create_user(
            member.member_email,
            generate_throwaway_password(),
            {
                "first_name": member.first_name,
                "last_name": member.last_name,
                "role": WORKER_ROLE,
                "crew_member_id": member.id,
            },
        )
        auth_user_id = created["id"]
        logger.info("idp_user_created", member_id=member.id, auth_user_id=auth_user_id)

    idp.upsert_profile({
        "id": auth_user_id,
        "email": member.member_email,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "role": WORKER_ROLE,
        "crew_member_id": member.id,
    })
    crew_crud.link_auth_user(db, member, auth_user_id)
    return auth_user_id


def login(db: Session, idp: IdentityProviderClient, email: str, pin: str) -> dict | None:
    """Return a session for the worker, or None when the credentials do not match.

    Each provider step is safe to repeat: the user is looked up by e-mail
    before being created and the profile write is an upsert.
    """
    member = validate_pin(db, email, pin)
    if not member:
        logger.info("worker_login_failed", email=email)
        return None

    try:
        auth_user_id = _ensure_auth_user(db, idp, member)
        password = generate_throwaway_password()
        idp.set_password(auth_user_id, password)
        session = idp.sign_in_with_password(member.member_email, password)
    except IdentityProviderError as e:
        logger.error("worker_login_upstream_failed", member_id=member.id, step=e.step)
        raise UpstreamError("Identity provider request failed", step=e.step) from e

    logger.info("worker_login", member_id=member.id, crew_id=member.crew_id)
    return {
        "access_token": session["access_token"],
        "refresh_token": session.get("refresh_token", ""),
        "user": {
            "id": auth_user_id,
            "email": member.member_email,
            "first_name": member.first_name,
            "last_name": member.last_name,
            "role": WORKER_ROLE,
            "crew_member_id": member.id,
            "crew_id": member.crew_id,
        },
    }
