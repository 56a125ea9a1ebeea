import secrets
from datetime import datetime, timedelta, timezone
from jose import jwt
from passlib.context import CryptContext
from solarcrm.core.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

PIN_LENGTH = 6

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def create_access_token(sub: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=settings.JWT_EXPIRES_MIN)
    payload = {"sub": sub, "role": role, "iat": int(now.timestamp()), "exp": int(exp.timestamp())}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])

def decode_idp_token(token: str) -> dict:
    """Verify an access token issued by the identity provider (shared HS256 secret)."""
    return jwt.decode(
        token,
        settings.IDP_JWT_SECRET,
        algorithms=["HS256"],
        audience=settings.IDP_JWT_AUDIENCE,
    )

def generate_pin() -> str:
    # uniform over 000000..999999
    return f"{secrets.randbelow(10 ** PIN_LENGTH):0{PIN_LENGTH}d}"

def generate_throwaway_password() -> str:
    return secrets.token_hex(16)
