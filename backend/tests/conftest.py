import datetime as dt
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="solarcrm-tests-")
os.environ.update({
    "ENV": "test",
    "DATABASE_URL": f"sqlite:///{_TMP}/test.db",
    "JWT_SECRET": "test-jwt-secret",
    "IDP_JWT_SECRET": "test-idp-secret",
    "IDP_URL": "http://idp.test",
    "IDP_SERVICE_KEY": "service-key",
    "IDP_ANON_KEY": "anon-key",
    "CELERY_TASK_ALWAYS_EAGER": "true",
    "SEED_DEMO": "false",
})
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from solarcrm.core.config import settings
from solarcrm.core.security import create_access_token
from solarcrm.db.base import Base
from solarcrm.db.session import engine, SessionLocal
from solarcrm.db.models.user import User, UserFirm, Role
from solarcrm.db.models.firm import Firm
from solarcrm.db.models.crew import Crew, CrewMember
from solarcrm.db.models.project import Project
from solarcrm.main import app


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class Factory:
    def __init__(self, db):
        self.db = db
        self._n = 0

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def _next(self) -> int:
        self._n += 1
        return self._n

    def user(self, role=Role.admin, firms=(), login=None, password_hash="not-used"):
        u = self._save(User(login=login or f"user{self._next()}", password_hash=password_hash, role=role.value))
        for f in firms:
            self._save(UserFirm(user_id=u.id, firm_id=f.id))
        return u

    def firm(self, name="Sonnenstrom GmbH", **kw):
        return self._save(Firm(name=name, **kw))

    def crew(self, firm, **kw):
        n = self._next()
        kw.setdefault("name", f"Crew {n}")
        kw.setdefault("unique_number", f"C-{n:02d}")
        kw.setdefault("leader_name", "Jonas Weber")
        return self._save(Crew(firm_id=firm.id, **kw))

    def member(self, crew, email=None, pin=None, auth_user_id=None, archived=False, **kw):
        n = self._next()
        kw.setdefault("first_name", "Lena")
        kw.setdefault("last_name", f"Fischer{n}")
        return self._save(CrewMember(
            crew_id=crew.id,
            member_email=email,
            pin=pin,
            pin_created_at=dt.datetime.now(dt.timezone.utc) if pin else None,
            auth_user_id=auth_user_id,
            archived=archived,
            **kw,
        ))

    def project(self, firm, status="work_completed", crew=None, **kw):
        return self._save(Project(firm_id=firm.id, status=status, crew_id=crew.id if crew else None, **kw))


@pytest.fixture
def make(db):
    return Factory(db)


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(sub=user.login, role=user.role)}"}
    return _headers


@pytest.fixture
def worker_headers():
    def _headers(auth_user_id, **claims):
        now = dt.datetime.now(dt.timezone.utc)
        payload = {
            "sub": auth_user_id,
            "aud": settings.IDP_JWT_AUDIENCE,
            "role": "authenticated",
            "iat": int(now.timestamp()),
            "exp": int((now + dt.timedelta(hours=1)).timestamp()),
            **claims,
        }
        return {"Authorization": f"Bearer {jwt.encode(payload, settings.IDP_JWT_SECRET, algorithm='HS256')}"}
    return _headers
