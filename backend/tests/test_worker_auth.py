import json

import httpx

from solarcrm.db.models.crew import CrewMember
from solarcrm.db.models.user import Role
from solarcrm.main import app
from solarcrm.services import worker_auth
from solarcrm.services.identity import IdentityProviderClient, get_identity_client


class FakeIdentityProvider:
    """In-memory GoTrue/PostgREST stand-in behind httpx.MockTransport."""

    def __init__(self, existing_users=(), fail_step=None):
        self.users = {u["id"]: dict(u) for u in existing_users}
        self.profiles = {}
        self.calls = []
        self.fail_step = fail_step

    def handler(self, request: httpx.Request) -> httpx.Response:
        path, method = request.url.path, request.method
        self.calls.append((method, path))
        body = json.loads(request.content) if request.content else {}
        if self.fail_step == (method, path):
            return httpx.Response(500, json={"msg": "boom"})

        if method == "GET" and path == "/auth/v1/admin/users":
            return httpx.Response(200, json={"users": list(self.users.values())})
        if method == "POST" and path == "/auth/v1/admin/users":
            uid = f"idp-{len(self.users) + 1}"
            self.users[uid] = {"id": uid, "email": body["email"], "password": body["password"]}
            return httpx.Response(200, json=self.users[uid])
        if method == "PUT" and path.startswith("/auth/v1/admin/users/"):
            uid = path.rsplit("/", 1)[1]
            self.users[uid]["password"] = body["password"]
            return httpx.Response(200, json=self.users[uid])
        if method == "POST" and path == "/rest/v1/profiles":
            assert "merge-duplicates" in request.headers["prefer"]
            self.profiles[body["id"]] = body
            return httpx.Response(201)
        if method == "POST" and path == "/auth/v1/token":
            assert request.url.params["grant_type"] == "password"
            user = next((u for u in self.users.values() if u["email"] == body["email"]), None)
            if not user or user["password"] != body["password"]:
                return httpx.Response(400, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": f"at-{user['id']}", "refresh_token": "rt"})
        return httpx.Response(404)

    def client(self) -> IdentityProviderClient:
        return IdentityProviderClient("http://idp.test", "service-key", "anon-key", transport=httpx.MockTransport(self.handler))


def _use(fake: FakeIdentityProvider):
    app.dependency_overrides[get_identity_client] = fake.client


def _member_setup(make, email="anna@example.com", **kw):
    firm = make.firm()
    crew = make.crew(firm)
    member = make.member(crew, email=email, **kw)
    return firm, crew, member


def test_generate_pin_then_login(client, db, make, auth_headers):
    firm, crew, member = _member_setup(make)
    admin = make.user(Role.admin)
    fake = FakeIdentityProvider()
    _use(fake)

    r = client.post("/api/worker-auth/generate-pin", json={"memberId": member.id}, headers=auth_headers(admin))
    assert r.status_code == 200, r.text
    pin = r.json()["pin"]
    assert len(pin) == 6 and pin.isdigit()
    assert r.json()["memberEmail"] == "anna@example.com"

    r = client.post("/api/worker-auth/login", json={"email": "anna@example.com", "pin": pin})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["accessToken"] == "at-idp-1"
    assert body["refreshToken"] == "rt"
    assert body["user"] == {
        "id": "idp-1",
        "email": "anna@example.com",
        "firstName": member.first_name,
        "lastName": member.last_name,
        "role": "worker",
        "crewMemberId": member.id,
        "crewId": crew.id,
    }
    assert fake.profiles["idp-1"]["crew_member_id"] == member.id

    db.expire_all()
    assert db.get(CrewMember, member.id).auth_user_id == "idp-1"

    # the pin is reusable and the linked account is not created twice
    r = client.post("/api/worker-auth/login", json={"email": "anna@example.com", "pin": pin})
    assert r.status_code == 200
    assert len(fake.users) == 1
    assert fake.calls.count(("POST", "/auth/v1/admin/users")) == 1


def test_login_links_existing_provider_account(client, db, make):
    firm, crew, member = _member_setup(make, pin="123456")
    fake = FakeIdentityProvider(existing_users=[{"id": "idp-existing", "email": "anna@example.com", "password": "?"}])
    _use(fake)

    r = client.post("/api/worker-auth/login", json={"email": "anna@example.com", "pin": "123456"})

    assert r.status_code == 200
    assert r.json()["user"]["id"] == "idp-existing"
    assert ("POST", "/auth/v1/admin/users") not in fake.calls


def test_login_unknown_member_is_401(client, make):
    fake = FakeIdentityProvider()
    _use(fake)

    r = client.post("/api/worker-auth/login", json={"email": "noone@example.com", "pin": "123456"})

    assert r.status_code == 401
    assert fake.calls == []


def test_login_validates_pin_format(client):
    assert client.post("/api/worker-auth/login", json={"email": "anna@example.com", "pin": "12345"}).status_code == 400
    assert client.post("/api/worker-auth/login", json={"email": "anna@example.com", "pin": "12a456"}).status_code == 400
    assert client.post("/api/worker-auth/login", json={"email": "not-an-email", "pin": "123456"}).status_code == 400


def test_upstream_failure_is_502(client, make):
    _member_setup(make, pin="123456")
    _use(FakeIdentityProvider(fail_step=("POST", "/rest/v1/profiles")))

    r = client.post("/api/worker-auth/login", json={"email": "anna@example.com", "pin": "123456"})

    assert r.status_code == 502
    assert r.json()["step"] == "upsert_profile"


def test_revoke_and_regenerate(client, db, make, auth_headers):
    firm, crew, member = _member_setup(make)
    leiter = make.user(Role.leiter, firms=[firm])
    h = auth_headers(leiter)

    first = client.post("/api/worker-auth/generate-pin", json={"memberId": member.id}, headers=h).json()["pin"]
    assert worker_auth.validate_pin(db, "anna@example.com", first) is not None
    assert worker_auth.validate_pin(db, "anna@example.com", first) is not None

    status = client.get(f"/api/worker-auth/member-status/{member.id}", headers=h).json()
    assert status["hasPin"] is True
    assert status["canGeneratePin"] is True
    assert status["memberEmail"] == "anna@example.com"
    assert "pin" not in status

    assert client.post("/api/worker-auth/revoke-pin", json={"memberId": member.id}, headers=h).status_code == 200
    db.expire_all()
    assert worker_auth.validate_pin(db, "anna@example.com", first) is None
    assert client.get(f"/api/worker-auth/member-status/{member.id}", headers=h).json()["hasPin"] is False

    second = client.post("/api/worker-auth/generate-pin", json={"memberId": member.id}, headers=h).json()["pin"]
    db.expire_all()
    assert worker_auth.validate_pin(db, "anna@example.com", second).id == member.id
    if second != first:
        assert worker_auth.validate_pin(db, "anna@example.com", first) is None


def test_regenerate_replaces_previous_pin(db, make):
    firm, crew, member = _member_setup(make, pin="111111")
    admin = make.user(Role.admin)

    pin, _ = worker_auth.generate_pin(db, member.id, admin)
    db.expire_all()

    stored = db.get(CrewMember, member.id)
    assert stored.pin == pin
    assert stored.pin_created_at is not None
    if pin != "111111":
        assert worker_auth.validate_pin(db, "anna@example.com", "111111") is None


def test_archived_member_cannot_log_in(db, make):
    _member_setup(make, pin="222222", archived=True)
    assert worker_auth.validate_pin(db, "anna@example.com", "222222") is None


def test_generate_pin_rules(client, make, auth_headers):
    firm, crew, member = _member_setup(make, email=None)
    admin = make.user(Role.admin)

    r = client.post("/api/worker-auth/generate-pin", json={"memberId": member.id}, headers=auth_headers(admin))
    assert r.status_code == 400
    assert client.get(f"/api/worker-auth/member-status/{member.id}", headers=auth_headers(admin)).json()["canGeneratePin"] is False

    assert client.post("/api/worker-auth/generate-pin", json={"memberId": 999}, headers=auth_headers(admin)).status_code == 404
    assert client.post("/api/worker-auth/generate-pin", json={"memberId": 0}, headers=auth_headers(admin)).status_code == 400

    outsider = make.user(Role.leiter)
    r = client.post("/api/worker-auth/generate-pin", json={"memberId": member.id}, headers=auth_headers(outsider))
    assert r.status_code == 403
    assert client.post("/api/worker-auth/revoke-pin", json={"memberId": member.id}, headers=auth_headers(outsider)).status_code == 403
    assert client.post("/api/worker-auth/generate-pin", json={"memberId": member.id}).status_code == 401
