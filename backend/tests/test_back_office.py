from solarcrm.core.security import hash_password
from solarcrm.db.models.user import Role


def test_login_and_me(client, make):
    firm = make.firm()
    make.user(Role.leiter, login="maria", password_hash=hash_password("s3cret-pass"), firms=[firm])

    assert client.post("/api/auth/login", json={"login": "maria", "password": "wrong"}).status_code == 401

    r = client.post("/api/auth/login", json={"login": "maria", "password": "s3cret-pass"})
    assert r.status_code == 200
    token = r.json()["accessToken"]
    assert r.json()["tokenType"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["login"] == "maria"
    assert me["role"] == "leiter"
    assert me["firmIds"] == [firm.id]


def test_errors_use_a_single_shape(client):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert "error" in r.json()


def test_admin_manages_users_and_firm_grants(client, make, auth_headers):
    admin = make.user(Role.admin)
    h = auth_headers(admin)
    firm = client.post("/api/firms", json={"name": "Sonnenstrom GmbH"}, headers=h).json()

    r = client.post(
        "/api/admin/users",
        json={"login": "lukas", "password": "longenough", "role": "leiter", "fullName": "Lukas Brandt"},
        headers=h,
    )
    assert r.status_code == 201, r.text
    user_id = r.json()["id"]
    assert r.json()["firmIds"] == []

    assert client.post(
        "/api/admin/users",
        json={"login": "lukas", "password": "longenough", "role": "leiter"},
        headers=h,
    ).status_code == 409

    r = client.post(f"/api/admin/users/{user_id}/firms/{firm['id']}", headers=h)
    assert r.json()["firmIds"] == [firm["id"]]
    assert client.post(f"/api/admin/users/{user_id}/firms/999", headers=h).status_code == 404

    leiter = make.user(Role.leiter)
    assert client.get("/api/admin/users", headers=auth_headers(leiter)).status_code == 403
    assert client.post("/api/firms", json={"name": "Nope"}, headers=auth_headers(leiter)).status_code == 403


def test_leiter_sees_only_granted_firms(client, make, auth_headers):
    mine = make.firm(name="Mine")
    make.firm(name="Theirs")
    leiter = make.user(Role.leiter, firms=[mine])

    firms = client.get("/api/firms", headers=auth_headers(leiter)).json()
    assert [f["name"] for f in firms] == ["Mine"]


def test_crews_and_members(client, make, auth_headers):
    firm = make.firm()
    leiter = make.user(Role.leiter, firms=[firm])
    h = auth_headers(leiter)

    r = client.post(
        f"/api/firms/{firm.id}/crews",
        json={"name": "Dachteam", "uniqueNumber": "D-01", "leaderName": "Jonas Weber"},
        headers=h,
    )
    assert r.status_code == 201, r.text
    crew_id = r.json()["id"]

    r = client.post(
        f"/api/crews/{crew_id}/members",
        json={"firstName": "Anna", "lastName": "Keller", "memberEmail": "anna@example.com"},
        headers=h,
    )
    assert r.status_code == 201
    member = r.json()
    assert member["role"] == "worker"
    assert member["hasPin"] is False
    assert "pin" not in member

    r = client.patch(f"/api/crew-members/{member['id']}", json={"phone": "+49 170 000000"}, headers=h)
    assert r.json()["phone"] == "+49 170 000000"

    r = client.patch(f"/api/crew-members/{member['id']}", json={"archived": True}, headers=h)
    assert r.json()["archived"] is True
    assert client.get(f"/api/crews/{crew_id}/members", headers=h).json() == []
    assert len(client.get(f"/api/crews/{crew_id}/members?includeArchived=true", headers=h).json()) == 1

    assert [c["id"] for c in client.get(f"/api/firms/{firm.id}/crews", headers=h).json()] == [crew_id]

    bad = client.post(f"/api/crews/{crew_id}/members", json={"firstName": "X", "lastName": "Y", "memberEmail": "nope"}, headers=h)
    assert bad.status_code == 400

    outsider = make.user(Role.leiter)
    assert client.get(f"/api/firms/{firm.id}/crews", headers=auth_headers(outsider)).status_code == 403


def test_clients(client, make, auth_headers):
    firm = make.firm()
    admin = make.user(Role.admin)
    h = auth_headers(admin)

    r = client.post(f"/api/firms/{firm.id}/clients", json={"name": "Familie Schmidt", "phone": "0301234"}, headers=h)
    assert r.status_code == 201
    assert [c["name"] for c in client.get(f"/api/firms/{firm.id}/clients", headers=h).json()] == ["Familie Schmidt"]
    assert client.get("/api/firms/999/clients", headers=h).status_code == 404


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}
