import datetime as dt

import pytest

from solarcrm.core.errors import ConflictError
from solarcrm.crud import reclamations as rec_crud
from solarcrm.db.models.project import Project
from solarcrm.db.models.project_history import ProjectHistory
from solarcrm.db.models.reclamation import Reclamation, ReclamationHistory
from solarcrm.db.models.user import Role
from solarcrm.services import reclamations as reclamation_service


def _setup(make, status="work_completed"):
    firm = make.firm()
    crew = make.crew(firm)
    project = make.project(firm, status=status)
    admin = make.user(Role.admin)
    return firm, crew, project, admin


def _history(db, project_id):
    db.expire_all()
    return db.query(ProjectHistory).filter(ProjectHistory.project_id == project_id).all()


def test_create_reclamation_flips_project_and_logs_one_entry(client, db, make, auth_headers):
    firm = make.firm()
    crew = make.crew(firm, id=7)
    project = make.project(firm, status="work_completed", id=42)
    admin = make.user(Role.admin)

    r = client.post(
        "/api/projects/42/reclamation",
        json={"description": "Roof leak", "deadline": "2025-03-01", "crewId": 7},
        headers=auth_headers(admin),
    )

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert body["currentCrewId"] == 7 and body["originalCrewId"] == 7
    assert body["deadline"] == "2025-03-01"

    db.expire_all()
    p = db.get(Project, project.id)
    assert p.status == "reclamation"
    assert p.version == 2
    entries = _history(db, project.id)
    assert len(entries) == 1
    assert entries[0].change_type == "status_change"
    assert entries[0].old_value == "work_completed"
    assert entries[0].new_value == "reclamation"
    assert entries[0].user_id == admin.id

    rh = db.query(ReclamationHistory).filter(ReclamationHistory.reclamation_id == body["id"]).all()
    assert [h.action for h in rh] == ["created"]
    assert crew.id == 7


@pytest.mark.parametrize("status", ["planning", "work_in_progress", "reclamation"])
def test_create_on_ineligible_project_is_rejected_without_side_effects(client, db, make, auth_headers, status):
    firm, crew, project, admin = _setup(make, status=status)

    r = client.post(
        f"/api/projects/{project.id}/reclamation",
        json={"description": "Inverter noise", "deadline": "2025-03-01", "crewId": crew.id},
        headers=auth_headers(admin),
    )

    assert r.status_code == 400
    assert r.json()["currentStatus"] == status
    assert db.query(Reclamation).count() == 0
    assert _history(db, project.id) == []
    assert db.get(Project, project.id).status == status


def test_create_validates_body(client, make, auth_headers):
    firm, crew, project, admin = _setup(make)

    r = client.post(
        f"/api/projects/{project.id}/reclamation",
        json={"description": "", "crewId": crew.id},
        headers=auth_headers(admin),
    )

    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert {tuple(d["loc"])[-1] for d in body["details"]} >= {"deadline", "description"}


def test_create_unknown_project_or_crew(client, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    payload = {"description": "Cable damage", "deadline": "2025-03-01", "crewId": crew.id}

    assert client.post("/api/projects/999/reclamation", json=payload, headers=auth_headers(admin)).status_code == 404
    payload["crewId"] = 999
    r = client.post(f"/api/projects/{project.id}/reclamation", json=payload, headers=auth_headers(admin))
    assert r.status_code == 404
    assert r.json()["error"] == "Crew not found"


def test_crew_of_other_firm_is_not_found(client, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    other_crew = make.crew(make.firm(name="Other"))

    r = client.post(
        f"/api/projects/{project.id}/reclamation",
        json={"description": "Loose panel", "deadline": "2025-03-01", "crewId": other_crew.id},
        headers=auth_headers(admin),
    )
    assert r.status_code == 404


def test_roles_and_firm_access(client, db, make, auth_headers):
    firm, crew, project, _ = _setup(make)
    payload = {"description": "Loose panel", "deadline": "2025-03-01", "crewId": crew.id}

    worker_user = make.user(Role.worker)
    r = client.post(f"/api/projects/{project.id}/reclamation", json=payload, headers=auth_headers(worker_user))
    assert r.status_code == 403

    outsider = make.user(Role.leiter)
    r = client.post(f"/api/projects/{project.id}/reclamation", json=payload, headers=auth_headers(outsider))
    assert r.status_code == 403
    assert db.query(Reclamation).count() == 0

    leiter = make.user(Role.leiter, firms=[firm])
    r = client.post(f"/api/projects/{project.id}/reclamation", json=payload, headers=auth_headers(leiter))
    assert r.status_code == 201

    assert client.post(f"/api/projects/{project.id}/reclamation", json=payload).status_code == 401


def _create(client, headers, project, crew, description="Roof leak"):
    r = client.post(
        f"/api/projects/{project.id}/reclamation",
        json={"description": description, "deadline": "2025-03-01", "crewId": crew.id},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_cancel_restores_project_and_second_cancel_conflicts(client, db, make, auth_headers):
    firm, crew, project, admin = _setup(make, status="paid")
    h = auth_headers(admin)
    rec = _create(client, h, project, crew)

    r = client.delete(f"/api/reclamations/{rec['id']}", headers=h)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"

    db.expire_all()
    assert db.get(Project, project.id).status == "work_completed"
    entries = sorted(_history(db, project.id), key=lambda e: e.id)
    assert [(e.old_value, e.new_value) for e in entries] == [
        ("paid", "reclamation"),
        ("reclamation", "work_completed"),
    ]

    r = client.delete(f"/api/reclamations/{rec['id']}", headers=h)
    assert r.status_code == 409
    assert r.json()["currentStatus"] == "cancelled"
    assert len(_history(db, project.id)) == 2


def test_cancel_unknown_is_not_found(client, make, auth_headers):
    admin = make.user(Role.admin)
    assert client.delete("/api/reclamations/12345", headers=auth_headers(admin)).status_code == 404


def test_reassign_to_new_crew_resets_status_and_logs(client, db, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    other = make.crew(firm)
    h = auth_headers(admin)
    rec = _create(client, h, project, crew)
    db.query(Reclamation).filter(Reclamation.id == rec["id"]).update({"status": "rejected"})
    db.commit()

    r = client.patch(
        f"/api/reclamations/{rec['id']}",
        json={"crewId": other.id, "deadline": "2025-04-15"},
        headers=h,
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert body["currentCrewId"] == other.id
    assert body["originalCrewId"] == crew.id
    assert body["deadline"] == "2025-04-15"

    hist = client.get(f"/api/reclamations/{rec['id']}/history", headers=h).json()
    assert [e["action"] for e in hist] == ["created", "reassigned"]
    assert hist[1]["crewId"] == other.id


def test_edit_without_crew_change_keeps_status(client, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    h = auth_headers(admin)
    rec = _create(client, h, project, crew)

    r = client.patch(f"/api/reclamations/{rec['id']}", json={"description": "Roof leak, east side"}, headers=h)

    assert r.status_code == 200
    assert r.json()["description"] == "Roof leak, east side"
    assert r.json()["status"] == "pending"
    hist = client.get(f"/api/reclamations/{rec['id']}/history", headers=h).json()
    assert [e["action"] for e in hist] == ["created"]


def test_closed_reclamation_cannot_be_edited(client, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    h = auth_headers(admin)
    rec = _create(client, h, project, crew)
    client.delete(f"/api/reclamations/{rec['id']}", headers=h)

    r = client.patch(f"/api/reclamations/{rec['id']}", json={"deadline": "2025-05-01"}, headers=h)
    assert r.status_code == 409
    assert r.json()["currentStatus"] == "cancelled"


def test_listing_by_firm_and_project(client, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    h = auth_headers(admin)
    rec = _create(client, h, project, crew)

    assert client.get("/api/reclamations", headers=h).status_code == 400

    listed = client.get(f"/api/reclamations?firmId={firm.id}", headers=h).json()
    assert [x["id"] for x in listed] == [rec["id"]]

    by_project = client.get(f"/api/projects/{project.id}/reclamations", headers=h).json()
    assert [x["id"] for x in by_project] == [rec["id"]]

    assert client.get(f"/api/reclamations/{rec['id']}", headers=h).json()["description"] == "Roof leak"
    assert client.get("/api/reclamations/999", headers=h).status_code == 404

    outsider = make.user(Role.leiter)
    assert client.get(f"/api/reclamations?firmId={firm.id}", headers=auth_headers(outsider)).status_code == 403
    assert client.get(f"/api/reclamations/{rec['id']}", headers=auth_headers(outsider)).status_code == 403


def test_deadline_must_be_a_date(client, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    r = client.post(
        f"/api/projects/{project.id}/reclamation",
        json={"description": "Roof leak", "deadline": "next week", "crewId": crew.id},
        headers=auth_headers(admin),
    )
    assert r.status_code == 400


def test_stale_accept_cannot_reopen_cancelled_reclamation(client, db, make, auth_headers):
    firm, crew, project, admin = _setup(make)
    member = make.member(crew, email="anna@example.com", auth_user_id="idp-a")
    rec = _create(client, auth_headers(admin), project, crew)
    stale = db.get(Reclamation, rec["id"])
    assert stale.status == "pending"

    assert client.delete(f"/api/reclamations/{rec['id']}", headers=auth_headers(admin)).status_code == 200

    with pytest.raises(ConflictError) as exc:
        reclamation_service.accept(db, rec["id"], member.id, crew.id, firm.id)
    assert exc.value.details["currentStatus"] == "cancelled"

    db.expire_all()
    assert db.get(Reclamation, rec["id"]).status == "cancelled"
    assert db.get(Reclamation, rec["id"]).accepted_by is None
    assert db.get(Project, project.id).status == "work_completed"
    actions = [h.action for h in db.query(ReclamationHistory).filter(ReclamationHistory.reclamation_id == rec["id"])]
    assert "accepted" not in actions
    assert [e.change_type for e in _history(db, project.id)].count("date_update") == 0


def test_stale_cancel_does_not_override_completion(client, db, make, auth_headers, worker_headers):
    firm, crew, project, admin = _setup(make)
    make.member(crew, email="anna@example.com", auth_user_id="idp-a")
    rec = _create(client, auth_headers(admin), project, crew)
    h = worker_headers("idp-a")
    assert client.post(f"/api/worker/reclamations/{rec['id']}/accept", headers=h).status_code == 200
    stale = db.get(Reclamation, rec["id"])
    assert stale.status == "accepted"
    assert client.post(f"/api/worker/reclamations/{rec['id']}/complete", headers=h).status_code == 200

    with pytest.raises(ConflictError) as exc:
        reclamation_service.cancel_reclamation(db, rec["id"], admin)
    assert exc.value.details["currentStatus"] == "completed"

    db.expire_all()
    assert db.get(Reclamation, rec["id"]).status == "completed"
    changes = [(e.old_value, e.new_value) for e in sorted(_history(db, project.id), key=lambda e: e.id) if e.field_name == "status"]
    assert changes == [("work_completed", "reclamation"), ("reclamation", "work_completed")]


def test_reclamation_swap_only_from_allowed_states(db, make):
    firm, crew, project, _ = _setup(make)
    r = make._save(Reclamation(
        project_id=project.id,
        firm_id=firm.id,
        description="Cable damage",
        deadline=dt.date(2025, 3, 1),
        status="cancelled",
        original_crew_id=crew.id,
        current_crew_id=crew.id,
    ))

    assert rec_crud.swap_status(db, r, rec_crud.OPEN_STATUSES, "pending") is False
    db.commit()
    assert rec_crud.current_status(db, r.id) == "cancelled"

    db.query(Reclamation).filter(Reclamation.id == r.id).update({"status": "pending"})
    db.commit()
    assert rec_crud.swap_status(db, r, ("pending",), "accepted", expected_crew_id=crew.id + 1) is False
    assert rec_crud.swap_status(db, r, ("pending",), "accepted", expected_crew_id=crew.id) is True
    db.commit()
    assert r.status == "accepted"
