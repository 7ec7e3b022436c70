"""API tests for assignment listing, detail, updates, deletion, link access and surveys."""

from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

from app.components.assignments.url_signing import generate_assignment_url
from app.models.assignment import Assignment, AssignmentField
from app.models.profile import AccessLevel
from app.platform.config import settings
from tests.conftest import (
    add_field,
    auth_headers,
    batch_payload,
    create_admin,
    create_assessment,
    create_client_org,
    create_profile,
)

URL = "/api/v1/assignments"


def _create(client, headers, user_ids, assessment_ids, **extra):
    resp = client.post(URL, json=batch_payload(user_ids, assessment_ids, **extra), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _link_params(url):
    query = parse_qs(urlparse(url).query)
    return {key: values[0] for key, values in query.items()}


# ---------------------------------------------------------------------------
# GET /api/v1/assignments
# ---------------------------------------------------------------------------


def test_list_is_scoped_by_role(client, db):
    home, other = create_client_org(db), create_client_org(db)
    _, super_headers = create_admin(db, client)
    _, client_admin_headers = create_admin(db, client, access_level=AccessLevel.CLIENT_ADMIN, org=home)
    member = create_profile(db, client=home, with_login=True)
    colleague = create_profile(db, client=home)
    stranger = create_profile(db, client=other)
    assessment = create_assessment(db)
    _create(client, super_headers, [member.id, colleague.id, stranger.id], [assessment.id])

    everything = client.get(URL, headers=super_headers).json()["assignments"]
    mine = client.get(URL, headers=auth_headers(client, member.email)).json()["assignments"]
    client_view = client.get(URL, headers=client_admin_headers).json()["assignments"]

    assert len(everything) == 3
    assert [a["user_id"] for a in mine] == [member.id]
    assert {a["user_id"] for a in client_view} == {member.id, colleague.id}


def test_list_filters(client, db):
    _, headers = create_admin(db, client)
    user_a, user_b = create_profile(db), create_profile(db)
    assessment = create_assessment(db)
    first = _create(client, headers, [user_a.id], [assessment.id])
    _create(client, headers, [user_b.id], [assessment.id])

    by_survey = client.get(URL, params={"survey_id": first["survey_id"]}, headers=headers).json()["assignments"]
    by_user = client.get(URL, params={"user_id": user_b.id}, headers=headers).json()["assignments"]
    completed = client.get(URL, params={"completed": "true"}, headers=headers).json()["assignments"]

    assert [a["user_id"] for a in by_survey] == [user_a.id]
    assert [a["user_id"] for a in by_user] == [user_b.id]
    assert completed == []


# ---------------------------------------------------------------------------
# GET / PATCH / DELETE /api/v1/assignments/{id}
# ---------------------------------------------------------------------------


def test_owner_can_read_but_stranger_cannot(client, db):
    _, headers = create_admin(db, client)
    owner = create_profile(db, with_login=True)
    stranger = create_profile(db, with_login=True)
    assessment = create_assessment(db)
    assignment_id = _create(client, headers, [owner.id], [assessment.id])["assignments"][0]["id"]

    assert client.get(f"{URL}/{assignment_id}", headers=auth_headers(client, owner.email)).status_code == 200
    assert client.get(f"{URL}/{assignment_id}", headers=auth_headers(client, stranger.email)).status_code == 403
    assert client.get(f"{URL}/does-not-exist", headers=headers).status_code == 404


def test_patch_rules(client, db):
    _, headers = create_admin(db, client)
    owner = create_profile(db, with_login=True)
    assessment = create_assessment(db)
    created = _create(client, headers, [owner.id], [assessment.id])["assignments"][0]
    owner_headers = auth_headers(client, owner.email)

    assert client.patch(f"{URL}/{created['id']}", json={}, headers=headers).status_code == 400
    assert client.patch(f"{URL}/{created['id']}", json={"whitelabel": True}, headers=owner_headers).status_code == 403

    started = client.patch(
        f"{URL}/{created['id']}", json={"started_at": "2026-10-18T10:00:00Z"}, headers=owner_headers
    )
    assert started.status_code == 200
    assert started.json()["assignment"]["started_at"].startswith("2026-10-18T10:00:00")


def test_new_expiry_reissues_link(client, db):
    _, headers = create_admin(db, client)
    user = create_profile(db)
    assessment = create_assessment(db)
    created = _create(client, headers, [user.id], [assessment.id])["assignments"][0]

    resp = client.patch(f"{URL}/{created['id']}", json={"expires": "2100-01-15T00:00:00Z", "job_id": "JOB-7"}, headers=headers)

    assert resp.status_code == 200
    updated = resp.json()["assignment"]
    assert updated["job_id"] == "JOB-7"
    assert updated["url"] != created["url"]
    access = client.get(f"{URL}/{created['id']}/access", params=_link_params(updated["url"]))
    assert access.status_code == 200


def test_delete_removes_assignment_and_selection(client, db):
    _, headers = create_admin(db, client)
    member = create_profile(db, with_login=True)
    assessment = create_assessment(db, number_of_questions=1)
    add_field(db, assessment, 1)
    assignment_id = _create(client, headers, [member.id], [assessment.id])["assignments"][0]["id"]

    assert client.delete(f"{URL}/{assignment_id}", headers=auth_headers(client, member.email)).status_code == 403
    resp = client.delete(f"{URL}/{assignment_id}", headers=headers)

    assert resp.status_code == 200
    assert client.get(f"{URL}/{assignment_id}", headers=headers).status_code == 404
    db.expire_all()
    assert db.query(AssignmentField).count() == 0


# ---------------------------------------------------------------------------
# GET /api/v1/assignments/{id}/access
# ---------------------------------------------------------------------------


def test_access_returns_full_instrument_with_custom_fields(client, db):
    _, headers = create_admin(db, client)
    user = create_profile(db, username="rater1")
    assessment = create_assessment(db, is_360=True)
    add_field(db, assessment, 1, type="instructions", content="You are rating [name].")
    add_field(db, assessment, 2, content="How clearly does [name] communicate as a [role]?")
    created = _create(
        client,
        headers,
        [user.id],
        [assessment.id],
        custom_fields={"type": ["name", "role"], "value": ["Sam Park", "manager"]},
    )["assignments"][0]

    resp = client.get(f"{URL}/{created['id']}/access", params=_link_params(created["url"]))

    assert resp.status_code == 200
    data = resp.json()
    assert data["username"] == "rater1"
    assert data["selected"] is False
    assert [q["content"] for q in data["questions"]] == [
        "You are rating Sam Park.",
        "How clearly does Sam Park communicate as a manager?",
    ]


def test_access_returns_only_selected_questions(client, db):
    _, headers = create_admin(db, client)
    user = create_profile(db)
    assessment = create_assessment(db, number_of_questions=2)
    for order in range(1, 5):
        add_field(db, assessment, order)
    created = _create(client, headers, [user.id], [assessment.id])["assignments"][0]

    data = client.get(f"{URL}/{created['id']}/access", params=_link_params(created["url"])).json()

    assert data["selected"] is True
    assert [q["order"] for q in data["questions"]] == [1, 2]


def test_access_rejects_tampered_and_expired_links(client, db):
    _, headers = create_admin(db, client)
    user = create_profile(db)
    assessment = create_assessment(db)
    created = _create(client, headers, [user.id], [assessment.id])["assignments"][0]
    params = _link_params(created["url"])

    assert client.get(f"{URL}/{created['id']}/access", params={**params, "t": params["u"]}).status_code == 403
    assert client.get(f"{URL}/{created['id']}/access", params={"u": params["u"]}).status_code == 403

    expired_url = generate_assignment_url(
        created["id"],
        user.email,
        datetime(2020, 1, 1, tzinfo=timezone.utc),
        base_url=settings.assignment_base_url,
        secret=settings.ASSIGNMENT_SECRET_KEY,
    )
    resp = client.get(f"{URL}/{created['id']}/access", params=_link_params(expired_url))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Assignment URL has expired"


def test_access_rejects_link_signed_for_someone_else(client, db):
    _, headers = create_admin(db, client)
    user = create_profile(db)
    assessment = create_assessment(db)
    created = _create(client, headers, [user.id], [assessment.id])["assignments"][0]

    forged = generate_assignment_url(
        created["id"],
        "someone-else@test.com",
        datetime(2099, 12, 1, tzinfo=timezone.utc),
        base_url=settings.assignment_base_url,
        secret=settings.ASSIGNMENT_SECRET_KEY,
    )
    resp = client.get(f"{URL}/{created['id']}/access", params=_link_params(forged))
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# DELETE /api/v1/clients/{client_id}/surveys/{survey_id}
# ---------------------------------------------------------------------------


def test_delete_survey_for_client(client, db):
    home, other = create_client_org(db), create_client_org(db)
    _, super_headers = create_admin(db, client)
    _, home_admin_headers = create_admin(db, client, access_level=AccessLevel.CLIENT_ADMIN, org=home)
    insider = create_profile(db, client=home)
    outsider = create_profile(db, client=other)
    assessment = create_assessment(db)
    survey_id = _create(client, super_headers, [insider.id, outsider.id], [assessment.id])["survey_id"]

    forbidden = client.delete(f"/api/v1/clients/{other.id}/surveys/{survey_id}", headers=home_admin_headers)
    assert forbidden.status_code == 403

    resp = client.delete(f"/api/v1/clients/{home.id}/surveys/{survey_id}", headers=home_admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "survey_id": survey_id, "deleted": 1}
    db.expire_all()
    assert [a.user_id for a in db.query(Assignment).all()] == [outsider.id]

    again = client.delete(f"/api/v1/clients/{home.id}/surveys/{survey_id}", headers=home_admin_headers)
    assert again.status_code == 404
