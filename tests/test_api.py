import uuid
from datetime import date

from seva_manager import models
from seva_manager.models.enums import ProfileRole

API = "/api/v1"


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_requests_without_token_are_unauthorized(client):
    response = await client.get(f"{API}/sevas")
    assert response.status_code == 401


async def test_token_without_profile_is_unauthorized(client, auth_headers):
    response = await client.get(f"{API}/profiles/me", headers=auth_headers(uuid.uuid4()))
    assert response.status_code == 401


async def test_ensure_profile_flow(client, auth_headers):
    user_id = uuid.uuid4()
    body = {"userId": str(user_id), "email": "meera@example.org", "fullName": "Meera"}

    first = await client.post(f"{API}/profiles/ensure", json=body, headers=auth_headers(user_id))
    assert first.status_code == 201
    assert first.json()["created"] is True
    assert first.json()["profile"]["role"] == "user"

    second = await client.post(f"{API}/profiles/ensure", json=body, headers=auth_headers(user_id))
    assert second.status_code == 200
    assert second.json()["created"] is False
    assert second.json()["profile"]["id"] == first.json()["profile"]["id"]

    me = await client.get(f"{API}/profiles/me", headers=auth_headers(user_id))
    assert me.status_code == 200
    assert me.json()["landing_page"] == "/user/sevas"
    assert me.json()["capabilities"] == ["manage-own-donors"]


async def test_ensure_profile_for_someone_else_is_forbidden(client, auth_headers):
    body = {"userId": str(uuid.uuid4()), "email": "other@example.org"}
    response = await client.post(f"{API}/profiles/ensure", json=body, headers=auth_headers(uuid.uuid4()))
    assert response.status_code == 403
    assert response.json()["error"] == "authorization_error"


async def test_ensure_profile_cannot_request_admin(client, auth_headers):
    user_id = uuid.uuid4()
    body = {"userId": str(user_id), "email": "boss@example.org", "role": "admin"}
    response = await client.post(f"{API}/profiles/ensure", json=body, headers=auth_headers(user_id))
    assert response.status_code == 403


async def test_set_admin_requires_admin(client, auth_headers, user, admin, make_profile, db):
    target = await make_profile(email="promote.me@example.org")

    denied = await client.post(f"{API}/admin/set-admin", json={"email": target.email}, headers=auth_headers(user))
    assert denied.status_code == 403
    assert denied.json()["error"] == "authorization_error"

    missing = await client.post(f"{API}/admin/set-admin", json={}, headers=auth_headers(admin))
    assert missing.status_code == 400
    assert missing.json()["error"] == "validation_error"

    unknown = await client.post(f"{API}/admin/set-admin", json={"email": "nobody@example.org"}, headers=auth_headers(admin))
    assert unknown.status_code == 404

    granted = await client.post(f"{API}/admin/set-admin", json={"email": target.email}, headers=auth_headers(admin))
    assert granted.status_code == 200
    assert granted.json()["profile"]["role"] == "admin"

    stored = await db.get(models.Profile, target.id, populate_existing=True)
    assert stored.role == ProfileRole.ADMIN


async def test_seva_management_requires_capability(client, auth_headers, user, admin):
    body = {"name": "Annadanam", "total_slots": 2, "amount_options": [251, 1116]}

    denied = await client.post(f"{API}/sevas", json=body, headers=auth_headers(user))
    assert denied.status_code == 403

    created = await client.post(f"{API}/sevas", json=body, headers=auth_headers(admin))
    assert created.status_code == 201
    seva = created.json()
    assert seva["booked_slots"] == 0
    assert seva["remaining_slots"] == 2

    invalid = await client.post(f"{API}/sevas", json={"name": "X", "total_slots": 0}, headers=auth_headers(admin))
    assert invalid.status_code == 422
    assert invalid.json()["error"] == "validation_error"

    listed = await client.get(f"{API}/sevas", headers=auth_headers(user))
    assert [s["name"] for s in listed.json()] == ["Annadanam"]

    patched = await client.patch(f"{API}/sevas/{seva['id']}", json={"is_active": False}, headers=auth_headers(admin))
    assert patched.status_code == 200
    assert (await client.get(f"{API}/sevas", headers=auth_headers(user))).json() == []
    assert (await client.get(f"{API}/sevas/{seva['id']}", headers=auth_headers(user))).status_code == 404

    hidden = await client.get(f"{API}/sevas?include_inactive=true", headers=auth_headers(admin))
    assert len(hidden.json()) == 1

    deleted = await client.delete(f"{API}/sevas/{seva['id']}", headers=auth_headers(admin))
    assert deleted.status_code == 204


async def test_donor_and_payment_flow(client, auth_headers, user, admin, make_seva):
    seva = await make_seva(total_slots=1)

    created = await client.post(
        f"{API}/sevas/{seva.id}/donors",
        json={"donor_name": "Lakshmi", "total_amount": "1000", "paid_amount": "0", "contact_email": ""},
        headers=auth_headers(user),
    )
    assert created.status_code == 201
    donor = created.json()
    assert donor["payment_status"] == "pending"
    assert donor["contact_email"] is None

    # Admins view every donor but cannot enroll their own
    admin_create = await client.post(
        f"{API}/sevas/{seva.id}/donors", json={"donor_name": "X"}, headers=auth_headers(admin)
    )
    assert admin_create.status_code == 403

    negative = await client.post(
        f"{API}/donors/{donor['id']}/payments",
        json={"amount": "-50", "payment_mode": "Cash", "payment_date": str(date.today())},
        headers=auth_headers(user),
    )
    assert negative.status_code == 400
    assert negative.json()["error"] == "validation_error"

    paid = await client.post(
        f"{API}/donors/{donor['id']}/payments",
        json={"amount": "400", "payment_mode": "Cash", "payment_date": str(date.today())},
        headers=auth_headers(user),
    )
    assert paid.status_code == 201
    assert paid.json()["donor"]["payment_status"] == "partial"

    seva_view = await client.get(f"{API}/sevas/{seva.id}", headers=auth_headers(user))
    assert seva_view.json()["booked_slots"] == 1
    assert seva_view.json()["user_booked_count"] == 1

    # The only slot is taken, a second booking conflicts
    second = await client.post(
        f"{API}/sevas/{seva.id}/donors",
        json={"donor_name": "Gopal", "total_amount": "100", "paid_amount": "100"},
        headers=auth_headers(user),
    )
    assert second.status_code == 409
    assert second.json()["error"] == "conflict"

    history = await client.get(f"{API}/donors/{donor['id']}/payments", headers=auth_headers(admin))
    assert history.status_code == 200
    assert len(history.json()["payments"]) == 1

    all_donors = await client.get(f"{API}/sevas/{seva.id}/donors", headers=auth_headers(admin))
    assert all_donors.json()[0]["added_by_name"] == "Regular User"

    report = await client.get(f"{API}/admin/reports/revenue", headers=auth_headers(admin))
    assert report.status_code == 200
    assert float(report.json()["total_revenue"]) == 400.0

    assert (await client.get(f"{API}/admin/dashboard", headers=auth_headers(user))).status_code == 403
    dashboard = await client.get(f"{API}/admin/dashboard", headers=auth_headers(admin))
    assert dashboard.json()["booked_donors"] == 1

    removed = await client.delete(f"{API}/donors/{donor['id']}", headers=auth_headers(user))
    assert removed.status_code == 204
    seva_view = await client.get(f"{API}/sevas/{seva.id}", headers=auth_headers(user))
    assert seva_view.json()["booked_slots"] == 0


async def test_unknown_donor_is_not_found(client, auth_headers, user):
    response = await client.put(
        f"{API}/donors/{uuid.uuid4()}", json={"donor_name": "Nobody"}, headers=auth_headers(user)
    )
    assert response.status_code == 404
    assert response.json() == {"detail": "Donor not found.", "error": "not_found"}
