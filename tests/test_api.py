"""
End-to-end tests through the HTTP API.
"""

from datetime import date, timedelta

from queue_desk.services import queue_service

from conftest import sign_in

VISIT_DAY = (date.today() + timedelta(days=7)).isoformat()


def _create_branch(client, admin_headers, name="Main Branch"):
    response = client.post(
        "/branches/",
        json={"name": name, "address": "1 Rizal Ave", "phone": "0917"},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


def _book(client, headers, branch_id, slot="09:00", service_type="basic_haircut"):
    response = client.post(
        "/bookings/",
        json={
            "branch_id": branch_id,
            "service_type": service_type,
            "quantity": 1,
            "booking_date": VISIT_DAY,
            "booking_time": slot,
            "payment_method": "gcash",
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_health(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "Queue Desk Running", "variant": "barbershop"}


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_catalog_and_quote(client):
    catalog = client.get("/catalog/").json()["data"]
    assert catalog["variant"] == "barbershop"
    assert len(catalog["time_slots"]) == 23
    assert {method["code"] for method in catalog["payment_methods"]} == {"gcash", "cash", "card"}

    quote = client.get("/catalog/quote", params={"service_type": "basic_haircut", "quantity": 2})
    assert quote.json()["data"]["total_cost"] == 300
    assert quote.json()["data"]["duration_minutes"] == 30


def test_quote_for_unknown_service_is_not_found(client):
    response = client.get("/catalog/quote", params={"service_type": "wash_fold"})

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_sign_up_session_and_sign_out(client, customer_headers):
    session = client.get("/auth/session", headers=customer_headers)
    assert session.status_code == 200
    assert session.json()["data"]["role"] == "customer"
    assert session.json()["data"]["user"]["full_name"] == "Maria Santos"

    assert client.post("/auth/signout", headers=customer_headers).status_code == 200

    expired = client.get("/auth/session", headers=customer_headers)
    assert expired.status_code == 401
    assert expired.json()["error"]["code"] == "UNAUTHORIZED"


def test_duplicate_email_and_bad_password(client, customer_headers):
    duplicate = client.post(
        "/auth/signup",
        json={"email": "MARIA@queue.test", "password": "another1", "full_name": "Maria Two"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "EMAIL_TAKEN"

    wrong = client.post("/auth/signin", json={"email": "maria@queue.test", "password": "nope-nope"})
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_short_password_is_a_field_error(client):
    response = client.post(
        "/auth/signup",
        json={"email": "short@queue.test", "password": "123", "full_name": "Short Pass"},
    )

    assert response.status_code == 422
    assert "password" in response.json()["error"]["fields"]


def test_protected_routes_need_a_session(client):
    response = client.get("/bookings/mine")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_wrong_role_sees_not_found(client, admin_headers, customer_headers):
    assert client.get("/bookings/", headers=customer_headers).status_code == 404
    assert client.get("/queue/", headers=customer_headers).status_code == 404
    assert client.get("/bookings/mine", headers=admin_headers).status_code == 404


def test_invalid_booking_returns_every_field_error(client, customer_headers):
    response = client.post("/bookings/", json={"quantity": 0}, headers=customer_headers)

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert set(error["fields"]) == {
        "branch_id",
        "service_type",
        "quantity",
        "booking_date",
        "booking_time",
        "payment_method",
    }


def test_customer_sees_and_cancels_own_booking(client, admin_headers, customer_headers):
    branch_id = _create_branch(client, admin_headers)
    booking = _book(client, customer_headers, branch_id)
    assert booking["status"] == "pending"
    assert booking["queue_number"] is None
    assert booking["total_cost"] == 150

    mine = client.get("/bookings/mine", headers=customer_headers).json()["data"]
    assert [item["id"] for item in mine] == [booking["id"]]

    cancelled = client.patch(f"/bookings/{booking['id']}/cancel", headers=customer_headers)
    assert cancelled.json()["data"]["status"] == "cancelled"

    # The cancel invalidates the cached listing.
    mine = client.get("/bookings/mine", headers=customer_headers).json()["data"]
    assert mine[0]["status"] == "cancelled"


def test_admin_queue_flow(client, admin_headers, customer_headers):
    branch_id = _create_branch(client, admin_headers)
    first = _book(client, customer_headers, branch_id, slot="09:00")
    second = _book(client, customer_headers, branch_id, slot="09:30")
    partition = {"branch_id": branch_id, "booking_date": VISIT_DAY}

    assigned = client.post(f"/queue/{first['id']}/assign", headers=admin_headers)
    assert assigned.json()["data"]["queue_number"] == 1
    again = client.post(f"/queue/{first['id']}/assign", headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "QUEUE_ALREADY_ASSIGNED"

    called = client.post("/queue/call-next", json=partition, headers=admin_headers).json()["data"]
    assert called["finished"] is None
    assert called["called"]["id"] == first["id"]

    advanced = client.post("/queue/call-next", json=partition, headers=admin_headers).json()["data"]
    assert advanced["finished"]["status"] == "completed"
    assert advanced["called"]["id"] == second["id"]
    assert advanced["called"]["queue_number"] == 2

    snapshot = client.get("/queue/", params=partition, headers=admin_headers).json()["data"]
    assert snapshot["now_serving"]["id"] == second["id"]
    assert snapshot["in_queue"] == 0

    status = client.get("/queue/status", params=partition, headers=customer_headers).json()["data"]
    assert status["now_serving_number"] == 2
    assert status["my_booking"]["id"] == second["id"]
    assert status["ahead_of_me"] == 0

    completed = client.post("/queue/complete", json=partition, headers=admin_headers)
    assert completed.json()["data"]["status"] == "completed"

    skipped = client.post("/queue/skip", json=partition, headers=admin_headers)
    assert skipped.status_code == 400
    assert skipped.json()["error"]["code"] == "NO_ACTIVE_BOOKING"


def test_admin_status_update_and_filtering(client, admin_headers, customer_headers):
    branch_id = _create_branch(client, admin_headers)
    booking = _book(client, customer_headers, branch_id)

    confirmed = client.patch(
        f"/bookings/{booking['id']}/status", json={"status": "CONFIRMED"}, headers=admin_headers
    )
    assert confirmed.json()["data"]["queue_number"] == 1

    invalid = client.patch(
        f"/bookings/{booking['id']}/status", json={"status": "pending"}, headers=admin_headers
    )
    assert invalid.status_code == 400
    assert invalid.json()["error"]["code"] == "INVALID_STATUS"

    found = client.get("/bookings/", params={"search": "santos"}, headers=admin_headers).json()["data"]
    assert [item["id"] for item in found] == [booking["id"]]
    none = client.get("/bookings/", params={"status": "completed"}, headers=admin_headers).json()["data"]
    assert none == []


def test_branch_with_bookings_cannot_be_deleted(client, admin_headers, customer_headers):
    branch_id = _create_branch(client, admin_headers)
    _book(client, customer_headers, branch_id)

    response = client.delete(f"/branches/{branch_id}", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "BRANCH_IN_USE"
    managed = client.get("/branches/manage", headers=admin_headers).json()["data"]
    assert managed[0]["booking_count"] == 1


def test_branch_edit_is_visible_to_customers(client, admin_headers, customer_headers):
    branch_id = _create_branch(client, admin_headers)
    assert len(client.get("/branches/", headers=customer_headers).json()["data"]) == 1

    client.patch(f"/branches/{branch_id}", json={"is_active": False}, headers=admin_headers)

    assert client.get("/branches/", headers=customer_headers).json()["data"] == []


def test_user_listing_and_delete(client, admin_headers, customer_headers):
    users = client.get("/users/", params={"search": "maria"}, headers=admin_headers).json()["data"]
    assert [user["email"] for user in users] == ["maria@queue.test"]

    response = client.delete(f"/users/{users[0]['id']}", headers=admin_headers)
    assert response.status_code == 200

    assert client.get("/users/", headers=admin_headers).json()["data"] == []


def test_reports(client, admin_headers, customer_headers):
    branch_id = _create_branch(client, admin_headers)
    _book(client, customer_headers, branch_id)

    analytics = client.get("/reports/analytics", params={"month": VISIT_DAY}, headers=admin_headers)
    data = analytics.json()["data"]
    assert data["total_bookings"] == 1
    assert data["revenue_by_payment"] == {"GCash": 150.0}
    assert data["daily_revenue"] == [{"day": VISIT_DAY, "revenue": 150.0}]

    daily = client.get(
        "/reports/daily",
        params={"report_date": VISIT_DAY, "branch_id": branch_id},
        headers=admin_headers,
    ).json()["data"]
    assert daily["pending"] == 1


def test_admin_can_sign_in_again(client, admin_headers):
    headers = sign_in(client, "admin@queue.test", "admin-pass")
    assert client.get("/auth/session", headers=headers).json()["data"]["role"] == "admin"


def test_quote_above_variant_limit_is_a_field_error(client):
    response = client.get("/catalog/quote", params={"service_type": "basic_haircut", "quantity": 11})

    assert response.status_code == 422
    assert "quantity" in response.json()["error"]["fields"]


def test_stale_queue_number_returns_conflict(client, admin_headers, customer_headers, monkeypatch):
    branch_id = _create_branch(client, admin_headers)
    first = _book(client, customer_headers, branch_id, slot="09:00")
    second = _book(client, customer_headers, branch_id, slot="09:30")
    client.post(f"/queue/{first['id']}/assign", headers=admin_headers)
    monkeypatch.setattr(queue_service, "next_queue_number", lambda db, branch_id, booking_date: 1)

    response = client.post(f"/queue/{second['id']}/assign", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["success"] is False
    assert response.json()["error"]["code"] == "QUEUE_CONFLICT"


def test_queue_status_defaults_to_the_customers_branch(client, admin_headers, customer_headers):
    _create_branch(client, admin_headers, name="Alpha")
    beta_id = _create_branch(client, admin_headers, name="Beta")
    booking = _book(client, customer_headers, beta_id)
    client.post(f"/queue/{booking['id']}/assign", headers=admin_headers)

    status = client.get(
        "/queue/status", params={"booking_date": VISIT_DAY}, headers=customer_headers
    ).json()["data"]

    assert status["branch_id"] == beta_id
    assert status["my_booking"]["id"] == booking["id"]
    assert [item["queue_number"] for item in status["queue"]] == [1]


def test_branch_rename_refreshes_cached_booking_listing(client, admin_headers, customer_headers):
    branch_id = _create_branch(client, admin_headers)
    _book(client, customer_headers, branch_id)
    listed = client.get("/bookings/", headers=admin_headers).json()["data"]
    assert listed[0]["branch_name"] == "Main Branch"

    client.patch(f"/branches/{branch_id}", json={"name": "Downtown"}, headers=admin_headers)

    listed = client.get("/bookings/", headers=admin_headers).json()["data"]
    assert listed[0]["branch_name"] == "Downtown"
