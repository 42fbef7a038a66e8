import os

# Settings are read at import time, so pin them before queue_desk is imported.
os.environ["QUEUE_DESK_DATABASE_URL"] = "sqlite://"
os.environ["QUEUE_DESK_VARIANT"] = "barbershop"
os.environ["QUEUE_DESK_ENABLE_SCHEDULER"] = "false"
os.environ["QUEUE_DESK_ADMIN_EMAIL"] = "admin@queue.test"
os.environ["QUEUE_DESK_ADMIN_PASSWORD"] = "admin-pass"

from datetime import date, time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from werkzeug.security import generate_password_hash  # noqa: E402

from queue_desk.catalog import BARBERSHOP  # noqa: E402
from queue_desk.db.models import Booking, Branch, UserProfile  # noqa: E402
from queue_desk.db.session import Base, SessionLocal, engine  # noqa: E402

SERVICE_DAY = date(2030, 5, 14)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(full_name="Juan Dela Cruz", email=None, role="customer"):
        counter["n"] += 1
        user = UserProfile(
            full_name=full_name,
            email=email or f"user{counter['n']}@queue.test",
            role=role,
            password_hash=generate_password_hash("secret123"),
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_branch(db):
    def _make_branch(name="Main Branch", is_active=True):
        branch = Branch(name=name, address="1 Rizal Ave", is_active=is_active)
        db.add(branch)
        db.commit()
        return branch

    return _make_branch


@pytest.fixture
def make_booking(db):
    def _make_booking(
        user,
        branch,
        slot="09:00",
        status="pending",
        queue_number=None,
        booking_date=SERVICE_DAY,
        service_type="basic_haircut",
        payment_method="cash",
    ):
        hour, minute = (int(part) for part in slot.split(":"))
        entry = BARBERSHOP.services[service_type]
        booking = Booking(
            user_id=user.id,
            branch_id=branch.id,
            service_type=service_type,
            quantity=1,
            duration_minutes=entry.duration,
            booking_date=booking_date,
            booking_time=time(hour, minute),
            total_cost=entry.price,
            payment_method=payment_method,
            status=status,
            queue_number=queue_number,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make_booking


@pytest.fixture
def client():
    from queue_desk.main import app

    with TestClient(app) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine)


def sign_in(client, email, password):
    response = client.post("/auth/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


@pytest.fixture
def admin_headers(client):
    return sign_in(client, "admin@queue.test", "admin-pass")


@pytest.fixture
def customer_headers(client):
    response = client.post(
        "/auth/signup",
        json={"email": "maria@queue.test", "password": "secret123", "full_name": "Maria Santos"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}
