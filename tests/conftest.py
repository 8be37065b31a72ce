"""Pytest fixtures for kapdewala tests."""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import build_engine, build_session_factory, init_db
from app.core.security import ROLE_ADMIN, ROLE_DELIVERY, ROLE_STORE, ROLE_USER, hash_password
from app.main import create_app
from app.models.delivery_partner import DeliveryPartner
from app.models.store import Store, StoreService
from app.models.user import Admin, User

PASSWORD = "secret-pass"
# bcrypt is slow; hash once and reuse
PASSWORD_HASH = hash_password(PASSWORD)

_seq = count(1)


def make_settings(database_url="sqlite://"):
    return Settings(
        DATABASE_URL=database_url,
        JWT_SECRET_KEY="test-secret",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def db(settings):
    """A session on a fresh in-memory database."""
    engine = build_engine(settings)
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def app(settings):
    app = create_app(settings)
    yield app
    app.state.engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def app_db(app):
    """A session on the same database the app under test uses."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tokens(app):
    policy = app.state.access_policy

    def issue(identity_id, role):
        return {"Authorization": f"Bearer {policy.create_access_token(identity_id, role)}"}

    issue.user = lambda user: issue(user.id, ROLE_USER)
    issue.store = lambda store: issue(store.id, ROLE_STORE)
    issue.partner = lambda partner: issue(partner.id, ROLE_DELIVERY)
    issue.admin = lambda admin: issue(admin.id, ROLE_ADMIN)
    return issue


# ============================================
# Factories
# ============================================

def make_user(db, name="Asha", email=None):
    user = User(
        name=name,
        email=email or f"{name.lower()}@example.com",
        password_hash=PASSWORD_HASH,
        phone="9876543210",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_store(db, name="Fresh Fold", phone=None, latitude=28.6139, longitude=77.2090,
               is_online=True, is_suspended=False, services=()):
    store = Store(
        name=name,
        phone=phone or f"99{next(_seq):08d}",
        address=f"{name} Road, New Delhi",
        password_hash=PASSWORD_HASH,
        latitude=latitude,
        longitude=longitude,
        is_online=is_online,
        is_suspended=is_suspended,
        services=[StoreService(name=s, price=50.0) for s in services],
    )
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


def make_partner(db, name="Ravi", phone=None, email=None, approved=True, available=True):
    partner = DeliveryPartner(
        name=name,
        phone=phone or f"88{next(_seq):08d}",
        email=email or f"{name.lower()}@riders.example.com",
        password_hash=PASSWORD_HASH,
        address="Sector 5, Noida",
        vehicle_number="DL01AB1234",
        id_proof="https://docs.example.com/id.pdf",
        is_approved=approved,
        is_available=available,
    )
    db.add(partner)
    db.commit()
    db.refresh(partner)
    return partner


def make_admin(db, email="admin@kapdewala.com"):
    admin = Admin(email=email, password_hash=PASSWORD_HASH)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def order_payload(store_id, items=None, **overrides):
    payload = {
        "store_id": store_id,
        "items": items if items is not None else [
            {"service_id": 1, "clothing_type_id": 3, "quantity": 2, "price": 40.0},
            {"service_id": 2, "clothing_type_id": 5, "quantity": 1, "price": 120.5},
        ],
        "pickup_address": {
            "text_address": "12 MG Road, Bengaluru",
            "geo_location": {"lat": 12.9716, "lng": 77.5946},
        },
        "delivery_address": {
            "text_address": "44 Brigade Road, Bengaluru",
            "geo_location": {"lat": 12.9719, "lng": 77.6070},
        },
        "pickup_date": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
        "payment_method": "cash",
    }
    payload.update(overrides)
    return payload
