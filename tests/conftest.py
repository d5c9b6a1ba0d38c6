from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from salon.db import KeyValueStorage, make_engine
from salon.errors import PersistenceError
from salon.ledger import FinanceLedger
from salon.main import create_app
from salon.schemas import Appointment, AppointmentCreate
from salon.store import AppointmentStore

NOW = datetime(2025, 3, 10, 12, 0)
DAY = "2025-03-12"


class FlakyStorage(KeyValueStorage):
    """Storage whose writes can be switched to fail."""

    fail_writes = False

    def save_many(self, collections):
        if self.fail_writes:
            raise PersistenceError(collections.keys())
        super().save_many(collections)


@pytest.fixture
def storage():
    kv = FlakyStorage(make_engine("sqlite://"))
    yield kv
    kv.close()


@pytest.fixture
def ledger(storage):
    return FinanceLedger(storage, clock=lambda: NOW)


@pytest.fixture
def store(storage, ledger):
    return AppointmentStore(storage, ledger, clock=lambda: NOW)


@pytest.fixture
def draft():
    def _draft(time="10:00", duration=60, provider_id="1", date=DAY, price=1500, **extra):
        return AppointmentCreate(
            provider_id=provider_id,
            date=date,
            time=time,
            duration_minutes=duration,
            service_name=extra.pop("service_name", "Facial"),
            client_name=extra.pop("client_name", "Olga"),
            price=price,
            **extra,
        )
    return _draft


@pytest.fixture
def make_appointment():
    counter = iter(range(1, 10_000))

    def _make(time="10:00", duration=60, provider_id="1", date=DAY, status="scheduled", **extra):
        return Appointment(
            id=str(next(counter)),
            provider_id=provider_id,
            date=date,
            time=time,
            duration_minutes=duration,
            status=status,
            created_at=NOW,
            **extra,
        )
    return _make


@pytest.fixture
def client(storage):
    app = create_app(storage)
    with TestClient(app) as c:
        yield c


def _login(client, username, password):
    resp = client.post("/auth/login", data={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def anna(client):
    return _login(client, "anna", "anna123")


@pytest.fixture
def maria(client):
    return _login(client, "maria", "maria123")
