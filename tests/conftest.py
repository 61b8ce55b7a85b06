import asyncio
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["DISPLAY_TIMEZONE"] = "UTC"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from patient_details.models.database import Base
from patient_details.models.patient import PatientDocument
from patient_details.services.store import AbstractRecordStore, DeleteFailed, Record, StoreUnavailable


class FakeRecordStore(AbstractRecordStore):
    """In-memory store with switchable failures and an optional fetch hold."""

    def __init__(self, records=None):
        self.records = {r.id: r for r in (records or [])}
        self.fetch_calls = []
        self.delete_calls = []
        self.fail_fetch = False
        self.fail_delete = False
        self.hold_fetch: asyncio.Event | None = None

    async def fetch_by_id(self, record_id):
        self.fetch_calls.append(record_id)
        if self.hold_fetch is not None:
            await self.hold_fetch.wait()
        if self.fail_fetch:
            raise StoreUnavailable("connection refused")
        return self.records.get(record_id)

    async def delete(self, record_id):
        self.delete_calls.append(record_id)
        if self.fail_delete or record_id not in self.records:
            raise DeleteFailed(f"could not delete {record_id}")
        del self.records[record_id]


def make_fields(**overrides):
    fields = {
        "patientID": 7,
        "firstname": "Jane",
        "lastname": "Doe",
        "timestamp": "2024-03-05T14:30:00+00:00",
        "sex": "female",
        "blood_pressure": "High",
        "cholesterol_level": "Normal",
        "history_of_stroke": "No",
        "history_of_diabetes": "Yes",
        "smoker": "No",
        "risk_result": "Low Risk",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def jane():
    return Record(id="p42", fields=make_fields())


@pytest.fixture
def fake_store(jane):
    return FakeRecordStore([jane])


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def seeded_patient(session_factory):
    with session_factory() as db:
        db.add(PatientDocument(id="p42", fields=make_fields()))
        db.commit()
    return "p42"
