import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "sql"

import uuid
from collections import defaultdict
from contextlib import contextmanager
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storekeep.core.config import settings
from storekeep.core.exceptions import PersistenceError
from storekeep.core.security import create_access_token
from storekeep.database import get_db
from storekeep.db.base import Base
from storekeep.main import app
from storekeep.services.rental_ledger import RentalLedger
from storekeep.services.storage import Storage

TODAY = date(2024, 6, 15)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingStorage(Storage):
    """In-memory Storage that records every call and can be told to fail"""

    def __init__(self):
        self.tables = defaultdict(dict)
        self.calls = []
        self.fail_on = {}

    def add(self, table, **row):
        """Seed a row without recording a call"""
        row.setdefault("id", str(uuid.uuid4()))
        self.tables[table][row["id"]] = dict(row)
        return dict(row)

    def row(self, table, row_id):
        return self.tables[table].get(row_id)

    def writes(self):
        return [call for call in self.calls if call[0] != "select"]

    def _record(self, op, table):
        self.calls.append((op, table))
        if (op, table) in self.fail_on:
            raise PersistenceError(self.fail_on[(op, table)])

    @staticmethod
    def _matches(row, filters):
        for column, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set)):
                if row.get(column) not in value:
                    return False
            elif row.get(column) != value:
                return False
        return True

    def select(self, table, filters=None, *, order_by=None, descending=False, limit=None):
        self._record("select", table)
        rows = [dict(r) for r in self.tables[table].values() if self._matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, table, row):
        self._record("insert", table)
        return self.add(table, **row)

    def update(self, table, filters, patch):
        self._record("update", table)
        for row in self.tables[table].values():
            if self._matches(row, filters):
                row.update(patch)

    def delete(self, table, filters):
        self._record("delete", table)
        for row_id in [i for i, r in self.tables[table].items() if self._matches(r, filters)]:
            del self.tables[table][row_id]


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def ledger(storage):
    return RentalLedger(storage, today=lambda: TODAY)


@pytest.fixture
def facility(storage):
    """One building with one available unit and one customer"""
    building = storage.add("buildings", name="North Depot", address="1 Dock Rd", floors=2)
    unit = storage.add(
        "units",
        building_id=building["id"],
        number="A-101",
        size="10x10",
        price_per_month=100.0,
        status="available",
    )
    customer = storage.add("customers", name="Ada Park", email="ada@example.com")
    return {"building": building, "unit": unit, "customer": customer}


@pytest.fixture
def storage_factory(storage):
    @contextmanager
    def factory():
        yield storage
    return factory


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    token = create_access_token({"sub": settings.OPERATOR_EMAIL})
    yield TestClient(app, headers={"Authorization": f"Bearer {token}"})
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(client):
    """Building, unit and customer created through the API"""
    building = client.post("/api/buildings/", json={"name": "North Depot", "address": "1 Dock Rd"}).json()
    unit = client.post("/api/units/", json={
        "building_id": building["id"],
        "number": "A-101",
        "size": "10x10",
        "price_per_month": 100.0,
    }).json()
    customer = client.post("/api/customers/", json={"name": "Ada Park", "email": "ada@example.com"}).json()
    return {"building": building, "unit": unit, "customer": customer}
