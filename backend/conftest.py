"""Shared fixtures: in-memory credential storage and a fake hosted data API."""
import itertools

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmadash.db.init_db import init_db
from pharmadash.gateway.client import GatewayError, StaleGatewayError
from pharmadash.services.credential_store import CredentialStore

ID_COLUMNS = {"inventory": "drug_id", "restocking": "restock_id", "employees": "employee_id"}

OPERATORS = {
    "lt": lambda a, b: a is not None and a < b,
    "eq": lambda a, b: a == b,
}


class FakeDataBackend:
    """Remote tables shared by every handle, like a real hosted database."""

    def __init__(self, tables=("inventory", "restocking", "employees")):
        self.tables = {name: [] for name in tables}
        self.errors = {}
        self.calls = []
        self.gateways = []
        self._ids = itertools.count(1)

    def factory(self, endpoint_url, access_key, version=1):
        gateway = FakeGateway(self, endpoint_url, access_key, version)
        self.gateways.append(gateway)
        return gateway

    def fail(self, operation, table, code="PGRST301", message="JWT expired"):
        self.errors[(operation, table)] = GatewayError(code, message)

    def add_rows(self, table, *rows):
        id_column = ID_COLUMNS.get(table, "id")
        for row in rows:
            stored = dict(row)
            stored.setdefault(id_column, next(self._ids))
            self.tables[table].append(stored)

    def calls_for(self, operation, table=None):
        return [c for c in self.calls if c[0] == operation and (table is None or c[1] == table)]


class FakeGateway:
    def __init__(self, backend, endpoint_url, access_key, version):
        self.backend = backend
        self.endpoint_url = endpoint_url
        self.access_key = access_key
        self.version = version
        self.closed = False

    def close(self):
        self.closed = True

    def _check(self, operation, table):
        if self.closed:
            raise StaleGatewayError(self.version)
        self.backend.calls.append((operation, table, self.version))
        if (operation, table) in self.backend.errors:
            raise self.backend.errors[(operation, table)]
        if table not in self.backend.tables:
            raise GatewayError("42P01", f'relation "public.{table}" does not exist')

    def _rows(self, table, filters):
        rows = []
        for row in self.backend.tables[table]:
            if all(OPERATORS[op](row.get(column), value) for column, op, value in filters):
                rows.append(dict(row))
        return rows

    def select(self, table, columns="*", filters=(), order=None, limit=None):
        self._check("select", table)
        rows = self._rows(table, filters)
        if order:
            key = order.split(".")[0]
            rows.sort(key=lambda r: r.get(key))
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, table, row):
        self._check("insert", table)
        self.backend.add_rows(table, row)
        return dict(self.backend.tables[table][-1])

    def count(self, table, filters=()):
        self._check("count", table)
        return len(self._rows(table, filters))


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def store(session_factory):
    return CredentialStore(session_factory)


@pytest.fixture
def backend():
    return FakeDataBackend()


@pytest.fixture
def seeded_backend(backend):
    backend.add_rows(
        "inventory",
        {"drug_name": "Amoxicillin", "company": "BioMed", "retail_price": 12.99, "current_quantity": 18},
        {"drug_name": "Cetirizine", "company": "AllerCare", "retail_price": 7.25, "current_quantity": 120},
        {"drug_name": "Ibuprofen", "company": "HealthCure", "retail_price": 4.5, "current_quantity": 200},
        {"drug_name": "Omeprazole", "company": "GastroHealth", "retail_price": 9.99, "current_quantity": 9},
    )
    backend.add_rows(
        "restocking",
        {"drug_name": "Amoxicillin", "quantity_needed": 100, "price_per_unit": 9.5, "supplier": "BioMed Distributors"},
    )
    backend.add_rows(
        "employees",
        {"name": "Jane Smith", "shift": "Evening", "salary": 3200},
        {"name": "John Doe", "shift": "Morning", "salary": 3500},
    )
    return backend
