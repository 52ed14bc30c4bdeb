"""Pytest fixtures: recording sinks and an app client wired to them."""

import pytest
from fastapi.testclient import TestClient

from src.api.webhooks import get_writer
from src.main import app
from src.services.sheets import SheetsError
from src.services.store import StoreError
from src.services.writer import DualSinkWriter


class FakeStore:
    """Records inserts; assigns sequential ids like a serial column."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []
        self.rows = []

    def insert(self, table, rows):
        self.calls.append((table, rows))
        if self.fail:
            raise StoreError("duplicate key value violates unique constraint")
        inserted = []
        for row in rows:
            stored = {"id": len(self.rows) + 1, **row}
            self.rows.append(stored)
            inserted.append(stored)
        return inserted


class FakeSheets:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def append(self, spreadsheet_id, range_name, rows):
        self.calls.append((spreadsheet_id, range_name, rows))
        if self.fail:
            raise SheetsError("The caller does not have permission")
        return f"{range_name}!A2:K{len(rows) + 1}"


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def sheets():
    return FakeSheets()


@pytest.fixture
def writer(store, sheets):
    return DualSinkWriter(store, sheets, "sheet-id")


@pytest.fixture
def client(writer):
    app.dependency_overrides[get_writer] = lambda: writer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def order_payload():
    return {
        "OrderReceived": "2024-05-01",
        "email": "buyer@example.com",
        "company": "Acme",
        "ContactName": "Pat Doe",
        "ContractNumber": "C-42",
        "StartDate": "2024-06-01",
        "EndDate": "2025-06-01",
        "products": [
            {"ProductDescription": "Widget", "NewRenewal": "New", "Term": "12mo", "Quantity": 3},
            {"ProductDescription": "", "NewRenewal": "New", "Term": "1mo", "Quantity": 5},
        ],
    }
