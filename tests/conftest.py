from __future__ import annotations

import itertools
from typing import Any, Dict, Iterator, List, Mapping, Optional

import pytest
from fastapi.testclient import TestClient

from scholarmatch.server.app import app, get_store
from scholarmatch.server.backends import Record, RecordBackend, UnconfiguredBackend
from scholarmatch.server.store import ScholarshipStore


class InMemoryBackend(RecordBackend):
    """Airtable stand-in: same record shape, filters evaluated in Python."""

    available = True
    name = "fake"

    def __init__(self) -> None:
        self.tables: Dict[str, Dict[str, Record]] = {}
        self.destroy_calls: List[List[str]] = []
        self._ids = itertools.count(1)

    def seed(self, table: str, fields: Dict[str, Any], record_id: Optional[str] = None) -> Record:
        record_id = record_id or f"rec{next(self._ids):04d}"
        record = {"id": record_id, "createdTime": "2025-01-01T00:00:00.000Z", "fields": dict(fields)}
        self.tables.setdefault(table, {})[record_id] = record
        return record

    def rows(self, table: str) -> List[Record]:
        return list(self.tables.get(table, {}).values())

    def find(self, table: str, record_id: str) -> Record:
        return self.tables[table][record_id]

    def select(
        self,
        table: str,
        where: Optional[Mapping[str, Any]] = None,
        contains: Optional[Mapping[str, str]] = None,
        sort: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> List[Record]:
        records = self.rows(table)
        if where:
            records = [
                r for r in records
                if all(str(r["fields"].get(k)) == str(v) for k, v in where.items())
            ]
        if contains:
            records = [
                r for r in records
                if any(v in str(r["fields"].get(k, "")) for k, v in contains.items())
            ]
        if sort:
            field = sort.lstrip("-")
            records.sort(key=lambda r: str(r["fields"].get(field, "")), reverse=sort.startswith("-"))
        if max_records:
            records = records[:max_records]
        return records

    def create(self, table: str, fields: Dict[str, Any]) -> Record:
        return self.seed(table, fields)

    def batch_create(self, table: str, rows: List[Dict[str, Any]]) -> List[Record]:
        return [self.seed(table, fields) for fields in rows]

    def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Record:
        record = self.tables[table][record_id]
        record["fields"].update(fields)
        return record

    def destroy(self, table: str, record_ids: List[str]) -> List[str]:
        self.destroy_calls.append(list(record_ids))
        for record_id in record_ids:
            self.tables[table].pop(record_id)
        return list(record_ids)


class FailingBackend(RecordBackend):
    """Configured, but every request errors out."""

    available = True
    name = "failing"

    def _fail(self, *args, **kwargs):
        raise RuntimeError("Airtable is down")

    find = _fail
    select = _fail
    create = _fail
    batch_create = _fail
    update = _fail
    destroy = _fail


@pytest.fixture(autouse=True)
def _no_external_services(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("RESUME_WEBHOOK_URL", raising=False)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def memory_store() -> ScholarshipStore:
    return ScholarshipStore(UnconfiguredBackend())


@pytest.fixture
def airtable_store(backend: InMemoryBackend) -> ScholarshipStore:
    return ScholarshipStore(backend)


@pytest.fixture
def failing_store() -> ScholarshipStore:
    return ScholarshipStore(FailingBackend())


def _client_for(store: ScholarshipStore) -> Iterator[TestClient]:
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(memory_store: ScholarshipStore) -> Iterator[TestClient]:
    yield from _client_for(memory_store)


@pytest.fixture
def airtable_client(airtable_store: ScholarshipStore) -> Iterator[TestClient]:
    yield from _client_for(airtable_store)


SCHOLARSHIP_FIELDS: Dict[str, Any] = {
    "Title": "Ada Lovelace Grant",
    "Organization": "Women in Computing",
    "Amount": "₹5,00,000",
    "Deadline": "2025-09-30",
    "Description": "For women studying computer science.",
    "Requirements": "3.2+ GPA",
    "Tags": '["technology", "women"]',
    "Type": "merit-based",
    "IsActive": True,
    "CreatedAt": "2025-01-05T10:00:00+00:00",
}


@pytest.fixture
def profile_payload() -> Dict[str, Any]:
    return {
        "name": "Priya Sharma",
        "email": "priya@example.com",
        "phone": "+91 98765 43210",
        "location": "Pune",
        "educationLevel": "undergraduate",
        "fieldOfStudy": "Computer Science",
        "gpa": "3.8",
        "skills": "Python, SQL,  , Data Analysis",
    }
