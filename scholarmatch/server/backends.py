# server/backends.py
"""
Record backends used by the store.

A backend speaks in raw Airtable-shaped records ({"id", "fields"}). Two
implementations share the contract:

- AirtableBackend: the real base, through pyairtable.
- UnconfiguredBackend: no credentials; ``available`` is False and every
  call raises BackendUnavailable.

The store decides what to do from ``available`` and from exceptions; it
never inspects which implementation it holds.
"""

from typing import Any, Dict, List, Mapping, Optional

from pyairtable import Api
from pyairtable.formulas import match

Record = Dict[str, Any]


class BackendUnavailable(RuntimeError):
    """Raised by a backend that cannot serve requests."""


class RecordBackend:
    available: bool = False
    name: str = "none"

    def find(self, table: str, record_id: str) -> Record:
        raise NotImplementedError

    def select(
        self,
        table: str,
        where: Optional[Mapping[str, Any]] = None,
        contains: Optional[Mapping[str, str]] = None,
        sort: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> List[Record]:
        """
        Fetch records.

        - where: field -> value, all must be equal (AND)
        - contains: field -> substring, any may match (OR)
        - sort: field name, prefixed with "-" for descending
        """
        raise NotImplementedError

    def create(self, table: str, fields: Dict[str, Any]) -> Record:
        raise NotImplementedError

    def batch_create(self, table: str, rows: List[Dict[str, Any]]) -> List[Record]:
        raise NotImplementedError

    def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Record:
        raise NotImplementedError

    def destroy(self, table: str, record_ids: List[str]) -> List[str]:
        raise NotImplementedError


class UnconfiguredBackend(RecordBackend):
    name = "memory"

    def _unavailable(self, *args, **kwargs):
        raise BackendUnavailable("Airtable credentials are not configured")

    find = _unavailable
    select = _unavailable
    create = _unavailable
    batch_create = _unavailable
    update = _unavailable
    destroy = _unavailable


def _quote(value: str) -> str:
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_formula(
    where: Optional[Mapping[str, Any]] = None,
    contains: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Airtable filterByFormula for the select() arguments, or None."""
    parts: List[str] = []
    if where:
        parts.append(str(match(dict(where))))
    if contains:
        clauses = [f"FIND({_quote(v)}, {{{field}}}) > 0" for field, v in contains.items()]
        parts.append(clauses[0] if len(clauses) == 1 else f"OR({', '.join(clauses)})")
    if not parts:
        return None
    return parts[0] if len(parts) == 1 else f"AND({', '.join(parts)})"


class AirtableBackend(RecordBackend):
    available = True
    name = "airtable"

    def __init__(self, api_key: str, base_id: str, api: Optional[Api] = None):
        self._api = api or Api(api_key)
        self._base_id = base_id

    def _table(self, name: str):
        return self._api.table(self._base_id, name)

    def find(self, table: str, record_id: str) -> Record:
        return self._table(table).get(record_id)

    def select(
        self,
        table: str,
        where: Optional[Mapping[str, Any]] = None,
        contains: Optional[Mapping[str, str]] = None,
        sort: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> List[Record]:
        options: Dict[str, Any] = {}
        formula = build_formula(where, contains)
        if formula:
            options["formula"] = formula
        if sort:
            options["sort"] = [sort]
        if max_records:
            options["max_records"] = max_records
        return self._table(table).all(**options)

    def create(self, table: str, fields: Dict[str, Any]) -> Record:
        return self._table(table).create(fields)

    def batch_create(self, table: str, rows: List[Dict[str, Any]]) -> List[Record]:
        return self._table(table).batch_create(rows)

    def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Record:
        return self._table(table).update(record_id, fields)

    def destroy(self, table: str, record_ids: List[str]) -> List[str]:
        deleted = self._table(table).batch_delete(record_ids)
        return [d["id"] for d in deleted]
