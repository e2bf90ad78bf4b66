"""In-memory record store.

This module keeps source records and created tracking records in process
memory. It backs tests and SDK callers that assemble records directly.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from core.tracking_record import TrackingRecord
from core.types import RecordQuery, SourceRecord
from store.query_filtering import run_query


class InMemoryRecordStore:
    """Process-local record store."""

    def __init__(self, records: Iterable[SourceRecord] = ()) -> None:
        self._records: dict[str, list[SourceRecord]] = {}
        self._created: dict[str, list[dict[str, str]]] = {}
        self.query_log: list[RecordQuery] = []
        self.bulk_create_calls = 0
        for record in records:
            self.add(record)

    def add(self, record: SourceRecord) -> None:
        self._records.setdefault(record.entity_type, []).append(record)

    def query(self, query: RecordQuery) -> list[SourceRecord]:
        """Evaluate a query over stored records of the queried type."""
        self.query_log.append(query)
        return run_query(self._records.get(query.entity_type, []), query)

    def bulk_create(self, entity_type: str, records: Sequence[TrackingRecord]) -> int:
        """Store snapshots of created records."""
        self.bulk_create_calls += 1
        created_rows = self._created.setdefault(entity_type, [])
        created_rows.extend(record.to_dict() for record in records)
        return len(records)

    def created(self, entity_type: str) -> list[dict[str, str]]:
        return list(self._created.get(entity_type, []))
