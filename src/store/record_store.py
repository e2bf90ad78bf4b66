"""Record store and permission interfaces.

This module declares the collaborator protocols the pipeline depends on.
Concrete stores live in sibling modules.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from core.tracking_record import TrackingRecord
from core.types import RecordQuery, SourceRecord


class RecordStore(Protocol):
    """Queryable source record store with a bulk-create operation."""

    def query(self, query: RecordQuery) -> list[SourceRecord]:
        """Return records matching a bound query in ascending sort order."""

    def bulk_create(self, entity_type: str, records: Sequence[TrackingRecord]) -> int:
        """Persist records of the target entity type and return the count written."""


class CreatePermission(Protocol):
    """Authorization oracle gating the tracking record write."""

    def can_create(self, entity_type: str) -> bool:
        """Return whether the caller may create records of ``entity_type``."""


class StaticCreatePermission:
    """Permission oracle answering from a fixed configured flag."""

    def __init__(self, allowed: bool) -> None:
        self._allowed = allowed

    def can_create(self, entity_type: str) -> bool:
        return self._allowed
