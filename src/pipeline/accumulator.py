"""Batch-scoped tracking record accumulator."""

from __future__ import annotations

from core.tracking_record import TrackingRecord


class BatchAccumulator:
    """Ordered, append-only list of tracking records for one batch.

    One accumulator is created per batch invocation and passed to the
    overlay and fan-out steps; it is flushed once or discarded.
    """

    def __init__(self) -> None:
        self._records: list[TrackingRecord] = []

    def append(self, record: TrackingRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> tuple[TrackingRecord, ...]:
        return tuple(self._records)

    def discard(self) -> int:
        """Drop every accumulated record and return how many were dropped."""
        dropped_count = len(self._records)
        self._records.clear()
        return dropped_count

    def __len__(self) -> int:
        return len(self._records)
