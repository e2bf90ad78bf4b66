"""Unit tests for the batch accumulator."""

from __future__ import annotations

from core.tracking_record import TrackingRecord
from pipeline.accumulator import BatchAccumulator


def test_accumulator_keeps_order_and_discards() -> None:
    """Records should keep append order until discarded."""
    accumulator = BatchAccumulator()
    first = TrackingRecord.with_defaults(())
    second = TrackingRecord.with_defaults(())
    accumulator.append(first)
    accumulator.append(second)

    assert accumulator.records == (first, second)
    assert accumulator.discard() == 2 and len(accumulator) == 0
