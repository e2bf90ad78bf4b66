"""Tracking record finalization."""

from __future__ import annotations

from core.constants import FINALIZATION_DEFAULTS
from core.tracking_record import TrackingRecord


def finalize_tracking_record(tracking_record: TrackingRecord) -> TrackingRecord:
    """Restore defaults for whitelisted fields that are still blank.

    Args:
        tracking_record: Record about to join the batch accumulator.

    Returns:
        The same record, for chaining.
    """
    for field_name, default_value in FINALIZATION_DEFAULTS.items():
        if tracking_record.is_blank(field_name):
            tracking_record.set(field_name, default_value)
    return tracking_record
