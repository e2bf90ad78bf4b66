"""Diagnosis overlay."""

from __future__ import annotations

from core.constants import CASE, DIAGNOSIS_FIELD, FOP_FULL_NAME, FOP_SHORT_CODE, INDICATION
from core.tracking_record import TrackingRecord
from core.types import EnrollmentEvent
from mapping.field_resolver import resolve_field
from mapping.record_fetcher import RecordFetcher


def apply_diagnosis_overlay(
    fetcher: RecordFetcher,
    event: EnrollmentEvent,
    tracking_record: TrackingRecord,
) -> None:
    """Map care-plan case diagnoses onto the indication field, last case wins.

    Args:
        fetcher: Source record fetcher.
        event: Event being processed.
        tracking_record: Base tracking record to enrich.
    """
    cases = fetcher.fetch(CASE, event, extra_fields=(DIAGNOSIS_FIELD,))
    for case in cases:
        diagnosis = resolve_field(case, DIAGNOSIS_FIELD)
        tracking_record.set(INDICATION, normalize_indication(diagnosis))


def normalize_indication(diagnosis: str) -> str:
    """Collapse the full FOP diagnosis name to its short code.

    Args:
        diagnosis: Free-text diagnosis value.

    Returns:
        ``"FOP"`` for the full FOP name, otherwise the value unchanged.
    """
    if diagnosis == FOP_FULL_NAME:
        return FOP_SHORT_CODE
    return diagnosis
