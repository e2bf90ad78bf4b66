"""Charitable-program overlay."""

from __future__ import annotations

from core.constants import (
    CHARITABLE_PROGRAM,
    CHARITABLE_PROGRAM_LIMIT,
    EXPIRATION_DATE_FIELD,
    PROGRAM_TYPE_FIELD,
    TPAP_EXPIRATION,
    TPAP_PROGRAM_TYPE,
)
from core.tracking_record import TrackingRecord
from core.types import EnrollmentEvent
from mapping.field_resolver import read_field_value, resolve_field
from mapping.record_fetcher import RecordFetcher


def apply_charitable_overlay(
    fetcher: RecordFetcher,
    event: EnrollmentEvent,
    tracking_record: TrackingRecord,
) -> None:
    """Write the TPAP expiration date from the first active program.

    Non-TPAP programs are covered by conditional rule targeting instead.

    Args:
        fetcher: Source record fetcher.
        event: Event being processed.
        tracking_record: Base tracking record to enrich.
    """
    programs = fetcher.fetch(
        CHARITABLE_PROGRAM,
        event,
        limit=CHARITABLE_PROGRAM_LIMIT,
        extra_fields=(PROGRAM_TYPE_FIELD, EXPIRATION_DATE_FIELD),
    )
    for program in programs:
        if read_field_value(program, PROGRAM_TYPE_FIELD) != TPAP_PROGRAM_TYPE:
            continue
        tracking_record.set(TPAP_EXPIRATION, resolve_field(program, EXPIRATION_DATE_FIELD))
