"""Consent overlay.

Scans patient-authorization consent records; the last record seen wins.
"""

from __future__ import annotations

from core.constants import (
    ACTIVE_STATUS,
    AUTHORIZATION_CONSENT,
    CONSENT_DATE,
    CONSENT_EXPIRATION,
    CONSENT_TYPE_FIELD,
    EXPIRATION_DATE_FIELD,
    FLAG_YES,
    PATIENT_AUTHORIZATION_TYPE,
    PHI_CONSENT,
    PROGRAM_CONSENT,
    STATUS_FIELD,
)
from core.tracking_record import TrackingRecord
from core.types import EnrollmentEvent, FilterCondition
from mapping.field_resolver import read_field_value, resolve_field
from mapping.record_fetcher import RecordFetcher

_CONSENT_FIELDS = (CONSENT_TYPE_FIELD, STATUS_FIELD, EXPIRATION_DATE_FIELD)
_PATIENT_AUTHORIZATION = FilterCondition(
    field=CONSENT_TYPE_FIELD, value=PATIENT_AUTHORIZATION_TYPE
)


def apply_consent_overlay(
    fetcher: RecordFetcher,
    event: EnrollmentEvent,
    tracking_record: TrackingRecord,
) -> None:
    """Write consent expiration, flags, and date from consent records.

    The consent date reuses the expiration value.

    Args:
        fetcher: Source record fetcher.
        event: Event being processed.
        tracking_record: Base tracking record to enrich.
    """
    consents = fetcher.fetch(
        AUTHORIZATION_CONSENT,
        event,
        extra_conditions=(_PATIENT_AUTHORIZATION,),
        extra_fields=_CONSENT_FIELDS,
    )
    for consent in consents:
        expiration = resolve_field(consent, EXPIRATION_DATE_FIELD)
        tracking_record.set(CONSENT_EXPIRATION, expiration)
        if read_field_value(consent, STATUS_FIELD) != ACTIVE_STATUS:
            continue
        tracking_record.set(PHI_CONSENT, FLAG_YES)
        tracking_record.set(PROGRAM_CONSENT, FLAG_YES)
        tracking_record.set(CONSENT_DATE, expiration)
