"""Coverage-benefit and preauthorization overlay.

This module splits plan benefits into primary and secondary tracking
fields and copies primary-plan preauthorization status. At most three
coverage benefits and one preauthorization per benefit are considered.
"""

from __future__ import annotations

from core.constants import (
    ACTIVE_STATUS,
    BENEFIT_TYPE_FIELD,
    COPAY_AMOUNT_FIELD,
    COVERAGE_BENEFIT,
    COVERAGE_BENEFIT_LIMIT,
    COVERAGE_BENEFIT_LINK_FIELD,
    EXPIRATION_DATE_FIELD,
    FLAG_NO,
    FLAG_YES,
    OUT_OF_POCKET_MAX_FIELD,
    PA_EXPIRATION,
    PA_STATUS,
    PLAN_ROLE_PATH,
    PLAN_STATUS_PATH,
    PREAUTHORIZATION,
    PREAUTHORIZATION_LIMIT,
    PRIMARY_BENEFIT_TYPE,
    PRIMARY_COPAY_AMOUNT,
    PRIMARY_OOP_MAX,
    PRIMARY_PA_REQUIRED,
    PRIMARY_ROLE,
    PRIOR_AUTH_REQUIRED_FIELD,
    SECONDARY_BENEFIT_TYPE,
    SECONDARY_COPAY_AMOUNT,
    SECONDARY_ROLE,
    STATUS_FIELD,
    YES_VALUE,
)
from core.tracking_record import TrackingRecord
from core.types import EnrollmentEvent, FilterCondition, SourceRecord
from mapping.field_resolver import read_field_value, resolve_field
from mapping.record_fetcher import RecordFetcher

_BENEFIT_FIELDS = (
    PLAN_STATUS_PATH,
    PLAN_ROLE_PATH,
    PRIOR_AUTH_REQUIRED_FIELD,
    BENEFIT_TYPE_FIELD,
    COPAY_AMOUNT_FIELD,
    OUT_OF_POCKET_MAX_FIELD,
)
_PREAUTHORIZATION_FIELDS = (
    COVERAGE_BENEFIT_LINK_FIELD,
    PLAN_ROLE_PATH,
    STATUS_FIELD,
    EXPIRATION_DATE_FIELD,
)


def apply_coverage_overlay(
    fetcher: RecordFetcher,
    event: EnrollmentEvent,
    tracking_record: TrackingRecord,
) -> None:
    """Write benefit and preauthorization fields from coverage benefits.

    Args:
        fetcher: Source record fetcher.
        event: Event being processed.
        tracking_record: Base tracking record to enrich.
    """
    benefits = fetcher.fetch(
        COVERAGE_BENEFIT,
        event,
        limit=COVERAGE_BENEFIT_LIMIT,
        extra_fields=_BENEFIT_FIELDS,
    )
    for benefit in benefits:
        if read_field_value(benefit, PLAN_STATUS_PATH) == ACTIVE_STATUS:
            _apply_plan_benefit(benefit, tracking_record)
        _apply_preauthorization(fetcher, event, benefit, tracking_record)


def _apply_plan_benefit(benefit: SourceRecord, tracking_record: TrackingRecord) -> None:
    role = read_field_value(benefit, PLAN_ROLE_PATH)
    if role == PRIMARY_ROLE:
        prior_auth_required = read_field_value(benefit, PRIOR_AUTH_REQUIRED_FIELD)
        pa_flag = FLAG_YES if prior_auth_required == YES_VALUE else FLAG_NO
        tracking_record.set(PRIMARY_PA_REQUIRED, pa_flag)
        tracking_record.set(PRIMARY_BENEFIT_TYPE, resolve_field(benefit, BENEFIT_TYPE_FIELD))
        tracking_record.set(PRIMARY_COPAY_AMOUNT, resolve_field(benefit, COPAY_AMOUNT_FIELD))
        tracking_record.set(PRIMARY_OOP_MAX, resolve_field(benefit, OUT_OF_POCKET_MAX_FIELD))
    elif role == SECONDARY_ROLE:
        tracking_record.set(SECONDARY_BENEFIT_TYPE, resolve_field(benefit, BENEFIT_TYPE_FIELD))
        tracking_record.set(SECONDARY_COPAY_AMOUNT, resolve_field(benefit, COPAY_AMOUNT_FIELD))


def _apply_preauthorization(
    fetcher: RecordFetcher,
    event: EnrollmentEvent,
    benefit: SourceRecord,
    tracking_record: TrackingRecord,
) -> None:
    linked_to_benefit = FilterCondition(field=COVERAGE_BENEFIT_LINK_FIELD, value=benefit.record_id)
    preauthorizations = fetcher.fetch(
        PREAUTHORIZATION,
        event,
        limit=PREAUTHORIZATION_LIMIT,
        extra_conditions=(linked_to_benefit,),
        extra_fields=_PREAUTHORIZATION_FIELDS,
    )
    for preauthorization in preauthorizations:
        if read_field_value(preauthorization, PLAN_ROLE_PATH) != PRIMARY_ROLE:
            continue
        tracking_record.set(PA_STATUS, resolve_field(preauthorization, STATUS_FIELD))
        tracking_record.set(PA_EXPIRATION, resolve_field(preauthorization, EXPIRATION_DATE_FIELD))
