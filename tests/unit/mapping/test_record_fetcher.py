"""Unit tests for source record fetching."""

from __future__ import annotations

import pytest

from core.errors import TracklineConfigError
from core.types import FilterCondition, MappingRule, SourceRecord
from mapping.record_fetcher import RecordFetcher, bind_condition, select_fields
from store.memory_store import InMemoryRecordStore
from tests.source_records import E1_EVENT, load_catalog, source_record


def test_select_fields_deduplicates_and_skips_id() -> None:
    """Selection should keep first-seen order without the implicit Id."""
    rules = (
        MappingRule("member-plan", "Id", "Primary_Member_Id"),
        MappingRule("member-plan", "PlanName", "Primary_Plan_Name"),
        MappingRule("member-plan", "PlanName", "Secondary_Plan_Name"),
    )

    assert select_fields(rules, ("Role", "PlanName")) == ("PlanName", "Role")


def test_bind_condition_replaces_event_parameters() -> None:
    """Parameter conditions should bind to event identifiers."""
    condition = FilterCondition(field="PatientId", parameter="patient_id")

    bound = bind_condition(condition, E1_EVENT)

    assert (bound.field, bound.value, bound.parameter) == ("PatientId", "P1", None)


def test_fetch_filters_orders_and_limits() -> None:
    """Fetch should apply relation and filters, oldest first, capped by limit."""
    store = InMemoryRecordStore(
        [
            _referral("R2", "E1", "Active", "2024-02-02"),
            _referral("R1", "E1", "Active", "2024-01-01"),
            _referral("R3", "E1", "Closed", "2023-01-01"),
            _referral("R4", "E9", "Active", "2022-01-01"),
        ]
    )
    fetcher = RecordFetcher(store, load_catalog())

    records = fetcher.fetch("referral", E1_EVENT, limit=1)

    assert [record.record_id for record in records] == ["R1"]


def test_fetch_projects_selected_fields() -> None:
    """Fetched records should only carry selected fields plus Id and CreatedDate."""
    store = InMemoryRecordStore(
        [source_record("order", "O1", EnrollmentId="E1", DosageId="D1", Carrier="UPS")]
    )
    fetcher = RecordFetcher(store, load_catalog())

    records = fetcher.fetch("order", E1_EVENT, extra_fields=("DosageId",))

    assert dict(records[0].fields) == {"Id": "O1", "DosageId": "D1"}


def test_fetch_records_query_with_extra_conditions() -> None:
    """Extra conditions should be appended to the bound query."""
    store = InMemoryRecordStore()
    fetcher = RecordFetcher(store, load_catalog())
    link = FilterCondition(field="CoverageBenefitId", value="B1")

    fetcher.fetch("preauthorization", E1_EVENT, extra_conditions=(link,))

    query = store.query_log[0]
    assert query.conditions[-1] == link
    assert query.conditions[0] == FilterCondition(field="EnrollmentId", value="E1")


def test_fetch_unknown_type_raises() -> None:
    """Unknown entity types should raise a config error."""
    fetcher = RecordFetcher(InMemoryRecordStore(), load_catalog())

    with pytest.raises(TracklineConfigError):
        fetcher.fetch("not-a-type", E1_EVENT)


def _referral(record_id: str, enrollment_id: str, status: str, created_date: str) -> SourceRecord:
    return source_record(
        "referral",
        record_id,
        EnrollmentId=enrollment_id,
        Status=status,
        CreatedDate=created_date,
    )
