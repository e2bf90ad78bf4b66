"""Unit tests for dosage fan-out."""

from __future__ import annotations

from core.tracking_record import TrackingRecord
from core.types import SourceRecord
from fanout.engine import FanOutEngine, apply_dosage_passes
from mapping.record_fetcher import RecordFetcher
from pipeline.accumulator import BatchAccumulator
from store.memory_store import InMemoryRecordStore
from tests.source_records import E1_EVENT, load_catalog, source_record


def _dosage(record_id: str, product_code: str, created: str, current: bool = True) -> SourceRecord:
    return source_record(
        "medication-dosage",
        record_id,
        EnrollmentId="E1",
        IsCurrentDose=current,
        ProductCode=product_code,
        DoseAmount="5mg",
        CreatedDate=created,
    )


def _expand(records: list[SourceRecord]) -> tuple[TrackingRecord, BatchAccumulator, int]:
    catalog = load_catalog()
    engine = FanOutEngine(RecordFetcher(InMemoryRecordStore(records), catalog), catalog)
    base_record = TrackingRecord.with_defaults(catalog.target_fields)
    base_record.set("Patient_State", "MA")
    accumulator = BatchAccumulator()
    accumulator.append(base_record)
    derived_count = engine.expand(base_record, E1_EVENT, accumulator)
    return base_record, accumulator, derived_count


def test_expand_without_dosages_keeps_single_base_record() -> None:
    """No current dosages should leave only the base record."""
    base_record, accumulator, derived_count = _expand([])

    assert derived_count == 0 and len(accumulator) == 1
    assert base_record.get("Dosage_Id") is None


def test_expand_mutates_base_then_clones_per_extra_dosage() -> None:
    """Three dosages should yield the mutated base plus two clones."""
    base_record, accumulator, derived_count = _expand(
        [
            _dosage("D1", "NDC-1", "2024-01-01"),
            _dosage("D2", "NDC-2", "2024-01-02"),
            _dosage("D3", "NDC-3", "2024-01-03"),
            _dosage("D4", "NDC-4", "2024-01-04", current=False),
        ]
    )

    assert derived_count == 2 and len(accumulator) == 3
    assert accumulator.records[0] is base_record
    assert [record.get("Dosage_Id") for record in accumulator.records] == ["D1", "D2", "D3"]
    assert all(record.get("Patient_State") == "MA" for record in accumulator.records)


def test_fulfillment_flag_follows_order_match() -> None:
    """Dosages with a matching order should be flagged as fulfilled."""
    _, accumulator, _ = _expand(
        [
            _dosage("D1", "NDC-1", "2024-01-01"),
            _dosage("D2", "NDC-2", "2024-01-02"),
            source_record("order", "O1", EnrollmentId="E1", DosageId="D1"),
        ]
    )

    flags = [record.get("Fulfillment_Received") for record in accumulator.records]

    assert flags == ["Y", "N"]


def test_referral_pass_overwrites_dosage_fields() -> None:
    """A referral matching the product code should re-apply the dosage rules."""
    _, accumulator, _ = _expand(
        [
            _dosage("D1", "NDC-1", "2024-01-01"),
            source_record(
                "referral",
                "R1",
                EnrollmentId="E1",
                Status="Active",
                NDCCode="NDC-1",
                ProductCode="NDC-1",
                DoseAmount="7mg",
            ),
        ]
    )

    tracking_record = accumulator.records[0]

    assert tracking_record.get("Dose_Amount") == "7mg"
    assert tracking_record.get("Dosage_Id") == "R1"


def test_apply_dosage_passes_probes_orders_by_identity_field() -> None:
    """The order map should be probed with the tracking record's identity value."""
    catalog = load_catalog()
    rules = catalog.rules_for("medication-dosage")
    tracking_record = TrackingRecord.with_defaults(catalog.target_fields)
    order = source_record("order", "O1", DosageId="D1", DoseAmount="9mg")

    apply_dosage_passes(
        rules,
        _dosage("D1", "NDC-1", "2024-01-01"),
        tracking_record,
        {},
        {"D1": order},
        catalog.fan_out_keys,
    )

    assert tracking_record.get("Fulfillment_Received") == "Y"
    assert tracking_record.get("Dose_Amount") == "9mg"
