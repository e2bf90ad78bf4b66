"""Unit tests for the JSONL record store."""

from __future__ import annotations

import json
from dataclasses import replace

import pytest

from core.config import TracklineConfig
from core.errors import TracklineStoreError
from core.tracking_record import TrackingRecord
from core.types import FilterCondition, RecordQuery
from pipeline.orchestrator import process_enrollment_events
from store.jsonl_store import JsonlRecordStore
from store.record_store import StaticCreatePermission
from tests.source_records import E1_EVENT, load_catalog


def _store(tmp_path) -> JsonlRecordStore:
    config = replace(TracklineConfig.from_env(), data_root=tmp_path)
    return JsonlRecordStore(config)


def test_query_reads_entity_jsonl(tmp_path) -> None:
    """Queries should read records from the entity type's JSONL file."""
    store = _store(tmp_path)
    entity_path = tmp_path / "entities" / "referral.jsonl"
    rows = [
        {"Id": "R1", "EnrollmentId": "E1", "Status": "Active"},
        {"Id": "R2", "EnrollmentId": "E1", "Status": "Closed"},
    ]
    entity_path.write_text("\n".join(json.dumps(row) for row in rows) + "\n", encoding="utf-8")
    query = RecordQuery(
        entity_type="referral",
        fields=("Status",),
        conditions=(FilterCondition(field="Status", value="Active"),),
    )

    records = store.query(query)

    assert [record.record_id for record in records] == ["R1"]


def test_query_missing_entity_file_returns_empty(tmp_path) -> None:
    """Entity types without a file should have no records."""
    query = RecordQuery(entity_type="order", fields=(), conditions=())

    assert _store(tmp_path).query(query) == []


def test_bulk_create_appends_tracking_records(tmp_path) -> None:
    """Created tracking records should be appended with ids and timestamps."""
    store = _store(tmp_path)
    tracking_record = TrackingRecord.with_defaults(())

    store.bulk_create("tracking-record", [tracking_record])
    store.bulk_create("tracking-record", [tracking_record.clone()])

    created = store.load_created()
    assert len(created) == 2
    assert created[0]["fields"]["PHI_Consent"] == "N"
    assert created[0]["record_id"] != created[1]["record_id"]


def test_bulk_create_rejects_source_entity_types(tmp_path) -> None:
    """Only tracking records should be writable."""
    with pytest.raises(TracklineStoreError):
        _store(tmp_path).bulk_create("enrollment", [TrackingRecord.with_defaults(())])


def test_query_rejects_non_object_lines(tmp_path) -> None:
    """Entity files must hold one JSON object per line."""
    store = _store(tmp_path)
    (tmp_path / "entities" / "case.jsonl").write_text("[1, 2]\n", encoding="utf-8")

    with pytest.raises(TracklineStoreError):
        store.query(RecordQuery(entity_type="case", fields=(), conditions=()))


def _fail_lance_write(lance_path, payloads) -> bool:
    raise TracklineStoreError(f"Failed to write Lance dataset at {lance_path}: disk full.")


def test_bulk_create_survives_lance_mirror_failure(tmp_path, monkeypatch) -> None:
    """A failed Lance mirror write should not fail an appended batch."""
    monkeypatch.setattr("store.jsonl_store._append_lance_table", _fail_lance_write)
    store = _store(tmp_path)

    written = store.bulk_create("tracking-record", [TrackingRecord.with_defaults(())])

    assert written == 1
    assert len(store.load_created()) == 1


def test_batch_reports_records_on_disk_after_lance_mirror_failure(
    tmp_path, monkeypatch
) -> None:
    """Batch results should match the JSONL file when the mirror fails."""
    monkeypatch.setattr("store.jsonl_store._append_lance_table", _fail_lance_write)
    store = _store(tmp_path)

    result = process_enrollment_events(
        [E1_EVENT], store, load_catalog(), StaticCreatePermission(True)
    )

    assert not result.aborted
    assert result.records_written == len(store.load_created()) == 1
