"""Integration tests for the enrollment tracking workflow."""

from __future__ import annotations

from dataclasses import replace

from core.config import TracklineConfig
from pipeline.tracking_sdk import TracklineClient
from tests.source_records import E1_EVENT, e1_store, load_catalog


def test_single_enrollment_fans_out_per_current_dosage(tmp_path) -> None:
    """E1/P1 with two dosages should yield two records sharing base fields."""
    store = e1_store()
    config = replace(TracklineConfig.from_env(), data_root=tmp_path, create_allowed=True)
    client = TracklineClient(config, store=store, catalog=load_catalog())

    result = client.process_events([E1_EVENT])
    first, second = store.created("tracking-record")

    assert result.records_built == 2 and result.records_written == 2
    for record in (first, second):
        assert record["PHI_Consent"] == "Y"
        assert record["Program_Consent"] == "Y"
        assert record["Consent_Expiration"] == "20250101"
        assert record["Indication"] == "FOP"
        assert record["Enrollment_Date"] == "20240305"
        assert record["Referral_Source"] == "HUB"
    assert first["Fulfillment_Received"] == "Y"
    assert second["Fulfillment_Received"] == "N"
    assert (second["Dosage_Id"], second["Product_Code"], second["Dose_Amount"]) == (
        "D2",
        "NDC-2",
        "10mg",
    )


def test_batch_with_unknown_enrollment_still_writes_base_record(tmp_path) -> None:
    """Events without source data should still produce a defaulted record."""
    store = e1_store()
    config = replace(TracklineConfig.from_env(), data_root=tmp_path)
    client = TracklineClient(config, store=store, catalog=load_catalog())

    client.process_events([{"enrollmentId": "E9", "patientId": "P9"}])
    (record,) = store.created("tracking-record")

    assert record["Patient_State"] == "NA"
    assert record["PHI_Consent"] == "N" and record["Primary_PA_Required"] == "N"
