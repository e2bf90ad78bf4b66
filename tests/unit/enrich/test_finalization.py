"""Unit tests for tracking record finalization."""

from __future__ import annotations

from core.tracking_record import TrackingRecord
from enrich.finalization import finalize_tracking_record


def test_finalize_fills_blank_state_and_referral_source() -> None:
    """Blank whitelisted fields should receive their defaults."""
    tracking_record = TrackingRecord.with_defaults(())
    tracking_record.set("Referral_Source", "")

    finalize_tracking_record(tracking_record)

    assert tracking_record.get("Patient_State") == "NA"
    assert tracking_record.get("Referral_Source") == "HUB"


def test_finalize_keeps_populated_values() -> None:
    """Populated fields should be left unchanged."""
    tracking_record = TrackingRecord.with_defaults(())
    tracking_record.set("Patient_State", "MA")
    tracking_record.set("Referral_Source", "Clinic")

    result = finalize_tracking_record(tracking_record)

    assert result is tracking_record
    assert result.get("Patient_State") == "MA" and result.get("Referral_Source") == "Clinic"
