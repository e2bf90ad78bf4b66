"""Unit tests for correlation maps."""

from __future__ import annotations

from fanout.correlation import build_correlation_map
from tests.source_records import source_record


def test_build_correlation_map_last_record_wins() -> None:
    """Later records sharing a key should replace earlier ones."""
    records = [
        source_record("referral", "R1", NDCCode="NDC-1"),
        source_record("referral", "R2", NDCCode="NDC-1"),
        source_record("referral", "R3", NDCCode="NDC-2"),
    ]

    correlation_map = build_correlation_map(records, "NDCCode")

    assert {key: record.record_id for key, record in correlation_map.items()} == {
        "NDC-1": "R2",
        "NDC-2": "R3",
    }


def test_build_correlation_map_skips_missing_keys() -> None:
    """Records without a key value should not be indexed."""
    records = [source_record("order", "O1"), source_record("order", "O2", DosageId="D2")]

    assert list(build_correlation_map(records, "DosageId")) == ["D2"]
