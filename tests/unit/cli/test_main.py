"""Unit tests for CLI command handling."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from cli.main import main
from tests.fixture_paths import fixture_path
from tests.source_records import e1_records


def _seed_entities(data_root: Path) -> None:
    entities_root = data_root / "entities"
    entities_root.mkdir(parents=True, exist_ok=True)
    for record in e1_records():
        entity_path = entities_root / f"{record.entity_type}.jsonl"
        with entity_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(dict(record.fields)) + "\n")


def test_cli_process_prints_batch_summary(tmp_path, capsys) -> None:
    """CLI process should build and write tracking records."""
    _seed_entities(tmp_path)
    args = [
        "--data-root",
        str(tmp_path),
        "process",
        str(fixture_path("events/enrollment_events.jsonl")),
        "--mapping",
        str(fixture_path("mappings/tracking_mappings.yaml")),
    ]

    exit_code = main(args)
    output = capsys.readouterr().out

    assert exit_code == 0
    assert "records_written=3" in output and "aborted=false" in output
    assert (tmp_path / "tracking" / "records.jsonl").exists()


def test_cli_process_without_mapping_fails(tmp_path, capsys, monkeypatch) -> None:
    """CLI process should report a missing mapping configuration."""
    monkeypatch.delenv("TRACKLINE_MAPPING_FILE", raising=False)
    args = [
        "--data-root",
        str(tmp_path),
        "process",
        str(fixture_path("events/enrollment_events.jsonl")),
    ]

    exit_code = main(args)

    assert exit_code == 1
    assert "error:" in capsys.readouterr().out


def test_cli_validate_mapping_prints_rule_counts(capsys) -> None:
    """CLI validate-mapping should list rule counts per source type."""
    exit_code = main(["validate-mapping", str(fixture_path("mappings/tracking_mappings.yaml"))])
    output_lines = capsys.readouterr().out.splitlines()

    assert exit_code == 0
    assert "medication-dosage\t3" in output_lines
    assert len(output_lines) == 12


def test_cli_validate_mapping_rejects_invalid_file(capsys) -> None:
    """CLI validate-mapping should fail for invalid mapping files."""
    exit_code = main(["validate-mapping", str(fixture_path("mappings/unknown_target.yaml"))])

    assert exit_code == 1
    assert "Dose_Strength" in capsys.readouterr().out


class _AcceptingEventsClient:
    def put_events(self, Entries: list[dict[str, str]]) -> dict[str, Any]:  # noqa: N803
        return {"Entries": [{"EventId": f"evt-{index}"} for index in range(len(Entries))]}


def test_cli_publish_prints_outcomes(tmp_path, capsys, monkeypatch: pytest.MonkeyPatch) -> None:
    """CLI publish should print one line per enrollment."""
    monkeypatch.setattr(
        "publish.event_publisher.create_events_client",
        lambda config: _AcceptingEventsClient(),
    )
    enrollments_path = tmp_path / "enrollments.jsonl"
    enrollments_path.write_text(
        '{"Id": "E1", "AccountId": "P1"}\n{"Id": "E2", "AccountId": "P2"}\n',
        encoding="utf-8",
    )

    exit_code = main(["--data-root", str(tmp_path), "publish", str(enrollments_path)])
    output_lines = capsys.readouterr().out.splitlines()

    assert exit_code == 0
    assert output_lines == ["published\tE1\tevt-0", "published\tE2\tevt-1"]
