"""Enrollment event intake.

This module parses batches of enrollment events from JSONL files and from
EventBridge-shaped dictionaries whose payload sits under ``detail``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from core.errors import TracklineIntakeError
from core.types import EnrollmentEvent


def read_event_file(events_path: str | Path) -> list[EnrollmentEvent]:
    """Read enrollment events from a JSONL file.

    Args:
        events_path: Path to a file holding one event object per line.

    Returns:
        Parsed events in file order.

    Raises:
        TracklineIntakeError: If the file is missing or a line is invalid.
    """
    events_file = Path(events_path).expanduser().resolve()
    if not events_file.exists():
        raise TracklineIntakeError(
            f"Events file does not exist at {events_file}. Provide a valid JSONL file path."
        )
    try:
        lines = events_file.read_text(encoding="utf-8").splitlines()
    except OSError as error:
        raise TracklineIntakeError(
            f"Failed to read events file at {events_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    payloads = [
        _parse_json_line(events_file, line, line_number)
        for line_number, line in enumerate(lines, 1)
        if line.strip()
    ]
    return parse_event_payloads(payloads)


def parse_event_payloads(payloads: Iterable[object]) -> list[EnrollmentEvent]:
    """Parse a batch of event payloads.

    Args:
        payloads: Plain or EventBridge-shaped event dictionaries.

    Returns:
        Parsed events in input order.

    Raises:
        TracklineIntakeError: If any payload is malformed.
    """
    return [parse_event_payload(payload) for payload in payloads]


def parse_event_payload(payload: object) -> EnrollmentEvent:
    """Parse one event payload.

    ``patientId`` falls back to ``accountId`` so events produced by the
    enrollment publisher can be consumed directly.

    Args:
        payload: Event dictionary.

    Returns:
        Parsed enrollment event.

    Raises:
        TracklineIntakeError: If the payload lacks required identifiers.
    """
    if not isinstance(payload, Mapping):
        raise TracklineIntakeError(
            f"Invalid enrollment event: expected object, got {type(payload).__name__}."
        )
    detail = payload.get("detail")
    body: Mapping[str, Any] = detail if isinstance(detail, Mapping) else payload
    enrollment_id = _optional_identifier(body.get("enrollmentId"))
    patient_id = _optional_identifier(body.get("patientId")) or _optional_identifier(
        body.get("accountId")
    )
    if enrollment_id is None or patient_id is None:
        raise TracklineIntakeError(
            "Invalid enrollment event: 'enrollmentId' and 'patientId' are required, "
            f"got keys {sorted(body)}."
        )
    return EnrollmentEvent(enrollment_id=enrollment_id, patient_id=patient_id)


def _optional_identifier(value: object) -> str | None:
    if value is None:
        return None
    identifier = str(value).strip()
    return identifier if identifier else None


def _parse_json_line(events_file: Path, line: str, line_number: int) -> object:
    try:
        return json.loads(line)
    except json.JSONDecodeError as error:
        raise TracklineIntakeError(
            f"Failed to parse event at {events_file}:{line_number}: {error.msg}. "
            "Fix the JSONL line and retry."
        ) from error
