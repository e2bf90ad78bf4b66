"""Shared JSON serialization for source and tracking records.

This module centralizes record JSON conversion logic.
It is reused by the JSONL store and the publish command.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.constants import ID_FIELD
from core.errors import TracklineStoreError
from core.types import SourceRecord


def source_record_from_payload(entity_type: str, payload: dict[str, Any]) -> SourceRecord:
    """Deserialize a JSON object into a SourceRecord.

    Args:
        entity_type: Entity type tag for the record.
        payload: Field dictionary holding at least ``Id``.

    Returns:
        Parsed SourceRecord.
    """
    return SourceRecord(
        entity_type=entity_type,
        record_id=str(payload.get(ID_FIELD, "")),
        fields=dict(payload),
    )


def tracking_record_to_payload(
    record_id: str,
    created_at: str,
    fields: dict[str, str],
) -> dict[str, object]:
    """Serialize a created tracking record into a JSON-safe payload.

    Args:
        record_id: Store-assigned record identifier.
        created_at: ISO creation timestamp.
        fields: Tracking field values.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {"record_id": record_id, "created_at": created_at, "fields": dict(fields)}


def read_json_objects(jsonl_path: Path) -> list[dict[str, Any]]:
    """Read JSON objects from a JSONL file.

    Args:
        jsonl_path: Input JSONL path.

    Returns:
        Parsed objects in file order.

    Raises:
        TracklineStoreError: If a line is not a JSON object.
    """
    try:
        lines = jsonl_path.read_text(encoding="utf-8").splitlines()
    except OSError as error:
        raise TracklineStoreError(
            f"Failed to read records at {jsonl_path}: {error}. Check file permissions and retry."
        ) from error
    payloads: list[dict[str, Any]] = []
    for line_number, line in enumerate(lines, 1):
        if not line.strip():
            continue
        payloads.append(_parse_json_line(jsonl_path, line, line_number))
    return payloads


def append_json_objects(jsonl_path: Path, payloads: list[dict[str, object]]) -> None:
    """Append JSON objects to a JSONL file.

    Args:
        jsonl_path: Output JSONL path.
        payloads: Objects to serialize, one per line.

    Raises:
        TracklineStoreError: If the write fails.
    """
    lines = [json.dumps(payload, sort_keys=True) for payload in payloads]
    try:
        with jsonl_path.open("a", encoding="utf-8") as handle:
            handle.write("\n".join(lines) + "\n")
    except OSError as error:
        raise TracklineStoreError(
            f"Failed to persist records at {jsonl_path}: {error}. "
            "Check write permissions and available disk space."
        ) from error


def _parse_json_line(jsonl_path: Path, line: str, line_number: int) -> dict[str, Any]:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise TracklineStoreError(
            f"Failed to parse record at {jsonl_path}:{line_number}: {error.msg}. "
            "Fix the JSONL line and retry."
        ) from error
    if isinstance(payload, dict):
        return payload
    raise TracklineStoreError(
        f"Failed to parse record at {jsonl_path}:{line_number}: "
        "expected a JSON object per line."
    )
