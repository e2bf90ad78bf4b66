"""Field path resolution against source records.

This module reads plain and ``relation.field`` paths from dynamically-shaped
records and renders the value as the string written onto tracking records.
Fields whose name mentions a date are normalized to ``YYYYMMDD``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Mapping

from core.constants import DATE_FIELD_MARKER, FIELD_PATH_SEPARATOR, ID_FIELD, NULL_MARKER
from core.errors import TracklineResolveError
from core.types import SourceRecord


def resolve_field(record: SourceRecord, field_path: str) -> str:
    """Resolve a field path and render its value.

    Args:
        record: Source record to read from.
        field_path: Field name or ``relation.field`` path.

    Returns:
        Rendered value; absent values render as ``"null"``.

    Raises:
        TracklineResolveError: If a date-named field holds an unparseable value.
    """
    raw_value = read_field_value(record, field_path)
    field_name = field_path.rsplit(FIELD_PATH_SEPARATOR, 1)[-1]
    if DATE_FIELD_MARKER in field_name.lower():
        return normalize_date_value(raw_value, field_path)
    return render_value(raw_value)


def read_field_value(record: SourceRecord, field_path: str) -> object:
    """Read the raw value behind a field path.

    Args:
        record: Source record to read from.
        field_path: Field name or ``relation.field`` path.

    Returns:
        Raw field value, or ``None`` when the field or sub-record is absent.
    """
    if FIELD_PATH_SEPARATOR not in field_path:
        return _read_top_level(record, field_path)
    relation_name, field_name = field_path.split(FIELD_PATH_SEPARATOR, 1)
    sub_record = record.fields.get(relation_name)
    if not isinstance(sub_record, Mapping):
        return None
    return sub_record.get(field_name)


def normalize_date_value(raw_value: object, field_path: str) -> str:
    """Render a calendar date as ``YYYYMMDD``.

    Args:
        raw_value: Date, datetime, or ``YYYY-MM-DD`` string value.
        field_path: Field path used for error context.

    Returns:
        Compact date string, or ``"null"`` for absent values.

    Raises:
        TracklineResolveError: If the value is not a calendar date.
    """
    if raw_value is None:
        return NULL_MARKER
    if isinstance(raw_value, datetime):
        return raw_value.date().strftime("%Y%m%d")
    if isinstance(raw_value, date):
        return raw_value.strftime("%Y%m%d")
    text_value = str(raw_value).strip()
    date_part = text_value.split("T", 1)[0].split(" ", 1)[0]
    try:
        parsed_date = datetime.strptime(date_part, "%Y-%m-%d").date()
    except ValueError as error:
        raise TracklineResolveError(
            f"Failed to parse date field '{field_path}' value '{text_value}': "
            "expected YYYY-MM-DD. Correct the source record and reprocess the enrollment."
        ) from error
    return parsed_date.strftime("%Y%m%d")


def render_value(raw_value: object) -> str:
    """Render a non-date value as its canonical string."""
    if raw_value is None:
        return NULL_MARKER
    if isinstance(raw_value, bool):
        return "true" if raw_value else "false"
    return str(raw_value)


def _read_top_level(record: SourceRecord, field_name: str) -> object:
    if field_name == ID_FIELD:
        return record.fields.get(ID_FIELD, record.record_id)
    return record.fields.get(field_name)
