"""In-memory correlation maps for fan-out joins."""

from __future__ import annotations

from typing import Iterable

from core.types import SourceRecord
from mapping.field_resolver import read_field_value, render_value


def build_correlation_map(
    records: Iterable[SourceRecord],
    key_field: str,
) -> dict[str, SourceRecord]:
    """Index records by a natural key field.

    Later records replace earlier ones sharing a key; records without a
    key value are not indexed.

    Args:
        records: Records of one entity type, ascending by creation time.
        key_field: Field path holding the natural key.

    Returns:
        Mapping of rendered key to record.
    """
    correlation_map: dict[str, SourceRecord] = {}
    for record in records:
        key_value = read_field_value(record, key_field)
        if key_value is None:
            continue
        correlation_map[render_value(key_value)] = record
    return correlation_map
