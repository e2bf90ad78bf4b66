"""Record query evaluation helpers.

This module applies bound equality conditions, ascending ordering,
limits, and field projection to in-memory record collections.
It keeps query semantics identical across store implementations.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from core.constants import CREATED_DATE_FIELD, FIELD_PATH_SEPARATOR, ID_FIELD
from core.types import FilterCondition, RecordQuery, SourceRecord
from mapping.field_resolver import read_field_value


def run_query(records: Iterable[SourceRecord], query: RecordQuery) -> list[SourceRecord]:
    """Evaluate a record query against candidate records.

    Args:
        records: Candidate records of the queried entity type.
        query: Bound query request.

    Returns:
        Projected records that match every condition, ascending by sort field.
    """
    matched_records = [
        record for record in records if matches_conditions(record, query.conditions)
    ]
    ordered_records = sorted(matched_records, key=lambda record: _sort_key(record, query))
    if query.limit is not None:
        ordered_records = ordered_records[: query.limit]
    return [project_record(record, query.fields) for record in ordered_records]


def matches_conditions(record: SourceRecord, conditions: Iterable[FilterCondition]) -> bool:
    """Return whether a record satisfies all equality conditions.

    Args:
        record: Candidate record.
        conditions: Bound conditions with literal values.

    Returns:
        ``True`` when every condition matches.
    """
    for condition in conditions:
        actual_value = read_field_value(record, condition.field)
        if not _values_equal(actual_value, condition.value):
            return False
    return True


def project_record(record: SourceRecord, fields: Iterable[str]) -> SourceRecord:
    """Restrict a record to selected field paths.

    ``Id`` and ``CreatedDate`` are always kept.

    Args:
        record: Full source record.
        fields: Selected field names or ``relation.field`` paths.

    Returns:
        New record holding only the selected fields.
    """
    projected_fields: dict[str, object] = {}
    for field_path in (ID_FIELD, CREATED_DATE_FIELD, *fields):
        if FIELD_PATH_SEPARATOR not in field_path:
            if field_path in record.fields:
                projected_fields[field_path] = record.fields[field_path]
            continue
        relation_name, field_name = field_path.split(FIELD_PATH_SEPARATOR, 1)
        sub_record = record.fields.get(relation_name)
        if not isinstance(sub_record, Mapping) or field_name not in sub_record:
            continue
        projected_relation = projected_fields.setdefault(relation_name, {})
        if isinstance(projected_relation, dict):
            projected_relation[field_name] = sub_record[field_name]
    return SourceRecord(
        entity_type=record.entity_type,
        record_id=record.record_id,
        fields=projected_fields,
    )


def _values_equal(actual_value: object, expected_value: object) -> bool:
    if actual_value == expected_value:
        return True
    if actual_value is None or expected_value is None:
        return False
    if isinstance(actual_value, bool) or isinstance(expected_value, bool):
        return False
    return str(actual_value) == str(expected_value)


def _sort_key(record: SourceRecord, query: RecordQuery) -> tuple[bool, str]:
    value = read_field_value(record, query.sort_field)
    if value is None:
        return (False, "")
    return (True, str(value))
