"""Rule set application onto tracking records.

Rule sets are reused across structurally different record shapes: the
fan-out stage applies the medication-dosage rules to referral and order
records as well, relying on field names coinciding between entity types.
"""

from __future__ import annotations

from typing import Sequence

from core.constants import (
    CHARITABLE_PROGRAM,
    MEMBER_PLAN,
    PRIMARY_ROLE,
    PROGRAM_TYPE_FIELD,
    ROLE_FIELD,
    SECONDARY_ROLE,
    TPAP_PROGRAM_TYPE,
)
from core.tracking_record import TrackingRecord
from core.types import MappingRule, SourceRecord
from mapping.field_resolver import read_field_value, resolve_field


def apply_rule_set(
    rules: Sequence[MappingRule],
    source_record: SourceRecord,
    tracking_record: TrackingRecord,
    capture_field: str | None = None,
) -> str | None:
    """Copy source values onto a tracking record rule by rule.

    Args:
        rules: Ordered mapping rules; later duplicates overwrite earlier ones.
        source_record: Record the values are read from.
        tracking_record: Record the values are written to.
        capture_field: Optional source field path whose value is returned.

    Returns:
        Last value written by a rule sourced from ``capture_field``, if any.

    Raises:
        TracklineResolveError: If a date-named field cannot be parsed.
        TracklineMappingError: If a rule targets an undeclared field.
    """
    captured_value: str | None = None
    for rule in rules:
        if not rule_applies(rule, source_record):
            continue
        value = resolve_field(source_record, rule.source_field_path)
        tracking_record.set(rule.target_field_name, value)
        if capture_field is not None and rule.source_field_path == capture_field:
            captured_value = value
    return captured_value


def rule_applies(rule: MappingRule, source_record: SourceRecord) -> bool:
    """Decide whether a rule targets a field the source record may populate.

    Member-plan records only populate fields named for their role, and
    charitable-program records only populate TPAP fields when the program
    is TPAP. Rules of every other source type always apply.

    Args:
        rule: Candidate mapping rule.
        source_record: Record the rule would read from.

    Returns:
        ``True`` when the rule should be applied.
    """
    target_name = rule.target_field_name.lower()
    if rule.source_entity_type == MEMBER_PLAN:
        role = read_field_value(source_record, ROLE_FIELD)
        if role == PRIMARY_ROLE:
            return PRIMARY_ROLE.lower() in target_name
        if role == SECONDARY_ROLE:
            return SECONDARY_ROLE.lower() in target_name
        return False
    if rule.source_entity_type == CHARITABLE_PROGRAM:
        is_tpap_target = TPAP_PROGRAM_TYPE.lower() in target_name
        program_type = read_field_value(source_record, PROGRAM_TYPE_FIELD)
        if program_type == TPAP_PROGRAM_TYPE:
            return is_tpap_target
        return not is_tpap_target
    return True


def discriminator_fields(entity_type: str) -> tuple[str, ...]:
    """Return the fields conditional targeting reads for a source type."""
    if entity_type == MEMBER_PLAN:
        return (ROLE_FIELD,)
    if entity_type == CHARITABLE_PROGRAM:
        return (PROGRAM_TYPE_FIELD,)
    return ()
