"""Source record fetching.

This module builds field-selecting, filtered, ascending-creation-order
queries from source-type descriptors and runs them against the store.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from core.constants import ENROLLMENT_ID_PARAMETER, ID_FIELD, PATIENT_ID_PARAMETER
from core.errors import TracklineConfigError
from core.logging_config import get_logger
from core.types import (
    EnrollmentEvent,
    FilterCondition,
    MappingRule,
    RecordQuery,
    SourceRecord,
    SourceTypeDescriptor,
)
from mapping.catalog import MappingCatalog
from store.record_store import RecordStore

_LOGGER = get_logger(__name__)


class RecordFetcher:
    """Runs descriptor-driven queries for one enrollment event at a time."""

    def __init__(self, store: RecordStore, catalog: MappingCatalog) -> None:
        self._store = store
        self._catalog = catalog

    def fetch(
        self,
        entity_type: str,
        event: EnrollmentEvent,
        rules: Sequence[MappingRule] = (),
        limit: int | None = None,
        extra_conditions: Sequence[FilterCondition] = (),
        extra_fields: Sequence[str] = (),
    ) -> list[SourceRecord]:
        """Fetch records of a source type for an event.

        Args:
            entity_type: Source entity type to query.
            event: Event supplying enrollment and patient ids.
            rules: Mapping rules whose source fields must be selected.
            limit: Optional maximum number of records.
            extra_conditions: Additional literal conditions, e.g. a parent link.
            extra_fields: Fields read by overlay predicates.

        Returns:
            Records ascending by creation time.

        Raises:
            TracklineConfigError: If the entity type is not declared.
        """
        descriptor = self._catalog.descriptor_for(entity_type)
        query = build_record_query(
            descriptor, event, rules, limit, extra_conditions, extra_fields
        )
        records = self._store.query(query)
        _LOGGER.debug(
            "source_records_fetched",
            entity_type=entity_type,
            enrollment_id=event.enrollment_id,
            record_count=len(records),
        )
        return records


def build_record_query(
    descriptor: SourceTypeDescriptor,
    event: EnrollmentEvent,
    rules: Sequence[MappingRule] = (),
    limit: int | None = None,
    extra_conditions: Sequence[FilterCondition] = (),
    extra_fields: Sequence[str] = (),
) -> RecordQuery:
    """Bind a descriptor into a concrete store query.

    Args:
        descriptor: Source-type query descriptor.
        event: Event supplying parameter values.
        rules: Mapping rules whose source fields must be selected.
        limit: Optional maximum number of records.
        extra_conditions: Additional literal conditions.
        extra_fields: Fields read by overlay predicates.

    Returns:
        Bound record query.
    """
    conditions = (
        bind_condition(descriptor.relation, event),
        *(bind_condition(condition, event) for condition in descriptor.filters),
        *extra_conditions,
    )
    return RecordQuery(
        entity_type=descriptor.entity_type,
        fields=select_fields(rules, (*descriptor.auxiliary_fields, *extra_fields)),
        conditions=conditions,
        limit=limit,
    )


def select_fields(rules: Iterable[MappingRule], auxiliary_fields: Iterable[str]) -> tuple[str, ...]:
    """Build the ordered, de-duplicated field selection list.

    Args:
        rules: Mapping rules referencing source field paths.
        auxiliary_fields: Type-specific fields needed by predicates and joins.

    Returns:
        Selected field paths without the implicit ``Id``.
    """
    selected: list[str] = []
    for field_path in [*(rule.source_field_path for rule in rules), *auxiliary_fields]:
        if field_path == ID_FIELD or field_path in selected:
            continue
        selected.append(field_path)
    return tuple(selected)


def bind_condition(condition: FilterCondition, event: EnrollmentEvent) -> FilterCondition:
    """Replace an event parameter reference with its value.

    Args:
        condition: Literal or parameterized condition.
        event: Event supplying parameter values.

    Returns:
        Condition carrying a literal value.

    Raises:
        TracklineConfigError: If the parameter name is unsupported.
    """
    if condition.parameter is None:
        return condition
    if condition.parameter == ENROLLMENT_ID_PARAMETER:
        return FilterCondition(field=condition.field, value=event.enrollment_id)
    if condition.parameter == PATIENT_ID_PARAMETER:
        return FilterCondition(field=condition.field, value=event.patient_id)
    raise TracklineConfigError(
        f"Unsupported query parameter '{condition.parameter}' on field '{condition.field}'."
    )
