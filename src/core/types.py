"""Shared typed models.

This module defines immutable data models used by mapping, store,
pipeline, and publishing layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from core.constants import (
    CREATED_DATE_FIELD,
    DEFAULT_IDENTITY_TARGET_FIELD,
    DEFAULT_ORDER_KEY_FIELD,
    DEFAULT_PRODUCT_CODE_FIELD,
    DEFAULT_REFERRAL_KEY_FIELD,
)


@dataclass(frozen=True)
class EnrollmentEvent:
    """One request to refresh the tracking snapshot of an enrollment.

    Attributes:
        enrollment_id: Enrollment record identifier.
        patient_id: Patient account identifier.
    """

    enrollment_id: str
    patient_id: str


@dataclass(frozen=True)
class SourceRecord:
    """Dynamically-shaped record fetched from the record store.

    Attributes:
        entity_type: Source entity type tag, e.g. ``member-plan``.
        record_id: Record identifier, also exposed as the ``Id`` field.
        fields: Field values; nested sub-records are nested mappings.
    """

    entity_type: str
    record_id: str
    fields: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class MappingRule:
    """Configured copy of one source field onto one tracking field.

    Attributes:
        source_entity_type: Entity type the rule reads from.
        source_field_path: Field name or ``relation.field`` path.
        target_field_name: Tracking record field written by the rule.
    """

    source_entity_type: str
    source_field_path: str
    target_field_name: str


@dataclass(frozen=True)
class FilterCondition:
    """Equality condition used in record queries.

    A condition either carries a literal ``value`` or names an event
    ``parameter`` that is bound before the query executes.

    Attributes:
        field: Field path compared by the condition.
        value: Literal comparison value.
        parameter: Optional event parameter name.
    """

    field: str
    value: object = None
    parameter: str | None = None


@dataclass(frozen=True)
class SourceTypeDescriptor:
    """Declarative query description for one source entity type.

    Attributes:
        entity_type: Source entity type name.
        relation: Condition tying records to the processed event.
        filters: Fixed filter conditions for the type.
        auxiliary_fields: Fields selected in addition to mapped fields.
    """

    entity_type: str
    relation: FilterCondition
    filters: tuple[FilterCondition, ...] = ()
    auxiliary_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class FanOutKeys:
    """Field names used to correlate dosage, referral, and order records.

    Attributes:
        product_code_field: Dosage field captured as the product code.
        referral_key_field: Referral field keying the product-code map.
        order_key_field: Order field keying the dosage-identity map.
        identity_target_field: Tracking field probed against the order map.
    """

    product_code_field: str = DEFAULT_PRODUCT_CODE_FIELD
    referral_key_field: str = DEFAULT_REFERRAL_KEY_FIELD
    order_key_field: str = DEFAULT_ORDER_KEY_FIELD
    identity_target_field: str = DEFAULT_IDENTITY_TARGET_FIELD


@dataclass(frozen=True)
class MappingConfig:
    """Validated mapping configuration root.

    Attributes:
        version: Mapping file schema version.
        target_fields: Closed set of tracking fields writable by rules.
        base_sources: Ordered entity types mapped onto the base record.
        fan_out: Correlation key fields for the fan-out stage.
        descriptors: Query descriptors keyed by entity type.
        rules: Mapping rules keyed by entity type.
    """

    version: int
    target_fields: frozenset[str]
    base_sources: tuple[str, ...]
    fan_out: FanOutKeys
    descriptors: Mapping[str, SourceTypeDescriptor]
    rules: Mapping[str, tuple[MappingRule, ...]]


@dataclass(frozen=True)
class RecordQuery:
    """Bound query request sent to the record store.

    Attributes:
        entity_type: Entity type to query.
        fields: Selected field paths, ``Id`` always implied.
        conditions: Bound equality conditions, all must match.
        sort_field: Ascending sort key.
        limit: Optional maximum number of records.
    """

    entity_type: str
    fields: tuple[str, ...]
    conditions: tuple[FilterCondition, ...]
    sort_field: str = CREATED_DATE_FIELD
    limit: int | None = None


@dataclass(frozen=True)
class EventOutcome:
    """Processing outcome for one enrollment event.

    Attributes:
        enrollment_id: Processed enrollment identifier.
        succeeded: Whether the event completed without error.
        records_built: Tracking records appended for the event.
        error_message: Failure description when not succeeded.
    """

    enrollment_id: str
    succeeded: bool
    records_built: int = 0
    error_message: str | None = None


@dataclass(frozen=True)
class BatchResult:
    """Summary of one batch invocation.

    Attributes:
        event_count: Number of events received.
        outcomes: Outcomes of the events that were attempted.
        records_built: Tracking records accumulated before the write.
        records_written: Tracking records persisted by the bulk create.
        write_skipped: Whether the write was skipped for lack of permission.
        aborted: Whether a failure discarded the batch.
    """

    event_count: int
    outcomes: tuple[EventOutcome, ...]
    records_built: int
    records_written: int
    write_skipped: bool = False
    aborted: bool = False


@dataclass(frozen=True)
class PublishOutcome:
    """Result of publishing one enrollment event.

    Attributes:
        enrollment_id: Enrollment identifier carried by the event.
        succeeded: Whether the bus accepted the entry.
        event_id: Bus-assigned event id on success.
        error_message: Failure description when not succeeded.
    """

    enrollment_id: str
    succeeded: bool
    event_id: str | None = None
    error_message: str | None = None
