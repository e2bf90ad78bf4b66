"""Dosage fan-out engine.

The first current dosage enriches the base tracking record in place; each
later dosage enriches a clone of the base. Every record then receives
up to three passes of the medication-dosage rule set: from the dosage,
from the referral matching its product code, and from the order matching
the tracking record's dosage identity field.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.constants import (
    FLAG_NO,
    FLAG_YES,
    FULFILLMENT_RECEIVED,
    MEDICATION_DOSAGE,
    ORDER,
    REFERRAL,
)
from core.logging_config import get_logger
from core.tracking_record import TrackingRecord
from core.types import EnrollmentEvent, FanOutKeys, MappingRule, SourceRecord
from enrich.finalization import finalize_tracking_record
from fanout.correlation import build_correlation_map
from mapping.catalog import MappingCatalog
from mapping.record_fetcher import RecordFetcher
from mapping.rule_application import apply_rule_set
from pipeline.accumulator import BatchAccumulator

_LOGGER = get_logger(__name__)


class FanOutEngine:
    """Expands base tracking records across current medication dosages."""

    def __init__(self, fetcher: RecordFetcher, catalog: MappingCatalog) -> None:
        self._fetcher = fetcher
        self._catalog = catalog

    def expand(
        self,
        base_record: TrackingRecord,
        event: EnrollmentEvent,
        accumulator: BatchAccumulator,
    ) -> int:
        """Enrich the base record and append one clone per extra dosage.

        Args:
            base_record: Base record, already present in the accumulator.
            event: Event being processed.
            accumulator: Batch accumulator receiving derived records.

        Returns:
            Number of derived records appended.
        """
        keys = self._catalog.fan_out_keys
        dosage_rules = self._catalog.rules_for(MEDICATION_DOSAGE)
        referral_by_product_code = self._build_map(
            REFERRAL, event, keys.referral_key_field, dosage_rules
        )
        order_by_dosage_id = self._build_map(ORDER, event, keys.order_key_field, dosage_rules)
        dosages = self._fetcher.fetch(MEDICATION_DOSAGE, event, dosage_rules)
        derived_count = 0
        for position, dosage in enumerate(dosages, 1):
            tracking_record = base_record if position == 1 else base_record.clone()
            apply_dosage_passes(
                dosage_rules,
                dosage,
                tracking_record,
                referral_by_product_code,
                order_by_dosage_id,
                keys,
            )
            if position > 1:
                accumulator.append(finalize_tracking_record(tracking_record))
                derived_count += 1
        _LOGGER.debug(
            "dosages_expanded",
            enrollment_id=event.enrollment_id,
            dosage_count=len(dosages),
            derived_count=derived_count,
            referral_count=len(referral_by_product_code),
            order_count=len(order_by_dosage_id),
        )
        return derived_count

    def _build_map(
        self,
        entity_type: str,
        event: EnrollmentEvent,
        key_field: str,
        dosage_rules: Sequence[MappingRule],
    ) -> dict[str, SourceRecord]:
        rules = (*self._catalog.rules_for(entity_type), *dosage_rules)
        records = self._fetcher.fetch(entity_type, event, rules, extra_fields=(key_field,))
        return build_correlation_map(records, key_field)


def apply_dosage_passes(
    rules: Sequence[MappingRule],
    dosage: SourceRecord,
    tracking_record: TrackingRecord,
    referral_by_product_code: Mapping[str, SourceRecord],
    order_by_dosage_id: Mapping[str, SourceRecord],
    keys: FanOutKeys,
) -> None:
    """Apply the dosage, referral, and order passes to one tracking record.

    The order key is read from the tracking record after the dosage and
    referral passes, so a matched referral's ``Id`` replaces the dosage id.

    Args:
        rules: Medication-dosage rule set reused for all three passes.
        dosage: Current dosage record.
        tracking_record: Base record or clone being enriched.
        referral_by_product_code: Active referrals keyed by product code.
        order_by_dosage_id: Orders keyed by dosage identity.
        keys: Correlation key field names.
    """
    product_code = apply_rule_set(
        rules, dosage, tracking_record, capture_field=keys.product_code_field
    )
    if product_code:
        referral = referral_by_product_code.get(product_code)
        if referral is not None:
            apply_rule_set(rules, referral, tracking_record)
    dosage_identity = tracking_record.get(keys.identity_target_field)
    order = order_by_dosage_id.get(dosage_identity) if dosage_identity else None
    if order is None:
        tracking_record.set(FULFILLMENT_RECEIVED, FLAG_NO)
        return
    apply_rule_set(rules, order, tracking_record)
    tracking_record.set(FULFILLMENT_RECEIVED, FLAG_YES)
