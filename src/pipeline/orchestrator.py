"""Batch orchestration for tracking record builds.

This module coordinates the generic mapping pass, domain overlays,
dosage fan-out, and the single bulk write for one batch of events.

A failure while processing any event discards the whole batch: the
error is logged and reported in the returned result, never raised to
the caller.
"""

from __future__ import annotations

from typing import Callable, Sequence

from core.constants import TRACKING_RECORD
from core.logging_config import get_logger
from core.tracking_record import TrackingRecord
from core.types import BatchResult, EnrollmentEvent, EventOutcome
from enrich.charitable import apply_charitable_overlay
from enrich.consent import apply_consent_overlay
from enrich.coverage import apply_coverage_overlay
from enrich.diagnosis import apply_diagnosis_overlay
from enrich.finalization import finalize_tracking_record
from fanout.engine import FanOutEngine
from mapping.catalog import MappingCatalog
from mapping.record_fetcher import RecordFetcher
from mapping.rule_application import apply_rule_set, discriminator_fields
from pipeline.accumulator import BatchAccumulator
from store.record_store import CreatePermission, RecordStore

_LOGGER = get_logger(__name__)

Overlay = Callable[[RecordFetcher, EnrollmentEvent, TrackingRecord], None]
DEFAULT_OVERLAYS: tuple[Overlay, ...] = (
    apply_consent_overlay,
    apply_diagnosis_overlay,
    apply_coverage_overlay,
    apply_charitable_overlay,
)


class TrackingOrchestrator:
    """Builds and writes tracking records for batches of enrollment events."""

    def __init__(
        self,
        store: RecordStore,
        catalog: MappingCatalog,
        permission: CreatePermission,
        overlays: Sequence[Overlay] = DEFAULT_OVERLAYS,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._permission = permission
        self._overlays = tuple(overlays)
        self._fetcher = RecordFetcher(store, catalog)
        self._fan_out = FanOutEngine(self._fetcher, catalog)

    def process_batch(self, events: Sequence[EnrollmentEvent]) -> BatchResult:
        """Process every event, then write all tracking records once.

        Args:
            events: Batch of enrollment events, processed in order.

        Returns:
            Batch summary with per-event outcomes.
        """
        accumulator = BatchAccumulator()
        outcomes: list[EventOutcome] = []
        for event in events:
            try:
                outcomes.append(self._process_event(event, accumulator))
            except Exception as error:
                outcomes.append(
                    EventOutcome(
                        enrollment_id=event.enrollment_id,
                        succeeded=False,
                        error_message=str(error),
                    )
                )
                return self._abort(events, outcomes, accumulator, error)
        try:
            records_written, write_skipped = self._write_batch(accumulator)
        except Exception as error:
            return self._abort(events, outcomes, accumulator, error)
        _LOGGER.info(
            "batch_processed",
            event_count=len(events),
            records_built=len(accumulator),
            records_written=records_written,
            write_skipped=write_skipped,
        )
        return BatchResult(
            event_count=len(events),
            outcomes=tuple(outcomes),
            records_built=len(accumulator),
            records_written=records_written,
            write_skipped=write_skipped,
        )

    def build_base_record(self, event: EnrollmentEvent) -> TrackingRecord:
        """Populate a defaulted tracking record from every base source type.

        Args:
            event: Event being processed.

        Returns:
            Base record after the generic mapping pass and overlays.
        """
        base_record = TrackingRecord.with_defaults(self._catalog.target_fields)
        for entity_type in self._catalog.base_sources:
            rules = self._catalog.rules_for(entity_type)
            source_records = self._fetcher.fetch(
                entity_type,
                event,
                rules,
                extra_fields=discriminator_fields(entity_type),
            )
            for source_record in source_records:
                apply_rule_set(rules, source_record, base_record)
        for overlay in self._overlays:
            overlay(self._fetcher, event, base_record)
        return base_record

    def _process_event(
        self,
        event: EnrollmentEvent,
        accumulator: BatchAccumulator,
    ) -> EventOutcome:
        base_record = self.build_base_record(event)
        accumulator.append(finalize_tracking_record(base_record))
        derived_count = self._fan_out.expand(base_record, event, accumulator)
        return EventOutcome(
            enrollment_id=event.enrollment_id,
            succeeded=True,
            records_built=1 + derived_count,
        )

    def _write_batch(self, accumulator: BatchAccumulator) -> tuple[int, bool]:
        if not self._permission.can_create(TRACKING_RECORD):
            _LOGGER.warning(
                "tracking_write_skipped",
                reason="create_permission_denied",
                record_count=len(accumulator),
            )
            return 0, True
        return self._store.bulk_create(TRACKING_RECORD, accumulator.records), False

    def _abort(
        self,
        events: Sequence[EnrollmentEvent],
        outcomes: list[EventOutcome],
        accumulator: BatchAccumulator,
        error: Exception,
    ) -> BatchResult:
        dropped_count = accumulator.discard()
        _LOGGER.error(
            "batch_aborted",
            event_count=len(events),
            attempted_count=len(outcomes),
            dropped_count=dropped_count,
            error_type=type(error).__name__,
            error=str(error),
            exc_info=error,
        )
        return BatchResult(
            event_count=len(events),
            outcomes=tuple(outcomes),
            records_built=dropped_count,
            records_written=0,
            aborted=True,
        )


def process_enrollment_events(
    events: Sequence[EnrollmentEvent],
    store: RecordStore,
    catalog: MappingCatalog,
    permission: CreatePermission,
) -> BatchResult:
    """Run one batch of enrollment events through the tracking pipeline.

    Args:
        events: Batch of enrollment events.
        store: Record store used for queries and the bulk write.
        catalog: Mapping rules and source-type descriptors.
        permission: Oracle gating the tracking record write.

    Returns:
        Batch summary; failures are reported here, not raised.
    """
    orchestrator = TrackingOrchestrator(store, catalog, permission)
    return orchestrator.process_batch(events)
