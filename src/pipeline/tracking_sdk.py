"""Python SDK for tracking record workflows.

This module exposes high-level APIs for processing enrollment event
batches and publishing enrollment tracking requests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Sequence

from core.config import TracklineConfig
from core.errors import TracklineConfigError
from core.types import BatchResult, EnrollmentEvent, PublishOutcome
from mapping.catalog import MappingCatalog
from pipeline.event_intake import parse_event_payload, read_event_file
from pipeline.orchestrator import TrackingOrchestrator
from publish.event_publisher import EnrollmentEventPublisher
from store.jsonl_store import JsonlRecordStore
from store.record_store import CreatePermission, RecordStore, StaticCreatePermission


class TracklineClient:
    """Primary SDK entry point for tracking record workflows."""

    def __init__(
        self,
        config: TracklineConfig | None = None,
        store: RecordStore | None = None,
        catalog: MappingCatalog | None = None,
        permission: CreatePermission | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            store: Optional record store, defaults to the JSONL store.
            catalog: Optional mapping catalog, defaults to the configured file.
            permission: Optional create permission, defaults to the config flag.
        """
        self._config = config or TracklineConfig.from_env()
        self._store = store or JsonlRecordStore(self._config)
        self._catalog = catalog
        self._permission = permission or StaticCreatePermission(self._config.create_allowed)

    @property
    def config(self) -> TracklineConfig:
        return self._config

    @property
    def store(self) -> RecordStore:
        return self._store

    def catalog(self) -> MappingCatalog:
        """Return the mapping catalog, loading the configured file on first use.

        Returns:
            Mapping catalog.

        Raises:
            TracklineConfigError: If no catalog or mapping file is configured.
        """
        if self._catalog is None:
            if self._config.mapping_path is None:
                raise TracklineConfigError(
                    "No mapping configuration is set. "
                    "Pass --mapping or set TRACKLINE_MAPPING_FILE."
                )
            self._catalog = MappingCatalog.from_file(self._config.mapping_path)
        return self._catalog

    def process_events(
        self,
        events: Iterable[EnrollmentEvent | Mapping[str, object]],
    ) -> BatchResult:
        """Build and write tracking records for one batch of events.

        Args:
            events: Parsed events or raw event payloads.

        Returns:
            Batch summary. Processing failures are reported, not raised.

        Raises:
            TracklineIntakeError: If a raw payload is malformed.
            TracklineConfigError: If the mapping configuration is unavailable.
        """
        parsed_events = _coerce_events(events)
        orchestrator = TrackingOrchestrator(self._store, self.catalog(), self._permission)
        return orchestrator.process_batch(parsed_events)

    def process_file(self, events_path: str | Path) -> BatchResult:
        """Process enrollment events read from a JSONL file.

        Args:
            events_path: Path to the events file.

        Returns:
            Batch summary.
        """
        return self.process_events(read_event_file(events_path))

    def publish_enrollments(
        self,
        enrollments: Sequence[Mapping[str, object]],
        events_client: object | None = None,
    ) -> list[PublishOutcome]:
        """Publish tracking requests for enrollment records.

        Args:
            enrollments: Enrollment records holding ``Id`` and ``AccountId``.
            events_client: Optional pre-built EventBridge client.

        Returns:
            One outcome per enrollment.

        Raises:
            TracklineDependencyError: If boto3 is needed but missing.
        """
        publisher = EnrollmentEventPublisher(self._config, events_client)
        return publisher.publish(enrollments)


def _coerce_events(
    events: Iterable[EnrollmentEvent | Mapping[str, object]],
) -> list[EnrollmentEvent]:
    return [
        event if isinstance(event, EnrollmentEvent) else parse_event_payload(event)
        for event in events
    ]
