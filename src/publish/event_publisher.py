"""EventBridge publisher for enrollment tracking requests.

This module sends one event per enrollment, inspects each entry's result,
and logs success or failure per item without aborting the rest.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

from core.config import TracklineConfig
from core.constants import ENROLLMENT_EVENT_DETAIL_TYPE, ID_FIELD, PUBLISH_CHUNK_SIZE
from core.errors import TracklineDependencyError, TracklinePublishError
from core.logging_config import get_logger
from core.types import PublishOutcome

_LOGGER = get_logger(__name__)
_ACCOUNT_ID_FIELD = "AccountId"


class EnrollmentEventPublisher:
    """Publishes ``{enrollmentId, accountId}`` events for enrollments."""

    def __init__(self, config: TracklineConfig, events_client: Any | None = None) -> None:
        """Create a publisher.

        Args:
            config: Runtime configuration naming the bus and source.
            events_client: Optional pre-built EventBridge client.

        Raises:
            TracklinePublishError: If the bus name or event source is blank.
        """
        if not config.event_bus_name.strip() or not config.event_source.strip():
            raise TracklinePublishError(
                "Enrollment publishing requires an event bus and source. "
                "Set TRACKLINE_EVENT_BUS and TRACKLINE_EVENT_SOURCE."
            )
        self._config = config
        if events_client is None:
            events_client = create_events_client(config)
        self._events_client = events_client

    def publish(self, enrollments: Sequence[Mapping[str, object]]) -> list[PublishOutcome]:
        """Publish one event per enrollment record.

        Args:
            enrollments: Enrollment records holding ``Id`` and ``AccountId``.

        Returns:
            One outcome per enrollment, in input order.
        """
        outcomes: list[PublishOutcome] = []
        for start in range(0, len(enrollments), PUBLISH_CHUNK_SIZE):
            chunk = enrollments[start : start + PUBLISH_CHUNK_SIZE]
            outcomes.extend(self._publish_chunk(chunk))
        failed_count = sum(1 for outcome in outcomes if not outcome.succeeded)
        _LOGGER.info(
            "enrollment_events_published",
            total_count=len(outcomes),
            succeeded_count=len(outcomes) - failed_count,
            failed_count=failed_count,
        )
        return outcomes

    def _publish_chunk(self, chunk: Sequence[Mapping[str, object]]) -> list[PublishOutcome]:
        outcomes: dict[int, PublishOutcome] = {}
        entries: list[dict[str, str]] = []
        entry_positions: list[int] = []
        for position, enrollment in enumerate(chunk):
            enrollment_id = _identifier(enrollment.get(ID_FIELD))
            if enrollment_id is None:
                outcomes[position] = _failed("", "enrollment record has no Id")
                continue
            entries.append(self._build_entry(enrollment_id, enrollment))
            entry_positions.append(position)
        if entries:
            sent_outcomes = self._send_entries(entries)
            outcomes.update(zip(entry_positions, sent_outcomes))
        return [outcomes[position] for position in range(len(chunk))]

    def _build_entry(self, enrollment_id: str, enrollment: Mapping[str, object]) -> dict[str, str]:
        detail = {
            "enrollmentId": enrollment_id,
            "accountId": _identifier(enrollment.get(_ACCOUNT_ID_FIELD)),
        }
        return {
            "Source": self._config.event_source,
            "DetailType": ENROLLMENT_EVENT_DETAIL_TYPE,
            "Detail": json.dumps(detail),
            "EventBusName": self._config.event_bus_name,
        }

    def _send_entries(self, entries: list[dict[str, str]]) -> list[PublishOutcome]:
        enrollment_ids = [json.loads(entry["Detail"])["enrollmentId"] for entry in entries]
        try:
            response = self._events_client.put_events(Entries=entries)
        except Exception as error:
            _LOGGER.error(
                "enrollment_event_batch_failed",
                enrollment_ids=enrollment_ids,
                error=str(error),
            )
            return [_failed(enrollment_id, str(error)) for enrollment_id in enrollment_ids]
        results = list(response.get("Entries", []))
        return [
            _outcome_from_result(enrollment_id, results[index] if index < len(results) else None)
            for index, enrollment_id in enumerate(enrollment_ids)
        ]


def create_events_client(config: TracklineConfig) -> Any:
    """Create a boto3 EventBridge client.

    Args:
        config: Runtime config with optional session settings.

    Returns:
        Boto3 EventBridge client.

    Raises:
        TracklineDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise TracklineDependencyError(
            "Enrollment publishing requires boto3, but it is not installed. "
            "Install boto3 to publish events to EventBridge."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.aws_profile:
        session_kwargs["profile_name"] = config.aws_profile
    if config.aws_region:
        session_kwargs["region_name"] = config.aws_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("events")


def _outcome_from_result(enrollment_id: str, result: Mapping[str, Any] | None) -> PublishOutcome:
    if result is None:
        return _failed(enrollment_id, "no result returned for entry")
    error_code = result.get("ErrorCode")
    if error_code:
        return _failed(enrollment_id, f"{error_code}: {result.get('ErrorMessage', '')}".strip())
    event_id = str(result.get("EventId", ""))
    _LOGGER.info("enrollment_event_published", enrollment_id=enrollment_id, event_id=event_id)
    return PublishOutcome(enrollment_id=enrollment_id, succeeded=True, event_id=event_id)


def _failed(enrollment_id: str, error_message: str) -> PublishOutcome:
    _LOGGER.error("enrollment_event_failed", enrollment_id=enrollment_id, error=error_message)
    return PublishOutcome(
        enrollment_id=enrollment_id,
        succeeded=False,
        error_message=error_message,
    )


def _identifier(value: object) -> str | None:
    if value is None:
        return None
    identifier = str(value).strip()
    return identifier if identifier else None
