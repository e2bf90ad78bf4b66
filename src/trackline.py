"""Public SDK surface for Trackline.

This module provides a stable import path for SDK users.
It re-exports the primary client, stores, and typed result models.
"""

from __future__ import annotations

from core.config import TracklineConfig
from core.tracking_record import TrackingRecord
from core.types import (
    BatchResult,
    EnrollmentEvent,
    EventOutcome,
    PublishOutcome,
    SourceRecord,
)
from mapping.catalog import MappingCatalog
from pipeline.orchestrator import process_enrollment_events
from pipeline.tracking_sdk import TracklineClient
from store.jsonl_store import JsonlRecordStore
from store.memory_store import InMemoryRecordStore
from store.record_store import StaticCreatePermission

__all__ = [
    "BatchResult",
    "EnrollmentEvent",
    "EventOutcome",
    "InMemoryRecordStore",
    "JsonlRecordStore",
    "MappingCatalog",
    "PublishOutcome",
    "SourceRecord",
    "StaticCreatePermission",
    "TrackingRecord",
    "TracklineClient",
    "TracklineConfig",
    "process_enrollment_events",
]
