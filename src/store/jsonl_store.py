"""JSONL-backed record store.

This module reads source entity records from one JSONL file per entity
type and appends created tracking records to a JSONL file. Created records
are mirrored to an Apache Lance dataset when Lance is available; a failed
mirror write does not fail the append.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from core.config import TracklineConfig
from core.constants import (
    ENTITIES_DIR_NAME,
    ENTITY_FILE_SUFFIX,
    LANCE_DIR_NAME,
    TRACKING_DIR_NAME,
    TRACKING_RECORD,
    TRACKING_RECORDS_FILE_NAME,
)
from core.errors import TracklineStoreError
from core.logging_config import get_logger
from core.tracking_record import TrackingRecord
from core.types import RecordQuery, SourceRecord
from store.query_filtering import run_query
from store.record_payload import (
    append_json_objects,
    read_json_objects,
    source_record_from_payload,
    tracking_record_to_payload,
)

_LOGGER = get_logger(__name__)


class JsonlRecordStore:
    """Filesystem record store rooted at the configured data root."""

    def __init__(self, config: TracklineConfig) -> None:
        """Initialize store directories from config.

        Args:
            config: Runtime configuration.
        """
        self._entities_root = config.data_root / ENTITIES_DIR_NAME
        self._tracking_root = config.data_root / TRACKING_DIR_NAME
        self._entities_root.mkdir(parents=True, exist_ok=True)
        self._tracking_root.mkdir(parents=True, exist_ok=True)

    @property
    def tracking_records_path(self) -> Path:
        return self._tracking_root / TRACKING_RECORDS_FILE_NAME

    def query(self, query: RecordQuery) -> list[SourceRecord]:
        """Evaluate a query over the entity type's JSONL file.

        Args:
            query: Bound query request.

        Returns:
            Matching projected records in ascending sort order.

        Raises:
            TracklineStoreError: If the entity file is unreadable.
        """
        entity_path = self._entities_root / f"{query.entity_type}{ENTITY_FILE_SUFFIX}"
        if not entity_path.exists():
            return []
        records = [
            source_record_from_payload(query.entity_type, payload)
            for payload in read_json_objects(entity_path)
        ]
        return run_query(records, query)

    def bulk_create(self, entity_type: str, records: Sequence[TrackingRecord]) -> int:
        """Append tracking records in one write.

        Args:
            entity_type: Target entity type, only tracking records are writable.
            records: Records to persist.

        Returns:
            Number of records written.

        Raises:
            TracklineStoreError: If the type is not writable or the JSONL append fails.
        """
        if entity_type != TRACKING_RECORD:
            raise TracklineStoreError(
                f"Entity type '{entity_type}' is read-only. "
                f"Only '{TRACKING_RECORD}' records can be created."
            )
        if not records:
            return 0
        created_at = datetime.now(timezone.utc).isoformat()
        payloads = [
            tracking_record_to_payload(uuid.uuid4().hex, created_at, record.to_dict())
            for record in records
        ]
        append_json_objects(self.tracking_records_path, payloads)
        lance_written = _try_append_lance_dataset(self._tracking_root, payloads)
        _LOGGER.info(
            "tracking_records_created",
            record_count=len(payloads),
            path=str(self.tracking_records_path),
            lance_written=lance_written,
        )
        return len(payloads)

    def load_created(self) -> list[dict[str, object]]:
        """Load every created tracking record payload."""
        if not self.tracking_records_path.exists():
            return []
        return list(read_json_objects(self.tracking_records_path))


def _try_append_lance_dataset(tracking_root: Path, payloads: list[dict[str, object]]) -> bool:
    """Attempt to mirror created records to Apache Lance.

    The JSONL append has already succeeded when this runs, so a failed
    mirror write is logged and reported as not written.

    Args:
        tracking_root: Tracking records directory.
        payloads: Serialized tracking records.

    Returns:
        Whether the Lance write succeeded.
    """
    lance_path = tracking_root / LANCE_DIR_NAME
    try:
        return _append_lance_table(lance_path, payloads)
    except TracklineStoreError as error:
        _LOGGER.warning("lance_mirror_failed", path=str(lance_path), error=str(error))
        return False


def _append_lance_table(lance_path: Path, payloads: list[dict[str, object]]) -> bool:
    """Append created records to the Lance dataset at ``lance_path``.

    Args:
        lance_path: Lance dataset directory.
        payloads: Serialized tracking records.

    Returns:
        False when lance or pyarrow is not installed, True after a write.

    Raises:
        TracklineStoreError: If the Lance write fails.
    """
    try:
        import lance
        import pyarrow as pa
    except ImportError:
        return False

    table = pa.table(
        {
            "record_id": [str(payload["record_id"]) for payload in payloads],
            "created_at": [str(payload["created_at"]) for payload in payloads],
            "fields": [json.dumps(payload["fields"], sort_keys=True) for payload in payloads],
        }
    )
    write_mode = "append" if lance_path.exists() else "create"
    try:
        lance.write_dataset(table, str(lance_path), mode=write_mode)
    except Exception as error:
        raise TracklineStoreError(
            f"Failed to write Lance dataset at {lance_path}: {error}. "
            "Validate lance/pyarrow compatibility and retry."
        ) from error
    return True
