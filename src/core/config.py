"""Runtime configuration model for Trackline.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT, DEFAULT_EVENT_BUS_NAME, DEFAULT_EVENT_SOURCE
from core.errors import TracklineConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class TracklineConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for the JSONL record store.
        mapping_path: Optional default mapping YAML file.
        create_allowed: Whether callers may create tracking records.
        event_bus_name: EventBridge bus used by the enrollment publisher.
        event_source: EventBridge source attached to published entries.
        aws_region: Optional AWS region for boto3 session initialization.
        aws_profile: Optional AWS profile for boto3 session initialization.
    """

    data_root: Path
    mapping_path: Path | None
    create_allowed: bool
    event_bus_name: str
    event_source: str
    aws_region: str | None
    aws_profile: str | None

    @classmethod
    def from_env(cls) -> "TracklineConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            TracklineConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("TRACKLINE_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        mapping_value = os.getenv("TRACKLINE_MAPPING_FILE")
        create_allowed_value = os.getenv("TRACKLINE_CAN_CREATE", "true")
        create_allowed = _parse_bool("TRACKLINE_CAN_CREATE", create_allowed_value)
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            mapping_path=Path(mapping_value).expanduser().resolve() if mapping_value else None,
            create_allowed=create_allowed,
            event_bus_name=os.getenv("TRACKLINE_EVENT_BUS", DEFAULT_EVENT_BUS_NAME),
            event_source=os.getenv("TRACKLINE_EVENT_SOURCE", DEFAULT_EVENT_SOURCE),
            aws_region=os.getenv("TRACKLINE_AWS_REGION"),
            aws_profile=os.getenv("TRACKLINE_AWS_PROFILE"),
        )


def _parse_bool(variable_name: str, raw_value: str) -> bool:
    """Parse a boolean environment value.

    Args:
        variable_name: Environment variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        TracklineConfigError: If value is not a recognized boolean.
    """
    normalized_value = raw_value.strip().lower()
    if normalized_value in _TRUE_VALUES:
        return True
    if normalized_value in _FALSE_VALUES:
        return False
    raise TracklineConfigError(
        f"Invalid {variable_name} value: "
        f"expected true/false, got '{raw_value}'. "
        f"Set {variable_name} to 'true' or 'false'."
    )
