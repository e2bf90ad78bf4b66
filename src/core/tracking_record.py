"""Mutable tracking record model.

This module defines the denormalized output record built per enrollment.
Writes are restricted to a closed field set fixed at configuration load.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from core.constants import OVERLAY_FIELDS, SYSTEM_FIELDS, TRACKING_DEFAULTS
from core.errors import TracklineMappingError


class TrackingRecord:
    """Open-field tracking record with a closed key set."""

    def __init__(
        self,
        allowed_fields: frozenset[str],
        values: Mapping[str, str] | None = None,
    ) -> None:
        self._allowed_fields = allowed_fields
        self._values: dict[str, str] = {}
        for field_name, value in (values or {}).items():
            self.set(field_name, value)

    @classmethod
    def with_defaults(cls, target_fields: Iterable[str]) -> "TrackingRecord":
        """Create a record pre-populated with default field values.

        Args:
            target_fields: Fields writable by mapping rules.

        Returns:
            New tracking record with consent, referral, and PA defaults.
        """
        allowed_fields = build_allowed_fields(target_fields)
        return cls(allowed_fields, TRACKING_DEFAULTS)

    @property
    def allowed_fields(self) -> frozenset[str]:
        return self._allowed_fields

    def get(self, field_name: str) -> str | None:
        return self._values.get(field_name)

    def set(self, field_name: str, value: str) -> None:
        """Write one field value.

        Args:
            field_name: Tracking field name.
            value: Rendered string value.

        Raises:
            TracklineMappingError: If the field is outside the closed set.
        """
        if field_name not in self._allowed_fields:
            raise TracklineMappingError(
                f"Tracking field '{field_name}' is not declared. "
                "Add it to target_fields in the mapping configuration."
            )
        self._values[field_name] = value

    def is_blank(self, field_name: str) -> bool:
        value = self._values.get(field_name)
        return value is None or not value.strip()

    def clone(self) -> "TrackingRecord":
        """Copy current non-system field values into a new record."""
        copied_values = {
            field_name: value
            for field_name, value in self._values.items()
            if field_name not in SYSTEM_FIELDS
        }
        return TrackingRecord(self._allowed_fields, copied_values)

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __repr__(self) -> str:
        return f"TrackingRecord({self._values!r})"


def build_allowed_fields(target_fields: Iterable[str]) -> frozenset[str]:
    """Build the closed tracking key set from configured targets.

    Args:
        target_fields: Fields writable by mapping rules.

    Returns:
        Union of configured targets, overlay fields, and system fields.
    """
    return frozenset(target_fields) | frozenset(OVERLAY_FIELDS) | frozenset(SYSTEM_FIELDS)
