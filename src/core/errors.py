"""Trackline exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class TracklineError(Exception):
    """Base exception for all Trackline failures."""


class TracklineConfigError(TracklineError):
    """Raised for invalid runtime or mapping configuration."""


class TracklineMappingError(TracklineError):
    """Raised when a mapping writes outside the tracking field set."""


class TracklineResolveError(TracklineError):
    """Raised when a source field value cannot be resolved."""


class TracklineStoreError(TracklineError):
    """Raised for record store query and write failures."""


class TracklineIntakeError(TracklineError):
    """Raised for malformed enrollment event payloads."""


class TracklinePublishError(TracklineError):
    """Raised for enrollment event publishing failures."""


class TracklineDependencyError(TracklineError):
    """Raised when an optional runtime dependency is missing."""
