"""Read-only mapping rule catalog.

This module serves mapping rules and query descriptors per source type
from a validated mapping configuration.
"""

from __future__ import annotations

from pathlib import Path

from core.errors import TracklineConfigError
from core.mapping_config import load_mapping_config
from core.types import FanOutKeys, MappingConfig, MappingRule, SourceTypeDescriptor


class MappingCatalog:
    """Lookup of mapping rules and descriptors keyed by entity type."""

    def __init__(self, config: MappingConfig) -> None:
        self._config = config

    @classmethod
    def from_file(cls, mapping_path: str | Path) -> "MappingCatalog":
        """Build a catalog from a YAML mapping file.

        Args:
            mapping_path: Mapping configuration path.

        Returns:
            Catalog over the validated configuration.
        """
        return cls(load_mapping_config(mapping_path))

    @property
    def target_fields(self) -> frozenset[str]:
        return self._config.target_fields

    @property
    def base_sources(self) -> tuple[str, ...]:
        return self._config.base_sources

    @property
    def fan_out_keys(self) -> FanOutKeys:
        return self._config.fan_out

    def rules_for(self, entity_type: str) -> tuple[MappingRule, ...]:
        """Return the ordered mapping rules for a source type.

        Args:
            entity_type: Source entity type name.

        Returns:
            Configured rules, empty when none are configured.
        """
        return self._config.rules.get(entity_type, ())

    def descriptor_for(self, entity_type: str) -> SourceTypeDescriptor:
        """Return the query descriptor for a source type.

        Args:
            entity_type: Source entity type name.

        Returns:
            Declared descriptor.

        Raises:
            TracklineConfigError: If the type is not declared.
        """
        descriptor = self._config.descriptors.get(entity_type)
        if descriptor is None:
            declared_rows = ", ".join(sorted(self._config.descriptors))
            raise TracklineConfigError(
                f"Unknown source entity type '{entity_type}'. "
                f"Declare it under source_types; declared types: {declared_rows}."
            )
        return descriptor

    def source_types(self) -> tuple[str, ...]:
        return tuple(self._config.descriptors)
