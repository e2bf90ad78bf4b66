"""Typed mapping configuration parsing.

This module loads and validates the YAML file describing tracking fields,
source-type query descriptors, fan-out keys, and per-type mapping rules.
Unknown tracking fields are rejected here, before any record is written.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import SUPPORTED_MAPPING_VERSION, SUPPORTED_QUERY_PARAMETERS
from core.errors import TracklineConfigError, TracklineDependencyError
from core.types import (
    FanOutKeys,
    FilterCondition,
    MappingConfig,
    MappingRule,
    SourceTypeDescriptor,
)

_ROOT_KEYS = {"version", "target_fields", "base_sources", "fan_out", "source_types", "rules"}
_DESCRIPTOR_KEYS = {"relation", "filters", "auxiliary_fields"}
_FAN_OUT_KEYS = {
    "product_code_field",
    "referral_key_field",
    "order_key_field",
    "identity_target_field",
}


def load_mapping_config(mapping_path: str | Path) -> MappingConfig:
    """Load and validate a YAML mapping configuration from disk.

    Args:
        mapping_path: File path to the YAML mapping configuration.

    Returns:
        Fully validated mapping configuration.

    Raises:
        TracklineDependencyError: If PyYAML is unavailable.
        TracklineConfigError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(Path(mapping_path))
    return parse_mapping_config(payload)


def parse_mapping_config(payload: object) -> MappingConfig:
    """Validate an already-decoded mapping configuration payload.

    Args:
        payload: Decoded YAML or JSON object.

    Returns:
        Fully validated mapping configuration.

    Raises:
        TracklineConfigError: If schema checks fail.
    """
    root_mapping = _expect_mapping(payload, "mapping root")
    _validate_keys(root_mapping, _ROOT_KEYS, "mapping root")
    version = _parse_version(root_mapping)
    raw_target_fields = root_mapping.get("target_fields")
    target_fields = frozenset(_parse_string_list(raw_target_fields, "target_fields"))
    descriptors = _parse_descriptors(root_mapping)
    base_sources = tuple(_parse_string_list(root_mapping.get("base_sources"), "base_sources"))
    _validate_known_types(base_sources, descriptors, "base_sources")
    fan_out = _parse_fan_out(root_mapping, target_fields)
    rules = _parse_rules(root_mapping, descriptors, target_fields)
    return MappingConfig(
        version=version,
        target_fields=target_fields,
        base_sources=base_sources,
        fan_out=fan_out,
        descriptors=descriptors,
        rules=rules,
    )


def _load_yaml_payload(mapping_file: Path) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise TracklineDependencyError(
            "Mapping configuration requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    resolved_file = mapping_file.expanduser().resolve()
    if not resolved_file.exists():
        raise TracklineConfigError(
            f"Mapping file does not exist at {resolved_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(resolved_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise TracklineConfigError(
            f"Failed to read mapping file at {resolved_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise TracklineConfigError(
            f"Failed to parse YAML mapping file at {resolved_file}: {error}. "
            "Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise TracklineConfigError(
            f"Mapping file at {resolved_file} is empty. Define 'version' and 'source_types'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise TracklineConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise TracklineConfigError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise TracklineConfigError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _expect_string(value: object, context: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise TracklineConfigError(f"Invalid {context}: expected a non-empty string.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise TracklineConfigError("Mapping field 'version' must be an integer. Set version: 1.")
    if raw_version != SUPPORTED_MAPPING_VERSION:
        raise TracklineConfigError(f"Unsupported mapping version {raw_version}. Use version: 1.")
    return raw_version


def _parse_string_list(raw_value: object, context: str) -> list[str]:
    if raw_value is None:
        return []
    rows = _expect_sequence(raw_value, context)
    return [_expect_string(row, f"{context} entry #{index + 1}") for index, row in enumerate(rows)]


def _parse_descriptors(root_mapping: Mapping[str, object]) -> dict[str, SourceTypeDescriptor]:
    raw_types = root_mapping.get("source_types")
    if raw_types is None:
        raise TracklineConfigError(
            "Mapping missing required field 'source_types'. Describe every queried entity type."
        )
    types_mapping = _expect_mapping(raw_types, "source_types")
    descriptors: dict[str, SourceTypeDescriptor] = {}
    for entity_type, raw_descriptor in types_mapping.items():
        descriptors[entity_type] = _parse_descriptor(entity_type, raw_descriptor)
    return descriptors


def _parse_descriptor(entity_type: str, raw_descriptor: object) -> SourceTypeDescriptor:
    context = f"source type '{entity_type}'"
    descriptor_mapping = _expect_mapping(raw_descriptor, context)
    _validate_keys(descriptor_mapping, _DESCRIPTOR_KEYS, context)
    raw_relation = descriptor_mapping.get("relation")
    if raw_relation is None:
        raise TracklineConfigError(
            f"Invalid {context}: field 'relation' is required to scope queries to an event."
        )
    relation = _parse_relation(raw_relation, f"{context} relation")
    raw_filters = descriptor_mapping.get("filters")
    filter_rows = [] if raw_filters is None else _expect_sequence(raw_filters, f"{context} filters")
    filters = tuple(
        _parse_filter(row, f"{context} filter #{index + 1}")
        for index, row in enumerate(filter_rows)
    )
    raw_auxiliary_fields = descriptor_mapping.get("auxiliary_fields")
    auxiliary_fields = tuple(
        _parse_string_list(raw_auxiliary_fields, f"{context} auxiliary_fields")
    )
    return SourceTypeDescriptor(
        entity_type=entity_type,
        relation=relation,
        filters=filters,
        auxiliary_fields=auxiliary_fields,
    )


def _parse_relation(raw_relation: object, context: str) -> FilterCondition:
    relation_mapping = _expect_mapping(raw_relation, context)
    _validate_keys(relation_mapping, {"field", "parameter"}, context)
    field_name = _expect_string(relation_mapping.get("field"), f"{context} field")
    parameter = _expect_string(relation_mapping.get("parameter"), f"{context} parameter")
    if parameter not in SUPPORTED_QUERY_PARAMETERS:
        supported_rows = ", ".join(SUPPORTED_QUERY_PARAMETERS)
        raise TracklineConfigError(
            f"Unsupported parameter '{parameter}' in {context}. Use one of: {supported_rows}."
        )
    return FilterCondition(field=field_name, parameter=parameter)


def _parse_filter(raw_filter: object, context: str) -> FilterCondition:
    filter_mapping = _expect_mapping(raw_filter, context)
    _validate_keys(filter_mapping, {"field", "equals"}, context)
    field_name = _expect_string(filter_mapping.get("field"), f"{context} field")
    if "equals" not in filter_mapping:
        raise TracklineConfigError(f"Invalid {context}: field 'equals' is required.")
    return FilterCondition(field=field_name, value=filter_mapping["equals"])


def _parse_fan_out(
    root_mapping: Mapping[str, object],
    target_fields: frozenset[str],
) -> FanOutKeys:
    raw_fan_out = root_mapping.get("fan_out")
    if raw_fan_out is None:
        fan_out = FanOutKeys()
    else:
        fan_out_mapping = _expect_mapping(raw_fan_out, "fan_out")
        _validate_keys(fan_out_mapping, _FAN_OUT_KEYS, "fan_out")
        overrides = {
            key: _expect_string(value, f"fan_out {key}") for key, value in fan_out_mapping.items()
        }
        fan_out = FanOutKeys(**overrides)
    if fan_out.identity_target_field not in target_fields:
        raise TracklineConfigError(
            f"fan_out identity_target_field '{fan_out.identity_target_field}' is not declared "
            "in target_fields. Declare it so dosage identities can be correlated."
        )
    return fan_out


def _parse_rules(
    root_mapping: Mapping[str, object],
    descriptors: Mapping[str, SourceTypeDescriptor],
    target_fields: frozenset[str],
) -> dict[str, tuple[MappingRule, ...]]:
    raw_rules = root_mapping.get("rules")
    if raw_rules is None:
        return {}
    rules_mapping = _expect_mapping(raw_rules, "rules")
    _validate_known_types(tuple(rules_mapping), descriptors, "rules")
    parsed_rules: dict[str, tuple[MappingRule, ...]] = {}
    for entity_type, raw_rows in rules_mapping.items():
        rows = _expect_sequence(raw_rows, f"rules for '{entity_type}'")
        parsed_rules[entity_type] = tuple(
            _parse_rule(entity_type, row, index, target_fields) for index, row in enumerate(rows)
        )
    return parsed_rules


def _parse_rule(
    entity_type: str,
    raw_rule: object,
    rule_index: int,
    target_fields: frozenset[str],
) -> MappingRule:
    context = f"rule #{rule_index + 1} for '{entity_type}'"
    rule_mapping = _expect_mapping(raw_rule, context)
    _validate_keys(rule_mapping, {"source", "target"}, context)
    source_field_path = _expect_string(rule_mapping.get("source"), f"{context} source")
    target_field_name = _expect_string(rule_mapping.get("target"), f"{context} target")
    if target_field_name not in target_fields:
        raise TracklineConfigError(
            f"Invalid {context}: target '{target_field_name}' is not declared in target_fields."
        )
    return MappingRule(
        source_entity_type=entity_type,
        source_field_path=source_field_path,
        target_field_name=target_field_name,
    )


def _validate_known_types(
    entity_types: Sequence[str],
    descriptors: Mapping[str, SourceTypeDescriptor],
    context: str,
) -> None:
    unknown_types = sorted(set(entity_types) - set(descriptors))
    if unknown_types:
        raise TracklineConfigError(
            f"Mapping {context} reference undeclared source types: {', '.join(unknown_types)}. "
            "Describe them under source_types."
        )


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise TracklineConfigError(
            f"Invalid {context}: unknown fields {', '.join(unknown_keys)}."
        )
