"""Unit tests for mapping configuration parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import TracklineConfigError
from core.mapping_config import load_mapping_config, parse_mapping_config
from tests.fixture_paths import fixture_path

_SHIPPED_MAPPING = Path(__file__).resolve().parents[3] / "config" / "tracking_mappings.yaml"
_STATUS_FILTERED_TYPES = (
    "coverage-benefit",
    "preauthorization",
    "copay-assistance",
    "charitable-program",
    "referral",
)


def test_load_mapping_config_parses_fixture() -> None:
    """Valid mapping file should parse descriptors, rules, and base sources."""
    config = load_mapping_config(fixture_path("mappings/tracking_mappings.yaml"))

    assert config.base_sources[0] == "enrollment"
    assert len(config.descriptors) == 12
    assert config.rules["medication-dosage"][0].target_field_name == "Dosage_Id"


def test_load_mapping_config_binds_relation_parameter() -> None:
    """Relations should carry the event parameter, not a literal value."""
    config = load_mapping_config(fixture_path("mappings/tracking_mappings.yaml"))

    relation = config.descriptors["account"].relation

    assert (relation.field, relation.parameter, relation.value) == ("Id", "patient_id", None)


def test_load_mapping_config_keeps_boolean_filter_literal() -> None:
    """YAML boolean filter values should stay booleans."""
    config = load_mapping_config(fixture_path("mappings/tracking_mappings.yaml"))

    dosage_filter = config.descriptors["medication-dosage"].filters[0]

    assert dosage_filter.value is True


@pytest.mark.parametrize(
    "mapping_path",
    [_SHIPPED_MAPPING, fixture_path("mappings/tracking_mappings.yaml")],
)
def test_mapping_files_filter_assistance_types_to_active(mapping_path: Path) -> None:
    """Status-filtered types should only match active records."""
    config = load_mapping_config(mapping_path)

    for entity_type in _STATUS_FILTERED_TYPES:
        filters = config.descriptors[entity_type].filters
        assert [(item.field, item.value) for item in filters] == [("Status", "Active")]


@pytest.mark.parametrize(
    "mapping_path",
    [_SHIPPED_MAPPING, fixture_path("mappings/tracking_mappings.yaml")],
)
def test_mapping_files_relate_case_and_consent_to_enrollment(mapping_path: Path) -> None:
    """Care plans and consents should be scoped to the processed enrollment."""
    config = load_mapping_config(mapping_path)

    for entity_type in ("case", "authorization-consent"):
        relation = config.descriptors[entity_type].relation
        assert (relation.field, relation.parameter) == ("EnrollmentId", "enrollment_id")


def test_load_mapping_config_rejects_unknown_target() -> None:
    """Rule targets outside target_fields should be rejected at load time."""
    with pytest.raises(TracklineConfigError, match="Dose_Strength"):
        load_mapping_config(fixture_path("mappings/unknown_target.yaml"))


def test_load_mapping_config_rejects_unknown_parameter() -> None:
    """Relations should only bind supported event parameters."""
    with pytest.raises(TracklineConfigError, match="case_id"):
        load_mapping_config(fixture_path("mappings/unknown_parameter.yaml"))


def test_load_mapping_config_rejects_undeclared_base_source() -> None:
    """Base sources must be described under source_types."""
    with pytest.raises(TracklineConfigError, match="enrollment"):
        load_mapping_config(fixture_path("mappings/undeclared_base_source.yaml"))


def test_load_mapping_config_rejects_unsupported_version() -> None:
    """Only the supported schema version should load."""
    with pytest.raises(TracklineConfigError, match="version"):
        load_mapping_config(fixture_path("mappings/unsupported_version.yaml"))


def test_load_mapping_config_rejects_unknown_root_key() -> None:
    """Unknown root fields should be rejected."""
    with pytest.raises(TracklineConfigError, match="retry_policy"):
        load_mapping_config(fixture_path("mappings/unknown_root_key.yaml"))


def test_load_mapping_config_missing_file_raises(tmp_path) -> None:
    """Missing mapping files should raise a config error."""
    with pytest.raises(TracklineConfigError):
        load_mapping_config(tmp_path / "absent.yaml")


def test_parse_mapping_config_requires_identity_target() -> None:
    """The fan-out identity field must be a declared target."""
    payload = {
        "version": 1,
        "target_fields": ["Product_Code"],
        "source_types": {
            "order": {"relation": {"field": "EnrollmentId", "parameter": "enrollment_id"}},
        },
    }

    with pytest.raises(TracklineConfigError, match="identity_target_field"):
        parse_mapping_config(payload)


def test_parse_mapping_config_rejects_rules_for_undeclared_type() -> None:
    """Rules must reference declared source types."""
    payload = {
        "version": 1,
        "target_fields": ["Dosage_Id"],
        "source_types": {
            "order": {"relation": {"field": "EnrollmentId", "parameter": "enrollment_id"}},
        },
        "rules": {"referral": [{"source": "Id", "target": "Dosage_Id"}]},
    }

    with pytest.raises(TracklineConfigError, match="referral"):
        parse_mapping_config(payload)
