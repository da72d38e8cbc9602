"""Tests for the migration configuration."""

import pytest

from expectations_to_mockito.context import MigrationConfig
from expectations_to_mockito.exceptions import ConfigurationError


def test_migration_config_creation():
    """Test creating migration configuration with defaults."""
    config = MigrationConfig()

    assert config.line_length == 120
    assert config.dry_run is False
    assert config.expectations_module == "mockit"
    assert config.stub_module == "mockito"


def test_migration_config_with_override():
    """Test using with_override method."""
    config = MigrationConfig(line_length=80)
    new_config = config.with_override(line_length=100, dry_run=True)

    assert config.line_length == 80
    assert new_config.line_length == 100
    assert new_config.dry_run is True


def test_migration_config_round_trips_through_dict():
    """Test converting config to dictionary and back."""
    config = MigrationConfig(target_suffix="_mockito", stub_module="my.mocks")
    assert MigrationConfig.from_dict(config.to_dict()) == config


def test_from_dict_ignores_unknown_keys():
    config = MigrationConfig.from_dict({"dry_run": True, "unrelated": 1})
    assert config.dry_run is True


@pytest.mark.parametrize(
    "overrides, key",
    [
        ({"log_level": "LOUD"}, "log_level"),
        ({"line_length": 10}, "line_length"),
        ({"stub_module": ""}, "stub_module"),
        ({"expectations_module": "not a module"}, "expectations_module"),
    ],
)
def test_validate_rejects_invalid_values(overrides, key):
    with pytest.raises(ConfigurationError) as exc:
        MigrationConfig(**overrides).validate()
    assert exc.value.details.get("config_key") == key
