"""
Unit tests for feature gates and per-run settings.
"""
import pytest

from poolwarden.core.settings import (
    FeatureGates,
    InvalidSettingsError,
    ValidationSettings,
    parse_bool,
)

BASE = {"root": "ou-root-pool0002", "shard-name": "hive-a"}


class TestParseBool:

    @pytest.mark.parametrize("raw", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true_spellings(self, raw):
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", ["0", "f", "F", "FALSE", "false", "False"])
    def test_false_spellings(self, raw):
        assert parse_bool(raw) is False

    @pytest.mark.parametrize("raw", [None, "", "yes", "tRUE", " true"])
    def test_everything_else_is_rejected(self, raw):
        with pytest.raises(ValueError, match="Invalid boolean"):
            parse_bool(raw)


class TestFeatureGates:

    def test_defaults_are_disabled(self):
        assert FeatureGates() == FeatureGates(move_enabled=False, tag_enabled=False)

    def test_flags_are_read(self):
        gates = FeatureGates.from_config_map({
            "feature.validation_move_account": "true",
            "feature.validation_tag_account": "1",
        })
        assert gates == FeatureGates(move_enabled=True, tag_enabled=True)

    def test_missing_flags_keep_previous_values(self):
        previous = FeatureGates(move_enabled=True, tag_enabled=True)
        assert FeatureGates.from_config_map({}, previous=previous) == previous

    def test_unparseable_flag_keeps_only_its_previous_value(self):
        previous = FeatureGates(move_enabled=True, tag_enabled=False)
        gates = FeatureGates.from_config_map({
            "feature.validation_move_account": "maybe",
            "feature.validation_tag_account": "true",
        }, previous=previous)
        assert gates == FeatureGates(move_enabled=True, tag_enabled=True)

    def test_explicit_false_overrides_previous(self):
        previous = FeatureGates(move_enabled=True)
        gates = FeatureGates.from_config_map({"feature.validation_move_account": "false"}, previous=previous)
        assert gates.move_enabled is False


class TestValidationSettings:

    def test_reads_pool_and_shard(self):
        settings = ValidationSettings.from_config_map(BASE)

        assert settings.pool_ou_id == "ou-root-pool0002"
        assert settings.shard_name == "hive-a"
        assert settings.gates == FeatureGates()

    def test_default_shard_name_used_when_missing(self):
        settings = ValidationSettings.from_config_map({"root": "r-root1"}, default_shard_name="hive-b")
        assert settings.shard_name == "hive-b"

    def test_missing_pool_ou_is_invalid(self):
        with pytest.raises(InvalidSettingsError, match="Pool OU"):
            ValidationSettings.from_config_map({"shard-name": "hive-a"})

    def test_malformed_pool_ou_is_invalid(self):
        with pytest.raises(InvalidSettingsError, match="Invalid OU/Root ID"):
            ValidationSettings.from_config_map({**BASE, "root": "pool"})

    def test_missing_shard_name_is_invalid(self):
        with pytest.raises(InvalidSettingsError, match="Shard name"):
            ValidationSettings.from_config_map({"root": "r-root1"})
