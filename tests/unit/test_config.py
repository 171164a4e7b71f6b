"""
Unit tests for the LayeredConf configuration facade.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from layeredconf.config.constants import DEFAULT_BACKEND_UPDATE_INTERVAL_MS, ERROR_MESSAGES
from layeredconf.config.settings import ConfigurationOptions, LayeredConfSettings, build_options, get_settings
from layeredconf.core.configuration import Configuration
from layeredconf.core.levels import ConfigLevel, ValueCell, resolve_level
from layeredconf.utils.exceptions import (
    BackendUpdateFailed,
    ConfigurationError,
    DefaultConfigInvalid,
    InstanceNeedsDefaultConfigs,
    NoConfigurationInstance,
    UnknownConfigKey,
    UnknownConfigLevel,
)


class TestConfiguration:
    """Test configuration facade functionality."""

    def test_only_default_values_after_construction(self):
        conf = Configuration({"a": 1, "b": 2})

        assert conf.get_value("a") == 1
        assert conf.get_value("b") == 2
        for level in (ConfigLevel.ENVIRONMENT, ConfigLevel.BACKEND, ConfigLevel.USER, ConfigLevel.DYNAMIC):
            assert conf.get_configs_for_level(level) == {}

        assert conf.get_config("a") == ValueCell(1, ConfigLevel.DEFAULT, False)
        assert conf.get_configs() == {
            "a": ValueCell(1, ConfigLevel.DEFAULT, False),
            "b": ValueCell(2, ConfigLevel.DEFAULT, False),
        }

    def test_invalid_defaults(self):
        with pytest.raises(DefaultConfigInvalid):
            Configuration()
        with pytest.raises(DefaultConfigInvalid):
            Configuration("not a mapping")

    def test_set_config_targets_dynamic_level(self, config):
        assert config.set_config("foo", "newFoo") is True

        assert config.get_value("foo") == "newFoo"
        assert config.get_config("foo").level == ConfigLevel.DYNAMIC
        assert config.get_configs_for_level(ConfigLevel.DEFAULT)["foo"].value == "defaultFoo"
        assert len(config.get_configs_for_level(ConfigLevel.DYNAMIC)) == 1

    def test_fallback_on_delete(self):
        conf = Configuration({"foo": "bar"})

        conf.set_environment_config({"foo": "env"})
        conf.set_config("foo", "dyn")
        assert conf.get_value("foo") == "dyn"

        conf.delete_config("foo")
        assert conf.get_value("foo") == "env"

        conf.delete_config("foo")
        assert conf.get_value("foo") == "env"

    def test_layers_override_each_other(self, config):
        config.set_environment_config({"foo": "envFoo"})
        config.set_backend_config({"bar": 100})
        config.set_user_config({"foo": "userFoo"})
        config.set_config("bar", 200)

        config.set_environment_config({"foo": "newEnvFoo"})
        config.set_backend_config({"bar": 300})
        assert config.get_value("foo") == "userFoo"
        assert config.get_value("bar") == 200

        config.set_user_config({"foo": "newUserFoo"})
        assert config.get_value("foo") == "newUserFoo"

    def test_override_flag(self, config):
        config.set_user_config({"foo": "userFoo", "bar": 1})
        config.set_user_config({"bar": 2}, override=True)

        assert config.get_value("foo") == "defaultFoo"
        assert config.get_value("bar") == 2

    def test_value_types(self):
        conf = Configuration({"flag": False, "count": 0, "ratio": 0.5, "name": "x", "FLAG": None})

        conf.set_config("flag", True)
        conf.set_config("count", -7)
        assert conf.get_value("flag") is True
        assert conf.get_value("count") == -7
        assert conf.get_value("ratio") == 0.5
        assert conf.get_value("FLAG") is None

    def test_unknown_keys(self, config):
        """Reads of unknown keys return None; dynamic writes raise."""
        assert config.get_value("missing") is None
        assert config.get_config("missing") is None
        assert "missing" not in config
        assert "foo" in config

        with pytest.raises(UnknownConfigKey):
            config.set_config("missing", 1)

    def test_level_accessor_accepts_names(self, config):
        config.set_environment_config({"foo": "envFoo"})

        assert config.get_configs_for_level("environment") == config.get_configs_for_level(1)

    def test_unknown_level(self, config):
        with pytest.raises(UnknownConfigLevel) as exc_info:
            config.get_configs_for_level("SESSION")
        assert exc_info.value.level == "SESSION"

        with pytest.raises(UnknownConfigLevel):
            config.get_configs_for_level(9)

    def test_set_level_config(self, config):
        config.set_level_config("backend", {"bar": 5})
        assert config.get_config("bar") == ValueCell(5, ConfigLevel.BACKEND)

    def test_copies_are_shallow(self, config):
        """Mutating returned mappings leaves the configuration untouched."""
        configs = config.get_configs()
        configs["foo"] = ValueCell("hacked", ConfigLevel.DYNAMIC)
        config.get_configs_for_level(ConfigLevel.DEFAULT).clear()

        assert config.get_value("foo") == "defaultFoo"
        assert len(config.get_configs_for_level(ConfigLevel.DEFAULT)) == 2

    def test_helper_convert_to_value_object(self, config):
        config.set_config("bar", 1)

        assert Configuration.helper_convert_to_value_object(config.get_configs()) == {
            "foo": "defaultFoo",
            "bar": 1,
        }
        assert config.get_values() == {"foo": "defaultFoo", "bar": 1}
        assert config.keys() == ["foo", "bar"]


class TestSingleton:
    """Test the process-wide instance."""

    def test_singleton_identity(self):
        conf1 = Configuration({"foo": "defaultA", "bar": 10}, {"singleton": True})
        conf2 = Configuration({"foo": "anotherA", "bar": 20}, {"singleton": True})

        assert conf2 is conf1
        assert conf2.get_value("foo") == "defaultA"

        Configuration.clear_instance()
        conf3 = Configuration({"foo": "newA", "bar": 30}, singleton=True)
        assert conf3 is not conf1
        assert conf3.get_value("foo") == "newA"

    def test_non_singleton_constructions_are_distinct(self, default_values):
        assert Configuration(default_values) is not Configuration(default_values)

    def test_get_instance(self):
        conf1 = Configuration.get_instance({"foo": "defaultA", "bar": 10})
        conf2 = Configuration.get_instance()

        assert conf2 is conf1
        assert conf1.options.singleton is True

        conf1.set_config("foo", "newA")
        assert conf2.get_value("foo") == "newA"

    def test_get_instance_needs_defaults(self):
        with pytest.raises(InstanceNeedsDefaultConfigs) as exc_info:
            Configuration.get_instance()
        assert exc_info.value.message == ERROR_MESSAGES["INSTANCE_NEEDS_DEFAULTCONFIGS"]

    def test_non_singleton_does_not_register(self):
        Configuration({"foo": "defaultA"}, singleton=False)

        assert not Configuration.has_instance()
        with pytest.raises(InstanceNeedsDefaultConfigs):
            Configuration.get_instance()
        with pytest.raises(NoConfigurationInstance):
            Configuration.get_instance_configs()
        with pytest.raises(NoConfigurationInstance):
            Configuration.get_instance_value("foo")

    def test_class_level_accessors(self):
        Configuration({"foo": "defaultA", "bar": 10}, singleton=True)

        assert Configuration.get_instance_value("foo") == "defaultA"
        assert Configuration.get_instance_configs() == {
            "foo": ValueCell("defaultA", ConfigLevel.DEFAULT, False),
            "bar": ValueCell(10, ConfigLevel.DEFAULT, False),
        }

    def test_subscribe_on_singleton(self, recorder):
        Configuration({"foo": "defaultA", "bar": 10}, singleton=True)
        unsubscribe = Configuration.get_instance().subscribe(["foo"], recorder)

        Configuration.get_instance().set_config("foo", "newA")

        assert recorder.calls == [{"foo": ValueCell("newA", ConfigLevel.DYNAMIC, False)}]
        unsubscribe()

    def test_get_instance_with_options(self):
        conf = Configuration.get_instance({"foo": 1}, {"read_only_keys": ["foo"]})

        assert conf.set_config("foo", 2) is False


class TestOptionsAndSettings:
    """Test option validation and library settings."""

    def test_option_defaults(self):
        options = ConfigurationOptions()

        assert options.singleton is False
        assert options.read_only_keys == []
        assert options.backend_update_fn is None
        assert options.backend_update_interval_ms == DEFAULT_BACKEND_UPDATE_INTERVAL_MS
        assert options.backend_update_start_immediate is False

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            Configuration({"foo": 1}, {"singelton": True})

    def test_invalid_interval_rejected(self):
        with pytest.raises(ValidationError):
            ConfigurationOptions(backend_update_interval_ms=0)

    def test_interval_seconds(self):
        assert ConfigurationOptions(backend_update_interval_ms=250).backend_update_interval_seconds == 0.25

    def test_options_model_accepted(self):
        options = ConfigurationOptions(read_only_keys=["foo"])
        conf = Configuration({"foo": 1, "bar": 2}, options)

        assert conf.options is options
        assert conf.is_read_only("foo")

    @patch.dict('os.environ', {'LAYEREDCONF_DEFAULT_BACKEND_UPDATE_INTERVAL_MS': '1500'})
    def test_interval_default_from_environment(self):
        get_settings.cache_clear()
        try:
            assert build_options({}).backend_update_interval_ms == 1500
            assert build_options({"backend_update_interval_ms": 20}).backend_update_interval_ms == 20
        finally:
            get_settings.cache_clear()

    @patch.dict('os.environ', {'LAYEREDCONF_LOG_LEVEL': 'DEBUG', 'LAYEREDCONF_ENVIRONMENT': 'production'})
    def test_settings_from_environment(self):
        settings = LayeredConfSettings()

        assert settings.log_level == "DEBUG"
        assert settings.environment == "production"
        assert settings.log_json is False


class TestErrors:
    """Test the exception hierarchy."""

    def test_error_codes_and_messages(self):
        error = UnknownConfigKey(config_key="foo")

        assert isinstance(error, ConfigurationError)
        assert error.error_code == "UNKNOWN_CONFIG_KEY"
        assert str(error) == f"[UNKNOWN_CONFIG_KEY] {ERROR_MESSAGES['UNKNOWN_CONFIG_KEY']}"
        assert error.to_dict()["error_type"] == "UnknownConfigKey"

    def test_backend_update_failed_keeps_cause(self):
        cause = SyntaxError("Simulated backend failure")
        error = BackendUpdateFailed(cause=cause)

        assert error.cause is cause
        assert "SyntaxError" in error.details["cause"]

    def test_resolve_level(self):
        assert resolve_level(ConfigLevel.USER) is ConfigLevel.USER
        assert resolve_level("dynamic") is ConfigLevel.DYNAMIC
        assert resolve_level(0) is ConfigLevel.DEFAULT
        with pytest.raises(UnknownConfigLevel):
            resolve_level(True)
        with pytest.raises(UnknownConfigLevel):
            resolve_level(None)
