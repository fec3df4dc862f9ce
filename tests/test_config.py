import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add the parent directory to Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import config as config_module
from config import (
    ApiDemoConfig,
    ApiExplorerConfig,
    ApiVersioningConfig,
    ENVIRONMENT_CONFIGS,
    get_config,
    load_config,
    validate_config,
)
from exceptions import ConfigurationError, MissingConfigError


class TestApiDemoConfig:
    """Test the settings model."""

    def test_defaults(self):
        config = ApiDemoConfig()

        assert config.env == "production"
        assert config.debug is False
        assert config.api_versioning == ApiVersioningConfig()
        assert config.api_versioning.api_version_readers == [
            "media_type:version",
            "header:x-api-version",
            "query:x-api-version",
        ]
        assert config.api_explorer == ApiExplorerConfig(group_name_format="v'VVV", substitute_api_version_in_url=True)
        assert config.swagger.route_prefix == "swagger"
        assert config.security.force_https is True

    def test_secret_key_generation(self):
        """Each instance without a configured key gets its own random key."""
        config1 = ApiDemoConfig()
        config2 = ApiDemoConfig()

        assert len(config1.security.secret_key) >= 32
        assert config1.security.secret_key != config2.security.secret_key

    def test_frozen(self):
        config = ApiDemoConfig()
        with pytest.raises(ValidationError):
            config.debug = True

    def test_is_development(self):
        assert ApiDemoConfig(env="development").is_development
        assert ApiDemoConfig(env="Development").is_development
        assert not ApiDemoConfig(env="staging").is_development

    def test_invalid_default_version(self):
        with pytest.raises(ValidationError, match="Invalid default API version"):
            ApiDemoConfig(api_versioning={"default_api_version": "latest"})

    def test_invalid_reader(self):
        with pytest.raises(ValidationError, match="Unknown API version reader"):
            ApiDemoConfig(api_versioning={"api_version_readers": ["cookie:version"]})

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            ApiDemoConfig(logging={"format": "xml"})


class TestEnvironmentVariables:
    def test_environment_selected(self, monkeypatch):
        monkeypatch.setenv("APIDEMO_ENV", "development")
        assert ApiDemoConfig().env == "development"

    def test_nested_setting(self, monkeypatch):
        monkeypatch.setenv("APIDEMO_SECURITY__FORCE_HTTPS", "false")
        monkeypatch.setenv("APIDEMO_API_VERSIONING__DEFAULT_API_VERSION", "2.0")
        config = ApiDemoConfig()
        assert config.security.force_https is False
        assert config.api_versioning.default_api_version == "2.0"

    def test_environment_overrides_preset(self, monkeypatch):
        monkeypatch.setenv("APIDEMO_LOGGING__LEVEL", "ERROR")
        config = load_config(environment="development")
        assert config.logging.level == "ERROR"
        assert config.logging.format == "text"


class TestLoadConfig:
    @pytest.mark.parametrize("environment", sorted(ENVIRONMENT_CONFIGS))
    def test_presets(self, environment):
        config = load_config(environment=environment)
        assert config.env == environment

    def test_development_preset(self):
        config = load_config(environment="development")
        assert config.debug is False
        assert config.is_development
        assert config.logging.format == "text"

    def test_environment_from_variable(self, monkeypatch):
        monkeypatch.setenv("APIDEMO_ENV", "staging")
        assert load_config().env == "staging"

    def test_unknown_environment(self):
        config = load_config(environment="qa")
        assert config.env == "qa"
        assert not config.is_development

    def test_file_overrides_preset(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "swagger": {"title": "Forecasts"},
            "logging": {"level": "ERROR"},
        }))

        config = load_config(str(config_file), environment="development")

        assert config.swagger.title == "Forecasts"
        assert config.logging.level == "ERROR"
        assert config.logging.format == "text"

    def test_missing_file(self, tmp_path):
        with pytest.raises(MissingConfigError) as exc_info:
            load_config(str(tmp_path / "missing.json"))
        assert exc_info.value.code == "MISSING_CONFIG"

    def test_malformed_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config(str(config_file))

    def test_invalid_values(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"api_versioning": {"default_api_version": "latest"}}))
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(config_file))
        assert exc_info.value.code == "CONFIGURATION_ERROR"

    def test_get_config_singleton(self, monkeypatch):
        monkeypatch.setattr(config_module, "_config", None)
        assert get_config() is get_config()


class TestValidateConfig:
    def test_valid(self):
        assert validate_config(load_config(environment="testing")) == []

    def test_debug_in_production(self):
        errors = validate_config(ApiDemoConfig(env="production", debug=True))
        assert "debug must be disabled in production" in errors

    def test_incomplete_tls(self):
        errors = validate_config(ApiDemoConfig(server={"ssl_certfile": "cert.pem"}))
        assert "ssl_certfile and ssl_keyfile must be set together" in errors
        assert "TLS file not found: cert.pem" in errors

    def test_debug_with_https_redirection(self):
        errors = validate_config(ApiDemoConfig(debug=True))
        assert "debug disables HTTPS redirection" in errors
        assert "debug disables HTTPS redirection" not in validate_config(load_config(environment="development"))
