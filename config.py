"""Centralized configuration management for ApiVersioningDemo."""

import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from api_versioning import ApiVersion, reader_from_config
from exceptions import ConfigurationError, MissingConfigError

logger = logging.getLogger(__name__)

DEVELOPMENT = "development"


@dataclass(frozen=True)
class ApiVersioningConfig:
    """Version negotiation settings."""
    default_api_version: str = "1.0"
    assume_default_version_when_unspecified: bool = True
    report_api_versions: bool = True
    # Consulted in order: media type parameter, header, query string
    api_version_readers: List[str] = field(
        default_factory=lambda: ["media_type:version", "header:x-api-version", "query:x-api-version"]
    )


@dataclass(frozen=True)
class ApiExplorerConfig:
    """Version group naming for generated documentation."""
    group_name_format: Optional[str] = "v'VVV"
    substitute_api_version_in_url: bool = True


@dataclass(frozen=True)
class SwaggerConfig:
    """OpenAPI document and Swagger UI settings (development only)."""
    title: str = "ApiVersioningDemo"
    description: str = ""
    route_prefix: str = "swagger"


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""
    secret_key: Optional[str] = None
    force_https: bool = True
    force_https_permanent: bool = False  # 301 instead of 302
    strict_transport_security: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"  # json or text
    file: Optional[str] = None
    max_file_size: int = 10485760  # 10MB
    backup_count: int = 5


@dataclass(frozen=True)
class ServerConfig:
    """Listener configuration for the built-in server."""
    host: str = "localhost"
    port: int = 5000
    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None


class ApiDemoConfig(BaseSettings):
    """Main configuration class with validation.

    Built once at startup and frozen afterwards. Environment variables take
    precedence over presets and configuration files, e.g.
    ``APIDEMO_ENV=development`` or ``APIDEMO_SECURITY__FORCE_HTTPS=false``.
    """

    model_config = SettingsConfigDict(
        env_prefix="APIDEMO_",
        env_nested_delimiter="__",
        case_sensitive=False,
        frozen=True,
    )

    # Environment
    env: str = "production"
    debug: bool = False

    api_versioning: ApiVersioningConfig = Field(default_factory=ApiVersioningConfig, validate_default=True)
    api_explorer: ApiExplorerConfig = Field(default_factory=ApiExplorerConfig)
    swagger: SwaggerConfig = Field(default_factory=SwaggerConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig, validate_default=True)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings):
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @property
    def is_development(self) -> bool:
        return self.env.lower() == DEVELOPMENT

    @field_validator('api_versioning')
    @classmethod
    def validate_api_versioning(cls, v):
        if ApiVersion.try_parse(v.default_api_version) is None:
            raise ValueError(f"Invalid default API version: {v.default_api_version!r}")
        reader_from_config(v.api_version_readers)
        return v

    @field_validator('logging')
    @classmethod
    def validate_logging(cls, v):
        if v.format not in ("json", "text"):
            raise ValueError(f"Unknown log format: {v.format!r} (expected json or text)")
        if not isinstance(logging.getLevelName(v.level.upper()), int):
            raise ValueError(f"Unknown log level: {v.level!r}")
        return v

    @field_validator('security')
    @classmethod
    def validate_security(cls, v):
        if not v.secret_key:
            v = dataclasses.replace(v, secret_key=os.urandom(32).hex())
            logger.warning("Generated random SECRET_KEY. Set APIDEMO_SECURITY__SECRET_KEY for production.")
        return v


def get_development_config() -> Dict[str, Any]:
    """Get development environment configuration."""
    return {
        "env": "development",
        "debug": False,  # debug apps skip HTTPS redirection
        "logging": {
            "level": "DEBUG",
            "format": "text",  # Human-readable logs
        },
    }


def get_testing_config() -> Dict[str, Any]:
    """Get testing environment configuration."""
    return {
        "env": "testing",
        "debug": False,
        "security": {
            "secret_key": "test-secret-key-do-not-use-in-production",
        },
        "logging": {
            "level": "WARNING",  # Less verbose for tests
            "format": "json",
        },
    }


def get_staging_config() -> Dict[str, Any]:
    """Get staging environment configuration."""
    return {
        "env": "staging",
        "debug": False,
        "logging": {
            "level": "INFO",
            "format": "json",
        },
        "server": {
            "host": "0.0.0.0",
        },
    }


def get_production_config() -> Dict[str, Any]:
    """Get production environment configuration."""
    return {
        "env": "production",
        "debug": False,
        "logging": {
            "level": "WARNING",
            "format": "json",
        },
        "server": {
            "host": "0.0.0.0",
        },
    }


ENVIRONMENT_CONFIGS = {
    "development": get_development_config,
    "testing": get_testing_config,
    "staging": get_staging_config,
    "production": get_production_config,
}


# Global configuration instance
_config: Optional[ApiDemoConfig] = None


def get_config() -> ApiDemoConfig:
    """Get the global configuration instance."""
    global _config

    if _config is None:
        _config = load_config()

    return _config


def load_config(config_file: Optional[str] = None, environment: Optional[str] = None) -> ApiDemoConfig:
    """Load configuration from presets, a JSON file and environment variables.

    Args:
        config_file: Optional JSON file whose sections override the preset
        environment: Environment name; defaults to ``APIDEMO_ENV`` or production

    Raises:
        ConfigurationError: if the resulting configuration is invalid
    """
    environment = environment or os.environ.get("APIDEMO_ENV", "production")

    preset = ENVIRONMENT_CONFIGS.get(environment.lower())
    config_data = preset() if preset else {"env": environment}

    if config_file:
        path = Path(config_file)
        if not path.exists():
            raise MissingConfigError(config_file)
        try:
            with open(path, 'r') as f:
                file_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(config_file, f"invalid JSON: {e}") from e
        config_data = _merge(config_data, file_data)

    try:
        return ApiDemoConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError("config", str(e)) from e


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: ApiDemoConfig) -> List[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if config.env == "production" and config.debug:
        errors.append("debug must be disabled in production")

    if config.debug and config.security.force_https:
        errors.append("debug disables HTTPS redirection")

    if config.env == "production" and not os.environ.get("APIDEMO_SECURITY__SECRET_KEY") \
            and config.security.secret_key and len(config.security.secret_key) < 32:
        errors.append("SECRET_KEY is too short for production")

    if bool(config.server.ssl_certfile) != bool(config.server.ssl_keyfile):
        errors.append("ssl_certfile and ssl_keyfile must be set together")

    for path in (config.server.ssl_certfile, config.server.ssl_keyfile):
        if path and not Path(path).exists():
            errors.append(f"TLS file not found: {path}")

    return errors
