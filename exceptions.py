"""
Application exception classes for ApiVersioningDemo.

API version errors raised while serving requests live in
``api_versioning.errors``; this module covers errors of the application
itself, which only occur while it starts up.
"""

from typing import Any, Dict, Optional


class ApiDemoError(Exception):
    """
    Base exception class for all application errors.

    Provides common functionality for error codes, user messages,
    and additional context information.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logs."""
        return {
            'error': self.user_message,
            'code': self.code,
            'details': self.details
        }


class ConfigurationError(ApiDemoError):
    """Raised when a configuration value cannot be applied."""

    def __init__(self, setting: str, reason: str):
        super().__init__(
            message=f"Invalid configuration for '{setting}': {reason}",
            code="CONFIGURATION_ERROR",
            details={'setting': setting, 'reason': reason},
        )


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration file does not exist."""

    def __init__(self, path: str):
        super().__init__(setting=path, reason="configuration file not found")
        self.code = "MISSING_CONFIG"
