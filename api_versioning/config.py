"""API versioning and API explorer options."""

from dataclasses import dataclass, field
from typing import Optional

from flask import current_app

from .readers import ApiVersionReader, QueryStringApiVersionReader, UrlSegmentApiVersionReader
from .version import DEFAULT_API_VERSION, ApiVersion


def _default_reader() -> ApiVersionReader:
    return ApiVersionReader.combine(QueryStringApiVersionReader(), UrlSegmentApiVersionReader())


@dataclass(frozen=True)
class ApiVersioningOptions:
    """Version negotiation policy, fixed for the lifetime of the app."""

    default_api_version: ApiVersion = DEFAULT_API_VERSION
    assume_default_version_when_unspecified: bool = False
    report_api_versions: bool = False
    api_version_reader: ApiVersionReader = field(default_factory=_default_reader)
    supported_versions_header: str = "api-supported-versions"
    deprecated_versions_header: str = "api-deprecated-versions"


@dataclass(frozen=True)
class ApiExplorerOptions:
    """How version groups are named and documented."""

    group_name_format: Optional[str] = None
    substitute_api_version_in_url: bool = False
    substitution_format: str = "VVV"


def get_api_config() -> ApiVersioningOptions:
    """Get the versioning options of the current Flask app."""
    return current_app.extensions["api_versioning"].options
