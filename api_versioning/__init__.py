"""API versioning for Flask applications.

This package provides:
- An API version descriptor with group-name formatting
- Version readers for media types, headers, query strings and URL segments
- Versioned routes dispatching to one handler per API version
- Middleware reporting supported versions and rendering version errors
- A versioned API explorer feeding per-version OpenAPI documents
"""

from .config import ApiExplorerOptions, ApiVersioningOptions, get_api_config
from .decorators import api_version, versioned_route
from .errors import (
    AmbiguousApiVersionError,
    APIVersionError,
    ApiVersionUnspecifiedError,
    InvalidApiVersionError,
    UnsupportedApiVersionError,
)
from .explorer import ApiDescription, ApiVersionDescription, VersionedApiExplorer
from .middleware import APIVersioningMiddleware, add_versioning_middleware
from .readers import (
    ApiVersionReader,
    HeaderApiVersionReader,
    MediaTypeApiVersionReader,
    QueryStringApiVersionReader,
    UrlSegmentApiVersionReader,
    reader_from_config,
)
from .registry import APIRegistry, get_api_registry
from .version import DEFAULT_API_VERSION, ApiVersion, format_group_name

__all__ = [
    "ApiVersion",
    "DEFAULT_API_VERSION",
    "format_group_name",
    "ApiVersioningOptions",
    "ApiExplorerOptions",
    "get_api_config",
    "ApiVersionReader",
    "HeaderApiVersionReader",
    "MediaTypeApiVersionReader",
    "QueryStringApiVersionReader",
    "UrlSegmentApiVersionReader",
    "reader_from_config",
    "APIVersioningMiddleware",
    "add_versioning_middleware",
    "APIRegistry",
    "get_api_registry",
    "api_version",
    "versioned_route",
    "VersionedApiExplorer",
    "ApiVersionDescription",
    "ApiDescription",
    "APIVersionError",
    "ApiVersionUnspecifiedError",
    "InvalidApiVersionError",
    "AmbiguousApiVersionError",
    "UnsupportedApiVersionError",
]

__version__ = "1.0.0"
