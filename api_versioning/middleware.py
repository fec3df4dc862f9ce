"""API versioning middleware: version selection, reporting headers and errors."""

import logging
from typing import Optional

from flask import Flask, Response, g, jsonify, request
from werkzeug.routing import BaseConverter

from .config import ApiExplorerOptions, ApiVersioningOptions
from .errors import (
    AmbiguousApiVersionError,
    APIVersionError,
    ApiVersionUnspecifiedError,
    InvalidApiVersionError,
    UnsupportedApiVersionError,
)
from .explorer import VersionedApiExplorer
from .registry import APIRegistry, VersionedRoute
from .schemas import ApiVersionErrorSchema
from .version import ApiVersion

logger = logging.getLogger(__name__)

_error_schema = ApiVersionErrorSchema()


class ApiVersionConverter(BaseConverter):
    """URL converter for version segments, e.g. ``/api/v<apiversion:version>/items``."""

    regex = r"\d+(?:\.\d+)?(?:-[A-Za-z0-9]+)?"

    def to_url(self, value) -> str:
        if isinstance(value, ApiVersion):
            return value.format("VVV")
        return super().to_url(value)


class APIVersioningMiddleware:
    """Selects the handler version for versioned routes and reports versions."""

    def __init__(self, app: Flask = None, options: Optional[ApiVersioningOptions] = None):
        self.app = app
        self.options = options or ApiVersioningOptions()
        self.registry: Optional[APIRegistry] = None
        self.explorer = None

        if app:
            self.init_app(app)

    def init_app(self, app: Flask):
        """Initialize the middleware with a Flask app.

        Must run before versioned rules are added, since rules resolve the
        ``apiversion`` converter when they are bound to the URL map.
        """
        self.app = app
        self.registry = APIRegistry(app)

        app.url_map.converters["apiversion"] = ApiVersionConverter
        app.before_request(self.read_requested_version)
        app.after_request(self.add_version_headers)
        app.register_error_handler(APIVersionError, self.handle_version_error)
        app.extensions["api_versioning"] = self

        logger.info(
            f"API versioning initialized (default={self.options.default_api_version}, "
            f"assume_default={self.options.assume_default_version_when_unspecified}, "
            f"report={self.options.report_api_versions}, reader={self.options.api_version_reader!r})"
        )

    def add_versioned_api_explorer(self, options: Optional[ApiExplorerOptions] = None):
        """Enable the versioned API explorer used for OpenAPI documents."""
        self.explorer = VersionedApiExplorer(self, options or ApiExplorerOptions())
        return self.explorer

    def read_requested_version(self):
        """Store the raw requested version values for the current request."""
        g.requested_api_versions = self.options.api_version_reader.read(request)

    def select_api_version(self, route: VersionedRoute) -> ApiVersion:
        """Pick the version of ``route`` that serves the current request.

        Raises:
            APIVersionError: if no version can be selected.
        """
        options = self.options
        assume_default = options.assume_default_version_when_unspecified
        default = options.default_api_version

        requested = _distinct(getattr(g, "requested_api_versions", None))
        # "2" and "2.0" name the same version; unparsable values stay distinct
        parsed = _distinct([ApiVersion.try_parse(value) for value in requested])
        if len(parsed) > 1 or (None in parsed and len(requested) > 1):
            raise AmbiguousApiVersionError(requested)

        if not requested:
            if not assume_default:
                raise ApiVersionUnspecifiedError()
            version = default
        else:
            version = parsed[0]
            if version is None:
                if not assume_default:
                    raise InvalidApiVersionError(requested[0])
                logger.debug(f"Malformed API version '{requested[0]}', assuming {default}")
                version = default

        if version in route.handlers:
            return version

        if assume_default and default in route.handlers:
            logger.debug(f"API version {version} not served by {route.rule}, assuming {default}")
            return default

        raise UnsupportedApiVersionError(requested[0] if requested else str(version), request.path)

    def add_version_headers(self, response: Response) -> Response:
        """Report supported and deprecated versions on the response."""
        if not self.options.report_api_versions:
            return response

        supported, deprecated = self._reported_versions()
        response.headers[self.options.supported_versions_header] = ", ".join(str(v) for v in supported)
        if deprecated:
            response.headers[self.options.deprecated_versions_header] = ", ".join(str(v) for v in deprecated)

        return response

    def handle_version_error(self, error: APIVersionError):
        """Render a version error as JSON."""
        logger.info(f"Rejected {request.method} {request.path}: {error.code} ({error.message})")
        supported, _ = self._reported_versions()
        body = _error_schema.dump(error.to_dict([str(v) for v in supported]))
        return jsonify(body), error.status_code

    def _reported_versions(self):
        route = self.registry.get_route(request.endpoint)
        if route is not None:
            return route.supported_versions, route.deprecated_versions

        deprecated = self.registry.deprecated_versions()
        supported = set(self.registry.api_versions()) - set(deprecated)
        if self.options.default_api_version not in deprecated:
            supported.add(self.options.default_api_version)
        return sorted(supported), deprecated


def _distinct(values: Optional[list]) -> list:
    seen = []
    for value in values or []:
        if value not in seen:
            seen.append(value)
    return seen


def add_versioning_middleware(app: Flask, options: Optional[ApiVersioningOptions] = None) -> APIVersioningMiddleware:
    """Convenience function to add versioning middleware to a Flask app."""
    return APIVersioningMiddleware(app, options)
