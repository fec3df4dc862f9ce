"""Registry of versioned routes and the view that dispatches between versions."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from flask import Flask, current_app, g
from werkzeug.routing import Rule

from .version import ApiVersion

logger = logging.getLogger(__name__)


@dataclass
class APIEndpoint:
    """A handler serving one API version of a route and method."""

    rule: str
    method: str
    version: ApiVersion
    handler: Callable
    deprecated: bool = False
    tag: Optional[str] = None

    @property
    def description(self) -> str:
        return (self.handler.__doc__ or "").strip()


class VersionedRoute:
    """All handlers of one (rule, method), keyed by API version.

    Instances are registered with Flask as the view function of the rule, so
    routing stays with Werkzeug and only the version choice happens here.
    """

    def __init__(self, rule: str, method: str, tag: Optional[str] = None):
        self.rule = rule
        self.method = method
        self.tag = tag
        self.handlers: Dict[ApiVersion, APIEndpoint] = {}
        self.__name__ = f"versioned_{method.lower()}"

    def add(self, endpoint: APIEndpoint) -> None:
        existing = self.handlers.get(endpoint.version)
        if existing is not None and existing.handler is not endpoint.handler:
            raise ValueError(
                f"API version {endpoint.version} of {self.method} {self.rule} is already handled by "
                f"{existing.handler.__name__}"
            )
        self.handlers[endpoint.version] = endpoint
        logger.debug(f"Registered {self.method} {self.rule} for API version {endpoint.version}")

    @property
    def supported_versions(self) -> List[ApiVersion]:
        return sorted(v for v, e in self.handlers.items() if not e.deprecated)

    @property
    def deprecated_versions(self) -> List[ApiVersion]:
        return sorted(v for v, e in self.handlers.items() if e.deprecated)

    @property
    def api_versions(self) -> List[ApiVersion]:
        return sorted(self.handlers)

    def __call__(self, **view_args: Any):
        versioning = current_app.extensions.get("api_versioning")
        if versioning is None:
            raise RuntimeError("APIVersioningMiddleware is not installed on this application")

        version = versioning.select_api_version(self)
        g.api_version = version
        endpoint = self.handlers[version]
        return current_app.ensure_sync(endpoint.handler)(**view_args)

    def __repr__(self):
        versions = ", ".join(str(v) for v in self.api_versions)
        return f"<VersionedRoute {self.method} {self.rule} [{versions}]>"


class APIRegistry:
    """Index of the versioned routes mounted on one Flask app."""

    def __init__(self, app: Flask):
        self.app = app

    def iter_routes(self) -> Iterator[Tuple[Rule, VersionedRoute]]:
        for rule in self.app.url_map.iter_rules():
            view = self.app.view_functions.get(rule.endpoint)
            if isinstance(view, VersionedRoute):
                yield rule, view

    def get_route(self, endpoint: Optional[str]) -> Optional[VersionedRoute]:
        if endpoint is None:
            return None
        view = self.app.view_functions.get(endpoint)
        return view if isinstance(view, VersionedRoute) else None

    def get_endpoints_by_version(self, version: ApiVersion) -> List[APIEndpoint]:
        return [route.handlers[version] for _, route in self.iter_routes() if version in route.handlers]

    def api_versions(self) -> List[ApiVersion]:
        versions = set()
        for _, route in self.iter_routes():
            versions.update(route.handlers)
        return sorted(versions)

    def deprecated_versions(self) -> List[ApiVersion]:
        """Versions that every declaring route marks as deprecated."""
        return [v for v in self.api_versions() if all(e.deprecated for e in self.get_endpoints_by_version(v))]

    def generate_endpoint_report(self) -> Dict[str, Any]:
        report = {"total_endpoints": 0, "by_version": {}, "deprecated_count": 0}

        for version in self.api_versions():
            endpoints = self.get_endpoints_by_version(version)
            deprecated = sum(1 for e in endpoints if e.deprecated)
            by_method: Dict[str, int] = {}
            for endpoint in endpoints:
                by_method[endpoint.method] = by_method.get(endpoint.method, 0) + 1

            report["by_version"][str(version)] = {
                "count": len(endpoints),
                "deprecated": deprecated,
                "by_method": by_method,
            }
            report["total_endpoints"] += len(endpoints)
            report["deprecated_count"] += deprecated

        return report


def get_api_registry() -> APIRegistry:
    """Get the route registry of the current Flask app."""
    return current_app.extensions["api_versioning"].registry
