"""Decorators for declaring versioned routes."""

import logging
import re
from typing import Callable, Iterable, Optional, Union

from flask import Blueprint, Flask

from .registry import APIEndpoint, VersionedRoute
from .version import ApiVersion

logger = logging.getLogger(__name__)


def api_version(*versions: Union[str, ApiVersion], deprecated: bool = False):
    """Declare the API versions a handler serves.

    Args:
        *versions: Versions such as ``"1.0"`` or ``ApiVersion(2, 0)``
        deprecated: Whether these versions are deprecated for the handler

    Stacking the decorator adds versions, so one handler may serve a
    deprecated and a current version at once.
    """
    if not versions:
        raise ValueError("api_version requires at least one version")

    parsed = [v if isinstance(v, ApiVersion) else ApiVersion.parse(v) for v in versions]

    def decorator(f):
        declared = list(getattr(f, "_api_versions", []))
        declared.extend((version, deprecated) for version in parsed)
        f._api_versions = declared
        return f

    return decorator


def versioned_route(scaffold: Union[Flask, Blueprint], rule: str, methods: Optional[Iterable[str]] = None, **options):
    """Register a handler declared with :func:`api_version` on a rule.

    Every handler registered for the same rule and method shares a single
    Flask view, a :class:`VersionedRoute`, which picks the handler matching
    the requested version.
    """

    def decorator(f: Callable):
        declared = getattr(f, "_api_versions", None)
        if not declared:
            raise ValueError(f"{f.__name__} must be decorated with @api_version before @versioned_route")

        tag = scaffold.name if isinstance(scaffold, Blueprint) else None
        for method in methods or ["GET"]:
            route = _get_or_create_route(scaffold, rule, method.upper(), tag, options)
            for version, deprecated in declared:
                route.add(
                    APIEndpoint(
                        rule=rule,
                        method=route.method,
                        version=version,
                        handler=f,
                        deprecated=deprecated,
                        tag=tag,
                    )
                )
        return f

    return decorator


def _get_or_create_route(scaffold, rule: str, method: str, tag: Optional[str], options: dict) -> VersionedRoute:
    routes = getattr(scaffold, "_api_versioned_routes", None)
    if routes is None:
        routes = {}
        scaffold._api_versioned_routes = routes

    route = routes.get((rule, method))
    if route is None:
        route = VersionedRoute(rule, method, tag=tag)
        scaffold.add_url_rule(rule, endpoint=_endpoint_name(rule, method), view_func=route, methods=[method], **options)
        routes[(rule, method)] = route
    return route


def _endpoint_name(rule: str, method: str) -> str:
    slug = re.sub(r"\W+", "_", rule).strip("_") or "root"
    return f"versioned_{method.lower()}_{slug}"
