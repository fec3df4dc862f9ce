"""Versioned API explorer: groups versioned routes for documentation."""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .config import ApiExplorerOptions
from .readers import ApiVersionParameter
from .registry import APIEndpoint
from .version import ApiVersion, format_group_name

logger = logging.getLogger(__name__)

VERSION_SEGMENT = re.compile(r"<apiversion(?:\([^)]*\))?:(\w+)>")


@dataclass(frozen=True)
class ApiVersionDescription:
    api_version: ApiVersion
    group_name: str
    deprecated: bool = False


@dataclass
class ApiDescription:
    """One documented operation: a route and method in one version group."""

    group_name: str
    api_version: ApiVersion
    http_method: str
    relative_path: str
    endpoint: APIEndpoint
    parameters: List[ApiVersionParameter] = field(default_factory=list)

    @property
    def deprecated(self) -> bool:
        return self.endpoint.deprecated


class VersionedApiExplorer:
    """Describes the versioned routes of an app, one group per API version."""

    def __init__(self, versioning, options: ApiExplorerOptions):
        self.versioning = versioning
        self.options = options

    @property
    def registry(self):
        return self.versioning.registry

    def group_name(self, version: ApiVersion) -> str:
        return format_group_name(version, self.options.group_name_format)

    def api_version_descriptions(self) -> List[ApiVersionDescription]:
        deprecated = set(self.registry.deprecated_versions())
        return [
            ApiVersionDescription(version, self.group_name(version), version in deprecated)
            for version in self.registry.api_versions()
        ]

    def get_version_description(self, group_name: str) -> Optional[ApiVersionDescription]:
        for description in self.api_version_descriptions():
            if description.group_name == group_name:
                return description
        return None

    def api_descriptions(self, group_name: Optional[str] = None) -> List[ApiDescription]:
        descriptions = []
        for rule, route in self.registry.iter_routes():
            for version, endpoint in sorted(route.handlers.items()):
                version_group = self.group_name(version)
                if group_name is not None and version_group != group_name:
                    continue

                path, parameters = self._describe_path(rule.rule, version)
                descriptions.append(
                    ApiDescription(
                        group_name=version_group,
                        api_version=version,
                        http_method=route.method,
                        relative_path=path,
                        endpoint=endpoint,
                        parameters=parameters,
                    )
                )
        return descriptions

    def _describe_path(self, path: str, version: ApiVersion):
        parameters = [
            parameter
            for parameter in self.versioning.options.api_version_reader.describe()
            if parameter.location != "path"
        ]

        match = VERSION_SEGMENT.search(path)
        if match:
            if self.options.substitute_api_version_in_url:
                path = VERSION_SEGMENT.sub(version.format(self.options.substitution_format), path)
            else:
                parameters.append(ApiVersionParameter(match.group(1), "path"))

        return path, parameters
