"""Strategies for reading the requested API version from a request."""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from flask import Request
from werkzeug.http import parse_list_header, parse_options_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiVersionParameter:
    """Where a reader expects the version, for OpenAPI parameter descriptions."""

    name: str
    location: str  # 'query', 'header' or 'path'


class ApiVersionReader:
    """Base class for version readers.

    ``read`` returns every raw value found, in request order; deciding what
    to do with zero or several values is left to the caller.
    """

    def read(self, request: Request) -> List[str]:
        raise NotImplementedError

    def describe(self) -> List[ApiVersionParameter]:
        return []

    @staticmethod
    def combine(*readers: "ApiVersionReader") -> "CombinedApiVersionReader":
        return CombinedApiVersionReader(readers)


class QueryStringApiVersionReader(ApiVersionReader):
    def __init__(self, *parameter_names: str):
        self.parameter_names = parameter_names or ("api-version",)

    def read(self, request: Request) -> List[str]:
        values = []
        for name in self.parameter_names:
            values.extend(value.strip() for value in request.args.getlist(name) if value.strip())
        return values

    def describe(self) -> List[ApiVersionParameter]:
        return [ApiVersionParameter(name, "query") for name in self.parameter_names]

    def __repr__(self):
        return f"QueryStringApiVersionReader({', '.join(self.parameter_names)})"


class HeaderApiVersionReader(ApiVersionReader):
    def __init__(self, *header_names: str):
        self.header_names = header_names or ("api-version",)

    def read(self, request: Request) -> List[str]:
        values = []
        for name in self.header_names:
            for raw in request.headers.getlist(name):
                values.extend(value.strip() for value in raw.split(",") if value.strip())
        return values

    def describe(self) -> List[ApiVersionParameter]:
        return [ApiVersionParameter(name, "header") for name in self.header_names]

    def __repr__(self):
        return f"HeaderApiVersionReader({', '.join(self.header_names)})"


class MediaTypeApiVersionReader(ApiVersionReader):
    """Reads a media type parameter, e.g. ``Accept: application/json; version=2.0``."""

    def __init__(self, parameter_name: str = "v"):
        self.parameter_name = parameter_name

    def read(self, request: Request) -> List[str]:
        values = []

        accept = request.headers.get("Accept")
        if accept:
            for media_range in parse_list_header(accept):
                values.extend(self._parameter_value(media_range))

        content_type = request.headers.get("Content-Type")
        if content_type:
            values.extend(self._parameter_value(content_type))

        return values

    def _parameter_value(self, media_type: str) -> List[str]:
        _, options = parse_options_header(media_type)
        for key, value in options.items():
            if key.lower() == self.parameter_name.lower() and value.strip():
                return [value.strip()]
        return []

    def __repr__(self):
        return f"MediaTypeApiVersionReader({self.parameter_name})"


class UrlSegmentApiVersionReader(ApiVersionReader):
    """Reads the route argument captured by the ``apiversion`` URL converter."""

    def __init__(self, route_parameter: str = "version"):
        self.route_parameter = route_parameter

    def read(self, request: Request) -> List[str]:
        value = (request.view_args or {}).get(self.route_parameter)
        if value is None:
            return []
        return [str(value)]

    def describe(self) -> List[ApiVersionParameter]:
        return [ApiVersionParameter(self.route_parameter, "path")]

    def __repr__(self):
        return f"UrlSegmentApiVersionReader({self.route_parameter})"


class CombinedApiVersionReader(ApiVersionReader):
    """Consults readers in order; the first one that finds a value wins."""

    def __init__(self, readers: Iterable[ApiVersionReader]):
        self.readers: Sequence[ApiVersionReader] = tuple(readers)
        if not self.readers:
            raise ValueError("At least one API version reader is required")

    def read(self, request: Request) -> List[str]:
        for reader in self.readers:
            values = reader.read(request)
            if values:
                return values
        return []

    def describe(self) -> List[ApiVersionParameter]:
        parameters = []
        for reader in self.readers:
            for parameter in reader.describe():
                if parameter not in parameters:
                    parameters.append(parameter)
        return parameters

    def __repr__(self):
        return f"CombinedApiVersionReader({', '.join(repr(r) for r in self.readers)})"


READER_TYPES = {
    "media_type": MediaTypeApiVersionReader,
    "header": HeaderApiVersionReader,
    "query": QueryStringApiVersionReader,
    "url_segment": UrlSegmentApiVersionReader,
}


def reader_from_config(entries: Sequence[str]) -> ApiVersionReader:
    """Build a reader from ``kind:name`` entries such as ``header:x-api-version``.

    A single entry yields that reader; several are combined in order.
    """
    readers = []
    for entry in entries:
        kind, _, name = entry.partition(":")
        kind = kind.strip().lower()
        reader_type = READER_TYPES.get(kind)
        if reader_type is None:
            raise ValueError(f"Unknown API version reader '{kind}' (expected one of {', '.join(READER_TYPES)})")
        name = name.strip()
        readers.append(reader_type(name) if name else reader_type())

    if not readers:
        raise ValueError("At least one API version reader is required")

    reader = readers[0] if len(readers) == 1 else ApiVersionReader.combine(*readers)
    logger.debug(f"Configured API version reader: {reader!r}")
    return reader
