"""API version descriptor and group-name formatting."""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Optional

from .errors import InvalidApiVersionError

VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:-([A-Za-z0-9]+))?$")

# Longest specifiers first so "VVV" is not read as "V" three times
_FORMAT_SPECIFIERS = ("VVVV", "VVV", "VV", "V", "S", "F")


@total_ordering
@dataclass(frozen=True)
class ApiVersion:
    """A (major, minor) API version with an optional status label."""

    major: int
    minor: int = 0
    status: Optional[str] = None

    def __post_init__(self):
        if self.major < 0 or self.minor < 0:
            raise ValueError(f"API version numbers must be non-negative: {self.major}.{self.minor}")
        if self.status:
            object.__setattr__(self, "status", self.status.lower())

    @classmethod
    def parse(cls, text: str) -> "ApiVersion":
        """Parse ``major[.minor][-status]``.

        Raises:
            InvalidApiVersionError: if the text is not a valid version.
        """
        match = VERSION_PATTERN.match((text or "").strip())
        if not match:
            raise InvalidApiVersionError(text)
        major, minor, status = match.groups()
        return cls(int(major), int(minor or 0), status)

    @classmethod
    def try_parse(cls, text: str) -> Optional["ApiVersion"]:
        try:
            return cls.parse(text)
        except InvalidApiVersionError:
            return None

    def _sort_key(self):
        # A release sorts after any pre-release with the same numbers
        return (self.major, self.minor, self.status is None, self.status or "")

    def __lt__(self, other):
        if not isinstance(other, ApiVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.format("VVVV")

    def format(self, fmt: str) -> str:
        """Format the version with a group-name format string.

        Specifiers: ``V`` major, ``VV`` major.minor, ``VVV`` major with
        optional minor and status, ``VVVV`` major.minor with optional status,
        ``S`` status, ``F`` full text. Quoted text is literal and an
        unmatched quote is dropped; any other character is copied as-is.
        """
        parts = []
        i = 0
        while i < len(fmt):
            char = fmt[i]
            if char == "'":
                end = fmt.find("'", i + 1)
                if end == -1:
                    i += 1
                    continue
                parts.append(fmt[i + 1 : end])
                i = end + 1
                continue

            for specifier in _FORMAT_SPECIFIERS:
                if fmt.startswith(specifier, i):
                    parts.append(self._format_specifier(specifier))
                    i += len(specifier)
                    break
            else:
                parts.append(char)
                i += 1

        return "".join(parts)

    def _format_specifier(self, specifier: str) -> str:
        status = f"-{self.status}" if self.status else ""
        if specifier == "V":
            return str(self.major)
        if specifier == "VV":
            return f"{self.major}.{self.minor}"
        if specifier == "VVV":
            minor = f".{self.minor}" if self.minor else ""
            return f"{self.major}{minor}{status}"
        if specifier == "VVVV":
            return f"{self.major}.{self.minor}{status}"
        if specifier == "S":
            return self.status or ""
        return self.format("VVVV")


DEFAULT_API_VERSION = ApiVersion(1, 0)


def format_group_name(version: ApiVersion, group_name_format: Optional[str]) -> str:
    """Derive the version-group name; without a format the text form is used."""
    if not group_name_format:
        return str(version)
    return version.format(group_name_format)
