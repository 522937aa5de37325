"""Shared data structures used across modules."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple

HTML5 = "HTML5"
HTML_401 = "HTML 4.01"
HTML_40 = "HTML 4.0"
XHTML = "XHTML"
UNKNOWN_VERSION = "Unknown"

HTML_VERSIONS = (HTML5, HTML_401, HTML_40, XHTML, UNKNOWN_VERSION)

HEADING_LEVELS = range(1, 7)


def empty_heading_counts() -> Dict[int, int]:
    return {level: 0 for level in HEADING_LEVELS}


class LinkCounts(NamedTuple):
    internal: int
    external: int
    inaccessible: int


@dataclass(slots=True)
class FetchedPage:
    url: str
    status_code: int
    content: bytes
    encoding: str | None = None
    truncated: bool = False


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """Summary of a single page's markup.

    A report with a non-empty ``error`` only carries ``url`` and
    ``status_code``; every analytic field keeps its default.
    """

    url: str
    title: str = ""
    html_version: str = UNKNOWN_VERSION
    headings: Mapping[int, int] = field(default_factory=empty_heading_counts)
    internal_links: int = 0
    external_links: int = 0
    inaccessible_links: int = 0
    has_login_form: bool = False
    status_code: int = 0
    error: str = ""
    error_kind: str = ""

    def __post_init__(self) -> None:
        # Copy, then freeze: the caller's dict must not alias the report.
        object.__setattr__(self, "headings", MappingProxyType(dict(self.headings)))

    @classmethod
    def failure(cls, url: str, status_code: int, error: str, kind: str) -> "AnalysisReport":
        return cls(url=url, status_code=status_code, error=error, error_kind=kind)

    @property
    def ok(self) -> bool:
        return not self.error

    @property
    def total_links(self) -> int:
        return self.internal_links + self.external_links + self.inaccessible_links

    def as_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["headings"] = dict(self.headings)
        return data
