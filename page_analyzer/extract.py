"""Tree analyzers deriving the title, headings, links and login forms of a page.

Each analyzer walks the parsed tree in document order (pre-order, depth
first). ``Tag.descendants`` is iterative, so deeply nested markup cannot
exhaust the recursion limit.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterator
from urllib.parse import urlsplit

from bs4 import Tag

from .schemas import LinkCounts, empty_heading_counts

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"h([1-6])")
ABSOLUTE_PREFIXES = ("http://", "https://")
USERNAME_HINTS = ("user", "login", "email")


def iter_tags(root: Tag) -> Iterator[Tag]:
    yield root
    for node in root.descendants:
        if isinstance(node, Tag):
            yield node


def attribute(tag: Tag, name: str) -> str:
    """Return a string attribute value, or ``""`` for anything else."""

    value = tag.get(name)
    if isinstance(value, str):
        return value
    return ""


def extract_title(root: Tag) -> str:
    """Return the text of the first ``<title>`` that is not blank."""

    for tag in iter_tags(root):
        if tag.name != "title":
            continue
        text = tag.get_text().strip()
        if text:
            return text
    return ""


def count_headings(root: Tag) -> Dict[int, int]:
    counts = empty_heading_counts()
    for tag in iter_tags(root):
        match = HEADING_PATTERN.fullmatch(tag.name or "")
        if match:
            counts[int(match.group(1))] += 1
    return counts


def extract_host(url: str) -> str:
    """Return the host (with port, without userinfo) of ``url``.

    Unparsable URLs yield ``""``, which still takes part in comparisons.
    """

    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return ""
    return netloc.rpartition("@")[2]


def classify_href(href: str, page_host: str) -> str:
    """Return ``internal``, ``external`` or ``inaccessible`` for one href."""

    if not href or href.startswith("#"):
        return "inaccessible"
    if href.startswith(ABSOLUTE_PREFIXES):
        # The scheme is ignored: http and https on one host are both internal.
        return "internal" if extract_host(href) == page_host else "external"
    if href.startswith(("/", "./")) or "://" not in href:
        return "internal"
    return "external"


def classify_links(root: Tag, page_url: str) -> LinkCounts:
    page_host = extract_host(page_url)
    counts = {"internal": 0, "external": 0, "inaccessible": 0}
    for tag in iter_tags(root):
        if tag.name == "a":
            counts[classify_href(attribute(tag, "href"), page_host)] += 1
    logger.debug("Link counts for %s: %s", page_url, counts)
    return LinkCounts(**counts)


def is_login_form(form: Tag) -> bool:
    has_password = False
    has_username = False
    for tag in iter_tags(form):
        if tag.name != "input":
            continue
        input_type = attribute(tag, "type").lower()
        if input_type == "password":
            has_password = True
        elif input_type in ("text", "email"):
            has_username = True
        identifiers = (attribute(tag, "name").lower(), attribute(tag, "id").lower())
        if any(hint in value for value in identifiers for hint in USERNAME_HINTS):
            has_username = True
    return has_password and has_username


def has_login_form(root: Tag) -> bool:
    return any(is_login_form(tag) for tag in iter_tags(root) if tag.name == "form")
