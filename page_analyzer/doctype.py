"""HTML version sniffing from DOCTYPE declarations."""
from __future__ import annotations

from .schemas import HTML5, HTML_40, HTML_401, UNKNOWN_VERSION, XHTML

# Order matters: "html 4.0" is a prefix of "html 4.01".
DOCTYPE_SIGNATURES = (
    ("<!doctype html>", HTML5),
    ("-//w3c//dtd html 4.01", HTML_401),
    ("-//w3c//dtd html 4.0", HTML_40),
    ("-//w3c//dtd xhtml", XHTML),
)


def detect_html_version(text: str) -> str:
    lowered = text.lower()
    for signature, version in DOCTYPE_SIGNATURES:
        if signature in lowered:
            return version
    return UNKNOWN_VERSION
