"""Decoding and tree building for fetched documents."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup, UnicodeDammit

from .errors import ParseError

logger = logging.getLogger(__name__)

PARSER = "html.parser"


@dataclass(frozen=True, slots=True)
class ParsedDocument:
    text: str
    soup: BeautifulSoup


def decode_markup(content: bytes, encoding: str | None = None) -> str:
    """Decode raw bytes, preferring the charset the server declared."""

    known = [encoding] if encoding else []
    dammit = UnicodeDammit(content, known, is_html=True)
    if dammit.unicode_markup is not None:
        return dammit.unicode_markup
    logger.debug("Encoding detection failed; decoding as UTF-8 with replacement")
    return content.decode("utf-8", errors="replace")


def parse_document(content: bytes, encoding: str | None = None) -> ParsedDocument:
    text = decode_markup(content, encoding)
    try:
        # Keep the first occurrence of a repeated attribute, as browsers do.
        soup = BeautifulSoup(text, PARSER, on_duplicate_attribute="ignore")
    except Exception as exc:
        raise ParseError(f"Failed to parse HTML: {exc}") from exc
    return ParsedDocument(text=text, soup=soup)
