"""Fetch a page and assemble its analysis report."""
from __future__ import annotations

import logging
import time

from .doctype import detect_html_version
from .errors import AnalysisError
from .extract import classify_links, count_headings, extract_title, has_login_form
from .parse import parse_document
from .schemas import AnalysisReport
from .scrape import fetch_page, normalise_url

logger = logging.getLogger(__name__)


def analyze_url(url: str) -> AnalysisReport:
    """Analyse the page at ``url``.

    Fetch, read and parse failures never propagate: they are returned as a
    report whose ``error`` describes the failure and whose analytic fields
    keep their defaults.
    """

    url = normalise_url(url)
    start = time.perf_counter()
    logger.info("Analysing %s", url)

    try:
        page = fetch_page(url)
        document = parse_document(page.content, page.encoding)
    except AnalysisError as exc:
        logger.warning("Analysis of %s failed (%s): %s", url, exc.kind, exc)
        return AnalysisReport.failure(url, exc.status_code, str(exc), exc.kind)

    links = classify_links(document.soup, url)
    report = AnalysisReport(
        url=url,
        title=extract_title(document.soup),
        html_version=detect_html_version(document.text),
        headings=count_headings(document.soup),
        internal_links=links.internal,
        external_links=links.external,
        inaccessible_links=links.inaccessible,
        has_login_form=has_login_form(document.soup),
        status_code=page.status_code,
    )
    logger.info(
        "Analysed %s in %.2fs: %s, %d links, login form=%s",
        url,
        time.perf_counter() - start,
        report.html_version,
        report.total_links,
        report.has_login_form,
    )
    return report
