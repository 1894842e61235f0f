"""
Page checker: fetches one URL, runs every rule analyzer over it and returns a
PageReport. A page that cannot be fetched or answers non-2xx yields None so the
batch can skip it.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests

from config import DEFAULT_REQUEST_TIMEOUT
from crawler.fetcher import fetch_page
from crawler.parser import parse_page
from crawler.robots import fetch_robots
from models import Finding, PageData, PageReport
from scoring.scorer import compute_score, count_by_category

from analyzers.base import BaseAnalyzer
from analyzers.content import ContentAnalyzer, HeadingAnalyzer
from analyzers.images import ImageAnalyzer, images_without_alt
from analyzers.links import LinkAnalyzer
from analyzers.meta import MetaAnalyzer, SocialAnalyzer
from analyzers.robots_analyzer import RobotsAnalyzer
from analyzers.security import SecurityAnalyzer
from analyzers.technical import IndexabilityAnalyzer, StructuredDataAnalyzer, TechnicalAnalyzer
from analyzers.trust import TrustAnalyzer, extract_trust_signals

logger = logging.getLogger(__name__)


# Per-page analyzers, in report order
_PER_PAGE_ANALYZERS: list[BaseAnalyzer] = [
    MetaAnalyzer(),
    TechnicalAnalyzer(),
    HeadingAnalyzer(),
    SocialAnalyzer(),
    ImageAnalyzer(),
    LinkAnalyzer(),
    ContentAnalyzer(),
    StructuredDataAnalyzer(),
    IndexabilityAnalyzer(),
    SecurityAnalyzer(),
    TrustAnalyzer(),
]


class PageChecker:
    """Default page checker used by the batch orchestrator."""

    def __init__(
        self,
        session: requests.Session,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        analyzers: Optional[list[BaseAnalyzer]] = None,
    ):
        self.session = session
        self.timeout = timeout
        self.analyzers = analyzers if analyzers is not None else _PER_PAGE_ANALYZERS

    def check(self, url: str, context_page_url: Optional[str] = None) -> Optional[PageReport]:
        """
        Audit a single page.

        robots.txt is only checked when `context_page_url` is None or equals
        `url`, so a site-wide run reports it once instead of once per page.
        """
        if not url.startswith("http"):
            url = f"https://{url}"

        page = fetch_page(url, self.session, self.timeout)
        if page is None:
            return None
        parse_page(page)

        findings = run_analyzers(page, self.analyzers)

        if context_page_url is None or context_page_url == url:
            robots = fetch_robots(url, self.session, self.timeout)
            findings.extend(RobotsAnalyzer(robots).analyze(page))

        return PageReport(
            url=url,
            findings=findings,
            score=compute_score(findings),
            category_counts=count_by_category(findings),
            trust=extract_trust_signals(page),
            images_without_alt=images_without_alt(page),
        )


def run_analyzers(page: PageData, analyzers: list[BaseAnalyzer]) -> list[Finding]:
    findings: list[Finding] = []
    for analyzer in analyzers:
        try:
            findings.extend(analyzer.analyze(page))
        except Exception:
            # Never let one analyzer crash the whole page
            logger.exception("%s failed on %s", type(analyzer).__name__, page.url)
    return findings
