"""
Resolves a site's sitemap (including nested sitemap indexes and gzip-compressed
sitemaps) into a flat, deduplicated, ordered list of page URLs.

Entries are pulled out with a tolerant text scan rather than a schema-validating
XML parse, so slightly broken sitemaps still yield their URLs.
"""
from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlparse

import requests

from config import (
    DEFAULT_REQUEST_TIMEOUT,
    FALLBACK_SITEMAP_PATHS,
    SITEMAP_MAX_DEPTH,
    SITEMAP_MAX_URLS,
)
from crawler.fetcher import fetch_text
from crawler.robots import fetch_robots
from models import SitemapResult

logger = logging.getLogger(__name__)

_LOC_RE = re.compile(r"<loc\s*>\s*(.*?)\s*</loc\s*>", re.IGNORECASE | re.DOTALL)
_CDATA_RE = re.compile(r"^<!\[CDATA\[\s*(.*?)\s*\]\]>$", re.DOTALL)


@dataclass
class SitemapTraversal:
    """State owned by a single resolve call and threaded through the recursion."""
    origin: str
    session: requests.Session
    timeout: float
    max_urls: int = SITEMAP_MAX_URLS
    max_depth: int = SITEMAP_MAX_DEPTH
    seen_sitemaps: set[str] = field(default_factory=set)
    # dict keys keep insertion order: an ordered set of page URLs
    page_urls: dict[str, None] = field(default_factory=dict)

    @property
    def full(self) -> bool:
        return len(self.page_urls) >= self.max_urls

    def add_page(self, url: str) -> None:
        if self.full or url in self.page_urls:
            return
        if url.startswith(self.origin) or url.startswith("http"):
            self.page_urls[url] = None


def resolve_sitemap(
    origin: str,
    session: requests.Session,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    max_urls: int = SITEMAP_MAX_URLS,
    max_depth: int = SITEMAP_MAX_DEPTH,
) -> SitemapResult:
    """
    Collect every page URL reachable from {origin}/sitemap.xml.

    Never raises for network problems: unreachable documents are treated as
    empty, and a site with no usable sitemap resolves to its homepage alone.
    """
    traversal = SitemapTraversal(
        origin=origin,
        session=session,
        timeout=timeout,
        max_urls=max_urls,
        max_depth=max_depth,
    )

    _walk(f"{origin}/sitemap.xml", traversal, depth=0)

    if not traversal.page_urls:
        for candidate in _fallback_candidates(traversal):
            _walk(candidate, traversal, depth=0)
            if traversal.page_urls:
                logger.info("Found sitemap URLs via fallback %s", candidate)
                break

    homepage = f"{origin}/"
    urls = list(traversal.page_urls)
    if not urls:
        logger.warning("No sitemap URLs found for %s; auditing the homepage only", origin)
        urls = [homepage]

    urls = homepage_first(urls, homepage)
    logger.info(
        "Resolved %d URLs from %d sitemap document(s) for %s",
        len(urls), len(traversal.seen_sitemaps), origin,
    )
    return SitemapResult(origin=origin, urls=urls, total=len(urls))


def _walk(sitemap_url: str, traversal: SitemapTraversal, depth: int) -> None:
    if depth > traversal.max_depth:
        logger.warning("Sitemap nesting deeper than %d, skipping %s", traversal.max_depth, sitemap_url)
        return
    if sitemap_url in traversal.seen_sitemaps or traversal.full:
        return
    traversal.seen_sitemaps.add(sitemap_url)

    text = fetch_text(sitemap_url, traversal.session, traversal.timeout)
    if text is None:
        logger.warning("Could not fetch sitemap %s", sitemap_url)
        return

    nested: list[str] = []
    pages: list[str] = []
    for loc in extract_locs(text):
        if is_sitemap_url(loc):
            nested.append(urljoin(sitemap_url, loc))
        else:
            pages.append(loc)

    # Children first, then this level's own pages
    for child_url in nested:
        _walk(child_url, traversal, depth + 1)

    for page_url in pages:
        traversal.add_page(page_url)


def _fallback_candidates(traversal: SitemapTraversal) -> list[str]:
    """Sitemaps advertised in robots.txt, then the well-known alternative paths."""
    robots = fetch_robots(traversal.origin, traversal.session, traversal.timeout)
    candidates = list(robots.sitemap_urls)
    for path in FALLBACK_SITEMAP_PATHS:
        url = f"{traversal.origin}{path}"
        if url not in candidates:
            candidates.append(url)
    return candidates


# ── Helpers ───────────────────────────────────────────────────────────────────

def extract_locs(xml_text: str) -> list[str]:
    """Return every <loc> value in document order."""
    locs: list[str] = []
    for match in _LOC_RE.finditer(xml_text):
        value = match.group(1)
        cdata = _CDATA_RE.match(value)
        if cdata:
            value = cdata.group(1)
        value = html.unescape(value).strip()
        if value:
            locs.append(value)
    return locs


def is_sitemap_url(url: str) -> bool:
    """True when a <loc> points at another sitemap document rather than a page."""
    path = urlparse(url).path.lower()
    if "sitemap" not in path:
        return False
    return path.endswith((".xml", ".xml.gz")) or "/sitemap" in path


def homepage_first(urls: list[str], homepage: str) -> list[str]:
    if homepage not in urls:
        return urls
    return [homepage] + [u for u in urls if u != homepage]
