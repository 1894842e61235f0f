"""
Fetches robots.txt for the audit origin. Only used informationally: its
Sitemap: directives seed sitemap discovery and its presence is reported as a
crawl-directive finding. Disallow rules are never enforced.
"""
from __future__ import annotations

import logging
from urllib.parse import urlparse

import requests

from crawler.fetcher import fetch_text
from models import RobotsData

logger = logging.getLogger(__name__)


def fetch_robots(domain_url: str, session: requests.Session, timeout: float) -> RobotsData:
    """Fetch /robots.txt and return a populated RobotsData object."""
    robots_url = build_robots_url(domain_url)
    text = fetch_text(robots_url, session, timeout)
    if text is None:
        logger.debug("No robots.txt at %s", robots_url)
        return RobotsData(url=robots_url, exists=False)

    data = RobotsData(url=robots_url, exists=True, raw_text=text)
    data.sitemap_urls = _parse_sitemap_directives(text)
    return data


def build_robots_url(domain_url: str) -> str:
    parsed = urlparse(domain_url)
    return f"{parsed.scheme}://{parsed.netloc}/robots.txt"


def _parse_sitemap_directives(raw_text: str) -> list[str]:
    """Collect absolute Sitemap: URLs in file order, without duplicates."""
    urls: list[str] = []
    for raw_line in raw_text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if ":" not in line:
            continue
        directive, _, value = line.partition(":")
        value = value.strip()
        if directive.strip().lower() == "sitemap" and value.startswith("http") and value not in urls:
            urls.append(value)
    return urls
