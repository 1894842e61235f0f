"""
robots.txt analyzer. Runs once per site (on the context page only) and is
purely informational: the crawl never enforces robots rules.
"""
from __future__ import annotations

from models import Category, Finding, PageData, RobotsData
from analyzers.base import BaseAnalyzer


class RobotsAnalyzer(BaseAnalyzer):
    category = Category.CRAWL

    def __init__(self, robots: RobotsData):
        self.robots = robots

    def analyze(self, page: PageData) -> list[Finding]:
        robots = self.robots
        if not robots.exists:
            return [self.warning(
                page, "robots.txt unavailable",
                "robots.txt could not be fetched.",
                "Make sure /robots.txt exists and is reachable.",
            )]
        if not robots.sitemap_urls:
            return [self.warning(
                page, "No sitemap in robots.txt",
                "No Sitemap: line in robots.txt.",
                "Add a Sitemap: URL to robots.txt.",
            )]
        return [self.passed(
            page, "robots.txt & sitemap", "Sitemap declared.", value=robots.sitemap_urls[0],
        )]
