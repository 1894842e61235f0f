"""
Technical analyzers: viewport, language, charset, favicon, URL shape,
structured data (JSON-LD) and meta robots indexability.
"""
from __future__ import annotations

from urllib.parse import urlparse

from models import Category, Finding, PageData
from analyzers.base import BaseAnalyzer
from config import MAX_URL_PATH_CHARS


class TechnicalAnalyzer(BaseAnalyzer):
    category = Category.TECHNICAL

    def analyze(self, page: PageData) -> list[Finding]:
        findings: list[Finding] = []

        if not page.meta_viewport:
            findings.append(self.error(
                page, "Missing viewport",
                "The page may render incorrectly on mobile.",
                'Add <meta name="viewport" content="width=device-width, initial-scale=1">.',
            ))
        else:
            findings.append(self.passed(page, "Viewport", "Set.", value=page.meta_viewport))

        if not page.lang:
            findings.append(self.warning(
                page, "Missing language (lang)",
                "No lang attribute on <html>.",
                'Add e.g. lang="en".',
            ))
        else:
            findings.append(self.passed(page, "Language declared", f'lang="{page.lang}"'))

        if not page.charset:
            findings.append(self.warning(
                page, "Charset",
                "Recommended: UTF-8.",
                'Add <meta charset="utf-8">.',
            ))
        else:
            findings.append(self.passed(page, "Charset", page.charset))

        if not page.favicon:
            findings.append(self.warning(
                page, "Missing favicon",
                "No favicon link.",
                'Add <link rel="icon">.',
            ))
        else:
            findings.append(self.passed(page, "Favicon", "Found"))

        findings.extend(self._check_url(page))
        return findings

    def _check_url(self, page: PageData) -> list[Finding]:
        findings: list[Finding] = []
        path = urlparse(page.url).path

        if len(path) > MAX_URL_PATH_CHARS:
            findings.append(self.warning(
                page, "Long URL", f"{len(path)} characters.",
                "Shorten the URL for readability.",
                value=path,
            ))
        if path != path.lower():
            findings.append(self.warning(
                page, "Uppercase letters in URL", "Recommended: lowercase only.",
                "Use lowercase URLs.",
                value=path,
            ))
        findings.append(self.passed(page, "URL", path or "/"))
        return findings


class StructuredDataAnalyzer(BaseAnalyzer):
    category = Category.STRUCTURED_DATA

    def analyze(self, page: PageData) -> list[Finding]:
        if page.json_ld_blocks == 0:
            return [self.warning(
                page, "No JSON-LD",
                "Structured data can improve how the page appears in search.",
                "Consider an Organization or Product schema.",
            )]
        return [self.passed(page, "JSON-LD found", f"{page.json_ld_blocks} block(s).")]


class IndexabilityAnalyzer(BaseAnalyzer):
    category = Category.CRAWL

    def analyze(self, page: PageData) -> list[Finding]:
        robots = page.meta_robots or ""
        if "noindex" in robots.lower():
            return [self.warning(
                page, "Noindex",
                "The page must not be indexed.",
                "Remove noindex if the page should rank.",
                value=robots,
            )]
        return [self.passed(page, "Indexing allowed", "The page can be indexed.")]
