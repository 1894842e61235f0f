"""
Security analyzer: HTTPS.
"""
from __future__ import annotations

from models import Category, Finding, PageData
from analyzers.base import BaseAnalyzer


class SecurityAnalyzer(BaseAnalyzer):
    category = Category.SECURITY

    def analyze(self, page: PageData) -> list[Finding]:
        # The URL as requested, not where redirects landed
        if not page.url.startswith("https://"):
            return [self.error(
                page, "Not HTTPS",
                "The page is not served over HTTPS.",
                "Enable SSL/HTTPS.",
            )]
        return [self.passed(page, "HTTPS", "Enabled.")]
