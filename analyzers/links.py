"""
Link analyzer: canonical URL, invalid hrefs, internal and external links.
"""
from __future__ import annotations

from models import Category, Finding, PageData
from analyzers.base import BaseAnalyzer


class LinkAnalyzer(BaseAnalyzer):
    category = Category.LINKS

    def analyze(self, page: PageData) -> list[Finding]:
        findings: list[Finding] = []

        # ── Canonical ─────────────────────────────────────────────────────────
        if not page.canonical_url:
            findings.append(self.warning(
                page, "Missing canonical URL",
                "Can cause duplicate content.",
                'Add <link rel="canonical"> pointing at the page\'s final URL.',
            ))
        else:
            findings.append(self.passed(page, "Canonical OK", page.canonical_url))

        # ── Invalid hrefs ─────────────────────────────────────────────────────
        if page.invalid_hrefs:
            findings.append(self.error(
                page, "Links with empty or invalid href",
                f"{len(page.invalid_hrefs)} links with an empty, # or javascript: href.",
                "Use real URLs, or <button> elements for actions.",
                value=", ".join(page.invalid_hrefs[:5]),
            ))

        internal = page.internal_links
        external = page.external_links

        if not internal and not external and not page.invalid_hrefs:
            findings.append(self.warning(
                page, "No links found",
                "The page has no links.",
                "Add internal links to related pages for better navigation.",
            ))
            return findings

        # ── Internal ──────────────────────────────────────────────────────────
        if not internal:
            findings.append(self.warning(
                page, "No internal links",
                "The page has no internal links.",
                "Add internal links to related pages.",
            ))
        else:
            findings.append(self.passed(page, "Internal links", f"{len(internal)} internal links found."))

        # ── External ──────────────────────────────────────────────────────────
        if not external:
            findings.append(self.warning(
                page, "No external links",
                "No outbound links to authoritative sources.",
                "Consider linking to relevant external sources.",
            ))
            return findings

        without_rel = [
            link.url for link in external
            if "nofollow" not in link.rel.lower() and "noopener" not in link.rel.lower()
        ]
        if without_rel:
            findings.append(self.warning(
                page, "External links missing rel attributes",
                f'{len(without_rel)} external links lack rel="noopener" or rel="nofollow".',
                'Add rel="noopener" or rel="nofollow" to external links.',
                value=", ".join(without_rel[:3]),
            ))
        else:
            findings.append(self.passed(page, "External links", f"{len(external)} external links found."))

        return findings
