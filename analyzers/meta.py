"""
Meta tag analyzers: title and description, plus the social sharing tags
(Open Graph, Twitter cards).
"""
from __future__ import annotations

from models import Category, Finding, PageData
from analyzers.base import BaseAnalyzer
from config import (
    DESCRIPTION_MAX_CHARS,
    DESCRIPTION_MIN_CHARS,
    TITLE_MAX_CHARS,
    TITLE_MIN_CHARS,
)


class MetaAnalyzer(BaseAnalyzer):
    category = Category.METADATA

    def analyze(self, page: PageData) -> list[Finding]:
        findings: list[Finding] = []

        # ── Title ─────────────────────────────────────────────────────────────
        title = (page.title or "").strip()
        if not title:
            findings.append(self.error(
                page, "Missing page title",
                "The page has no <title> tag.",
                f"Add a unique title of {TITLE_MIN_CHARS}–{TITLE_MAX_CHARS} characters.",
            ))
        elif len(title) < TITLE_MIN_CHARS:
            findings.append(self.warning(
                page, "Title too short",
                f"{len(title)} characters. Recommended: {TITLE_MIN_CHARS}–{TITLE_MAX_CHARS}.",
                "Extend the title with relevant keywords.",
                value=title[:50],
            ))
        elif len(title) > TITLE_MAX_CHARS:
            findings.append(self.warning(
                page, "Title too long",
                f"{len(title)} characters. Search engines often truncate after ~{TITLE_MAX_CHARS}.",
                "Shorten the title.",
            ))
        else:
            findings.append(self.passed(page, "Page title OK", f"{len(title)} characters.", value=title))

        # ── Meta description ──────────────────────────────────────────────────
        desc = (page.meta_description or "").strip()
        if not desc:
            findings.append(self.error(
                page, "Missing meta description",
                'No <meta name="description"> found.',
                f"Add a description of {DESCRIPTION_MIN_CHARS}–{DESCRIPTION_MAX_CHARS} characters.",
            ))
        elif len(desc) < DESCRIPTION_MIN_CHARS:
            findings.append(self.warning(
                page, "Meta description too short",
                f"{len(desc)} characters. Recommended: {DESCRIPTION_MIN_CHARS}–{DESCRIPTION_MAX_CHARS}.",
                "Write 1–2 sentences that describe the page.",
            ))
        elif len(desc) > DESCRIPTION_MAX_CHARS:
            findings.append(self.warning(
                page, "Meta description too long",
                f"{len(desc)} characters. Search engines often show only ~{DESCRIPTION_MAX_CHARS}.",
                f"Shorten to under {DESCRIPTION_MAX_CHARS} characters.",
            ))
        else:
            findings.append(self.passed(
                page, "Meta description OK", f"{len(desc)} characters.", value=desc[:80] + "...",
            ))

        return findings


class SocialAnalyzer(BaseAnalyzer):
    category = Category.SOCIAL

    _OG_TAGS = [
        ("og:title", "Shown when the page is shared."),
        ("og:description", "Shown when the page is shared."),
        ("og:image", "No preview image when the page is shared."),
    ]

    def analyze(self, page: PageData) -> list[Finding]:
        findings: list[Finding] = []

        for tag, why in self._OG_TAGS:
            content = page.og_tags.get(tag, "").strip()
            if not content:
                findings.append(self.warning(
                    page, f"Missing {tag}", why,
                    f'Add <meta property="{tag}">.',
                ))
            else:
                findings.append(self.passed(page, tag, "Set", value=content[:50]))

        if not page.twitter_tags.get("twitter:card", "").strip():
            findings.append(self.warning(
                page, "Missing twitter:card",
                "Shown when the page is shared on Twitter/X.",
                'Add <meta name="twitter:card" content="summary_large_image">.',
            ))
        else:
            findings.append(self.passed(page, "Twitter card", "Set"))

        return findings
