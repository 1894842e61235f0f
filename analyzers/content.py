"""
Content analyzers: heading structure and amount of visible text.
"""
from __future__ import annotations

from models import Category, Finding, PageData
from analyzers.base import BaseAnalyzer
from config import LOW_WORD_COUNT, THIN_CONTENT_WORD_COUNT


class HeadingAnalyzer(BaseAnalyzer):
    category = Category.HEADINGS

    def analyze(self, page: PageData) -> list[Finding]:
        findings: list[Finding] = []

        # ── H1 ────────────────────────────────────────────────────────────────
        h1_count = len(page.h1_tags)
        if h1_count == 0:
            findings.append(self.error(
                page, "Missing H1",
                "The page has no H1.",
                "Use a single H1 that describes the page's content.",
            ))
        elif h1_count > 1:
            findings.append(self.warning(
                page, "Multiple H1 headings",
                f"The page has {h1_count} H1 headings. Recommended: 1.",
                "Keep a single H1 as the main heading.",
                value=" | ".join(page.h1_tags[:3]),
            ))
        else:
            findings.append(self.passed(page, "H1 OK", "One H1.", value=page.h1_tags[0][:60]))

        # ── H2 / H3 ───────────────────────────────────────────────────────────
        h2_count = len(page.h2_tags)
        if h2_count == 0:
            findings.append(self.warning(
                page, "No H2 headings",
                "H2 headings give the content structure and help SEO.",
                "Use H2 for subheadings.",
            ))
        else:
            detail = f"{h2_count} H2"
            if page.h3_count:
                detail += f", {page.h3_count} H3"
            findings.append(self.passed(page, "H2 structure", detail + "."))

        return findings


class ContentAnalyzer(BaseAnalyzer):
    category = Category.CONTENT

    def analyze(self, page: PageData) -> list[Finding]:
        words = page.word_count
        if words < LOW_WORD_COUNT:
            return [self.warning(
                page, "Little text",
                f"About {words} words. Recommended: {THIN_CONTENT_WORD_COUNT}+ for content pages.",
                "Add more unique content.",
            )]
        if words < THIN_CONTENT_WORD_COUNT:
            return [self.passed(page, "Text amount", f"About {words} words.")]
        return [self.passed(page, "Good amount of text", f"About {words} words.")]
