"""
Trust (E-E-A-T) analyzer: authorship, expertise and contact signals.

The same signals are exported per page as TrustSignals so the aggregator can
summarise them site-wide.
"""
from __future__ import annotations

import re

from models import Category, Finding, PageData, TrustSignals
from analyzers.base import BaseAnalyzer

_BIO_RE = re.compile(r"\b(biography|about me|about the author|author)\b", re.IGNORECASE)
_EXPERTISE_RE = re.compile(r"\b(expert|expertise|experience|qualification|qualified|certified)\b", re.IGNORECASE)
_TRUST_RE = re.compile(r"\b(contact|address|phone|telephone|vat|company reg)\b", re.IGNORECASE)

_SOCIAL_CARD_TAGS = ("og:title", "og:description", "og:image")


def extract_trust_signals(page: PageData) -> TrustSignals:
    text = page.text_content
    contact_info = page.contact_links > 0 or page.has_contact_point
    trustworthiness = bool(_TRUST_RE.search(text)) or page.has_contact_markup or contact_info

    return TrustSignals(
        author=page.author,
        author_bio=bool(_BIO_RE.search(text)) or page.has_author_markup,
        expertise=bool(_EXPERTISE_RE.search(text)) or page.has_entity_markup,
        trustworthiness=trustworthiness,
        about_page=page.about_links > 0,
        contact_info=contact_info,
        has_structured_data=page.json_ld_blocks > 0,
        word_count=page.word_count,
        is_https=page.url.startswith("https://"),
        has_social_cards=all(page.og_tags.get(tag, "").strip() for tag in _SOCIAL_CARD_TAGS),
        external_link_count=len(page.external_links),
    )


class TrustAnalyzer(BaseAnalyzer):
    category = Category.TRUST

    def analyze(self, page: PageData) -> list[Finding]:
        signals = extract_trust_signals(page)
        findings: list[Finding] = []

        if not signals.author:
            findings.append(self.warning(
                page, "No author specified",
                "No author meta tag or rel=author.",
                "Add author information.",
            ))
        else:
            findings.append(self.passed(page, "Author specified", signals.author[:50]))

        if not signals.author_bio:
            findings.append(self.warning(
                page, "No author biography",
                "No information about the author.",
                "Add an author biography or an 'About me' section.",
            ))
        else:
            findings.append(self.passed(page, "Author biography", "Found"))

        if not signals.expertise:
            findings.append(self.warning(
                page, "Few expertise signals",
                "No signs of expertise.",
                "Describe expertise, qualifications or experience.",
            ))
        else:
            findings.append(self.passed(page, "Expertise signals", "Found"))

        if not signals.trustworthiness:
            findings.append(self.warning(
                page, "Limited trustworthiness",
                "No contact information.",
                "Add contact information, an address or a company registration number.",
            ))
        else:
            findings.append(self.passed(page, "Trustworthiness", "Contact info found"))

        return findings
