"""
Cross-page aggregation.

Findings from every page are grouped by (category, severity, title). A group
keeps the fields of its first-seen finding and the ordered, de-duplicated
list of pages it fired on; message and value of later pages are not kept.
Site score and category counts are computed over groups, not pages.
"""
from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Callable, Optional

from config import THIN_CONTENT_WORD_COUNT
from models import (
    AggregatedFinding,
    Finding,
    PageReport,
    SiteReport,
    SiteTrustSummary,
)
from scoring.scorer import compute_score, count_by_category, percent
from scoring.suggestions import build_suggestions

logger = logging.getLogger(__name__)

GroupKey = tuple[str, str, str]


def aggregate(
    pages: list[PageReport],
    origin: str,
    total_urls_in_sitemap: int,
    clock: Callable[[], float] = time.time,
) -> SiteReport:
    aggregated = group_findings(pages)
    report = SiteReport(
        origin=origin,
        pages=list(pages),
        aggregated_findings=aggregated,
        overall_score=compute_score(aggregated),
        category_counts=count_by_category(aggregated),
        pages_audited=len(pages),
        total_urls_in_sitemap=total_urls_in_sitemap,
        improvement_suggestions=build_suggestions(aggregated),
        trust=summarize_trust(pages),
        generated_at=clock(),
    )
    logger.info(
        "Aggregated %d pages into %d finding groups (score %d)",
        report.pages_audited, len(aggregated), report.overall_score,
    )
    return report


def merge_reports(
    origin: str,
    reports: list[SiteReport],
    total_urls_in_sitemap: int,
    clock: Callable[[], float] = time.time,
) -> SiteReport:
    """Re-aggregate several partial SiteReports (e.g. one per batch) into one."""
    pages: list[PageReport] = []
    seen: set[str] = set()
    for report in reports:
        for page in report.pages:
            if page.url in seen:
                continue
            seen.add(page.url)
            pages.append(page)
    return aggregate(pages, origin, total_urls_in_sitemap, clock=clock)


def group_findings(pages: list[PageReport]) -> list[AggregatedFinding]:
    groups: dict[GroupKey, AggregatedFinding] = {}

    for page in pages:
        for finding in page.findings:
            key = (finding.category, finding.severity, finding.title)
            group = groups.get(key)
            if group is None:
                groups[key] = _start_group(finding, page.url)
            elif page.url not in group.affected_pages:
                group.affected_pages.append(page.url)

    for group in groups.values():
        group.page_url = _page_marker(group.affected_pages)
    return list(groups.values())


def _start_group(finding: Finding, page_url: str) -> AggregatedFinding:
    # Copy: the page's own Finding is never mutated
    return AggregatedFinding(
        id=finding.id,
        category=finding.category,
        severity=finding.severity,
        title=finding.title,
        message=finding.message,
        value=finding.value,
        recommendation=finding.recommendation,
        page_url=page_url,
        affected_pages=[page_url],
    )


def _page_marker(affected_pages: list[str]) -> Optional[str]:
    if not affected_pages:
        return None
    if len(affected_pages) == 1:
        return affected_pages[0]
    return f"{len(affected_pages)} pages"


# ── Trust summary ─────────────────────────────────────────────────────────────

def summarize_trust(pages: list[PageReport]) -> Optional[SiteTrustSummary]:
    signals = [p.trust for p in pages if p.trust is not None]
    if not signals:
        return None

    authors = [s.author.strip() for s in signals if s.author and s.author.strip()]
    summary = SiteTrustSummary(
        author=_most_common(authors),
        has_author=bool(authors),
        has_author_bio=any(s.author_bio for s in signals),
        has_expertise=any(s.expertise for s in signals),
        has_trustworthiness=any(s.trustworthiness for s in signals),
        has_about_page=any(s.about_page for s in signals),
        has_contact_info=any(s.contact_info for s in signals),
        pages_with_author=sum(1 for s in signals if s.author and s.author.strip()),
        pages_with_structured_data=sum(1 for s in signals if s.has_structured_data),
        pages_with_substantial_content=sum(
            1 for s in signals if s.word_count >= THIN_CONTENT_WORD_COUNT
        ),
        pages_on_https=sum(1 for s in signals if s.is_https),
        pages_with_social_cards=sum(1 for s in signals if s.has_social_cards),
        total_external_links=sum(s.external_link_count for s in signals),
    )

    flags = [
        summary.has_author,
        summary.has_author_bio,
        summary.has_expertise,
        summary.has_trustworthiness,
        summary.has_about_page,
        summary.has_contact_info,
    ]
    summary.score = percent(sum(flags), len(flags))
    return summary


def _most_common(values: list[str]) -> Optional[str]:
    if not values:
        return None
    # Counter preserves insertion order, so ties go to the first encountered
    counts = Counter(values)
    best = max(counts.values())
    return next(v for v in counts if counts[v] == best)
