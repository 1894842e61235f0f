"""
Core data models for the site audit pipeline.
All modules import from here; nothing else is cross-imported at this level.

Report models round-trip through plain dicts (`to_dict` / `from_dict`) so the
persistent cache tier and the CLI can store them as JSON.
"""

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

import config


# ── Severity ──────────────────────────────────────────────────────────────────
class Severity:
    ERROR   = "error"
    WARNING = "warning"
    PASS    = "pass"

    ALL = [ERROR, WARNING, PASS]

    # Lower rank = higher priority
    RANK = {
        ERROR:   0,
        WARNING: 1,
        PASS:    2,
    }


# ── Categories ────────────────────────────────────────────────────────────────
class Category:
    METADATA        = "Metadata"
    HEADINGS        = "Headings"
    IMAGES          = "Images"
    LINKS           = "Links"
    STRUCTURED_DATA = "Structured data"
    SOCIAL          = "Social"
    SECURITY        = "Security"
    CONTENT         = "Content"
    CRAWL           = "Crawl directives"
    TECHNICAL       = "Technical"
    TRUST           = "Trust"

    ALL = [
        METADATA, HEADINGS, IMAGES, LINKS, STRUCTURED_DATA, SOCIAL,
        SECURITY, CONTENT, CRAWL, TECHNICAL, TRUST,
    ]


def finding_id(category: str, title: str) -> str:
    """Stable identity derived from (category, normalized title)."""
    slug = re.sub(r"[^a-z0-9]+", "-", f"{category} {title}".lower())
    return slug.strip("-")


# ── Parsed page (input to the rule analyzers) ─────────────────────────────────
@dataclass
class LinkData:
    url: str
    anchor_text: str = ""
    rel: str = ""
    nofollow: bool = False


@dataclass
class ImageData:
    src: str
    alt: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None


@dataclass
class PageData:
    url: str

    # HTTP response
    status_code: int = 0
    final_url: str = ""
    content_type: str = ""
    response_headers: dict[str, str] = field(default_factory=dict)
    html: str = ""

    # Head
    title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_robots: Optional[str] = None
    meta_viewport: Optional[str] = None
    lang: Optional[str] = None
    charset: Optional[str] = None
    favicon: Optional[str] = None
    canonical_url: Optional[str] = None
    og_tags: dict[str, str] = field(default_factory=dict)
    twitter_tags: dict[str, str] = field(default_factory=dict)
    json_ld_blocks: int = 0

    # Content
    h1_tags: list[str] = field(default_factory=list)
    h2_tags: list[str] = field(default_factory=list)
    h3_count: int = 0
    word_count: int = 0
    text_content: str = ""

    # Links & resources
    internal_links: list[LinkData] = field(default_factory=list)
    external_links: list[LinkData] = field(default_factory=list)
    invalid_hrefs: list[str] = field(default_factory=list)
    images: list[ImageData] = field(default_factory=list)

    # Authorship / trust markers
    author: Optional[str] = None
    has_author_markup: bool = False
    has_entity_markup: bool = False       # Person / Organization itemtypes
    has_contact_markup: bool = False      # .contact, [class*=contact], ContactPoint
    has_contact_point: bool = False       # schema.org ContactPoint itemtype
    about_links: int = 0
    contact_links: int = 0                # mailto: / tel:


@dataclass
class RobotsData:
    url: str
    exists: bool
    raw_text: str = ""
    sitemap_urls: list[str] = field(default_factory=list)


# ── Findings ──────────────────────────────────────────────────────────────────
@dataclass
class Finding:
    id: str
    category: str
    severity: str          # Severity.ERROR / WARNING / PASS
    title: str
    message: str
    value: Optional[str] = None           # evidence snippet
    recommendation: Optional[str] = None
    page_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        return cls(
            id=data["id"],
            category=data["category"],
            severity=data["severity"],
            title=data["title"],
            message=data["message"],
            value=data.get("value"),
            recommendation=data.get("recommendation"),
            page_url=data.get("page_url"),
        )


@dataclass
class AggregatedFinding(Finding):
    """A finding merged across every page that shares its grouping key."""
    affected_pages: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AggregatedFinding":
        base = Finding.from_dict(data)
        return cls(**asdict(base), affected_pages=list(data.get("affected_pages", [])))


@dataclass
class CategoryCounts:
    passed: int = 0
    warned: int = 0
    failed: int = 0

    def add(self, severity: str) -> None:
        if severity == Severity.PASS:
            self.passed += 1
        elif severity == Severity.ERROR:
            self.failed += 1
        else:
            self.warned += 1


def _counts_from_dict(data: dict[str, Any]) -> dict[str, CategoryCounts]:
    return {cat: CategoryCounts(**counts) for cat, counts in data.items()}


# ── Trust signals ─────────────────────────────────────────────────────────────
@dataclass
class TrustSignals:
    author: Optional[str] = None
    author_bio: bool = False
    expertise: bool = False
    trustworthiness: bool = False
    about_page: bool = False
    contact_info: bool = False

    # Coverage inputs
    has_structured_data: bool = False
    word_count: int = 0
    is_https: bool = False
    has_social_cards: bool = False
    external_link_count: int = 0


@dataclass
class SiteTrustSummary:
    author: Optional[str] = None
    has_author: bool = False
    has_author_bio: bool = False
    has_expertise: bool = False
    has_trustworthiness: bool = False
    has_about_page: bool = False
    has_contact_info: bool = False
    score: int = 0

    pages_with_author: int = 0
    pages_with_structured_data: int = 0
    pages_with_substantial_content: int = 0
    pages_on_https: int = 0
    pages_with_social_cards: int = 0
    total_external_links: int = 0


# ── Reports ───────────────────────────────────────────────────────────────────
@dataclass
class PageReport:
    url: str
    findings: list[Finding] = field(default_factory=list)
    score: int = 0
    category_counts: dict[str, CategoryCounts] = field(default_factory=dict)
    trust: Optional[TrustSignals] = None
    images_without_alt: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageReport":
        trust = data.get("trust")
        return cls(
            url=data["url"],
            findings=[Finding.from_dict(f) for f in data.get("findings", [])],
            score=int(data.get("score", 0)),
            category_counts=_counts_from_dict(data.get("category_counts", {})),
            trust=TrustSignals(**trust) if trust else None,
            images_without_alt=list(data.get("images_without_alt", [])),
        )


@dataclass
class ImprovementSuggestion:
    id: str
    title: str
    severity: str
    category: str
    recommendation: str
    fix_example: Optional[str] = None
    affected_count: int = 1


@dataclass
class SiteReport:
    origin: str
    pages: list[PageReport] = field(default_factory=list)
    aggregated_findings: list[AggregatedFinding] = field(default_factory=list)
    overall_score: int = 0
    category_counts: dict[str, CategoryCounts] = field(default_factory=dict)
    pages_audited: int = 0
    total_urls_in_sitemap: int = 0
    improvement_suggestions: list[ImprovementSuggestion] = field(default_factory=list)
    trust: Optional[SiteTrustSummary] = None
    generated_at: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteReport":
        trust = data.get("trust")
        return cls(
            origin=data["origin"],
            pages=[PageReport.from_dict(p) for p in data.get("pages", [])],
            aggregated_findings=[
                AggregatedFinding.from_dict(f) for f in data.get("aggregated_findings", [])
            ],
            overall_score=int(data.get("overall_score", 0)),
            category_counts=_counts_from_dict(data.get("category_counts", {})),
            pages_audited=int(data.get("pages_audited", 0)),
            total_urls_in_sitemap=int(data.get("total_urls_in_sitemap", 0)),
            improvement_suggestions=[
                ImprovementSuggestion(**s) for s in data.get("improvement_suggestions", [])
            ],
            trust=SiteTrustSummary(**trust) if trust else None,
            generated_at=float(data.get("generated_at", 0.0)),
        )


@dataclass
class SitemapResult:
    origin: str
    urls: list[str] = field(default_factory=list)
    total: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SitemapResult":
        urls = data["urls"]
        if not isinstance(urls, list):
            raise TypeError("urls must be a list")
        return cls(origin=data["origin"], urls=list(urls), total=int(data["total"]))


# ── Tagged outcome returned at the pipeline boundary ──────────────────────────
class OutcomeKind:
    PAGE = "page"
    SITE = "site"


@dataclass
class AuditOutcome:
    kind: str
    page: Optional[PageReport] = None
    site: Optional[SiteReport] = None

    @classmethod
    def for_page(cls, report: PageReport) -> "AuditOutcome":
        return cls(kind=OutcomeKind.PAGE, page=report)

    @classmethod
    def for_site(cls, report: SiteReport) -> "AuditOutcome":
        return cls(kind=OutcomeKind.SITE, site=report)

    def to_dict(self) -> dict[str, Any]:
        body = self.page if self.kind == OutcomeKind.PAGE else self.site
        return {"kind": self.kind, "report": body.to_dict() if body else None}


# ── Cache record ──────────────────────────────────────────────────────────────
@dataclass
class CacheEntry:
    payload: Any
    cached_at: float


# ── Audit configuration ───────────────────────────────────────────────────────
@dataclass
class AuditConfig:
    batch_size: int = config.BATCH_SIZE
    concurrent_batches: int = config.CONCURRENT_BATCHES
    max_workers: int = config.DEFAULT_MAX_WORKERS
    max_pages: int = config.DEFAULT_MAX_PAGES
    request_timeout: float = config.DEFAULT_REQUEST_TIMEOUT
    user_agent: str = config.DEFAULT_USER_AGENT
    sitemap_max_urls: int = config.SITEMAP_MAX_URLS
    cache_dir: str = config.CACHE_DIR
    sitemap_cache_ttl: float = config.SITEMAP_CACHE_TTL_SECONDS
    report_cache_ttl: float = config.REPORT_CACHE_TTL_SECONDS
    memory_cache_max_entries: int = config.MEMORY_CACHE_MAX_ENTRIES
