"""
Site audit pipeline: the service object callers talk to.

SiteAuditor owns the HTTP session, the page checker and both result caches.
Build one per process and reuse it; the caches live on the instance.

    auditor = SiteAuditor()
    report = auditor.audit_site("example.com")
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional
from urllib.parse import urlparse

import requests

from analyzers.orchestrator import PageChecker
from cache.result_cache import ResultCache
from crawler import sitemap
from crawler.crawler import Checker, audit_all
from crawler.fetcher import make_session
from models import AuditConfig, AuditOutcome, SiteReport, SitemapResult
from scoring.aggregator import aggregate, merge_reports

logger = logging.getLogger(__name__)


class InvalidTargetError(ValueError):
    """Raised for an empty or unusable domain, URL or URL list."""


class PageUnavailableError(LookupError):
    """Raised when a single-page audit target cannot be fetched or is non-2xx."""


def normalize_origin(domain_or_url: str) -> str:
    """
    "example.com", " https://example.com/some/page " -> "https://example.com"

    Bare domains are assumed to be served over HTTPS.
    """
    value = (domain_or_url or "").strip()
    if not value:
        raise InvalidTargetError("A domain or URL is required")
    if not value.lower().startswith(("http://", "https://")):
        value = f"https://{value}"
    parsed = urlparse(value)
    if not parsed.netloc:
        raise InvalidTargetError(f"Could not determine a host from {domain_or_url!r}")
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


class SiteAuditor:
    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        session: Optional[requests.Session] = None,
        checker: Optional[Checker] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or AuditConfig()
        self.clock = clock
        self.session = session or make_session(
            self.config.user_agent, pool_size=self.config.max_workers,
        )
        self.checker = checker or PageChecker(self.session, self.config.request_timeout)

        # Sitemaps are keyed by origin, reports by the domain string as given
        self.sitemap_cache: ResultCache[SitemapResult] = ResultCache(
            "sitemap",
            ttl_seconds=self.config.sitemap_cache_ttl,
            max_entries=self.config.memory_cache_max_entries,
            cache_dir=self.config.cache_dir,
            decode=SitemapResult.from_dict,
            purge_expired_on_read=True,
            clock=clock,
        )
        self.report_cache: ResultCache[SiteReport] = ResultCache(
            "audit",
            ttl_seconds=self.config.report_cache_ttl,
            max_entries=self.config.memory_cache_max_entries,
            cache_dir=self.config.cache_dir,
            decode=SiteReport.from_dict,
            purge_expired_on_read=False,
            clock=clock,
        )

    # ── Sitemap ───────────────────────────────────────────────────────────────

    def resolve_sitemap(self, domain_or_url: str, force_refresh: bool = False) -> SitemapResult:
        origin = normalize_origin(domain_or_url)

        if not force_refresh:
            cached = self.sitemap_cache.get(origin)
            if cached is not None:
                logger.info("Sitemap cache hit for %s (%d URLs)", origin, cached.total)
                return cached

        result = sitemap.resolve_sitemap(
            origin,
            self.session,
            timeout=self.config.request_timeout,
            max_urls=self.config.sitemap_max_urls,
        )
        self.sitemap_cache.put(origin, result)
        return result

    # ── Audits ────────────────────────────────────────────────────────────────

    def audit_site(
        self,
        domain_or_url: str,
        force_refresh: bool = False,
        max_pages: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[Callable[[dict], None]] = None,
    ) -> SiteReport:
        """
        Resolve the sitemap, audit up to `max_pages` of its URLs and aggregate.

        A run capped by `max_pages` is cached under its own key, so an uncapped
        call never receives a truncated report. A cancelled run returns the
        partial report and is not cached.
        """
        requested = (domain_or_url or "").strip()
        origin = normalize_origin(requested)
        key = requested if max_pages is None else f"{requested}|max={max(max_pages, 0)}"

        if not force_refresh:
            cached = self.report_cache.get(key)
            if cached is not None:
                logger.info("Report cache hit for %s", key)
                return cached

        resolved = self.resolve_sitemap(origin, force_refresh=force_refresh)
        limit = self.config.max_pages if max_pages is None else max_pages
        urls = resolved.urls[:max(limit, 0)]
        logger.info("Auditing %d of %d URLs for %s", len(urls), resolved.total, origin)

        pages = audit_all(
            urls,
            origin,
            self.checker,
            batch_size=self.config.batch_size,
            concurrent_batches=self.config.concurrent_batches,
            max_workers=self.config.max_workers,
            cancel_event=cancel_event,
            progress_callback=progress_callback,
        )
        report = aggregate(pages, origin, resolved.total, clock=self.clock)

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Audit of %s cancelled; partial report not cached", origin)
        else:
            self.report_cache.put(key, report)
        return report

    def audit_batch(
        self,
        urls: list[str],
        origin: str,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[Callable[[dict], None]] = None,
    ) -> SiteReport:
        """Audit an explicit URL list; results are never cached. Repeats are audited once."""
        urls = list(dict.fromkeys(u.strip() for u in urls if u and u.strip()))
        if not urls:
            raise InvalidTargetError("At least one URL is required")
        origin = normalize_origin(origin)

        pages = audit_all(
            urls,
            origin,
            self.checker,
            batch_size=self.config.batch_size,
            concurrent_batches=self.config.concurrent_batches,
            max_workers=self.config.max_workers,
            cancel_event=cancel_event,
            progress_callback=progress_callback,
        )
        return aggregate(pages, origin, len(urls), clock=self.clock)

    def audit_page(self, url: str) -> AuditOutcome:
        url = (url or "").strip()
        if not url:
            raise InvalidTargetError("A page URL is required")
        if not url.lower().startswith(("http://", "https://")):
            url = f"https://{url}"

        report = self.checker.check(url)
        if report is None:
            raise PageUnavailableError(f"{url} could not be fetched or did not return 2xx")
        return AuditOutcome.for_page(report)

    def run(self, target: str, full_site: bool = True) -> AuditOutcome:
        if full_site:
            return AuditOutcome.for_site(self.audit_site(target))
        return self.audit_page(target)

    def merge(self, reports: list[SiteReport]) -> SiteReport:
        """
        Combine partial reports of one site (e.g. successive batches).

        Pages are de-duplicated by URL. `total_urls_in_sitemap` is the sum of
        the inputs, so batches are expected to be disjoint slices of one list.
        """
        if not reports:
            raise InvalidTargetError("Nothing to merge")
        total = sum(r.total_urls_in_sitemap for r in reports)
        return merge_reports(reports[0].origin, reports, total, clock=self.clock)
