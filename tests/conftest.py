"""
Shared fixtures: an in-memory stand-in for requests.Session, a controllable
clock, a temporary cache directory and report factories. No test touches the
network.
"""
import threading

import pytest
from requests.structures import CaseInsensitiveDict

from models import AuditConfig, Finding, PageReport, finding_id


HTML_HEADERS = {"Content-Type": "text/html; charset=utf-8"}
XML_HEADERS = {"Content-Type": "application/xml"}


class FakeResponse:
    def __init__(self, url, text="", status_code=200, headers=None, content=None):
        self.url = url
        self.text = text
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or HTML_HEADERS)
        self.content = content if content is not None else text.encode("utf-8")


class FakeSession:
    """Routes GET requests by exact URL. Unknown URLs answer 404."""

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.headers = {}
        self._lock = threading.Lock()

    def add(self, url, text="", status=200, headers=None, content=None):
        self.routes[url] = FakeResponse(url, text, status, headers, content)

    def add_xml(self, url, text):
        self.add(url, text, headers=XML_HEADERS)

    def fail(self, url, exc):
        self.routes[url] = exc

    def get(self, url, timeout=None, allow_redirects=True, **kwargs):
        with self._lock:
            self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(url, "Not found", 404)
        if isinstance(route, Exception):
            raise route
        return route

    def count(self, url):
        return self.calls.count(url)


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path):
    return str(tmp_path / "cache")


@pytest.fixture
def audit_config(cache_dir):
    return AuditConfig(cache_dir=cache_dir, max_workers=4, request_timeout=1)


def make_finding(category, severity, title, message="", value=None, recommendation=None):
    return Finding(
        id=finding_id(category, title),
        category=category,
        severity=severity,
        title=title,
        message=message or title,
        value=value,
        recommendation=recommendation,
    )


def make_page_report(url, findings=(), trust=None, score=0):
    return PageReport(url=url, findings=list(findings), score=score, trust=trust)


@pytest.fixture
def finding():
    return make_finding


@pytest.fixture
def page_report():
    return make_page_report


def sitemap_xml(*locs):
    entries = "".join(f"<url><loc>{loc}</loc></url>" for loc in locs)
    return f'<?xml version="1.0"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'


def sitemap_index_xml(*locs):
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return f'<?xml version="1.0"?><sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'


@pytest.fixture
def urlset():
    return sitemap_xml


@pytest.fixture
def sitemap_index():
    return sitemap_index_xml


GOOD_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <meta name="description" content="A description that is comfortably longer than fifty characters in total.">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="author" content="{author}">
  <meta property="og:title" content="Example">
  <meta property="og:description" content="Example description">
  <meta property="og:image" content="https://example.com/og.jpg">
  <meta name="twitter:card" content="summary_large_image">
  <link rel="canonical" href="{url}">
  <link rel="icon" href="/favicon.ico">
  <script type="application/ld+json">{{"@type": "Organization"}}</script>
</head>
<body>
  <h1>Main heading</h1>
  <h2>Sub heading</h2>
  <p>{body}</p>
  <img src="/a.jpg" alt="A picture" width="10" height="10">
  <a href="/about">About us</a>
  <a href="https://other.org/page" rel="noopener">Partner</a>
  <a href="mailto:hello@example.com">Contact</a>
</body>
</html>
"""


def good_page_html(url="https://example.com/", title="A page title that fits nicely in range",
                   author="Jane Doe", body=None):
    if body is None:
        body = " ".join(["expert content with contact details"] * 70)
    return GOOD_PAGE.format(url=url, title=title, author=author, body=body)


@pytest.fixture
def good_html():
    return good_page_html
