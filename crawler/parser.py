"""
HTML parser that transforms raw HTML + PageData (HTTP metadata) into
a fully-populated PageData object for the rule analyzers.
"""
from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse, urlunparse

import tldextract
from bs4 import BeautifulSoup

from models import ImageData, LinkData, PageData

# Bundled public-suffix snapshot only; no network fetch at first use
_TLD_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())
_ABOUT_HREF_RE = re.compile(r"/(about|om)(-us|-os)?(/|$|\?|#)", re.IGNORECASE)


def parse_page(page: PageData) -> PageData:
    """
    Populate page fields by parsing page.html.
    Mutates and returns the same PageData object.
    """
    if not page.html:
        return page

    soup = BeautifulSoup(page.html, "lxml")
    base_url = _resolve_base_url(soup, page.final_url or page.url)

    _parse_head(soup, page, base_url)
    _parse_headings(soup, page)
    _parse_links(soup, page, base_url)
    _parse_images(soup, page, base_url)
    _parse_trust_markers(soup, page)
    # Last: strips <script>/<style> from the tree
    _parse_content(soup, page)

    return page


def _resolve_base_url(soup: BeautifulSoup, fallback: str) -> str:
    base_tag = soup.find("base", href=True)
    if base_tag:
        return urljoin(fallback, base_tag["href"])
    return fallback


# ── Head ──────────────────────────────────────────────────────────────────────

def _parse_head(soup: BeautifulSoup, page: PageData, base_url: str) -> None:
    title_tag = soup.find("title")
    if title_tag:
        page.title = title_tag.get_text(strip=True)

    html_tag = soup.find("html")
    if html_tag and html_tag.get("lang"):
        page.lang = html_tag["lang"].strip() or None

    for meta in soup.find_all("meta"):
        name = (meta.get("name") or "").lower().strip()
        prop = (meta.get("property") or "").lower().strip()
        http_equiv = (meta.get("http-equiv") or "").lower().strip()
        content = (meta.get("content") or "").strip()

        if meta.get("charset"):
            page.charset = meta["charset"].strip()
        elif http_equiv == "content-type" and content and not page.charset:
            page.charset = content

        if name == "description":
            page.meta_description = content
        elif name == "robots":
            page.meta_robots = content
        elif name == "viewport":
            page.meta_viewport = content

        if prop.startswith("og:"):
            page.og_tags[prop] = content
        elif prop.startswith("twitter:") or name.startswith("twitter:"):
            page.twitter_tags[prop or name] = content

    for link in soup.find_all("link", href=True):
        rels = [r.lower() for r in _rel_values(link)]
        href = link["href"].strip()
        if not href:
            continue
        if "canonical" in rels and page.canonical_url is None:
            page.canonical_url = urljoin(base_url, href)
        if "icon" in rels and page.favicon is None:
            page.favicon = urljoin(base_url, href)

    page.json_ld_blocks = len(soup.find_all("script", type="application/ld+json"))


def _rel_values(tag) -> list[str]:
    rel = tag.get("rel") or []
    return rel if isinstance(rel, list) else str(rel).split()


# ── Headings ──────────────────────────────────────────────────────────────────

def _parse_headings(soup: BeautifulSoup, page: PageData) -> None:
    page.h1_tags = [h.get_text(strip=True) for h in soup.find_all("h1")]
    page.h2_tags = [h.get_text(strip=True) for h in soup.find_all("h2")]
    page.h3_count = len(soup.find_all("h3"))


# ── Content ───────────────────────────────────────────────────────────────────

def _parse_content(soup: BeautifulSoup, page: PageData) -> None:
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    body = soup.find("body")
    text = (body or soup).get_text(separator=" ", strip=True)
    text = re.sub(r"\s+", " ", text).strip()
    page.text_content = text
    page.word_count = len(text.split()) if text else 0


# ── Links ─────────────────────────────────────────────────────────────────────

def _parse_links(soup: BeautifulSoup, page: PageData, base_url: str) -> None:
    site_domain = _registered_domain(page.final_url or page.url)

    for a_tag in soup.find_all("a", href=True):
        href = a_tag.get("href", "").strip()
        lowered = href.lower()

        if lowered.startswith(("mailto:", "tel:")):
            page.contact_links += 1
            continue
        if not href or href == "#" or lowered.startswith("javascript:"):
            page.invalid_hrefs.append(href or "(empty)")
            continue

        if _ABOUT_HREF_RE.search(href):
            page.about_links += 1

        abs_url = _strip_fragment(urljoin(base_url, href))
        parsed = urlparse(abs_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            continue

        rel = " ".join(_rel_values(a_tag))
        link = LinkData(
            url=abs_url,
            anchor_text=a_tag.get_text(strip=True)[:200],
            rel=rel,
            nofollow="nofollow" in rel.lower(),
        )
        if _registered_domain(abs_url) == site_domain:
            page.internal_links.append(link)
        else:
            page.external_links.append(link)


def _strip_fragment(url: str) -> str:
    parsed = urlparse(url)
    return urlunparse(parsed._replace(fragment=""))


def _registered_domain(url: str) -> str:
    netloc = urlparse(url).netloc.lower()
    ext = _TLD_EXTRACT(netloc)
    # IPs and single-label hosts have no registered domain
    return ext.top_domain_under_public_suffix or netloc


# ── Images ────────────────────────────────────────────────────────────────────

def _parse_images(soup: BeautifulSoup, page: PageData, base_url: str) -> None:
    for img in soup.find_all("img"):
        src = (img.get("src") or img.get("data-src") or "").strip()
        if src and not src.startswith("data:"):
            src = urljoin(base_url, src)
        page.images.append(ImageData(
            src=src,
            alt=img.get("alt"),
            width=img.get("width"),
            height=img.get("height"),
        ))


# ── Authorship / trust ────────────────────────────────────────────────────────

def _parse_trust_markers(soup: BeautifulSoup, page: PageData) -> None:
    author_meta = soup.find("meta", attrs={"name": "author"})
    if author_meta and (author_meta.get("content") or "").strip():
        page.author = author_meta["content"].strip()
    else:
        node = soup.select_one('[rel="author"], .author, [itemprop="author"]')
        text = node.get_text(strip=True) if node else ""
        if not text:
            article_author = soup.find("meta", attrs={"property": "article:author"})
            text = (article_author.get("content") or "").strip() if article_author else ""
        page.author = text or None

    page.has_author_markup = bool(soup.select('.author-bio, .author-info, [class*="author"]'))
    page.has_entity_markup = bool(soup.select('[itemtype*="Person"], [itemtype*="Organization"]'))
    page.has_contact_markup = bool(soup.select('[itemtype*="ContactPoint"], .contact, [class*="contact"]'))
    page.has_contact_point = bool(soup.select('[itemtype*="ContactPoint"]'))
