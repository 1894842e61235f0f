import gzip

import pytest
import requests

from crawler.sitemap import extract_locs, homepage_first, is_sitemap_url, resolve_sitemap

ORIGIN = "https://example.com"


class TestExtractLocs:
    def test_plain_entries_in_document_order(self, urlset):
        xml = urlset(f"{ORIGIN}/b", f"{ORIGIN}/a")
        assert extract_locs(xml) == [f"{ORIGIN}/b", f"{ORIGIN}/a"]

    def test_tolerates_whitespace_cdata_and_entities(self):
        xml = (
            "<urlset>"
            "<url><loc >\n   https://example.com/spaced   \n</loc ></url>"
            "<url><LOC><![CDATA[https://example.com/cdata]]></LOC></url>"
            "<url><loc>https://example.com/q?a=1&amp;b=2</loc></url>"
            "<url><loc>   </loc></url>"
            "</urlset>"
        )
        assert extract_locs(xml) == [
            "https://example.com/spaced",
            "https://example.com/cdata",
            "https://example.com/q?a=1&b=2",
        ]


class TestIsSitemapUrl:
    @pytest.mark.parametrize("url", [
        "https://example.com/sitemap-pages.xml",
        "https://example.com/sitemaps/products.xml.gz",
        "https://example.com/sitemap_products_1.xml?from=1&to=99",
        "https://example.com/sitemap/posts",
    ])
    def test_nested_sitemaps(self, url):
        assert is_sitemap_url(url)

    @pytest.mark.parametrize("url", [
        "https://example.com/",
        "https://example.com/products/feed.xml",
        "https://example.com/blog/why-sitemaps-matter",
    ])
    def test_pages(self, url):
        assert not is_sitemap_url(url)


def test_homepage_first_keeps_other_order():
    urls = [f"{ORIGIN}/a", f"{ORIGIN}/", f"{ORIGIN}/b"]
    assert homepage_first(urls, f"{ORIGIN}/") == [f"{ORIGIN}/", f"{ORIGIN}/a", f"{ORIGIN}/b"]
    assert homepage_first([f"{ORIGIN}/a"], f"{ORIGIN}/") == [f"{ORIGIN}/a"]


class TestResolveSitemap:
    def test_nested_index_is_flattened_and_deduplicated(self, session, urlset, sitemap_index):
        session.add_xml(f"{ORIGIN}/sitemap.xml", sitemap_index(
            f"{ORIGIN}/sitemap-a.xml", f"{ORIGIN}/sitemap-b.xml",
        ))
        session.add_xml(f"{ORIGIN}/sitemap-a.xml", urlset(f"{ORIGIN}/a", f"{ORIGIN}/shared", f"{ORIGIN}/"))
        session.add_xml(f"{ORIGIN}/sitemap-b.xml", urlset(f"{ORIGIN}/shared", f"{ORIGIN}/b", f"{ORIGIN}/c"))

        result = resolve_sitemap(ORIGIN, session, timeout=1)

        assert result.urls == [
            f"{ORIGIN}/", f"{ORIGIN}/a", f"{ORIGIN}/shared", f"{ORIGIN}/b", f"{ORIGIN}/c",
        ]
        assert result.total == 5
        assert len(set(result.urls)) == len(result.urls)

    def test_nested_sitemaps_are_collected_before_own_pages(self, session, urlset):
        session.add_xml(f"{ORIGIN}/sitemap.xml", urlset(
            f"{ORIGIN}/top", f"{ORIGIN}/sitemap-child.xml",
        ))
        session.add_xml(f"{ORIGIN}/sitemap-child.xml", urlset(f"{ORIGIN}/child"))

        result = resolve_sitemap(ORIGIN, session, timeout=1)

        assert result.urls == [f"{ORIGIN}/child", f"{ORIGIN}/top"]

    def test_cycles_terminate_and_each_sitemap_is_fetched_once(self, session, sitemap_index, urlset):
        session.add_xml(f"{ORIGIN}/sitemap.xml", sitemap_index(f"{ORIGIN}/sitemap-a.xml"))
        session.add_xml(f"{ORIGIN}/sitemap-a.xml", sitemap_index(
            f"{ORIGIN}/sitemap.xml", f"{ORIGIN}/sitemap-b.xml",
        ))
        session.add_xml(f"{ORIGIN}/sitemap-b.xml", sitemap_index(f"{ORIGIN}/sitemap-a.xml"))
        session.routes[f"{ORIGIN}/sitemap-b.xml"].text += urlset(f"{ORIGIN}/only")

        result = resolve_sitemap(ORIGIN, session, timeout=1)

        assert result.urls == [f"{ORIGIN}/only"]
        for name in ("sitemap.xml", "sitemap-a.xml", "sitemap-b.xml"):
            assert session.count(f"{ORIGIN}/{name}") == 1

    def test_depth_limit(self, session, sitemap_index, urlset):
        session.add_xml(f"{ORIGIN}/sitemap.xml", sitemap_index(f"{ORIGIN}/sitemap-1.xml"))
        session.add_xml(
            f"{ORIGIN}/sitemap-1.xml",
            sitemap_index(f"{ORIGIN}/sitemap-2.xml") + urlset(f"{ORIGIN}/level-one"),
        )
        session.add_xml(f"{ORIGIN}/sitemap-2.xml", urlset(f"{ORIGIN}/level-two"))

        result = resolve_sitemap(ORIGIN, session, timeout=1, max_depth=1)

        assert result.urls == [f"{ORIGIN}/level-one"]
        assert session.count(f"{ORIGIN}/sitemap-2.xml") == 0

    def test_relative_page_entries_are_rejected(self, session):
        session.add_xml(f"{ORIGIN}/sitemap.xml", "<urlset><url><loc>/relative</loc></url>"
                                                 f"<url><loc>{ORIGIN}/ok</loc></url></urlset>")

        assert resolve_sitemap(ORIGIN, session, timeout=1).urls == [f"{ORIGIN}/ok"]

    def test_url_cap(self, session, urlset):
        session.add_xml(f"{ORIGIN}/sitemap.xml", urlset(*[f"{ORIGIN}/p{i}" for i in range(10)]))

        result = resolve_sitemap(ORIGIN, session, timeout=1, max_urls=3)

        assert result.urls == [f"{ORIGIN}/p0", f"{ORIGIN}/p1", f"{ORIGIN}/p2"]
        assert result.total == 3

    def test_gzip_sitemap(self, session, sitemap_index, urlset):
        session.add_xml(f"{ORIGIN}/sitemap.xml", sitemap_index(f"{ORIGIN}/sitemap-1.xml.gz"))
        body = gzip.compress(urlset(f"{ORIGIN}/zipped").encode("utf-8"))
        session.add(f"{ORIGIN}/sitemap-1.xml.gz", text="", content=body,
                    headers={"Content-Type": "application/x-gzip"})

        assert resolve_sitemap(ORIGIN, session, timeout=1).urls == [f"{ORIGIN}/zipped"]

    def test_falls_back_to_robots_directive(self, session, urlset):
        session.add(f"{ORIGIN}/robots.txt", f"User-agent: *\nSitemap: {ORIGIN}/custom-map.xml\n",
                    headers={"Content-Type": "text/plain"})
        session.add_xml(f"{ORIGIN}/custom-map.xml", urlset(f"{ORIGIN}/from-robots"))
        session.add_xml(f"{ORIGIN}/sitemap_index.xml", urlset(f"{ORIGIN}/never"))

        result = resolve_sitemap(ORIGIN, session, timeout=1)

        assert result.urls == [f"{ORIGIN}/from-robots"]
        assert session.count(f"{ORIGIN}/sitemap_index.xml") == 0

    def test_falls_back_to_well_known_paths_in_order(self, session, urlset):
        session.add_xml(f"{ORIGIN}/sitemaps.xml", urlset(f"{ORIGIN}/third-path"))
        session.add_xml(f"{ORIGIN}/sitemap1.xml", urlset(f"{ORIGIN}/fourth-path"))

        result = resolve_sitemap(ORIGIN, session, timeout=1)

        assert result.urls == [f"{ORIGIN}/third-path"]
        assert session.count(f"{ORIGIN}/sitemap_index.xml") == 1
        assert session.count(f"{ORIGIN}/sitemap1.xml") == 0

    def test_homepage_only_when_nothing_is_found(self, session):
        session.fail(f"{ORIGIN}/sitemap.xml", requests.exceptions.Timeout("slow"))
        session.fail(f"{ORIGIN}/robots.txt", requests.exceptions.ConnectionError("down"))

        result = resolve_sitemap(ORIGIN, session, timeout=1)

        assert result.urls == [f"{ORIGIN}/"]
        assert result.total == 1

    def test_server_error_on_child_is_skipped(self, session, sitemap_index, urlset):
        session.add_xml(f"{ORIGIN}/sitemap.xml", sitemap_index(
            f"{ORIGIN}/sitemap-broken.xml", f"{ORIGIN}/sitemap-ok.xml",
        ))
        session.add(f"{ORIGIN}/sitemap-broken.xml", "oops", status=500)
        session.add_xml(f"{ORIGIN}/sitemap-ok.xml", urlset(f"{ORIGIN}/fine"))

        assert resolve_sitemap(ORIGIN, session, timeout=1).urls == [f"{ORIGIN}/fine"]
