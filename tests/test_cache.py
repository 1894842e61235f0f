import json
import os
from unittest import mock

import pytest

from cache.result_cache import ResultCache, safe_key
from models import SiteReport, SitemapResult

TTL = 3600


@pytest.fixture
def report_cache(cache_dir, clock):
    return ResultCache("audit", ttl_seconds=TTL, max_entries=3, cache_dir=cache_dir,
                       decode=SiteReport.from_dict, clock=clock)


@pytest.fixture
def sitemap_cache(cache_dir, clock):
    return ResultCache("sitemap", ttl_seconds=TTL, max_entries=3, cache_dir=cache_dir,
                       decode=SitemapResult.from_dict, purge_expired_on_read=True, clock=clock)


def _report(origin="https://example.com"):
    return SiteReport(origin=origin, overall_score=80, pages_audited=2)


def test_safe_key():
    assert safe_key("https://www.example.com/a?b=1") == "www_example_com_a_b_1"
    assert safe_key("http://example.com") == "example_com"
    assert safe_key("example.com") == "example_com"


def test_file_layout(report_cache, cache_dir, clock):
    report_cache.put("https://example.com", _report())

    path = os.path.join(cache_dir, "audit_example_com.json")
    with open(path, encoding="utf-8") as fh:
        record = json.load(fh)
    assert record["cached_at"] == clock.now
    assert record["payload"]["origin"] == "https://example.com"


class TestFreshness:
    def test_hit_within_ttl_inclusive(self, report_cache, clock):
        report_cache.put("example.com", _report())
        clock.advance(TTL)

        assert report_cache.get("example.com") == _report()

    def test_miss_after_ttl(self, report_cache, clock):
        report_cache.put("example.com", _report())
        clock.advance(TTL + 1)

        assert report_cache.get("example.com") is None
        assert len(report_cache) == 0

    def test_report_cache_leaves_expired_file(self, report_cache, clock):
        report_cache.put("example.com", _report())
        clock.advance(TTL + 1)

        assert report_cache.get("example.com") is None
        assert report_cache.path_for("example.com").exists()

    def test_sitemap_cache_deletes_expired_file(self, sitemap_cache, clock):
        sitemap_cache.put("https://example.com", SitemapResult("https://example.com", ["https://example.com/"], 1))
        clock.advance(TTL + 1)

        assert sitemap_cache.get("https://example.com") is None
        assert not sitemap_cache.path_for("https://example.com").exists()


class TestPersistentTier:
    def test_survives_memory_loss_and_keeps_original_timestamp(self, report_cache, clock):
        report_cache.put("example.com", _report())
        report_cache.clear_memory()
        clock.advance(TTL - 10)

        assert report_cache.get("example.com") == _report()

        # Repopulated memory entry still expires relative to the original write
        os.remove(report_cache.path_for("example.com"))
        clock.advance(20)
        assert report_cache.get("example.com") is None

    def test_new_instance_reads_existing_files(self, report_cache, cache_dir, clock):
        report_cache.put("example.com", _report())
        other = ResultCache("audit", ttl_seconds=TTL, cache_dir=cache_dir,
                            decode=SiteReport.from_dict, clock=clock)

        assert other.get("example.com") == _report()

    @pytest.mark.parametrize("content", [
        "{not json",
        json.dumps({"payload": {"origin": "https://example.com"}}),
        json.dumps({"cached_at": 1}),
        json.dumps({"payload": {"pages_audited": 3}, "cached_at": 1_700_000_000.0}),
        json.dumps(["a", "list"]),
    ])
    def test_corrupt_records_are_a_miss_and_purged(self, report_cache, content):
        path = report_cache.path_for("example.com")
        path.write_text(content, encoding="utf-8")

        assert report_cache.get("example.com") is None
        assert not path.exists()

    def test_sitemap_payload_must_hold_a_url_list(self, sitemap_cache, clock):
        path = sitemap_cache.path_for("https://example.com")
        path.write_text(json.dumps({
            "payload": {"origin": "https://example.com", "urls": "nope", "total": 1},
            "cached_at": clock.now,
        }), encoding="utf-8")

        assert sitemap_cache.get("https://example.com") is None
        assert not path.exists()

    def test_write_failure_is_logged_not_raised(self, report_cache, caplog):
        with mock.patch("pathlib.Path.write_text", side_effect=OSError("disk full")):
            report_cache.put("example.com", _report())

        assert "Could not write cache file" in caplog.text
        assert report_cache.get("example.com") == _report()

    def test_uncreatable_directory_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(OSError):
            ResultCache("audit", ttl_seconds=TTL, cache_dir=str(blocker / "sub"))


class TestMemoryTier:
    def test_evicts_oldest_cached_at_when_full(self, report_cache, clock):
        for key in ("a.com", "b.com", "c.com"):
            report_cache.put(key, _report(f"https://{key}"))
            clock.advance(1)

        # Reading does not refresh position: eviction is by write time
        report_cache.get("a.com")
        report_cache.put("d.com", _report("https://d.com"))

        assert set(report_cache._memory) == {"b.com", "c.com", "d.com"}

    def test_overwriting_existing_key_does_not_evict(self, report_cache):
        for key in ("a.com", "b.com", "c.com"):
            report_cache.put(key, _report(f"https://{key}"))
        report_cache.put("a.com", _report("https://a.com"))

        assert len(report_cache) == 3

    def test_memory_hit_does_not_touch_disk(self, report_cache):
        report_cache.put("example.com", _report())

        with mock.patch("pathlib.Path.read_text") as read_text:
            assert report_cache.get("example.com") == _report()
        read_text.assert_not_called()


def test_invalidate_removes_both_tiers(report_cache):
    report_cache.put("example.com", _report())
    report_cache.invalidate("example.com")

    assert report_cache.get("example.com") is None
    assert not report_cache.path_for("example.com").exists()
