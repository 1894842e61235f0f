import random
import threading
import time

from crawler.crawler import audit_all, make_batches
from models import PageReport

ORIGIN = "https://example.com"


class RecordingChecker:
    """Returns a report per URL; URLs listed in `fail` raise, in `absent` return None."""

    def __init__(self, fail=(), absent=(), jitter=0.0):
        self.fail = set(fail)
        self.absent = set(absent)
        self.jitter = jitter
        self.calls = []
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def check(self, url, context_page_url=None):
        with self._lock:
            self.calls.append((url, context_page_url))
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self.jitter:
                time.sleep(random.uniform(0, self.jitter))
            if url in self.fail:
                raise RuntimeError(f"boom on {url}")
            if url in self.absent:
                return None
            return PageReport(url=url)
        finally:
            with self._lock:
                self.active -= 1


def _urls(n):
    return [f"{ORIGIN}/p{i}" for i in range(n)]


def test_make_batches():
    assert make_batches(list("abcde"), 2) == [["a", "b"], ["c", "d"], ["e"]]
    assert make_batches([], 50) == []


def test_results_keep_input_order_despite_completion_timing():
    urls = _urls(23)
    checker = RecordingChecker(jitter=0.01)

    reports = audit_all(urls, ORIGIN, checker, batch_size=4, concurrent_batches=2, max_workers=5)

    assert [r.url for r in reports] == urls


def test_failed_and_absent_pages_are_dropped():
    urls = _urls(6)
    checker = RecordingChecker(fail={urls[1]}, absent={urls[4]})

    reports = audit_all(urls, ORIGIN, checker, batch_size=2, concurrent_batches=3, max_workers=3)

    assert [r.url for r in reports] == [urls[0], urls[2], urls[3], urls[5]]
    assert len(checker.calls) == 6


def test_every_page_failing_is_not_an_error():
    urls = _urls(3)
    checker = RecordingChecker(absent=set(urls))

    assert audit_all(urls, ORIGIN, checker) == []


def test_concurrency_never_exceeds_max_workers():
    checker = RecordingChecker(jitter=0.005)

    audit_all(_urls(30), ORIGIN, checker, batch_size=5, concurrent_batches=3, max_workers=3)

    assert 1 <= checker.peak <= 3


def test_context_page_is_the_homepage():
    checker = RecordingChecker()

    audit_all([f"{ORIGIN}/", f"{ORIGIN}/a"], ORIGIN, checker)

    assert {ctx for _, ctx in checker.calls} == {f"{ORIGIN}/"}


def test_progress_is_reported_after_each_group():
    updates = []

    audit_all(_urls(10), ORIGIN, RecordingChecker(), batch_size=2, concurrent_batches=2,
              max_workers=2, progress_callback=updates.append)

    # 5 batches released 2 at a time
    assert len(updates) == 3
    assert [u["pct"] for u in updates] == [40, 80, 100]
    assert all("message" in u for u in updates)


def test_progress_callback_errors_are_ignored():
    def broken(update):
        raise ValueError("ui went away")

    reports = audit_all(_urls(3), ORIGIN, RecordingChecker(), progress_callback=broken)

    assert len(reports) == 3


def test_cancellation_is_checked_between_groups():
    cancel = threading.Event()
    seen_groups = []

    def on_progress(update):
        seen_groups.append(update)
        cancel.set()

    checker = RecordingChecker()
    reports = audit_all(_urls(12), ORIGIN, checker, batch_size=2, concurrent_batches=2,
                        max_workers=2, cancel_event=cancel, progress_callback=on_progress)

    # First group (2 batches of 2) completes, then the run stops
    assert [r.url for r in reports] == _urls(4)
    assert len(checker.calls) == 4
    assert len(seen_groups) == 1


def test_already_cancelled_run_audits_nothing():
    cancel = threading.Event()
    cancel.set()
    checker = RecordingChecker()

    assert audit_all(_urls(5), ORIGIN, checker, cancel_event=cancel) == []
    assert checker.calls == []
