"""
Batch orchestrator.
Splits a URL list into fixed-size batches, releases a few batches at a time
into a ThreadPoolExecutor and collects PageReports in input order.
Emits {"message", "pct"} progress dicts after each group of batches.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Protocol

from config import BATCH_SIZE, CONCURRENT_BATCHES, DEFAULT_MAX_WORKERS
from models import PageReport

logger = logging.getLogger(__name__)


class Checker(Protocol):
    def check(self, url: str, context_page_url: Optional[str] = None) -> Optional[PageReport]:
        ...


def audit_all(
    urls: list[str],
    origin: str,
    checker: Checker,
    batch_size: int = BATCH_SIZE,
    concurrent_batches: int = CONCURRENT_BATCHES,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable[[dict], None]] = None,
) -> list[PageReport]:
    """
    Audit every URL with `checker` and return the reports that succeeded.

    Pages whose check raises or returns None are dropped. Order follows
    `urls` regardless of completion timing. `cancel_event` is only looked at
    between groups; a cancelled run returns what it has so far.
    """
    batches = make_batches(urls, batch_size)
    groups = [
        batches[i:i + max(concurrent_batches, 1)]
        for i in range(0, len(batches), max(concurrent_batches, 1))
    ]
    context_page_url = origin.rstrip("/") + "/"

    reports: list[PageReport] = []
    done = 0

    with ThreadPoolExecutor(max_workers=max(max_workers, 1)) as executor:
        for group_no, group in enumerate(groups, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Audit cancelled after %d of %d pages", done, len(urls))
                break

            submitted: list[list[tuple[str, Future]]] = [
                [(url, executor.submit(checker.check, url, context_page_url)) for url in batch]
                for batch in group
            ]

            # Join the whole group before releasing the next one
            for batch in submitted:
                for url, future in batch:
                    report = _collect(url, future)
                    if report is not None:
                        reports.append(report)
                done += len(batch)

            _emit(
                progress_callback,
                f"Audited {done}/{len(urls)} pages (group {group_no}/{len(groups)})",
                int(done / max(len(urls), 1) * 100),
            )

    logger.info("Audited %d pages, %d reports", done, len(reports))
    return reports


def make_batches(urls: list[str], batch_size: int = BATCH_SIZE) -> list[list[str]]:
    size = max(batch_size, 1)
    return [urls[i:i + size] for i in range(0, len(urls), size)]


def _collect(url: str, future: Future) -> Optional[PageReport]:
    try:
        return future.result()
    except Exception:
        logger.warning("Page check failed for %s", url, exc_info=True)
        return None


# ── Helpers ───────────────────────────────────────────────────────────────────

def _emit(callback: Optional[Callable], message: str, pct: int) -> None:
    if callback:
        try:
            callback({"message": message, "pct": pct})
        except Exception:
            logger.debug("Progress callback raised", exc_info=True)
