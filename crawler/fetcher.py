"""
Low-level HTTP fetcher. Every outbound request carries a fixed timeout; any
transport failure or non-2xx status is reported as "absent" (None) instead
of being raised.
"""
from __future__ import annotations

import gzip
import logging
from typing import Optional

import requests

from config import DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from models import PageData

logger = logging.getLogger(__name__)


def make_session(user_agent: str = DEFAULT_USER_AGENT, pool_size: int = 10) -> requests.Session:
    """Shared session with connection pooling sized for the worker pool."""
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(
        pool_connections=pool_size,
        pool_maxsize=pool_size,
        max_retries=requests.adapters.Retry(
            total=1,
            backoff_factor=0.5,
            status_forcelist=[429, 502, 503, 504],
            allowed_methods=["GET", "HEAD"],
            raise_on_status=False,
        ),
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
    })
    return session


def _get(url: str, session: requests.Session, timeout: float) -> Optional[requests.Response]:
    try:
        resp = session.get(url, timeout=timeout, allow_redirects=True)
    except requests.exceptions.Timeout:
        logger.debug("Timed out after %ss: %s", timeout, url)
        return None
    except requests.RequestException as exc:
        logger.debug("Request failed for %s: %s", url, exc)
        return None

    if not 200 <= resp.status_code < 300:
        logger.debug("HTTP %s for %s", resp.status_code, url)
        return None
    return resp


def fetch_text(
    url: str,
    session: requests.Session,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Optional[str]:
    """Return the decoded body of a 2xx response, or None."""
    resp = _get(url, session, timeout)
    if resp is None:
        return None
    return _decompress_if_gzip(resp)


def fetch_page(
    url: str,
    session: requests.Session,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> Optional[PageData]:
    """
    Fetch a URL and return a PageData with HTTP metadata populated.
    HTML content is stored but NOT parsed here (parser.py does that).
    """
    resp = _get(url, session, timeout)
    if resp is None:
        return None

    headers = dict(resp.headers)
    return PageData(
        url=url,
        status_code=resp.status_code,
        final_url=str(resp.url or url),
        content_type=headers.get("content-type", headers.get("Content-Type", "")).lower(),
        response_headers=headers,
        html=resp.text,
    )


def _decompress_if_gzip(resp: requests.Response) -> str:
    """Return the response body as a string, decompressing gzip if needed."""
    content_type = resp.headers.get("content-type", "")
    url = str(resp.url or "")

    if url.endswith(".gz") or "gzip" in content_type:
        try:
            return gzip.decompress(resp.content).decode("utf-8", errors="replace")
        except (OSError, EOFError):
            # requests already undid Content-Encoding; body is plain text
            pass

    return resp.text
