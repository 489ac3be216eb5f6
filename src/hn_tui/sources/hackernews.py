from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    APP_VERSION,
    DEFAULT_CONFIG,
    HN_FRONT_PAGE_API,
    LISTING_RETRY_BACKOFF,
    LISTING_RETRY_TOTAL,
)
from ..datamodels import Hit
from ..errors import FetchError

logger = logging.getLogger("hn")


class HackerNewsSource:
    """Client for the Algolia front page search endpoint."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.hits_per_page = int(self.config.get("hits_per_page", DEFAULT_CONFIG["hits_per_page"]))
        self.timeout = self.config.get("http_timeout", DEFAULT_CONFIG["http_timeout"])
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update({"User-Agent": f"hn-tui/{APP_VERSION}"})
        retries = Retry(
            total=LISTING_RETRY_TOTAL,
            backoff_factor=LISTING_RETRY_BACKOFF,
            status_forcelist=[429, 500, 502, 503, 504],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def get_front_page(self) -> List[Hit]:
        """Return front page hits ranked by points, then comment count."""
        params = {"tags": "front_page", "hitsPerPage": self.hits_per_page}
        try:
            logger.debug("Fetching front page from %s", HN_FRONT_PAGE_API)
            resp = self.session.get(HN_FRONT_PAGE_API, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Hacker News API request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise FetchError(f"Hacker News API returned {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise FetchError(f"Hacker News API returned invalid JSON: {e}") from e

        hits = parse_hits(data)
        logger.debug("Front page returned %d usable hits", len(hits))
        return hits


def parse_hits(data: Any) -> List[Hit]:
    raw_hits = data.get("hits") if isinstance(data, dict) else None
    if not isinstance(raw_hits, list):
        return []

    hits: List[Hit] = []
    for raw in raw_hits:
        if not isinstance(raw, dict):
            continue
        object_id = raw.get("objectID") or raw.get("objectId")
        if not object_id:
            continue
        hits.append(
            Hit(
                object_id=str(object_id),
                title=raw.get("title"),
                url=raw.get("url"),
                points=_count(raw.get("points")),
                num_comments=_count(raw.get("num_comments")),
            )
        )
    return sorted(hits, key=lambda h: (-h.points, -h.num_comments))


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value
