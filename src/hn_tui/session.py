from __future__ import annotations

import enum
import logging
from typing import Dict, List, Optional, Set

from .config import DEFAULT_CONFIG
from .datamodels import Hit, ReadableArticle
from .errors import BrowserLaunchError, StoreError
from .extractor import build_article_context, context_title
from .host import ContextMessage, Host
from .store import ArticleStore
from .text import comments_url, format_list_label, normalize_title

logger = logging.getLogger("hn")


class LoaderState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"


class ContextLoader:
    """Single-flight guard: at most one article fetch at a time."""

    def __init__(self) -> None:
        self.state = LoaderState.IDLE
        self.hit: Optional[Hit] = None

    @property
    def busy(self) -> bool:
        return self.state is LoaderState.FETCHING

    def start(self, hit: Hit) -> bool:
        if self.busy:
            return False
        self.state = LoaderState.FETCHING
        self.hit = hit
        return True

    def finish(self) -> None:
        self.state = LoaderState.IDLE
        self.hit = None


class BrowsingSession:
    """State of one front page browsing session, independent of the UI."""

    def __init__(
        self,
        host: Host,
        store: ArticleStore,
        flush_threshold: int = DEFAULT_CONFIG["read_flush_threshold"],
    ):
        self.host = host
        self.store = store
        self.flush_threshold = max(1, flush_threshold)
        self.hits: List[Hit] = []
        self.read_ids: Set[str] = set()
        self.pending_reads: Dict[str, Hit] = {}
        self.loader = ContextLoader()
        self.closed = False

    # --- Listing ---
    def load(self, hits: List[Hit]) -> None:
        """Record ``hits`` as seen and look up which were already read.

        Store failures are reported as warnings; browsing goes on without
        read state.
        """
        self.hits = list(hits)
        self.read_ids = set()
        if not self.hits:
            return

        try:
            self.store.upsert_seen(self.hits)
        except StoreError as e:
            logger.warning("Persisting fetched hits failed: %s", e)
            self.host.notify(
                f"Could not persist fetched articles to {self.store.path}: {e}", "warning"
            )

        try:
            self.read_ids = self.store.lookup_read(h.object_id for h in self.hits)
        except StoreError as e:
            logger.warning("Loading read state failed: %s", e)
            self.host.notify(
                f"Could not load read-article state from {self.store.path}: {e}", "warning"
            )

    def is_read(self, hit: Hit) -> bool:
        return hit.object_id in self.read_ids

    def label(self, hit: Hit) -> str:
        return format_list_label(hit, self.is_read(hit))

    # --- Read tracking ---
    def mark_read(self, hit: Hit) -> None:
        self.pending_reads[hit.object_id] = hit
        self.read_ids.add(hit.object_id)
        if self.closed or len(self.pending_reads) >= self.flush_threshold:
            self.flush_pending_reads()

    def flush_pending_reads(self) -> bool:
        """Write buffered reads to the store. Returns False on failure."""
        if not self.pending_reads:
            return True

        try:
            self.store.upsert_read(list(self.pending_reads.values()))
        except StoreError as e:
            logger.warning("Persisting %d read hits failed: %s", len(self.pending_reads), e)
            self.host.notify(
                f"Could not persist read articles to {self.store.path}: {e}", "warning"
            )
            return False

        self.pending_reads.clear()
        return True

    # --- Browser ---
    def open_article(self, hit: Hit) -> None:
        if not hit.url:
            self.host.notify("This item has no article URL.", "warning")
            return
        try:
            self.host.open_url(hit.url)
        except BrowserLaunchError as e:
            self.host.notify(f"Could not open article: {e}", "error")
            return
        self.mark_read(hit)

    def open_comments(self, hit: Hit) -> None:
        try:
            self.host.open_url(comments_url(hit))
        except BrowserLaunchError as e:
            self.host.notify(f"Could not open comments: {e}", "error")

    # --- Article context ---
    def request_context(self, hit: Hit) -> bool:
        """Move the loader to FETCHING for ``hit``.

        Returns False, after telling the user why, when the hit has no URL or
        another fetch is still running.
        """
        if not hit.url:
            self.host.notify("This item has no article URL.", "warning")
            return False
        if not self.loader.start(hit):
            current = self.loader.hit
            self.host.notify(
                f"Already fetching: {normalize_title(current.title if current else None)}",
                "warning",
            )
            return False
        logger.debug("Fetching article for context: %s", hit.url)
        return True

    def complete_context(self, hit: Hit, article: ReadableArticle) -> None:
        self.loader.finish()
        if self.closed:
            logger.debug("Session closed, discarding article for %s", hit.object_id)
            return

        context = build_article_context(hit, article)
        self.host.send_message(ContextMessage.from_context(context))
        self.mark_read(hit)
        self.host.notify(f"Added to session context: {context_title(hit, article)}", "info")

    def fail_context(self, hit: Hit, error: BaseException) -> None:
        self.loader.finish()
        if self.closed:
            return
        logger.info("Adding %s to context failed: %s", hit.object_id, error)
        self.host.notify(f"Could not add article to context: {error}", "error")

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.flush_pending_reads()
