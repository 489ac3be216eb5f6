from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import asdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .datamodels import ArticleRecord, Hit
from .errors import CorruptStoreError, PersistError

logger = logging.getLogger("hn")

RECORD_FIELDS = (
    "id",
    "hn_id",
    "title",
    "url",
    "read_at",
    "first_seen_at",
    "last_seen_at",
    "created_at",
    "updated_at",
)


def empty_store() -> Dict[str, Any]:
    return {"next_id": 1, "articles": []}


class ArticleStore:
    """JSON file table of every Hacker News item ever seen.

    The whole file is read, mutated in memory and written back on each
    operation. Writes go to a temporary file next to the store and are moved
    into place with ``os.replace`` so a crash never leaves a torn file.
    Only one process is expected to write the file at a time.
    """

    def __init__(self, path: str, clock: Optional[Callable[[], float]] = None):
        self.path = path
        self.tmp_path = f"{path}.tmp"
        self._clock = clock or time.time
        self._ready = False

    def _now(self) -> int:
        return int(self._clock())

    def ensure_ready(self) -> None:
        """Create the store file if missing, else check that it parses.

        Success is remembered for the lifetime of this object; a failure is
        raised and the next call tries again.
        """
        if self._ready:
            return

        if os.path.exists(self.path):
            self._read()
        else:
            logger.info("Store not found at %s, creating empty store.", self.path)
            self._write(empty_store())
        self._ready = True

    def upsert_seen(self, hits: Iterable[Hit]) -> None:
        """Record that ``hits`` appeared in a front page fetch."""
        self._upsert(list(hits), mark_read=False)

    def upsert_read(self, hits: Iterable[Hit]) -> None:
        """Record that ``hits`` were read. The first read time always wins."""
        self._upsert(list(hits), mark_read=True)

    def lookup_read(self, candidate_ids: Iterable[str]) -> Set[str]:
        """Return the ids from ``candidate_ids`` that have been read."""
        candidates = set(candidate_ids)
        if not candidates:
            return set()

        self.ensure_ready()
        store = self._read()
        return {
            article["hn_id"]
            for article in store["articles"]
            if article.get("read_at") is not None and article.get("hn_id") in candidates
        }

    def records(self) -> List[ArticleRecord]:
        """Return a read-only snapshot of every stored record, in insertion order.

        The records are copies; changing them does not touch the store file.
        """
        self.ensure_ready()
        store = self._read()
        return [
            ArticleRecord(**{name: article.get(name) for name in RECORD_FIELDS})
            for article in store["articles"]
        ]

    def _upsert(self, hits: List[Hit], mark_read: bool) -> None:
        if not hits:
            return

        self.ensure_ready()
        store = self._read()
        now = self._now()
        existing_by_hn_id = {article["hn_id"]: article for article in store["articles"]}

        created = 0
        for hit in hits:
            existing = existing_by_hn_id.get(hit.object_id)
            if existing is not None:
                existing["title"] = hit.title
                existing["url"] = hit.url
                if mark_read and existing.get("read_at") is None:
                    existing["read_at"] = now
                existing["last_seen_at"] = now
                existing["updated_at"] = now
                continue

            record = ArticleRecord(
                id=store["next_id"],
                hn_id=hit.object_id,
                title=hit.title,
                url=hit.url,
                read_at=now if mark_read else None,
                first_seen_at=now,
                last_seen_at=now,
                created_at=now,
                updated_at=now,
            )
            article = asdict(record)
            store["articles"].append(article)
            existing_by_hn_id[hit.object_id] = article
            store["next_id"] += 1
            created += 1

        self._write(store)
        logger.debug(
            "Upserted %d hits (%d new, read=%s) into %s",
            len(hits),
            created,
            mark_read,
            self.path,
        )

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return empty_store()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read().strip()
        except (IOError, OSError) as e:
            raise PersistError(f"Failed to read {self.path}: {e}") from e

        if not raw:
            return empty_store()

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStoreError(f"Invalid JSON in {self.path}: {e}") from e

        if (
            not isinstance(parsed, dict)
            or not isinstance(parsed.get("articles"), list)
            or not isinstance(parsed.get("next_id"), int)
            or isinstance(parsed.get("next_id"), bool)
        ):
            raise CorruptStoreError(f"Invalid JSON store format in {self.path}")

        for index, article in enumerate(parsed["articles"]):
            if not isinstance(article, dict) or not isinstance(article.get("hn_id"), str):
                raise CorruptStoreError(f"Invalid article entry #{index} in {self.path}")

        return {"next_id": parsed["next_id"], "articles": parsed["articles"]}

    def _write(self, store: Dict[str, Any]) -> None:
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.tmp_path, "w", encoding="utf-8") as f:
                f.write(json.dumps(store, indent=2) + "\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(self.tmp_path, self.path)
        except (IOError, OSError) as e:
            raise PersistError(f"Failed to write {self.path}: {e}") from e
