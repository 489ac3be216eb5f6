from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

from .config import HN_ITEM_URL, UNTITLED
from .datamodels import Hit

_TRAILING_SPACE = re.compile(r"[ \t]+\n")
_BLANK_RUN = re.compile(r"\n{3,}")
_WHITESPACE = re.compile(r"\s+")


def normalize_article_text(text: str) -> str:
    """Clean extracted article text.

    Non-breaking spaces become plain spaces, carriage returns are dropped,
    trailing blanks before a newline are removed and runs of blank lines
    collapse to a single blank line. Applying it twice is a no-op.
    """
    text = text.replace("\u00a0", " ").replace("\r", "")
    text = _TRAILING_SPACE.sub("\n", text)
    text = _BLANK_RUN.sub("\n\n", text)
    return text.strip()


def normalize_title(title: Optional[str]) -> str:
    normalized = _WHITESPACE.sub(" ", title or "").strip()
    return normalized or UNTITLED


def comments_url(hit: Hit) -> str:
    return HN_ITEM_URL.format(id=quote(hit.object_id, safe=""))


def format_list_label(hit: Hit, is_read: bool) -> str:
    marker = "✓ " if is_read else "  "
    return (
        f"{marker}{normalize_title(hit.title)} "
        f"({hit.points} points, {hit.num_comments} comments)"
    )
