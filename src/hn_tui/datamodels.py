from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


# --- Data models ---
@dataclass
class Hit:
    object_id: str
    title: Optional[str] = None
    url: Optional[str] = None
    points: int = 0
    num_comments: int = 0


@dataclass
class ArticleRecord:
    id: int
    hn_id: str
    title: Optional[str]
    url: Optional[str]
    read_at: Optional[int]
    first_seen_at: int
    last_seen_at: int
    created_at: int
    updated_at: int


@dataclass
class ReadableArticle:
    title: str
    url: str
    text_content: str
    length: int
    byline: Optional[str] = None
    site_name: Optional[str] = None
    excerpt: Optional[str] = None


@dataclass
class ArticleContext:
    content: str
    details: Dict[str, Any] = field(default_factory=dict)
