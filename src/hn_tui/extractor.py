from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import requests
from bs4 import BeautifulSoup, UnicodeDammit
from lxml import etree
from lxml import html as lxml_html
from readability import Document
from readability.readability import Unparseable

from .config import ARTICLE_REQUEST_HEADERS, DEFAULT_CONFIG, UNTITLED
from .datamodels import ArticleContext, Hit, ReadableArticle
from .errors import FetchError, NoContentError
from .text import comments_url, normalize_article_text, normalize_title

logger = logging.getLogger("hn")

BYLINE_META = ("author", "article:author", "dc.creator", "byl")
SITE_NAME_META = ("og:site_name", "application-name")
EXCERPT_META = ("description", "og:description", "twitter:description")
READABILITY_NO_TITLE = "[no-title]"


class ArticleExtractor:
    """Fetch an arbitrary article URL and turn it into clean text."""

    def __init__(
        self,
        timeout: float = DEFAULT_CONFIG["http_timeout"],
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(ARTICLE_REQUEST_HEADERS)
        return s

    def _fetch_html(self, url: str) -> Tuple[str, str]:
        """Return the decoded body and the final URL after redirects."""
        try:
            logger.debug("Fetching article %s", url)
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise FetchError(f"Article request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise FetchError(f"Article request returned {resp.status_code}")

        known_encodings = []
        if resp.encoding and "charset" in resp.headers.get("Content-Type", "").lower():
            known_encodings.append(resp.encoding)
        markup = (
            UnicodeDammit(
                resp.content, known_definite_encodings=known_encodings, is_html=True
            ).unicode_markup
            or ""
        )
        resolved_url = resp.url or url
        logger.debug("Fetched %s (%d chars) from %s", url, len(markup), resolved_url)
        return markup, resolved_url

    def fetch_readable_article(self, url: str) -> ReadableArticle:
        markup, resolved_url = self._fetch_html(url)
        return extract_readable_article(markup, resolved_url)


def extract_readable_article(markup: str, url: str) -> ReadableArticle:
    """Extract the main text of ``markup``.

    Readability runs over an unmutated parse of the page. A second,
    independent parse with scripts and styles removed supplies the raw body
    text used when readability finds nothing.
    """
    primary = _parse_primary(markup)
    parsed = _readability_parse(markup, primary, url)

    fallback = BeautifulSoup(markup, "lxml")
    for node in fallback.find_all(["script", "style"]):
        node.decompose()
    fallback_text = normalize_article_text(fallback.body.get_text() if fallback.body else "")

    text_content = normalize_article_text(parsed["text_content"]) if parsed else ""
    if not text_content:
        if parsed:
            logger.debug("Readability text empty for %s, using raw body text", url)
        text_content = fallback_text
    if not text_content:
        raise NoContentError("Article had no readable text content")

    document_title = fallback.title.get_text() if fallback.title else None
    title = normalize_title((parsed and parsed["title"]) or document_title)

    return ReadableArticle(
        title=title,
        url=url,
        byline=_clean(parsed and parsed["byline"]),
        site_name=_clean(parsed and parsed["site_name"]),
        excerpt=_clean(parsed and parsed["excerpt"]),
        text_content=text_content,
        length=parsed["length"] if parsed else len(text_content),
    )


def build_article_context(hit: Hit, article: ReadableArticle) -> ArticleContext:
    """Format an extracted article as a plain-text context document."""
    title = context_title(hit, article)
    lines = [
        f"Title: {title}",
        f"URL: {article.url}",
        f"HN Comments: {comments_url(hit)}",
    ]
    if article.site_name:
        lines.append(f"Site: {article.site_name}")
    if article.byline:
        lines.append(f"Byline: {article.byline}")
    if article.excerpt:
        lines.append(f"Excerpt: {article.excerpt}")
    lines.extend(["", "Article Text:", article.text_content])

    return ArticleContext(
        content="\n".join(lines),
        details={
            "hn_id": hit.object_id,
            "title": title,
            "url": article.url,
            "site_name": article.site_name,
            "byline": article.byline,
            "length": article.length,
            "char_count": len(article.text_content),
            "fetched_at": datetime.now(timezone.utc).isoformat(),
        },
    )


def context_title(hit: Hit, article: ReadableArticle) -> str:
    if article.title == UNTITLED:
        return normalize_title(hit.title)
    return article.title


def _parse_primary(markup: str) -> Optional[lxml_html.HtmlElement]:
    # Parsed from UTF-8 bytes: lxml rejects str input that carries an XML
    # encoding declaration.
    try:
        return lxml_html.document_fromstring(
            markup.encode("utf-8"), parser=lxml_html.HTMLParser(encoding="utf-8")
        )
    except (etree.ParserError, ValueError) as e:
        logger.debug("Could not parse document: %s", e)
        return None


def _readability_parse(
    markup: str, primary: Optional[lxml_html.HtmlElement], url: str
) -> Optional[Dict[str, Any]]:
    """Run readability over the page, or return None if it finds nothing."""
    try:
        doc = Document(markup, url=url)
        summary = doc.summary(html_partial=True)
        title = doc.short_title()
    except (Unparseable, etree.ParserError, ValueError) as e:
        logger.debug("Readability could not parse %s: %s", url, e)
        return None

    content = BeautifulSoup(summary, "lxml")
    text_content = content.get_text()
    if not text_content.strip():
        return None

    excerpt = _meta_content(primary, EXCERPT_META)
    if not excerpt:
        first_paragraph = content.find("p")
        excerpt = first_paragraph.get_text(" ", strip=True) if first_paragraph else None

    return {
        "title": None if title == READABILITY_NO_TITLE else title,
        "byline": _meta_content(primary, BYLINE_META),
        "site_name": _meta_content(primary, SITE_NAME_META),
        "excerpt": excerpt,
        "text_content": text_content,
        "length": len(text_content),
    }


def _meta_content(
    tree: Optional[lxml_html.HtmlElement], names: Tuple[str, ...]
) -> Optional[str]:
    if tree is None:
        return None
    for name in names:
        values = tree.xpath(
            "//meta[translate(@name, 'ABCDEFGHIJKLMNOPQRSTUVWXYZ', "
            "'abcdefghijklmnopqrstuvwxyz')=$name or @property=$name]/@content",
            name=name,
        )
        for value in values:
            if value and value.strip():
                return value.strip()
    return None


def _clean(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip() or None
