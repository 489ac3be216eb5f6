from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

from .config import ARTICLE_CONTEXT_MESSAGE_TYPE
from .datamodels import ArticleContext, Hit
from .errors import BrowserLaunchError

logger = logging.getLogger("hn")


@dataclass
class ContextMessage:
    content: str
    details: Dict[str, Any] = field(default_factory=dict)
    custom_type: str = ARTICLE_CONTEXT_MESSAGE_TYPE
    display: bool = True

    @classmethod
    def from_context(cls, context: ArticleContext) -> "ContextMessage":
        return cls(content=context.content, details=dict(context.details))


class Host(Protocol):
    """Capabilities the browsing session needs from whatever is hosting it."""

    def fetch_listing(self) -> List[Hit]:
        ...

    def open_url(self, url: str) -> None:
        ...

    def send_message(self, message: ContextMessage) -> None:
        ...

    def notify(self, text: str, level: str = "info") -> None:
        ...


def open_in_browser(url: str) -> None:
    """Open ``url`` in the system browser or raise BrowserLaunchError."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise BrowserLaunchError(str(e) or f"Failed to open {url}") from e
    if not opened:
        raise BrowserLaunchError(f"No browser available to open {url}")
    logger.debug("Opened %s in browser", url)
