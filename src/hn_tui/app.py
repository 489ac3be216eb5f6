from __future__ import annotations

import logging
from typing import Any, List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.widgets import Header, ListView, LoadingIndicator, Static
from textual.timer import Timer
from textual.worker import Worker, WorkerState

from .config import DEFAULT_CONFIG, SPINNER_FRAMES, SPINNER_INTERVAL, get_store_path
from .datamodels import Hit
from .extractor import ArticleExtractor
from .host import ContextMessage, open_in_browser
from .session import BrowsingSession
from .sources.hackernews import HackerNewsSource
from .store import ArticleStore
from .widgets import ContextMessageItem, ErrorMessage, HeadlineItem, StatusBar

logger = logging.getLogger("hn")

SEVERITIES = {"info": "information", "warning": "warning", "error": "error"}

KEYBINDING_HINT = " • ".join(
    [
        "[b]↑↓/j/k[/] navigate",
        "[b]enter/a[/] article",
        "[b]x[/] add to context",
        "[b]c[/] comments",
        "[b]e[/] expand context",
        "[b]esc[/] close",
    ]
)


class AppHost:
    """Host capabilities backed by the running Textual app."""

    def __init__(self, app: "HackerNewsApp"):
        self.app = app

    def fetch_listing(self) -> List[Hit]:
        return self.app.source.get_front_page()

    def open_url(self, url: str) -> None:
        open_in_browser(url)

    def send_message(self, message: ContextMessage) -> None:
        self.app.add_context_message(message)

    def notify(self, text: str, level: str = "info") -> None:
        self.app.notify(text, severity=SEVERITIES.get(level, "information"))


class HackerNewsApp(App):
    TITLE = "Hacker News"
    SUB_TITLE = "Front page"

    CSS = """
    .pane-title {
        text-style: bold;
        color: $accent;
        padding: 0 1;
    }
    #headlines-list {
        height: 1fr;
    }
    HeadlineItem.read .headline-title {
        color: $text-muted;
    }
    #context-panel {
        height: auto;
        max-height: 12;
        border-top: solid $accent;
        display: none;
    }
    #context-panel.has-messages {
        display: block;
    }
    StatusBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    BINDINGS = [
        Binding("escape,q", "close", "Close"),
        Binding("a", "open_article", "Article"),
        Binding("x", "add_context", "Add to context"),
        Binding("c", "open_comments", "Comments"),
        Binding("e", "toggle_context", "Expand context"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        theme: Optional[str] = None,
        store: Optional[ArticleStore] = None,
        source: Optional[HackerNewsSource] = None,
        extractor: Optional[ArticleExtractor] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.config = config or {}
        self._theme_name = theme or self.config.get("theme") or DEFAULT_CONFIG["theme"]
        self.source = source or HackerNewsSource(self.config)
        self.extractor = extractor or ArticleExtractor(
            timeout=self.config.get("http_timeout", DEFAULT_CONFIG["http_timeout"])
        )
        self.host = AppHost(self)
        self.session = BrowsingSession(
            self.host,
            store or ArticleStore(get_store_path()),
            flush_threshold=int(
                self.config.get("read_flush_threshold", DEFAULT_CONFIG["read_flush_threshold"])
            ),
        )
        self.sent_messages: List[ContextMessage] = []
        self._spinner_frame = 0
        self._spinner_timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main"):
            yield Static("Hacker News", classes="pane-title")
            yield ListView(id="headlines-list")
            yield VerticalScroll(id="context-panel")
        yield StatusBar()

    def on_mount(self) -> None:
        if self._theme_name in self.available_themes:
            self.theme = self._theme_name
        else:
            logger.warning("Theme '%s' not found, keeping default.", self._theme_name)

        self.query_one(StatusBar).set_keybindings(KEYBINDING_HINT)
        headlines_list = self.query_one("#headlines-list", ListView)
        headlines_list.mount(LoadingIndicator())
        headlines_list.focus()

        self.run_worker(
            self.host.fetch_listing, name="listing_loader", thread=True, exit_on_error=False
        )

    # --- Workers ---
    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        name = getattr(event.worker, "name", None)
        if name == "listing_loader":
            if event.state is WorkerState.SUCCESS:
                self._handle_listing_loaded(event.worker.result or [])
            elif event.state is WorkerState.ERROR:
                self._handle_listing_error(event.worker.error)
        elif name == "context_loader":
            hit = self.session.loader.hit
            if hit is None:
                return
            if event.state is WorkerState.SUCCESS:
                self.session.complete_context(hit, event.worker.result)
            elif event.state is WorkerState.ERROR:
                self.session.fail_context(hit, event.worker.error)
            elif event.state is WorkerState.CANCELLED:
                self.session.loader.finish()
            else:
                return
            self._stop_spinner()
            self._refresh_labels()

    def _clear_loading(self) -> ListView:
        headlines_list = self.query_one("#headlines-list", ListView)
        try:
            headlines_list.query_one(LoadingIndicator).remove()
        except Exception:
            pass
        return headlines_list

    def _handle_listing_loaded(self, hits: List[Hit]) -> None:
        headlines_list = self._clear_loading()
        if not hits:
            self.host.notify("Hacker News front page returned no items.", "warning")
            headlines_list.mount(ErrorMessage("No front page items."))
            return

        self.session.load(hits)
        for hit in hits:
            item = HeadlineItem(hit, self.session.label(hit))
            item.set_class(self.session.is_read(hit), "read")
            headlines_list.append(item)
        headlines_list.index = 0

    def _handle_listing_error(self, error: Optional[BaseException]) -> None:
        headlines_list = self._clear_loading()
        logger.error("Front page worker failed: %s", error)
        message = f"Failed to load Hacker News front page: {error or 'Unknown error'}"
        self.host.notify(message, "error")
        headlines_list.mount(ErrorMessage(message))

    # --- Rendering helpers ---
    def _selected_hit(self) -> Optional[Hit]:
        item = self.query_one("#headlines-list", ListView).highlighted_child
        if isinstance(item, HeadlineItem):
            return item.hit
        return None

    def _refresh_labels(self) -> None:
        for item in self.query(HeadlineItem):
            item.set_label(self.session.label(item.hit), self.session.is_read(item.hit))

    def _start_spinner(self) -> None:
        self._stop_spinner()
        self._tick_spinner()
        self._spinner_timer = self.set_interval(SPINNER_INTERVAL, self._tick_spinner)

    def _stop_spinner(self) -> None:
        if self._spinner_timer is not None:
            self._spinner_timer.stop()
            self._spinner_timer = None
        self._spinner_frame = 0
        self.query_one(StatusBar).loading_status = ""

    def _tick_spinner(self) -> None:
        status_bar = self.query_one(StatusBar)
        frame = SPINNER_FRAMES[self._spinner_frame % len(SPINNER_FRAMES)]
        self._spinner_frame += 1
        status_bar.loading_status = f"{frame} fetching article and adding to session context..."

    def add_context_message(self, message: ContextMessage) -> None:
        self.sent_messages.append(message)
        panel = self.query_one("#context-panel", VerticalScroll)
        item = ContextMessageItem(message)
        item.expanded = panel.has_class("expanded")
        panel.mount(item)
        panel.add_class("has-messages")
        panel.scroll_end(animate=False)

    # --- Actions ---
    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, HeadlineItem):
            self.session.open_article(event.item.hit)
            self._refresh_labels()

    def action_open_article(self) -> None:
        hit = self._selected_hit()
        if hit:
            self.session.open_article(hit)
            self._refresh_labels()

    def action_open_comments(self) -> None:
        hit = self._selected_hit()
        if hit:
            self.session.open_comments(hit)

    def action_add_context(self) -> None:
        hit = self._selected_hit()
        if not hit or not self.session.request_context(hit):
            return
        url = hit.url
        self._start_spinner()
        self.run_worker(
            lambda: self.extractor.fetch_readable_article(url),
            name="context_loader",
            thread=True,
            exit_on_error=False,
        )

    def action_toggle_context(self) -> None:
        panel = self.query_one("#context-panel", VerticalScroll)
        panel.toggle_class("expanded")
        expanded = panel.has_class("expanded")
        for item in panel.query(ContextMessageItem):
            item.expanded = expanded

    def _move_cursor(self, step: int) -> None:
        headlines_list = self.query_one("#headlines-list", ListView)
        count = len(headlines_list.children)
        if not count or not self.session.hits:
            return
        current = headlines_list.index or 0
        headlines_list.index = (current + step) % count

    def action_cursor_down(self) -> None:
        self._move_cursor(1)

    def action_cursor_up(self) -> None:
        self._move_cursor(-1)

    def action_close(self) -> None:
        self.session.close()
        self.exit(self.sent_messages)

    def action_quit(self) -> None:
        self.action_close()
