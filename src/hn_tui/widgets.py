from __future__ import annotations

from datetime import datetime

from rich.text import Text
from textual.app import ComposeResult
from textual.reactive import reactive
from textual.widgets import ListItem, Static

from .config import UNTITLED
from .datamodels import Hit
from .host import ContextMessage


# --- UI Widgets ---
class HeadlineItem(ListItem):
    def __init__(self, hit: Hit, label: str):
        super().__init__()
        self.hit = hit
        self.label_text = label

    def compose(self) -> ComposeResult:
        yield Static(self.label_text, markup=False, classes="headline-title")

    def set_label(self, label: str, read: bool) -> None:
        self.label_text = label
        self.set_class(read, "read")
        if self.is_mounted:
            self.query_one(".headline-title", Static).update(label)


class ContextMessageItem(Static):
    """One article that was added to the session context."""

    expanded = reactive(False)

    def __init__(self, message: ContextMessage):
        super().__init__()
        self.context_message = message

    def on_mount(self) -> None:
        self.update(self.render_message())

    def watch_expanded(self, expanded: bool) -> None:
        if self.is_mounted:
            self.update(self.render_message())

    def render_message(self) -> Text:
        details = self.context_message.details
        text = Text(f"[{details.get('title') or UNTITLED}]", style="bold")
        char_count = details.get("char_count")
        if isinstance(char_count, int):
            text.append(f" ({char_count:,} chars)", style="dim")
        if not self.expanded:
            return text

        for label, key in (("URL", "url"), ("Site", "site_name"), ("Byline", "byline")):
            if details.get(key):
                text.append(f"\n{label}: {details[key]}", style="italic")
        fetched_at = details.get("fetched_at")
        if fetched_at:
            try:
                fetched = datetime.fromisoformat(fetched_at).astimezone()
                fetched_at = fetched.strftime("%Y-%m-%d %H:%M:%S")
            except ValueError:
                pass
            text.append(f"\nFetched: {fetched_at}", style="dim")
        return text


class StatusBar(Static):
    loading_status = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def set_keybindings(self, hint: str) -> None:
        """Set the keybinding hint text."""
        self.keybinding_hint = hint

    def update_display(self) -> None:
        """Update the status bar display."""
        if self.loading_status:
            # The spinner replaces the key hints while a fetch is running.
            self.update(self.loading_status)
        else:
            self.update(self.keybinding_hint)

    def watch_loading_status(self, loading_status: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()


class ErrorMessage(Static):
    def __init__(self, message: str):
        super().__init__(Text(message, style="bold red"))
