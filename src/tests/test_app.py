from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from textual.worker import WorkerState

from hn_tui.app import AppHost, HackerNewsApp
from hn_tui.config import SPINNER_INTERVAL
from hn_tui.datamodels import Hit
from hn_tui.errors import BrowserLaunchError, FetchError
from hn_tui.host import ContextMessage, open_in_browser
from hn_tui.main import write_context_messages
from hn_tui.store import ArticleStore


def test_app_host_maps_notification_levels():
    app = MagicMock()
    host = AppHost(app)

    host.notify("hello", "info")
    host.notify("careful", "warning")
    host.notify("broken", "error")

    severities = [c.kwargs["severity"] for c in app.notify.call_args_list]
    assert severities == ["information", "warning", "error"]


def test_app_host_delegates_listing_and_messages():
    app = MagicMock()
    app.source.get_front_page.return_value = ["hit"]
    host = AppHost(app)
    message = ContextMessage(content="text")

    assert host.fetch_listing() == ["hit"]
    host.send_message(message)

    app.add_context_message.assert_called_once_with(message)


def test_open_in_browser_raises_when_no_browser():
    with patch("hn_tui.host.webbrowser.open", return_value=False):
        with pytest.raises(BrowserLaunchError):
            open_in_browser("https://example.com")


def test_write_context_messages_to_stdout(capsys):
    write_context_messages(
        [ContextMessage(content="Title: A"), ContextMessage(content="Title: B")], None
    )

    assert capsys.readouterr().out == "Title: A\n\nTitle: B\n"


def test_write_context_messages_to_file(tmp_path):
    output = tmp_path / "context.jsonl"
    write_context_messages([ContextMessage(content="Title: A", details={"hn_id": "1"})], str(output))

    lines = output.read_text().splitlines()
    assert json.loads(lines[0]) == {
        "content": "Title: A",
        "details": {"hn_id": "1"},
        "custom_type": "hn-article-context",
        "display": True,
    }


@pytest.fixture
def app(tmp_path):
    app = HackerNewsApp(
        config={},
        store=ArticleStore(str(tmp_path / "db.json")),
        source=MagicMock(),
        extractor=MagicMock(),
    )
    status_bar = MagicMock(loading_status="")
    with patch.object(app, "query_one", return_value=status_bar), patch.object(
        app, "query", return_value=[]
    ), patch.object(app, "set_interval") as set_interval, patch.object(
        app, "run_worker"
    ), patch.object(app, "notify"):
        app.status_bar = status_bar
        app.timer = set_interval.return_value
        yield app


def test_spinner_runs_only_while_fetching(app):
    hit = Hit(object_id="1", title="First", url="https://one.example")
    app.set_interval.assert_not_called()

    with patch.object(app, "_selected_hit", return_value=hit):
        app.action_add_context()

    app.set_interval.assert_called_once_with(SPINNER_INTERVAL, app._tick_spinner)
    assert app.status_bar.loading_status.endswith("fetching article and adding to session context...")
    assert app.run_worker.call_args.kwargs["name"] == "context_loader"

    event = MagicMock(state=WorkerState.ERROR)
    event.worker.name = "context_loader"
    event.worker.error = FetchError("Article request returned 500")
    app.on_worker_state_changed(event)

    app.timer.stop.assert_called_once_with()
    assert app.status_bar.loading_status == ""
    assert not app.session.loader.busy


def test_rejected_context_request_does_not_start_spinner(app):
    hit = Hit(object_id="2", title="No link", url=None)

    with patch.object(app, "_selected_hit", return_value=hit):
        app.action_add_context()

    app.set_interval.assert_not_called()
    app.run_worker.assert_not_called()
