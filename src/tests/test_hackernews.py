from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from hn_tui.errors import FetchError
from hn_tui.sources.hackernews import HackerNewsSource, parse_hits


@pytest.fixture
def hn_source():
    return HackerNewsSource({"hits_per_page": 5})


def test_parse_hits_accepts_both_id_keys_and_sorts():
    data = {
        "hits": [
            {"objectID": "1", "title": "Low", "points": 10, "num_comments": 1, "url": "http://1"},
            {"objectId": "2", "title": "High", "points": 300, "num_comments": 2},
            {"title": "No id", "points": 999},
            {"objectID": "3", "title": "Tie", "points": 10, "num_comments": 50},
            {"objectID": "4", "title": None, "points": None, "num_comments": None},
        ]
    }

    hits = parse_hits(data)

    assert [h.object_id for h in hits] == ["2", "3", "1", "4"]
    assert hits[0].url is None
    assert hits[2].url == "http://1"
    assert hits[3].points == 0
    assert hits[3].num_comments == 0
    assert hits[3].title is None


@pytest.mark.parametrize("data", [{}, {"hits": None}, {"hits": "nope"}, []])
def test_parse_hits_without_list_returns_empty(data):
    assert parse_hits(data) == []


def test_get_front_page(hn_source):
    resp = MagicMock(status_code=200)
    resp.json.return_value = {"hits": [{"objectID": "42", "title": "A", "points": 1}]}
    with patch.object(hn_source.session, "get", return_value=resp) as mock_get:
        hits = hn_source.get_front_page()

    assert [h.object_id for h in hits] == ["42"]
    _, kwargs = mock_get.call_args
    assert kwargs["params"] == {"tags": "front_page", "hitsPerPage": 5}


def test_get_front_page_error_status(hn_source):
    with patch.object(hn_source.session, "get", return_value=MagicMock(status_code=503)):
        with pytest.raises(FetchError) as excinfo:
            hn_source.get_front_page()

    assert "503" in str(excinfo.value)


def test_get_front_page_transport_error(hn_source):
    with patch.object(hn_source.session, "get", side_effect=requests.Timeout("timed out")):
        with pytest.raises(FetchError) as excinfo:
            hn_source.get_front_page()

    assert "timed out" in str(excinfo.value)
