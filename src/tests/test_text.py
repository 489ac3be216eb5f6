from __future__ import annotations

import pytest

from hn_tui.datamodels import Hit
from hn_tui.text import (
    comments_url,
    format_list_label,
    normalize_article_text,
    normalize_title,
)

SAMPLES = [
    "",
    "plain",
    "  padded  ",
    "a b",
    "line one   \nline two\t\n",
    "a\r\nb\r\n\r\n\r\n\r\nc",
    "a\n\n\n\n\n\nb",
    " \n \n \n x \n \n \n ",
    "  \n\n\n ",
    "tabs\t \t\n\n\n\nend\t",
]


@pytest.mark.parametrize("text", SAMPLES)
def test_normalize_is_idempotent(text):
    once = normalize_article_text(text)
    assert normalize_article_text(once) == once


def test_normalize_article_text():
    raw = " Title\r\n\r\nFirst   para.  \n\n\n\n\nSecond para.\t\n"
    assert normalize_article_text(raw) == "Title\n\nFirst   para.\n\nSecond para."


def test_normalize_keeps_single_blank_line():
    assert normalize_article_text("a\n\nb") == "a\n\nb"
    assert normalize_article_text("a\n \n \nb") == "a\n\nb"


@pytest.mark.parametrize(
    "title, expected",
    [
        ("  Hello \n  world ", "Hello world"),
        ("", "(untitled)"),
        ("   \t\n", "(untitled)"),
        (None, "(untitled)"),
    ],
)
def test_normalize_title(title, expected):
    assert normalize_title(title) == expected


def test_comments_url_encodes_id():
    assert comments_url(Hit(object_id="123")) == "https://news.ycombinator.com/item?id=123"
    assert comments_url(Hit(object_id="a b&c")) == (
        "https://news.ycombinator.com/item?id=a%20b%26c"
    )


def test_format_list_label():
    hit = Hit(object_id="1", title="Rust  in\nspace", url=None, points=120, num_comments=45)
    assert format_list_label(hit, False) == "  Rust in space (120 points, 45 comments)"
    assert format_list_label(hit, True) == "✓ Rust in space (120 points, 45 comments)"
