import os
import sys

import pytest

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, ROOT_DIR)

from mime_text.exceptions import MalformedHTMLError
from mime_text.html_cleaner import flatten_html, node_text, parse_html


@pytest.mark.parametrize("markup,expected", [
    ("<p>Hi <script>evil()</script>there</p>", "Hi there"),
    ("<style>p { color: red }</style><p>Visible</p>", "Visible"),
    ("<p>A<b>B</b></p>C", "ABC"),
    ("<!-- hidden --><p>shown</p>", "shown"),
    ("<!DOCTYPE html><html><head><title>T</title></head><body>x</body></html>", "Tx"),
    ("<ul>\n<li>one</li>\n<li>two</li>\n</ul>", "\none\ntwo\n"),
    ("plain words", "plain words"),
    ("", ""),
])
def test_flatten_html(markup, expected):
    result = flatten_html(markup)
    assert result.converted
    assert result.error is None
    assert result.text == expected


def test_script_inside_nested_elements_skipped():
    markup = "<div><span>a<script>var x = 1;</script></span><div><style>.c{}</style>b</div></div>"
    assert node_text(parse_html(markup)) == "ab"


def test_entities_are_unescaped():
    assert flatten_html("<p>Fish &amp; chips</p>").text == "Fish & chips"


def test_parse_failure_returns_markup(monkeypatch):
    import mime_text.html_cleaner as html_cleaner

    def broken(*args, **kwargs):
        raise AssertionError("bad markup")

    monkeypatch.setattr(html_cleaner, "BeautifulSoup", broken)
    result = flatten_html("<p>raw</p>")
    assert result.text == "<p>raw</p>"
    assert not result.converted
    assert isinstance(result.error, MalformedHTMLError)


def test_unknown_parser_raises():
    with pytest.raises(MalformedHTMLError):
        parse_html("<p>x</p>", parser="no-such-parser")
