from __future__ import annotations

from bs4 import BeautifulSoup, Comment

from text_linkify.extractor import extract_text, is_text_node


def test_text_node_returns_raw_value() -> None:
    soup = BeautifulSoup("<p>  hello  </p>", "lxml")

    assert extract_text(soup.p.string) == "  hello  "


def test_element_text_skips_scripts_and_renders_breaks() -> None:
    soup = BeautifulSoup(
        "<div>a<br>b<script>var x = 1;</script><style>p {}</style><noscript>n</noscript>c</div>",
        "lxml",
    )

    assert extract_text(soup.div) == "a\nbc"


def test_script_element_is_empty() -> None:
    soup = BeautifulSoup("<div><script>alert(1)</script></div>", "lxml")

    assert extract_text(soup.script) == ""


def test_comments_are_not_text() -> None:
    soup = BeautifulSoup("<p>a<!-- pwd: abcd -->b</p>", "lxml")
    comment = soup.p.find(string=lambda s: isinstance(s, Comment))

    assert not is_text_node(comment)
    assert extract_text(comment) == ""
    assert extract_text(soup.p) == "ab"


def test_none_is_empty() -> None:
    assert extract_text(None) == ""
