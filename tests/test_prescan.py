"""Tests for parsing/prescan.py — start-tag events and line location."""

import pytest

from parsing.prescan import (
    UNKNOWN_LINE,
    first_line_of,
    iter_non_standard,
    locate_line,
    scan_start_tags,
)
from pipeline.errors import LineLocationNotFound


def test_scan_keeps_source_spelling():
    tags = scan_start_tags("<DIV><c:forEach items='x'></c:forEach></DIV>")
    assert tags == [("div", "DIV"), ("c:foreach", "c:forEach")]


def test_scan_sees_self_closing_tags():
    assert scan_start_tags('<c:set var="a" />') == [("c:set", "c:set")]


def test_iter_non_standard_skips_vocabulary():
    text = "<html><body><center><jsp:include page='a.jsp'/><p>x</p></center></body></html>"
    assert list(iter_non_standard(text)) == [("jsp:include", "jsp:include")]


def test_comments_and_doctype_are_not_tags():
    assert scan_start_tags("<!DOCTYPE html><!-- <foo> -->") == []


def test_locate_line_counts_newlines():
    assert locate_line("<p>\n\n  <foo>", "foo") == 3


def test_locate_line_is_case_insensitive():
    assert locate_line("a\n<C:IF test='x'>", "c:if") == 2


def test_locate_line_missing_raises():
    with pytest.raises(LineLocationNotFound):
        locate_line("<p>nothing</p>", "foo", "a.html")


def test_first_line_of_degrades_to_placeholder(caplog):
    assert first_line_of("<p>nothing</p>", "foo", "a.html") == UNKNOWN_LINE
    assert "could not locate <foo in a.html" in caplog.text
