"""Streaming pre-scan for non-standard tags.

Runs before any tree is built: the whole run's tag resolution has to
finish before the first file is transformed, so this pass only listens to
start-tag events and never keeps a document in memory.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from html.parser import HTMLParser

from parsing.vocabulary import is_standard_tag
from pipeline.errors import LineLocationNotFound, ParseError

logger = logging.getLogger("inlex")

UNKNOWN_LINE = "??"

_TAG_NAME_RE = re.compile(r"<\s*([^\s/>]+)")


class StartTagScanner(HTMLParser):
    """Collect start-tag names in document order, keeping source casing."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.tags: list[tuple[str, str]] = []

    def handle_starttag(self, tag, attrs):  # noqa: ANN001
        raw = self.get_starttag_text() or ""
        match = _TAG_NAME_RE.match(raw)
        spelling = match.group(1) if match else tag
        self.tags.append((tag.lower(), spelling))


def scan_start_tags(text: str, filename: str = "<string>") -> list[tuple[str, str]]:
    """Return ``(name, spelling)`` for every start tag in *text*.

    Raises:
        ParseError: If the tokenizer gives up on the input.
    """
    scanner = StartTagScanner()
    try:
        scanner.feed(text)
        scanner.close()
    except (AssertionError, ValueError) as exc:
        raise ParseError(filename, str(exc)) from exc
    return scanner.tags


def iter_non_standard(text: str, filename: str = "<string>") -> Iterator[tuple[str, str]]:
    """Yield ``(name, spelling)`` for start tags outside the standard set."""
    for name, spelling in scan_start_tags(text, filename):
        if not is_standard_tag(name):
            yield name, spelling


def locate_line(text: str, tag: str, filename: str = "<string>") -> int:
    """Return the 1-based line of the first ``<tag`` in *text*.

    Raises:
        LineLocationNotFound: If ``<tag`` does not occur literally.
    """
    match = re.search("<" + re.escape(tag), text, flags=re.IGNORECASE)
    if match is None:
        raise LineLocationNotFound(filename, tag)
    return text.count("\n", 0, match.start()) + 1


def first_line_of(text: str, tag: str, filename: str = "<string>") -> str:
    """Like ``locate_line`` but degrade to ``"??"`` instead of raising."""
    try:
        return str(locate_line(text, tag, filename))
    except LineLocationNotFound as exc:
        logger.warning("%s", exc, extra={"file": filename, "tag": tag})
        return UNKNOWN_LINE
