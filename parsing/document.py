"""Source file loading and tree construction.

Wraps ``BeautifulSoup`` so the rest of the pipeline gets a tree whose
attribute values are plain strings (``class`` is not split into a list)
and whose failures surface as ``ParseError`` / ``FileSystemError``.

Server-side blocks (``<% ... %>``, ``${...}``, ``#{...}``) and character
references are not HTML the parser should interpret, so ``TemplateMask``
swaps them for inert placeholders before parsing and puts the original
text back after serialization.
"""

from __future__ import annotations

import html
import re
import uuid
from pathlib import Path

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from pipeline.errors import FileSystemError, ParseError

# Longest alternatives first: a scriptlet may contain EL or entities.
_OPAQUE_RE = re.compile(
    r"<%.*?%>"
    r"|[$#]\{[^{}]*\}"
    r"|&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);",
    re.DOTALL,
)
_DOCTYPE_RE = re.compile(r"<!doctype[^>]*>", re.IGNORECASE)


def read_source(path: str | Path) -> str:
    """Read a source file as UTF-8 text."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileSystemError(str(path), str(exc)) from exc


def parse_document(
    text: str, *, filename: str = "<string>", parser: str = "html.parser"
) -> BeautifulSoup:
    """Build a mutable tree for *text*.

    The default ``html.parser`` builder keeps the document as written (no
    implied ``<html>``/``<body>``), which is what makes an untouched file
    re-serialize byte for byte.  ``lxml`` is faster but normalizes the
    document skeleton.

    Raises:
        ParseError: If the builder rejects the markup.
    """
    try:
        return BeautifulSoup(text, parser, multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        raise ParseError(filename, str(exc)) from exc


class TemplateMask:
    """Run-scoped table of opaque source fragments and their placeholders.

    Placeholders are lowercase letters and digits only, so the parser
    neither escapes nor lowercases them, and they keep the newlines of the
    fragment they stand for so line numbers in the masked text match the
    source.  The same fragment always gets the same placeholder.
    """

    def __init__(self, nonce: str | None = None) -> None:
        self.nonce = nonce or uuid.uuid4().hex[:8]
        self.fragments: list[str] = []
        self._index: dict[str, int] = {}
        self._placeholder_re = re.compile(rf"inlex{self.nonce}x(\d+)\n*x")

    def __len__(self) -> int:
        return len(self.fragments)

    def _placeholder(self, match: re.Match) -> str:
        fragment = match.group(0)
        index = self._index.get(fragment)
        if index is None:
            index = len(self.fragments)
            self.fragments.append(fragment)
            self._index[fragment] = index
        return f"inlex{self.nonce}x{index}" + "\n" * fragment.count("\n") + "x"

    def hide(self, text: str) -> str:
        return _OPAQUE_RE.sub(self._placeholder, text)

    def restore(self, text: str) -> str:
        """Put the original fragments back into *text*."""
        return self._placeholder_re.sub(
            lambda match: self.fragments[int(match.group(1))], text
        )

    def reveal(self, value: str) -> str:
        """Restore an attribute value and decode it the way a browser would."""
        return html.unescape(self.restore(value))


class SourceIndex:
    """Maps a tag's recorded source position back into the original text.

    Answers questions the tree cannot: whether a start tag was written
    self-closing (``<c:set var="x" />``) and, when *soup* is given before
    any rewriting, whether a tag is still as parsed so its start tag can
    be written back exactly as it appeared.
    """

    def __init__(self, text: str, soup: BeautifulSoup | None = None) -> None:
        self.text = text
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)
        # The tag is kept in the value so its id() cannot be reused.
        self._parsed: dict[int, tuple[Tag, str, dict]] = {}
        if soup is not None:
            for tag in soup.find_all(True):
                self._parsed[id(tag)] = (tag, tag.name, dict(tag.attrs))

    def offset_of(self, tag: Tag) -> int | None:
        line = getattr(tag, "sourceline", None)
        column = getattr(tag, "sourcepos", None)
        if line is None or column is None or not 0 < line <= len(self._line_starts):
            return None
        return self._line_starts[line - 1] + column

    def start_tag_text(self, tag: Tag) -> str | None:
        """Return the start tag of *tag* as written, quotes respected."""
        offset = self.offset_of(tag)
        if offset is None or not self.text.startswith("<", offset):
            return None
        quote = None
        for index in range(offset + 1, len(self.text)):
            char = self.text[index]
            if quote:
                if char == quote:
                    quote = None
            elif char in "\"'":
                quote = char
            elif char == ">":
                return self.text[offset : index + 1]
        return None

    def is_self_closing(self, tag: Tag) -> bool:
        """Return True if the start tag of *tag* ends with ``/>``."""
        raw = self.start_tag_text(tag)
        return raw is not None and raw[:-1].rstrip().endswith("/")

    def is_untouched(self, tag: Tag) -> bool:
        parsed = self._parsed.get(id(tag))
        if parsed is None:
            return False
        _, name, attrs = parsed
        return tag.name == name and tag.attrs == attrs

    def original_start_tag(self, tag: Tag) -> str | None:
        """The source start tag of *tag* if nothing about it changed since parsing."""
        if not self.is_untouched(tag):
            return None
        return self.start_tag_text(tag)

    def doctype_text(self) -> str | None:
        match = _DOCTYPE_RE.search(self.text)
        return match.group(0) if match else None
