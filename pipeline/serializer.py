"""Tree -> text encoder with per-node overrides.

Everything not touched upstream is written back the way it was parsed:
attribute order, comments, doctype and raw ``script`` text are kept, and
with a ``SourceIndex`` the start tags of unchanged elements and the
doctype are copied from the source text.  Two kinds of node are
overridden:

- ``<style>`` elements are dropped; their rules already went to the
  stylesheet during the transform pass.
- non-standard elements open with their source spelling and close with
  the operator's closing-tag template (or not at all).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bs4 import NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import Doctype
from bs4.formatter import HTMLFormatter

from models.records import NO_CLOSING_TAG
from parsing.vocabulary import VOID_TAGS

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from parsing.document import SourceIndex
    from tags.resolver import NonStandardTagResolver

SUPPRESSED_TAGS = {"style"}

FORMATTER = HTMLFormatter.REGISTRY["minimal"]


class Serializer:
    """Encode a (mutated) tree back to markup text."""

    def __init__(self, resolver: NonStandardTagResolver | None = None) -> None:
        self.resolver = resolver

    def serialize(self, soup: BeautifulSoup, source: SourceIndex | None = None) -> str:
        parts: list[str] = []
        for node in soup.contents:
            self._emit(node, parts, source)
        return "".join(parts)

    # ------------------------------------------------------------------

    def _emit(self, node, parts: list[str], source: SourceIndex | None) -> None:  # noqa: ANN001
        if isinstance(node, Doctype):
            parts.append(_doctype(node, source))
            return
        if isinstance(node, NavigableString):
            parts.append(node.output_ready(FORMATTER))
            return
        if not isinstance(node, Tag) or node.name in SUPPRESSED_TAGS:
            return

        non_standard = self.resolver is not None and self.resolver.is_non_standard(node.name)
        spelling = (self.resolver.spelling_for(node.name) if non_standard else None) or node.name
        raw = source.original_start_tag(node) if source is not None else None

        if raw is None:
            if non_standard and not node.contents and source is not None and source.is_self_closing(node):
                parts.append(f"<{spelling}{_attributes(node)} />")
                return
            raw = f"<{spelling}{_attributes(node)}>"
        elif not node.contents and raw[:-1].rstrip().endswith("/"):
            parts.append(raw)
            return
        parts.append(raw)
        if node.name in VOID_TAGS and not node.contents:
            return
        for child in node.contents:
            self._emit(child, parts, source)
        parts.append(self._closing_tag(node, spelling, non_standard))

    def _closing_tag(self, tag: Tag, spelling: str, non_standard: bool) -> str:
        if non_standard:
            closing = self.resolver.closing_tag_for(tag.name)
            if closing == NO_CLOSING_TAG:
                return ""
            if closing is not None:
                return closing
        return f"</{spelling}>"


def _attributes(tag: Tag) -> str:
    parts: list[str] = []
    for key, value in tag.attrs.items():
        if value is None:
            parts.append(f" {key}")
            continue
        if isinstance(value, list):
            value = " ".join(value)
        value = EntitySubstitution.quoted_attribute_value(FORMATTER.attribute_value(value))
        parts.append(f" {key}={value}")
    return "".join(parts)


def _doctype(node: Doctype, source: SourceIndex | None = None) -> str:
    raw = source.doctype_text() if source is not None else None
    if raw is not None:
        return raw
    text = str(node)
    if text.lower().startswith("doctype"):
        return f"<!{text}>"
    return f"<!DOCTYPE {text}>"
