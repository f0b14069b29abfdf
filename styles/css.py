"""cssutils adapters: declaration minification and rule formatting.

Declarations are never reasoned about beyond this module.  ``minify_css``
turns whatever a ``style`` attribute holds into one canonical string that
is used as the dedup key, and ``format_rule`` turns a key back into the
indented block written to the stylesheet.
"""

from __future__ import annotations

import logging
import re

import cssutils

cssutils.log.setLevel(logging.CRITICAL)

logger = logging.getLogger("inlex")

_WHITESPACE_RE = re.compile(r"\s+")


def _declarations(style) -> str:  # noqa: ANN001
    parts: list[str] = []
    for prop in style:
        value = prop.value.strip()
        if prop.priority:
            value = f"{value}!{prop.priority}"
        parts.append(f"{prop.name}:{value};")
    return "".join(parts)


def split_declarations(css: str) -> list[str]:
    """Split declaration text on ``;`` outside quotes, parentheses and braces.

    ``url(data:image/png;base64,...)`` and templated values such as
    ``${a; b}`` stay in one piece.  Blank parts are dropped.
    """
    parts: list[str] = []
    depth = 0
    quote = None
    start = 0
    for index, char in enumerate(css):
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth = max(depth - 1, 0)
        elif char == ";" and depth == 0:
            parts.append(css[start:index])
            start = index + 1
    parts.append(css[start:])
    return [part.strip() for part in parts if part.strip()]


def _collapse(css: str) -> str:
    """Whitespace-normalize declaration text without interpreting values."""
    parts: list[str] = []
    for part in split_declarations(css):
        name, colon, value = part.partition(":")
        if colon:
            value = _WHITESPACE_RE.sub(" ", value.strip())
            parts.append(f"{name.strip().lower()}:{value};")
        else:
            parts.append(f"{_WHITESPACE_RE.sub(' ', part)};")
    return "".join(parts)


def minify_css(css: str) -> str:
    """Canonicalize an inline declaration block.

    Whitespace, case of property names and trailing semicolons are
    normalized, so ``"COLOR : red"`` and ``"color:red;"`` produce the same
    key.  When cssutils drops declarations it cannot read (server-side
    expressions, vendor hacks) the whole block is kept as collapsed text
    instead, so nothing the author wrote is lost.  Returns ``""`` for
    blank input.
    """
    if not css or not css.strip():
        return ""
    style = cssutils.parseStyle(css)
    if style.length < len(split_declarations(css)):
        logger.debug("declarations kept as written: %s", css)
        return _collapse(css)
    return _declarations(style)


def format_rule(selector: str, declaration: str) -> str:
    """Render one stylesheet rule.

    Example::

        .quiet-otter {
          color:red;
          margin:0;
        }

    followed by a blank line.
    """
    body = "\n".join(f"  {part};" for part in split_declarations(declaration))
    return f"{selector} {{\n{body}\n}}\n\n"


def extract_stylesheet(css_text: str) -> str:
    """Reformat the content of a ``<style>`` block for the output stylesheet.

    Style rules get the same layout as interned classes; at-rules such as
    ``@media`` are copied through as cssutils serializes them.
    """
    if not css_text or not css_text.strip():
        return ""
    sheet = cssutils.parseString(css_text)
    chunks: list[str] = []
    for rule in sheet:
        if rule.type == rule.STYLE_RULE:
            chunks.append(format_rule(rule.selectorText, _declarations(rule.style)))
        elif rule.type != rule.COMMENT:
            chunks.append(f"{rule.cssText}\n\n")
    return "".join(chunks)
