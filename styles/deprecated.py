"""Deprecated HTML4 presentational markup -> modern element + class.

The rewrite rules are plain data (``TAG_RULES``, ``ATTRIBUTE_RULES``) and
the helpers that evaluate them (``font_tag_size_to_css``,
``declaration_for_tag``, ``resolve_attribute``) are pure, so the tables can
be checked without a tree.  ``MarkupNormalizer`` is the tree walk that
applies them together with inline-style replacement.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from models.records import PendingClass
from parsing.document import TemplateMask
from parsing.vocabulary import deprecated_attrs_for
from styles.css import minify_css
from styles.engine import StyleEngine, add_class, apply_class, class_tokens, replace_class

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

logger = logging.getLogger("inlex")

# Containers whose content is not markup.
SKIP_TAGS = {"script", "style"}

FONT_SIZES = {
    1: "x-small",
    2: "small",
    3: "medium",
    4: "large",
    5: "x-large",
    6: "xx-large",
    7: "xx-large",
}
DEFAULT_FONT_SIZE = 3


@dataclass(frozen=True)
class TagRule:
    """How a deprecated element is rewritten.

    ``action`` is ``"rename"`` (keep the element, change its name) or
    ``"unwrap"`` (replace it by its children).  ``class_name`` of None
    means a generated name.
    """

    action: str
    template: str
    class_name: str | None = None
    rename_to: str | None = None


@dataclass(frozen=True)
class AttributeRule:
    """How a deprecated attribute becomes a class.

    ``naming`` is ``"value"`` (class keyed by the attribute value),
    ``"measure"`` (value parsed as ``<number><unit>``) or ``"random"``.
    """

    naming: str
    template: str
    prefix: str = ""
    extra_selectors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedClass:
    class_name: str | None
    declaration: str
    extra_selectors: tuple[str, ...] = ()


_FONT_RULE = TagRule(
    action="unwrap",
    template="color:{color};font-family:{face};font-size:{size};",
)

TAG_RULES: dict[str, TagRule] = {
    "center": TagRule(
        action="rename",
        template="text-align:center;",
        class_name="centered",
        rename_to="div",
    ),
    "font": _FONT_RULE,
    "basefont": _FONT_RULE,
}

ATTRIBUTE_RULES: dict[str, AttributeRule] = {
    "align": AttributeRule("value", "text-align:{value};", prefix="align"),
    "bgcolor": AttributeRule("random", "background-color:{value};"),
    "border": AttributeRule(
        "measure", "border-width:{value};border-style:solid;", prefix="border"
    ),
    "cellpadding": AttributeRule(
        "measure", "padding:{value};", prefix="cellpadding", extra_selectors=("th", "td")
    ),
    "cellspacing": AttributeRule(
        "measure",
        "border-spacing:{value};",
        prefix="cellspacing",
        extra_selectors=("th", "td"),
    ),
    "width": AttributeRule("measure", "width:{value};", prefix="width"),
    "valign": AttributeRule("value", "vertical-align:{value};", prefix="valign"),
}

_UNSAFE_VALUE_RE = re.compile(r"[;{}]")
# Values computed on the server cannot be turned into a static class.
_TEMPLATED_RE = re.compile(r"<%|[$#]\{")
_MEASURE_RE = re.compile(r"^\s*(\d*\.?\d+)\s*([a-zA-Z%]*)\s*$")
_UNSAFE_CLASS_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def font_tag_size_to_css(size: str) -> str:
    """Map a ``<font size>`` value to a CSS ``font-size`` keyword.

    ``-n``/``+n`` are relative to the default size 3.  Anything that does
    not end up in 1..7 maps to ``medium``.
    """
    size = (size or "").strip()
    try:
        if size.startswith("-"):
            number = DEFAULT_FONT_SIZE - int(size[1:])
        elif size.startswith("+"):
            number = DEFAULT_FONT_SIZE + int(size[1:])
        else:
            number = int(size)
    except ValueError:
        return "medium"
    return FONT_SIZES.get(number, "medium")


def css_class_name(prefix: str, value: str) -> str:
    """Build a class name from a prefix and an attribute value."""
    value = value.strip().lower().replace("%", "pct").replace(".", "_")
    value = _UNSAFE_CLASS_CHARS.sub("-", value)
    return f"{prefix}-{value}" if prefix else value


def parse_measure(raw: str) -> tuple[str, str] | None:
    """Split ``"4"``, ``"4px"``, ``"50%"`` into ``(number, unit)``.

    The unit defaults to ``px``.  Returns None when *raw* is not a measure.
    """
    match = _MEASURE_RE.match(raw or "")
    if match is None:
        return None
    return match.group(1), (match.group(2).lower() or "px")


def declaration_for_tag(rule: TagRule, attrs: dict[str, str]) -> str:
    return rule.template.format(
        color=attrs.get("color", ""),
        face=attrs.get("face", ""),
        size=font_tag_size_to_css(attrs.get("size", "")),
    )


def resolve_attribute(name: str, value: str) -> ResolvedClass | None:
    """Evaluate the rule for attribute *name*.

    Returns None when there is no rule or the value cannot be used.  A
    ``class_name`` of None in the result asks for a generated name.
    """
    rule = ATTRIBUTE_RULES.get(name)
    if rule is None:
        return None
    value = (value or "").strip()
    if not value or _UNSAFE_VALUE_RE.search(value):
        return None

    if rule.naming == "measure":
        measure = parse_measure(value)
        if measure is None:
            return None
        number, unit = measure
        css_value = f"{number}{unit}"
        class_name = css_class_name(rule.prefix, css_value)
    elif rule.naming == "value":
        css_value = value.lower()
        class_name = css_class_name(rule.prefix, css_value)
    else:
        css_value = value
        class_name = None

    return ResolvedClass(
        class_name=class_name,
        declaration=rule.template.format(value=css_value),
        extra_selectors=rule.extra_selectors,
    )


class MarkupNormalizer:
    """Replace inline styles and deprecated markup with classes.

    Declarations go into the shared ``StyleEngine``; compound selector
    rules for table cells are written straight to *stylesheet*.  With a
    *mask*, attribute values are read with their masked fragments put back.
    """

    def __init__(
        self, engine: StyleEngine, stylesheet: TextIO, mask: TemplateMask | None = None
    ) -> None:
        self.engine = engine
        self.stylesheet = stylesheet
        self.mask = mask

    def attribute_text(self, value: str) -> str:
        return self.mask.reveal(value) if self.mask is not None else value

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def normalize(self, soup: BeautifulSoup) -> None:
        """Clean every element of *soup* in pre-order, in place."""
        for child in list(soup.children):
            self._visit(soup, child)

    def _visit(self, soup: BeautifulSoup, node) -> None:  # noqa: ANN001
        if not isinstance(node, Tag) or node.name in SKIP_TAGS:
            return
        replacement = self.clean_node(soup, node)
        if replacement is None:
            for child in list(node.children):
                self._visit(soup, child)
        else:
            for item in replacement:
                self._visit(soup, item)

    # ------------------------------------------------------------------
    # Single node
    # ------------------------------------------------------------------

    def clean_node(self, soup: BeautifulSoup, tag: Tag) -> list | None:
        """Clean one element.

        Returns None when *tag* stays in the tree, otherwise the nodes
        that took its place (which have not been cleaned yet).
        """
        queue: list[PendingClass] = []

        style = tag.get("style")
        if style is not None:
            declaration = minify_css(self.attribute_text(style))
            if declaration:
                apply_class(tag, self.engine.intern(declaration))
            else:
                del tag["style"]

        replacement = None
        rule = TAG_RULES.get(tag.name)
        if rule is not None:
            replacement = self._rewrite_tag(soup, tag, rule, queue)

        if replacement is None:
            for attr in deprecated_attrs_for(tag.attrs):
                self._rewrite_attribute(tag, attr, queue)

        self.drain(queue)
        return replacement

    def _class_name_for(self, declaration: str, fixed: str | None) -> str:
        if fixed:
            return fixed
        return self.engine.class_for(declaration) or self.engine.new_class_name()

    def _rewrite_tag(
        self, soup: BeautifulSoup, tag: Tag, rule: TagRule, queue: list[PendingClass]
    ) -> list | None:
        attrs = {name: self.attribute_text(value or "") for name, value in tag.attrs.items()}
        declaration = declaration_for_tag(rule, attrs)
        class_name = self._class_name_for(declaration, rule.class_name)
        pending = PendingClass(class_name=class_name, declaration=declaration)
        queue.append(pending)

        if rule.action == "rename":
            tag.name = rule.rename_to
            add_class(tag, class_name)
            pending.targets.append(tag)
            return None

        inherited = class_tokens(tag)
        replacement: list = []
        for child in list(tag.contents):
            if isinstance(child, Tag):
                target = child
            elif (
                isinstance(child, NavigableString)
                and not isinstance(child, PreformattedString)
                and child.strip()
            ):
                target = child.wrap(soup.new_tag("span"))
            else:
                replacement.append(child)
                continue
            for token in inherited:
                add_class(target, token)
            add_class(target, class_name)
            pending.targets.append(target)
            replacement.append(target)

        logger.debug(
            "unwrapped <%s>", tag.name, extra={"class_name": class_name}
        )
        tag.unwrap()
        return replacement

    def _rewrite_attribute(self, tag: Tag, attr: str, queue: list[PendingClass]) -> None:
        if attr not in ATTRIBUTE_RULES:
            return
        value = self.attribute_text(tag[attr] or "")
        if _TEMPLATED_RE.search(value):
            logger.debug("kept server-side %s on <%s>", attr, tag.name)
            return
        del tag[attr]
        resolved = resolve_attribute(attr, value)
        if resolved is None:
            logger.warning("dropped unusable %s=%r on <%s>", attr, value, tag.name)
            return
        class_name = self._class_name_for(resolved.declaration, resolved.class_name)
        add_class(tag, class_name)
        queue.append(
            PendingClass(
                class_name=class_name,
                declaration=resolved.declaration,
                targets=[tag],
                extra_selectors=resolved.extra_selectors,
            )
        )

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    def drain(self, queue: list[PendingClass]) -> None:
        """Intern queued classes, re-pointing targets on a dedup hit."""
        while queue:
            pending = queue.pop(0)
            actual = self.engine.intern(pending.declaration, pending.class_name)
            if actual != pending.class_name:
                for target in pending.targets:
                    replace_class(target, pending.class_name, actual)
            if pending.extra_selectors:
                self.engine.write_compound(
                    self.stylesheet, actual, pending.extra_selectors, pending.declaration
                )
