"""Tag and attribute vocabularies used to classify markup.

``STANDARD_TAGS`` is the closed reference set: any start tag outside it is
treated as a non-standard (templating) tag and needs a closing-tag
convention from the operator.  Deprecated HTML4 names stay in the standard
set because they are handled by the normalizer, not the tag resolver.
"""

from __future__ import annotations

STANDARD_TAGS = frozenset(
    {
        "a", "abbr", "acronym", "address", "applet", "area", "article",
        "aside", "audio", "b", "base", "basefont", "bdi", "bdo", "big",
        "blockquote", "body", "br", "button", "canvas", "caption", "center",
        "cite", "code", "col", "colgroup", "data", "datalist", "dd", "del",
        "details", "dfn", "dialog", "dir", "div", "dl", "dt", "em", "embed",
        "fieldset", "figcaption", "figure", "font", "footer", "form",
        "frame", "frameset", "h1", "h2", "h3", "h4", "h5", "h6", "head",
        "header", "hgroup", "hr", "html", "i", "iframe", "img", "input",
        "ins", "isindex", "kbd", "label", "legend", "li", "link", "main",
        "map", "mark", "math", "menu", "meta", "meter", "nav", "noframes",
        "noscript", "object", "ol", "optgroup", "option", "output", "p",
        "param", "picture", "pre", "progress", "q", "rp", "rt", "ruby", "s",
        "samp", "script", "search", "section", "select", "slot", "small",
        "source", "span", "strike", "strong", "style", "sub", "summary",
        "sup", "svg", "table", "tbody", "td", "template", "textarea",
        "tfoot", "th", "thead", "time", "title", "tr", "track", "tt", "u",
        "ul", "var", "video", "wbr",
    }
)

# Elements that never have content or an end tag.
VOID_TAGS = frozenset(
    {
        "area", "base", "basefont", "br", "col", "embed", "frame", "hr",
        "img", "input", "isindex", "link", "meta", "param", "source",
        "track", "wbr",
    }
)

DEPRECATED_ATTRS = frozenset(
    {
        "rev", "charset", "shape", "coords", "longdesc", "target", "nohref",
        "profile", "version", "name", "scheme", "archive", "classid",
        "codebase", "codetype", "declare", "standby", "valuetype", "type",
        "axis", "abbr", "scope", "align", "alink", "link", "vlink", "text",
        "background", "bgcolor", "border", "cellpadding", "cellspacing",
        "char", "charoff", "clear", "compact", "frame", "frameborder",
        "hspace", "vspace", "marginheight", "marginwidth", "noshade",
        "nowrap", "rules", "scrolling", "size", "valign", "width",
    }
)


def is_standard_tag(name: str) -> bool:
    """Return True if *name* (any case) is part of the reference vocabulary."""
    return name.lower() in STANDARD_TAGS


def deprecated_attrs_for(attrs: dict[str, str]) -> list[str]:
    """Return the deprecated attribute names present in *attrs*, in order."""
    return [attr for attr in attrs if attr in DEPRECATED_ATTRS]
