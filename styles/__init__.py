"""Style deduplication and deprecated-markup rewriting."""

from styles.css import extract_stylesheet, format_rule, minify_css
from styles.deprecated import MarkupNormalizer, font_tag_size_to_css
from styles.engine import StyleEngine, add_class, apply_class

__all__ = [
    "StyleEngine",
    "MarkupNormalizer",
    "add_class",
    "apply_class",
    "extract_stylesheet",
    "font_tag_size_to_css",
    "format_rule",
    "minify_css",
]
