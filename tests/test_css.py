"""Tests for styles/css.py — declaration canonicalization and rule layout."""

from styles.css import extract_stylesheet, format_rule, minify_css, split_declarations


def test_minify_collapses_formatting_differences():
    assert minify_css("color: red;  margin : 0 ") == "color:red;margin:0;"
    assert minify_css("color:red;margin:0") == "color:red;margin:0;"


def test_minify_lowercases_property_names():
    assert minify_css("COLOR: red") == minify_css("color:red")


def test_minify_blank_is_empty():
    assert minify_css("") == ""
    assert minify_css("   ") == ""


def test_split_declarations_drops_empty_parts():
    assert split_declarations("color:red;margin:0;") == ["color:red", "margin:0"]


def test_format_rule_layout():
    assert format_rule(".a", "color:red;margin:0;") == ".a {\n  color:red;\n  margin:0;\n}\n\n"


def test_format_rule_keeps_empty_values():
    rule = format_rule(".f", "color:red;font-family:;font-size:small;")
    assert "  font-family:;\n" in rule


def test_extract_stylesheet_reformats_style_rules():
    css = extract_stylesheet("p { color: red }  .x{margin:0}")
    assert css == "p {\n  color:red;\n}\n\n.x {\n  margin:0;\n}\n\n"


def test_extract_stylesheet_blank():
    assert extract_stylesheet("  \n ") == ""


def test_split_declarations_respects_urls_and_quotes():
    css = "background:url(data:image/png;base64,AAA);content:'a;b';color:red"
    assert split_declarations(css) == [
        "background:url(data:image/png;base64,AAA)",
        "content:'a;b'",
        "color:red",
    ]


def test_minify_keeps_declarations_cssutils_cannot_read():
    assert minify_css("color: ${theme.color};  margin: 0") == "color:${theme.color};margin:0;"


def test_minify_fallback_collapses_whitespace_and_lowercases_names():
    assert minify_css("COLOR :  ${a.b}  ;margin:0") == "color:${a.b};margin:0;"


def test_format_rule_keeps_templated_values_whole():
    assert format_rule(".t", "color:${a;b};margin:0;") == ".t {\n  color:${a;b};\n  margin:0;\n}\n\n"
