"""End-to-end tests for pipeline/runner.py."""

import io
from pathlib import Path

import pytest

from pipeline.errors import FileSystemError
from pipeline.runner import (
    collect_files,
    modified_name,
    output_path,
    run,
    walk_directory,
)


def _run(settings, names, prompt=None):
    return run(
        settings,
        prompt=prompt or (lambda question: ""),
        out=io.StringIO(),
        name_generator=names,
    )


def test_modified_name_inserts_before_extension():
    assert modified_name(Path("web/page.jsp"), "modified") == Path("web/page.modified.jsp")
    assert modified_name(Path("a.b.html"), "x") == Path("a.b.x.html")


def test_output_path_defaults_to_source():
    assert output_path(Path("page.html"), None) == Path("page.html")


def test_walk_directory_visits_files_before_subdirectories(tmp_path, write_file):
    for name in ["z.html", "a.html", "m/x.html", "b/y.html", "b/deep/w.html"]:
        write_file(name, "<p></p>")

    flat = [p.relative_to(tmp_path).as_posix() for p in walk_directory(tmp_path, False)]
    deep = [p.relative_to(tmp_path).as_posix() for p in walk_directory(tmp_path, True)]

    assert flat == ["a.html", "z.html"]
    assert deep == ["a.html", "z.html", "b/y.html", "b/deep/w.html", "m/x.html"]


def test_collect_files_skips_run_artifacts_and_earlier_outputs(tmp_path, write_file, settings_factory):
    write_file("page.html", "<p></p>")
    write_file("page.modified.html", "<p></p>")
    write_file("out.css", "")
    settings = settings_factory(directory=str(tmp_path), no_replace="modified")
    assert collect_files(settings) == [tmp_path / "page.html"]


def test_collect_files_missing_source(settings_factory, tmp_path):
    settings = settings_factory(src=[str(tmp_path / "missing.html")])
    with pytest.raises(FileSystemError):
        collect_files(settings)


def test_identical_styles_across_files_share_one_rule(tmp_path, write_file, settings_factory, names):
    one = write_file("one.html", '<p style="color: red">a</p>')
    two = write_file("two.html", '<div style="color:red;">b</div><style>h1 { margin: 0 }</style>')
    settings = settings_factory(src=[str(one), str(two)])

    report = _run(settings, names)

    assert one.read_text() == '<p class="c1">a</p>'
    assert two.read_text() == '<div class="c1">b</div>'
    assert (tmp_path / "out.css").read_text() == (
        ".c1 {\n  color:red;\n}\n\nh1 {\n  margin:0;\n}\n\n"
    )
    assert report.classes == 1
    assert report.outputs == [one, two]


def test_stylesheet_is_appended_not_truncated(tmp_path, write_file, settings_factory, names):
    (tmp_path / "out.css").write_text("/* existing */\n")
    page = write_file("page.html", '<p style="margin:0">a</p>')
    _run(settings_factory(src=[str(page)]), names)
    css = (tmp_path / "out.css").read_text()
    assert css.startswith("/* existing */\n")
    assert ".c1 {\n  margin:0;\n}\n\n" in css


def test_no_replace_writes_modified_copy(write_file, settings_factory, names):
    page = write_file("page.jsp", '<center>hi</center>')
    report = _run(settings_factory(src=[str(page)], no_replace="modified"), names)

    modified = page.with_name("page.modified.jsp")
    assert report.outputs == [modified]
    assert page.read_text() == "<center>hi</center>"
    assert modified.read_text() == '<div class="centered">hi</div>'


def test_plain_document_is_unchanged(tmp_path, write_file, settings_factory, names):
    text = "<html>\n<body>\n<p id=\"x\">plain</p>\n</body>\n</html>\n"
    page = write_file("page.html", text)
    _run(settings_factory(src=[str(page)]), names)
    assert page.read_text() == text
    assert (tmp_path / "out.css").read_text() == ""


def test_non_standard_tags_prompted_once_per_run(tmp_path, write_file, settings_factory, prompt_factory, names):
    one = write_file("site/one.jsp", '<c:if test="a">x</c:if>')
    two = write_file("site/two.jsp", '<p><c:if test="b">y</c:if></p>')
    prompt = prompt_factory({"c:if": "</[name]>"})

    report = _run(settings_factory(directory=str(tmp_path / "site")), names, prompt=prompt)

    assert len(prompt.questions) == 1
    assert report.closing_tags == {"c:if": "</c:if>"}
    assert one.read_text() == '<c:if test="a">x</c:if>'
    assert two.read_text() == '<p><c:if test="b">y</c:if></p>'


def test_full_transform_of_legacy_page(tmp_path, write_file, settings_factory, prompt_factory, names):
    page = write_file(
        "legacy.jsp",
        '<body bgcolor="#fff">\n'
        '<style>.x { color: blue }</style>\n'
        '<font color="red" size="2">Warning</font>\n'
        '<table cellpadding="2"><tr><td valign="top" style="padding: 0">a</td></tr></table>\n'
        '<jsp:include page="footer.jsp"/>\n'
        "</body>",
    )
    prompt = prompt_factory({})

    _run(settings_factory(src=[str(page)]), names, prompt=prompt)

    assert page.read_text() == (
        '<body class="c2">\n'
        "\n"
        '<span class="c3">Warning</span>\n'
        '<table class="cellpadding-2px"><tr><td class="c1 valign-top">a</td></tr></table>\n'
        '<jsp:include page="footer.jsp"/>\n'
        "</body>"
    )
    css = (tmp_path / "out.css").read_text()
    assert css.index(".c1 {") < css.index(".x {") < css.index(".c2 {")
    assert ".cellpadding-2px th, .cellpadding-2px td {\n  padding:2px;\n}\n\n" in css
    assert ".c3 {\n  color:red;\n  font-family:;\n  font-size:small;\n}\n\n" in css
    assert len(prompt.questions) == 1


def test_jsp_scriptlets_and_expressions_are_kept_verbatim(tmp_path, write_file, settings_factory, names):
    text = (
        '<%@ page contentType="text/html" %>\n'
        '<%-- header --%>\n'
        '<a href="<%= url %>">x</a>\n'
        "<% if (a < b && c) { %><p>${user.name}</p><% } %>\n"
    )
    page = write_file("page.jsp", text)
    _run(settings_factory(src=[str(page)]), names)
    assert page.read_text() == text
    assert (tmp_path / "out.css").read_text() == ""


def test_jsp_attribute_survives_rewrite_of_its_tag(write_file, settings_factory, names):
    page = write_file("page.jsp", '<td align="left" title="<%= t %>" style="color:red">x</td>')
    _run(settings_factory(src=[str(page)]), names)
    assert page.read_text() == '<td title="<%= t %>" class="c1 align-left">x</td>'


def test_untouched_markup_round_trips_exactly(write_file, settings_factory, names):
    text = (
        "<!doctype html>\n"
        "<p>a&nbsp;b &quot;q&quot; &copy; &#169;</p>\n"
        "<br />\n"
        "<input type=checked checked>\n"
        "<div/>\n"
    )
    page = write_file("page.html", text)
    _run(settings_factory(src=[str(page)]), names)
    assert page.read_text() == text


def test_templated_inline_style_is_kept_whole(tmp_path, write_file, settings_factory, names):
    page = write_file("page.jsp", '<p style="color: ${theme.color}; margin: 0">x</p>')
    _run(settings_factory(src=[str(page)]), names)
    assert page.read_text() == '<p class="c1">x</p>'
    assert (tmp_path / "out.css").read_text() == (
        ".c1 {\n  color:${theme.color};\n  margin:0;\n}\n\n"
    )


def test_inline_style_entities_are_decoded_for_css(tmp_path, write_file, settings_factory, names):
    page = write_file("page.html", '<p style="font-family: &quot;Arial&quot;">x</p>')
    _run(settings_factory(src=[str(page)]), names)
    assert page.read_text() == '<p class="c1">x</p>'
    assert "font-family:" in (tmp_path / "out.css").read_text()
    assert "&quot;" not in (tmp_path / "out.css").read_text()


def test_directory_mode_skips_non_markup_files(tmp_path, write_file, settings_factory, names):
    (tmp_path / "site").mkdir()
    (tmp_path / "site" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00")
    script = write_file("site/app.js", "if (a && b < c) { go(); }\n")
    page = write_file("site/index.html", '<p style="margin:0">x</p>')

    report = _run(settings_factory(directory=str(tmp_path / "site")), names)

    assert report.files == [page]
    assert script.read_text() == "if (a && b < c) { go(); }\n"
    assert page.read_text() == '<p class="c1">x</p>'
