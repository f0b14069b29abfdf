"""Run orchestration: traversal, pre-scan, resolution barrier, transform.

Orchestrates, for a whole run:
    1. File discovery (explicit list, or directory walk over markup files: files
       before subdirectories, sorted, recursion on request)
    2. Pre-scan of every (masked) file for non-standard tags
    3. One resolution barrier for all recorded tags
    4. Per file, in discovery order: mask server-side fragments, parse,
       collect inline styles, copy ``<style>`` blocks, flush, normalize,
       flush, serialize, unmask, write

Discovery order is what makes class names and tag prompts come out in a
predictable order, so the walk never runs files in parallel.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from bs4 import BeautifulSoup

from models.settings import RunSettings
from parsing.document import SourceIndex, parse_document, read_source
from pipeline.context import RunContext, open_run
from pipeline.errors import FileSystemError
from styles.css import extract_stylesheet, minify_css
from styles.engine import generate_class_name

logger = logging.getLogger("inlex")

# Directory mode only picks up files with these suffixes.
MARKUP_SUFFIXES = frozenset(
    {
        ".htm", ".html", ".xhtml", ".shtml", ".jsp", ".jspf", ".jspx", ".tag",
        ".tagx", ".asp", ".aspx", ".ascx", ".php", ".cfm", ".vm", ".ftl",
        ".tpl", ".erb",
    }
)


@dataclass
class RunReport:
    """What a run did, for the caller to log or inspect."""

    files: list[Path] = field(default_factory=list)
    outputs: list[Path] = field(default_factory=list)
    classes: int = 0
    closing_tags: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def modified_name(path: Path, modifier: str) -> Path:
    """``page.jsp`` + ``modified`` -> ``page.modified.jsp``."""
    return path.with_name(f"{path.stem}.{modifier}{path.suffix}")


def output_path(path: Path, modifier: str | None) -> Path:
    return modified_name(path, modifier) if modifier else path


def walk_directory(root: Path, recursive: bool) -> Iterator[Path]:
    """Yield files of *root* in listing order, then recurse into subdirectories."""
    try:
        entries = sorted(os.scandir(root), key=lambda entry: entry.name)
    except OSError as exc:
        raise FileSystemError(str(root), str(exc)) from exc

    dirs: list[Path] = []
    for entry in entries:
        if entry.is_file():
            yield Path(entry.path)
        elif entry.is_dir():
            dirs.append(Path(entry.path))

    if recursive:
        for sub in dirs:
            yield from walk_directory(sub, recursive)


def _run_artifacts(settings: RunSettings) -> set[Path]:
    return {
        Path(p).resolve()
        for p in (settings.output, settings.audit_log, settings.tag_file)
    }


def collect_files(settings: RunSettings) -> list[Path]:
    """Resolve the settings into the ordered list of files to process."""
    if settings.src:
        files = [Path(src) for src in settings.src]
        for path in files:
            if not path.is_file():
                raise FileSystemError(str(path), "no such file")
        return files

    root = Path(settings.directory)
    if not root.is_dir():
        raise FileSystemError(str(root), "no such directory")

    skip = _run_artifacts(settings)
    marker = f".{settings.no_replace}." if settings.no_replace else None
    files: list[Path] = []
    for path in walk_directory(root, settings.recursive):
        if path.resolve() in skip:
            continue
        if marker and marker in path.name:
            # Output of an earlier run with the same modifier.
            continue
        if path.suffix.lower() not in MARKUP_SUFFIXES:
            logger.debug("skipped non-markup file", extra={"file": str(path)})
            continue
        files.append(path)
    return files


# ---------------------------------------------------------------------------
# Per-file stages
# ---------------------------------------------------------------------------


def collect_inline_styles(ctx: RunContext, soup: BeautifulSoup) -> int:
    """Intern every inline ``style`` in document order; return how many."""
    count = 0
    for tag in soup.find_all(style=True):
        declaration = minify_css(ctx.mask.reveal(tag["style"]))
        if declaration:
            ctx.engine.intern(declaration)
            count += 1
    return count


def copy_style_blocks(ctx: RunContext, soup: BeautifulSoup) -> int:
    """Append the rules of every ``<style>`` block to the stylesheet."""
    count = 0
    for block in soup.find_all("style"):
        css = extract_stylesheet(ctx.mask.restore("".join(block.strings)))
        if css:
            ctx.stylesheet.write(css)
            count += 1
    if count:
        ctx.stylesheet.flush()
    return count


def transform(ctx: RunContext, soup: BeautifulSoup) -> None:
    """Run style collection and markup normalization over one tree."""
    collect_inline_styles(ctx, soup)
    ctx.engine.flush(ctx.stylesheet)
    copy_style_blocks(ctx, soup)
    ctx.normalizer.normalize(soup)
    ctx.engine.flush(ctx.stylesheet)


def process_file(ctx: RunContext, path: Path) -> Path:
    """Transform one source file and write the result; return the output path."""
    text = ctx.mask.hide(read_source(path))
    soup = parse_document(text, filename=str(path), parser=ctx.settings.parser)
    source = SourceIndex(text, soup)
    transform(ctx, soup)

    target = output_path(path, ctx.settings.no_replace)
    markup = ctx.mask.restore(ctx.serializer.serialize(soup, source))
    try:
        target.write_text(markup, encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(str(target), str(exc)) from exc

    logger.info("file rewritten", extra={"file": str(target)})
    return target


# ---------------------------------------------------------------------------
# Whole run
# ---------------------------------------------------------------------------


def prescan(ctx: RunContext, files: list[Path]) -> None:
    for path in files:
        ctx.resolver.scan(ctx.mask.hide(read_source(path)), str(path))


def run(
    settings: RunSettings,
    *,
    prompt: Callable[[str], str] = input,
    out: TextIO | None = None,
    name_generator: Callable[[], str] = generate_class_name,
) -> RunReport:
    """Process every file named by *settings*.

    Raises:
        ParseError: On the first file that cannot be parsed.
        FileSystemError: On a missing or unwritable path.
    """
    files = collect_files(settings)
    report = RunReport(files=files)

    with open_run(settings, prompt=prompt, out=out, name_generator=name_generator) as ctx:
        prescan(ctx, files)
        report.closing_tags = dict(ctx.resolver.resolve())

        for path in files:
            report.outputs.append(process_file(ctx, path))

        report.classes = len(ctx.engine)

    logger.info(
        "run complete: %d file(s), %d class(es), %d non-standard tag(s)",
        len(report.outputs),
        report.classes,
        len(report.closing_tags),
    )
    return report
