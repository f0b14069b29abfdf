"""Run-scoped state shared by every file of one run.

Identical declarations in different files must collapse to one class, and
tag resolution happens once for all files, so the style map, the tag
tables, the open stylesheet and the masked server-side fragments live
here and are passed explicitly to every stage.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from models.settings import RunSettings
from parsing.document import TemplateMask
from pipeline.errors import FileSystemError
from pipeline.serializer import Serializer
from styles.deprecated import MarkupNormalizer
from styles.engine import StyleEngine, generate_class_name
from tags.resolver import NonStandardTagResolver


@dataclass
class RunContext:
    settings: RunSettings
    engine: StyleEngine
    resolver: NonStandardTagResolver
    stylesheet: TextIO
    mask: TemplateMask = field(default_factory=TemplateMask)
    normalizer: MarkupNormalizer = field(init=False)
    serializer: Serializer = field(init=False)

    def __post_init__(self) -> None:
        self.normalizer = MarkupNormalizer(self.engine, self.stylesheet, self.mask)
        self.serializer = Serializer(self.resolver)


@contextmanager
def open_run(
    settings: RunSettings,
    *,
    prompt: Callable[[str], str] = input,
    out: TextIO | None = None,
    name_generator: Callable[[], str] = generate_class_name,
) -> Iterator[RunContext]:
    """Create the context for one run; the stylesheet stays open (append) until exit."""
    resolver = NonStandardTagResolver(
        batch=settings.batch,
        log=settings.log,
        audit_log=settings.audit_log,
        tag_file=settings.tag_file,
        prompt=prompt,
        out=out if out is not None else sys.stdout,
    )
    try:
        stylesheet = Path(settings.output).open("a", encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(settings.output, str(exc)) from exc
    try:
        yield RunContext(
            settings=settings,
            engine=StyleEngine(name_generator),
            resolver=resolver,
            stylesheet=stylesheet,
        )
    finally:
        stylesheet.close()
