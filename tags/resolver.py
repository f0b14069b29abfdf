"""Closing-tag resolution for non-standard (templating) tags.

Server-side tags such as ``<c:if>`` or ``<jsp:include>`` are outside the
HTML vocabulary, so the parser cannot know whether or how they close.  The
operator supplies a closing-tag template per tag name, once per run,
either one prompt at a time (interactive) or by filling in a side file
(batch).  ``[name]`` in a template is replaced by the tag as spelled in
the source.
"""

from __future__ import annotations

import logging
import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from models.records import NO_CLOSING_TAG, NonStandardTag
from parsing.prescan import first_line_of, iter_non_standard
from pipeline.errors import FileSystemError, ResolutionInputError

logger = logging.getLogger("inlex")

NAME_PLACEHOLDER = "[name]"
AUDIT_SEPARATOR = "\n===========================================\n"

HELP_TEXT = """\
Non-standard HTML tag(s) have been found.

In order to preserve potentially crucial serverside elements
your manual input is required. Please indicate the structure
of the tag like the following example:

<taglib:test></taglib:test>
would become:

</[name]>
[name] will be replaced with the tagname for the current tag (taglib:test)
Input is optional. If no input is entered the closing tag would not exist.
"""

_TAG_LINE_RE = re.compile(
    r"\|\s*tag:\s*<(?P<tag>[^\s>]+)\s*\.\.\.>\s*:(?P<answer>.*)$"
)


def create_closing_tag(spelling: str, template: str) -> str:
    """Substitute *spelling* for ``[name]`` in an operator answer."""
    return template.strip().replace(NAME_PLACEHOLDER, spelling)


def parse_tag_line(line: str) -> tuple[str, str]:
    """Split one side-file line into ``(tag, raw answer)``.

    Raises:
        ResolutionInputError: If the line has no ``| tag: <name ...> :``
            part.
    """
    match = _TAG_LINE_RE.search(line)
    if match is None:
        raise ResolutionInputError(line)
    return match.group("tag"), match.group("answer").strip()


class NonStandardTagResolver:
    """Records non-standard tags during pre-scan and resolves them once.

    Args:
        batch: Resolve through the side file instead of prompting per tag.
        log: Append every question and answer to *audit_log*.
        prompt: Blocking input function, ``input`` by default.
        out: Where operator instructions are printed.
    """

    def __init__(
        self,
        *,
        batch: bool = False,
        log: bool = False,
        audit_log: str | Path = "nonStdMap.log",
        tag_file: str | Path = "non-std-tags.txt",
        prompt: Callable[[str], str] = input,
        out: TextIO | None = None,
    ) -> None:
        self.batch = batch
        self.log = log
        self.audit_log = Path(audit_log)
        self.tag_file = Path(tag_file)
        self.prompt = prompt
        self.out = out if out is not None else sys.stdout

        self.found: dict[str, NonStandardTag] = {}
        self.closing_tags: dict[str, str] = {}
        self.resolved = False
        self._audit_started = False

    # ------------------------------------------------------------------
    # Pre-scan
    # ------------------------------------------------------------------

    def scan(self, text: str, filename: str) -> list[NonStandardTag]:
        """Record every new non-standard tag in *text*; return the new ones."""
        new: list[NonStandardTag] = []
        for name, spelling in iter_non_standard(text, filename):
            if name in self.found:
                continue
            record = NonStandardTag(
                name=name,
                spelling=spelling,
                filename=filename,
                line=first_line_of(text, spelling, filename),
            )
            self.found[name] = record
            new.append(record)
            logger.info(
                "non-standard tag found",
                extra={"file": filename, "tag": spelling, "line": record.line},
            )
        return new

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def closing_tag_for(self, name: str) -> str | None:
        """Return the closing tag text, ``NO_CLOSING_TAG``, or None if unresolved."""
        return self.closing_tags.get(name.lower())

    def spelling_for(self, name: str) -> str | None:
        record = self.found.get(name.lower())
        return record.spelling if record else None

    def is_non_standard(self, name: str) -> bool:
        return name.lower() in self.found

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self) -> dict[str, str]:
        """Ask the operator about every recorded tag.  Runs once per run."""
        if not self.resolved and self.found:
            if self.batch:
                self.resolve_from_file()
            else:
                self.resolve_interactively()
        self.resolved = True
        return self.closing_tags

    def resolve_interactively(self) -> None:
        for record in self.found.values():
            if record.name in self.closing_tags:
                continue
            if not self.closing_tags:
                print(HELP_TEXT, file=self.out)
            location = record.location.ljust(len(record.filename) + 6)
            question = f"{location} | tag: <{record.spelling}"
            answer = create_closing_tag(record.spelling, self.prompt(f"{question} "))
            self._audit(f"{question} {answer}")
            self.closing_tags[record.name] = answer or NO_CLOSING_TAG

    def write_tag_file(self) -> Path:
        """Write one aligned, unanswered line per recorded tag."""
        records = list(self.found.values())
        location_width = max(len(record.location) for record in records) + 1
        snippets = [f"| tag: <{record.spelling} ...> " for record in records]
        snippet_width = max(len(snippet) for snippet in snippets)
        lines = [
            f"{record.location.ljust(location_width)}{snippet.ljust(snippet_width)} : \n"
            for record, snippet in zip(records, snippets)
        ]
        try:
            self.tag_file.write_text("".join(lines), encoding="utf-8")
        except OSError as exc:
            raise FileSystemError(str(self.tag_file), str(exc)) from exc
        return self.tag_file

    def read_tag_file(self) -> dict[str, str]:
        """Load answers from the side file into the closing-tag map."""
        try:
            lines = self.tag_file.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise FileSystemError(str(self.tag_file), str(exc)) from exc

        for line in lines:
            if not line.strip():
                continue
            try:
                spelling, answer = parse_tag_line(line)
            except ResolutionInputError as exc:
                logger.warning("%s", exc, extra={"file": str(self.tag_file)})
                continue
            name = spelling.lower()
            if name in self.found:
                spelling = self.found[name].spelling
            closing = create_closing_tag(spelling, answer)
            self._audit(line.rstrip())
            self.closing_tags[name] = closing or NO_CLOSING_TAG
        return self.closing_tags

    def resolve_from_file(self) -> None:
        path = self.write_tag_file()
        print(
            f"A file named '{path.name}' has been created\n"
            f"in {path.resolve().parent}. Please edit\n"
            "each line according to how the closing tag should\n"
            "be structured.\n",
            file=self.out,
        )
        self.prompt("Please press enter when done...")
        self.read_tag_file()
        try:
            path.unlink()
        except OSError as exc:
            raise FileSystemError(str(path), str(exc)) from exc

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def _audit(self, line: str) -> None:
        if not self.log:
            return
        try:
            with self.audit_log.open("a", encoding="utf-8") as fh:
                if not self._audit_started:
                    fh.write(AUDIT_SEPARATOR)
                    self._audit_started = True
                fh.write(f"{line}\n")
        except OSError as exc:
            raise FileSystemError(str(self.audit_log), str(exc)) from exc
