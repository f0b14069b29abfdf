"""Style deduplication engine.

Interns canonical declaration text to class names for the whole run, so
identical inline styles in any number of files collapse to one class and
one stylesheet rule.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING, TextIO

from models.records import StyleEntry
from styles.css import format_rule

if TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger("inlex")


def generate_class_name(prefix: str = "s-") -> str:
    """Generate a random class name."""
    return f"{prefix}{uuid.uuid4().hex[:8]}"


class StyleEngine:
    """Run-scoped map of declaration text -> class name.

    Entries keep insertion order, which is the order rules appear in the
    stylesheet.  ``flush`` only writes entries it has not written before.
    """

    def __init__(self, name_generator: Callable[[], str] = generate_class_name) -> None:
        self.styles: dict[str, StyleEntry] = {}
        self._name_generator = name_generator
        self._names: set[str] = set()
        self._compound_selectors: set[str] = set()

    def __len__(self) -> int:
        return len(self.styles)

    def __contains__(self, declaration: str) -> bool:
        return declaration in self.styles

    def class_for(self, declaration: str) -> str | None:
        entry = self.styles.get(declaration)
        return entry.class_name if entry else None

    def new_class_name(self) -> str:
        """Generate a name not used by any interned class."""
        name = self._name_generator()
        while name in self._names:
            logger.debug("class name collision, regenerating", extra={"class_name": name})
            name = self._name_generator()
        return name

    def _unique(self, class_name: str) -> str:
        name = class_name
        suffix = 2
        while name in self._names:
            name = f"{class_name}-{suffix}"
            suffix += 1
        if name != class_name:
            logger.debug("class name taken, using %s", name, extra={"class_name": class_name})
        return name

    def intern(self, declaration: str, class_name: str | None = None) -> str:
        """Return the class for *declaration*, creating it if needed.

        An existing mapping always wins over *class_name*.  An explicit
        name already held by another declaration gets a numeric suffix
        (``align-a-b-2``).  Without an explicit name a random one is
        generated and checked against every name already handed out.
        """
        entry = self.styles.get(declaration)
        if entry is not None:
            return entry.class_name
        name = self._unique(class_name) if class_name else self.new_class_name()
        self.styles[declaration] = StyleEntry(class_name=name)
        self._names.add(name)
        logger.debug("interned style", extra={"class_name": name})
        return name

    def pending(self) -> list[tuple[str, StyleEntry]]:
        return [(decl, entry) for decl, entry in self.styles.items() if not entry.emitted]

    def flush(self, stream: TextIO) -> int:
        """Write a rule for every entry not yet emitted; return how many."""
        written = 0
        for declaration, entry in self.pending():
            stream.write(format_rule(f".{entry.class_name}", declaration))
            entry.emitted = True
            written += 1
        if written:
            stream.flush()
        return written

    def write_compound(
        self, stream: TextIO, class_name: str, selectors: tuple[str, ...], declaration: str
    ) -> bool:
        """Write ``.cls th, .cls td {...}`` style rules straight to *stream*.

        These bypass the style map.  Each distinct selector is written once
        per run; returns False when it was already written.
        """
        selector = ", ".join(f".{class_name} {target}" for target in selectors)
        if selector in self._compound_selectors:
            return False
        self._compound_selectors.add(selector)
        stream.write(format_rule(selector, declaration))
        stream.flush()
        return True


def class_tokens(tag: Tag) -> list[str]:
    return (tag.get("class") or "").split()


def add_class(tag: Tag, class_name: str) -> None:
    """Append *class_name* to the tag's ``class`` unless already there."""
    tokens = class_tokens(tag)
    if class_name and class_name not in tokens:
        tokens.append(class_name)
    if tokens:
        tag["class"] = " ".join(tokens)


def apply_class(tag: Tag, class_name: str) -> None:
    """Replace the tag's inline style with *class_name*."""
    add_class(tag, class_name)
    if "style" in tag.attrs:
        del tag["style"]


def replace_class(tag: Tag, old: str, new: str) -> None:
    """Swap one class token for another, keeping position and uniqueness."""
    tokens = [new if token == old else token for token in class_tokens(tag)]
    tag["class"] = " ".join(dict.fromkeys(tokens))
