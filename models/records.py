"""Run-scoped records shared between the style engine, the normalizer and
the tag resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Closing-tag value meaning "emit no closing tag at all".
NO_CLOSING_TAG = ""


@dataclass
class StyleEntry:
    """A class name interned for one canonical declaration block."""

    class_name: str
    emitted: bool = False


@dataclass
class PendingClass:
    """A deprecated-markup class waiting to be interned into the style map.

    ``targets`` are the tags the class was applied to, so they can be
    re-pointed if the declaration already exists under another name.
    ``extra_selectors`` name descendants that get a compound rule.
    """

    class_name: str
    declaration: str
    targets: list[Any] = field(default_factory=list)
    extra_selectors: tuple[str, ...] = ()


@dataclass
class NonStandardTag:
    """First sighting of a tag name outside the standard vocabulary."""

    name: str
    spelling: str
    filename: str
    line: str

    @property
    def location(self) -> str:
        return f"{self.filename}:{self.line}"
