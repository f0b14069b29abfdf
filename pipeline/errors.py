"""Error taxonomy for an inlex run.

Only ``ParseError`` and ``FileSystemError`` abort work.  The other two are
raised close to where the problem is found and caught by the caller, which
logs a warning and keeps going.
"""


class InlexError(Exception):
    """Base class for every error raised by inlex."""


class ParseError(InlexError):
    """Source markup could not be parsed.  Fatal for the whole run."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"{filename}: {reason}")
        self.filename = filename
        self.reason = reason


class FileSystemError(InlexError):
    """A path is missing or unreadable.  Fatal for the current step."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ResolutionInputError(InlexError):
    """A line of the batch side file could not be understood."""

    def __init__(self, line: str) -> None:
        super().__init__(f"unrecognized tag file line: {line!r}")
        self.line = line


class LineLocationNotFound(InlexError):
    """The first occurrence of a tag could not be found in the source text."""

    def __init__(self, filename: str, tag: str) -> None:
        super().__init__(f"could not locate <{tag} in {filename}")
        self.filename = filename
        self.tag = tag
