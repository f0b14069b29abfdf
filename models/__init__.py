"""Public re-exports of all model types."""

from models.records import NO_CLOSING_TAG, NonStandardTag, PendingClass, StyleEntry
from models.settings import ParserName, RunSettings

__all__ = [
    # Settings
    "RunSettings",
    "ParserName",
    # Run-scoped records
    "StyleEntry",
    "PendingClass",
    "NonStandardTag",
    "NO_CLOSING_TAG",
]
