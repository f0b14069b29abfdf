"""RunSettings Pydantic model: everything one inlex run is configured with.

Defaults for the output-side paths and the parser can be overridden from
the environment (``INLEX_OUTPUT``, ``INLEX_AUDIT_LOG``, ``INLEX_TAG_FILE``,
``INLEX_PARSER``).  ``main.py`` loads a ``.env`` file before building the
settings so those variables may also live there.
"""

from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ParserName = Literal["html.parser", "lxml"]


def _env(name: str, default: str) -> str:
    return os.getenv(name) or default


class RunSettings(BaseModel):
    """Options for a single run over one or more source files.

    Exactly one of ``src`` (explicit files) or ``directory`` must be set.
    ``no_replace`` switches output from the source path to
    ``name.<no_replace>.ext``.
    """

    model_config = ConfigDict(extra="forbid")

    src: list[str] = []
    directory: Optional[str] = None
    recursive: bool = False
    output: str = Field(default_factory=lambda: _env("INLEX_OUTPUT", "styles.css"))
    no_replace: Optional[str] = None
    batch: bool = False
    log: bool = False
    audit_log: str = Field(
        default_factory=lambda: _env("INLEX_AUDIT_LOG", "nonStdMap.log")
    )
    tag_file: str = Field(
        default_factory=lambda: _env("INLEX_TAG_FILE", "non-std-tags.txt")
    )
    parser: ParserName = Field(
        default_factory=lambda: _env("INLEX_PARSER", "html.parser"),
        validate_default=True,
    )

    @field_validator("no_replace", mode="before")
    @classmethod
    def empty_modifier_is_none(cls, v):
        if v is None:
            return None
        v = str(v).strip().strip(".")
        return v or None

    @model_validator(mode="after")
    def one_input_mode(self) -> RunSettings:
        if self.src and self.directory:
            raise ValueError("use either src files or a directory, not both")
        if not self.src and not self.directory:
            raise ValueError("no source files or directory given")
        return self
