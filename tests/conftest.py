"""Pytest configuration and fixtures for inlex tests."""

import io
import itertools
import logging
from pathlib import Path

import pytest

from models.settings import RunSettings
from parsing.document import parse_document
from styles.deprecated import MarkupNormalizer
from styles.engine import StyleEngine


class ScriptedPrompt:
    """Stand-in for ``input``: records questions, answers by tag name.

    An answer is picked when the question ends with ``<name``; anything
    else gets *default*.
    """

    def __init__(self, answers=None, default=""):
        self.answers = answers or {}
        self.default = default
        self.questions = []

    def __call__(self, question):
        self.questions.append(question)
        for tag, answer in self.answers.items():
            if question.rstrip().endswith(f"<{tag}"):
                return answer
        return self.default


def sequential_names(prefix="c"):
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


@pytest.fixture(autouse=True)
def reset_inlex_logger():
    """main.configure_logging() turns propagation off; undo it after each test."""
    yield
    logger = logging.getLogger("inlex")
    logger.handlers[:] = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def prompt_factory():
    return ScriptedPrompt


@pytest.fixture
def names():
    return sequential_names()


@pytest.fixture
def engine(names) -> StyleEngine:
    return StyleEngine(names)


@pytest.fixture
def stylesheet() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def normalizer(engine, stylesheet) -> MarkupNormalizer:
    return MarkupNormalizer(engine, stylesheet)


@pytest.fixture
def soup_of():
    """Return a parser function: markup -> tree."""
    return lambda text: parse_document(text)


@pytest.fixture
def write_file(tmp_path: Path):
    """Create a file under tmp_path and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings_factory(tmp_path: Path):
    """Build RunSettings whose run artifacts all live under tmp_path."""

    def _make(**overrides) -> RunSettings:
        values = {
            "output": str(tmp_path / "out.css"),
            "audit_log": str(tmp_path / "audit.log"),
            "tag_file": str(tmp_path / "tags.txt"),
        }
        values.update(overrides)
        return RunSettings(**values)

    return _make
