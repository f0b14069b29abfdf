"""Command-line entry point for inlex.

Moves inline styles and ``<style>`` blocks out of HTML/JSP sources into a
shared stylesheet, rewrites deprecated presentational markup as classes,
and keeps server-side tags intact with operator-supplied closing tags.

Usage::

    inlex -s page.jsp other.jsp -o site.css
    inlex -d webapp/ -r -n modified -b -l
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

# Load .env from the working directory so INLEX_* defaults are set
load_dotenv(Path.cwd() / ".env")

from models.settings import RunSettings
from pipeline.errors import InlexError
from pipeline.runner import run


# ---------------------------------------------------------------------------
# Structured JSON logging
# ---------------------------------------------------------------------------

class StructuredFormatter(logging.Formatter):
    """JSON-lines formatter for structured log output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Include optional extra fields when present
        for key in ("file", "tag", "line", "class_name"):
            val = getattr(record, key, None)
            if val is not None:
                log_data[key] = val
        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


logger = logging.getLogger("inlex")


def configure_logging(verbose: bool = False) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="inlex",
        description="Extract inline styles into a stylesheet and modernize deprecated markup.",
    )
    p.add_argument("-s", "--src", nargs="+", default=[], metavar="FILE", help="Source file(s) to process")
    p.add_argument("-d", "--directory", help="Process every file in this directory")
    p.add_argument("-r", "--recursive", action="store_true", help="With -d, also process subdirectories")
    p.add_argument("-o", "--output", help="Stylesheet to append rules to (default: styles.css)")
    p.add_argument(
        "-n",
        "--no-replace",
        metavar="MODIFIER",
        help="Write name.MODIFIER.ext next to each source instead of overwriting it",
    )
    p.add_argument(
        "-b",
        "--batch",
        action="store_true",
        help="Answer non-standard tags in one side file instead of one prompt per tag",
    )
    p.add_argument("-l", "--log", action="store_true", help="Append tag questions and answers to the audit log")
    p.add_argument("--audit-log", help="Audit log path (default: nonStdMap.log)")
    p.add_argument("--tag-file", help="Batch side file path (default: non-std-tags.txt)")
    p.add_argument("--parser", choices=["html.parser", "lxml"], help="BeautifulSoup tree builder")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def settings_from_args(args: argparse.Namespace) -> RunSettings:
    """Build RunSettings, leaving unset options to the model defaults."""
    values = {
        "src": args.src,
        "directory": args.directory,
        "recursive": args.recursive,
        "output": args.output,
        "no_replace": args.no_replace,
        "batch": args.batch,
        "log": args.log,
        "audit_log": args.audit_log,
        "tag_file": args.tag_file,
        "parser": args.parser,
    }
    return RunSettings(**{k: v for k, v in values.items() if v is not None})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.src and not args.directory:
        parser.print_usage()
        return 2

    try:
        settings = settings_from_args(args)
    except ValidationError as exc:
        parser.print_usage(sys.stderr)
        for error in exc.errors():
            print(f"inlex: error: {error['msg']}", file=sys.stderr)
        return 2

    try:
        report = run(settings)
    except InlexError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 1

    for path in report.outputs:
        logger.debug("wrote %s", path, extra={"file": str(path)})
    return 0


if __name__ == "__main__":
    sys.exit(main())
