"""
files_to_prompt — Concatenate a directory full of files into a single prompt for LLMs.

Overview
--------
Every path given on the command line (files or directories, walked
recursively) is written out as:

    path/to/file
    ---
    contents of the file
    ---

Directories honor their `.gitignore` files, dot entries are skipped unless
`--include-hidden` is passed, and files can be excluded with `--ignore`.
Binary files are reported on stderr and skipped. Jupyter notebooks can be
converted to AsciiDoc or Markdown with `--nbconvert`.

When input is piped, paths are also read from stdin, one per line or as
`path:content` lines produced by grep and similar tools.

Usage
-----
Run `python -m files_to_prompt.cli --help` for full options. Common examples:
    - A whole project, skipping lock files:
        files-to-prompt src tests --ignore "*.lock"

    - Files that mention a symbol:
        grep -rn "TraversalEngine" src | files-to-prompt

    - Notebooks as Markdown, written to a file:
        files-to-prompt notebooks --nbconvert internal --format markdown -o prompt.txt
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from files_to_prompt import __version__
from files_to_prompt.config import NotebookFormat
from files_to_prompt.exceptions import ConfigurationError
from files_to_prompt.file_manipulation import parse_stdin_paths
from files_to_prompt.logging import logger, setup_logging
from files_to_prompt.output_construction import ConsoleSink, FileSink
from files_to_prompt.settings import Settings
from files_to_prompt.traversal import TraversalEngine

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO

    from files_to_prompt.output_construction import OutputSink

EXIT_OK = 0
EXIT_PATH_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Returns:
        argparse.ArgumentParser: Configured parser.
    """
    p = argparse.ArgumentParser(
        prog="files-to-prompt",
        description="Concatenate a directory full of files into a single prompt for use with LLMs.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("paths", nargs="*", help="Paths to files or directories to process.")
    p.add_argument(
        "--include-hidden",
        action="store_true",
        help="Include files and folders starting with '.'.",
    )
    p.add_argument(
        "--ignore-gitignore",
        action="store_true",
        help="Ignore .gitignore files and include all files.",
    )
    p.add_argument(
        "-i",
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Pattern to ignore (repeatable).",
    )
    p.add_argument(
        "--nbconvert",
        type=str,
        default=None,
        metavar="TOOL",
        help="Convert notebooks with TOOL ('internal' or e.g. 'jupyter nbconvert').",
    )
    p.add_argument(
        "--format",
        type=NotebookFormat,
        choices=list(NotebookFormat),
        default=NotebookFormat.ASCIIDOC,
        help="Notebook conversion format.",
    )
    p.add_argument("-o", "--output", type=Path, default=None, help="Write output to a file.")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    p.add_argument("-v", "--verbose", action="store_true", help="Emit debug logs.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into `Settings`.

    Args:
        argv (Sequence[str] | None): Optional CLI arguments.

    Raises:
        ConfigurationError: if the options do not form a valid configuration.

    Returns:
        Settings: the parsed settings.
    """
    args = build_parser().parse_args(argv)
    values = {k: v for k, v in vars(args).items() if v is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ConfigurationError(message=messages) from e


def read_stdin_paths(stream: TextIO) -> list[str]:
    """Read extra paths from `stream` when it is piped rather than a terminal."""
    if stream.isatty():
        return []
    return parse_stdin_paths(stream.read())


def _run(settings: Settings, paths: Sequence[str], sink: OutputSink) -> int:
    engine = TraversalEngine(sink)
    ok = engine.run(paths, settings.to_processing_config())
    return EXIT_OK if ok else EXIT_PATH_ERROR


def main(argv: Sequence[str] | None = None, stdin: TextIO | None = None) -> int:
    """Concatenate the requested files into a prompt.

    Args:
        argv (Sequence[str] | None): Optional CLI arguments.
        stdin (TextIO | None): Stream to read piped paths from. Defaults to `sys.stdin`.

    Returns:
        int: Process exit code.
    """
    try:
        settings = parse_args(argv)
        paths = [*settings.paths, *read_stdin_paths(stdin or sys.stdin)]
        if not paths:
            raise ConfigurationError(message="no paths given on the command line or stdin")
    except ConfigurationError as e:
        sys.stderr.write(f"Error: {e}\n")
        return EXIT_CONFIG_ERROR

    setup_logging(settings.log_file or None, logging.DEBUG if settings.verbose else logging.WARNING)
    logger.info("run_started", paths=paths, output=str(settings.output) if settings.output else None)

    if settings.output is None:
        return _run(settings, paths, ConsoleSink())
    with FileSink(settings.output) as sink:
        return _run(settings, paths, sink)


if __name__ == "__main__":
    raise SystemExit(main())
