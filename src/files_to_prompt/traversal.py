"""Depth-first traversal of the requested paths.

Every path is classified once (file, directory, unsupported). Files go
through the ignore rules, the binary sniff and, for notebooks, conversion
before their record is written to the sink. Directories load their own
`.gitignore`, visit their files first and then descend into their
subdirectories. Work is strictly sequential: each file is finished before
its next sibling is looked at.
"""

from __future__ import annotations

import os
import subprocess  # noqa: S404
from pathlib import Path
from typing import TYPE_CHECKING

from files_to_prompt.config import NOTEBOOK_SUFFIX, EntryKind
from files_to_prompt.exceptions import NotebookConversionError, PathDoesNotExistError
from files_to_prompt.file_manipulation import (
    entry_kind,
    is_binary_file,
    list_directory,
    read_gitignore,
    read_text,
    should_ignore_directory,
    should_ignore_file,
)
from files_to_prompt.logging import logger
from files_to_prompt.notebook import convert_notebook_file
from files_to_prompt.output_construction import format_record

if TYPE_CHECKING:
    from collections.abc import Sequence

    from files_to_prompt.config import ProcessingConfig
    from files_to_prompt.notebook import CommandRunner
    from files_to_prompt.output_construction import OutputSink


class TraversalEngine:
    """Walks files and directories and writes accepted files to a sink."""

    def __init__(self, sink: OutputSink, runner: CommandRunner = subprocess.run) -> None:
        self.sink = sink
        self.runner = runner

    def run(self, paths: Sequence[Path | str], config: ProcessingConfig) -> bool:
        """Process the top-level paths in order.

        A missing path is reported and stops the run: the paths after it are
        not processed.

        Args:
            paths (Sequence[Path | str]): the paths named by the caller
            config (ProcessingConfig): the configuration for this invocation

        Returns:
            bool: True if every path was processed, False if the run was halted
        """
        for raw in paths:
            path = Path(raw)
            try:
                self.check_exists(path)
            except PathDoesNotExistError as e:
                self.sink.write_error(f"Error: {e}")
                logger.info("run_halted", path=str(path))
                return False
            self.process_path(path, config)
        return True

    @staticmethod
    def check_exists(path: Path) -> None:
        """Raise `PathDoesNotExistError` unless `path` exists (dangling symlinks count)."""
        if not os.path.lexists(path):
            raise PathDoesNotExistError(path=path)

    def process_path(self, path: Path, config: ProcessingConfig) -> None:
        """Dispatch a path named by the caller according to its kind."""
        kind = entry_kind(path)
        if kind is EntryKind.DIRECTORY:
            self.process_directory(path, config)
        elif kind is EntryKind.FILE:
            if should_ignore_file(path, config):
                logger.debug("path_ignored", path=str(path))
                return
            self.process_file(path, config)
        else:
            self.sink.write_error(f"Warning: Skipping {path}: unsupported file type")

    def process_directory(self, directory: Path, config: ProcessingConfig) -> None:
        """Walk a directory tree depth first, each directory's files before its subdirectories.

        Pending directories are kept on an explicit stack, so the depth of the
        tree is not bounded by the interpreter's recursion limit.

        Args:
            directory (Path): the directory to walk
            config (ProcessingConfig): the configuration inherited from the parent
        """
        pending = [(directory, config)]
        while pending:
            current, scope = pending.pop()
            pending.extend(reversed(self.visit_directory(current, scope)))

    def visit_directory(self, directory: Path, config: ProcessingConfig) -> list[tuple[Path, ProcessingConfig]]:
        """Emit a directory's files and return the subdirectories still to walk.

        Args:
            directory (Path): the directory to visit
            config (ProcessingConfig): the configuration inherited from the parent

        Returns:
            list[tuple[Path, ProcessingConfig]]: the subdirectories to descend into,
                in listing order, each with the configuration in scope for it
        """
        try:
            rules = read_gitignore(directory, config)
            files, subdirectories = list_directory(directory, include_hidden=config.include_hidden)
        except OSError as e:
            self.sink.write_error(f"Error processing directory {directory}: {e}")
            return []
        if rules:
            config = config.with_gitignore_rules(rules)
            logger.debug("rules_loaded", directory=str(directory), rules=rules)

        for file in files:
            if should_ignore_file(file, config):
                logger.debug("path_ignored", path=str(file))
                continue
            self.process_file(file, config)

        descend = []
        for subdirectory in subdirectories:
            if should_ignore_directory(subdirectory, config):
                logger.debug("path_ignored", path=str(subdirectory))
                continue
            descend.append((subdirectory, config))
        return descend

    def process_file(self, path: Path, config: ProcessingConfig) -> None:
        """Emit a file's record, or report why it was skipped.

        Read failures are reported with the path and do not stop the traversal.
        The file the output is being written to is never emitted.

        Args:
            path (Path): the file to emit
            config (ProcessingConfig): the configuration in scope for the file
        """
        if config.output_path is not None and path.resolve() == config.output_path:
            logger.debug("output_file_skipped", path=str(path))
            return
        try:
            if is_binary_file(path):
                self.sink.write_error(f"Warning: Skipping binary file {path}")
                logger.info("binary_skipped", path=str(path))
                return
            if path.suffix == NOTEBOOK_SUFFIX and config.notebook_converter:
                content = convert_notebook_file(
                    path,
                    config.notebook_converter,
                    config.notebook_format,
                    runner=self.runner,
                )
            else:
                content = read_text(path)
        except NotebookConversionError as e:
            self.sink.write_error(f"Error converting notebook {path}: {e}")
            return
        except (OSError, UnicodeDecodeError) as e:
            self.sink.write_error(f"Error processing file {path}: {e}")
            return

        self.sink.write(format_record(path, content))
        logger.info("file_emitted", path=str(path), chars=len(content))
