from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Iterable

GITIGNORE_FILENAME = ".gitignore"
NOTEBOOK_SUFFIX = ".ipynb"
INTERNAL_CONVERTER = "internal"
DELIMITER = "---"

BINARY_CHUNK_SIZE = 8192
MAX_STDIN_PATH_LENGTH = 1024


class NotebookFormat(StrEnum):
    """Text formats a notebook can be converted to."""

    ASCIIDOC = auto()
    MARKDOWN = auto()


class EntryKind(StrEnum):
    """Kind of a filesystem entry, as far as traversal is concerned.

    Anything that is neither a regular file nor a directory (pipes, sockets,
    symlinks, devices) is `UNSUPPORTED`.
    """

    FILE = auto()
    DIRECTORY = auto()
    UNSUPPORTED = auto()


class ProcessingConfig(BaseModel):
    """Immutable options driving a traversal.

    `gitignore_rules` holds the rule-file patterns in scope for the branch of
    the tree currently being walked. A directory with its own rule file gets a
    derived copy through `with_gitignore_rules`; directories without one share
    their parent's instance.

    Attributes:
        include_hidden: Visit entries whose name starts with a dot.
        ignore_gitignore: Never read `.gitignore` files.
        ignore_patterns: Patterns given with `--ignore`, tested against files only.
        gitignore_rules: Patterns loaded from rule files on the way down.
        notebook_converter: `"internal"`, an external command, or None to emit notebooks raw.
        notebook_format: Target format for notebook conversion.
        output_path: The file the prompt is being written to, skipped wherever it is met.
    """

    model_config = ConfigDict(frozen=True)

    include_hidden: bool = Field(default=False, description="Include dot files and dot directories.")
    ignore_gitignore: bool = Field(default=False, description="Do not honor .gitignore files.")
    ignore_patterns: tuple[str, ...] = Field(default=(), description="Explicit --ignore patterns.")
    gitignore_rules: tuple[str, ...] = Field(default=(), description="Rule-file patterns in scope.")
    notebook_converter: str | None = Field(default=None, description="Notebook converter command.")
    notebook_format: NotebookFormat = Field(
        default=NotebookFormat.ASCIIDOC,
        description="Notebook conversion format.",
    )
    output_path: Path | None = Field(default=None, description="Resolved output file, never emitted.")

    def with_gitignore_rules(self, rules: Iterable[str]) -> ProcessingConfig:
        """Derive a config for a subtree that defines additional rule-file patterns.

        Args:
            rules (Iterable[str]): the patterns read from the subtree's rule file

        Returns:
            ProcessingConfig: a new instance whose rules are the inherited ones followed by `rules`
        """
        return self.model_copy(update={"gitignore_rules": (*self.gitignore_rules, *rules)})

    @property
    def combined_rules(self) -> tuple[str, ...]:
        """Rule-file patterns followed by explicit patterns, in evaluation order."""
        return (*self.gitignore_rules, *self.ignore_patterns)
