from __future__ import annotations

import os
import shlex
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from files_to_prompt.config import NotebookFormat, ProcessingConfig

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "FILES_TO_PROMPT_"


def env_default(name: str) -> str | None:
    """Return the `FILES_TO_PROMPT_<name>` default from the environment or `.env`, if set.

    Variables already present in the process environment win over `.env`.

    Args:
        name (str): the variable name without its prefix, e.g. "NBCONVERT"

    Returns:
        str | None: the value, or None when unset or blank
    """
    if ENV_FILE:
        load_dotenv(ENV_FILE, override=False)
    value = os.environ.get(f"{ENV_PREFIX}{name}", "").strip()
    return value or None


class Settings(BaseModel):
    """Configuration settings for the files_to_prompt command line."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    paths: list[str] = Field(default_factory=list, description="Files or directories to process.")
    include_hidden: bool = Field(default=False, description="Include files and folders starting with '.'.")
    ignore_gitignore: bool = Field(default=False, description="Ignore .gitignore files.")
    ignore: list[str] = Field(default_factory=list, description="Patterns to ignore.")
    nbconvert: str | None = Field(
        default_factory=lambda: env_default("NBCONVERT"),
        description="Notebook converter: 'internal' or an external command.",
    )
    format: NotebookFormat = Field(default=NotebookFormat.ASCIIDOC, description="Notebook output format.")
    output: Path | None = Field(default=None, description="Output file; stdout when unset.")
    log_file: str = Field(
        default_factory=lambda: env_default("LOG_FILE") or "",
        description="Log file path.",
    )
    verbose: bool = Field(default=False, description="Emit debug logs.")

    @field_validator("nbconvert", mode="before")
    @classmethod
    def _check_converter(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value.strip():
            msg = "--nbconvert needs a tool name or 'internal'"
            raise ValueError(msg)
        try:
            shlex.split(value)
        except ValueError as e:
            msg = f"--nbconvert command cannot be parsed: {e}"
            raise ValueError(msg) from e
        return value

    def to_processing_config(self) -> ProcessingConfig:
        """Build the immutable traversal configuration from these settings."""
        return ProcessingConfig(
            include_hidden=self.include_hidden,
            ignore_gitignore=self.ignore_gitignore,
            ignore_patterns=tuple(self.ignore),
            notebook_converter=self.nbconvert,
            notebook_format=self.format,
            output_path=self.output.resolve() if self.output else None,
        )
