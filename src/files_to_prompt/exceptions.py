from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FilesToPromptError(Exception):
    """Base exception for errors in the files_to_prompt module."""


@dataclass(frozen=True)
class ConfigurationError(FilesToPromptError):
    """Raised when command-line options cannot be turned into a usable configuration."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class PathDoesNotExistError(FilesToPromptError):
    """Raised when a path named by the caller is missing from the filesystem."""

    path: Path

    def __str__(self) -> str:
        return f"Path does not exist: {self.path}"


@dataclass(frozen=True)
class NotebookConversionError(FilesToPromptError):
    """Raised when a notebook cannot be converted to text."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return self.reason
