from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Protocol, Self, TextIO, runtime_checkable

from files_to_prompt.config import DELIMITER

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType


@runtime_checkable
class OutputSink(Protocol):
    """Destination for the prompt text and for user-facing diagnostics."""

    def write(self, text: str) -> None:
        """Append `text` and a newline to the content stream."""
        ...

    def write_error(self, text: str) -> None:
        """Append `text` and a newline to the error channel."""
        ...


def format_record(path: Path | str, content: str) -> str:
    """Build the record emitted for one file.

    The record is the path, a `---` line, the content and a closing `---`
    line. The sink appends the final newline.

    Args:
        path (Path | str): the path as it was reached during traversal
        content (str): the raw or converted file content

    Returns:
        str: the formatted record
    """
    return f"{path}\n{DELIMITER}\n{content}\n{DELIMITER}"


class ConsoleSink:
    """Writes content to stdout and diagnostics to stderr.

    Streams are looked up at write time so that redirections made after the
    sink was created (pytest's `capsys`, `contextlib.redirect_stdout`) apply.
    """

    def write(self, text: str) -> None:
        sys.stdout.write(f"{text}\n")

    def write_error(self, text: str) -> None:
        sys.stderr.write(f"{text}\n")


class FileSink:
    """Writes content to a file (truncated on open) and diagnostics to stderr."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._stream: TextIO = path.open("w", encoding="utf-8")

    def write(self, text: str) -> None:
        self._stream.write(f"{text}\n")

    def write_error(self, text: str) -> None:
        sys.stderr.write(f"{text}\n")

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class MemorySink:
    """Collects everything in memory, one list entry per write."""

    def __init__(self) -> None:
        self.out: list[str] = []
        self.err: list[str] = []

    def write(self, text: str) -> None:
        self.out.append(text)

    def write_error(self, text: str) -> None:
        self.err.append(text)

    @property
    def content(self) -> str:
        return "".join(f"{text}\n" for text in self.out)

    @property
    def errors(self) -> str:
        return "".join(f"{text}\n" for text in self.err)
