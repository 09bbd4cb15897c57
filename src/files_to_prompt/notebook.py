"""Notebook to plain-text conversion.

Two converters are available:

- the internal one renders code and markdown cells (plus `text/plain`
  outputs) as AsciiDoc or Markdown;
- the external one hands a temporary copy of the notebook to a tool with an
  nbconvert-compatible command line (`<tool> --to <format> <file>`) and reads
  back the file it writes next to the copy.
"""

from __future__ import annotations

import io
import shlex
import shutil
import subprocess  # noqa: S404
import tempfile
from enum import StrEnum, auto
from pathlib import Path
from shutil import which
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from files_to_prompt.config import INTERNAL_CONVERTER, NotebookFormat
from files_to_prompt.exceptions import NotebookConversionError
from files_to_prompt.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable

    CommandRunner = Callable[..., Any]


class CellType(StrEnum):
    """Notebook cell kinds; anything unknown is `OTHER` and skipped."""

    CODE = auto()
    MARKDOWN = auto()
    OTHER = auto()


class CellOutput(BaseModel):
    """One rendered output of a code cell, keyed by MIME type."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    data: dict[str, Any] = Field(default_factory=dict, description="MIME type to payload")

    @property
    def plain_text(self) -> str | None:
        """The `text/plain` payload, joined when stored as a list of lines."""
        payload = self.data.get("text/plain")
        if payload is None:
            return None
        if isinstance(payload, list):
            return "".join(str(part) for part in payload)
        return str(payload)


class Cell(BaseModel):
    """A notebook cell.

    Attributes:
        cell_type: code, markdown or other.
        source: Source lines, concatenated to form the cell body.
        execution_count: Execution counter of a code cell, if it ran.
        outputs: Rendered outputs (code cells only).
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    cell_type: CellType = Field(default=CellType.OTHER)
    source: list[str] = Field(default_factory=list)
    execution_count: int | None = Field(default=None)
    outputs: list[CellOutput] = Field(default_factory=list)

    @field_validator("cell_type", mode="before")
    @classmethod
    def _coerce_cell_type(cls, value: Any) -> CellType:  # noqa: ANN401
        try:
            return CellType(value)
        except ValueError:
            return CellType.OTHER

    @field_validator("source", mode="before")
    @classmethod
    def _wrap_source(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return [value]
        return value

    @property
    def text(self) -> str:
        return "".join(self.source)


class NotebookDocument(BaseModel):
    """A Jupyter notebook, reduced to what the converters need."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    cells: list[Cell] = Field(default_factory=list)


def load_notebook(path: Path) -> NotebookDocument:
    """Parse a notebook file.

    Args:
        path (Path): the `.ipynb` file to read

    Raises:
        NotebookConversionError: if the file is not a valid notebook document

    Returns:
        NotebookDocument: the parsed notebook
    """
    try:
        return NotebookDocument.model_validate_json(path.read_bytes())
    except ValidationError as e:
        raise NotebookConversionError(path=path, reason=f"invalid notebook: {e.error_count()} error(s)") from e


def _execution_label(count: int | None) -> str:
    # Jupyter shows a blank prompt for cells that never ran
    return " " if count is None else str(count)


def _write_asciidoc_code_cell(out: io.StringIO, cell: Cell) -> None:
    label = _execution_label(cell.execution_count)
    out.write(f"+*In[{label}]:*+\n[source, ipython3]\n----\n{cell.text}\n----\n")
    for output in cell.outputs:
        text = output.plain_text
        if text is None:
            continue
        out.write(f"\n+*Out[{label}]:*+\n----\n{text}\n----\n")


def _write_markdown_code_cell(out: io.StringIO, cell: Cell) -> None:
    out.write(f"```python\n{cell.text}\n```\n")
    for output in cell.outputs:
        text = output.plain_text
        if text is None:
            continue
        out.write(f"\n```\n{text}\n```\n")


def convert_notebook(document: NotebookDocument, fmt: NotebookFormat) -> str:
    """Render a notebook as AsciiDoc or Markdown text.

    Markdown cells are copied verbatim. Code cells become fenced source blocks
    followed by their `text/plain` outputs; other outputs (images, HTML, ...)
    and other cell types are dropped.

    Args:
        document (NotebookDocument): the notebook to render
        fmt (NotebookFormat): the target format

    Returns:
        str: the rendered text
    """
    out = io.StringIO()
    for cell in document.cells:
        if cell.cell_type is CellType.MARKDOWN:
            out.write(f"{cell.text}\n\n")
        elif cell.cell_type is CellType.CODE:
            if fmt is NotebookFormat.ASCIIDOC:
                _write_asciidoc_code_cell(out, cell)
            else:
                _write_markdown_code_cell(out, cell)
            out.write("\n")
    return out.getvalue().rstrip() + "\n"


def output_extension(fmt: NotebookFormat) -> str:
    """Extension of the file an nbconvert-style tool writes for `fmt`."""
    return "md" if fmt is NotebookFormat.MARKDOWN else str(fmt)


def convert_with_external_tool(
    path: Path,
    tool: str,
    fmt: NotebookFormat,
    runner: CommandRunner = subprocess.run,
) -> str:
    """Convert a notebook with an external nbconvert-compatible tool.

    The notebook is copied into a fresh temporary directory, the tool is run
    as `<tool> --to <fmt> <copy>` with the caller's standard streams, and the
    file it writes beside the copy is read back. The temporary directory is
    removed whatever happens.

    Args:
        path (Path): the notebook to convert
        tool (str): the tool command line, e.g. "jupyter nbconvert"
        fmt (NotebookFormat): the target format
        runner (CommandRunner, optional): command executor. Defaults to `subprocess.run`.

    Raises:
        NotebookConversionError: if the tool is missing, fails, or writes no output

    Returns:
        str: the converted text
    """
    try:
        command = shlex.split(tool)
    except ValueError as e:
        raise NotebookConversionError(path=path, reason=f"cannot parse converter command `{tool}`: {e}") from e
    if not command:
        raise NotebookConversionError(path=path, reason="empty converter command")
    if which(command[0]) is None:
        raise NotebookConversionError(path=path, reason=f"`{command[0]}` not found in PATH")

    with tempfile.TemporaryDirectory(prefix="files-to-prompt.") as tmp:
        copy = Path(tmp) / path.name
        shutil.copyfile(path, copy)
        cmd = [*command, "--to", str(fmt), str(copy)]
        logger.debug("external_conversion_started", command=cmd)
        try:
            runner(cmd, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise NotebookConversionError(path=path, reason=f"`{tool}` failed: {e}") from e

        converted = copy.with_suffix(f".{output_extension(fmt)}")
        if not converted.is_file():
            raise NotebookConversionError(path=path, reason=f"`{tool}` did not write {converted.name}")
        return converted.read_text(encoding="utf-8")


def convert_notebook_file(
    path: Path,
    converter: str,
    fmt: NotebookFormat,
    runner: CommandRunner = subprocess.run,
) -> str:
    """Convert a notebook file with the configured converter.

    Args:
        path (Path): the notebook to convert
        converter (str): `"internal"` or an external tool command
        fmt (NotebookFormat): the target format
        runner (CommandRunner, optional): command executor for external tools

    Returns:
        str: the converted text
    """
    if converter == INTERNAL_CONVERTER:
        text = convert_notebook(load_notebook(path), fmt)
    else:
        text = convert_with_external_tool(path, converter, fmt, runner=runner)
    logger.info("notebook_converted", path=str(path), converter=converter, format=str(fmt))
    return text
