from __future__ import annotations

import io
import json
import shlex
import sys
from pathlib import Path

import pytest

from files_to_prompt import cli

NBCONVERT_SHIM = '''
import sys
from pathlib import Path

fmt, filename = sys.argv[2], Path(sys.argv[3])
if fmt == "asciidoc":
    filename.with_suffix(".asciidoc").write_text(
        "+*In[1]:*+\\n[source, ipython3]\\n----\\nprint('Hello, World!')\\n----\\n", encoding="utf-8"
    )
elif fmt == "markdown":
    filename.with_suffix(".md").write_text("```python\\nprint('Hello, World!')\\n```\\n", encoding="utf-8")
else:
    sys.exit(1)
'''


@pytest.fixture
def notebook(tmp_path: Path) -> Path:
    path = tmp_path / "nb" / "hello.ipynb"
    path.parent.mkdir()
    path.write_text(
        json.dumps(
            {
                "cells": [
                    {"cell_type": "code", "execution_count": 1, "outputs": [], "source": ["print('Hello, World!')"]},
                ],
            },
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def shim_command(tmp_path: Path) -> str:
    shim = tmp_path / "nbconvert_shim.py"
    shim.write_text(NBCONVERT_SHIM, encoding="utf-8")
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(shim))}"


@pytest.mark.integration
@pytest.mark.parametrize(
    ("fmt", "expected"),
    [
        ("asciidoc", "+*In[1]:*+"),
        ("markdown", "```python"),
    ],
)
def test_external_converter_round_trip(
    notebook: Path,
    shim_command: str,
    fmt: str,
    expected: str,
    capsys: pytest.CaptureFixture[str],
) -> None:
    exit_code = cli.main(
        [str(notebook.parent), "--nbconvert", shim_command, "--format", fmt],
        stdin=io.StringIO(""),
    )

    assert exit_code == cli.EXIT_OK
    out = capsys.readouterr().out
    assert str(notebook) in out
    assert expected in out
    assert "print('Hello, World!')" in out
    assert '"cells"' not in out


@pytest.mark.integration
@pytest.mark.parametrize(
    ("fmt", "expected"),
    [
        ("asciidoc", "+*In[1]:*+"),
        ("markdown", "```python"),
    ],
)
def test_internal_converter(notebook: Path, fmt: str, expected: str, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main([str(notebook), "--nbconvert", "internal", "--format", fmt], stdin=io.StringIO(""))

    assert exit_code == cli.EXIT_OK
    out = capsys.readouterr().out
    assert expected in out
    assert "print('Hello, World!')" in out


@pytest.mark.integration
def test_missing_external_converter_is_reported(notebook: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main(
        [str(notebook), "--nbconvert", "no-such-nbconvert-tool"],
        stdin=io.StringIO(""),
    )

    assert exit_code == cli.EXIT_OK
    captured = capsys.readouterr()
    assert captured.out == ""
    assert f"Error converting notebook {notebook}" in captured.err


@pytest.mark.integration
def test_grep_output_piped_on_stdin(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    match = tmp_path / "match.py"
    other = tmp_path / "other.py"
    match.write_text("import os\nTOKEN = 1\n", encoding="utf-8")
    other.write_text("x = 2\n", encoding="utf-8")
    grep_output = f"{match}:2:TOKEN = 1\n{match}:3:TOKEN again\n"

    exit_code = cli.main([], stdin=io.StringIO(grep_output))

    assert exit_code == cli.EXIT_OK
    out = capsys.readouterr().out
    assert out == f"{match}\n---\nimport os\nTOKEN = 1\n\n---\n"
