from __future__ import annotations

from pathlib import Path

import pytest

from files_to_prompt.output_construction import ConsoleSink, FileSink, MemorySink, OutputSink, format_record


@pytest.mark.unit
def test_format_record_brackets_content_with_delimiters() -> None:
    record = format_record(Path("src") / "app.py", "print('ok')")

    assert record == "src/app.py\n---\nprint('ok')\n---"


@pytest.mark.unit
def test_console_sink_separates_content_and_errors(capsys: pytest.CaptureFixture[str]) -> None:
    sink = ConsoleSink()

    sink.write("content")
    sink.write_error("Warning: something")

    captured = capsys.readouterr()
    assert captured.out == "content\n"
    assert captured.err == "Warning: something\n"


@pytest.mark.unit
def test_file_sink_truncates_and_appends(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = tmp_path / "prompt.txt"
    output.write_text("stale", encoding="utf-8")

    with FileSink(output) as sink:
        sink.write("first")
        sink.write("second")
        sink.write_error("Error: oops")

    assert output.read_text(encoding="utf-8") == "first\nsecond\n"
    assert capsys.readouterr().err == "Error: oops\n"


@pytest.mark.unit
def test_memory_sink_collects_writes() -> None:
    sink = MemorySink()

    sink.write("a")
    sink.write("b")
    sink.write_error("c")

    assert isinstance(sink, OutputSink)
    assert sink.content == "a\nb\n"
    assert sink.errors == "c\n"
