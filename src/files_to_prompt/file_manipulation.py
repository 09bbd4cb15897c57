from __future__ import annotations

import os
import re
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from files_to_prompt.config import (
    BINARY_CHUNK_SIZE,
    GITIGNORE_FILENAME,
    MAX_STDIN_PATH_LENGTH,
    EntryKind,
)
from files_to_prompt.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from files_to_prompt.config import ProcessingConfig


def matches(text: str, pattern: str) -> bool:
    """Test `text` against a wildcard pattern.

    Only `*` is special and stands for any run of characters (possibly empty).
    Everything else is literal, and the whole of `text` must match.

    Args:
        text (str): the filename or relative path to test
        pattern (str): the wildcard pattern

    Returns:
        bool: True if `text` matches `pattern` entirely, False otherwise
    """
    regex = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.fullmatch(regex, text) is not None


def read_gitignore(directory: Path, config: ProcessingConfig) -> list[str]:
    """Read the ignore rules defined by `directory`'s rule file.

    Args:
        directory (Path): the directory that may hold a `.gitignore`
        config (ProcessingConfig): the active configuration

    Returns:
        list[str]: one trimmed rule per non-blank, non-comment line; empty when the
            file is absent or rule files are disabled
    """
    if config.ignore_gitignore:
        return []
    gitignore = directory / GITIGNORE_FILENAME
    if not gitignore.is_file():
        return []
    lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    rules = (line.strip() for line in lines)
    return [rule for rule in rules if rule and not rule.startswith("#")]


def should_ignore(path: Path, rules: Sequence[str]) -> bool:
    """Check `path` against a list of ignore rules.

    A rule matches when it matches the basename of `path`. A rule ending in `/`
    is anchored to directories: without its trailing slash, it is also tested
    against the location of `path` relative to its parent directory.

    Args:
        path (Path): the entry to test
        rules (Sequence[str]): the rules to apply, in order

    Returns:
        bool: True if any rule matches, False otherwise
    """
    for rule in rules:
        if matches(path.name, rule):
            return True
        if rule.endswith("/"):
            relative = os.path.relpath(path, path.parent)
            if matches(relative, rule[:-1]):
                return True
    return False


def should_ignore_file(path: Path, config: ProcessingConfig) -> bool:
    """Check a file against the rule-file patterns then the explicit patterns."""
    return should_ignore(path, config.combined_rules)


def should_ignore_directory(path: Path, config: ProcessingConfig) -> bool:
    """Check a directory against the rule-file patterns of its parent.

    Explicit `--ignore` patterns target files and never block descent.
    """
    return should_ignore(path, config.gitignore_rules)


def is_binary_file(path: Path, chunk_size: int = BINARY_CHUNK_SIZE) -> bool:
    """Check if a file holds bytes outside 7-bit ASCII.

    The file is streamed in `chunk_size` pieces and reading stops at the first
    chunk containing a byte above 127.

    Args:
        path (Path): the file to sniff
        chunk_size (int, optional): bytes read per chunk. Defaults to 8192.

    Returns:
        bool: True on the first non-ASCII byte; False for ASCII-only files and
            for missing paths, so that a later read reports the missing file
    """
    try:
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                if not chunk.isascii():
                    return True
    except FileNotFoundError:
        return False
    return False


def entry_kind(path: Path) -> EntryKind:
    """Classify a filesystem entry with a single `lstat` call.

    Symlinks are not followed and count as unsupported.

    Args:
        path (Path): the entry to classify

    Returns:
        EntryKind: FILE, DIRECTORY or UNSUPPORTED
    """
    mode = path.lstat().st_mode
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    return EntryKind.UNSUPPORTED


def list_directory(directory: Path, *, include_hidden: bool) -> tuple[list[Path], list[Path]]:
    """List the files and subdirectories of `directory`.

    Entries keep the order the operating system returns them in. Other entry
    types (symlinks, pipes, ...) are left out.

    Args:
        directory (Path): the directory to list
        include_hidden (bool): keep entries whose name starts with a dot

    Returns:
        tuple[list[Path], list[Path]]: the files, then the subdirectories
    """
    files: list[Path] = []
    directories: list[Path] = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if not include_hidden and entry.name.startswith("."):
                continue
            if entry.is_file(follow_symlinks=False):
                files.append(directory / entry.name)
            elif entry.is_dir(follow_symlinks=False):
                directories.append(directory / entry.name)
    return files, directories


def read_text(path: Path) -> str:
    """Read a text file's contents as UTF-8."""
    return path.read_text(encoding="utf-8")


def is_valid_stdin_path(candidate: str) -> bool:
    """Check that a candidate path is printable ASCII and not overly long.

    Args:
        candidate (str): the candidate path

    Returns:
        bool: True if the candidate is non-empty, every character lies in [32, 126]
            and the length is at most 1024
    """
    if not candidate or len(candidate) > MAX_STDIN_PATH_LENGTH:
        return False
    return all(32 <= ord(ch) <= 126 for ch in candidate)  # noqa: PLR2004


def parse_stdin_paths(raw: str) -> list[str]:
    """Extract candidate file paths from text piped on standard input.

    Both one-path-per-line input and `path:content` lines (as printed by grep
    and similar search tools) are understood. Invalid candidates are dropped
    without notice and duplicates keep their first position.

    Args:
        raw (str): the piped text

    Returns:
        list[str]: the unique candidate paths, in order of first occurrence
    """
    paths: list[str] = []
    seen: set[str] = set()
    for line in raw.split("\n"):
        line = line.strip()  # noqa: PLW2901
        if not line:
            continue
        candidate = line.split(":", 1)[0].strip() if ":" in line else line
        if not is_valid_stdin_path(candidate):
            logger.debug("stdin_candidate_dropped", length=len(candidate))
            continue
        if candidate in seen:
            continue
        seen.add(candidate)
        paths.append(candidate)
    return paths
