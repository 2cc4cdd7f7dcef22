"""
Utility functions for readme-generator.

Encoding detection, binary sniffing, safe file reads and small string helpers
shared by the scanner and the repository inspectors.
"""

from __future__ import annotations

import re
from pathlib import Path

import chardet

_UNSAFE_DIR_CHARS = re.compile(r"[^\w-]")


def detect_encoding(file_path: Path, sample_size: int = 8192) -> str:
    """Detect a likely text encoding for a file.

    UTF-8 is tried first; `chardet` is only consulted when strict UTF-8 decoding
    of the sample fails.

    Args:
        file_path: Path to the file to inspect.
        sample_size: Number of bytes to sample from the start of the file.

    Returns:
        A normalized encoding label such as `"utf-8"` or `"utf-8-sig"`.
    """
    try:
        with open(file_path, "rb") as f:
            sample = f.read(sample_size)
    except OSError:
        return "utf-8"

    if not sample:
        return "utf-8"

    if sample.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    if sample.startswith(b"\xff\xfe"):
        return "utf-16-le"
    if sample.startswith(b"\xfe\xff"):
        return "utf-16-be"

    try:
        sample.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    detected = chardet.detect(sample).get("encoding")
    if not isinstance(detected, str) or not detected:
        return "utf-8"

    encoding = detected.lower()
    if encoding in ("ascii", "utf8"):
        return "utf-8"
    return encoding


def is_binary_file(file_path: Path, sample_size: int = 8192) -> bool:
    """Heuristically determine whether a file is binary.

    A null byte in the sample is treated as binary; otherwise fewer than 70%
    printable bytes marks the file as binary. Unreadable files count as binary.

    Args:
        file_path: Path to the file to test.
        sample_size: Number of bytes to sample from the file start.

    Returns:
        True if the file is likely binary, otherwise False.
    """
    try:
        with open(file_path, "rb") as f:
            sample = f.read(sample_size)
    except OSError:
        return True

    if not sample:
        return False

    if b"\x00" in sample:
        return True

    printable = sum(1 for b in sample if 32 <= b <= 126 or b in (9, 10, 13) or b >= 128)
    return printable / len(sample) < 0.70


def read_file_safe(file_path: Path, max_chars: int | None = None) -> str:
    """Read a text file, falling back to detected encodings on decode errors.

    Args:
        file_path: Path to the file to read.
        max_chars: Optional maximum number of characters to read.

    Returns:
        The decoded file content.

    Raises:
        OSError: If the file cannot be opened.
    """
    try:
        with open(file_path, encoding="utf-8", errors="strict") as f:
            return f.read(max_chars) if max_chars is not None else f.read()
    except UnicodeDecodeError:
        pass

    encoding = detect_encoding(file_path)
    try:
        with open(file_path, encoding=encoding, errors="replace") as f:
            return f.read(max_chars) if max_chars is not None else f.read()
    except LookupError:
        with open(file_path, encoding="utf-8", errors="replace") as f:
            return f.read(max_chars) if max_chars is not None else f.read()


def normalize_path(path: str) -> str:
    """Normalize a path to forward slashes."""
    return path.replace("\\", "/")


def count_lines(content: str) -> int:
    """Count lines in text, treating a trailing partial line as a line."""
    if not content:
        return 0
    return content.count("\n") + (0 if content.endswith("\n") else 1)


def safe_dir_name(name: str) -> str:
    """Replace characters that are unsafe in directory names with underscores."""
    return _UNSAFE_DIR_CHARS.sub("_", name) or "repository"
