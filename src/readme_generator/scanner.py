"""
File scanner module for readme-generator.

Collects source files for LLM context within a depth bound, respecting .gitignore,
the extension allow-list and per-file/total byte caps. Also renders the directory
tree, the language breakdown and the changelog summary.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from collections import defaultdict
from pathlib import Path
from typing import Generator, Optional

import pathspec

from .config import (
    CHANGELOG_FILE_NAMES,
    CODE_FILE_EXTENSIONS,
    DEFAULT_EXCLUDE_GLOBS,
    IGNORED_DIR_NAMES,
    MAX_FILE_BYTES,
    MAX_FILE_CONTENT_CHARS,
    MAX_TOTAL_BYTES,
    SPECIAL_FILE_NAMES,
    ScanStats,
    ScannedFile,
    get_language,
)
from .models import LanguageStat
from .utils import count_lines, is_binary_file, normalize_path, read_file_safe

logger = logging.getLogger(__name__)

_CHANGELOG_TASK = re.compile(r"^\s*[-*]\s+(.+?)\s*$")


class GitIgnoreParser:
    """
    Parser for .gitignore files.

    Supports nested .gitignore files in subdirectories.
    """

    def __init__(self, root_path: Path):
        """
        Initialize the parser.

        Args:
            root_path: Root directory of the repository
        """
        self.root_path = root_path.resolve()
        self._specs: dict[Path, pathspec.PathSpec] = {}
        self._load_gitignores()

    def _load_gitignores(self) -> None:
        for gitignore_path in sorted(self.root_path.rglob(".gitignore")):
            if any(part in IGNORED_DIR_NAMES for part in gitignore_path.relative_to(self.root_path).parts[:-1]):
                continue
            self._load_gitignore_file(gitignore_path, gitignore_path.parent)

    def _load_gitignore_file(self, gitignore_path: Path, base_path: Path) -> None:
        try:
            lines = gitignore_path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            logger.debug("Skipping unreadable %s: %s", gitignore_path, e)
            return

        patterns = [line.strip() for line in lines if line.strip() and not line.strip().startswith("#")]
        if patterns:
            self._specs[base_path] = pathspec.PathSpec.from_lines(
                pathspec.patterns.GitWildMatchPattern, patterns
            )

    def is_ignored(self, file_path: Path) -> bool:
        """
        Check if a path is ignored by any applicable .gitignore.

        Args:
            file_path: Absolute path to the file or directory

        Returns:
            True if the path should be ignored
        """
        file_path = file_path.resolve()

        for base_path, spec in sorted(self._specs.items(), key=lambda x: len(x[0].parts), reverse=True):
            try:
                rel_path = normalize_path(str(file_path.relative_to(base_path)))
            except ValueError:
                continue
            if spec.match_file(rel_path):
                return True
            if file_path.is_dir() and spec.match_file(rel_path + "/"):
                return True

        return False


class FileScanner:
    """
    Scans a repository for files to send to the model.

    Files deeper than `max_depth` levels are never visited: with a depth of 1 only
    files in the repository root are collected. A depth of 0 disables scanning.
    """

    def __init__(
        self,
        root_path: Path,
        max_depth: int,
        include_extensions: Optional[set[str]] = None,
        exclude_globs: Optional[set[str]] = None,
        max_file_bytes: int = MAX_FILE_BYTES,
        max_total_bytes: int = MAX_TOTAL_BYTES,
        max_content_chars: int = MAX_FILE_CONTENT_CHARS,
        respect_gitignore: bool = True,
    ):
        """
        Initialize the scanner.

        Args:
            root_path: Root directory to scan
            max_depth: Maximum directory depth; root-level files are depth 1
            include_extensions: File extensions to include
            exclude_globs: Glob patterns to exclude
            max_file_bytes: Files larger than this are skipped
            max_total_bytes: Scanning stops once this many bytes are collected
            max_content_chars: Per-file content is cut at this many characters
            respect_gitignore: Whether to respect .gitignore files
        """
        self.root_path = root_path.resolve()
        self.max_depth = max_depth
        self.include_extensions = include_extensions or CODE_FILE_EXTENSIONS.copy()
        self.exclude_globs = exclude_globs or DEFAULT_EXCLUDE_GLOBS.copy()
        self.max_file_bytes = max_file_bytes
        self.max_total_bytes = max_total_bytes
        self.max_content_chars = max_content_chars

        self._gitignore: Optional[GitIgnoreParser] = None
        if respect_gitignore and max_depth > 0:
            self._gitignore = GitIgnoreParser(self.root_path)

        self.stats = ScanStats()

    def _matches_exclude_glob(self, rel_path: str) -> Optional[str]:
        """Return the first exclude pattern matching `rel_path`, if any."""
        for pattern in sorted(self.exclude_globs):
            if pattern.endswith("/**"):
                dir_pattern = pattern[:-3]
                parts = rel_path.split("/")[:-1]
                if any(fnmatch.fnmatch(part, dir_pattern) for part in parts):
                    return pattern
            elif fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(rel_path.rsplit("/", 1)[-1], pattern):
                return pattern
        return None

    def _should_include_extension(self, file_path: Path) -> bool:
        if file_path.name.lower() in SPECIAL_FILE_NAMES:
            return True
        return file_path.suffix.lower() in self.include_extensions

    def scan(self) -> Generator[ScannedFile, None, None]:
        """
        Scan the repository and yield collected files with their content.

        Yields:
            ScannedFile objects in deterministic (sorted path) order
        """
        if self.max_depth <= 0:
            return

        for file_path in self._walk_files():
            self.stats.files_scanned += 1

            rel_path = normalize_path(str(file_path.relative_to(self.root_path)))

            matching_pattern = self._matches_exclude_glob(rel_path)
            if matching_pattern:
                self.stats.files_skipped_glob += 1
                continue

            if self._gitignore and self._gitignore.is_ignored(file_path):
                self.stats.files_skipped_gitignore += 1
                continue

            if not self._should_include_extension(file_path):
                self.stats.files_skipped_extension += 1
                continue

            try:
                size = file_path.stat().st_size
            except OSError:
                self.stats.files_skipped_unreadable += 1
                continue

            if size > self.max_file_bytes:
                self.stats.files_skipped_size += 1
                self.stats.skipped_large_files.append(rel_path)
                logger.info("Skipping large file: %s (%dKB)", rel_path, size // 1024)
                continue

            if self.stats.total_bytes_included + size > self.max_total_bytes:
                self.stats.total_limit_reached = True
                logger.info(
                    "Reached maximum total size limit (%dMB), stopping file scan",
                    self.max_total_bytes // (1024 * 1024),
                )
                return

            if is_binary_file(file_path):
                self.stats.files_skipped_binary += 1
                continue

            try:
                content = read_file_safe(file_path, max_chars=self.max_content_chars)
            except OSError as e:
                logger.debug("Could not read %s: %s", rel_path, e)
                self.stats.files_skipped_unreadable += 1
                continue

            self.stats.files_included += 1
            self.stats.total_bytes_included += size

            yield ScannedFile(
                path=file_path,
                relative_path=rel_path,
                size_bytes=size,
                extension=file_path.suffix.lower(),
                content=content,
            )

    def _walk_files(self) -> Generator[Path, None, None]:
        """Walk the tree breadth-first up to `max_depth`, yielding files in sorted order."""
        level = [self.root_path]
        depth = 1

        while level and depth <= self.max_depth:
            next_level: list[Path] = []
            for current_dir in level:
                try:
                    with os.scandir(current_dir) as it:
                        entries = sorted(it, key=lambda e: e.name)
                except OSError:
                    continue

                for entry in entries:
                    try:
                        if entry.is_symlink():
                            continue
                        entry_path = Path(entry.path)
                        if entry.is_dir():
                            if entry.name in IGNORED_DIR_NAMES:
                                continue
                            if entry.name.startswith(".") and entry.name != ".github":
                                continue
                            if self._gitignore and self._gitignore.is_ignored(entry_path):
                                continue
                            next_level.append(entry_path)
                        elif entry.is_file():
                            yield entry_path
                    except OSError:
                        continue

            level = next_level
            depth += 1


def scan_repository(
    root_path: Path,
    max_depth: int,
    max_file_bytes: int = MAX_FILE_BYTES,
    max_total_bytes: int = MAX_TOTAL_BYTES,
    respect_gitignore: bool = True,
) -> tuple[list[ScannedFile], ScanStats]:
    """
    Convenience function to scan a repository.

    Returns:
        Tuple of (list of ScannedFile, ScanStats)
    """
    scanner = FileScanner(
        root_path=root_path,
        max_depth=max_depth,
        max_file_bytes=max_file_bytes,
        max_total_bytes=max_total_bytes,
        respect_gitignore=respect_gitignore,
    )
    files = list(scanner.scan())
    return files, scanner.stats


def generate_tree(root_path: Path, max_depth: int = 3, include_files: bool = True) -> str:
    """
    Generate a directory tree representation.

    Args:
        root_path: Root directory
        max_depth: Maximum depth to display
        include_files: Whether to include files in the tree

    Returns:
        String representation of the directory tree
    """
    lines = [root_path.name + "/"]

    def _walk(path: Path, prefix: str, depth: int) -> None:
        if depth > max_depth:
            return

        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: (not e.is_dir(), e.name))
        except OSError:
            return

        visible = [
            entry
            for entry in entries
            if not (entry.name.startswith(".") and entry.name not in {".github", ".env.example"})
            and not (entry.is_dir() and entry.name in IGNORED_DIR_NAMES)
            and (include_files or entry.is_dir())
        ]

        for i, entry in enumerate(visible):
            is_last = i == len(visible) - 1
            connector = "└── " if is_last else "├── "
            if entry.is_dir():
                lines.append(f"{prefix}{connector}{entry.name}/")
                _walk(Path(entry.path), prefix + ("    " if is_last else "│   "), depth + 1)
            else:
                lines.append(f"{prefix}{connector}{entry.name}")

    _walk(root_path, "", 1)
    return "\n".join(lines)


def compute_language_stats(files: list[ScannedFile]) -> list[LanguageStat]:
    """Compute each language's share of lines among the scanned files.

    Files whose extension maps to no programming language are ignored.

    Args:
        files: Files returned by the scanner.

    Returns:
        Stats sorted by line count (descending), then name.
    """
    lines_by_language: dict[str, int] = defaultdict(int)
    files_by_language: dict[str, int] = defaultdict(int)
    extension_by_language: dict[str, str] = {}

    for scanned in files:
        language = scanned.language
        if language is None:
            continue
        lines_by_language[language] += count_lines(scanned.content)
        files_by_language[language] += 1
        extension_by_language.setdefault(language, scanned.extension)

    total_lines = sum(lines_by_language.values())
    stats = [
        LanguageStat(
            name=language,
            extension=extension_by_language[language],
            file_count=files_by_language[language],
            lines=lines,
            percentage=round(lines * 100 / total_lines, 1) if total_lines else 0.0,
        )
        for language, lines in lines_by_language.items()
    ]
    stats.sort(key=lambda s: (-s.lines, s.name))
    return stats


def find_changelog(root_path: Path) -> Path | None:
    """Return the first changelog file in the repository root, in `CHANGELOG_FILE_NAMES` order."""
    try:
        files = {entry.name: entry for entry in root_path.iterdir() if entry.is_file()}
    except OSError:
        return None
    for name in CHANGELOG_FILE_NAMES:
        if name in files:
            return files[name]
    return None


def read_changelog(root_path: Path) -> str | None:
    """Return the content of the repository's changelog, if it has a readable one."""
    changelog = find_changelog(root_path)
    if changelog is None:
        return None
    try:
        return read_file_safe(changelog, max_chars=MAX_FILE_CONTENT_CHARS)
    except OSError as e:
        logger.debug("Could not read %s: %s", changelog, e)
        return None


def parse_changelog_tasks(text: str) -> list[str]:
    """Extract bullet items (`- ` or `* `) from changelog text."""
    tasks = []
    for line in text.splitlines():
        match = _CHANGELOG_TASK.match(line)
        if match:
            tasks.append(match.group(1))
    return tasks
