"""
Repository fetcher module.

Resolves the repository argument to a local directory: either an existing path, or a
remote (URL, SSH remote or `owner/repo` shorthand) shallow-cloned into a temporary
directory. Also queries the GitHub REST API for repository metadata.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import git
import requests
from rich.console import Console

from .git_info import extract_repo_name, parse_remote_url
from .utils import safe_dir_name

console = Console()
logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_TIMEOUT = 10

_URL_SPEC = re.compile(r"^(?:https?|git|ssh)://", re.IGNORECASE)
_SCP_SPEC = re.compile(r"^[\w.-]+@[\w.-]+:\S+/\S+$")
_SHORTHAND_SPEC = re.compile(r"^[\w-][\w.-]*/[\w.-]+$")


class FetchError(Exception):
    """Error during repository fetching."""

    pass


@dataclass
class GitHubMetadata:
    """Repository facts returned by the GitHub REST API."""

    description: str
    owner: str
    default_branch: str
    license: str | None = None
    homepage: str | None = None


def is_remote_spec(spec: str) -> bool:
    """Check whether the repository argument names a remote rather than a local path.

    An existing local path always wins, so a directory called `owner/repo` is scanned
    in place rather than cloned.

    Args:
        spec: Repository argument from the command line.

    Returns:
        True for URLs, SSH remotes and `owner/repo` shorthand that is not a local path.
    """
    spec = spec.strip()
    if not spec or Path(spec).expanduser().exists():
        return False
    return bool(_URL_SPEC.match(spec) or _SCP_SPEC.match(spec) or _SHORTHAND_SPEC.match(spec))


def to_clone_url(spec: str) -> str:
    """Expand `owner/repo` shorthand to a GitHub HTTPS URL; other remotes pass through."""
    spec = spec.strip()
    if _SHORTHAND_SPEC.match(spec) and not _URL_SPEC.match(spec):
        owner, name = spec.split("/", 1)
        return f"https://github.com/{owner}/{name.removesuffix('.git')}.git"
    return spec


def with_token(url: str, token: str | None) -> str:
    """Embed a token in an HTTPS GitHub URL for authenticated cloning.

    Args:
        url: Clone URL.
        token: GitHub token, or None.

    Returns:
        `https://<token>@github.com/owner/repo.git` for HTTPS GitHub URLs when a token is
        given, otherwise `url` unchanged.
    """
    if not token:
        return url
    parsed = urlparse(url)
    if parsed.scheme != "https" or parsed.hostname not in ("github.com", "www.github.com"):
        return url
    if parsed.username:
        return url
    return parsed._replace(netloc=f"{token}@{parsed.netloc}").geturl()


def _scrub(message: str, token: str | None) -> str:
    return message.replace(token, "***") if token else message


def clone_repository(url: str, token: str | None = None, target_dir: Path | None = None) -> Path:
    """Shallow-clone a repository.

    Args:
        url: Remote URL, SSH remote or `owner/repo` shorthand.
        token: Optional GitHub token injected into HTTPS GitHub URLs.
        target_dir: Parent directory to clone into. If None, a temporary directory is created.

    Returns:
        Path to the cloned repository root directory.

    Raises:
        FetchError: If the clone fails.
    """
    clone_url = to_clone_url(url)
    repo_name = safe_dir_name(extract_repo_name(clone_url))

    created_temp = target_dir is None
    if target_dir is None:
        target_dir = Path(tempfile.mkdtemp(prefix="readme-generator-"))
    else:
        target_dir.mkdir(parents=True, exist_ok=True)

    repo_path = target_dir / repo_name

    console.print(f"[cyan]Cloning {clone_url}...[/cyan]")
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

    try:
        repo = git.Repo.clone_from(with_token(clone_url, token), repo_path, depth=1, env=env)
        repo.close()
    except git.GitCommandError as e:
        if created_temp:
            cleanup_temp_repo(target_dir)
        raise FetchError(_scrub(f"Failed to clone repository: {e}", token)) from None

    console.print(f"[green]✓ Cloned to {repo_path}[/green]")
    return repo_path


def fetch_github_metadata(
    owner: str, repo: str, token: str | None = None, session: requests.Session | None = None
) -> GitHubMetadata | None:
    """Fetch description, owner and default branch from the GitHub REST API.

    Failures (network errors, rate limits, unknown repositories) are logged and
    degrade to None.

    Args:
        owner: Repository owner login.
        repo: Repository name.
        token: Optional GitHub token for authenticated requests.
        session: Optional requests session (used by tests).

    Returns:
        GitHubMetadata, or None if the request fails.
    """
    headers = {"Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"token {token}"

    http = session or requests
    url = f"{GITHUB_API_URL}/repos/{owner}/{repo}"
    try:
        response = http.get(url, headers=headers, timeout=GITHUB_API_TIMEOUT)
        response.raise_for_status()
        data: dict[str, Any] = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Could not fetch GitHub metadata for %s/%s: %s", owner, repo, e)
        return None

    license_info = data.get("license") or {}
    spdx_id = license_info.get("spdx_id") if isinstance(license_info, dict) else None
    return GitHubMetadata(
        description=data.get("description") or "",
        owner=(data.get("owner") or {}).get("login") or owner,
        default_branch=data.get("default_branch") or "main",
        license=spdx_id if spdx_id and spdx_id != "NOASSERTION" else None,
        homepage=data.get("homepage") or None,
    )


def validate_local_path(path: Path) -> Path:
    """Validate and resolve a local repository path.

    Args:
        path: Local path to validate.

    Returns:
        Resolved absolute path to a readable directory.

    Raises:
        FetchError: If the path does not exist, is not a directory, or is not readable.
    """
    resolved = path.expanduser().resolve()

    if not resolved.exists():
        raise FetchError(f"Path does not exist: {resolved}")

    if not resolved.is_dir():
        raise FetchError(f"Path is not a directory: {resolved}")

    if not os.access(resolved, os.R_OK):
        raise FetchError(f"Path is not readable: {resolved}")

    return resolved


def cleanup_temp_repo(path: Path) -> None:
    """Delete a temporary clone directory, warning instead of raising on failure."""
    try:
        if path.exists():
            shutil.rmtree(path)
    except OSError as e:
        console.print(f"[yellow]Warning: Failed to clean up temp directory {path}: {e}[/yellow]")


class RepoContext:
    """
    Context manager for repository fetching.

    Yields a local directory for the repository argument and removes temporary clones on
    exit, including when generation fails.
    """

    def __init__(self, spec: str, token: str | None = None) -> None:
        """Initialize the context manager.

        Args:
            spec: Local path, remote URL, SSH remote or `owner/repo` shorthand.
            token: Optional GitHub token used when cloning.
        """
        self.spec = spec
        self.token = token
        self.is_remote = is_remote_spec(spec)
        self.remote_url: str | None = to_clone_url(spec) if self.is_remote else None
        self._repo_path: Path | None = None

    @property
    def owner_and_name(self) -> tuple[str, str] | None:
        if self.remote_url is None:
            return None
        return parse_remote_url(self.remote_url)

    def __enter__(self) -> Path:
        """Enter the context, fetching the repository.

        Returns:
            The path to the repository root.

        Raises:
            FetchError: If the path is invalid or cloning fails.
        """
        if self.is_remote:
            self._repo_path = clone_repository(self.spec, self.token)
        else:
            self._repo_path = validate_local_path(Path(self.spec))
        return self._repo_path

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any
    ) -> None:
        if self.is_remote and self._repo_path is not None:
            cleanup_temp_repo(self._repo_path.parent)
