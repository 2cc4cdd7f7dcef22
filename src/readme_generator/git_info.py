"""
Git repository inspection.

Reads the origin remote, author and branch through GitPython and summarises commit
history. Every query degrades to a default when the directory is not a git checkout
or the repository has no commits yet.
"""

from __future__ import annotations

import configparser
import logging
import re
from pathlib import Path

import git

from .config import MAX_TOP_CONTRIBUTORS
from .models import Contributor, GitStats, RepositoryInfo

logger = logging.getLogger(__name__)

_URL_REMOTE = re.compile(
    r"^(?:https?|git|ssh)://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<owner>.+)/(?P<name>[^/]+?)(?:\.git)?/?$",
    re.IGNORECASE,
)
_SCP_REMOTE = re.compile(r"^[\w.-]+@(?P<host>[\w.-]+):(?P<owner>.+)/(?P<name>[^/]+?)(?:\.git)?/?$")
_SHORTHAND_REMOTE = re.compile(r"^(?P<owner>[\w-][\w.-]*)/(?P<name>[\w.-]+?)(?:\.git)?$")


def parse_remote_url(url: str) -> tuple[str, str] | None:
    """Parse a git remote into `(owner, name)`.

    Supports:
    - `https://github.com/owner/repo(.git)`
    - `git://host/owner/repo(.git)` and `ssh://git@host/owner/repo(.git)`
    - `git@github.com:owner/repo(.git)`
    - `owner/repo` shorthand

    Args:
        url: Remote URL or shorthand.

    Returns:
        `(owner, name)`, or None if the string is not a recognised remote.
    """
    url = url.strip()
    for pattern in (_URL_REMOTE, _SCP_REMOTE, _SHORTHAND_REMOTE):
        match = pattern.match(url)
        if match:
            return match.group("owner"), match.group("name")
    return None


def extract_repo_name(remote_url: str) -> str:
    """Extract the repository name from a remote URL.

    Falls back to the last path segment without `.git`, or `"repository"` when the
    URL is empty.
    """
    parsed = parse_remote_url(remote_url)
    if parsed is not None:
        return parsed[1]

    last = remote_url.strip().rstrip("/").split("/")[-1]
    last = re.sub(r"\.git$", "", last)
    return last or "repository"


def _open_repo(path: Path) -> git.Repo | None:
    try:
        return git.Repo(path)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError):
        return None


def _config_value(repo: git.Repo, section: str, option: str) -> str | None:
    try:
        value = repo.config_reader().get_value(section, option)
    except (configparser.NoSectionError, configparser.NoOptionError) as e:
        logger.debug("git config %s.%s unavailable: %s", section, option, e)
        return None
    return str(value).strip() or None


def get_repository_info(path: Path) -> RepositoryInfo:
    """Gather name, owner, remote and branch for the repository at `path`.

    Non-git directories produce a `RepositoryInfo` named after the directory.

    Args:
        path: Repository root.

    Returns:
        The repository facts known from git alone.
    """
    repo = _open_repo(path)
    if repo is None:
        logger.debug("%s is not a git repository", path)
        return RepositoryInfo(name=path.resolve().name)

    with repo:
        remote_url = _config_value(repo, 'remote "origin"', "url")
        name = extract_repo_name(remote_url) if remote_url else path.resolve().name

        owner = None
        if remote_url:
            parsed = parse_remote_url(remote_url)
            owner = parsed[0] if parsed else None
        if owner is None:
            owner = _config_value(repo, "user", "name")

        try:
            branch = repo.active_branch.name
        except TypeError:
            # Detached HEAD
            branch = "main"

    return RepositoryInfo(
        name=name,
        owner=owner,
        remote_url=remote_url,
        default_branch=branch or "main",
    )


def _parse_shortlog(output: str) -> list[Contributor]:
    contributors = []
    for line in output.splitlines():
        count, _, name = line.strip().partition("\t")
        if count.isdigit() and name:
            contributors.append(Contributor(name=name.strip(), commits=int(count)))
    contributors.sort(key=lambda c: (-c.commits, c.name))
    return contributors


def get_git_stats(path: Path, max_contributors: int = MAX_TOP_CONTRIBUTORS) -> GitStats | None:
    """Summarise commit history for the repository at `path`.

    Args:
        path: Repository root.
        max_contributors: Number of top contributors to keep.

    Returns:
        A `GitStats`, or None for non-git directories and repositories without commits.
    """
    repo = _open_repo(path)
    if repo is None:
        return None

    with repo:
        try:
            head = repo.head.commit
        except ValueError:
            logger.debug("%s has no commits", path)
            return None

        try:
            commit_count = int(repo.git.rev_list("--count", "HEAD"))
            contributors = _parse_shortlog(repo.git.shortlog("-sn", "--no-merges", "HEAD"))
            roots = repo.git.rev_list("--max-parents=0", "HEAD").split()
            tags = [t for t in repo.git.tag("--sort=-creatordate").splitlines() if t.strip()]
            branches = {ref.name for ref in repo.branches}
            branches.update(
                ref.remote_head for remote in repo.remotes for ref in remote.refs if ref.remote_head != "HEAD"
            )
        except git.GitCommandError as e:
            logger.warning("Could not read git history: %s", e)
            return None

        first_commit = repo.commit(roots[-1]) if roots else head
        return GitStats(
            commit_count=commit_count,
            contributors=contributors[:max_contributors],
            branch_count=len(branches),
            tags=tags,
            first_commit_date=first_commit.committed_datetime.date().isoformat(),
            last_commit_date=head.committed_datetime.date().isoformat(),
        )
