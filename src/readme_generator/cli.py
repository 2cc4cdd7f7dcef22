"""
CLI entry point for readme-generator.

Provides the `generate` command, which turns a local or remote repository into a
README.md written by an LLM, and `info`, which shows what would be sent to the model.
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path
from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .config import GITHUB_TOKEN_ENV_VAR, LLMProvider, ScanDepth, ScanStats, ScannedFile
from .config_loader import (
    ConfigError,
    SavedConfig,
    load_config,
    merge_cli_with_config,
    non_interactive_defaults,
    save_config,
)
from .detection import detect_tools
from .fetcher import FetchError, RepoContext, fetch_github_metadata
from .git_info import get_git_stats, get_repository_info
from .interactive import configure_llm, prompt_missing_options
from .llm import GenerateReadme, LLMError
from .logging_config import setup_logging
from .manifest import read_package_info
from .models import LLMConfiguration, PromptContext, RepositoryInfo
from .parser import FALLBACK_SHORT_DESCRIPTION, ResponseParseError
from .renderer import append_changelog_link
from .scanner import (
    compute_language_stats,
    find_changelog,
    generate_tree,
    parse_changelog_tasks,
    read_changelog,
    scan_repository,
)

# Initialize CLI app
app = typer.Typer(
    name="readme-generator",
    help="Generate a README.md for any git repository with an LLM.",
    add_completion=False,
)

console = Console()

TREE_DEPTH = 3


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"readme-generator version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Generate README.md files from repository contents with OpenAI, Anthropic, Gemini and more."""


def gather_repository_info(
    repo_path: Path,
    repo_context: RepoContext,
    token: str | None = None,
    tree_depth: int = TREE_DEPTH,
) -> RepositoryInfo:
    """Collect everything known about a repository before calling the model.

    Combines git metadata, GitHub API metadata (for GitHub remotes), the package
    manifest, detected tooling, git statistics and the directory tree.

    Args:
        repo_path: Local repository root (possibly a temporary clone).
        repo_context: The fetch context, used to know the original remote.
        token: Optional GitHub token for the REST API.
        tree_depth: Depth of the rendered directory tree.

    Returns:
        The populated RepositoryInfo (language stats are filled in after scanning).
    """
    repository = get_repository_info(repo_path)

    owner_and_name = repo_context.owner_and_name
    if repo_context.remote_url is not None:
        repository.remote_url = repo_context.remote_url
    if owner_and_name is not None:
        repository.owner, repository.name = owner_and_name

    package_info = read_package_info(repo_path)
    repository.package_info = package_info

    metadata = None
    if repository.is_github and repository.owner:
        metadata = fetch_github_metadata(repository.owner, repository.name, token)

    if metadata is not None:
        repository.owner = metadata.owner
        repository.default_branch = metadata.default_branch
    repository.description = (
        (metadata.description if metadata else "")
        or (package_info.description if package_info else "")
        or FALLBACK_SHORT_DESCRIPTION
    )
    repository.license = (metadata.license if metadata else None) or (
        package_info.license if package_info else None
    )
    repository.homepage = (metadata.homepage if metadata else None) or (
        package_info.homepage if package_info else None
    )
    if package_info is not None:
        repository.code_stats = package_info.code_stats

    repository.detected_tools = detect_tools(repo_path)
    repository.git_stats = get_git_stats(repo_path)
    repository.directory_tree = generate_tree(repo_path, max_depth=tree_depth)
    return repository


def _scan(repo_path: Path, scan_depth: ScanDepth) -> tuple[list[ScannedFile], ScanStats]:
    files, stats = scan_repository(repo_path, max_depth=int(scan_depth))
    if stats.total_limit_reached:
        console.print("[yellow]Reached the total size limit; remaining files were not sent.[/yellow]")
    for skipped in stats.skipped_large_files:
        console.print(f"[dim]Skipped large file: {skipped}[/dim]")
    return files, stats


def _resolve_output(output: Path) -> Path:
    return output if output.is_absolute() else Path.cwd() / output


def _saved_from_run(saved: SavedConfig, llm_config: LLMConfiguration, options: dict) -> SavedConfig:
    return SavedConfig(
        provider=llm_config.provider,
        model=llm_config.model,
        base_url=llm_config.base_url,
        language=options["language"],
        scan_depth=ScanDepth(options["scan_depth"]),
        output=saved.output,
        context=saved.context,
        github_badges=options["github_badges"],
        contributors=options["contributors"],
        logo_url=options["logo_url"],
        _config_file=saved.config_file,
    )


@app.command()
def generate(
    repo_arg: Optional[str] = typer.Argument(
        None,
        metavar="[REPO]",
        help="Local path, git URL or owner/repo shorthand (default: current directory).",
    ),
    repo: Optional[str] = typer.Option(
        None,
        "--repo", "-r",
        help="Repository to document (same as the REPO argument).",
    ),
    lang: Optional[str] = typer.Option(
        None,
        "--lang", "-l",
        help="README language code: en, es, fr, de, ru (others are passed to the model).",
    ),
    scan_depth: Optional[int] = typer.Option(
        None,
        "--scan-depth", "-d",
        help="Directory depth scanned for source files: 0 (skip), 1, 2, 3, 5 or 7.",
    ),
    provider: Optional[LLMProvider] = typer.Option(
        None,
        "--provider", "-p",
        help="LLM provider.",
        case_sensitive=False,
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model", "-m",
        help="Model name (deployment name for Azure OpenAI).",
    ),
    key: Optional[str] = typer.Option(
        None,
        "--key", "-k",
        help="API key. Defaults to the provider's environment variable.",
    ),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="Provider endpoint (Azure OpenAI resource URL, Ollama server, OpenAI-compatible gateway).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output file (default: README.md in the current directory).",
    ),
    context: Optional[str] = typer.Option(
        None,
        "--context", "-c",
        help="Extra context about the project for the model.",
    ),
    logo_url: Optional[str] = typer.Option(
        None,
        "--logo-url",
        help="Logo image shown at the top of the README (default: Socialify card or placeholder).",
    ),
    github_badges: Optional[bool] = typer.Option(
        None,
        "--github-badges/--no-github-badges",
        help="Add GitHub stars/forks/issues/license badges.",
    ),
    contributors: Optional[bool] = typer.Option(
        None,
        "--contributors/--no-contributors",
        help="Add a contributors table from git history.",
    ),
    yes: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Never prompt; use flags, saved config and defaults.",
    ),
    no_save: bool = typer.Option(
        False,
        "--no-save",
        help="Don't save the chosen settings for the next run.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging.",
    ),
) -> None:
    """
    Generate a README.md for a repository.

    Examples:

        # Current directory, prompting for anything not configured
        readme-generator generate

        # Remote repository, fully non-interactive
        readme-generator generate owner/repo -p anthropic -m claude-sonnet-4-5 -y

        # Spanish README from a medium-depth scan
        readme-generator generate ./project -l es -d 2
    """
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(verbose)

    if repo and repo_arg and repo != repo_arg:
        console.print("[red]Error: Pass the repository either as an argument or with --repo, not both.[/red]")
        raise typer.Exit(1)
    spec = repo or repo_arg or "."

    if scan_depth is not None and scan_depth not in {d.value for d in ScanDepth}:
        valid = ", ".join(str(d.value) for d in ScanDepth)
        console.print(f"[red]Error: Invalid scan depth {scan_depth}. Choose one of: {valid}.[/red]")
        raise typer.Exit(1)

    interactive = not yes and sys.stdin.isatty()
    start_time = time.time()

    try:
        saved = load_config(Path.cwd())
        merged = merge_cli_with_config(
            saved,
            language=lang,
            scan_depth=scan_depth,
            output=output,
            context=context,
            github_badges=github_badges,
            contributors=contributors,
            logo_url=logo_url,
        )
        llm_config = configure_llm(provider, model, key, saved, interactive=interactive, base_url=base_url)
        token = os.environ.get(GITHUB_TOKEN_ENV_VAR) or None

        repo_context = RepoContext(spec, token)
        with repo_context as repo_path:
            with console.status("Gathering repository information..."):
                repository = gather_repository_info(repo_path, repo_context, token)

            if interactive:
                options = prompt_missing_options(merged, github_repo=repository.is_github)
            else:
                options = non_interactive_defaults(merged)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task(f"Scanning files (depth {int(options['scan_depth'])})...", total=None)
                files, stats = _scan(repo_path, options["scan_depth"])
                repository.language_stats = compute_language_stats(files)

                changelog_file = find_changelog(repo_path)
                changelog = read_changelog(repo_path)
                prompt_context = PromptContext(
                    repository=repository,
                    files=files,
                    language=options["language"],
                    scan_depth=ScanDepth(options["scan_depth"]),
                    user_context=options["context"] or "",
                    changelog=changelog or "",
                    changelog_tasks=parse_changelog_tasks(changelog) if changelog else [],
                    logo_url=options["logo_url"],
                    include_github_badges=bool(options["github_badges"]),
                    include_contributors=bool(options["contributors"]),
                )

                progress.update(
                    task,
                    description=f"Generating README with {llm_config.provider.value} ({llm_config.model})...",
                )
                readme = GenerateReadme().execute(prompt_context, llm_config)

        content = readme.content
        if changelog_file is not None:
            content = append_changelog_link(content, changelog_file.name)

        output_path = _resolve_output(options["output"])
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")

        if not no_save:
            saved_path = save_config(_saved_from_run(saved, llm_config, options), Path.cwd())
            console.print(f"[dim]Settings saved to {saved_path}[/dim]")

    except (FetchError, ConfigError, LLMError, ResponseParseError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error writing README: {e}[/red]")
        raise typer.Exit(1)

    elapsed = time.time() - start_time
    console.print()
    console.print("[bold green]✓ README generated![/bold green]")
    console.print()
    console.print("[cyan]Statistics:[/cyan]")
    console.print(f"  Files scanned: {stats.files_scanned}")
    console.print(f"  Files sent to model: {stats.files_included}")
    console.print(f"  Total bytes: {stats.total_bytes_included:,}")
    console.print(f"  Processing time: {elapsed:.2f}s")
    console.print()
    console.print(f"[cyan]Output file:[/cyan] {output_path}")


@app.command()
def info(
    repo_arg: Optional[str] = typer.Argument(
        None,
        metavar="[REPO]",
        help="Local path, git URL or owner/repo shorthand (default: current directory).",
    ),
    scan_depth: int = typer.Option(
        int(ScanDepth.DEEP),
        "--scan-depth", "-d",
        help="Directory depth scanned for source files.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging.",
    ),
) -> None:
    """
    Show what would be sent to the model, without calling it.

    Displays repository metadata, detected tooling, languages and file statistics.
    """
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(verbose)
    token = os.environ.get(GITHUB_TOKEN_ENV_VAR) or None

    try:
        repo_context = RepoContext(repo_arg or ".", token)
        with repo_context as repo_path:
            repository = gather_repository_info(repo_path, repo_context, token)
            files, stats = scan_repository(repo_path, max_depth=scan_depth)
            repository.language_stats = compute_language_stats(files)
    except FetchError as e:
        console.print(f"[red]Error fetching repository: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Repository: {repository.name}[/bold]")
    console.print(f"  Description: {repository.description}")
    if repository.owner:
        console.print(f"  Owner: {repository.owner}")
    console.print(f"  Branch: {repository.default_branch}")
    if repository.code_stats:
        console.print(f"  Code stats: {repository.code_stats}")

    if repository.language_stats:
        console.print("\n[cyan]Languages detected:[/cyan]")
        for stat in repository.language_stats:
            console.print(f"  {stat.name}: {stat.percentage:.1f}% ({stat.file_count} files, {stat.lines} lines)")

    if repository.detected_tools and repository.detected_tools.total:
        console.print("\n[cyan]Detected tooling:[/cyan]")
        for category, tools in repository.detected_tools.categories().items():
            if tools:
                console.print(f"  {category}: {', '.join(tools)}")

    if repository.git_stats:
        git_stats = repository.git_stats
        console.print("\n[cyan]Git history:[/cyan]")
        console.print(f"  Commits: {git_stats.commit_count}")
        console.print(f"  Contributors: {len(git_stats.contributors)}")
        console.print(f"  Branches: {git_stats.branch_count}")
        if git_stats.tags:
            console.print(f"  Latest tag: {git_stats.tags[0]}")

    console.print("\n[cyan]Statistics:[/cyan]")
    console.print(f"  Total files scanned: {stats.files_scanned}")
    console.print(f"  Files included: {stats.files_included}")
    console.print(f"  Files skipped (size): {stats.files_skipped_size}")
    console.print(f"  Files skipped (binary): {stats.files_skipped_binary}")
    console.print(f"  Files skipped (extension): {stats.files_skipped_extension}")
    console.print(f"  Files skipped (gitignore): {stats.files_skipped_gitignore}")
    console.print(f"  Total bytes: {stats.total_bytes_included:,}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
