"""
gh-control CLI interface.

"The command line is where the real work happens. Everything else is just theater."
"""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import typer

from .commands import change_visibility, get_path, get_repo, list_repos
from .config import ConfigError, ConfigManager
from .github_api import GitHubAPIClient, GitHubAPIError
from .models import Config, MutationSummary, RepoFilter, RepoSelector, Visibility
from .rich_utils import (
    console,
    create_data_table,
    log_event,
    print_error,
    print_info,
    print_json_data,
    print_success,
    print_warning,
    set_quiet,
)
from .safety import SafetyError, SafetyGate
from .validation import ValidationError, validate_format_option, validate_owner_repo

app = typer.Typer(
    name="gh-control",
    help="This tool interacts with the GitHub API to automate tasks on GitHub.",
    add_completion=False,
    no_args_is_help=True,
)

USER_OPTION = typer.Option(None, "--user", "-u", help="List repositories for the specified user")
AUTH_USER_OPTION = typer.Option(False, "--auth-user", help="List repositories for the authenticated user")
FORMAT_OPTION = typer.Option("json", "--format", "-F", help="Output format: json or table")


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn any expected failure into one error line and exit status 1."""
    try:
        yield
    except (ValidationError, GitHubAPIError, SafetyError, ConfigError) as e:
        print_error(str(e))
        sys.exit(1)


def _build_config(ctx: typer.Context) -> Config:
    """Resolve the Config for this invocation from the global options."""
    options: dict[str, Any] = ctx.obj or {}
    manager = ConfigManager(config_dir=options.get("config_dir"))
    config = manager.build_config(
        token=options.get("token"),
        dry_run=options.get("dry_run", False),
        force=options.get("force", False),
        api_host=options.get("api_host"),
    )

    if config.dry_run:
        log_event("Running in DRY RUN mode - no changes will be made", style="yellow")
    if config.force:
        log_event("Running in FORCE mode - skipping confirmation prompts", style="yellow")
    return config


def _make_selector(user: str | None, auth_user: bool) -> RepoSelector:
    if bool(user) == auth_user:
        raise ValidationError("selector", "Specify exactly one of --user USER or --auth-user")
    return RepoSelector(user=user)


def _confirm(prompt: str) -> bool:
    return typer.confirm(prompt, default=False)


def _print_repo_table(repos: Iterable[dict[str, Any]], title: str) -> None:
    table = create_data_table(title)
    table.add_column("Repository", style="bold blue")
    table.add_column("Visibility")
    table.add_column("Archived")
    table.add_column("Updated", style="dim")

    count = 0
    for repo in repos:
        visibility = "[yellow]private[/yellow]" if repo.get("private") else "[green]public[/green]"
        table.add_row(
            repo.get("full_name", repo.get("name", "?")),
            visibility,
            "yes" if repo.get("archived") else "",
            repo.get("updated_at") or "",
        )
        count += 1

    console.print(table)
    log_event(f"{count} repositories listed")


def _run_listing(
    ctx: typer.Context,
    repo_filter: RepoFilter,
    user: str | None,
    auth_user: bool,
    output_format: str,
) -> None:
    with handle_errors():
        fmt = validate_format_option(output_format)
        selector = _make_selector(user, auth_user)
        config = _build_config(ctx)

        with GitHubAPIClient(config) as client:
            SafetyGate(client, config).check_rate_limit()
            repos = list_repos(client, selector, repo_filter)
            if fmt == "table":
                _print_repo_table(repos, f"Repositories of {selector.description} ({repo_filter.value})")
            else:
                for repo in repos:
                    print_json_data(repo)


def _print_summary(summary: MutationSummary) -> None:
    if summary.cancelled:
        print_warning("Operation cancelled - no repositories were changed")
        return

    if summary.skipped == summary.total:
        print_info(f"DRY RUN - {summary.total} repositories would {summary.action}, none were changed")
        return

    if summary.failed:
        print_warning(f"Completed: {summary.tally} succeeded ({summary.action})")
        for error in summary.errors:
            print_error(error, prefix="  •")
    else:
        print_success(f"Completed: {summary.tally} succeeded ({summary.action})")


def _run_visibility_change(ctx: typer.Context, visibility: Visibility, repos: list[str] | None) -> None:
    with handle_errors():
        config = _build_config(ctx)
        with GitHubAPIClient(config) as client:
            gate = SafetyGate(client, config, confirm=_confirm)
            summary = change_visibility(client, gate, visibility, repos or [])

    _print_summary(summary)
    if summary.exit_code:
        sys.exit(summary.exit_code)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from . import __version__
        console.print(f"gh-control version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be done without making changes",
        envvar="DRY_RUN",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Skip confirmation prompts for destructive operations",
        envvar="FORCE",
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        "-t",
        help="GitHub access token (prefer GH_ACCESS_TOKEN env var)",
        envvar="GH_ACCESS_TOKEN",
        show_envvar=False,
    ),
    api_host: str | None = typer.Option(
        None,
        "--api-host",
        help="API hostname (default: api.github.com)",
        envvar="GH_CONTROL_API_HOST",
    ),
    config_dir: Path | None = typer.Option(
        None,
        "--config-dir",
        help="Directory holding config.yaml (default: ~/.config/gh-control)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress log output on stderr",
    ),
) -> None:
    """
    This tool interacts with the GitHub API to automate tasks on GitHub.

    Requires a GitHub access token in GH_ACCESS_TOKEN, ./.github_token, ./.env
    or ~/.config/gh-control/config.yaml.
    """
    set_quiet(quiet)
    ctx.obj = {
        "dry_run": dry_run,
        "force": force,
        "token": token,
        "api_host": api_host,
        "config_dir": config_dir,
    }


@app.command("help")
def help_command(ctx: typer.Context) -> None:
    """Show this help message and exit."""
    typer.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


@app.command("get")
def get(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="API path or full URL, e.g. 'user' or 'repos/octocat/Hello-World'"),
) -> None:
    """
    Make HTTP GET request to API endpoint (debug only).

    Example:
        gh-control get rate_limit
        gh-control get users/octocat/repos
    """
    with handle_errors():
        config = _build_config(ctx)
        with GitHubAPIClient(config) as client:
            pages = get_path(client, path)
            SafetyGate(client, config).check_rate_limit()
            for body in pages:
                print_json_data(body)


@app.command("get-repo")
def get_repo_command(
    ctx: typer.Context,
    repository: str = typer.Argument(..., help="Repository in format 'owner/repo'"),
) -> None:
    """
    Get details of a specific repository.

    Example:
        gh-control get-repo octocat/Hello-World
    """
    with handle_errors():
        validate_owner_repo(repository)
        config = _build_config(ctx)
        with GitHubAPIClient(config) as client:
            SafetyGate(client, config).check_rate_limit()
            print_json_data(get_repo(client, repository))


@app.command("get-repos")
def get_repos(
    ctx: typer.Context,
    user: str | None = USER_OPTION,
    auth_user: bool = AUTH_USER_OPTION,
    output_format: str = FORMAT_OPTION,
) -> None:
    """
    List all repositories.

    Example:
        gh-control get-repos --user octocat
        gh-control get-repos --auth-user --format table
    """
    _run_listing(ctx, RepoFilter.ALL, user, auth_user, output_format)


@app.command("get-public-repos")
def get_public_repos(
    ctx: typer.Context,
    user: str | None = USER_OPTION,
    auth_user: bool = AUTH_USER_OPTION,
    output_format: str = FORMAT_OPTION,
) -> None:
    """List public repositories."""
    _run_listing(ctx, RepoFilter.PUBLIC, user, auth_user, output_format)


@app.command("get-private-repos")
def get_private_repos(
    ctx: typer.Context,
    user: str | None = USER_OPTION,
    auth_user: bool = AUTH_USER_OPTION,
    output_format: str = FORMAT_OPTION,
) -> None:
    """List private repositories."""
    _run_listing(ctx, RepoFilter.PRIVATE, user, auth_user, output_format)


@app.command("get-archived-repos")
def get_archived_repos(
    ctx: typer.Context,
    user: str | None = USER_OPTION,
    auth_user: bool = AUTH_USER_OPTION,
    output_format: str = FORMAT_OPTION,
) -> None:
    """List archived repositories."""
    _run_listing(ctx, RepoFilter.ARCHIVED, user, auth_user, output_format)


@app.command("make-repos-private")
def make_repos_private(
    ctx: typer.Context,
    repos: list[str] | None = typer.Argument(None, help="Repository names owned by the authenticated user"),
) -> None:
    """
    Make specified repositories private.

    ⚠️  Only repositories owned by the authenticated user can be changed.

    Example:
        gh-control make-repos-private myrepo1 myrepo2
        gh-control --dry-run make-repos-private myrepo1
    """
    _run_visibility_change(ctx, Visibility.PRIVATE, repos)


@app.command("make-repos-public")
def make_repos_public(
    ctx: typer.Context,
    repos: list[str] | None = typer.Argument(None, help="Repository names owned by the authenticated user"),
) -> None:
    """
    Make specified repositories public.

    ⚠️  Only repositories owned by the authenticated user can be changed.

    Example:
        gh-control make-repos-public myrepo1 myrepo2
        gh-control --force make-repos-public myrepo1
    """
    _run_visibility_change(ctx, Visibility.PUBLIC, repos)


if __name__ == "__main__":
    app()
