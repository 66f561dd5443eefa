"""
Command implementations for gh-control.

"Every command is a promise. Keep the ones that touch other people's repos."
"""

from typing import Any, Iterator

from .github_api import GitHubAPIClient, GitHubAPIError, MalformedResponseError
from .models import (
    MutationResult,
    MutationSummary,
    RepoFilter,
    RepoSelector,
    RepositoryIdentity,
    SafetyDecision,
    Visibility,
)
from .rich_utils import log_event, print_warning
from .safety import SafetyGate
from .validation import ValidationError, validate_path_parameter, validate_repo_name


def get_path(client: GitHubAPIClient, path: str) -> Iterator[Any]:
    """
    Debug passthrough: page bodies for an arbitrary API path.

    The path is checked immediately; pages are fetched lazily.
    """
    validate_path_parameter(path)
    return client.iter_pages(path)


def get_repo(client: GitHubAPIClient, owner_repo: str) -> dict[str, Any]:
    """Fetch one repository given as 'owner/repo'."""
    identity = RepositoryIdentity.parse(owner_repo)
    log_event(f"get-repo: getting '{identity.full_name}'")
    return client.get_repository(identity)


def list_repos(
    client: GitHubAPIClient,
    selector: RepoSelector,
    repo_filter: RepoFilter = RepoFilter.ALL,
) -> Iterator[dict[str, Any]]:
    """
    Yield repositories for a user, filtered client-side after pagination.

    Raises:
        MalformedResponseError: If a page is not a JSON array
    """
    log_event(f"Fetching repositories for {selector.description} from: {selector.api_path}")

    for repo in client.paginate(selector.api_path, require_list=True):
        if repo_filter.matches(repo):
            yield repo


def _apply(
    client: GitHubAPIClient,
    identity: RepositoryIdentity,
    decision: SafetyDecision,
    visibility: Visibility,
) -> MutationResult:
    """Carry out (or skip) one visibility change."""
    if decision.is_skip:
        print_warning(f"DRY RUN - Would {visibility.action} repository: {identity.full_name}", prefix="🔍")
        return MutationResult(identity=identity, action="skipped", message=decision.reason)

    log_event(f"Making repository {visibility.value}: {identity.full_name}")
    try:
        client.set_visibility(identity, private=visibility.private)
    except MalformedResponseError:
        raise
    except GitHubAPIError as e:
        log_event(f"Failed to {visibility.action} {identity.name}: {e}. Continuing with next repository...")
        return MutationResult(identity=identity, action="failed", error=str(e))

    log_event(f"Successfully made {identity.name} {visibility.value}")
    return MutationResult(identity=identity, action="updated")


def change_visibility(
    client: GitHubAPIClient,
    gate: SafetyGate,
    visibility: Visibility,
    repo_names: list[str],
) -> MutationSummary:
    """
    Make each named repository of the authenticated user public or private.

    All names are validated and every repository's ownership is checked
    before the first PATCH. Individual PATCH failures do not stop the batch.

    Returns:
        Summary with the per-repository tally; `cancelled` is set when the
        user declined the confirmation.
    """
    if not repo_names:
        raise ValidationError("repository", f"At least one repository name is required to {visibility.action}")

    for name in repo_names:
        validate_repo_name(name)

    gate.check_rate_limit()
    login = gate.authenticated_login()
    reviewed = gate.review(login, repo_names)

    summary = MutationSummary(action=visibility.action, total=len(reviewed))

    if not gate.confirm_batch(visibility.action, [identity for identity, _ in reviewed]):
        summary.cancelled = True
        return summary

    for identity, decision in reviewed:
        summary.add_result(_apply(client, identity, decision, visibility))

    if summary.skipped == summary.total:
        log_event(f"DRY RUN complete: {summary.total} repositories would be made {visibility.value}")
    else:
        log_event(f"Completed: {summary.tally} repositories made {visibility.value}")
    return summary
