"""
Pre-mutation safety checks.

"Measure twice, PATCH once."

A bulk visibility change passes through the gate in this order: rate
limit budget, authenticated identity, per-repository name validation and
ownership, one confirmation for the whole batch. Only then does anything
change.
"""

from typing import Callable

from .github_api import GitHubAPIClient, GitHubAPIError, RateLimitError
from .models import Config, RepositoryIdentity, SafetyDecision
from .rich_utils import err_console, format_repo_name, log_event
from .validation import validate_repo_name

ConfirmFn = Callable[[str], bool]

CONFIRM_PROMPT = "Are you sure you want to continue?"


class SafetyError(Exception):
    """Raised when a safety check aborts the whole command."""

    pass


class SafetyGate:
    """
    Decides whether each repository in a batch may be mutated.

    "Transfer with care. There's no undo button."
    """

    def __init__(self, client: GitHubAPIClient, config: Config, confirm: ConfirmFn | None = None) -> None:
        self.client = client
        self.config = config
        self.confirm = confirm

    def check_rate_limit(self) -> int:
        """
        Abort before doing anything if the API budget is exhausted.

        Returns:
            Remaining calls
        """
        remaining = self.client.get_rate_limit_remaining()
        log_event(f"Rate limit remaining: {remaining}")
        if remaining < 1:
            raise RateLimitError("GitHub API rate limit exceeded. Please try again later.")
        return remaining

    def authenticated_login(self) -> str:
        """Resolve who we are acting as."""
        log_event("Getting authenticated user information...")
        login = self.client.get_authenticated_user()
        log_event(f"Authenticated as: {login}")
        return login

    def decide(self, login: str, name: str) -> tuple[RepositoryIdentity, SafetyDecision]:
        """Check one repository and decide what to do with it."""
        identity = RepositoryIdentity(owner=login, name=name)
        log_event(f"Validating ownership of repository: {identity.full_name}")

        try:
            repo = self.client.get_repository(identity)
        except GitHubAPIError as e:
            return identity, SafetyDecision.abort(
                f"Cannot access repository: {identity.full_name}. "
                f"Check if it exists and you have permissions. ({e})"
            )

        owner_info = repo.get("owner")
        if not isinstance(owner_info, dict):
            return identity, SafetyDecision.abort(
                f"Cannot determine owner of repository: {identity.full_name}. Unexpected response from GitHub API."
            )

        owner = owner_info.get("login")
        if owner != login:
            return identity, SafetyDecision.abort(
                f"You don't own repository: {identity.full_name} (owned by: {owner})"
            )

        if self.config.dry_run:
            return identity, SafetyDecision.skip("dry run")
        return identity, SafetyDecision.proceed()

    def review(self, login: str, names: list[str]) -> list[tuple[RepositoryIdentity, SafetyDecision]]:
        """
        Validate every name, then check ownership of every repository.

        Raises:
            ValidationError: On the first invalid name, before any request
            SafetyError: On the first repository that must not be touched
        """
        for name in names:
            validate_repo_name(name)

        decisions = []
        for name in names:
            identity, decision = self.decide(login, name)
            if decision.is_abort:
                raise SafetyError(decision.reason)
            decisions.append((identity, decision))
        return decisions

    def confirm_batch(self, action: str, identities: list[RepositoryIdentity]) -> bool:
        """Ask once for the whole batch, unless force mode is on."""
        if self.config.force:
            log_event("FORCE mode - skipping confirmation prompt")
            return True

        if self.confirm is None:
            raise SafetyError("Confirmation required but no prompt is available. Use --force to skip it.")

        err_console.print(f"\n[yellow]⚠️  WARNING: You are about to {action} the following repositories:[/yellow]")
        for identity in identities:
            err_console.print(f"  - {format_repo_name(identity.full_name)}")
        err_console.print()

        if not self.confirm(CONFIRM_PROMPT):
            log_event("Operation cancelled by user")
            return False
        return True
