"""
Data models for gh-control.

"In the end, it's all just data. But validated data? That's power."
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .validation import ValidationError, validate_owner_repo, validate_repo_name, validate_username

DEFAULT_API_HOST = "api.github.com"
DEFAULT_TIMEOUT = 30.0


class Visibility(str, Enum):
    """Target visibility for a repository."""

    PUBLIC = "public"
    PRIVATE = "private"

    @property
    def private(self) -> bool:
        """Value of the `private` field sent to the API."""
        return self is Visibility.PRIVATE

    @property
    def action(self) -> str:
        """Human-readable action, e.g. 'make private'."""
        return f"make {self.value}"


class RepoFilter(str, Enum):
    """Client-side filter applied to listed repositories."""

    ALL = "all"
    PUBLIC = "public"
    PRIVATE = "private"
    ARCHIVED = "archived"

    def matches(self, repo: dict[str, Any]) -> bool:
        """Check whether a repository JSON object passes this filter."""
        if self is RepoFilter.PUBLIC:
            return repo.get("private") is False
        if self is RepoFilter.PRIVATE:
            return repo.get("private") is True
        if self is RepoFilter.ARCHIVED:
            return repo.get("archived") is True
        return True


class DecisionKind(str, Enum):
    """Outcome of a safety check for one repository."""

    PROCEED = "proceed"
    SKIP = "skip"
    ABORT = "abort"


@dataclass(frozen=True)
class Config:
    """
    Configuration for a single gh-control invocation.

    Built once at startup and passed to every component.
    """

    token: str
    dry_run: bool = False
    force: bool = False
    api_host: str = DEFAULT_API_HOST
    timeout: float = DEFAULT_TIMEOUT

    @property
    def base_url(self) -> str:
        """Absolute API root, always ending with a slash."""
        return f"https://{self.api_host.strip('/')}/"

    def __repr__(self) -> str:
        return (
            f"Config(token='***', dry_run={self.dry_run}, force={self.force}, "
            f"api_host={self.api_host!r}, timeout={self.timeout})"
        )


@dataclass(frozen=True)
class RepositoryIdentity:
    """
    Owner login plus repository name.

    Both parts are validated on construction, so any instance is safe to
    interpolate into a request path.
    """

    owner: str
    name: str

    def __post_init__(self) -> None:
        validate_username(self.owner)
        validate_repo_name(self.name)

    @classmethod
    def parse(cls, owner_repo: str) -> "RepositoryIdentity":
        """Build an identity from an 'owner/repo' string."""
        owner, name = validate_owner_repo(owner_repo)
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def api_path(self) -> str:
        return f"repos/{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class RepoSelector:
    """
    Which repositories a listing command reads.

    `user=None` selects the authenticated user's own repositories.
    """

    user: str | None = None

    def __post_init__(self) -> None:
        if self.user is not None:
            validate_username(self.user)

    @property
    def api_path(self) -> str:
        if self.user is None:
            return "user/repos?type=owner"
        return f"users/{self.user}/repos"

    @property
    def description(self) -> str:
        return "the authenticated user" if self.user is None else f"user '{self.user}'"


@dataclass(frozen=True)
class SafetyDecision:
    """Proceed, skip or abort a mutation of one repository."""

    kind: DecisionKind
    reason: str = ""

    @classmethod
    def proceed(cls) -> "SafetyDecision":
        return cls(DecisionKind.PROCEED)

    @classmethod
    def skip(cls, reason: str) -> "SafetyDecision":
        return cls(DecisionKind.SKIP, reason)

    @classmethod
    def abort(cls, reason: str) -> "SafetyDecision":
        return cls(DecisionKind.ABORT, reason)

    @property
    def is_abort(self) -> bool:
        return self.kind is DecisionKind.ABORT

    @property
    def is_skip(self) -> bool:
        return self.kind is DecisionKind.SKIP


@dataclass
class MutationResult:
    """
    Result of a single repository visibility change.

    "Success is just failure that hasn't happened yet. Log everything."
    """

    identity: RepositoryIdentity
    action: str  # "updated", "skipped", "failed"
    message: str = ""
    error: str | None = None


@dataclass
class MutationSummary:
    """
    Summary of a bulk visibility change.

    "Numbers don't lie. Unless nobody counted them."
    """

    action: str
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False
    errors: list[str] = field(default_factory=list)

    def add_result(self, result: MutationResult) -> None:
        """Add a result to the summary."""
        if result.action == "updated":
            self.succeeded += 1
        elif result.action == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
            if result.error:
                self.errors.append(f"{result.identity.full_name}: {result.error}")

    @property
    def attempted(self) -> int:
        """Repositories for which a mutating call was actually issued."""
        return self.succeeded + self.failed

    @property
    def tally(self) -> str:
        return f"{self.succeeded}/{self.total}"

    @property
    def exit_code(self) -> int:
        """Exit status: 1 only when every attempted mutation failed."""
        if self.failed and not self.succeeded:
            return 1
        return 0


def require_identity(value: object) -> RepositoryIdentity:
    """Reject anything that did not go through RepositoryIdentity validation."""
    if not isinstance(value, RepositoryIdentity):
        raise ValidationError("repository", f"Unvalidated repository identity: {value!r}")
    return value
