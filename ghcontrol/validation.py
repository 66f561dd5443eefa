"""
Input validation utilities for gh-control.

"Trust, but verify. Especially user input."

Every check runs before any request is made. A failure raises
ValidationError naming the field and the rule that was broken.
"""

import re

REPO_NAME_MAX_LENGTH = 100
USERNAME_MAX_LENGTH = 39

_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
_UNSAFE_PATH_PATTERN = re.compile(r"[\s;&|`$()]")


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)


def validate_repo_name(repo: str) -> str:
    """
    Validate a repository name against GitHub's naming rules.

    Args:
        repo: Repository name (without owner)

    Returns:
        The name if valid

    Raises:
        ValidationError: If any rule is violated
    """
    if not repo:
        raise ValidationError("repository", "Repository name cannot be empty")

    if len(repo) > REPO_NAME_MAX_LENGTH:
        raise ValidationError(
            "repository",
            f"Repository name too long (max {REPO_NAME_MAX_LENGTH} characters): {repo}",
        )

    if not _REPO_NAME_PATTERN.match(repo):
        raise ValidationError(
            "repository",
            f"Invalid repository name: {repo} (only alphanumeric, dots, hyphens, and underscores allowed)",
        )

    if repo[0] in "-." or repo[-1] in "-.":
        raise ValidationError(
            "repository",
            f"Invalid repository name: {repo} (cannot start or end with hyphens or dots)",
        )

    if "--" in repo:
        raise ValidationError(
            "repository",
            f"Invalid repository name: {repo} (cannot contain consecutive hyphens)",
        )

    return repo


def validate_username(username: str) -> str:
    """
    Validate a GitHub login (user or repository owner).

    Raises:
        ValidationError: If any rule is violated
    """
    if not username:
        raise ValidationError("username", "Username cannot be empty")

    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(
            "username",
            f"Username too long (max {USERNAME_MAX_LENGTH} characters): {username}",
        )

    if not _USERNAME_PATTERN.match(username):
        raise ValidationError(
            "username",
            f"Invalid username: {username} (only alphanumeric and hyphens allowed)",
        )

    if username.startswith("-") or username.endswith("-"):
        raise ValidationError(
            "username",
            f"Invalid username: {username} (cannot start or end with hyphens)",
        )

    if "--" in username:
        raise ValidationError(
            "username",
            f"Invalid username: {username} (cannot contain consecutive hyphens)",
        )

    return username


def validate_owner_repo(owner_repo: str) -> tuple[str, str]:
    """
    Validate and parse a repository string in 'owner/repo' format.

    Args:
        owner_repo: Repository string in format 'owner/repo'

    Returns:
        Tuple of (owner, repo) if valid

    Raises:
        ValidationError: If the format is wrong or either segment is invalid
    """
    if not owner_repo:
        raise ValidationError("owner/repo", "Owner/repository format required (e.g., 'owner/repo')")

    parts = owner_repo.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValidationError("owner/repo", f"Invalid format: {owner_repo} (expected 'owner/repo')")

    owner, repo = parts
    return validate_username(owner), validate_repo_name(repo)


def validate_path_parameter(path: str) -> str:
    """
    Validate a free-form API path passed through by the `get` command.

    Whitespace and shell metacharacters are rejected outright.
    """
    if not path:
        raise ValidationError("path", "Path parameter cannot be empty")

    if _UNSAFE_PATH_PATTERN.search(path):
        raise ValidationError("path", f"Invalid characters in path: {path}")

    return path


def validate_github_token(token: str | None) -> str:
    """
    Validate a GitHub access token's shape.

    Args:
        token: Token string

    Returns:
        The token if valid

    Raises:
        ValidationError: If the token is missing or malformed

    Note:
        Classic tokens start with 'ghp_', fine-grained ones with 'github_pat_'.
        Legacy tokens may follow neither pattern, so the prefix is not enforced.
    """
    if not token:
        raise ValidationError("token", "GitHub token cannot be empty")

    if len(token) < 10:
        raise ValidationError("token", "Token is too short to be valid")

    if len(token) > 255:
        raise ValidationError("token", "Token is too long")

    if any(c in token for c in [" ", "\n", "\r", "\t"]):
        raise ValidationError("token", "Token contains invalid whitespace characters")

    return token


def validate_format_option(format: str, allowed: tuple[str, ...] = ("json", "table")) -> str:
    """
    Validate the output format option for listing commands.

    Returns:
        Lowercase format string if valid
    """
    format_lower = format.lower().strip()

    if format_lower not in allowed:
        allowed_str = ", ".join(f"'{f}'" for f in allowed)
        raise ValidationError("format", f"Invalid format '{format}'. Allowed formats: {allowed_str}")

    return format_lower
