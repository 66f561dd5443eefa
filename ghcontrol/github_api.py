"""
GitHub API client with pagination support.

"The API is just a door. Your token is the key. Don't lose it."

Three layers live here:

* transport: `GitHubAPIClient.fetch/update/remove` turn a path into one
  authenticated request and hand back a `RawResponse`;
* classification: `classify_response` maps a `RawResponse` to an
  `ApiResult`, i.e. the decoded body or a typed `GitHubAPIError`;
* pagination: `GitHubAPIClient.iter_pages/paginate` follow `rel="next"`
  links until the API stops sending them.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

import requests

from . import __version__
from .config import ConfigError
from .models import Config, RepositoryIdentity, require_identity
from .rich_utils import log_event

SUCCESS_STATUSES = frozenset({200, 201, 204})
MUTATING_METHODS = frozenset({"PATCH", "PUT"})

_STATUS_CODE_PATTERN = re.compile(r"\b(\d{3})\b")
_NEXT_LINK_PATTERN = re.compile(r'<([^>]+)>;\s*rel="next"')


class ApiErrorKind(str, Enum):
    """Closed set of failure kinds surfaced by the API layer."""

    AUTHENTICATION = "authentication"
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    UNKNOWN = "unknown"
    MALFORMED_RESPONSE = "malformed_response"
    NETWORK = "network"


class GitHubAPIError(Exception):
    """GitHub API error."""

    kind = ApiErrorKind.UNKNOWN
    default_message = "Unknown error"

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        self.message = message or self.default_message
        self.status = status
        super().__init__(self.describe())

    def describe(self) -> str:
        """Human-readable one-line description."""
        return self.message


class AuthenticationError(GitHubAPIError):
    """401: the token was rejected."""

    kind = ApiErrorKind.AUTHENTICATION
    default_message = "Authentication failed"

    def describe(self) -> str:
        return f"Authentication error: {self.message}. Check your GitHub token."


class PermissionDeniedError(GitHubAPIError):
    """403 without a rate-limit message."""

    kind = ApiErrorKind.PERMISSION_DENIED
    default_message = "Forbidden"

    def describe(self) -> str:
        return f"Permission denied: {self.message}. Check token permissions."


class RateLimitError(GitHubAPIError):
    """Rate limit exceeded error."""

    kind = ApiErrorKind.RATE_LIMIT_EXCEEDED
    default_message = "API rate limit exceeded"

    def describe(self) -> str:
        return f"Rate limit exceeded: {self.message}"


class NotFoundError(GitHubAPIError):
    """404."""

    kind = ApiErrorKind.NOT_FOUND
    default_message = "Not found"

    def describe(self) -> str:
        return f"Resource not found: {self.message}"


class UnprocessableEntityError(GitHubAPIError):
    """422: the API refused the request payload."""

    kind = ApiErrorKind.VALIDATION
    default_message = "Validation failed"

    def describe(self) -> str:
        return f"Validation error: {self.message}"


class UnknownAPIError(GitHubAPIError):
    """Any other non-success status."""

    def describe(self) -> str:
        return f"API error (HTTP {self.status}): {self.message}"


class MalformedResponseError(GitHubAPIError):
    """The response could not be interpreted at all."""

    kind = ApiErrorKind.MALFORMED_RESPONSE
    default_message = "Failed to parse API response status"


class NetworkError(GitHubAPIError):
    """No response was received (timeout or connection failure)."""

    kind = ApiErrorKind.NETWORK
    default_message = "Failed to connect to GitHub API"

    def describe(self) -> str:
        return f"Network error: {self.message}"


_ERRORS_BY_STATUS: dict[int, type[GitHubAPIError]] = {
    401: AuthenticationError,
    404: NotFoundError,
    422: UnprocessableEntityError,
}


@dataclass(frozen=True)
class RawResponse:
    """
    Status line, ordered header lines and body of one HTTP exchange.

    The body is parsed JSON when possible, the raw text otherwise, and
    None when the response had no content.
    """

    status_line: str
    headers: list[str] = field(default_factory=list)
    body: Any = None

    @classmethod
    def from_response(cls, response: requests.Response) -> "RawResponse":
        """Decompose a `requests` response."""
        status_line = f"HTTP/1.1 {response.status_code} {response.reason or ''}".strip()
        headers = [f"{name}: {value}" for name, value in response.headers.items()]

        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = response.text

        return cls(status_line=status_line, headers=headers, body=body)

    @property
    def status_code(self) -> int:
        """Numeric status parsed from the status line."""
        match = _STATUS_CODE_PATTERN.search(self.status_line or "")
        if not match:
            raise MalformedResponseError(f"Failed to parse API response status: {self.status_line!r}")
        return int(match.group(1))

    def header(self, name: str) -> str | None:
        """Value of the first header called `name` (case-insensitive)."""
        prefix = f"{name.lower()}:"
        for line in self.headers:
            if line.lower().startswith(prefix):
                return line[len(prefix):].strip()
        return None


@dataclass(frozen=True)
class ApiResult:
    """Decoded body on success, typed error otherwise."""

    value: Any = None
    error: GitHubAPIError | None = None

    def unwrap(self) -> Any:
        """Return the value, or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value


def _extract_message(body: Any) -> str | None:
    if isinstance(body, dict):
        message = body.get("message")
        return str(message) if message else None
    return None


def classify_response(raw: RawResponse) -> ApiResult:
    """
    Map a raw response to a success value or a typed failure.

    Raises:
        MalformedResponseError: If the status line cannot be parsed
    """
    status = raw.status_code

    if status in SUCCESS_STATUSES:
        return ApiResult(value=raw.body)

    message = _extract_message(raw.body)

    if status == 403:
        # The API only distinguishes rate limiting from permissions in the message text
        if message and "rate limit" in message.lower():
            return ApiResult(error=RateLimitError(message, status=status))
        return ApiResult(error=PermissionDeniedError(message, status=status))

    error_type = _ERRORS_BY_STATUS.get(status, UnknownAPIError)
    return ApiResult(error=error_type(message, status=status))


def get_next_page_url(raw: RawResponse) -> str | None:
    """
    Extract next page URL from Link header.

    "Following links is how you find the truth. Or more repos."
    """
    link = raw.header("link")
    if not link:
        return None
    match = _NEXT_LINK_PATTERN.search(link)
    return match.group(1) if match else None


class GitHubAPIClient:
    """
    GitHub REST API v3 client.

    "They track everything. Might as well use their API."
    """

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        """Initialize the GitHub API client."""
        if not config.token:
            raise ConfigError("A GitHub access token is required")

        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/json",
            "User-Agent": f"gh-control/{__version__}",
        })

        # Resolved once per command, reused for ownership checks
        self._authenticated_user: str | None = None

    def __enter__(self) -> "GitHubAPIClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close session."""
        self.close()

    def close(self) -> None:
        """Close the HTTP session and release resources."""
        if self.session:
            self.session.close()

    def resolve_url(self, path: str) -> str:
        """Absolute URLs pass through; relative paths hang off the API host."""
        if path.startswith("https"):
            return path
        return f"{self.config.base_url}{path.lstrip('/')}"

    def _request(self, method: str, path: str, body: Any = None) -> RawResponse:
        url = self.resolve_url(path)
        log_event(f"{method.lower()}: uri: {url}")

        headers = {"Content-Type": "application/json"} if method in MUTATING_METHODS else None
        try:
            response = self.session.request(
                method,
                url,
                json=body,
                headers=headers,
                timeout=self.config.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Request to {url} timed out after {self.config.timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Failed to connect to GitHub API ({type(e).__name__})") from e

        return RawResponse.from_response(response)

    def fetch(self, path: str) -> RawResponse:
        """GET a single page."""
        return self._request("GET", path)

    def update(self, path: str, body: Any, method: str = "PATCH") -> RawResponse:
        """Send a JSON body with PATCH or PUT."""
        method = method.upper()
        if method not in MUTATING_METHODS:
            raise ValueError(f"Unsupported update method: {method}")
        log_event(f"{method.lower()}: data: {body}")
        return self._request(method, path, body)

    def remove(self, path: str) -> int:
        """DELETE a resource and return the response status."""
        raw = self._request("DELETE", path)
        classify_response(raw).unwrap()
        return raw.status_code

    def get_json(self, path: str) -> Any:
        """GET one page and return its decoded body."""
        return classify_response(self.fetch(path)).unwrap()

    def iter_pages(self, path: str) -> Iterator[Any]:
        """
        Lazily yield page bodies, following `rel="next"` links.

        "Pagination is just recursion with extra steps."
        """
        url: str | None = path
        page = 0
        while url:
            raw = self.fetch(url)
            body = classify_response(raw).unwrap()
            yield body

            url = get_next_page_url(raw)
            page += 1
            if url:
                log_event(f"following page {page + 1}: {url}")

    def paginate(self, path: str, require_list: bool = False) -> Iterator[Any]:
        """
        Yield every element across all pages, in API order.

        A page that is not a JSON array is yielded whole, or raises
        MalformedResponseError when `require_list` is set.
        """
        for body in self.iter_pages(path):
            if isinstance(body, list):
                yield from body
            elif require_list:
                raise MalformedResponseError(f"Invalid response format from GitHub API. Response: {body!r}")
            else:
                yield body

    def get_authenticated_user(self) -> str:
        """Get the authenticated user's login."""
        if self._authenticated_user:
            return self._authenticated_user

        data = self.get_json("user")
        login = data.get("login") if isinstance(data, dict) else None
        if not login:
            raise MalformedResponseError("Failed to get authenticated user. Check your GitHub token.")

        self._authenticated_user = login
        return login

    def get_rate_limit_remaining(self) -> int:
        """Remaining core API calls for this token."""
        data = self.get_json("rate_limit")
        try:
            return int(data["resources"]["core"]["remaining"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponseError("Unexpected rate limit response from GitHub API") from e

    def get_repository(self, identity: RepositoryIdentity) -> dict[str, Any]:
        """Fetch a single repository."""
        identity = require_identity(identity)
        data = self.get_json(identity.api_path)
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Invalid repository response for {identity.full_name}")
        return data

    def set_visibility(self, identity: RepositoryIdentity, private: bool) -> dict[str, Any]:
        """PATCH a repository's `private` flag."""
        identity = require_identity(identity)
        raw = self.update(identity.api_path, {"private": private})
        return classify_response(raw).unwrap()
