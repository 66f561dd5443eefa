"""Shared fixtures for gh-control tests."""

from typing import Any

import pytest
import responses

from ghcontrol.github_api import GitHubAPIClient
from ghcontrol.models import Config

API = "https://api.github.com"
TOKEN = "ghp_testtoken123"


def repo_json(name: str, owner: str = "octocat", private: bool = False, archived: bool = False) -> dict[str, Any]:
    """Minimal repository payload as returned by the API."""
    return {
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner, "type": "User"},
        "private": private,
        "archived": archived,
        "updated_at": "2024-01-01T00:00:00Z",
    }


def add_rate_limit(remaining: int = 5000) -> None:
    responses.add(
        responses.GET,
        f"{API}/rate_limit",
        json={"resources": {"core": {"limit": 5000, "remaining": remaining}}},
    )


def add_user(login: str = "octocat") -> None:
    responses.add(responses.GET, f"{API}/user", json={"login": login})


def add_repo(name: str, owner: str = "octocat", actual_owner: str | None = None, status: int = 200) -> None:
    """Register GET repos/{owner}/{name}; `actual_owner` fakes a foreign owner."""
    if status != 200:
        responses.add(responses.GET, f"{API}/repos/{owner}/{name}", json={"message": "Not Found"}, status=status)
        return
    responses.add(responses.GET, f"{API}/repos/{owner}/{name}", json=repo_json(name, actual_owner or owner))


def patch_calls() -> list:
    return [call for call in responses.calls if call.request.method == "PATCH"]


@pytest.fixture
def config() -> Config:
    return Config(token=TOKEN)


@pytest.fixture
def client(config: Config) -> GitHubAPIClient:
    return GitHubAPIClient(config)
