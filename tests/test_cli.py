"""
Tests for the command-line interface.

"The command line is where the real work happens. So test it there."
"""

import pytest
import responses
from typer.testing import CliRunner

from conftest import API, TOKEN, add_rate_limit, add_repo, add_user, patch_calls, repo_json
from ghcontrol import __version__
from ghcontrol.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep real token files and config out of the way."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def invoke(tmp_path, args, token=TOKEN, input=None, env=None):
    environ = {
        "GH_ACCESS_TOKEN": token,
        "DRY_RUN": None,
        "FORCE": None,
        "GH_HOST": None,
        "GH_CONTROL_API_HOST": None,
    }
    environ.update(env or {})
    return runner.invoke(app, ["--config-dir", str(tmp_path), *args], input=input, env=environ)


def test_version(isolated):
    result = invoke(isolated, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_command(isolated):
    result = invoke(isolated, ["help"], token=None)

    assert result.exit_code == 0
    for command in ("get-repo", "get-repos", "make-repos-private", "make-repos-public"):
        assert command in result.output


def test_missing_token(isolated):
    result = invoke(isolated, ["get-repo", "octocat/Hello-World"], token=None)

    assert result.exit_code == 1
    assert "No GitHub token found" in result.output


# =============================================================================
# Read Commands
# =============================================================================


@responses.activate
def test_get(isolated):
    add_rate_limit()
    add_user("octocat")

    result = invoke(isolated, ["get", "user"])

    assert result.exit_code == 0
    assert '"login": "octocat"' in result.stdout


def test_get_rejects_unsafe_path(isolated):
    result = invoke(isolated, ["get", "user;whoami"])

    assert result.exit_code == 1
    assert "Invalid characters" in result.output


@responses.activate
def test_get_repo(isolated):
    add_rate_limit()
    add_repo("Hello-World")

    result = invoke(isolated, ["get-repo", "octocat/Hello-World"])

    assert result.exit_code == 0
    assert '"full_name": "octocat/Hello-World"' in result.stdout


@responses.activate
def test_gh_cli_host_variable_is_ignored(isolated):
    """GH_HOST belongs to the gh CLI and names the web host, not the API."""
    add_rate_limit()
    add_repo("Hello-World")

    result = invoke(isolated, ["get-repo", "octocat/Hello-World"], env={"GH_HOST": "github.com"})

    assert result.exit_code == 0
    assert all(call.request.url.startswith(f"{API}/") for call in responses.calls)


@responses.activate
def test_api_host_from_environment(isolated):
    responses.add(
        responses.GET,
        "https://ghe.example.com/api/v3/rate_limit",
        json={"resources": {"core": {"limit": 5000, "remaining": 10}}},
    )
    responses.add(
        responses.GET,
        "https://ghe.example.com/api/v3/repos/octocat/Hello-World",
        json=repo_json("Hello-World"),
    )

    result = invoke(
        isolated,
        ["get-repo", "octocat/Hello-World"],
        env={"GH_CONTROL_API_HOST": "ghe.example.com/api/v3"},
    )

    assert result.exit_code == 0
    assert len(responses.calls) == 2


def test_get_repo_invalid_identity(isolated):
    result = invoke(isolated, ["get-repo", "not-a-pair"])

    assert result.exit_code == 1
    assert "expected 'owner/repo'" in result.output


@responses.activate
def test_get_repo_auth_failure(isolated):
    responses.add(responses.GET, f"{API}/rate_limit", json={"message": "Bad credentials"}, status=401)

    result = invoke(isolated, ["get-repo", "octocat/Hello-World"])

    assert result.exit_code == 1
    assert "Bad credentials" in result.output
    assert "Traceback" not in result.output


@responses.activate
def test_get_private_repos_for_auth_user(isolated):
    add_rate_limit()
    responses.add(
        responses.GET,
        f"{API}/user/repos?type=owner",
        json=[repo_json("secret", private=True), repo_json("open-source")],
    )

    result = invoke(isolated, ["get-private-repos", "--auth-user"])

    assert result.exit_code == 0
    assert '"name": "secret"' in result.stdout
    assert "open-source" not in result.stdout


@responses.activate
def test_get_archived_repos_for_user(isolated):
    add_rate_limit()
    responses.add(
        responses.GET,
        f"{API}/users/octocat/repos",
        json=[repo_json("old", archived=True), repo_json("new")],
    )

    result = invoke(isolated, ["get-archived-repos", "--user", "octocat"])

    assert result.exit_code == 0
    assert '"name": "old"' in result.stdout
    assert '"name": "new"' not in result.stdout


@responses.activate
def test_get_repos_table(isolated):
    add_rate_limit()
    responses.add(responses.GET, f"{API}/users/octocat/repos", json=[repo_json("a"), repo_json("b", private=True)])

    result = invoke(isolated, ["get-repos", "--user", "octocat", "--format", "table"])

    assert result.exit_code == 0
    assert "octocat/a" in result.stdout
    assert "private" in result.stdout


@pytest.mark.parametrize("args", [[], ["--user", "octocat", "--auth-user"]])
def test_listing_requires_one_selector(isolated, args):
    result = invoke(isolated, ["get-repos", *args])

    assert result.exit_code == 1
    assert "exactly one of" in result.output


def test_listing_validates_user(isolated):
    result = invoke(isolated, ["get-repos", "--user", "bad--user"])

    assert result.exit_code == 1
    assert "consecutive hyphens" in result.output


# =============================================================================
# Visibility Commands
# =============================================================================


def add_preflight(*names):
    add_rate_limit()
    add_user("octocat")
    for name in names:
        add_repo(name)


@responses.activate
def test_make_repos_private_confirmed(isolated):
    add_preflight("a", "b")
    for name in ("a", "b"):
        responses.add(responses.PATCH, f"{API}/repos/octocat/{name}", json=repo_json(name, private=True))

    result = invoke(isolated, ["make-repos-private", "a", "b"], input="y\n")

    assert result.exit_code == 0
    assert len(patch_calls()) == 2
    assert "2/2 succeeded" in result.output


@responses.activate
def test_make_repos_public_declined(isolated):
    add_preflight("a")

    result = invoke(isolated, ["make-repos-public", "a"], input="n\n")

    assert result.exit_code == 0
    assert patch_calls() == []
    assert "cancelled" in result.output


@responses.activate
def test_make_repos_private_dry_run(isolated):
    add_preflight("a", "b", "c")

    result = invoke(isolated, ["--dry-run", "make-repos-private", "a", "b", "c"], input="y\n")

    assert result.exit_code == 0
    assert patch_calls() == []
    assert result.output.count("Would make private") == 3


@responses.activate
def test_force_from_environment(isolated):
    add_preflight("a")
    responses.add(responses.PATCH, f"{API}/repos/octocat/a", json=repo_json("a"))

    result = invoke(isolated, ["make-repos-public", "a"], env={"FORCE": "true"})

    assert result.exit_code == 0
    assert len(patch_calls()) == 1
    assert "Are you sure" not in result.output


@responses.activate
def test_partial_failure_exits_zero(isolated):
    add_preflight("A", "B", "C")
    responses.add(responses.PATCH, f"{API}/repos/octocat/A", json=repo_json("A"))
    responses.add(responses.PATCH, f"{API}/repos/octocat/B", json={"message": "Server Error"}, status=500)
    responses.add(responses.PATCH, f"{API}/repos/octocat/C", json=repo_json("C"))

    result = invoke(isolated, ["--force", "make-repos-private", "A", "B", "C"])

    assert result.exit_code == 0
    assert len(patch_calls()) == 3
    assert "2/3 succeeded" in result.output


@responses.activate
def test_all_failed_exits_one(isolated):
    add_preflight("A")
    responses.add(responses.PATCH, f"{API}/repos/octocat/A", json={"message": "Server Error"}, status=500)

    result = invoke(isolated, ["--force", "make-repos-private", "A"])

    assert result.exit_code == 1
    assert "0/1 succeeded" in result.output


@responses.activate
def test_ownership_failure_exits_one(isolated):
    add_rate_limit()
    add_user("octocat")
    add_repo("A")
    add_repo("B", actual_owner="someone-else")

    result = invoke(isolated, ["--force", "make-repos-private", "A", "B"])

    assert result.exit_code == 1
    assert "You don't own repository" in result.output
    assert patch_calls() == []


def test_make_repos_requires_names(isolated):
    result = invoke(isolated, ["make-repos-private"])

    assert result.exit_code == 1
    assert "At least one repository" in result.output


def test_quiet_suppresses_logs(isolated):
    result = invoke(isolated, ["--quiet", "make-repos-private", "bad--name"])

    assert result.exit_code == 1
    assert "Using GitHub token" not in result.output
    assert "consecutive hyphens" in result.output
