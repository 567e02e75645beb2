from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from repo_tracker.api.server import app, determine_http_status, get_activity_service
from repo_tracker.core.errors import GitHubApiError, GitHubNotFoundError, GitHubRateLimitError
from repo_tracker.core.models.domain import (
    CommitAuthor,
    CommitDetails,
    GitHubCommit,
    GitHubRepository,
    GitHubUser,
    RepositoryActivityResponse,
)


class StubService:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple] = []

    def fetch_activity(self, username, page, per_page):
        self.calls.append(("activity", username, page, per_page))
        if self.error:
            raise self.error
        repo = GitHubRepository(
            name="hello",
            full_name=f"{username}/hello",
            owner=GitHubUser(login=username),
            recent_commits=[
                GitHubCommit(
                    sha="abc123",
                    commit=CommitDetails(
                        author=CommitAuthor(name="Mona", email="mona@example.com"),
                        message="Initial commit",
                    ),
                )
            ],
        )
        return RepositoryActivityResponse(
            username=username,
            user_type="User",
            total_repositories=1,
            repositories_processed=1,
            repositories=[repo],
            fetched_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            message="Successfully fetched 1 repositories with recent commits",
            has_more=False,
            current_page=page,
            total_pages=1,
        )

    def fetch_repository_details(self, owner, repo):
        self.calls.append(("details", owner, repo))
        if self.error:
            raise self.error
        return GitHubRepository(name=repo, full_name=f"{owner}/{repo}", owner=GitHubUser(login=owner))


@pytest.fixture
def stub():
    service = StubService()
    app.dependency_overrides[get_activity_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def client(stub) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


def test_activity_endpoint_returns_camel_case_payload(client, stub) -> None:
    response = client.get("/api/v1/repositories/activity/octocat", params={"page": 2, "perPage": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "octocat"
    assert body["userType"] == "User"
    assert body["repositoriesProcessed"] == 1
    assert body["currentPage"] == 2
    assert body["hasMore"] is False
    assert body["repositories"][0]["recent_commits"][0]["sha"] == "abc123"
    assert stub.calls == [("activity", "octocat", 2, 10)]


def test_activity_defaults(client, stub) -> None:
    client.get("/api/v1/repositories/activity/octocat")

    assert stub.calls == [("activity", "octocat", 1, 30)]


@pytest.mark.parametrize("username", ["-octocat", "octo--cat", "octocat-", "a" * 40, "octo_cat"])
def test_invalid_username_is_rejected(client, stub, username: str) -> None:
    response = client.get(f"/api/v1/repositories/activity/{username}")

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation Error"
    assert body["traceId"]
    assert stub.calls == []


def test_invalid_page_is_rejected(client, stub) -> None:
    response = client.get("/api/v1/repositories/activity/octocat", params={"page": 0})

    assert response.status_code == 400
    assert stub.calls == []


def test_not_found_maps_to_404(client, stub) -> None:
    stub.error = GitHubNotFoundError("User not found: ghost", 404, '{"message": "Not Found"}')

    response = client.get("/api/v1/repositories/activity/ghost")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "GitHub API Error"
    assert body["message"] == "User not found: ghost"
    assert body["path"] == "/api/v1/repositories/activity/ghost"


def test_rate_limit_maps_to_429_with_details(client, stub) -> None:
    stub.error = GitHubRateLimitError(
        "GitHub API rate limit exceeded",
        403,
        "API rate limit exceeded",
        rate_limit_remaining=0,
        rate_limit_reset=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )

    response = client.get("/api/v1/repositories/activity/octocat")

    assert response.status_code == 429
    body = response.json()
    assert body["error"] == "Rate Limit Exceeded"
    assert "Remaining: 0" in body["details"]
    assert "2024-05-01T12:00:00+00:00" in body["details"]


def test_wrapped_error_without_status_maps_to_500(client, stub) -> None:
    stub.error = GitHubApiError("Failed to fetch repository details: boom")

    response = client.get("/api/v1/repositories/details/octocat/hello")

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to fetch repository details: boom"


def test_unexpected_error_maps_to_500(client, stub) -> None:
    stub.error = RuntimeError("kaboom")

    response = client.get("/api/v1/repositories/activity/octocat")

    assert response.status_code == 500
    assert response.json()["error"] == "Internal Server Error"


def test_details_endpoint(client, stub) -> None:
    response = client.get("/api/v1/repositories/details/octocat/hello.world")

    assert response.status_code == 200
    body = response.json()
    assert body["full_name"] == "octocat/hello.world"
    assert body["recent_commits"] == []
    assert stub.calls == [("details", "octocat", "hello.world")]


def test_details_rejects_bad_repo_name(client, stub) -> None:
    response = client.get("/api/v1/repositories/details/octocat/bad%20name")

    assert response.status_code == 400
    assert stub.calls == []


def test_health_and_info(client) -> None:
    health = client.get("/api/v1/repositories/health")
    info = client.get("/api/v1/repositories/info")

    assert health.status_code == 200
    assert health.json()["status"] == "UP"
    assert info.status_code == 200
    assert "GET /api/v1/repositories/activity/{username}" in info.json()["endpoints"]


@pytest.mark.parametrize(
    ("upstream", "expected"),
    [(None, 500), (401, 401), (404, 404), (409, 400), (418, 400), (422, 422), (502, 502), (504, 500), (599, 500)],
)
def test_determine_http_status(upstream, expected) -> None:
    assert determine_http_status(upstream) == expected
