from __future__ import annotations

import pytest
from pydantic import ValidationError

from repo_tracker.core.config import GitHubSettings


def test_defaults_from_minimal_environment() -> None:
    settings = GitHubSettings.from_env({"GITHUB_TOKEN": "ghp_test"})

    assert settings.api_url == "https://api.github.com"
    assert settings.token == "ghp_test"
    assert settings.max_repositories_per_page == 30
    assert settings.max_commits_per_repo == 20
    assert settings.max_retries == 3
    assert settings.retry_delay == 2.0
    assert settings.request_logging_enabled is False
    assert settings.commit_fetch_workers == 5


def test_environment_overrides_are_coerced() -> None:
    settings = GitHubSettings.from_env(
        {
            "GITHUB_TOKEN": "ghp_test",
            "GITHUB_API_URL": "https://ghe.example.com/api/v3",
            "GITHUB_MAX_REPOSITORIES_PER_PAGE": "100",
            "GITHUB_MAX_RETRIES": "0",
            "GITHUB_RETRY_DELAY": "0.5",
            "GITHUB_ENABLE_REQUEST_LOGGING": "true",
            "GITHUB_READ_TIMEOUT": "",
        }
    )

    assert settings.api_url == "https://ghe.example.com/api/v3"
    assert settings.max_repositories_per_page == 100
    assert settings.max_retries == 0
    assert settings.retry_delay == 0.5
    assert settings.request_logging_enabled is True
    assert settings.read_timeout == 30.0


def test_missing_token_fails_fast() -> None:
    with pytest.raises(ValueError, match="GITHUB_TOKEN"):
        GitHubSettings.from_env({})


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        GitHubSettings.from_env({"GITHUB_TOKEN": "ghp_test", "GITHUB_MAX_COMMITS_PER_REPO": "0"})
