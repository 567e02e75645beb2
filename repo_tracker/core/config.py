import os
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Settings field -> environment variable
ENV_VARS: Dict[str, str] = {
    "api_url": "GITHUB_API_URL",
    "token": "GITHUB_TOKEN",
    "connect_timeout": "GITHUB_CONNECT_TIMEOUT",
    "read_timeout": "GITHUB_READ_TIMEOUT",
    "max_repositories_per_page": "GITHUB_MAX_REPOSITORIES_PER_PAGE",
    "max_commits_per_repo": "GITHUB_MAX_COMMITS_PER_REPO",
    "max_retries": "GITHUB_MAX_RETRIES",
    "retry_delay": "GITHUB_RETRY_DELAY",
    "request_logging_enabled": "GITHUB_ENABLE_REQUEST_LOGGING",
    "commit_fetch_workers": "GITHUB_COMMIT_FETCH_WORKERS",
}


class GitHubSettings(BaseModel):
    """
    Runtime configuration for the GitHub client and the activity service.
    Timeouts and the retry delay are expressed in seconds.
    """

    model_config = ConfigDict(frozen=True)

    api_url: str = Field(default="https://api.github.com", min_length=1)
    token: str = Field(..., min_length=1)
    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=30.0, gt=0)
    max_repositories_per_page: int = Field(default=30, ge=1)
    max_commits_per_repo: int = Field(default=20, ge=1)
    max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=2.0, ge=0)
    request_logging_enabled: bool = False
    commit_fetch_workers: int = Field(default=5, ge=1)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "GitHubSettings":
        environ = os.environ if environ is None else environ

        if not environ.get("GITHUB_TOKEN"):
            raise ValueError("❌ Missing GITHUB_TOKEN in environment variables.")

        values = {
            field: environ[var]
            for field, var in ENV_VARS.items()
            if environ.get(var) not in (None, "")
        }
        return cls(**values)
