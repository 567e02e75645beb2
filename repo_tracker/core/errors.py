from datetime import datetime
from typing import Optional


class GitHubApiError(Exception):
    """
    Raised for any failed interaction with the GitHub REST API.
    Carries the upstream status code and body when one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body


class GitHubNotFoundError(GitHubApiError):
    """Upstream answered 404 for a user, organization or listing."""


class GitHubRateLimitError(GitHubApiError):
    """Rate limit retries were exhausted."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        rate_limit_remaining: Optional[int] = None,
        rate_limit_reset: Optional[datetime] = None,
    ):
        super().__init__(message, status_code, response_body)
        self.rate_limit_remaining = rate_limit_remaining
        self.rate_limit_reset = rate_limit_reset
