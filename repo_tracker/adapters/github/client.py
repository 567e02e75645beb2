import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from repo_tracker.core.config import GitHubSettings
from repo_tracker.core.errors import GitHubApiError, GitHubNotFoundError, GitHubRateLimitError
from repo_tracker.core.logger import get_logger
from repo_tracker.core.models.domain import GitHubCommit, GitHubRepository, GitHubUser
from repo_tracker.ports.github_port import GitHubPort

logger = get_logger(__name__)

class GitHubApiClient(GitHubPort):
    """
    Concrete implementation of GitHubPort over the GitHub REST API (v3).

    Every call goes through the same retry envelope: a 403 whose body reports an
    exceeded rate limit is retried up to `max_retries` times with a fixed delay.
    """
    USER_ENDPOINT = "/users/{username}"
    USER_REPOS_ENDPOINT = "/users/{username}/repos"
    ORG_REPOS_ENDPOINT = "/orgs/{org_name}/repos"
    REPO_COMMITS_ENDPOINT = "/repos/{owner}/{repo}/commits"

    USER_AGENT = "GitHub-Repo-Tracker/1.0"
    RATE_LIMIT_MARKER = "rate limit exceeded"

    def __init__(self, settings: GitHubSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self._base_url = settings.api_url.rstrip("/")
        self._timeout = (settings.connect_timeout, settings.read_timeout)
        self._headers = {
            "Authorization": f"token {settings.token}",
            "Accept": "application/json",
            "User-Agent": self.USER_AGENT,
        }
        self._closed = threading.Event()

    def get_user(self, username: str) -> GitHubUser:
        url = self._url(self.USER_ENDPOINT, username=username)
        response = self._get(url)

        if response.status_code == 404:
            raise GitHubNotFoundError(f"User not found: {username}", response.status_code, response.text)
        if not _is_success(response):
            raise self._http_error(response)

        return GitHubUser.model_validate(response.json())

    def get_user_repositories(self, username: str, page: int, per_page: int) -> List[GitHubRepository]:
        url = self._url(self.USER_REPOS_ENDPOINT, username=username)
        return self._get_repositories(url, username, page, per_page)

    def get_organization_repositories(self, org_name: str, page: int, per_page: int) -> List[GitHubRepository]:
        url = self._url(self.ORG_REPOS_ENDPOINT, org_name=org_name)
        return self._get_repositories(url, org_name, page, per_page)

    def get_repository_commits(self, owner: str, repo: str, per_page: int) -> List[GitHubCommit]:
        url = self._url(self.REPO_COMMITS_ENDPOINT, owner=owner, repo=repo)
        params = {
            "per_page": min(per_page, self.settings.max_commits_per_repo),
            "page": 1,
        }
        response = self._get(url, params)

        if response.status_code == 404:
            logger.warning(f"Repository {owner}/{repo} not found or no commits available")
            return []
        if response.status_code == 403:
            logger.warning(f"Access forbidden to repository {owner}/{repo}")
            return []
        if not _is_success(response):
            raise self._http_error(response)

        return [GitHubCommit.model_validate(item) for item in response.json() or []]

    def close(self) -> None:
        """Interrupts pending retry waits and releases pooled connections."""
        self._closed.set()
        self.session.close()

    # --- Internals ---

    def _get_repositories(self, url: str, identifier: str, page: int, per_page: int) -> List[GitHubRepository]:
        params = {
            "type": "all",
            "sort": "updated",
            "direction": "desc",
            "per_page": min(per_page, self.settings.max_repositories_per_page),
            "page": page,
        }
        response = self._get(url, params)

        if response.status_code == 404:
            raise GitHubNotFoundError(
                f"User/Organization not found: {identifier}", response.status_code, response.text
            )
        if not _is_success(response):
            raise self._http_error(response)

        return [GitHubRepository.model_validate(item) for item in response.json() or []]

    def _url(self, endpoint: str, **path_params: str) -> str:
        encoded = {key: quote(value, safe="") for key, value in path_params.items()}
        return self._base_url + endpoint.format(**encoded)

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """
        Executes a GET with retry logic for rate limiting.

        Returns the response for every outcome except an exhausted rate limit,
        leaving status handling to the caller.
        """
        retry_count = 0
        while True:
            response = self._send(url, params)

            if response.status_code == 403 and self._is_rate_limited(response):
                if retry_count < self.settings.max_retries:
                    retry_count += 1
                    logger.warning(
                        f"Rate limit exceeded. Retrying in {self.settings.retry_delay}s... "
                        f"(attempt {retry_count}/{self.settings.max_retries})"
                    )
                    if self._closed.wait(self.settings.retry_delay):
                        raise GitHubApiError("Request interrupted during rate limit retry")
                    continue
                raise self._rate_limit_error(response)

            self._log_rate_limit_info(response)
            return response

    def _send(self, url: str, params: Optional[Dict[str, Any]]) -> requests.Response:
        if self.settings.request_logging_enabled:
            logger.info(f"Request: GET {url} params={params}")
        try:
            response = self.session.get(url, headers=self._headers, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            logger.error(f"GitHub request to {url} failed: {e}")
            raise GitHubApiError(f"GitHub API request failed: {e}") from e
        if self.settings.request_logging_enabled:
            logger.info(f"Response: {response.status_code} for GET {url}")
        return response

    def _is_rate_limited(self, response: requests.Response) -> bool:
        return self.RATE_LIMIT_MARKER in (response.text or "").lower()

    def _rate_limit_error(self, response: requests.Response) -> GitHubRateLimitError:
        return GitHubRateLimitError(
            "GitHub API rate limit exceeded",
            response.status_code,
            response.text,
            rate_limit_remaining=parse_rate_limit_remaining(response.headers.get("X-RateLimit-Remaining")),
            rate_limit_reset=parse_rate_limit_reset(response.headers.get("X-RateLimit-Reset")),
        )

    def _http_error(self, response: requests.Response) -> GitHubApiError:
        logger.error(f"GitHub API error: {response.status_code} - {response.text}")
        return GitHubApiError(
            f"GitHub API request failed: {response.status_code} {response.reason or ''}".rstrip(),
            response.status_code,
            response.text,
        )

    def _log_rate_limit_info(self, response: requests.Response) -> None:
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            reset = response.headers.get("X-RateLimit-Reset")
            logger.debug(f"Rate limit remaining: {remaining} (resets at: {reset})")

def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300

def parse_rate_limit_remaining(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None

def parse_rate_limit_reset(value: Optional[str]) -> Optional[datetime]:
    """
    Accepts an ISO-8601 timestamp or epoch seconds (what api.github.com sends).
    Timestamps without an offset are taken as UTC. Returns None for anything else.
    """
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        try:
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
