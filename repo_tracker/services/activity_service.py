import concurrent.futures
import math
from datetime import datetime, timezone
from typing import List, Optional

from repo_tracker.core.config import GitHubSettings
from repo_tracker.core.errors import GitHubApiError
from repo_tracker.core.logger import get_logger
from repo_tracker.core.models.domain import (
    GitHubCommit,
    GitHubRepository,
    GitHubUser,
    RepositoryActivityResponse,
)
from repo_tracker.ports.github_port import GitHubPort

logger = get_logger(__name__)

class RepositoryActivityService:
    """
    Builds the activity view of a user or organization: one page of repositories,
    each with its most recent commits fetched in PARALLEL.

    The worker pool is created once per service and reused by every call, so the
    number of concurrent upstream commit requests never exceeds `max_workers`.
    """

    def __init__(self, github: GitHubPort, settings: GitHubSettings, max_workers: Optional[int] = None):
        self.github = github
        self.settings = settings
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers or settings.commit_fetch_workers,
            thread_name_prefix="commit-fetch",
        )

    def fetch_activity(
        self,
        username: str,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> RepositoryActivityResponse:
        logger.info(f"Fetching repository activity for user: {username}")

        try:
            current_page = page if page and page > 0 else 1
            max_per_page = self.settings.max_repositories_per_page
            page_size = min(per_page, max_per_page) if per_page and per_page > 0 else max_per_page

            # Tells users and organizations apart; a missing account stops here.
            user = self.github.get_user(username)

            if user.is_organization:
                repositories = self.github.get_organization_repositories(username, current_page, page_size)
            else:
                repositories = self.github.get_user_repositories(username, current_page, page_size)

            if not repositories:
                return self._empty_response(username, user, current_page)

            repositories = self._fetch_commits_in_parallel(repositories)

            return RepositoryActivityResponse(
                username=username,
                user_type=user.type,
                total_repositories=user.public_repos or 0,
                repositories_processed=len(repositories),
                repositories=repositories,
                fetched_at=datetime.now(timezone.utc),
                message=f"Successfully fetched {len(repositories)} repositories with recent commits",
                has_more=len(repositories) == page_size,
                current_page=current_page,
                total_pages=calculate_total_pages(user.public_repos, page_size),
            )

        except GitHubApiError as e:
            logger.error(f"GitHub API error while fetching repository activity for user: {username} - {e}")
            raise
        except Exception as e:
            logger.exception(f"Unexpected error while fetching repository activity for user: {username}")
            raise GitHubApiError(f"Failed to fetch repository activity: {e}") from e

    def fetch_repository_details(self, owner: str, repo_name: str) -> GitHubRepository:
        """
        Returns a repository record with its recent commits.
        The repository itself is not looked up; only its commits are fetched.
        """
        logger.info(f"Fetching detailed information for repository: {owner}/{repo_name}")

        try:
            repository = GitHubRepository(
                name=repo_name,
                full_name=f"{owner}/{repo_name}",
                owner=GitHubUser(login=owner),
            )
            repository.recent_commits = self.github.get_repository_commits(
                owner, repo_name, self.settings.max_commits_per_repo
            )
            return repository
        except Exception as e:
            logger.error(f"Error fetching repository details for {owner}/{repo_name}: {e}")
            raise GitHubApiError(f"Failed to fetch repository details: {e}") from e

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    # --- Internals ---

    def _fetch_commits_in_parallel(self, repositories: List[GitHubRepository]) -> List[GitHubRepository]:
        logger.debug(f"Fetching commits for {len(repositories)} repositories in parallel")

        futures = [self._executor.submit(self._attach_commits, repo) for repo in repositories]
        # Joined in submission order so the listing order is preserved.
        return [future.result() for future in futures]

    def _attach_commits(self, repo: GitHubRepository) -> GitHubRepository:
        owner = repo.owner_login or ""
        try:
            logger.debug(f"Fetching commits for repository: {owner}/{repo.name}")
            commits: List[GitHubCommit] = self.github.get_repository_commits(
                owner, repo.name, self.settings.max_commits_per_repo
            )
            repo.recent_commits = list(commits or [])
            logger.debug(f"Successfully fetched {len(repo.recent_commits)} commits for repository: {owner}/{repo.name}")
        except Exception as e:
            logger.warning(f"Failed to fetch commits for repository: {owner}/{repo.name} - {e}")
            repo.recent_commits = []
        return repo

    def _empty_response(self, username: str, user: GitHubUser, current_page: int) -> RepositoryActivityResponse:
        return RepositoryActivityResponse(
            username=username,
            user_type=user.type,
            total_repositories=0,
            repositories_processed=0,
            repositories=[],
            fetched_at=datetime.now(timezone.utc),
            message=f"No repositories found for user: {username}",
            has_more=False,
            current_page=current_page,
            total_pages=0,
        )

def calculate_total_pages(total_repos: Optional[int], page_size: int) -> int:
    if not total_repos:
        return 0
    return math.ceil(total_repos / page_size)
