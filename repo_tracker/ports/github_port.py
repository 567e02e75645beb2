from abc import ABC, abstractmethod
from typing import List
from repo_tracker.core.models.domain import GitHubCommit, GitHubRepository, GitHubUser

class GitHubPort(ABC):
    """
    Port (Interface) for GitHub API access.
    The activity service depends on this abstraction, never on the concrete HTTP client.
    """

    @abstractmethod
    def get_user(self, username: str) -> GitHubUser:
        """
        Fetches a user or organization account.

        Raises:
            GitHubNotFoundError: the account does not exist.
            GitHubApiError: any other upstream failure.
        """
        pass

    @abstractmethod
    def get_user_repositories(self, username: str, page: int, per_page: int) -> List[GitHubRepository]:
        """Lists a user's repositories, most recently updated first."""
        pass

    @abstractmethod
    def get_organization_repositories(self, org_name: str, page: int, per_page: int) -> List[GitHubRepository]:
        """Lists an organization's repositories, most recently updated first."""
        pass

    @abstractmethod
    def get_repository_commits(self, owner: str, repo: str, per_page: int) -> List[GitHubCommit]:
        """
        Fetches the most recent commits of a repository, newest first.
        Returns an empty list when the repository is missing, empty or forbidden.
        """
        pass
