from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ORGANIZATION_TYPE = "Organization"

class GitHubUser(BaseModel):
    """
    A GitHub account as returned by /users/{username}.
    'type' tells users and organizations apart.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    login: str
    id: Optional[int] = None
    type: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    public_repos: Optional[int] = None
    followers: Optional[int] = None
    following: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_organization(self) -> bool:
        return (self.type or "").lower() == ORGANIZATION_TYPE.lower()

class CommitAuthor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[datetime] = None

class CommitDetails(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    author: Optional[CommitAuthor] = None
    committer: Optional[CommitAuthor] = None
    message: str = ""
    comment_count: Optional[int] = None

class GitHubCommit(BaseModel):
    """
    Immutable commit value. Identity is the SHA within one repository's list.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    sha: str
    html_url: Optional[str] = None
    commit: CommitDetails = Field(default_factory=CommitDetails)

    @property
    def author_name(self) -> Optional[str]:
        return self.commit.author.name if self.commit.author else None

    @property
    def author_email(self) -> Optional[str]:
        return self.commit.author.email if self.commit.author else None

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.commit.author.date if self.commit.author else None

    @property
    def message(self) -> str:
        return self.commit.message

class GitHubRepository(BaseModel):
    """
    Repository as listed by GitHub, plus 'recent_commits' which is filled in
    by the activity service after the listing call.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[int] = None
    name: str
    full_name: Optional[str] = None
    owner: Optional[GitHubUser] = None
    description: Optional[str] = None
    html_url: Optional[str] = None
    clone_url: Optional[str] = None
    default_branch: Optional[str] = None
    language: Optional[str] = None
    stargazers_count: Optional[int] = None
    watchers_count: Optional[int] = None
    forks_count: Optional[int] = None
    open_issues_count: Optional[int] = None
    fork: Optional[bool] = None
    is_private: Optional[bool] = Field(default=None, alias="private")
    size: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None

    recent_commits: List[GitHubCommit] = Field(default_factory=list)

    @property
    def owner_login(self) -> Optional[str]:
        if self.owner:
            return self.owner.login
        if self.full_name and "/" in self.full_name:
            return self.full_name.split("/", 1)[0]
        return None

class RepositoryActivityResponse(BaseModel):
    """
    Aggregated activity for one page of a user's or organization's repositories.
    Serialized in camelCase.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    username: str
    user_type: Optional[str] = None
    total_repositories: int = 0
    repositories_processed: int = 0
    repositories: List[GitHubRepository] = Field(default_factory=list)
    fetched_at: datetime
    message: str
    has_more: bool = False
    current_page: int = 1
    total_pages: int = 0
