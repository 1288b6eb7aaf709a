from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class _UpstreamModel(BaseModel):
    """
    Boundary schema for a raw upstream payload. Only the fields we map are
    declared; everything else the platform sends is ignored.
    """

    model_config = ConfigDict(extra="ignore")


# ---- Hacker News (Firebase) -------------------------------------------------

class HNItemPayload(_UpstreamModel):
    id: int
    title: str
    url: Optional[str] = None
    score: int = 0
    by: Optional[str] = None
    descendants: Optional[int] = None
    time: int


HN_TOP_IDS = TypeAdapter(List[int])
# Firebase answers `null` for deleted/unknown ids; that fails validation here.
HN_ITEM = TypeAdapter(HNItemPayload)


# ---- Hacker News (Algolia search) -------------------------------------------

class AlgoliaHitPayload(_UpstreamModel):
    # HN item ids; always numeric for stories.
    objectID: str = Field(pattern=r"^\d+$")
    title: str
    url: Optional[str] = None
    points: Optional[int] = None
    author: Optional[str] = None
    num_comments: Optional[int] = None
    created_at: datetime


class AlgoliaSearchPayload(_UpstreamModel):
    hits: List[AlgoliaHitPayload]


ALGOLIA_SEARCH = TypeAdapter(AlgoliaSearchPayload)


# ---- GitHub search ----------------------------------------------------------

class GitHubRepoPayload(_UpstreamModel):
    full_name: str
    description: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    language: Optional[str] = None
    html_url: str
    topics: List[str] = Field(default_factory=list)
    created_at: datetime

    @field_validator("topics", mode="before")
    @classmethod
    def _none_topics(cls, value):
        return value or []


class GitHubSearchPayload(_UpstreamModel):
    items: List[GitHubRepoPayload]


GITHUB_SEARCH = TypeAdapter(GitHubSearchPayload)


# ---- Lobsters ---------------------------------------------------------------

class LobstersUserPayload(_UpstreamModel):
    username: str


class LobstersStoryPayload(_UpstreamModel):
    title: str
    url: Optional[str] = None
    score: int = 0
    # Older API versions nest the user object, newer ones send the username.
    submitter_user: Optional[Union[LobstersUserPayload, str]] = None
    submitter: Optional[str] = None
    comment_count: int = 0
    tags: List[str] = Field(default_factory=list)
    short_id_url: str
    created_at: datetime

    @property
    def author(self) -> Optional[str]:
        user = self.submitter_user
        if isinstance(user, LobstersUserPayload) and user.username:
            return user.username
        if isinstance(user, str) and user:
            return user
        return self.submitter


LOBSTERS_LISTING = TypeAdapter(List[LobstersStoryPayload])
