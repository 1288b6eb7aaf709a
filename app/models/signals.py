from __future__ import annotations

from abc import abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer


class SignalSource(str, Enum):
    HACKERNEWS = "hackernews"
    GITHUB = "github"
    LOBSTERS = "lobsters"


class ItemType(str, Enum):
    STORY = "story"
    REPO = "repo"
    ARTICLE = "article"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SignalItem(BaseModel):
    """
    Common shape of a normalized item from any upstream platform.

    `source` and `type` are only set once an item is merged into the combined
    feed; untagged items do not serialize those keys at all.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    url: Optional[str] = None
    source: Optional[SignalSource] = None
    type: Optional[ItemType] = None

    @model_serializer(mode="wrap")
    def _drop_untagged(self, handler) -> Dict[str, Any]:
        data = handler(self)
        for key in ("source", "type"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @abstractmethod
    def sort_time(self) -> datetime:
        """Timestamp that orders the item in the combined feed."""

    def tagged(self, source: SignalSource, item_type: ItemType) -> "SignalItem":
        return self.model_copy(update={"source": source, "type": item_type})


class HackerNewsStory(SignalItem):
    id: int
    score: int = 0
    author: Optional[str] = None
    comments: int = 0
    source_url: str = Field(serialization_alias="sourceUrl")
    time: datetime

    @field_validator("time")
    @classmethod
    def _utc_time(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def sort_time(self) -> datetime:
        return self.time


class GitHubRepo(SignalItem):
    description: Optional[str] = None
    stars: int = 0
    forks: int = 0
    language: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    created_at: datetime = Field(serialization_alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def _utc_created_at(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def sort_time(self) -> datetime:
        return self.created_at


class LobstersArticle(SignalItem):
    score: int = 0
    author: Optional[str] = None
    comments: int = 0
    tags: List[str] = Field(default_factory=list)
    source_url: str = Field(serialization_alias="sourceUrl")
    time: datetime

    @field_validator("time")
    @classmethod
    def _utc_time(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def sort_time(self) -> datetime:
        return self.time


def dump_items(items: List[SignalItem]) -> List[Dict[str, Any]]:
    """JSON-ready dicts with the public camelCase keys."""
    return [item.model_dump(mode="json", by_alias=True) for item in items]
