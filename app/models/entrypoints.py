from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field


class EntrypointInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


class OverviewInput(EntrypointInput):
    pass


class HNTopInput(EntrypointInput):
    limit: int = Field(10, ge=1, le=30)


class GitHubTrendingInput(EntrypointInput):
    language: str = ""
    since: Literal["daily", "weekly", "monthly"] = "daily"
    limit: int = Field(10, ge=1, le=25)


class LobstersInput(EntrypointInput):
    limit: int = Field(10, ge=1, le=25)


class TechFeedInput(EntrypointInput):
    limit: int = Field(20, ge=1, le=50)


class TopicSearchInput(EntrypointInput):
    query: str = Field(..., min_length=1, max_length=100)
    limit: int = Field(10, ge=1, le=20)


class InvokeRequest(BaseModel):
    """Body of POST /entrypoints/{key}/invoke."""

    input: Dict[str, Any] = Field(default_factory=dict)


class EntrypointPrice(BaseModel):
    amount: int = Field(..., ge=0, description="Price in base units of the payment currency.")
    currency: str
    display: str


class EntrypointInfo(BaseModel):
    key: str
    description: str
    price: EntrypointPrice
    input_schema: Dict[str, Any]
