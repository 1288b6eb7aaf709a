"""
Entrypoint registry.

One entry per billable unit of work: a key, its input schema, its price in
base units and a handler returning `{"output": ...}`. Metering and payment
happen outside this service; the price is declared here so the payment layer
and the /entrypoints listing read it from one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from app.config import Settings, settings as default_settings
from app.core.logging import get_logger
from app.models.entrypoints import (
    EntrypointInfo,
    EntrypointInput,
    EntrypointPrice,
    GitHubTrendingInput,
    HNTopInput,
    LobstersInput,
    OverviewInput,
    TechFeedInput,
    TopicSearchInput,
)
from services.signals_service import SignalsService

logger = get_logger(module="entrypoints")

Handler = Callable[[Any], Awaitable[Dict[str, Any]]]


class UnknownEntrypoint(KeyError):
    pass


@dataclass(frozen=True)
class Entrypoint:
    key: str
    description: str
    input_model: Type[EntrypointInput]
    price: int
    handler: Handler

    def parse_input(self, raw: Optional[Dict[str, Any]]) -> EntrypointInput:
        # Raises pydantic.ValidationError on bad input.
        return self.input_model.model_validate(raw or {})

    async def invoke(self, raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        params = self.parse_input(raw)
        logger.info("entrypoint_invoked", key=self.key, price=self.price)
        return await self.handler(params)


def format_price(amount: int, config: Settings) -> str:
    value = Decimal(amount) / (Decimal(10) ** config.PAYMENTS_DECIMALS)
    return f"{value.normalize():f} {config.PAYMENTS_CURRENCY}"


def build_entrypoints(service: SignalsService) -> Dict[str, Entrypoint]:
    async def overview(_: OverviewInput) -> Dict[str, Any]:
        return {"output": await service.overview()}

    async def hn_top(params: HNTopInput) -> Dict[str, Any]:
        return {"output": await service.hn_top(limit=params.limit)}

    async def github_trending(params: GitHubTrendingInput) -> Dict[str, Any]:
        return {
            "output": await service.github_trending(
                language=params.language,
                since=params.since,
                limit=params.limit,
            )
        }

    async def lobsters_hot(params: LobstersInput) -> Dict[str, Any]:
        return {"output": await service.lobsters_hot(limit=params.limit)}

    async def lobsters_newest(params: LobstersInput) -> Dict[str, Any]:
        return {"output": await service.lobsters_newest(limit=params.limit)}

    async def tech_feed(params: TechFeedInput) -> Dict[str, Any]:
        return {"output": await service.tech_feed(limit=params.limit)}

    async def topic_search(params: TopicSearchInput) -> Dict[str, Any]:
        return {"output": await service.topic_search(query=params.query, limit=params.limit)}

    entries = [
        Entrypoint(
            key="overview",
            description="Free overview - top 3 items from each platform (HN, GitHub, Lobsters)",
            input_model=OverviewInput,
            price=0,
            handler=overview,
        ),
        Entrypoint(
            key="hn-top",
            description="Top Hacker News stories with scores, comments, and metadata",
            input_model=HNTopInput,
            price=1000,
            handler=hn_top,
        ),
        Entrypoint(
            key="github-trending",
            description="Trending GitHub repositories by language and timeframe",
            input_model=GitHubTrendingInput,
            price=2000,
            handler=github_trending,
        ),
        Entrypoint(
            key="lobsters-hot",
            description="Hot articles from Lobste.rs tech community",
            input_model=LobstersInput,
            price=1000,
            handler=lobsters_hot,
        ),
        Entrypoint(
            key="lobsters-newest",
            description="Newest articles from Lobste.rs tech community",
            input_model=LobstersInput,
            price=1000,
            handler=lobsters_newest,
        ),
        Entrypoint(
            key="tech-feed",
            description="Combined tech feed from all sources, sorted by recency",
            input_model=TechFeedInput,
            price=3000,
            handler=tech_feed,
        ),
        Entrypoint(
            key="topic-search",
            description="Search HN stories and GitHub repos for a specific topic",
            input_model=TopicSearchInput,
            price=2000,
            handler=topic_search,
        ),
    ]
    return {entry.key: entry for entry in entries}


class EntrypointRegistry:
    def __init__(self, service: Optional[SignalsService] = None, config: Optional[Settings] = None) -> None:
        self.config = config or (service.config if service else default_settings)
        self.service = service or SignalsService(self.config)
        self._entries = build_entrypoints(self.service)

    def keys(self) -> List[str]:
        return list(self._entries)

    def get(self, key: str) -> Entrypoint:
        try:
            return self._entries[key]
        except KeyError as exc:
            raise UnknownEntrypoint(key) from exc

    def describe(self) -> List[EntrypointInfo]:
        return [
            EntrypointInfo(
                key=entry.key,
                description=entry.description,
                price=EntrypointPrice(
                    amount=entry.price,
                    currency=self.config.PAYMENTS_CURRENCY,
                    display=format_price(entry.price, self.config),
                ),
                input_schema=entry.input_model.model_json_schema(),
            )
            for entry in self._entries.values()
        ]
