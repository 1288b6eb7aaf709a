"""
Aggregation operations behind the entrypoints.

Each operation opens one JsonFetcher, runs its source adapters concurrently,
and hands the normalized items to the EnvelopeBuilder. Paid operations join
their branches all-or-nothing; the free overview settles each branch on its
own and reports failed sources instead of failing the whole call.
"""

from __future__ import annotations

import asyncio
import math
from datetime import datetime
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Tuple

import httpx

from app.config import Settings, settings as default_settings
from app.core.logging import get_logger
from app.models.signals import ItemType, SignalItem, SignalSource
from services.envelope import Clock, EnvelopeBuilder
from services.github_trending_service import fetch_github_trending
from services.hackernews_service import fetch_hn_top, search_hn
from services.json_fetcher import JsonFetcher, SignalsFetchError
from services.lobsters_service import fetch_lobsters_hot, fetch_lobsters_newest

logger = get_logger(module="signals_service")

OVERVIEW_PER_SOURCE = 3
FEED_SOURCES = 3


async def join_all(*branches: Awaitable[Any]) -> List[Any]:
    """
    Joint wait, all-or-nothing: results in initiation order, or the first
    failure. Siblings of a failed branch keep running; their results are
    discarded.
    """
    return list(await asyncio.gather(*branches))


async def join_settled(
    branches: Mapping[str, Awaitable[List[SignalItem]]],
) -> Tuple[Dict[str, List[SignalItem]], Dict[str, SignalsFetchError]]:
    """
    Joint wait that lets every branch settle. Upstream failures become an empty
    result plus an entry in the failure map; anything else is re-raised.
    """
    labels = list(branches)
    outcomes = await asyncio.gather(*branches.values(), return_exceptions=True)

    results: Dict[str, List[SignalItem]] = {}
    failures: Dict[str, SignalsFetchError] = {}
    for label, outcome in zip(labels, outcomes):
        if isinstance(outcome, SignalsFetchError):
            failures[label] = outcome
            results[label] = []
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results[label] = outcome
    return results, failures


def merge_feed(
    hacker_news: List[SignalItem],
    github: List[SignalItem],
    lobsters: List[SignalItem],
    limit: int,
) -> List[SignalItem]:
    """Tag, concatenate, sort newest first (stable on ties) and truncate."""
    feed: List[SignalItem] = [
        *(item.tagged(SignalSource.HACKERNEWS, ItemType.STORY) for item in hacker_news),
        *(item.tagged(SignalSource.GITHUB, ItemType.REPO) for item in github),
        *(item.tagged(SignalSource.LOBSTERS, ItemType.ARTICLE) for item in lobsters),
    ]
    feed.sort(key=lambda item: item.sort_time(), reverse=True)
    return feed[: max(0, limit)]


class SignalsService:
    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self.config = config or default_settings
        self.envelopes = EnvelopeBuilder(self.config, clock=clock)
        self._transport = transport
        # Pins the GitHub date window; None means "now" at call time.
        self._now = now

    def _fetcher(self) -> JsonFetcher:
        return JsonFetcher(
            user_agent=self.config.USER_AGENT,
            timeout_ms=self.config.HTTP_TIMEOUT_MS,
            transport=self._transport,
        )

    # -- adapter bindings ----------------------------------------------------

    def _hn_top(self, fetcher: JsonFetcher, limit: int):
        return fetch_hn_top(fetcher, limit, api_base=self.config.HN_API_BASE)

    def _hn_search(self, fetcher: JsonFetcher, query: str, limit: int):
        return search_hn(fetcher, query, limit, search_base=self.config.HN_SEARCH_API_BASE)

    def _github(self, fetcher: JsonFetcher, language: str, since: str, limit: int):
        return fetch_github_trending(
            fetcher,
            language,
            since,
            limit,
            api_base=self.config.GITHUB_API_BASE,
            now=self._now,
        )

    def _lobsters_hot(self, fetcher: JsonFetcher, limit: int):
        return fetch_lobsters_hot(fetcher, limit, base=self.config.LOBSTERS_BASE)

    def _lobsters_newest(self, fetcher: JsonFetcher, limit: int):
        return fetch_lobsters_newest(fetcher, limit, base=self.config.LOBSTERS_BASE)

    # -- operations ----------------------------------------------------------

    async def overview(self) -> Dict[str, Any]:
        async with self._fetcher() as fetcher:
            results, failures = await join_settled(
                {
                    "hackerNews": self._hn_top(fetcher, OVERVIEW_PER_SOURCE),
                    "github": self._github(fetcher, "", "daily", OVERVIEW_PER_SOURCE),
                    "lobsters": self._lobsters_hot(fetcher, OVERVIEW_PER_SOURCE),
                }
            )

        if failures and len(failures) == len(results):
            logger.error("overview_all_sources_failed", failed=sorted(failures))
            raise next(iter(failures.values()))
        if failures:
            logger.warning(
                "overview_partial",
                failed={label: err.kind for label, err in failures.items()},
            )

        return self.envelopes.overview(
            hacker_news=results["hackerNews"],
            github=results["github"],
            lobsters=results["lobsters"],
            errors={label: err.kind for label, err in failures.items()},
        )

    async def hn_top(self, limit: int = 10) -> Dict[str, Any]:
        async with self._fetcher() as fetcher:
            stories = await self._hn_top(fetcher, limit)
        return self.envelopes.listing("stories", stories, source="Hacker News Official API")

    async def github_trending(self, language: str = "", since: str = "daily", limit: int = 10) -> Dict[str, Any]:
        async with self._fetcher() as fetcher:
            repos = await self._github(fetcher, language, since, limit)
        return self.envelopes.listing(
            "repos",
            repos,
            source="GitHub Search API",
            filters={"language": language or "all", "since": since},
        )

    async def lobsters_hot(self, limit: int = 10) -> Dict[str, Any]:
        async with self._fetcher() as fetcher:
            articles = await self._lobsters_hot(fetcher, limit)
        return self.envelopes.listing("articles", articles, source="Lobsters API")

    async def lobsters_newest(self, limit: int = 10) -> Dict[str, Any]:
        async with self._fetcher() as fetcher:
            articles = await self._lobsters_newest(fetcher, limit)
        return self.envelopes.listing("articles", articles, source="Lobsters API")

    async def tech_feed(self, limit: int = 20) -> Dict[str, Any]:
        per_source = math.ceil(limit / FEED_SOURCES)
        async with self._fetcher() as fetcher:
            hacker_news, github, lobsters = await join_all(
                self._hn_top(fetcher, per_source),
                self._github(fetcher, "", "daily", per_source),
                self._lobsters_hot(fetcher, per_source),
            )

        feed = merge_feed(hacker_news, github, lobsters, limit)
        logger.info("tech_feed_merged", limit=limit, per_source=per_source, returned=len(feed))
        return self.envelopes.feed(
            feed,
            per_source_counts={
                SignalSource.HACKERNEWS.value: len(hacker_news),
                SignalSource.GITHUB.value: len(github),
                SignalSource.LOBSTERS.value: len(lobsters),
            },
        )

    async def topic_search(self, query: str, limit: int = 10) -> Dict[str, Any]:
        async with self._fetcher() as fetcher:
            hacker_news, github = await join_all(
                self._hn_search(fetcher, query, limit),
                self._github(fetcher, query, "monthly", limit),
            )
        return self.envelopes.search(query, hacker_news=hacker_news, github=github)
