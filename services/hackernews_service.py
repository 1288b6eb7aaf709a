"""
Hacker News adapters.

Top stories come from the official Firebase API, which only exposes an
ordered id list plus one endpoint per item: the list is fetched first and the
item bodies are then fetched in parallel. Search goes through Algolia's HN
index in a single request.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote_plus

from app.config import settings
from app.core.logging import get_logger
from app.models.signals import HackerNewsStory
from app.models.upstream import ALGOLIA_SEARCH, HN_ITEM, HN_TOP_IDS, HNItemPayload
from services.json_fetcher import JsonFetcher, validate_payload

logger = get_logger(module="hackernews_service")

# Practical ceiling for parallel item fetches against Firebase.
HN_TOP_MAX = 30


def hn_item_page(item_id: int | str) -> str:
    return f"https://news.ycombinator.com/item?id={item_id}"


def _build_search_url(query: str, limit: int, *, base: Optional[str] = None) -> str:
    base = (base or settings.HN_SEARCH_API_BASE).rstrip("/")
    return f"{base}/search?query={quote_plus(query)}&tags=story&hitsPerPage={limit}"


def _story_from_item(item: HNItemPayload) -> HackerNewsStory:
    return HackerNewsStory(
        id=item.id,
        title=item.title,
        url=item.url,
        score=item.score,
        author=item.by,
        comments=item.descendants or 0,
        source_url=hn_item_page(item.id),
        time=datetime.fromtimestamp(item.time, tz=timezone.utc),
    )


async def _fetch_item(fetcher: JsonFetcher, item_id: int, base: str) -> HackerNewsStory:
    url = f"{base}/item/{item_id}.json"
    payload = await fetcher.get_json(url)
    item = validate_payload(HN_ITEM, payload, source="hackernews", url=url)
    return _story_from_item(item)


async def fetch_hn_top(
    fetcher: JsonFetcher,
    limit: int = 10,
    *,
    api_base: Optional[str] = None,
) -> List[HackerNewsStory]:
    """
    Top stories in Hacker News front-page order.

    `limit` is clamped to [0, 30]. Item bodies are fetched concurrently but the
    result keeps the order of the upstream id list.
    """
    limit = max(0, min(limit, HN_TOP_MAX))
    base = (api_base or settings.HN_API_BASE).rstrip("/")
    url = f"{base}/topstories.json"

    ids = validate_payload(HN_TOP_IDS, await fetcher.get_json(url), source="hackernews", url=url)
    top_ids = ids[:limit]

    stories = await asyncio.gather(*(_fetch_item(fetcher, item_id, base) for item_id in top_ids))

    logger.info("hn_top_fetched", requested=limit, returned=len(stories))
    return list(stories)


async def search_hn(
    fetcher: JsonFetcher,
    query: str,
    limit: int = 10,
    *,
    search_base: Optional[str] = None,
) -> List[HackerNewsStory]:
    """Full-text story search; `limit` becomes the requested hit count."""
    limit = max(0, limit)
    url = _build_search_url(query, limit, base=search_base)
    data = validate_payload(ALGOLIA_SEARCH, await fetcher.get_json(url), source="hn_search", url=url)

    stories = [
        HackerNewsStory(
            id=int(hit.objectID),
            title=hit.title,
            url=hit.url,
            score=hit.points or 0,
            author=hit.author,
            comments=hit.num_comments or 0,
            source_url=hn_item_page(hit.objectID),
            time=hit.created_at,
        )
        for hit in data.hits[:limit]
    ]

    logger.info("hn_search_fetched", query=query, requested=limit, returned=len(stories))
    return stories
