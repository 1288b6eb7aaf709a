from __future__ import annotations

from typing import List, Optional

from app.config import settings
from app.core.logging import get_logger
from app.models.signals import LobstersArticle
from app.models.upstream import LOBSTERS_LISTING
from services.json_fetcher import JsonFetcher, validate_payload

logger = get_logger(module="lobsters_service")

# Listing name → JSON endpoint. Neither endpoint accepts a limit upstream.
LISTINGS = {
    "hottest": "hottest.json",
    "newest": "newest.json",
}


async def _fetch_listing(
    fetcher: JsonFetcher,
    listing: str,
    limit: int,
    *,
    base: Optional[str] = None,
) -> List[LobstersArticle]:
    limit = max(0, limit)
    base = (base or settings.LOBSTERS_BASE).rstrip("/")
    url = f"{base}/{LISTINGS[listing]}"

    stories = validate_payload(LOBSTERS_LISTING, await fetcher.get_json(url), source="lobsters", url=url)

    articles = [
        LobstersArticle(
            title=s.title,
            url=s.url or None,
            score=s.score,
            author=s.author,
            comments=s.comment_count,
            tags=s.tags,
            source_url=s.short_id_url,
            time=s.created_at,
        )
        for s in stories[:limit]
    ]

    logger.info("lobsters_fetched", listing=listing, requested=limit, returned=len(articles))
    return articles


async def fetch_lobsters_hot(
    fetcher: JsonFetcher, limit: int = 10, *, base: Optional[str] = None
) -> List[LobstersArticle]:
    return await _fetch_listing(fetcher, "hottest", limit, base=base)


async def fetch_lobsters_newest(
    fetcher: JsonFetcher, limit: int = 10, *, base: Optional[str] = None
) -> List[LobstersArticle]:
    return await _fetch_listing(fetcher, "newest", limit, base=base)
