"""
GitHub "trending" repositories.

GitHub has no public trending API, so this approximates it with the search
API: repositories created inside a recent window, ordered by star count.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from urllib.parse import quote_plus

from app.config import settings
from app.core.logging import get_logger
from app.models.signals import GitHubRepo
from app.models.upstream import GITHUB_SEARCH
from services.json_fetcher import JsonFetcher, validate_payload

logger = get_logger(module="github_trending_service")

SINCE_WINDOWS: Dict[str, int] = {
    "daily": 1,
    "weekly": 7,
    "monthly": 30,
}
MAX_TOPICS = 5


def created_after(since: str, *, now: Optional[datetime] = None) -> str:
    """`YYYY-MM-DD` of the start of the `since` window; unknown windows count as daily."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    days = SINCE_WINDOWS.get(since, SINCE_WINDOWS["daily"])
    return (now - timedelta(days=days)).strftime("%Y-%m-%d")


def build_search_query(language: str = "", since: str = "daily", *, now: Optional[datetime] = None) -> str:
    query = f"created:>{created_after(since, now=now)}"
    language = (language or "").strip()
    if language:
        query += f" language:{language}"
    return query


def _build_search_url(query: str, limit: int, *, base: Optional[str] = None) -> str:
    base = (base or settings.GITHUB_API_BASE).rstrip("/")
    return f"{base}/search/repositories?q={quote_plus(query)}&sort=stars&order=desc&per_page={limit}"


async def fetch_github_trending(
    fetcher: JsonFetcher,
    language: str = "",
    since: str = "daily",
    limit: int = 10,
    *,
    api_base: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[GitHubRepo]:
    limit = max(0, limit)
    query = build_search_query(language, since, now=now)
    url = _build_search_url(query, limit, base=api_base)

    data = validate_payload(GITHUB_SEARCH, await fetcher.get_json(url), source="github", url=url)

    repos = [
        GitHubRepo(
            title=r.full_name,
            description=r.description,
            stars=r.stargazers_count,
            forks=r.forks_count,
            language=r.language,
            url=r.html_url,
            topics=r.topics[:MAX_TOPICS],
            created_at=r.created_at,
        )
        for r in data.items[:limit]
    ]

    logger.info(
        "github_trending_fetched",
        language=language or "all",
        since=since,
        requested=limit,
        returned=len(repos),
    )
    return repos
