# tests/fixtures/__init__.py
"""
Test fixtures for the upstream adapters and aggregation operations.

Factory functions for raw upstream payloads:
- make_hn_item()
- make_algolia_hit()
- make_github_repo()
- make_lobsters_story()

FakeUpstream serves those payloads through an httpx.MockTransport, keyed by
URL path, with optional per-path latency and a record of cancelled requests.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.config import Settings

HN_ITEM_TIME = 1_700_000_000  # 2023-11-14T22:13:20Z


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {"HTTP_TIMEOUT_MS": 2_000, "PORT": 3000, "PUBLIC_URL": None}
    values.update(overrides)
    return Settings(**values)


def fixed_clock(moment: Optional[datetime] = None):
    moment = moment or datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    return lambda: moment


def make_hn_item(
    item_id: int,
    *,
    title: Optional[str] = None,
    time: int = HN_ITEM_TIME,
    score: int = 100,
    by: str = "pg",
    descendants: Optional[int] = 12,
    url: Optional[str] = None,
) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "id": item_id,
        "type": "story",
        "title": title or f"Story {item_id}",
        "url": url or f"https://example.com/{item_id}",
        "score": score,
        "by": by,
        "time": time,
    }
    if descendants is not None:
        item["descendants"] = descendants
    return item


def make_algolia_hit(
    object_id: str,
    *,
    title: str = "Rust in production",
    created_at: str = "2026-10-18T09:30:00.000Z",
    points: Optional[int] = 42,
    num_comments: Optional[int] = 7,
) -> Dict[str, Any]:
    return {
        "objectID": object_id,
        "title": title,
        "url": f"https://example.com/hit/{object_id}",
        "points": points,
        "author": "alice",
        "num_comments": num_comments,
        "created_at": created_at,
    }


def make_github_repo(
    full_name: str,
    *,
    created_at: str = "2026-10-18T10:00:00Z",
    stars: int = 500,
    topics: Optional[List[str]] = None,
    language: Optional[str] = "Python",
) -> Dict[str, Any]:
    return {
        "full_name": full_name,
        "description": f"{full_name} description",
        "stargazers_count": stars,
        "forks_count": 12,
        "language": language,
        "html_url": f"https://github.com/{full_name}",
        "topics": topics if topics is not None else ["cli"],
        "created_at": created_at,
    }


def make_lobsters_story(
    short_id: str,
    *,
    created_at: str = "2026-10-18T08:00:00.000-05:00",
    submitter_user: Any = None,
    submitter: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    story: Dict[str, Any] = {
        "short_id": short_id,
        "title": f"Lobsters {short_id}",
        "url": f"https://example.org/{short_id}",
        "score": 25,
        "comment_count": 4,
        "tags": tags if tags is not None else ["programming"],
        "short_id_url": f"https://lobste.rs/s/{short_id}",
        "created_at": created_at,
    }
    if submitter_user is not None:
        story["submitter_user"] = submitter_user
    if submitter is not None:
        story["submitter"] = submitter
    return story


class FakeUpstream:
    """Routes requests by URL path to canned responses."""

    def __init__(self) -> None:
        self.routes: Dict[str, Tuple[int, Any, float, Optional[bytes]]] = {}
        self.requests: List[httpx.Request] = []
        self.cancelled: List[str] = []

    def add(
        self,
        path: str,
        body: Any = None,
        *,
        status: int = 200,
        delay: float = 0.0,
        raw: Optional[bytes] = None,
    ) -> "FakeUpstream":
        self.routes[path] = (status, body, delay, raw)
        return self

    def add_hn_top(self, items: List[Dict[str, Any]], *, delays: Optional[Dict[int, float]] = None) -> "FakeUpstream":
        delays = delays or {}
        self.add("/v0/topstories.json", [item["id"] for item in items])
        for item in items:
            self.add(f"/v0/item/{item['id']}.json", item, delay=delays.get(item["id"], 0.0))
        return self

    def add_github(self, repos: List[Dict[str, Any]], *, status: int = 200) -> "FakeUpstream":
        return self.add("/search/repositories", {"total_count": len(repos), "items": repos}, status=status)

    def add_lobsters(self, stories: List[Dict[str, Any]], *, listing: str = "hottest", status: int = 200) -> "FakeUpstream":
        return self.add(f"/{listing}.json", stories, status=status)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})

        status, body, delay, raw = route
        if delay:
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                self.cancelled.append(request.url.path)
                raise
        if raw is not None:
            return httpx.Response(status, content=raw)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)
