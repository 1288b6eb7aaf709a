"""
Response envelopes.

Wraps operation results in the metadata every entrypoint returns: counts,
source attribution and `fetchedAt`, the capture time of the envelope itself
(not of any item).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from app.config import Settings
from app.models.signals import SignalItem, dump_items

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


OVERVIEW_SOURCES = ["Hacker News API", "GitHub API", "Lobsters API"]


class EnvelopeBuilder:
    def __init__(self, config: Settings, *, clock: Optional[Clock] = None) -> None:
        self.config = config
        self._clock = clock or _utc_now

    def fetched_at(self) -> str:
        return iso_timestamp(self._clock())

    def listing(
        self,
        items_key: str,
        items: List[SignalItem],
        *,
        source: str,
        **extra: Any,
    ) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {
            items_key: dump_items(items),
            "count": len(items),
        }
        envelope.update(extra)
        envelope["source"] = source
        envelope["fetchedAt"] = self.fetched_at()
        return envelope

    def overview(
        self,
        *,
        hacker_news: List[SignalItem],
        github: List[SignalItem],
        lobsters: List[SignalItem],
        errors: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {
            "hackerNews": dump_items(hacker_news),
            "github": dump_items(github),
            "lobsters": dump_items(lobsters),
            "fetchedAt": self.fetched_at(),
            "sources": list(OVERVIEW_SOURCES),
        }
        if errors:
            envelope["errors"] = dict(errors)
        return envelope

    def feed(self, feed: List[SignalItem], *, per_source_counts: Mapping[str, int]) -> Dict[str, Any]:
        return {
            "feed": dump_items(feed),
            "count": len(feed),
            "sources": dict(per_source_counts),
            "fetchedAt": self.fetched_at(),
        }

    def search(
        self,
        query: str,
        *,
        hacker_news: List[SignalItem],
        github: List[SignalItem],
    ) -> Dict[str, Any]:
        return {
            "query": query,
            "hackerNews": dump_items(hacker_news),
            "github": dump_items(github),
            "totalResults": len(hacker_news) + len(github),
            "fetchedAt": self.fetched_at(),
        }

    def registration(self) -> Dict[str, Any]:
        """ERC-8004 registration manifest served from /.well-known/erc8004.json."""
        base_url = self.config.public_base_url
        return {
            "type": "https://eips.ethereum.org/EIPS/eip-8004#registration-v1",
            "name": self.config.APP_NAME,
            "description": (
                "Aggregated tech signals from HN, GitHub, and Lobsters. "
                "1 free + 6 paid endpoints via x402."
            ),
            "image": f"{base_url}/icon.png",
            "services": [
                {"name": "web", "endpoint": base_url},
                {"name": "A2A", "endpoint": f"{base_url}/.well-known/agent.json", "version": "0.3.0"},
            ],
            "x402Support": True,
            "active": True,
            "registrations": [],
            "supportedTrust": ["reputation"],
        }
