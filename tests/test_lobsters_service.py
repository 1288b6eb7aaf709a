from __future__ import annotations

from datetime import datetime, timezone

import pytest

from services.json_fetcher import JsonFetcher, UpstreamError
from services.lobsters_service import fetch_lobsters_hot, fetch_lobsters_newest
from tests.fixtures import FakeUpstream, make_lobsters_story

LOBSTERS_BASE = "https://lobste.rs"


@pytest.mark.asyncio
async def test_fetch_lobsters_hot_maps_and_truncates():
    stories = [make_lobsters_story(f"id{i}", submitter_user={"username": f"user{i}"}) for i in range(8)]
    upstream = FakeUpstream().add_lobsters(stories)

    async with JsonFetcher(transport=upstream.transport) as fetcher:
        articles = await fetch_lobsters_hot(fetcher, 3, base=LOBSTERS_BASE)

    assert upstream.paths() == ["/hottest.json"]
    assert [a.title for a in articles] == ["Lobsters id0", "Lobsters id1", "Lobsters id2"]
    first = articles[0]
    assert first.author == "user0"
    assert first.score == 25
    assert first.comments == 4
    assert first.tags == ["programming"]
    assert first.source_url == "https://lobste.rs/s/id0"
    assert first.time == datetime(2026, 10, 18, 13, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_author_falls_back_to_submitter_field():
    upstream = FakeUpstream().add_lobsters([make_lobsters_story("abc", submitter="carol")])

    async with JsonFetcher(transport=upstream.transport) as fetcher:
        articles = await fetch_lobsters_hot(fetcher, 5, base=LOBSTERS_BASE)

    assert articles[0].author == "carol"


@pytest.mark.asyncio
async def test_author_accepts_plain_string_submitter_user():
    upstream = FakeUpstream().add_lobsters([make_lobsters_story("abc", submitter_user="dave", submitter="ignored")])

    async with JsonFetcher(transport=upstream.transport) as fetcher:
        articles = await fetch_lobsters_hot(fetcher, 5, base=LOBSTERS_BASE)

    assert articles[0].author == "dave"


@pytest.mark.asyncio
async def test_text_post_without_url():
    story = make_lobsters_story("ask1")
    story["url"] = ""
    upstream = FakeUpstream().add_lobsters([story])

    async with JsonFetcher(transport=upstream.transport) as fetcher:
        articles = await fetch_lobsters_hot(fetcher, 5, base=LOBSTERS_BASE)

    assert articles[0].url is None
    assert articles[0].source_url == "https://lobste.rs/s/ask1"


@pytest.mark.asyncio
async def test_fetch_lobsters_newest_uses_newest_listing():
    upstream = FakeUpstream().add_lobsters([make_lobsters_story("new1")], listing="newest")

    async with JsonFetcher(transport=upstream.transport) as fetcher:
        articles = await fetch_lobsters_newest(fetcher, 10, base=LOBSTERS_BASE)

    assert upstream.paths() == ["/newest.json"]
    assert len(articles) == 1


@pytest.mark.asyncio
async def test_fetch_lobsters_upstream_error_propagates():
    upstream = FakeUpstream().add_lobsters([], status=500)

    async with JsonFetcher(transport=upstream.transport) as fetcher:
        with pytest.raises(UpstreamError):
            await fetch_lobsters_hot(fetcher, 5, base=LOBSTERS_BASE)
