from __future__ import annotations

import pytest
from pydantic import ValidationError

from services.entrypoints import EntrypointRegistry, UnknownEntrypoint, format_price
from services.signals_service import SignalsService
from tests.fixtures import FakeUpstream, make_hn_item, make_settings


def _registry(upstream: FakeUpstream | None = None) -> EntrypointRegistry:
    upstream = upstream or FakeUpstream()
    service = SignalsService(make_settings(), transport=upstream.transport)
    return EntrypointRegistry(service)


def test_registry_declares_all_entrypoints_with_prices():
    registry = _registry()

    prices = {info.key: info.price.amount for info in registry.describe()}

    assert prices == {
        "overview": 0,
        "hn-top": 1000,
        "github-trending": 2000,
        "lobsters-hot": 1000,
        "lobsters-newest": 1000,
        "tech-feed": 3000,
        "topic-search": 2000,
    }


def test_describe_includes_input_schema_bounds():
    registry = _registry()
    info = {entry.key: entry for entry in registry.describe()}

    limit = info["tech-feed"].input_schema["properties"]["limit"]
    assert limit["minimum"] == 1
    assert limit["maximum"] == 50
    assert limit["default"] == 20
    assert info["hn-top"].price.display == "0.001 USDC"
    assert info["overview"].price.display == "0 USDC"


def test_format_price():
    config = make_settings()
    assert format_price(3000, config) == "0.003 USDC"
    assert format_price(1_500_000, config) == "1.5 USDC"


def test_unknown_entrypoint():
    with pytest.raises(UnknownEntrypoint):
        _registry().get("reddit-top")


@pytest.mark.parametrize(
    "key, raw",
    [
        ("hn-top", {"limit": 0}),
        ("hn-top", {"limit": 31}),
        ("github-trending", {"since": "yearly"}),
        ("github-trending", {"limit": 26}),
        ("lobsters-hot", {"limit": 26}),
        ("tech-feed", {"limit": 51}),
        ("topic-search", {}),
        ("topic-search", {"query": ""}),
        ("topic-search", {"query": "x" * 101}),
        ("topic-search", {"query": "rust", "limit": 21}),
        ("overview", {"limit": 3}),
    ],
)
def test_out_of_range_input_is_rejected(key, raw):
    with pytest.raises(ValidationError):
        _registry().get(key).parse_input(raw)


def test_defaults_are_applied():
    registry = _registry()

    assert registry.get("hn-top").parse_input(None).limit == 10
    params = registry.get("github-trending").parse_input({})
    assert (params.language, params.since, params.limit) == ("", "daily", 10)
    assert registry.get("tech-feed").parse_input({}).limit == 20


@pytest.mark.asyncio
async def test_invoke_wraps_output():
    upstream = FakeUpstream().add_hn_top([make_hn_item(1), make_hn_item(2), make_hn_item(3)])

    result = await _registry(upstream).get("hn-top").invoke({"limit": 2})

    assert set(result) == {"output"}
    assert result["output"]["count"] == 2
    assert [s["id"] for s in result["output"]["stories"]] == [1, 2]
