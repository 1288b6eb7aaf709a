from __future__ import annotations

import asyncio
import json
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from pydantic import TypeAdapter, ValidationError

from app.core.logging import get_logger

logger = get_logger(module="json_fetcher")

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_USER_AGENT = "tech-signals-agent/1.0"


class SignalsFetchError(Exception):
    """Base class for every upstream failure that aborts an operation."""

    kind = "upstream_failure"

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class UpstreamTimeout(SignalsFetchError):
    kind = "timeout"


class UpstreamError(SignalsFetchError):
    kind = "upstream_error"

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class MalformedResponse(SignalsFetchError):
    kind = "malformed_response"


def _check_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Not a well-formed HTTP(S) URL: {url!r}")


def validate_payload(adapter: TypeAdapter, payload: Any, *, source: str, url: str) -> Any:
    """
    Validate a decoded upstream payload against its boundary schema.

    Shape mismatches surface as MalformedResponse instead of failing later
    inside the mapping code.
    """
    try:
        return adapter.validate_python(payload)
    except ValidationError as exc:
        logger.warning(
            "upstream_payload_invalid",
            source=source,
            url=url,
            error_count=exc.error_count(),
        )
        raise MalformedResponse(
            f"{source} returned an unexpected payload shape ({exc.error_count()} errors)",
            url=url,
        ) from exc


class JsonFetcher:
    """
    Single-shot JSON GET client shared by the source adapters of one operation.

    Every request is raced against a timer of `timeout_ms`; when the timer
    wins the in-flight request is cancelled. There are no retries.
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "JsonFetcher":
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client:
            await self._client.aclose()

    async def get_json(self, url: str, *, timeout_ms: Optional[int] = None) -> Any:
        """
        GET `url` and decode the JSON body.

        Raises:
            ValueError: malformed URL or non-positive timeout
            UpstreamTimeout: no response within the timeout
            UpstreamError: non-2xx status or network failure
            MalformedResponse: body is not JSON
        """
        if self._client is None:
            raise RuntimeError(f"{self.__class__.__name__} HTTP client not initialized")
        _check_url(url)
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")

        # wait_for cancels the request task on expiry and disarms its timer on
        # every other exit path.
        try:
            response = await asyncio.wait_for(
                self._client.get(url, timeout=timeout_ms / 1000),
                timeout=timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("upstream_fetch_timeout", url=url, timeout_ms=timeout_ms)
            raise UpstreamTimeout(f"No response within {timeout_ms}ms", url=url) from exc
        except httpx.HTTPError as exc:
            logger.warning("upstream_fetch_failed", url=url, error=str(exc), error_type=type(exc).__name__)
            raise UpstreamError(f"Request failed: {exc.__class__.__name__}", url=url) from exc

        if not response.is_success:
            logger.warning("upstream_fetch_bad_status", url=url, status_code=response.status_code)
            raise UpstreamError(f"API error: {response.status_code}", url=url, status_code=response.status_code)

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("upstream_fetch_not_json", url=url, status_code=response.status_code)
            raise MalformedResponse("Response body is not valid JSON", url=url) from exc
