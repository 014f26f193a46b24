"""HTTP client with per-host pacing and exponential-backoff retry."""

import asyncio
import logging
import time
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from company_enricher.config import settings
from company_enricher.errors import RequestFailedError, TransientHTTPError

logger = logging.getLogger(__name__)

# Statuses worth retrying: rate limiting and server errors
TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}


def _log_retry(retry_state: RetryCallState):
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Retrying after attempt {retry_state.attempt_number} ({exc}); sleeping {wait:.2f}s"
    )


class HttpRetryClient:
    """Async HTTP client shared by every component that talks to the network.

    Requests to the same host are spaced at least ``min_interval_ms`` apart,
    so a single delay budget holds per remote host even when several
    companies are in flight. Transient failures (429, 5xx, timeouts and
    connection errors) are retried up to ``max_retries`` times, sleeping
    ``backoff_ms * 2**attempt`` between attempts; once retries run out a
    ``RequestFailedError`` propagates to the caller.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        max_retries: Optional[int] = None,
        backoff_ms: Optional[int] = None,
        min_interval_ms: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.user_agent = user_agent or settings.user_agent
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.backoff_ms = settings.backoff_ms if backoff_ms is None else backoff_ms
        self.min_interval_ms = (
            settings.request_delay_ms if min_interval_ms is None else min_interval_ms
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        # Rate limiting per host
        self._host_last_request: dict[str, float] = {}
        self._host_locks: dict[str, asyncio.Lock] = {}

    async def __aenter__(self) -> "HttpRetryClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        accept: str = "application/json",
    ) -> httpx.Response:
        """GET a URL, retrying transient failures.

        Non-transient error statuses (e.g. 404) are returned, not raised.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_ms / 1000.0),
            retry=retry_if_exception_type((TransientHTTPError, httpx.TransportError)),
            before_sleep=_log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._send(url, params, accept)
        except TransientHTTPError as e:
            raise RequestFailedError(url, str(e), e.status_code) from e
        except httpx.HTTPError as e:
            raise RequestFailedError(url, str(e) or type(e).__name__) from e

        return response

    async def get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[dict]:
        """GET a JSON document; None for non-2xx or undecodable bodies."""
        response = await self.get(url, params=params)
        if not response.is_success:
            logger.debug(f"HTTP {response.status_code} from {url}")
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Invalid JSON from {url}")
            return None
        return data if isinstance(data, dict) else None

    async def _send(
        self,
        url: str,
        params: Optional[dict[str, Any]],
        accept: str,
    ) -> httpx.Response:
        await self._wait_for_rate_limit(url)

        response = await self._get_client().get(
            url,
            params=params,
            headers={"Accept": accept},
        )
        if response.status_code in TRANSIENT_STATUS_CODES:
            raise TransientHTTPError(url, response.status_code)
        return response

    async def _wait_for_rate_limit(self, url: str):
        """Wait to respect the minimum interval for the host."""
        host = urlparse(url).netloc
        lock = self._host_locks.setdefault(host, asyncio.Lock())

        async with lock:
            interval = self.min_interval_ms / 1000.0
            last_request = self._host_last_request.get(host)
            if last_request is not None and interval > 0:
                elapsed = time.monotonic() - last_request
                if elapsed < interval:
                    await asyncio.sleep(interval - elapsed)

            self._host_last_request[host] = time.monotonic()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    connect=settings.connect_timeout,
                    read=settings.read_timeout,
                    write=settings.read_timeout,
                    pool=settings.connect_timeout,
                ),
                headers={
                    "User-Agent": self.user_agent,
                    "Accept-Language": "en-US,en;q=0.5",
                },
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client
