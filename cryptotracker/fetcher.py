"""Throttled HTTP GET with exponential backoff and cancellation."""

import asyncio
import logging
import typing as t

import httpx

from . import config
from .cancel import CancellationToken
from .errors import TransientNetworkError
from .throttle import RequestThrottle

logger = logging.getLogger(__name__)


class RetryingFetcher:
    """Fetch JSON documents through a shared :class:`RequestThrottle`.

    Every attempt acquires the throttle first. A failed attempt (network
    error, non-success status or a body that is not JSON) is retried after
    ``base_delay * 2**attempt`` seconds, up to ``max_retries`` attempts in
    total. Cancellation of the token is honoured while waiting for the
    throttle, during the request and during a backoff wait.

    :param throttle: Throttle shared by every outbound request.
    :param client: Optional pre-built ``httpx.AsyncClient``.
    :param max_retries: Total number of attempts.
    :param base_delay: Backoff base in seconds.
    :param max_backoff: Upper bound for a single backoff wait.
    :param timeout: Request timeout used when building the client.
    :param sleep: Async sleep used for backoff (injectable for tests).
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        throttle: RequestThrottle,
        client: httpx.AsyncClient | None = None,
        *,
        max_retries: int = config.MAX_RETRIES,
        base_delay: float = config.RETRY_BASE_DELAY_MS / 1000.0,
        max_backoff: float = 30.0,
        timeout: float = config.HTTP_TIMEOUT,
        sleep: t.Callable[[float], t.Awaitable[t.Any]] = asyncio.sleep,
    ) -> None:
        self.throttle = throttle
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={
                "accept": "application/json",
                "user-agent": config.USER_AGENT,
            },
        )
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self.max_backoff = max_backoff
        self._sleep = sleep
        self.calls_made = 0

    def backoff_delay(self, attempt: int) -> float:
        """Delay to wait after the zero-based ``attempt`` failed.

        :param attempt: Zero-based attempt index.
        :return: Delay in seconds.
        """
        return min(self.base_delay * (2**attempt), self.max_backoff)

    @staticmethod
    def _retry_after(response: httpx.Response) -> float | None:
        value = response.headers.get("Retry-After", "")
        return float(value) if value.isdigit() else None

    async def fetch(
        self,
        url: str,
        token: CancellationToken | None = None,
    ) -> t.Any:
        """GET ``url`` and decode its JSON body.

        :param url: Absolute URL, query string included.
        :param token: Cancellation token; a private one is used if omitted.
        :return: Decoded JSON value.
        :raises TransientNetworkError: When every attempt failed.
        :raises FetchCancelled: When the token is cancelled.
        """
        if token is None:
            token = CancellationToken()
        last_error = "no attempt made"
        last_status: int | None = None

        for attempt in range(self.max_retries):
            # a cancelled wait releases the lock without claiming a slot
            await token.run(self.throttle.acquire())

            self.calls_made += 1
            delay = self.backoff_delay(attempt)
            try:
                response = await token.run(self.client.get(url))
                if response.status_code == 429:
                    retry_after = self._retry_after(response)
                    if retry_after is not None:
                        delay = max(delay, retry_after)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                last_status = e.response.status_code
                last_error = f"HTTP {last_status}"
            except httpx.HTTPError as e:
                last_status = None
                last_error = f"{type(e).__name__}: {e}"
            except ValueError as e:
                last_status = None
                last_error = f"invalid JSON body: {e}"

            logger.debug(
                "[FETCH] attempt %d/%d failed for url=%s: %s",
                attempt + 1,
                self.max_retries,
                url,
                last_error,
            )
            if attempt < self.max_retries - 1:
                logger.debug(
                    "[FETCH] sleeping %.2fs before retry %d/%d",
                    delay,
                    attempt + 2,
                    self.max_retries,
                )
                await token.sleep(delay, self._sleep)

        logger.warning(
            "[FETCH] all %d attempts failed for url=%s (%s)",
            self.max_retries,
            url,
            last_error,
        )
        raise TransientNetworkError(
            f"request failed after {self.max_retries} attempts: {last_error}",
            url=url,
            status=last_status,
            attempts=self.max_retries,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self.client.aclose()
