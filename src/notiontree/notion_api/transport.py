"""Async HTTP transport for the Notion API.

Every request goes through the same lifecycle:

1. Acquire a token-bucket slot (await if needed).
2. Send the request with auth and version headers.
3. On ``2xx`` -- return the parsed JSON body.
4. On ``429`` -- honour ``Retry-After``, sleep, and retry.
5. On ``5xx`` / network error -- exponential backoff and retry.
6. On non-retryable ``4xx`` -- raise the matching typed error at once.
7. When attempts run out -- raise :class:`NotionTreeRateLimitError` (still
   throttled), :class:`NotionTreeNetworkError` (no response) or
   :class:`NotionTreeRetryExhaustedError` (server errors).
"""

from __future__ import annotations

import asyncio
import json as _json
import sys
import time
from collections.abc import AsyncIterator
from typing import Any

import httpx

from notiontree.config import NotionTreeConfig
from notiontree.errors import (
    NotionTreeAuthError,
    NotionTreeConflictError,
    NotionTreeNetworkError,
    NotionTreeNotFoundError,
    NotionTreePermissionError,
    NotionTreeRateLimitError,
    NotionTreeRetryExhaustedError,
    NotionTreeValidationError,
)
from notiontree.observability import NoopMetricsHook, get_logger
from notiontree.utils.redact import redact

from .pacing import RETRYABLE_ERRORS, RequestPacer, RetryPolicy

log = get_logger("notiontree.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value as a float, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
    """Raise the :class:`NotionTreeError` subclass for a non-retryable 4xx."""
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    notion_message = body.get("message", response.text[:500])
    notion_code = body.get("code", "")

    if status == 401:
        raise NotionTreeAuthError(
            message=f"Authentication failed on {method} {path}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code},
        )
    if status == 403:
        raise NotionTreePermissionError(
            message=f"Permission denied on {method} {path}: {notion_message}",
            context={
                "status_code": status,
                "notion_code": notion_code,
                "operation": f"{method} {path}",
            },
        )
    if status == 404:
        raise NotionTreeNotFoundError(
            message=f"Resource not found on {method} {path}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code, "path": path},
        )
    if status == 409:
        raise NotionTreeConflictError(
            message=f"Conflict on {method} {path}: {notion_message}",
            context={"status_code": status, "notion_code": notion_code},
        )

    # 400 and any other client error.
    raise NotionTreeValidationError(
        message=f"Client error {status} on {method} {path}: {notion_message}",
        context={"status_code": status, "notion_code": notion_code, "body": body},
    )


def _dump_payload(
    method: str,
    url: str,
    payload: Any | None,
    response_status: int | None,
    response_body: Any | None,
    token: str | None = None,
) -> None:
    """Write a redacted dump of the request and response to stderr."""
    dump: dict[str, Any] = {"method": method, "url": url}
    if payload is not None:
        dump["request_body"] = payload
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    print(_json.dumps(redact(dump, token), indent=2, default=str), file=sys.stderr)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class AsyncNotionTransport:
    """Asynchronous HTTP transport with auth, retry and rate limiting.

    Parameters
    ----------
    config:
        A :class:`NotionTreeConfig` controlling all transport behaviour.
    client:
        Optional pre-built :class:`httpx.AsyncClient`.  When omitted one is
        created from *config*.  Tests pass a client on a
        :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        config: NotionTreeConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._pacer = RequestPacer(rate_rps=config.rate_limit_rps, burst=10)
        self._retry = RetryPolicy.from_config(config)
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()

        if client is None:
            client = httpx.AsyncClient(
                base_url=config.base_url,
                headers=self.default_headers(config),
                timeout=httpx.Timeout(config.timeout_seconds),
                proxy=config.http_proxy,
            )
        self._client = client

    @staticmethod
    def default_headers(config: NotionTreeConfig) -> dict[str, str]:
        """Headers sent with every request."""
        return {
            "Authorization": f"Bearer {config.token}",
            "Notion-Version": config.notion_version,
            "Content-Type": "application/json",
        }

    # -- public API --------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Execute an HTTP request against the Notion API.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``POST``, ``PATCH``, ``DELETE``).
        path:
            API path relative to ``base_url`` (e.g. ``/pages``).
        **kwargs:
            Forwarded to :meth:`httpx.AsyncClient.request` (``json=``,
            ``params=``, ``headers=``).

        Returns
        -------
        dict
            Parsed JSON response body (``{}`` for empty responses).

        Raises
        ------
        NotionTreeAuthError
            On 401 responses.
        NotionTreePermissionError
            On 403 responses.
        NotionTreeNotFoundError
            On 404 responses.
        NotionTreeConflictError
            On 409 responses.
        NotionTreeValidationError
            On 400 and other non-retryable 4xx responses.
        NotionTreeRateLimitError
            When the API is still returning 429 after every attempt.
        NotionTreeRetryExhaustedError
            When every attempt ended in a retryable server error.
        NotionTreeNetworkError
            On transport-level failures once retries are exhausted.
        """
        max_attempts = self._retry.max_attempts
        json_payload = kwargs.get("json")
        last_status: int | None = None
        retry_after: float | None = None

        for attempt in range(max_attempts):
            # 1. Pacing
            wait = await self._pacer.acquire()
            if wait > 0:
                self._metrics.timing(
                    "notiontree.rate_limit_wait_ms",
                    wait * 1000,
                    tags={"method": method, "path": path},
                )

            # 2. Send
            t0 = time.monotonic()
            try:
                response = await self._client.request(method, path, **kwargs)
            except RETRYABLE_ERRORS as exc:
                delay = self._network_backoff(method, path, exc, attempt)
                await asyncio.sleep(delay)
                continue
            elapsed_ms = (time.monotonic() - t0) * 1000

            # 3. Process
            status = response.status_code
            last_status = status
            tags = {"method": method, "path": path, "status": str(status)}
            self._metrics.increment("notiontree.requests_total", tags=tags)
            self._metrics.timing("notiontree.request_duration_ms", elapsed_ms, tags=tags)

            if self._config.debug_dump_payload:
                self._dump(method, response, json_payload)

            if 200 <= status < 300:
                if status == 204 or not response.content:
                    return {}
                result: dict = response.json()
                return result

            if not self._retry.is_retryable(status=status):
                _raise_for_status(response, method, path)

            retry_after = _parse_retry_after(response) if status == 429 else None
            if not self._retry.has_attempts_left(attempt):
                break

            reason = "server_error"
            if status == 429:
                reason = "rate_limited"
                self._metrics.increment(
                    "notiontree.rate_limited_total",
                    tags={"method": method, "path": path},
                )
                log.warning(
                    "Rate limited by Notion API",
                    extra={
                        "extra_fields": {
                            "op": "request",
                            "method": method,
                            "path": path,
                            "status_code": 429,
                            "retry_after": retry_after,
                            "attempt": attempt + 1,
                        }
                    },
                )

            delay = self._retry.delay(attempt, retry_after)
            self._metrics.increment(
                "notiontree.retries_total",
                tags={"method": method, "path": path, "reason": reason},
            )
            await asyncio.sleep(delay)

        # 4. All attempts exhausted.
        if last_status == 429:
            raise NotionTreeRateLimitError(
                message=f"Still rate limited after {max_attempts} attempts on {method} {path}",
                context={"retry_after_seconds": retry_after, "attempt": max_attempts},
            )
        raise NotionTreeRetryExhaustedError(
            message=(
                f"All {max_attempts} attempts exhausted for {method} {path} "
                f"(last status: {last_status})"
            ),
            context={"attempts": max_attempts, "last_status_code": last_status},
        )

    async def paginate(self, path: str, **kwargs: Any) -> AsyncIterator[dict]:
        """Auto-paginate a Notion list endpoint, yielding each result item.

        Issues repeated requests with ``start_cursor`` / ``page_size`` until
        ``has_more`` is ``False``.  ``GET`` endpoints receive the cursor as
        query parameters, ``POST`` endpoints in the JSON body.

        Parameters
        ----------
        path:
            API path to paginate (e.g. ``/blocks/{id}/children``).
        **kwargs:
            Forwarded to :meth:`request`.  ``method`` defaults to ``GET``.
        """
        method = kwargs.pop("method", "GET")
        cursor: str | None = None

        while True:
            location = "json" if method.upper() in ("POST", "PATCH") else "params"
            page_args: dict = dict(kwargs.get(location) or {})
            page_args["page_size"] = 100
            if cursor is not None:
                page_args["start_cursor"] = cursor
            else:
                page_args.pop("start_cursor", None)
            kwargs[location] = page_args

            data = await self.request(method, path, **kwargs)
            for item in data.get("results", []):
                yield item

            if not data.get("has_more", False):
                break
            cursor = data.get("next_cursor")
            if cursor is None:
                break

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotionTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # -- internals ---------------------------------------------------------

    def _network_backoff(self, method: str, path: str, exc: Exception, attempt: int) -> float:
        """Return the delay before retrying after *exc*, or raise."""
        self._metrics.increment(
            "notiontree.requests_total",
            tags={"method": method, "path": path, "status": "error"},
        )
        log.warning(
            "Request network error",
            extra={
                "extra_fields": {
                    "op": "request",
                    "method": method,
                    "path": path,
                    "attempt": attempt + 1,
                    "error": str(exc),
                }
            },
        )
        if not self._retry.has_attempts_left(attempt):
            raise NotionTreeNetworkError(
                message=f"Network error on {method} {path}: {exc}",
                context={"url": path, "attempt": attempt + 1},
                cause=exc,
            ) from exc

        self._metrics.increment(
            "notiontree.retries_total",
            tags={"method": method, "path": path, "reason": "network_error"},
        )
        return self._retry.delay(attempt)

    def _dump(self, method: str, response: httpx.Response, json_payload: Any) -> None:
        try:
            resp_body = response.json()
        except ValueError:
            resp_body = response.text[:1000]
        _dump_payload(
            method,
            str(response.url),
            json_payload,
            response.status_code,
            resp_body,
            token=self._config.token,
        )
