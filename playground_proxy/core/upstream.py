"""Outbound calls to the inference and agent APIs."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, Optional

import httpx

from .exceptions import (
    UpstreamStatusError,
    UpstreamTimeoutError,
    UpstreamTransportError,
)
from .upstream_transport import get_upstream_transport

logger = logging.getLogger("playground-proxy")


@dataclass(frozen=True)
class UpstreamCall:
    """One outbound POST: where, what, with which credential and bound."""

    url: str
    payload: Mapping[str, Any]
    credential: Optional[str]
    timeout: float
    subject: str = "request to the upstream API"
    timeout_hint: str = ""
    error_label: str = "API Error"

    def timeout_message(self) -> str:
        message = (
            f"The {self.subject} took too long to complete "
            f"(>{self.timeout:g} seconds)."
        )
        if self.timeout_hint:
            message = f"{message} {self.timeout_hint}"
        return message


def build_outbound_headers(credential: Optional[str]) -> dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        # Explicitly request uncompressed responses so chunks relay verbatim
        "Accept-Encoding": "identity",
    }
    if credential:
        headers["Authorization"] = f"Bearer {credential}"
    return headers


def describe_httpx_error(exc: Exception) -> str:
    """Produce a short user-facing description of a transport error."""
    message = str(exc).strip()
    return message or exc.__class__.__name__


async def _status_error(resp: httpx.Response, call: UpstreamCall) -> UpstreamStatusError:
    """Read what we can of an error response and wrap it."""
    details = f"Status code: {resp.status_code}"
    try:
        await resp.aread()
        details = resp.text or details
    except httpx.HTTPError as exc:
        logger.error(f"Failed to read error response: {exc}")
    logger.error(f"{call.error_label} ({resp.status_code}): {details}")
    return UpstreamStatusError(
        resp.status_code, resp.reason_phrase, details, label=call.error_label
    )


def _timeout_error(call: UpstreamCall) -> UpstreamTimeoutError:
    logger.error(f"Request to {call.url} timed out after {call.timeout:g} seconds")
    return UpstreamTimeoutError(call.timeout_message(), timeout=call.timeout)


def _client(call: UpstreamCall, timeout: httpx.Timeout) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        transport=get_upstream_transport(call.url),
        follow_redirects=True,
    )


async def post_json(call: UpstreamCall) -> tuple[Any, int]:
    """POST the payload and return (decoded JSON body, elapsed ms).

    Raises:
        UpstreamTimeoutError: The wall-clock bound elapsed.
        UpstreamTransportError: Connection-level failure.
        UpstreamStatusError: The upstream answered with a non-2xx status.
    """
    start = time.perf_counter()
    async with _client(call, httpx.Timeout(call.timeout)) as client:
        try:
            resp = await asyncio.wait_for(
                client.post(
                    call.url,
                    headers=build_outbound_headers(call.credential),
                    json=dict(call.payload),
                ),
                timeout=call.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise _timeout_error(call) from exc
        except httpx.HTTPError as exc:
            logger.error(f"Fetch error for {call.url}: {exc!r}")
            raise UpstreamTransportError(describe_httpx_error(exc)) from exc

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(f"Upstream response status: {resp.status_code}, time: {elapsed_ms}ms")

        if resp.is_error:
            raise await _status_error(resp, call)
        return resp.json(), elapsed_ms


class UpstreamStream:
    """An open streamed upstream response that must be closed exactly once."""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response) -> None:
        self._client = client
        self.response = response
        self.closed = False

    async def chunks(self) -> AsyncIterator[bytes]:
        # Decoded bytes, so a compressed upstream never leaks into the event stream
        async for chunk in self.response.aiter_bytes():
            if chunk:
                yield chunk

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        logger.debug("Closing upstream stream")
        try:
            await self.response.aclose()
        finally:
            await self._client.aclose()


async def open_stream(call: UpstreamCall) -> UpstreamStream:
    """Send the request and return once upstream headers arrive.

    The timeout bounds only this phase; once streaming starts, reads are
    unbounded and end when upstream closes.
    """
    stream_timeout = httpx.Timeout(
        connect=call.timeout, read=None, write=call.timeout, pool=call.timeout
    )
    client = _client(call, stream_timeout)
    try:
        request = client.build_request(
            "POST",
            call.url,
            headers=build_outbound_headers(call.credential),
            json=dict(call.payload),
        )
        resp = await asyncio.wait_for(client.send(request, stream=True), timeout=call.timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        await client.aclose()
        raise _timeout_error(call) from exc
    except httpx.HTTPError as exc:
        await client.aclose()
        logger.error(f"Failed to open stream to {call.url}: {exc!r}")
        raise UpstreamTransportError(describe_httpx_error(exc)) from exc
    except BaseException:
        await client.aclose()
        raise

    logger.info(f"Upstream stream opened, status {resp.status_code}")
    if resp.is_error:
        try:
            raise await _status_error(resp, call)
        finally:
            await resp.aclose()
            await client.aclose()
    return UpstreamStream(client, resp)
