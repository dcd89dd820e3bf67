"""Dedicated streaming chat endpoint and the event-stream response builder."""

import logging

from fastapi import Request
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from ...core import (
    UpstreamCall,
    UpstreamStream,
    build_streaming_payload,
    cors_headers,
    open_stream,
    read_json_body,
    require_secrets,
    run_endpoint,
)
from ...core.sse import EVENT_STREAM_HEADERS, relay_event_stream
from ...settings import FIREWORKS_API_KEY, ProxySettings

logger = logging.getLogger("playground-proxy")

CHAT_KEY_ERROR = "API key not configured"
LLM_SUBJECT = "request to the LLM API"
LLM_TIMEOUT_HINT = "Try reducing complexity or using fewer tokens."


def chat_call(
    settings: ProxySettings, payload: dict, api_key: str, timeout: float
) -> UpstreamCall:
    return UpstreamCall(
        url=settings.chat_completions_url,
        payload=payload,
        credential=api_key,
        timeout=timeout,
        subject=LLM_SUBJECT,
        timeout_hint=LLM_TIMEOUT_HINT,
    )


def event_stream_response(upstream: UpstreamStream) -> StreamingResponse:
    """Relay an open upstream stream to the client chunk by chunk."""
    return StreamingResponse(
        relay_event_stream(upstream.chunks(), upstream.aclose),
        media_type="text/event-stream",
        headers=cors_headers(**EVENT_STREAM_HEADERS),
        # Runs even if the client leaves before the first chunk is pulled
        background=BackgroundTask(upstream.aclose),
    )


async def _streaming_edge(request: Request, settings: ProxySettings) -> Response:
    (api_key,) = require_secrets(settings, CHAT_KEY_ERROR, FIREWORKS_API_KEY)
    payload = await read_json_body(request)

    logger.info(f"Streaming request received for model: {payload.get('model') or 'unknown'}")
    outbound = build_streaming_payload(
        payload,
        default_max_tokens=settings.default_max_tokens,
        max_tokens_ceiling=settings.max_tokens_ceiling,
    )

    upstream = await open_stream(
        chat_call(settings, outbound, api_key, settings.stream_timeout)
    )
    return event_stream_response(upstream)


async def streaming_edge(request: Request) -> Response:
    """Always-streaming chat completions relay.

    POST /api/streaming-edge
    """
    return await run_endpoint(request, "Streaming Edge API", _streaming_edge)
