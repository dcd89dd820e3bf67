"""Chat completion proxy endpoints."""

import json
import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import Response

from ...core import (
    UpstreamCall,
    detect_reasoning_method,
    json_response,
    normalize_chat_payload,
    open_stream,
    post_json,
    read_json_body,
    require_secrets,
    resolve_thread_id,
    run_endpoint,
)
from ...core.cors import NO_STORE
from ...core.payload import request_complexity
from ...settings import FIREWORKS_API_KEY, ProxySettings
from .streaming import CHAT_KEY_ERROR, chat_call, event_stream_response

logger = logging.getLogger("playground-proxy")


def attach_performance(data: Any, **metrics: Any) -> Any:
    """Add non-authoritative timing metadata to a successful completion."""
    if isinstance(data, dict) and not data.get("error"):
        data["performance"] = metrics
    return data


def _log_usage(data: Any, thread_id: str) -> None:
    usage = data.get("usage") if isinstance(data, dict) else None
    if not isinstance(usage, dict):
        return
    logger.info(
        "Token usage for thread %s: prompt_tokens=%s completion_tokens=%s total_tokens=%s",
        thread_id,
        usage.get("prompt_tokens"),
        usage.get("completion_tokens"),
        usage.get("total_tokens"),
    )


async def _forward_chat(
    call: UpstreamCall,
    *,
    is_stream: bool,
    reasoning_method: str,
    thread_id: Optional[str] = None,
) -> Response:
    """Send a normalized chat payload and relay the answer."""
    if is_stream:
        upstream = await open_stream(call)
        return event_stream_response(upstream)

    data, elapsed_ms = await post_json(call)
    logger.info(f"Chat completion served in {elapsed_ms}ms, method: {reasoning_method}")

    metrics: dict[str, Any] = {
        "response_time_ms": elapsed_ms,
        "reasoning_method": reasoning_method,
    }
    if thread_id is not None:
        _log_usage(data, thread_id)
        metrics["thread_id"] = thread_id
    attach_performance(data, **metrics)
    return json_response(data, headers={"Cache-Control": NO_STORE})


def _log_request(payload: dict, reasoning_method: str, **extra: Any) -> None:
    logger.info(f"Model requested: {payload.get('model') or 'not specified'}")
    logger.info(f"Using reasoning method: {reasoning_method}")
    complexity = request_complexity(payload)
    complexity.update(extra)
    logger.info(f"Request complexity: {json.dumps(complexity)}")


async def _api_proxy(request: Request, settings: ProxySettings) -> Response:
    (api_key,) = require_secrets(settings, CHAT_KEY_ERROR, FIREWORKS_API_KEY)
    payload = await read_json_body(request)

    reasoning_method = detect_reasoning_method(payload)
    _log_request(payload, reasoning_method)
    is_stream = payload.get("stream") is True
    logger.info(f"Stream mode: {'enabled' if is_stream else 'disabled'}")

    outbound = normalize_chat_payload(
        payload,
        default_max_tokens=settings.default_max_tokens,
        max_tokens_ceiling=settings.max_tokens_ceiling,
    )
    call = chat_call(settings, outbound, api_key, settings.chat_timeout)
    return await _forward_chat(call, is_stream=is_stream, reasoning_method=reasoning_method)


async def _thread_proxy(request: Request, settings: ProxySettings) -> Response:
    (api_key,) = require_secrets(settings, CHAT_KEY_ERROR, FIREWORKS_API_KEY)
    payload = await read_json_body(request)

    thread_id = resolve_thread_id(payload)
    reasoning_method = detect_reasoning_method(payload)
    _log_request(payload, reasoning_method, thread_id=thread_id)
    if request.query_params.get("reset") == "true":
        logger.info(f"Handling context reset request for thread: {thread_id}")

    inbound = {key: value for key, value in payload.items() if key != "threadId"}
    outbound = normalize_chat_payload(
        inbound,
        default_max_tokens=settings.default_max_tokens,
        max_tokens_ceiling=settings.max_tokens_ceiling,
    )
    # Upstream isolates sessions by the user field
    outbound["user"] = thread_id

    call = chat_call(settings, outbound, api_key, settings.chat_timeout)
    return await _forward_chat(
        call,
        is_stream=payload.get("stream") is True,
        reasoning_method=reasoning_method,
        thread_id=thread_id,
    )


async def api_proxy(request: Request) -> Response:
    """Chat completions proxy, buffered or streamed per the stream flag.

    POST /api/api-proxy
    """
    return await run_endpoint(request, "Fireworks API proxy", _api_proxy)


async def thread_proxy(request: Request) -> Response:
    """Chat completions proxy that pins each conversation to a thread id.

    POST /api/proxy
    """
    return await run_endpoint(request, "Fireworks thread proxy", _thread_proxy)
