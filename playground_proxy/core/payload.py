"""Inbound body parsing and outbound payload normalization."""

import json
import logging
import time
from typing import Any, Mapping, Optional

from ..settings import DEFAULT_MAX_TOKENS, MAX_TOKENS_CEILING
from .exceptions import InvalidRequestError, MissingParameterError

logger = logging.getLogger("playground-proxy")

# Fields the dedicated streaming endpoint forwards upstream
STREAMING_FIELDS = ("model", "messages", "max_tokens", "temperature", "top_p")

REASONING_MARKERS = (
    ("Chain of Draft", "CoD"),
    ("Chain of Thought", "CoT"),
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_json_body(body: bytes) -> dict[str, Any]:
    """Decode a request body into a JSON object.

    An empty body and the NaN/Infinity extensions are rejected like any other
    malformed JSON.
    """
    try:
        payload = json.loads(body, parse_constant=_reject_constant)
    except ValueError as exc:
        logger.error(f"Failed to parse request body: {exc}")
        raise InvalidRequestError(str(exc)) from exc

    if not isinstance(payload, Mapping):
        logger.error("Request body must be a JSON object")
        raise InvalidRequestError("Request body must be a JSON object")
    return dict(payload)


def clamp_max_tokens(
    value: Any,
    default: int = DEFAULT_MAX_TOKENS,
    ceiling: int = MAX_TOKENS_CEILING,
) -> int | float:
    """Default a missing max_tokens and clamp it into [1, ceiling].

    Zero counts as missing, matching how the playground sends "unset".
    """
    if value is None or value == 0:
        value = default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidRequestError(f"max_tokens must be a number, got {value!r}")
    return min(max(1, value), ceiling)


def strip_empty_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _check_messages(payload: Mapping[str, Any]) -> None:
    messages = payload.get("messages")
    if messages is not None and not isinstance(messages, list):
        raise InvalidRequestError("messages must be an array")


def normalize_chat_payload(
    payload: Mapping[str, Any],
    *,
    force_stream: Optional[bool] = None,
    default_max_tokens: int = DEFAULT_MAX_TOKENS,
    max_tokens_ceiling: int = MAX_TOKENS_CEILING,
) -> dict[str, Any]:
    """Build the outbound chat payload from an inbound one.

    Args:
        payload: The parsed inbound body.
        force_stream: When set, overrides the inbound stream flag.
        default_max_tokens: Used when max_tokens is absent.
        max_tokens_ceiling: Upper clamp bound for max_tokens.

    Returns:
        A new dict; the inbound payload is not modified.
    """
    _check_messages(payload)
    original = payload.get("max_tokens")
    max_tokens = clamp_max_tokens(original, default_max_tokens, max_tokens_ceiling)
    if original and original != max_tokens:
        logger.info(
            f"Adjusted max_tokens from {original} to {max_tokens} to meet API requirements"
        )

    outbound = strip_empty_fields(payload)
    outbound["max_tokens"] = max_tokens
    if force_stream is not None:
        outbound["stream"] = force_stream
    return outbound


def build_streaming_payload(
    payload: Mapping[str, Any],
    *,
    default_max_tokens: int = DEFAULT_MAX_TOKENS,
    max_tokens_ceiling: int = MAX_TOKENS_CEILING,
) -> dict[str, Any]:
    """Keep only the generation fields and force streaming on."""
    cleaned = {field: payload.get(field) for field in STREAMING_FIELDS}
    return normalize_chat_payload(
        cleaned,
        force_stream=True,
        default_max_tokens=default_max_tokens,
        max_tokens_ceiling=max_tokens_ceiling,
    )


def detect_reasoning_method(payload: Mapping[str, Any]) -> str:
    """Classify the prompting style from the first message's content."""
    messages = payload.get("messages")
    if not isinstance(messages, list) or not messages:
        return "Standard"
    first = messages[0]
    content = first.get("content") if isinstance(first, Mapping) else None
    if not isinstance(content, str):
        return "Standard"
    for marker, method in REASONING_MARKERS:
        if marker in content:
            return method
    return "Standard"


def resolve_thread_id(payload: Mapping[str, Any]) -> str:
    thread_id = payload.get("threadId") or payload.get("user")
    if thread_id:
        return str(thread_id)
    return f"thread-{int(time.time() * 1000)}"


def request_complexity(payload: Mapping[str, Any]) -> dict[str, Any]:
    messages = payload.get("messages")
    return {
        "messages_count": len(messages) if isinstance(messages, list) else 0,
        "max_tokens": payload.get("max_tokens") or "default",
    }


def require_query(payload: Mapping[str, Any]) -> str:
    query = payload.get("query")
    if not isinstance(query, str) or not query.strip():
        raise MissingParameterError("query")
    return query


def preview(text: str, limit: int = 100) -> str:
    """Shorten user text for log lines."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."
