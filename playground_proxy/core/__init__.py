"""Core module initialization."""

from .cors import cors_headers, gate_request, preflight_response
from .endpoint import (
    error_response,
    json_response,
    read_json_body,
    require_secrets,
    resolve_settings,
    run_endpoint,
)
from .exceptions import (
    ConfigurationError,
    InternalProxyError,
    InvalidRequestError,
    MissingParameterError,
    ProxyError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    UpstreamTransportError,
)
from .payload import (
    build_streaming_payload,
    clamp_max_tokens,
    detect_reasoning_method,
    normalize_chat_payload,
    parse_json_body,
    require_query,
    resolve_thread_id,
)
from .sse import DONE_SENTINEL, detect_sse_stream_error, relay_event_stream
from .upstream import UpstreamCall, UpstreamStream, open_stream, post_json
from .upstream_transport import (
    clear_upstream_transports,
    get_upstream_transport,
    register_upstream_transport,
)

__all__ = [
    "ConfigurationError",
    "DONE_SENTINEL",
    "InternalProxyError",
    "InvalidRequestError",
    "MissingParameterError",
    "ProxyError",
    "UpstreamCall",
    "UpstreamStatusError",
    "UpstreamStream",
    "UpstreamTimeoutError",
    "UpstreamTransportError",
    "build_streaming_payload",
    "clamp_max_tokens",
    "clear_upstream_transports",
    "cors_headers",
    "detect_reasoning_method",
    "detect_sse_stream_error",
    "error_response",
    "gate_request",
    "get_upstream_transport",
    "json_response",
    "normalize_chat_payload",
    "open_stream",
    "parse_json_body",
    "post_json",
    "preflight_response",
    "read_json_body",
    "register_upstream_transport",
    "relay_event_stream",
    "require_query",
    "require_secrets",
    "resolve_settings",
    "resolve_thread_id",
    "run_endpoint",
]
