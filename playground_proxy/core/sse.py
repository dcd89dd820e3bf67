"""SSE (Server-Sent Events) relay and error detection."""

import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Iterator, Optional

logger = logging.getLogger("playground-proxy")

DONE_SENTINEL = b"data: [DONE]\n\n"

EVENT_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_sse_event(data: Any) -> bytes:
    """Encode one ``data:`` event; non-strings are JSON encoded."""
    if not isinstance(data, str):
        data = json.dumps(data, ensure_ascii=False)
    return f"data: {data}\n\n".encode("utf-8")


def error_event(message: str) -> bytes:
    return format_sse_event({"error": True, "message": message})


def _event_payloads(chunk: bytes) -> Iterator[dict]:
    """Yield the JSON objects carried by the chunk's data lines."""
    for line in chunk.decode("utf-8", errors="replace").splitlines():
        if not line.startswith("data:"):
            continue
        try:
            parsed = json.loads(line[len("data:") :])
        except ValueError:
            continue
        if isinstance(parsed, dict):
            yield parsed


def detect_sse_stream_error(chunk: bytes) -> Optional[str]:
    """Describe the first upstream error event in a chunk, for logging.

    Recognizes `{"type": "error", ...}` and `{"error": {...}}` events. Events
    split across chunks are missed.
    """
    for event in _event_payloads(chunk):
        details = event.get("error")
        if not isinstance(details, dict) and event.get("type") != "error":
            continue
        if isinstance(details, dict):
            message = details.get("message") or details
            return f"{message} (type={details.get('type', 'unknown')})"
        return str(details or "unknown error")
    return None


async def relay_event_stream(
    chunks: AsyncIterator[bytes],
    close: Callable[[], Awaitable[None]],
) -> AsyncIterator[bytes]:
    """Forward upstream chunks unchanged, then the [DONE] sentinel.

    A failure while reading upstream becomes a single in-band error event
    followed by the sentinel; headers are already committed by then.
    ``close`` runs exactly once, however the relay ends.
    """
    chunk_count = 0
    try:
        try:
            async for chunk in chunks:
                chunk_count += 1
                sse_error = detect_sse_stream_error(chunk)
                if sse_error:
                    # Relayed as-is; the client renders upstream errors itself
                    logger.warning(f"Upstream sent an error event: {sse_error}")
                yield chunk
        except Exception as exc:
            logger.error(f"Stream processing error after {chunk_count} chunks: {exc!r}")
            yield error_event(str(exc) or exc.__class__.__name__)
        yield DONE_SENTINEL
        logger.info(f"Stream ended after {chunk_count} chunks")
    finally:
        await close()
