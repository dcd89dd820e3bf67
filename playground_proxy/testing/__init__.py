"""Testing helpers for simulating upstream APIs."""

from .fake_upstream import (
    ChunkStream,
    FakeUpstream,
    ReceivedRequest,
    UpstreamResponse,
    default_completion,
)

__all__ = [
    "ChunkStream",
    "FakeUpstream",
    "ReceivedRequest",
    "UpstreamResponse",
    "default_completion",
]
