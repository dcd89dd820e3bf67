"""API routes for the proxy."""

from .agents import research, web_search
from .chat import api_proxy, thread_proxy
from .streaming import streaming_edge

__all__ = [
    "api_proxy",
    "research",
    "streaming_edge",
    "thread_proxy",
    "web_search",
]
