"""API module for the proxy."""

from .routes import api_proxy, research, streaming_edge, thread_proxy, web_search

__all__ = [
    "api_proxy",
    "research",
    "streaming_edge",
    "thread_proxy",
    "web_search",
]
