"""Playground Proxy

Stateless HTTP endpoints that let a browser playground talk to third-party
inference and agent APIs without shipping credentials to the browser.

This module provides:
- Chat completion proxies (buffered, thread-aware, and always-streaming)
- Abacus.AI web search and research agent proxies
- CORS handling and uniform error mapping on every endpoint

Example:
    >>> from playground_proxy.main import app
    >>> import uvicorn
    >>> uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from .main import app, create_app, server_address
from .config_loader import load_config
from .core import ProxyError
from .logging import logger, setup_logging
from .settings import ProxySettings, build_settings_loader

__all__ = [
    "app",
    "build_settings_loader",
    "create_app",
    "load_config",
    "logger",
    "ProxyError",
    "ProxySettings",
    "server_address",
    "setup_logging",
]
