"""Main FastAPI application for the playground proxy."""

import os
from typing import Any, Mapping, Optional

from fastapi import FastAPI

from .api.routes import api_proxy, research, streaming_edge, thread_proxy, web_search
from .config_loader import load_config
from .logging import setup_logging
from .settings import SettingsLoader, build_settings_loader

logger = setup_logging()

# Every verb is routed so the endpoint itself answers 405 with an Allow header
ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

ROUTES = {
    "/api/api-proxy": api_proxy,
    "/api/proxy": thread_proxy,
    "/api/streaming-edge": streaming_edge,
    "/api/abacus-websearch": web_search,
    "/api/abacus-research": research,
}


def server_address(config: Mapping[str, Any]) -> tuple[str, int]:
    """Resolve the bind address; environment variables take priority."""
    server_cfg = (config.get("server") or {}) if isinstance(config, Mapping) else {}

    host = os.getenv("PLAYGROUND_PROXY_HOST") or str(server_cfg.get("host", "127.0.0.1"))

    port_raw = os.getenv("PLAYGROUND_PROXY_PORT") or server_cfg.get("port", 8000)
    try:
        port = int(port_raw)
    except (TypeError, ValueError):
        logger.warning("Invalid port %r; falling back to 8000", port_raw)
        port = 8000
    return host, port


def create_app(
    config: Optional[Mapping[str, Any]] = None,
    settings_loader: Optional[SettingsLoader] = None,
) -> FastAPI:
    """Factory function to create the FastAPI application.

    Args:
        config: Static configuration; loaded from YAML when omitted.
        settings_loader: Called once per request to build ProxySettings.
            Defaults to reading secrets from the environment.

    Returns:
        The configured FastAPI application instance.
    """
    if config is None:
        config = load_config() if settings_loader is None else {}
    if settings_loader is None:
        settings_loader = build_settings_loader(config)

    app = FastAPI(title="Playground Proxy")
    app.state.settings_loader = settings_loader
    app.state.config = dict(config)

    for path, endpoint in ROUTES.items():
        app.api_route(path, methods=ROUTE_METHODS)(endpoint)
    logger.info(f"Registered endpoints: {', '.join(ROUTES)}")
    return app


# Application served by proxy.py / uvicorn
app = create_app()

__all__ = ["app", "create_app", "server_address", "ROUTES"]
