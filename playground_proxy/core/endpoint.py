"""Shared request lifecycle for every proxy endpoint.

Gate -> settings -> endpoint body, with every ProxyError turned into a JSON
response that still carries the CORS headers.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from ..settings import ProxySettings
from .cors import cors_headers, gate_request
from .exceptions import ConfigurationError, InternalProxyError, ProxyError
from .payload import parse_json_body

logger = logging.getLogger("playground-proxy")

EndpointBody = Callable[[Request, ProxySettings], Awaitable[Response]]


def resolve_settings(request: Request) -> ProxySettings:
    """Build this request's settings through the app's injected loader."""
    loader = getattr(request.app.state, "settings_loader", None)
    if loader is None:
        raise RuntimeError("Settings loader not configured. Did you use create_app()?")
    return loader()


def require_secrets(settings: ProxySettings, error: str, *keys: str) -> list[str]:
    """Return the secrets for ``keys`` or raise naming every missing one."""
    values: list[Optional[str]] = []
    for key in keys:
        value = settings.secret(key)
        logger.info(f"Environment check: {key} exists? {value is not None}")
        values.append(value)

    missing = [key for key, value in zip(keys, values) if value is None]
    if missing:
        logger.error(f"ERROR: {', '.join(missing)} missing in environment variables")
        raise ConfigurationError(error, missing)
    return [value for value in values if value is not None]


async def read_json_body(request: Request) -> dict[str, Any]:
    body = await request.body()
    return parse_json_body(body)


def json_response(
    content: Any, status_code: int = 200, headers: Optional[dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(content, status_code=status_code, headers=cors_headers(**(headers or {})))


def error_response(exc: ProxyError) -> JSONResponse:
    return json_response(exc.to_payload(), status_code=exc.status_code)


async def run_endpoint(request: Request, name: str, body: EndpointBody) -> Response:
    """Run ``body`` behind the request gate and the error mapping."""
    logger.info(f"{name} called: {datetime.now(timezone.utc).isoformat()}")

    gated = gate_request(request)
    if gated is not None:
        logger.info(f"{name}: answered {request.method} at the gate ({gated.status_code})")
        return gated

    try:
        settings = resolve_settings(request)
        return await body(request, settings)
    except ProxyError as exc:
        logger.warning(f"{name} failed with {exc.status_code}: {exc.message}")
        return error_response(exc)
    except Exception as exc:
        logger.exception(f"Function error in {name}: {exc}")
        return error_response(InternalProxyError(str(exc) or exc.__class__.__name__))
