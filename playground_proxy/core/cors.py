"""CORS headers and the request gate shared by every endpoint."""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

ALLOWED_METHOD = "POST"
ALLOW_METHODS = "POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"
PREFLIGHT_MAX_AGE = "86400"

NO_STORE = "no-cache, no-store, must-revalidate"


def cors_headers(**extra: str) -> dict[str, str]:
    """Headers that grant unrestricted cross-origin access."""
    headers = {"Access-Control-Allow-Origin": "*"}
    headers.update(extra)
    return headers


def preflight_response() -> Response:
    return Response(
        status_code=204,
        headers=cors_headers(
            **{
                "Access-Control-Allow-Methods": ALLOW_METHODS,
                "Access-Control-Allow-Headers": ALLOW_HEADERS,
                "Access-Control-Max-Age": PREFLIGHT_MAX_AGE,
            }
        ),
    )


def method_not_allowed_response() -> JSONResponse:
    return JSONResponse(
        {"error": "Method Not Allowed"},
        status_code=405,
        headers=cors_headers(Allow=ALLOWED_METHOD),
    )


def gate_request(request: Request) -> Optional[Response]:
    """Answer preflight and disallowed methods; None means carry on."""
    method = request.method.upper()
    if method == "OPTIONS":
        return preflight_response()
    if method != ALLOWED_METHOD:
        return method_not_allowed_response()
    return None
