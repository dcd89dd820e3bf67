"""Per-request proxy settings built from static config and the environment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .config_loader import load_config, read_environment

logger = logging.getLogger("playground-proxy")

CHAT_COMPLETIONS_URL = "https://api.fireworks.ai/inference/v1/chat/completions"
WEBSEARCH_URL = "https://api.abacus.ai/api/v0/deployment/predict"
RESEARCH_URL = "https://api.abacus.ai/api/agents/execute"

DEFAULT_CHAT_TIMEOUT = 120.0
DEFAULT_STREAM_TIMEOUT = 120.0
DEFAULT_WEBSEARCH_TIMEOUT = 30.0
DEFAULT_RESEARCH_TIMEOUT = 180.0
DEFAULT_MAX_TOKENS = 4096
MAX_TOKENS_CEILING = 8192

# Environment keys holding secrets
FIREWORKS_API_KEY = "FIREWORKS_API_KEY"
ABACUS_WEBSEARCH_TOKEN = "ABACUS_WEBSEARCH_TOKEN"
ABACUS_WEBSEARCH_ID = "ABACUS_WEBSEARCH_ID"
ABACUS_DEPLOYMENT_TOKEN = "ABACUS_DEPLOYMENT_TOKEN"
ABACUS_DEPLOYMENT_ID = "ABACUS_DEPLOYMENT_ID"

SettingsLoader = Callable[[], "ProxySettings"]


@dataclass(frozen=True)
class ProxySettings:
    """Everything one request needs to know about its environment."""

    fireworks_api_key: Optional[str] = None
    websearch_token: Optional[str] = None
    websearch_id: Optional[str] = None
    research_token: Optional[str] = None
    research_id: Optional[str] = None

    chat_completions_url: str = CHAT_COMPLETIONS_URL
    websearch_url: str = WEBSEARCH_URL
    research_url: str = RESEARCH_URL

    chat_timeout: float = DEFAULT_CHAT_TIMEOUT
    stream_timeout: float = DEFAULT_STREAM_TIMEOUT
    websearch_timeout: float = DEFAULT_WEBSEARCH_TIMEOUT
    research_timeout: float = DEFAULT_RESEARCH_TIMEOUT

    default_max_tokens: int = DEFAULT_MAX_TOKENS
    max_tokens_ceiling: int = MAX_TOKENS_CEILING

    def secret(self, env_key: str) -> Optional[str]:
        """Return the secret stored for an environment key, or None."""
        attr = _SECRET_FIELDS.get(env_key)
        if attr is None:
            raise KeyError(f"Unknown secret '{env_key}'")
        value = getattr(self, attr)
        return value or None

    @classmethod
    def from_sources(
        cls, config: Mapping[str, Any], environ: Mapping[str, str]
    ) -> "ProxySettings":
        """Build settings from the static config and an environment mapping."""
        upstreams = _get(config, "upstreams") or {}
        limits = _get(config, "limits") or {}

        def _timeout(name: str, default: float) -> float:
            value = _to_float(_get(upstreams, name, "timeout_seconds"))
            if value is None or value <= 0:
                return default
            return value

        def _url(name: str, default: str) -> str:
            return _to_str(_get(upstreams, name, "url")) or default

        return cls(
            fireworks_api_key=environ.get(FIREWORKS_API_KEY) or None,
            websearch_token=environ.get(ABACUS_WEBSEARCH_TOKEN) or None,
            websearch_id=environ.get(ABACUS_WEBSEARCH_ID) or None,
            research_token=environ.get(ABACUS_DEPLOYMENT_TOKEN) or None,
            research_id=environ.get(ABACUS_DEPLOYMENT_ID) or None,
            chat_completions_url=_url("chat", CHAT_COMPLETIONS_URL),
            websearch_url=_url("websearch", WEBSEARCH_URL),
            research_url=_url("research", RESEARCH_URL),
            chat_timeout=_timeout("chat", DEFAULT_CHAT_TIMEOUT),
            stream_timeout=_timeout("stream", DEFAULT_STREAM_TIMEOUT),
            websearch_timeout=_timeout("websearch", DEFAULT_WEBSEARCH_TIMEOUT),
            research_timeout=_timeout("research", DEFAULT_RESEARCH_TIMEOUT),
            default_max_tokens=_to_int(limits.get("default_max_tokens")) or DEFAULT_MAX_TOKENS,
            max_tokens_ceiling=_to_int(limits.get("max_tokens_ceiling")) or MAX_TOKENS_CEILING,
        )


_SECRET_FIELDS = {
    FIREWORKS_API_KEY: "fireworks_api_key",
    ABACUS_WEBSEARCH_TOKEN: "websearch_token",
    ABACUS_WEBSEARCH_ID: "websearch_id",
    ABACUS_DEPLOYMENT_TOKEN: "research_token",
    ABACUS_DEPLOYMENT_ID: "research_id",
}


def build_settings_loader(config: Optional[Mapping[str, Any]] = None) -> SettingsLoader:
    """Return a loader that re-reads the environment on every call.

    The YAML config is static for the life of the process; secrets are not
    cached so a rotated key is picked up by the next request.
    """
    static_config = dict(config) if config is not None else load_config()

    def _load() -> ProxySettings:
        return ProxySettings.from_sources(static_config, read_environment())

    return _load


def _get(cfg: Mapping[str, Any], *keys: str):
    cur: Any = cfg
    for key in keys:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_str(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
