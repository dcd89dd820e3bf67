"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient

# Make the project root importable without installing
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from playground_proxy.core.upstream_transport import clear_upstream_transports
from playground_proxy.main import create_app
from playground_proxy.settings import ProxySettings
from playground_proxy.testing import FakeUpstream

TEST_CHAT_URL = "http://fireworks.test/inference/v1/chat/completions"
TEST_WEBSEARCH_URL = "http://search.abacus.test/api/v0/deployment/predict"
TEST_RESEARCH_URL = "http://research.abacus.test/api/agents/execute"

TEST_SECRETS = {
    "fireworks_api_key": "fw-test-key",
    "websearch_token": "ws-test-token",
    "websearch_id": "ws-test-id",
    "research_token": "rs-test-token",
    "research_id": "rs-test-id",
}


# =============================================================================
# Settings Builders
# =============================================================================


def build_settings(**overrides: Any) -> ProxySettings:
    """Build stub settings pointing every upstream at the fake hosts.

    Args:
        **overrides: Any ProxySettings field, e.g. ``chat_timeout=0.05`` or
            ``fireworks_api_key=None`` to simulate a missing secret.

    Returns:
        A ProxySettings instance.
    """
    values: dict[str, Any] = dict(TEST_SECRETS)
    values.update(
        chat_completions_url=TEST_CHAT_URL,
        websearch_url=TEST_WEBSEARCH_URL,
        research_url=TEST_RESEARCH_URL,
    )
    values.update(overrides)
    return ProxySettings(**values)


def chat_body(**fields: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": "accounts/fireworks/models/test",
        "messages": [{"role": "user", "content": "hi"}],
    }
    body.update(fields)
    return body


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clear_transport_registry() -> Generator[None, None, None]:
    """Clear upstream transport registry after test."""
    yield
    clear_upstream_transports()


@pytest.fixture
def fake_upstream(clear_transport_registry) -> FakeUpstream:
    """A fake answering for the chat, web search and research hosts."""
    return FakeUpstream().install(TEST_CHAT_URL, TEST_WEBSEARCH_URL, TEST_RESEARCH_URL)


@pytest.fixture
def make_client(fake_upstream) -> Callable[..., TestClient]:
    """Factory for a TestClient whose app sees ``build_settings(**overrides)``."""

    def _make(**overrides: Any) -> TestClient:
        settings = build_settings(**overrides)
        app = create_app(config={}, settings_loader=lambda: settings)
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
