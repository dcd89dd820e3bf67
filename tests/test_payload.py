"""Tests for inbound parsing and outbound payload normalization."""

import pytest

from playground_proxy.core.exceptions import InvalidRequestError, MissingParameterError
from playground_proxy.core.payload import (
    build_streaming_payload,
    clamp_max_tokens,
    detect_reasoning_method,
    normalize_chat_payload,
    parse_json_body,
    preview,
    request_complexity,
    require_query,
    resolve_thread_id,
)


class TestClampMaxTokens:
    """Tests for max_tokens defaulting and clamping."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (999999, 8192),
            (8193, 8192),
            (-5, 1),
            (0.5, 1),
        ],
    )
    def test_out_of_range_values_are_clamped(self, value, expected):
        assert clamp_max_tokens(value) == expected

    @pytest.mark.parametrize("value", [1, 2, 512, 4096, 8191, 8192])
    def test_in_range_values_pass_through(self, value):
        assert clamp_max_tokens(value) == value

    @pytest.mark.parametrize("value", [None, 0])
    def test_missing_value_uses_default(self, value):
        assert clamp_max_tokens(value) == 4096

    def test_custom_default_and_ceiling(self):
        assert clamp_max_tokens(None, default=256, ceiling=1024) == 256
        assert clamp_max_tokens(5000, default=256, ceiling=1024) == 1024

    @pytest.mark.parametrize("value", ["lots", [10], True, {"n": 1}])
    def test_non_numeric_value_is_rejected(self, value):
        with pytest.raises(InvalidRequestError):
            clamp_max_tokens(value)


class TestNormalizeChatPayload:
    """Tests for building the outbound chat payload."""

    def test_scenario_huge_max_tokens(self):
        inbound = {
            "model": "x",
            "messages": [{"role": "user", "content": "hi"}],
            "max_tokens": 999999,
        }
        outbound = normalize_chat_payload(inbound)
        assert outbound["max_tokens"] == 8192
        assert outbound["model"] == "x"
        assert outbound["messages"] == inbound["messages"]

    def test_strips_null_fields(self):
        outbound = normalize_chat_payload(
            {"model": "x", "temperature": None, "top_p": 0.9, "messages": []}
        )
        assert "temperature" not in outbound
        assert outbound["top_p"] == 0.9

    def test_does_not_mutate_inbound(self):
        inbound = {"model": "x", "max_tokens": 99999, "temperature": None}
        normalize_chat_payload(inbound, force_stream=True)
        assert inbound == {"model": "x", "max_tokens": 99999, "temperature": None}

    def test_stream_flag_passes_through_by_default(self):
        assert normalize_chat_payload({"stream": False})["stream"] is False
        assert "stream" not in normalize_chat_payload({"model": "x"})

    def test_force_stream_overrides_inbound(self):
        assert normalize_chat_payload({"stream": False}, force_stream=True)["stream"] is True

    def test_rejects_non_list_messages(self):
        with pytest.raises(InvalidRequestError, match="messages"):
            normalize_chat_payload({"messages": "hi"})


class TestBuildStreamingPayload:
    """Tests for the streaming endpoint's cleaned payload."""

    @pytest.mark.parametrize("inbound_stream", [True, False, None, "no"])
    def test_stream_is_always_true(self, inbound_stream):
        outbound = build_streaming_payload({"model": "x", "stream": inbound_stream})
        assert outbound["stream"] is True

    def test_keeps_only_generation_fields(self):
        outbound = build_streaming_payload(
            {
                "model": "x",
                "messages": [],
                "temperature": 0.2,
                "top_p": None,
                "threadId": "t-1",
                "tools": [{"type": "function"}],
            }
        )
        assert outbound == {
            "model": "x",
            "messages": [],
            "temperature": 0.2,
            "max_tokens": 4096,
            "stream": True,
        }


class TestDetectReasoningMethod:
    """Tests for reasoning method detection from the first message."""

    def test_chain_of_draft(self):
        payload = {"messages": [{"role": "system", "content": "Use Chain of Draft."}]}
        assert detect_reasoning_method(payload) == "CoD"

    def test_chain_of_thought(self):
        payload = {"messages": [{"role": "system", "content": "Think with Chain of Thought"}]}
        assert detect_reasoning_method(payload) == "CoT"

    def test_only_first_message_counts(self):
        payload = {
            "messages": [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Chain of Draft please"},
            ]
        }
        assert detect_reasoning_method(payload) == "Standard"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"messages": []}, {"messages": "x"}, {"messages": [{"content": ["part"]}]}],
    )
    def test_defaults_to_standard(self, payload):
        assert detect_reasoning_method(payload) == "Standard"


class TestThreadAndQuery:
    """Tests for thread id resolution and query validation."""

    def test_thread_id_prefers_thread_id_field(self):
        assert resolve_thread_id({"threadId": "abc", "user": "u"}) == "abc"

    def test_thread_id_falls_back_to_user(self):
        assert resolve_thread_id({"user": "u-1"}) == "u-1"

    def test_thread_id_is_generated(self):
        assert resolve_thread_id({}).startswith("thread-")

    def test_require_query_returns_query(self):
        assert require_query({"query": "latest papers"}) == "latest papers"

    @pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": "   "}, {"query": 42}])
    def test_require_query_rejects_missing(self, payload):
        with pytest.raises(MissingParameterError) as exc_info:
            require_query(payload)
        assert exc_info.value.to_payload() == {"error": "Missing required parameter: query"}


class TestParseJsonBody:
    """Tests for request body parsing."""

    def test_parses_object(self):
        assert parse_json_body(b'{"a": 1}') == {"a": 1}

    def test_empty_body_raises(self):
        with pytest.raises(InvalidRequestError):
            parse_json_body(b"")

    @pytest.mark.parametrize("constant", [b"NaN", b"Infinity", b"-Infinity"])
    def test_non_standard_constants_raise(self, constant):
        with pytest.raises(InvalidRequestError, match="not valid JSON"):
            parse_json_body(b'{"temperature": ' + constant + b"}")

    def test_invalid_json_raises(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_json_body(b"{not json")
        assert exc_info.value.status_code == 400
        assert exc_info.value.to_payload()["error"] == "Invalid JSON in request body"

    def test_non_object_raises(self):
        with pytest.raises(InvalidRequestError, match="JSON object"):
            parse_json_body(b"[1, 2]")


def test_request_complexity_counts_messages():
    assert request_complexity({"messages": [{}, {}]}) == {
        "messages_count": 2,
        "max_tokens": "default",
    }


def test_preview_truncates_long_text():
    assert preview("a" * 150) == "a" * 100 + "..."
    assert preview("short") == "short"
