"""Tests for the upstream chat-completion client."""

import json

import httpx
import pytest

from chat_proxy.core.client.errors import (
    InvalidRequestError,
    UpstreamError,
    UpstreamNetworkError,
    UpstreamTimeoutError,
    classify_error,
    create_user_friendly_message,
)
from chat_proxy.core.client.turn import Message, MessageRole
from chat_proxy.core.client.upstream import UpstreamChatClient


def make_client(handler, **kwargs):
    return UpstreamChatClient(
        base_url="https://llm.example.com/v1/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
        **kwargs
    )


def ok(message):
    return httpx.Response(200, json={"choices": [{"message": message, "finish_reason": "stop"}]})


MESSAGES = [
    Message.create_text_message(MessageRole.SYSTEM, "be nice"),
    Message.create_text_message(MessageRole.USER, "hi"),
]


class TestComplete:

    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return ok({"role": "assistant", "content": "hello"})

        tools = [{"type": "function", "function": {"name": "echo", "parameters": {"type": "object"}}}]
        async with make_client(handler) as client:
            message = await client.complete(MESSAGES, "openai", tools=tools)

        assert message == {"role": "assistant", "content": "hello"}
        assert seen["url"] == "https://llm.example.com/v1/chat/completions"
        assert seen["auth"] == "Bearer secret"
        body = seen["body"]
        assert body["model"] == "openai"
        assert body["seed"] == -1
        assert body["temperature"] == 0.8
        assert body["top_p"] == 1.0
        assert body["stream"] is False
        assert body["tools"] == tools
        assert body["tool_choice"] == "auto"
        assert body["messages"] == [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hi"},
        ]

    @pytest.mark.asyncio
    async def test_no_tools_omits_tool_fields(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return ok({"role": "assistant", "content": "x"})

        async with make_client(handler) as client:
            await client.complete(MESSAGES, "openai")

        assert "tools" not in seen["body"]
        assert "tool_choice" not in seen["body"]

    @pytest.mark.asyncio
    async def test_error_status(self):
        def handler(request):
            return httpx.Response(500, text="internal kaboom")

        async with make_client(handler) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.complete(MESSAGES, "openai")

        error = exc_info.value
        assert error.message == "API responded with status: 500"
        assert error.upstream_status == 500
        assert error.detail == "internal kaboom"
        assert error.status == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"choices": [{"message": "text"}]}),
    ])
    async def test_malformed_body(self, response):
        async with make_client(lambda request: response) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.complete(MESSAGES, "openai")

        assert exc_info.value.message == "Malformed chat response"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        async with make_client(handler) as client:
            with pytest.raises(UpstreamTimeoutError):
                await client.complete(MESSAGES, "openai")

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(UpstreamNetworkError):
                await client.complete(MESSAGES, "openai")


class TestFromSettings:

    def test_from_settings(self, settings):
        client = UpstreamChatClient.from_settings(settings, "override")

        assert client.api_key == "override"
        assert client.base_url == "https://gen.pollinations.ai/v1"
        assert client.timeout == 120.0


class TestErrors:

    def test_classify_passthrough(self):
        error = UpstreamError("x")
        assert classify_error(error) is error

    def test_classify_unknown_exception(self):
        error = classify_error(KeyError())
        assert error.status == 500
        assert error.message

    @pytest.mark.parametrize("status,fragment", [
        (401, "rejected the API key"),
        (429, "rate limiting"),
        (502, "returned an error"),
    ])
    def test_user_friendly_messages(self, status, fragment):
        message = create_user_friendly_message(UpstreamError("x", upstream_status=status))
        assert fragment in message

    def test_to_dict(self):
        error = UpstreamError("API responded with status: 500", upstream_status=500, detail="boom")

        data = error.to_dict()

        assert data["code"] == "UPSTREAM_ERROR"
        assert data["details"]["upstream_status"] == 500


class TestRequestValidation:

    @pytest.mark.asyncio
    async def test_non_string_model_is_invalid_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return ok({"role": "assistant", "content": "x"})

        async with make_client(handler) as client:
            with pytest.raises(InvalidRequestError) as exc_info:
                await client.complete(MESSAGES, 123)

        assert exc_info.value.status == 400
        assert calls == []
