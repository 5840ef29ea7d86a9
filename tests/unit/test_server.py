"""Tests for the HTTP chat endpoint."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from chat_proxy.config.settings import ChatProxySettings
from chat_proxy.core.chat_service import ChatService
from chat_proxy.core.client.errors import UpstreamError
from chat_proxy.core.client.upstream import UpstreamChatClient
from chat_proxy.server.app import create_app

from conftest import ScriptedClient, assistant, tool_call


def sse_payloads(body: str):
    frames = [frame for frame in body.split("\n\n") if frame]
    return [frame[len("data: "):] for frame in frames]


def build(settings, responses, registry):
    clients = []

    def factory(api_key):
        client = ScriptedClient(responses)
        client.api_key = api_key
        clients.append(client)
        return client

    service = ChatService(settings, tool_registry=registry, client_factory=factory)
    return TestClient(create_app(settings=settings, service=service)), clients


class TestChatEndpoint:

    def test_streams_status_content_and_done(self, settings, registry):
        client, _ = build(settings, [
            assistant(tool_calls=[tool_call("c1", "echo", {"text": "x"})]),
            assistant("All done."),
        ], registry)

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "go"}]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        payloads = sse_payloads(response.text)
        assert [json.loads(p) for p in payloads[:-1]] == [
            {"status": "Echoing..."},
            {"status": None},
            {"content": "All done."},
        ]
        assert payloads[-1] == "[DONE]"

    def test_model_is_forwarded(self, settings, registry):
        client, clients = build(settings, [assistant("ok")], registry)

        client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}], "model": "mistral"})

        assert clients[0].requests[0]["model"] == "mistral"

    def test_image_request_falls_back_to_vision_model(self, settings, registry):
        client, clients = build(settings, [assistant("a cat")], registry)
        image_message = {"role": "user", "content": [
            {"type": "text", "text": "what is it"},
            {"type": "image_url", "image_url": {"url": "https://example.com/cat.png"}},
        ]}

        client.post("/api/chat", json={"messages": [image_message], "model": "mistral"})

        assert clients[0].requests[0]["model"] == "openai"

    def test_query_api_key_overrides_configured(self, settings, registry):
        client, clients = build(settings, [assistant("ok")], registry)

        client.post("/api/chat?apiKey=caller-key", json={"messages": [{"role": "user", "content": "hi"}]})

        assert clients[0].api_key == "caller-key"

    @pytest.mark.parametrize("body", [{}, {"messages": []}, {"messages": "hi"}, ["not", "an", "object"]])
    def test_missing_messages(self, settings, registry, body):
        client, clients = build(settings, [assistant("unused")], registry)

        response = client.post("/api/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Messages array is required"}
        assert clients == []

    def test_invalid_json(self, settings, registry):
        client, _ = build(settings, [assistant("unused")], registry)

        response = client.post("/api/chat", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400

    def test_missing_api_key(self, registry):
        settings = ChatProxySettings(_env_file=None, api_key=None)
        client, clients = build(settings, [assistant("unused")], registry)

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "API key not configured"}
        assert clients == []

    def test_upstream_failure(self, settings, registry):
        error = UpstreamError("API responded with status: 502", upstream_status=502, detail="bad gateway")
        client, _ = build(settings, [error], registry)

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process chat request", "detail": "bad gateway"}

    def test_health(self, settings, registry):
        client, _ = build(settings, [], registry)

        assert client.get("/health").json() == {"status": "ok"}


class TestMalformedRequests:

    @pytest.mark.parametrize("model", [123, ["gpt"], {"x": 1}])
    def test_non_string_model(self, settings, registry, model):
        def transport_handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": "hi"}}]})

        service = ChatService(
            settings,
            tool_registry=registry,
            client_factory=lambda api_key: UpstreamChatClient.from_settings(
                settings, api_key, transport=httpx.MockTransport(transport_handler)
            )
        )
        client = TestClient(create_app(settings=settings, service=service))

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}], "model": model})

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"error": "model must be a string"}

    def test_unexpected_failure_returns_json(self, settings, registry):
        client, _ = build(settings, [RuntimeError("socket closed")], registry)

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process chat request", "detail": "socket closed"}
