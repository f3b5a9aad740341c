"""
Pytest configuration and shared fixtures for transgate tests.
"""
import asyncio
import json
from typing import List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from transgate.config import Settings
from transgate.core.llm import ProviderConfig, ProviderRegistry, UpstreamTranslationClient
from transgate.main import create_app


def completion_body(*contents) -> bytes:
    """Build a chat-completion response body with one choice per content."""
    return json.dumps(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "choices": [
                {"index": i, "message": {"role": "assistant", "content": c}, "finish_reason": "stop"}
                for i, c in enumerate(contents)
            ],
            "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        }
    ).encode("utf-8")


class StubUpstream:
    """Records chat-completion calls and answers with a canned response."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.content: bytes = completion_body("你好")
        self.delay = 0.0
        self.error: Optional[Exception] = None
        self.cancelled = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers={"Content-Type": "application/json"},
        )

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def deepseek_provider():
    return ProviderConfig(
        kind="deepseek",
        api_key="sk-deepseek-secret",
        api_url="https://api.deepseek.test/chat/completions",
        model_name="deepseek-chat",
        system_msg="Translate into Chinese.",
    )


@pytest.fixture
def openai_provider():
    return ProviderConfig(
        kind="openai",
        api_key="sk-openai-secret",
        api_url="https://api.openai.test/v1/chat/completions",
        model_name="gpt-4o-mini",
        system_msg="Translate into English.",
    )


@pytest.fixture
def registry(deepseek_provider, openai_provider):
    return ProviderRegistry(
        {"deepseek": deepseek_provider, "openai": openai_provider},
        default_model="deepseek",
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        models_config_file=tmp_path / "config.json",
        request_timeout=5.0,
        max_request_body_size=1024,
    )


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest.fixture
def translator(upstream):
    client = UpstreamTranslationClient(transport=httpx.MockTransport(upstream))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def make_client(settings, translator):
    """Build a TestClient around a given registry."""
    clients = []

    def _make(registry, **overrides):
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        app = create_app(registry, settings=app_settings, translator=translator)
        test_client = TestClient(app)
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, registry):
    return make_client(registry)
