import asyncio

import pytest
from fastapi.testclient import TestClient

from core.config import ChatSettings, LLMSettings, QdrantSettings
from services.chat_adapter import CallShape, ChatEngineAdapter


async def agen(items):
    for item in items:
        yield item


async def collect(aiterable):
    return [item async for item in aiterable]


def run(coro):
    return asyncio.run(coro)


class RecordingEngine:
    """Async engine accepting both calling conventions; streams the given tokens."""

    def __init__(self, tokens=("Hola", " ", "mundo")):
        self.tokens = tokens
        self.calls = []

    async def chat(self, message, chat_history=None, stream=False):
        self.calls.append({"message": message, "chat_history": chat_history, "stream": stream})
        return agen(self.tokens)


class FailingEngine:
    def __init__(self, message="engine exploded"):
        self.message = message
        self.calls = 0

    def chat(self, *args, **kwargs):
        self.calls += 1
        raise RuntimeError(self.message)


@pytest.fixture
def make_client(monkeypatch):
    """Build a TestClient with the given engine installed; lifespan is not run."""
    from main import app

    def _make(engine=None, shape=CallShape.POSITIONAL, system_prompt=None):
        adapter = ChatEngineAdapter(engine, shape) if engine is not None else None
        monkeypatch.setattr(app.state, "chat_adapter", adapter, raising=False)
        monkeypatch.setattr(app.state, "system_prompt", system_prompt, raising=False)
        monkeypatch.setattr(
            app.state,
            "chat_settings",
            ChatSettings(use_system_prompt=system_prompt is not None, call_shape=CallShape(shape).value),
            raising=False,
        )
        monkeypatch.setattr(app.state, "llm_settings", LLMSettings(model="gpt-test"), raising=False)
        monkeypatch.setattr(app.state, "qdrant_settings", QdrantSettings(retrieval_mode="sparse"), raising=False)
        return TestClient(app)

    return _make
