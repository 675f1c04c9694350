import pytest

from schemas.chat import ChatMessage
from services.chat_adapter import CallShape, ChatEngineAdapter

from conftest import FailingEngine, run


class PositionalOnlyEngine:
    def __init__(self):
        self.calls = []

    def chat(self, message, chat_history, stream, /):
        self.calls.append(("positional", message, chat_history, stream))
        return "positional-response"


class KeywordOnlyEngine:
    def __init__(self):
        self.calls = []

    async def chat(self, *, message, chat_history, stream):
        self.calls.append(("options", message, chat_history, stream))
        return "options-response"


class FirstCallFails:
    def __init__(self):
        self.calls = 0

    def chat(self, *args, **kwargs):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("first")
        raise ValueError("second")


HISTORY = [ChatMessage(role="system", content="s"), ChatMessage(role="assistant", content="hi")]


def test_positional_shape_passes_plain_dict_history():
    engine = PositionalOnlyEngine()
    adapter = ChatEngineAdapter(engine, CallShape.POSITIONAL)
    result = run(adapter.chat("bye", HISTORY))
    assert result == "positional-response"
    assert engine.calls == [
        ("positional", "bye", [{"role": "system", "content": "s"}, {"role": "assistant", "content": "hi"}], True)
    ]


def test_options_shape_awaits_async_engine():
    engine = KeywordOnlyEngine()
    adapter = ChatEngineAdapter(engine, "options")
    assert run(adapter.chat("bye", [], stream=False)) == "options-response"
    assert engine.calls == [("options", "bye", [], False)]


def test_falls_back_from_positional_to_options_once():
    engine = KeywordOnlyEngine()
    adapter = ChatEngineAdapter(engine, CallShape.POSITIONAL)
    assert run(adapter.chat("x", [])) == "options-response"
    assert len(engine.calls) == 1


def test_falls_back_from_options_to_positional_once():
    engine = PositionalOnlyEngine()
    adapter = ChatEngineAdapter(engine, CallShape.OPTIONS)
    assert run(adapter.chat("x", [])) == "positional-response"
    assert len(engine.calls) == 1


def test_both_shapes_fail_raises_original_error():
    engine = FirstCallFails()
    adapter = ChatEngineAdapter(engine)
    with pytest.raises(RuntimeError, match="first"):
        run(adapter.chat("x", []))
    assert engine.calls == 2


def test_no_retry_beyond_fallback():
    engine = FailingEngine()
    with pytest.raises(RuntimeError, match="engine exploded"):
        run(ChatEngineAdapter(engine, CallShape.OPTIONS).chat("x", []))
    assert engine.calls == 2


def test_call_shape_other():
    assert CallShape.POSITIONAL.other is CallShape.OPTIONS
    assert CallShape.OPTIONS.other is CallShape.POSITIONAL
    with pytest.raises(ValueError):
        CallShape("keyword")
