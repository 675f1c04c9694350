import pytest

from schemas.chat import ChatMessage
from services.normalizer import (
    is_valid_conversation,
    normalize_content,
    normalize_message,
    normalize_messages,
    split_conversation,
)


class Part:
    def __init__(self, text):
        self.text = text


def test_string_content_unchanged():
    assert normalize_content("hello  world") == "hello  world"


def test_parts_joined_with_single_space():
    assert normalize_content(["a", {"text": "b"}, {}, "c"]) == "a b  c"


def test_parts_text_coerced_and_objects_supported():
    assert normalize_content([{"text": 42}, Part("x"), {"type": "image"}, None]) == "42 x  "


def test_none_and_other_values():
    assert normalize_content(None) == ""
    assert normalize_content(7) == "7"
    assert normalize_content({"text": "not a list"}) == str({"text": "not a list"})


def test_normalize_message_is_idempotent():
    msg = normalize_message({"role": "assistant", "content": ["hi", {"text": "there"}]})
    assert msg == ChatMessage(role="assistant", content="hi there")
    assert normalize_message(msg) == msg
    assert normalize_message(msg.model_dump()) == msg


def test_unsupported_roles_dropped_in_order():
    messages = [
        {"role": "system", "content": "s"},
        {"role": "data", "content": "d"},
        {"role": "user", "content": "u"},
        {"role": "function", "content": "f"},
        {"role": "tool", "content": "t"},
        {"role": ["weird"], "content": "w"},
        "not a message",
        {"role": "assistant", "content": "a"},
    ]
    result = normalize_messages(messages)
    assert [(m.role, m.content) for m in result] == [
        ("system", "s"),
        ("user", "u"),
        ("tool", "t"),
        ("assistant", "a"),
    ]


@pytest.mark.parametrize(
    "messages, expected",
    [
        ([{"role": "user", "content": "x"}], True),
        ([{"role": "assistant", "content": "x"}, {"role": "user", "content": "y"}], True),
        ([], False),
        (None, False),
        ("user", False),
        ([{"role": "user", "content": "x"}, {"role": "assistant", "content": "y"}], False),
        ([{"content": "x"}], False),
        (["user"], False),
    ],
)
def test_is_valid_conversation(messages, expected):
    assert is_valid_conversation(messages) is expected


def test_split_conversation_single_turn():
    history, turn = split_conversation([{"role": "user", "content": "Hello"}])
    assert history == []
    assert turn == "Hello"


def test_split_conversation_with_history_and_parts():
    messages = [
        {"role": "assistant", "content": "hi"},
        {"role": "user", "content": [{"text": "part1"}, {"text": "part2"}]},
    ]
    history, turn = split_conversation(messages)
    assert history == [ChatMessage(role="assistant", content="hi")]
    assert turn == "part1 part2"
    assert len(messages) == 2


def test_split_conversation_prepends_system_prompt():
    history, turn = split_conversation(
        [{"role": "user", "content": "Hello"}],
        system_prompt="Answer only from the documents.",
    )
    assert history == [ChatMessage(role="system", content="Answer only from the documents.")]
    assert turn == "Hello"


def test_split_conversation_rejects_invalid():
    with pytest.raises(ValueError):
        split_conversation([])
    with pytest.raises(ValueError):
        split_conversation([{"role": "assistant", "content": "x"}])
