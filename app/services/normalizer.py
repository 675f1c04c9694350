# services/normalizer.py
"""
Message normalization for incoming chat conversations.

Clients send messages whose `content` is either plain text, a list of parts
(strings or objects carrying a `text` field), or something else entirely.
Everything is flattened once here into `ChatMessage(role, content: str)`;
nothing downstream branches on content shape.
"""
from typing import Any, List, Optional, Sequence, Tuple

from schemas.chat import ChatMessage

ALLOWED_ROLES = frozenset({"system", "user", "assistant", "tool"})


def _field(obj: Any, name: str) -> Any:
    """Read `name` from a dict or an attribute-bearing object (e.g. a pydantic model)."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _part_text(part: Any) -> str:
    if isinstance(part, str):
        return part
    text = _field(part, "text")
    return "" if text is None else str(text)


def normalize_content(content: Any) -> str:
    """
    Flatten message content into a single string.

    Args:
        content (Any): A string, a list of parts, None, or any other value.

    Returns:
        str: The string unchanged; parts joined by a single space (parts without
            `text` contribute an empty string); "" for None; `str(content)` otherwise.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        return " ".join(_part_text(part) for part in content)
    if content is None:
        return ""
    return str(content)


def normalize_message(message: Any) -> Optional[ChatMessage]:
    """
    Normalize one raw message.

    Returns:
        Optional[ChatMessage]: The normalized message, or None when its role is unsupported.
    """
    role = _field(message, "role")
    if not isinstance(role, str) or role not in ALLOWED_ROLES:
        return None
    return ChatMessage(role=role, content=normalize_content(_field(message, "content")))


def normalize_messages(messages: Sequence[Any]) -> List[ChatMessage]:
    """Normalize messages in order, silently dropping unsupported roles."""
    normalized = (normalize_message(m) for m in messages)
    return [m for m in normalized if m is not None]


def is_valid_conversation(messages: Any) -> bool:
    """True when `messages` is a non-empty list whose last message is from the user."""
    if not isinstance(messages, list) or not messages:
        return False
    return _field(messages[-1], "role") == "user"


def split_conversation(
    messages: List[Any],
    system_prompt: Optional[str] = None,
) -> Tuple[List[ChatMessage], str]:
    """
    Split a conversation into the normalized history and the current user turn.

    The input list is not modified.

    Args:
        messages (List[Any]): A valid conversation (see `is_valid_conversation`).
        system_prompt (Optional[str]): If given, prepended to the history as a system message.

    Returns:
        Tuple[List[ChatMessage], str]: (history, current turn text).

    Raises:
        ValueError: If the conversation is empty or does not end with a user message.
    """
    if not is_valid_conversation(messages):
        raise ValueError("conversation must be non-empty and end with a user message")

    history = normalize_messages(messages[:-1])
    if system_prompt:
        history.insert(0, ChatMessage(role="system", content=system_prompt))
    current_turn = normalize_content(_field(messages[-1], "content"))
    return history, current_turn
