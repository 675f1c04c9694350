# services/chat_adapter.py
import inspect
import logging
from enum import Enum
from typing import Any, Dict, List, Sequence

from schemas.chat import ChatMessage

logger = logging.getLogger(__name__)


class CallShape(str, Enum):
    """Calling conventions accepted by chat engines."""
    POSITIONAL = "positional"  # engine.chat(message, chat_history, stream)
    OPTIONS = "options"        # engine.chat(message=..., chat_history=..., stream=...)

    @property
    def other(self) -> "CallShape":
        return CallShape.OPTIONS if self is CallShape.POSITIONAL else CallShape.POSITIONAL


class ChatEngineAdapter:
    """
    Invokes an opaque chat engine with the current turn, the history and a streaming flag.

    The engine's `chat` signature is not versioned, so the adapter calls it with the
    preferred shape and, if that raises, retries once with the other shape. The engine's
    response object is returned unchanged.

    Attributes:
        engine (Any): Object exposing `chat(...)`, sync or async.
        preferred_shape (CallShape): Shape tried first.
    """
    def __init__(self, engine: Any, preferred_shape: CallShape = CallShape.POSITIONAL):
        self.engine = engine
        self.preferred_shape = CallShape(preferred_shape)

    async def _invoke(
        self,
        shape: CallShape,
        message: str,
        chat_history: List[Dict[str, str]],
        stream: bool,
    ) -> Any:
        if shape is CallShape.POSITIONAL:
            result = self.engine.chat(message, chat_history, stream)
        else:
            result = self.engine.chat(message=message, chat_history=chat_history, stream=stream)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def chat(self, message: str, history: Sequence[ChatMessage], stream: bool = True) -> Any:
        """
        Call the engine, falling back to the alternate calling convention once.

        Args:
            message (str): Current user turn.
            history (Sequence[ChatMessage]): Normalized history, oldest first.
            stream (bool): Whether a streaming response is requested.

        Returns:
            Any: The engine's native response.

        Raises:
            Exception: The error raised by the preferred shape, when both shapes fail.
        """
        chat_history = [m.model_dump() for m in history]
        try:
            return await self._invoke(self.preferred_shape, message, chat_history, stream)
        except Exception as primary_error:
            fallback = self.preferred_shape.other
            logger.warning(
                f"Chat engine call ({self.preferred_shape.value}) failed: {primary_error!r}; "
                f"retrying with {fallback.value} arguments"
            )
            try:
                return await self._invoke(fallback, message, chat_history, stream)
            except Exception as fallback_error:
                logger.error(f"Chat engine call ({fallback.value}) failed: {fallback_error!r}")
                raise primary_error
