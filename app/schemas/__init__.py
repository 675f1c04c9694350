# schemas/__init__.py
from .chat import ChatMessage, ErrorResponse, Role
from .debug import HealthResponse, ModelInfo

__all__ = [
    # chat
    "ChatMessage",
    "ErrorResponse",
    "Role",
    # debug
    "HealthResponse",
    "ModelInfo",
]
