# services/__init__.py

from .llm_client import LLMClient
from .chat_adapter import CallShape, ChatEngineAdapter

# RAG subpackage exports
from .rag.document_query import DocumentQuery
from .rag.context_chat_engine import ContextChatEngine

__all__ = [
    "LLMClient",
    "CallShape",
    "ChatEngineAdapter",
    "DocumentQuery",
    "ContextChatEngine",
]
