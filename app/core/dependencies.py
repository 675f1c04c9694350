# core/dependencies.py

"""
Dependency Providers for FastAPI.

This module defines small helper functions that retrieve shared services
from the FastAPI application state. These functions are intended to be used
with FastAPI's dependency injection mechanism (`Depends`) in route handlers.

Provided dependencies:
    - ChatEngineAdapter (None when the engine failed to start)
    - ChatSettings
    - System prompt (None when disabled)
    - LLMSettings
    - QdrantSettings
"""

from typing import Optional
from fastapi import Request
from core.config import ChatSettings, LLMSettings, QdrantSettings
from services.chat_adapter import ChatEngineAdapter


# ---- Chat engine ----
def get_chat_adapter(request: Request) -> Optional[ChatEngineAdapter]:
    """
    Retrieve the shared chat engine adapter from app state.

    Args:
        request (Request): FastAPI request object.

    Returns:
        Optional[ChatEngineAdapter]: The adapter, or None if not initialized.
    """
    return getattr(request.app.state, "chat_adapter", None)


# ---- Settings ----
def get_chat_settings(request: Request) -> ChatSettings:
    return getattr(request.app.state, "chat_settings", None) or ChatSettings()


def get_system_prompt(request: Request) -> Optional[str]:
    """
    Retrieve the system prompt prepended to every history.

    Args:
        request (Request): FastAPI request object.

    Returns:
        Optional[str]: The loaded prompt, or None when disabled or not loaded.
    """
    if not get_chat_settings(request).use_system_prompt:
        return None
    return getattr(request.app.state, "system_prompt", None)


def get_llm_settings(request: Request) -> LLMSettings:
    return getattr(request.app.state, "llm_settings", None) or LLMSettings()


def get_qdrant_settings(request: Request) -> QdrantSettings:
    return getattr(request.app.state, "qdrant_settings", None) or QdrantSettings()
