# api/routes_chat.py
"""
Chat Routes API.

Defines the FastAPI endpoint that forwards a conversation to the chat engine:
  - `/api/chat` → Send the conversation, stream back the assistant reply.

These routes depend on:
  - ChatEngineAdapter: For invoking the chat engine.
  - The system prompt, prepended to the history when enabled.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from core.core_utils import error_response
from core.dependencies import get_chat_adapter, get_system_prompt
from schemas.chat import ErrorResponse
from services.chat_adapter import ChatEngineAdapter
from services.normalizer import is_valid_conversation, split_conversation
from services.streaming import prefetch, stream_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/chat", tags=["chat"])

INVALID_MESSAGES = "messages are required in the request body and the last message must be from the user"
INVALID_BODY = "Invalid request body"
GENERIC_ERROR = "An unexpected error occurred while processing the chat request"
ENGINE_UNAVAILABLE = "Chat engine not initialized"

STREAM_HEADERS = {"Cache-Control": "no-cache"}


@router.post(
    "",
    responses={
        200: {"content": {"text/plain": {}}, "description": "Streamed assistant reply"},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def chat(
    request: Request,
    chat_adapter: Optional[ChatEngineAdapter] = Depends(get_chat_adapter),
    system_prompt: Optional[str] = Depends(get_system_prompt),
):
    """
    Stream the assistant's reply to a conversation.

    Workflow:
        1. Parse the JSON body.
        2. Validate that `messages` is non-empty and ends with a user message.
        3. Normalize the history and take the last message as the current turn.
        4. Call the chat engine (with one calling-convention fallback).
        5. Stream the engine's output as plain text.

    Args:
        request (Request): FastAPI request object with JSON payload `{"messages": [...]}`.
        chat_adapter (Optional[ChatEngineAdapter]): Chat engine adapter (dependency-injected).
        system_prompt (Optional[str]): System prompt to prepend, if enabled (dependency-injected).

    Returns:
        StreamingResponse: `text/plain` chunked body with the reply tokens.
        JSONResponse: `{"error": ...}` with status 400, 500 or 503 on failure.
    """
    try:
        body = await request.json()
    except Exception as e:
        # json.loads also raises RecursionError on deeply nested input.
        logger.warning(f"Unparseable chat request body: {type(e).__name__}: {e}")
        return error_response(INVALID_BODY, 500)

    try:
        messages = body.get("messages") if isinstance(body, dict) else None
        valid = is_valid_conversation(messages)
    except Exception as e:
        logger.error(f"Chat request validation failed: {e}", exc_info=True)
        return error_response(GENERIC_ERROR, 500)
    if not valid:
        return error_response(INVALID_MESSAGES, 400)

    if chat_adapter is None:
        return error_response(ENGINE_UNAVAILABLE, 503)

    try:
        history, current_turn = split_conversation(messages, system_prompt=system_prompt)
        logger.info(f"Chat turn: {len(history)} history messages, {len(current_turn)} chars")

        response = await chat_adapter.chat(current_turn, history, stream=True)
        stream = await prefetch(stream_response(response))
    except Exception as e:
        logger.error(f"Chat request failed: {e}", exc_info=True)
        return error_response(str(e) or GENERIC_ERROR, 500)

    return StreamingResponse(stream, media_type="text/plain; charset=utf-8", headers=STREAM_HEADERS)
