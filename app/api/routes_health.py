# api/routes_health.py
import logging
from typing import Optional
from fastapi import APIRouter, Depends

from core.config import ChatSettings, LLMSettings, QdrantSettings
from core.core_utils import error_response
from core.dependencies import get_chat_adapter, get_chat_settings, get_llm_settings, get_qdrant_settings
from schemas.chat import ErrorResponse
from schemas.debug import ModelInfo, HealthResponse
from services.chat_adapter import ChatEngineAdapter

logger = logging.getLogger(__name__)
router = APIRouter(prefix='/api')


@router.get("/health", response_model=HealthResponse, responses={503: {"model": ErrorResponse}})
async def health(chat_adapter: Optional[ChatEngineAdapter] = Depends(get_chat_adapter)):
    """
    Simple health check:
      - Verifies the chat engine was initialized at startup
    """
    if chat_adapter is None:
        logger.error("Health check failed: chat engine not initialized")
        return error_response("Chat engine not initialized", 503)
    return HealthResponse(status="ok")


@router.get("/model", response_model=ModelInfo)
async def model_info(
    chat_settings: ChatSettings = Depends(get_chat_settings),
    llm_settings: LLMSettings = Depends(get_llm_settings),
    qdrant_settings: QdrantSettings = Depends(get_qdrant_settings),
):
    """
    Return the chat configuration in use:
      - model identifier
      - whether the system prompt is prepended
      - preferred chat engine calling convention
      - retrieval mode
    """
    return ModelInfo(
        model=llm_settings.model,
        system_prompt_enabled=chat_settings.use_system_prompt,
        call_shape=chat_settings.call_shape,
        retrieval_mode=qdrant_settings.retrieval_mode,
    )
