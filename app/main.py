import logging
import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.config import ChatSettings, LLMSettings, PromptSettings, QdrantSettings
from services import CallShape, ChatEngineAdapter, ContextChatEngine, DocumentQuery, LLMClient
from api import init_routers


# ---------------- Logging ----------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d] %(message)s",
)
logger = logging.getLogger()


# ---------------- FastAPI ----------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        app.state.llm_settings = LLMSettings()
        app.state.qdrant_settings = QdrantSettings()
        app.state.chat_settings = ChatSettings()
        prompts = PromptSettings()

        # System prompt (only loaded when enabled)
        app.state.system_prompt = prompts.get("system") if app.state.chat_settings.use_system_prompt else None
        logger.info(f"System prompt {'enabled' if app.state.system_prompt else 'disabled'}")

        # Initialize LLM client
        app.state.llm_client = LLMClient(app.state.llm_settings)
        logger.info(f"LLMClient initialized (model={app.state.llm_settings.model})")

        # Initialize document retriever (depends on LLM for dense mode)
        app.state.document_query = DocumentQuery(app.state.qdrant_settings, llm_client=app.state.llm_client)
        logger.info(f"DocumentQuery initialized ({app.state.qdrant_settings.retrieval_mode})")

        # Initialize chat engine and its adapter
        engine = ContextChatEngine(
            llm_client=app.state.llm_client,
            retriever=app.state.document_query,
            context_template=prompts.get("context"),
        )
        app.state.chat_adapter = ChatEngineAdapter(engine, CallShape(app.state.chat_settings.call_shape))
        logger.info(f"ChatEngineAdapter initialized (preferred shape={app.state.chat_settings.call_shape})")

        app.state.running = True
        logger.info("Application started successfully")

    except Exception as e:
        app.state.running = False
        logger.exception("Application failed to initialize")
        raise e

    yield

    # Shutdown
    logger.info("Shutting down app...")

    # Close HTTP clients
    if hasattr(app.state, "llm_client"):
        try:
            await app.state.llm_client.aclose()
            logger.info("Closed LLM client")
        except Exception as e:
            logger.warning(f"Error closing LLM client: {e}")
    if hasattr(app.state, "document_query"):
        try:
            await app.state.document_query.aclose()
            logger.info("Closed Qdrant client")
        except Exception as e:
            logger.warning(f"Error closing Qdrant client: {e}")


# ---------------- App Factory ----------------
app = FastAPI(lifespan=lifespan)

# Routers
init_routers(app)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8080, reload=True)
