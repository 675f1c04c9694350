"""
Configuration Module.

Defines dataclasses for managing environment-driven application settings,
including the LLM provider, the Qdrant document collection, prompt templates
and the chat endpoint behaviour.

Each configuration class loads defaults from environment variables, allowing
flexible deployment across environments without hardcoding values.
"""

import os
from dataclasses import dataclass, field
import json
from typing import Dict, Any, Optional


DEFAULT_SYSTEM_PROMPT = (
    "Eres un asistente que responde únicamente con la información contenida en los "
    "documentos proporcionados. No utilices conocimiento externo ni inventes datos. "
    "Si la respuesta no se encuentra en los documentos, responde exactamente: "
    "\"No encontré esa información en el documento.\""
)

DEFAULT_CONTEXT_TEMPLATE = (
    "Context information is below.\n"
    "---------------------\n"
    "{context_str}\n"
    "---------------------\n"
    "Given the context information above, answer the user's question."
)


def _load_kwargs(env_var: str) -> Dict[str, Any]:
    """
    Parse additional keyword arguments from an environment variable.

    The variable can be either:
      - A JSON string (preferred).
      - A comma-separated list of key=value pairs.

    Args:
        env_var (str): Name of the environment variable.

    Returns:
        Dict[str, Any]: Parsed key-value pairs (empty if variable is unset).
    """
    raw = os.getenv(env_var, "")
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        parts = [kv.strip() for kv in raw.split(",") if "=" in kv]
        return {k: v for k, v in (p.split("=", 1) for p in parts)}


@dataclass
class LLMSettings:
    """
    Settings for configuring the OpenAI-compatible LLM API client.

    Attributes:
        base_url (str): Base URL for the LLM API.
        api_key (str): API key for authentication. Falls back to `OPENAI_API_KEY`.
        model (str): Chat model name.
        embedding_model (str): Embedding model name, used for dense retrieval.
        temperature (float): Sampling temperature for generations.
        max_tokens (int): Maximum number of tokens to generate.
        timeout (float): HTTP timeout in seconds for the persistent client.
        default_kwargs (Dict[str, Any]): Additional generation parameters,
            parsed from env `LLM_KWARGS`.
    """
    base_url: str = os.getenv("LLM_URL", "https://api.openai.com")
    api_key: str = os.getenv("LLM_API_KEY", os.getenv("OPENAI_API_KEY", ""))
    model: str = os.getenv("LLM_MODEL", "gpt-3.5-turbo")
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    temperature: float = float(os.getenv("LLM_TEMPERATURE", 0.2))
    max_tokens: int = int(os.getenv("LLM_MAX_TOKENS", 1024))
    timeout: float = float(os.getenv("LLM_TIMEOUT", 60.0))
    default_kwargs: Dict[str, Any] = field(default_factory=lambda: _load_kwargs("LLM_KWARGS"))


@dataclass
class QdrantSettings:
    """
    Settings for the Qdrant collection holding the pre-built document index.

    Attributes:
        url (str): Base URL for Qdrant.
        api_key (str): API key for authentication (optional).
        collection_name (str): Name of the Qdrant collection for document chunks.
        retrieval_mode (str): "sparse" (BM25) or "dense" (LLM embeddings).
        dense_top_k (int): Default number of results for dense search.
        sparse_top_k (int): Default number of results for sparse search.
        text_key (str): Payload field holding the chunk text.
    """
    url: str = os.getenv("QDRANT_URL", "http://localhost:6333")
    api_key: Optional[str] = os.getenv("QDRANT_API_KEY")
    collection_name: str = os.getenv("DOCUMENT_COLLECTION", "documents")
    retrieval_mode: str = os.getenv("RETRIEVAL_MODE", "sparse")
    dense_top_k: int = int(os.getenv("DENSE_TOP_K", "4"))
    sparse_top_k: int = int(os.getenv("SPARSE_TOP_K", "4"))
    text_key: str = os.getenv("DOCUMENT_TEXT_KEY", "text")


@dataclass
class PromptSettings:
    """
    Settings for loading prompt templates.

    Both prompts have built-in defaults; a file path overrides them.

    Attributes:
        system_prompt_file (Optional[str]): Path to the system prompt.
        context_prompt_file (Optional[str]): Path to the retrieval context template.
            Must contain a `{context_str}` placeholder.
    """
    system_prompt_file: Optional[str] = os.getenv("SYSTEM_PROMPT_FILE")
    context_prompt_file: Optional[str] = os.getenv("CONTEXT_PROMPT_FILE")

    @staticmethod
    def load_prompt(path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def get(self, name: str) -> str:
        """
        Get the prompt by logical name.
        Example: settings.get("system") -> contents of system_prompt_file, or the default
        """
        attr_name = f"{name}_prompt_file"
        if not hasattr(self, attr_name):
            raise KeyError(f"No prompt setting found for '{name}'")
        path = getattr(self, attr_name)
        if path:
            return self.load_prompt(path).strip()
        return DEFAULT_SYSTEM_PROMPT if name == "system" else DEFAULT_CONTEXT_TEMPLATE


@dataclass
class ChatSettings:
    """
    Settings for the chat endpoint.

    Attributes:
        use_system_prompt (bool): Whether the system prompt is prepended to the history.
        call_shape (str): Preferred chat engine calling convention,
            "positional" or "options".
    """
    use_system_prompt: bool = os.getenv("USE_SYSTEM_PROMPT", "1") == "1"
    call_shape: str = os.getenv("CHAT_CALL_SHAPE", "positional")
