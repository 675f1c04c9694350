import json
import logging
import httpx
from typing import AsyncIterator, List, Dict, Union
from core.config import LLMSettings

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Asynchronous client for an OpenAI-compatible Large Language Model (LLM) API.

    Provides methods for:
      - Chat completions (whole answer or streamed tokens)
      - Embedding generation

    Attributes:
        cfg (LLMSettings): Configuration settings for the LLM API.
        client (httpx.AsyncClient): Persistent async HTTP client.
    """
    def __init__(self, settings: LLMSettings = LLMSettings()):
        """
        Initialize the LLMClient with API settings.

        Args:
            settings (LLMSettings): Configuration for the LLM (API key, URL, model, etc.).
        """
        self.cfg = settings
        self.client = httpx.AsyncClient(timeout=settings.timeout)  # persistent client

    def headers(self) -> Dict[str, str]:
        """
        Build authorization and content headers for API requests.

        Returns:
            Dict[str, str]: HTTP headers including Authorization and Content-Type.
        """
        return {
            "Authorization": f"Bearer {self.cfg.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, messages: List[Dict[str, str]], **overrides) -> Dict:
        return {
            "model": self.cfg.model,
            "messages": messages,
            "temperature": self.cfg.temperature,
            "max_tokens": self.cfg.max_tokens,
            **self.cfg.default_kwargs,
            **overrides,
        }

    async def chat(self, messages: List[Dict[str, str]], **overrides) -> str:
        """
        Send a chat completion request to the LLM API.

        Args:
            messages (List[Dict[str, str]]): A list of messages, each with "role" and "content".
            **overrides: Optional keyword arguments to override model parameters such as
                temperature, max_tokens, etc.

        Returns:
            str: The assistant's response text.
        """
        r = await self.client.post(
            f"{self.cfg.base_url}/v1/chat/completions",
            headers=self.headers(),
            json=self._payload(messages, **overrides),
        )
        r.raise_for_status()
        return r.json()["choices"][0]["message"]["content"]

    async def chat_stream(self, messages: List[Dict[str, str]], **overrides) -> AsyncIterator[str]:
        """
        Stream a chat completion from the LLM API as server-sent events.

        Each `data: {...}` line carries a delta; the stream ends at `data: [DONE]`.
        Lines that are not valid JSON are skipped.

        Args:
            messages (List[Dict[str, str]]): A list of messages, each with "role" and "content".
            **overrides: Optional keyword arguments to override model parameters.

        Yields:
            str: Content deltas, in the order the API produced them.

        Raises:
            httpx.HTTPStatusError: If the API answers with an error status (before any token).
        """
        payload = self._payload(messages, **overrides)
        payload["stream"] = True
        async with self.client.stream(
            "POST",
            f"{self.cfg.base_url}/v1/chat/completions",
            headers=self.headers(),
            json=payload,
        ) as r:
            if r.status_code >= 400:
                await r.aread()
            r.raise_for_status()
            async for line in r.aiter_lines():
                data = line.strip()
                if data.startswith("data:"):
                    data = data[5:].strip()
                if not data:
                    continue
                if data == "[DONE]":
                    break
                try:
                    chunk = json.loads(data)
                except json.JSONDecodeError:
                    logger.debug(f"Skipping undecodable stream line: {data[:80]}")
                    continue
                choices = chunk.get("choices") or []
                if not choices:
                    continue
                delta = (choices[0].get("delta") or {}).get("content")
                if delta:
                    yield delta

    async def embed(
        self,
        texts: Union[str, List[str]],
        model: str = None,
    ) -> List[List[float]]:
        """
        Generate vector embeddings for text(s).

        Args:
            texts (Union[str, List[str]]): A single string or a list of strings to embed.
            model (str, optional): Embedding model name. Defaults to the configured one.

        Returns:
            List[List[float]]: A list of embeddings corresponding to each input text.
        """
        if isinstance(texts, str):
            texts = [texts]
        r = await self.client.post(
            f"{self.cfg.base_url}/v1/embeddings",
            headers=self.headers(),
            json={"model": model or self.cfg.embedding_model, "input": texts},
        )
        r.raise_for_status()
        data = r.json()
        return [d["embedding"] for d in data["data"]]

    async def aclose(self):
        """
        Gracefully close the underlying async HTTP client.

        Should be called during application shutdown to release resources.
        """
        await self.client.aclose()
