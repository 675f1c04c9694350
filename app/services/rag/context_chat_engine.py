"""
Context Chat Engine.

Default retrieval-augmented chat engine served behind `/api/chat`. For every
turn it retrieves passages from the document collection, places them in a
leading system message, and asks the LLM for an answer, either whole or as a
token stream.
"""
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

from core.config import DEFAULT_CONTEXT_TEMPLATE
from services.llm_client import LLMClient
from services.rag.document_query import DocumentQuery

logger = logging.getLogger(__name__)


@dataclass
class ChatResponse:
    response: str
    sources: List[str] = field(default_factory=list)


@dataclass
class StreamingChatResponse:
    """Streamed answer. Tokens are produced by `async_response_gen()`, which may be consumed once."""
    token_gen: AsyncIterator[str]
    sources: List[str] = field(default_factory=list)

    def async_response_gen(self) -> AsyncIterator[str]:
        return self.token_gen


class ContextChatEngine:
    """
    Chat engine combining document retrieval with an LLM.

    Attributes:
        llm_client (LLMClient): Client used for chat completions.
        retriever (DocumentQuery): Source of context passages.
        context_template (str): Template with a `{context_str}` placeholder.
        top_k (Optional[int]): Passages per turn; None uses the retriever's default.
    """
    def __init__(
        self,
        llm_client: LLMClient,
        retriever: DocumentQuery,
        context_template: str = DEFAULT_CONTEXT_TEMPLATE,
        top_k: Optional[int] = None,
    ):
        self.llm_client = llm_client
        self.retriever = retriever
        self.context_template = context_template
        self.top_k = top_k

    def build_messages(
        self,
        message: str,
        chat_history: List[Dict[str, str]],
        passages: List[str],
    ) -> List[Dict[str, str]]:
        """
        Build the LLM message list for one turn.

        System messages from the history are merged, ahead of the retrieved
        context, into a single leading system message; the rest of the history
        keeps its order and the user turn comes last.
        """
        system_parts = [m["content"] for m in chat_history if m.get("role") == "system" and m.get("content")]
        context_str = "\n\n".join(passages)
        system_parts.append(self.context_template.format(context_str=context_str))

        messages = [{"role": "system", "content": "\n\n".join(system_parts)}]
        messages += [
            {"role": m["role"], "content": m["content"]}
            for m in chat_history if m.get("role") != "system"
        ]
        messages.append({"role": "user", "content": message})
        return messages

    async def chat(
        self,
        message: str,
        chat_history: Optional[List[Dict[str, str]]] = None,
        stream: bool = False,
    ):
        """
        Answer the current turn given the previous history.

        Args:
            message (str): Current user turn.
            chat_history (Optional[List[Dict[str, str]]]): Previous messages, oldest first.
            stream (bool): Return a `StreamingChatResponse` instead of a `ChatResponse`.

        Returns:
            Union[ChatResponse, StreamingChatResponse]: The answer and the passages used.
        """
        passages = await self.retriever.retrieve(message, top_k=self.top_k)
        messages = self.build_messages(message, chat_history or [], passages)
        logger.info(f"Context chat: {len(passages)} passages, {len(messages)} messages, stream={stream}")

        if stream:
            return StreamingChatResponse(token_gen=self.llm_client.chat_stream(messages), sources=passages)

        answer = await self.llm_client.chat(messages)
        return ChatResponse(response=answer, sources=passages)
